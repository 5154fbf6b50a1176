"""Acquisition pipeline core: gates, fetcher, resolver, installer."""
