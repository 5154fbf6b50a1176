"""Release index — looks up published releases on GitHub.

The ``ReleaseIndex`` Protocol is what the resolver and fetcher depend on;
``GitHubReleaseIndex`` is the httpx-backed implementation.  One client is
built per run and shared read-only across resolver threads (httpx.Client is
thread-safe for independent requests).
"""

from __future__ import annotations

import logging
from typing import Any, Protocol, runtime_checkable

import httpx
from pydantic import ValidationError

from kminit.core.errors import ReleaseLookupError
from kminit.models.repositories import Release, ReleaseAsset

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


@runtime_checkable
class ReleaseIndex(Protocol):
    """Protocol for release index backends."""

    def latest_release(self, owner: str, repo: str) -> Release:
        """Return the latest published release of ``owner/repo``."""
        ...

    def release_by_tag(self, owner: str, repo: str, tag: str) -> Release:
        """Return the release of ``owner/repo`` tagged *tag*."""
        ...


def build_github_client(
    credential: str = "",
    *,
    timeout: float = 30.0,
    base_url: str = GITHUB_API_URL,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Build the authenticated client shared by every release query.

    An empty *credential* yields an anonymous client (subject to GitHub's
    lower rate limit).
    """
    headers = {
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    if credential:
        headers["Authorization"] = f"Bearer {credential}"
    return httpx.Client(
        base_url=base_url,
        headers=headers,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        transport=transport,
    )


class GitHubReleaseIndex:
    """GitHub REST implementation of ``ReleaseIndex``.

    Parameters
    ----------
    client:
        A client from ``build_github_client()``.  The index does not own
        it; the caller closes it.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def latest_release(self, owner: str, repo: str) -> Release:
        return self._get_release(f"/repos/{owner}/{repo}/releases/latest", owner, repo)

    def release_by_tag(self, owner: str, repo: str, tag: str) -> Release:
        return self._get_release(f"/repos/{owner}/{repo}/releases/tags/{tag}", owner, repo)

    def _get_release(self, path: str, owner: str, repo: str) -> Release:
        try:
            response = self._client.get(path)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPStatusError as exc:
            raise ReleaseLookupError(
                f"{owner}/{repo}: release index returned "
                f"{exc.response.status_code} for {path}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ReleaseLookupError(f"{owner}/{repo}: {exc}") from exc
        except ValueError as exc:
            raise ReleaseLookupError(f"{owner}/{repo}: invalid JSON response") from exc

        release = _parse_release(payload, owner, repo)
        logger.debug(
            "%s/%s: release %s with %d asset(s)",
            owner, repo, release.tag_name, len(release.assets),
        )
        return release


def _parse_release(payload: Any, owner: str, repo: str) -> Release:
    if not isinstance(payload, dict) or not payload.get("tag_name"):
        raise ReleaseLookupError(f"{owner}/{repo}: release has no tag_name")
    try:
        assets = tuple(
            ReleaseAsset(name=a["name"], download_url=a["browser_download_url"])
            for a in payload.get("assets") or []
            if a.get("name") and a.get("browser_download_url")
        )
        return Release(tag_name=payload["tag_name"], assets=assets)
    except (AttributeError, KeyError, TypeError, ValidationError) as exc:
        raise ReleaseLookupError(f"{owner}/{repo}: malformed release payload: {exc}") from exc
