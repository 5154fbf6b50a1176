"""Hashing helpers for checksum pinning and key fingerprints."""

from __future__ import annotations

import hashlib
from pathlib import Path

_CHUNK_SIZE = 1024 * 1024


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def sha256_file(path: Path) -> str:
    """Return the SHA-256 hex digest of a file, read in 1 MiB chunks."""
    digest = hashlib.sha256()
    with Path(path).open("rb") as fh:
        for chunk in iter(lambda: fh.read(_CHUNK_SIZE), b""):
            digest.update(chunk)
    return digest.hexdigest()


def key_fingerprint(public_key: str) -> str:
    """First 16 hex characters of the SHA-256 of a PEM public key.

    Identifies a trust anchor in log lines without printing the key.
    """
    if not public_key:
        return ""
    return sha256_hex(public_key.encode("utf-8"))[:16]
