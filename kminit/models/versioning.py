"""Semantic version checks for operator-supplied image versions."""

from __future__ import annotations

import re

# semver.org 2.0.0 grammar, with the optional "v" prefix used by image tags.
_SEMVER_RE = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)


class InvalidVersionError(ValueError):
    """Raised when a version string is not a semantic version."""


def is_valid_semver(version: str) -> bool:
    return bool(_SEMVER_RE.match(version))


def validate_semver(version: str) -> str:
    """Return *version* unchanged if it is a semantic version, else raise."""
    if not is_valid_semver(version):
        raise InvalidVersionError(f"{version!r} is not a valid semantic version")
    return version
