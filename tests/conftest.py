"""Shared test fixtures for kminit."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from fakes import (
    BUNDLE_BYTES,
    BUNDLE_URL,
    COSIGN_AMD64_URL,
    COSIGN_BYTES,
    SIGNATURE_BYTES,
    SIGNATURE_URL,
    FakeReleaseIndex,
    RecordingPuller,
    RecordingRunner,
)

from kminit.core.fetcher import ArtifactFetcher
from kminit.core.hasher import sha256_hex
from kminit.core.host import HostPlatform
from kminit.models.config import CosignConfig, LauncherConfig
from kminit.models.repositories import Release, RepoKey
from kminit.models.trust import PinnedHash


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def launcher_config(tmp_dir: Path) -> LauncherConfig:
    """LauncherConfig with every well-known path inside a temp directory.

    The cosign digest is pinned for amd64 only, to ``COSIGN_BYTES``.
    """
    return LauncherConfig(
        keys_dir=tmp_dir / "keys",
        tooling_key_path=tmp_dir / "keys" / "kira-cosign.pub",
        work_dir=tmp_dir / "work",
        cosign=CosignConfig(
            install_path=tmp_dir / "bin" / "cosign",
            pinned_hashes=PinnedHash(
                version="v2.0.0", digests={"amd64": sha256_hex(COSIGN_BYTES)}
            ),
        ),
    )


@pytest.fixture
def amd64_host() -> HostPlatform:
    return HostPlatform(platform="linux", architecture="amd64")


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def install_routes() -> dict[str, bytes | int]:
    """Download routes for a clean bootstrap on linux/amd64."""
    return {
        COSIGN_AMD64_URL: COSIGN_BYTES,
        BUNDLE_URL: BUNDLE_BYTES,
        SIGNATURE_URL: SIGNATURE_BYTES,
    }


@pytest.fixture
def make_fetcher() -> Callable[..., tuple[ArtifactFetcher, list[str]]]:
    """Factory fixture: an ArtifactFetcher over an httpx MockTransport.

    Routes map absolute URLs to a body (bytes) or an HTTP status (int).
    Unknown URLs answer 404.  Returns ``(fetcher, requested_urls)``.
    """

    def _factory(routes: dict[str, bytes | int]) -> tuple[ArtifactFetcher, list[str]]:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            url = str(request.url)
            requested.append(url)
            body = routes.get(url, 404)
            if isinstance(body, int):
                return httpx.Response(body)
            return httpx.Response(200, content=body)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        return ArtifactFetcher(client), requested

    return _factory


@pytest.fixture
def fake_index_factory() -> Callable[..., FakeReleaseIndex]:
    def _factory(releases: dict[RepoKey, Release | Exception]) -> FakeReleaseIndex:
        return FakeReleaseIndex(releases)

    return _factory


@pytest.fixture
def puller() -> RecordingPuller:
    return RecordingPuller()
