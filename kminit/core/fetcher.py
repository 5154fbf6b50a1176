"""Artifact fetcher — streams a URL or a named release asset to disk.

A single attempt per call; there is no retry.  If ``download()`` raises,
whatever is at the destination must be treated as untrusted: callers never
verify or execute a file whose download failed.
"""

from __future__ import annotations

import logging
from pathlib import Path

import httpx

from kminit.core.errors import AssetNotFoundError, DownloadError, ReleaseLookupError
from kminit.core.release_index import ReleaseIndex
from kminit.models.repositories import RepositoryRef

logger = logging.getLogger(__name__)


class ArtifactFetcher:
    """Downloads artifacts over HTTP(S).

    Parameters
    ----------
    client:
        httpx client used for every download.  Redirects must be followed
        (GitHub release downloads redirect to a CDN).
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def download(self, url: str, destination: Path) -> Path:
        """Stream *url* into *destination*, creating or truncating it.

        Returns the destination path.  Raises ``DownloadError`` on any
        network, HTTP status or filesystem failure.
        """
        destination = Path(destination)
        logger.info("Downloading %s -> %s", url, destination)
        written = 0
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            with self._client.stream("GET", url, follow_redirects=True) as response:
                response.raise_for_status()
                with destination.open("wb") as fh:
                    for chunk in response.iter_bytes():
                        fh.write(chunk)
                        written += len(chunk)
        except httpx.HTTPStatusError as exc:
            raise DownloadError(
                f"Download of {url} failed with HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise DownloadError(f"Download of {url} failed: {exc}") from exc
        except OSError as exc:
            raise DownloadError(f"Cannot write {destination}: {exc}") from exc

        logger.debug("Downloaded %d bytes to %s", written, destination)
        return destination

    def download_release_asset(
        self,
        index: ReleaseIndex,
        repo: RepositoryRef,
        asset_name: str,
        dest_dir: Path,
    ) -> Path:
        """Download *asset_name* from a release of *repo* into *dest_dir*.

        Uses the release tagged ``repo.pinned_version`` when set, otherwise
        the latest release.  A failed lookup is fatal here, unlike in the
        version resolver.
        """
        try:
            if repo.pinned_version:
                release = index.release_by_tag(repo.owner, repo.name, repo.pinned_version)
            else:
                release = index.latest_release(repo.owner, repo.name)
        except ReleaseLookupError as exc:
            raise DownloadError(f"Error fetching release for {repo.slug}: {exc}") from exc

        asset = release.find_asset(asset_name)
        if asset is None:
            raise AssetNotFoundError(
                f"Binary not found in release {release.tag_name} of {repo.slug}: {asset_name}"
            )
        return self.download(asset.download_url, Path(dest_dir) / asset_name)
