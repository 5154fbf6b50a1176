"""Tests for ArtifactFetcher — URL downloads and release asset downloads."""

from __future__ import annotations

import httpx
import pytest
from fakes import FakeReleaseIndex, make_release

from kminit.core.errors import AssetNotFoundError, DownloadError
from kminit.core.fetcher import ArtifactFetcher
from kminit.models.repositories import RepositoryRef

URL = "https://example.test/files/blob.bin"


class TestDownload:
    def test_writes_exact_bytes(self, make_fetcher, tmp_path):
        fetcher, _ = make_fetcher({URL: b"\x00\x01payload"})
        dest = fetcher.download(URL, tmp_path / "nested" / "blob.bin")
        assert dest == tmp_path / "nested" / "blob.bin"
        assert dest.read_bytes() == b"\x00\x01payload"

    def test_truncates_existing_file(self, make_fetcher, tmp_path):
        dest = tmp_path / "blob.bin"
        dest.write_bytes(b"a much longer stale file body")
        fetcher, _ = make_fetcher({URL: b"new"})
        fetcher.download(URL, dest)
        assert dest.read_bytes() == b"new"

    def test_http_error_status(self, make_fetcher, tmp_path):
        fetcher, _ = make_fetcher({URL: 500})
        with pytest.raises(DownloadError, match="HTTP 500"):
            fetcher.download(URL, tmp_path / "blob.bin")

    def test_missing_url_is_404(self, make_fetcher, tmp_path):
        fetcher, requested = make_fetcher({})
        with pytest.raises(DownloadError, match="404"):
            fetcher.download(URL, tmp_path / "blob.bin")
        assert requested == [URL]

    def test_transport_error(self, tmp_path):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        fetcher = ArtifactFetcher(httpx.Client(transport=httpx.MockTransport(handler)))
        with pytest.raises(DownloadError, match="timed out"):
            fetcher.download(URL, tmp_path / "blob.bin")

    def test_unwritable_destination(self, make_fetcher, tmp_path):
        fetcher, _ = make_fetcher({URL: b"data"})
        with pytest.raises(DownloadError, match="Cannot write"):
            fetcher.download(URL, tmp_path)  # a directory

    def test_follows_redirects(self, tmp_path):
        cdn = "https://cdn.example.test/blob.bin"

        def handler(request: httpx.Request) -> httpx.Response:
            if str(request.url) == URL:
                return httpx.Response(302, headers={"Location": cdn})
            return httpx.Response(200, content=b"from-cdn")

        fetcher = ArtifactFetcher(httpx.Client(transport=httpx.MockTransport(handler)))
        assert fetcher.download(URL, tmp_path / "b").read_bytes() == b"from-cdn"


class TestDownloadReleaseAsset:
    ASSET = "sekai-linux-amd64.deb"

    def _routes(self, tag: str) -> dict[str, bytes | int]:
        return {f"https://github.com/dl/{tag}/{self.ASSET}": b"deb-" + tag.encode()}

    def test_unpinned_uses_latest(self, make_fetcher, tmp_path):
        index = FakeReleaseIndex({("KiraCore", "sekai"): make_release("v1.0.0", self.ASSET)})
        fetcher, _ = make_fetcher(self._routes("v1.0.0"))
        ref = RepositoryRef(owner="KiraCore", name="sekai")

        path = fetcher.download_release_asset(index, ref, self.ASSET, tmp_path)
        assert path == tmp_path / self.ASSET
        assert path.read_bytes() == b"deb-v1.0.0"
        assert index.calls == [("KiraCore", "sekai", None)]

    def test_pinned_uses_tag(self, make_fetcher, tmp_path):
        index = FakeReleaseIndex({("KiraCore", "sekai"): make_release("v1.0.0", self.ASSET)})
        fetcher, _ = make_fetcher(self._routes("v1.0.0"))
        ref = RepositoryRef(owner="KiraCore", name="sekai", pinned_version="v1.0.0")

        fetcher.download_release_asset(index, ref, self.ASSET, tmp_path)
        assert index.calls == [("KiraCore", "sekai", "v1.0.0")]

    def test_asset_not_found(self, make_fetcher, tmp_path):
        index = FakeReleaseIndex(
            {("KiraCore", "sekai"): make_release("v1.0.0", "sekai-linux-arm64.deb")}
        )
        fetcher, requested = make_fetcher({})
        ref = RepositoryRef(owner="KiraCore", name="sekai")

        with pytest.raises(AssetNotFoundError, match=self.ASSET):
            fetcher.download_release_asset(index, ref, self.ASSET, tmp_path)
        assert requested == []

    def test_lookup_failure_is_download_error(self, make_fetcher, tmp_path):
        fetcher, _ = make_fetcher({})
        ref = RepositoryRef(owner="KiraCore", name="missing")
        with pytest.raises(DownloadError, match="Error fetching release"):
            fetcher.download_release_asset(FakeReleaseIndex({}), ref, self.ASSET, tmp_path)
