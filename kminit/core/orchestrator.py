"""Launcher orchestrator — the central coordinator for a kminit run.

The Orchestrator wires together the release index, VersionResolver,
ArtifactFetcher, ImageTrustGate, container puller and InstallPipeline into
one sequential run:

1. bootstrap: install (or find) the verifier, write trust material, install
   the signed tooling bundle
2. verify the base image signature, then pull it
3. resolve the latest release of each declared repository
4. download each selected repository's release asset at its resolved tag

Every step is fatal on failure.  A failed lookup only stops the run when
that repository's asset was selected for download.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from types import TracebackType

import httpx
from pydantic import BaseModel, ConfigDict

from kminit.config import Settings
from kminit.core.commands import CommandRunner, SubprocessRunner
from kminit.core.container import ContainerPuller, DockerPuller
from kminit.core.errors import DownloadError
from kminit.core.fetcher import ArtifactFetcher
from kminit.core.host import HostPlatform, detect_platform
from kminit.core.image_gate import CosignImageVerifier, ImageTrustGate
from kminit.core.install_pipeline import InstallPipeline, InstallReport
from kminit.core.release_index import GitHubReleaseIndex, ReleaseIndex, build_github_client
from kminit.core.version_resolver import ResolutionReport, VersionResolver
from kminit.models.config import LauncherConfig
from kminit.models.repositories import RepositorySet

logger = logging.getLogger(__name__)


class PrepareSummary(BaseModel):
    """What ``Orchestrator.prepare()`` produced."""

    model_config = ConfigDict(frozen=True)

    image_reference: str
    resolution: ResolutionReport
    downloads: dict[str, Path] = {}  # "owner/name" -> local path


class RunSummary(BaseModel):
    """What a full ``Orchestrator.run()`` produced."""

    model_config = ConfigDict(frozen=True)

    install: InstallReport
    prepare: PrepareSummary


class Orchestrator:
    """Coordinates bootstrap, image trust, version resolution and downloads.

    Parameters
    ----------
    config:
        Launcher configuration.  Uses production defaults if not provided.
    settings:
        Runtime settings (token, timeouts, overrides).
    release_index, fetcher, image_gate, puller, runner, host:
        Collaborators; built from *settings* when omitted.
    which:
        PATH lookup used by the install pipeline to find an existing cosign.
    """

    def __init__(
        self,
        config: LauncherConfig | None = None,
        *,
        settings: Settings | None = None,
        release_index: ReleaseIndex | None = None,
        fetcher: ArtifactFetcher | None = None,
        image_gate: ImageTrustGate | None = None,
        puller: ContainerPuller | None = None,
        runner: CommandRunner | None = None,
        host: HostPlatform | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.settings = settings or Settings()
        self.config = config or LauncherConfig(work_dir=self.settings.work_dir)
        self._clients: list[httpx.Client] = []

        if release_index is None:
            api_client = build_github_client(
                self.settings.github_token, timeout=self.settings.http_timeout_seconds
            )
            self._clients.append(api_client)
            release_index = GitHubReleaseIndex(api_client)
        self.release_index = release_index

        if fetcher is None:
            download_client = httpx.Client(
                timeout=httpx.Timeout(self.settings.http_timeout_seconds),
                follow_redirects=True,
            )
            self._clients.append(download_client)
            fetcher = ArtifactFetcher(download_client)
        self.fetcher = fetcher

        self.runner = runner or SubprocessRunner()
        self.puller = puller or DockerPuller(runner=self.runner)
        self._image_gate = image_gate
        self._which = which
        self.host = host or detect_platform(
            architecture=self.settings.architecture, platform=self.settings.platform
        )
        self.resolver = VersionResolver(
            self.release_index, max_workers=self.settings.max_workers
        )

    # ------------------------------------------------------------------
    # Resource management
    # ------------------------------------------------------------------

    def close(self) -> None:
        for client in self._clients:
            client.close()
        self._clients.clear()

    def __enter__(self) -> Orchestrator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def bootstrap(self) -> InstallReport:
        """Run the install pipeline (verifier tool, trust material, bundle)."""
        pipeline = InstallPipeline(
            self.config, self.fetcher, self.host, runner=self.runner, which=self._which
        )
        return pipeline.run()

    def image_gate(self, cosign_path: Path | str = "cosign") -> ImageTrustGate:
        if self._image_gate is None:
            self._image_gate = ImageTrustGate(CosignImageVerifier(cosign_path, self.runner))
        return self._image_gate

    def prepare_base_image(self, version: str, *, cosign_path: Path | str = "cosign") -> str:
        """Verify and pull the base image at *version*; return its reference.

        Raises ``InvalidVersionError`` for a non-semver version and
        ``ImageTrustError`` when the signature does not verify.  The image
        is never pulled unless the gate passed.
        """
        reference = self.config.base_image_reference(version)
        self.image_gate(cosign_path).verify(reference, self.config.image_trust_anchor)
        self.puller.pull(reference)
        return reference

    def resolve_versions(self, repos: RepositorySet | None = None) -> ResolutionReport:
        """Resolve the latest release of *repos* (default: all declared)."""
        return self.resolver.resolve(repos if repos is not None else self.config.repository_set())

    def download_release_assets(
        self, repos: RepositorySet, dest_dir: Path | None = None
    ) -> dict[str, Path]:
        """Download each repository's release asset, one at a time."""
        dest = dest_dir or self.config.work_dir
        downloads: dict[str, Path] = {}
        for repo in repos:
            asset_name = self.config.asset_name_for(repo.name)
            downloads[repo.slug] = self.fetcher.download_release_asset(
                self.release_index, repo, asset_name, dest
            )
            logger.info("%s %s downloaded to %s", repo.slug, repo.pinned_version, downloads[repo.slug])
        return downloads

    def prepare(
        self,
        image_version: str,
        selection: list[str] | None = None,
        *,
        cosign_path: Path | str = "cosign",
    ) -> PrepareSummary:
        """Verify + pull the base image, resolve versions, download assets.

        *selection* narrows which declared repositories get their asset
        downloaded; ``None`` or an empty list means all of them.  A selected
        repository whose latest release could not be looked up raises
        ``DownloadError`` before any asset is fetched.
        """
        reference = self.prepare_base_image(image_version, cosign_path=cosign_path)

        resolution = self.resolve_versions()
        wanted = self.config.repository_set(selection or None)
        failures = resolution.failures
        for ref in wanted:
            if ref.key in failures:
                raise DownloadError(
                    f"Error fetching latest release for {ref.slug}: {failures[ref.key]}"
                )
        to_download = RepositorySet.from_refs(
            [ref for ref in resolution.repositories if ref.key in wanted]
        )
        downloads = self.download_release_assets(to_download)
        return PrepareSummary(
            image_reference=reference, resolution=resolution, downloads=downloads
        )

    def run(self, image_version: str, selection: list[str] | None = None) -> RunSummary:
        """Full run: bootstrap first, then ``prepare()`` with the installed cosign."""
        self.config.base_image_reference(image_version)  # fail fast on a bad version

        install = self.bootstrap()
        prepared = self.prepare(image_version, selection, cosign_path=install.cosign_path)
        return RunSummary(install=install, prepare=prepared)
