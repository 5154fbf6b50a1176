"""Bootstrap install pipeline — verifier tool, trust material, tooling bundle.

Lifecycle (each step's output is the next step's input, no concurrency)::

    NOT_STARTED
      -> TOOLING_FETCHED      download cosign-<platform>-<arch>
      -> TOOLING_VERIFIED     checksum gate against the pinned table
      -> TOOLING_EXECUTABLE   chmod 0755, move to the install path
    (or NOT_STARTED -> TOOLING_PRESENT when cosign is already on PATH)
      -> BUNDLE_FETCHED       download bundle + detached signature
      -> BUNDLE_VERIFIED      signature gate with the written public key
      -> TOOLING_INSTALLED    run the bundle installer, reload the profile

Any error moves the machine to FAILED and is re-raised.  Nothing is made
executable or moved into place before its gate has passed.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from kminit.core.checksum_gate import ChecksumVerdict, check_hash
from kminit.core.commands import CommandRunner, SubprocessRunner, run_checked
from kminit.core.errors import AcquisitionError, InstallStepError
from kminit.core.fetcher import ArtifactFetcher
from kminit.core.host import HostPlatform
from kminit.core.install_machine import InstallStateMachine
from kminit.core.signature_gate import CosignBlobVerifier, SignatureVerifier, verify_detached
from kminit.core.trust_store import write_trust_anchor
from kminit.models.config import LauncherConfig
from kminit.models.install import InstallState, InstallTransition
from kminit.models.trust import InstallTarget

logger = logging.getLogger(__name__)


class InstallReport(BaseModel):
    """Summary of a completed install pipeline run."""

    model_config = ConfigDict(frozen=True)

    final_state: InstallState
    cosign_path: Path
    cosign_checksum: ChecksumVerdict | None = None  # None when cosign was already present
    bundle_path: Path
    bundle_version: str
    history: list[InstallTransition] = []


class InstallPipeline:
    """Runs the bootstrap install sequence.

    Parameters
    ----------
    config:
        Launcher configuration (versions, URLs, paths, pinned digests).
    fetcher:
        Artifact fetcher used for every download.
    host:
        Target platform; selects the cosign asset and its pinned digest.
    runner:
        Command runner for the bundle installer and the default verifier.
    signature_verifier:
        Detached-signature backend.  Defaults to ``CosignBlobVerifier``
        bound to the cosign binary this pipeline installed or found.
    which:
        PATH lookup used to detect an existing cosign.
    """

    def __init__(
        self,
        config: LauncherConfig,
        fetcher: ArtifactFetcher,
        host: HostPlatform,
        *,
        runner: CommandRunner | None = None,
        signature_verifier: SignatureVerifier | None = None,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.config = config
        self._fetcher = fetcher
        self._host = host
        self._runner = runner or SubprocessRunner()
        self._signature_verifier = signature_verifier
        self._which = which
        self.machine = InstallStateMachine()

    @property
    def state(self) -> InstallState:
        return self.machine.state

    def run(self) -> InstallReport:
        """Execute the whole sequence; raises on the first failure."""
        try:
            cosign_path, verdict = self._acquire_verifier()
            self._write_trust_material()
            bundle_path, signature_path = self._fetch_bundle()
            self._verify_bundle(bundle_path, signature_path, cosign_path)
            self._install_bundle(bundle_path)
        except AcquisitionError as exc:
            self.machine.fail(f"[{exc.gate}] {exc}")
            raise

        logger.info("Installed bash-utils %s", self.config.bundle.version)
        return InstallReport(
            final_state=self.machine.state,
            cosign_path=cosign_path,
            cosign_checksum=verdict,
            bundle_path=bundle_path,
            bundle_version=self.config.bundle.version,
            history=self.machine.history,
        )

    # ------------------------------------------------------------------
    # Verification tool
    # ------------------------------------------------------------------

    def _acquire_verifier(self) -> tuple[Path, ChecksumVerdict | None]:
        cosign = self.config.cosign
        existing = self._which(cosign.binary_name)
        if existing:
            logger.info("%s is installed at %s", cosign.binary_name, existing)
            self.machine.transition(InstallState.TOOLING_PRESENT, existing)
            return Path(existing), None

        url = cosign.download_url(self._host.platform, self._host.architecture)
        staged = self.config.work_dir / url.rsplit("/", 1)[-1]
        self._fetcher.download(url, staged)
        self.machine.transition(InstallState.TOOLING_FETCHED, str(staged))

        verdict = check_hash(staged, self._host.architecture, cosign.pinned_hashes)
        self.machine.transition(InstallState.TOOLING_VERIFIED, verdict.value)

        target = InstallTarget(local_path=cosign.install_path, executable=True)
        self._activate(staged, target)
        self.machine.transition(InstallState.TOOLING_EXECUTABLE, str(target.local_path))
        return target.local_path, verdict

    def _activate(self, staged: Path, target: InstallTarget) -> None:
        """Promote a verified file to its install target."""
        try:
            if target.executable:
                staged.chmod(0o755)
            target.local_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.move(str(staged), str(target.local_path))
        except OSError as exc:
            raise InstallStepError(
                f"Failed to install {staged.name} to {target.local_path}: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Trust material
    # ------------------------------------------------------------------

    def _write_trust_material(self) -> Path:
        try:
            self.config.keys_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise InstallStepError(
                f"Error creating keys directory {self.config.keys_dir}: {exc}"
            ) from exc
        return write_trust_anchor(self.config.tooling_trust_anchor, self.config.tooling_key_path)

    # ------------------------------------------------------------------
    # Tooling bundle
    # ------------------------------------------------------------------

    def _fetch_bundle(self) -> tuple[Path, Path]:
        bundle = self.config.bundle
        logger.info("Downloading %s and its signature...", bundle.file_name)
        bundle_path = self._fetcher.download(
            bundle.download_url, self.config.work_dir / bundle.file_name
        )
        signature_path = self._fetcher.download(
            bundle.signature_url, self.config.work_dir / bundle.signature_name
        )
        self.machine.transition(InstallState.BUNDLE_FETCHED, bundle.version)
        return bundle_path, signature_path

    def _verify_bundle(self, bundle_path: Path, signature_path: Path, cosign_path: Path) -> None:
        verifier = self._signature_verifier or CosignBlobVerifier(cosign_path, self._runner)
        verify_detached(
            bundle_path, signature_path, self.config.tooling_key_path, verifier=verifier
        )
        self.machine.transition(InstallState.BUNDLE_VERIFIED, bundle_path.name)

    def _install_bundle(self, bundle_path: Path) -> None:
        bundle = self.config.bundle
        try:
            bundle_path.chmod(0o755)
        except OSError as exc:
            raise InstallStepError(f"Failed to make {bundle_path} executable: {exc}") from exc

        logger.info("Installing bash-utils...")
        run_checked(
            self._runner,
            [str(bundle_path.resolve()), *bundle.setup_args],
            description="install bash-utils",
        )
        run_checked(
            self._runner,
            bundle.profile_reload_command,
            description="reload profile",
        )
        self.machine.transition(InstallState.TOOLING_INSTALLED, bundle.version)
