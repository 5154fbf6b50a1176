"""Runtime settings — env-driven.

Centralized settings using pydantic-settings.  Reads from a .env file and
KMINIT_* environment variables.  The GitHub access token is also read from
the conventional GITHUB_TOKEN variable.

Well-known paths, versions and pinned digests are not settings; they live
in ``kminit.models.config.LauncherConfig``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime settings with environment variable overrides.

    Examples
    --------
    Override via environment::

        export GITHUB_TOKEN=ghp_...
        export KMINIT_LOG_LEVEL=DEBUG
        export KMINIT_HTTP_TIMEOUT_SECONDS=10

    Or via .env file::

        KMINIT_MAX_WORKERS=4
        KMINIT_ARCHITECTURE=arm64
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="KMINIT_",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Release index credential
    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("GITHUB_TOKEN", "KMINIT_GITHUB_TOKEN"),
    )

    # Observability
    log_level: str = "INFO"

    # Network
    http_timeout_seconds: float = 30.0
    max_workers: int = 8

    # Host overrides; empty means detect
    architecture: str = ""
    platform: str = ""

    # Staging directory for downloads before verification
    work_dir: Path = Path(".kminit/downloads")

