"""Install pipeline state models — strictly linear, no backward transitions."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class InstallState(str, Enum):
    """States of the bootstrap install pipeline."""

    NOT_STARTED = "not_started"
    TOOLING_FETCHED = "tooling_fetched"
    TOOLING_VERIFIED = "tooling_verified"
    TOOLING_EXECUTABLE = "tooling_executable"
    TOOLING_PRESENT = "tooling_present"
    BUNDLE_FETCHED = "bundle_fetched"
    BUNDLE_VERIFIED = "bundle_verified"
    TOOLING_INSTALLED = "tooling_installed"
    FAILED = "failed"


# Valid state transitions, enforced by InstallStateMachine.
# Terminal states (TOOLING_INSTALLED, FAILED) have no outgoing transitions.
VALID_INSTALL_TRANSITIONS: dict[InstallState, set[InstallState]] = {
    InstallState.NOT_STARTED: {
        InstallState.TOOLING_FETCHED,
        InstallState.TOOLING_PRESENT,
        InstallState.FAILED,
    },
    InstallState.TOOLING_FETCHED: {InstallState.TOOLING_VERIFIED, InstallState.FAILED},
    InstallState.TOOLING_VERIFIED: {InstallState.TOOLING_EXECUTABLE, InstallState.FAILED},
    InstallState.TOOLING_EXECUTABLE: {InstallState.BUNDLE_FETCHED, InstallState.FAILED},
    InstallState.TOOLING_PRESENT: {InstallState.BUNDLE_FETCHED, InstallState.FAILED},
    InstallState.BUNDLE_FETCHED: {InstallState.BUNDLE_VERIFIED, InstallState.FAILED},
    InstallState.BUNDLE_VERIFIED: {InstallState.TOOLING_INSTALLED, InstallState.FAILED},
    InstallState.TOOLING_INSTALLED: set(),  # terminal
    InstallState.FAILED: set(),  # terminal
}


class InstallTransition(BaseModel):
    """Records a single state transition for the install history."""

    model_config = ConfigDict(frozen=True)

    from_state: InstallState
    to_state: InstallState
    detail: str = ""
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
