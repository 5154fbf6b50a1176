"""Install state machine — strictly linear, gate-before-activate.

Enforces:
- Valid state transitions only (VALID_INSTALL_TRANSITIONS table)
- No backward transitions; TOOLING_INSTALLED and FAILED are terminal
- Every transition recorded in the in-memory history and logged
"""

from __future__ import annotations

import logging

from kminit.models.install import (
    VALID_INSTALL_TRANSITIONS,
    InstallState,
    InstallTransition,
)

logger = logging.getLogger(__name__)


class InvalidInstallTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class InstallStateMachine:
    """Tracks the install pipeline's state and its transition history."""

    def __init__(self) -> None:
        self._state = InstallState.NOT_STARTED
        self._history: list[InstallTransition] = []

    @property
    def state(self) -> InstallState:
        return self._state

    @property
    def history(self) -> list[InstallTransition]:
        return list(self._history)

    @property
    def visited(self) -> list[InstallState]:
        """Every state entered so far, starting with NOT_STARTED."""
        return [InstallState.NOT_STARTED] + [t.to_state for t in self._history]

    def has_visited(self, state: InstallState) -> bool:
        return state in self.visited

    @property
    def is_terminal(self) -> bool:
        return not VALID_INSTALL_TRANSITIONS.get(self._state)

    def transition(self, target_state: InstallState, detail: str = "") -> InstallTransition:
        """Move to *target_state*, recording the transition.

        Raises ``InvalidInstallTransitionError`` if the table forbids it.
        """
        current = self._state
        allowed = VALID_INSTALL_TRANSITIONS.get(current, set())
        if target_state not in allowed:
            raise InvalidInstallTransitionError(
                f"Cannot transition install from {current.value} to {target_state.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )

        record = InstallTransition(from_state=current, to_state=target_state, detail=detail)
        self._history.append(record)
        self._state = target_state

        if target_state == InstallState.FAILED:
            logger.error("install: %s -> failed: %s", current.value, detail)
        else:
            logger.info("install: %s -> %s", current.value, target_state.value)
        return record

    def fail(self, detail: str) -> InstallTransition | None:
        """Enter FAILED unless already terminal."""
        if self.is_terminal:
            return None
        return self.transition(InstallState.FAILED, detail)

    def get_available_transitions(self) -> set[InstallState]:
        return set(VALID_INSTALL_TRANSITIONS.get(self._state, set()))
