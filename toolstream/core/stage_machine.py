"""Linear state machine for a metadata generation run.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- FAILED reachable from every non-terminal state, and final
- Every transition recorded in the run history
"""

from __future__ import annotations

import logging

from toolstream.models.stages import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Raised when a requested state transition is not valid."""


class PipelineStateMachine:
    """Tracks the state of one run and its transition history."""

    def __init__(self) -> None:
        self._state = PipelineState.INIT
        self._history: list[StateTransition] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def history(self) -> list[StateTransition]:
        return list(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def transition(self, target: PipelineState, detail: str = "") -> StateTransition:
        """Move to *target*, recording the transition.

        Raises
        ------
        InvalidTransitionError
            If *target* is not reachable from the current state.
        """
        allowed = VALID_TRANSITIONS.get(self._state, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition from {self._state.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        record = StateTransition(from_state=self._state, to_state=target, detail=detail)
        self._history.append(record)
        logger.debug("%s -> %s %s", self._state.value, target.value, detail)
        self._state = target
        return record

    def fail(self, exc: BaseException) -> StateTransition | None:
        """Enter FAILED with *exc* as detail; no-op if already terminal."""
        if self.is_terminal:
            return None
        return self.transition(PipelineState.FAILED, detail=str(exc))
