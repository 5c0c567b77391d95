"""Pipeline state models — a linear run with a single failure exit."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class PipelineState(str, Enum):
    """States of one metadata generation run."""

    INIT = "init"
    DISCOVERING = "discovering"
    HASHING = "hashing"
    SKIPPING_HASH = "skipping_hash"
    ASSEMBLING = "assembling"
    SERIALIZING = "serializing"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES: frozenset[PipelineState] = frozenset(
    {PipelineState.DONE, PipelineState.FAILED}
)

# ASSEMBLING loops back to HASHING/SKIPPING_HASH once per candidate.
# There is no transition out of FAILED: nothing is retried.
VALID_TRANSITIONS: dict[PipelineState, set[PipelineState]] = {
    PipelineState.INIT: {PipelineState.DISCOVERING, PipelineState.FAILED},
    PipelineState.DISCOVERING: {
        PipelineState.HASHING,
        PipelineState.SKIPPING_HASH,
        PipelineState.SERIALIZING,
        PipelineState.FAILED,
    },
    PipelineState.HASHING: {PipelineState.ASSEMBLING, PipelineState.FAILED},
    PipelineState.SKIPPING_HASH: {PipelineState.ASSEMBLING, PipelineState.FAILED},
    PipelineState.ASSEMBLING: {
        PipelineState.HASHING,
        PipelineState.SKIPPING_HASH,
        PipelineState.SERIALIZING,
        PipelineState.FAILED,
    },
    PipelineState.SERIALIZING: {PipelineState.PUBLISHING, PipelineState.FAILED},
    PipelineState.PUBLISHING: {PipelineState.DONE, PipelineState.FAILED},
    PipelineState.DONE: set(),
    PipelineState.FAILED: set(),
}


class StateTransition(BaseModel):
    """Records a single state transition for the run history."""

    model_config = ConfigDict(frozen=True)

    from_state: PipelineState
    to_state: PipelineState
    detail: str = ""
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
