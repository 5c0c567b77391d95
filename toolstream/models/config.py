"""Run configuration and result models."""

from __future__ import annotations

import os
import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolstream.models.metadata import ToolsMetadataRecord
from toolstream.models.stages import PipelineState
from toolstream.models.tools import ToolsFilter


def normalize_path(path: str) -> str:
    """Expand ``~`` and make *path* absolute; empty stays empty."""
    if not path:
        return ""
    return os.path.abspath(os.path.expanduser(path))


class GenerateConfig(BaseModel):
    """Parameters for one ``generate-tools`` run.

    ``output_directory`` empty means publish to the environment's own
    storage rather than a local directory.
    """

    model_config = ConfigDict(frozen=True)

    major_version: int
    fetch: bool = True
    output_directory: str = ""
    tools_filter: ToolsFilter = ToolsFilter()

    @field_validator("output_directory")
    @classmethod
    def _normalize_output_directory(cls, value: str) -> str:
        return normalize_path(value)

    @property
    def local(self) -> bool:
        return bool(self.output_directory)


class GenerateResult(BaseModel):
    """Outcome of a completed run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    state: PipelineState
    records: list[ToolsMetadataRecord] = []
    written: list[str] = []


def new_run_id() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return f"ts-{ts}-{uuid.uuid4().hex[:3]}"


class RunInfo(BaseModel):
    """Identity of a run, created when the orchestrator starts."""

    model_config = ConfigDict(frozen=True)

    run_id: str = Field(default_factory=new_run_id)
    config: GenerateConfig
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
