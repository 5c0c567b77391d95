"""toolstream data models — all Pydantic v2, all frozen (immutable)."""

from toolstream.models.config import GenerateConfig, GenerateResult, RunInfo
from toolstream.models.metadata import (
    TOOLS_FILE_TYPE,
    ContentDigest,
    MetadataDocumentPair,
    StorageObject,
    ToolsMetadataRecord,
)
from toolstream.models.stages import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    PipelineState,
    StateTransition,
)
from toolstream.models.tools import (
    ArtifactCandidate,
    BinaryVersion,
    ToolsFilter,
    VersionNumber,
)

__all__ = [
    # tools
    "VersionNumber",
    "BinaryVersion",
    "ToolsFilter",
    "ArtifactCandidate",
    # metadata
    "TOOLS_FILE_TYPE",
    "ContentDigest",
    "ToolsMetadataRecord",
    "StorageObject",
    "MetadataDocumentPair",
    # stages
    "PipelineState",
    "StateTransition",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    # config
    "GenerateConfig",
    "GenerateResult",
    "RunInfo",
]
