"""Error taxonomy for the metadata generation pipeline.

Every error is fatal to a run. None are retried or downgraded.
"""

from __future__ import annotations


class ToolsMetadataError(RuntimeError):
    """Base class for pipeline failures."""


class DiscoveryError(ToolsMetadataError):
    """Raised when the tools listing is unavailable or malformed."""


class TransferError(ToolsMetadataError):
    """Raised when fetching or hashing a tools tarball fails."""


class EncodingError(ToolsMetadataError):
    """Raised when records cannot be encoded as simplestreams documents."""


class PublishError(ToolsMetadataError):
    """Raised when writing a document to storage fails."""
