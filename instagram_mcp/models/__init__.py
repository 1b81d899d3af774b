"""Pydantic models for instagram_mcp."""

from instagram_mcp.models.post import MediaType, PostRecord
from instagram_mcp.models.pagination import (
    BatchResult,
    CurrentBatch,
    PaginationEnvelope,
    PaginationInfo,
)
from instagram_mcp.models.progress import ProgressUpdate

__all__ = [
    "MediaType",
    "PostRecord",
    "BatchResult",
    "CurrentBatch",
    "PaginationEnvelope",
    "PaginationInfo",
    "ProgressUpdate",
]
