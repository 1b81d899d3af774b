"""instagram_mcp - MCP server for fetching Instagram posts through a logged-in browser."""

__version__ = "0.2.0"

from instagram_mcp.models.post import PostRecord
from instagram_mcp.models.pagination import PaginationEnvelope
from instagram_mcp.models.progress import ProgressUpdate
from instagram_mcp.config import InstagramConfig
from instagram_mcp.service import InstagramService
from instagram_mcp.core.exporter import to_json, to_dict, save_json, load_json, merge_pages, save_pages

__all__ = [
    # Main interface
    "InstagramService",
    "InstagramConfig",
    # Models
    "PostRecord",
    "PaginationEnvelope",
    "ProgressUpdate",
    # Export utilities
    "to_json",
    "to_dict",
    "save_json",
    "load_json",
    "merge_pages",
    "save_pages",
    "__version__",
]
