"""Instagram MCP server - exposes post fetching as an MCP tool.

Provides one tool:
- get_instagram_posts: recent posts from a profile, using the existing Chrome login

Hard protocol errors (unknown tool, bad arguments) are raised as McpError
before any browser work starts. Everything that fails afterwards comes back
as a tool result flagged isError with an "Instagram error: ..." message.
"""

import json
from typing import Any, Literal

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from instagram_mcp import __version__
from instagram_mcp.config import MAX_BATCH_SIZE
from instagram_mcp.core.engine import FETCH_ALL
from instagram_mcp.core.progress import ProgressReporter, ProgressSink
from instagram_mcp.logging import get_logger
from instagram_mcp.service import InstagramService, normalize_username

SERVER_NAME = "instagram-server"
TOOL_NAME = "get_instagram_posts"
DEFAULT_LIMIT = MAX_BATCH_SIZE

TOOL_DESCRIPTION = (
    "Get recent posts from an Instagram profile using existing Chrome login. "
    f"Fetches 1-{MAX_BATCH_SIZE} posts per call, or \"all\" to read sequential batches "
    "until the profile runs out. Pass pagination.nextStartFrom back as startFrom to "
    f"continue. hasMore is true whenever a call returned exactly {MAX_BATCH_SIZE} posts, "
    "so it can be a false positive when no posts remain. Progress and keep-alive "
    "updates are sent as custom \"progress\" notifications, not notifications/progress; "
    "clients that only handle the standard method ignore them, so they do not reset "
    "request timeouts. Long \"all\" fetches may need a longer client timeout."
)

INPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "username": {
            "type": "string",
            "description": "Instagram username to fetch posts from",
        },
        "limit": {
            "type": ["number", "string"],
            "description": f'Number of posts to fetch (1-{MAX_BATCH_SIZE}) or "all" for continuous batches',
        },
        "startFrom": {
            "type": "number",
            "description": "Index to start fetching from (for pagination)",
        },
    },
    "required": ["username"],
}


class ToolProgressNotification(types.Notification[dict[str, Any], Literal["progress"]]):
    """One-way progress event sent while a tool call runs."""

    method: Literal["progress"] = "progress"
    params: dict[str, Any]


def _whole_number(value: Any, name: str) -> int:
    # bool is an int subclass but never a valid count
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{name} must be a whole number")
        value = int(value)
    return value


class FetchArgs(BaseModel):
    """Validated arguments of get_instagram_posts."""

    model_config = ConfigDict(populate_by_name=True)

    username: str
    limit: int | Literal["all"] = DEFAULT_LIMIT
    start_from: int = Field(default=0, alias="startFrom")

    @field_validator("username", mode="before")
    @classmethod
    def _check_username(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("username must be a string")
        if not normalize_username(value):
            raise ValueError("username must not be empty")
        return value

    @field_validator("limit", mode="before")
    @classmethod
    def _check_limit(cls, value: Any) -> int | str:
        if isinstance(value, str):
            if value == FETCH_ALL:
                return value
            raise ValueError('limit must be a number or "all"')
        limit = _whole_number(value, "limit")
        if not 1 <= limit <= MAX_BATCH_SIZE:
            raise ValueError(f'limit must be between 1 and {MAX_BATCH_SIZE}, or "all"')
        return limit

    @field_validator("start_from", mode="before")
    @classmethod
    def _check_start_from(cls, value: Any) -> int:
        start_from = _whole_number(value, "startFrom")
        if start_from < 0:
            raise ValueError("startFrom must be >= 0")
        return start_from


def parse_fetch_args(arguments: Any) -> FetchArgs:
    """
    Validate raw tool arguments.

    Raises:
        McpError: INVALID_PARAMS on any violation
    """
    if not isinstance(arguments, dict):
        raise McpError(types.ErrorData(code=types.INVALID_PARAMS, message="Invalid fetch arguments"))
    try:
        return FetchArgs.model_validate(arguments)
    except ValidationError as e:
        detail = "; ".join(err["msg"].removeprefix("Value error, ") for err in e.errors())
        raise McpError(
            types.ErrorData(code=types.INVALID_PARAMS, message=f"Invalid fetch arguments: {detail}")
        ) from e


class InstagramMCPServer:
    """MCP front end over an InstagramService."""

    def __init__(self, service: InstagramService | None = None):
        self.service = service or InstagramService()
        self.server = Server(SERVER_NAME, version=__version__)
        self._log = get_logger("server")

        self.server.list_tools()(self.list_tools)
        # Registered directly so McpError reaches the client as a protocol error
        self.server.request_handlers[types.CallToolRequest] = self._handle_call_tool

    async def list_tools(self) -> list[types.Tool]:
        return [
            types.Tool(
                name=TOOL_NAME,
                description=TOOL_DESCRIPTION,
                inputSchema=INPUT_SCHEMA,
            )
        ]

    async def _handle_call_tool(self, request: types.CallToolRequest) -> types.ServerResult:
        ctx = self.server.request_context
        sink = self._notification_sink(ctx.session, ctx.request_id)
        result = await self.call_tool(request.params.name, request.params.arguments, sink)
        return types.ServerResult(result)

    def _notification_sink(self, session, request_id) -> ProgressSink:
        async def send(params: dict) -> None:
            await session.send_notification(
                ToolProgressNotification(params=params),
                related_request_id=request_id,
            )

        return send

    async def call_tool(
        self,
        name: str,
        arguments: Any,
        sink: ProgressSink | None = None,
    ) -> types.CallToolResult:
        """
        Run one tool call.

        Args:
            name: Requested tool name
            arguments: Raw arguments from the client
            sink: Destination for progress notifications

        Returns:
            CallToolResult, flagged isError for soft failures

        Raises:
            McpError: METHOD_NOT_FOUND or INVALID_PARAMS
        """
        if name != TOOL_NAME:
            raise McpError(types.ErrorData(code=types.METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))

        args = parse_fetch_args(arguments)
        reporter = ProgressReporter(sink)

        try:
            envelope = await self.service.fetch_posts(
                args.username,
                args.limit,
                args.start_from,
                progress=reporter,
            )
        except Exception as e:
            self._log.error("tool_failed", tool=name, username=args.username, error=str(e), error_type=type(e).__name__)
            return types.CallToolResult(
                content=[types.TextContent(type="text", text=f"Instagram error: {e}")],
                isError=True,
            )

        payload = envelope.model_dump(mode="json", by_alias=True)
        return types.CallToolResult(
            content=[types.TextContent(type="text", text=json.dumps(payload, ensure_ascii=False))],
            structuredContent=payload,
        )

    async def run(self) -> None:
        """Serve over stdio until the client disconnects or the task is cancelled."""
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )
