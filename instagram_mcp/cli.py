"""Command-line interface for instagram_mcp."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from instagram_mcp import InstagramService, InstagramConfig, save_json, save_pages, __version__
from instagram_mcp.config import MAX_BATCH_SIZE
from instagram_mcp.core.engine import FETCH_ALL
from instagram_mcp.core.progress import ProgressReporter
from instagram_mcp.exceptions import InstagramError

app = typer.Typer(
    name="instagram-mcp",
    help="Instagram posts over MCP, using an existing Chrome login",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool):
    if value:
        console.print(f"instagram-mcp version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """instagram-mcp - Instagram posts over MCP."""
    pass


@app.command()
def serve():
    """Run the MCP server over stdio."""
    from instagram_mcp.__main__ import main as run_server

    run_server()


def _parse_limit(value: str) -> int | str:
    if value == FETCH_ALL:
        return value
    try:
        limit = int(value)
    except ValueError:
        raise typer.BadParameter(f'expected 1-{MAX_BATCH_SIZE} or "all"')
    if not 1 <= limit <= MAX_BATCH_SIZE:
        raise typer.BadParameter(f'expected 1-{MAX_BATCH_SIZE} or "all"')
    return limit


@app.command()
def posts(
    username: str = typer.Argument(..., help="Instagram username"),
    limit: str = typer.Option(
        str(MAX_BATCH_SIZE), "--limit", "-l", help=f'Posts to fetch (1-{MAX_BATCH_SIZE}) or "all"'
    ),
    start_from: int = typer.Option(
        0, "--start-from", "-s", min=0, help="Cursor from a previous nextStartFrom"
    ),
    pages: int = typer.Option(
        1, "--pages", "-p", min=1, help="Follow nextStartFrom for up to this many pages"
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write the result as JSON to this file"
    ),
    cdp_url: Optional[str] = typer.Option(
        None, "--cdp-url", help="DevTools endpoint of the logged-in Chrome"
    ),
):
    """Fetch posts from one profile and print them."""
    parsed_limit = _parse_limit(limit)
    if parsed_limit == FETCH_ALL and pages > 1:
        raise typer.BadParameter('--pages cannot be combined with --limit all', param_hint="--pages")

    config = InstagramConfig()
    if cdp_url:
        config.cdp_url = cdp_url

    async def show_progress(params: dict) -> None:
        tag = " [dim](keep-alive)[/dim]" if params.get("keepAlive") else ""
        err_console.print(f"[dim]…[/dim] {params['message']}{tag}")

    async def run():
        fetched = []
        cursor = start_from
        async with InstagramService(config) as service:
            try:
                for page_number in range(pages):
                    if page_number:
                        await asyncio.sleep(config.round_delay_ms / 1000)
                    envelope = await service.fetch_posts(
                        username,
                        parsed_limit,
                        cursor,
                        progress=ProgressReporter(show_progress),
                    )
                    fetched.append(envelope)
                    _print_envelope(username, envelope)
                    cursor = envelope.pagination.next_start_from
                    if not envelope.pagination.has_more:
                        break
            except InstagramError as e:
                console.print(f"[red]✗[/red] Instagram error: {e}")
                raise typer.Exit(1)

        if output:
            if len(fetched) == 1:
                path = save_json(fetched[0], output)
            else:
                path = save_pages(fetched, output)
            console.print(f"[dim]Saved {len(fetched)} page(s) to {path}[/dim]")

    asyncio.run(run())


def _print_envelope(username: str, envelope):
    """Print posts as a table, then the cursor to continue from."""
    table = Table(title=f"@{username.lstrip('@')}")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Likes", justify="right")
    table.add_column("Comments", justify="right")
    table.add_column("Caption")

    for post in envelope.posts:
        caption = post.caption[:60] + "..." if len(post.caption) > 60 else post.caption
        table.add_row(
            str(post.position),
            str(post.created_at.date()) if post.created_at else "-",
            post.media_type.value,
            f"{post.like_count:,}" if post.like_count is not None else "-",
            f"{post.comment_count:,}" if post.comment_count is not None else "-",
            caption,
        )

    console.print(table)

    page = envelope.pagination
    console.print(
        f"[bold]{page.current_batch.size}[/bold] posts "
        f"({page.current_batch.start}-{page.current_batch.end}) · "
        f"next start: {page.next_start_from} · "
        f"more: {'yes' if page.has_more else 'no'}"
    )


if __name__ == "__main__":
    app()
