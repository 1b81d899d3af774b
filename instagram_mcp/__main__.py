"""Entry point for running the MCP server as a module.

Usage:
    python -m instagram_mcp

Note:
    MCP requires stdout to carry only JSON-RPC messages.
    All logging goes to stderr.
"""

import asyncio
import signal
import sys

from instagram_mcp.config import InstagramConfig
from instagram_mcp.logging import configure_logging, get_logger
from instagram_mcp.server import InstagramMCPServer
from instagram_mcp.service import InstagramService


async def serve(config: InstagramConfig | None = None) -> None:
    """
    Run the stdio server until the client disconnects or a signal arrives.

    On SIGINT/SIGTERM running fetches are told to stop at their next round,
    the transport is closed and the browser session released.
    """
    config = config or InstagramConfig()
    # Before anything logs: stdout belongs to the MCP stream
    configure_logging(config)

    service = InstagramService(config)
    app = InstagramMCPServer(service)
    log = get_logger("main")

    async with service:
        loop = asyncio.get_running_loop()
        main_task = asyncio.current_task()
        installed = []

        def on_signal(signum: int) -> None:
            log.info("signal_received", signal=signal.Signals(signum).name)
            service.request_shutdown()
            main_task.cancel()

        for signum in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(signum, on_signal, signum)
                installed.append(signum)
            except NotImplementedError:
                # Windows event loops have no signal handlers
                pass

        log.info("server_start")
        try:
            await app.run()
        except asyncio.CancelledError:
            log.info("server_stopped")
        finally:
            for signum in installed:
                loop.remove_signal_handler(signum)


def main() -> None:
    try:
        asyncio.run(serve())
    except KeyboardInterrupt:
        pass
    sys.exit(0)


if __name__ == "__main__":
    main()
