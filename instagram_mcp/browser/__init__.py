"""Browser session handling."""

from instagram_mcp.browser.session import BrowserSessionProvider

__all__ = ["BrowserSessionProvider"]
