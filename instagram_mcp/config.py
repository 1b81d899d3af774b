"""Configuration management using Pydantic Settings."""

from enum import Enum

from pydantic_settings import BaseSettings

from instagram_mcp.exceptions import ConfigError

# Per-request ceiling imposed by the data source; also the size of every "all" round
MAX_BATCH_SIZE = 3


class LogFormat(str, Enum):
    """Log output format."""
    JSON = "json"
    CONSOLE = "console"


class InstagramConfig(BaseSettings):
    """Configuration for the Instagram MCP server."""

    # Browser session
    cdp_url: str = "http://localhost:9222"
    user_data_dir: str | None = None
    headless: bool = False
    browser_timeout_ms: int = 30000

    # Pagination
    round_delay_ms: int = 1500
    keepalive_interval_seconds: float = 10.0
    max_all_posts: int = 0
    probe_has_more: bool = False

    # Grid scrolling
    scroll_pause_ms: int = 1200
    max_scroll_attempts: int = 5

    # Retry settings (extractor navigation only)
    retry_enabled: bool = True
    max_retries: int = 3
    retry_backoff_base: float = 2.0

    # Logging
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.CONSOLE

    model_config = {
        "env_prefix": "INSTAGRAM_MCP_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def validate_runtime(self) -> None:
        """
        Reject settings that cannot work together.

        Raises:
            ConfigError: If a setting is out of its usable range
        """
        if not self.user_data_dir and not self.cdp_url:
            raise ConfigError("Either cdp_url or user_data_dir must be set")
        if self.round_delay_ms < 0:
            raise ConfigError("round_delay_ms must be >= 0")
        if self.keepalive_interval_seconds <= 0:
            raise ConfigError("keepalive_interval_seconds must be > 0")
        if self.max_all_posts < 0:
            raise ConfigError("max_all_posts must be >= 0 (0 disables the cap)")
        if self.max_retries < 0:
            raise ConfigError("max_retries must be >= 0")
