"""Custom exception hierarchy for instagram_mcp."""


class InstagramError(Exception):
    """Base exception for all instagram_mcp errors."""


class SessionError(InstagramError):
    """No usable authenticated browser session."""


class SessionUnavailableError(SessionError):
    """Browser could not be reached or holds no Instagram login."""


class SessionExpiredError(SessionError):
    """Login was lost while a fetch was running."""


class ExtractionError(InstagramError):
    """Failed to extract posts from the page."""


class FetchError(ExtractionError):
    """Failed to load a page."""


class PageBlockedError(FetchError):
    """Detected bot blocking, a challenge page or a rate limit."""


class ProfileNotFoundError(FetchError):
    """Profile does not exist or is private/unavailable."""


class ParseError(ExtractionError):
    """Failed to parse page content."""


class FetchCancelledError(InstagramError):
    """Fetch stopped between rounds because shutdown was requested."""


class ConcurrentFetchError(InstagramError):
    """Another fetch for the same profile is already running."""


class ConfigError(InstagramError):
    """Invalid configuration."""
