"""Data transformation and normalization for extracted posts."""

from datetime import datetime

from pydantic import ValidationError

from instagram_mcp.core.parser import PostParseResult
from instagram_mcp.exceptions import ParseError
from instagram_mcp.models.post import MediaType, PostRecord

POST_URL = "https://www.instagram.com/p/{shortcode}/"


def normalize_count(count_str: str | None) -> int | None:
    """
    Convert count strings to integers.

    Examples:
        "1.2K" -> 1200
        "1M" -> 1000000
        "500" -> 500
        "1,234" -> 1234

    Returns None when nothing usable was found, since Instagram hides
    counts on some posts.
    """
    if not count_str:
        return None

    count_str = count_str.strip().upper().replace(",", "")

    if not count_str:
        return None

    multipliers = {
        "K": 1_000,
        "M": 1_000_000,
        "B": 1_000_000_000,
    }

    for suffix, multiplier in multipliers.items():
        if count_str.endswith(suffix):
            try:
                number = float(count_str[:-1])
                return int(number * multiplier)
            except ValueError:
                return None

    try:
        return int(float(count_str))
    except ValueError:
        return None


def parse_post_date(raw: str | None, text: str | None = None) -> datetime | None:
    """
    Parse a post timestamp.

    Formats:
        - ISO 8601 from <time datetime="...">: "2024-03-03T17:02:11.000Z"
        - og:description date text: "March 3, 2024"
    """
    if raw:
        try:
            return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            pass

    if text:
        for fmt in ("%B %d, %Y", "%b %d, %Y"):
            try:
                return datetime.strptime(text.strip(), fmt)
            except ValueError:
                continue

    return None


def _media_type(raw: dict) -> MediaType:
    if raw.get("is_carousel"):
        return MediaType.CAROUSEL
    if raw.get("is_video"):
        return MediaType.VIDEO
    return MediaType.IMAGE


def transform_post(
    parse_result: PostParseResult,
    shortcode: str,
    position: int,
    username: str,
) -> PostRecord:
    """
    Turn a parsed post page into a validated PostRecord.

    Args:
        parse_result: PostParseResult from parser
        shortcode: Shortcode the post was opened by
        position: Timeline offset of the post
        username: Profile the post was listed under

    Returns:
        Validated PostRecord

    Raises:
        ParseError: If the page yielded nothing usable
    """
    raw = parse_result.post_data
    if parse_result.parse_errors:
        raise ParseError(f"Post {shortcode}: " + "; ".join(parse_result.parse_errors))
    if not raw:
        raise ParseError(f"Post {shortcode}: no post data on page")

    shortcode = raw.get("shortcode") or shortcode
    media_urls = [url for url in raw.get("media_urls", []) if url.startswith("http")]

    try:
        return PostRecord(
            shortcode=shortcode,
            post_url=POST_URL.format(shortcode=shortcode),
            position=position,
            owner_username=raw.get("owner_username") or username,
            caption=raw.get("caption", ""),
            created_at=parse_post_date(raw.get("created_at_raw"), raw.get("created_at_text")),
            media_type=_media_type(raw),
            media_urls=media_urls,
            like_count=normalize_count(raw.get("like_count_raw")),
            comment_count=normalize_count(raw.get("comment_count_raw")),
        )
    except ValidationError as e:
        raise ParseError(f"Post {shortcode}: {e}") from e
