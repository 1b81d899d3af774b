"""BeautifulSoup-based HTML parser for Instagram profile grids and post pages."""

import re
from dataclasses import dataclass, field
from enum import Enum

from bs4 import BeautifulSoup


class PageState(str, Enum):
    """What a rendered page turned out to be."""
    OK = "ok"
    LOGIN_WALL = "login_wall"
    NOT_FOUND = "not_found"
    CHALLENGE = "challenge"


@dataclass
class PostParseResult:
    """Result of parsing a single post page."""

    post_data: dict
    parse_errors: list[str] = field(default_factory=list)


# Selectors - centralized for easy updates when Instagram changes their DOM
SELECTORS = {
    "post_link": 'a[href*="/p/"], a[href*="/reel/"]',
    "og_description": 'meta[property="og:description"]',
    "og_title": 'meta[property="og:title"]',
    "og_image": 'meta[property="og:image"]',
    "og_video": 'meta[property="og:video"]',
    "og_url": 'meta[property="og:url"]',
    "article": "article",
    "time": "time[datetime]",
    "login_form": 'form#loginForm, input[name="username"][type="text"]',
    "carousel_next": 'button[aria-label="Next"]',
    "media_img": 'img[src*="cdninstagram"], img[src*="fbcdn"]',
    "media_video": "video[src]",
}

SHORTCODE_RE = re.compile(r"/(?:p|reel)/([A-Za-z0-9_-]+)")

# "1,234 likes, 56 comments - natgeo on March 3, 2024: "caption""
OG_DESCRIPTION_RE = re.compile(
    r"^\s*(?P<likes>[\d.,]+[KMB]?)\s+likes?,\s*"
    r"(?P<comments>[\d.,]+[KMB]?)\s+comments?\s*-\s*"
    r"(?P<owner>[\w.]+)\s+on\s+(?P<date>[^:]+?):\s*"
    r"(?P<caption>.*)$",
    re.DOTALL | re.IGNORECASE,
)

NOT_FOUND_TEXT = "Sorry, this page isn't available"
CHALLENGE_MARKERS = ("/challenge/", "Suspicious Login Attempt", "Please wait a few minutes")


def extract_shortcode(href: str) -> str | None:
    """Pull the post shortcode out of a /p/ or /reel/ link."""
    match = SHORTCODE_RE.search(href or "")
    return match.group(1) if match else None


def detect_page_state(html: str, url: str = "") -> PageState:
    """
    Classify a rendered page before trying to parse it.

    Args:
        html: Rendered HTML
        url: Final page URL after redirects

    Returns:
        PageState describing the page
    """
    if "/accounts/login" in url:
        return PageState.LOGIN_WALL
    if "/challenge/" in url:
        return PageState.CHALLENGE

    soup = BeautifulSoup(html, "lxml")
    text = soup.get_text(" ", strip=True)

    if NOT_FOUND_TEXT in text:
        return PageState.NOT_FOUND
    if any(marker in html for marker in CHALLENGE_MARKERS):
        return PageState.CHALLENGE
    if soup.select_one(SELECTORS["login_form"]) and not soup.select_one(SELECTORS["post_link"]):
        return PageState.LOGIN_WALL
    return PageState.OK


def parse_grid(html: str) -> list[str]:
    """
    Extract post shortcodes from a profile grid, in timeline order.

    Args:
        html: Rendered HTML of the profile page

    Returns:
        Unique shortcodes in the order they appear
    """
    soup = BeautifulSoup(html, "lxml")
    seen: set[str] = set()
    shortcodes = []
    for link in soup.select(SELECTORS["post_link"]):
        shortcode = extract_shortcode(link.get("href", ""))
        if shortcode and shortcode not in seen:
            seen.add(shortcode)
            shortcodes.append(shortcode)
    return shortcodes


def _meta_content(soup: BeautifulSoup, key: str) -> str | None:
    el = soup.select_one(SELECTORS[key])
    if el and el.get("content"):
        return el.get("content").strip()
    return None


def parse_post(soup: BeautifulSoup) -> dict:
    """
    Extract raw post fields from a post page.

    Args:
        soup: BeautifulSoup object of the post page

    Returns:
        Dict with raw post data (not yet validated)
    """
    post = {}

    og_url = _meta_content(soup, "og_url")
    if og_url:
        post["shortcode"] = extract_shortcode(og_url)

    # Engagement and caption are packed into og:description
    description = _meta_content(soup, "og_description")
    if description:
        match = OG_DESCRIPTION_RE.match(description)
        if match:
            post["like_count_raw"] = match.group("likes")
            post["comment_count_raw"] = match.group("comments")
            post["owner_username"] = match.group("owner")
            post["created_at_text"] = match.group("date").strip()
            post["caption"] = match.group("caption").strip().strip('"').strip()
        else:
            post["caption"] = description

    if "caption" not in post:
        article = soup.select_one(SELECTORS["article"])
        h1 = article.find("h1") if article else None
        if h1:
            post["caption"] = h1.get_text(strip=True)

    scope = soup.select_one(SELECTORS["article"]) or soup

    time_el = scope.select_one(SELECTORS["time"])
    if time_el:
        post["created_at_raw"] = time_el.get("datetime")

    # Media
    media_urls = []
    video_url = _meta_content(soup, "og_video")
    if video_url:
        media_urls.append(video_url)
    for video in scope.select(SELECTORS["media_video"]):
        src = video.get("src", "")
        if src.startswith("http"):
            media_urls.append(src)
    image_url = _meta_content(soup, "og_image")
    if image_url:
        media_urls.append(image_url)
    for img in scope.select(SELECTORS["media_img"]):
        src = img.get("src")
        if src:
            media_urls.append(src)
    post["media_urls"] = list(dict.fromkeys(media_urls))

    post["is_video"] = bool(video_url or scope.select_one("video"))
    post["is_carousel"] = bool(scope.select_one(SELECTORS["carousel_next"]))

    return post


def parse_post_page(html: str) -> PostParseResult:
    """
    Full post page parsing.

    Args:
        html: Raw HTML content

    Returns:
        PostParseResult with post_data and any parse_errors
    """
    soup = BeautifulSoup(html, "lxml")
    errors = []

    try:
        post_data = parse_post(soup)
    except Exception as e:
        post_data = {}
        errors.append(f"Post parse error: {e}")

    return PostParseResult(post_data=post_data, parse_errors=errors)
