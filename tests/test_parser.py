"""Unit tests for HTML parsing - inline fixtures, no internet required."""

import pytest

from instagram_mcp.core.parser import (
    PageState,
    detect_page_state,
    extract_shortcode,
    parse_grid,
    parse_post_page,
)

from fixtures_html import (
    CHALLENGE_HTML,
    LOGIN_HTML,
    NOT_FOUND_HTML,
    grid_html,
    post_html,
)


class TestShortcodes:

    @pytest.mark.parametrize("href, expected", [
        ("/p/CxYz123/", "CxYz123"),
        ("/alice/p/Ab-_9/", "Ab-_9"),
        ("/reel/RRr1/?utm_source=ig", "RRr1"),
        ("https://www.instagram.com/p/Q1/", "Q1"),
        ("/alice/tagged/", None),
        ("", None),
    ])
    def test_extract_shortcode(self, href, expected):
        assert extract_shortcode(href) == expected


class TestGrid:

    def test_grid_order_and_dedup(self):
        html = grid_html(["A1", "B2", "C3"])
        assert parse_grid(html) == ["A1", "B2", "C3"]

    def test_empty_grid(self):
        assert parse_grid(grid_html([])) == []


class TestPageState:

    def test_profile_ok(self):
        assert detect_page_state(grid_html(["A1"]), "https://www.instagram.com/alice/") == PageState.OK

    def test_login_redirect_by_url(self):
        url = "https://www.instagram.com/accounts/login/?next=/alice/"
        assert detect_page_state("<html></html>", url) == PageState.LOGIN_WALL

    def test_login_form(self):
        assert detect_page_state(LOGIN_HTML) == PageState.LOGIN_WALL

    def test_not_found(self):
        assert detect_page_state(NOT_FOUND_HTML) == PageState.NOT_FOUND

    def test_challenge(self):
        assert detect_page_state(CHALLENGE_HTML) == PageState.CHALLENGE
        assert detect_page_state("", "https://www.instagram.com/challenge/x/") == PageState.CHALLENGE


class TestPostPage:

    def test_engagement_and_caption(self):
        result = parse_post_page(post_html("A1", likes="1,234", comments="56", caption="Sunset"))
        post = result.post_data

        assert result.parse_errors == []
        assert post["shortcode"] == "A1"
        assert post["like_count_raw"] == "1,234"
        assert post["comment_count_raw"] == "56"
        assert post["owner_username"] == "alice"
        assert post["caption"] == "Sunset"
        assert post["created_at_raw"] == "2024-03-03T17:02:11.000Z"

    def test_abbreviated_counts(self):
        post = parse_post_page(post_html("A1", likes="12K", comments="1.2K")).post_data
        assert post["like_count_raw"] == "12K"
        assert post["comment_count_raw"] == "1.2K"

    def test_media_urls_deduplicated(self):
        post = parse_post_page(post_html("A1")).post_data
        assert post["media_urls"] == [
            "https://scontent.cdninstagram.com/A1.jpg",
            "https://scontent.cdninstagram.com/A1_full.jpg",
        ]
        assert post["is_video"] is False
        assert post["is_carousel"] is False

    def test_video_post(self):
        post = parse_post_page(post_html("V1", video=True)).post_data
        assert post["is_video"] is True
        assert post["media_urls"][0] == "https://scontent.cdninstagram.com/V1.mp4"

    def test_carousel_post(self):
        post = parse_post_page(post_html("C1", carousel=True)).post_data
        assert post["is_carousel"] is True

    def test_unmatched_description_falls_back_to_text(self):
        html = '<html><head><meta property="og:description" content="Just words"></head></html>'
        post = parse_post_page(html).post_data
        assert post["caption"] == "Just words"
        assert "like_count_raw" not in post

    def test_caption_from_heading_without_meta(self):
        html = "<html><body><article><h1>Only heading</h1></article></body></html>"
        assert parse_post_page(html).post_data["caption"] == "Only heading"
