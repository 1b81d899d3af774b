"""
Integration tests - live fetches through a logged-in Chrome.

These need Chrome started with --remote-debugging-port=9222 and an
Instagram login in its first profile. Run them sparingly to avoid rate
limiting:

    INSTAGRAM_MCP_LIVE=1 pytest tests/test_integration_fetch.py -v
"""

import os

import pytest

from instagram_mcp.config import InstagramConfig
from instagram_mcp.exceptions import ProfileNotFoundError
from instagram_mcp.service import InstagramService

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        os.environ.get("INSTAGRAM_MCP_LIVE") != "1",
        reason="set INSTAGRAM_MCP_LIVE=1 to run against a live browser",
    ),
]

# Public accounts with long post histories
TEST_ACCOUNTS = ["natgeo", "nasa"]


def live_config() -> InstagramConfig:
    return InstagramConfig(round_delay_ms=3000, max_all_posts=9)


@pytest.mark.asyncio
@pytest.mark.parametrize("username", TEST_ACCOUNTS)
async def test_first_page(username):
    async with InstagramService(live_config()) as service:
        envelope = await service.fetch_posts(username, 3)

    assert len(envelope.posts) == 3
    assert envelope.pagination.has_more is True
    for index, post in enumerate(envelope.posts):
        assert post.position == index
        assert post.owner_username == username
        assert str(post.post_url).startswith("https://www.instagram.com/")


@pytest.mark.asyncio
async def test_second_page_continues_first():
    async with InstagramService(live_config()) as service:
        first = await service.fetch_posts("natgeo", 3)
        second = await service.fetch_posts("natgeo", 3, first.pagination.next_start_from)

    assert second.pagination.current_batch.start == 3
    first_codes = {p.shortcode for p in first.posts}
    assert not first_codes & {p.shortcode for p in second.posts}


@pytest.mark.asyncio
async def test_fetch_all_respects_cap():
    async with InstagramService(live_config()) as service:
        envelope = await service.fetch_posts("nasa", "all")

    assert len(envelope.posts) == 9
    assert envelope.pagination.has_more is True


@pytest.mark.asyncio
async def test_missing_profile():
    async with InstagramService(live_config()) as service:
        with pytest.raises(ProfileNotFoundError):
            await service.fetch_posts("this_profile_should_not_exist_4815162342", 1)
