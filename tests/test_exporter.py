"""Unit tests for export functions."""

import json

import pytest

from instagram_mcp.core.exporter import load_json, merge_pages, save_json, save_pages, to_dict, to_json
from instagram_mcp.models.pagination import PaginationEnvelope

from helpers import make_post


def page(start: int, size: int, has_more: bool = True) -> PaginationEnvelope:
    posts = [make_post(start + i) for i in range(size)]
    return PaginationEnvelope.build(posts, start, has_more)


class TestToDict:
    """Test dictionary export."""

    def test_camel_case_pagination(self):
        result = to_dict(page(5, 2, has_more=False))
        assert result["pagination"] == {
            "currentBatch": {"start": 5, "end": 7, "size": 2},
            "nextStartFrom": 7,
            "hasMore": False,
        }

    def test_posts_serialized(self):
        result = to_dict(page(0, 1))
        post = result["posts"][0]
        assert post["shortcode"] == "SC0"
        assert post["post_url"] == "https://www.instagram.com/p/SC0/"
        assert post["position"] == 0

    def test_empty_page(self):
        result = to_dict(page(3, 0, has_more=False))
        assert result["posts"] == []
        assert result["pagination"]["nextStartFrom"] == 3


class TestToJson:
    """Test JSON export."""

    def test_valid_json(self):
        data = json.loads(to_json(page(0, 3)))
        assert data["pagination"]["hasMore"] is True
        assert len(data["posts"]) == 3

    def test_compact(self):
        assert "\n" not in to_json(page(0, 1), indent=None)


class TestSaveLoad:

    def test_save_creates_directories(self, tmp_path):
        target = tmp_path / "exports" / "alice.json"
        path = save_json(page(0, 2), target)
        assert path == target
        assert path.exists()

    def test_load_restores_envelope(self, tmp_path):
        original = page(6, 3)
        restored = load_json(save_json(original, tmp_path / "page.json"))
        assert restored.pagination.next_start_from == 9
        assert [p.shortcode for p in restored.posts] == ["SC6", "SC7", "SC8"]


class TestMergePages:
    """Pages from successive calls are joined on their cursors."""

    def test_contiguous_pages(self):
        merged = merge_pages([page(0, 3), page(3, 3), page(6, 1, has_more=False)])
        assert merged["start"] == 0
        assert merged["next_start_from"] == 7
        assert merged["has_more"] is False
        assert merged["posts_count"] == 7
        assert [p["position"] for p in merged["posts"]] == list(range(7))
        assert "exported_at" in merged

    def test_resumed_range(self):
        merged = merge_pages([page(9, 3), page(12, 2, has_more=False)])
        assert merged["start"] == 9
        assert merged["next_start_from"] == 14

    def test_gap_rejected(self):
        with pytest.raises(ValueError, match="does not continue from 3"):
            merge_pages([page(0, 3), page(4, 3)])

    def test_overlap_rejected(self):
        with pytest.raises(ValueError):
            merge_pages([page(0, 3), page(2, 3)])

    def test_no_pages(self):
        merged = merge_pages([])
        assert merged["posts"] == []
        assert merged["posts_count"] == 0
        assert merged["has_more"] is False


class TestSavePages:

    def test_writes_merged_export(self, tmp_path):
        path = save_pages([page(0, 3), page(3, 1, has_more=False)], tmp_path / "out" / "bob.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["posts_count"] == 4
        assert data["next_start_from"] == 4
        assert data["has_more"] is False

    def test_gap_rejected_before_writing(self, tmp_path):
        target = tmp_path / "bob.json"
        with pytest.raises(ValueError):
            save_pages([page(0, 3), page(6, 3)], target)
        assert not target.exists()
