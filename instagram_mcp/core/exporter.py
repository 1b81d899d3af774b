"""Export utilities for fetch results."""

import json
from datetime import datetime
from pathlib import Path

from instagram_mcp.models.pagination import PaginationEnvelope


def to_json(envelope: PaginationEnvelope, indent: int | None = 2) -> str:
    """
    Convert a PaginationEnvelope to its wire JSON.

    Args:
        envelope: Result of one fetch call
        indent: JSON indentation level

    Returns:
        JSON string with camelCase pagination keys
    """
    return envelope.model_dump_json(indent=indent, by_alias=True)


def to_dict(envelope: PaginationEnvelope) -> dict:
    """Convert a PaginationEnvelope to its wire dictionary."""
    return envelope.model_dump(mode="json", by_alias=True)


def save_json(
    envelope: PaginationEnvelope,
    filepath: str | Path,
    indent: int = 2,
) -> Path:
    """
    Save a PaginationEnvelope to a JSON file.

    Args:
        envelope: Result to save
        filepath: Output file path
        indent: JSON indentation level

    Returns:
        Path to saved file
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(to_json(envelope, indent=indent), encoding="utf-8")
    return path


def load_json(filepath: str | Path) -> PaginationEnvelope:
    """Load a PaginationEnvelope saved with save_json."""
    path = Path(filepath)
    return PaginationEnvelope.model_validate_json(path.read_text(encoding="utf-8"))


def merge_pages(pages: list[PaginationEnvelope]) -> dict:
    """
    Join the envelopes of successive calls into one export.

    Pages must continue each other: every page starts where the previous
    one's nextStartFrom pointed.

    Args:
        pages: Envelopes in the order they were fetched

    Returns:
        Dict with 'posts' plus the cursor range covered

    Raises:
        ValueError: If the pages leave a gap or overlap
    """
    posts = []
    start = pages[0].pagination.current_batch.start if pages else 0
    expected = start

    for page in pages:
        batch = page.pagination.current_batch
        if batch.start != expected:
            raise ValueError(f"Page starting at {batch.start} does not continue from {expected}")
        posts.extend(post.model_dump(mode="json") for post in page.posts)
        expected = page.pagination.next_start_from

    return {
        "exported_at": datetime.now().isoformat(),
        "start": start,
        "next_start_from": expected,
        "has_more": pages[-1].pagination.has_more if pages else False,
        "posts_count": len(posts),
        "posts": posts,
    }


def save_pages(
    pages: list[PaginationEnvelope],
    filepath: str | Path,
    indent: int = 2,
) -> Path:
    """
    Save the merged export of successive pages to a JSON file.

    Raises:
        ValueError: If the pages leave a gap or overlap
    """
    merged = merge_pages(pages)
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(merged, indent=indent, ensure_ascii=False), encoding="utf-8")
    return path
