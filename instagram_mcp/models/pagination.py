"""Pagination models for a single fetch call."""

from pydantic import BaseModel, ConfigDict, Field

from instagram_mcp.models.post import PostRecord


class BatchResult(BaseModel):
    """Records returned by one extraction round."""

    records: list[PostRecord] = []

    @property
    def count(self) -> int:
        return len(self.records)


class CurrentBatch(BaseModel):
    """Cursor window covered by a fetch call."""

    start: int
    end: int
    size: int


class PaginationInfo(BaseModel):
    """Continuation metadata returned alongside the posts."""

    model_config = ConfigDict(populate_by_name=True)

    current_batch: CurrentBatch = Field(alias="currentBatch")
    next_start_from: int = Field(alias="nextStartFrom")
    has_more: bool = Field(alias="hasMore")


class PaginationEnvelope(BaseModel):
    """Everything a fetch call produced, derived once per call."""

    posts: list[PostRecord]
    pagination: PaginationInfo

    @classmethod
    def build(cls, posts: list[PostRecord], start_from: int, has_more: bool) -> "PaginationEnvelope":
        """
        Derive cursor arithmetic from the records actually returned.

        Args:
            posts: Records in delivery order
            start_from: Cursor the call resumed from
            has_more: Continuation hint (heuristic unless probed)
        """
        size = len(posts)
        return cls(
            posts=posts,
            pagination=PaginationInfo(
                current_batch=CurrentBatch(start=start_from, end=start_from + size, size=size),
                next_start_from=start_from + size,
                has_more=has_more,
            ),
        )
