"""Progress update model."""

from pydantic import BaseModel, ConfigDict, Field


class ProgressUpdate(BaseModel):
    """Structured progress event; a bare string is the plain variant."""

    model_config = ConfigDict(populate_by_name=True)

    message: str
    progress: int = 0
    total: int = 0
    keep_alive: bool | None = Field(default=None, alias="keepAlive")

    def to_params(self) -> dict:
        """Wire form, ``keepAlive`` omitted when unset."""
        return self.model_dump(by_alias=True, exclude_none=True)
