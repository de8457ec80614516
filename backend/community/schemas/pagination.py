from __future__ import annotations

from pydantic import BaseModel, Field

from community.core.config import settings


class PaginationParams(BaseModel):
    """Page cursor of the infinite-scroll listings."""

    page: int = Field(default=1, ge=1, description="Page number, starting at 1")
    page_size: int = Field(
        default=settings.DEFAULT_PAGE_SIZE,
        ge=1,
        le=settings.MAX_PAGE_SIZE,
        description="Items per page",
    )

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size
