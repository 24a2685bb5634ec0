"""Bulk load outcome models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BatchOutcome(BaseModel):
    """Outcome of one bulk write call."""

    batch_number: int = Field(ge=1, description="1-based position of the batch in the load")
    attempted: int = Field(ge=0, description="Documents sent in this batch")
    indexed_count: int = Field(default=0, ge=0, description="Documents the engine accepted")
    failed_count: int = Field(default=0, ge=0, description="Documents rejected or never delivered")
    first_error: str | None = Field(default=None, description="First error reported for this batch")

    @property
    def succeeded(self) -> bool:
        return self.failed_count == 0


class LoadSummary(BaseModel):
    """Aggregate of all batch outcomes plus the post-load refresh result."""

    index: str = Field(description="Target index")
    batches: list[BatchOutcome] = Field(default_factory=list)
    refreshed: bool = Field(default=False, description="Whether the post-load refresh succeeded")
    refresh_error: str | None = Field(default=None)

    @property
    def total_indexed(self) -> int:
        return sum(b.indexed_count for b in self.batches)

    @property
    def total_failed(self) -> int:
        return sum(b.failed_count for b in self.batches)

    @property
    def failed_batches(self) -> list[BatchOutcome]:
        return [b for b in self.batches if not b.succeeded]

    @property
    def succeeded(self) -> bool:
        """A load only fails outright when the written documents were not made visible."""
        return self.refreshed
