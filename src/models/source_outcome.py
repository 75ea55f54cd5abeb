# src/models/source_outcome.py

"""Per-source outcomes and the merged aggregate returned to callers."""

import math
from dataclasses import dataclass, field

from src.models.product import ProductListing


@dataclass
class SourceOutcome:
    """Result of one source task: success with listings, or failure.

    A failed outcome always carries an empty listing list.
    """

    source_id: str
    label: str
    listings: list[ProductListing] = field(
        default_factory=lambda: list[ProductListing]()
    )
    error: str | None = None

    @classmethod
    def success(
        cls,
        source_id: str,
        label: str,
        listings: list[ProductListing],
    ) -> "SourceOutcome":
        """Build a successful outcome."""
        return cls(source_id=source_id, label=label, listings=listings)

    @classmethod
    def failure(
        cls, source_id: str, label: str, reason: str,
    ) -> "SourceOutcome":
        """Build a failed outcome with no listings."""
        return cls(source_id=source_id, label=label, error=reason)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def count(self) -> int:
        return len(self.listings)


def compute_total_pages(total: int, page_size: int) -> int:
    """Number of consumer pages needed for *total* listings (min 1)."""
    return max(1, math.ceil(total / page_size))


@dataclass
class AggregateResult:
    """Merged listings and metadata for one scrape request."""

    term: str
    page: int
    page_size: int
    listings: list[ProductListing] = field(
        default_factory=lambda: list[ProductListing]()
    )
    counts: dict[str, int] = field(
        default_factory=lambda: dict[str, int]()
    )
    duration_ms: int = 0
    errors: dict[str, str] = field(
        default_factory=lambda: dict[str, str]()
    )

    @property
    def total(self) -> int:
        return len(self.listings)

    @property
    def total_pages(self) -> int:
        return compute_total_pages(self.total, self.page_size)

    def to_dict(self) -> dict[str, object]:
        """Serialise to the ``{"results": ..., "meta": ...}`` body."""
        meta: dict[str, object] = {
            "searchTerm": self.term,
            "duration": self.duration_ms,
            "page": self.page,
        }
        for source_id, count in self.counts.items():
            meta[f"{source_id}Count"] = count
        meta["total"] = self.total
        meta["totalPages"] = self.total_pages
        if self.errors:
            meta["errors"] = dict(self.errors)
        return {
            "results": [listing.to_dict() for listing in self.listings],
            "meta": meta,
        }
