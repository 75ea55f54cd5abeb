# src/filters/listing_normalizer.py

"""Schema coercion and validity filtering for extracted listing candidates."""

import logging
from collections.abc import Mapping
from typing import Any

from src.config.logging_config import get_logger
from src.models.product import (
    DEFAULT_AVAILABILITY,
    PRICE_PLACEHOLDER,
    RATING_PLACEHOLDER,
    ProductListing,
)

logger = get_logger("filters")

# Raw field values read from one result item, keyed by ProductListing field
Candidate = Mapping[str, Any]


def _text(value: Any, default: str = "") -> str:
    """Coerce *value* to a stripped string, using *default* when blank."""
    if value is None:
        return default
    cleaned = str(value).strip()
    return cleaned or default


def _optional_text(value: Any) -> str | None:
    """Coerce *value* to a stripped string or ``None`` when blank."""
    if value is None:
        return None
    cleaned = str(value).strip()
    return cleaned or None


class ListingNormalizer:
    """Turn raw candidates into listings, discarding invalid ones.

    A :class:`ProductListing` is only built once a candidate is known to
    carry a title and a link.  Cross-source duplicates are kept: the
    same product on two marketplaces is two comparable listings.
    """

    @staticmethod
    def coerce(candidate: Candidate) -> dict[str, str | None]:
        """Return *candidate*'s fields stripped and placeholder-filled."""
        return {
            "platform": _text(candidate.get("platform")),
            "platform_logo": _text(candidate.get("platform_logo")),
            "title": _text(candidate.get("title")),
            "link": _text(candidate.get("link")),
            "price": _text(candidate.get("price"), PRICE_PLACEHOLDER),
            "rating": _text(candidate.get("rating"), RATING_PLACEHOLDER),
            "thumbnail": _text(candidate.get("thumbnail")),
            "discount": _optional_text(candidate.get("discount")),
            "availability": _text(
                candidate.get("availability"), DEFAULT_AVAILABILITY
            ),
        }

    @staticmethod
    def normalize(
        candidates: list[Candidate],
        log: logging.Logger | None = None,
    ) -> tuple[list[ProductListing], int]:
        """Build listings from candidates that have a title and a link.

        Returns the valid listings and the count of dropped candidates.
        """
        log = log or logger
        valid: list[ProductListing] = []
        dropped = 0

        for candidate in candidates:
            fields = ListingNormalizer.coerce(candidate)
            if not fields["title"]:
                log.debug(
                    "Dropped candidate with empty title "
                    "(platform=%s, link=%s)",
                    fields["platform"],
                    fields["link"],
                )
                dropped += 1
                continue
            if not fields["link"]:
                log.debug(
                    "Dropped candidate with empty link "
                    "(platform=%s, title=%s)",
                    fields["platform"],
                    fields["title"],
                )
                dropped += 1
                continue
            valid.append(ProductListing(**fields))  # type: ignore[arg-type]

        if dropped:
            log.info("Normalization dropped %d invalid candidates", dropped)

        return valid, dropped
