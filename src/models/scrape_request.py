# src/models/scrape_request.py

"""Validated inbound scrape request."""

from dataclasses import dataclass

from src.models.errors import RequestValidationError


@dataclass(frozen=True)
class ScrapeRequest:
    """Search term and result page requested by the caller."""

    term: str
    page: int = 1

    @classmethod
    def create(
        cls, term: str | None, page: int | str | None = 1,
    ) -> "ScrapeRequest":
        """Validate raw caller input and build a request.

        Raises:
            RequestValidationError: If the term is missing or blank,
                or the page is not an integer >= 1.
        """
        cleaned = (term or "").strip()
        if not cleaned:
            raise RequestValidationError("Search term is required")

        if page is None or page == "":
            page_number = 1
        else:
            try:
                page_number = int(page)
            except (TypeError, ValueError) as exc:
                raise RequestValidationError(
                    f"Page must be an integer, got {page!r}"
                ) from exc
        if page_number < 1:
            raise RequestValidationError(
                f"Page must be >= 1, got {page_number}"
            )
        return cls(term=cleaned, page=page_number)
