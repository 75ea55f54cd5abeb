# src/scrapers/field_extractor.py

"""First-matching-locator field extraction over parsed DOM nodes.

Every source describes where its fields live as ordered chains of
locators.  A chain is walked front to back and the first locator that
yields a non-empty value wins; a fully failed chain returns ``None``
and the caller substitutes its placeholder.  Nothing in this module
raises on missing or drifted markup.
"""

import logging
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from decimal import ROUND_HALF_UP, Decimal

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from src.config.logging_config import get_logger

Transform = Callable[[str], str | None]

_NUMBER_RE = re.compile(r"(\d+\.?\d*)")
_DIGITS_RE = re.compile(r"(\d+)")


class Locator(ABC):
    """A rule for reading one value from within an item node."""

    def __init__(
        self, selector: str, transform: Transform | None = None,
    ) -> None:
        self.selector = selector
        self.transform = transform

    def resolve(self, item: Tag) -> str | None:
        """Return this locator's value inside *item*, or ``None``."""
        try:
            element = item.select_one(self.selector)
        except SelectorSyntaxError:
            get_logger("extractor").warning(
                "Invalid selector skipped: %r", self.selector
            )
            return None
        if element is None:
            return None

        raw = self._read(item, element)
        if not raw:
            return None
        if self.transform is not None:
            raw = self.transform(raw)
        return raw or None

    @abstractmethod
    def _read(self, item: Tag, element: Tag) -> str | None:
        """Read the raw value from the matched element."""
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.selector!r})"


class TextLocator(Locator):
    """Reads the stripped text content of the matched element."""

    def _read(self, item: Tag, element: Tag) -> str | None:
        return element.get_text(strip=True)


class AttrLocator(Locator):
    """Reads a named attribute of the matched element."""

    def __init__(
        self,
        selector: str,
        attribute: str,
        transform: Transform | None = None,
    ) -> None:
        super().__init__(selector, transform)
        self.attribute = attribute

    def _read(self, item: Tag, element: Tag) -> str | None:
        value = element.get(self.attribute)
        if isinstance(value, list):
            value = " ".join(value)
        return value.strip() if value else None

    def __repr__(self) -> str:
        return f"AttrLocator({self.selector!r}, {self.attribute!r})"


class StyleLocator(Locator):
    """Reads one property from the element's inline ``style``.

    ``<span style="width: 80%">`` with ``prop="width"`` reads ``"80%"``.
    """

    def __init__(
        self,
        selector: str,
        prop: str,
        transform: Transform | None = None,
    ) -> None:
        super().__init__(selector, transform)
        self.prop = prop.lower()

    def _read(self, item: Tag, element: Tag) -> str | None:
        style = element.get("style")
        if not isinstance(style, str):
            return None
        for declaration in style.split(";"):
            name, sep, value = declaration.partition(":")
            if sep and name.strip().lower() == self.prop:
                return value.strip() or None
        return None


class SplitPriceLocator(Locator):
    """Joins a whole-number price node with its separate fraction node.

    The fraction is looked up inside the same item, so ``1,299`` and
    ``.00`` rendered in sibling spans become ``₹1,299.00``.
    """

    def __init__(
        self,
        selector: str,
        fraction_selector: str,
        currency: str,
    ) -> None:
        super().__init__(selector)
        self.fraction_selector = fraction_selector
        self.currency = currency

    def _read(self, item: Tag, element: Tag) -> str | None:
        whole = element.get_text(strip=True)
        if not whole:
            return None
        fraction_el = item.select_one(self.fraction_selector)
        fraction = (
            fraction_el.get_text(strip=True) if fraction_el else ""
        )
        return f"{self.currency}{whole}{fraction}"


# ── Chain resolution ─────────────────────────────────────


def extract_first(
    item: Tag,
    chain: Sequence[Locator],
    field_name: str = "",
    logger: logging.Logger | None = None,
) -> str | None:
    """Walk *chain* and return the first non-empty value, else ``None``."""
    for locator in chain:
        value = locator.resolve(item)
        if value:
            if logger is not None:
                logger.debug(
                    "Field %s matched %r", field_name, locator
                )
            return value
    return None


def select_items(
    root: Tag,
    selectors: Sequence[str],
    limit: int,
    logger: logging.Logger | None = None,
) -> list[Tag]:
    """Return up to *limit* item nodes from the first productive selector.

    Later candidates are ignored once one selector matches at least one
    node, even if a later one would have matched more.
    """
    log = logger or get_logger("extractor")
    for selector in selectors:
        try:
            items = root.select(selector)
        except SelectorSyntaxError:
            log.warning("Invalid container selector skipped: %r", selector)
            continue
        log.debug(
            "Container selector %r found %d items", selector, len(items)
        )
        if items:
            return items[:limit]
    log.info("No items found with any container selector")
    return []


# ── Shared transforms ────────────────────────────────────


def percent_to_rating(raw: str) -> str | None:
    """Decode a star fill width (``"80%"``) to a 5-star rating (``"4.0"``)."""
    try:
        percent = float(raw.replace("%", "").strip())
    except ValueError:
        return None
    if not math.isfinite(percent):
        return None
    # Ties round up on the exact binary value, like toFixed(1)
    tenths = Decimal(percent / 20).quantize(
        Decimal("0.1"), rounding=ROUND_HALF_UP
    )
    return f"{tenths:.1f}"


def bounded_rating(upper: float = 5.0) -> Transform:
    """First number in the text, accepted only if it is <= *upper*."""

    def _transform(raw: str) -> str | None:
        match = _NUMBER_RE.search(raw)
        if match and float(match.group(1)) <= upper:
            return match.group(1)
        return None

    return _transform


def first_digits(currency: str) -> Transform:
    """First run of digits in the text, prefixed with *currency*."""

    def _transform(raw: str) -> str | None:
        match = _DIGITS_RE.search(raw)
        return f"{currency}{match.group(1)}" if match else None

    return _transform


def strip_chars(*fragments: str) -> Transform:
    """Remove every occurrence of *fragments*, then strip whitespace."""

    def _transform(raw: str) -> str | None:
        for fragment in fragments:
            raw = raw.replace(fragment, "")
        return raw.strip() or None

    return _transform


def first_srcset_url(raw: str) -> str | None:
    """First URL of a ``srcset`` attribute value."""
    parts = raw.split()
    return parts[0] if parts else None
