# src/config/source_specs.py

"""Declarative per-source scraping configuration.

Each marketplace is described entirely as data: where its search page
lives, which container selectors identify result items, and ordered
locator chains for every listing field.  Markup drift is handled by
appending locators to a chain, not by writing new code.

Registration order here is the order sources appear in merged results.
"""

from dataclasses import dataclass, field
from urllib.parse import quote

from src.config.settings import Settings
from src.scrapers.field_extractor import (
    AttrLocator,
    Locator,
    SplitPriceLocator,
    StyleLocator,
    TextLocator,
    bounded_rating,
    first_digits,
    first_srcset_url,
    percent_to_rating,
    strip_chars,
)

INR = "₹"

# encodeURIComponent leaves these unescaped
_URI_COMPONENT_SAFE = "-_.!~*'()"


@dataclass(frozen=True)
class FieldLocators:
    """Locator chains for each canonical listing field."""

    title: tuple[Locator, ...]
    link: tuple[Locator, ...]
    price: tuple[Locator, ...] = ()
    rating: tuple[Locator, ...] = ()
    rating_count: tuple[Locator, ...] = ()
    thumbnail: tuple[Locator, ...] = ()
    discount: tuple[Locator, ...] = ()


@dataclass(frozen=True)
class SecondaryFetchSpec:
    """Follow-up fetch of each listing's own page for its rating."""

    domain: str
    rating: tuple[Locator, ...]
    rating_count: tuple[Locator, ...] = ()
    timeout: float = Settings.SECONDARY_TIMEOUT
    rating_default: str = "N/A"
    count_default: str = "0"


@dataclass(frozen=True)
class SourceSpec:
    """Everything needed to scrape one marketplace's search results."""

    id: str
    label: str
    icon: str
    base_url: str
    search_url: str
    item_selectors: tuple[str, ...]
    fields: FieldLocators
    secondary: SecondaryFetchSpec | None = None
    max_items: int = field(default=Settings.MAX_ITEMS_PER_SOURCE)

    def build_search_url(self, term: str, page: int = 1) -> str:
        """Fill the search template with the encoded term and page."""
        return self.search_url.format(
            term=quote(term, safe=_URI_COMPONENT_SAFE), page=page
        )


AMAZON = SourceSpec(
    id="amazon",
    label="Amazon.in",
    icon="🛒",
    base_url="https://www.amazon.in",
    search_url="https://www.amazon.in/s?k={term}",
    item_selectors=(
        '[data-component-type="s-search-result"]',
        ".s-result-item",
        '[data-asin]:not([data-asin=""])',
        ".puis-card-container",
    ),
    fields=FieldLocators(
        title=(
            TextLocator("h2 a span"),
            TextLocator('[data-cy="title-recipe"] span'),
            TextLocator(".a-size-medium span"),
            TextLocator(".a-text-normal"),
        ),
        link=(
            AttrLocator("h2 a", "href"),
            AttrLocator('a[href*="/dp/"]', "href"),
            AttrLocator(".a-link-normal", "href"),
        ),
        price=(
            TextLocator(".a-price .a-offscreen"),
            SplitPriceLocator(".a-price-whole", ".a-price-fraction", INR),
            TextLocator('[data-cy="price-recipe"] .a-price .a-offscreen'),
        ),
        rating=(
            TextLocator(".a-icon-alt", bounded_rating()),
            TextLocator('span[aria-hidden="true"]', bounded_rating()),
            TextLocator('[data-cy="reviews-block"] span', bounded_rating()),
        ),
        thumbnail=(
            AttrLocator("img.s-image", "src"),
            AttrLocator("img", "src"),
        ),
    ),
)

FLIPKART = SourceSpec(
    id="flipkart",
    label="Flipkart",
    icon="🛍️",
    base_url="https://www.flipkart.com",
    search_url="https://www.flipkart.com/search?q={term}",
    item_selectors=("[data-id]",),
    fields=FieldLocators(
        title=(
            TextLocator(".wjcEIp"),
            AttrLocator(".wjcEIp", "title"),
        ),
        link=(AttrLocator(".wjcEIp", "href"),),
        price=(TextLocator(".Nx9bqj"),),
        rating=(TextLocator(".XQDdHH"),),
        rating_count=(TextLocator(".Wphh3N", strip_chars("(", ")")),),
        thumbnail=(AttrLocator(".DByuf4", "src"),),
    ),
)

MEESHO = SourceSpec(
    id="meesho",
    label="Meesho",
    icon="🛍️",
    base_url="https://www.meesho.com",
    search_url="https://www.meesho.com/search?q={term}&page={page}",
    item_selectors=(".ProductListItem__GridCol-sc-1baba2g-0",),
    fields=FieldLocators(
        title=(
            TextLocator(
                ".NewProductCardstyled__StyledDesktopProductTitle-sc-6y2tys-5"
            ),
            TextLocator('p[color="greyT2"]'),
        ),
        link=(AttrLocator("a[href]", "href"),),
        price=(
            TextLocator('h5[color="greyBase"]'),
            TextLocator(".sc-eDvSVe.dwCrSh"),
        ),
        rating=(
            TextLocator(
                '.Rating__StyledPill-sc-12htng8-1 span[color="#ffffff"]'
            ),
        ),
        rating_count=(
            TextLocator(
                ".NewProductCardstyled__RatingCount-sc-6y2tys-22",
                strip_chars(" Reviews"),
            ),
        ),
        thumbnail=(AttrLocator("img[alt]", "src"),),
    ),
)

SNAPDEAL = SourceSpec(
    id="snapdeal",
    label="Snapdeal",
    icon="🛒",
    base_url="https://www.snapdeal.com",
    search_url=(
        "https://www.snapdeal.com/search?keyword={term}"
        "&noOfResults=20&page={page}"
    ),
    item_selectors=(".product-tuple-listing",),
    fields=FieldLocators(
        title=(
            TextLocator(".product-title"),
            AttrLocator(".product-title", "title"),
        ),
        link=(AttrLocator(".dp-widget-link", "href"),),
        price=(TextLocator(".product-price"),),
        rating=(StyleLocator(".filled-stars", "width", percent_to_rating),),
        rating_count=(
            TextLocator(".product-rating-count", strip_chars("(", ")")),
        ),
        thumbnail=(
            AttrLocator(".product-tuple-image img", "src"),
            AttrLocator(".product-tuple-image img", "data-src"),
            AttrLocator(".product-tuple-image img", "srcset", first_srcset_url),
            AttrLocator("img.product-image", "src"),
            AttrLocator("img.product-image", "data-src"),
            AttrLocator("picture img", "src"),
            AttrLocator("picture img", "data-src"),
            AttrLocator("picture img", "srcset", first_srcset_url),
        ),
    ),
)

JIOMART = SourceSpec(
    id="jiomart",
    label="JioMart",
    icon="🛒",
    base_url="https://www.jiomart.com",
    search_url="https://www.jiomart.com/search/{term}",
    item_selectors=(".ais-InfiniteHits-item, .plp-card-wrapper",),
    fields=FieldLocators(
        title=(
            TextLocator(".plp-card-details-name"),
            TextLocator("a[title]"),
            AttrLocator("a[title]", "title"),
        ),
        link=(AttrLocator("a[href]", "href"),),
        price=(TextLocator(".plp-card-details-price .jm-heading-xxs"),),
        discount=(TextLocator(".jm-badge"),),
        thumbnail=(
            AttrLocator(".plp-card-image img", "src"),
            AttrLocator(".plp-card-image img", "data-src"),
            AttrLocator("img[alt]", "src"),
            AttrLocator("img[alt]", "data-src"),
        ),
    ),
    # Search results carry no ratings; each product page does
    secondary=SecondaryFetchSpec(
        domain="jiomart.com",
        rating=(TextLocator("#average"),),
        rating_count=(TextLocator("#total_rating"),),
    ),
)

PAYTM_MALL = SourceSpec(
    id="paytm",
    label="PayTM Mall",
    icon="💳",
    base_url="https://paytmmall.com",
    search_url="https://paytmmall.com/shop/search?q={term}",
    item_selectors=(
        "._3WhJ",
        '[data-testid="product-item"]',
        ".product-item",
        ".product-card",
        '[class*="product"]',
    ),
    fields=FieldLocators(
        title=(
            TextLocator(".UGUy"),
            TextLocator("h3"),
            TextLocator(".product-title"),
            TextLocator(".item-title"),
            TextLocator('[data-testid="product-title"]'),
        ),
        link=(
            AttrLocator("a[href]", "href"),
            AttrLocator(".product-link", "href"),
        ),
        price=(
            TextLocator("._1kMS span", first_digits(INR)),
            TextLocator(".price", first_digits(INR)),
            TextLocator(".product-price", first_digits(INR)),
            TextLocator('[data-testid="price"]', first_digits(INR)),
            TextLocator(".current-price", first_digits(INR)),
        ),
        discount=(
            TextLocator(".c-ax"),
            TextLocator(".discount"),
            TextLocator(".offer"),
            TextLocator(".sale-price"),
        ),
        thumbnail=(
            AttrLocator("img[alt]", "src"),
            AttrLocator("img", "src"),
            AttrLocator(".product-image img", "src"),
            AttrLocator('[data-testid="product-image"]', "src"),
        ),
    ),
)

SOURCE_SPECS: tuple[SourceSpec, ...] = (
    AMAZON,
    FLIPKART,
    MEESHO,
    SNAPDEAL,
    JIOMART,
    PAYTM_MALL,
)


def get_source_spec(source_id: str) -> SourceSpec:
    """Look up a registered source by id.

    Raises:
        KeyError: If no source has that id.
    """
    for spec in SOURCE_SPECS:
        if spec.id == source_id:
            return spec
    raise KeyError(source_id)


def select_source_specs(
    source_ids: list[str] | None = None,
) -> list[SourceSpec]:
    """Return the requested sources in registration order (all if None)."""
    if source_ids is None:
        return list(SOURCE_SPECS)
    wanted = set(source_ids)
    unknown = wanted - {spec.id for spec in SOURCE_SPECS}
    if unknown:
        raise KeyError(", ".join(sorted(unknown)))
    return [spec for spec in SOURCE_SPECS if spec.id in wanted]
