# src/models/product.py

"""Canonical product listing shared by every source."""

from dataclasses import dataclass

PRICE_PLACEHOLDER = "Price not available"
RATING_PLACEHOLDER = "N/A"
DEFAULT_AVAILABILITY = "Available"


@dataclass
class ProductListing:
    """A single product listing normalized from any source's markup.

    Raises:
        ValueError: If constructed with a blank title or link.
    """

    platform: str
    platform_logo: str
    title: str
    link: str
    price: str = PRICE_PLACEHOLDER
    rating: str = RATING_PLACEHOLDER
    thumbnail: str = ""
    discount: str | None = None
    availability: str = DEFAULT_AVAILABILITY

    def __post_init__(self) -> None:
        if not self.title or not self.title.strip():
            raise ValueError(f"{self.platform} listing has a blank title")
        if not self.link or not self.link.strip():
            raise ValueError(
                f"{self.platform} listing {self.title!r} has a blank link"
            )

    def to_dict(self) -> dict[str, str | None]:
        """Serialise using the wire names expected by the results table."""
        return {
            "platform": self.platform,
            "platformLogo": self.platform_logo,
            "productName": self.title,
            "price": self.price,
            "rating": self.rating,
            "link": self.link,
            "thumbnail": self.thumbnail,
            "discount": self.discount,
            "availability": self.availability,
        }
