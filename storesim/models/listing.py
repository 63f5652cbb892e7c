"""
Listing domain models - Immutable dataclasses for store listing data.

NO DICTIONARIES - All data uses strongly typed models. The only mapping
is the product catalog, keyed by product ID.
"""

from dataclasses import dataclass, field
from enum import Enum
from uuid import UUID


class ProductType(str, Enum):
    """In-app product type as the store reports it."""

    CONSUMABLE = "Consumable"
    DURABLE = "Durable"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, value: str | None) -> "ProductType":
        """
        Parse a product type name.

        Matching is case-insensitive. Missing or unrecognized names are
        UNKNOWN rather than an error, since stores add types over time.
        """
        if value is None:
            return cls.UNKNOWN
        wanted = value.strip().lower()
        for member in cls:
            if member.value.lower() == wanted:
                return member
        return cls.UNKNOWN


@dataclass(frozen=True)
class ProductListing:
    """Store listing for a single in-app product."""

    product_id: str
    name: str
    description: str
    formatted_price: str
    product_type: ProductType = ProductType.UNKNOWN

    def __post_init__(self) -> None:
        """Validate product listing."""
        if not self.product_id:
            raise ValueError("Product ID required")

    @property
    def is_consumable(self) -> bool:
        """Check if the product can be bought repeatedly."""
        return self.product_type is ProductType.CONSUMABLE


@dataclass(frozen=True)
class ListingInformation:
    """Store metadata for the app and its add-ons."""

    current_market: str
    name: str
    description: str
    formatted_price: str
    product_listings: dict[str, ProductListing] = field(default_factory=dict)
    age_rating: int | None = None

    def __post_init__(self) -> None:
        """Validate listing information."""
        if len(self.current_market) != 2:
            raise ValueError(f"Invalid market code: {self.current_market}")


@dataclass(frozen=True)
class AppListing:
    """Identity of the application plus its listing."""

    app_id: UUID
    link_uri: str
    listing_information: ListingInformation


@dataclass(frozen=True)
class AppManifest:
    """Application descriptor used to seed the default listing."""

    product_id: UUID
    title: str
    description: str
