"""
License domain models - Entitlement records for the app and its products.

LicenseInformation is the one mutable model: simulated purchases add
product licenses to it.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

# Expiration reported for licenses that never expire
DEVELOPER_LICENSE_EXPIRES = datetime(9999, 12, 31, 23, 59, 59, tzinfo=UTC)


@dataclass(frozen=True)
class ProductLicense:
    """License for a single in-app product."""

    product_id: str
    expiration_date: datetime = DEVELOPER_LICENSE_EXPIRES
    is_active: bool = False
    is_consumable: bool = False

    def __post_init__(self) -> None:
        """Validate product license."""
        if not self.product_id:
            raise ValueError("Product ID required")


@dataclass
class LicenseInformation:
    """License state of the app and its in-app products."""

    expiration_date: datetime = DEVELOPER_LICENSE_EXPIRES
    is_active: bool = True
    is_trial: bool = True
    product_licenses: dict[str, ProductLicense] = field(default_factory=dict)

    def holds_license(self, product_id: str) -> bool:
        """Check if the user holds an active license for a product."""
        product_license = self.product_licenses.get(product_id)
        return product_license is not None and product_license.is_active


def default_license_information() -> LicenseInformation:
    """License used when a document does not describe one: active developer trial."""
    return LicenseInformation(
        expiration_date=DEVELOPER_LICENSE_EXPIRES,
        is_active=True,
        is_trial=True,
    )
