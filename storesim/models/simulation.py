"""
Simulation state - the snapshot every simulated store call reads.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from storesim.models.license import LicenseInformation
from storesim.models.listing import AppListing, ListingInformation


class SimulatedMethod(str, Enum):
    """Store methods whose outcome a document can program."""

    LOAD_LISTING_INFORMATION = "LoadListingInformationAsync_GetResult"
    REQUEST_PRODUCT_PURCHASE = "RequestProductPurchaseAsync_GetResult"
    REQUEST_APP_PURCHASE = "RequestAppPurchaseAsync_GetResult"
    GET_APP_RECEIPT = "GetAppReceiptAsync_GetResult"
    GET_PRODUCT_RECEIPT = "GetProductReceiptAsync_GetResult"

    @property
    def display_name(self) -> str:
        """Method name without the result suffix, as used in error messages."""
        return self.value.removesuffix("_GetResult")


def default_method_results() -> dict[str, bool]:
    """Every known method succeeds unless a document says otherwise."""
    return {method.value: True for method in SimulatedMethod}


@dataclass(frozen=True)
class SimulationState:
    """Listing, license and programmed method outcomes for one simulator run."""

    app_listing: AppListing
    license_information: LicenseInformation
    method_results: dict[str, bool]

    @property
    def app_id(self) -> UUID:
        return self.app_listing.app_id

    @property
    def listing_information(self) -> ListingInformation:
        return self.app_listing.listing_information

    def succeeds(self, method: SimulatedMethod) -> bool:
        """Check if a method is programmed to succeed (unlisted methods succeed)."""
        return self.method_results.get(method.value, True)
