"""
Store Simulator - answers store API calls from a SimulationState.

NO GLOBAL STATE - Each simulator owns its state; callers construct and pass
simulators explicitly. Reloading swaps the whole state in one assignment, so
concurrent readers see either the old or the new snapshot.
"""

import threading
from pathlib import Path
from uuid import UUID

from structlog import get_logger

from storesim.config import Settings, get_settings
from storesim.exceptions import (
    AppAlreadyOwnedError,
    ConfigurationFormatError,
    ProductAlreadyLicensedError,
    ProductNotFoundError,
    ProductNotLicensedError,
    SimulatedFailureError,
)
from storesim.models.license import DEVELOPER_LICENSE_EXPIRES, LicenseInformation, ProductLicense
from storesim.models.listing import ListingInformation
from storesim.models.simulation import SimulatedMethod, SimulationState
from storesim.observability.logging import setup_logging
from storesim.observability.metrics import metrics, track_operation
from storesim.services.config_parser import (
    default_simulation_state,
    load_manifest,
    load_simulator_file,
    parse_simulator_document,
)
from storesim.services.receipts import create_app_receipt, create_product_receipt

logger = get_logger(__name__)


class StoreSimulator:
    """
    Synchronous store simulator.

    Implements the store's listing, license and purchase calls with the
    store's business rules, plus failure injection programmed by the
    simulator document.
    """

    def __init__(self, state: SimulationState, settings: Settings | None = None) -> None:
        """
        Initialize simulator.

        Args:
            state: Initial simulation state
            settings: Simulator settings (defaults to the global settings)
        """
        self.settings = settings or get_settings()
        self._state = state
        self._purchase_lock = threading.Lock()

        logger.info(
            "store_simulator_initialized",
            app_id=str(state.app_id),
            market=state.listing_information.current_market,
        )

    # ========================================================================
    # Construction helpers
    # ========================================================================

    @classmethod
    def from_file(cls, path: str | Path, settings: Settings | None = None) -> "StoreSimulator":
        """Create a simulator from a simulator document."""
        return cls(load_simulator_file(path, settings), settings)

    @classmethod
    def from_manifest(
        cls, path: str | Path, settings: Settings | None = None
    ) -> "StoreSimulator":
        """Create a simulator seeded from the app manifest (bootstrap default)."""
        return cls(default_simulation_state(load_manifest(path), settings), settings)

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "StoreSimulator":
        """
        Create a simulator the way an app under test starts one.

        Configures logging from LOG_LEVEL/LOG_FORMAT, then loads the override
        document when SIMULATOR_CONFIG_PATH is set, otherwise seeds the
        default state from the manifest.
        """
        settings = settings or get_settings()
        setup_logging(settings)
        if settings.simulator_config_path:
            return cls.from_file(settings.simulator_config_path, settings)
        return cls.from_manifest(settings.manifest_path, settings)

    # ========================================================================
    # State
    # ========================================================================

    @property
    def state(self) -> SimulationState:
        """Current simulation state snapshot."""
        return self._state

    def reload(self, state: SimulationState) -> None:
        """Replace the whole simulation state."""
        self._state = state
        metrics.record_reload(success=True)
        logger.info(
            "simulator_reloaded",
            app_id=str(state.app_id),
            products=len(state.listing_information.product_listings),
            failing_methods=sorted(name for name, ok in state.method_results.items() if not ok),
        )

    def reload_from_text(self, text: str) -> None:
        """
        Parse a simulator document and make it the current state.

        Raises:
            ConfigurationFormatError: If the document is invalid; the current
                state stays active
        """
        try:
            state = parse_simulator_document(text, self.settings)
        except ConfigurationFormatError as e:
            metrics.record_reload(success=False)
            logger.warning("simulator_reload_failed", error=e.message)
            raise
        self.reload(state)

    def reload_from_file(self, path: str | Path) -> None:
        """
        Load a simulator document file and make it the current state.

        Raises:
            ConfigurationFormatError: If the file is missing or invalid; the
                current state stays active
        """
        try:
            state = load_simulator_file(path, self.settings)
        except ConfigurationFormatError as e:
            metrics.record_reload(success=False)
            logger.warning("simulator_reload_failed", path=str(path), error=e.message)
            raise
        self.reload(state)

    # ========================================================================
    # Accessors
    # ========================================================================

    @property
    def app_id(self) -> UUID:
        return self._state.app_id

    @property
    def link_uri(self) -> str:
        return self._state.app_listing.link_uri

    @property
    def current_market(self) -> str:
        return self._state.listing_information.current_market

    @property
    def license_information(self) -> LicenseInformation:
        return self._state.license_information

    # ========================================================================
    # Store calls
    # ========================================================================

    def _ensure_succeeds(self, state: SimulationState, method: SimulatedMethod) -> None:
        """Raise SimulatedFailureError if the document programmed this method to fail."""
        if not state.succeeds(method):
            logger.info("simulated_failure_raised", method=method.display_name)
            raise SimulatedFailureError(method.display_name)

    def load_listing_information(self) -> ListingInformation:
        """Return the app's store listing."""
        method = SimulatedMethod.LOAD_LISTING_INFORMATION
        with track_operation(method.display_name):
            state = self._state
            self._ensure_succeeds(state, method)
            return state.listing_information

    def request_product_purchase(self, product_id: str, include_receipt: bool = False) -> str:
        """
        Simulate buying an in-app product.

        Consumables can be bought any number of times; durable and unknown
        products only while the user holds no active license for them.

        Args:
            product_id: Product to buy
            include_receipt: Accepted for API compatibility; a receipt is always returned

        Returns:
            Product receipt XML

        Raises:
            ProductNotFoundError: If the product is not in the listing
            SimulatedFailureError: If purchases are programmed to fail
            ProductAlreadyLicensedError: If a non-consumable product is already owned
        """
        method = SimulatedMethod.REQUEST_PRODUCT_PURCHASE
        with track_operation(method.display_name):
            state = self._state
            product = state.listing_information.product_listings.get(product_id)
            if product is None:
                logger.info("product_purchase_rejected", product_id=product_id, reason="not_found")
                raise ProductNotFoundError(product_id)

            self._ensure_succeeds(state, method)

            licenses = state.license_information
            with self._purchase_lock:
                if not product.is_consumable and licenses.holds_license(product_id):
                    logger.info(
                        "product_purchase_rejected",
                        product_id=product_id,
                        reason="already_licensed",
                    )
                    raise ProductAlreadyLicensedError(product_id)

                receipt = create_product_receipt(state.app_id, product)
                licenses.product_licenses[product_id] = ProductLicense(
                    product_id=product_id,
                    expiration_date=DEVELOPER_LICENSE_EXPIRES,
                    is_active=True,
                    is_consumable=product.is_consumable,
                )

            metrics.record_purchase(product.product_type.value)
            logger.info(
                "product_purchase_simulated",
                product_id=product_id,
                product_type=product.product_type.value,
                include_receipt=include_receipt,
            )
            return receipt

    def request_app_purchase(self, include_receipt: bool = False) -> str:
        """
        Simulate buying the full app.

        Args:
            include_receipt: Accepted for API compatibility; a receipt is always returned

        Returns:
            App receipt XML

        Raises:
            SimulatedFailureError: If app purchases are programmed to fail
            AppAlreadyOwnedError: If the app license is already active
        """
        method = SimulatedMethod.REQUEST_APP_PURCHASE
        with track_operation(method.display_name):
            state = self._state
            self._ensure_succeeds(state, method)

            licenses = state.license_information
            with self._purchase_lock:
                if licenses.is_active:
                    logger.info("app_purchase_rejected", app_id=str(state.app_id))
                    raise AppAlreadyOwnedError(state.app_id)

                receipt = create_app_receipt(state.app_id)
                licenses.is_active = True
                licenses.is_trial = False
                licenses.expiration_date = DEVELOPER_LICENSE_EXPIRES

            metrics.record_purchase("App")
            logger.info(
                "app_purchase_simulated",
                app_id=str(state.app_id),
                include_receipt=include_receipt,
            )
            return receipt

    def get_app_receipt(self) -> str:
        """Return the app's receipt (a placeholder naming the app)."""
        method = SimulatedMethod.GET_APP_RECEIPT
        with track_operation(method.display_name):
            state = self._state
            self._ensure_succeeds(state, method)
            # TODO: return the AppReceipt XML once license type is tracked per purchase
            return f"purchased {state.app_id}"

    def get_product_receipt(self, product_id: str) -> str | None:
        """
        Return the receipt for a purchased product.

        Returns:
            Product receipt XML, or None when the user holds a license for a
            product the listing does not describe

        Raises:
            SimulatedFailureError: If receipt lookups are programmed to fail
            ProductNotFoundError: If the product is neither listed nor licensed
            ProductNotLicensedError: If the product is listed but not owned
        """
        method = SimulatedMethod.GET_PRODUCT_RECEIPT
        with track_operation(method.display_name):
            state = self._state
            self._ensure_succeeds(state, method)

            product = state.listing_information.product_listings.get(product_id)
            licensed = state.license_information.holds_license(product_id)

            if product is not None and licensed:
                return create_product_receipt(state.app_id, product)
            if licensed:
                logger.warning("product_receipt_unavailable", product_id=product_id)
                return None
            if product is None:
                raise ProductNotFoundError(product_id)
            raise ProductNotLicensedError(product_id)
