"""
CurrentApp facade - the store's asynchronous calling convention.

The real store client exposes every call as awaitable. The simulator's work
is synchronous and CPU-bound, so each call is handed to a worker thread and
awaited; results and exceptions come back through the awaited coroutine.
"""

import asyncio
from pathlib import Path
from uuid import UUID

from storesim.config import Settings
from storesim.models.license import LicenseInformation
from storesim.models.listing import ListingInformation
from storesim.models.simulation import SimulationState
from storesim.services.simulator import StoreSimulator


class CurrentAppSimulator:
    """Awaitable store API backed by a StoreSimulator."""

    def __init__(self, simulator: StoreSimulator) -> None:
        self.simulator = simulator

    @classmethod
    def from_state(
        cls, state: SimulationState, settings: Settings | None = None
    ) -> "CurrentAppSimulator":
        return cls(StoreSimulator(state, settings))

    @classmethod
    def from_file(
        cls, path: str | Path, settings: Settings | None = None
    ) -> "CurrentAppSimulator":
        return cls(StoreSimulator.from_file(path, settings))

    @classmethod
    def from_manifest(
        cls, path: str | Path, settings: Settings | None = None
    ) -> "CurrentAppSimulator":
        return cls(StoreSimulator.from_manifest(path, settings))

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "CurrentAppSimulator":
        return cls(StoreSimulator.from_settings(settings))

    # Accessors are plain properties on the real client too

    @property
    def app_id(self) -> UUID:
        return self.simulator.app_id

    @property
    def link_uri(self) -> str:
        return self.simulator.link_uri

    @property
    def current_market(self) -> str:
        return self.simulator.current_market

    @property
    def license_information(self) -> LicenseInformation:
        return self.simulator.license_information

    async def reload_simulator_async(self, path: str | Path) -> None:
        """Load a simulator document file and make it the current state."""
        await asyncio.to_thread(self.simulator.reload_from_file, path)

    async def load_listing_information_async(self) -> ListingInformation:
        return await asyncio.to_thread(self.simulator.load_listing_information)

    async def request_product_purchase_async(
        self, product_id: str, include_receipt: bool = False
    ) -> str:
        return await asyncio.to_thread(
            self.simulator.request_product_purchase, product_id, include_receipt
        )

    async def request_app_purchase_async(self, include_receipt: bool = False) -> str:
        return await asyncio.to_thread(self.simulator.request_app_purchase, include_receipt)

    async def get_app_receipt_async(self) -> str:
        return await asyncio.to_thread(self.simulator.get_app_receipt)

    async def get_product_receipt_async(self, product_id: str) -> str | None:
        return await asyncio.to_thread(self.simulator.get_product_receipt, product_id)
