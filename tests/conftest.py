"""
Pytest Configuration and Centralized Fixtures.

Provides reusable fixtures for testing:
- Settings pinned to a known device market
- Simulator documents under tests/data
- Simulators loaded from those documents
"""

import os
from collections.abc import Callable
from pathlib import Path
from uuid import UUID

import pytest

# Set environment variables BEFORE importing storesim modules
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("DEFAULT_MARKET", "US")

from storesim.config import Settings
from storesim.services.config_parser import load_simulator_file
from storesim.services.current_app import CurrentAppSimulator
from storesim.services.simulator import StoreSimulator

DATA_DIR = Path(__file__).parent / "data"

SAMPLE_APP_ID = UUID("2B14D306-D8F8-4066-A45B-0FB3464C67F2")


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a fixed device market so tests don't depend on locale."""
    return Settings(default_market="US", default_currency_symbol="$")


# ============================================================================
# Document Fixtures
# ============================================================================


@pytest.fixture
def data_dir() -> Path:
    """Directory holding the sample simulator documents."""
    return DATA_DIR


@pytest.fixture
def read_document() -> Callable[[str], str]:
    """Read a sample document by file name."""

    def _read(name: str) -> str:
        return (DATA_DIR / name).read_text(encoding="utf-8")

    return _read


def build_document(
    products: str = "",
    licenses: str = "",
    simulation: str = "",
    market: str = "en-US",
    app_license: str = "<IsActive>true</IsActive><IsTrial>true</IsTrial>",
) -> str:
    """Build a minimal simulator document around the given fragments."""
    return f"""<?xml version="1.0" encoding="utf-8" ?>
<CurrentApp>
  <ListingInformation>
    <App>
      <AppId>{SAMPLE_APP_ID}</AppId>
      <LinkUri>http://apps.microsoft.com/app/{SAMPLE_APP_ID}</LinkUri>
      <CurrentMarket>{market}</CurrentMarket>
      <MarketData xml:lang="en-us">
        <Name>Built app</Name>
        <Description>Built for a test</Description>
        <Price>2.49</Price>
        <CurrencySymbol>$</CurrencySymbol>
      </MarketData>
    </App>
    {products}
  </ListingInformation>
  <LicenseInformation>
    <App>{app_license}</App>
    {licenses}
  </LicenseInformation>
  <Simulation SimulationMode="Automatic">
    {simulation}
  </Simulation>
</CurrentApp>"""


# ============================================================================
# Simulator Fixtures
# ============================================================================


@pytest.fixture
def simulator_factory(test_settings: Settings) -> Callable[[str], StoreSimulator]:
    """Factory for simulators loaded from a sample document."""

    def _create(name: str) -> StoreSimulator:
        return StoreSimulator(load_simulator_file(DATA_DIR / name, test_settings), test_settings)

    return _create


@pytest.fixture
def iap_simulator(simulator_factory: Callable[[str], StoreSimulator]) -> StoreSimulator:
    """Simulator with three in-app products and no product licenses."""
    return simulator_factory("in_app_purchase.xml")


@pytest.fixture
def purchased_simulator(simulator_factory: Callable[[str], StoreSimulator]) -> StoreSimulator:
    """Simulator whose license already includes MarkedUpExtraFeature."""
    return simulator_factory("purchased_iap.xml")


@pytest.fixture
def failing_simulator(simulator_factory: Callable[[str], StoreSimulator]) -> StoreSimulator:
    """Simulator with most methods programmed to fail."""
    return simulator_factory("failing_methods.xml")


@pytest.fixture
def current_app(test_settings: Settings) -> CurrentAppSimulator:
    """Async facade over the in-app purchase document."""
    return CurrentAppSimulator.from_file(DATA_DIR / "in_app_purchase.xml", test_settings)


@pytest.fixture
def document_builder() -> Callable[..., str]:
    """Builder for minimal simulator documents."""
    return build_document
