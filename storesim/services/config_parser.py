"""
Simulator document parser.

Turns a store proxy XML document (or the app manifest, for the bootstrap
default) into a SimulationState. Missing optional fields fall back to
developer defaults; missing identity fields raise ConfigurationFormatError.
"""

import xml.etree.ElementTree as ET
from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from pathlib import Path
from urllib.parse import urlparse
from uuid import UUID

from structlog import get_logger

from storesim.config import Settings, get_settings
from storesim.exceptions import ConfigurationFormatError
from storesim.models.license import (
    DEVELOPER_LICENSE_EXPIRES,
    LicenseInformation,
    ProductLicense,
    default_license_information,
)
from storesim.models.listing import (
    AppListing,
    AppManifest,
    ListingInformation,
    ProductListing,
    ProductType,
)
from storesim.models.simulation import SimulationState, default_method_results
from storesim.services.regions import device_region, normalize_region

logger = get_logger(__name__)

FAILURE_HRESULT = "E_FAIL"

_CENTS = Decimal("0.01")


# ============================================================================
# Element helpers
# ============================================================================


def _strip_namespaces(root: ET.Element) -> ET.Element:
    """Drop XML namespaces so lookups can use plain element names."""
    for element in root.iter():
        if isinstance(element.tag, str) and "}" in element.tag:
            element.tag = element.tag.split("}", 1)[1]
    return root


def _parse_xml(content: str | bytes, source: str) -> ET.Element:
    """
    Parse XML text or raw file bytes.

    Bytes are decoded by the XML parser itself from the BOM or the encoding
    declaration, so UTF-16 and Latin-1 documents load as written.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ConfigurationFormatError(f"{source} is not well-formed XML: {e}") from e
    return _strip_namespaces(root)


def _read_document(path: str | Path, source: str) -> bytes:
    file_path = Path(path)
    try:
        return file_path.read_bytes()
    except FileNotFoundError as e:
        raise ConfigurationFormatError(f"{source} not found: {file_path}") from e
    except OSError as e:
        raise ConfigurationFormatError(f"{source} could not be read: {file_path}: {e}") from e


def _first(root: ET.Element, tag: str) -> ET.Element | None:
    """First element named tag anywhere in the tree, root included."""
    return next(root.iter(tag), None)


def _child_text(element: ET.Element | None, tag: str, default: str | None = None) -> str | None:
    """Child element text exactly as written; parsed fields strip it themselves."""
    if element is None:
        return default
    child = element.find(tag)
    if child is None:
        return default
    return child.text or ""


def _parse_bool(text: str | None, default: bool, field_name: str) -> bool:
    if text is None or not text.strip():
        return default
    lowered = text.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    raise ConfigurationFormatError(f"{field_name} must be true or false, got: {text}")


def parse_expiration_date(text: str | None) -> datetime:
    """
    Parse a license expiration date.

    Naive timestamps are taken as UTC. Missing or unparseable dates mean the
    license never expires.
    """
    if not text or not text.strip():
        return DEVELOPER_LICENSE_EXPIRES
    try:
        parsed = datetime.fromisoformat(text.strip())
    except ValueError:
        logger.warning("expiration_date_unparseable", value=text)
        return DEVELOPER_LICENSE_EXPIRES
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def format_price(price: str | None, currency_symbol: str | None) -> str:
    """
    Format a price as currency symbol plus amount with two decimals.

    Missing or malformed prices are formatted as zero.

    Examples:
        format_price("1.99", "$") -> "$1.99"
        format_price("5", "€") -> "€5.00"
        format_price("oops", "$") -> "$0.00"
    """
    amount = Decimal("0.00")
    if price and price.strip():
        try:
            parsed = Decimal(price.strip())
            if parsed.is_finite():
                amount = parsed.quantize(_CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            logger.warning("price_unparseable", value=price)
    return f"{currency_symbol or ''}{amount:f}"


# ============================================================================
# Listing information
# ============================================================================


def _parse_market(text: str | None, settings: Settings) -> str:
    text = (text or "").strip()
    if not text:
        return device_region(settings.default_market)
    market = normalize_region(text)
    if market is None:
        raise ConfigurationFormatError(f"CurrentMarket is not a recognizable region: {text}")
    return market


def _parse_app_id(text: str | None, field_name: str) -> UUID:
    text = (text or "").strip()
    if not text:
        raise ConfigurationFormatError(f"{field_name} is required")
    try:
        return UUID(text)
    except ValueError as e:
        raise ConfigurationFormatError(f"{field_name} is not a GUID: {text}") from e


def _parse_link_uri(text: str | None, app_id: UUID, settings: Settings) -> str:
    text = (text or "").strip()
    if not text:
        return settings.link_uri_template.format(app_id=app_id)
    parsed = urlparse(text)
    if not parsed.scheme or not parsed.netloc:
        raise ConfigurationFormatError(f"LinkUri must be an absolute URI, got: {text}")
    return text


def _parse_age_rating(text: str | None) -> int | None:
    text = (text or "").strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError as e:
        raise ConfigurationFormatError(f"AgeRating must be a number, got: {text}") from e


def _parse_product_listing(product_node: ET.Element) -> ProductListing:
    product_id = product_node.get("ProductId")
    if not product_id:
        raise ConfigurationFormatError("Product listing is missing its ProductId attribute")

    market_data = product_node.find("MarketData")
    type_name = product_node.get("ProductType") or _child_text(market_data, "ProductType")

    return ProductListing(
        product_id=product_id,
        name=_child_text(market_data, "Name", "") or "",
        description=_child_text(market_data, "Description", "") or "",
        formatted_price=format_price(
            _child_text(market_data, "Price"),
            _child_text(market_data, "CurrencySymbol"),
        ),
        product_type=ProductType.parse(type_name),
    )


def _parse_app_listing(listing_node: ET.Element, settings: Settings) -> AppListing:
    app_node = listing_node.find("App")
    if app_node is None:
        raise ConfigurationFormatError("ListingInformation is missing its App element")

    app_id = _parse_app_id(_child_text(app_node, "AppId"), "AppId")
    market_data = app_node.find("MarketData")

    product_listings: dict[str, ProductListing] = {}
    for product_node in listing_node.findall("Product"):
        product = _parse_product_listing(product_node)
        if product.product_id in product_listings:
            logger.warning("duplicate_product_listing", product_id=product.product_id)
        product_listings[product.product_id] = product

    listing_information = ListingInformation(
        current_market=_parse_market(_child_text(app_node, "CurrentMarket"), settings),
        name=_child_text(market_data, "Name", "") or "",
        description=_child_text(market_data, "Description", "") or "",
        formatted_price=format_price(
            _child_text(market_data, "Price"),
            _child_text(market_data, "CurrencySymbol"),
        ),
        product_listings=product_listings,
        age_rating=_parse_age_rating(_child_text(app_node, "AgeRating")),
    )

    return AppListing(
        app_id=app_id,
        link_uri=_parse_link_uri(_child_text(app_node, "LinkUri"), app_id, settings),
        listing_information=listing_information,
    )


# ============================================================================
# License information
# ============================================================================


def _parse_product_license(product_node: ET.Element) -> ProductLicense:
    product_id = product_node.get("ProductId")
    if not product_id:
        raise ConfigurationFormatError("Product license is missing its ProductId attribute")

    return ProductLicense(
        product_id=product_id,
        expiration_date=parse_expiration_date(_child_text(product_node, "ExpirationDate")),
        is_active=_parse_bool(_child_text(product_node, "IsActive"), False, "IsActive"),
        is_consumable=_parse_bool(
            _child_text(product_node, "IsConsumable"), False, "IsConsumable"
        ),
    )


def _parse_license_information(license_node: ET.Element | None) -> LicenseInformation:
    if license_node is None:
        return default_license_information()

    # App license fields live under <App>, older documents put them directly
    # under <LicenseInformation>
    app_node = license_node.find("App")
    source = app_node if app_node is not None else license_node

    license_information = LicenseInformation(
        expiration_date=parse_expiration_date(_child_text(source, "ExpirationDate")),
        is_active=_parse_bool(_child_text(source, "IsActive"), True, "IsActive"),
        is_trial=_parse_bool(_child_text(source, "IsTrial"), True, "IsTrial"),
    )

    for product_node in license_node.findall("Product"):
        product_license = _parse_product_license(product_node)
        license_information.product_licenses[product_license.product_id] = product_license

    return license_information


# ============================================================================
# Simulation settings
# ============================================================================


def _parse_method_results(root: ET.Element) -> dict[str, bool]:
    method_results = default_method_results()

    for simulation_node in root.iter("Simulation"):
        for response_node in simulation_node.findall("DefaultResponse"):
            method_name = response_node.get("MethodName")
            if not method_name:
                logger.warning("default_response_missing_method_name")
                continue
            hresult = response_node.get("HResult", FAILURE_HRESULT)
            method_results[method_name] = hresult != FAILURE_HRESULT

    return method_results


# ============================================================================
# Public entry points
# ============================================================================


def parse_simulator_document(
    text: str | bytes, settings: Settings | None = None
) -> SimulationState:
    """
    Parse a simulator configuration document.

    Args:
        text: XML document contents, as text or raw file bytes
        settings: Simulator settings (defaults to the global settings)

    Returns:
        A new simulation state

    Raises:
        ConfigurationFormatError: If the document is malformed or lacks the app identity
    """
    settings = settings or get_settings()
    root = _parse_xml(text, "Simulator document")

    listing_node = _first(root, "ListingInformation")
    if listing_node is None:
        raise ConfigurationFormatError("Document is missing ListingInformation")

    state = SimulationState(
        app_listing=_parse_app_listing(listing_node, settings),
        license_information=_parse_license_information(_first(root, "LicenseInformation")),
        method_results=_parse_method_results(root),
    )

    logger.debug(
        "simulator_document_parsed",
        app_id=str(state.app_id),
        market=state.listing_information.current_market,
        products=len(state.listing_information.product_listings),
        product_licenses=len(state.license_information.product_licenses),
        failing_methods=sorted(name for name, ok in state.method_results.items() if not ok),
    )
    return state


def load_simulator_file(path: str | Path, settings: Settings | None = None) -> SimulationState:
    """
    Read and parse a simulator configuration file.

    The file's encoding comes from its BOM or XML declaration (UTF-8 when
    neither is present).
    """
    return parse_simulator_document(_read_document(path, "Simulator document"), settings)


def parse_manifest(text: str | bytes) -> AppManifest:
    """
    Parse the app manifest's App element.

    Raises:
        ConfigurationFormatError: If the App element or its ProductID is missing
    """
    root = _parse_xml(text, "App manifest")
    app_node = _first(root, "App")
    if app_node is None:
        raise ConfigurationFormatError("App manifest is missing its App element")

    return AppManifest(
        product_id=_parse_app_id(app_node.get("ProductID"), "ProductID"),
        title=app_node.get("Title", ""),
        description=app_node.get("Description", ""),
    )


def load_manifest(path: str | Path) -> AppManifest:
    """Read and parse the app manifest file."""
    return parse_manifest(_read_document(path, "App manifest"))


def default_simulation_state(
    manifest: AppManifest, settings: Settings | None = None
) -> SimulationState:
    """
    Build the state used before any simulator document is loaded.

    The app is listed under its manifest title and description at zero
    price in the device's market, with no products and a developer trial
    license.
    """
    settings = settings or get_settings()

    listing_information = ListingInformation(
        current_market=device_region(settings.default_market),
        name=manifest.title,
        description=manifest.description,
        formatted_price=format_price(None, settings.default_currency_symbol),
    )
    app_listing = AppListing(
        app_id=manifest.product_id,
        link_uri=settings.link_uri_template.format(app_id=manifest.product_id),
        listing_information=listing_information,
    )

    return SimulationState(
        app_listing=app_listing,
        license_information=default_license_information(),
        method_results=default_method_results(),
    )
