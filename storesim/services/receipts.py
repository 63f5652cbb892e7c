"""
Receipt factory for completed simulated purchases.

Receipts follow the store's fixed XML layout. The certificate ID is left
empty since simulated receipts are never signed; device and receipt IDs are
fresh on every call, like the real store.
"""

from datetime import UTC, datetime
from uuid import UUID, uuid4
from xml.sax.saxutils import quoteattr

from storesim.models.listing import ProductListing

RECEIPT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

PRODUCT_RECEIPT_XML = """<?xml version="1.0" encoding="utf-8" ?>
<Receipt Version="1.0" ReceiptDate={date} CertificateId={certificate_id} ReceiptDeviceId={device_id}>
  <ProductReceipt Id={receipt_id} AppId={app_id} ProductId={product_id} PurchaseDate={date} ProductType={product_type} />
</Receipt>"""

APP_RECEIPT_XML = """<?xml version="1.0" encoding="utf-8" ?>
<Receipt Version="1.0" ReceiptDate={date} CertificateId={certificate_id} ReceiptDeviceId={device_id}>
  <AppReceipt Id={receipt_id} AppId={app_id} PurchaseDate={date} LicenseType={license_type} />
</Receipt>"""


def _receipt_fields(now: datetime | None) -> dict[str, str]:
    """Fields shared by every receipt, already quoted as XML attribute values."""
    purchase_date = (now or datetime.now(UTC)).astimezone(UTC)
    return {
        "date": quoteattr(purchase_date.strftime(RECEIPT_DATE_FORMAT)),
        "certificate_id": quoteattr(""),
        "device_id": quoteattr(str(uuid4())),
        "receipt_id": quoteattr(str(uuid4())),
    }


def create_product_receipt(
    app_id: UUID,
    product: ProductListing,
    now: datetime | None = None,
) -> str:
    """
    Build the receipt for an in-app product purchase.

    Args:
        app_id: ID of the purchasing app
        product: Listing of the purchased product
        now: Purchase time (defaults to current UTC time)

    Returns:
        Receipt XML document
    """
    return PRODUCT_RECEIPT_XML.format(
        app_id=quoteattr(str(app_id)),
        product_id=quoteattr(product.product_id),
        product_type=quoteattr(product.product_type.value),
        **_receipt_fields(now),
    )


def create_app_receipt(
    app_id: UUID,
    now: datetime | None = None,
    license_type: str = "Full",
) -> str:
    """
    Build the receipt for an app purchase.

    Args:
        app_id: ID of the purchased app
        now: Purchase time (defaults to current UTC time)
        license_type: License granted by the purchase

    Returns:
        Receipt XML document
    """
    return APP_RECEIPT_XML.format(
        app_id=quoteattr(str(app_id)),
        license_type=quoteattr(license_type),
        **_receipt_fields(now),
    )
