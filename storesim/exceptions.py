"""
Exception Classes - Strongly typed exception hierarchy.

NO DICTIONARIES - All exceptions have typed attributes.
"""

from uuid import UUID


class SimulatorError(Exception):
    """Base exception for all store simulator errors."""

    pass


class ConfigurationFormatError(SimulatorError):
    """Raised when a simulator or manifest document is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Invalid simulator configuration: {message}")


class SimulatedFailureError(SimulatorError):
    """Raised when a method was programmed to fail in simulator settings."""

    def __init__(self, method_name: str) -> None:
        self.method_name = method_name
        super().__init__(f"{method_name} was programmed to fail in simulator settings")


class BusinessRuleViolation(SimulatorError):
    """Base exception for store rules a simulated request breaks."""

    pass


class ProductNotFoundError(BusinessRuleViolation):
    """Raised when a product ID is not in the simulated listing."""

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(
            f"In-app purchase {product_id} not found in simulator listing information"
        )


class ProductAlreadyLicensedError(BusinessRuleViolation):
    """Raised when a durable product is purchased by a user who already owns it."""

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"User already has a license for {product_id}")


class ProductNotLicensedError(BusinessRuleViolation):
    """Raised when a receipt is requested for a product the user never bought."""

    def __init__(self, product_id: str) -> None:
        self.product_id = product_id
        super().__init__(f"User does not have a license for {product_id}")


class AppAlreadyOwnedError(BusinessRuleViolation):
    """Raised when the app is purchased while its license is already active."""

    def __init__(self, app_id: UUID) -> None:
        self.app_id = app_id
        super().__init__(f"User already owns application {app_id}")
