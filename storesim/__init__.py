"""
Store Simulator - development-time stand-in for the store's CurrentApp API.
"""

from storesim.exceptions import (
    AppAlreadyOwnedError,
    BusinessRuleViolation,
    ConfigurationFormatError,
    ProductAlreadyLicensedError,
    ProductNotFoundError,
    ProductNotLicensedError,
    SimulatedFailureError,
    SimulatorError,
)
from storesim.services.current_app import CurrentAppSimulator
from storesim.services.simulator import StoreSimulator

__all__ = [
    "AppAlreadyOwnedError",
    "BusinessRuleViolation",
    "ConfigurationFormatError",
    "CurrentAppSimulator",
    "ProductAlreadyLicensedError",
    "ProductNotFoundError",
    "ProductNotLicensedError",
    "SimulatedFailureError",
    "SimulatorError",
    "StoreSimulator",
]
