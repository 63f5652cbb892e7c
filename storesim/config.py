"""
Simulator Configuration - Pydantic Settings for type-safe config.

NO DICTIONARIES - All configuration is strongly typed.
FAIL FAST - Invalid config is rejected when settings are constructed.
"""

import logging
import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Simulator settings loaded from environment variables."""

    # Service identity (attached to every log entry)
    service_name: str = "store-simulator"
    service_version: str = "0.1.0"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Device defaults used when a document leaves a field out
    default_market: str | None = None  # e.g. "US" or "en-GB"; None = process locale
    default_currency_symbol: str = "$"
    link_uri_template: str = "https://store.windows.com/en-US/{app_id}"

    # Documents
    manifest_path: str = "WMAppManifest.xml"
    simulator_config_path: str | None = None  # Optional override document

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate configuration when settings are built.

        A simulator with a broken template or unknown log level would only
        fail later, in the middle of a test run.
        """
        # Local import keeps config importable without the services package
        from storesim.services.regions import normalize_region

        errors: list[str] = []

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            errors.append(f"LOG_LEVEL must be a logging level name, got: {self.log_level}")

        if self.log_format not in ("json", "console"):
            errors.append(f"LOG_FORMAT must be 'json' or 'console', got: {self.log_format}")

        if "{app_id}" not in self.link_uri_template:
            errors.append("LINK_URI_TEMPLATE must contain an {app_id} placeholder")

        if self.default_market and normalize_region(self.default_market) is None:
            errors.append(f"DEFAULT_MARKET is not a recognizable region: {self.default_market}")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "SIMULATOR CONFIGURATION ERROR",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get simulator settings instance."""
    return settings
