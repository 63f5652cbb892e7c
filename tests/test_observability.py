"""
Tests for logging and metrics helpers.
"""

import pytest
import structlog
from prometheus_client import REGISTRY

from storesim.exceptions import ConfigurationFormatError, SimulatedFailureError
from storesim.observability import get_logger, log_context, metrics, setup_logging, track_operation


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


class TestTrackOperation:
    """Tests for track_operation."""

    def test_records_success(self):
        """Successful calls count as success."""
        labels = {"method": "TrackedSuccess", "outcome": "success"}
        before = _sample("storesim_operations_total", labels)

        with track_operation("TrackedSuccess"):
            pass

        assert _sample("storesim_operations_total", labels) == before + 1

    def test_records_failure_and_reraises(self):
        """Failed calls count as failure, record the error type and propagate."""
        failure = {"method": "TrackedFailure", "outcome": "failure"}
        errors = {"error_type": "SimulatedFailureError", "method": "TrackedFailure"}
        before_failure = _sample("storesim_operations_total", failure)
        before_errors = _sample("storesim_errors_total", errors)

        with pytest.raises(SimulatedFailureError):
            with track_operation("TrackedFailure"):
                raise SimulatedFailureError("TrackedFailure")

        assert _sample("storesim_operations_total", failure) == before_failure + 1
        assert _sample("storesim_errors_total", errors) == before_errors + 1


class TestSimulatorMetrics:
    """Tests for metrics recorded by the simulator."""

    def test_purchase_recorded(self, iap_simulator):
        """Successful purchases count by product type."""
        labels = {"product_type": "Consumable"}
        before = _sample("storesim_purchases_total", labels)

        iap_simulator.request_product_purchase("SomeOtherFeature", False)

        assert _sample("storesim_purchases_total", labels) == before + 1

    def test_reload_recorded(self, iap_simulator):
        """Failed reloads are counted."""
        labels = {"success": "False"}
        before = _sample("storesim_reloads_total", labels)

        with pytest.raises(Exception):
            iap_simulator.reload_from_text("not xml")

        assert _sample("storesim_reloads_total", labels) == before + 1

    def test_unreadable_file_reload_recorded(self, iap_simulator, tmp_path):
        """Read errors count as failed reloads and keep the state."""
        labels = {"success": "False"}
        before = _sample("storesim_reloads_total", labels)
        state = iap_simulator.state

        with pytest.raises(ConfigurationFormatError):
            iap_simulator.reload_from_file(tmp_path)

        assert _sample("storesim_reloads_total", labels) == before + 1
        assert iap_simulator.state is state

    def test_disabled_metrics_record_nothing(self, monkeypatch):
        """With metrics disabled the helpers are no-ops."""
        labels = {"method": "Disabled", "outcome": "success"}
        monkeypatch.setattr(metrics, "enabled", False)

        metrics.record_operation("Disabled", "success")

        assert _sample("storesim_operations_total", labels) == 0.0


class TestLogging:
    """Tests for logging helpers."""

    def test_setup_logging_and_get_logger(self):
        """setup_logging configures structlog; loggers can be created."""
        setup_logging()
        logger = get_logger("storesim.tests")
        logger.info("logging_configured", check=True)

    def test_setup_logging_uses_given_settings(self, test_settings):
        """Explicit settings choose the renderer."""
        json_settings = test_settings.model_copy(update={"log_format": "json"})

        setup_logging(json_settings)

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

        setup_logging(test_settings.model_copy(update={"log_format": "console"}))
        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_log_context_binds_and_unbinds(self):
        """log_context binds variables only inside the block."""
        with log_context(test_case="premium_app"):
            assert structlog.contextvars.get_contextvars()["test_case"] == "premium_app"
        assert "test_case" not in structlog.contextvars.get_contextvars()
