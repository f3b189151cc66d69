"""
Unit tests for library settings.
"""

import logging

import pydantic
import pytest

from curvelib.curves import BootstrapConfig, Discount, ZeroYield
from curvelib.errors import ValidationError
from curvelib.settings import configure_logging, get_settings, reset_settings


@pytest.fixture
def clean_settings(monkeypatch):
    """Settings read from a controlled environment."""
    monkeypatch.delenv("CURVELIB_NEGATIVE_RATES", raising=False)
    monkeypatch.delenv("CURVELIB_DEFAULT_ACCURACY", raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, clean_settings):
        settings = get_settings()
        assert settings.negative_rates
        assert settings.default_accuracy == 1.0e-12
        assert settings.default_solver == "brent"

    def test_cached(self, clean_settings):
        assert get_settings() is get_settings()

    def test_environment_override(self, clean_settings):
        clean_settings.setenv("CURVELIB_NEGATIVE_RATES", "false")
        clean_settings.setenv("CURVELIB_DEFAULT_ACCURACY", "1e-10")
        reset_settings()

        assert not get_settings().negative_rates
        assert not Discount().negative_rates
        assert not ZeroYield().negative_rates
        assert BootstrapConfig().resolved_accuracy() == 1.0e-10

    def test_explicit_trait_setting_wins(self, clean_settings):
        clean_settings.setenv("CURVELIB_NEGATIVE_RATES", "false")
        reset_settings()
        assert Discount(negative_rates=True).negative_rates

    def test_invalid_accuracy(self, clean_settings):
        clean_settings.setenv("CURVELIB_DEFAULT_ACCURACY", "0")
        reset_settings()
        with pytest.raises(pydantic.ValidationError):
            get_settings()


class TestBootstrapConfig:
    """Tests for per-curve numerical settings."""

    def test_explicit_values(self):
        config = BootstrapConfig(accuracy=1e-8, solver="ridder")
        assert config.resolved_accuracy() == 1e-8
        assert config.resolved_solver() == "ridder"

    def test_validation(self):
        with pytest.raises(ValidationError):
            BootstrapConfig(accuracy=0.0)
        with pytest.raises(ValidationError):
            BootstrapConfig(max_iterations=0)
        with pytest.raises(ValidationError):
            BootstrapConfig(bracket_widening_attempts=-1)


class TestLogging:
    """Tests for logger configuration."""

    def test_configure_logging(self):
        logger = logging.getLogger("curvelib")
        previous = logger.level
        try:
            configure_logging("debug")
            assert logger.level == logging.DEBUG
        finally:
            logger.setLevel(previous)
