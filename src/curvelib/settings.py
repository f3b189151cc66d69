"""
Library-wide configuration.

Settings are read from environment variables prefixed with ``CURVELIB_``
(or a local ``.env`` file). They control behaviour that applies to every
curve built in the process, such as whether the curve traits allow
negative rates.

Per-curve numerical settings (accuracy, solver, iteration budget) live in
:class:`curvelib.curves.bootstrap.BootstrapConfig` instead.
"""

import logging
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CurveLibSettings(BaseSettings):
    """Process-wide settings."""

    model_config = SettingsConfigDict(
        env_prefix="CURVELIB_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Traits search brackets
    negative_rates: bool = Field(True, description="Allow negative rates in curve trait brackets")

    # Bootstrap defaults
    default_accuracy: float = Field(1.0e-12, gt=0.0, description="Bootstrap accuracy when none is configured")
    default_solver: str = Field("brent", description="1-D root solver used by the bootstrap")

    # Logging
    log_level: str = Field("WARNING", description="Level of the curvelib logger")


@lru_cache(maxsize=1)
def get_settings() -> CurveLibSettings:
    """Get the cached library settings."""
    return CurveLibSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    get_settings.cache_clear()


def configure_logging(level: str = None) -> None:
    """
    Set the level of the package logger.

    The library never installs handlers; applications decide where records go.
    """
    logging.getLogger("curvelib").setLevel((level or get_settings().log_level).upper())


__all__ = [
    "CurveLibSettings",
    "get_settings",
    "reset_settings",
    "configure_logging",
]
