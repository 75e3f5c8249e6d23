"""
Library settings.

Settings are plain dataclasses. The basis-point scale is fixed
(``conventions.BP_SCALE``) and is not configurable. Defaults can be overridden with
environment variables prefixed with ``RATESENS_``:

    RATESENS_INTERPOLATION   Default interpolation method (default "linear")
    RATESENS_COMPOUNDING     Default compounding (default "Continuous")
    RATESENS_LOG_LEVEL       Logging level for configure_logging (default "WARNING")
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .conventions import CompoundingConvention


_ENV_PREFIX = "RATESENS_"


def _get_env(environ: Mapping[str, str], key: str, default: str) -> str:
    """Read a prefixed environment variable, falling back to the default when unset or empty."""
    raw = environ.get(_ENV_PREFIX + key)
    if raw is None or raw == "":
        return default
    return raw


@dataclass(frozen=True)
class RiskSettings:
    """
    Defaults used by the risk API.

    Attributes:
        default_method: Interpolation method used when a curve does not name one
        default_compounding: Compounding used when a curve does not name one
        log_level: Level applied by configure_logging
    """
    default_method: str = "linear"
    default_compounding: CompoundingConvention = CompoundingConvention.CONTINUOUS
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "RiskSettings":
        """Build settings from ``RATESENS_*`` environment variables."""
        environ = os.environ if environ is None else environ
        return cls(
            default_method=_get_env(environ, "INTERPOLATION", "linear"),
            default_compounding=CompoundingConvention.from_string(
                _get_env(environ, "COMPOUNDING", "Continuous")
            ),
            log_level=_get_env(environ, "LOG_LEVEL", "WARNING").upper(),
        )


settings = RiskSettings.from_env()


def configure_logging(risk_settings: Optional[RiskSettings] = None) -> None:
    """Install a basic handler on the package logger (for scripts)."""
    risk_settings = risk_settings or settings
    level = getattr(logging, risk_settings.log_level, logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger("ratesens").setLevel(level)


__all__ = [
    "RiskSettings",
    "settings",
    "configure_logging",
]
