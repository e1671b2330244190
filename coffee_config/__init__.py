"""
coffee_config -- single public entrypoint for liquidation configuration.

Responsibility:
    Provides the ONLY way to obtain liquidation rates and company profiles
    at runtime through ``get_active_config()`` (and the ``get_active_rates`` and
    ``get_company_profiles`` shortcuts).  YAML loading lives in
    ``coffee_config.loader``.

Architecture position:
    Configuration -- YAML-driven, sits above ``coffee_kernel`` and below
    ``coffee_services``.  The kernel and the engines MUST NEVER import
    from ``coffee_config``; the parsed ``LiquidationRates`` is handed to
    the engines as a parameter.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``yaml.YAMLError`` -- the file is not valid YAML.
    - ``ConfigurationError`` -- a required key is missing or invalid.

Audit relevance:
    Every successful ``get_active_config()`` call emits a
    ``COFFEE_CONFIG_TRACE`` log entry with the config id, version and
    checksum, tying each liquidation back to the rates that governed it.
"""

from __future__ import annotations

from pathlib import Path

from coffee_config.loader import load_config
from coffee_config.schema import CompanyProfile, LiquidationConfig
from coffee_kernel.domain.models import Company
from coffee_kernel.domain.rates import LiquidationRates
from coffee_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults" / "liquidation.yaml"


def get_active_config(config_path: Path | None = None) -> LiquidationConfig:
    """
    The ONLY public configuration entrypoint.

    Args:
        config_path: Override path to the YAML file. Defaults to
            coffee_config/defaults/liquidation.yaml.

    Returns:
        The parsed, frozen ``LiquidationConfig``.  Not cached: callers
        hold the returned object for as long as they need it.
    """
    path = config_path or DEFAULT_CONFIG_PATH
    config = load_config(path)

    _logger.info(
        "COFFEE_CONFIG_TRACE",
        extra={
            "trace_type": "COFFEE_CONFIG_TRACE",
            "config_id": config.config_id,
            "config_version": config.version,
            "checksum": config.checksum,
            "company_count": len(config.companies),
            "source": str(path),
        },
    )
    return config


def get_active_rates(config_path: Path | None = None) -> LiquidationRates:
    """Shortcut for ``get_active_config(config_path).rates``."""
    return get_active_config(config_path).rates


def get_company_profiles(config_path: Path | None = None) -> dict[Company, CompanyProfile]:
    """Company profiles keyed by company."""
    return {profile.company: profile for profile in get_active_config(config_path).companies}


__all__ = [
    "CompanyProfile",
    "DEFAULT_CONFIG_PATH",
    "LiquidationConfig",
    "get_active_config",
    "get_active_rates",
    "get_company_profiles",
]
