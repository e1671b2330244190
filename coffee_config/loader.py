"""
Configuration Loader (``coffee_config.loader``).

Responsibility
--------------
Loads the liquidation YAML file and parses it into the frozen dataclasses
of ``coffee_config.schema``.  Runtime callers go through
``coffee_config.get_active_config()``; this module is the parsing layer
underneath it.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass.
* Money and rate values are read as Decimal from their string form.
* Missing keys and invalid values raise ``ConfigurationError`` naming the
  offending key; there are no silent defaults for required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash for
  configuration identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing or invalid keys  -> ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from coffee_config.schema import CompanyProfile, LiquidationConfig
from coffee_kernel.domain.models import Company
from coffee_kernel.domain.rates import LiquidationRates
from coffee_kernel.exceptions import ConfigurationError

_RATE_KEYS = (
    "kg_per_quintal",
    "tax_rate",
    "license_fee_per_quintal",
    "phytosanitary_cost",
    "overpayment_tax_rate",
)

_CONCEPT_KEYS = {
    "tax": "tax_concept",
    "license_fee": "license_fee_concept",
    "phytosanitary": "phytosanitary_concept",
}


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_decimal(key: str, value: Any) -> Decimal:
    """
    Parse a Decimal from YAML (string, int or float).

    Raises:
        ConfigurationError: if ``value`` is missing or not a finite number.
    """
    if value is None or isinstance(value, bool):
        raise ConfigurationError(key, "a number is required")
    try:
        result = Decimal(str(value))
    except InvalidOperation as e:
        raise ConfigurationError(key, f"{value!r} is not a number") from e
    if not result.is_finite():
        raise ConfigurationError(key, f"{value!r} is not a finite number")
    return result


def parse_rates(data: dict[str, Any], concepts: dict[str, Any] | None = None) -> LiquidationRates:
    """Parse ``LiquidationRates`` from the ``rates`` and ``concepts`` sections."""
    kwargs: dict[str, Any] = {}
    for key in _RATE_KEYS:
        if key not in data:
            raise ConfigurationError(f"rates.{key}", "missing")
        kwargs[key] = parse_decimal(f"rates.{key}", data[key])

    for yaml_key, field_name in _CONCEPT_KEYS.items():
        label = (concepts or {}).get(yaml_key)
        if label is not None:
            kwargs[field_name] = str(label)

    try:
        return LiquidationRates(**kwargs)
    except ValueError as e:
        raise ConfigurationError("rates", str(e)) from e


def parse_company(data: dict[str, Any]) -> CompanyProfile:
    """Parse a ``CompanyProfile`` from a dict."""
    raw = data.get("company")
    try:
        company = Company(raw)
    except ValueError as e:
        raise ConfigurationError("companies.company", f"unknown company {raw!r}") from e
    return CompanyProfile(
        company=company,
        display_name=str(data.get("display_name") or company.value.title()),
        partida_prefix=str(data.get("partida_prefix") or ""),
    )


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of the raw configuration mapping."""
    payload = json.dumps(data, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()


def _parse_version(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    raise ConfigurationError("version", f"{value!r} is not an integer")


def parse_config(data: dict[str, Any]) -> LiquidationConfig:
    """
    Parse a whole configuration mapping.

    Raises:
        ConfigurationError: if the ``rates`` section is missing or invalid, or
            ``version`` is not an integer.
    """
    rates_data = data.get("rates")
    if not isinstance(rates_data, dict):
        raise ConfigurationError("rates", "section missing")

    return LiquidationConfig(
        config_id=str(data.get("config_id", "coffee-liquidation")),
        version=_parse_version(data.get("version", 1)),
        rates=parse_rates(rates_data, data.get("concepts")),
        companies=tuple(parse_company(c) for c in data.get("companies", ())),
        checksum=compute_checksum(data),
    )


def load_config(path: Path) -> LiquidationConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(path))
