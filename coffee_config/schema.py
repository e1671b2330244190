"""
Configuration schema (``coffee_config.schema``).

Frozen dataclasses produced by ``coffee_config.loader``.  The liquidation
rates themselves are the kernel's ``LiquidationRates`` value object, so the
engines never depend on this package.
"""

from __future__ import annotations

from dataclasses import dataclass

from coffee_kernel.domain.models import Company, ShipmentLot
from coffee_kernel.domain.rates import LiquidationRates


@dataclass(frozen=True)
class CompanyProfile:
    """Per-company settings used on documents and dashboards."""

    company: Company
    display_name: str
    partida_prefix: str = ""

    def partida_reference(self, lot: ShipmentLot) -> str:
        """Full lot number as printed, e.g. "11/988/0123"."""
        return f"{self.partida_prefix}{lot.partida_no}"


@dataclass(frozen=True)
class LiquidationConfig:
    """A parsed configuration file."""

    config_id: str
    version: int
    rates: LiquidationRates
    companies: tuple[CompanyProfile, ...] = ()
    checksum: str = ""

    def profile_for(self, company: Company) -> CompanyProfile | None:
        for profile in self.companies:
            if profile.company == company:
                return profile
        return None
