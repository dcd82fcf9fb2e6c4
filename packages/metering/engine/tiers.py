"""Builders for common tier layouts."""

from typing import Iterable

from packages.metering.models.domain.pricing import PricingTier, TierSpec


def create_graduated_tiers(specs: Iterable[TierSpec]) -> list[PricingTier]:
    """Build graduated tiers, e.g. first 1,000 units at 10, the rest at 5."""
    return [
        PricingTier(up_to=spec.up_to, unit_amount=spec.price_per_unit, flat_amount=None)
        for spec in specs
    ]


def create_volume_tiers(specs: Iterable[TierSpec]) -> list[PricingTier]:
    """Build volume tiers; the layout is the same, only the pricing model differs."""
    return create_graduated_tiers(specs)


def create_package_pricing(package_size: float, package_price: int) -> list[PricingTier]:
    """Build the single tier package pricing reads, e.g. 1,000 units for 1,000."""
    return [PricingTier(up_to=package_size, unit_amount=0, flat_amount=package_price)]
