"""
Unit tests for the tiered pricing calculator.

Covers every pricing model, half-up rounding and degenerate configurations.
"""

import math
import pytest

from packages.metering.engine.tiered_pricing import (
    calculate_tiered_amount,
    round_minor_units,
)
from packages.metering.models.domain.enums import PricingModel
from packages.metering.models.domain.pricing import PricingTier
from tests.factories.usage_factory import UsageFactory


class TestRoundMinorUnits:
    """Tests for half-up rounding."""

    def test_rounds_halves_up(self):
        """Test that .5 always rounds up, unlike banker's rounding."""
        assert round_minor_units(2.5) == 3
        assert round_minor_units(4.5) == 5
        assert round_minor_units(0.5) == 1

    def test_rounds_to_nearest(self):
        """Test ordinary rounding below and above the midpoint."""
        assert round_minor_units(7.49) == 7
        assert round_minor_units(7.51) == 8
        assert round_minor_units(0) == 0


class TestPerUnitPricing:
    """Tests for per_unit pricing."""

    @pytest.mark.parametrize(
        "quantity,unit_amount",
        [(0, 10), (7, 3), (1000, 25), (0.5, 5), (12.345, 100), (3, 0)],
    )
    def test_amount_is_rounded_product(self, quantity, unit_amount):
        """Test that amount == round(quantity * unit_amount)."""
        price = UsageFactory.create_price(PricingModel.PER_UNIT, unit_amount=unit_amount)

        result = calculate_tiered_amount(quantity, price)

        assert result.amount == round_minor_units(quantity * unit_amount)

    def test_fractional_product_rounds_half_up(self):
        """Test that 0.5 units at 5 costs 3, not 2."""
        price = UsageFactory.create_price(PricingModel.PER_UNIT, unit_amount=5)

        assert calculate_tiered_amount(0.5, price).amount == 3

    def test_single_default_breakdown_line(self):
        """Test the breakdown is one unbounded tier-0 line."""
        price = UsageFactory.create_price(PricingModel.PER_UNIT, unit_amount=3)

        result = calculate_tiered_amount(7, price)

        assert len(result.breakdown) == 1
        item = result.breakdown[0]
        assert item.tier_index == 0
        assert item.quantity == 7
        assert item.unit_price == 3
        assert item.amount == 21
        assert item.from_unit == 0
        assert item.to_unit is None

    def test_missing_unit_amount_charges_nothing(self):
        """Test that a per_unit price without unit_amount prices at 0."""
        price = UsageFactory.create_price(PricingModel.PER_UNIT)

        assert calculate_tiered_amount(50, price).amount == 0


class TestFlatFeePricing:
    """Tests for flat_fee pricing."""

    @pytest.mark.parametrize("quantity", [0, 1, 999, 12.5])
    def test_quantity_is_ignored(self, quantity):
        """Test that a flat fee with tiers charges unit_amount whatever the quantity."""
        price = UsageFactory.create_price(
            PricingModel.FLAT_FEE,
            tiers=[PricingTier(up_to=None, unit_amount=7)],
            unit_amount=500,
        )

        result = calculate_tiered_amount(quantity, price)

        assert result.amount == 500
        assert result.breakdown[0].tier_index == 0

    def test_without_tiers_falls_back_to_unit_pricing(self):
        """Test that a tier-less flat fee is priced per unit like any tier-less price."""
        price = UsageFactory.create_price(PricingModel.FLAT_FEE, unit_amount=500)

        result = calculate_tiered_amount(3, price)

        assert result.amount == 1500
        assert len(result.breakdown) == 1
        assert result.breakdown[0].quantity == 3


class TestNoTiersFallback:
    """Tests for tier-driven models configured without tiers."""

    @pytest.mark.parametrize(
        "model",
        [PricingModel.TIERED_GRADUATED, PricingModel.TIERED_VOLUME, PricingModel.PACKAGE],
    )
    def test_empty_tiers_fall_back_to_unit_amount(self, model):
        """Test that missing tiers price the quantity at unit_amount."""
        price = UsageFactory.create_price(model, tiers=[], unit_amount=4)

        result = calculate_tiered_amount(10, price)

        assert result.amount == 40
        assert len(result.breakdown) == 1
        assert result.breakdown[0].from_unit == 0
        assert result.breakdown[0].to_unit is None

    def test_no_tiers_and_no_unit_amount(self):
        """Test that nothing to price against yields a zero amount."""
        price = UsageFactory.create_price(PricingModel.TIERED_GRADUATED)

        assert calculate_tiered_amount(10, price).amount == 0


class TestGraduatedPricing:
    """Tests for tiered_graduated pricing."""

    def test_spans_two_tiers(self, graduated_price):
        """Test 350 units: 100 at 10 plus 250 at 5."""
        result = calculate_tiered_amount(350, graduated_price)

        assert result.amount == 2250
        assert len(result.breakdown) == 2

        first, second = result.breakdown
        assert (first.tier_index, first.quantity, first.amount) == (0, 100, 1000)
        assert (first.from_unit, first.to_unit) == (0, 100)
        assert (second.tier_index, second.quantity, second.amount) == (1, 250, 1250)
        assert (second.from_unit, second.to_unit) == (100, None)

    def test_within_first_tier(self, graduated_price):
        """Test that a quantity inside the first band only uses tier 0."""
        result = calculate_tiered_amount(50, graduated_price)

        assert result.amount == 500
        assert [item.tier_index for item in result.breakdown] == [0]

    def test_exact_tier_boundary(self, graduated_price):
        """Test that up_to is inclusive: 100 units stay in tier 0."""
        result = calculate_tiered_amount(100, graduated_price)

        assert result.amount == 1000
        assert len(result.breakdown) == 1

    def test_zero_quantity(self, graduated_price):
        """Test that zero units produce no breakdown lines."""
        result = calculate_tiered_amount(0, graduated_price)

        assert result.amount == 0
        assert result.breakdown == []

    @pytest.mark.parametrize("quantity", [1, 99, 100, 101, 350, 1000, 12345, 0.75, 100.5])
    def test_breakdown_conserves_amount_and_quantity(self, graduated_price, quantity):
        """Test that breakdown amounts and quantities sum to the totals."""
        result = calculate_tiered_amount(quantity, graduated_price)

        assert sum(item.amount for item in result.breakdown) == result.amount
        assert math.isclose(sum(item.quantity for item in result.breakdown), quantity)

    def test_flat_amount_only_for_used_tiers(self):
        """Test that a tier's flat amount applies only when units land in it."""
        price = UsageFactory.create_price(
            PricingModel.TIERED_GRADUATED,
            tiers=[
                PricingTier(up_to=10, unit_amount=0, flat_amount=500),
                PricingTier(up_to=None, unit_amount=2, flat_amount=100),
            ],
        )

        assert calculate_tiered_amount(10, price).amount == 500
        assert calculate_tiered_amount(15, price).amount == 610

    def test_rounds_each_tier_separately(self):
        """Test that 1.5 + 1.5 units round to 2 + 2, not to a rounded 3."""
        price = UsageFactory.create_price(
            PricingModel.TIERED_GRADUATED,
            tiers=[
                PricingTier(up_to=1.5, unit_amount=1),
                PricingTier(up_to=None, unit_amount=1),
            ],
        )

        result = calculate_tiered_amount(3, price)

        assert [item.amount for item in result.breakdown] == [2, 2]
        assert result.amount == 4

    def test_bounded_last_tier_leaves_excess_unpriced(self):
        """Test that units beyond the last bounded tier are not charged."""
        price = UsageFactory.create_price(
            PricingModel.TIERED_GRADUATED,
            tiers=[PricingTier(up_to=10, unit_amount=1)],
        )

        result = calculate_tiered_amount(25, price)

        assert result.amount == 10
        assert result.breakdown[0].quantity == 10


class TestVolumePricing:
    """Tests for tiered_volume pricing."""

    @pytest.mark.parametrize(
        "quantity,tier_index,amount",
        [
            (0, 0, 0),
            (50, 0, 500),
            (100, 0, 1000),
            (101, 1, 808),
            (1000, 1, 8000),
            (5000, 2, 25000),
        ],
    )
    def test_whole_quantity_priced_at_reached_tier(
        self, volume_price, quantity, tier_index, amount
    ):
        """Test that every unit is priced at the tier the total falls into."""
        result = calculate_tiered_amount(quantity, volume_price)

        assert result.amount == amount
        assert len(result.breakdown) == 1
        assert result.breakdown[0].tier_index == tier_index
        assert result.breakdown[0].quantity == quantity

    @pytest.mark.parametrize("quantity", [1, 100, 101, 999, 1000, 1001, 250000])
    def test_breakdown_brackets_quantity(self, volume_price, quantity):
        """Test that from_unit < quantity <= to_unit for the chosen tier."""
        item = calculate_tiered_amount(quantity, volume_price).breakdown[0]

        assert item.from_unit < quantity
        assert item.to_unit is None or quantity <= item.to_unit

    def test_from_unit_is_previous_tier_bound(self, volume_price):
        """Test that the range starts at the previous tier's up_to."""
        item = calculate_tiered_amount(500, volume_price).breakdown[0]

        assert item.from_unit == 100
        assert item.to_unit == 1000

    def test_flat_amount_added(self):
        """Test that the reached tier's flat amount is added once."""
        price = UsageFactory.create_price(
            PricingModel.TIERED_VOLUME,
            tiers=[
                PricingTier(up_to=10, unit_amount=5, flat_amount=100),
                PricingTier(up_to=None, unit_amount=4, flat_amount=50),
            ],
        )

        assert calculate_tiered_amount(10, price).amount == 150
        assert calculate_tiered_amount(20, price).amount == 130

    def test_quantity_beyond_bounded_tiers_uses_last_tier(self):
        """Test the fallback to the last tier when no tier contains the quantity."""
        price = UsageFactory.create_price(
            PricingModel.TIERED_VOLUME,
            tiers=[
                PricingTier(up_to=10, unit_amount=5),
                PricingTier(up_to=20, unit_amount=4),
            ],
        )

        result = calculate_tiered_amount(50, price)

        assert result.amount == 200
        assert result.breakdown[0].tier_index == 1


class TestPackagePricing:
    """Tests for package pricing."""

    @pytest.mark.parametrize(
        "quantity,packages",
        [(0, 0), (1, 1), (99, 1), (100, 1), (101, 2), (250, 3), (1000, 10)],
    )
    def test_rounds_packages_up(self, package_price, quantity, packages):
        """Test that amount == ceil(quantity / size) * package price."""
        result = calculate_tiered_amount(quantity, package_price)

        assert result.amount == packages * 1000
        assert len(result.breakdown) == 1
        assert result.breakdown[0].quantity == packages
        assert result.breakdown[0].unit_price == 1000

    def test_monotonic_in_quantity(self, package_price):
        """Test that more usage never costs less."""
        amounts = [calculate_tiered_amount(q, package_price).amount for q in range(0, 1001)]

        assert amounts == sorted(amounts)

    def test_unit_amount_used_without_flat_amount(self):
        """Test that unit_amount is the package price when flat_amount is unset."""
        price = UsageFactory.create_price(
            PricingModel.PACKAGE,
            tiers=[PricingTier(up_to=10, unit_amount=50)],
        )

        assert calculate_tiered_amount(25, price).amount == 150

    @pytest.mark.parametrize("up_to", [None, 0])
    def test_missing_package_size_charges_nothing(self, up_to):
        """Test that a package tier without a size degrades to a zero result."""
        price = UsageFactory.create_price(
            PricingModel.PACKAGE,
            tiers=[PricingTier(up_to=up_to, unit_amount=0, flat_amount=1000)],
        )

        result = calculate_tiered_amount(500, price)

        assert result.amount == 0
        assert result.breakdown == []


class TestIdempotence:
    """Tests that calculations have no hidden state."""

    def test_repeated_calls_are_identical(self, graduated_price):
        """Test that the same inputs give equal outputs and leave the price untouched."""
        before = graduated_price.model_dump()

        first = calculate_tiered_amount(350, graduated_price)
        second = calculate_tiered_amount(350, graduated_price)

        assert first == second
        assert first.model_dump() == second.model_dump()
        assert graduated_price.model_dump() == before
