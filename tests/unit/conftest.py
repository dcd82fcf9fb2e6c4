import pytest

from packages.metering.models.domain.enums import AggregationType, PricingModel
from packages.metering.models.domain.pricing import PricingTier
from packages.metering.providers.storage.memory_storage import MemoryUsageStorage
from packages.metering.services.usage_service import UsageService
from tests.factories.usage_factory import UsageFactory


@pytest.fixture
def sum_meter():
    """Meter summing event quantities."""
    return UsageFactory.create_meter(AggregationType.SUM)


@pytest.fixture
def graduated_price():
    """First 100 units at 10, the rest at 5."""
    return UsageFactory.create_price(
        PricingModel.TIERED_GRADUATED,
        tiers=[
            PricingTier(up_to=100, unit_amount=10),
            PricingTier(up_to=None, unit_amount=5),
        ],
    )


@pytest.fixture
def volume_price():
    """All units at 10 up to 100, at 8 up to 1,000, at 5 beyond."""
    return UsageFactory.create_price(
        PricingModel.TIERED_VOLUME,
        tiers=[
            PricingTier(up_to=100, unit_amount=10),
            PricingTier(up_to=1000, unit_amount=8),
            PricingTier(up_to=None, unit_amount=5),
        ],
    )


@pytest.fixture
def package_price():
    """1,000 per package of 100 units."""
    return UsageFactory.create_price(
        PricingModel.PACKAGE,
        tiers=[PricingTier(up_to=100, unit_amount=0, flat_amount=1000)],
    )


@pytest.fixture
def memory_storage():
    """Fresh in-memory usage storage."""
    return MemoryUsageStorage()


@pytest.fixture
def usage_service(memory_storage):
    """UsageService backed by fresh in-memory storage."""
    return UsageService(storage=memory_storage)
