import pytest
from decimal import Decimal
from apps.catalog.models import Service, PricingMode
from apps.gateway.gateway import RemoteDataGateway


@pytest.fixture
def store():
    """A private gateway instance with no subscribers."""
    return RemoteDataGateway()


@pytest.fixture
def ironing(db):
    return Service.objects.create(
        name='Ironing',
        price=Decimal('1.20'),
        pricing_mode=PricingMode.PER_UNIT,
    )
