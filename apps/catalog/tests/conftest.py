import pytest
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.catalog.models import Service, PricingMode

User = get_user_model()


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def staff_user(db):
    """Create and return a store staff user."""
    return User.objects.create_user(
        username='counter',
        password='TestPass123!',
    )


@pytest.fixture
def authenticated_client(api_client, staff_user):
    """Return API client authenticated as staff."""
    refresh = RefreshToken.for_user(staff_user)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def wash_service(db):
    """Per-piece service."""
    return Service.objects.create(
        name='Shirt wash',
        price=Decimal('2.50'),
        pricing_mode=PricingMode.PER_UNIT,
    )


@pytest.fixture
def carpet_service(db):
    """Per-square-meter service."""
    return Service.objects.create(
        name='Carpet cleaning',
        price=Decimal('3.00'),
        pricing_mode=PricingMode.PER_AREA,
    )
