import pytest
from datetime import date
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.expenses.models import Cost, DeviceIdentity

User = get_user_model()

DEVICE_TOKEN = 'ExponentPushToken[xYz123]'


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
def device_token():
    return DEVICE_TOKEN


@pytest.fixture
def known_device(db):
    """Device that already reported an expense."""
    return DeviceIdentity.objects.create(
        key='xYz123',
        name='Rosa',
        full_token=DEVICE_TOKEN,
    )


@pytest.fixture
def march_costs(known_device):
    """Three costs across March 2024."""
    return [
        Cost.objects.create(
            name=name,
            price=Decimal(price),
            date=day,
            category=category,
            reported_by=known_device.name,
            reporter=known_device,
        )
        for name, price, day, category in [
            ('Detergent', '12.00', date(2024, 3, 1), 'Supplies'),
            ('Electricity', '40.50', date(2024, 3, 15), 'Utilities'),
            ('Hangers', '5.25', date(2024, 3, 31), 'Supplies'),
        ]
    ]
