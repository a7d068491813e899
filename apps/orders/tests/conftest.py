import pytest
from decimal import Decimal
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.catalog.models import Service, PricingMode
from apps.orders.services import create_order

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
def carpet_service(db):
    """Per-square-meter service at 50 per m2."""
    return Service.objects.create(
        name='Carpet cleaning',
        price=Decimal('50.00'),
        pricing_mode=PricingMode.PER_AREA,
    )


@pytest.fixture
def shirt_service(db):
    """Per-piece service at 2.50."""
    return Service.objects.create(
        name='Shirt wash',
        price=Decimal('2.50'),
        pricing_mode=PricingMode.PER_UNIT,
    )


@pytest.fixture
def order_payload(carpet_service, shirt_service):
    """Valid order input: 2x3 carpet + 4 shirts."""
    return {
        'customer_name': 'Maria Lopez',
        'customer_phone': '5512345678',
        'location_ref': 'https://www.google.com/maps?q=19.43,-99.13',
        'line_items': [
            {'service_id': str(carpet_service.id), 'length': '2', 'width': '3'},
            {'service_id': str(shirt_service.id), 'quantity': '4'},
        ],
    }


@pytest.fixture
def new_order(order_payload):
    """Active order in status New, total 310."""
    return create_order(**order_payload)
