import pytest
from datetime import datetime, date, time
from decimal import Decimal
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.catalog.models import Service, PricingMode
from apps.expenses.models import Cost
from apps.orders.models import Order
from apps.orders.services import create_order, advance_order, cancel_order

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


# =============================================================================
# Stored orders and costs
# =============================================================================

@pytest.fixture
def wash_service(db):
    return Service.objects.create(
        name='Wash and fold',
        price=Decimal('10.00'),
        pricing_mode=PricingMode.PER_UNIT,
    )


@pytest.fixture
def make_order(wash_service):
    """
    Factory for stored orders dated ``day``.

    ``close`` is ``'deliver'``, ``'cancel'`` or None to leave it active.
    """
    def _make(day, quantity='3', close='deliver'):
        order = create_order(
            customer_name='Maria Lopez',
            customer_phone='5512345678',
            location_ref='https://www.google.com/maps?q=19.43,-99.13',
            line_items=[{'service_id': str(wash_service.id), 'quantity': quantity}],
        )
        created_at = timezone.make_aware(datetime.combine(day, time(12, 0)))
        Order.objects.filter(pk=order.pk).update(created_at=created_at)
        if close == 'deliver':
            for _ in range(3):
                advance_order(order_id=order.id)
        elif close == 'cancel':
            cancel_order(order_id=order.id)
        return Order.objects.get(pk=order.pk)

    return _make


@pytest.fixture
def march_week(make_order):
    """
    Week of Sun 2024-03-10 to Sat 2024-03-16.

    Delivered 30 on Sunday and 20 on Wednesday, 10 cancelled on Wednesday,
    an active 50 on Tuesday and a 40 expense on Saturday.
    """
    make_order(date(2024, 3, 10), quantity='3')
    make_order(date(2024, 3, 13), quantity='2')
    make_order(date(2024, 3, 13), quantity='1', close='cancel')
    make_order(date(2024, 3, 12), quantity='5', close=None)
    Cost.objects.create(
        name='Detergent',
        price=Decimal('40.00'),
        date=date(2024, 3, 16),
        category='Supplies',
        reported_by='Rosa',
    )
