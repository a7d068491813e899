import pytest
from decimal import Decimal
from django.urls import reverse
from rest_framework import status
from apps.catalog.models import Service, PricingMode
from apps.orders.models import Order, OrderStatus, OrderPartition
from apps.orders.services import advance_order, cancel_order


# =============================================================================
# Order entry
# =============================================================================

@pytest.mark.django_db
class TestOrderCreate:
    """Tests for POST /api/orders/"""

    def test_create_order(self, authenticated_client, order_payload):
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['status'] == 'New'
        assert response.data['next_status'] == 'Waiting'
        assert Decimal(response.data['total']) == Decimal('310')
        assert response.data['display_total'] == '310'
        assert [Decimal(item['total']) for item in response.data['line_items']] == [Decimal('300'), Decimal('10')]

    def test_create_from_coordinates(self, authenticated_client, order_payload):
        del order_payload['location_ref']
        order_payload['latitude'] = 19.43
        order_payload['longitude'] = -99.13
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['location_ref'] == 'https://www.google.com/maps?q=19.43,-99.13'

    def test_invalid_quantity_reports_line_item(self, authenticated_client, order_payload):
        order_payload['line_items'][0]['width'] = '3.333'
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['line_item'] == 0
        assert response.data['field'] == 'width'
        assert not Order.objects.exists()

    def test_oversized_quantity(self, authenticated_client, order_payload):
        order_payload['line_items'][1]['quantity'] = '123456789'
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['line_item'] == 1
        assert response.data['field'] == 'quantity'
        assert not Order.objects.exists()

    def test_total_too_large(self, authenticated_client, order_payload):
        bulky = Service.objects.create(
            name='Industrial rug',
            price=Decimal('99999999.99'),
            pricing_mode=PricingMode.PER_AREA,
        )
        order_payload['line_items'] = [
            {'service_id': str(bulky.id), 'length': '99999999', 'width': '2'},
        ]
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert not Order.objects.exists()

    def test_bad_phone(self, authenticated_client, order_payload):
        order_payload['customer_phone'] = '12345'
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert 'customer_phone' in response.data

    def test_missing_location(self, authenticated_client, order_payload):
        del order_payload['location_ref']
        url = reverse('orders:order-list')
        response = authenticated_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_unauthenticated(self, api_client, order_payload):
        url = reverse('orders:order-list')
        response = api_client.post(url, order_payload, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestQuote:
    """Tests for POST /api/orders/quote/"""

    def test_quote(self, authenticated_client, order_payload):
        url = reverse('orders:order-quote')
        response = authenticated_client.post(
            url, {'line_items': order_payload['line_items']}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data['total']) == Decimal('310')
        assert response.data['display_total'] == '310'
        assert not Order.objects.exists()

    def test_quote_invalid_quantity(self, authenticated_client, shirt_service):
        url = reverse('orders:order-quote')
        response = authenticated_client.post(
            url,
            {'line_items': [{'service_id': str(shirt_service.id), 'quantity': 'x'}]},
            format='json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['line_item'] == 0


# =============================================================================
# Listing
# =============================================================================

@pytest.mark.django_db
class TestOrderList:
    """Tests for GET /api/orders/ and /api/orders/archive/"""

    def test_active_orders(self, authenticated_client, new_order):
        url = reverse('orders:order-list')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert [o['id'] for o in response.data] == [str(new_order.id)]

    def test_status_filter(self, authenticated_client, new_order):
        url = reverse('orders:order-list')

        assert authenticated_client.get(url, {'status': 'Waiting'}).data == []
        assert len(authenticated_client.get(url, {'status': 'New'}).data) == 1

    def test_invalid_status_filter(self, authenticated_client, new_order):
        url = reverse('orders:order-list')
        response = authenticated_client.get(url, {'status': 'Delivered'})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_archive(self, authenticated_client, new_order):
        cancel_order(order_id=new_order.id)
        url = reverse('orders:order-archive')
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data[0]['partition'] == 'deleted'
        assert authenticated_client.get(reverse('orders:order-list')).data == []


# =============================================================================
# Status workflow
# =============================================================================

@pytest.mark.django_db
class TestOrderTransitions:
    """Tests for /api/orders/{id}/advance/ and /cancel/"""

    def test_advance(self, authenticated_client, new_order):
        url = reverse('orders:order-advance', kwargs={'pk': new_order.id})
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Waiting'

    def test_advance_to_delivered(self, authenticated_client, new_order):
        url = reverse('orders:order-advance', kwargs={'pk': new_order.id})
        for _ in range(3):
            response = authenticated_client.post(url)

        assert response.data['status'] == 'Delivered'
        assert response.data['partition'] == 'delivered'
        assert response.data['next_status'] is None

    def test_advance_closed_order_conflicts(self, authenticated_client, new_order):
        cancel_order(order_id=new_order.id)
        url = reverse('orders:order-advance', kwargs={'pk': new_order.id})

        first = authenticated_client.post(url)
        second = authenticated_client.post(url)

        assert first.status_code == status.HTTP_409_CONFLICT
        assert second.status_code == status.HTTP_409_CONFLICT
        assert first.data == second.data

    def test_advance_missing(self, authenticated_client):
        url = reverse('orders:order-advance', kwargs={'pk': '00000000-0000-0000-0000-000000000000'})
        response = authenticated_client.post(url)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_cancel_requires_confirmation(self, authenticated_client, new_order):
        url = reverse('orders:order-cancel', kwargs={'pk': new_order.id})
        response = authenticated_client.post(url, {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert Order.objects.get(pk=new_order.id).status == OrderStatus.NEW

    def test_cancel(self, authenticated_client, new_order):
        url = reverse('orders:order-cancel', kwargs={'pk': new_order.id})
        response = authenticated_client.post(url, {'confirm': True}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'Deleted'
        assert Order.objects.get(pk=new_order.id).partition == OrderPartition.DELETED


# =============================================================================
# Detail and purge
# =============================================================================

@pytest.mark.django_db
class TestOrderDetail:
    """Tests for GET/DELETE /api/orders/{id}/"""

    def test_retrieve(self, authenticated_client, new_order):
        url = reverse('orders:order-detail', kwargs={'pk': new_order.id})
        response = authenticated_client.get(url)

        assert response.status_code == status.HTTP_200_OK
        assert response.data['customer_name'] == 'Maria Lopez'
        assert len(response.data['line_items']) == 2

    def test_purge_active_order_conflicts(self, authenticated_client, new_order):
        url = reverse('orders:order-detail', kwargs={'pk': new_order.id})
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_purge_delivered_order(self, authenticated_client, new_order):
        for _ in range(3):
            advance_order(order_id=new_order.id)
        url = reverse('orders:order-detail', kwargs={'pk': new_order.id})
        response = authenticated_client.delete(url)

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Order.objects.filter(pk=new_order.id).exists()


@pytest.mark.django_db
def test_amounts_carry_store_currency(authenticated_client, new_order, settings):
    settings.STORE_CURRENCY = 'MXN'
    url = reverse('orders:order-detail', kwargs={'pk': new_order.id})

    assert authenticated_client.get(url).data['currency'] == 'MXN'
