"""
Order entry service.

Validates customer details and line items, prices every line item against
the current catalog and writes the order with its snapshot line items in a
single transaction. An invalid line item blocks the whole order.
"""

import logging
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.catalog.models import PricingMode, Service
from apps.gateway.gateway import gateway
from apps.orders.exceptions import (
    InvalidQuantityError,
    OrderValidationError,
    UnknownServiceError,
)
from apps.orders.models import Order, OrderLineItem, OrderStatus, OrderPartition
from apps.orders.pricing import fits_total, line_item_total


logger = logging.getLogger(__name__)

PHONE_PATTERN = re.compile(r'^\d{10}$')
MAPS_URL = 'https://www.google.com/maps?q={latitude},{longitude}'


def build_location_ref(latitude, longitude) -> str:
    """Map link for a captured position."""
    return MAPS_URL.format(latitude=latitude, longitude=longitude)


def _validate_customer(customer_name, customer_phone, location_ref):
    if not customer_name or not str(customer_name).strip():
        raise OrderValidationError("Customer name is required")
    if not PHONE_PATTERN.match(str(customer_phone or '')):
        raise OrderValidationError("Phone number must be exactly 10 digits")
    if not location_ref or not str(location_ref).strip():
        raise OrderValidationError("Location is required")


def _load_services(line_items) -> Dict[str, Service]:
    service_ids = {str(item.get('service_id')) for item in line_items}
    try:
        services = {
            str(service.id): service
            for service in Service.objects.filter(id__in=service_ids)
        }
    except (ValidationError, ValueError):
        raise UnknownServiceError(f"Invalid service id in: {', '.join(sorted(service_ids))}")
    missing = service_ids - set(services)
    if missing:
        raise UnknownServiceError(f"Unknown service(s): {', '.join(sorted(missing))}")
    return services


def price_line_items(line_items: List[Dict[str, Any]]):
    """
    Price raw line items against the catalog without writing anything.

    Args:
        line_items: Dicts with ``service_id`` and either ``quantity`` or
            ``length`` and ``width``

    Returns:
        Tuple of (list of (line item, service, total), grand total)

    Raises:
        OrderValidationError: If no line items are given or the total is too large
        UnknownServiceError: If a referenced service doesn't exist
        InvalidQuantityError: With ``index`` of the first invalid line item
    """
    if not line_items:
        raise OrderValidationError("An order needs at least one line item")

    services = _load_services(line_items)
    priced = []
    grand_total = Decimal('0')

    for index, item in enumerate(line_items):
        service = services[str(item.get('service_id'))]
        try:
            total = line_item_total(item, service)
        except InvalidQuantityError as e:
            raise e.at_index(index)
        priced.append((item, service, total))
        grand_total += total

    if not fits_total(grand_total):
        raise OrderValidationError(f"Order total {grand_total} is too large")

    return priced, grand_total


def _line_item_fields(item, service) -> Dict[str, Any]:
    fields = {
        'service': service,
        'service_name': service.name,
        'unit_price': service.price,
        'pricing_mode': service.pricing_mode,
        'image_ref': item.get('image_ref') or service.image_ref or '',
    }
    if service.pricing_mode == PricingMode.PER_AREA:
        fields['length'] = Decimal(str(item['length']))
        fields['width'] = Decimal(str(item['width']))
    else:
        fields['quantity'] = Decimal(str(item['quantity']))
    return fields


def create_order(
    *,
    customer_name: str,
    customer_phone: str,
    location_ref: Optional[str] = None,
    line_items: List[Dict[str, Any]],
    latitude=None,
    longitude=None,
) -> Order:
    """
    Create a new active order in status New.

    Args:
        customer_name: Customer display name
        customer_phone: Exactly 10 digits
        location_ref: Map link; built from latitude/longitude when omitted
        line_items: Raw line items (see ``price_line_items``)

    Returns:
        Created Order with its line items

    Raises:
        OrderValidationError: If customer details are missing or invalid
        UnknownServiceError: If a line item references an unknown service
        InvalidQuantityError: If a line item measurement is invalid
        PersistenceError: If the order cannot be written
    """
    if not location_ref and latitude is not None and longitude is not None:
        location_ref = build_location_ref(latitude, longitude)

    _validate_customer(customer_name, customer_phone, location_ref)
    priced, grand_total = price_line_items(line_items)

    def _write():
        with transaction.atomic():
            order = Order.objects.create(
                customer_name=str(customer_name).strip(),
                customer_phone=customer_phone,
                location_ref=location_ref,
                status=OrderStatus.NEW,
                partition=OrderPartition.ACTIVE,
                total=grand_total,
                created_at=timezone.now(),
            )
            OrderLineItem.objects.bulk_create([
                OrderLineItem(order=order, position=position, **_line_item_fields(item, service))
                for position, (item, service, _total) in enumerate(priced)
            ])
            return order

    order = gateway.execute(_write, description='create order')
    logger.info(
        "Created order %s for %s with %d line item(s), total %s",
        order.id, order.customer_name, len(priced), grand_total,
    )
    return order
