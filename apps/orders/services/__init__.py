"""Services for order entry and the order status workflow."""

from apps.orders.exceptions import (
    OrdersServiceError,
    OrderNotFoundError,
    OrderValidationError,
    UnknownServiceError,
    InvalidQuantityError,
    OrderClosedError,
    OrderNotClosedError,
    StaleOrderError,
)
from .order_entry import (
    build_location_ref,
    price_line_items,
    create_order,
)
from .lifecycle import (
    NEXT_STATUS,
    next_status,
    get_order,
    advance_order,
    cancel_order,
    list_active_orders,
    list_archived_orders,
    purge_order,
)

__all__ = [
    # Exceptions
    'OrdersServiceError',
    'OrderNotFoundError',
    'OrderValidationError',
    'UnknownServiceError',
    'InvalidQuantityError',
    'OrderClosedError',
    'OrderNotClosedError',
    'StaleOrderError',
    # Order Entry
    'build_location_ref',
    'price_line_items',
    'create_order',
    # Lifecycle
    'NEXT_STATUS',
    'next_status',
    'get_order',
    'advance_order',
    'cancel_order',
    'list_active_orders',
    'list_archived_orders',
    'purge_order',
]
