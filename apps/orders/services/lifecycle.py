r"""
Order lifecycle service.
========================

Status workflow::

    New -> Waiting -> Ready -> Delivered
      \________\________\____-> Deleted   (cancel)

Non-terminal steps change ``status`` on the active record. Reaching
Delivered or Deleted is a terminal move: the order leaves the active
partition together with its frozen total and close timestamp.

Every write is a compare-and-swap on the expected status and partition, so
a duplicate or concurrent request can never move an order twice. Observers
are notified through the gateway after commit.
"""

import logging
from typing import List, Optional
from uuid import UUID

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from apps.gateway.gateway import gateway
from apps.orders.exceptions import (
    OrderClosedError,
    OrderNotClosedError,
    OrderNotFoundError,
    OrderValidationError,
    StaleOrderError,
)
from apps.orders.models import ACTIVE_STATUSES, Order, OrderPartition, OrderStatus
from apps.orders.pricing import order_total


logger = logging.getLogger(__name__)


NEXT_STATUS = {
    OrderStatus.NEW: OrderStatus.WAITING,
    OrderStatus.WAITING: OrderStatus.READY,
    OrderStatus.READY: OrderStatus.DELIVERED,
}

TERMINAL_PARTITIONS = {
    OrderStatus.DELIVERED: OrderPartition.DELIVERED,
    OrderStatus.DELETED: OrderPartition.DELETED,
}


def next_status(status: str) -> str:
    """
    Successor of ``status`` in the workflow.

    Raises:
        OrderClosedError: If ``status`` is Delivered or Deleted
        OrderValidationError: If ``status`` is not a known status
    """
    if status in TERMINAL_PARTITIONS:
        raise OrderClosedError(f"Order is already {status}")
    try:
        return NEXT_STATUS[status]
    except KeyError:
        raise OrderValidationError(f"Unknown order status '{status}'")


def get_order(*, order_id: UUID) -> Order:
    try:
        return Order.objects.prefetch_related('line_items').get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFoundError(f"Order {order_id} not found")


def _lock_order(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise OrderNotFoundError(f"Order {order_id} not found")


def _compare_and_set(order: Order, **changes) -> bool:
    """Apply ``changes`` only if the row still has the status we read."""
    updated = Order.objects.filter(
        pk=order.pk,
        status=order.status,
        partition=OrderPartition.ACTIVE,
    ).update(updated_at=timezone.now(), **changes)
    return updated == 1


def _reject_stale(order_id) -> None:
    current = Order.objects.filter(pk=order_id).values_list('partition', 'status').first()
    if current and current[0] != OrderPartition.ACTIVE:
        logger.info("Rejected duplicate move of order %s, already %s", order_id, current[1])
        raise OrderClosedError(f"Order is already {current[1]}")
    raise StaleOrderError(f"Order {order_id} changed concurrently, reload and retry")


def _transition(order_id, target_for) -> Order:
    """
    Move an active order to ``target_for(current_status)``.

    Runs as one transaction under a row lock; the final write is a
    compare-and-swap so the move happens at most once.
    """
    def _move():
        with transaction.atomic():
            order = _lock_order(order_id)
            if order.is_closed:
                raise OrderClosedError(f"Order is already {order.status}")

            target = target_for(order.status)
            changes = {'status': target}

            if target in TERMINAL_PARTITIONS:
                changes['partition'] = TERMINAL_PARTITIONS[target]
                changes['total'] = order_total(order)
                changes['closed_at'] = timezone.now()

            if not _compare_and_set(order, **changes):
                _reject_stale(order_id)

            gateway.notify_changed(Order)
            return order.status, target

    previous, target = gateway.execute(_move, description=f'move order {order_id}')
    if target in TERMINAL_PARTITIONS:
        logger.info("Order %s moved %s -> %s (closed)", order_id, previous, target)
    else:
        logger.info("Order %s status %s -> %s", order_id, previous, target)
    return get_order(order_id=order_id)


def advance_order(*, order_id: UUID) -> Order:
    """
    Advance an active order one step along the workflow.

    Ready -> Delivered moves the order to the delivered partition.

    Raises:
        OrderNotFoundError: If order doesn't exist
        OrderClosedError: If the order is already delivered or deleted
        StaleOrderError: If the status changed while advancing
    """
    return _transition(order_id, next_status)


def cancel_order(*, order_id: UUID) -> Order:
    """
    Cancel an active order, moving it to the deleted partition.

    Callers are expected to have confirmed the cancellation with staff.

    Raises:
        OrderNotFoundError: If order doesn't exist
        OrderClosedError: If the order is already delivered or deleted
    """
    return _transition(order_id, lambda status: OrderStatus.DELETED)


def list_active_orders(*, status: Optional[str] = None) -> List[Order]:
    """
    Active orders, oldest first, optionally narrowed to one status.

    Raises:
        OrderValidationError: If ``status`` is not an active status
    """
    queryset = Order.objects.filter(partition=OrderPartition.ACTIVE)
    if status:
        if status not in ACTIVE_STATUSES:
            raise OrderValidationError(
                f"Status filter must be one of {', '.join(ACTIVE_STATUSES)}"
            )
        queryset = queryset.filter(status=status)
    return list(queryset.prefetch_related('line_items').order_by('created_at'))


def list_archived_orders(*, partition: Optional[str] = None) -> List[Order]:
    """Delivered and deleted orders, most recently closed first."""
    partitions = [OrderPartition.DELIVERED, OrderPartition.DELETED]
    if partition:
        if partition not in partitions:
            raise OrderValidationError("Archive partition must be delivered or deleted")
        partitions = [partition]
    return list(
        Order.objects.filter(partition__in=partitions)
        .prefetch_related('line_items')
        .order_by('-closed_at', '-created_at')
    )


def purge_order(*, order_id: UUID) -> None:
    """
    Permanently delete an archived order.

    Raises:
        OrderNotFoundError: If order doesn't exist
        OrderNotClosedError: If the order is still active
    """
    def _purge():
        with transaction.atomic():
            order = _lock_order(order_id)
            if not order.is_closed:
                raise OrderNotClosedError(
                    f"Order {order_id} is still {order.status}; only archived orders can be purged"
                )
            order.delete()

    gateway.execute(_purge, description=f'purge order {order_id}')
    logger.info("Purged order %s", order_id)
