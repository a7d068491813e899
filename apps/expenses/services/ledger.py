"""
Expense ledger service.

Records, edits and lists costs. Each cost is attributed to the device that
reported it; the first cost from a fresh device also registers its name.
"""

import logging
from datetime import date as date_type
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from apps.expenses.models import Cost, DEFAULT_CATEGORY
from apps.gateway.exceptions import RecordNotFoundError
from apps.gateway.gateway import gateway
from apps.orders.pricing import is_decimal

from .exceptions import (
    ExpenseNotFoundError,
    ExpenseValidationError,
    ReporterNameRequiredError,
)
from .identity import register_identity, resolve_identity


logger = logging.getLogger(__name__)


def _validate_name(name) -> str:
    if name is None or not str(name).strip():
        raise ExpenseValidationError("Expense name is required")
    return str(name).strip()


def _validate_price(price) -> Decimal:
    if not is_decimal(price):
        raise ExpenseValidationError(
            f"Price must be a non-negative number with at most 2 decimals, got {price!r}"
        )
    return Decimal(str(price))


def record_expense(
    *,
    name: str,
    price,
    device_token: str,
    reporter_name: Optional[str] = None,
    category: str = DEFAULT_CATEGORY,
    date: Optional[date_type] = None,
) -> Cost:
    """
    Record a cost attributed to the reporting device.

    Args:
        name: What was paid for
        price: Amount, at most 2 decimals
        device_token: Push token of the reporting device
        reporter_name: Display name; only used when the device is not yet
            registered
        category: Expense category for the breakdown chart
        date: Day of the expense (defaults to today)

    Returns:
        Created Cost instance

    Raises:
        ExpenseValidationError: If name or price is invalid
        MissingDeviceTokenError: If no device token is given
        ReporterNameRequiredError: If the device is fresh and no name is given
    """
    fields = {
        'name': _validate_name(name),
        'price': _validate_price(price),
        'category': (category or '').strip() or DEFAULT_CATEGORY,
        'date': date or timezone.localdate(),
    }

    # A fresh device is only registered together with its first cost
    with transaction.atomic():
        identity = resolve_identity(device_token)
        if identity is None:
            if not reporter_name or not str(reporter_name).strip():
                raise ReporterNameRequiredError(
                    "This device is not registered yet; a reporter name is required"
                )
            identity = register_identity(device_token, reporter_name)

        cost = gateway.write('costs', {
            **fields,
            'reported_by': identity.name,
            'reporter': identity,
        })

    logger.info("Recorded expense %s (%s) by %s", cost.id, cost.price, identity.name)
    return cost


def get_expense(*, expense_id: UUID) -> Cost:
    try:
        return gateway.get(f'costs/{expense_id}')
    except RecordNotFoundError:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")


def update_expense(
    *,
    expense_id: UUID,
    name: Optional[str] = None,
    price=None,
    category: Optional[str] = None,
    date: Optional[date_type] = None,
) -> Cost:
    """
    Partially update a cost. Attribution never changes.

    Raises:
        ExpenseNotFoundError: If cost doesn't exist
        ExpenseValidationError: If a given field is invalid
    """
    fields = {}
    if name is not None:
        fields['name'] = _validate_name(name)
    if price is not None:
        fields['price'] = _validate_price(price)
    if category is not None:
        fields['category'] = category.strip() or DEFAULT_CATEGORY
    if date is not None:
        fields['date'] = date

    if not fields:
        return get_expense(expense_id=expense_id)

    try:
        return gateway.update(f'costs/{expense_id}', fields)
    except RecordNotFoundError:
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")


def delete_expense(*, expense_id: UUID) -> None:
    """
    Raises:
        ExpenseNotFoundError: If cost doesn't exist
    """
    if not gateway.remove(f'costs/{expense_id}'):
        raise ExpenseNotFoundError(f"Expense {expense_id} not found")
    logger.info("Deleted expense %s", expense_id)


def list_expenses(
    *,
    start_date: Optional[date_type] = None,
    end_date: Optional[date_type] = None,
) -> List[Cost]:
    """
    Costs in an inclusive date range, newest first.

    Raises:
        ExpenseValidationError: If start_date is after end_date
    """
    if start_date and end_date and start_date > end_date:
        raise ExpenseValidationError("start_date must not be after end_date")

    queryset = Cost.objects.all()
    if start_date:
        queryset = queryset.filter(date__gte=start_date)
    if end_date:
        queryset = queryset.filter(date__lte=end_date)
    return list(queryset)
