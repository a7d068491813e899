"""
Pricing engine.
===============

Pure functions that turn line items into amounts. Inputs may be model
instances (``OrderLineItem``, ``Service``) or JSON-like dicts with the same
field names, so the analytics layer can price snapshot records directly.

Amounts are ``Decimal`` end to end and only truncated for display.
"""

import re
from decimal import Decimal, ROUND_DOWN, InvalidOperation

from .exceptions import InvalidQuantityError


# Money and measurement columns are DecimalField(max_digits=10, decimal_places=2)
DECIMAL_PATTERN = re.compile(r'^\d{1,8}(\.\d{1,2})?$')

# Order.total is DecimalField(max_digits=18, decimal_places=6)
TOTAL_MAX_DIGITS = 18
TOTAL_DECIMAL_PLACES = 6

PER_UNIT = 'perUnit'
PER_AREA = 'perArea'


def _value(source, name, default=None):
    if isinstance(source, dict):
        return source.get(name, default)
    return getattr(source, name, default)


def is_decimal(value) -> bool:
    """
    True when ``value`` reads as a non-negative number with at most 2
    decimals and at most 8 integer digits.
    """
    if value is None or isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        value = format(value, 'f')
    return bool(DECIMAL_PATTERN.match(str(value)))


def fits_total(value) -> bool:
    """True when ``value`` can be stored as an order total."""
    return Decimal(str(value)) < Decimal(10) ** (TOTAL_MAX_DIGITS - TOTAL_DECIMAL_PLACES)


def _measurement(line_item, field) -> Decimal:
    value = _value(line_item, field)
    if not is_decimal(value):
        raise InvalidQuantityError(field, value)
    return Decimal(str(value))


def _price(source, field) -> Decimal:
    value = _value(source, field)
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidQuantityError(field, value)


def line_item_total(line_item, service=None) -> Decimal:
    """
    Price a single line item.

    Args:
        line_item: Line item with ``quantity`` or ``length``/``width``
        service: Catalog entry supplying ``price`` and ``pricing_mode``.
            When omitted the line item's own ``unit_price`` and
            ``pricing_mode`` snapshot is used.

    Returns:
        ``length * width * price`` for perArea, ``quantity * price`` for perUnit

    Raises:
        InvalidQuantityError: If a measurement or the price is not a valid decimal
    """
    if service is None:
        price = _price(line_item, 'unit_price')
        mode = _value(line_item, 'pricing_mode')
    else:
        price = _price(service, 'price')
        mode = _value(service, 'pricing_mode')

    if mode == PER_AREA:
        return _measurement(line_item, 'length') * _measurement(line_item, 'width') * price
    if mode == PER_UNIT:
        return _measurement(line_item, 'quantity') * price
    raise InvalidQuantityError('pricing_mode', mode)


def order_line_items(order):
    items = _value(order, 'line_items') or []
    if hasattr(items, 'all'):
        items = items.all()
    return list(items)


def order_total(order) -> Decimal:
    """
    Sum the snapshot-priced line items of an order.

    Raises:
        InvalidQuantityError: With ``index`` set to the first invalid line item
    """
    total = Decimal('0')
    for index, line_item in enumerate(order_line_items(order)):
        try:
            total += line_item_total(line_item)
        except InvalidQuantityError as e:
            raise e.at_index(index)
    return total


def format_amount(value) -> str:
    """Display form of an amount: truncated to a whole number."""
    return str(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_DOWN))
