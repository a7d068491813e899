"""
Bucketing Module
================

Pure functions that turn order and cost records into chart series.

Records are the JSON-like dicts returned by ``gateway.snapshot()``:

* orders: ``order_date`` (date), ``line_items`` (snapshot line items)
* costs: ``date`` (date), ``price`` (Decimal), ``category`` (str)

Nothing here touches the database, so every function can be called with
hand-built records.

Functions:
    build_buckets: Date windows and labels for a period.
    bucket: Revenue, expense, profit and cancelled series for a period.
    category_breakdown: Share of each category in a total.
    today_summary: Delivered / cancelled / expense figures for one day.
    audit: Archived orders and costs in a date range with their sums.

Example:
    Weekly chart around a reference date::

        from apps.analytics.buckets import bucket

        result = bucket(orders, costs, 'week', date(2024, 3, 13))
        result['labels']               # ['Sun', 'Mon', ..., 'Sat']
        result['series']['revenue']    # [Decimal('10'), Decimal('0'), ...]
"""

import calendar
import zlib
from collections import OrderedDict
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from apps.orders.pricing import line_item_total, order_line_items, order_total

from .exceptions import InvalidDateRangeError, InvalidPeriodError


PERIODS = ('day', 'week', 'month', 'trimester', 'year')

WEEKDAY_LABELS = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')
MONTH_LABELS = (
    'Jan', 'Feb', 'Mar', 'Apr', 'May', 'Jun',
    'Jul', 'Aug', 'Sep', 'Oct', 'Nov', 'Dec',
)

PALETTE = (
    '#4CAF50', '#FF9800', '#F44336', '#03A9F4',
    '#9C27B0', '#FFC107', '#009688', '#E91E63',
)

SERIES = ('revenue', 'expenses', 'profit', 'cancelled')

ZERO = Decimal('0')
HUNDRED = Decimal('100')
CENT = Decimal('0.01')


# =============================================================================
# Date windows
# =============================================================================

def _as_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return None


def _week_buckets(reference):
    start = reference - timedelta(days=(reference.weekday() + 1) % 7)
    return [
        (WEEKDAY_LABELS[i], start + timedelta(days=i), start + timedelta(days=i))
        for i in range(7)
    ]


def _month_buckets(reference):
    last_day = calendar.monthrange(reference.year, reference.month)[1]
    buckets = []
    for day in range(1, last_day + 1):
        current = reference.replace(day=day)
        if day % 7 == 0 or day == last_day:
            label = f'Week {(day + 6) // 7}'
        else:
            label = ''
        buckets.append((label, current, current))
    return buckets


def _trimester_buckets(reference):
    first_month = ((reference.month - 1) // 3) * 3 + 1
    start = date(reference.year, first_month, 1)
    last_month = first_month + 2
    end = date(reference.year, last_month, calendar.monthrange(reference.year, last_month)[1])

    buckets = []
    window_start = start
    while window_start <= end:
        window_end = min(window_start + timedelta(days=6), end)
        label = MONTH_LABELS[window_start.month - 1] if window_start.day <= 7 else ''
        buckets.append((label, window_start, window_end))
        window_start = window_end + timedelta(days=1)
    return buckets


def _year_buckets(reference):
    return [
        (
            MONTH_LABELS[month - 1],
            date(reference.year, month, 1),
            date(reference.year, month, calendar.monthrange(reference.year, month)[1]),
        )
        for month in range(1, 13)
    ]


def build_buckets(period, reference_date):
    """
    Ordered ``(label, start, end)`` windows for a period, ends inclusive.

    Args:
        period (str): One of ``day``, ``week``, ``month``, ``trimester``, ``year``.
        reference_date (date): Any day inside the wanted period.

    Returns:
        list[tuple[str, date, date]]: Buckets in chronological order.

    Raises:
        InvalidPeriodError: If ``period`` is not a known period.

    Note:
        Weeks start on Sunday. Month labels read ``Week N`` on every 7th
        day and on the last day of the month. Trimester windows are 7 days
        from the first day of the 3-month block, the last one clipped to
        the block end, labelled with the month when they start in its
        first week.
    """
    reference = _as_date(reference_date)
    if period == 'day':
        return [(reference.isoformat(), reference, reference)]
    if period == 'week':
        return _week_buckets(reference)
    if period == 'month':
        return _month_buckets(reference)
    if period == 'trimester':
        return _trimester_buckets(reference)
    if period == 'year':
        return _year_buckets(reference)
    raise InvalidPeriodError(
        f"Invalid period: '{period}'. Valid options: {', '.join(PERIODS)}"
    )


def _bucket_index(buckets, day):
    for index, (_label, start, end) in enumerate(buckets):
        if start <= day <= end:
            return index
    return None


# =============================================================================
# Aggregation
# =============================================================================

def _order_date(order):
    return _as_date(order.get('order_date') or order.get('created_at'))


def _sum_into(buckets, records, date_of, amount_of):
    values = [ZERO] * len(buckets)
    for record in records:
        day = date_of(record)
        if day is None:
            continue
        index = _bucket_index(buckets, day)
        if index is not None:
            values[index] += amount_of(record)
    return values


def _in_range(day, start, end):
    return day is not None and start <= day <= end


def palette_color(category):
    """Deterministic chart color for a category name."""
    return PALETTE[zlib.crc32(str(category).encode('utf-8')) % len(PALETTE)]


def category_breakdown(totals_by_category):
    """
    Share of each category in the grand total.

    Args:
        totals_by_category (dict): Category name -> Decimal total.

    Returns:
        list[dict]: One entry per category, largest first, with keys
        ``category``, ``total``, ``percentage`` (Decimal, 2 places) and
        ``color``.

    Note:
        A zero grand total gives 0 for every percentage. Percentages are
        rounded half-up independently, so they sum to 100 within rounding.
    """
    grand_total = sum(totals_by_category.values(), ZERO)
    breakdown = []
    for category, total in totals_by_category.items():
        if grand_total:
            percentage = (total / grand_total * HUNDRED).quantize(CENT, rounding=ROUND_HALF_UP)
        else:
            percentage = ZERO.quantize(CENT)
        breakdown.append({
            'category': category,
            'total': total,
            'percentage': percentage,
            'color': palette_color(category),
        })
    breakdown.sort(key=lambda entry: (-entry['total'], str(entry['category'])))
    return breakdown


def _revenue_by_service(orders):
    totals = OrderedDict()
    for order in orders:
        for line_item in order_line_items(order):
            name = line_item.get('service_name') or 'Unknown'
            totals[name] = totals.get(name, ZERO) + line_item_total(line_item)
    return totals


def _expenses_by_category(costs):
    totals = OrderedDict()
    for cost in costs:
        category = cost.get('category') or 'Other'
        totals[category] = totals.get(category, ZERO) + Decimal(str(cost['price']))
    return totals


def bucket(orders, costs, period, reference_date, cancelled_orders=()):
    """
    Chart series for one period.

    Args:
        orders (iterable[dict]): Revenue orders (delivered and, if wanted,
            still active ones).
        costs (iterable[dict]): Cost records.
        period (str): Bucketing period, see ``build_buckets``.
        reference_date (date): Day selecting the period.
        cancelled_orders (iterable[dict]): Deleted orders, reported as a
            separate series and never counted as revenue.

    Returns:
        dict: A dictionary containing:
            - period (str), start (date), end (date)
            - labels (list[str])
            - series (dict): revenue, expenses, profit, cancelled lists
            - non_negative (dict): per series, True when no value is below 0
            - totals (dict): per series sum over the period
            - category_breakdown (dict): revenue by service and expenses by
              category, restricted to the period

    Raises:
        InvalidPeriodError: If ``period`` is unknown.
        InvalidQuantityError: If an order carries an invalid line item.
    """
    buckets = build_buckets(period, reference_date)
    period_start, period_end = buckets[0][1], buckets[-1][2]

    orders = list(orders)
    costs = list(costs)
    cancelled_orders = list(cancelled_orders)

    revenue = _sum_into(buckets, orders, _order_date, order_total)
    expenses = _sum_into(
        buckets, costs,
        lambda cost: _as_date(cost.get('date')),
        lambda cost: Decimal(str(cost['price'])),
    )
    cancelled = _sum_into(buckets, cancelled_orders, _order_date, order_total)
    profit = [r - e for r, e in zip(revenue, expenses)]

    series = {
        'revenue': revenue,
        'expenses': expenses,
        'profit': profit,
        'cancelled': cancelled,
    }

    period_orders = [o for o in orders if _in_range(_order_date(o), period_start, period_end)]
    period_costs = [
        c for c in costs if _in_range(_as_date(c.get('date')), period_start, period_end)
    ]

    return {
        'period': period,
        'start': period_start,
        'end': period_end,
        'labels': [label for label, _start, _end in buckets],
        'series': series,
        'non_negative': {name: all(v >= 0 for v in values) for name, values in series.items()},
        'totals': {name: sum(values, ZERO) for name, values in series.items()},
        'category_breakdown': {
            'revenue': category_breakdown(_revenue_by_service(period_orders)),
            'expenses': category_breakdown(_expenses_by_category(period_costs)),
        },
    }


# =============================================================================
# Summaries
# =============================================================================

def _frozen_total(order):
    total = order.get('total')
    if total is None:
        return order_total(order)
    return Decimal(str(total))


def today_summary(delivered, deleted, costs, today):
    """
    Figures for a single day.

    Args:
        delivered (iterable[dict]): Delivered order records.
        deleted (iterable[dict]): Cancelled order records.
        costs (iterable[dict]): Cost records.
        today (date): The day to summarize.

    Returns:
        dict: ``date``, ``delivered_count``, ``delivered_revenue``,
        ``deleted_count``, ``deleted_revenue``, ``expenses`` and
        ``net_profit`` (delivered revenue minus expenses).
    """
    day = _as_date(today)
    delivered_today = [o for o in delivered if _order_date(o) == day]
    deleted_today = [o for o in deleted if _order_date(o) == day]
    expenses = sum(
        (Decimal(str(c['price'])) for c in costs if _as_date(c.get('date')) == day),
        ZERO,
    )
    delivered_revenue = sum((_frozen_total(o) for o in delivered_today), ZERO)

    return {
        'date': day,
        'delivered_count': len(delivered_today),
        'delivered_revenue': delivered_revenue,
        'deleted_count': len(deleted_today),
        'deleted_revenue': sum((_frozen_total(o) for o in deleted_today), ZERO),
        'expenses': expenses,
        'net_profit': delivered_revenue - expenses,
    }


def audit(delivered, deleted, costs, start, end):
    """
    Archived orders and costs inside an inclusive date range.

    Returns:
        dict: ``start``, ``end``, the three filtered record lists (oldest
        first) and their sums: ``delivered_total``, ``deleted_total``,
        ``expenses_total`` and ``net`` (delivered minus expenses).

    Raises:
        InvalidDateRangeError: If ``start`` is after ``end``.
    """
    start, end = _as_date(start), _as_date(end)
    if start > end:
        raise InvalidDateRangeError("Start date must be before end date")

    def _orders_between(records):
        selected = [o for o in records if _in_range(_order_date(o), start, end)]
        return sorted(selected, key=_order_date)

    delivered_in_range = _orders_between(delivered)
    deleted_in_range = _orders_between(deleted)
    costs_in_range = sorted(
        (c for c in costs if _in_range(_as_date(c.get('date')), start, end)),
        key=lambda c: _as_date(c.get('date')),
    )

    delivered_total = sum((_frozen_total(o) for o in delivered_in_range), ZERO)
    expenses_total = sum((Decimal(str(c['price'])) for c in costs_in_range), ZERO)

    return {
        'start': start,
        'end': end,
        'delivered': delivered_in_range,
        'deleted': deleted_in_range,
        'costs': costs_in_range,
        'delivered_total': delivered_total,
        'deleted_total': sum((_frozen_total(o) for o in deleted_in_range), ZERO),
        'expenses_total': expenses_total,
        'net': delivered_total - expenses_total,
    }
