import pytest
from datetime import date
from decimal import Decimal

from apps.analytics.buckets import (
    PALETTE,
    audit,
    bucket,
    build_buckets,
    category_breakdown,
    palette_color,
    today_summary,
)
from apps.analytics.exceptions import InvalidDateRangeError, InvalidPeriodError
from apps.orders.exceptions import InvalidQuantityError


def order_record(day, amount, service_name='Wash'):
    """Snapshot-style order record worth ``amount`` on ``day``."""
    return {
        'order_date': day,
        'total': Decimal(amount),
        'line_items': [{
            'service_name': service_name,
            'unit_price': Decimal(amount),
            'pricing_mode': 'perUnit',
            'quantity': Decimal('1'),
        }],
    }


def cost_record(day, price, category='Other'):
    return {'date': day, 'price': Decimal(price), 'category': category, 'user': 'Rosa'}


def _amounts(values):
    return [Decimal(v) for v in values]


# =============================================================================
# Date windows
# =============================================================================

class TestBuildBuckets:

    def test_day(self):
        buckets = build_buckets('day', date(2024, 3, 13))

        assert buckets == [('2024-03-13', date(2024, 3, 13), date(2024, 3, 13))]

    def test_week_starts_on_sunday(self):
        buckets = build_buckets('week', date(2024, 3, 13))

        assert [label for label, _s, _e in buckets] == ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
        assert buckets[0][1] == date(2024, 3, 10)
        assert buckets[-1][2] == date(2024, 3, 16)

    def test_week_of_a_sunday_starts_that_day(self):
        assert build_buckets('week', date(2024, 3, 10))[0][1] == date(2024, 3, 10)

    def test_month_labels(self):
        buckets = build_buckets('month', date(2024, 3, 13))

        assert len(buckets) == 31
        labelled = {start.day: label for label, start, _e in buckets if label}
        assert labelled == {
            7: 'Week 1', 14: 'Week 2', 21: 'Week 3', 28: 'Week 4', 31: 'Week 5',
        }

    def test_february_leap_year(self):
        buckets = build_buckets('month', date(2024, 2, 2))

        assert len(buckets) == 29
        assert buckets[-1][0] == 'Week 5'

    def test_trimester_windows(self):
        buckets = build_buckets('trimester', date(2024, 3, 13))

        assert len(buckets) == 13
        assert buckets[0][1:] == (date(2024, 1, 1), date(2024, 1, 7))
        assert buckets[-1][2] == date(2024, 3, 31)
        assert [label for label, _s, _e in buckets] == [
            'Jan', '', '', '', '', 'Feb', '', '', '', 'Mar', '', '', '',
        ]

    def test_trimester_last_window_is_clipped(self):
        buckets = build_buckets('trimester', date(2024, 8, 1))

        assert len(buckets) == 14
        assert buckets[-1][1:] == (date(2024, 9, 30), date(2024, 9, 30))

    def test_year(self):
        buckets = build_buckets('year', date(2024, 6, 1))

        assert [label for label, _s, _e in buckets][:3] == ['Jan', 'Feb', 'Mar']
        assert len(buckets) == 12
        assert buckets[1][2] == date(2024, 2, 29)

    def test_invalid_period(self):
        with pytest.raises(InvalidPeriodError):
            build_buckets('fortnight', date(2024, 3, 13))


# =============================================================================
# Series
# =============================================================================

class TestBucket:

    def test_week_revenue(self):
        orders = [
            order_record(date(2024, 3, 10), '10'),
            order_record(date(2024, 3, 13), '20'),
            order_record(date(2024, 3, 16), '5'),
        ]

        result = bucket(orders, [], 'week', date(2024, 3, 13))

        assert result['labels'] == ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']
        assert result['series']['revenue'] == _amounts([10, 0, 0, 20, 0, 0, 5])
        assert result['totals']['revenue'] == Decimal('35')

    def test_orders_outside_period_are_ignored(self):
        orders = [order_record(date(2024, 3, 9), '10'), order_record(date(2024, 3, 17), '10')]

        result = bucket(orders, [], 'week', date(2024, 3, 13))

        assert result['totals']['revenue'] == Decimal('0')
        assert result['category_breakdown']['revenue'] == []

    def test_profit_and_flags(self):
        orders = [order_record(date(2024, 3, 11), '30')]
        costs = [cost_record(date(2024, 3, 11), '10'), cost_record(date(2024, 3, 12), '25')]

        result = bucket(orders, costs, 'week', date(2024, 3, 13))

        assert result['series']['profit'] == _amounts([0, 20, -25, 0, 0, 0, 0])
        assert result['non_negative'] == {
            'revenue': True, 'expenses': True, 'profit': False, 'cancelled': True,
        }
        assert result['totals']['profit'] == Decimal('-5')

    def test_cancelled_orders_are_not_revenue(self):
        cancelled = [order_record(date(2024, 3, 13), '15')]

        result = bucket([], [], 'week', date(2024, 3, 13), cancelled_orders=cancelled)

        assert result['totals']['revenue'] == Decimal('0')
        assert result['series']['cancelled'] == _amounts([0, 0, 0, 15, 0, 0, 0])

    def test_year_sums_by_month(self):
        orders = [order_record(date(2024, 2, 1), '10'), order_record(date(2024, 2, 29), '5')]

        result = bucket(orders, [], 'year', date(2024, 7, 4))

        assert result['series']['revenue'][1] == Decimal('15')
        assert result['start'] == date(2024, 1, 1)
        assert result['end'] == date(2024, 12, 31)

    def test_priced_from_line_item_snapshot(self):
        order = order_record(date(2024, 3, 13), '0')
        order['line_items'] = [{
            'service_name': 'Carpet',
            'unit_price': Decimal('50'),
            'pricing_mode': 'perArea',
            'length': Decimal('2'),
            'width': Decimal('1.5'),
        }]

        result = bucket([order], [], 'day', date(2024, 3, 13))

        assert result['series']['revenue'] == [Decimal('150')]

    def test_invalid_line_item(self):
        order = order_record(date(2024, 3, 13), '10')
        order['line_items'][0]['quantity'] = 'lots'

        with pytest.raises(InvalidQuantityError):
            bucket([order], [], 'week', date(2024, 3, 13))

    def test_breakdowns_restricted_to_period(self):
        orders = [
            order_record(date(2024, 3, 11), '30', service_name='Ironing'),
            order_record(date(2024, 3, 12), '10', service_name='Wash'),
            order_record(date(2024, 1, 2), '99', service_name='Duvet'),
        ]
        costs = [cost_record(date(2024, 3, 12), '8', category='Supplies')]

        result = bucket(orders, costs, 'week', date(2024, 3, 13))
        revenue = result['category_breakdown']['revenue']

        assert [entry['category'] for entry in revenue] == ['Ironing', 'Wash']
        assert [entry['percentage'] for entry in revenue] == [Decimal('75.00'), Decimal('25.00')]
        assert result['category_breakdown']['expenses'][0]['category'] == 'Supplies'


# =============================================================================
# Category breakdown
# =============================================================================

class TestCategoryBreakdown:

    def test_percentages_sum_to_hundred(self):
        breakdown = category_breakdown({
            'Supplies': Decimal('1'),
            'Utilities': Decimal('1'),
            'Rent': Decimal('1'),
        })

        total = sum(entry['percentage'] for entry in breakdown)
        assert abs(total - Decimal('100')) <= Decimal('0.03')
        assert all(entry['percentage'] == Decimal('33.33') for entry in breakdown)

    def test_zero_total(self):
        breakdown = category_breakdown({'Supplies': Decimal('0'), 'Rent': Decimal('0')})

        assert [entry['percentage'] for entry in breakdown] == [Decimal('0'), Decimal('0')]

    def test_largest_first(self):
        breakdown = category_breakdown({'Small': Decimal('1'), 'Large': Decimal('9')})

        assert [entry['category'] for entry in breakdown] == ['Large', 'Small']

    def test_color_is_deterministic(self):
        assert palette_color('Supplies') == palette_color('Supplies')
        assert palette_color('Supplies') in PALETTE

        breakdown = category_breakdown({'Supplies': Decimal('5')})
        assert breakdown[0]['color'] == palette_color('Supplies')


# =============================================================================
# Summaries
# =============================================================================

class TestTodaySummary:

    def test_counts_only_the_day(self):
        day = date(2024, 3, 13)
        summary = today_summary(
            delivered=[order_record(day, '30'), order_record(day, '20'), order_record(date(2024, 3, 12), '99')],
            deleted=[order_record(day, '15')],
            costs=[cost_record(day, '12.50'), cost_record(date(2024, 3, 14), '7')],
            today=day,
        )

        assert summary['delivered_count'] == 2
        assert summary['delivered_revenue'] == Decimal('50')
        assert summary['deleted_count'] == 1
        assert summary['deleted_revenue'] == Decimal('15')
        assert summary['expenses'] == Decimal('12.50')
        assert summary['net_profit'] == Decimal('37.50')

    def test_empty_day(self):
        summary = today_summary([], [], [], date(2024, 3, 13))

        assert summary['delivered_count'] == 0
        assert summary['net_profit'] == Decimal('0')


class TestAudit:

    def test_filters_and_sums(self):
        result = audit(
            delivered=[order_record(date(2024, 3, 5), '40'), order_record(date(2024, 3, 1), '10')],
            deleted=[order_record(date(2024, 2, 28), '99')],
            costs=[cost_record(date(2024, 3, 2), '15')],
            start=date(2024, 3, 1),
            end=date(2024, 3, 31),
        )

        assert [o['order_date'] for o in result['delivered']] == [date(2024, 3, 1), date(2024, 3, 5)]
        assert result['deleted'] == []
        assert result['delivered_total'] == Decimal('50')
        assert result['expenses_total'] == Decimal('15')
        assert result['net'] == Decimal('35')

    def test_reversed_range(self):
        with pytest.raises(InvalidDateRangeError):
            audit([], [], [], date(2024, 3, 31), date(2024, 3, 1))
