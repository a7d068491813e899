"""
Analytics Module
=================

Read-only queries behind the revenue and expense dashboards.

Each method pulls the current collection snapshots from the gateway and
hands them to the pure functions in ``apps.analytics.buckets``.

Classes:
    AnalyticsQueries: Static methods for chart, daily and audit figures.

Key Features:
    - Revenue / expense / profit series bucketed by day, week, month,
      trimester or year
    - Revenue share by service and expense share by category
    - Today's delivered, cancelled and expense totals
    - Audit listing of archived orders and costs in a date range

Example:
    Getting this week's chart::

        from apps.analytics.analytics import AnalyticsQueries

        chart = AnalyticsQueries.chart(period='week')
        print(chart['labels'])
        print(chart['series']['profit'])

Note:
    Revenue counts delivered orders only unless ``include_active`` is set.
    Cancelled orders are reported as their own series and never add to
    revenue.
"""

from django.utils import timezone

from apps.gateway.gateway import gateway

from . import buckets


class AnalyticsQueries:
    """
    Gateway-backed analytics queries.

    Methods:
        chart: Bucketed series and category breakdowns for a period.
        today: Summary of a single day.
        audit: Archived orders and costs between two dates.

    Note:
        All methods return plain dictionaries, suitable for the response
        serializers in ``apps.analytics.serializers``.
    """

    @staticmethod
    def _records(path):
        return list(gateway.snapshot(path).values())

    @staticmethod
    def chart(period, reference_date=None, include_active=False):
        """
        Revenue, expense, profit and cancelled series for one period.

        Args:
            period (str): ``day``, ``week``, ``month``, ``trimester`` or ``year``.
            reference_date (date, optional): Day selecting the period.
                Defaults to today.
            include_active (bool): Also count orders that are not yet
                delivered as revenue.

        Returns:
            dict: See ``buckets.bucket``.

        Raises:
            InvalidPeriodError: If ``period`` is unknown.
        """
        reference_date = reference_date or timezone.localdate()

        orders = AnalyticsQueries._records('orders/delivered')
        if include_active:
            orders += AnalyticsQueries._records('orders/active')

        return buckets.bucket(
            orders,
            AnalyticsQueries._records('costs'),
            period,
            reference_date,
            cancelled_orders=AnalyticsQueries._records('orders/deleted'),
        )

    @staticmethod
    def today(day=None):
        """
        Delivered and cancelled counts and revenue, expenses and net profit
        for ``day`` (defaults to today).
        """
        return buckets.today_summary(
            AnalyticsQueries._records('orders/delivered'),
            AnalyticsQueries._records('orders/deleted'),
            AnalyticsQueries._records('costs'),
            day or timezone.localdate(),
        )

    @staticmethod
    def audit(start_date, end_date):
        """
        Archived orders and costs between two dates, inclusive.

        Raises:
            InvalidDateRangeError: If ``start_date`` is after ``end_date``.
        """
        return buckets.audit(
            AnalyticsQueries._records('orders/delivered'),
            AnalyticsQueries._records('orders/deleted'),
            AnalyticsQueries._records('costs'),
            start_date,
            end_date,
        )
