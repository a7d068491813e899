"""
Domain exceptions for analytics app.

These exceptions represent invalid analytics requests, separate from HTTP
concerns.

Exception Hierarchy:
    AnalyticsServiceError (base)
    ├── InvalidPeriodError
    └── InvalidDateRangeError

Usage:
    from apps.analytics.exceptions import InvalidPeriodError

    if period not in PERIODS:
        raise InvalidPeriodError(f"Invalid period: {period}")
"""


class AnalyticsServiceError(Exception):
    """
    Base exception for all analytics service errors.

    Views can catch every analytics error at once:

        try:
            data = AnalyticsQueries.chart(period='fortnight')
        except AnalyticsServiceError as e:
            return Response({'error': str(e)}, status=400)
    """

    pass


class InvalidPeriodError(AnalyticsServiceError):
    """
    Raised when a bucketing period is unknown.

    Valid periods are: day, week, month, trimester, year.
    """

    pass


class InvalidDateRangeError(AnalyticsServiceError):
    """
    Raised when date range is invalid.

    Typically when start_date is after end_date.
    """

    pass
