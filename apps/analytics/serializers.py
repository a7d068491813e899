"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    BucketQuerySerializer - Validates period and reference date
    TodayQuerySerializer - Validates the summary day
    AuditQuerySerializer - Validates the audit date range

Response Serializers:
    ChartResponseSerializer - Bucketed series with category breakdowns
    TodaySummarySerializer - One day's figures
    AuditResponseSerializer - Archived orders and costs with sums

Amounts are rendered as strings at full precision; display rounding is
left to the client.
"""

from rest_framework import serializers

from .buckets import PERIODS


def amount_field(**kwargs):
    """Decimal rendered as a string without quantizing."""
    return serializers.DecimalField(max_digits=None, decimal_places=None, **kwargs)


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class BucketQuerySerializer(serializers.Serializer):
    """
    Validate query parameters for the chart endpoint.

    Query Parameters:
        period (str): day, week, month, trimester or year
        date (date): Any day inside the wanted period (defaults to today)
        include_active (bool): Count undelivered orders as revenue too
    """

    period = serializers.ChoiceField(choices=PERIODS, default='week')
    date = serializers.DateField(required=False)
    include_active = serializers.BooleanField(required=False, default=False)


class TodayQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


class AuditQuerySerializer(serializers.Serializer):
    """
    Validate the audit date range.

    Query Parameters:
        start_date (date): First day, inclusive
        end_date (date): Last day, inclusive
    """

    start_date = serializers.DateField()
    end_date = serializers.DateField()

    def validate(self, attrs):
        if attrs['start_date'] > attrs['end_date']:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })
        return attrs


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class CategoryShareSerializer(serializers.Serializer):
    category = serializers.CharField()
    total = amount_field()
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2)
    color = serializers.CharField()


class CategoryBreakdownSerializer(serializers.Serializer):
    revenue = CategoryShareSerializer(many=True)
    expenses = CategoryShareSerializer(many=True)


class SeriesSerializer(serializers.Serializer):
    revenue = serializers.ListField(child=amount_field())
    expenses = serializers.ListField(child=amount_field())
    profit = serializers.ListField(child=amount_field())
    cancelled = serializers.ListField(child=amount_field())


class SeriesTotalsSerializer(serializers.Serializer):
    revenue = amount_field()
    expenses = amount_field()
    profit = amount_field()
    cancelled = amount_field()


class SeriesFlagsSerializer(serializers.Serializer):
    revenue = serializers.BooleanField()
    expenses = serializers.BooleanField()
    profit = serializers.BooleanField()
    cancelled = serializers.BooleanField()


class ChartResponseSerializer(serializers.Serializer):
    period = serializers.CharField()
    start = serializers.DateField()
    end = serializers.DateField()
    labels = serializers.ListField(child=serializers.CharField(allow_blank=True))
    series = SeriesSerializer()
    non_negative = SeriesFlagsSerializer()
    totals = SeriesTotalsSerializer()
    category_breakdown = CategoryBreakdownSerializer()


class TodaySummarySerializer(serializers.Serializer):
    date = serializers.DateField()
    delivered_count = serializers.IntegerField()
    delivered_revenue = amount_field()
    deleted_count = serializers.IntegerField()
    deleted_revenue = amount_field()
    expenses = amount_field()
    net_profit = amount_field()


class AuditOrderSerializer(serializers.Serializer):
    id = serializers.CharField()
    customer_name = serializers.CharField()
    customer_phone = serializers.CharField()
    status = serializers.CharField()
    order_date = serializers.DateField()
    closed_at = serializers.DateTimeField(allow_null=True)
    total = amount_field()


class AuditCostSerializer(serializers.Serializer):
    id = serializers.CharField()
    name = serializers.CharField()
    price = amount_field()
    date = serializers.DateField()
    category = serializers.CharField()
    user = serializers.CharField()


class AuditResponseSerializer(serializers.Serializer):
    start = serializers.DateField()
    end = serializers.DateField()
    delivered = AuditOrderSerializer(many=True)
    deleted = AuditOrderSerializer(many=True)
    costs = AuditCostSerializer(many=True)
    delivered_total = amount_field()
    deleted_total = amount_field()
    expenses_total = amount_field()
    net = amount_field()


class ErrorSerializer(serializers.Serializer):
    """Error response."""

    error = serializers.CharField()
