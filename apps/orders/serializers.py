from django.conf import settings
from rest_framework import serializers
from .models import Order, OrderLineItem, OrderStatus, OrderPartition, ACTIVE_STATUSES
from .pricing import line_item_total, format_amount
from .services.lifecycle import NEXT_STATUS


# =============================================================================
# Input Serializers
# =============================================================================

class LineItemInputSerializer(serializers.Serializer):
    """
    A line item as entered by staff.

    Measurements are taken as text; the pricing engine enforces the
    two-decimal rule and reports the offending line item.
    """

    service_id = serializers.UUIDField()
    quantity = serializers.CharField(max_length=20, required=False, allow_null=True)
    length = serializers.CharField(max_length=20, required=False, allow_null=True)
    width = serializers.CharField(max_length=20, required=False, allow_null=True)
    image_ref = serializers.CharField(max_length=500, required=False, allow_blank=True)


class OrderCreateSerializer(serializers.Serializer):
    """
    Validate input for creating an order.

    Either ``location_ref`` or both ``latitude`` and ``longitude`` must be given.
    """

    customer_name = serializers.CharField(max_length=200)
    customer_phone = serializers.RegexField(
        regex=r'^\d{10}$',
        error_messages={'invalid': 'Phone number must be exactly 10 digits.'}
    )
    location_ref = serializers.CharField(max_length=500, required=False, allow_blank=True)
    latitude = serializers.FloatField(required=False, min_value=-90, max_value=90)
    longitude = serializers.FloatField(required=False, min_value=-180, max_value=180)
    line_items = LineItemInputSerializer(many=True, allow_empty=False)

    def validate(self, attrs):
        has_coordinates = 'latitude' in attrs and 'longitude' in attrs
        if not attrs.get('location_ref') and not has_coordinates:
            raise serializers.ValidationError({
                'location_ref': 'Location is required'
            })
        return attrs


class QuoteInputSerializer(serializers.Serializer):
    line_items = LineItemInputSerializer(many=True, allow_empty=False)


class OrderFilterSerializer(serializers.Serializer):
    """Query parameters for the active order list."""

    status = serializers.ChoiceField(
        choices=[(s.value, s.label) for s in ACTIVE_STATUSES],
        required=False
    )


class ArchiveFilterSerializer(serializers.Serializer):
    """Query parameters for the archive list."""

    partition = serializers.ChoiceField(
        choices=[OrderPartition.DELIVERED, OrderPartition.DELETED],
        required=False
    )


class CancelInputSerializer(serializers.Serializer):
    confirm = serializers.BooleanField(default=False)


# =============================================================================
# Output Serializers
# =============================================================================

class OrderLineItemSerializer(serializers.ModelSerializer):
    total = serializers.SerializerMethodField()

    class Meta:
        model = OrderLineItem
        fields = [
            'position',
            'service',
            'service_name',
            'unit_price',
            'pricing_mode',
            'quantity',
            'length',
            'width',
            'image_ref',
            'total',
        ]
        read_only_fields = fields

    def get_total(self, obj) -> str:
        return str(line_item_total(obj))


class OrderSerializer(serializers.ModelSerializer):
    line_items = OrderLineItemSerializer(many=True, read_only=True)
    display_total = serializers.SerializerMethodField()
    currency = serializers.SerializerMethodField()
    next_status = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            'id',
            'customer_name',
            'customer_phone',
            'location_ref',
            'status',
            'partition',
            'next_status',
            'line_items',
            'total',
            'display_total',
            'currency',
            'created_at',
            'closed_at',
        ]
        read_only_fields = fields

    def get_display_total(self, obj) -> str:
        return format_amount(obj.total)

    def get_currency(self, obj) -> str:
        return settings.STORE_CURRENCY

    def get_next_status(self, obj):
        return NEXT_STATUS.get(obj.status)


class QuotedLineItemSerializer(serializers.Serializer):
    service_id = serializers.UUIDField()
    service_name = serializers.CharField()
    pricing_mode = serializers.CharField()
    total = serializers.DecimalField(max_digits=18, decimal_places=6)


class QuoteSerializer(serializers.Serializer):
    line_items = QuotedLineItemSerializer(many=True)
    total = serializers.DecimalField(max_digits=18, decimal_places=6)
    display_total = serializers.CharField()
    currency = serializers.CharField()
