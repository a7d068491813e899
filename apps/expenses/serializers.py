from rest_framework import serializers
from .models import Cost, DeviceIdentity, DEFAULT_CATEGORY


# =============================================================================
# Input Serializers
# =============================================================================

class ExpenseCreateSerializer(serializers.Serializer):
    """
    Validate input for recording an expense.

    The device token may also be sent in the ``X-Device-Token`` header.
    """

    name = serializers.CharField(max_length=200)
    price = serializers.CharField(max_length=20)
    category = serializers.CharField(max_length=100, required=False, default=DEFAULT_CATEGORY)
    date = serializers.DateField(required=False)
    device_token = serializers.CharField(max_length=500, required=False)
    reporter_name = serializers.CharField(max_length=100, required=False, allow_blank=True)


class ExpenseUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=200, required=False)
    price = serializers.CharField(max_length=20, required=False)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    date = serializers.DateField(required=False)


class ExpenseFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for expense listing.

    Query Parameters:
        start_date (date): First day, inclusive
        end_date (date): Last day, inclusive
    """

    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        start_date = attrs.get('start_date')
        end_date = attrs.get('end_date')

        if start_date and end_date and start_date > end_date:
            raise serializers.ValidationError({
                'end_date': 'End date must be after start date'
            })

        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class CostSerializer(serializers.ModelSerializer):
    class Meta:
        model = Cost
        fields = [
            'id',
            'name',
            'price',
            'date',
            'category',
            'reported_by',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class DeviceIdentitySerializer(serializers.ModelSerializer):
    registered = serializers.SerializerMethodField()

    class Meta:
        model = DeviceIdentity
        fields = ['key', 'name', 'registered', 'created_at']
        read_only_fields = fields

    def get_registered(self, obj) -> bool:
        return True
