from rest_framework import serializers
from .models import Service, PricingMode


class ServiceSerializer(serializers.ModelSerializer):
    """Read serializer for catalog entries."""

    class Meta:
        model = Service
        fields = [
            'id',
            'name',
            'price',
            'pricing_mode',
            'image_ref',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields


class ServiceWriteSerializer(serializers.Serializer):
    """
    Input for creating or updating a catalog entry.

    Price is taken as text so the two-decimal rule is enforced by the
    service layer rather than silently rounded.
    """

    name = serializers.CharField(max_length=200)
    price = serializers.CharField(max_length=20)
    pricing_mode = serializers.ChoiceField(
        choices=PricingMode.choices,
        default=PricingMode.PER_UNIT
    )
    image = serializers.FileField(required=False)
