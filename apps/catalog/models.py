from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal
import uuid


class PricingMode(models.TextChoices):
    PER_UNIT = 'perUnit', 'Per unit'
    PER_AREA = 'perArea', 'Per square meter'


class Service(models.Model):
    """A priced catalog entry that order line items reference."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200, db_index=True)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    pricing_mode = models.CharField(
        max_length=20,
        choices=PricingMode.choices,
        default=PricingMode.PER_UNIT
    )
    image_ref = models.CharField(max_length=500, blank=True)
    # Storage key of the uploaded image, used for deletion
    image_path = models.CharField(max_length=255, blank=True, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'catalog_services'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.price} {self.get_pricing_mode_display()})"

    def to_record(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'price': self.price,
            'pricing_mode': self.pricing_mode,
            'image_ref': self.image_ref or None,
        }
