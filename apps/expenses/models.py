from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal
import uuid


DEFAULT_CATEGORY = 'Other'


class DeviceIdentity(models.Model):
    """Display name registered for a staff device, keyed by its push token."""

    key = models.CharField(max_length=255, unique=True)
    name = models.CharField(max_length=100)
    full_token = models.CharField(max_length=500)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'device_identities'
        verbose_name_plural = 'device identities'

    def __str__(self):
        return self.name

    def to_record(self):
        return {
            'name': self.name,
            'full_token': self.full_token,
        }


class Cost(models.Model):
    """A recorded business expense."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=200)
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    date = models.DateField(default=timezone.localdate, db_index=True)
    category = models.CharField(max_length=100, default=DEFAULT_CATEGORY)
    reported_by = models.CharField(max_length=100)
    reporter = models.ForeignKey(
        DeviceIdentity,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='costs'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'costs'
        ordering = ['-date', '-created_at']

    def __str__(self):
        return f"{self.name} - {self.price} ({self.date})"

    def to_record(self):
        return {
            'id': str(self.id),
            'name': self.name,
            'price': self.price,
            'date': self.date,
            'category': self.category,
            'user': self.reported_by,
        }
