from django.db import models
from django.core.validators import MinValueValidator, RegexValidator
from django.utils import timezone
from decimal import Decimal
import uuid


class OrderStatus(models.TextChoices):
    NEW = 'New', 'New'
    WAITING = 'Waiting', 'Waiting'
    READY = 'Ready', 'Ready'
    DELIVERED = 'Delivered', 'Delivered'
    DELETED = 'Deleted', 'Deleted'


class OrderPartition(models.TextChoices):
    ACTIVE = 'active', 'Active'
    DELIVERED = 'delivered', 'Delivered'
    DELETED = 'deleted', 'Deleted'


ACTIVE_STATUSES = (OrderStatus.NEW, OrderStatus.WAITING, OrderStatus.READY)

phone_validator = RegexValidator(
    regex=r'^\d{10}$',
    message='Phone number must be exactly 10 digits.'
)


class Order(models.Model):
    """
    A customer order.

    Exactly one row per order; ``partition`` tells which collection the
    order belongs to and always agrees with ``status``.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    customer_name = models.CharField(max_length=200)
    customer_phone = models.CharField(max_length=10, validators=[phone_validator])
    location_ref = models.CharField(max_length=500)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.NEW
    )
    partition = models.CharField(
        max_length=20,
        choices=OrderPartition.choices,
        default=OrderPartition.ACTIVE,
        db_index=True
    )
    total = models.DecimalField(
        max_digits=18,
        decimal_places=6,
        default=Decimal('0'),
        validators=[MinValueValidator(Decimal('0'))]
    )
    created_at = models.DateTimeField(default=timezone.now)
    closed_at = models.DateTimeField(null=True, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'orders'
        ordering = ['created_at']
        indexes = [
            models.Index(fields=['partition', 'created_at'], name='orders_partition_created_idx'),
            models.Index(fields=['status'], name='orders_status_idx'),
        ]

    def __str__(self):
        return f"{self.customer_name} - {self.status}"

    @property
    def is_closed(self):
        return self.partition != OrderPartition.ACTIVE

    def to_record(self):
        return {
            'id': str(self.id),
            'customer_name': self.customer_name,
            'customer_phone': self.customer_phone,
            'location_ref': self.location_ref,
            'line_items': [item.to_record() for item in self.line_items.all()],
            'status': self.status,
            'created_at': self.created_at,
            'order_date': timezone.localdate(self.created_at),
            'closed_at': self.closed_at,
            'total': self.total,
        }


class OrderLineItem(models.Model):
    """
    One priced entry of an order.

    Service name, unit price and pricing mode are copied from the catalog
    when the order is created, so later catalog edits or deletions never
    change the order's value.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='line_items')
    position = models.PositiveIntegerField()
    service = models.ForeignKey(
        'catalog.Service',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='line_items'
    )
    service_name = models.CharField(max_length=200)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    pricing_mode = models.CharField(max_length=20)
    quantity = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    length = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    width = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    image_ref = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = 'order_line_items'
        ordering = ['position']
        unique_together = [['order', 'position']]

    def __str__(self):
        return f"{self.service_name} x{self.quantity or f'{self.length}x{self.width}'}"

    def to_record(self):
        return {
            'service_id': str(self.service_id) if self.service_id else None,
            'service_name': self.service_name,
            'unit_price': self.unit_price,
            'pricing_mode': self.pricing_mode,
            'quantity': self.quantity,
            'length': self.length,
            'width': self.width,
            'image_ref': self.image_ref or None,
        }
