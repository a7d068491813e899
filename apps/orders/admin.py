from django.contrib import admin
from apps.orders.models import Order, OrderLineItem


class OrderLineItemInline(admin.TabularInline):
    """Read-only snapshot line items."""
    model = OrderLineItem
    extra = 0
    can_delete = False
    fields = [
        'position',
        'service_name',
        'unit_price',
        'pricing_mode',
        'quantity',
        'length',
        'width',
    ]
    readonly_fields = fields


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin interface for orders. Status changes go through the API."""

    list_display = [
        'customer_name',
        'customer_phone',
        'status',
        'partition',
        'total',
        'created_at',
        'closed_at',
    ]
    list_filter = ['partition', 'status']
    search_fields = ['customer_name', 'customer_phone']
    readonly_fields = ['id', 'status', 'partition', 'total', 'created_at', 'closed_at', 'updated_at']
    inlines = [OrderLineItemInline]
