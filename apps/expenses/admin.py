from django.contrib import admin
from apps.expenses.models import Cost, DeviceIdentity


@admin.register(Cost)
class CostAdmin(admin.ModelAdmin):
    list_display = ['name', 'price', 'category', 'date', 'reported_by']
    list_filter = ['category', 'date']
    search_fields = ['name', 'reported_by']


@admin.register(DeviceIdentity)
class DeviceIdentityAdmin(admin.ModelAdmin):
    list_display = ['name', 'key', 'created_at']
    search_fields = ['name', 'key']
    readonly_fields = ['created_at']
