from django.contrib import admin
from apps.catalog.models import Service


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    """Admin interface for catalog services."""

    list_display = ['name', 'price', 'pricing_mode', 'created_at']
    list_filter = ['pricing_mode']
    search_fields = ['name']
    readonly_fields = ['id', 'image_path', 'created_at', 'updated_at']
