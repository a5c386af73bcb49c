"""
Admin configuration for delivery models.
"""

from django.contrib import admin

from .models import DeliveryLocation, DeliveryType, DeliveryTypePrice


class DeliveryTypePriceInline(admin.TabularInline):
    model = DeliveryTypePrice
    extra = 0


@admin.register(DeliveryLocation)
class DeliveryLocationAdmin(admin.ModelAdmin):
    list_display = ["name", "level", "parent", "price", "estimated_time", "is_active"]
    list_filter = ["level", "is_active"]
    search_fields = ["name"]
    inlines = [DeliveryTypePriceInline]


@admin.register(DeliveryType)
class DeliveryTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "is_active", "created_at"]
    search_fields = ["name"]
