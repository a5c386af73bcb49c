from django.contrib import admin

from .models import Customer


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    """Admin interface for Customer model."""

    list_display = [
        "name",
        "phone",
        "email",
        "neighborhood",
        "is_verified",
        "total_purchases",
        "last_purchase_at",
    ]
    list_filter = ["is_verified", "governorate", "created_at"]
    search_fields = ["name", "phone", "email"]
    readonly_fields = ["id", "total_purchases", "last_purchase_at", "created_at", "updated_at"]
    raw_id_fields = ["governorate", "city", "area", "neighborhood"]

    fieldsets = (
        ("Contact", {"fields": ("id", "name", "phone", "email", "is_verified")}),
        ("Location", {"fields": ("governorate", "city", "area", "neighborhood", "address")}),
        ("Purchases", {"fields": ("total_purchases", "last_purchase_at")}),
        ("Notes", {"fields": ("notes",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
