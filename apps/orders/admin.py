"""
Admin configuration for online orders.
"""

from django.contrib import admin

from .models import OnlineOrder, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ["total"]


@admin.register(OnlineOrder)
class OnlineOrderAdmin(admin.ModelAdmin):
    list_display = [
        "order_number",
        "customer_name",
        "customer_phone",
        "branch",
        "total",
        "status",
        "payment_status",
        "delivery_employee",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "branch", "created_at"]
    search_fields = ["order_number", "customer_name", "customer_phone"]
    readonly_fields = ["order_number", "status", "subtotal", "total", "created_at", "updated_at"]
    raw_id_fields = ["customer", "delivery_location"]
    inlines = [OrderItemInline]
