"""
Django admin configuration for sales models.
"""

from django.contrib import admin

from .models import ReturnOrder, ReturnOrderItem, Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ["id", "total"]
    fields = ["product", "product_name", "quantity", "unit_price", "discount", "total", "is_bulk"]


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    """Admin interface for Sale model."""

    list_display = [
        "invoice_number",
        "date",
        "branch",
        "cashier",
        "customer_name",
        "total",
        "payment_method",
        "status",
    ]
    list_filter = ["status", "payment_method", "branch", "date"]
    search_fields = ["invoice_number", "customer_name", "customer_phone"]
    readonly_fields = ["id", "invoice_number", "subtotal", "total", "profit", "created_at"]
    date_hierarchy = "date"
    inlines = [SaleItemInline]
    fieldsets = [
        (
            "Sale",
            {"fields": ["id", "invoice_number", "date", "branch", "cashier", "status"]},
        ),
        ("Customer", {"fields": ["customer", "customer_name", "customer_phone"]}),
        ("Amounts", {"fields": ["subtotal", "discount", "total", "profit"]}),
        ("Payment", {"fields": ["payment_method", "cash_amount", "card_amount"]}),
        ("Notes", {"fields": ["notes", "created_at"]}),
    ]


class ReturnOrderItemInline(admin.TabularInline):
    model = ReturnOrderItem
    extra = 0
    readonly_fields = ["total"]


@admin.register(ReturnOrder)
class ReturnOrderAdmin(admin.ModelAdmin):
    list_display = ["id", "order_type", "sale", "online_order", "total", "status", "created_at"]
    list_filter = ["status", "order_type", "branch"]
    search_fields = ["customer_name", "customer_phone", "sale__invoice_number"]
    readonly_fields = ["status", "processed_by", "processed_at", "total", "created_at"]
    inlines = [ReturnOrderItemInline]
