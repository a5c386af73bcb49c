"""
Admin configuration for inventory models.
"""

from django.contrib import admin

from .models import (
    Category,
    Company,
    DamagedProduct,
    InventoryTransfer,
    InventoryTransferItem,
    Product,
    ProductBatch,
)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "parent", "sort_order", "is_active", "created_at"]
    list_filter = ["is_active", "parent"]
    search_fields = ["name", "description"]
    readonly_fields = ["created_at", "updated_at"]


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ["name", "is_active", "created_at"]
    search_fields = ["name"]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin interface for Product."""

    list_display = [
        "name",
        "barcode",
        "price",
        "purchase_price",
        "quantity",
        "min_quantity",
        "branch",
        "is_active",
    ]
    list_filter = ["is_active", "is_offer", "barcode_type", "bulk_enabled", "category", "branch"]
    search_fields = ["name", "barcode", "bulk_barcode", "description"]
    readonly_fields = ["created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": (
                    "name",
                    "barcode",
                    "barcode_type",
                    "category",
                    "subcategory",
                    "company",
                    "branch",
                    "image",
                    "description",
                    "is_active",
                ),
            },
        ),
        (
            "Pricing",
            {"fields": ("price", "purchase_price", "offer_price", "is_offer")},
        ),
        (
            "Bulk Pricing",
            {
                "fields": ("bulk_enabled", "bulk_quantity", "bulk_price", "bulk_barcode"),
                "classes": ("collapse",),
            },
        ),
        ("Stock", {"fields": ("quantity", "min_quantity", "shelf_location")}),
        (
            "Variants",
            {"fields": ("parent", "shares_parent_inventory"), "classes": ("collapse",)},
        ),
        (
            "Timestamps",
            {"fields": ("created_at", "updated_at"), "classes": ("collapse",)},
        ),
    )


@admin.register(ProductBatch)
class ProductBatchAdmin(admin.ModelAdmin):
    list_display = ["product", "batch_number", "quantity", "expiry_date", "branch"]
    list_filter = ["branch", "expiry_date"]
    search_fields = ["batch_number", "product__name"]


@admin.register(DamagedProduct)
class DamagedProductAdmin(admin.ModelAdmin):
    list_display = ["product", "quantity", "cost", "damage_date", "recorded_by"]
    list_filter = ["damage_date", "branch"]
    search_fields = ["product__name", "batch_number"]


class InventoryTransferItemInline(admin.TabularInline):
    model = InventoryTransferItem
    extra = 0
    fields = ["product", "quantity", "unit_cost"]


@admin.register(InventoryTransfer)
class InventoryTransferAdmin(admin.ModelAdmin):
    """Admin interface for InventoryTransfer."""

    list_display = ["transfer_number", "from_branch", "to_branch", "status", "created_at"]
    list_filter = ["status", "from_branch", "to_branch"]
    search_fields = ["transfer_number", "notes"]
    readonly_fields = ["transfer_number", "status", "approved_at", "completed_at", "created_at"]
    inlines = [InventoryTransferItemInline]
