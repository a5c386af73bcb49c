from django.contrib import admin

from .models import CashTracking, CashTransaction, Expense, Purchase, PurchaseItem, Supplier


@admin.register(CashTracking)
class CashTrackingAdmin(admin.ModelAdmin):
    list_display = ["date", "branch", "register_type", "opening_balance", "closing_balance", "difference"]
    list_filter = ["register_type", "branch", "date"]
    readonly_fields = ["difference", "created_at"]


@admin.register(CashTransaction)
class CashTransactionAdmin(admin.ModelAdmin):
    """Cash transactions are recorded through the API only."""

    list_display = [
        "transaction_date",
        "branch",
        "register_type",
        "transaction_type",
        "amount",
        "balance_after",
        "created_by",
    ]
    list_filter = ["register_type", "transaction_type", "branch"]
    date_hierarchy = "transaction_date"

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ["date", "branch", "expense_type", "amount", "description"]
    list_filter = ["expense_type", "branch"]
    search_fields = ["description"]
    date_hierarchy = "date"


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ["name", "contact_person", "phone", "balance", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["name", "contact_person", "phone", "email"]
    readonly_fields = ["balance"]


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    readonly_fields = ["total"]


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ["invoice_number", "supplier", "branch", "date", "total", "paid"]
    list_filter = ["branch", "date"]
    search_fields = ["invoice_number", "supplier__name"]
    readonly_fields = ["total", "paid", "created_at"]
    inlines = [PurchaseItemInline]
