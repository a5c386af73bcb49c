"""
URL configuration for the finance app.
"""

from django.urls import path

from . import views

app_name = "finance"

urlpatterns = [
    # Cash registers
    path("api/cash/records/", views.CashTrackingListCreateView.as_view(), name="cash_record_list"),
    path(
        "api/cash/records/<uuid:id>/",
        views.CashTrackingDetailView.as_view(),
        name="cash_record_detail",
    ),
    path(
        "api/cash/transactions/",
        views.CashTransactionListView.as_view(),
        name="cash_transaction_list",
    ),
    path(
        "api/cash/transactions/create/",
        views.create_cash_transaction,
        name="cash_transaction_create",
    ),
    path("api/cash/transfer/", views.transfer_cash, name="cash_transfer"),
    path("api/cash/summary/", views.cash_summary, name="cash_summary"),
    # Expenses
    path("api/expenses/", views.ExpenseListCreateView.as_view(), name="expense_list"),
    path("api/expenses/<uuid:id>/", views.ExpenseDetailView.as_view(), name="expense_detail"),
    # Suppliers
    path("api/suppliers/", views.SupplierListCreateView.as_view(), name="supplier_list"),
    path("api/suppliers/<uuid:id>/", views.SupplierDetailView.as_view(), name="supplier_detail"),
    path("api/suppliers/<uuid:supplier_id>/pay/", views.pay_supplier, name="supplier_pay"),
    # Purchases
    path("api/purchases/", views.PurchaseListView.as_view(), name="purchase_list"),
    path("api/purchases/create/", views.create_purchase, name="purchase_create"),
    path("api/purchases/<uuid:id>/", views.PurchaseDetailView.as_view(), name="purchase_detail"),
]
