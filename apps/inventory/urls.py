"""
URL configuration for inventory app.
"""

from django.urls import path

from . import views

app_name = "inventory"

urlpatterns = [
    # Product endpoints
    path("api/inventory/products/", views.ProductListView.as_view(), name="product_list"),
    path(
        "api/inventory/products/create/",
        views.ProductCreateView.as_view(),
        name="product_create",
    ),
    path(
        "api/inventory/products/<uuid:id>/",
        views.ProductDetailView.as_view(),
        name="product_detail",
    ),
    path(
        "api/inventory/products/<uuid:product_id>/adjust-stock/",
        views.stock_adjustment,
        name="stock_adjustment",
    ),
    path(
        "api/inventory/products/<uuid:product_id>/barcode/",
        views.product_barcode,
        name="product_barcode",
    ),
    path(
        "api/inventory/products/<uuid:product_id>/label/",
        views.product_label,
        name="product_label",
    ),
    path("api/inventory/products/lookup/", views.lookup_by_barcode, name="barcode_lookup"),
    path("api/inventory/products/low-stock/", views.LowStockListView.as_view(), name="low_stock"),
    path("api/inventory/products/import/", views.import_quantities, name="import_quantities"),
    path(
        "api/inventory/categories/<uuid:group_id>/products/",
        views.ProductsByGroupView.as_view(group_field="category"),
        name="products_by_category",
    ),
    path(
        "api/inventory/subcategories/<uuid:group_id>/products/",
        views.ProductsByGroupView.as_view(group_field="subcategory"),
        name="products_by_subcategory",
    ),
    path(
        "api/inventory/companies/<uuid:group_id>/products/",
        views.ProductsByGroupView.as_view(group_field="company"),
        name="products_by_company",
    ),
    # Category and company endpoints
    path(
        "api/inventory/categories/",
        views.CategoryListCreateView.as_view(),
        name="category_list",
    ),
    path(
        "api/inventory/categories/<uuid:id>/",
        views.CategoryDetailView.as_view(),
        name="category_detail",
    ),
    path("api/inventory/companies/", views.CompanyListCreateView.as_view(), name="company_list"),
    path(
        "api/inventory/companies/<uuid:id>/",
        views.CompanyDetailView.as_view(),
        name="company_detail",
    ),
    # Batch and expiry endpoints
    path("api/inventory/batches/", views.ProductBatchListCreateView.as_view(), name="batch_list"),
    path(
        "api/inventory/batches/<uuid:id>/",
        views.ProductBatchDetailView.as_view(),
        name="batch_detail",
    ),
    path(
        "api/inventory/batches/expiring/",
        views.ExpiringBatchListView.as_view(),
        name="expiring_batches",
    ),
    path(
        "api/inventory/batches/<uuid:batch_id>/expired-action/",
        views.expired_batch_action,
        name="expired_batch_action",
    ),
    path("api/inventory/damaged/", views.DamagedProductListView.as_view(), name="damaged_list"),
    path("api/inventory/damaged/stats/", views.damage_statistics, name="damage_statistics"),
    # Transfer endpoints
    path(
        "api/inventory/transfers/",
        views.InventoryTransferListView.as_view(),
        name="transfer_list",
    ),
    path("api/inventory/transfers/create/", views.create_transfer, name="transfer_create"),
    path(
        "api/inventory/transfers/<uuid:id>/",
        views.InventoryTransferDetailView.as_view(),
        name="transfer_detail",
    ),
    path(
        "api/inventory/transfers/<uuid:transfer_id>/approve/",
        views.approve_transfer,
        name="transfer_approve",
    ),
    path(
        "api/inventory/transfers/<uuid:transfer_id>/reject/",
        views.reject_transfer,
        name="transfer_reject",
    ),
    path(
        "api/inventory/transfers/<uuid:transfer_id>/complete/",
        views.complete_transfer,
        name="transfer_complete",
    ),
    path(
        "api/inventory/transfers/<uuid:transfer_id>/cancel/",
        views.cancel_transfer,
        name="transfer_cancel",
    ),
]
