"""
URL configuration for sales app.
"""

from django.urls import path

from . import views

app_name = "sales"

urlpatterns = [
    # POS API Endpoints
    path("api/pos/search/products/", views.pos_product_search, name="pos_product_search"),
    path("api/pos/search/customers/", views.pos_customer_search, name="pos_customer_search"),
    path("api/pos/sales/create/", views.pos_create_sale, name="pos_create_sale"),
    # Sale Management API
    path("api/sales/", views.SaleListView.as_view(), name="sale_list"),
    path("api/sales/<uuid:id>/", views.SaleDetailView.as_view(), name="sale_detail"),
    path("api/sales/<uuid:sale_id>/barcode/", views.invoice_barcode, name="invoice_barcode"),
    path("api/sales/<uuid:sale_id>/cancel/", views.cancel_sale, name="sale_cancel"),
    # Receipt Generation
    path("receipts/html/<uuid:sale_id>/", views.receipt_html, name="receipt_html_standard"),
    path(
        "receipts/html/<uuid:sale_id>/<str:format_type>/", views.receipt_html, name="receipt_html"
    ),
    path("receipts/pdf/<uuid:sale_id>/", views.receipt_pdf, name="receipt_pdf_standard"),
    path("receipts/pdf/<uuid:sale_id>/<str:format_type>/", views.receipt_pdf, name="receipt_pdf"),
    # Return Orders
    path("api/returns/", views.ReturnOrderListView.as_view(), name="return_list"),
    path("api/returns/create/", views.create_return, name="return_create"),
    path("api/returns/<uuid:id>/", views.ReturnOrderDetailView.as_view(), name="return_detail"),
    path("api/returns/<uuid:return_id>/approve/", views.approve_return, name="return_approve"),
    path("api/returns/<uuid:return_id>/reject/", views.reject_return, name="return_reject"),
]
