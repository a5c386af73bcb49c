"""
URL patterns for the reporting app.
"""

from django.urls import path

from . import views

app_name = "reporting"

urlpatterns = [
    path("api/reports/sales/summary/", views.sales_summary, name="sales_summary"),
    path("api/reports/sales/by-customer/", views.sales_by_customer, name="sales_by_customer"),
    path("api/reports/sales/by-product/", views.sales_by_product, name="sales_by_product"),
    path("api/reports/sales/by-category/", views.sales_by_category, name="sales_by_category"),
    path("api/reports/sales/heatmap/", views.sales_heatmap, name="sales_heatmap"),
    path("api/reports/net-profit/", views.net_profit, name="net_profit"),
    path("api/reports/sales/export/", views.export_sales_excel, name="sales_export"),
]
