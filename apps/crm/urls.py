"""
URL configuration for the customers app.
"""

from django.urls import path

from . import views

app_name = "crm"

urlpatterns = [
    path("api/customers/", views.CustomerListCreateView.as_view(), name="customer_list"),
    path("api/customers/search/", views.search_by_phone, name="customer_search"),
    path("api/customers/find-or-create/", views.find_or_create, name="customer_find_or_create"),
    path("api/customers/<uuid:id>/", views.CustomerDetailView.as_view(), name="customer_detail"),
]
