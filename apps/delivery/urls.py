"""
URL configuration for delivery app.
"""

from django.urls import path

from . import views

app_name = "delivery"

urlpatterns = [
    path(
        "api/delivery/locations/",
        views.DeliveryLocationListCreateView.as_view(),
        name="location_list",
    ),
    path(
        "api/delivery/locations/<uuid:id>/",
        views.DeliveryLocationDetailView.as_view(),
        name="location_detail",
    ),
    path(
        "api/delivery/locations/roots/",
        views.DeliveryLocationChildrenView.as_view(),
        name="location_roots",
    ),
    path(
        "api/delivery/locations/<uuid:id>/children/",
        views.DeliveryLocationChildrenView.as_view(),
        name="location_children",
    ),
    path(
        "api/delivery/locations/<uuid:location_id>/prices/",
        views.location_type_prices,
        name="location_prices",
    ),
    path("api/delivery/prices/<uuid:price_id>/", views.delete_type_price, name="price_delete"),
    path("api/delivery/types/", views.DeliveryTypeListCreateView.as_view(), name="type_list"),
    path(
        "api/delivery/types/<uuid:id>/",
        views.DeliveryTypeDetailView.as_view(),
        name="type_detail",
    ),
    path("api/delivery/quote/", views.delivery_quote, name="quote"),
]
