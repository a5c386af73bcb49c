"""
URL configuration for online orders.
"""

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("api/orders/", views.OnlineOrderListView.as_view(), name="order_list"),
    path("api/orders/create/", views.create_order, name="order_create"),
    path("api/orders/<uuid:id>/", views.OnlineOrderDetailView.as_view(), name="order_detail"),
    path(
        "api/orders/<uuid:order_id>/assign-delivery/",
        views.assign_delivery,
        name="order_assign_delivery",
    ),
    path(
        "api/orders/<uuid:order_id>/confirm-payment/",
        views.confirm_payment,
        name="order_confirm_payment",
    ),
    path(
        "api/orders/<uuid:order_id>/<str:action>/",
        views.order_action,
        name="order_action",
    ),
]
