"""
Views for online orders.
"""

import logging

from django.db.models import Q

from django_fsm import TransitionNotAllowed
from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.branch_context import BranchScopedMixin, get_current_branch
from apps.core.models import User
from apps.core.permissions import IsStoreAdmin

from . import services
from .models import OnlineOrder
from .serializers import (
    AssignDeliverySerializer,
    OnlineOrderCreateSerializer,
    OnlineOrderDetailSerializer,
    OnlineOrderListSerializer,
    OrderActionSerializer,
)

logger = logging.getLogger(__name__)


class OnlineOrderListView(BranchScopedMixin, generics.ListAPIView):
    """
    API endpoint for listing online orders.

    Query parameters:
    - status: Order status (legacy values such as 'waiting' are accepted)
    - payment_status: pending|paid|failed|refunded
    - delivery_employee: Orders assigned to this employee ('me' for the caller)
    - search: Order number, customer name or phone
    - date_from / date_to: Creation date range (YYYY-MM-DD)
    """

    serializer_class = OnlineOrderListSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["created_at", "total", "status"]
    ordering = ["-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(
            OnlineOrder.objects.select_related("delivery_location", "delivery_employee")
        )

        if params.get("status"):
            queryset = queryset.filter(status=services.normalize_order_status(params["status"]))

        if params.get("payment_status"):
            queryset = queryset.filter(payment_status=params["payment_status"])

        employee = params.get("delivery_employee")
        if employee == "me":
            queryset = queryset.filter(delivery_employee=self.request.user)
        elif employee:
            queryset = queryset.filter(delivery_employee_id=employee)

        search = params.get("search")
        if search:
            queryset = queryset.filter(
                Q(order_number__icontains=search)
                | Q(customer_name__icontains=search)
                | Q(customer_phone__icontains=search)
            )

        if params.get("date_from"):
            queryset = queryset.filter(created_at__date__gte=params["date_from"])
        if params.get("date_to"):
            queryset = queryset.filter(created_at__date__lte=params["date_to"])

        return queryset


class OnlineOrderDetailView(BranchScopedMixin, generics.RetrieveAPIView):
    serializer_class = OnlineOrderDetailSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = "id"

    def get_queryset(self):
        return self.scope(
            OnlineOrder.objects.select_related(
                "delivery_location", "delivery_type", "delivery_employee"
            ).prefetch_related("items")
        )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def create_order(request):
    """
    Place an online order.

    Request body:
    {
        "customer_name": "Ahmed",
        "customer_phone": "0100000000",
        "delivery_location": "uuid",
        "delivery_type": "uuid" (optional),
        "shipping_address": "" (optional),
        "payment_method": "cash_on_delivery|card",
        "items": [{"product_id": "uuid", "quantity": "2"}]
    }
    """
    serializer = OnlineOrderCreateSerializer(
        data=request.data, context={"request": request, "branch": get_current_branch(request)}
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    order = serializer.save()
    return Response(OnlineOrderDetailSerializer(order).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def order_action(request, order_id, action):
    """
    Move an order through its workflow.

    Actions: process, ready, ship, deliver, cancel

    Request body:
    {
        "tracking_number": "" (ship, optional),
        "reason": "" (cancel, optional)
    }
    """
    serializer = OrderActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if action == "cancel" and not request.user.is_admin_role():
        return Response(
            {"detail": "Only store administrators can cancel orders."},
            status=status.HTTP_403_FORBIDDEN,
        )

    try:
        order = services.transition_order(
            order_id, action, request.user, **serializer.validated_data
        )
    except OnlineOrder.DoesNotExist:
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
    except TransitionNotAllowed:
        current = OnlineOrder.objects.filter(id=order_id).values_list("status", flat=True).first()
        return Response(
            {"detail": f"Cannot {action} an order that is {current}."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except ValueError as e:
        logger.warning(f"Order {order_id} {action} failed: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(OnlineOrderDetailSerializer(order).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def assign_delivery(request, order_id):
    """
    Assign a delivery employee to an order.

    Request body:
    {
        "employee_id": "uuid" (null to unassign)
    }
    """
    serializer = AssignDeliverySerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        order = services.assign_delivery_employee(
            order_id, serializer.validated_data["employee_id"]
        )
    except OnlineOrder.DoesNotExist:
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
    except User.DoesNotExist:
        return Response({"detail": "Employee not found."}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(OnlineOrderDetailSerializer(order).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def confirm_payment(request, order_id):
    try:
        order = services.confirm_payment(order_id)
    except OnlineOrder.DoesNotExist:
        return Response({"detail": "Order not found."}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(OnlineOrderDetailSerializer(order).data, status=status.HTTP_200_OK)
