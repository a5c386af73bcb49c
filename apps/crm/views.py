"""
API views for customers.
"""

import logging

from django.db.models import Q

from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from . import services
from .models import Customer
from .serializers import (
    CustomerListSerializer,
    CustomerSerializer,
    FindOrCreateCustomerSerializer,
)

logger = logging.getLogger(__name__)


class CustomerListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating customers.

    Query parameters:
    - search: Name, phone or email
    - verified: true/false
    - neighborhood: Neighborhood ID

    Creating a customer with a phone that already exists returns the
    existing customer with 200 instead of a new one.
    """

    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["name", "created_at", "total_purchases", "last_purchase_at"]
    ordering = ["-created_at"]

    def get_serializer_class(self):
        if self.request.method == "POST":
            return CustomerSerializer
        return CustomerListSerializer

    def get_queryset(self):
        params = self.request.query_params
        queryset = Customer.objects.select_related(
            "governorate", "city", "area", "neighborhood"
        )

        search = params.get("search", "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(phone__icontains=search) | Q(email__icontains=search)
            )

        verified = params.get("verified")
        if verified in ("true", "false"):
            queryset = queryset.filter(is_verified=verified == "true")

        if params.get("neighborhood"):
            queryset = queryset.filter(neighborhood_id=params["neighborhood"])

        return queryset

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        customer, created = services.add_customer(**serializer.validated_data)
        return Response(
            CustomerSerializer(customer).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class CustomerDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = CustomerSerializer
    permission_classes = [permissions.IsAuthenticated]
    queryset = Customer.objects.select_related("governorate", "city", "area", "neighborhood")
    lookup_field = "id"

    def perform_destroy(self, instance):
        logger.info(f"Customer {instance.name} deleted by {self.request.user.username}")
        instance.delete()


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def search_by_phone(request):
    """
    Look customers up by partial phone number (at most 10 results).

    Query parameters:
    - phone: Phone fragment (required)
    """
    phone = request.query_params.get("phone", "").strip()
    if not phone:
        return Response(
            {"detail": "phone query parameter is required."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    customers = services.search_by_phone(phone)
    return Response(CustomerListSerializer(customers, many=True).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def find_or_create(request):
    """
    Match a customer by phone or create one, as done from the POS screen.

    Request body:
    {
        "name": "Customer name",
        "phone": "0100...",
        "neighborhood": "uuid"  (optional, also governorate/city/area)
    }
    """
    serializer = FindOrCreateCustomerSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    customer = services.find_or_create_customer(
        name=data.get("name", ""),
        phone=data.get("phone"),
        governorate=data.get("governorate"),
        city=data.get("city"),
        area=data.get("area"),
        neighborhood=data.get("neighborhood"),
    )
    return Response(CustomerSerializer(customer).data, status=status.HTTP_200_OK)
