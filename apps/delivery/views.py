"""
Views for delivery locations, delivery types and pricing.
"""

import logging

from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.permissions import IsAdminOrReadOnly, IsStoreAdmin

from . import services
from .models import DeliveryLocation, DeliveryType, DeliveryTypePrice
from .serializers import (
    DeliveryLocationSerializer,
    DeliveryQuoteRequestSerializer,
    DeliveryQuoteSerializer,
    DeliveryTypePriceSerializer,
    DeliveryTypeSerializer,
)

logger = logging.getLogger(__name__)


class DeliveryLocationListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating delivery locations.

    Query parameters:
    - level: governorate|city|area|neighborhood
    - parent: Children of this location
    - search: Search by name
    """

    serializer_class = DeliveryLocationSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name"]
    ordering_fields = ["name", "created_at", "price"]
    ordering = ["name"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = DeliveryLocation.objects.select_related("parent")
        if params.get("level"):
            queryset = queryset.filter(level=params["level"])
        if params.get("parent"):
            queryset = queryset.filter(parent_id=params["parent"])
        return queryset

    def perform_create(self, serializer):
        location = serializer.save()
        logger.info(f"Delivery location {location.get_full_path()} ({location.level}) created")


class DeliveryLocationDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = DeliveryLocationSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    queryset = DeliveryLocation.objects.select_related("parent")
    lookup_field = "id"


class DeliveryLocationChildrenView(generics.ListAPIView):
    """
    Direct children of a location; governorates when called without one.
    """

    serializer_class = DeliveryLocationSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        active_only = self.request.query_params.get("active") in ("1", "true", "yes")
        return services.children_of(self.kwargs.get("id"), active_only=active_only)


class DeliveryTypeListCreateView(generics.ListCreateAPIView):
    serializer_class = DeliveryTypeSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    queryset = DeliveryType.objects.all()


class DeliveryTypeDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = DeliveryTypeSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    queryset = DeliveryType.objects.all()
    lookup_field = "id"


@api_view(["GET", "POST"])
@permission_classes([permissions.IsAuthenticated])
def location_type_prices(request, location_id):
    """
    List or set the per-type delivery prices of a location.

    POST body (creates or replaces the price for that type):
    {
        "delivery_type": "uuid",
        "price": "25.00",
        "estimated_time": "45 min"
    }
    """
    try:
        location = DeliveryLocation.objects.get(id=location_id)
    except DeliveryLocation.DoesNotExist:
        return Response({"detail": "Location not found."}, status=status.HTTP_404_NOT_FOUND)

    if request.method == "POST":
        if not request.user.is_admin_role():
            return Response(
                {"detail": "Only store administrators can change delivery prices."},
                status=status.HTTP_403_FORBIDDEN,
            )
        serializer = DeliveryTypePriceSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        type_price, created = DeliveryTypePrice.objects.update_or_create(
            location=location,
            delivery_type=serializer.validated_data["delivery_type"],
            defaults={
                "price": serializer.validated_data["price"],
                "estimated_time": serializer.validated_data.get("estimated_time", ""),
            },
        )
        logger.info(f"Delivery price for {type_price} {'set' if created else 'updated'}")
        return Response(
            DeliveryTypePriceSerializer(type_price).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    prices = location.type_prices.select_related("delivery_type", "location")
    return Response(
        DeliveryTypePriceSerializer(prices, many=True).data, status=status.HTTP_200_OK
    )


@api_view(["DELETE"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def delete_type_price(request, price_id):
    deleted, _ = DeliveryTypePrice.objects.filter(id=price_id).delete()
    if not deleted:
        return Response({"detail": "Delivery price not found."}, status=status.HTTP_404_NOT_FOUND)
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def delivery_quote(request):
    """
    Quote the delivery price for a location and optional delivery type.

    Query parameters:
    - location_id: Location (required)
    - delivery_type_id: Delivery type (optional)
    """
    serializer = DeliveryQuoteRequestSerializer(data=request.query_params)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        quote = services.quote_delivery(
            serializer.validated_data["location"],
            serializer.validated_data.get("delivery_type"),
        )
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(DeliveryQuoteSerializer(quote).data, status=status.HTTP_200_OK)
