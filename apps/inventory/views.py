"""
Views for inventory management.

- Product catalog with search and filters, barcode lookup, stock adjustment
- Categories and companies
- Barcode and label images
- Excel quantity import
- Batches, expiry actions and damaged stock
- Inter-branch transfers
"""

import logging

from django.db import transaction
from django.db.models import Q
from django.http import HttpResponse
from django.utils.dateparse import parse_date

from django_fsm import TransitionNotAllowed
from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from apps.core.branch_context import (
    BranchScopedMixin,
    get_current_branch,
    resolve_branch_id,
    scope_to_branch,
)
from apps.core.models import StoreSettings
from apps.core.permissions import HasBranchAccess, IsAdminOrReadOnly, IsStoreAdmin

from . import barcode_utils, services
from .import_service import QuantityImportService
from .models import (
    Category,
    Company,
    DamagedProduct,
    InventoryTransfer,
    Product,
    ProductBatch,
)
from .serializers import (
    BarcodeLookupSerializer,
    CategorySerializer,
    CompanySerializer,
    DamagedProductSerializer,
    ExpiredBatchActionSerializer,
    InventoryTransferCreateSerializer,
    InventoryTransferSerializer,
    ProductBatchSerializer,
    ProductCreateUpdateSerializer,
    ProductDetailSerializer,
    ProductListSerializer,
    QuantityImportSerializer,
    RejectSerializer,
    StockAdjustmentSerializer,
)

logger = logging.getLogger(__name__)


def _parse_bool(value):
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes")


# Products


class ProductListView(BranchScopedMixin, generics.ListAPIView):
    """
    API endpoint for listing products with search and filters.

    Query parameters:
    - search: Name or barcode
    - category / subcategory / company: Filter by id
    - is_active, is_offer, low_stock: true/false
    """

    serializer_class = ProductListSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["name", "price", "quantity", "created_at", "updated_at"]
    ordering = ["name"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(
            Product.objects.select_related("category", "subcategory", "company", "branch", "parent")
        )
        queryset = services.search_products(queryset, params.get("search"))

        for field in ("category", "subcategory", "company"):
            value = params.get(field)
            if value:
                queryset = queryset.filter(**{f"{field}_id": value})

        is_active = _parse_bool(params.get("is_active"))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)

        is_offer = _parse_bool(params.get("is_offer"))
        if is_offer is not None:
            queryset = queryset.filter(is_offer=is_offer)

        if _parse_bool(params.get("low_stock")):
            queryset = services.low_stock_products(queryset)

        return queryset


class ProductsByGroupView(BranchScopedMixin, generics.ListAPIView):
    """
    Active products of one category, sub-category or company.

    ``group_field`` is set per route.
    """

    serializer_class = ProductListSerializer
    permission_classes = [permissions.IsAuthenticated]
    group_field = "category"

    def get_queryset(self):
        queryset = self.scope(Product.objects.filter(is_active=True)).select_related(
            "category", "subcategory", "company", "branch", "parent"
        )
        return queryset.filter(**{f"{self.group_field}_id": self.kwargs["group_id"]})


class ProductCreateView(generics.CreateAPIView):
    serializer_class = ProductCreateUpdateSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]

    def perform_create(self, serializer):
        branch = serializer.validated_data.get("branch") or get_current_branch(self.request)
        product = serializer.save(branch=branch)
        logger.info(
            f"Product {product.name} created by {self.request.user.username} "
            f"(price {product.price}, qty {product.quantity})"
        )


class ProductDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for retrieving, updating and deleting a product.
    """

    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly, HasBranchAccess]
    queryset = Product.objects.select_related("category", "subcategory", "company", "branch")
    lookup_field = "id"

    def get_serializer_class(self):
        if self.request.method == "GET":
            return ProductDetailSerializer
        return ProductCreateUpdateSerializer

    def perform_destroy(self, instance):
        logger.info(f"Product {instance.name} deleted by {self.request.user.username}")
        instance.delete()


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def lookup_by_barcode(request):
    """
    Look up a product by a scanned barcode.

    Handles product barcodes, bulk pack barcodes and scale barcodes (weight
    embedded). The response carries the quantity the scan stands for.

    Query parameters:
    - barcode: The scanned value (required)
    """
    barcode_value = request.query_params.get("barcode", "").strip()

    if not barcode_value:
        return Response(
            {"detail": "Barcode parameter is required."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        match = services.lookup_barcode(barcode_value, resolve_branch_id(request))
    except Product.DoesNotExist:
        return Response(
            {"detail": f"No product found with barcode: {barcode_value}"},
            status=status.HTTP_404_NOT_FOUND,
        )

    return Response(BarcodeLookupSerializer(match).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def stock_adjustment(request, product_id):
    """
    API endpoint for adjusting stock levels.

    Request body:
    {
        "adjustment_type": "add|deduct|set",
        "quantity": <number>,
        "reason": "<optional reason>"
    }
    """
    serializer = StockAdjustmentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        product = services.adjust_stock(
            product_id,
            data["adjustment_type"],
            data["quantity"],
            user=request.user,
            reason=data.get("reason", ""),
        )
    except Product.DoesNotExist:
        return Response({"detail": "Product not found."}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(
        {
            "detail": "Stock adjusted successfully.",
            "product": ProductDetailSerializer(product).data,
        },
        status=status.HTTP_200_OK,
    )


class LowStockListView(BranchScopedMixin, generics.ListAPIView):
    """Products at or below their minimum quantity."""

    serializer_class = ProductListSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["quantity", "name"]
    ordering = ["quantity"]

    def get_queryset(self):
        queryset = self.scope(Product.objects.select_related("category", "branch"))
        return services.low_stock_products(queryset)


# Categories and companies


class CategoryListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating categories.

    Query parameters:
    - parent: Only sub-categories of this category
    - main_only: Only main categories (true)
    - search: Search by name
    """

    serializer_class = CategorySerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name"]
    ordering_fields = ["name", "sort_order", "created_at"]
    ordering = ["sort_order", "name"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = Category.objects.select_related("parent")
        if params.get("parent"):
            queryset = queryset.filter(parent_id=params["parent"])
        elif _parse_bool(params.get("main_only")):
            queryset = queryset.filter(parent__isnull=True)
        is_active = _parse_bool(params.get("is_active"))
        if is_active is not None:
            queryset = queryset.filter(is_active=is_active)
        return queryset


class CategoryDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = CategorySerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    queryset = Category.objects.select_related("parent")
    lookup_field = "id"


class CompanyListCreateView(generics.ListCreateAPIView):
    serializer_class = CompanySerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name"]
    ordering_fields = ["name", "created_at"]
    ordering = ["name"]
    queryset = Company.objects.all()


class CompanyDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = CompanySerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    queryset = Company.objects.all()
    lookup_field = "id"


# Barcode images


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def product_barcode(request, product_id):
    """
    Barcode image for a product.

    Query parameters:
    - format: Barcode format (code128, ean13, ean8, code39) - default: code128
    - bulk: Render the bulk pack barcode instead (true)

    Returns:
        PNG image of the barcode
    """
    try:
        product = Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        return Response({"detail": "Product not found."}, status=status.HTTP_404_NOT_FOUND)

    data = product.bulk_barcode if _parse_bool(request.query_params.get("bulk")) else product.barcode
    if not data:
        return Response(
            {"detail": "This product has no barcode."}, status=status.HTTP_400_BAD_REQUEST
        )

    barcode_format = request.query_params.get("format", "code128")
    image = barcode_utils.generate_barcode_image(data, barcode_format)

    response = HttpResponse(image, content_type="image/png")
    response["Content-Disposition"] = f'inline; filename="{data}_barcode.png"'
    return response


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def product_label(request, product_id):
    """
    Printable shelf label (name, price and barcode) as a PNG image.
    """
    try:
        product = Product.objects.get(id=product_id)
    except Product.DoesNotExist:
        return Response({"detail": "Product not found."}, status=status.HTTP_404_NOT_FOUND)

    if not product.barcode:
        return Response(
            {"detail": "This product has no barcode."}, status=status.HTTP_400_BAD_REQUEST
        )

    image = barcode_utils.generate_product_label(
        name=product.name,
        price=str(product.price),
        barcode_data=product.barcode,
        currency=StoreSettings.load().currency,
        offer_price=str(product.offer_price) if product.is_offer and product.offer_price else None,
    )

    response = HttpResponse(image, content_type="image/png")
    response["Content-Disposition"] = f'inline; filename="{product.barcode}_label.png"'
    return response


# Import


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
@parser_classes([MultiPartParser, FormParser])
def import_quantities(request):
    """
    Update product quantities from an Excel workbook.

    Form fields:
    - file: .xlsx workbook (required)
    - barcode_column / quantity_column: 1-based columns (defaults 2 and 5)
    - mode: "set" (default) or "add"
    - has_header: Skip the first row (default true)

    Returns the per-row result summary.
    """
    serializer = QuantityImportSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    service = QuantityImportService(
        barcode_column=data["barcode_column"],
        quantity_column=data["quantity_column"],
        mode=data["mode"],
        has_header=data["has_header"],
        branch_id=resolve_branch_id(request),
    )
    try:
        results = service.import_file(data["file"])
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Quantity import by {request.user.username}: {results['success']} updated")
    return Response(results, status=status.HTTP_200_OK)


# Batches and expiry


class ProductBatchListCreateView(BranchScopedMixin, generics.ListCreateAPIView):
    """
    API endpoint for listing and creating product batches.

    Query parameters:
    - product: Filter by product id
    - shelf_location: Filter by shelf location
    """

    serializer_class = ProductBatchSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["expiry_date", "created_at", "quantity"]
    ordering = ["expiry_date"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(ProductBatch.objects.select_related("product", "branch"))
        if params.get("product"):
            queryset = queryset.filter(product_id=params["product"])
        if params.get("shelf_location"):
            queryset = queryset.filter(shelf_location=params["shelf_location"])
        return queryset

    def perform_create(self, serializer):
        batch = serializer.save(branch=self.get_branch())
        logger.info(f"Batch {batch.batch_number} added for {batch.product.name}")


class ProductBatchDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = ProductBatchSerializer
    permission_classes = [permissions.IsAuthenticated, IsAdminOrReadOnly, HasBranchAccess]
    queryset = ProductBatch.objects.select_related("product", "branch")
    lookup_field = "id"


class ExpiringBatchListView(BranchScopedMixin, generics.ListAPIView):
    """
    Batches with stock left that expire within ``days`` days (default from settings).
    """

    serializer_class = ProductBatchSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        days = self.request.query_params.get("days")
        try:
            days = int(days) if days else None
        except ValueError:
            days = None
        queryset = self.scope(ProductBatch.objects.select_related("product", "branch"))
        return services.expiring_batches(queryset, days)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def expired_batch_action(request, batch_id):
    """
    Handle an expired batch.

    Request body:
    {
        "action": "damaged|replace",
        "batch_number": "<new batch number, replace only>",
        "expiry_date": "YYYY-MM-DD (replace only)",
        "notes": "<optional>"
    }
    """
    serializer = ExpiredBatchActionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        if data["action"] == ExpiredBatchActionSerializer.DAMAGED:
            damage = services.mark_batch_damaged(batch_id, user=request.user, notes=data["notes"])
            return Response(
                {
                    "detail": "Batch marked as damaged.",
                    "damage": DamagedProductSerializer(damage).data,
                },
                status=status.HTTP_200_OK,
            )

        batch = services.replace_batch(
            batch_id, data["batch_number"], data["expiry_date"], notes=data["notes"]
        )
        return Response(
            {"detail": "Batch replaced.", "batch": ProductBatchSerializer(batch).data},
            status=status.HTTP_200_OK,
        )
    except ProductBatch.DoesNotExist:
        return Response({"detail": "Batch not found."}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)


class DamagedProductListView(BranchScopedMixin, generics.ListAPIView):
    """
    Damaged stock records.

    Query parameters:
    - date_from / date_to: Filter by damage date (YYYY-MM-DD)
    """

    serializer_class = DamagedProductSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["damage_date", "cost", "quantity"]
    ordering = ["-damage_date"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(DamagedProduct.objects.select_related("product", "recorded_by"))
        date_from = parse_date(params.get("date_from") or "")
        if date_from:
            queryset = queryset.filter(damage_date__gte=date_from)
        date_to = parse_date(params.get("date_to") or "")
        if date_to:
            queryset = queryset.filter(damage_date__lte=date_to)
        return queryset


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def damage_statistics(request):
    """Total cost, quantity and count of damaged stock for a date range."""
    params = request.query_params
    queryset = scope_to_branch(DamagedProduct.objects.all(), resolve_branch_id(request))
    stats = services.damage_statistics(
        queryset,
        date_from=parse_date(params.get("date_from") or ""),
        date_to=parse_date(params.get("date_to") or ""),
    )
    return Response(stats, status=status.HTTP_200_OK)


# Transfers


class InventoryTransferListView(generics.ListAPIView):
    """
    API endpoint for listing inventory transfers.

    Query parameters:
    - status: Filter by status
    - search: Transfer number
    - branch: Transfers in or out of this branch
    """

    serializer_class = InventoryTransferSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["transfer_number", "created_at", "status"]
    ordering = ["-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = InventoryTransfer.objects.select_related(
            "from_branch", "to_branch", "requested_by", "processed_by"
        ).prefetch_related("items__product")

        user = self.request.user
        if not user.can_switch_branch() and user.branch_id:
            queryset = queryset.filter(Q(from_branch=user.branch) | Q(to_branch=user.branch))

        if params.get("search"):
            queryset = queryset.filter(transfer_number__icontains=params["search"])
        if params.get("status"):
            queryset = queryset.filter(status=params["status"])
        if params.get("branch"):
            queryset = queryset.filter(
                Q(from_branch_id=params["branch"]) | Q(to_branch_id=params["branch"])
            )
        return queryset


class InventoryTransferDetailView(generics.RetrieveAPIView):
    serializer_class = InventoryTransferSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = "id"
    queryset = InventoryTransfer.objects.select_related(
        "from_branch", "to_branch", "requested_by", "processed_by"
    ).prefetch_related("items__product")


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def create_transfer(request):
    """
    Request a stock transfer between branches.

    Request body:
    {
        "from_branch_id": "uuid",
        "to_branch_id": "uuid",
        "items": [{"product_id": "uuid", "quantity": 2}],
        "notes": ""
    }
    """
    serializer = InventoryTransferCreateSerializer(data=request.data, context={"request": request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    transfer = serializer.save()
    logger.info(f"Transfer {transfer.transfer_number} requested by {request.user.username}")
    return Response(InventoryTransferSerializer(transfer).data, status=status.HTTP_201_CREATED)


def _transition_transfer(request, transfer_id, action, *args):
    """Load, lock and move a transfer through one FSM transition."""
    try:
        with transaction.atomic():
            transfer = InventoryTransfer.objects.select_for_update().get(id=transfer_id)
            getattr(transfer, action)(request.user, *args)
            transfer.save()
    except InventoryTransfer.DoesNotExist:
        return Response({"detail": "Transfer not found."}, status=status.HTTP_404_NOT_FOUND)
    except TransitionNotAllowed:
        return Response(
            {"detail": f"Cannot {action} a transfer that is {transfer.status}."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except (ValueError, Product.DoesNotExist) as e:
        logger.warning(f"Transfer {transfer_id} {action} failed: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Transfer {transfer.transfer_number} {transfer.status} by {request.user.username}")
    return Response(
        {
            "detail": f"Transfer {transfer.get_status_display().lower()}.",
            "transfer": InventoryTransferSerializer(transfer).data,
        },
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def approve_transfer(request, transfer_id):
    return _transition_transfer(request, transfer_id, "approve")


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def reject_transfer(request, transfer_id):
    """
    Reject a pending transfer.

    Request body:
    {
        "reason": "Reason for rejection"
    }
    """
    serializer = RejectSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return _transition_transfer(request, transfer_id, "reject", serializer.validated_data["reason"])


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def complete_transfer(request, transfer_id):
    """Move the stock of an approved transfer to the destination branch."""
    return _transition_transfer(request, transfer_id, "complete")


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def cancel_transfer(request, transfer_id):
    return _transition_transfer(
        request, transfer_id, "cancel", request.data.get("reason", "")
    )
