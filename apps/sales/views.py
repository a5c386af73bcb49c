"""
Views for sales and POS functionality.

- POS product and customer search
- Sale checkout, list, detail and cancellation
- Invoice PDF, HTML and barcode
- Return orders and their approval workflow
"""

import logging

from django.db.models import Count, Q
from django.http import HttpResponse

from django_fsm import TransitionNotAllowed
from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.branch_context import BranchScopedMixin, get_current_branch, resolve_branch_id
from apps.core.permissions import CanUsePOS, IsStoreAdmin

from . import services
from .models import ReturnOrder, Sale
from .receipt_service import FORMATS, ReceiptGenerator, ReceiptService
from .serializers import (
    ApproveReturnSerializer,
    CancelSaleSerializer,
    POSCustomerSerializer,
    POSProductSerializer,
    RejectReturnSerializer,
    ReturnOrderCreateSerializer,
    ReturnOrderSerializer,
    SaleCreateSerializer,
    SaleDetailSerializer,
    SaleListSerializer,
)

logger = logging.getLogger(__name__)


# POS API


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def pos_product_search(request):
    """
    Search products for the POS by name or barcode.

    Query parameters:
    - q: Search query
    - limit: Number of results (default: 20)
    """
    query = request.query_params.get("q", "").strip()
    if not query:
        return Response({"results": []}, status=status.HTTP_200_OK)

    try:
        limit = min(int(request.query_params.get("limit", services.POS_SEARCH_LIMIT)), 100)
    except ValueError:
        limit = services.POS_SEARCH_LIMIT

    products = services.pos_product_search(query, resolve_branch_id(request), limit=limit)
    return Response(
        {"results": POSProductSerializer(products, many=True).data}, status=status.HTTP_200_OK
    )


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def pos_customer_search(request):
    """
    Search customers by name or phone (at most 10).

    Query parameters:
    - q: Search query
    """
    customers = services.pos_customer_search(request.query_params.get("q", ""))
    return Response(
        {"results": POSCustomerSerializer(customers, many=True).data}, status=status.HTTP_200_OK
    )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, CanUsePOS])
def pos_create_sale(request):
    """
    Check out a sale.

    Request body:
    {
        "customer_id": "uuid" (optional),
        "customer_name": "" (optional),
        "customer_phone": "" (optional, matched or created when no customer_id),
        "items": [
            {
                "product_id": "uuid",
                "quantity": "1.000",
                "unit_price": "100.00" (optional, uses the current price if not provided),
                "discount": "0.00" (optional, line discount),
                "is_bulk": false (optional)
            }
        ],
        "payment_method": "cash|card|mixed",
        "cash_amount": "0.00" (mixed only),
        "card_amount": "0.00" (mixed only),
        "discount": "0.00" (optional, invoice discount),
        "notes": "" (optional)
    }
    """
    serializer = SaleCreateSerializer(
        data=request.data,
        context={"request": request, "branch": get_current_branch(request)},
    )
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        sale = serializer.save()
    except ValueError as e:
        logger.warning(f"POS sale rejected: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SaleDetailSerializer(sale).data, status=status.HTTP_201_CREATED)


# Sale Management API


class SaleListView(BranchScopedMixin, generics.ListAPIView):
    """
    API endpoint for listing sales with filters.

    Query parameters:
    - search: Invoice number, customer name or phone
    - cashier: Filter by cashier
    - customer: Filter by customer
    - payment_method: Filter by payment method
    - status: Filter by status
    - date_from: Filter by date (YYYY-MM-DD)
    - date_to: Filter by date (YYYY-MM-DD)
    """

    serializer_class = SaleListSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["date", "total", "invoice_number", "profit"]
    ordering = ["-date"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(Sale.objects.all()).annotate(items_count=Count("items"))

        search = params.get("search")
        if search:
            queryset = queryset.filter(
                Q(invoice_number__icontains=search)
                | Q(customer_name__icontains=search)
                | Q(customer_phone__icontains=search)
            )

        if params.get("cashier"):
            queryset = queryset.filter(cashier_id=params["cashier"])

        if params.get("customer"):
            queryset = queryset.filter(customer_id=params["customer"])

        if params.get("payment_method"):
            queryset = queryset.filter(payment_method=params["payment_method"])

        if params.get("status"):
            queryset = queryset.filter(status=params["status"])

        if params.get("date_from"):
            queryset = queryset.filter(date__date__gte=params["date_from"])

        if params.get("date_to"):
            queryset = queryset.filter(date__date__lte=params["date_to"])

        return queryset


class SaleDetailView(BranchScopedMixin, generics.RetrieveAPIView):
    serializer_class = SaleDetailSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_field = "id"

    def get_queryset(self):
        return self.scope(
            Sale.objects.select_related("branch", "cashier", "customer").prefetch_related("items")
        )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def cancel_sale(request, sale_id):
    """
    Void a completed sale that has no returns. Stock is put back.

    Request body:
    {
        "reason": "Entered twice" (optional)
    }
    """
    serializer = CancelSaleSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        sale = services.cancel_sale(sale_id, request.user, serializer.validated_data["reason"])
    except Sale.DoesNotExist:
        return Response({"detail": "Sale not found."}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SaleDetailSerializer(sale).data, status=status.HTTP_200_OK)


# Receipt Generation


def _get_sale(sale_id):
    return (
        Sale.objects.select_related("branch", "cashier", "customer")
        .prefetch_related("items")
        .filter(id=sale_id)
        .first()
    )


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def receipt_html(request, sale_id, format_type="standard"):
    """
    HTML invoice for browser printing.

    Args:
        sale_id: UUID of the sale
        format_type: 'standard' or 'thermal'
    """
    sale = _get_sale(sale_id)
    if sale is None:
        return Response({"detail": "Sale not found."}, status=status.HTTP_404_NOT_FOUND)
    if format_type not in FORMATS:
        return Response(
            {"detail": f"Unsupported receipt format: {format_type}"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    html_content = ReceiptService.generate_receipt(
        sale=sale, format_type=format_type, output_format="html"
    ).decode("utf-8")
    return HttpResponse(html_content, content_type="text/html")


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def receipt_pdf(request, sale_id, format_type="standard"):
    """
    PDF invoice for download.

    Args:
        sale_id: UUID of the sale
        format_type: 'standard' or 'thermal'
    """
    sale = _get_sale(sale_id)
    if sale is None:
        return Response({"detail": "Sale not found."}, status=status.HTTP_404_NOT_FOUND)
    if format_type not in FORMATS:
        return Response(
            {"detail": f"Unsupported receipt format: {format_type}"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        pdf_bytes = ReceiptService.generate_receipt(
            sale=sale, format_type=format_type, output_format="pdf"
        )
    except Exception as e:
        logger.error(f"Invoice PDF for {sale.invoice_number} failed: {e}", exc_info=True)
        return Response(
            {"detail": "Could not render the invoice."},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response = HttpResponse(pdf_bytes, content_type="application/pdf")
    filename = f"invoice_{sale.invoice_number}_{format_type}.pdf"
    response["Content-Disposition"] = f'attachment; filename="{filename}"'
    return response


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def invoice_barcode(request, sale_id):
    """Code 128 PNG of the invoice number."""
    sale = Sale.objects.filter(id=sale_id).first()
    if sale is None:
        return Response({"detail": "Sale not found."}, status=status.HTTP_404_NOT_FOUND)

    response = HttpResponse(ReceiptGenerator(sale).generate_barcode(), content_type="image/png")
    response["Content-Disposition"] = f'inline; filename="invoice_{sale.invoice_number}.png"'
    return response


# Return Orders


class ReturnOrderListView(BranchScopedMixin, generics.ListAPIView):
    """
    API endpoint for listing return orders.

    Query parameters:
    - status: pending|approved|rejected
    - order_type: pos|online
    - sale: Returns of one sale
    """

    serializer_class = ReturnOrderSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["created_at", "total"]
    ordering = ["-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(
            ReturnOrder.objects.select_related("sale", "online_order", "processed_by")
        ).prefetch_related("items")

        if params.get("status"):
            queryset = queryset.filter(status=params["status"])
        if params.get("order_type"):
            queryset = queryset.filter(order_type=params["order_type"])
        if params.get("sale"):
            queryset = queryset.filter(sale_id=params["sale"])
        return queryset


class ReturnOrderDetailView(generics.RetrieveAPIView):
    serializer_class = ReturnOrderSerializer
    permission_classes = [permissions.IsAuthenticated]
    queryset = ReturnOrder.objects.select_related("sale", "online_order").prefetch_related("items")
    lookup_field = "id"


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def create_return(request):
    """
    Request a return against a sale or an online order.

    Request body:
    {
        "order_type": "pos|online",
        "sale_id": "uuid" (pos),
        "online_order_id": "uuid" (online),
        "reason": "Damaged packaging",
        "items": [{"product_id": "uuid", "quantity": "1", "price": "10.00" (optional, at most the net price paid)}]
    }
    """
    serializer = ReturnOrderCreateSerializer(data=request.data, context={"request": request})
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    return_order = serializer.save()
    return Response(ReturnOrderSerializer(return_order).data, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def approve_return(request, return_id):
    """
    Approve a pending return.

    Request body:
    {
        "restock": true (optional, put the items back in stock)
    }
    """
    serializer = ApproveReturnSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        return_order = services.approve_return(
            return_id, request.user, restock=serializer.validated_data["restock"]
        )
    except ReturnOrder.DoesNotExist:
        return Response({"detail": "Return order not found."}, status=status.HTTP_404_NOT_FOUND)
    except TransitionNotAllowed:
        return Response(
            {"detail": "Only pending returns can be approved."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except ValueError as e:
        logger.warning(f"Return {return_id} approval failed: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(ReturnOrderSerializer(return_order).data, status=status.HTTP_200_OK)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def reject_return(request, return_id):
    """
    Reject a pending return.

    Request body:
    {
        "reason": "Reason for rejection" (required)
    }
    """
    serializer = RejectReturnSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        return_order = services.reject_return(
            return_id, request.user, serializer.validated_data["reason"]
        )
    except ReturnOrder.DoesNotExist:
        return Response({"detail": "Return order not found."}, status=status.HTTP_404_NOT_FOUND)
    except TransitionNotAllowed:
        return Response(
            {"detail": "Only pending returns can be rejected."},
            status=status.HTTP_400_BAD_REQUEST,
        )
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(ReturnOrderSerializer(return_order).data, status=status.HTTP_200_OK)
