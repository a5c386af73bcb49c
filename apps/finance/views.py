"""
Views for cash registers, expenses, suppliers and purchases.
"""

import json
import logging

from django.core.files.storage import default_storage
from django.db.models import Count
from django.utils import timezone

from rest_framework import filters, generics, permissions, status
from rest_framework.decorators import api_view, parser_classes, permission_classes
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from apps.core.branch_context import BranchScopedMixin, get_current_branch, resolve_branch_id
from apps.core.permissions import IsStoreAdmin

from . import services
from .models import CashTracking, CashTransaction, Expense, Purchase, RegisterType, Supplier
from .serializers import (
    CashSummarySerializer,
    CashTrackingSerializer,
    CashTransactionCreateSerializer,
    CashTransactionSerializer,
    CashTransferSerializer,
    ExpenseSerializer,
    PurchaseCreateSerializer,
    PurchaseSerializer,
    SupplierPaymentSerializer,
    SupplierSerializer,
)

logger = logging.getLogger(__name__)


def _save_upload(upload, folder):
    """Store an uploaded file and return its public URL."""
    stamp = timezone.now().strftime("%Y%m%d%H%M%S")
    path = default_storage.save(f"{folder}/{stamp}_{upload.name}", upload)
    return default_storage.url(path)


def _filter_dates(queryset, params, field):
    if params.get("date_from"):
        queryset = queryset.filter(**{f"{field}__gte": params["date_from"]})
    if params.get("date_to"):
        queryset = queryset.filter(**{f"{field}__lte": params["date_to"]})
    return queryset


# Cash registers


class CashTrackingListCreateView(BranchScopedMixin, generics.ListCreateAPIView):
    """
    Counted register balances.

    Query parameters:
    - register_type: store|online|delivery
    - date_from / date_to: Date range (YYYY-MM-DD)
    """

    serializer_class = CashTrackingSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(CashTracking.objects.select_related("recorded_by"))
        if params.get("register_type"):
            queryset = queryset.filter(register_type=params["register_type"])
        return _filter_dates(queryset, params, "date")

    def perform_create(self, serializer):
        record = serializer.save(branch=self.get_branch(), recorded_by=self.request.user)
        logger.info(
            f"Cash record for {record.register_type} register: "
            f"{record.opening_balance} -> {record.closing_balance}"
        )


class CashTrackingDetailView(BranchScopedMixin, generics.RetrieveUpdateDestroyAPIView):
    serializer_class = CashTrackingSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    lookup_field = "id"

    def get_queryset(self):
        return self.scope(CashTracking.objects.all())


class CashTransactionListView(BranchScopedMixin, generics.ListAPIView):
    serializer_class = CashTransactionSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["transaction_date", "amount"]
    ordering = ["-transaction_date"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(CashTransaction.objects.select_related("created_by"))
        if params.get("register_type"):
            queryset = queryset.filter(register_type=params["register_type"])
        if params.get("transaction_type"):
            queryset = queryset.filter(transaction_type=params["transaction_type"])
        return _filter_dates(queryset, params, "transaction_date__date")


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def create_cash_transaction(request):
    """
    Deposit into or withdraw from a register.

    Request body:
    {
        "amount": "100.00",
        "transaction_type": "deposit|withdrawal",
        "register_type": "store|online|delivery",
        "notes": ""
    }
    """
    serializer = CashTransactionCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        cash_transaction = services.record_cash_transaction(
            data["amount"],
            data["transaction_type"],
            data["register_type"],
            branch=get_current_branch(request),
            notes=data["notes"],
            user=request.user,
        )
    except ValueError as e:
        logger.warning(f"Cash transaction refused: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(
        CashTransactionSerializer(cash_transaction).data, status=status.HTTP_201_CREATED
    )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def transfer_cash(request):
    serializer = CashTransferSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    data = serializer.validated_data
    try:
        withdrawal, deposit = services.transfer_between_registers(
            data["amount"],
            data["from_register"],
            data["to_register"],
            branch=get_current_branch(request),
            notes=data["notes"],
            user=request.user,
        )
    except ValueError as e:
        logger.warning(f"Cash transfer refused: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(
        {
            "withdrawal": CashTransactionSerializer(withdrawal).data,
            "deposit": CashTransactionSerializer(deposit).data,
        },
        status=status.HTTP_201_CREATED,
    )


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def cash_summary(request):
    """
    Register totals and current balance.

    Query parameters:
    - register_type: store|online|delivery (default store)
    - date_from / date_to: Date range (YYYY-MM-DD)
    """
    params = request.query_params
    register_type = params.get("register_type", RegisterType.STORE)
    if register_type not in dict(RegisterType.CHOICES):
        return Response(
            {"detail": f"Invalid register type: {register_type}"},
            status=status.HTTP_400_BAD_REQUEST,
        )

    summary = services.cash_summary(
        branch_id=resolve_branch_id(request),
        register_type=register_type,
        date_from=params.get("date_from"),
        date_to=params.get("date_to"),
    )
    return Response(CashSummarySerializer(summary).data, status=status.HTTP_200_OK)


# Expenses


class ExpenseListCreateView(BranchScopedMixin, generics.ListCreateAPIView):
    """
    Query parameters:
    - expense_type: Filter by type
    - date_from / date_to: Date range (YYYY-MM-DD)
    """

    serializer_class = ExpenseSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    parser_classes = [JSONParser, MultiPartParser, FormParser]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["date", "amount"]
    ordering = ["-date"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(Expense.objects.all())
        if params.get("expense_type"):
            queryset = queryset.filter(expense_type=params["expense_type"])
        return _filter_dates(queryset, params, "date")

    def perform_create(self, serializer):
        receipt = self.request.FILES.get("receipt")
        receipt_url = _save_upload(receipt, "expenses") if receipt else ""
        expense = serializer.save(
            branch=serializer.validated_data.get("branch") or self.get_branch(),
            created_by=self.request.user,
            receipt_url=receipt_url,
        )
        logger.info(f"Expense {expense.expense_type} {expense.amount} recorded")


class ExpenseDetailView(BranchScopedMixin, generics.RetrieveUpdateDestroyAPIView):
    serializer_class = ExpenseSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    lookup_field = "id"

    def get_queryset(self):
        return self.scope(Expense.objects.all())


# Suppliers


class SupplierListCreateView(generics.ListCreateAPIView):
    """
    Query parameters:
    - search: Name, contact person or phone
    - owed: true to list only suppliers with an outstanding balance
    """

    serializer_class = SupplierSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter]
    search_fields = ["name", "contact_person", "phone"]
    ordering_fields = ["name", "balance", "created_at"]
    ordering = ["name"]

    def get_queryset(self):
        queryset = Supplier.objects.annotate(purchases_count=Count("purchases"))
        if self.request.query_params.get("owed") == "true":
            queryset = queryset.filter(balance__gt=0)
        return queryset


class SupplierDetailView(generics.RetrieveUpdateDestroyAPIView):
    serializer_class = SupplierSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    queryset = Supplier.objects.annotate(purchases_count=Count("purchases"))
    lookup_field = "id"

    def destroy(self, request, *args, **kwargs):
        supplier = self.get_object()
        if supplier.purchases.exists():
            return Response(
                {"detail": "Cannot delete a supplier with recorded purchases."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        logger.info(f"Supplier {supplier.name} deleted by {request.user.username}")
        supplier.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
def pay_supplier(request, supplier_id):
    serializer = SupplierPaymentSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        supplier = services.pay_supplier(
            supplier_id,
            serializer.validated_data["amount"],
            serializer.validated_data["register_type"],
            branch=get_current_branch(request),
            user=request.user,
        )
    except Supplier.DoesNotExist:
        return Response({"detail": "Supplier not found."}, status=status.HTTP_404_NOT_FOUND)
    except ValueError as e:
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(SupplierSerializer(supplier).data, status=status.HTTP_200_OK)


# Purchases


class PurchaseListView(BranchScopedMixin, generics.ListAPIView):
    """
    Query parameters:
    - supplier: Supplier id
    - search: Invoice number
    - date_from / date_to: Date range (YYYY-MM-DD)
    """

    serializer_class = PurchaseSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    filter_backends = [filters.OrderingFilter]
    ordering_fields = ["date", "total", "created_at"]
    ordering = ["-date", "-created_at"]

    def get_queryset(self):
        params = self.request.query_params
        queryset = self.scope(
            Purchase.objects.select_related("supplier").prefetch_related("items__product")
        )
        if params.get("supplier"):
            queryset = queryset.filter(supplier_id=params["supplier"])
        if params.get("search"):
            queryset = queryset.filter(invoice_number__icontains=params["search"])
        return _filter_dates(queryset, params, "date")


class PurchaseDetailView(BranchScopedMixin, generics.RetrieveAPIView):
    serializer_class = PurchaseSerializer
    permission_classes = [permissions.IsAuthenticated, IsStoreAdmin]
    lookup_field = "id"

    def get_queryset(self):
        return self.scope(Purchase.objects.select_related("supplier"))


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated, IsStoreAdmin])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def create_purchase(request):
    """
    Record a supplier invoice: pay from the register, add stock, and carry
    the unpaid remainder on the supplier's balance. All steps or none.

    Request body:
    {
        "supplier": "uuid",
        "invoice_number": "INV-1",
        "paid": "100.00",
        "register_type": "store" (null to skip the cash withdrawal),
        "items": [{"product_id": "uuid", "quantity": "10", "unit_cost": "12.50"}]
    }
    """
    data = {key: request.data.get(key) for key in request.data}
    if isinstance(data.get("items"), str):
        try:
            data["items"] = json.loads(data["items"])
        except ValueError:
            return Response(
                {"items": ["Items must be a JSON list."]}, status=status.HTTP_400_BAD_REQUEST
            )

    serializer = PurchaseCreateSerializer(data=data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    validated = serializer.validated_data
    invoice_file = validated.get("invoice_file")
    try:
        purchase = services.create_purchase(
            supplier=validated["supplier"],
            invoice_number=validated["invoice_number"],
            items=validated["items"],
            paid=validated["paid"],
            branch=get_current_branch(request),
            date=validated.get("date"),
            description=validated["description"],
            invoice_file_url=_save_upload(invoice_file, "invoices") if invoice_file else "",
            register_type=validated["register_type"],
            user=request.user,
        )
    except ValueError as e:
        logger.warning(f"Purchase {validated['invoice_number']} refused: {e}")
        return Response({"detail": str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PurchaseSerializer(purchase).data, status=status.HTTP_201_CREATED)
