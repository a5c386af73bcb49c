"""
Serializers for cash tracking, expenses and purchasing.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.inventory.models import Product

from .models import (
    CashTracking,
    CashTransaction,
    Expense,
    Purchase,
    PurchaseItem,
    RegisterType,
    Supplier,
)


class CashTrackingSerializer(serializers.ModelSerializer):
    recorded_by_name = serializers.CharField(
        source="recorded_by.username", read_only=True, default=None
    )

    class Meta:
        model = CashTracking
        fields = [
            "id",
            "branch",
            "register_type",
            "date",
            "opening_balance",
            "closing_balance",
            "difference",
            "notes",
            "recorded_by",
            "recorded_by_name",
            "created_at",
        ]
        read_only_fields = ["id", "branch", "difference", "recorded_by", "created_at"]


class CashTransactionSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(
        source="created_by.username", read_only=True, default=None
    )

    class Meta:
        model = CashTransaction
        fields = [
            "id",
            "branch",
            "register_type",
            "transaction_type",
            "amount",
            "balance_after",
            "notes",
            "created_by",
            "created_by_name",
            "transaction_date",
        ]
        read_only_fields = fields


class CashTransactionCreateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    transaction_type = serializers.ChoiceField(choices=CashTransaction.TRANSACTION_TYPE_CHOICES)
    register_type = serializers.ChoiceField(
        choices=RegisterType.CHOICES, default=RegisterType.STORE
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")


class CashTransferSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    from_register = serializers.ChoiceField(choices=RegisterType.CHOICES)
    to_register = serializers.ChoiceField(choices=RegisterType.CHOICES)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, data):
        if data["from_register"] == data["to_register"]:
            raise serializers.ValidationError("Cannot transfer to the same register.")
        return data


class CashSummarySerializer(serializers.Serializer):
    register_type = serializers.CharField()
    current_balance = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_deposits = serializers.DecimalField(max_digits=12, decimal_places=2)
    total_withdrawals = serializers.DecimalField(max_digits=12, decimal_places=2)
    net_change = serializers.DecimalField(max_digits=12, decimal_places=2)
    transaction_count = serializers.IntegerField()
    recent_transactions = CashTransactionSerializer(many=True)


class ExpenseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Expense
        fields = [
            "id",
            "branch",
            "expense_type",
            "amount",
            "description",
            "date",
            "receipt_url",
            "created_by",
            "created_at",
        ]
        read_only_fields = ["id", "receipt_url", "created_by", "created_at"]


class SupplierSerializer(serializers.ModelSerializer):
    purchases_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Supplier
        fields = [
            "id",
            "name",
            "contact_person",
            "phone",
            "email",
            "address",
            "balance",
            "is_active",
            "notes",
            "purchases_count",
            "created_at",
        ]
        read_only_fields = ["id", "balance", "purchases_count", "created_at"]

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Supplier name is required.")
        return value


class SupplierPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    register_type = serializers.ChoiceField(
        choices=RegisterType.CHOICES, default=RegisterType.STORE
    )


class PurchaseItemCreateSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), source="product"
    )
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0.001")
    )
    unit_cost = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00")
    )


class PurchaseCreateSerializer(serializers.Serializer):
    """
    Serializer for recording a supplier invoice.

    Accepts JSON, or multipart with ``items`` as a JSON string and an
    optional ``invoice_file``.
    """

    supplier = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.all())
    invoice_number = serializers.CharField(max_length=100)
    date = serializers.DateField(required=False)
    paid = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal("0.00"), default=Decimal("0.00")
    )
    description = serializers.CharField(required=False, allow_blank=True, default="")
    register_type = serializers.ChoiceField(
        choices=RegisterType.CHOICES, default=RegisterType.STORE, allow_null=True
    )
    invoice_file = serializers.FileField(required=False, write_only=True)
    items = PurchaseItemCreateSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required.")
        return value

    def validate(self, data):
        total = sum(
            (
                (line["unit_cost"] * line["quantity"]).quantize(Decimal("0.01"))
                for line in data["items"]
            ),
            Decimal("0.00"),
        )
        if data["paid"] > total:
            raise serializers.ValidationError(
                {"paid": f"Paid amount cannot exceed the purchase total ({total})."}
            )
        return data


class PurchaseItemSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True, default=None)

    class Meta:
        model = PurchaseItem
        fields = ["id", "product", "product_name", "quantity", "unit_cost", "total"]


class PurchaseSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source="supplier.name", read_only=True)
    remaining = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    items = PurchaseItemSerializer(many=True, read_only=True)

    class Meta:
        model = Purchase
        fields = [
            "id",
            "supplier",
            "supplier_name",
            "branch",
            "invoice_number",
            "date",
            "total",
            "paid",
            "remaining",
            "description",
            "invoice_file_url",
            "items",
            "created_by",
            "created_at",
        ]
        read_only_fields = fields
