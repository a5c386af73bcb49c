"""
Serializers for inventory models.
"""

from decimal import Decimal

from django.db import transaction

from rest_framework import serializers

from apps.core.models import Branch

from . import services
from .import_service import MODES, MODE_SET
from .models import (
    Category,
    Company,
    DamagedProduct,
    InventoryTransfer,
    InventoryTransferItem,
    Product,
    ProductBatch,
)


class CategorySerializer(serializers.ModelSerializer):
    """Serializer for Category model."""

    parent = serializers.PrimaryKeyRelatedField(
        queryset=Category.objects.all(),
        required=False,
        allow_null=True,
    )
    parent_name = serializers.CharField(source="parent.name", read_only=True, default=None)
    subcategories_count = serializers.SerializerMethodField()
    products_count = serializers.SerializerMethodField()

    class Meta:
        model = Category
        fields = [
            "id",
            "name",
            "parent",
            "parent_name",
            "image",
            "description",
            "sort_order",
            "is_active",
            "subcategories_count",
            "products_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]

    def get_subcategories_count(self, obj):
        return obj.subcategories.count()

    def get_products_count(self, obj):
        if obj.parent_id:
            return obj.subcategory_products.count()
        return obj.products.count()

    def validate(self, data):
        parent = data.get("parent")
        if parent:
            if self.instance and parent.pk == self.instance.pk:
                raise serializers.ValidationError(
                    {"parent": "A category cannot be its own parent."}
                )
            current = parent
            while current:
                if self.instance and current.pk == self.instance.pk:
                    raise serializers.ValidationError(
                        {"parent": "Circular parent relationship detected."}
                    )
                current = current.parent
        return data


class CompanySerializer(serializers.ModelSerializer):
    products_count = serializers.IntegerField(source="products.count", read_only=True)

    class Meta:
        model = Company
        fields = [
            "id",
            "name",
            "logo",
            "description",
            "is_active",
            "products_count",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_at", "updated_at"]


class ProductListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for product lists and the POS grid."""

    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    subcategory_name = serializers.CharField(
        source="subcategory.name", read_only=True, default=None
    )
    company_name = serializers.CharField(source="company.name", read_only=True, default=None)
    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    available_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, read_only=True
    )
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "barcode",
            "barcode_type",
            "price",
            "purchase_price",
            "offer_price",
            "is_offer",
            "unit_price",
            "quantity",
            "available_quantity",
            "min_quantity",
            "is_low_stock",
            "category",
            "category_name",
            "subcategory",
            "subcategory_name",
            "company",
            "company_name",
            "branch",
            "branch_name",
            "image",
            "is_active",
        ]


class ProductDetailSerializer(ProductListSerializer):
    variants = serializers.SerializerMethodField()

    class Meta(ProductListSerializer.Meta):
        fields = ProductListSerializer.Meta.fields + [
            "bulk_enabled",
            "bulk_quantity",
            "bulk_price",
            "bulk_barcode",
            "parent",
            "shares_parent_inventory",
            "variants",
            "description",
            "shelf_location",
            "created_at",
            "updated_at",
        ]

    def get_variants(self, obj):
        return ProductListSerializer(obj.variants.all(), many=True).data


class ProductCreateUpdateSerializer(serializers.ModelSerializer):
    """Serializer for creating and updating products."""

    barcode = serializers.CharField(max_length=64, required=False, allow_blank=True, allow_null=True)
    bulk_barcode = serializers.CharField(
        max_length=64, required=False, allow_blank=True, allow_null=True
    )

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "barcode",
            "barcode_type",
            "price",
            "purchase_price",
            "offer_price",
            "is_offer",
            "bulk_enabled",
            "bulk_quantity",
            "bulk_price",
            "bulk_barcode",
            "quantity",
            "min_quantity",
            "category",
            "subcategory",
            "company",
            "branch",
            "parent",
            "shares_parent_inventory",
            "image",
            "description",
            "shelf_location",
            "is_active",
        ]
        read_only_fields = ["id"]

    def _validate_unique_code(self, value):
        value = (value or "").strip() or None
        if value is None:
            return None
        queryset = Product.objects.filter(barcode=value) | Product.objects.filter(
            bulk_barcode=value
        )
        if self.instance:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("A product with this barcode already exists.")
        return value

    def validate_barcode(self, value):
        return self._validate_unique_code(value)

    def validate_bulk_barcode(self, value):
        return self._validate_unique_code(value)

    def validate_quantity(self, value):
        if value < 0:
            raise serializers.ValidationError("Quantity cannot be negative.")
        return value

    def validate(self, data):
        def current(field):
            return data.get(field, getattr(self.instance, field, None) if self.instance else None)

        if current("is_offer") and current("offer_price") is None:
            raise serializers.ValidationError({"offer_price": "Offer price is required for offers."})

        if current("bulk_enabled"):
            if not current("bulk_quantity") or current("bulk_price") is None:
                raise serializers.ValidationError(
                    {"bulk_quantity": "Bulk quantity and bulk price are required for bulk pricing."}
                )

        barcode = data.get("barcode")
        if barcode and barcode == data.get("bulk_barcode"):
            raise serializers.ValidationError(
                {"bulk_barcode": "Bulk barcode must differ from the product barcode."}
            )

        parent = current("parent")
        if parent is not None:
            if self.instance and parent.pk == self.instance.pk:
                raise serializers.ValidationError({"parent": "A product cannot be its own parent."})
            if parent.parent_id:
                raise serializers.ValidationError({"parent": "Variants cannot have variants."})
        elif current("shares_parent_inventory"):
            raise serializers.ValidationError(
                {"shares_parent_inventory": "Only variants can share their parent's stock."}
            )

        subcategory = current("subcategory")
        if subcategory is not None and subcategory.parent_id is None:
            raise serializers.ValidationError(
                {"subcategory": "Choose a sub-category, not a main category."}
            )

        return data


class BarcodeLookupSerializer(serializers.Serializer):
    """Result of resolving a scanned barcode."""

    product = ProductListSerializer()
    kind = serializers.CharField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=3)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2)
    line_total = serializers.DecimalField(max_digits=12, decimal_places=2)


class StockAdjustmentSerializer(serializers.Serializer):
    """Serializer for stock adjustment operations."""

    ADJUSTMENT_TYPE_CHOICES = [
        (services.ADD, "Add to stock"),
        (services.DEDUCT, "Deduct from stock"),
        (services.SET, "Set stock level"),
    ]

    adjustment_type = serializers.ChoiceField(choices=ADJUSTMENT_TYPE_CHOICES)
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0.000")
    )
    reason = serializers.CharField(max_length=500, required=False, allow_blank=True)

    def validate(self, data):
        if data["adjustment_type"] != services.SET and data["quantity"] <= 0:
            raise serializers.ValidationError({"quantity": "Quantity must be greater than zero."})
        return data


class QuantityImportSerializer(serializers.Serializer):
    file = serializers.FileField()
    barcode_column = serializers.IntegerField(min_value=1, default=2)
    quantity_column = serializers.IntegerField(min_value=1, default=5)
    mode = serializers.ChoiceField(choices=MODES, default=MODE_SET)
    has_header = serializers.BooleanField(default=True)

    def validate_file(self, value):
        if not value.name.lower().endswith(".xlsx"):
            raise serializers.ValidationError("Only .xlsx files are supported.")
        return value


# Batches and damage


class ProductBatchSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    product_barcode = serializers.CharField(source="product.barcode", read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    days_until_expiry = serializers.IntegerField(read_only=True)

    class Meta:
        model = ProductBatch
        fields = [
            "id",
            "product",
            "product_name",
            "product_barcode",
            "branch",
            "batch_number",
            "quantity",
            "expiry_date",
            "shelf_location",
            "notes",
            "is_expired",
            "days_until_expiry",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "branch", "created_at", "updated_at"]


class ExpiredBatchActionSerializer(serializers.Serializer):
    """
    Action on an expired batch.

    ``damaged`` writes the batch off; ``replace`` swaps in a new batch
    number and expiry date.
    """

    DAMAGED = "damaged"
    REPLACE = "replace"

    action = serializers.ChoiceField(choices=[DAMAGED, REPLACE])
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    expiry_date = serializers.DateField(required=False)
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate(self, data):
        if data["action"] == self.REPLACE:
            if not data.get("batch_number") or not data.get("expiry_date"):
                raise serializers.ValidationError(
                    "A new batch number and expiry date are required to replace a batch."
                )
        return data


class DamagedProductSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    recorded_by_name = serializers.CharField(
        source="recorded_by.get_full_name", read_only=True, default=None
    )

    class Meta:
        model = DamagedProduct
        fields = [
            "id",
            "product",
            "product_name",
            "branch",
            "batch_number",
            "quantity",
            "cost",
            "damage_date",
            "notes",
            "recorded_by",
            "recorded_by_name",
            "created_at",
        ]
        read_only_fields = ["id", "branch", "recorded_by", "created_at"]


# Inventory Transfer Serializers


class InventoryTransferItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0.001")
    )


class InventoryTransferItemDetailSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source="product.name", read_only=True)
    total_value = serializers.DecimalField(
        source="calculate_value", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = InventoryTransferItem
        fields = ["id", "product", "product_name", "quantity", "unit_cost", "total_value"]


class InventoryTransferSerializer(serializers.ModelSerializer):
    from_branch_name = serializers.CharField(source="from_branch.name", read_only=True)
    to_branch_name = serializers.CharField(source="to_branch.name", read_only=True)
    requested_by_name = serializers.CharField(
        source="requested_by.get_full_name", read_only=True
    )
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    items = InventoryTransferItemDetailSerializer(many=True, read_only=True)
    total_value = serializers.DecimalField(
        source="calculate_total_value", max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = InventoryTransfer
        fields = [
            "id",
            "transfer_number",
            "from_branch",
            "from_branch_name",
            "to_branch",
            "to_branch_name",
            "status",
            "status_display",
            "requested_by",
            "requested_by_name",
            "processed_by",
            "approved_at",
            "completed_at",
            "notes",
            "rejection_reason",
            "items",
            "total_value",
            "created_at",
        ]
        read_only_fields = fields


class InventoryTransferCreateSerializer(serializers.Serializer):
    """Serializer for creating inventory transfers."""

    from_branch_id = serializers.UUIDField()
    to_branch_id = serializers.UUIDField()
    items = InventoryTransferItemSerializer(many=True)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")

    def _validate_branch(self, value):
        if not Branch.objects.filter(id=value, is_active=True).exists():
            raise serializers.ValidationError("Branch not found or inactive.")
        return value

    def validate_from_branch_id(self, value):
        return self._validate_branch(value)

    def validate_to_branch_id(self, value):
        return self._validate_branch(value)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required for transfer.")
        product_ids = [item["product_id"] for item in value]
        if len(product_ids) != len(set(product_ids)):
            raise serializers.ValidationError("Duplicate products are not allowed in a transfer.")
        return value

    def validate(self, data):
        if data["from_branch_id"] == data["to_branch_id"]:
            raise serializers.ValidationError(
                {"to_branch_id": "Source and destination branches must be different."}
            )

        for item in data["items"]:
            try:
                product = Product.objects.get(id=item["product_id"])
            except Product.DoesNotExist:
                raise serializers.ValidationError(
                    {"items": f"Product {item['product_id']} not found."}
                )
            if product.branch_id != data["from_branch_id"]:
                raise serializers.ValidationError(
                    {"items": f"{product.name} is not stocked in the source branch."}
                )
            if product.available_quantity < item["quantity"]:
                raise serializers.ValidationError(
                    {
                        "items": f"Insufficient quantity for {product.name}. "
                        f"Available: {product.available_quantity}, Requested: {item['quantity']}"
                    }
                )
        return data

    @transaction.atomic
    def create(self, validated_data):
        transfer = InventoryTransfer.objects.create(
            from_branch_id=validated_data["from_branch_id"],
            to_branch_id=validated_data["to_branch_id"],
            requested_by=self.context["request"].user,
            notes=validated_data.get("notes", ""),
        )
        for item in validated_data["items"]:
            product = Product.objects.get(id=item["product_id"])
            InventoryTransferItem.objects.create(
                transfer=transfer,
                product=product,
                quantity=item["quantity"],
                unit_cost=product.purchase_price,
            )
        return transfer


class RejectSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, required=False, default="")

    def validate_reason(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("A rejection reason is required.")
        return value
