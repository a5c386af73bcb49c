"""
Serializers for sales app.

- POS sale creation with stock deduction
- Sale list and detail
- Return orders
"""

import logging
from decimal import Decimal

from django.db import transaction

from rest_framework import serializers

from apps.crm import services as crm_services
from apps.crm.models import Customer
from apps.inventory.models import Product
from apps.orders.models import OnlineOrder

from . import services
from .models import ReturnOrder, ReturnOrderItem, Sale, SaleItem

logger = logging.getLogger(__name__)


class POSProductSerializer(serializers.ModelSerializer):
    """Product as shown on the POS search results."""

    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    available_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, read_only=True
    )
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "barcode",
            "barcode_type",
            "price",
            "offer_price",
            "is_offer",
            "unit_price",
            "bulk_enabled",
            "bulk_quantity",
            "bulk_price",
            "bulk_barcode",
            "available_quantity",
            "category_name",
            "image",
        ]


class POSCustomerSerializer(serializers.ModelSerializer):
    class Meta:
        model = Customer
        fields = ["id", "name", "phone", "email", "total_purchases"]


class SaleItemCreateSerializer(serializers.Serializer):
    """Serializer for creating sale items."""

    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0.001")
    )
    unit_price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0")
    )
    discount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        required=False,
        min_value=Decimal("0"),
    )
    is_bulk = serializers.BooleanField(default=False, required=False)

    def validate_product_id(self, value):
        if not Product.objects.filter(id=value, is_active=True).exists():
            raise serializers.ValidationError("Product not found or inactive.")
        return value


class SaleCreateSerializer(serializers.Serializer):
    """
    Serializer for checking out a sale through the POS.

    Handles:
    - Stock deduction with row locks
    - Customer association (by id, or matched/created by phone)
    - Cash/card/mixed payment split
    - Invoice number generation
    """

    customer_id = serializers.UUIDField(required=False, allow_null=True)
    customer_name = serializers.CharField(required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(required=False, allow_blank=True, default="")
    items = SaleItemCreateSerializer(many=True)
    payment_method = serializers.ChoiceField(choices=Sale.PAYMENT_METHOD_CHOICES)
    cash_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0")
    )
    card_amount = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0")
    )
    discount = serializers.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        required=False,
        min_value=Decimal("0"),
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")

    def validate_customer_id(self, value):
        if value is None:
            return value
        if not Customer.objects.filter(id=value).exists():
            raise serializers.ValidationError("Customer not found.")
        return value

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required.")
        return value

    def _split_payment(self, method, total, cash_amount, card_amount):
        if method == Sale.CASH:
            return total, Decimal("0.00")
        if method == Sale.CARD:
            return Decimal("0.00"), total
        cash_amount = cash_amount or Decimal("0.00")
        card_amount = card_amount or Decimal("0.00")
        if cash_amount + card_amount != total:
            raise serializers.ValidationError(
                {
                    "payment": f"Cash ({cash_amount}) and card ({card_amount}) "
                    f"must add up to the total ({total})."
                }
            )
        return cash_amount, card_amount

    @transaction.atomic
    def create(self, validated_data):
        """
        Create the sale, its items and deduct stock.

        This method:
        1. Locks and checks every product's stock
        2. Creates the sale with the next invoice number
        3. Creates sale items and deducts stock
        4. Adds the total to the customer's purchases
        """
        request = self.context["request"]
        branch = self.context.get("branch")

        discount = validated_data["discount"]
        subtotal = Decimal("0.00")
        cost = Decimal("0.00")
        lines = []

        for item_data in validated_data["items"]:
            product = Product.objects.select_for_update().get(id=item_data["product_id"])
            if product.parent_id and product.shares_parent_inventory:
                Product.objects.select_for_update().get(pk=product.parent_id)

            quantity = item_data["quantity"]
            if product.available_quantity < quantity:
                raise serializers.ValidationError(
                    f"Insufficient stock for {product.name}. "
                    f"Available: {product.available_quantity}, Requested: {quantity}"
                )

            unit_price = item_data.get("unit_price")
            bulk = item_data.get("is_bulk") and product.bulk_price and product.bulk_quantity
            if unit_price is None and bulk:
                unit_price = (product.bulk_price / product.bulk_quantity).quantize(Decimal("0.01"))
            if unit_price is None:
                unit_price = product.unit_price
            item_discount = item_data.get("discount") or Decimal("0.00")
            line_total = (unit_price * quantity - item_discount).quantize(Decimal("0.01"))
            if line_total < 0:
                raise serializers.ValidationError(
                    f"Discount on {product.name} exceeds the line amount."
                )

            subtotal += line_total
            cost += product.purchase_price * quantity
            lines.append(
                {
                    "product": product,
                    "product_name": product.name,
                    "quantity": quantity,
                    "unit_price": unit_price,
                    "purchase_price": product.purchase_price,
                    "discount": item_discount,
                    "total": line_total,
                    "is_bulk": item_data.get("is_bulk", False),
                }
            )

        if discount > subtotal:
            raise serializers.ValidationError({"discount": "Discount exceeds the subtotal."})
        total = subtotal - discount
        cash_amount, card_amount = self._split_payment(
            validated_data["payment_method"],
            total,
            validated_data.get("cash_amount"),
            validated_data.get("card_amount"),
        )

        customer = None
        if validated_data.get("customer_id"):
            customer = Customer.objects.get(id=validated_data["customer_id"])
        elif validated_data["customer_phone"].strip():
            customer = crm_services.find_or_create_customer(
                name=validated_data["customer_name"], phone=validated_data["customer_phone"]
            )

        sale = Sale.objects.create(
            invoice_number=services.generate_invoice_number(),
            branch=branch,
            cashier=request.user,
            customer=customer,
            customer_name=customer.name if customer else validated_data["customer_name"].strip(),
            customer_phone=(customer.phone or "") if customer else "",
            subtotal=subtotal,
            discount=discount,
            total=total,
            profit=(total - cost).quantize(Decimal("0.01")),
            payment_method=validated_data["payment_method"],
            cash_amount=cash_amount,
            card_amount=card_amount,
            notes=validated_data["notes"],
        )

        for line in lines:
            SaleItem.objects.create(sale=sale, **line)
            # Fresh instance: several lines may draw on the same stock
            product = Product.objects.get(pk=line["product"].pk)
            try:
                product.deduct_quantity(line["quantity"])
            except ValueError as e:
                raise serializers.ValidationError(str(e))

        if customer:
            crm_services.record_purchase(customer.pk, total)

        logger.info(f"Sale {sale.invoice_number} created by {request.user.username}: {total}")
        return sale


class SaleItemDetailSerializer(serializers.ModelSerializer):
    class Meta:
        model = SaleItem
        fields = [
            "id",
            "product",
            "product_name",
            "quantity",
            "unit_price",
            "purchase_price",
            "discount",
            "total",
            "is_bulk",
        ]


class SaleDetailSerializer(serializers.ModelSerializer):
    """Serializer for sale details."""

    items = SaleItemDetailSerializer(many=True, read_only=True)
    branch_name = serializers.CharField(source="branch.name", read_only=True, default=None)
    cashier_name = serializers.CharField(
        source="cashier.get_full_name", read_only=True, default=None
    )

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_number",
            "date",
            "customer",
            "customer_name",
            "customer_phone",
            "branch",
            "branch_name",
            "cashier",
            "cashier_name",
            "items",
            "subtotal",
            "discount",
            "total",
            "profit",
            "payment_method",
            "cash_amount",
            "card_amount",
            "status",
            "notes",
            "cancellation_reason",
            "cancelled_at",
            "created_at",
        ]


class SaleListSerializer(serializers.ModelSerializer):
    """Serializer for sale list."""

    customer_display = serializers.SerializerMethodField()
    items_count = serializers.IntegerField(read_only=True)

    class Meta:
        model = Sale
        fields = [
            "id",
            "invoice_number",
            "date",
            "customer_display",
            "total",
            "profit",
            "payment_method",
            "status",
            "items_count",
        ]

    def get_customer_display(self, obj):
        """Customer name or 'Walk-in' if none was given."""
        return obj.customer_name or "Walk-in"


class ReturnOrderItemCreateSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.all(), source="product"
    )
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0.001")
    )
    price = serializers.DecimalField(
        max_digits=12, decimal_places=2, required=False, allow_null=True, min_value=Decimal("0")
    )


class ReturnOrderCreateSerializer(serializers.Serializer):
    """
    Serializer for requesting a return against a POS sale or an online order.

    Quantities are capped at what was sold minus earlier approved returns.
    """

    order_type = serializers.ChoiceField(choices=ReturnOrder.ORDER_TYPE_CHOICES)
    sale_id = serializers.UUIDField(required=False, allow_null=True)
    online_order_id = serializers.UUIDField(required=False, allow_null=True)
    reason = serializers.CharField()
    items = ReturnOrderItemCreateSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required.")
        return value

    def validate(self, data):
        if data["order_type"] == ReturnOrder.POS:
            if not data.get("sale_id"):
                raise serializers.ValidationError({"sale_id": "A sale is required."})
            source = Sale.objects.filter(id=data["sale_id"]).first()
            if source is None:
                raise serializers.ValidationError({"sale_id": "Sale not found."})
            if source.status in (Sale.CANCELLED, Sale.RETURNED):
                raise serializers.ValidationError({"sale_id": f"This sale is {source.status}."})
        else:
            if not data.get("online_order_id"):
                raise serializers.ValidationError({"online_order_id": "An order is required."})
            source = OnlineOrder.objects.filter(id=data["online_order_id"]).first()
            if source is None:
                raise serializers.ValidationError({"online_order_id": "Order not found."})
            if source.status != OnlineOrder.DELIVERED:
                raise serializers.ValidationError(
                    {"online_order_id": "Only delivered orders can be returned."}
                )

        try:
            services.validate_return_lines(source, data["order_type"], data["items"])
        except ValueError as e:
            raise serializers.ValidationError({"items": str(e)})

        paid = services.refund_unit_prices(source, data["order_type"])
        for line in data["items"]:
            product, price = line["product"], line.get("price")
            if price is not None and price > paid[product.pk]:
                raise serializers.ValidationError(
                    {
                        "items": f"Refund price {price} for {product.name} exceeds "
                        f"the price paid ({paid[product.pk]})."
                    }
                )

        data["source"] = source
        data["refund_prices"] = paid
        return data

    @transaction.atomic
    def create(self, validated_data):
        source = validated_data["source"]
        is_pos = validated_data["order_type"] == ReturnOrder.POS
        prices = validated_data["refund_prices"]

        return_order = ReturnOrder.objects.create(
            order_type=validated_data["order_type"],
            sale=source if is_pos else None,
            online_order=None if is_pos else source,
            branch=source.branch,
            customer_name=source.customer_name,
            customer_phone=source.customer_phone,
            reason=validated_data["reason"],
            requested_by=self.context["request"].user,
        )
        for line in validated_data["items"]:
            product = line["product"]
            price = line.get("price")
            ReturnOrderItem.objects.create(
                return_order=return_order,
                product=product,
                product_name=product.name,
                quantity=line["quantity"],
                price=price if price is not None else prices[product.pk],
            )
        return_order.calculate_total()

        logger.info(f"Return {return_order.id} requested for {source}")
        return return_order


class ReturnOrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = ReturnOrderItem
        fields = ["id", "product", "product_name", "quantity", "price", "total"]


class ReturnOrderSerializer(serializers.ModelSerializer):
    items = ReturnOrderItemSerializer(many=True, read_only=True)
    invoice_number = serializers.CharField(source="sale.invoice_number", default=None)
    order_number = serializers.CharField(source="online_order.order_number", default=None)
    processed_by_name = serializers.CharField(source="processed_by.username", default=None)

    class Meta:
        model = ReturnOrder
        fields = [
            "id",
            "order_type",
            "sale",
            "invoice_number",
            "online_order",
            "order_number",
            "branch",
            "customer_name",
            "customer_phone",
            "reason",
            "total",
            "status",
            "requested_by",
            "processed_by",
            "processed_by_name",
            "processed_at",
            "rejection_reason",
            "restocked",
            "items",
            "created_at",
        ]
        read_only_fields = fields


class ApproveReturnSerializer(serializers.Serializer):
    restock = serializers.BooleanField(default=True, required=False)


class RejectReturnSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, required=False, default="")

    def validate_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError("A rejection reason is required.")
        return value.strip()


class CancelSaleSerializer(serializers.Serializer):
    reason = serializers.CharField(allow_blank=True, required=False, default="")
