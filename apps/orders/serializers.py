"""
Serializers for online orders.
"""

import logging
from decimal import Decimal

from django.db import transaction

from rest_framework import serializers

from apps.crm import services as crm_services
from apps.delivery.models import DeliveryLocation, DeliveryType
from apps.delivery.services import quote_delivery
from apps.inventory.models import Product

from .models import OnlineOrder, OrderItem

logger = logging.getLogger(__name__)


class OrderItemCreateSerializer(serializers.Serializer):
    product_id = serializers.PrimaryKeyRelatedField(
        queryset=Product.objects.filter(is_active=True), source="product"
    )
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=3, min_value=Decimal("0.001")
    )


class OnlineOrderCreateSerializer(serializers.Serializer):
    """
    Serializer for placing an online order.

    Handles:
    - Customer match/creation by phone, with the delivery location
    - Shipping cost from the location and delivery type
    - Stock reservation with row locks
    """

    customer_name = serializers.CharField()
    customer_phone = serializers.CharField()
    delivery_location = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryLocation.objects.filter(is_active=True)
    )
    delivery_type = serializers.PrimaryKeyRelatedField(
        queryset=DeliveryType.objects.filter(is_active=True), required=False, allow_null=True
    )
    shipping_address = serializers.CharField(required=False, allow_blank=True, default="")
    payment_method = serializers.ChoiceField(
        choices=OnlineOrder.PAYMENT_METHOD_CHOICES, default=OnlineOrder.CASH_ON_DELIVERY
    )
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    items = OrderItemCreateSerializer(many=True)

    def validate_items(self, value):
        if not value:
            raise serializers.ValidationError("At least one item is required.")
        return value

    def validate(self, data):
        try:
            data["quote"] = quote_delivery(data["delivery_location"], data.get("delivery_type"))
        except ValueError as e:
            raise serializers.ValidationError({"delivery_location": str(e)})
        return data

    @transaction.atomic
    def create(self, validated_data):
        branch = self.context.get("branch")
        location = validated_data["delivery_location"]

        customer = crm_services.find_or_create_customer(
            name=validated_data["customer_name"],
            phone=validated_data["customer_phone"],
            **location.ancestors(),
        )

        order = OnlineOrder.objects.create(
            customer=customer,
            customer_name=validated_data["customer_name"].strip(),
            customer_phone=validated_data["customer_phone"].strip(),
            branch=branch,
            delivery_location=location,
            delivery_type=validated_data.get("delivery_type"),
            shipping_address=validated_data["shipping_address"],
            shipping_cost=validated_data["quote"]["price"],
            payment_method=validated_data["payment_method"],
            notes=validated_data["notes"],
        )

        for line in validated_data["items"]:
            product = Product.objects.select_for_update().get(pk=line["product"].pk)
            try:
                product.deduct_quantity(line["quantity"])
            except ValueError as e:
                raise serializers.ValidationError({"items": str(e)})
            OrderItem.objects.create(
                order=order,
                product=product,
                product_name=product.name,
                quantity=line["quantity"],
                unit_price=product.unit_price,
                purchase_price=product.purchase_price,
            )

        order.calculate_totals()
        logger.info(f"Online order {order.order_number} placed: {order.total}")
        return order


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["id", "product", "product_name", "quantity", "unit_price", "total"]


class OnlineOrderListSerializer(serializers.ModelSerializer):
    location_name = serializers.CharField(source="delivery_location.name", read_only=True)
    delivery_employee_name = serializers.CharField(
        source="delivery_employee.username", read_only=True, default=None
    )

    class Meta:
        model = OnlineOrder
        fields = [
            "id",
            "order_number",
            "customer_name",
            "customer_phone",
            "location_name",
            "total",
            "status",
            "payment_status",
            "delivery_employee_name",
            "created_at",
        ]


class OnlineOrderDetailSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)
    delivery_path = serializers.CharField(
        source="delivery_location.get_full_path", read_only=True
    )
    delivery_type_name = serializers.CharField(
        source="delivery_type.name", read_only=True, default=None
    )

    class Meta:
        model = OnlineOrder
        fields = [
            "id",
            "order_number",
            "customer",
            "customer_name",
            "customer_phone",
            "branch",
            "delivery_location",
            "delivery_path",
            "delivery_type",
            "delivery_type_name",
            "shipping_address",
            "shipping_cost",
            "subtotal",
            "total",
            "payment_method",
            "payment_status",
            "status",
            "delivery_employee",
            "tracking_number",
            "notes",
            "cancellation_reason",
            "items",
            "shipped_at",
            "delivered_at",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderActionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    tracking_number = serializers.CharField(required=False, allow_blank=True, default="")


class AssignDeliverySerializer(serializers.Serializer):
    employee_id = serializers.UUIDField(allow_null=True)
