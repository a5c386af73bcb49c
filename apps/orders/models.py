"""
Online order models.

An order moves pending -> processing -> ready -> shipped -> delivered, and
can be cancelled until it ships. Stock is reserved when the order is placed
and put back when it is cancelled.
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from apps.core.models import Branch, User
from apps.crm.models import Customer
from apps.delivery.models import DeliveryLocation, DeliveryType
from apps.inventory.models import Product


class OnlineOrder(models.Model):
    """
    A customer order placed online and delivered to a location.
    """

    # Status choices
    PENDING = "pending"
    PROCESSING = "processing"
    READY = "ready"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (PROCESSING, "Processing"),
        (READY, "Ready for Delivery"),
        (SHIPPED, "Shipped"),
        (DELIVERED, "Delivered"),
        (CANCELLED, "Cancelled"),
    ]

    # Statuses written by older clients
    LEGACY_STATUS_MAP = {
        "waiting": PENDING,
        "confirmed": PROCESSING,
        "preparing": PROCESSING,
        "done": DELIVERED,
    }

    # Payment status choices
    PAYMENT_PENDING = "pending"
    PAYMENT_PAID = "paid"
    PAYMENT_FAILED = "failed"
    PAYMENT_REFUNDED = "refunded"

    PAYMENT_STATUS_CHOICES = [
        (PAYMENT_PENDING, "Pending"),
        (PAYMENT_PAID, "Paid"),
        (PAYMENT_FAILED, "Failed"),
        (PAYMENT_REFUNDED, "Refunded"),
    ]

    CASH_ON_DELIVERY = "cash_on_delivery"
    CARD = "card"

    PAYMENT_METHOD_CHOICES = [
        (CASH_ON_DELIVERY, "Cash on Delivery"),
        (CARD, "Card"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the order",
    )

    order_number = models.CharField(
        max_length=50,
        unique=True,
        editable=False,
        help_text="Order number (e.g., 'ORD-20240101-0001')",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="online_orders",
        help_text="Customer who placed the order",
    )

    customer_name = models.CharField(max_length=255, help_text="Customer name at order time")
    customer_phone = models.CharField(max_length=20, help_text="Customer phone at order time")

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="online_orders",
        help_text="Branch that fulfils the order",
    )

    delivery_location = models.ForeignKey(
        DeliveryLocation,
        on_delete=models.PROTECT,
        related_name="orders",
        help_text="Location the order is delivered to",
    )

    delivery_type = models.ForeignKey(
        DeliveryType,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
        help_text="Delivery type chosen by the customer",
    )

    shipping_address = models.TextField(blank=True, help_text="Street address for delivery")

    shipping_cost = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Delivery price quoted for the location and type",
    )

    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Sum of item totals",
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Subtotal plus shipping",
    )

    payment_method = models.CharField(
        max_length=20, choices=PAYMENT_METHOD_CHOICES, default=CASH_ON_DELIVERY
    )

    payment_status = models.CharField(
        max_length=20, choices=PAYMENT_STATUS_CHOICES, default=PAYMENT_PENDING
    )

    status = FSMField(
        default=PENDING,
        choices=STATUS_CHOICES,
        protected=True,
        help_text="Current status of the order",
    )

    delivery_employee = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="deliveries",
        limit_choices_to={"role": User.DELIVERY},
        help_text="Employee delivering the order",
    )

    tracking_number = models.CharField(max_length=100, blank=True)

    notes = models.TextField(blank=True)

    cancellation_reason = models.TextField(blank=True)

    shipped_at = models.DateTimeField(null=True, blank=True)
    delivered_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "online_orders"
        ordering = ["-created_at"]
        verbose_name = "Online Order"
        verbose_name_plural = "Online Orders"
        indexes = [
            models.Index(fields=["status", "-created_at"], name="order_status_created_idx"),
            models.Index(fields=["branch", "-created_at"], name="order_branch_created_idx"),
            models.Index(fields=["payment_status"], name="order_payment_status_idx"),
            models.Index(fields=["delivery_employee"], name="order_delivery_emp_idx"),
        ]

    def __str__(self):
        return f"{self.order_number} - {self.customer_name}"

    def save(self, *args, **kwargs):
        if not self.order_number:
            date_str = timezone.now().strftime("%Y%m%d")
            today_count = (
                OnlineOrder.objects.filter(order_number__startswith=f"ORD-{date_str}").count() + 1
            )
            self.order_number = f"ORD-{date_str}-{today_count:04d}"
        super().save(*args, **kwargs)

    @classmethod
    def normalize_status(cls, value):
        """
        Map a stored or submitted status to a current one.

        Legacy values are translated; anything unknown reads as pending.
        """
        value = (value or "").strip().lower()
        value = cls.LEGACY_STATUS_MAP.get(value, value)
        if value in dict(cls.STATUS_CHOICES):
            return value
        return cls.PENDING

    def calculate_totals(self):
        self.subtotal = sum((item.total for item in self.items.all()), Decimal("0.00"))
        self.total = self.subtotal + self.shipping_cost
        self.save(update_fields=["subtotal", "total", "updated_at"])

    def can_be_cancelled(self):
        return self.status in (self.PENDING, self.PROCESSING, self.READY)

    @transition(field=status, source=PENDING, target=PROCESSING)
    def process(self, user):
        pass

    @transition(field=status, source=PROCESSING, target=READY)
    def mark_ready(self, user):
        pass

    @transition(field=status, source=READY, target=SHIPPED)
    def ship(self, user, tracking_number=""):
        if tracking_number:
            self.tracking_number = tracking_number
        self.shipped_at = timezone.now()

    @transition(field=status, source=SHIPPED, target=DELIVERED)
    def deliver(self, user):
        """
        Mark delivered. Cash on delivery orders are paid at this point.
        """
        self.delivered_at = timezone.now()
        if self.payment_method == self.CASH_ON_DELIVERY:
            self.payment_status = self.PAYMENT_PAID

    @transition(field=status, source=[PENDING, PROCESSING, READY], target=CANCELLED)
    def cancel(self, user, reason=""):
        """
        Cancel the order and put the reserved stock back. Must run inside a transaction.
        """
        for item in self.items.all():
            if item.product_id:
                product = Product.objects.select_for_update().get(pk=item.product_id)
                product.add_quantity(item.quantity)
        self.cancellation_reason = reason
        if self.payment_status == self.PAYMENT_PAID:
            self.payment_status = self.PAYMENT_REFUNDED


class OrderItem(models.Model):
    """
    A line of an online order, priced at order time.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(
        OnlineOrder,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Order this line belongs to",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name="order_items",
        help_text="Ordered product",
    )

    product_name = models.CharField(max_length=255)

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    purchase_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Unit purchase cost at order time",
    )

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "online_order_items"
        verbose_name = "Order Item"
        verbose_name_plural = "Order Items"

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.total = (self.unit_price * self.quantity).quantize(Decimal("0.01"))
        super().save(*args, **kwargs)
