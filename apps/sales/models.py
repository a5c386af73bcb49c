"""
Sales models for the point of sale.

- Sale / SaleItem: a completed POS checkout with its line items
- ReturnOrder / ReturnOrderItem: merchandise returned against a prior POS
  sale or online order, subject to approval
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Sum
from django.utils import timezone

from django_fsm import FSMField, transition

from apps.core.models import Branch, User
from apps.crm.models import Customer
from apps.inventory.models import Product


class Sale(models.Model):
    """
    A POS sale.

    The total is always subtotal minus discount; profit is the total less the
    purchase cost of the sold lines.
    """

    # Payment method choices
    CASH = "cash"
    CARD = "card"
    MIXED = "mixed"

    PAYMENT_METHOD_CHOICES = [
        (CASH, "Cash"),
        (CARD, "Card"),
        (MIXED, "Mixed"),
    ]

    # Status choices
    COMPLETED = "completed"
    RETURNED = "returned"
    PARTIALLY_RETURNED = "partially_returned"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (COMPLETED, "Completed"),
        (RETURNED, "Returned"),
        (PARTIALLY_RETURNED, "Partially Returned"),
        (CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the sale",
    )

    invoice_number = models.CharField(
        max_length=20,
        unique=True,
        help_text="Invoice number in the form YYMMDD-XXXX",
    )

    date = models.DateTimeField(
        default=timezone.now, db_index=True, help_text="When the sale was made"
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Branch where the sale was made",
    )

    cashier = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales_processed",
        help_text="Employee who processed the sale",
    )

    customer = models.ForeignKey(
        Customer,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sales",
        help_text="Customer who made the purchase (optional for walk-in sales)",
    )

    customer_name = models.CharField(
        max_length=255, blank=True, help_text="Customer name at time of sale"
    )

    customer_phone = models.CharField(
        max_length=20, blank=True, help_text="Customer phone at time of sale"
    )

    # Financial details
    subtotal = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Sum of line totals",
    )

    discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Invoice-level discount",
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Total amount (subtotal - discount)",
    )

    profit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total less the purchase cost of the sold items",
    )

    # Payment details
    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHOD_CHOICES,
        default=CASH,
        help_text="How the sale was paid",
    )

    cash_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Amount paid in cash",
    )

    card_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Amount paid by card",
    )

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=COMPLETED,
        help_text="Current status of the sale",
    )

    notes = models.TextField(blank=True, help_text="Additional notes about the sale")

    cancellation_reason = models.TextField(blank=True, help_text="Why the sale was voided")
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sales"
        ordering = ["-date"]
        verbose_name = "Sale"
        verbose_name_plural = "Sales"
        indexes = [
            models.Index(fields=["branch", "-date"], name="sale_branch_date_idx"),
            models.Index(fields=["status"], name="sale_status_idx"),
            models.Index(fields=["customer", "-date"], name="sale_cust_date_idx"),
            models.Index(fields=["payment_method"], name="sale_payment_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.total}"

    def calculate_totals(self):
        """
        Recalculate subtotal, total and profit from the sale items.
        """
        items = list(self.items.all())
        self.subtotal = sum((item.total for item in items), Decimal("0.00"))
        self.total = self.subtotal - self.discount
        cost = sum((item.purchase_price * item.quantity for item in items), Decimal("0.00"))
        self.profit = (self.total - cost).quantize(Decimal("0.01"))
        self.save(update_fields=["subtotal", "total", "profit", "updated_at"])

    def returned_quantities(self):
        """Quantities already returned per product through approved returns."""
        rows = (
            ReturnOrderItem.objects.filter(
                return_order__sale=self, return_order__status=ReturnOrder.APPROVED
            )
            .values("product_id")
            .annotate(returned=Sum("quantity"))
        )
        return {row["product_id"]: row["returned"] for row in rows}

    def refresh_return_status(self):
        """Set the status to returned or partially returned from approved returns."""
        returned = self.returned_quantities()
        if not returned:
            return
        # A product can sit on several lines; compare against the summed quantity
        sold = self.items.values("product_id").annotate(sold=Sum("quantity"))
        fully = all(
            returned.get(row["product_id"], Decimal("0")) >= row["sold"] for row in sold
        )
        self.status = self.RETURNED if fully else self.PARTIALLY_RETURNED
        self.save(update_fields=["status", "updated_at"])

    def can_be_cancelled(self):
        """A sale can be voided while completed and without open or approved returns."""
        if self.status != self.COMPLETED:
            return False
        return not self.returns.exclude(status=ReturnOrder.REJECTED).exists()

    def mark_as_cancelled(self, reason=""):
        if not self.can_be_cancelled():
            raise ValueError("Only completed sales without returns can be cancelled.")
        self.status = self.CANCELLED
        self.cancellation_reason = reason
        self.cancelled_at = timezone.now()
        self.save(update_fields=["status", "cancellation_reason", "cancelled_at", "updated_at"])


class SaleItem(models.Model):
    """
    A line of a sale.

    Name and prices are copied from the product at time of sale. Quantity is a
    weight in kilograms for scale products.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the sale item",
    )

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Sale that this item belongs to",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name="sale_items",
        help_text="Product that was sold",
    )

    product_name = models.CharField(max_length=255, help_text="Product name at time of sale")

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
        help_text="Quantity sold, or weight in kg for scale products",
    )

    unit_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Unit price at time of sale",
    )

    purchase_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Unit purchase cost at time of sale",
    )

    discount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Discount applied to this line",
    )

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Line total (quantity * unit_price - discount)",
    )

    is_bulk = models.BooleanField(default=False, help_text="Whether sold as a bulk pack")

    class Meta:
        db_table = "sale_items"
        ordering = ["sale", "product_name"]
        verbose_name = "Sale Item"
        verbose_name_plural = "Sale Items"
        indexes = [
            models.Index(fields=["product"], name="saleitem_product_idx"),
        ]

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    def save(self, *args, **kwargs):
        if self.total is None:
            self.total = self.calculate_total()
        super().save(*args, **kwargs)

    def calculate_total(self):
        return (self.unit_price * self.quantity - self.discount).quantize(Decimal("0.01"))


class ReturnOrder(models.Model):
    """
    A request to return merchandise from a POS sale or an online order.

    Workflow: pending -> approved | rejected. Approval can restock the
    returned quantities and updates the originating sale's status.
    """

    POS = "pos"
    ONLINE = "online"

    ORDER_TYPE_CHOICES = [
        (POS, "Point of Sale"),
        (ONLINE, "Online Order"),
    ]

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the return",
    )

    order_type = models.CharField(
        max_length=10,
        choices=ORDER_TYPE_CHOICES,
        default=POS,
        help_text="Whether the return is against a POS sale or an online order",
    )

    sale = models.ForeignKey(
        Sale,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="returns",
        help_text="Originating POS sale",
    )

    online_order = models.ForeignKey(
        "orders.OnlineOrder",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="returns",
        help_text="Originating online order",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="return_orders",
        help_text="Branch of the originating sale or order",
    )

    customer_name = models.CharField(max_length=255, blank=True)
    customer_phone = models.CharField(max_length=20, blank=True)

    reason = models.TextField(help_text="Why the merchandise is returned")

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Value of the returned items",
    )

    status = FSMField(
        default=PENDING,
        choices=STATUS_CHOICES,
        protected=True,
        help_text="Current status of the return",
    )

    requested_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        related_name="return_requests",
        help_text="User who created the return",
    )

    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="returns_processed",
        help_text="User who approved or rejected the return",
    )

    processed_at = models.DateTimeField(null=True, blank=True)

    rejection_reason = models.TextField(blank=True)

    restocked = models.BooleanField(
        default=False, help_text="Whether approval put the items back in stock"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "return_orders"
        ordering = ["-created_at"]
        verbose_name = "Return Order"
        verbose_name_plural = "Return Orders"
        indexes = [
            models.Index(fields=["status", "-created_at"], name="return_status_idx"),
            models.Index(fields=["branch", "-created_at"], name="return_branch_idx"),
        ]

    def __str__(self):
        source = self.sale.invoice_number if self.sale_id else self.online_order_id
        return f"Return {source} ({self.status})"

    @property
    def source(self):
        return self.sale if self.order_type == self.POS else self.online_order

    def calculate_total(self):
        self.total = sum((item.total for item in self.items.all()), Decimal("0.00"))
        self.save(update_fields=["total", "updated_at"])
        return self.total

    @transition(field=status, source=PENDING, target=APPROVED)
    def approve(self, user, restock=True):
        """
        Approve the return; optionally restock the returned quantities.
        """
        self.processed_by = user
        self.processed_at = timezone.now()
        self.restocked = restock
        if restock:
            for item in self.items.select_related("product"):
                if item.product_id:
                    product = Product.objects.select_for_update().get(pk=item.product_id)
                    product.add_quantity(item.quantity)

    @transition(field=status, source=PENDING, target=REJECTED)
    def reject(self, user, reason):
        """
        Reject the return. A reason is required.
        """
        if not (reason or "").strip():
            raise ValueError("A rejection reason is required.")
        self.processed_by = user
        self.processed_at = timezone.now()
        self.rejection_reason = reason.strip()


class ReturnOrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    return_order = models.ForeignKey(
        ReturnOrder,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Return this line belongs to",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        related_name="return_items",
        help_text="Returned product",
    )

    product_name = models.CharField(max_length=255)

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
        help_text="Returned quantity",
    )

    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Unit price refunded",
    )

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "return_order_items"
        verbose_name = "Return Order Item"
        verbose_name_plural = "Return Order Items"

    def __str__(self):
        return f"{self.product_name} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.total = (self.price * self.quantity).quantize(Decimal("0.01"))
        super().save(*args, **kwargs)
