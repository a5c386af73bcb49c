"""
Inventory models for the retail store.

- Hierarchical categories (main category > sub-category)
- Companies (brands/manufacturers)
- Products with offer and bulk pricing, scale barcodes and variants
- Product batches for expiry tracking
- Damaged product records
- Inter-branch inventory transfers
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from django_fsm import FSMField, transition

from apps.core.models import Branch, User


class Category(models.Model):
    """
    Product category.

    Categories without a parent are main categories; categories with a parent
    are sub-categories of it.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the category",
    )

    name = models.CharField(max_length=100, help_text="Category name (e.g., Dairy, Cheese)")

    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="subcategories",
        help_text="Main category this sub-category belongs to",
    )

    image = models.ImageField(
        upload_to="categories/", blank=True, help_text="Category image shown in the catalog"
    )

    description = models.TextField(blank=True, help_text="Optional description of the category")

    sort_order = models.PositiveIntegerField(default=0, help_text="Display order in the catalog")

    is_active = models.BooleanField(default=True, help_text="Whether this category is active")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inventory_categories"
        ordering = ["sort_order", "name"]
        verbose_name = "Category"
        verbose_name_plural = "Categories"
        indexes = [
            models.Index(fields=["parent", "is_active"], name="cat_parent_active_idx"),
        ]

    def __str__(self):
        if self.parent:
            return f"{self.parent.name} > {self.name}"
        return self.name

    @property
    def is_main(self):
        return self.parent_id is None


class Company(models.Model):
    """Brand or manufacturer of products."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the company",
    )

    name = models.CharField(max_length=255, unique=True, help_text="Company name")

    logo = models.ImageField(upload_to="companies/", blank=True, help_text="Company logo")

    description = models.TextField(blank=True, help_text="Company description")

    is_active = models.BooleanField(default=True, help_text="Whether this company is active")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inventory_companies"
        ordering = ["name"]
        verbose_name = "Company"
        verbose_name_plural = "Companies"

    def __str__(self):
        return self.name


class Product(models.Model):
    """
    A sellable product.

    Quantities are decimals so weighed goods can be stocked in kilograms.
    A variant with ``shares_parent_inventory`` set reads and writes stock on
    its parent product.
    """

    NORMAL = "normal"
    SCALE = "scale"

    BARCODE_TYPE_CHOICES = [
        (NORMAL, "Normal"),
        (SCALE, "Scale (weighed)"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the product",
    )

    name = models.CharField(max_length=255, help_text="Product name")

    barcode = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Product barcode (unique when present)",
    )

    barcode_type = models.CharField(
        max_length=10,
        choices=BARCODE_TYPE_CHOICES,
        default=NORMAL,
        help_text="Scale barcodes embed the weight of the item",
    )

    # Pricing
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Selling price per unit (or per kg for scale products)",
    )

    purchase_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Purchase price per unit",
    )

    offer_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Offer price used while is_offer is set",
    )

    is_offer = models.BooleanField(default=False, help_text="Whether the offer price applies")

    # Bulk pricing
    bulk_enabled = models.BooleanField(default=False, help_text="Whether bulk pricing is enabled")

    bulk_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.000"))],
        help_text="Units contained in one bulk pack",
    )

    bulk_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Price of one bulk pack",
    )

    bulk_barcode = models.CharField(
        max_length=64,
        unique=True,
        null=True,
        blank=True,
        help_text="Barcode printed on the bulk pack",
    )

    # Stock
    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0.000"),
        help_text="Quantity on hand",
    )

    min_quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0.000"),
        validators=[MinValueValidator(Decimal("0.000"))],
        help_text="Low stock threshold",
    )

    # Classification
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
        help_text="Main category (derived from the sub-category when one is set)",
    )

    subcategory = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="subcategory_products",
        help_text="Sub-category",
    )

    company = models.ForeignKey(
        Company,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="products",
        help_text="Brand or manufacturer",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="products",
        help_text="Branch stocking this product (empty for the shared catalog)",
    )

    # Variants
    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="variants",
        help_text="Parent product of this variant",
    )

    shares_parent_inventory = models.BooleanField(
        default=False,
        help_text="Whether this variant sells from its parent's stock",
    )

    image = models.ImageField(upload_to="products/", blank=True, help_text="Product image")

    description = models.TextField(blank=True, help_text="Product description")

    shelf_location = models.CharField(max_length=50, blank=True, help_text="Shelf location code")

    is_active = models.BooleanField(default=True, help_text="Whether the product is for sale")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        verbose_name = "Product"
        verbose_name_plural = "Products"
        indexes = [
            models.Index(fields=["branch", "is_active"], name="product_branch_active_idx"),
            models.Index(fields=["category"], name="product_category_idx"),
            models.Index(fields=["subcategory"], name="product_subcategory_idx"),
            models.Index(fields=["company"], name="product_company_idx"),
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["quantity", "min_quantity"], name="product_low_stock_idx"),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.barcode:
            self.barcode = None
        if not self.bulk_barcode:
            self.bulk_barcode = None
        if self.subcategory_id and self.subcategory.parent_id:
            self.category_id = self.subcategory.parent_id
        super().save(*args, **kwargs)

    @property
    def stock_holder(self):
        """The product whose quantity this product sells from."""
        if self.parent_id and self.shares_parent_inventory:
            return self.parent
        return self

    @property
    def available_quantity(self):
        return self.stock_holder.quantity

    @property
    def unit_price(self):
        """Price charged per unit, honoring an active offer."""
        if self.is_offer and self.offer_price is not None:
            return self.offer_price
        return self.price

    @property
    def unit_discount(self):
        return self.price - self.unit_price

    def is_low_stock(self):
        return self.available_quantity <= self.min_quantity

    def is_scale_product(self):
        return self.barcode_type == self.SCALE

    def deduct_quantity(self, quantity):
        """
        Deduct stock, on the parent when inventory is shared.

        Callers lock the row first (``select_for_update``).

        Raises:
            ValueError: If the quantity is not positive or exceeds the stock
        """
        quantity = Decimal(quantity)
        if quantity <= 0:
            raise ValueError("Quantity must be greater than zero.")
        holder = self.stock_holder
        if holder.quantity < quantity:
            raise ValueError(
                f"Insufficient stock for {self.name}. "
                f"Available: {holder.quantity}, Requested: {quantity}"
            )
        holder.quantity -= quantity
        holder.save(update_fields=["quantity", "updated_at"])
        return holder.quantity

    def add_quantity(self, quantity):
        """Add stock, on the parent when inventory is shared."""
        quantity = Decimal(quantity)
        if quantity <= 0:
            raise ValueError("Quantity must be greater than zero.")
        holder = self.stock_holder
        holder.quantity += quantity
        holder.save(update_fields=["quantity", "updated_at"])
        return holder.quantity

    def set_quantity(self, quantity):
        quantity = Decimal(quantity)
        if quantity < 0:
            raise ValueError("Quantity cannot be negative.")
        holder = self.stock_holder
        holder.quantity = quantity
        holder.save(update_fields=["quantity", "updated_at"])
        return holder.quantity


class ProductBatch(models.Model):
    """
    A received batch of a product with its expiry date.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the batch",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="batches",
        help_text="Product in this batch",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="product_batches",
        help_text="Branch holding this batch",
    )

    batch_number = models.CharField(max_length=100, help_text="Supplier batch/lot number")

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        default=Decimal("0.000"),
        validators=[MinValueValidator(Decimal("0.000"))],
        help_text="Remaining quantity in this batch",
    )

    expiry_date = models.DateField(help_text="Expiry date of this batch")

    shelf_location = models.CharField(max_length=50, blank=True, help_text="Shelf location code")

    notes = models.TextField(blank=True, help_text="Batch notes")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "product_batches"
        ordering = ["expiry_date"]
        verbose_name = "Product Batch"
        verbose_name_plural = "Product Batches"
        indexes = [
            models.Index(fields=["branch", "expiry_date"], name="batch_branch_expiry_idx"),
            models.Index(fields=["product", "expiry_date"], name="batch_product_expiry_idx"),
        ]

    def __str__(self):
        return f"{self.product.name} #{self.batch_number} (exp. {self.expiry_date})"

    @property
    def is_expired(self):
        return self.expiry_date < timezone.localdate()

    def days_until_expiry(self):
        return (self.expiry_date - timezone.localdate()).days


class DamagedProduct(models.Model):
    """Record of stock written off as damaged or expired."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the record",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="damage_records",
        help_text="Damaged product",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="damaged_products",
        help_text="Branch where the damage was recorded",
    )

    batch_number = models.CharField(max_length=100, blank=True, help_text="Batch number")

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
        help_text="Damaged quantity",
    )

    cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Cost of the damaged stock (quantity x purchase price)",
    )

    damage_date = models.DateField(default=timezone.localdate, help_text="Date of the damage")

    notes = models.TextField(blank=True, help_text="Notes")

    recorded_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="damage_records",
        help_text="User who recorded the damage",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "damaged_products"
        ordering = ["-damage_date", "-created_at"]
        verbose_name = "Damaged Product"
        verbose_name_plural = "Damaged Products"
        indexes = [
            models.Index(fields=["damage_date"], name="damage_date_idx"),
            models.Index(fields=["branch", "damage_date"], name="damage_branch_date_idx"),
        ]

    def __str__(self):
        return f"{self.product.name} x{self.quantity} ({self.damage_date})"


class InventoryTransfer(models.Model):
    """
    Stock transfer between two branches.

    State transitions:
    pending → approved → completed
    pending → rejected
    pending/approved → cancelled

    Stock moves only when the transfer completes.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (PENDING, "Pending Approval"),
        (APPROVED, "Approved"),
        (REJECTED, "Rejected"),
        (COMPLETED, "Completed"),
        (CANCELLED, "Cancelled"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the transfer",
    )

    transfer_number = models.CharField(
        max_length=50,
        unique=True,
        help_text="Transfer number (e.g., TRF-20240115-0001)",
    )

    from_branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        related_name="transfers_out",
        help_text="Source branch",
    )

    to_branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        related_name="transfers_in",
        help_text="Destination branch",
    )

    status = FSMField(
        default=PENDING,
        choices=STATUS_CHOICES,
        protected=True,
        help_text="Current status of the transfer",
    )

    requested_by = models.ForeignKey(
        User,
        on_delete=models.PROTECT,
        related_name="transfers_requested",
        help_text="User who requested the transfer",
    )

    processed_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="transfers_processed",
        help_text="User who last moved the transfer forward",
    )

    approved_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    notes = models.TextField(blank=True, help_text="Transfer notes")

    rejection_reason = models.TextField(blank=True, help_text="Reason for rejection")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "inventory_transfers"
        ordering = ["-created_at"]
        verbose_name = "Inventory Transfer"
        verbose_name_plural = "Inventory Transfers"
        indexes = [
            models.Index(fields=["status", "-created_at"], name="transfer_status_created_idx"),
            models.Index(fields=["from_branch"], name="transfer_from_branch_idx"),
            models.Index(fields=["to_branch"], name="transfer_to_branch_idx"),
        ]

    def __str__(self):
        return f"{self.transfer_number} ({self.from_branch.code} → {self.to_branch.code})"

    def save(self, *args, **kwargs):
        if not self.transfer_number:
            date_str = timezone.now().strftime("%Y%m%d")
            today_count = (
                InventoryTransfer.objects.filter(
                    transfer_number__startswith=f"TRF-{date_str}"
                ).count()
                + 1
            )
            self.transfer_number = f"TRF-{date_str}-{today_count:04d}"
        super().save(*args, **kwargs)

    @transition(field=status, source=PENDING, target=APPROVED)
    def approve(self, user):
        self.processed_by = user
        self.approved_at = timezone.now()

    @transition(field=status, source=PENDING, target=REJECTED)
    def reject(self, user, reason):
        self.processed_by = user
        self.rejection_reason = reason

    @transition(field=status, source=APPROVED, target=COMPLETED)
    def complete(self, user):
        """
        Move the stock: deduct at the source, add at the destination.

        Barcodes are unique store-wide, so the destination product is matched
        by name; a copy without a barcode is created in the destination
        branch when no match exists. Must run inside a transaction.
        """
        for item in self.items.select_related("product"):
            source = Product.objects.select_for_update().get(pk=item.product_id)
            source.deduct_quantity(item.quantity)
            destination = item.find_or_create_destination(self.to_branch)
            destination.add_quantity(item.quantity)

        self.processed_by = user
        self.completed_at = timezone.now()

    @transition(field=status, source=[PENDING, APPROVED], target=CANCELLED)
    def cancel(self, user, reason=""):
        self.processed_by = user
        if reason:
            self.notes = f"{self.notes}\n\nCancelled by {user.username}: {reason}".strip()

    def calculate_total_value(self):
        return sum((item.calculate_value() for item in self.items.all()), Decimal("0.00"))


class InventoryTransferItem(models.Model):
    """A product line on an inventory transfer."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the transfer item",
    )

    transfer = models.ForeignKey(
        InventoryTransfer,
        on_delete=models.CASCADE,
        related_name="items",
        help_text="Transfer this item belongs to",
    )

    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="transfer_items",
        help_text="Product moved out of the source branch",
    )

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
        help_text="Quantity to transfer",
    )

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Purchase price per unit at time of transfer",
    )

    class Meta:
        db_table = "inventory_transfer_items"
        verbose_name = "Inventory Transfer Item"
        verbose_name_plural = "Inventory Transfer Items"

    def __str__(self):
        return f"{self.product.name} x{self.quantity} ({self.transfer.transfer_number})"

    def save(self, *args, **kwargs):
        if not self.unit_cost:
            self.unit_cost = self.product.purchase_price
        super().save(*args, **kwargs)

    def calculate_value(self):
        return self.unit_cost * self.quantity

    def find_or_create_destination(self, branch):
        """Return the locked matching product in ``branch``, creating it if needed."""
        product = self.product
        match = (
            Product.objects.select_for_update()
            .filter(branch=branch, name=product.name, parent__isnull=True)
            .order_by("created_at")
            .first()
        )
        if match is not None:
            return match
        return Product.objects.create(
            name=product.name,
            barcode=None,
            barcode_type=product.barcode_type,
            price=product.price,
            purchase_price=product.purchase_price,
            offer_price=product.offer_price,
            is_offer=product.is_offer,
            min_quantity=product.min_quantity,
            category=product.category,
            subcategory=product.subcategory,
            company=product.company,
            branch=branch,
            description=product.description,
        )
