"""
Finance models.

Cash is tracked per branch and register (store, online, delivery). Every
deposit or withdrawal is a CashTransaction carrying the register balance
after it; CashTracking rows are the periodic counted balances.
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from apps.core.models import Branch, User
from apps.inventory.models import Product


class RegisterType:
    STORE = "store"
    ONLINE = "online"
    DELIVERY = "delivery"

    CHOICES = [
        (STORE, "Store Register"),
        (ONLINE, "Online Register"),
        (DELIVERY, "Delivery Register"),
    ]


class CashTracking(models.Model):
    """
    A counted register balance for a day.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="cash_records",
        help_text="Branch the register belongs to",
    )

    register_type = models.CharField(
        max_length=20,
        choices=RegisterType.CHOICES,
        default=RegisterType.STORE,
        help_text="Cash drawer this record counts",
    )

    date = models.DateField(default=timezone.localdate, help_text="Day the balance was counted")

    opening_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Balance at the start of the period",
    )

    closing_balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Balance at the end of the period",
    )

    difference = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Closing minus opening balance",
    )

    notes = models.TextField(blank=True)

    recorded_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_records",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "cash_tracking"
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(
                fields=["branch", "register_type", "-date"], name="cash_tracking_register_idx"
            ),
        ]

    def __str__(self):
        return f"{self.get_register_type_display()} {self.date}: {self.closing_balance}"

    def save(self, *args, **kwargs):
        self.difference = self.closing_balance - self.opening_balance
        super().save(*args, **kwargs)


class CashTransaction(models.Model):
    """
    A deposit into or withdrawal from a register.
    """

    DEPOSIT = "deposit"
    WITHDRAWAL = "withdrawal"

    TRANSACTION_TYPE_CHOICES = [
        (DEPOSIT, "Deposit"),
        (WITHDRAWAL, "Withdrawal"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="cash_transactions",
        help_text="Branch the register belongs to",
    )

    register_type = models.CharField(
        max_length=20, choices=RegisterType.CHOICES, default=RegisterType.STORE
    )

    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Amount moved, always positive",
    )

    balance_after = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        help_text="Register balance after this transaction",
    )

    notes = models.TextField(blank=True)

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="cash_transactions",
    )

    transaction_date = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        db_table = "cash_transactions"
        ordering = ["-transaction_date"]
        indexes = [
            models.Index(
                fields=["branch", "register_type", "-transaction_date"],
                name="cash_tx_register_idx",
            ),
        ]

    def __str__(self):
        return f"{self.get_transaction_type_display()} {self.amount} ({self.register_type})"

    @property
    def signed_amount(self):
        return self.amount if self.transaction_type == self.DEPOSIT else -self.amount


class Expense(models.Model):
    """
    An operating expense paid by a branch.
    """

    RENT = "rent"
    SALARIES = "salaries"
    UTILITIES = "utilities"
    MAINTENANCE = "maintenance"
    SUPPLIES = "supplies"
    OTHER = "other"

    EXPENSE_TYPE_CHOICES = [
        (RENT, "Rent"),
        (SALARIES, "Salaries"),
        (UTILITIES, "Utilities"),
        (MAINTENANCE, "Maintenance"),
        (SUPPLIES, "Supplies"),
        (OTHER, "Other"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="expenses",
    )

    expense_type = models.CharField(max_length=20, choices=EXPENSE_TYPE_CHOICES, default=OTHER)

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    description = models.TextField(blank=True)

    date = models.DateField(default=timezone.localdate, db_index=True)

    receipt_url = models.CharField(max_length=500, blank=True, help_text="Uploaded receipt")

    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="expenses"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "expenses"
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["branch", "-date"], name="expense_branch_date_idx"),
        ]

    def __str__(self):
        return f"{self.get_expense_type_display()} {self.amount} ({self.date})"


class Supplier(models.Model):
    """
    A vendor the store buys stock from.

    ``balance`` is what the store still owes the supplier.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    name = models.CharField(max_length=255, help_text="Supplier company name")
    contact_person = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)

    balance = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Amount owed to the supplier",
    )

    is_active = models.BooleanField(default=True)
    notes = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "suppliers"
        ordering = ["name"]
        indexes = [models.Index(fields=["name"], name="supplier_name_idx")]

    def __str__(self):
        return self.name


class Purchase(models.Model):
    """
    A supplier invoice. Items are added to stock when it is recorded.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    supplier = models.ForeignKey(
        Supplier, on_delete=models.PROTECT, related_name="purchases"
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="purchases",
    )

    invoice_number = models.CharField(max_length=100, help_text="Supplier invoice number")

    date = models.DateField(default=timezone.localdate, db_index=True)

    total = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    paid = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Amount paid at purchase time",
    )

    description = models.TextField(blank=True)

    invoice_file_url = models.CharField(max_length=500, blank=True)

    created_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="purchases"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "purchases"
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["supplier", "-date"], name="purchase_supplier_date_idx"),
            models.Index(fields=["branch", "-date"], name="purchase_branch_date_idx"),
        ]

    def __str__(self):
        return f"{self.invoice_number} - {self.supplier.name}"

    @property
    def remaining(self):
        return self.total - self.paid


class PurchaseItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name="items")

    product = models.ForeignKey(
        Product, on_delete=models.SET_NULL, null=True, related_name="purchase_items"
    )

    quantity = models.DecimalField(
        max_digits=12,
        decimal_places=3,
        validators=[MinValueValidator(Decimal("0.001"))],
    )

    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    class Meta:
        db_table = "purchase_items"

    def __str__(self):
        return f"{self.product} x {self.quantity}"

    def save(self, *args, **kwargs):
        self.total = (self.unit_cost * self.quantity).quantize(Decimal("0.01"))
        super().save(*args, **kwargs)
