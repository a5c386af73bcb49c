"""
Core models for the retail POS platform.

Branches scope nearly every other record once multi-branch mode is switched
on in the store settings. Users carry a role and an optional home branch, and
shifts record the hours an employee worked.
"""

import uuid
from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class Branch(models.Model):
    """
    A retail location.

    The branch coded ``MAIN`` is the fallback when nothing else selects a branch.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the branch",
    )

    name = models.CharField(max_length=255, unique=True, help_text="Branch name")

    code = models.CharField(
        max_length=20,
        unique=True,
        help_text="Short branch code (e.g., 'MAIN', 'NASR-CITY')",
    )

    address = models.TextField(blank=True, help_text="Branch address")

    phone = models.CharField(max_length=20, blank=True, help_text="Branch phone number")

    opening_hours = models.JSONField(
        default=dict,
        blank=True,
        help_text="Branch opening hours (e.g., {'saturday': '9:00-23:00', ...})",
    )

    is_active = models.BooleanField(default=True, help_text="Whether the branch is active")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "branches"
        ordering = ["name"]
        verbose_name = "Branch"
        verbose_name_plural = "Branches"
        indexes = [
            models.Index(fields=["is_active"], name="branch_active_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.code})"

    def save(self, *args, **kwargs):
        self.code = (self.code or "").strip().upper()
        super().save(*args, **kwargs)

    @property
    def is_main(self):
        return self.code == settings.MAIN_BRANCH_CODE

    @classmethod
    def get_main(cls):
        """
        Return the default branch: the one coded MAIN, else the first active branch.
        """
        branch = cls.objects.filter(code=settings.MAIN_BRANCH_CODE).first()
        if branch is None:
            branch = cls.objects.filter(is_active=True).order_by("created_at").first()
        return branch


class StoreSettings(models.Model):
    """
    Store-wide configuration. A single row is kept; use ``StoreSettings.load()``.
    """

    store_name = models.CharField(max_length=255, default="My Store", help_text="Store name")

    phone = models.CharField(max_length=20, blank=True, help_text="Store phone number")

    address = models.TextField(blank=True, help_text="Store address printed on invoices")

    logo = models.ImageField(
        upload_to="store/logos/", blank=True, help_text="Store logo printed on invoices"
    )

    currency = models.CharField(max_length=10, default="EGP", help_text="Display currency code")

    multi_branch_enabled = models.BooleanField(
        default=False,
        help_text="When enabled, branch-scoped data is filtered by the active branch",
    )

    invoice_footer = models.TextField(
        blank=True,
        default="Thank you for shopping with us!",
        help_text="Footer text printed on invoices",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "store_settings"
        verbose_name = "Store Settings"
        verbose_name_plural = "Store Settings"

    def __str__(self):
        return self.store_name

    def save(self, *args, **kwargs):
        self.pk = 1
        super().save(*args, **kwargs)

    @classmethod
    def load(cls):
        obj, _ = cls.objects.get_or_create(
            pk=1, defaults={"currency": getattr(settings, "DEFAULT_CURRENCY", "EGP")}
        )
        return obj


class User(AbstractUser):
    """
    Store user with a role and an optional home branch.
    """

    # Role choices
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    CASHIER = "cashier"
    EMPLOYEE = "employee"
    DELIVERY = "delivery"

    ROLE_CHOICES = [
        (SUPER_ADMIN, "Super Administrator"),
        (ADMIN, "Administrator"),
        (CASHIER, "Cashier"),
        (EMPLOYEE, "Employee"),
        (DELIVERY, "Delivery"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the user",
    )

    role = models.CharField(
        max_length=20,
        choices=ROLE_CHOICES,
        default=EMPLOYEE,
        help_text="User's role in the store",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="users",
        help_text="Branch that this user is assigned to",
    )

    phone = models.CharField(max_length=20, blank=True, help_text="User's phone number")

    class Meta:
        db_table = "users"
        ordering = ["username"]
        verbose_name = "User"
        verbose_name_plural = "Users"
        indexes = [
            models.Index(fields=["role"], name="user_role_idx"),
            models.Index(fields=["branch"], name="user_branch_idx"),
        ]

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"

    def is_admin_role(self):
        """Check if user administers the store (admin or super admin)."""
        return self.role in [self.SUPER_ADMIN, self.ADMIN] or self.is_superuser

    def can_manage_inventory(self):
        return self.is_admin_role()

    def can_use_pos(self):
        return self.role in [self.SUPER_ADMIN, self.ADMIN, self.CASHIER]

    def can_switch_branch(self):
        """Only administrators may act on a branch other than their own."""
        return self.is_admin_role()

    def get_open_shift(self):
        return self.shifts.filter(end_time__isnull=True).first()


class Shift(models.Model):
    """
    A timestamped work interval for an employee.

    ``total_hours`` is derived when the shift ends. An employee has at most one
    open shift.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the shift",
    )

    employee = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="shifts",
        help_text="Employee working this shift",
    )

    branch = models.ForeignKey(
        Branch,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shifts",
        help_text="Branch where the shift was worked",
    )

    start_time = models.DateTimeField(default=timezone.now, help_text="Shift start")

    end_time = models.DateTimeField(null=True, blank=True, help_text="Shift end")

    total_hours = models.DecimalField(
        max_digits=6,
        decimal_places=2,
        null=True,
        blank=True,
        help_text="Hours worked, set when the shift ends",
    )

    notes = models.TextField(blank=True, help_text="Shift notes")

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "shifts"
        ordering = ["-start_time"]
        verbose_name = "Shift"
        verbose_name_plural = "Shifts"
        indexes = [
            models.Index(fields=["employee", "-start_time"], name="shift_emp_start_idx"),
            models.Index(fields=["branch", "-start_time"], name="shift_branch_start_idx"),
        ]

    def __str__(self):
        return f"{self.employee.username} @ {self.start_time:%Y-%m-%d %H:%M}"

    @property
    def is_open(self):
        return self.end_time is None

    @staticmethod
    def hours_between(start, end):
        seconds = Decimal((end - start).total_seconds())
        return (seconds / Decimal("3600")).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)

    def clean(self):
        if self.end_time and self.end_time < self.start_time:
            raise ValidationError("Shift end time cannot be before its start time.")

    def close(self, end_time=None):
        """
        End the shift and compute hours worked.

        Raises:
            ValueError: If the shift has already ended
        """
        if not self.is_open:
            raise ValueError("This shift has already ended.")
        self.end_time = end_time or timezone.now()
        if self.end_time < self.start_time:
            raise ValueError("Shift end time cannot be before its start time.")
        self.total_hours = self.hours_between(self.start_time, self.end_time)
        self.save(update_fields=["end_time", "total_hours"])
