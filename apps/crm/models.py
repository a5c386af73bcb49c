"""
Customer model.

Customers are identified by phone number: the POS and online orders look a
customer up by phone and create one when none matches.
"""

import uuid
from decimal import Decimal

from django.db import models

from apps.delivery.models import DeliveryLocation


class Customer(models.Model):
    """
    A store customer with contact details and a delivery location.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the customer",
    )

    name = models.CharField(max_length=255, help_text="Customer's name")

    phone = models.CharField(
        max_length=20,
        unique=True,
        null=True,
        blank=True,
        help_text="Customer's phone number (unique when present)",
    )

    email = models.EmailField(null=True, blank=True, help_text="Customer's email address")

    address = models.TextField(blank=True, help_text="Street address")

    notes = models.TextField(blank=True, help_text="Internal notes about the customer")

    is_verified = models.BooleanField(
        default=False, help_text="Whether the customer's phone/location has been verified"
    )

    # Location hierarchy
    governorate = models.ForeignKey(
        DeliveryLocation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        limit_choices_to={"level": DeliveryLocation.GOVERNORATE},
        help_text="Governorate",
    )

    city = models.ForeignKey(
        DeliveryLocation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        limit_choices_to={"level": DeliveryLocation.CITY},
        help_text="City",
    )

    area = models.ForeignKey(
        DeliveryLocation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        limit_choices_to={"level": DeliveryLocation.AREA},
        help_text="Area",
    )

    neighborhood = models.ForeignKey(
        DeliveryLocation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="customers",
        limit_choices_to={"level": DeliveryLocation.NEIGHBORHOOD},
        help_text="Neighborhood used for delivery pricing",
    )

    # Purchase tracking
    total_purchases = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        default=Decimal("0.00"),
        help_text="Total amount spent across sales and delivered orders",
    )

    last_purchase_at = models.DateTimeField(
        null=True, blank=True, help_text="When the customer made their last purchase"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        verbose_name = "Customer"
        verbose_name_plural = "Customers"
        indexes = [
            models.Index(fields=["name"], name="customer_name_idx"),
            models.Index(fields=["-total_purchases"], name="customer_purchases_idx"),
        ]

    def __str__(self):
        return f"{self.name} ({self.phone})" if self.phone else self.name

    def save(self, *args, **kwargs):
        self.phone = (self.phone or "").strip() or None
        self.email = (self.email or "").strip() or None
        super().save(*args, **kwargs)

    def get_location_path(self):
        parts = [self.governorate, self.city, self.area, self.neighborhood]
        return " > ".join(part.name for part in parts if part)

    def set_location(self, location):
        """Fill the location hierarchy from its most specific node."""
        nodes = location.ancestors()
        self.governorate = nodes.get(DeliveryLocation.GOVERNORATE)
        self.city = nodes.get(DeliveryLocation.CITY)
        self.area = nodes.get(DeliveryLocation.AREA)
        self.neighborhood = nodes.get(DeliveryLocation.NEIGHBORHOOD)
