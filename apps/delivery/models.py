"""
Delivery models: the location hierarchy and per-type delivery pricing.

Locations form a tree: governorate > city > area > neighborhood. Only
neighborhoods carry a default price and estimated time.
"""

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class DeliveryLocation(models.Model):
    """A node in the delivery location hierarchy."""

    GOVERNORATE = "governorate"
    CITY = "city"
    AREA = "area"
    NEIGHBORHOOD = "neighborhood"

    LEVEL_CHOICES = [
        (GOVERNORATE, "Governorate"),
        (CITY, "City"),
        (AREA, "Area"),
        (NEIGHBORHOOD, "Neighborhood"),
    ]

    # Level each level's parent must have
    PARENT_LEVEL = {
        GOVERNORATE: None,
        CITY: GOVERNORATE,
        AREA: CITY,
        NEIGHBORHOOD: AREA,
    }

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the location",
    )

    name = models.CharField(max_length=255, help_text="Location name")

    level = models.CharField(
        max_length=20, choices=LEVEL_CHOICES, help_text="Level of this node in the hierarchy"
    )

    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="children",
        help_text="Parent location (empty for governorates)",
    )

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Default delivery price (neighborhoods only)",
    )

    estimated_time = models.CharField(
        max_length=50, blank=True, help_text="Estimated delivery time (neighborhoods only)"
    )

    is_active = models.BooleanField(default=True, help_text="Whether deliveries are offered here")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "delivery_locations"
        ordering = ["name"]
        verbose_name = "Delivery Location"
        verbose_name_plural = "Delivery Locations"
        indexes = [
            models.Index(fields=["level", "is_active"], name="location_level_active_idx"),
            models.Index(fields=["parent"], name="location_parent_idx"),
        ]

    def __str__(self):
        return self.name

    def clean(self):
        expected = self.PARENT_LEVEL.get(self.level)
        if expected is None and self.parent_id:
            raise ValidationError({"parent": "Governorates cannot have a parent."})
        if expected is not None:
            if not self.parent_id:
                raise ValidationError({"parent": f"A {self.level} needs a {expected} parent."})
            if self.parent.level != expected:
                raise ValidationError(
                    {"parent": f"The parent of a {self.level} must be a {expected}."}
                )
        if self.level != self.NEIGHBORHOOD and (self.price is not None or self.estimated_time):
            raise ValidationError({"price": "Only neighborhoods carry a delivery price."})

    def get_full_path(self):
        """Full location path (e.g., 'Cairo > Nasr City > Zone 1 > Block 7')."""
        path = [self.name]
        parent = self.parent
        while parent:
            path.insert(0, parent.name)
            parent = parent.parent
        return " > ".join(path)

    def ancestors(self):
        """Map of level -> location for this node and every ancestor."""
        nodes = {}
        node = self
        while node:
            nodes[node.level] = node
            node = node.parent
        return nodes


class DeliveryType(models.Model):
    """A delivery service level (e.g. standard, express)."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the delivery type",
    )

    name = models.CharField(max_length=100, unique=True, help_text="Delivery type name")

    description = models.TextField(blank=True, help_text="Description")

    is_active = models.BooleanField(default=True, help_text="Whether this type is offered")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "delivery_types"
        ordering = ["name"]
        verbose_name = "Delivery Type"
        verbose_name_plural = "Delivery Types"

    def __str__(self):
        return self.name


class DeliveryTypePrice(models.Model):
    """Price and estimated time of a delivery type at one location."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the price",
    )

    location = models.ForeignKey(
        DeliveryLocation,
        on_delete=models.CASCADE,
        related_name="type_prices",
        help_text="Location this price applies to",
    )

    delivery_type = models.ForeignKey(
        DeliveryType,
        on_delete=models.CASCADE,
        related_name="prices",
        help_text="Delivery type",
    )

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
        help_text="Delivery price",
    )

    estimated_time = models.CharField(max_length=50, blank=True, help_text="Estimated time")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "delivery_type_prices"
        verbose_name = "Delivery Type Price"
        verbose_name_plural = "Delivery Type Prices"
        unique_together = [["location", "delivery_type"]]

    def __str__(self):
        return f"{self.delivery_type.name} @ {self.location.name}: {self.price}"
