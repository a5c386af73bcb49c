"""
Customer lookup and purchase tracking.
"""

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from .models import Customer

logger = logging.getLogger(__name__)

PHONE_SEARCH_LIMIT = 10

LOCATION_FIELDS = ("governorate", "city", "area", "neighborhood")


def normalize_phone(phone):
    return (phone or "").strip() or None


def search_by_phone(phone, limit=PHONE_SEARCH_LIMIT):
    """Customers whose phone contains ``phone`` (case-insensitive), at most ``limit``."""
    phone = normalize_phone(phone)
    if not phone:
        return Customer.objects.none()
    return Customer.objects.filter(phone__icontains=phone).order_by("name")[:limit]


def add_customer(**fields):
    """
    Create a customer, or return the existing one with the same phone.

    Returns:
        Tuple of (customer, created)
    """
    phone = normalize_phone(fields.get("phone"))
    if phone:
        existing = Customer.objects.filter(phone=phone).first()
        if existing is not None:
            return existing, False
    fields["phone"] = phone
    try:
        with transaction.atomic():
            customer = Customer.objects.create(**fields)
    except IntegrityError:
        # Created concurrently by another request
        return Customer.objects.get(phone=phone), False
    logger.info(f"Customer {customer.name} created")
    return customer, True


def find_or_create_customer(name="", phone=None, **locations):
    """
    Match a customer by phone, refreshing the name and location; create one otherwise.

    Args:
        name: Customer name
        phone: Customer phone
        locations: Optional governorate/city/area/neighborhood instances

    Returns:
        Customer, or None when neither name nor phone is given
    """
    name = (name or "").strip()
    phone = normalize_phone(phone)
    if not name and not phone:
        return None

    locations = {key: value for key, value in locations.items() if key in LOCATION_FIELDS and value}

    if phone:
        customer = Customer.objects.filter(phone=phone).first()
        if customer is not None:
            updated = []
            if name and customer.name != name:
                customer.name = name
                updated.append("name")
            for field, value in locations.items():
                if getattr(customer, f"{field}_id") != value.pk:
                    setattr(customer, field, value)
                    updated.append(field)
            if updated:
                customer.save(update_fields=updated + ["updated_at"])
            return customer

    customer, _ = add_customer(name=name or phone, phone=phone, **locations)
    return customer


def record_purchase(customer_id, amount):
    """Add ``amount`` to the customer's lifetime purchases."""
    Customer.objects.filter(pk=customer_id).update(
        total_purchases=F("total_purchases") + amount, last_purchase_at=timezone.now()
    )


def reverse_purchase(customer_id, amount):
    """Subtract a refund from the lifetime purchases, never going below zero."""
    Customer.objects.filter(pk=customer_id).update(
        total_purchases=Greatest(F("total_purchases") - amount, Value(Decimal("0.00")))
    )
