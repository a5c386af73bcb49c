"""
Inventory service functions: barcode lookup, stock adjustment, expiry
handling and damage statistics.
"""

import logging
from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db import transaction
from django.db.models import Count, F, Q, Sum
from django.utils import timezone

from apps.core.branch_context import scope_to_branch

from . import barcode_utils
from .models import DamagedProduct, Product, ProductBatch

logger = logging.getLogger(__name__)

# Stock adjustment types
ADD = "add"
DEDUCT = "deduct"
SET = "set"

# Barcode match kinds
MATCH_NORMAL = "normal"
MATCH_BULK = "bulk"
MATCH_SCALE = "scale"


def lookup_barcode(code, branch_id=None):
    """
    Resolve a scanned barcode to a product and the quantity it represents.

    Checked in order: the product barcode, a bulk pack barcode, then a scale
    barcode whose first 7 characters match a scale product.

    Returns:
        Dict with product, kind, quantity, unit_price, discount and line_total

    Raises:
        Product.DoesNotExist: If nothing matches
    """
    code = (code or "").strip()
    products = scope_to_branch(Product.objects.filter(is_active=True), branch_id).select_related(
        "category", "subcategory", "company", "parent"
    )

    product = products.filter(barcode=code).first()
    if product is not None:
        return _match(product, MATCH_NORMAL, Decimal("1"))

    product = products.filter(bulk_enabled=True, bulk_barcode=code).first()
    if product is not None:
        quantity = product.bulk_quantity or Decimal("1")
        line_total = product.bulk_price if product.bulk_price is not None else None
        return _match(product, MATCH_BULK, quantity, line_total=line_total)

    if barcode_utils.is_scale_barcode(code):
        prefix = barcode_utils.scale_product_code(code)
        product = products.filter(barcode_type=Product.SCALE, barcode__startswith=prefix).first()
        if product is not None:
            return _match(product, MATCH_SCALE, barcode_utils.scale_weight_kg(code))

    raise Product.DoesNotExist(f"No product found with barcode: {code}")


def _match(product, kind, quantity, line_total=None):
    unit_price = product.unit_price
    if line_total is None:
        line_total = (unit_price * quantity).quantize(Decimal("0.01"))
        discount = (product.unit_discount * quantity).quantize(Decimal("0.01"))
    else:
        discount = max(product.price * quantity - line_total, Decimal("0.00")).quantize(
            Decimal("0.01")
        )
        unit_price = (line_total / quantity).quantize(Decimal("0.01"))
    return {
        "product": product,
        "kind": kind,
        "quantity": quantity,
        "unit_price": unit_price,
        "discount": discount,
        "line_total": line_total,
    }


@transaction.atomic
def adjust_stock(product_id, adjustment_type, quantity, user=None, reason=""):
    """
    Add, deduct or set a product's stock.

    Raises:
        Product.DoesNotExist: If the product does not exist
        ValueError: If the adjustment is invalid
    """
    product = Product.objects.select_for_update().get(pk=product_id)
    if product.parent_id and product.shares_parent_inventory:
        Product.objects.select_for_update().get(pk=product.parent_id)

    if adjustment_type == ADD:
        product.add_quantity(quantity)
    elif adjustment_type == DEDUCT:
        product.deduct_quantity(quantity)
    elif adjustment_type == SET:
        product.set_quantity(quantity)
    else:
        raise ValueError(f"Unknown adjustment type: {adjustment_type}")

    username = user.username if user else "system"
    logger.info(
        f"Stock {adjustment_type} {quantity} on {product.name} by {username}"
        + (f": {reason}" if reason else "")
    )
    product.refresh_from_db()
    return product


def low_stock_products(queryset):
    """Products at or below their minimum quantity (variants on shared stock excluded)."""
    return queryset.filter(is_active=True, shares_parent_inventory=False).filter(
        quantity__lte=F("min_quantity")
    )


def expiring_batches(queryset, days=None):
    """Batches with stock left that expire within ``days`` days (or already expired)."""
    if days is None:
        days = settings.EXPIRY_WARNING_DAYS
    limit = timezone.localdate() + timedelta(days=days)
    return queryset.filter(expiry_date__lte=limit, quantity__gt=0).order_by("expiry_date")


@transaction.atomic
def mark_batch_damaged(batch_id, user=None, notes=""):
    """
    Write off a batch: record a DamagedProduct, deduct the product stock and
    zero the batch, all or nothing.

    Raises:
        ProductBatch.DoesNotExist: If the batch does not exist
        ValueError: If the batch is empty or the product lacks the stock
    """
    batch = ProductBatch.objects.select_for_update().select_related("product").get(pk=batch_id)
    if batch.quantity <= 0:
        raise ValueError("This batch has no remaining quantity.")

    product = Product.objects.select_for_update().get(pk=batch.product_id)
    quantity = batch.quantity

    damage = DamagedProduct.objects.create(
        product=product,
        branch=batch.branch,
        batch_number=batch.batch_number,
        quantity=quantity,
        cost=(quantity * product.purchase_price).quantize(Decimal("0.01")),
        notes=notes or "Expired product",
        recorded_by=user,
    )
    product.deduct_quantity(quantity)

    batch.quantity = Decimal("0.000")
    batch.notes = f"Damaged - {notes or 'Expired product'}"
    batch.save(update_fields=["quantity", "notes", "updated_at"])

    logger.info(f"Batch {batch.batch_number} of {product.name} written off ({quantity})")
    return damage


@transaction.atomic
def replace_batch(batch_id, batch_number, expiry_date, notes=""):
    """
    Replace an expired batch with fresh stock from the supplier.

    Raises:
        ProductBatch.DoesNotExist: If the batch does not exist
        ValueError: If the new expiry date is not in the future
    """
    if not batch_number or not expiry_date:
        raise ValueError("A new batch number and expiry date are required.")
    if expiry_date <= timezone.localdate():
        raise ValueError("The new expiry date must be in the future.")

    batch = ProductBatch.objects.select_for_update().get(pk=batch_id)
    old_number = batch.batch_number
    batch.batch_number = batch_number
    batch.expiry_date = expiry_date
    batch.notes = f"Replaced - {notes or 'Expired product replaced'}"
    batch.save(update_fields=["batch_number", "expiry_date", "notes", "updated_at"])

    logger.info(f"Batch {old_number} replaced by {batch_number}")
    return batch


def damage_statistics(queryset, date_from=None, date_to=None):
    """Total cost, total quantity and record count of damaged stock."""
    if date_from:
        queryset = queryset.filter(damage_date__gte=date_from)
    if date_to:
        queryset = queryset.filter(damage_date__lte=date_to)
    stats = queryset.aggregate(
        total_cost=Sum("cost"), total_quantity=Sum("quantity"), records_count=Count("id")
    )
    return {
        "total_cost": stats["total_cost"] or Decimal("0.00"),
        "total_quantity": stats["total_quantity"] or Decimal("0.000"),
        "records_count": stats["records_count"],
    }


def search_products(queryset, term):
    if not term:
        return queryset
    return queryset.filter(
        Q(name__icontains=term) | Q(barcode__icontains=term) | Q(bulk_barcode=term)
    )
