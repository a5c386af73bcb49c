"""
Sales service functions: invoice numbering, POS search and the return workflow.
"""

import logging
from decimal import ROUND_DOWN, Decimal

from django.db import transaction
from django.db.models import Q, Sum
from django.utils import timezone

from apps.core.branch_context import scope_to_branch
from apps.crm import services as crm_services
from apps.crm.models import Customer
from apps.inventory.models import Product
from apps.inventory.services import search_products

from .models import ReturnOrder, ReturnOrderItem, Sale

logger = logging.getLogger(__name__)

POS_SEARCH_LIMIT = 20
CUSTOMER_SEARCH_LIMIT = 10


def generate_invoice_number(now=None):
    """
    Next invoice number for today: ``YYMMDD-XXXX`` where XXXX is the day's
    sale count plus one, zero-padded to four digits.
    """
    now = timezone.localtime(now or timezone.now())
    prefix = now.strftime("%y%m%d")
    count = Sale.objects.filter(invoice_number__startswith=f"{prefix}-").count()
    number = f"{prefix}-{count + 1:04d}"
    # Deleted sales leave gaps; skip numbers that are still taken
    while Sale.objects.filter(invoice_number=number).exists():
        count += 1
        number = f"{prefix}-{count + 1:04d}"
    return number


def pos_product_search(term, branch_id=None, limit=POS_SEARCH_LIMIT):
    """Active products matching a name or barcode fragment, for the POS screen."""
    products = scope_to_branch(Product.objects.filter(is_active=True), branch_id)
    return search_products(products, (term or "").strip()).select_related(
        "category", "company", "parent"
    )[:limit]


def pos_customer_search(term, limit=CUSTOMER_SEARCH_LIMIT):
    term = (term or "").strip()
    if not term:
        return Customer.objects.none()
    return Customer.objects.filter(Q(name__icontains=term) | Q(phone__icontains=term)).order_by(
        "name"
    )[:limit]


def _sold_quantities(source):
    rows = source.items.values("product_id").annotate(sold=Sum("quantity"))
    return {row["product_id"]: row["sold"] for row in rows}


def _approved_returns(source, order_type):
    lookup = "return_order__sale" if order_type == ReturnOrder.POS else "return_order__online_order"
    rows = (
        ReturnOrderItem.objects.filter(
            **{lookup: source, "return_order__status": ReturnOrder.APPROVED}
        )
        .values("product_id")
        .annotate(returned=Sum("quantity"))
    )
    return {row["product_id"]: row["returned"] for row in rows}


def returnable_quantities(source, order_type):
    """
    Quantity still returnable per product: sold minus earlier approved returns.
    """
    sold = _sold_quantities(source)
    returned = _approved_returns(source, order_type)
    return {
        product_id: max(quantity - returned.get(product_id, Decimal("0")), Decimal("0"))
        for product_id, quantity in sold.items()
    }


def refund_unit_prices(source, order_type):
    """
    Net unit price paid per product: line totals over quantities, with a POS
    invoice discount spread across the lines. Rounded down to the cent.
    """
    rows = source.items.values("product_id").annotate(sold=Sum("quantity"), paid=Sum("total"))
    share = Decimal("1")
    if order_type == ReturnOrder.POS and source.subtotal:
        share = source.total / source.subtotal
    return {
        row["product_id"]: (row["paid"] * share / row["sold"]).quantize(
            Decimal("0.01"), rounding=ROUND_DOWN
        )
        for row in rows
        if row["sold"]
    }


def validate_return_lines(source, order_type, lines):
    """
    Check requested return quantities against what can still be returned.

    Args:
        source: Sale or OnlineOrder
        order_type: ReturnOrder.POS or ReturnOrder.ONLINE
        lines: Iterable of dicts with ``product`` and ``quantity``

    Raises:
        ValueError: If a product was not sold or the quantity exceeds what remains
    """
    remaining = returnable_quantities(source, order_type)
    requested = {}
    for line in lines:
        product = line["product"]
        requested[product.pk] = requested.get(product.pk, Decimal("0")) + line["quantity"]

    for product_id, quantity in requested.items():
        if product_id not in remaining:
            raise ValueError("A returned product is not part of the original order.")
        if quantity > remaining[product_id]:
            raise ValueError(
                f"Return quantity {quantity} exceeds the returnable quantity "
                f"{remaining[product_id]}."
            )


@transaction.atomic
def approve_return(return_id, user, restock=True):
    """
    Approve a pending return, restocking and updating the sale's status.

    Raises:
        ReturnOrder.DoesNotExist: If the return does not exist
        TransitionNotAllowed: If the return is not pending
        ValueError: If the quantities are no longer returnable
    """
    return_order = ReturnOrder.objects.select_for_update().get(pk=return_id)
    source = return_order.source
    # Re-check against returns approved since this one was requested
    lines = [
        {"product": item.product, "quantity": item.quantity}
        for item in return_order.items.select_related("product")
        if item.product_id
    ]
    validate_return_lines(source, return_order.order_type, lines)

    return_order.approve(user, restock=restock)
    return_order.save()

    if return_order.order_type == ReturnOrder.POS:
        sale = Sale.objects.select_for_update().get(pk=return_order.sale_id)
        sale.refresh_return_status()
        customer_id = sale.customer_id
    else:
        customer_id = return_order.online_order.customer_id
    if customer_id:
        crm_services.reverse_purchase(customer_id, return_order.total)

    logger.info(
        f"Return {return_order.id} approved by {user.username}"
        + (" with restock" if restock else "")
    )
    return return_order


@transaction.atomic
def reject_return(return_id, user, reason):
    """
    Reject a pending return.

    Raises:
        ReturnOrder.DoesNotExist: If the return does not exist
        TransitionNotAllowed: If the return is not pending
        ValueError: If no reason is given
    """
    return_order = ReturnOrder.objects.select_for_update().get(pk=return_id)
    return_order.reject(user, reason)
    return_order.save()
    logger.info(f"Return {return_order.id} rejected by {user.username}: {reason}")
    return return_order


@transaction.atomic
def cancel_sale(sale_id, user, reason=""):
    """
    Void a completed sale: put its lines back in stock and take its total
    off the customer's purchases.

    Raises:
        Sale.DoesNotExist: If the sale does not exist
        ValueError: If the sale is not completed or has returns
    """
    sale = Sale.objects.select_for_update().get(pk=sale_id)
    if not sale.can_be_cancelled():
        raise ValueError("Only completed sales without returns can be cancelled.")

    for item in sale.items.all():
        if item.product_id:
            product = Product.objects.select_for_update().get(pk=item.product_id)
            product.add_quantity(item.quantity)

    sale.mark_as_cancelled(reason)
    if sale.customer_id:
        crm_services.reverse_purchase(sale.customer_id, sale.total)

    logger.info(f"Sale {sale.invoice_number} cancelled by {user.username}: {reason}")
    return sale
