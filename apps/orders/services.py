"""
Online order workflow.
"""

import logging

from django.db import transaction

from apps.core.models import User
from apps.crm import services as crm_services

from .models import OnlineOrder

logger = logging.getLogger(__name__)

# Action name -> (transition method, extra keyword arguments it accepts)
TRANSITIONS = {
    "process": ("process", ()),
    "ready": ("mark_ready", ()),
    "ship": ("ship", ("tracking_number",)),
    "deliver": ("deliver", ()),
    "cancel": ("cancel", ("reason",)),
}


def normalize_order_status(value):
    """Current status for a possibly legacy status value."""
    return OnlineOrder.normalize_status(value)


@transaction.atomic
def transition_order(order_id, action, user, **kwargs):
    """
    Move an order through one status transition.

    Args:
        order_id: Order ID
        action: One of process, ready, ship, deliver, cancel
        user: User performing the action
        kwargs: ``tracking_number`` for ship, ``reason`` for cancel

    Raises:
        OnlineOrder.DoesNotExist: If the order does not exist
        TransitionNotAllowed: If the order's status does not allow the action
        ValueError: If the action is unknown
    """
    if action not in TRANSITIONS:
        raise ValueError(f"Unknown order action: {action}")
    method_name, accepted = TRANSITIONS[action]

    order = OnlineOrder.objects.select_for_update().get(pk=order_id)
    arguments = {key: value for key, value in kwargs.items() if key in accepted}
    getattr(order, method_name)(user, **arguments)
    order.save()

    if order.status == OnlineOrder.DELIVERED and order.customer_id:
        crm_services.record_purchase(order.customer_id, order.total)

    logger.info(f"Order {order.order_number} {order.status} by {user.username}")
    return order


@transaction.atomic
def assign_delivery_employee(order_id, employee_id):
    """
    Assign (or clear, with ``None``) the employee delivering an order.

    Raises:
        OnlineOrder.DoesNotExist: If the order does not exist
        User.DoesNotExist: If the employee does not exist
        ValueError: If the order is finished or the user is not a delivery employee
    """
    order = OnlineOrder.objects.select_for_update().get(pk=order_id)
    if order.status in (OnlineOrder.DELIVERED, OnlineOrder.CANCELLED):
        raise ValueError(f"Cannot assign a delivery employee to a {order.status} order.")

    employee = None
    if employee_id:
        employee = User.objects.get(pk=employee_id)
        if employee.role != User.DELIVERY or not employee.is_active:
            raise ValueError(f"{employee.username} is not an active delivery employee.")

    order.delivery_employee = employee
    order.save(update_fields=["delivery_employee", "updated_at"])
    logger.info(
        f"Order {order.order_number} assigned to {employee.username if employee else 'nobody'}"
    )
    return order


@transaction.atomic
def confirm_payment(order_id):
    """
    Mark an order as paid.

    Raises:
        OnlineOrder.DoesNotExist: If the order does not exist
        ValueError: If the order is cancelled or already paid
    """
    order = OnlineOrder.objects.select_for_update().get(pk=order_id)
    if order.status == OnlineOrder.CANCELLED:
        raise ValueError("Cannot confirm payment of a cancelled order.")
    if order.payment_status == OnlineOrder.PAYMENT_PAID:
        raise ValueError("This order is already paid.")
    order.payment_status = OnlineOrder.PAYMENT_PAID
    order.save(update_fields=["payment_status", "updated_at"])
    logger.info(f"Payment confirmed for order {order.order_number}")
    return order
