"""
Signal handlers for online orders.

New orders notify the administrators of the fulfilling branch.
"""

from django.db import transaction
from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import OnlineOrder


@receiver(post_save, sender=OnlineOrder)
def notify_admins_of_new_order(sender, instance, created, **kwargs):
    """Notify branch administrators once a new order is committed."""
    if not created:
        return

    def _notify():
        from apps.notifications.services import notify_branch_admins

        order = OnlineOrder.objects.filter(pk=instance.pk).first()
        if order is None:
            return
        notify_branch_admins(
            branch=order.branch,
            title=f"New order {order.order_number}",
            message=f"{order.customer_name} ordered {order.total} ({order.items.count()} items).",
            notification_type="ORDER",
            action_url=f"/orders/{order.pk}",
        )

    transaction.on_commit(_notify)
