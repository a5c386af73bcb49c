"""
Delivery pricing.
"""

import logging

from .models import DeliveryLocation, DeliveryTypePrice

logger = logging.getLogger(__name__)


def quote_delivery(location, delivery_type=None):
    """
    Price a delivery to ``location``.

    A price set for the delivery type on the location (or its nearest
    ancestor) wins; otherwise the location's default price applies.

    Returns:
        Dict with price, estimated_time and the location/type used

    Raises:
        ValueError: If the location is inactive or has no price configured
    """
    if not location.is_active:
        raise ValueError(f"Deliveries to {location.name} are not available.")

    if delivery_type is not None:
        if not delivery_type.is_active:
            raise ValueError(f"Delivery type {delivery_type.name} is not available.")
        node = location
        while node is not None:
            type_price = DeliveryTypePrice.objects.filter(
                location=node, delivery_type=delivery_type
            ).first()
            if type_price is not None:
                return {
                    "location": location,
                    "delivery_type": delivery_type,
                    "price": type_price.price,
                    "estimated_time": type_price.estimated_time or location.estimated_time,
                }
            node = node.parent

    if location.price is None:
        raise ValueError(f"No delivery price is configured for {location.name}.")

    return {
        "location": location,
        "delivery_type": delivery_type,
        "price": location.price,
        "estimated_time": location.estimated_time,
    }


def children_of(parent_id=None, active_only=False):
    """Direct children of a location, or the governorates when no parent is given."""
    queryset = DeliveryLocation.objects.all()
    if parent_id:
        queryset = queryset.filter(parent_id=parent_id)
    else:
        queryset = queryset.filter(level=DeliveryLocation.GOVERNORATE)
    if active_only:
        queryset = queryset.filter(is_active=True)
    return queryset.order_by("name")
