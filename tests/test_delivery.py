"""
Tests for the delivery location hierarchy and delivery pricing.
"""

from decimal import Decimal

from django.urls import reverse

import pytest

from apps.delivery import services
from apps.delivery.models import DeliveryLocation, DeliveryType, DeliveryTypePrice


@pytest.mark.django_db
class TestLocationHierarchy:
    def test_full_path(self, neighborhood):
        assert neighborhood.get_full_path() == "Cairo > Nasr City > Zone 1 > Block 7"

    def test_price_only_allowed_on_neighborhoods(self, authenticated_client, neighborhood):
        area = neighborhood.parent
        response = authenticated_client.post(
            reverse("delivery:location_list"),
            {
                "name": "Zone 2",
                "level": DeliveryLocation.AREA,
                "parent": str(area.parent_id),
                "price": "20.00",
            },
            format="json",
        )
        assert response.status_code == 400

    def test_parent_must_be_one_level_up(self, authenticated_client, neighborhood):
        governorate = neighborhood.parent.parent.parent
        response = authenticated_client.post(
            reverse("delivery:location_list"),
            {
                "name": "Block 8",
                "level": DeliveryLocation.NEIGHBORHOOD,
                "parent": str(governorate.id),
                "price": "20.00",
            },
            format="json",
        )
        assert response.status_code == 400
        assert "parent" in response.json()

    def test_children_endpoint(self, authenticated_client, neighborhood):
        area = neighborhood.parent
        response = authenticated_client.get(reverse("delivery:location_children", args=[area.id]))
        assert response.status_code == 200
        assert [row["name"] for row in response.json()] == ["Block 7"]


@pytest.mark.django_db
class TestDeliveryQuote:
    def test_default_neighborhood_price(self, neighborhood):
        quote = services.quote_delivery(neighborhood)
        assert quote["price"] == Decimal("30.00")
        assert quote["estimated_time"] == "45 min"

    def test_type_price_on_ancestor_wins(self, neighborhood):
        express = DeliveryType.objects.create(name="Express")
        DeliveryTypePrice.objects.create(
            location=neighborhood.parent.parent, delivery_type=express, price=Decimal("55.00")
        )

        quote = services.quote_delivery(neighborhood, express)

        assert quote["price"] == Decimal("55.00")
        assert quote["estimated_time"] == "45 min"

    def test_inactive_location_is_refused(self, neighborhood):
        neighborhood.is_active = False
        neighborhood.save()
        with pytest.raises(ValueError):
            services.quote_delivery(neighborhood)

    def test_quote_endpoint(self, cashier_client, neighborhood):
        response = cashier_client.get(
            reverse("delivery:quote"), {"location_id": str(neighborhood.id)}
        )
        assert response.status_code == 200
        assert response.json()["price"] == "30.00"
        assert response.json()["location_name"] == "Cairo > Nasr City > Zone 1 > Block 7"

    def test_cashier_cannot_set_type_prices(self, cashier_client, neighborhood):
        express = DeliveryType.objects.create(name="Express")
        response = cashier_client.post(
            reverse("delivery:location_prices", args=[neighborhood.id]),
            {"delivery_type": str(express.id), "price": "40.00"},
            format="json",
        )
        assert response.status_code == 403
