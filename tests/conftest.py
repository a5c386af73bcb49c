"""
Pytest configuration and fixtures for the retail POS platform.
"""

from decimal import Decimal

import pytest


@pytest.fixture
def api_client():
    """
    Fixture for Django REST framework API client.
    """
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def branch(db):
    """The MAIN branch."""
    from apps.core.models import Branch

    return Branch.objects.create(name="Main Branch", code="MAIN", phone="0220000000")


@pytest.fixture
def other_branch(db):
    from apps.core.models import Branch

    return Branch.objects.create(name="Nasr City", code="NASR")


@pytest.fixture
def store_settings(db):
    from apps.core.models import StoreSettings

    return StoreSettings.load()


@pytest.fixture
def multi_branch(store_settings):
    """Switch multi-branch mode on."""
    store_settings.multi_branch_enabled = True
    store_settings.save()
    return store_settings


@pytest.fixture
def admin_user(django_user_model, branch):
    return django_user_model.objects.create_user(
        username="admin",
        email="admin@example.com",
        password="testpass123",
        role=django_user_model.ADMIN,
    )


@pytest.fixture
def cashier_user(django_user_model, branch):
    return django_user_model.objects.create_user(
        username="cashier",
        password="testpass123",
        role=django_user_model.CASHIER,
        branch=branch,
    )


@pytest.fixture
def delivery_user(django_user_model, branch):
    return django_user_model.objects.create_user(
        username="driver",
        password="testpass123",
        role=django_user_model.DELIVERY,
        branch=branch,
    )


@pytest.fixture
def authenticated_client(api_client, admin_user):
    """
    API client authenticated as a store administrator.
    """
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def cashier_client(cashier_user):
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=cashier_user)
    return client


@pytest.fixture
def make_product(branch):
    """Factory for products in the MAIN branch."""
    from apps.inventory.models import Product

    def _make(name="Rice 1kg", price="50.00", purchase_price="40.00", quantity="100", **kwargs):
        kwargs.setdefault("branch", branch)
        return Product.objects.create(
            name=name,
            price=Decimal(price),
            purchase_price=Decimal(purchase_price),
            quantity=Decimal(quantity),
            **kwargs,
        )

    return _make


@pytest.fixture
def product(make_product):
    return make_product(barcode="6221000000017")


@pytest.fixture
def neighborhood(db):
    """A priced neighborhood with its full location chain."""
    from apps.delivery.models import DeliveryLocation

    governorate = DeliveryLocation.objects.create(
        name="Cairo", level=DeliveryLocation.GOVERNORATE
    )
    city = DeliveryLocation.objects.create(
        name="Nasr City", level=DeliveryLocation.CITY, parent=governorate
    )
    area = DeliveryLocation.objects.create(
        name="Zone 1", level=DeliveryLocation.AREA, parent=city
    )
    return DeliveryLocation.objects.create(
        name="Block 7",
        level=DeliveryLocation.NEIGHBORHOOD,
        parent=area,
        price=Decimal("30.00"),
        estimated_time="45 min",
    )
