"""
Tests for branches, branch scoping, store settings and shifts.
"""

from datetime import timedelta
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.db.migrations.loader import MigrationLoader
from django.test import RequestFactory
from django.urls import reverse
from django.utils import timezone

import pytest

from apps.core import services
from apps.core.branch_context import resolve_branch_id, scope_to_branch
from apps.core.models import Shift
from apps.inventory.models import Product


@pytest.mark.django_db
class TestBranchResolution:
    """The effective branch follows query param, header, session, user, MAIN."""

    def _request(self, user, **extra):
        request = RequestFactory().get("/", **extra)
        request.user = user
        request.session = {}
        return request

    def test_falls_back_to_main_branch(self, admin_user, branch, other_branch):
        request = self._request(admin_user)
        assert resolve_branch_id(request) == str(branch.id)

    def test_explicit_branch_wins(self, admin_user, branch, other_branch):
        request = self._request(admin_user)
        assert resolve_branch_id(request, str(other_branch.id)) == str(other_branch.id)

    def test_session_branch_used_before_main(self, admin_user, branch, other_branch):
        request = self._request(admin_user)
        request.session["current_branch_id"] = str(other_branch.id)
        assert resolve_branch_id(request) == str(other_branch.id)

    def test_cashier_is_pinned_to_assigned_branch(self, cashier_user, branch, other_branch):
        request = self._request(cashier_user)
        assert resolve_branch_id(request, str(other_branch.id)) == str(branch.id)

    def test_invalid_branch_id_is_ignored(self, admin_user, branch):
        request = self._request(admin_user)
        assert resolve_branch_id(request, "not-a-uuid") == str(branch.id)


@pytest.mark.django_db
class TestBranchScoping:
    def test_scoping_is_noop_when_multi_branch_disabled(
        self, store_settings, make_product, branch, other_branch
    ):
        make_product(name="A")
        make_product(name="B", branch=other_branch)
        queryset = scope_to_branch(Product.objects.all(), str(branch.id))
        assert queryset.count() == 2

    def test_scoped_query_never_returns_other_branches(
        self, multi_branch, make_product, branch, other_branch
    ):
        make_product(name="A")
        make_product(name="B", branch=other_branch)
        queryset = scope_to_branch(Product.objects.all(), str(branch.id))
        assert [p.name for p in queryset] == ["A"]
        assert all(p.branch_id == branch.id for p in queryset)

    def test_product_list_endpoint_is_scoped(
        self, authenticated_client, multi_branch, make_product, branch, other_branch
    ):
        make_product(name="Main product")
        make_product(name="Other product", branch=other_branch)

        response = authenticated_client.get(
            reverse("inventory:product_list"), {"branch": str(other_branch.id)}
        )

        assert response.status_code == 200
        names = [row["name"] for row in response.json()["results"]]
        assert names == ["Other product"]

    def test_select_branch_persists_in_session(self, api_client, admin_user, other_branch):
        api_client.force_login(admin_user)
        url = reverse("core:current_branch")

        response = api_client.post(url, {"branch_id": str(other_branch.id)}, format="json")
        assert response.status_code == 200

        response = api_client.get(url)
        assert response.json()["branch"]["code"] == "NASR"

    def test_cashier_cannot_switch_branch(self, cashier_client, other_branch):
        response = cashier_client.post(
            reverse("core:current_branch"), {"branch_id": str(other_branch.id)}, format="json"
        )
        assert response.status_code == 403


@pytest.mark.django_db
class TestStoreSettings:
    def test_load_returns_singleton(self, store_settings):
        from apps.core.models import StoreSettings

        assert StoreSettings.load().pk == store_settings.pk == 1

    def test_update_requires_admin(self, cashier_client):
        response = cashier_client.patch(
            reverse("core:store_settings"), {"store_name": "Corner Shop"}, format="json"
        )
        assert response.status_code == 403


@pytest.mark.django_db
class TestShifts:
    def test_hours_are_rounded_to_two_decimals(self, cashier_user):
        start = timezone.now() - timedelta(hours=8, minutes=20)
        shift = services.start_shift(cashier_user, start_time=start)
        shift = services.end_shift(cashier_user, end_time=start + timedelta(hours=8, minutes=20))
        assert shift.total_hours == Decimal("8.33")

    def test_only_one_open_shift(self, cashier_user):
        services.start_shift(cashier_user)
        with pytest.raises(ValueError):
            services.start_shift(cashier_user)
        assert Shift.objects.filter(employee=cashier_user, end_time__isnull=True).count() == 1

    def test_end_without_open_shift_fails(self, cashier_client):
        response = cashier_client.post(reverse("core:shift_end"), {}, format="json")
        assert response.status_code == 400

    def test_start_and_end_via_api(self, cashier_client):
        response = cashier_client.post(reverse("core:shift_start"), {}, format="json")
        assert response.status_code == 201

        response = cashier_client.post(reverse("core:shift_end"), {}, format="json")
        assert response.status_code == 200
        assert response.json()["total_hours"] is not None


class TestSentryScrubbing:
    def test_masks_phone_numbers_and_secret_keys(self):
        from apps.core.sentry_config import before_send

        event = {
            "request": {
                "headers": {"Authorization": "Bearer abc", "Accept": "application/json"},
                "data": {"customer_phone": "01001234567", "password": "hunter22"},
            },
            "exception": {"values": [{"value": "No customer with phone 01001234567"}]},
        }

        scrubbed = before_send(event, {})

        assert scrubbed["request"]["headers"]["Authorization"] == "[REDACTED]"
        assert scrubbed["request"]["headers"]["Accept"] == "application/json"
        assert scrubbed["request"]["data"]["customer_phone"] == "XXXXXXX4567"
        assert scrubbed["request"]["data"]["password"] == "[REDACTED]"
        assert scrubbed["exception"]["values"][0]["value"].endswith("XXXXXXX4567")


LOCAL_APPS = ["core", "crm", "delivery", "inventory", "sales", "orders", "finance", "notifications"]


@pytest.mark.django_db
class TestMigrations:
    """Shipped migrations cover every model field, option and index."""

    @pytest.fixture(autouse=True)
    def _enable_migrations(self, settings):
        settings.MIGRATION_MODULES = {}

    def test_every_app_ships_an_initial_migration(self):
        loader = MigrationLoader(None, ignore_no_migrations=True)
        for app_label in LOCAL_APPS:
            assert (app_label, "0001_initial") in loader.disk_migrations

    def test_models_have_no_pending_changes(self):
        out = StringIO()
        call_command("makemigrations", *LOCAL_APPS, "--check", "--dry-run", stdout=out)
        assert "No changes detected" in out.getvalue()
