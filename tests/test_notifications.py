"""
Tests for in-app notifications.
"""

from django.urls import reverse

import pytest

from apps.notifications import services
from apps.notifications.models import Notification


@pytest.fixture
def branch_admin(django_user_model, other_branch):
    return django_user_model.objects.create_user(
        username="nasr_admin", password="testpass123", role=django_user_model.ADMIN, branch=other_branch
    )


@pytest.mark.django_db
class TestNotificationServices:
    def test_branch_admins(self, admin_user, branch_admin, cashier_user, branch, other_branch):
        assert set(services.branch_admins(branch)) == {admin_user}
        assert set(services.branch_admins(other_branch)) == {admin_user, branch_admin}

    def test_notify_branch_admins(self, admin_user, cashier_user, branch):
        created = services.notify_branch_admins(
            branch, "Low stock", "Rice is running low", Notification.LOW_STOCK
        )

        assert len(created) == 1
        assert services.get_unread_count(admin_user) == 1
        assert services.get_unread_count(cashier_user) == 0

    def test_mark_selected_as_read(self, admin_user):
        first = services.create_notification(admin_user, "One", "First")
        services.create_notification(admin_user, "Two", "Second")

        assert services.mark_notifications_as_read(admin_user, [first.id]) == 1
        assert services.get_unread_count(admin_user) == 1

        first.refresh_from_db()
        assert first.is_read
        assert first.read_at is not None


@pytest.mark.django_db
class TestNotificationAPI:
    def test_list_only_shows_own_notifications(self, authenticated_client, admin_user, cashier_user):
        services.create_notification(admin_user, "Mine", "For the admin")
        services.create_notification(cashier_user, "Not mine", "For the cashier")

        response = authenticated_client.get(reverse("notifications:notification_list"))

        assert response.status_code == 200
        assert [row["title"] for row in response.json()["results"]] == ["Mine"]

    def test_unread_count_and_mark_all_read(self, authenticated_client, admin_user):
        services.create_notification(admin_user, "One", "First")
        services.create_notification(admin_user, "Two", "Second")

        response = authenticated_client.get(reverse("notifications:unread_count"))
        assert response.json() == {"unread_count": 2}

        response = authenticated_client.post(reverse("notifications:mark_read"), {}, format="json")
        assert response.json() == {"marked_count": 2, "unread_count": 0}

    def test_cannot_read_someone_elses_notification(self, authenticated_client, cashier_user):
        notification = services.create_notification(cashier_user, "Private", "Cashier only")

        response = authenticated_client.post(
            reverse("notifications:mark_single_read", args=[notification.id])
        )

        assert response.status_code == 404
        notification.refresh_from_db()
        assert not notification.is_read
