"""
Notification services.

Notifications are plain rows; the client polls ``get_unread_count``.
"""

import logging
from typing import List, Optional

from django.db.models import Q
from django.utils import timezone

from apps.core.models import Branch, User

from .models import Notification

logger = logging.getLogger(__name__)


def create_notification(
    user: User,
    title: str,
    message: str,
    notification_type: str = Notification.INFO,
    action_url: str = "",
) -> Notification:
    """
    Create an in-app notification for a user.

    Example:
        >>> create_notification(
        ...     user=user,
        ...     title="Low Stock",
        ...     message="Rice is running low",
        ...     notification_type=Notification.LOW_STOCK,
        ... )
    """
    notification = Notification.objects.create(
        user=user,
        title=title,
        message=message,
        notification_type=notification_type,
        action_url=action_url or "",
    )
    logger.info(f"Notification '{title}' created for user {user.username}")
    return notification


def branch_admins(branch: Optional[Branch] = None):
    """
    Active administrators responsible for a branch.

    Super admins and superusers see every branch; admins only their own or,
    when unassigned, all branches.
    """
    admins = User.objects.filter(is_active=True).filter(
        Q(role__in=[User.SUPER_ADMIN, User.ADMIN]) | Q(is_superuser=True)
    )
    if branch is not None:
        admins = admins.filter(
            Q(role=User.SUPER_ADMIN)
            | Q(is_superuser=True)
            | Q(branch__isnull=True)
            | Q(branch=branch)
        )
    return admins


def notify_branch_admins(
    branch: Optional[Branch],
    title: str,
    message: str,
    notification_type: str = Notification.INFO,
    action_url: str = "",
) -> List[Notification]:
    """Notify every administrator of a branch."""
    notifications = [
        Notification(
            user=admin,
            title=title,
            message=message,
            notification_type=notification_type,
            action_url=action_url or "",
        )
        for admin in branch_admins(branch)
    ]
    created = Notification.objects.bulk_create(notifications)
    logger.info(f"Notification '{title}' sent to {len(created)} admins")
    return created


def get_user_notifications(
    user: User,
    unread_only: bool = False,
    notification_type: Optional[str] = None,
):
    queryset = Notification.objects.filter(user=user)
    if unread_only:
        queryset = queryset.filter(is_read=False)
    if notification_type:
        queryset = queryset.filter(notification_type=notification_type)
    return queryset


def get_unread_count(user: User) -> int:
    return Notification.objects.filter(user=user, is_read=False).count()


def mark_notifications_as_read(user: User, notification_ids: Optional[List] = None) -> int:
    """
    Mark notifications as read for a user.

    Args:
        user: User whose notifications to mark as read
        notification_ids: Optional list of specific notification IDs.
                         If None, marks all unread notifications as read.

    Returns:
        Number of notifications marked as read
    """
    queryset = Notification.objects.filter(user=user, is_read=False)

    if notification_ids:
        queryset = queryset.filter(id__in=notification_ids)

    count = queryset.update(is_read=True, read_at=timezone.now())

    logger.info(f"Marked {count} notifications as read for user {user.username}")

    return count
