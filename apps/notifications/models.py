import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Notification(models.Model):
    """
    An in-app notification for a user.

    Clients poll the unread count and mark notifications read once seen.
    """

    INFO = "INFO"
    ORDER = "ORDER"
    LOW_STOCK = "LOW_STOCK"
    RETURN = "RETURN"
    SYSTEM = "SYSTEM"

    NOTIFICATION_TYPES = [
        (INFO, "Information"),
        (ORDER, "New Order"),
        (LOW_STOCK, "Low Stock Alert"),
        (RETURN, "Return Request"),
        (SYSTEM, "System Notification"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
        help_text="User who will receive this notification",
    )
    title = models.CharField(max_length=255, help_text="Notification title")
    message = models.TextField(help_text="Notification message content")
    notification_type = models.CharField(
        max_length=20,
        choices=NOTIFICATION_TYPES,
        default=INFO,
        help_text="Type of notification for styling and filtering",
    )
    is_read = models.BooleanField(
        default=False, help_text="Whether the user has read this notification"
    )
    read_at = models.DateTimeField(
        null=True, blank=True, help_text="When the notification was marked as read"
    )
    action_url = models.CharField(
        max_length=500,
        blank=True,
        help_text="Client route to open when the notification is clicked",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="notif_user_created_idx"),
            models.Index(fields=["user", "is_read"], name="notif_user_read_idx"),
        ]

    def __str__(self):
        return f"{self.title} - {self.user.username}"

    def mark_as_read(self):
        """Mark notification as read and set read timestamp"""
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=["is_read", "read_at"])
