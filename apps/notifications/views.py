"""
Views for in-app notifications.
"""

import logging

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from . import services
from .models import Notification
from .serializers import MarkReadSerializer, NotificationSerializer

logger = logging.getLogger(__name__)


class NotificationListView(generics.ListAPIView):
    """
    The current user's notifications, newest first.

    Query parameters:
    - unread_only: true to hide read notifications
    - type: Notification type
    """

    serializer_class = NotificationSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        params = self.request.query_params
        return services.get_user_notifications(
            user=self.request.user,
            unread_only=params.get("unread_only") == "true",
            notification_type=params.get("type"),
        )


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def unread_count(request):
    return Response({"unread_count": services.get_unread_count(request.user)})


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def mark_read(request):
    """
    Mark notifications as read.

    Request body:
    {
        "notification_ids": ["uuid", ...] (optional, all unread when omitted)
    }
    """
    serializer = MarkReadSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    count = services.mark_notifications_as_read(
        request.user, serializer.validated_data.get("notification_ids") or None
    )
    return Response({"marked_count": count, "unread_count": services.get_unread_count(request.user)})


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def mark_single_read(request, notification_id):
    try:
        notification = Notification.objects.get(id=notification_id, user=request.user)
    except Notification.DoesNotExist:
        return Response({"detail": "Notification not found."}, status=status.HTTP_404_NOT_FOUND)

    notification.mark_as_read()
    return Response(NotificationSerializer(notification).data)
