"""
Notifications App Views - In-app inbox API
"""

from rest_framework import permissions
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.exceptions import NotFoundError
from .models import Notification
from .serializers import NotificationSerializer


class NotificationListView(APIView):
    """Own notifications, newest first."""

    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        notifications = Notification.objects.for_user(request.user).order_by('-created_at')
        return Response({
            'success': True,
            'unread_count': notifications.filter(is_read=False).count(),
            'notifications': NotificationSerializer(notifications, many=True).data,
        })


class NotificationReadView(APIView):
    """Mark one notification read. Safe to repeat."""

    permission_classes = [permissions.IsAuthenticated]

    def put(self, request, notification_id):
        notification = Notification.objects.for_user(request.user).filter(pk=notification_id).first()
        if notification is None:
            raise NotFoundError('Notification not found.')
        notification.mark_read()
        return Response({
            'success': True,
            'notification': NotificationSerializer(notification).data,
        })


class NotificationReadAllView(APIView):

    permission_classes = [permissions.IsAuthenticated]

    def put(self, request):
        updated = Notification.objects.for_user(request.user).unread().update(is_read=True)
        return Response({
            'success': True,
            'message': 'All notifications marked as read',
            'updated': updated,
        })
