"""
NOTIFICATIONS App - In-app notification helpers

Called inside the order transaction; rows exist before fanout starts.
"""

from typing import List

from django.contrib.auth import get_user_model

from .models import Notification, NotificationType


def notify_user(user, title: str, message: str, order,
                type: str = NotificationType.ORDER_STATUS) -> Notification:
    return Notification.objects.create(
        recipient=user,
        title=title,
        message=message,
        type=type,
        order_id=order.id,
        order_number=order.order_number,
    )


def notify_admins(title: str, message: str, order,
                  type: str = NotificationType.ORDER_STATUS, exclude=None) -> List[Notification]:
    """One notification per active admin, optionally skipping the acting admin."""
    User = get_user_model()
    admins = User.objects.admins()
    if exclude is not None:
        admins = admins.exclude(pk=exclude.pk)
    return [notify_user(admin, title, message, order, type=type) for admin in admins]
