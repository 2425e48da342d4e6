"""
NOTIFICATIONS App - In-app notification inbox for Vee4

Handles: per-user notifications created by order events
"""

import uuid
from django.db import models
from django.conf import settings


class NotificationType(models.TextChoices):
    """Notification type tag."""
    ORDER_STATUS = 'order_status', 'Order status'
    MESSAGE = 'message', 'Message'


class NotificationQuerySet(models.QuerySet):

    def for_user(self, user):
        return self.filter(recipient=user)

    def unread(self):
        return self.filter(is_read=False)


class Notification(models.Model):
    """
    One inbox entry for one user.

    Title and body are rendered at creation time so the entry stays
    readable even if the order is later removed; the order reference is
    therefore a plain UUID, not a foreign key.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        verbose_name="Recipient"
    )
    title = models.CharField(max_length=200, verbose_name="Title")
    message = models.TextField(verbose_name="Body")
    type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.ORDER_STATUS,
        verbose_name="Type"
    )
    order_id = models.UUIDField(null=True, blank=True, db_index=True, verbose_name="Order")
    order_number = models.CharField(max_length=32, blank=True, verbose_name="Order number")
    is_read = models.BooleanField(default=False, verbose_name="Read")
    created_at = models.DateTimeField(auto_now_add=True)

    objects = NotificationQuerySet.as_manager()

    class Meta:
        verbose_name = "Notification"
        verbose_name_plural = "Notifications"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='notif_recipient_read_idx'),
        ]

    def __str__(self):
        return f"{self.title} -> {self.recipient_id}"

    def mark_read(self) -> bool:
        """Mark as read. Returns True if the flag actually changed."""
        if self.is_read:
            return False
        self.is_read = True
        self.save(update_fields=['is_read'])
        return True
