"""
ORDERS App - Order conversation

Append-only message thread per order. Chat posts notify the other side
in-app and fan out to email/WhatsApp after commit.
"""

import logging
from typing import List

from django.db import transaction

from notifications.events import NotificationEvent, EventKind, OrderSnapshot, ActorSnapshot
from notifications.models import NotificationType
from notifications.services import notify_user, notify_admins
from notifications.tasks import schedule_fanout
from orders.exceptions import ValidationError
from orders.models import Order, Message
from .lookup import get_order_for_user

logger = logging.getLogger(__name__)


def add_message(order: Order, sender, content: str, is_system: bool = False) -> Message:
    """Append one entry to the thread. Identical content is never collapsed."""
    return Message.objects.create(
        order=order,
        sender=sender,
        content=content,
        is_system_message=is_system,
    )


def conversation(order: Order) -> List[Message]:
    """Full thread, oldest first."""
    return list(order.messages.select_related('sender').order_by('created_at', 'id'))


def post_message(order_id, author, content: str) -> Message:
    """
    Post a chat message on an order.

    Customer posts notify every admin. Admin posts notify the customer
    and the other admins; the author never gets their own message back.
    """
    content = (content or '').strip()
    if not content:
        raise ValidationError('Message content is required.', fields=['content'])

    with transaction.atomic():
        order = get_order_for_user(order_id, author)
        message = add_message(order, author, content)

        if author.is_admin:
            notify_user(
                order.customer,
                'New Message from Admin',
                f"Admin has sent you a message regarding order #{order.order_number}",
                order,
                type=NotificationType.MESSAGE,
            )
            notify_admins(
                'Admin Message Sent',
                f"{author.name} sent a message to customer for order #{order.order_number}",
                order,
                type=NotificationType.MESSAGE,
                exclude=author,
            )
        else:
            notify_admins(
                'New Customer Message',
                f"{author.name} sent a message regarding order #{order.order_number}",
                order,
                type=NotificationType.MESSAGE,
            )

        schedule_fanout(NotificationEvent(
            kind=EventKind.NEW_MESSAGE,
            order=OrderSnapshot.from_order(order),
            actor=ActorSnapshot.from_user(author),
            text=content,
        ))

    logger.info(f"[ORDER] Message on {order.order_number} from {author.email}")
    return message
