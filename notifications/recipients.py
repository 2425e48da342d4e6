"""
NOTIFICATIONS App - Recipient resolution

Works out who hears about an event: the order's customer, the admin
roster (queried fresh on every call) and the operator's extra contacts.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import get_user_model

from .events import NotificationEvent, EventKind

logger = logging.getLogger(__name__)


class RecipientCategory:
    CUSTOMER = 'customer'
    ADMIN = 'admin'


@dataclass(frozen=True)
class Recipient:
    category: str
    name: str
    email: str = ''
    phone: str = ''
    user_id: Optional[str] = None


def _customer_recipient(event: NotificationEvent) -> Recipient:
    order = event.order
    return Recipient(
        category=RecipientCategory.CUSTOMER,
        name=order.customer_name,
        email=order.customer_email,
        phone=(order.customer_phone or '').strip(),
        user_id=order.customer_id,
    )


def _admin_recipients(exclude_id: Optional[str] = None) -> List[Recipient]:
    User = get_user_model()
    recipients = []
    for admin in User.objects.admins():
        if exclude_id and str(admin.pk) == exclude_id:
            continue
        recipients.append(Recipient(
            category=RecipientCategory.ADMIN,
            name=admin.name,
            email=admin.email,
            phone=(admin.phone or '').strip(),
            user_id=str(admin.pk),
        ))
    return recipients


def _extra_recipients(known: List[Recipient]) -> List[Recipient]:
    """Operator contacts: the extra email gets email only, the extra phone WhatsApp only."""
    extras = []
    extra_email = (settings.NOTIFY_EXTRA_EMAIL or '').strip()
    extra_phone = (settings.NOTIFY_EXTRA_WHATSAPP or '').strip()

    if extra_email and extra_email.lower() not in {r.email.lower() for r in known if r.email}:
        extras.append(Recipient(
            category=RecipientCategory.ADMIN,
            name=settings.ORGANIZATION_NAME,
            email=extra_email,
        ))
    if extra_phone and extra_phone not in {r.phone for r in known if r.phone}:
        extras.append(Recipient(
            category=RecipientCategory.ADMIN,
            name=settings.ORGANIZATION_NAME,
            phone=extra_phone,
        ))
    return extras


def resolve_recipients(event: NotificationEvent) -> List[Recipient]:
    """
    Ordered recipient list for one event: customer first, then admins.

    Chat messages never echo back to their author. A customer's message
    goes to admins only; an admin's message goes to the customer and every
    other admin.
    """
    recipients = []
    exclude_admin_id = None

    if event.kind == EventKind.NEW_MESSAGE:
        if event.admin_authored:
            recipients.append(_customer_recipient(event))
            exclude_admin_id = event.actor.id
    else:
        recipients.append(_customer_recipient(event))

    admins = _admin_recipients(exclude_id=exclude_admin_id)
    recipients.extend(admins)
    recipients.extend(_extra_recipients(admins))

    logger.debug(
        f"[FANOUT] {event.kind} for {event.order.order_number}: "
        f"{len(recipients)} recipient(s)"
    )
    return recipients
