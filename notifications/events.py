"""
NOTIFICATIONS App - Event snapshots

An event is frozen when the order transaction commits and travels to the
Celery worker as a JSON payload, so fanout never re-reads the order row.
"""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional, Dict, Any

from django.utils.dateparse import parse_datetime


class EventKind:
    NEW_ORDER = 'new_order'
    STATUS_UPDATE = 'status_update'
    NEW_MESSAGE = 'new_message'
    DOCUMENT_UPLOADED = 'document_uploaded'
    CANCELLATION = 'cancellation'

    ALL = (NEW_ORDER, STATUS_UPDATE, NEW_MESSAGE, DOCUMENT_UPLOADED, CANCELLATION)


@dataclass
class OrderSnapshot:
    """What the composer and resolver need to know about an order."""
    id: str
    order_number: str
    status: str
    product_type: str
    metal_type: str
    thickness: str
    width: str
    height: str
    quantity: int
    color: str
    additional_requirements: str = ''
    expected_delivery_date: Optional[str] = None
    cancellation_reason: str = ''
    customer_id: Optional[str] = None
    customer_name: str = ''
    customer_email: str = ''
    customer_phone: str = ''
    customer_company: str = ''

    @classmethod
    def from_order(cls, order) -> 'OrderSnapshot':
        customer = order.customer
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            product_type=order.product_type,
            metal_type=order.metal_type,
            thickness=str(order.thickness),
            width=str(order.width),
            height=str(order.height),
            quantity=order.quantity,
            color=order.color,
            additional_requirements=order.additional_requirements or '',
            expected_delivery_date=(
                order.expected_delivery_date.isoformat() if order.expected_delivery_date else None
            ),
            cancellation_reason=order.cancellation_reason or '',
            customer_id=str(customer.pk),
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone or '',
            customer_company=customer.company_name or '',
        )

    @property
    def delivery_date(self) -> Optional[datetime]:
        if not self.expected_delivery_date:
            return None
        return parse_datetime(self.expected_delivery_date)


@dataclass
class ActorSnapshot:
    """The user who triggered the event."""
    id: str
    name: str
    email: str
    company: str = ''
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> 'ActorSnapshot':
        return cls(
            id=str(user.pk),
            name=user.name,
            email=user.email,
            company=user.company_name or '',
            is_admin=user.is_admin,
        )


@dataclass
class NotificationEvent:
    """
    One business event to broadcast.

    text carries the free-form part of the event: the status message,
    the chat message body, or the cancellation reason.
    """
    kind: str
    order: OrderSnapshot
    actor: Optional[ActorSnapshot] = None
    text: str = ''
    document_kind: str = ''

    def __post_init__(self):
        if self.kind not in EventKind.ALL:
            raise ValueError(f"Unknown notification event kind: {self.kind}")

    def to_payload(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> 'NotificationEvent':
        actor = payload.get('actor')
        return cls(
            kind=payload['kind'],
            order=OrderSnapshot(**payload['order']),
            actor=ActorSnapshot(**actor) if actor else None,
            text=payload.get('text') or '',
            document_kind=payload.get('document_kind') or '',
        )

    @property
    def admin_authored(self) -> bool:
        return bool(self.actor and self.actor.is_admin)
