"""
ORDERS App - Order state machine

Two policies live here and stay separate:
- strict transitions (approve, reject, cancel) check the source status
- the free-form admin update accepts any known status

Every operation runs in one transaction. Messages and in-app
notifications are written inside it; email/WhatsApp fanout is queued to
start only after it commits.
"""

import logging
import os
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.files.storage import default_storage
from django.db import transaction
from django.utils import timezone

from notifications.composer import humanize_status, format_delivery_date
from notifications.events import NotificationEvent, EventKind, OrderSnapshot, ActorSnapshot
from notifications.services import notify_user, notify_admins
from notifications.tasks import schedule_fanout
from orders.exceptions import ValidationError, PreconditionError, AuthorizationError
from orders.models import (
    Order, OrderStatus, DocumentKind, CANCELLABLE_STATUSES,
    UPLOADABLE_DOCUMENTS, DOCUMENT_FIELDS,
)
from .conversation import add_message
from .lookup import get_order, get_order_for_user, ensure_admin
from .numbering import next_order_number

logger = logging.getLogger(__name__)


REQUIRED_SPEC_FIELDS = (
    'product_type', 'metal_type', 'thickness', 'width', 'height', 'quantity', 'color',
)

WELCOME_MESSAGE = (
    "Thank you for your order. We are currently reviewing your specifications "
    "and will update you soon."
)
REJECTION_MESSAGE = "Your order has been rejected. Please contact us for more information."
CUSTOMER_CANCEL_REASON = "Cancelled by customer"
ADMIN_CANCEL_REASON = "Cancelled by administrator"


# ===========================================
# HELPERS
# ===========================================

def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_specification(data: dict) -> dict:
    missing = [name for name in REQUIRED_SPEC_FIELDS if _is_blank(data.get(name))]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

    cleaned = {
        'product_type': str(data['product_type']).strip(),
        'metal_type': str(data['metal_type']).strip(),
        'color': str(data['color']).strip(),
        'additional_requirements': str(data.get('additional_requirements') or '').strip(),
    }

    invalid = []
    for name in ('thickness', 'width', 'height'):
        try:
            value = Decimal(str(data[name]))
        except (InvalidOperation, ValueError):
            invalid.append(name)
            continue
        if not value.is_finite() or value <= 0:
            invalid.append(name)
        cleaned[name] = value

    try:
        quantity = int(data['quantity'])
        if quantity < 1:
            invalid.append('quantity')
        cleaned['quantity'] = quantity
    except (TypeError, ValueError):
        invalid.append('quantity')

    if invalid:
        raise ValidationError(f"Invalid values for: {', '.join(invalid)}", fields=invalid)
    return cleaned


def _store_document(order_number: str, folder: str, upload) -> str:
    """Save an upload (or accept an existing locator) and return the locator."""
    if isinstance(upload, str):
        return upload
    name = os.path.basename(getattr(upload, 'name', '') or 'document')
    return default_storage.save(f"{folder}/{order_number}/{name}", upload)


def _first_admin():
    return get_user_model().objects.admins().first()


def _touch(order: Order, *fields):
    order.save(update_fields=[*fields, 'updated_at'])


def _broadcast(kind: str, order: Order, actor, text: str = '', document_kind: str = ''):
    schedule_fanout(NotificationEvent(
        kind=kind,
        order=OrderSnapshot.from_order(order),
        actor=ActorSnapshot.from_user(actor) if actor else None,
        text=text,
        document_kind=document_kind,
    ))


def _set_cancelled(order: Order, reason: str, now):
    order.status = OrderStatus.CANCELLED
    order.cancelled_at = now
    order.cancellation_reason = reason


def _clear_cancellation(order: Order):
    order.cancelled_at = None
    order.cancellation_reason = ''


# ===========================================
# PLACE ORDER
# ===========================================

def place_order(customer, data: dict, design_file) -> Order:
    """Create a pending order, greet the customer and alert every admin."""
    if customer.is_admin:
        raise AuthorizationError('Only customers can place orders.')
    if design_file is None or design_file == '':
        raise ValidationError('Please upload a design file.', fields=['designFile'])

    specification = _clean_specification(data)

    with transaction.atomic():
        order_number = next_order_number()
        order = Order(
            order_number=order_number,
            customer=customer,
            status=OrderStatus.PENDING,
            design_file=_store_document(order_number, 'designs', design_file),
            **specification,
        )
        order.save()

        # System greeting; shown under the first admin when there is one
        add_message(order, _first_admin(), WELCOME_MESSAGE, is_system=True)

        company = f" from {customer.company_name}" if customer.company_name else ''
        notify_admins(
            'New Order Received',
            f"A new order {order.order_number} has been placed by {customer.name}{company}",
            order,
        )
        _broadcast(EventKind.NEW_ORDER, order, customer)

    logger.info(f"[ORDER] {order.order_number} placed by {customer.email}")
    return order


# ===========================================
# STRICT TRANSITIONS
# ===========================================

def approve_order(order_id, actor, expected_delivery_date=None,
                  message: str = '', notify: bool = True) -> Order:
    """pending -> approved. Delivery defaults to now + DEFAULT_DELIVERY_LEAD_DAYS."""
    ensure_admin(actor)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        if order.status != OrderStatus.PENDING:
            raise PreconditionError(
                order.status, OrderStatus.APPROVED,
                f"Only pending orders can be approved. Current status: {order.status}, "
                f"requested: {OrderStatus.APPROVED}",
            )

        now = timezone.now()
        order.status = OrderStatus.APPROVED
        order.expected_delivery_date = (
            expected_delivery_date
            or now + timedelta(days=settings.DEFAULT_DELIVERY_LEAD_DAYS)
        )
        _touch(order, 'status', 'expected_delivery_date')

        if notify:
            date_text = format_delivery_date(order.expected_delivery_date)
            text = message or (
                "Your order has been approved and will move to production shortly. "
                f"Expected delivery date: {date_text}."
            )
            add_message(order, actor, text)
            notify_user(
                order.customer,
                'Order Approved',
                f"Your order #{order.order_number} has been approved with expected delivery on {date_text}",
                order,
            )
            _broadcast(EventKind.STATUS_UPDATE, order, actor, text=text)

    logger.info(f"[ORDER] {order.order_number} approved by {actor.email} (notify={notify})")
    return order


def reject_order(order_id, actor, message: str = '', notify: bool = True) -> Order:
    """pending -> rejected."""
    ensure_admin(actor)

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        if order.status != OrderStatus.PENDING:
            raise PreconditionError(
                order.status, OrderStatus.REJECTED,
                f"Only pending orders can be rejected. Current status: {order.status}, "
                f"requested: {OrderStatus.REJECTED}",
            )

        order.status = OrderStatus.REJECTED
        _touch(order, 'status')

        if notify:
            text = message or REJECTION_MESSAGE
            add_message(order, actor, text)
            notify_user(
                order.customer,
                'Order Rejected',
                f"Your order #{order.order_number} has been rejected",
                order,
            )
            _broadcast(EventKind.STATUS_UPDATE, order, actor, text=text)

    logger.info(f"[ORDER] {order.order_number} rejected by {actor.email} (notify={notify})")
    return order


def cancel_order(order_id, customer, reason: str = '') -> Order:
    """Customer pulls out before production: pending/approved/designing -> cancelled."""
    with transaction.atomic():
        order = get_order_for_user(order_id, customer, for_update=True)
        if order.customer_id != customer.pk:
            raise AuthorizationError('Not authorized to cancel this order.')
        if order.status not in CANCELLABLE_STATUSES:
            raise PreconditionError(
                order.status, OrderStatus.CANCELLED,
                f"Order cannot be cancelled at the '{humanize_status(order.status)}' stage. "
                f"Please contact support for assistance.",
            )

        reason = (reason or '').strip() or CUSTOMER_CANCEL_REASON
        _set_cancelled(order, reason, timezone.now())
        _touch(order, 'status', 'cancelled_at', 'cancellation_reason')

        add_message(order, customer, f"Order has been cancelled. Reason: {reason}", is_system=True)
        notify_admins(
            'Order Cancelled',
            f"Order {order.order_number} has been cancelled by {customer.name}",
            order,
        )
        _broadcast(EventKind.CANCELLATION, order, customer, text=reason)

    logger.info(f"[ORDER] {order.order_number} cancelled by {customer.email}")
    return order


# ===========================================
# FREE-FORM ADMIN UPDATE
# ===========================================

def update_status(order_id, actor, status: str, expected_delivery_date=None,
                  message: str = '', notify: bool = True) -> Order:
    """
    Move an order to any known status. Only membership in the status set
    is checked; cancellation fields follow the target status.
    """
    ensure_admin(actor)
    if status not in OrderStatus.values:
        raise ValidationError(f"Invalid status: {status}", fields=['status'])

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        previous = order.status
        now = timezone.now()

        if status == OrderStatus.CANCELLED:
            if previous != OrderStatus.CANCELLED:
                _set_cancelled(order, ADMIN_CANCEL_REASON, now)
        else:
            order.status = status
            if previous == OrderStatus.CANCELLED:
                _clear_cancellation(order)

        if expected_delivery_date:
            order.expected_delivery_date = expected_delivery_date

        _touch(order, 'status', 'expected_delivery_date', 'cancelled_at', 'cancellation_reason')

        if notify:
            text = message or f"Your order status has been updated to {humanize_status(status)}."
            add_message(order, actor, text)

            body = f"Your order #{order.order_number} status has been updated to '{humanize_status(status)}'"
            if order.expected_delivery_date and status != OrderStatus.REJECTED:
                body += f" with expected delivery on {format_delivery_date(order.expected_delivery_date)}"
            notify_user(order.customer, 'Order Status Updated', body, order)
            _broadcast(EventKind.STATUS_UPDATE, order, actor, text=text)

    logger.info(
        f"[ORDER] {order.order_number} {previous} -> {status} by {actor.email} (notify={notify})"
    )
    return order


# ===========================================
# DOCUMENTS
# ===========================================

def attach_document(order_id, actor, kind: str, upload, notify: bool = True) -> Order:
    """Store a test report or invoice on the order."""
    ensure_admin(actor)
    if kind not in UPLOADABLE_DOCUMENTS:
        raise ValidationError(f"Invalid document type: {kind}", fields=['documentType'])
    if upload is None or upload == '':
        raise ValidationError('Please upload a file.', fields=['file'])

    label = DocumentKind(kind).label

    with transaction.atomic():
        order = get_order(order_id, for_update=True)
        field = DOCUMENT_FIELDS[kind]
        folder = 'test-reports' if kind == DocumentKind.TEST_REPORT else 'invoices'
        setattr(order, field, _store_document(order.order_number, folder, upload))
        _touch(order, field)

        if notify:
            add_message(order, actor, f"A new {label.lower()} has been uploaded for your order.")
            notify_user(
                order.customer,
                f"New {label} Available",
                f"A new {label.lower()} is available for your order #{order.order_number}",
                order,
            )
            _broadcast(EventKind.DOCUMENT_UPLOADED, order, actor, document_kind=kind)

    logger.info(f"[ORDER] {label} attached to {order.order_number} by {actor.email} (notify={notify})")
    return order


def document_locator(order_id, user, kind: str) -> Optional[str]:
    """Storage locator for one of the order's documents, or None."""
    if kind not in DOCUMENT_FIELDS:
        raise ValidationError(f"Invalid document type: {kind}", fields=['documentType'])
    order = get_order_for_user(order_id, user)
    return order.document(kind) or None
