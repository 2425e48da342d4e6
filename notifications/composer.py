"""
NOTIFICATIONS App - Message composer

Turns one event into the subject/HTML for email and the formatted text
for WhatsApp, per recipient category. Nothing here touches the database
or the network; the current time is passed in by the caller.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone

from .events import NotificationEvent, EventKind
from .recipients import RecipientCategory


STATUS_EMOJIS = {
    'pending': '⏳',
    'approved': '✅',
    'rejected': '❌',
    'cancelled': '🔄',
    'designing': '🎨',
    'laser_cutting': '⚡',
    'metal_bending': '🔧',
    'fabrication_welding': '🔥',
    'finishing': '✨',
    'powder_coating': '🎭',
    'assembling': '🔩',
    'quality_check': '🔍',
    'dispatch': '🚚',
    'completed': '🎉',
}

DOCUMENT_LABELS = {
    'test-report': 'Test Report',
    'invoice': 'Invoice',
}

DOCUMENT_EMOJIS = {
    'test-report': '📋',
    'invoice': '🧾',
}


@dataclass(frozen=True)
class ComposedMessage:
    subject: str
    html: str
    whatsapp: str


# ===========================================
# FORMATTING HELPERS
# ===========================================

def humanize_status(status: str) -> str:
    """'laser_cutting' -> 'Laser Cutting'"""
    return status.replace('_', ' ').title()


def format_delivery_date(value: datetime) -> str:
    """Render as 'Monday, January 15, 2025' in the project time zone."""
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return f"{value:%A, %B} {value.day}, {value.year}"


def days_remaining(value: datetime, now: datetime) -> Optional[int]:
    """Whole days left, rounded up; None once the date has passed."""
    days = math.ceil((value - now).total_seconds() / 86400)
    return days if days > 0 else None


def _document_label(kind: str) -> str:
    return DOCUMENT_LABELS.get(kind, 'Document')


def _customer_line(order) -> str:
    if order.customer_company:
        return f"Customer: {order.customer_name} ({order.customer_company})\n"
    return f"Customer: {order.customer_name}\n"


def _base_context(event: NotificationEvent, category: str, now: datetime) -> dict:
    return {
        'order': event.order,
        'category': category,
        'for_admin': category == RecipientCategory.ADMIN,
        'organization_name': settings.ORGANIZATION_NAME,
        'support_email': settings.SUPPORT_EMAIL,
        'year': now.year,
    }


def _render(template: str, context: dict) -> str:
    return render_to_string(f'notifications/email/{template}', context)


# ===========================================
# NEW ORDER
# ===========================================

def _compose_new_order(event, category, now):
    order = event.order
    if category == RecipientCategory.ADMIN:
        subject = f"New Order Received - {order.order_number}"
    else:
        subject = f"Order Confirmation - {order.order_number}"

    html = _render('new_order.html', _base_context(event, category, now))

    requirements = ''
    if order.additional_requirements:
        requirements = f"📝 *Special Requirements:*\n{order.additional_requirements}\n\n"

    if category == RecipientCategory.ADMIN:
        heading = "🆕 *NEW ORDER RECEIVED*"
    else:
        heading = "✅ *ORDER CONFIRMATION*"

    text = (
        f"{heading}\n\n"
        f"📋 *Order Details:*\n"
        f"• Order ID: {order.order_number}\n"
        f"• Product: {order.product_type}\n"
        f"• Material: {order.metal_type}\n"
        f"• Thickness: {order.thickness}mm\n"
        f"• Quantity: {order.quantity} units\n"
        f"• Color: {order.color}\n\n"
        f"👤 *Customer Info:*\n"
        f"• Name: {order.customer_name}\n"
        f"• Company: {order.customer_company}\n"
        f"• Email: {order.customer_email}\n"
        f"• Phone: {order.customer_phone}\n\n"
        f"{requirements}"
    )
    if category == RecipientCategory.ADMIN:
        text += "⚡ Please review this order in your admin dashboard.\n\n"
    else:
        text += "⏳ We are reviewing your specifications and will update you soon.\n\n"
    text += f"🏭 *{settings.ORGANIZATION_NAME} - Custom Metal Solutions*"

    return ComposedMessage(subject=subject, html=html, whatsapp=text)


# ===========================================
# STATUS UPDATE (approve / reject / free-form)
# ===========================================

def _status_subject(order, category) -> str:
    if category == RecipientCategory.CUSTOMER:
        return f"Order Status Update - {order.order_number}"
    if order.status == 'approved':
        return f"Order Approved - {order.order_number}"
    if order.status == 'rejected':
        return f"Order Rejected - {order.order_number}"
    return f"Order Status Updated by Admin - {order.order_number}"


def _delivery_lines(delivery_date, remaining) -> str:
    if not delivery_date:
        return ''
    lines = f"🗓️ *Expected Delivery:*\n📅 {format_delivery_date(delivery_date)}\n\n"
    if remaining:
        lines += f"⏰ *{remaining} days remaining*\n\n"
    return lines


def _admin_status_text(order, status, text, delivery_date) -> str:
    delivery = f"Expected delivery: {format_delivery_date(delivery_date)}\n" if delivery_date else ''
    if status == 'approved':
        sent = f"Message sent: \"{text}\"\n" if text else ''
        return (
            f"✅ *ORDER APPROVED*\n\n"
            f"Order {order.order_number} has been approved.\n\n"
            f"{_customer_line(order)}"
            f"{delivery}"
            f"{sent}"
        ).rstrip()
    if status == 'rejected':
        reason = f"Reason: \"{text}\"\n" if text else ''
        return (
            f"❌ *ORDER REJECTED*\n\n"
            f"Order {order.order_number} has been rejected.\n\n"
            f"{_customer_line(order)}"
            f"{reason}"
        ).rstrip()
    sent = f"Message sent: \"{text}\"\n" if text else ''
    return (
        f"🔄 *ADMIN NOTIFICATION*\n\n"
        f"Order {order.order_number} status updated by admin to: {humanize_status(status).upper()}\n\n"
        f"{_customer_line(order)}"
        f"{sent}"
        f"{delivery}"
    ).rstrip()


def _compose_status_update(event, category, now):
    order = event.order
    status = order.status
    # Rejected orders carry no delivery promise at all
    delivery_date = order.delivery_date if status != 'rejected' else None
    remaining = days_remaining(delivery_date, now) if delivery_date else None

    context = _base_context(event, category, now)
    context.update({
        'status_display': humanize_status(status),
        'status_message': event.text,
        'delivery_date_display': format_delivery_date(delivery_date) if delivery_date else '',
        'days_remaining': remaining,
    })
    html = _render('status_update.html', context)

    name = order.customer_name
    note = f"💬 *Message from {settings.ORGANIZATION_NAME} Team:*\n\"{event.text}\"\n\n" if event.text else ''

    if category == RecipientCategory.ADMIN:
        text = _admin_status_text(order, status, event.text, delivery_date)
    elif status == 'approved':
        text = (
            f"✅ *ORDER APPROVED!*\n\n"
            f"🎉 Great news {name}!\n\n"
            f"Your order *{order.order_number}* has been approved and will move to production shortly.\n\n"
            f"{_delivery_lines(delivery_date, remaining)}"
            f"{note}"
            f"🔄 *Next Steps:*\n"
            f"• Material preparation will begin\n"
            f"• You'll receive updates at each stage\n"
            f"• Quality checks before delivery\n\n"
            f"📱 Track your order progress in your dashboard.\n\n"
            f"🏭 *{settings.ORGANIZATION_NAME} - Custom Metal Solutions*"
        )
    elif status == 'rejected':
        reason = f"💬 *Reason:*\n\"{event.text}\"\n\n" if event.text else ''
        text = (
            f"❌ *ORDER STATUS UPDATE*\n\n"
            f"Hi {name},\n\n"
            f"We regret to inform you that order *{order.order_number}* has been rejected.\n\n"
            f"{reason}"
            f"📞 *Next Steps:*\n"
            f"• Please contact our team for clarification\n"
            f"• You can submit a new order with modifications\n\n"
            f"📧 Email: {settings.SUPPORT_EMAIL}\n\n"
            f"🏭 *{settings.ORGANIZATION_NAME} - We're here to help!*"
        )
    else:
        emoji = STATUS_EMOJIS.get(status, '📋')
        text = (
            f"{emoji} *ORDER STATUS UPDATED*\n\n"
            f"👋 Hi {name}!\n\n"
            f"📋 Your order *{order.order_number}* status has been updated to:\n"
            f"🔄 *{humanize_status(status).upper()}*\n\n"
            f"{_delivery_lines(delivery_date, remaining)}"
            f"{note}"
            f"🏭 Thank you for choosing {settings.ORGANIZATION_NAME}!\n"
            f"📱 Track your order progress anytime."
        )

    return ComposedMessage(subject=_status_subject(order, category), html=html, whatsapp=text)


# ===========================================
# NEW MESSAGE
# ===========================================

def _compose_new_message(event, category, now):
    order = event.order
    actor = event.actor
    staff_sender = event.admin_authored
    sender_name = actor.name if actor else settings.ORGANIZATION_NAME

    context = _base_context(event, category, now)
    context.update({
        'staff_sender': staff_sender,
        'sender': actor,
        'message_body': event.text,
    })
    html = _render('new_message.html', context)

    if staff_sender:
        origin = f"🏭 *From: {settings.ORGANIZATION_NAME} Team*"
        details = ''
    else:
        origin = f"👤 *From: {sender_name}*"
        details = (
            f"📞 *Sender Details:*\n"
            f"• Name: {sender_name}\n"
            f"• Company: {actor.company if actor else ''}\n"
            f"• Email: {actor.email if actor else ''}\n\n"
        )

    text = (
        f"💬 *NEW MESSAGE RECEIVED*\n\n"
        f"{origin}\n"
        f"📋 *Order: {order.order_number}*\n\n"
        f"💭 *Message:*\n\"{event.text}\"\n\n"
        f"{details}"
        f"📱 Please check your dashboard for complete conversation.\n\n"
        f"🏭 *{settings.ORGANIZATION_NAME} - Custom Metal Solutions*"
    )
    return ComposedMessage(
        subject=f"New Message - Order {order.order_number}",
        html=html,
        whatsapp=text,
    )


# ===========================================
# DOCUMENT UPLOADED
# ===========================================

def _compose_document_uploaded(event, category, now):
    order = event.order
    label = _document_label(event.document_kind)
    emoji = DOCUMENT_EMOJIS.get(event.document_kind, '📄')

    if category == RecipientCategory.ADMIN:
        subject = f"Document Uploaded - {label} for Order {order.order_number}"
    else:
        subject = f"New Document Available - Order {order.order_number}"

    context = _base_context(event, category, now)
    context.update({
        'document_label': label,
        'document_emoji': emoji,
        'is_test_report': event.document_kind == 'test-report',
    })
    html = _render('document_uploaded.html', context)

    if category == RecipientCategory.ADMIN:
        text = (
            f"📄 *DOCUMENT UPLOADED*\n\n"
            f"{label} uploaded for order {order.order_number}\n\n"
            f"{_customer_line(order)}"
            f"The customer has been notified."
        )
        return ComposedMessage(subject=subject, html=html, whatsapp=text)

    if event.document_kind == 'test-report':
        blurb = "🔍 *Quality Test Report Ready*\nYour product has passed our quality checks!"
    else:
        blurb = "💰 *Invoice Generated*\nYour order invoice is ready for download."

    text = (
        f"{emoji} *NEW DOCUMENT AVAILABLE*\n\n"
        f"👋 Hi {order.customer_name}!\n\n"
        f"📄 A new *{label}* is now available for your order:\n"
        f"📋 *{order.order_number}*\n\n"
        f"{blurb}\n\n"
        f"📱 Please log into your account to download the document.\n\n"
        f"🏭 *{settings.ORGANIZATION_NAME} - Custom Metal Solutions*"
    )
    return ComposedMessage(subject=subject, html=html, whatsapp=text)


# ===========================================
# CANCELLATION
# ===========================================

def _compose_cancellation(event, category, now):
    order = event.order
    reason = event.text or order.cancellation_reason

    if category == RecipientCategory.ADMIN:
        subject = f"Order Cancelled by Customer - {order.order_number}"
    else:
        subject = f"Order Cancellation Confirmation - {order.order_number}"

    context = _base_context(event, category, now)
    context['reason'] = reason
    html = _render('cancellation.html', context)

    if category == RecipientCategory.ADMIN:
        reason_line = f"Reason: \"{reason}\"" if reason else "No reason provided"
        text = (
            f"🔄 *ORDER CANCELLED*\n\n"
            f"Order {order.order_number} has been cancelled by customer.\n\n"
            f"{_customer_line(order)}"
            f"{reason_line}"
        )
        return ComposedMessage(subject=subject, html=html, whatsapp=text)

    reason_block = f"💭 *Cancellation Reason:*\n\"{reason}\"\n\n" if reason else ''
    text = (
        f"🔄 *ORDER CANCELLATION CONFIRMED*\n\n"
        f"Hi {order.customer_name},\n\n"
        f"Your order *{order.order_number}* has been successfully cancelled.\n\n"
        f"{reason_block}"
        f"📋 *Order Details:*\n"
        f"• Product: {order.product_type}\n"
        f"• Material: {order.metal_type}\n"
        f"• Quantity: {order.quantity} units\n\n"
        f"💰 *Refund Information:*\n"
        f"• If payment was made, refund will be processed within 3-5 business days\n"
        f"• You will receive a separate confirmation for any refunds\n\n"
        f"📞 *Contact Support:*\n"
        f"📧 Email: {settings.SUPPORT_EMAIL}\n\n"
        f"🏭 *{settings.ORGANIZATION_NAME} - Thank you for your understanding*"
    )
    return ComposedMessage(subject=subject, html=html, whatsapp=text)


_BUILDERS = {
    EventKind.NEW_ORDER: _compose_new_order,
    EventKind.STATUS_UPDATE: _compose_status_update,
    EventKind.NEW_MESSAGE: _compose_new_message,
    EventKind.DOCUMENT_UPLOADED: _compose_document_uploaded,
    EventKind.CANCELLATION: _compose_cancellation,
}


def compose(event: NotificationEvent, category: str, now: datetime) -> ComposedMessage:
    """Build the channel bodies for one event as seen by one recipient category."""
    return _BUILDERS[event.kind](event, category, now)
