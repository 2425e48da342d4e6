"""
ORDERS App - Order numbering

ORD-<year>-<seq>: seq counts the year's orders from 1 and is never
handed out twice, even after orders are deleted.
"""

import logging

from django.db import transaction
from django.utils import timezone

from orders.models import Order, OrderSequence

logger = logging.getLogger(__name__)


def format_order_number(year: int, seq: int) -> str:
    return f"ORD-{year}-{seq:02d}"


def next_order_number(now=None) -> str:
    """
    Reserve the next number for the current year.
    Must run inside the order-creation transaction: the sequence row stays
    locked until it commits, so concurrent placements queue up here.
    """
    now = now or timezone.now()
    year = timezone.localtime(now).year if timezone.is_aware(now) else now.year

    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("next_order_number() must be called inside transaction.atomic()")

    sequence = OrderSequence.objects.select_for_update().filter(year=year).first()
    if sequence is None:
        # First order of the year on this database: seed from existing rows
        existing = Order.objects.filter(created_at__year=year).count()
        sequence, _ = OrderSequence.objects.get_or_create(
            year=year, defaults={'last_value': existing}
        )
        sequence = OrderSequence.objects.select_for_update().get(pk=sequence.pk)

    sequence.last_value += 1
    sequence.save(update_fields=['last_value'])

    number = format_order_number(year, sequence.last_value)
    logger.debug(f"[ORDER] Reserved {number}")
    return number
