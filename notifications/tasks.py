"""
NOTIFICATIONS App - Celery Tasks

Fanout runs here, outside the request, once the order change is committed.
"""

import logging
from celery import shared_task
from django.db import transaction

from .events import NotificationEvent

logger = logging.getLogger(__name__)


# ===========================================
# FANOUT TASKS
# ===========================================

@shared_task(ignore_result=False)
def dispatch_event(payload: dict):
    """
    Resolve, compose and deliver one event (async).

    No retries here: a failed attempt is recorded in the result and a
    second fanout would duplicate every delivery that did succeed.
    """
    from .dispatcher import dispatch

    try:
        event = NotificationEvent.from_payload(payload)
    except (KeyError, TypeError, ValueError) as e:
        logger.error(f"[TASK] Malformed notification payload: {e}")
        return None

    return dispatch(event).as_dict()


def schedule_fanout(event: NotificationEvent):
    """Queue fanout for after the surrounding transaction commits."""
    payload = event.to_payload()

    def _enqueue():
        try:
            dispatch_event.delay(payload)
        except Exception as e:
            logger.exception(
                f"[TASK] Could not queue {event.kind} fanout for {event.order.order_number}: {e}"
            )

    transaction.on_commit(_enqueue)
