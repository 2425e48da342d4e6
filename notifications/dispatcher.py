"""
NOTIFICATIONS App - Fanout dispatcher

Broadcasts one event to every (channel, recipient) pair concurrently.
Each attempt is isolated: an exception or a timeout becomes a failed
result for that pair and the rest carry on. Every attempt gets its own
worker, so all of them start together and none waits behind a slow one.
dispatch() never raises.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional

from django.conf import settings
from django.utils import timezone

from .channels import EmailChannel, WhatsAppChannel, DeliveryResult
from .composer import compose
from .events import NotificationEvent
from .recipients import resolve_recipients

logger = logging.getLogger(__name__)


@dataclass
class FanoutResult:
    """Delivery results grouped channel -> recipient category."""
    kind: str
    order_number: str
    results: Dict[str, Dict[str, List[DeliveryResult]]] = field(default_factory=dict)

    def add(self, category: str, result: DeliveryResult):
        self.results.setdefault(result.channel, {}).setdefault(category, []).append(result)

    def all_results(self) -> List[DeliveryResult]:
        return [
            result
            for by_category in self.results.values()
            for results in by_category.values()
            for result in results
        ]

    @property
    def sent(self) -> int:
        return sum(1 for r in self.all_results() if r.success)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.all_results() if not r.success and not r.skipped)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.all_results() if r.skipped)

    def as_dict(self) -> dict:
        return {
            'kind': self.kind,
            'order_number': self.order_number,
            'sent': self.sent,
            'failed': self.failed,
            'skipped': self.skipped,
            'results': {
                channel: {
                    category: [asdict(r) for r in results]
                    for category, results in by_category.items()
                }
                for channel, by_category in self.results.items()
            },
        }


class FanoutDispatcher:

    def __init__(self, email_channel=None, whatsapp_channel=None, timeout: Optional[float] = None):
        self.email_channel = email_channel or EmailChannel()
        self.whatsapp_channel = whatsapp_channel or WhatsAppChannel()
        self.timeout = timeout if timeout is not None else settings.NOTIFICATION_DELIVERY_TIMEOUT

    def _plan(self, event: NotificationEvent, now):
        """List of (category, channel_name, address, callable, args)."""
        recipients = resolve_recipients(event)
        composed = {}
        jobs = []

        for recipient in recipients:
            category = recipient.category
            if category not in composed:
                composed[category] = compose(event, category, now)
            message = composed[category]

            if recipient.email:
                jobs.append((
                    category, self.email_channel.name, recipient.email,
                    self.email_channel.send, (recipient.email, message.subject, message.html),
                ))
            if recipient.phone:
                jobs.append((
                    category, self.whatsapp_channel.name, recipient.phone,
                    self.whatsapp_channel.send, (recipient.phone, message.whatsapp),
                ))
        return jobs

    def dispatch(self, event: NotificationEvent, now=None) -> FanoutResult:
        now = now or timezone.now()
        outcome = FanoutResult(kind=event.kind, order_number=event.order.order_number)

        try:
            jobs = self._plan(event, now)
        except Exception as e:
            logger.exception(f"[FANOUT] Could not prepare {event.kind} for {event.order.order_number}: {e}")
            return outcome

        if not jobs:
            logger.info(f"[FANOUT] {event.kind} for {event.order.order_number}: nobody to notify")
            return outcome

        executor = ThreadPoolExecutor(max_workers=len(jobs), thread_name_prefix='fanout')
        try:
            futures = [
                (executor.submit(send, *args), category, channel, address)
                for category, channel, address, send, args in jobs
            ]
            deadline = time.monotonic() + self.timeout

            for future, category, channel, address in futures:
                try:
                    result = future.result(timeout=max(0.0, deadline - time.monotonic()))
                except FuturesTimeout:
                    logger.warning(f"[FANOUT] {channel} to {address} timed out")
                    result = DeliveryResult.failed(channel, address, f"Timed out after {self.timeout}s")
                except Exception as e:
                    logger.warning(f"[FANOUT] {channel} to {address} failed: {e}")
                    result = DeliveryResult.failed(channel, address, str(e))
                outcome.add(category, result)
        finally:
            # Overdue sends finish in the background; their adapters time out on their own
            executor.shutdown(wait=False)

        logger.info(
            f"[FANOUT] {event.kind} for {event.order.order_number}: "
            f"{outcome.sent} sent, {outcome.failed} failed, {outcome.skipped} skipped"
        )
        return outcome


def dispatch(event: NotificationEvent, now=None) -> FanoutResult:
    return FanoutDispatcher().dispatch(event, now=now)
