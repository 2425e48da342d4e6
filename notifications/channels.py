"""
NOTIFICATIONS App - Delivery channels

One channel sends one message to one address. A channel that is switched
off or missing credentials reports a skipped result instead of failing.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection, make_msgid
from django.utils.html import strip_tags

from orders.exceptions import DeliveryError
from .providers import TwilioService, MetaWhatsAppService

logger = logging.getLogger(__name__)


@dataclass
class DeliveryResult:
    channel: str
    address: str
    success: bool
    provider_id: Optional[str] = None
    error: str = ''
    skipped: bool = False

    @classmethod
    def skip(cls, channel: str, address: str, reason: str) -> 'DeliveryResult':
        return cls(channel=channel, address=address, success=False, error=reason, skipped=True)

    @classmethod
    def failed(cls, channel: str, address: str, error: str) -> 'DeliveryResult':
        return cls(channel=channel, address=address, success=False, error=error)


def normalize_phone(phone: str, country_code: Optional[str] = None) -> str:
    """
    Normalise a phone number to +<digits>.

    A leading 0 is swapped for the default country code, a bare 10-digit
    number gets the country code prefixed, anything else is kept as dialled.
    Returns '' when no digits are left.
    """
    if not phone:
        return ''
    country_code = country_code or settings.WHATSAPP_DEFAULT_COUNTRY_CODE
    digits = re.sub(r'\D', '', phone)
    if not digits:
        return ''
    if digits.startswith('0'):
        digits = country_code + digits[1:]
    elif len(digits) == 10:
        digits = country_code + digits
    return f"+{digits}"


# ===========================================
# EMAIL CHANNEL
# ===========================================

class EmailChannel:
    name = 'email'

    def is_enabled(self) -> bool:
        return bool(settings.EMAIL_NOTIFICATIONS_ENABLED and settings.EMAIL_HOST_USER)

    def send(self, address: str, subject: str, html: str) -> DeliveryResult:
        if not self.is_enabled():
            return DeliveryResult.skip(self.name, address, 'Email channel not configured')

        message_id = make_msgid(domain='vee4group.com')
        email = EmailMultiAlternatives(
            subject=subject,
            body=strip_tags(html),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=[address],
            headers={'Message-ID': message_id},
            connection=get_connection(timeout=settings.EMAIL_TIMEOUT),
        )
        email.attach_alternative(html, 'text/html')

        try:
            sent = email.send(fail_silently=False)
        except Exception as e:
            logger.error(f"[EMAIL] Failed to send '{subject}' to {address}: {e}")
            raise DeliveryError(f"Email to {address} failed: {e}") from e

        if not sent:
            raise DeliveryError(f"Email backend accepted no message for {address}")

        logger.info(f"[EMAIL] Sent '{subject}' to {address}")
        return DeliveryResult(channel=self.name, address=address, success=True, provider_id=message_id)


# ===========================================
# WHATSAPP CHANNEL
# ===========================================

class WhatsAppChannel:
    name = 'whatsapp'

    PROVIDERS = {
        'twilio': TwilioService,
        'meta': MetaWhatsAppService,
    }

    def provider(self):
        key = (settings.ACTIVE_WHATSAPP_PROVIDER or 'twilio').lower()
        return self.PROVIDERS.get(key)

    def is_enabled(self) -> bool:
        provider = self.provider()
        return bool(
            settings.WHATSAPP_NOTIFICATIONS_ENABLED
            and provider is not None
            and provider.is_configured()
        )

    def send(self, phone: str, body: str) -> DeliveryResult:
        if not self.is_enabled():
            return DeliveryResult.skip(self.name, phone, 'WhatsApp channel not configured')

        number = normalize_phone(phone)
        if not number:
            raise DeliveryError(f"Invalid phone number format: {phone}")

        provider_id = self.provider().send_message(number, body)
        return DeliveryResult(channel=self.name, address=number, success=True, provider_id=provider_id)
