"""
NOTIFICATIONS App - WhatsApp provider clients

Twilio (default) and Meta WhatsApp Cloud API. Both take a normalised
+<digits> number and return the provider's message id, raising
DeliveryError when the provider refuses or cannot be reached.
"""

import logging
from typing import Optional

import requests
from django.conf import settings

from orders.exceptions import DeliveryError

logger = logging.getLogger(__name__)


# ===========================================
# TWILIO SERVICE
# ===========================================

class TwilioService:
    """
    Twilio WhatsApp integration service.
    """

    _client = None
    _client_sid = None

    @classmethod
    def is_configured(cls) -> bool:
        return bool(settings.TWILIO_ACCOUNT_SID and settings.TWILIO_AUTH_TOKEN)

    @classmethod
    def get_client(cls):
        """Get or create Twilio client (one per account SID)."""
        if cls._client is None or cls._client_sid != settings.TWILIO_ACCOUNT_SID:
            from twilio.http.http_client import TwilioHttpClient
            from twilio.rest import Client
            try:
                cls._client = Client(
                    settings.TWILIO_ACCOUNT_SID,
                    settings.TWILIO_AUTH_TOKEN,
                    http_client=TwilioHttpClient(timeout=settings.NOTIFICATION_DELIVERY_TIMEOUT),
                )
                cls._client_sid = settings.TWILIO_ACCOUNT_SID
            except Exception as e:
                logger.error(f"[TWILIO] Failed to initialize client: {e}")
                raise DeliveryError(f"Twilio client unavailable: {e}") from e
        return cls._client

    @classmethod
    def send_message(cls, to_number: str, text: str) -> Optional[str]:
        """
        Send a WhatsApp message via Twilio.

        Args:
            to_number: Recipient phone number (format: +91XXXXXXXXXX or whatsapp:+91XXXXXXXXXX)
            text: Message text to send

        Returns:
            Message SID
        """
        # Ensure WhatsApp format
        if not to_number.startswith('whatsapp:'):
            to_number = f"whatsapp:{to_number}"

        from_number = settings.TWILIO_WHATSAPP_NUMBER
        if not from_number.startswith('whatsapp:'):
            from_number = f"whatsapp:{from_number}"

        client = cls.get_client()
        try:
            message = client.messages.create(
                from_=from_number,
                to=to_number,
                body=text
            )
        except Exception as e:
            logger.error(f"[TWILIO] Failed to send message to {to_number}: {e}")
            raise DeliveryError(f"Twilio rejected message to {to_number}: {e}") from e

        logger.info(f"[TWILIO] Message sent: SID={message.sid} to={to_number}")
        return message.sid


# ===========================================
# META WHATSAPP CLOUD API SERVICE
# ===========================================

class MetaWhatsAppService:
    """
    Meta WhatsApp Cloud API integration service.
    """

    @classmethod
    def is_configured(cls) -> bool:
        return bool(settings.META_PHONE_NUMBER_ID and settings.META_API_TOKEN)

    @classmethod
    def send_message(cls, to_number: str, text: str) -> Optional[str]:
        """
        Send a WhatsApp message via Meta Cloud API.

        Args:
            to_number: Recipient phone number (format: +91XXXXXXXXXX)
            text: Message text to send

        Returns:
            Message ID
        """
        # Meta expects bare digits
        phone = to_number.replace('+', '').replace('whatsapp:', '').strip()

        if not cls.is_configured():
            raise DeliveryError("Missing META_PHONE_NUMBER_ID or META_API_TOKEN")

        url = f"{settings.META_API_URL.rstrip('/')}/{settings.META_PHONE_NUMBER_ID}/messages"

        headers = {
            "Authorization": f"Bearer {settings.META_API_TOKEN}",
            "Content-Type": "application/json"
        }

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": phone,
            "type": "text",
            "text": {
                "preview_url": False,
                "body": text
            }
        }

        try:
            response = requests.post(
                url, headers=headers, json=payload,
                timeout=settings.NOTIFICATION_DELIVERY_TIMEOUT
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"[META] Failed to send message to {phone}: {e}")
            raise DeliveryError(f"Meta API rejected message to {phone}: {e}") from e

        data = response.json()
        message_id = data.get('messages', [{}])[0].get('id')

        logger.info(f"[META] Message sent: ID={message_id} to={phone}")
        return message_id
