"""
Delivery of receipt reminder requests.
The default sender only logs; a webhook sender hands requests to an
external messaging bridge (SMS gateway, email relay, ...).
"""
from abc import ABC, abstractmethod
from typing import Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from core.config import get_settings
from core.exceptions import ConfigurationError, NotificationError
from core.logger import mask_phone, setup_logger
from core.schema import NotificationRequest

logger = setup_logger(__name__)


class NotificationSender(ABC):
    """Base sender. Subclasses raise NotificationError when delivery fails."""

    @abstractmethod
    def send(self, request: NotificationRequest) -> None:
        pass


class LoggingNotificationSender(NotificationSender):
    """Writes requests to the log instead of delivering them."""

    def send(self, request: NotificationRequest) -> None:
        logger.info(
            f"Reminder to {request.recipient_name} ({mask_phone(request.recipient_phone)}): "
            f"{request.message_body}"
        )


class WebhookNotificationSender(NotificationSender):
    """POSTs requests as JSON to a messaging webhook with retries."""

    def __init__(self, url: str, timeout: int = 10):
        """
        Initialize webhook sender.

        Args:
            url: Webhook endpoint
            timeout: Request timeout in seconds
        """
        if not url:
            raise ConfigurationError(
                "Notification webhook URL not set",
                details={"required_key": "NOTIFICATION_WEBHOOK_URL"}
            )
        self.url = url
        self.timeout = timeout

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        retry=retry_if_exception_type(requests.exceptions.RequestException),
        reraise=True
    )
    def _post(self, payload: dict) -> requests.Response:
        response = requests.post(self.url, json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response

    def send(self, request: NotificationRequest) -> None:
        """
        Deliver a request to the webhook.

        Raises:
            NotificationError: If delivery fails after retries
        """
        try:
            self._post(request.model_dump(mode="json"))
        except requests.exceptions.Timeout as e:
            logger.error(f"Webhook timeout after {self.timeout}s: {e}")
            raise NotificationError(
                f"Notification webhook timeout after {self.timeout}s",
                details={"url": self.url, "transaction_id": request.transaction_id}
            )
        except requests.exceptions.HTTPError as e:
            logger.error(f"Webhook HTTP error: {e}")
            raise NotificationError(
                f"Notification webhook returned HTTP error: {e}",
                details={
                    "url": self.url,
                    "status_code": getattr(e.response, "status_code", None),
                    "transaction_id": request.transaction_id,
                }
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Webhook request failed: {e}")
            raise NotificationError(
                "Notification webhook request failed",
                details={"url": self.url, "error": str(e), "transaction_id": request.transaction_id}
            )

        logger.info(
            f"Delivered reminder for {request.transaction_id} to {mask_phone(request.recipient_phone)}"
        )


def get_notification_sender(webhook_url: Optional[str] = None) -> NotificationSender:
    """
    Pick a sender from configuration.

    Args:
        webhook_url: Overrides NOTIFICATION_WEBHOOK_URL

    Returns:
        Webhook sender if a URL is configured, logging sender otherwise
    """
    settings = get_settings()
    url = webhook_url or settings.notification_webhook_url
    if url:
        return WebhookNotificationSender(url, timeout=settings.notification_timeout)
    return LoggingNotificationSender()
