"""
Message dispatching components for the Caución Rate Alert system.

This module delivers alert messages over WhatsApp through the Twilio REST
API. Sends are attempted once; provider rejections are raised to the caller.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from ..exceptions import NotifyError, SessionExpiredError
from ..interfaces import IMessageDispatcher
from ..models.alert import FormattedAlert
from ..models.config import TwilioConfig
from ..models.delivery import DeliveryResult

logger = logging.getLogger(__name__)

# 63015: recipient has not joined the sandbox / 24h session window closed
# 21610: recipient replied STOP (unsubscribed)
SESSION_EXPIRED_CODES = frozenset({63015, 21610})

API_VERSION = "2010-04-01"


class TwilioWhatsAppDispatcher(IMessageDispatcher):
    """Twilio Programmable Messaging dispatcher for WhatsApp."""

    def __init__(self, config: TwilioConfig, session: Optional[requests.Session] = None):
        """
        Initialize Twilio dispatcher.

        Args:
            config: Twilio credentials and WhatsApp addresses
            session: Optional pre-built HTTP session
        """
        self.config = config
        self.session = session or self._create_session()
        self.account_url = (
            f"{config.api_base_url.rstrip('/')}/{API_VERSION}"
            f"/Accounts/{config.account_sid}"
        )
        self.messages_url = f"{self.account_url}/Messages.json"

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.auth = (self.config.account_sid, self.config.auth_token)
        session.headers.update({"Accept": "application/json"})
        return session

    def send_alert(self, alert: FormattedAlert) -> DeliveryResult:
        """
        Send an alert as a WhatsApp message.

        Args:
            alert: Formatted alert to send

        Returns:
            DeliveryResult: Message SID and provider status

        Raises:
            SessionExpiredError: If the sandbox session expired or was never joined
            NotifyError: For any other provider or network failure
        """
        if not self.config.has_credentials:
            raise NotifyError("Twilio credentials or WhatsApp addresses not configured")

        payload = {
            "From": self.config.whatsapp_from,
            "To": self.config.whatsapp_to,
            "Body": alert.message,
        }

        try:
            response = self.session.post(
                self.messages_url, data=payload, timeout=self.config.timeout
            )
        except requests.exceptions.RequestException as e:
            raise NotifyError(f"Error contacting Twilio: {e}") from e

        body = self._parse_body(response)

        if response.status_code >= 400:
            self._raise_provider_error(response.status_code, body)

        # Sandbox rejections can also surface on the created message itself
        error_code = self._to_int(body.get("error_code"))
        if error_code in SESSION_EXPIRED_CODES:
            self._raise_provider_error(
                response.status_code,
                {
                    "code": error_code,
                    "message": body.get("error_message") or "Message rejected",
                },
            )

        sid = body.get("sid")
        if not sid:
            raise NotifyError(
                f"Unexpected Twilio response: {body}", status_code=response.status_code
            )

        logger.info(f"Message {sid} accepted by Twilio for {self.config.whatsapp_to}")

        result = DeliveryResult(
            success=True,
            delivery_time=datetime.now(),
            error_message=None,
            message_sid=sid,
            status=body.get("status"),
        )
        result.validate()
        return result

    def test_connection(self) -> bool:
        """Test connection to the Twilio account resource."""
        if not self.config.account_sid or not self.config.auth_token:
            logger.error("Twilio credentials not configured")
            return False

        try:
            response = self.session.get(f"{self.account_url}.json", timeout=10)
            response.raise_for_status()

            account = response.json()
            logger.info(
                f"Connected to Twilio account: {account.get('friendly_name', 'Unknown')}"
            )
            return True

        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error(f"Failed to connect to Twilio: {e}")
            return False

    def _raise_provider_error(self, status_code: int, body: Dict[str, Any]):
        code = self._to_int(body.get("code"))
        message = body.get("message") or f"HTTP {status_code}"

        if code in SESSION_EXPIRED_CODES:
            raise SessionExpiredError(
                f"WhatsApp session expired or not joined (code {code}): {message}",
                code=code,
                status_code=status_code,
                sandbox_number=self.config.whatsapp_from,
            )

        raise NotifyError(
            f"Twilio API error (code {code}): {message}",
            code=code,
            status_code=status_code,
        )

    @staticmethod
    def _parse_body(response: requests.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {"message": response.text[:200]}
        return body if isinstance(body, dict) else {}

    @staticmethod
    def _to_int(value: Any) -> Optional[int]:
        try:
            return int(value)
        except (TypeError, ValueError):
            return None
