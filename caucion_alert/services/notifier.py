"""
Notification service for the Caución Rate Alert system.

Wraps the alert formatter and the blocking message dispatcher behind an
async API so the triggers can await it from the event loop.
"""

import asyncio
from typing import List, Optional

from ..exceptions import NotifyError, SessionExpiredError
from ..interfaces import IAlertFormatter, IMessageDispatcher, INotifier
from ..models.delivery import DeliveryResult
from ..models.rate import RateEntry
from ..utils.logging import get_logger


class Notifier(INotifier):
    """Formats opportunities and sends them through the dispatcher."""

    def __init__(
        self,
        dispatcher: IMessageDispatcher,
        formatter: IAlertFormatter,
        min_rate: float = 0.0,
    ):
        self.dispatcher = dispatcher
        self.formatter = formatter
        self.min_rate = min_rate
        self.logger = get_logger("notifier")

    async def notify(self, opportunities: List[RateEntry]) -> Optional[DeliveryResult]:
        """
        Send the opportunities as one WhatsApp message.

        Args:
            opportunities: Rates above the threshold, highest first

        Returns:
            DeliveryResult of the send, or None when there was nothing to send

        Raises:
            SessionExpiredError: If the recipient must rejoin the sandbox
            NotifyError: If the provider rejected the message
        """
        if not opportunities:
            return None

        alert = self.formatter.format_opportunities(opportunities, self.min_rate)

        try:
            result = await asyncio.to_thread(self.dispatcher.send_alert, alert)
        except SessionExpiredError as e:
            self.logger.error(
                "WhatsApp sandbox session expired or not joined",
                extra={"code": e.code, "action": e.rejoin_hint},
            )
            raise
        except NotifyError as e:
            self.logger.error(
                "Error sending WhatsApp message",
                extra={"code": e.code, "error": str(e)},
            )
            raise

        self.logger.info(
            "WhatsApp message sent",
            extra={
                "message_sid": result.message_sid,
                "status": result.status,
                "entry_count": alert.entry_count,
            },
        )
        return result

    async def send_maintenance_reminder(self) -> Optional[DeliveryResult]:
        """Send the sandbox keep-alive reminder; failures are logged, not raised."""
        alert = self.formatter.format_maintenance_reminder()

        try:
            result = await asyncio.to_thread(self.dispatcher.send_alert, alert)
        except NotifyError as e:
            self.logger.error(
                "Error sending maintenance reminder",
                extra={"code": e.code, "error": str(e)},
            )
            return None

        self.logger.info(
            "Maintenance reminder sent",
            extra={"message_sid": result.message_sid, "status": result.status},
        )
        return result
