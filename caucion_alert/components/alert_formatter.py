"""
Alert formatting component for the Caución Rate Alert system.

Messages are WhatsApp-flavoured text: ``*bold*`` markup and emoji, in
Spanish to match the audience of the rate board.
"""

from typing import List

from ..interfaces import IAlertFormatter
from ..models.alert import MAX_MESSAGE_LENGTH, FormattedAlert
from ..models.rate import RateEntry

DEFAULT_MAX_ENTRIES = 10

MAINTENANCE_REMINDER = (
    "🤖 *Mantenimiento Bot*\n\n"
    "Para evitar que la sesión de prueba caduque, por favor responde a este "
    'mensaje con cualquier texto (ej: "ok").'
)


def format_number(value: float) -> str:
    """Render a rate without a trailing ``.0`` (``30.0`` -> ``30``, ``31.5`` -> ``31.5``)."""
    return f"{value:g}"


class AlertFormatter(IAlertFormatter):
    """Formats rate opportunities into WhatsApp messages."""

    def __init__(self, max_entries: int = DEFAULT_MAX_ENTRIES):
        """
        Initialize the alert formatter.

        Args:
            max_entries: Maximum number of opportunities listed in one message
        """
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self.max_entries = max_entries

    def format_opportunities(
        self, opportunities: List[RateEntry], min_rate: float
    ) -> FormattedAlert:
        """
        Format opportunities into an alert message.

        At most ``max_entries`` opportunities are listed, in the order given
        (highest rate first when fed from the filter). Entries that would push
        the body past the provider limit are left out.

        Args:
            opportunities: Rates above the threshold
            min_rate: Threshold the opportunities were selected with

        Returns:
            FormattedAlert: Alert ready for delivery
        """
        if not opportunities:
            raise ValueError("Cannot format an alert without opportunities")

        title = f"Oportunidades de Caución (> {format_number(min_rate)}%)"
        message = f"🚀 *{title}* 🚀\n\n"
        listed = 0

        for entry in opportunities[: self.max_entries]:
            line = self._format_entry(entry) + "\n"
            if len(message) + len(line) > MAX_MESSAGE_LENGTH:
                break
            message += line
            listed += 1

        alert = FormattedAlert(title=title, message=message, entry_count=listed)
        alert.validate()
        return alert

    def format_maintenance_reminder(self) -> FormattedAlert:
        alert = FormattedAlert(
            title="Mantenimiento Bot", message=MAINTENANCE_REMINDER, entry_count=0
        )
        alert.validate()
        return alert

    def _format_entry(self, entry: RateEntry) -> str:
        return (
            f"📅 Plazo: {entry.term_days} días - "
            f"📈 Tasa: {format_number(entry.rate_percent)}%"
        )
