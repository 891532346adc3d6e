"""
Pipeline run result models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .delivery import DeliveryResult
from .rate import RateEntry


class NotificationStatus(Enum):
    """What happened to the notification step of a pipeline run."""

    NOT_REQUESTED = "not_requested"
    MARKET_CLOSED = "market_closed"
    NO_OPPORTUNITIES = "no_opportunities"
    SENT = "sent"
    FAILED = "failed"
    SESSION_EXPIRED = "session_expired"


@dataclass
class PipelineResult:
    """Outcome of one scrape-filter-notify cycle."""

    timestamp: datetime
    market_open: bool
    min_rate: float
    entries: List[RateEntry] = field(default_factory=list)
    opportunities: List[RateEntry] = field(default_factory=list)
    notification: NotificationStatus = NotificationStatus.NOT_REQUESTED
    delivery: Optional[DeliveryResult] = None
    error: Optional[str] = None

    @property
    def scanned(self) -> bool:
        """False when the run stopped at the market-hours gate."""
        return self.notification is not NotificationStatus.MARKET_CLOSED

    def validate(self) -> bool:
        """Validate pipeline result data."""
        if not isinstance(self.timestamp, datetime):
            raise ValueError("timestamp must be a datetime object")

        if len(self.opportunities) > len(self.entries):
            raise ValueError("opportunities cannot outnumber scraped entries")

        for opportunity in self.opportunities:
            if opportunity.rate_percent <= self.min_rate:
                raise ValueError("opportunity rate must exceed the threshold")

        if self.notification is NotificationStatus.SENT and self.delivery is None:
            raise ValueError("delivery must be provided when notification was sent")

        return True

    def to_summary(self) -> Dict[str, Any]:
        """Render the JSON body served by the rates endpoint."""
        return {
            "timestamp": self.timestamp.isoformat(timespec="seconds"),
            "mercado_abierto": self.market_open,
            "min_tna_config": self.min_rate,
            "cantidad_encontrada": len(self.entries),
            "oportunidades_detectadas": len(self.opportunities),
            "data": [entry.to_dict() for entry in self.entries],
        }
