"""Threshold filter selecting the caución terms worth notifying."""

import logging
from typing import Any, List

from ..interfaces import IOpportunityFilter
from ..models.rate import RateEntry

logger = logging.getLogger(__name__)


def parse_min_rate(value: Any) -> float:
    """
    Parse the configured minimum TNA.

    None, blank and unparseable values all mean 0. Negative values are
    clamped to 0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, (int, float)):
        parsed = float(value)
    else:
        text = str(value).strip().replace("%", "").replace(",", ".")
        if not text:
            return 0.0
        try:
            parsed = float(text)
        except ValueError:
            logger.warning(f"Unparseable minimum rate {value!r}, using 0")
            return 0.0

    if parsed != parsed:  # NaN
        return 0.0
    if parsed < 0:
        logger.warning(f"Negative minimum rate {value!r}, using 0")
        return 0.0
    return parsed


def filter_opportunities(entries: List[RateEntry], min_rate: float) -> List[RateEntry]:
    """Keep the entries whose rate is strictly above ``min_rate``, in order."""
    return [entry for entry in entries if entry.rate_percent > min_rate]


class OpportunityFilter(IOpportunityFilter):
    """Applies the configured minimum TNA to scraped rates."""

    def __init__(self, min_rate: float = 0.0):
        self.min_rate = min_rate
        logger.info(f"OpportunityFilter initialized with min_rate={min_rate}")

    def apply(self, entries: List[RateEntry]) -> List[RateEntry]:
        opportunities = filter_opportunities(entries, self.min_rate)
        logger.debug(
            f"{len(opportunities)}/{len(entries)} rates above {self.min_rate}%"
        )
        return opportunities
