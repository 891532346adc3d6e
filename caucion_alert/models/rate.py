"""
Rate data models for the Caución Rate Alert system.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class RateEntry:
    """A single caución term and the TNA it currently pays."""

    term_days: int
    rate_percent: float

    def validate(self) -> bool:
        """Validate the rate entry data."""
        if isinstance(self.term_days, bool) or not isinstance(self.term_days, int):
            raise ValueError("term_days must be an integer")

        if self.term_days < 0:
            raise ValueError("term_days cannot be negative")

        if isinstance(self.rate_percent, bool) or not isinstance(
            self.rate_percent, (int, float)
        ):
            raise ValueError("rate_percent must be a number")

        if self.rate_percent != self.rate_percent:  # NaN
            raise ValueError("rate_percent cannot be NaN")

        if self.rate_percent < 0:
            raise ValueError("rate_percent cannot be negative")

        return True

    def to_dict(self) -> Dict[str, Any]:
        """Render the entry with the public API field names."""
        return {"plazo_dias": self.term_days, "tasa_actual": self.rate_percent}
