"""
Rate scraping components for the Caución Rate Alert system.

This module turns the rendered rate table into RateEntry objects: the first
cell carries the term in days, the second the TNA in Argentine number format.
"""

import re
from typing import List, Optional, Sequence

from ..interfaces import IRateScraper, ITableFetcher
from ..models.rate import RateEntry
from ..utils.logging import get_logger

TERM_PATTERN = re.compile(r"(\d+)")
RATE_PATTERN = re.compile(r"\d[\d.,]*")
SEPARATOR_SPACING = re.compile(r"\s*([.,])\s*")


def parse_term_days(text: str) -> Optional[int]:
    """Return the first integer found in ``text`` (e.g. ``"7 días"`` -> 7)."""
    match = TERM_PATTERN.search(text or "")
    if not match:
        return None
    return int(match.group(1))


def _normalize_separators(number: str) -> str:
    """Rewrite a number using either ``,`` or ``.`` as decimal mark into ``.`` form."""
    if "," in number and "." in number:
        # Whichever separator comes last is the decimal mark
        if number.rfind(",") > number.rfind("."):
            return number.replace(".", "").replace(",", ".")
        return number.replace(",", "")

    if "," in number:
        if number.count(",") > 1:
            return number.replace(",", "")
        return number.replace(",", ".")

    if number.count(".") > 1:
        return number.replace(".", "")

    return number


def parse_rate_percent(text: str) -> Optional[float]:
    """
    Parse a rate cell such as ``"31,50 %"`` or ``"1.234,5%"`` into a float.

    Only the first number in the cell is read; spacing around separators is
    ignored, so ``"29 , 75"`` is 29.75 while ``"31,50 32,10"`` is 31.5.

    Returns:
        The rate as a float, or None when the cell holds no number
    """
    cleaned = SEPARATOR_SPACING.sub(r"\1", (text or "").replace("%", " "))
    match = None
    for token in cleaned.split():
        match = RATE_PATTERN.search(token)
        if match:
            break
    if not match:
        return None

    number = _normalize_separators(match.group(0).rstrip(".,"))
    try:
        return float(number)
    except ValueError:
        return None


def parse_rate_rows(rows: Sequence[Sequence[str]]) -> List[RateEntry]:
    """
    Convert raw table rows into rate entries sorted by descending rate.

    Rows with fewer than two cells, or whose term or rate cannot be parsed,
    are dropped.
    """
    entries = []

    for cells in rows:
        if len(cells) < 2:
            continue

        term_days = parse_term_days(cells[0])
        rate_percent = parse_rate_percent(cells[1])
        if term_days is None or rate_percent is None:
            continue

        entries.append(RateEntry(term_days=term_days, rate_percent=rate_percent))

    return sorted(entries, key=lambda entry: entry.rate_percent, reverse=True)


class RateScraper(IRateScraper):
    """Scrapes the caución board through a rendered-table fetcher."""

    def __init__(self, fetcher: ITableFetcher, url: str):
        """
        Initialize the rate scraper.

        Args:
            fetcher: Capability that returns rendered table rows
            url: Page listing the caución rates
        """
        self.fetcher = fetcher
        self.url = url
        self.logger = get_logger("rate.scraper")

    async def fetch_rates(self) -> List[RateEntry]:
        """
        Scrape the rate board.

        Returns:
            Rate entries sorted by descending rate

        Raises:
            FetchError: If the page cannot be loaded or the table never renders
        """
        rows = await self.fetcher.fetch_rendered_table(self.url)
        entries = parse_rate_rows(rows)

        dropped = len(rows) - len(entries)
        if dropped:
            self.logger.debug(
                "Dropped unparseable rows", extra={"dropped_rows": dropped}
            )

        self.logger.info(
            "Rates scraped",
            extra={
                "url": self.url,
                "row_count": len(rows),
                "entry_count": len(entries),
                "best_rate": entries[0].rate_percent if entries else None,
            },
        )
        return entries
