"""
Core components for the Caución Rate Alert system.

This module contains the components that check market hours, scrape the
rate board, filter opportunities, format alerts and dispatch messages.
"""

from .alert_formatter import AlertFormatter
from .market_clock import MarketClock
from .message_dispatcher import TwilioWhatsAppDispatcher
from .opportunity_filter import OpportunityFilter, filter_opportunities, parse_min_rate
from .rate_scraper import RateScraper, parse_rate_percent, parse_term_days
from .table_fetcher import PlaywrightTableFetcher, extract_table_rows

__all__ = [
    "AlertFormatter",
    "MarketClock",
    "TwilioWhatsAppDispatcher",
    "OpportunityFilter",
    "filter_opportunities",
    "parse_min_rate",
    "RateScraper",
    "parse_rate_percent",
    "parse_term_days",
    "PlaywrightTableFetcher",
    "extract_table_rows",
]
