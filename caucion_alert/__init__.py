"""
Caución Rate Alert

Scrapes the caución (repo) rate board, keeps the terms paying more than a
configured TNA threshold and notifies them over WhatsApp while the market
is open.
"""

__version__ = "0.1.0"
__author__ = "Caución Rate Alert Team"
