"""
Unit tests for the opportunity filter.
"""

import pytest

from caucion_alert.components.opportunity_filter import (
    OpportunityFilter,
    filter_opportunities,
    parse_min_rate,
)
from caucion_alert.components.rate_scraper import parse_rate_rows
from caucion_alert.models.rate import RateEntry


class TestFilterOpportunities:
    """Test cases for threshold filtering."""

    def test_reference_example(self):
        entries = parse_rate_rows(
            [["5 días", "30,1"], ["7 días", "28,0"], ["1 día", "31,5"]]
        )

        assert filter_opportunities(entries, 29) == [
            RateEntry(term_days=1, rate_percent=31.5),
            RateEntry(term_days=5, rate_percent=30.1),
        ]

    def test_threshold_is_exclusive(self):
        entries = [RateEntry(1, 29.0), RateEntry(2, 29.01)]
        assert filter_opportunities(entries, 29.0) == [RateEntry(2, 29.01)]

    def test_preserves_input_order(self):
        entries = [RateEntry(3, 30.0), RateEntry(1, 35.0), RateEntry(2, 32.0)]
        assert filter_opportunities(entries, 10) == entries

    def test_zero_threshold_keeps_positive_rates(self):
        entries = [RateEntry(1, 0.0), RateEntry(2, 0.5)]
        assert filter_opportunities(entries, 0) == [RateEntry(2, 0.5)]

    def test_empty_input(self):
        assert filter_opportunities([], 29) == []

    def test_filter_component(self, sample_entries):
        opportunity_filter = OpportunityFilter(min_rate=30.1)
        assert opportunity_filter.apply(sample_entries) == [sample_entries[0]]


class TestParseMinRate:
    """Test cases for threshold parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("29", 29.0),
            ("29.5", 29.5),
            ("29,5", 29.5),
            (" 30 % ", 30.0),
            (31, 31.0),
            (31.5, 31.5),
        ],
    )
    def test_parses_numbers(self, value, expected):
        assert parse_min_rate(value) == expected

    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "nan", True])
    def test_missing_or_invalid_defaults_to_zero(self, value):
        assert parse_min_rate(value) == 0.0

    @pytest.mark.parametrize("value", ["-1", "-0,5", -3])
    def test_negative_values_clamped_to_zero(self, value):
        assert parse_min_rate(value) == 0.0
