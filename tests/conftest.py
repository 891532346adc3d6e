"""
Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the Caución Rate Alert test suite.
"""

import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock, patch

import pytest

from caucion_alert.models.alert import FormattedAlert
from caucion_alert.models.config import (
    Configuration,
    MarketHoursConfig,
    ScheduleConfig,
    ServerConfig,
    TwilioConfig,
)
from caucion_alert.models.delivery import DeliveryResult
from caucion_alert.models.rate import RateEntry
from caucion_alert.utils.error_handling import get_error_tracker
from caucion_alert.utils.logging import setup_logging


@pytest.fixture(scope="session", autouse=True)
def isolated_logging(tmp_path_factory):
    """Send all log files to a temporary directory."""
    return setup_logging(log_dir=str(tmp_path_factory.mktemp("logs")), log_level="DEBUG")


@pytest.fixture(autouse=True)
def clean_error_tracker():
    """Start every test with an empty error history."""
    get_error_tracker().clear()
    yield
    get_error_tracker().clear()


# Test data fixtures
@pytest.fixture
def sample_entries():
    """Rates as scraped, already sorted by descending rate."""
    return [
        RateEntry(term_days=1, rate_percent=31.5),
        RateEntry(term_days=5, rate_percent=30.1),
        RateEntry(term_days=7, rate_percent=28.0),
    ]


@pytest.fixture
def sample_rows():
    """Raw table rows as returned by the rendered-table fetcher."""
    return [
        ["5 días", "30,10 %"],
        ["7 días", "28,00 %"],
        ["1 día", "31,50 %"],
    ]


@pytest.fixture
def sample_formatted_alert():
    """Create a sample FormattedAlert for testing."""
    return FormattedAlert(
        title="Oportunidades de Caución (> 29%)",
        message="🚀 *Oportunidades de Caución (> 29%)* 🚀\n\n"
        "📅 Plazo: 1 días - 📈 Tasa: 31.5%\n",
        entry_count=1,
    )


@pytest.fixture
def sample_delivery_result():
    """Create a sample DeliveryResult for testing."""
    return DeliveryResult(
        success=True,
        delivery_time=datetime(2024, 3, 4, 14, 0, 0, tzinfo=timezone.utc),
        error_message=None,
        message_sid="SM0123456789abcdef0123456789abcdef",
        status="queued",
    )


@pytest.fixture
def twilio_config():
    """Twilio settings with every credential present."""
    return TwilioConfig(
        account_sid="AC0123456789abcdef0123456789abcdef",
        auth_token="test_auth_token",
        whatsapp_from="whatsapp:+14155238886",
        whatsapp_to="whatsapp:+5491100000000",
    )


@pytest.fixture
def sample_configuration(twilio_config):
    """Create a sample Configuration for testing."""
    return Configuration(
        min_rate=29.0,
        twilio=twilio_config,
        market_hours=MarketHoursConfig(),
        schedule=ScheduleConfig(scan_cron="*/15 10-17 * * 1-5"),
        server=ServerConfig(port=3000, access_token="s3cret"),
    )


# Mock fixtures
@pytest.fixture
def mock_message_dispatcher(sample_delivery_result):
    """Create a mock message dispatcher for testing."""
    dispatcher = Mock()
    dispatcher.send_alert.return_value = sample_delivery_result
    dispatcher.test_connection.return_value = True
    return dispatcher


@pytest.fixture
def mock_scraper(sample_entries):
    """Scraper returning the sample entries."""
    scraper = Mock()
    scraper.fetch_rates = AsyncMock(return_value=sample_entries)
    return scraper


@pytest.fixture
def mock_notifier(sample_delivery_result):
    """Notifier whose sends always succeed."""
    notifier = Mock()
    notifier.notify = AsyncMock(return_value=sample_delivery_result)
    notifier.send_maintenance_reminder = AsyncMock(return_value=sample_delivery_result)
    return notifier


@pytest.fixture
def open_clock():
    clock = Mock()
    clock.is_market_open.return_value = True
    return clock


@pytest.fixture
def closed_clock():
    clock = Mock()
    clock.is_market_open.return_value = False
    return clock


# Environment fixtures
@pytest.fixture
def mock_env_vars():
    """Mock environment variables for testing."""
    env_vars = {
        "TWILIO_ACCOUNT_SID": "AC0123456789abcdef0123456789abcdef",
        "TWILIO_AUTH_TOKEN": "test_auth_token",
        "TWILIO_WHATSAPP_FROM": "whatsapp:+14155238886",
        "TWILIO_WHATSAPP_TO": "+5491100000000",
        "MIN_TNA": "29,5",
        "CRON_SCHEDULE": "*/10 10-17 * * 1-5",
        "RUN_TOKEN": "s3cret",
        "PORT": "8080",
        "LOG_LEVEL": "debug",
    }

    # Store original values
    original_values = {}
    for key, value in env_vars.items():
        original_values[key] = os.environ.get(key)
        os.environ[key] = value

    yield env_vars

    # Restore original values
    for key, original_value in original_values.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


@pytest.fixture
def clean_env():
    """Remove every variable the configuration template reads, restoring them afterwards."""
    with patch.dict(os.environ):
        for name in [
            "TWILIO_ACCOUNT_SID",
            "TWILIO_AUTH_TOKEN",
            "TWILIO_WHATSAPP_FROM",
            "TWILIO_WHATSAPP_TO",
            "MIN_TNA",
            "CRON_SCHEDULE",
            "RUN_TOKEN",
            "PORT",
            "LOG_LEVEL",
        ]:
            os.environ.pop(name, None)
        yield


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # HTTP tests spin up a real aiohttp server on localhost
        if "test_server" in item.nodeid:
            item.add_marker(pytest.mark.integration)

        # Add unit marker to all other tests by default
        if not any(
            marker.name in ["integration", "slow"] for marker in item.iter_markers()
        ):
            item.add_marker(pytest.mark.unit)
