"""
Unit tests for configuration management system.
"""

import json
from pathlib import Path

import pytest
import yaml

from caucion_alert.exceptions import ConfigurationError
from caucion_alert.models.config import DEFAULT_RATES_URL, DEFAULT_REMINDER_CRON, Configuration
from caucion_alert.services.config_manager import ConfigurationManager

EXAMPLE_CONFIG = Path(__file__).resolve().parent.parent / "config" / "config.example.yaml"


class TestConfigurationManager:
    """Test ConfigurationManager functionality."""

    def write_config(self, directory, config_data: dict, file_format: str = "yaml") -> str:
        """Write a configuration file into ``directory``."""
        path = directory / f"config.{file_format}"
        if file_format == "json":
            path.write_text(json.dumps(config_data, indent=2), encoding="utf-8")
        else:
            path.write_text(yaml.dump(config_data, default_flow_style=False), encoding="utf-8")
        return str(path)

    def test_template_used_when_no_file(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        manager = ConfigurationManager(load_env_file=False)

        config = manager.load_config()

        assert manager.config_path is None
        assert isinstance(config, Configuration)
        assert config.min_rate == 0.0
        assert config.scraper.url == DEFAULT_RATES_URL
        assert config.schedule.scan_cron is None
        assert config.schedule.reminder_cron == DEFAULT_REMINDER_CRON
        assert config.server.port == 3000
        assert config.server.access_token is None
        assert config.twilio.has_credentials is False

    def test_environment_variables(self, tmp_path, monkeypatch, mock_env_vars):
        monkeypatch.chdir(tmp_path)

        config = ConfigurationManager(load_env_file=False).load_config()

        assert config.min_rate == 29.5
        assert config.twilio.account_sid == mock_env_vars["TWILIO_ACCOUNT_SID"]
        assert config.twilio.whatsapp_from == "whatsapp:+14155238886"
        # Bare numbers get the WhatsApp channel prefix
        assert config.twilio.whatsapp_to == "whatsapp:+5491100000000"
        assert config.schedule.scan_cron == "*/10 10-17 * * 1-5"
        assert config.server.access_token == "s3cret"
        assert config.server.port == 8080
        assert config.log_level == "DEBUG"

    def test_dotenv_file_is_loaded(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        env_file = tmp_path / ".env"
        env_file.write_text("MIN_TNA=31\nRUN_TOKEN=from-dotenv\n", encoding="utf-8")

        config = ConfigurationManager(env_file=str(env_file)).load_config()

        assert config.min_rate == 31.0
        assert config.server.access_token == "from-dotenv"

    def test_process_environment_wins_over_dotenv(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("MIN_TNA", "27")
        env_file = tmp_path / ".env"
        env_file.write_text("MIN_TNA=31\n", encoding="utf-8")

        config = ConfigurationManager(env_file=str(env_file)).load_config()

        assert config.min_rate == 27.0

    def test_yaml_file_overrides_template(self, tmp_path, clean_env):
        path = self.write_config(
            tmp_path,
            {
                "min_rate": 30,
                "market_hours": {"close_time": "21:30"},
                "schedule": {"scan_cron": "0 * * * 1-5", "reminder_enabled": False},
                "server": {"port": 9000},
            },
        )

        config = ConfigurationManager(path, load_env_file=False).load_config()

        assert config.min_rate == 30.0
        assert config.market_hours.open_time == "10:30"
        assert config.market_hours.close_time == "21:30"
        assert config.schedule.scan_cron == "0 * * * 1-5"
        assert config.schedule.reminder_enabled is False
        assert config.server.port == 9000

    def test_json_file(self, tmp_path, clean_env):
        path = self.write_config(tmp_path, {"max_alert_entries": 5}, "json")

        config = ConfigurationManager(path, load_env_file=False).load_config()

        assert config.max_alert_entries == 5

    def test_env_reference_with_default(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.setenv("CUSTOM_PORT", "4000")
        path = self.write_config(
            tmp_path,
            {"server": {"port": "${CUSTOM_PORT:-5000}", "host": "${CUSTOM_HOST:-127.0.0.1}"}},
        )

        config = ConfigurationManager(path, load_env_file=False).load_config()

        assert config.server.port == 4000
        assert config.server.host == "127.0.0.1"

    def test_missing_required_env_var(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.delenv("UNDEFINED_SID", raising=False)
        path = self.write_config(tmp_path, {"twilio": {"account_sid": "${UNDEFINED_SID}"}})

        with pytest.raises(ConfigurationError, match="UNDEFINED_SID"):
            ConfigurationManager(path, load_env_file=False).load_config()

    def test_missing_file(self, tmp_path):
        manager = ConfigurationManager(str(tmp_path / "nope.yaml"), load_env_file=False)

        with pytest.raises(ConfigurationError, match="not found"):
            manager.load_config()

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("min_rate: [unclosed\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            ConfigurationManager(str(path), load_env_file=False).load_config()

    def test_non_mapping_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="mapping"):
            ConfigurationManager(str(path), load_env_file=False).load_config()

    def test_invalid_values_raise_configuration_error(self, tmp_path, clean_env):
        path = self.write_config(tmp_path, {"market_hours": {"open_time": "18:00"}})

        with pytest.raises(ConfigurationError, match="before close"):
            ConfigurationManager(path, load_env_file=False).load_config()

    def test_invalid_cron(self, tmp_path, clean_env):
        path = self.write_config(tmp_path, {"schedule": {"scan_cron": "not a cron"}})

        with pytest.raises(ConfigurationError, match="cron"):
            ConfigurationManager(path, load_env_file=False).load_config()

    def test_non_numeric_port(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.setenv("PORT", "http")
        monkeypatch.chdir(tmp_path)

        with pytest.raises(ConfigurationError, match="server.port"):
            ConfigurationManager(load_env_file=False).load_config()

    def test_unparseable_min_rate_defaults_to_zero(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.setenv("MIN_TNA", "treinta")
        monkeypatch.chdir(tmp_path)

        config = ConfigurationManager(load_env_file=False).load_config()

        assert config.min_rate == 0.0

    def test_negative_min_rate_does_not_block_startup(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.setenv("MIN_TNA", "-1")
        monkeypatch.chdir(tmp_path)

        config = ConfigurationManager(load_env_file=False).load_config()

        assert config.min_rate == 0.0

    def test_finds_config_in_standard_location(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "config").mkdir()
        self.write_config(tmp_path / "config", {"min_rate": 33})

        manager = ConfigurationManager(load_env_file=False)

        assert manager.config_path == "config/config.yaml"
        assert manager.load_config().min_rate == 33.0

    def test_get_config_caches(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.chdir(tmp_path)
        manager = ConfigurationManager(load_env_file=False)

        first = manager.get_config()

        assert manager.get_config() is first

    def test_validate_config_file_tolerates_missing_env(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.delenv("UNDEFINED_SID", raising=False)
        path = self.write_config(tmp_path, {"twilio": {"account_sid": "${UNDEFINED_SID}"}})

        assert ConfigurationManager(load_env_file=False).validate_config_file(path) is True

    def test_validate_config_file_reports_errors(self, tmp_path, clean_env):
        path = self.write_config(tmp_path, {"server": {"port": 0}})

        with pytest.raises(ConfigurationError, match="validation failed"):
            ConfigurationManager(load_env_file=False).validate_config_file(path)

    def test_example_config_is_valid(self, clean_env):
        manager = ConfigurationManager(load_env_file=False)
        assert manager.validate_config_file(str(EXAMPLE_CONFIG)) is True

    def test_template_structure(self):
        template = ConfigurationManager(load_env_file=False).get_config_template()

        for section in ["twilio", "market_hours", "scraper", "schedule", "server", "system"]:
            assert section in template
        assert template["min_rate"] == "${MIN_TNA:-0}"
