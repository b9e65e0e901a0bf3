"""
Tests for environment driven defaults.
"""

import pytest

import config
from config import ConfigError, load_config


class TestLoadConfig:

    def test_defaults(self):
        settings = load_config({})
        assert settings["local_port"] == ""
        assert settings["bind_ip"] == ""
        assert settings["greeting"] == "hello from the internet!"
        assert settings["max_message_size"] == 65536
        assert settings["log_mode"] == "brief"
        assert settings["max_log_days"] == 7
        assert settings["log_file"].endswith("sip_alg.log")

    def test_overrides(self):
        settings = load_config({
            "SIP_LOCAL_PORT": "4444",
            "SIP_HOST": "203.0.113.10",
            "SIP_MAX_MESSAGE_SIZE": "0",
            "SIP_LOG_MODE": "debug",
            "SIP_LOG_FILE": "",
        })
        assert settings["local_port"] == "4444"
        assert settings["host"] == "203.0.113.10"
        assert settings["max_message_size"] == 0
        assert settings["log_mode"] == "debug"
        assert settings["log_file"] == ""

    def test_empty_number_uses_default(self):
        assert load_config({"SIP_MAX_LOG_DAYS": ""})["max_log_days"] == 7

    def test_bad_number(self):
        with pytest.raises(ConfigError, match="SIP_MAX_LOG_DAYS"):
            load_config({"SIP_MAX_LOG_DAYS": "a week"})

    def test_bad_log_mode(self):
        with pytest.raises(ConfigError):
            load_config({"SIP_LOG_MODE": "verbose"})

    def test_dotenv_only_for_process_environment(self, monkeypatch):
        loaded = []
        monkeypatch.setattr(config, "load_dotenv", lambda: loaded.append(True))
        load_config({})
        assert loaded == []
        load_config()
        assert loaded == [True]
