"""
Tests for configuration loading.
"""

import pytest
import yaml

from digital_tools.config import Config, get_config, reset_config, set_config


class TestConfig:
    """Tests for Config."""

    def test_defaults(self, tmp_path):
        config = Config(data_dir=tmp_path)

        assert config.strict_params is False
        assert config.confirmation_ttl_seconds == 300
        assert config.default_caller == "human"
        assert config.register_builtin is True
        assert config.config_path == tmp_path / "config.yaml"

    def test_save_and_load(self, tmp_path):
        config = Config(data_dir=tmp_path / "home", strict_params=True, user_agent="ops-bot/2")
        config.save()

        assert Config.exists(tmp_path / "home")
        saved = yaml.safe_load((tmp_path / "home" / "config.yaml").read_text())
        assert saved["strict_params"] is True

        loaded = Config.load(tmp_path / "home")
        assert loaded.strict_params is True
        assert loaded.user_agent == "ops-bot/2"
        assert loaded.data_dir == tmp_path / "home"

    def test_load_missing_file(self, tmp_path):
        config = Config.load(tmp_path)

        assert Config.exists(tmp_path) is False
        assert config.confirmation_ttl_seconds == 300

    def test_unknown_keys_ignored(self, tmp_path, caplog):
        (tmp_path / "config.yaml").write_text("log_level: DEBUG\nnot_a_setting: 1\n")

        config = Config.load(tmp_path)

        assert config.log_level == "DEBUG"
        assert "not_a_setting" in caplog.text

    def test_non_mapping_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            Config.load(tmp_path)

    def test_env_overrides(self, tmp_path, monkeypatch):
        (tmp_path / "config.yaml").write_text("strict_params: false\nconfirmation_ttl_seconds: 60\n")
        monkeypatch.setenv("DIGITAL_TOOLS_STRICT", "yes")
        monkeypatch.setenv("DIGITAL_TOOLS_CONFIRMATION_TTL", "15")
        monkeypatch.setenv("DIGITAL_TOOLS_LOG_LEVEL", "warning")

        config = Config.load(tmp_path)

        assert config.strict_params is True
        assert config.confirmation_ttl_seconds == 15
        assert config.log_level == "WARNING"

    def test_apply_env(self, tmp_path):
        config = Config(data_dir=tmp_path, strict_params=True)
        config.apply_env({"DIGITAL_TOOLS_STRICT": "0"})

        assert config.strict_params is False

    def test_default_caller_normalized(self, tmp_path):
        assert Config(data_dir=tmp_path, default_caller=" Agent ").default_caller == "ai"
        assert Config(data_dir=tmp_path, default_caller="HUMAN").default_caller == "human"

    @pytest.mark.parametrize("caller", ["both", "robot", ""])
    def test_invalid_default_caller(self, tmp_path, caller):
        with pytest.raises(ValueError):
            Config(data_dir=tmp_path, default_caller=caller)

    def test_invalid_default_caller_in_file(self, tmp_path):
        (tmp_path / "config.yaml").write_text("default_caller: both\n")

        with pytest.raises(ValueError):
            Config.load(tmp_path)

    def test_default_caller_from_env(self, tmp_path):
        config = Config(data_dir=tmp_path)
        config.apply_env({"DIGITAL_TOOLS_DEFAULT_CALLER": "agent"})

        assert config.default_caller == "ai"

        with pytest.raises(ValueError):
            config.apply_env({"DIGITAL_TOOLS_DEFAULT_CALLER": "both"})


class TestGlobalConfig:
    """Tests for the process-wide config."""

    def test_set_and_get(self, tmp_path):
        custom = Config(data_dir=tmp_path, default_caller="ai")
        set_config(custom)

        assert get_config() is custom

    def test_reset_loads_from_dir(self, tmp_path):
        Config(data_dir=tmp_path, confirmation_ttl_seconds=42).save()
        reset_config()

        assert get_config(tmp_path).confirmation_ttl_seconds == 42
