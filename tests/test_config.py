"""Unit tests for bugblaze.config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from bugblaze.config import CONFIG_FILENAME, AppConfig, GroqConfig, default_config_path
from bugblaze.errors import ConfigError, ConfigMissing


class TestGroqConfig:
    @pytest.mark.unit
    def test_defaults(self):
        cfg = GroqConfig()
        assert cfg.url == "https://api.groq.com/openai/v1"
        assert cfg.model == "llama3-8b-8192"
        assert cfg.temperature == 0.3
        assert cfg.max_tokens == 300
        assert cfg.timeout == 120


class TestAppConfigDefaults:
    @pytest.mark.unit
    def test_default_path_is_cwd(self, tmp_path: Path):
        assert default_config_path() == tmp_path / CONFIG_FILENAME

    @pytest.mark.unit
    def test_load_without_file(self, config_path: Path):
        config = AppConfig.load(config_path)
        assert config.apikey == ""
        assert config.is_premium is False
        assert config.config_path == config_path
        assert not config_path.exists()

    @pytest.mark.unit
    def test_require_apikey_missing(self):
        with pytest.raises(ConfigMissing) as exc_info:
            AppConfig().require_apikey()
        assert "config set apikey" in exc_info.value.hint

    @pytest.mark.unit
    def test_require_apikey_blank(self):
        with pytest.raises(ConfigMissing):
            AppConfig(apikey="   ").require_apikey()

    @pytest.mark.unit
    def test_require_apikey_strips(self):
        assert AppConfig(apikey=" gsk_abc ").require_apikey() == "gsk_abc"


class TestPersistence:
    @pytest.mark.unit
    def test_round_trip(self, config_path: Path):
        config = AppConfig(config_path=config_path)
        config.set_value("apikey", "gsk_123")
        config.is_premium = True
        config.email = "dev@example.com"
        config.save()

        loaded = AppConfig.load(config_path)
        assert loaded.apikey == "gsk_123"
        assert loaded.is_premium is True
        assert loaded.email == "dev@example.com"

    @pytest.mark.unit
    def test_file_uses_legacy_key_names(self, config_path: Path):
        AppConfig(apikey="k", is_premium=True, config_path=config_path).save()
        data = json.loads(config_path.read_text(encoding="utf-8"))
        assert data == {"apikey": "k", "isPremium": True}

    @pytest.mark.unit
    def test_unknown_keys_in_file_ignored(self, config_path: Path):
        config_path.write_text(json.dumps({"apikey": "k", "theme": "dark"}), encoding="utf-8")
        assert AppConfig.load(config_path).apikey == "k"

    @pytest.mark.unit
    def test_set_unknown_key(self):
        with pytest.raises(ValueError):
            AppConfig().set_value("model", "x")

    @pytest.mark.unit
    def test_delete(self, config_path: Path):
        AppConfig(apikey="k", config_path=config_path).save()
        assert AppConfig.delete(config_path) is True
        assert not config_path.exists()
        assert AppConfig.delete(config_path) is False

    @pytest.mark.unit
    def test_read_raw_missing(self, config_path: Path):
        assert AppConfig.read_raw(config_path) is None


class TestCorruptFile:
    @pytest.mark.unit
    def test_invalid_json(self, config_path: Path):
        config_path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            AppConfig.load(config_path)
        assert "config delete" in exc_info.value.hint

    @pytest.mark.unit
    def test_not_an_object(self, config_path: Path):
        config_path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ConfigError):
            AppConfig.load(config_path)

    @pytest.mark.unit
    def test_wrong_type(self, config_path: Path):
        config_path.write_text(json.dumps({"apikey": ["a"]}), encoding="utf-8")
        with pytest.raises(ConfigError):
            AppConfig.load(config_path)


class TestEnvironment:
    @pytest.mark.unit
    def test_env_key_fills_gap(self, config_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_env")
        config = AppConfig.load(config_path)
        assert config.has_apikey
        assert config.require_apikey() == "gsk_env"
        assert config.apikey == ""

    @pytest.mark.unit
    def test_stored_key_wins(self, config_path: Path, monkeypatch: pytest.MonkeyPatch):
        AppConfig(apikey="gsk_file", config_path=config_path).save()
        monkeypatch.setenv("GROQ_API_KEY", "gsk_env")
        assert AppConfig.load(config_path).require_apikey() == "gsk_file"

    @pytest.mark.unit
    def test_env_key_is_not_saved(self, config_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk_env_secret_1234567890")
        config = AppConfig.load(config_path)
        config.set_value("licensekey", "LIC-1234-5678")
        config.save()

        stored = json.loads(config_path.read_text(encoding="utf-8"))
        assert "apikey" not in stored
        assert stored["licensekey"] == "LIC-1234-5678"

    @pytest.mark.unit
    def test_model_timeout_and_backend(self, config_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BUGBLAZE_MODEL", "mixtral-8x7b-32768")
        monkeypatch.setenv("BUGBLAZE_TIMEOUT", "45")
        monkeypatch.setenv("BUGBLAZE_BACKEND_URL", "https://license.example.com/verify")
        config = AppConfig.load(config_path)
        assert config.groq.model == "mixtral-8x7b-32768"
        assert config.groq.timeout == 45
        assert config.backend_url == "https://license.example.com/verify"

    @pytest.mark.unit
    def test_non_numeric_timeout_ignored(self, config_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("BUGBLAZE_TIMEOUT", "soon")
        assert AppConfig.load(config_path).groq.timeout == 120
