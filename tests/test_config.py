"""Settings loading tests."""

from pathlib import Path

import pytest

from ashajourney.config import DEFAULT_PROGRESS_DB, LockPolicy, load_settings, parse_bool


class TestParseBool:

    @pytest.mark.parametrize("value", ["1", "true", "TRUE", " yes ", "on"])
    def test_true_values(self, value):
        assert parse_bool(value) is True

    @pytest.mark.parametrize("value", ["0", "false", "No", "off", ""])
    def test_false_values(self, value):
        assert parse_bool(value) is False

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            parse_bool("maybe")


class TestLoadSettings:

    def test_defaults(self):
        settings = load_settings(env={})
        assert settings.bypass_mode is False
        assert settings.lock_policy == LockPolicy.SEQUENTIAL
        assert settings.progress_db == DEFAULT_PROGRESS_DB
        assert settings.catalog_path is None
        assert settings.log_level == "INFO"

    def test_values_from_env(self, tmp_path):
        settings = load_settings(env={
            "ASHA_BYPASS_MODE": "true",
            "ASHA_LOCK_POLICY": "Open",
            "ASHA_PROGRESS_DB": str(tmp_path / "p.db"),
            "ASHA_CATALOG_PATH": str(tmp_path / "catalog.yaml"),
            "ASHA_LOG_LEVEL": "debug",
        })
        assert settings.bypass_mode is True
        assert settings.lock_policy == LockPolicy.OPEN
        assert settings.progress_db == tmp_path / "p.db"
        assert settings.catalog_path == Path(tmp_path / "catalog.yaml")
        assert settings.log_level == "DEBUG"

    def test_invalid_lock_policy(self):
        with pytest.raises(ValueError):
            load_settings(env={"ASHA_LOCK_POLICY": "random"})

    def test_invalid_log_level(self):
        with pytest.raises(ValueError):
            load_settings(env={"ASHA_LOG_LEVEL": "loud"})

    def test_env_file(self, tmp_path, monkeypatch):
        # setenv first so teardown also removes the value loaded from .env
        monkeypatch.setenv("ASHA_BYPASS_MODE", "no")
        monkeypatch.delenv("ASHA_BYPASS_MODE")
        env_file = tmp_path / ".env"
        env_file.write_text("ASHA_BYPASS_MODE=yes\n", encoding="utf-8")
        settings = load_settings(env_file=env_file)
        assert settings.bypass_mode is True
