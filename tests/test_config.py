"""Tests for bridge_e2e.config."""

from __future__ import annotations

import pathlib

import pytest

from bridge_e2e import config

_ENV_VARS = (
    "TASKID",
    "TEST_URL",
    "KEPLR_EXTENSION_PATH",
    "WALLET_PROFILE_DIR",
    "SCREENSHOTS_DIR",
    "RESULTS_DIR",
    "LOGS_DIR",
    "HEADLESS",
    "SHOW_VERBOSE",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    config.get_settings.cache_clear()


class TestHarnessSettings:
    def test_defaults(self) -> None:
        settings = config.HarnessSettings()
        assert settings.task_id == "0"
        assert settings.test_url == config.DEFAULT_TEST_URL
        assert settings.extension_path == "./extensions/keplr"
        assert settings.screenshots_dir == "screenshots"
        assert settings.results_dir == "results"
        assert settings.logs_dir == ".logs"
        assert settings.headless is False
        assert settings.show_verbose is False

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TASKID", "17")
        monkeypatch.setenv("TEST_URL", "http://localhost:3000/")
        monkeypatch.setenv("HEADLESS", "true")
        monkeypatch.setenv("SHOW_VERBOSE", "1")
        settings = config.HarnessSettings()
        assert settings.task_id == "17"
        assert settings.test_url == "http://localhost:3000/"
        assert settings.headless is True
        assert settings.show_verbose is True

    def test_validate_config_missing_extension(self, tmp_path: pathlib.Path) -> None:
        settings = config.HarnessSettings(KEPLR_EXTENSION_PATH=str(tmp_path / "missing"))
        assert settings.validate_config() is False

    def test_validate_config_existing_extension(self, tmp_path: pathlib.Path) -> None:
        settings = config.HarnessSettings(KEPLR_EXTENSION_PATH=str(tmp_path))
        assert settings.validate_config() is True


class TestGetSettings:
    def test_cached(self) -> None:
        assert config.get_settings() is config.get_settings()

    def test_cache_clear_rereads(self, monkeypatch: pytest.MonkeyPatch) -> None:
        first = config.get_settings()
        monkeypatch.setenv("TASKID", "42")
        config.get_settings.cache_clear()
        assert config.get_settings() is not first
        assert config.get_settings().task_id == "42"
