"""Tests for .env config helpers."""

from __future__ import annotations

import logging

import pytest

import latex_infix.config as config


@pytest.fixture()
def temp_env_file(tmp_path, monkeypatch):
    env_file = tmp_path / ".env.test"
    monkeypatch.setattr(config, "_ENV_FILE", env_file)
    for key in (
        "LATEX_INFIX_PORT",
        "LATEX_INFIX_MODE",
        "LATEX_INFIX_MAX_LENGTH",
        "LATEX_INFIX_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return env_file


class TestEnvFile:
    def test_read_config_missing_file(self, temp_env_file):
        assert config.read_config() == {}

    def test_read_config_parses_and_strips_quotes(self, temp_env_file):
        temp_env_file.write_text(
            "\n".join(
                [
                    "# comment",
                    "LATEX_INFIX_PORT='9999'",
                    'LATEX_INFIX_LOG_LEVEL="DEBUG"',
                    "INVALID-LINE",
                    "lowercase_key=value",
                ]
            )
            + "\n"
        )

        assert config.read_config() == {
            "LATEX_INFIX_PORT": "9999",
            "LATEX_INFIX_LOG_LEVEL": "DEBUG",
        }

    def test_get_key_falls_back_to_os_environ(self, temp_env_file, monkeypatch):
        monkeypatch.setenv("LATEX_INFIX_PORT", "7777")
        assert config.get_key("LATEX_INFIX_PORT") == "7777"

    def test_get_key_prefers_dotenv_even_when_empty(self, temp_env_file, monkeypatch):
        temp_env_file.write_text("LATEX_INFIX_MODE=\n")
        monkeypatch.setenv("LATEX_INFIX_MODE", "lenient")
        assert config.get_key("LATEX_INFIX_MODE") == ""


class TestPort:
    def test_default(self, temp_env_file):
        assert config.get_port() == 8770

    def test_uses_configured_value(self, temp_env_file):
        temp_env_file.write_text("LATEX_INFIX_PORT=9012\n")
        assert config.get_port() == 9012

    @pytest.mark.parametrize("raw_value", ["abc", "0", "65536", "-1"])
    def test_invalid_values_fallback(self, temp_env_file, raw_value):
        temp_env_file.write_text(f"LATEX_INFIX_PORT={raw_value}\n")
        assert config.get_port(default=8765) == 8765


class TestMode:
    def test_default_is_strict(self, temp_env_file):
        assert config.get_mode() == "strict"

    def test_case_insensitive(self, temp_env_file, monkeypatch):
        monkeypatch.setenv("LATEX_INFIX_MODE", "Lenient")
        assert config.get_mode() == "lenient"

    def test_unknown_mode_falls_back(self, temp_env_file, monkeypatch):
        monkeypatch.setenv("LATEX_INFIX_MODE", "relaxed")
        assert config.get_mode() == "strict"


class TestLimits:
    def test_max_length_default(self, temp_env_file):
        assert config.get_max_length() == 2000

    def test_max_length_configured(self, temp_env_file, monkeypatch):
        monkeypatch.setenv("LATEX_INFIX_MAX_LENGTH", "50")
        assert config.get_max_length() == 50

    @pytest.mark.parametrize("raw_value", ["many", "0", "-5"])
    def test_max_length_invalid(self, temp_env_file, monkeypatch, raw_value):
        monkeypatch.setenv("LATEX_INFIX_MAX_LENGTH", raw_value)
        assert config.get_max_length() == 2000

    def test_log_level(self, temp_env_file, monkeypatch):
        assert config.get_log_level() == logging.INFO
        monkeypatch.setenv("LATEX_INFIX_LOG_LEVEL", "debug")
        assert config.get_log_level() == logging.DEBUG
        monkeypatch.setenv("LATEX_INFIX_LOG_LEVEL", "chatty")
        assert config.get_log_level() == logging.INFO
