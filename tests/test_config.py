# =============================================================================
# test_config.py - Configuration Tests
# =============================================================================
# Tests for BytebeatConfig defaults, environment overrides and the default
# configuration instance.
# =============================================================================

import logging

import pytest

from bytebeat.config import BytebeatConfig, get_default_config, set_default_config


class TestDefaults:
    """Values used when nothing is configured."""

    def test_defaults(self):
        config = BytebeatConfig()
        assert config.sample_rate == 8000
        assert config.duration_seconds == 10.0
        assert config.max_errors == 100
        assert config.c_compiler == "cc"
        assert config.c_flags == "-std=c99 -O0 -fwrapv"
        assert config.reference_samples == 65536

    def test_sample_count(self):
        assert BytebeatConfig().sample_count == 80000
        assert BytebeatConfig(sample_rate=100, duration_seconds=2.5).sample_count == 250

    def test_compiler_command(self):
        config = BytebeatConfig(c_compiler="gcc", c_flags="-O2 -fwrapv -DNAME='a b'")
        assert config.compiler_command() == ["gcc", "-O2", "-fwrapv", "-DNAME=a b"]


class TestFromEnv:
    """Environment variable overrides."""

    def test_unset_keeps_defaults(self):
        assert BytebeatConfig.from_env() == BytebeatConfig()

    def test_all_variables(self, monkeypatch):
        monkeypatch.setenv("BYTEBEAT_SAMPLE_RATE", "44100")
        monkeypatch.setenv("BYTEBEAT_DURATION", "2.5")
        monkeypatch.setenv("BYTEBEAT_MAX_ERRORS", "7")
        monkeypatch.setenv("BYTEBEAT_CC", "clang")
        monkeypatch.setenv("BYTEBEAT_CFLAGS", "-std=c11 -fwrapv")

        config = BytebeatConfig.from_env()
        assert config.sample_rate == 44100
        assert config.duration_seconds == 2.5
        assert config.max_errors == 7
        assert config.compiler_command() == ["clang", "-std=c11", "-fwrapv"]

    @pytest.mark.parametrize("variable,text", [
        ("BYTEBEAT_SAMPLE_RATE", "fast"),
        ("BYTEBEAT_SAMPLE_RATE", "0"),
        ("BYTEBEAT_DURATION", "-1"),
        ("BYTEBEAT_MAX_ERRORS", "1.5"),
    ])
    def test_invalid_values_ignored(self, monkeypatch, caplog, variable, text):
        monkeypatch.setenv(variable, text)
        with caplog.at_level(logging.WARNING, logger="bytebeat.config"):
            config = BytebeatConfig.from_env()

        assert config == BytebeatConfig()
        assert f"Ignoring {variable}" in caplog.text


class TestDefaultConfig:
    """The process-wide default configuration."""

    def test_created_from_env(self, monkeypatch):
        monkeypatch.setenv("BYTEBEAT_SAMPLE_RATE", "22050")
        assert get_default_config().sample_rate == 22050

    def test_cached(self):
        assert get_default_config() is get_default_config()

    def test_override_and_reset(self):
        custom = BytebeatConfig(max_errors=3)
        set_default_config(custom)
        assert get_default_config() is custom

        set_default_config(None)
        assert get_default_config() is not custom
        assert get_default_config().max_errors == 100
