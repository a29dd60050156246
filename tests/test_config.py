"""Tests for configuration."""

import pytest

from src.config import Config
from src.main import create_relay, load_config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "GROQ_API_KEY",
        "TAVILY_API_KEY",
        "PORT",
        "STATIC_DIR",
        "GROQ_MODEL",
        "MAX_AI_PER_DAY",
        "MAX_WEB_PER_DAY",
        "UPSTREAM_TIMEOUT_SECONDS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_load_config_defaults(clean_env):
    """Test missing keys are allowed and defaults apply."""
    config = load_config()

    assert config.groq_api_key is None
    assert config.tavily_api_key is None
    assert config.port == 5000
    assert config.static_dir == "public"
    assert config.groq_model == "llama-3.1-8b-instant"
    assert config.max_ai_per_day == 20
    assert config.max_web_per_day == 100
    assert config.upstream_timeout is None


def test_load_config_from_env(clean_env):
    clean_env.setenv("GROQ_API_KEY", "gsk-test")
    clean_env.setenv("TAVILY_API_KEY", "tvly-test")
    clean_env.setenv("PORT", "8080")
    clean_env.setenv("MAX_AI_PER_DAY", "5")
    clean_env.setenv("UPSTREAM_TIMEOUT_SECONDS", "30")

    config = load_config()

    assert config.groq_api_key == "gsk-test"
    assert config.tavily_api_key == "tvly-test"
    assert config.port == 8080
    assert config.max_ai_per_day == 5
    assert config.upstream_timeout == 30.0


def test_load_config_blank_key_is_missing(clean_env):
    clean_env.setenv("GROQ_API_KEY", "   ")
    assert load_config().groq_api_key is None


def test_load_config_invalid_port(clean_env):
    clean_env.setenv("PORT", "not-a-port")
    with pytest.raises(ValueError):
        load_config()


def test_create_relay_only_builds_configured_clients():
    relay = create_relay(Config(groq_api_key="gsk-test", tavily_api_key=None, max_web_per_day=3))

    assert relay.groq is not None
    assert relay.groq.api_key == "gsk-test"
    assert relay.tavily is None
    assert relay.max_ai_per_day == 20
    assert relay.max_web_per_day == 3
