"""Shared fixtures for configwatch tests."""

import os

import pytest

from configwatch.common.logging_setup import set_service_log_level
from configwatch.services.config import ConfigCache, ConfigSnapshot


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host CONFIGWATCH_* settings out of tests"""
    for key in list(os.environ):
        if key.startswith("CONFIGWATCH_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_log_level():
    set_service_log_level("INFO")
    yield
    set_service_log_level("INFO")


@pytest.fixture
def cache():
    return ConfigCache()


@pytest.fixture
def gpt_x():
    return ConfigSnapshot.create(
        model_name="gpt-x",
        parameters={"temperature": 0.2, "maxTokens": 500},
        messages=[{"role": "system", "content": "You are helpful."}],
    )


@pytest.fixture
def ai_config_payload():
    """AI config flag value as returned by the provider"""
    return {
        "_ldMeta": {"enabled": True, "variationKey": "v2", "version": 3},
        "model": {
            "name": "gpt-4o",
            "parameters": {"temperature": 0.3, "maxTokens": 2048},
            "custom": {"topP": 0.9},
        },
        "messages": [
            {"role": "system", "content": "You are a support bot."},
            {"role": "user", "content": "{{question}}"},
        ],
    }
