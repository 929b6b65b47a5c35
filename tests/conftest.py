"""
Pytest Fixtures for the turnip_calc Test Suite

Shared fixtures: a validated default Settings object and an environment with
no TURNIP_CALC_* overrides leaking in from the developer's shell.
"""
import os

import pytest

from turnip_calc.core.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip TURNIP_CALC_* variables so config tests see only what they set."""
    for key in list(os.environ):
        if key.startswith("TURNIP_CALC_"):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture(scope="session")
def settings_fixture() -> Settings:
    """Default settings, built without touching any YAML file."""
    return Settings()
