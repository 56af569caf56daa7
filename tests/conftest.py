"""Pytest configuration and fixtures for SPIGOT tests."""

import os

import pytest


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Clear SPIGOT-related environment variables before each test."""
    env_prefixes = ("SPIGOT_", "REDIS_")
    for key in list(os.environ.keys()):
        if key.startswith(env_prefixes):
            monkeypatch.delenv(key, raising=False)
