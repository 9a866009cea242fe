"""
Shared pytest fixtures for country-intel tests.

Environment variables are set before any application module is imported so
that cached settings and the app module pick up test values.
"""
from __future__ import annotations

import os
from unittest.mock import patch

import pytest

os.environ.setdefault("NODE_ENV", "test")
os.environ.setdefault("DISABLE_MCP", "1")
os.environ.setdefault("PAYMENTS_ENABLED", "false")

from country_intel.tests.utils import RoutedAsyncClient  # noqa: E402


@pytest.fixture(autouse=True)
def test_environment():
    """Ensure test environment is set for all tests."""
    old_env = os.environ.copy()
    os.environ["NODE_ENV"] = "test"
    os.environ["DISABLE_MCP"] = "1"
    yield
    os.environ.clear()
    os.environ.update(old_env)


@pytest.fixture
def routed_client():
    """Factory patching the shared HTTP client with a ``RoutedAsyncClient``."""
    patchers = []

    def _install(routes):
        client = RoutedAsyncClient(routes)
        patcher = patch("country_intel.providers.base.get_http_client", return_value=client)
        patcher.start()
        patchers.append(patcher)
        return client

    yield _install

    for patcher in patchers:
        patcher.stop()
