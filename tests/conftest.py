"""Pytest configuration for django-rediscmd tests."""

import pytest

from tests.fixtures import client, connector, redis_client, redis_container

# Re-export fixtures so pytest can discover them
__all__ = [
    "client",
    "connector",
    "redis_client",
    "redis_container",
]


def pytest_collection_modifyitems(config, items):
    """Mark every test that needs a live server."""
    for item in items:
        if "redis_client" in getattr(item, "fixturenames", ()):
            item.add_marker(pytest.mark.integration)
