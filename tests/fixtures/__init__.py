"""Test fixtures for django-rediscmd."""

from tests.fixtures.connector import ScriptedConnector, client, connector
from tests.fixtures.containers import RedisContainerInfo, redis_client, redis_container

__all__ = [
    "RedisContainerInfo",
    "ScriptedConnector",
    "client",
    "connector",
    "redis_client",
    "redis_container",
]
