"""Container fixtures for Redis using testcontainers."""

from collections.abc import Iterator
from typing import NamedTuple

import docker
import pytest
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from django_rediscmd.client import CommandClient
from django_rediscmd.connector import RedisConnector

DEFAULT_REDIS_IMAGE = "redis:latest"


class RedisContainerInfo(NamedTuple):
    """Container connection info plus the container object for internal operations."""

    host: str
    port: int
    container: DockerContainer

    @property
    def url(self) -> str:
        return f"redis://{self.host}:{self.port}/0"


def _docker_available() -> bool:
    try:
        docker.from_env().ping()
    except Exception:  # noqa: BLE001
        return False
    return True


def _start_redis_container(image: str) -> RedisContainerInfo:
    """Start a Redis container with the given image."""
    container = DockerContainer(image)
    container.with_exposed_ports(6379)
    container.with_command("redis-server --enable-debug-command yes --protected-mode no")
    container.start()
    wait_for_logs(container, "Ready to accept connections")
    return RedisContainerInfo(
        host=container.get_container_host_ip(),
        port=int(container.get_exposed_port(6379)),
        container=container,
    )


@pytest.fixture(scope="session")
def redis_container() -> Iterator[RedisContainerInfo]:
    """A Redis server shared by the whole session; skips when Docker is unavailable."""
    if not _docker_available():
        pytest.skip("Docker is not available")
    info = _start_redis_container(DEFAULT_REDIS_IMAGE)
    yield info
    info.container.stop()


@pytest.fixture
def redis_client(redis_container: RedisContainerInfo) -> Iterator[CommandClient]:
    """A command client on an empty database."""
    client = CommandClient(RedisConnector(redis_container.url))
    client.flushdb()
    yield client
    client.close()
