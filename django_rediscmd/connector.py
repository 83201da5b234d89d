"""Connectors: the transport the command client hands descriptors to.

A connector takes a :class:`~django_rediscmd.descriptor.CommandDescriptor`,
sends it, and returns the reply as a :class:`~django_rediscmd.types.RawResult`
tagged with the shape it actually had. It never interprets replies and
never retries.

Architecture:
- Connector: Protocol every connector satisfies
- KeyValueConnector: Base class with all logic, library-agnostic
- RedisConnector: Sets class attributes for redis-py
- ValkeyConnector: Sets class attributes for valkey-py

Error replies, AUTH and ACL denials included, are raised as the library's
exceptions and classified by the client. Connection and timeout failures
are raised as :class:`~django_rediscmd.exceptions.ConnectionInterruptedError`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from django.utils.module_loading import import_string

from django_rediscmd.exceptions import ConnectionInterruptedError, _main_exceptions, _ResponseError
from django_rediscmd.types import RawResult, ResponseShape

if TYPE_CHECKING:
    from django_rediscmd.descriptor import CommandDescriptor

# Try to import redis-py and/or valkey-py
_REDIS_AVAILABLE = False
_VALKEY_AVAILABLE = False

try:
    import redis

    _REDIS_AVAILABLE = True
except ImportError:
    redis = None  # type: ignore[assignment]

try:
    import valkey

    _VALKEY_AVAILABLE = True
except ImportError:
    valkey = None  # type: ignore[assignment]

logger = logging.getLogger(__name__)


@runtime_checkable
class Connector(Protocol):
    """What the command client needs from a transport."""

    def execute(self, descriptor: CommandDescriptor) -> RawResult: ...

    def close(self) -> None: ...


def tag_response(value: Any) -> RawResult:
    """Tag a parsed RESP2 reply with its shape.

    Status replies and bulk strings both parse to ``bytes`` and are tagged
    ``BULK``; nil bulk and nil multi-bulk replies are tagged ``BULK`` with
    a ``None`` value.
    """
    if value is None:
        return RawResult(ResponseShape.BULK, None)
    if isinstance(value, bool):
        return RawResult(ResponseShape.BOOLEAN, value)
    if isinstance(value, int):
        return RawResult(ResponseShape.INTEGER, value)
    if isinstance(value, bytes | str):
        return RawResult(ResponseShape.BULK, value)
    if isinstance(value, list):
        return RawResult(ResponseShape.MULTI_BULK, value)
    if isinstance(value, dict):
        return RawResult(ResponseShape.MAPPING, value)
    return RawResult(ResponseShape.NONE, value)


# =============================================================================
# KeyValueConnector - base class (library-agnostic)
# =============================================================================


class KeyValueConnector:
    """Connection-pool backed connector with configurable library.

    Subclasses must set:
    - _lib: The library module (e.g., valkey or redis)
    - _pool_class: The connection pool class

    Args:
        location: Server URL, e.g. ``redis://localhost:6379/0``
        pool_class: Connection pool class or import path
        parser_class: Parser class or import path
        **options: Additional options passed to the connection pool
    """

    _lib: Any = None
    _pool_class: type | None = None

    # Options the pool must not override
    _FORCED_POOL_OPTIONS = {"decode_responses": False, "protocol": 2}

    def __init__(
        self,
        location: str,
        pool_class: str | type | None = None,
        parser_class: str | type | None = None,
        **options: Any,
    ) -> None:
        self._location = location

        if isinstance(pool_class, str):
            pool_class = import_string(pool_class)
        self._pool_class = pool_class or self.__class__._pool_class  # type: ignore[assignment]

        if isinstance(parser_class, str):
            parser_class = import_string(parser_class)
        if parser_class is None and self._lib is not None:
            parser_class = self._lib.connection.DefaultParser

        self._pool_options = {**options, "parser_class": parser_class, **self._FORCED_POOL_OPTIONS}
        self._pool: Any = None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._location}>"

    def _get_connection_pool(self) -> Any:
        if self._pool is None:
            assert self._pool_class is not None, "Subclasses must set _pool_class"  # noqa: S101
            self._pool = self._pool_class.from_url(self._location, **self._pool_options)  # type: ignore[attr-defined]
        return self._pool

    def execute(self, descriptor: CommandDescriptor) -> RawResult:
        """Send one command and read one reply."""
        pool = self._get_connection_pool()
        try:
            connection = pool.get_connection()
        except _ResponseError:
            # AUTH rejected while connecting
            raise
        except _main_exceptions as e:
            logger.warning("Could not get a connection to %s: %s", self._location, e)
            raise ConnectionInterruptedError(connection=pool) from e

        try:
            connection.send_command(*descriptor.to_wire())
            response = connection.read_response()
        except _ResponseError:
            raise
        except _main_exceptions as e:
            logger.warning("%s failed on %s: %s", descriptor.name, self._location, e)
            connection.disconnect()
            raise ConnectionInterruptedError(connection=connection) from e
        finally:
            pool.release(connection)
        return tag_response(response)

    def close(self) -> None:
        """Disconnect every pooled connection."""
        if self._pool is not None:
            self._pool.disconnect()
            self._pool = None


# =============================================================================
# RedisConnector - concrete implementation for redis-py
# =============================================================================

if _REDIS_AVAILABLE:

    class RedisConnector(KeyValueConnector):
        """Connector using redis-py."""

        _lib = redis
        _pool_class = redis.ConnectionPool

else:

    class RedisConnector(KeyValueConnector):  # type: ignore[no-redef]
        """Connector (requires redis-py)."""

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            msg = "RedisConnector requires redis-py. Install with: pip install redis"
            raise ImportError(msg)


# =============================================================================
# ValkeyConnector - concrete implementation for valkey-py
# =============================================================================

if _VALKEY_AVAILABLE:

    class ValkeyConnector(KeyValueConnector):
        """Connector using valkey-py."""

        _lib = valkey
        _pool_class = valkey.ConnectionPool

else:

    class ValkeyConnector(KeyValueConnector):  # type: ignore[no-redef]
        """Connector (requires valkey-py)."""

        def __init__(self, *args: Any, **kwargs: Any) -> None:
            raise ImportError("ValkeyConnector requires valkey-py. Install with: pip install valkey")


__all__ = [
    "_REDIS_AVAILABLE",
    "_VALKEY_AVAILABLE",
    "Connector",
    "KeyValueConnector",
    "RedisConnector",
    "ValkeyConnector",
    "tag_response",
]
