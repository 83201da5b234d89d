# Derived from django-redis (https://github.com/jazzband/django-redis)
# Copyright (c) 2011-2016 Andrey Antukh <niwi@niwi.nz>
# Copyright (c) 2011 Sean Bleier
# Licensed under BSD-3-Clause
#
# django-redis was used as inspiration for this project.

"""Exceptions for django-rediscmd.

Every failure raised by a command falls into exactly one of three kinds:

- ``ErrorKind.DOMAIN``: the caller can correct it (error reply from the
  server, empty key, NaN score, ...). Raised as :class:`RedisException`.
- ``ErrorKind.PROVIDER``: this package or its configuration is defective
  (serializer contract broken, unexpected reply shape, SORT query reuse).
  Raised as a :class:`ProviderError` subclass.
- ``ErrorKind.RUNTIME``: the transport failed (connection lost, timeout).
  Raised by the connector as :class:`ConnectionInterruptedError` and passed
  through unchanged.
"""

import socket
from enum import StrEnum

# Build exception tuples from available libraries (redis-py / valkey-py).
# These are used by the connector and the classifier.
_exception_list: list[type[Exception]] = [socket.timeout]
# Error replies. AUTH and ACL denials subclass ConnectionError in both
# libraries; they are still error replies.
_response_errors: list[type[Exception]] = []

try:
    from redis.exceptions import AuthenticationError as RedisAuthenticationError
    from redis.exceptions import ConnectionError as RedisConnectionError
    from redis.exceptions import ResponseError as RedisResponseError
    from redis.exceptions import TimeoutError as RedisTimeoutError

    _response_errors.extend([RedisResponseError, RedisAuthenticationError])
    _exception_list.extend([RedisConnectionError, RedisTimeoutError])
except ImportError:
    pass

try:
    from redis.exceptions import AuthorizationError as RedisAuthorizationError

    _response_errors.append(RedisAuthorizationError)
except ImportError:
    pass

try:
    from valkey.exceptions import AuthenticationError as ValkeyAuthenticationError
    from valkey.exceptions import ConnectionError as ValkeyConnectionError
    from valkey.exceptions import ResponseError as ValkeyResponseError
    from valkey.exceptions import TimeoutError as ValkeyTimeoutError

    _response_errors.extend([ValkeyResponseError, ValkeyAuthenticationError])
    _exception_list.extend([ValkeyConnectionError, ValkeyTimeoutError])
except ImportError:
    pass

try:
    from valkey.exceptions import AuthorizationError as ValkeyAuthorizationError

    _response_errors.append(ValkeyAuthorizationError)
except ImportError:
    pass

_main_exceptions = tuple(_exception_list)
_ResponseError = tuple(_response_errors)


class ErrorKind(StrEnum):
    """The three disjoint failure kinds."""

    DOMAIN = "domain"
    PROVIDER = "provider"
    RUNTIME = "runtime"


class RedisException(Exception):
    """Raised for caller-correctable failures.

    This covers error replies sent by the server (``WRONGTYPE``, ``NOAUTH``,
    malformed patterns, ...) and arguments rejected locally before anything
    is sent (empty keys, ``None`` values, NaN scores, bad ranges).

    Attributes:
        message: Human-readable message, either remote-supplied or local.

    Example:
        Handling a type mismatch::

            from django_rediscmd import get_client
            from django_rediscmd.exceptions import RedisException

            try:
                get_client().lpush("a-string-key", "value")
            except RedisException as e:
                logger.warning("push rejected: %s", e.message)
    """

    kind = ErrorKind.DOMAIN

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ProviderError(Exception):
    """Raised when a local invariant of the command layer is violated.

    This never signals a problem with the caller's data; it means the
    command mapping, a configured serializer/compressor, or the way a
    SORT query was driven is wrong.
    """

    kind = ErrorKind.PROVIDER


class SerializerError(ProviderError):
    """Raised when serialization or deserialization fails.

    This can occur when:
    - The serializer encounters an incompatible type
    - The data is corrupted
    - No configured serializer matches the tag of a framed value
    """


class CompressorError(ProviderError):
    """Raised when compression or decompression fails.

    This can occur when:
    - The data is corrupted and cannot be decompressed
    - The compressor is misconfigured
    - No configured compressor matches the tag of a framed value
    """


class ResponseShapeError(ProviderError):
    """Raised when a reply does not have the shape its command declares.

    Attributes:
        command: The command name.
        expected: The declared response shape.
        actual: The shape the connector reported.
    """

    def __init__(self, command: str, expected: str, actual: str, detail: str | None = None) -> None:
        self.command = command
        self.expected = expected
        self.actual = actual
        self.detail = detail
        super().__init__(str(self))

    def __str__(self) -> str:
        msg = f"{self.command} expected a '{self.expected}' reply, got '{self.actual}'"
        if self.detail:
            msg += f" ({self.detail})"
        return msg


class SortQueryStateError(ProviderError):
    """Raised when a SORT query is reused after execution or mutated concurrently."""


class ConnectionInterruptedError(Exception):  # noqa: A001
    """Raised by connectors when the transport fails.

    Attributes:
        connection: The connection (or pool) the failure happened on.
    """

    kind = ErrorKind.RUNTIME

    def __init__(self, connection: object, parent: Exception | None = None) -> None:
        self.connection = connection
        self.parent = parent
        super().__init__(connection)

    def __str__(self) -> str:
        error_type = type(self.__cause__ or self.parent).__name__
        error_msg = str(self.__cause__ or self.parent)
        return f"Redis {error_type}: {error_msg}"
