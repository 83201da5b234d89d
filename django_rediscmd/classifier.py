"""Failure classification and reply-shape verification.

Everything a connector returns or raises passes through this module before
the client builds a return value, so an ambiguous or partially-understood
reply is never handed to the caller as a valid result.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from django_rediscmd.exceptions import (
    ErrorKind,
    ProviderError,
    RedisException,
    ResponseShapeError,
    _ResponseError,
)
from django_rediscmd.types import RawResult, ResponseShape

if TYPE_CHECKING:
    from django_rediscmd.descriptor import CommandDescriptor

logger = logging.getLogger(__name__)

# Declared shape -> reply shapes a connector may report for it.
# RESP2 does not distinguish status replies from bulk strings once parsed,
# so every status-like expectation also accepts BULK.
_COMPATIBLE: dict[ResponseShape, frozenset[ResponseShape]] = {
    ResponseShape.NONE: frozenset({ResponseShape.NONE, ResponseShape.STATUS, ResponseShape.BULK}),
    ResponseShape.STATUS: frozenset({ResponseShape.STATUS, ResponseShape.BULK}),
    ResponseShape.BOOLEAN: frozenset({ResponseShape.BOOLEAN, ResponseShape.INTEGER}),
    ResponseShape.INTEGER: frozenset({ResponseShape.INTEGER}),
    ResponseShape.BULK: frozenset({ResponseShape.BULK}),
    ResponseShape.MULTI_BULK: frozenset({ResponseShape.MULTI_BULK}),
    ResponseShape.MULTI_BULK_WITH_SCORES: frozenset({ResponseShape.MULTI_BULK_WITH_SCORES, ResponseShape.MULTI_BULK}),
    ResponseShape.MAPPING: frozenset({ResponseShape.MAPPING, ResponseShape.BULK}),
}

# Shapes for which a nil reply is a legitimate value
_NULLABLE = frozenset({ResponseShape.BULK, ResponseShape.MULTI_BULK})


def classify(exc: BaseException) -> ErrorKind:
    """Return the kind of a failure. Every exception maps to exactly one kind."""
    if isinstance(exc, (RedisException, *_ResponseError)):
        return ErrorKind.DOMAIN
    if isinstance(exc, ProviderError):
        return ErrorKind.PROVIDER
    return ErrorKind.RUNTIME


def translate(exc: Exception) -> Exception:
    """Map a connector failure onto the exception the caller should see.

    Error replies become :class:`RedisException` carrying the server message.
    Everything else is returned unchanged: runtime failures propagate verbatim.
    """
    if isinstance(exc, _ResponseError):
        translated = RedisException(str(exc))
        translated.__cause__ = exc
        return translated
    return exc


def _fail(descriptor: CommandDescriptor, raw: RawResult | Any, detail: str | None = None) -> ResponseShapeError:
    actual = raw.shape.value if isinstance(raw, RawResult) else type(raw).__name__
    error = ResponseShapeError(descriptor.name, descriptor.shape.value, actual, detail)
    logger.error("Reply shape mismatch: %s", error)
    return error


def verify(descriptor: CommandDescriptor, raw: RawResult) -> Any:
    """Check ``raw`` against the shape ``descriptor`` declares and return its value.

    Raises:
        ResponseShapeError: the reply does not fit the declared shape.
    """
    if not isinstance(raw, RawResult):
        raise _fail(descriptor, raw, "connector did not return a RawResult")

    expected = descriptor.shape
    value = raw.value
    # RESP2 nil bulk and nil multi-bulk replies are both tagged BULK once parsed
    nil_multi_bulk = value is None and expected is ResponseShape.MULTI_BULK and raw.shape is ResponseShape.BULK
    if raw.shape not in _COMPATIBLE[expected] and not nil_multi_bulk:
        raise _fail(descriptor, raw)
    if value is None and expected in _NULLABLE:
        return None
    if value is None:
        if raw.shape is ResponseShape.NONE:
            return None
        raise _fail(descriptor, raw, "unexpected nil reply")

    if expected is ResponseShape.BOOLEAN:
        if isinstance(value, bool):
            return value
        if value not in (0, 1):
            raise _fail(descriptor, raw, f"integer {value!r} is not a boolean")
    elif expected is ResponseShape.INTEGER:
        if not isinstance(value, int):
            raise _fail(descriptor, raw, f"value of type {type(value).__name__}")
    elif expected is ResponseShape.MAPPING:
        if not isinstance(value, dict | bytes | str):
            raise _fail(descriptor, raw, f"value of type {type(value).__name__}")
    elif expected in (ResponseShape.BULK, ResponseShape.STATUS, ResponseShape.NONE):
        if not isinstance(value, bytes | str):
            raise _fail(descriptor, raw, f"value of type {type(value).__name__}")
    elif expected is ResponseShape.MULTI_BULK:
        if not isinstance(value, list):
            raise _fail(descriptor, raw, f"value of type {type(value).__name__}")
    elif expected is ResponseShape.MULTI_BULK_WITH_SCORES:
        if not isinstance(value, list) or len(value) % 2:
            raise _fail(descriptor, raw, "member/score pairs expected")
    return value
