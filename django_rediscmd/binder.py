"""Value binding: turning caller values into the bytes the protocol sends.

Four kinds of values bind to the same canonical byte form:

- raw bytes (``bytes``, ``bytearray``, ``memoryview``) are sent unchanged
- text (``str``) is UTF-8 encoded
- numbers (``int``, ``float``, ``Decimal``) are sent as decimal text, so that
  ``INCR``/``DECR`` on the server work on numerically-set values
- any other object is serialized and wrapped in a frame

A frame is ``FRAME_MAGIC + serializer tag + compressor tag + payload``.
``0xC0`` never starts valid UTF-8, so a framed object is never mistaken for
text or a number on the way back.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from django.core.exceptions import ImproperlyConfigured

from django_rediscmd.compat import create_compressor, create_serializer
from django_rediscmd.exceptions import CompressorError, RedisException, SerializerError

if TYPE_CHECKING:
    from django_rediscmd.types import KeyT, ValueT

logger = logging.getLogger(__name__)

FRAME_MAGIC = b"\xc0\x01"
HEADER_LENGTH = len(FRAME_MAGIC) + 2


class Serialized:
    """Force a value through the object serializer.

    Useful for text or numbers that must come back as the original Python
    object rather than as decoded bytes::

        client.set("greeting", Serialized("hello"))
        client.load(client.get("greeting"))  # -> "hello"
    """

    __slots__ = ("obj",)

    def __init__(self, obj: Any) -> None:
        self.obj = obj

    def __repr__(self) -> str:
        return f"Serialized({self.obj!r})"


def bind_key(key: KeyT) -> bytes:
    """Validate a key and return its wire form."""
    if isinstance(key, str):
        if not key:
            raise RedisException("Key must not be empty")
        try:
            return key.encode(errors="surrogateescape")
        except UnicodeEncodeError as e:
            raise RedisException(f"Key {key!r} is not UTF-8 representable") from e
    if isinstance(key, bytes | bytearray | memoryview):
        if not len(key):
            raise RedisException("Key must not be empty")
        return bytes(key)
    raise RedisException(f"Key must be str or bytes, not {type(key).__name__}")


def bind_keys(keys: Iterable[KeyT]) -> list[bytes]:
    bound = [bind_key(k) for k in keys]
    if not bound:
        raise RedisException("At least one key is required")
    return bound


def bind_number(value: int | float | Decimal) -> bytes:
    """Encode a number as locale-independent decimal text."""
    if isinstance(value, bool):
        raise RedisException("Booleans are not numbers; wrap them in Serialized() to store them")
    if isinstance(value, int):
        return str(value).encode()
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise RedisException(f"Number {value!r} is not finite")
        return format(value, "f").encode()
    if math.isnan(value):
        raise RedisException("NaN can not be sent as a number")
    if math.isinf(value):
        return b"inf" if value > 0 else b"-inf"
    return repr(value).encode()


def _check_tags(codecs: list, kind: str) -> None:
    """Every codec needs a distinct one-byte tag for the frame header."""
    seen: set[bytes] = set()
    for codec in codecs:
        tag = getattr(codec, "tag", None)
        if not isinstance(tag, bytes) or len(tag) != 1:
            msg = f"{kind} {type(codec).__name__} must define a one-byte 'tag', got {tag!r}"
            raise ImproperlyConfigured(msg)
        if tag in seen:
            msg = f"{kind} tag {tag!r} is used by more than one configured {kind}"
            raise ImproperlyConfigured(msg)
        seen.add(tag)


class ValueBinder:
    """Binds caller values to canonical bytes and decodes framed objects.

    Args:
        serializer: Serializer config (dotted path, class, instance or list).
            The first entry serializes; every entry can deserialize.
        compressor: Compressor config, same forms. ``None`` disables compression.
        serializer_options: Keyword arguments for serializer constructors.
        compressor_options: Keyword arguments for compressor constructors.
    """

    def __init__(
        self,
        serializer: str | list | type | Any | None = None,
        compressor: str | list | type | Any | None = None,
        serializer_options: dict[str, Any] | None = None,
        compressor_options: dict[str, Any] | None = None,
    ) -> None:
        self._serializers = self._create_serializers(serializer, serializer_options or {})
        self._compressors = self._create_compressors(compressor, compressor_options or {})

    # =========================================================================
    # Serializer/Compressor Setup
    # =========================================================================

    def _create_serializers(self, config: str | list | type | Any | None, options: dict) -> list:
        """Create serializer instance(s) from config."""
        if isinstance(config, list):
            serializers = [create_serializer(item, **options) for item in config]
        else:
            serializers = [create_serializer(config, **options)]
        if not serializers:
            raise SerializerError("No serializers configured")
        _check_tags(serializers, "serializer")
        return serializers

    def _create_compressors(self, config: str | list | type | Any | None, options: dict) -> list:
        """Create compressor instance(s) from config."""
        if config is None:
            return []
        if isinstance(config, list):
            compressors = [create_compressor(item, **options) for item in config]
        else:
            compressors = [create_compressor(config, **options)]
        _check_tags(compressors, "compressor")
        return compressors

    @property
    def serializer(self) -> Any:
        return self._serializers[0]

    @property
    def compressor(self) -> Any | None:
        return self._compressors[0] if self._compressors else None

    # =========================================================================
    # Binding
    # =========================================================================

    def bind(self, value: ValueT) -> bytes:
        """Return the canonical byte form of ``value``."""
        if value is None:
            raise RedisException("Value must not be None")
        if isinstance(value, Serialized):
            return self.dump(value.obj)
        if isinstance(value, bytes):
            return value
        if isinstance(value, bytearray | memoryview):
            return bytes(value)
        if isinstance(value, str):
            try:
                return value.encode()
            except UnicodeEncodeError as e:
                raise RedisException("Text value is not UTF-8 representable") from e
        if isinstance(value, int | float | Decimal) and not isinstance(value, bool):
            return bind_number(value)
        return self.dump(value)

    def bind_many(self, values: Iterable[ValueT]) -> list[bytes]:
        bound = [self.bind(v) for v in values]
        if not bound:
            raise RedisException("At least one value is required")
        return bound

    def bind_mapping(self, mapping: Mapping[KeyT, ValueT] | Iterable[tuple[KeyT, ValueT]]) -> list[bytes]:
        """Flatten a key/value mapping into ``[key, value, key, value, ...]``.

        Keys must be unique once encoded; ``"a"`` and ``b"a"`` collide.
        """
        items = mapping.items() if isinstance(mapping, Mapping) else mapping
        seen: set[bytes] = set()
        args: list[bytes] = []
        for key, value in items:
            bkey = bind_key(key)
            if bkey in seen:
                raise RedisException(f"Duplicate key {key!r} in mapping")
            seen.add(bkey)
            args.append(bkey)
            args.append(self.bind(value))
        if not args:
            raise RedisException("Mapping must not be empty")
        return args

    # =========================================================================
    # Object framing
    # =========================================================================

    def dump(self, obj: Any) -> bytes:
        """Serialize ``obj`` into a frame."""
        serializer = self.serializer
        try:
            payload = serializer.dumps(obj)
        except SerializerError:
            raise
        except Exception as e:
            # Third-party serializers may raise anything
            raise SerializerError(f"{type(serializer).__name__} rejected {type(obj).__name__}") from e
        if not isinstance(payload, bytes | bytearray):
            raise SerializerError(f"{type(serializer).__name__}.dumps() must return bytes")

        compressor_tag = b"-"
        compressor = self.compressor
        if compressor is not None and compressor.should_compress(payload):
            payload = compressor.compress(payload)
            compressor_tag = compressor.tag
        return FRAME_MAGIC + serializer.tag + compressor_tag + bytes(payload)

    def is_framed(self, data: bytes | None) -> bool:
        return data is not None and len(data) >= HEADER_LENGTH and data.startswith(FRAME_MAGIC)

    def load(self, data: bytes) -> Any:
        """Decode a frame produced by :meth:`dump`."""
        if not self.is_framed(data):
            raise RedisException("Value is not a serialized object")
        offset = len(FRAME_MAGIC)
        serializer_tag = data[offset : offset + 1]
        compressor_tag = data[offset + 1 : offset + 2]
        payload = data[HEADER_LENGTH:]

        if compressor_tag != b"-":
            payload = self._decompress(compressor_tag, payload)
        return self._deserialize(serializer_tag, payload)

    def _decompress(self, tag: bytes, payload: bytes) -> bytes:
        """Decompress with the configured compressor carrying ``tag``."""
        for compressor in self._compressors:
            if compressor.tag == tag:
                try:
                    return compressor.decompress(payload)
                except CompressorError:
                    raise
                except Exception as e:
                    raise CompressorError(f"{type(compressor).__name__} could not decompress the payload") from e
        raise CompressorError(f"No configured compressor for tag {tag!r}")

    def _deserialize(self, tag: bytes, payload: bytes) -> Any:
        """Deserialize with the configured serializer carrying ``tag``."""
        for serializer in self._serializers:
            if serializer.tag == tag:
                try:
                    return serializer.loads(payload)
                except SerializerError:
                    raise
                except Exception as e:
                    raise SerializerError(f"{type(serializer).__name__} could not load the payload") from e
        logger.warning("Framed value uses serializer tag %r which is not configured", tag)
        raise SerializerError(f"No configured serializer for tag {tag!r}")
