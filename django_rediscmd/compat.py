"""Resolution of serializer and compressor settings into instances."""

from __future__ import annotations

from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

DEFAULT_SERIALIZER = "django_rediscmd.serializers.pickle.PickleSerializer"
DEFAULT_COMPRESSOR = "django_rediscmd.compressors.identity.IdentityCompressor"


def is_serializer_instance(obj: Any) -> bool:
    if isinstance(obj, type):
        return False
    return callable(getattr(obj, "dumps", None)) and callable(getattr(obj, "loads", None))


def is_compressor_instance(obj: Any) -> bool:
    if isinstance(obj, type):
        return False
    return callable(getattr(obj, "compress", None)) and callable(getattr(obj, "decompress", None))


def _resolve(config: str | type, kind: str) -> type:
    if isinstance(config, type):
        return config
    try:
        return import_string(config)
    except ImportError as e:
        msg = f"Could not import {kind} '{config}': {e}"
        raise ImproperlyConfigured(msg) from e


def create_serializer(config: str | type | Any | None, **kwargs: Any) -> Any:
    """Return a serializer for ``config``.

    ``config`` is a dotted path, a class (instantiated with ``kwargs``), a
    ready instance (returned as is) or ``None`` for pickle.
    """
    config = DEFAULT_SERIALIZER if config is None else config
    if is_serializer_instance(config):
        return config
    return _resolve(config, "serializer")(**kwargs)


def create_compressor(config: str | type | Any | None, **kwargs: Any) -> Any:
    """Return a compressor for ``config``; ``None`` means no compression."""
    config = DEFAULT_COMPRESSOR if config is None else config
    if is_compressor_instance(config):
        return config
    return _resolve(config, "compressor")(**kwargs)
