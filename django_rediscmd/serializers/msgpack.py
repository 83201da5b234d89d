from typing import Any

import msgpack

from django_rediscmd.exceptions import SerializerError
from django_rediscmd.serializers.base import BaseSerializer


class MessagePackSerializer(BaseSerializer):
    """Compact binary encoding via ``msgpack``.

    Handles ``None``, booleans, numbers, text, bytes, lists and dicts.
    Datetimes, decimals and custom classes are rejected with
    :class:`SerializerError`.
    """

    tag = b"m"

    def dumps(self, obj: Any) -> bytes:
        try:
            return msgpack.packb(obj, use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as e:
            raise SerializerError from e

    def loads(self, data: bytes) -> Any:
        try:
            return msgpack.unpackb(data, raw=False)
        except Exception as e:
            raise SerializerError from e
