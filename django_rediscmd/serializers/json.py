import json
from typing import Any

from django.core.serializers.json import DjangoJSONEncoder

from django_rediscmd.exceptions import SerializerError
from django_rediscmd.serializers.base import BaseSerializer


class JSONSerializer(BaseSerializer):
    """Stores objects as UTF-8 JSON documents.

    Readable from any language, at the cost of round-tripping only JSON types.
    Dates, decimals, UUIDs and lazy strings are written through
    ``DjangoJSONEncoder`` and come back as strings.

    Set ``encoder_class`` on a subclass to customise encoding::

        REDISCMD = {
            "default": {
                "LOCATION": "redis://localhost:6379/1",
                "OPTIONS": {"serializer": "myproject.serializers.MyJSONSerializer"},
            }
        }
    """

    tag = b"j"
    encoder_class = DjangoJSONEncoder

    def dumps(self, obj: Any) -> bytes:
        try:
            return json.dumps(obj, cls=self.encoder_class, separators=(",", ":")).encode()
        except (TypeError, ValueError) as e:
            raise SerializerError from e

    def loads(self, data: bytes) -> Any:
        try:
            return json.loads(data)
        except (ValueError, UnicodeDecodeError) as e:
            raise SerializerError from e
