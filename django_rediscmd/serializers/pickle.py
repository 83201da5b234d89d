import pickle
from typing import Any

from django.core.exceptions import ImproperlyConfigured

from django_rediscmd.exceptions import SerializerError
from django_rediscmd.serializers.base import BaseSerializer


class PickleSerializer(BaseSerializer):
    """Pickle-based serializer, the default.

    Handles any picklable Python object. Only use it with servers whose
    contents you trust: unpickling executes arbitrary code.

    Attributes:
        protocol: Pickle protocol version. Defaults to ``pickle.DEFAULT_PROTOCOL``.
    """

    tag = b"p"

    def __init__(self, *, protocol: int | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if protocol is None:
            protocol = pickle.DEFAULT_PROTOCOL
        elif protocol > pickle.HIGHEST_PROTOCOL:
            msg = f"protocol can't be higher than pickle.HIGHEST_PROTOCOL: {pickle.HIGHEST_PROTOCOL}"
            raise ImproperlyConfigured(msg)
        self.protocol = protocol

    def dumps(self, obj: Any) -> bytes:
        try:
            return pickle.dumps(obj, self.protocol)
        except (pickle.PicklingError, TypeError, AttributeError) as e:
            raise SerializerError from e

    def loads(self, data: bytes) -> Any:
        try:
            return pickle.loads(data)  # noqa: S301
        except Exception as e:
            raise SerializerError from e
