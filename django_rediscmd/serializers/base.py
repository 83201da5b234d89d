from typing import Any, ClassVar


class BaseSerializer:
    """Base class for object value serializers.

    Any object with ``dumps``, ``loads`` and a one-byte ``tag`` works as a
    serializer. The tag is written into the frame header of every value the
    serializer produces, so that reads can pick the right serializer even
    after the configured one has changed.

    Serializers accept ``**kwargs`` for configuration (e.g., ``protocol`` for
    pickle version). The ``create_serializer()`` function in
    ``django_rediscmd.compat`` passes the client OPTIONS as kwargs.
    """

    tag: ClassVar[bytes] = b""

    def __init__(self, **kwargs: Any) -> None:
        pass

    def dumps(self, obj: Any) -> bytes:
        raise NotImplementedError

    def loads(self, data: bytes) -> Any:
        raise NotImplementedError
