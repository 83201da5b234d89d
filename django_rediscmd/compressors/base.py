# Derived from django-redis (https://github.com/jazzband/django-redis)
# Copyright (c) 2011-2016 Andrey Antukh <niwi@niwi.nz>
# Copyright (c) 2011 Sean Bleier
# Licensed under BSD-3-Clause
#
# django-redis was used as inspiration for this project.

from typing import Any, ClassVar

from django_rediscmd.exceptions import CompressorError


class BaseCompressor:
    """Base class for object payload compressors.

    Subclasses set a one-byte ``tag`` (written into the frame header of
    every payload they compressed), ``_compress`` and ``_decompress``.
    Payloads of ``min_length`` bytes or fewer are left alone.
    """

    tag: ClassVar[bytes] = b""
    min_length: int = 256

    # Exceptions the codec raises for corrupt input
    decompress_errors: ClassVar[tuple[type[Exception], ...]] = (Exception,)

    def __init__(self, *, min_length: int | None = None, **kwargs: Any) -> None:
        if min_length is not None:
            self.min_length = min_length

    def should_compress(self, data: bytes) -> bool:
        return len(data) > self.min_length

    def compress(self, data: bytes) -> bytes:
        return self._compress(data) if self.should_compress(data) else data

    def decompress(self, data: bytes) -> bytes:
        try:
            return self._decompress(data)
        except self.decompress_errors as e:
            msg = f"{type(self).__name__} could not decompress {len(data)} bytes"
            raise CompressorError(msg) from e

    def _compress(self, data: bytes) -> bytes:
        raise NotImplementedError

    def _decompress(self, data: bytes) -> bytes:
        raise NotImplementedError
