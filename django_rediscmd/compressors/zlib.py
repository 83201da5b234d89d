import zlib
from typing import Any

from django_rediscmd.compressors.base import BaseCompressor


class ZlibCompressor(BaseCompressor):
    """Deflate with a zlib header; ``level`` ranges from 1 (fast) to 9 (small)."""

    tag = b"z"
    decompress_errors = (zlib.error,)

    def __init__(self, *, level: int = 6, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.level = level

    def _compress(self, data: bytes) -> bytes:
        return zlib.compress(data, self.level)

    def _decompress(self, data: bytes) -> bytes:
        return zlib.decompress(data)
