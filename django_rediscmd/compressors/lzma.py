import lzma
from typing import Any

from django_rediscmd.compressors.base import BaseCompressor


class LzmaCompressor(BaseCompressor):
    """LZMA (xz container). ``preset`` trades speed for ratio, 0 to 9."""

    tag = b"x"
    decompress_errors = (lzma.LZMAError, EOFError)

    def __init__(self, *, preset: int = 4, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.preset = preset

    def _compress(self, data: bytes) -> bytes:
        return lzma.compress(data, preset=self.preset)

    def _decompress(self, data: bytes) -> bytes:
        return lzma.decompress(data)
