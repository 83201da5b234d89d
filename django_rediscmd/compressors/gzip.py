import gzip
import zlib

from django_rediscmd.compressors.base import BaseCompressor


class GzipCompressor(BaseCompressor):
    tag = b"g"
    decompress_errors = (gzip.BadGzipFile, EOFError, zlib.error)

    def _compress(self, data: bytes) -> bytes:
        return gzip.compress(data, mtime=0)

    def _decompress(self, data: bytes) -> bytes:
        return gzip.decompress(data)
