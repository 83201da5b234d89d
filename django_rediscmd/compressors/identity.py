from django_rediscmd.compressors.base import BaseCompressor


class IdentityCompressor(BaseCompressor):
    """Never compresses; payloads are framed with the ``-`` tag."""

    tag = b"-"

    def should_compress(self, data: bytes) -> bool:
        return False

    def _decompress(self, data: bytes) -> bytes:
        return data
