"""Tests for the payload compressors."""

import pytest

from django_rediscmd.binder import FRAME_MAGIC, ValueBinder
from django_rediscmd.compressors.gzip import GzipCompressor
from django_rediscmd.compressors.identity import IdentityCompressor
from django_rediscmd.compressors.lzma import LzmaCompressor
from django_rediscmd.compressors.zlib import ZlibCompressor
from django_rediscmd.exceptions import CompressorError

CODECS = [GzipCompressor, LzmaCompressor, ZlibCompressor]

PAYLOAD = b"sorted set member " * 40  # above the default min_length
SHORT = b"abc"


@pytest.fixture(params=CODECS, ids=lambda c: c.__name__)
def codec(request):
    return request.param()


class TestCodecs:
    def test_payload_survives(self, codec):
        packed = codec.compress(PAYLOAD)
        assert packed != PAYLOAD
        assert codec.decompress(packed) == PAYLOAD

    def test_every_byte_value_survives(self, codec):
        data = bytes(range(256)) * 2
        assert codec.decompress(codec.compress(data)) == data

    def test_repetitive_payload_shrinks(self, codec):
        assert len(codec.compress(PAYLOAD)) < len(PAYLOAD)

    def test_short_payload_left_alone(self, codec):
        assert not codec.should_compress(SHORT)
        assert codec.compress(SHORT) == SHORT

    def test_garbage_is_compressor_error(self, codec):
        with pytest.raises(CompressorError, match=type(codec).__name__):
            codec.decompress(b"\x00garbage\x00")


class TestOptions:
    def test_min_length(self):
        assert ZlibCompressor(min_length=2).should_compress(SHORT)

    def test_zlib_level(self):
        assert ZlibCompressor(level=1).level == 1

    def test_lzma_preset(self):
        assert LzmaCompressor(preset=9).preset == 9


def test_identity_never_compresses():
    identity = IdentityCompressor()
    assert not identity.should_compress(PAYLOAD)
    assert identity.compress(PAYLOAD) == PAYLOAD
    assert identity.decompress(PAYLOAD) == PAYLOAD


def test_tags_are_distinct():
    assert len({c.tag for c in [*CODECS, IdentityCompressor]}) == 4


@pytest.mark.parametrize("codec_class", CODECS, ids=lambda c: c.__name__)
def test_tag_is_written_into_frame(codec_class):
    binder = ValueBinder(compressor=codec_class)
    framed = binder.dump(["x"] * 200)
    assert framed[len(FRAME_MAGIC) + 1 : len(FRAME_MAGIC) + 2] == codec_class.tag
    assert binder.load(framed) == ["x"] * 200
