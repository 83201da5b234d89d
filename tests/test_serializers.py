import datetime
import pickle

import pytest
from django.core.exceptions import ImproperlyConfigured

from django_rediscmd.exceptions import SerializerError
from django_rediscmd.serializers.json import JSONSerializer
from django_rediscmd.serializers.msgpack import MessagePackSerializer
from django_rediscmd.serializers.pickle import PickleSerializer


class TestJSONSerializer:
    def test_basic_roundtrip(self):
        serializer = JSONSerializer()
        data = {"key": "value", "number": 42, "nested": {"list": [1, 2, 3]}}
        encoded = serializer.dumps(data)
        decoded = serializer.loads(encoded)
        assert decoded == data

    def test_django_encoder_handles_datetimes(self):
        serializer = JSONSerializer()
        encoded = serializer.dumps({"at": datetime.date(2024, 1, 2)})
        assert serializer.loads(encoded) == {"at": "2024-01-02"}

    def test_unsupported_type_raises_serializer_error(self):
        with pytest.raises(SerializerError):
            JSONSerializer().dumps(object())

    def test_invalid_data_raises_serializer_error(self):
        with pytest.raises(SerializerError):
            JSONSerializer().loads(b"\xff not json")


class TestPickleSerializer:
    def test_protocol_not_explicitly_specified(self):
        serializer = PickleSerializer()
        assert serializer.protocol == pickle.DEFAULT_PROTOCOL

    def test_protocol_too_high(self):
        with pytest.raises(
            ImproperlyConfigured,
            match=f"protocol can't be higher than pickle.HIGHEST_PROTOCOL: {pickle.HIGHEST_PROTOCOL}",
        ):
            PickleSerializer(protocol=pickle.HIGHEST_PROTOCOL + 1)

    def test_protocol_explicit(self):
        serializer = PickleSerializer(protocol=4)
        assert serializer.protocol == 4

    def test_invalid_data_raises_serializer_error(self):
        with pytest.raises(SerializerError):
            PickleSerializer().loads(b"definitely not a pickle")


class TestMessagePackSerializer:
    def test_basic_roundtrip(self):
        serializer = MessagePackSerializer()
        data = {"key": "value", "number": 42, "nested": {"list": [1, 2, 3]}}
        encoded = serializer.dumps(data)
        assert isinstance(encoded, bytes)
        decoded = serializer.loads(encoded)
        assert decoded == data

    def test_loads_invalid_data_raises_serializer_error(self):
        serializer = MessagePackSerializer()
        with pytest.raises(SerializerError):
            serializer.loads(b"\xff\xfe\xfd")  # Invalid msgpack data

    def test_unsupported_type_raises_serializer_error(self):
        with pytest.raises(SerializerError):
            MessagePackSerializer().dumps(object())


def test_tags_are_distinct():
    tags = {PickleSerializer.tag, JSONSerializer.tag, MessagePackSerializer.tag}
    assert len(tags) == 3
    assert all(len(tag) == 1 for tag in tags)
