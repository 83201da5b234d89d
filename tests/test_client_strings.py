"""Tests for string operations against a scripted connector."""

import socket

import pytest
from redis.exceptions import ResponseError

from django_rediscmd.client import CommandClient
from django_rediscmd.exceptions import (
    ConnectionInterruptedError,
    RedisException,
    ResponseShapeError,
)
from django_rediscmd.types import KeyType
from tests.fixtures.connector import ScriptedConnector


class TestSetGet:
    def test_set_returns_true(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"OK")
        assert client.set("foo", "bar") is True
        assert connector.last_wire == ("SET", b"foo", b"bar")

    def test_get(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"bar").reply(None)
        assert client.get("foo") == b"bar"
        assert client.get("missing") is None

    def test_numbers_are_sent_as_text(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"OK").reply(11)
        client.set("counter", 10)
        assert connector.last_wire == ("SET", b"counter", b"10")
        assert client.incr("counter") == 11

    def test_objects_are_framed(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"OK")
        client.set("obj", {"a": 1})
        stored = connector.last.args[1]
        assert client.binder.is_framed(stored)

        connector.reply(stored)
        assert client.load(client.get("obj")) == {"a": 1}

    def test_none_value_is_rejected_before_sending(self, client: CommandClient, connector: ScriptedConnector):
        with pytest.raises(RedisException):
            client.set("foo", None)
        assert connector.descriptors == []

    def test_empty_key_is_rejected_before_sending(self, client: CommandClient, connector: ScriptedConnector):
        with pytest.raises(RedisException):
            client.get("")
        assert connector.descriptors == []

    def test_setnx(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(1).reply(0)
        assert client.setnx("foo", "a") is True
        assert client.setnx("foo", "b") is False

    def test_getset(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"old")
        assert client.getset("foo", "new") == b"old"
        assert connector.last_wire == ("GETSET", b"foo", b"new")


class TestMulti:
    def test_mget_keeps_order_and_missing(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply([b"1", None, b"3"])
        assert client.mget("a", "b", "c") == [b"1", None, b"3"]
        assert connector.last_wire == ("MGET", b"a", b"b", b"c")

    def test_mget_needs_a_key(self, client: CommandClient):
        with pytest.raises(RedisException):
            client.mget()

    def test_mset(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"OK")
        assert client.mset({"a": 1, "b": "two"}) is True
        assert connector.last_wire == ("MSET", b"a", b"1", b"b", b"two")

    def test_msetnx_reports_all_or_nothing(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(1).reply(0)
        assert client.msetnx([("a", 1), ("b", 2)]) is True
        assert client.msetnx({"b": 3, "c": 4}) is False

    def test_mset_duplicate_keys(self, client: CommandClient, connector: ScriptedConnector):
        with pytest.raises(RedisException, match="Duplicate"):
            client.mset([("a", 1), (b"a", 2)])
        assert connector.descriptors == []


class TestCounters:
    def test_incrby_decrby(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(15).reply(5)
        assert client.incrby("n", 5) == 15
        assert connector.last_wire == ("INCRBY", b"n", b"5")
        assert client.decrby("n", 10) == 5
        assert connector.last_wire == ("DECRBY", b"n", b"10")

    def test_decr(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(-1)
        assert client.decr("n") == -1

    @pytest.mark.parametrize("delta", [1.5, "1", True])
    def test_delta_must_be_integer(self, client: CommandClient, delta):
        with pytest.raises(RedisException):
            client.incrby("n", delta)

    def test_incr_on_text_is_domain_error(self, client: CommandClient, connector: ScriptedConnector):
        connector.fail(ResponseError("ERR value is not an integer or out of range"))
        with pytest.raises(RedisException, match="not an integer") as excinfo:
            client.incr("text")
        assert isinstance(excinfo.value.__cause__, ResponseError)


class TestKeysAndTypes:
    def test_exists_and_delete(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(1).reply(2)
        assert client.exists("a") is True
        assert client.delete("a", "b", "c") == 2
        assert connector.last_wire == ("DEL", b"a", b"b", b"c")

    @pytest.mark.parametrize("name", ["none", "string", "list", "set", "zset", "hash"])
    def test_type(self, client: CommandClient, connector: ScriptedConnector, name):
        connector.reply(name.encode())
        assert client.type("k") is KeyType(name)

    def test_unknown_type_is_provider_error(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"stream")
        with pytest.raises(ResponseShapeError, match="stream"):
            client.type("k")


class TestFailures:
    def test_runtime_failure_passes_through(self, client: CommandClient, connector: ScriptedConnector):
        failure = ConnectionInterruptedError(connection=None)
        connector.fail(failure)
        with pytest.raises(ConnectionInterruptedError) as excinfo:
            client.get("foo")
        assert excinfo.value is failure

    def test_unexpected_exception_passes_through(self, client: CommandClient, connector: ScriptedConnector):
        connector.fail(socket.timeout("slow"))
        with pytest.raises(socket.timeout):
            client.get("foo")

    def test_wrong_shape_is_provider_error(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"three")
        with pytest.raises(ResponseShapeError):
            client.incr("n")
