"""Tests for list operations against a scripted connector."""

import pytest
from redis.exceptions import ResponseError

from django_rediscmd.client import CommandClient
from django_rediscmd.exceptions import RedisException
from tests.fixtures.connector import ScriptedConnector


class TestListOperations:
    def test_lpush_rpush(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(1).reply(3)
        assert client.lpush("mylist", "world") == 1
        assert client.rpush("mylist", "!", 2) == 3
        assert connector.last_wire == ("RPUSH", b"mylist", b"!", b"2")

    def test_push_needs_a_value(self, client: CommandClient, connector: ScriptedConnector):
        with pytest.raises(RedisException):
            client.rpush("mylist")
        assert connector.descriptors == []

    def test_push_onto_wrong_type(self, client: CommandClient, connector: ScriptedConnector):
        connector.fail(ResponseError("WRONGTYPE Operation against a key holding the wrong kind of value"))
        with pytest.raises(RedisException, match="WRONGTYPE"):
            client.lpush("a-string", "x")

    def test_lrange_last_element(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply([b"c"])
        assert client.lrange("mylist", -1, -1) == [b"c"]
        assert connector.last_wire == ("LRANGE", b"mylist", b"-1", b"-1")

    def test_lrange_missing_list(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply([])
        assert client.lrange("missing", 0, -1) == []

    def test_lrange_rejects_fractional_index(self, client: CommandClient, connector: ScriptedConnector):
        with pytest.raises(RedisException):
            client.lrange("mylist", 0.5, 2)
        assert connector.descriptors == []

    def test_ltrim(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"OK")
        assert client.ltrim("mylist", 0, 99) is True
        assert connector.last_wire == ("LTRIM", b"mylist", b"0", b"99")

    def test_lset(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"OK")
        assert client.lset("mylist", -1, "z") is True
        assert connector.last_wire == ("LSET", b"mylist", b"-1", b"z")

    def test_lset_out_of_range(self, client: CommandClient, connector: ScriptedConnector):
        connector.fail(ResponseError("ERR index out of range"))
        with pytest.raises(RedisException, match="out of range"):
            client.lset("mylist", 100, "z")

    def test_lrem(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(2)
        assert client.lrem("mylist", -2, "x") == 2
        assert connector.last_wire == ("LREM", b"mylist", b"-2", b"x")

    def test_llen_and_lindex(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(3).reply(b"b").reply(None)
        assert client.llen("mylist") == 3
        assert client.lindex("mylist", 1) == b"b"
        assert client.lindex("mylist", 10) is None

    def test_pops(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"a").reply(b"c").reply(None)
        assert client.lpop("mylist") == b"a"
        assert client.rpop("mylist") == b"c"
        assert client.lpop("empty") is None

    def test_rpoplpush(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"tail")
        assert client.rpoplpush("src", "dst") == b"tail"
        assert connector.last_wire == ("RPOPLPUSH", b"src", b"dst")
