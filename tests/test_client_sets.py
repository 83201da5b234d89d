"""Tests for set operations against a scripted connector."""

import pytest

from django_rediscmd.client import CommandClient
from django_rediscmd.exceptions import RedisException
from tests.fixtures.connector import ScriptedConnector


class TestSetOperations:
    def test_sadd_srem(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(1).reply(0).reply(1)
        assert client.sadd("s", "a") is True
        assert client.sadd("s", "a") is False
        assert client.srem("s", "a") is True

    def test_sismember_and_scard(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(0).reply(4)
        assert client.sismember("s", "zz") is False
        assert client.scard("s") == 4

    def test_smove(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(1)
        assert client.smove("src", "dst", "a") is True
        assert connector.last_wire == ("SMOVE", b"src", b"dst", b"a")

    def test_smembers_is_a_set(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply([b"a", b"b"])
        assert client.smembers("s") == {b"a", b"b"}

    @pytest.mark.parametrize("method", ["sinter", "sunion", "sdiff"])
    def test_combinations(self, client: CommandClient, connector: ScriptedConnector, method):
        connector.reply([b"x"])
        assert getattr(client, method)("a", "b", "c") == {b"x"}
        assert connector.last_wire == (method.upper(), b"a", b"b", b"c")

    @pytest.mark.parametrize("method", ["sinterstore", "sunionstore", "sdiffstore"])
    def test_store_combinations(self, client: CommandClient, connector: ScriptedConnector, method):
        connector.reply(2)
        assert getattr(client, method)("dest", "a", "b") == 2
        assert connector.last_wire == (method.upper(), b"dest", b"a", b"b")

    def test_combination_with_single_key(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply([b"a"])
        assert client.sinter("a") == {b"a"}

    def test_empty_key_in_combination(self, client: CommandClient, connector: ScriptedConnector):
        with pytest.raises(RedisException):
            client.sunion("a", "")
        assert connector.descriptors == []

    def test_srandmember_and_spop(self, client: CommandClient, connector: ScriptedConnector):
        connector.reply(b"a").reply(None)
        assert client.srandmember("s") == b"a"
        assert client.spop("empty") is None
