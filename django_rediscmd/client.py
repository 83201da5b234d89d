"""The typed command client.

Every method follows the same path: bind keys and values to bytes, validate
ranges, build a :class:`~django_rediscmd.descriptor.CommandDescriptor`, hand
it to the connector, then classify the outcome before converting the reply
into the method's return type.

Values may be given as bytes, text, numbers or arbitrary objects (see
:mod:`django_rediscmd.binder`). Replies carrying values are returned as
bytes; use :meth:`CommandClient.load` to turn a serialized object back into
a Python object.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from django_rediscmd.binder import ValueBinder, bind_key, bind_keys
from django_rediscmd.classifier import translate, verify
from django_rediscmd.descriptor import build_command
from django_rediscmd.exceptions import RedisException, ResponseShapeError
from django_rediscmd.ranges import resolve_index, resolve_range, resolve_score, resolve_score_range
from django_rediscmd.sort import SortQuery
from django_rediscmd.types import KeyType, ObjectInfo, ResponseShape, ScoredEntry, ServerInfo

# Alias builtin set type to avoid shadowing by the set() method
_Set = set

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from django_rediscmd.connector import Connector
    from django_rediscmd.descriptor import CommandDescriptor
    from django_rediscmd.types import KeyT, ValueT

logger = logging.getLogger(__name__)


def _text(value: bytes | str) -> str:
    # surrogateescape keeps non UTF-8 keys addressable: bind_key reverses it
    return value.decode(errors="surrogateescape") if isinstance(value, bytes) else value


def _count(value: int, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise RedisException(f"{name} must be an integer, got {value!r}")
    return value


def _score(value: bytes | str, command: str, shape: ResponseShape) -> float:
    try:
        return float(_text(value))
    except (TypeError, ValueError):
        error = ResponseShapeError(command, shape.value, shape.value, f"{value!r} is not a float")
        logger.error("Reply shape mismatch: %s", error)
        raise error from None


def _pairs(values: list[bytes], command: str) -> list[ScoredEntry]:
    shape = ResponseShape.MULTI_BULK_WITH_SCORES
    return [ScoredEntry(values[i], _score(values[i + 1], command, shape)) for i in range(0, len(values), 2)]


class CommandClient:
    """Typed access to the string, key-space, list, set, sorted-set and server commands.

    Args:
        connector: Transport that executes descriptors.
        serializer: Serializer config for object values (dotted path, class,
            instance or list for fallback). Defaults to pickle.
        compressor: Compressor config for object values. Defaults to none.
        serializer_options: Keyword arguments for serializer constructors.
        compressor_options: Keyword arguments for compressor constructors.

    Example:
        Using a client directly::

            from django_rediscmd.client import CommandClient
            from django_rediscmd.connector import RedisConnector

            client = CommandClient(RedisConnector("redis://localhost:6379/0"))
            client.set("counter", 10)
            client.incrby("counter", 5)  # -> 15
    """

    def __init__(
        self,
        connector: Connector,
        *,
        serializer: str | list | type | Any | None = None,
        compressor: str | list | type | Any | None = None,
        serializer_options: dict[str, Any] | None = None,
        compressor_options: dict[str, Any] | None = None,
    ) -> None:
        self._connector = connector
        self._binder = ValueBinder(
            serializer,
            compressor,
            serializer_options=serializer_options,
            compressor_options=compressor_options,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} connector={self._connector!r}>"

    @property
    def binder(self) -> ValueBinder:
        return self._binder

    # =========================================================================
    # Execution
    # =========================================================================

    def _execute(self, descriptor: CommandDescriptor) -> Any:
        """Run a descriptor and return the shape-verified reply value."""
        logger.debug("Executing %s", descriptor.name)
        try:
            raw = self._connector.execute(descriptor)
        except Exception as e:
            translated = translate(e)
            if translated is e:
                raise
            raise translated from e
        return verify(descriptor, raw)

    def _command(self, name: str, *args: Any, shape: ResponseShape) -> Any:
        return self._execute(build_command(name, *args, shape=shape))

    def _bind(self, value: ValueT) -> bytes:
        return self._binder.bind(value)

    def load(self, data: bytes) -> Any:
        """Decode a value stored as a serialized object."""
        return self._binder.load(data)

    # =========================================================================
    # Connection Handling
    # =========================================================================

    def ping(self) -> bool:
        """Check that the server answers."""
        return _text(self._command("PING", shape=ResponseShape.STATUS)) == "PONG"

    def close(self) -> None:
        """Release the connector's connections."""
        self._connector.close()

    # =========================================================================
    # String Operations
    # =========================================================================

    def set(self, key: KeyT, value: ValueT) -> bool:
        """Set the value of a key."""
        self._command("SET", bind_key(key), self._bind(value), shape=ResponseShape.NONE)
        return True

    def setnx(self, key: KeyT, value: ValueT) -> bool:
        """Set the value of a key only if it does not exist."""
        return bool(self._command("SETNX", bind_key(key), self._bind(value), shape=ResponseShape.BOOLEAN))

    def get(self, key: KeyT) -> bytes | None:
        """Get the value of a key, or None if it does not exist."""
        return self._command("GET", bind_key(key), shape=ResponseShape.BULK)

    def getset(self, key: KeyT, value: ValueT) -> bytes | None:
        """Set a new value and return the old one."""
        return self._command("GETSET", bind_key(key), self._bind(value), shape=ResponseShape.BULK)

    def mget(self, *keys: KeyT) -> list[bytes | None]:
        """Get the values of several keys; missing keys yield None."""
        return self._command("MGET", bind_keys(keys), shape=ResponseShape.MULTI_BULK) or []

    def mset(self, mapping: Mapping[KeyT, ValueT] | Iterable[tuple[KeyT, ValueT]]) -> bool:
        """Set several keys at once."""
        self._command("MSET", self._binder.bind_mapping(mapping), shape=ResponseShape.NONE)
        return True

    def msetnx(self, mapping: Mapping[KeyT, ValueT] | Iterable[tuple[KeyT, ValueT]]) -> bool:
        """Set several keys only if none of them exists.

        All or nothing: returns False and writes nothing if any key exists.
        """
        return bool(self._command("MSETNX", self._binder.bind_mapping(mapping), shape=ResponseShape.BOOLEAN))

    def incr(self, key: KeyT) -> int:
        """Increment the integer value of a key by one."""
        return self._command("INCR", bind_key(key), shape=ResponseShape.INTEGER)

    def incrby(self, key: KeyT, delta: int) -> int:
        """Increment the integer value of a key by ``delta``."""
        return self._command("INCRBY", bind_key(key), _count(delta, "delta"), shape=ResponseShape.INTEGER)

    def decr(self, key: KeyT) -> int:
        """Decrement the integer value of a key by one."""
        return self._command("DECR", bind_key(key), shape=ResponseShape.INTEGER)

    def decrby(self, key: KeyT, delta: int) -> int:
        """Decrement the integer value of a key by ``delta``."""
        return self._command("DECRBY", bind_key(key), _count(delta, "delta"), shape=ResponseShape.INTEGER)

    def exists(self, key: KeyT) -> bool:
        """Check if a key exists."""
        return bool(self._command("EXISTS", bind_key(key), shape=ResponseShape.BOOLEAN))

    def delete(self, *keys: KeyT) -> int:
        """Remove keys, returning how many existed."""
        return self._command("DEL", bind_keys(keys), shape=ResponseShape.INTEGER)

    def type(self, key: KeyT) -> KeyType:
        """Get the data type stored at a key."""
        descriptor = build_command("TYPE", bind_key(key), shape=ResponseShape.STATUS)
        name = _text(self._execute(descriptor))
        try:
            return KeyType(name)
        except ValueError:
            raise ResponseShapeError(descriptor.name, descriptor.shape.value, "status", f"unknown type {name!r}") from None

    # =========================================================================
    # Key Space Operations
    # =========================================================================

    def keys(self, pattern: str = "*") -> list[str]:
        """Get all keys matching a glob-style pattern."""
        return [_text(k) for k in self._command("KEYS", pattern, shape=ResponseShape.MULTI_BULK) or []]

    def randomkey(self) -> str | None:
        """Get a random key, or None if the database is empty."""
        key = self._command("RANDOMKEY", shape=ResponseShape.BULK)
        return _text(key) if key is not None else None

    def rename(self, src: KeyT, dst: KeyT) -> bool:
        """Rename a key, overwriting ``dst`` if it exists.

        Raises:
            RedisException: If ``src`` does not exist
        """
        self._command("RENAME", bind_key(src), bind_key(dst), shape=ResponseShape.NONE)
        return True

    def renamenx(self, src: KeyT, dst: KeyT) -> bool:
        """Rename a key only if ``dst`` does not exist.

        Returns:
            True if renamed, False if dst already exists
        """
        return bool(self._command("RENAMENX", bind_key(src), bind_key(dst), shape=ResponseShape.BOOLEAN))

    def dbsize(self) -> int:
        """Get the number of keys in the selected database."""
        return self._command("DBSIZE", shape=ResponseShape.INTEGER)

    def expire(self, key: KeyT, timeout: int | timedelta) -> bool:
        """Set a key's time to live in seconds."""
        if isinstance(timeout, timedelta):
            timeout = int(timeout.total_seconds())
        return bool(
            self._command("EXPIRE", bind_key(key), _count(timeout, "timeout"), shape=ResponseShape.BOOLEAN),
        )

    def expireat(self, key: KeyT, when: int | datetime) -> bool:
        """Expire a key at an absolute time.

        Args:
            key: The key
            when: A datetime, or a UNIX epoch time in **milliseconds**. The
                server works in seconds; milliseconds are truncated.
        """
        if isinstance(when, datetime):
            seconds = int(when.timestamp())
        else:
            seconds = _count(when, "when") // 1000
        return bool(self._command("EXPIREAT", bind_key(key), seconds, shape=ResponseShape.BOOLEAN))

    def ttl(self, key: KeyT) -> int:
        """Get a key's time to live in seconds.

        Returns -1 if the key has no expiry and -2 if it does not exist.
        """
        return self._command("TTL", bind_key(key), shape=ResponseShape.INTEGER)

    # =========================================================================
    # List Operations
    # =========================================================================

    def rpush(self, key: KeyT, *values: ValueT) -> int:
        """Push values to the right of a list, returning its new length."""
        return self._command("RPUSH", bind_key(key), self._binder.bind_many(values), shape=ResponseShape.INTEGER)

    def lpush(self, key: KeyT, *values: ValueT) -> int:
        """Push values to the left of a list, returning its new length."""
        return self._command("LPUSH", bind_key(key), self._binder.bind_many(values), shape=ResponseShape.INTEGER)

    def lset(self, key: KeyT, index: int, value: ValueT) -> bool:
        """Set an element in a list by index."""
        self._command("LSET", bind_key(key), resolve_index(index), self._bind(value), shape=ResponseShape.NONE)
        return True

    def lrem(self, key: KeyT, count: int, value: ValueT) -> int:
        """Remove elements equal to ``value``.

        ``count > 0`` removes from head to tail, ``count < 0`` from tail to
        head, ``count == 0`` removes all.
        """
        return self._command(
            "LREM",
            bind_key(key),
            _count(count, "count"),
            self._bind(value),
            shape=ResponseShape.INTEGER,
        )

    def llen(self, key: KeyT) -> int:
        """Get the length of a list."""
        return self._command("LLEN", bind_key(key), shape=ResponseShape.INTEGER)

    def lrange(self, key: KeyT, start: int, stop: int) -> list[bytes]:
        """Get a range of elements from a list; both ends inclusive."""
        window = resolve_range(start, stop)
        return self._command("LRANGE", bind_key(key), window.to_args(), shape=ResponseShape.MULTI_BULK) or []

    def ltrim(self, key: KeyT, start: int, stop: int) -> bool:
        """Trim a list to the specified range."""
        window = resolve_range(start, stop)
        self._command("LTRIM", bind_key(key), window.to_args(), shape=ResponseShape.NONE)
        return True

    def lindex(self, key: KeyT, index: int) -> bytes | None:
        """Get an element from a list by index."""
        return self._command("LINDEX", bind_key(key), resolve_index(index), shape=ResponseShape.BULK)

    def lpop(self, key: KeyT) -> bytes | None:
        """Remove and return the first element of a list."""
        return self._command("LPOP", bind_key(key), shape=ResponseShape.BULK)

    def rpop(self, key: KeyT) -> bytes | None:
        """Remove and return the last element of a list."""
        return self._command("RPOP", bind_key(key), shape=ResponseShape.BULK)

    def rpoplpush(self, src: KeyT, dst: KeyT) -> bytes | None:
        """Atomically pop the tail of ``src`` and push it onto the head of ``dst``."""
        return self._command("RPOPLPUSH", bind_key(src), bind_key(dst), shape=ResponseShape.BULK)

    # =========================================================================
    # Set Operations
    # =========================================================================

    def sadd(self, key: KeyT, member: ValueT) -> bool:
        """Add a member to a set; False if it was already there."""
        return bool(self._command("SADD", bind_key(key), self._bind(member), shape=ResponseShape.BOOLEAN))

    def srem(self, key: KeyT, member: ValueT) -> bool:
        """Remove a member from a set; False if it was not there."""
        return bool(self._command("SREM", bind_key(key), self._bind(member), shape=ResponseShape.BOOLEAN))

    def sismember(self, key: KeyT, member: ValueT) -> bool:
        """Check if a value is a member of a set."""
        return bool(self._command("SISMEMBER", bind_key(key), self._bind(member), shape=ResponseShape.BOOLEAN))

    def smove(self, src: KeyT, dst: KeyT, member: ValueT) -> bool:
        """Move a member from one set to another."""
        return bool(
            self._command("SMOVE", bind_key(src), bind_key(dst), self._bind(member), shape=ResponseShape.BOOLEAN),
        )

    def scard(self, key: KeyT) -> int:
        """Get the number of members in a set."""
        return self._command("SCARD", bind_key(key), shape=ResponseShape.INTEGER)

    def _set_members(self, name: str, keys: tuple[KeyT, ...]) -> _Set[bytes]:
        return _Set(self._command(name, bind_keys(keys), shape=ResponseShape.MULTI_BULK) or [])

    def _set_store(self, name: str, dest: KeyT, keys: tuple[KeyT, ...]) -> int:
        return self._command(name, bind_key(dest), bind_keys(keys), shape=ResponseShape.INTEGER)

    def sinter(self, key: KeyT, *keys: KeyT) -> _Set[bytes]:
        """Return the intersection of sets."""
        return self._set_members("SINTER", (key, *keys))

    def sinterstore(self, dest: KeyT, key: KeyT, *keys: KeyT) -> int:
        """Store the intersection of sets in ``dest``, returning its size."""
        return self._set_store("SINTERSTORE", dest, (key, *keys))

    def sunion(self, key: KeyT, *keys: KeyT) -> _Set[bytes]:
        """Return the union of sets."""
        return self._set_members("SUNION", (key, *keys))

    def sunionstore(self, dest: KeyT, key: KeyT, *keys: KeyT) -> int:
        """Store the union of sets in ``dest``, returning its size."""
        return self._set_store("SUNIONSTORE", dest, (key, *keys))

    def sdiff(self, key: KeyT, *keys: KeyT) -> _Set[bytes]:
        """Return the members of the first set missing from all the others."""
        return self._set_members("SDIFF", (key, *keys))

    def sdiffstore(self, dest: KeyT, key: KeyT, *keys: KeyT) -> int:
        """Store the difference of sets in ``dest``, returning its size."""
        return self._set_store("SDIFFSTORE", dest, (key, *keys))

    def smembers(self, key: KeyT) -> _Set[bytes]:
        """Get all members of a set."""
        return self._set_members("SMEMBERS", (key,))

    def srandmember(self, key: KeyT) -> bytes | None:
        """Get a random member of a set."""
        return self._command("SRANDMEMBER", bind_key(key), shape=ResponseShape.BULK)

    def spop(self, key: KeyT) -> bytes | None:
        """Remove and return a random member of a set."""
        return self._command("SPOP", bind_key(key), shape=ResponseShape.BULK)

    # =========================================================================
    # Sorted Set Operations
    # =========================================================================

    def zadd(self, key: KeyT, score: float, member: ValueT) -> bool:
        """Add a member with a score; False if it existed (its score is updated)."""
        return bool(
            self._command(
                "ZADD",
                bind_key(key),
                resolve_score(score),
                self._bind(member),
                shape=ResponseShape.BOOLEAN,
            ),
        )

    def zrem(self, key: KeyT, member: ValueT) -> bool:
        """Remove a member from a sorted set."""
        return bool(self._command("ZREM", bind_key(key), self._bind(member), shape=ResponseShape.BOOLEAN))

    def zcard(self, key: KeyT) -> int:
        """Get the number of members in a sorted set."""
        return self._command("ZCARD", bind_key(key), shape=ResponseShape.INTEGER)

    def zcount(self, key: KeyT, min_score: float, max_score: float) -> int:
        """Count members with a score between ``min_score`` and ``max_score`` inclusive."""
        window = resolve_score_range(min_score, max_score)
        return self._command("ZCOUNT", bind_key(key), window.to_args(), shape=ResponseShape.INTEGER)

    def zscore(self, key: KeyT, member: ValueT) -> float | None:
        """Get the score of a member, or None if it is not in the set."""
        result = self._command("ZSCORE", bind_key(key), self._bind(member), shape=ResponseShape.BULK)
        return _score(result, "ZSCORE", ResponseShape.BULK) if result is not None else None

    def _zrange(self, name: str, key: KeyT, start: int, stop: int, *, withscores: bool) -> list:
        window = resolve_range(start, stop)
        if withscores:
            values = self._command(
                name,
                bind_key(key),
                window.to_args(),
                "WITHSCORES",
                shape=ResponseShape.MULTI_BULK_WITH_SCORES,
            )
            return _pairs(values, name)
        return self._command(name, bind_key(key), window.to_args(), shape=ResponseShape.MULTI_BULK) or []

    def zrange(self, key: KeyT, start: int, stop: int) -> list[bytes]:
        """Get members by rank, lowest score first."""
        return self._zrange("ZRANGE", key, start, stop, withscores=False)

    def zrevrange(self, key: KeyT, start: int, stop: int) -> list[bytes]:
        """Get members by rank, highest score first."""
        return self._zrange("ZREVRANGE", key, start, stop, withscores=False)

    def zrange_withscores(self, key: KeyT, start: int, stop: int) -> list[ScoredEntry]:
        """Like :meth:`zrange`, keeping each member's score."""
        return self._zrange("ZRANGE", key, start, stop, withscores=True)

    def zrevrange_withscores(self, key: KeyT, start: int, stop: int) -> list[ScoredEntry]:
        """Like :meth:`zrevrange`, keeping each member's score."""
        return self._zrange("ZREVRANGE", key, start, stop, withscores=True)

    def _zrangebyscore(
        self,
        key: KeyT,
        min_score: float,
        max_score: float,
        offset: int | None,
        count: int | None,
        *,
        withscores: bool,
    ) -> list:
        window = resolve_score_range(min_score, max_score)
        args: list[Any] = [bind_key(key), window.to_args()]
        shape = ResponseShape.MULTI_BULK
        if withscores:
            args.append("WITHSCORES")
            shape = ResponseShape.MULTI_BULK_WITH_SCORES
        if (offset is None) != (count is None):
            raise RedisException("offset and count must be given together")
        if offset is not None and count is not None:
            args.extend(["LIMIT", resolve_index(offset, "offset"), resolve_index(count, "count")])

        values = self._command("ZRANGEBYSCORE", *args, shape=shape)
        if withscores:
            return _pairs(values, "ZRANGEBYSCORE")
        return values or []

    def zrangebyscore(
        self,
        key: KeyT,
        min_score: float,
        max_score: float,
        *,
        offset: int | None = None,
        count: int | None = None,
    ) -> list[bytes]:
        """Get members with a score between ``min_score`` and ``max_score`` inclusive.

        Infinite bounds are allowed; ``offset`` and ``count`` page through
        the result.
        """
        return self._zrangebyscore(key, min_score, max_score, offset, count, withscores=False)

    def zrangebyscore_withscores(
        self,
        key: KeyT,
        min_score: float,
        max_score: float,
        *,
        offset: int | None = None,
        count: int | None = None,
    ) -> list[ScoredEntry]:
        """Like :meth:`zrangebyscore`, keeping each member's score."""
        return self._zrangebyscore(key, min_score, max_score, offset, count, withscores=True)

    def zremrangebyscore(self, key: KeyT, min_score: float, max_score: float) -> int:
        """Remove members with a score in the range, returning how many."""
        window = resolve_score_range(min_score, max_score)
        return self._command("ZREMRANGEBYSCORE", bind_key(key), window.to_args(), shape=ResponseShape.INTEGER)

    def zincrby(self, key: KeyT, amount: float, member: ValueT) -> float:
        """Increment the score of a member, returning the new score."""
        result = self._command(
            "ZINCRBY",
            bind_key(key),
            resolve_score(amount, "amount"),
            self._bind(member),
            shape=ResponseShape.BULK,
        )
        if result is None:
            raise ResponseShapeError("ZINCRBY", ResponseShape.BULK.value, ResponseShape.BULK.value, "nil score")
        return _score(result, "ZINCRBY", ResponseShape.BULK)

    # =========================================================================
    # Multiple Databases
    # =========================================================================

    def flushdb(self) -> bool:
        """Remove every key from the selected database."""
        self._command("FLUSHDB", shape=ResponseShape.NONE)
        return True

    def flushall(self) -> bool:
        """Remove every key from every database."""
        self._command("FLUSHALL", shape=ResponseShape.NONE)
        return True

    def move(self, key: KeyT, db: int) -> bool:
        """Move a key to another database."""
        return bool(self._command("MOVE", bind_key(key), _count(db, "db"), shape=ResponseShape.BOOLEAN))

    # =========================================================================
    # Sorting
    # =========================================================================

    def sort(self, key: KeyT) -> SortQuery:
        """Start a SORT query on a list, set or sorted set.

        Example::

            for item in client.sort("ids").by("weight_*").get("obj_*").limit(0, 10).execute():
                ...
        """
        return SortQuery(key, self._execute_sort)

    def _execute_sort(self, descriptor: CommandDescriptor) -> list[bytes | None]:
        return self._execute(descriptor) or []

    # =========================================================================
    # Persistence Control
    # =========================================================================

    def save(self) -> bool:
        """Synchronously save the dataset to disk."""
        self._command("SAVE", shape=ResponseShape.NONE)
        return True

    def bgsave(self) -> bool:
        """Save the dataset to disk in the background."""
        self._command("BGSAVE", shape=ResponseShape.NONE)
        return True

    def bgrewriteaof(self) -> str:
        """Rewrite the append-only file in the background, returning the server's status."""
        return _text(self._command("BGREWRITEAOF", shape=ResponseShape.STATUS))

    def lastsave(self) -> datetime:
        """Get the time of the last successful save, in UTC."""
        return datetime.fromtimestamp(self._command("LASTSAVE", shape=ResponseShape.INTEGER), tz=UTC)

    # =========================================================================
    # Remote Server Control
    # =========================================================================

    def info(self) -> ServerInfo:
        """Get information and statistics about the server."""
        result = self._command("INFO", shape=ResponseShape.MAPPING)
        if isinstance(result, dict):
            return ServerInfo({_text(k): _text(v) for k, v in result.items()})
        return ServerInfo.from_text(_text(result))

    def slaveof(self, host: str, port: int) -> bool:
        """Make the server a replica of another server."""
        if not host:
            raise RedisException("host must not be empty")
        self._command("SLAVEOF", host, _count(port, "port"), shape=ResponseShape.NONE)
        return True

    def slaveofnone(self) -> bool:
        """Turn a replica back into a primary."""
        self._command("SLAVEOF", "NO", "ONE", shape=ResponseShape.NONE)
        return True

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def echo(self, value: ValueT) -> bytes:
        """Have the server echo a value back."""
        return self._command("ECHO", self._bind(value), shape=ResponseShape.BULK)

    def debug(self, key: KeyT) -> ObjectInfo:
        """Get low-level information about the value stored at a key."""
        return ObjectInfo.from_status(_text(self._command("DEBUG", "OBJECT", bind_key(key), shape=ResponseShape.STATUS)))
