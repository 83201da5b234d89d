"""Staged construction of SORT commands.

``SORT`` is the only command built over several calls. Clauses can be
configured in any order; they are always emitted in the order the protocol's
grammar requires::

    SORT key [BY pattern] [LIMIT offset count] [GET pattern ...] [DESC] [ALPHA]

Example:
    These two queries send the same command::

        client.sort("mylist").by("weight_*").limit(1, 11).get("obj_*").desc().alpha().execute()
        client.sort("mylist").alpha().desc().get("obj_*").limit(1, 11).by("weight_*").execute()
"""

from __future__ import annotations

import contextlib
import threading
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from django_rediscmd.binder import bind_key
from django_rediscmd.descriptor import build_command
from django_rediscmd.exceptions import RedisException, SortQueryStateError
from django_rediscmd.ranges import resolve_index
from django_rediscmd.types import ResponseShape

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from django_rediscmd.descriptor import CommandDescriptor
    from django_rediscmd.types import KeyT


class SortState(StrEnum):
    CONFIGURING = "configuring"
    EXECUTED = "executed"


class SortClause(StrEnum):
    BY = "BY"
    LIMIT = "LIMIT"
    GET = "GET"
    DESC = "DESC"
    ALPHA = "ALPHA"


# Wire order of clauses, independent of configuration order
CLAUSE_ORDER = (SortClause.BY, SortClause.LIMIT, SortClause.GET, SortClause.DESC, SortClause.ALPHA)


class SortQuery:
    """A single-use SORT builder bound to one key.

    Configuration methods return the query itself. :meth:`execute` runs the
    command once and moves the query to ``SortState.EXECUTED``; any further
    call raises :class:`SortQueryStateError`. A query belongs to one thread
    of control: configuring it from two threads at once also raises
    :class:`SortQueryStateError`.

    Args:
        key: The list, set or sorted set to sort.
        executor: Runs a descriptor and returns the verified reply list.
    """

    def __init__(self, key: KeyT, executor: Callable[[CommandDescriptor], list[bytes | None]]) -> None:
        self._key = bind_key(key)
        self._executor = executor
        self._state = SortState.CONFIGURING
        self._lock = threading.Lock()
        # GET accumulates; every other clause holds its latest arguments
        self._clauses: dict[SortClause, list[tuple[bytes, ...]]] = {}

    @property
    def state(self) -> SortState:
        return self._state

    @contextlib.contextmanager
    def _configuring(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise SortQueryStateError("SORT query is being modified concurrently")
        try:
            if self._state is SortState.EXECUTED:
                raise SortQueryStateError("SORT query has already been executed")
            yield
        finally:
            self._lock.release()

    def _set(self, clause: SortClause, *args: bytes) -> SortQuery:
        with self._configuring():
            self._clauses[clause] = [args]
        return self

    @staticmethod
    def _pattern(pattern: KeyT, clause: SortClause) -> bytes:
        try:
            return bind_key(pattern)
        except RedisException as e:
            raise RedisException(f"{clause} pattern must be a non-empty string") from e

    # =========================================================================
    # Clauses
    # =========================================================================

    def by(self, pattern: KeyT) -> SortQuery:
        """Weigh elements by the values of external keys matching ``pattern``."""
        with self._configuring():
            self._clauses[SortClause.BY] = [(self._pattern(pattern, SortClause.BY),)]
        return self

    def get(self, pattern: KeyT) -> SortQuery:
        """Return the values of external keys matching ``pattern``.

        Repeatable; patterns are emitted in call order, duplicates included.
        """
        with self._configuring():
            bound = self._pattern(pattern, SortClause.GET)
            self._clauses.setdefault(SortClause.GET, []).append((bound,))
        return self

    def limit(self, offset: int, count: int) -> SortQuery:
        """Window the result. A second call replaces the first."""
        with self._configuring():
            offset = resolve_index(offset, "offset")
            count = resolve_index(count, "count")
            if offset < 0 or count < 0:
                raise RedisException(f"LIMIT offset and count must not be negative, got ({offset}, {count})")
            self._clauses[SortClause.LIMIT] = [(str(offset).encode(), str(count).encode())]
        return self

    def desc(self) -> SortQuery:
        """Sort in descending order (ascending otherwise)."""
        return self._set(SortClause.DESC)

    def alpha(self) -> SortQuery:
        """Compare lexicographically (numerically otherwise)."""
        return self._set(SortClause.ALPHA)

    # =========================================================================
    # Execution
    # =========================================================================

    def describe(self) -> CommandDescriptor:
        """Return the descriptor :meth:`execute` would run, without running it."""
        args: list[Any] = [self._key]
        for clause in CLAUSE_ORDER:
            for clause_args in self._clauses.get(clause, ()):
                args.append(clause.value)
                args.extend(clause_args)
        return build_command("SORT", *args, shape=ResponseShape.MULTI_BULK)

    def execute(self) -> Iterator[bytes | None]:
        """Run the query once and return a one-shot iterator over the reply."""
        with self._configuring():
            descriptor = self.describe()
            self._state = SortState.EXECUTED
        return iter(self._executor(descriptor))

    def __repr__(self) -> str:
        return f"<SortQuery key={self._key!r} state={self._state.value}>"
