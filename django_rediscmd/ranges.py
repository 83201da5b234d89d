"""Index and score ranges for lists and sorted sets.

Collection lengths are not known client-side, so negative indices are not
resolved here: they are passed to the server, which reads ``-1`` as the last
element, ``-2`` as the one before it, and so on. Resolving a range only
validates its shape, which makes it idempotent.
"""

from __future__ import annotations

import math
from typing import NamedTuple

from django_rediscmd.exceptions import RedisException


class IndexRange(NamedTuple):
    """An inclusive ``(start, stop)`` index window, possibly negative."""

    start: int
    stop: int

    def to_args(self) -> tuple[bytes, bytes]:
        return str(self.start).encode(), str(self.stop).encode()


class ScoreRange(NamedTuple):
    """A score window over a sorted set, inclusive unless marked exclusive."""

    min_score: float
    max_score: float
    min_exclusive: bool = False
    max_exclusive: bool = False

    def to_args(self) -> tuple[bytes, bytes]:
        return (
            _score_bound(self.min_score, exclusive=self.min_exclusive),
            _score_bound(self.max_score, exclusive=self.max_exclusive),
        )


def _score_bound(score: float, *, exclusive: bool) -> bytes:
    if math.isinf(score):
        token = "+inf" if score > 0 else "-inf"
    else:
        token = repr(float(score))
    return ("(" + token if exclusive else token).encode()


def resolve_index(index: int | float, name: str = "index") -> int:
    """Validate a single list index; whole-valued floats are accepted."""
    if isinstance(index, bool) or index is None:
        raise RedisException(f"{name} must be a whole number, got {index!r}")
    if isinstance(index, int):
        return index
    if isinstance(index, float) and index.is_integer():
        return int(index)
    raise RedisException(f"{name} must be a whole number, got {index!r}")


def resolve_range(start: int | float, stop: int | float) -> IndexRange:
    """Validate a ``(start, stop)`` pair for LRANGE/LTRIM/ZRANGE-style commands.

    ``resolve_range(-1, -1)`` always denotes the last element only.
    """
    return IndexRange(resolve_index(start, "start"), resolve_index(stop, "stop"))


def resolve_score(score: float, name: str = "score") -> float:
    if isinstance(score, bool) or not isinstance(score, int | float):
        raise RedisException(f"{name} must be a number, got {score!r}")
    score = float(score)
    if math.isnan(score):
        raise RedisException(f"{name} must not be NaN")
    return score


def resolve_score_range(
    min_score: float,
    max_score: float,
    *,
    min_exclusive: bool = False,
    max_exclusive: bool = False,
) -> ScoreRange:
    """Validate a score window; infinite bounds are allowed, NaN is not."""
    return ScoreRange(
        resolve_score(min_score, "min_score"),
        resolve_score(max_score, "max_score"),
        min_exclusive,
        max_exclusive,
    )
