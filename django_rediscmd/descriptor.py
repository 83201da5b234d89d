"""Command descriptors: one fully-resolved command, ready for a connector."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django_rediscmd.exceptions import ProviderError
from django_rediscmd.types import ResponseShape

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True)
class CommandDescriptor:
    """An immutable command invocation.

    Attributes:
        name: The command token, e.g. ``"LRANGE"``.
        args: Arguments in wire form, in protocol order.
        shape: The reply shape the command declares.
    """

    name: str
    args: tuple[bytes, ...]
    shape: ResponseShape

    def to_wire(self) -> tuple[str | bytes, ...]:
        return (self.name, *self.args)

    def __repr__(self) -> str:
        return f"CommandDescriptor({self.name!r}, nargs={len(self.args)}, shape={self.shape.value!r})"


def _token(arg: bytes | str | int | float) -> bytes:
    if isinstance(arg, bytes):
        return arg
    if isinstance(arg, bytearray | memoryview):
        return bytes(arg)
    if isinstance(arg, str):
        return arg.encode()
    if isinstance(arg, bool):
        msg = "Booleans are not valid command arguments"
        raise ProviderError(msg)
    if isinstance(arg, int | float):
        return repr(arg).encode()
    msg = f"Unbound argument of type {type(arg).__name__}; bind values before building a command"
    raise ProviderError(msg)


def build_command(
    name: str,
    *args: bytes | str | int | float | Iterable[bytes],
    shape: ResponseShape = ResponseShape.STATUS,
) -> CommandDescriptor:
    """Assemble a :class:`CommandDescriptor`.

    ``args`` are keys and values already bound to bytes, clause tokens
    (``str``) or counts (``int``). Lists and tuples are flattened in place,
    which is how variadic arguments (``*keys``, ``*members``) are passed.
    """
    flat: list[bytes] = []
    for arg in args:
        if isinstance(arg, list | tuple):
            flat.extend(_token(a) for a in arg)
        else:
            flat.append(_token(arg))  # type: ignore[arg-type]
    return CommandDescriptor(name.upper(), tuple(flat), shape)
