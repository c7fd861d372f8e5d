"""Value type tags and function prototype records.

A raw type tag uses bits 0-3 for the basic type, bits 4-5 for a variant
(integer or float, short or long string, kind of function) and bit 6 to
mark values whose lifetime the collector manages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable

from .strings import MAX_SHORT_LEN, LuaString

BIT_ISCOLLECTABLE = 1 << 6

NUMTAGS = 9


class TypeTag(IntEnum):
    """Basic type tags and their variants."""

    NONE = -1
    NIL = 0
    BOOLEAN = 1
    LIGHTUSERDATA = 2
    NUMBER = 3
    STRING = 4
    TABLE = 5
    FUNCTION = 6
    USERDATA = 7
    THREAD = 8
    # Not visible to programs: function prototypes and dead table keys.
    PROTO = NUMTAGS
    DEADKEY = NUMTAGS + 1

    # Function variants.
    LCL = FUNCTION | (0 << 4)  # closure over compiled code
    LCF = FUNCTION | (1 << 4)  # light host function
    CCL = FUNCTION | (2 << 4)  # host closure

    # String variants.
    SHRSTR = STRING | (0 << 4)
    LNGSTR = STRING | (1 << 4)

    # Number variants.
    NUMFLT = NUMBER | (0 << 4)
    NUMINT = NUMBER | (1 << 4)


# Number of all possible tags (including NONE but excluding DEADKEY).
TOTALTAGS = TypeTag.PROTO + 2


def novariant(tag: int) -> int:
    """The basic type of a tag, without its variant bits."""
    return tag & 0x0F


def mark_collectable(tag: int) -> int:
    """Return ``tag`` with the collectable bit set."""
    return tag | BIT_ISCOLLECTABLE


def is_collectable(tag: int) -> bool:
    """Whether a raw tag carries the collectable bit."""
    return bool(tag & BIT_ISCOLLECTABLE)


@dataclass
class LocVar:
    """Debug information about a local variable of a function."""

    varname: Any
    startpc: int = 0  # first point where the variable is active
    endpc: int = 0  # first point where the variable is dead


@dataclass
class Upvaldesc:
    """Description of an upvalue of a function prototype."""

    name: Any
    instack: bool = False  # whether it lives in a register of the enclosing function
    idx: int = 0  # index in the stack or in the outer function's upvalue list


@dataclass(eq=False)
class Proto:
    """A function prototype: code, constants, nested functions and debug data."""

    numparams: int = 0
    is_vararg: bool = False
    maxstacksize: int = 2
    k: list[Any] = field(default_factory=list)
    code: list[int] = field(default_factory=list)
    p: list["Proto"] = field(default_factory=list)
    lineinfo: list[int] = field(default_factory=list)
    locvars: list[LocVar] = field(default_factory=list)
    upvalues: list[Upvaldesc] = field(default_factory=list)
    source: Any = None
    linedefined: int = 0
    lastlinedefined: int = 0


def tag_of(value: Any) -> int:
    """The raw tag a Python value would carry as a runtime value."""
    if value is None:
        return TypeTag.NIL
    if isinstance(value, bool):
        return TypeTag.BOOLEAN
    if isinstance(value, int):
        return TypeTag.NUMINT
    if isinstance(value, float):
        return TypeTag.NUMFLT
    if isinstance(value, LuaString):
        return mark_collectable(TypeTag.LNGSTR if value.long else TypeTag.SHRSTR)
    if isinstance(value, (str, bytes, bytearray)):
        size = len(value.encode("utf-8")) if isinstance(value, str) else len(value)
        return mark_collectable(
            TypeTag.SHRSTR if size <= MAX_SHORT_LEN else TypeTag.LNGSTR
        )
    if isinstance(value, dict):
        return mark_collectable(TypeTag.TABLE)
    if isinstance(value, Proto):
        return mark_collectable(TypeTag.PROTO)
    if isinstance(value, Callable):  # type: ignore[arg-type]
        return TypeTag.LCF
    raise TypeError(f"no type tag for value of type {type(value).__name__}")


def is_false(value: Any) -> bool:
    """Only nil and false are false."""
    return value is None or value is False


def lmod(s: int, size: int) -> int:
    """``s`` modulo ``size``, where ``size`` must be a power of 2."""
    if size <= 0 or size & (size - 1):
        raise ValueError(f"size must be a power of 2, got {size}")
    return s & (size - 1)


def sizenode(lsizenode: int) -> int:
    """Number of hash nodes for a table whose size log is ``lsizenode``."""
    if lsizenode < 0:
        raise ValueError("size log must not be negative")
    return 1 << lsizenode