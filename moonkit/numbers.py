"""Numeric helpers: conversions between strings and numbers, and raw arithmetic.

Integers are 64-bit two's-complement values that wrap on overflow; floats
are IEEE doubles.
"""

from __future__ import annotations

import math
import re
from enum import IntEnum
from typing import Any

_MASK64 = (1 << 64) - 1
_MAXINTEGER = (1 << 63) - 1
_MININTEGER = -(1 << 63)
_MAXBY10 = _MAXINTEGER // 10
_MAXLASTD = _MAXINTEGER % 10
_SPACES = " \t\n\v\f\r"
_HEXDIGITS = "0123456789abcdefABCDEF"
_MAXSIGDIG = 30
_NUMBER_FORMAT = "%.14g"

_DECIMAL = re.compile(
    r"[ \t\n\v\f\r]*([+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?)"
    r"[ \t\n\v\f\r]*"
)

_LOG2_TABLE = bytes(
    [0, 1, 2, 2, 3, 3, 3, 3] + [4] * 8 + [5] * 16 + [6] * 32 + [7] * 64 + [8] * 128
)


class ArithOp(IntEnum):
    """Arithmetic and bitwise operators, in their encoding order."""

    ADD = 0
    SUB = 1
    MUL = 2
    MOD = 3
    POW = 4
    DIV = 5
    IDIV = 6
    BAND = 7
    BOR = 8
    BXOR = 9
    SHL = 10
    SHR = 11
    UNM = 12
    BNOT = 13


_INTEGER_ONLY = frozenset(
    {ArithOp.BAND, ArithOp.BOR, ArithOp.BXOR, ArithOp.SHL, ArithOp.SHR, ArithOp.BNOT}
)
_FLOAT_ONLY = frozenset({ArithOp.DIV, ArithOp.POW})


def _wrap(x: int) -> int:
    """Reduce ``x`` to a signed 64-bit integer."""
    x &= _MASK64
    return x - (1 << 64) if x > _MAXINTEGER else x


def int2fb(x: int) -> int:
    """Encode ``x`` as a "floating point byte" (eeeeexxx), rounding up."""
    if x < 0:
        raise ValueError("int2fb expects a non-negative integer")
    e = 0
    if x < 8:
        return x
    while x >= (8 << 4):
        x = (x + 0xF) >> 4
        e += 4
    while x >= (8 << 1):
        x = (x + 1) >> 1
        e += 1
    return ((e + 1) << 3) | (x - 8)


def fb2int(x: int) -> int:
    """Decode a "floating point byte" produced by int2fb."""
    return x if x < 8 else ((x & 7) + 8) << ((x >> 3) - 1)


def ceillog2(x: int) -> int:
    """Return ceil(log2(x)) for a positive integer ``x``."""
    if x < 1:
        raise ValueError("ceillog2 expects a positive integer")
    result = 0
    x -= 1
    while x >= 256:
        result += 8
        x >>= 8
    return result + _LOG2_TABLE[x]


def hexavalue(c: str | int) -> int:
    """The value of a hexadecimal digit given as a character or character code."""
    ch = chr(c) if isinstance(c, int) else c
    if ch.isascii() and ch.isdigit():
        return ord(ch) - ord("0")
    return ord(ch.lower()) - ord("a") + 10


def _skip_spaces(s: str, i: int) -> int:
    while i < len(s) and s[i] in _SPACES:
        i += 1
    return i


def _sign(s: str, i: int) -> tuple[bool, int]:
    if i < len(s) and s[i] == "-":
        return True, i + 1
    if i < len(s) and s[i] == "+":
        return False, i + 1
    return False, i


def _str2int(s: str) -> int | None:
    i = _skip_spaces(s, 0)
    neg, i = _sign(s, i)
    a = 0
    empty = True
    if s[i : i + 1] == "0" and s[i + 1 : i + 2] in ("x", "X"):
        i += 2
        while i < len(s) and s[i] in _HEXDIGITS:
            a = (a * 16 + hexavalue(s[i])) & _MASK64
            empty = False
            i += 1
    else:
        while i < len(s) and "0" <= s[i] <= "9":
            d = ord(s[i]) - ord("0")
            if a >= _MAXBY10 and (a > _MAXBY10 or d > _MAXLASTD + neg):
                return None
            a = a * 10 + d
            empty = False
            i += 1
    i = _skip_spaces(s, i)
    if empty or i != len(s):
        return None
    return _wrap(-a if neg else a)


def _ldexp(r: float, e: int) -> float:
    try:
        return math.ldexp(r, e)
    except OverflowError:
        return math.copysign(math.inf, r)


def _strx2number(s: str) -> tuple[float, int]:
    """Parse a hexadecimal float; return (value, end index), end 0 if nothing read."""
    r = 0.0
    sigdig = nosigdig = e = 0
    hasdot = False
    i = _skip_spaces(s, 0)
    neg, i = _sign(s, i)
    if not (s[i : i + 1] == "0" and s[i + 1 : i + 2] in ("x", "X")):
        return 0.0, 0
    i += 2
    while i < len(s):
        ch = s[i]
        if ch == ".":
            if hasdot:
                break
            hasdot = True
        elif ch in _HEXDIGITS:
            if sigdig == 0 and ch == "0":
                nosigdig += 1
            else:
                sigdig += 1
                if sigdig <= _MAXSIGDIG:
                    r = r * 16.0 + hexavalue(ch)
                else:
                    e += 1
            if hasdot:
                e -= 1
        else:
            break
        i += 1
    if nosigdig + sigdig == 0:
        return 0.0, 0
    end = i
    e *= 4
    if s[i : i + 1] in ("p", "P"):
        i += 1
        neg1, i = _sign(s, i)
        if not (i < len(s) and "0" <= s[i] <= "9"):
            return 0.0, end
        exp1 = 0
        while i < len(s) and "0" <= s[i] <= "9":
            exp1 = exp1 * 10 + ord(s[i]) - ord("0")
            i += 1
        e += -exp1 if neg1 else exp1
        end = i
    if neg:
        r = -r
    return _ldexp(r, e), end


def _str2d(s: str) -> float | None:
    special = next((ch.lower() for ch in s if ch in ".xXnN"), None)
    if special == "n":  # reject 'inf' and 'nan'
        return None
    if special == "x":
        value, end = _strx2number(s)
        if end == 0 or _skip_spaces(s, end) != len(s):
            return None
        return value
    match = _DECIMAL.fullmatch(s)
    if match is None:
        return None
    return float(match.group(1))


def str_to_number(s: str | bytes) -> int | float:
    """Convert a numeral to an integer if it is one, else to a float.

    Raises ValueError when ``s`` is not a valid numeral.
    """
    text = s.decode("latin-1") if isinstance(s, (bytes, bytearray)) else s
    as_int = _str2int(text)
    if as_int is not None:
        return as_int
    as_float = _str2d(text)
    if as_float is not None:
        return as_float
    raise ValueError(f"malformed number: {text!r}")


def number_to_string(n: int | float) -> str:
    """Render a number the way the runtime prints it (floats keep a '.0')."""
    if isinstance(n, bool) or not isinstance(n, (int, float)):
        raise TypeError(f"expected a number, got {type(n).__name__}")
    if isinstance(n, int):
        return str(_wrap(n))
    text = _NUMBER_FORMAT % n
    if all(ch in "-0123456789" for ch in text):
        text += ".0"
    return text


def utf8_escape(x: int) -> bytes:
    """Encode code point ``x`` (at most 0x10FFFF) as UTF-8 bytes."""
    if not 0 <= x <= 0x10FFFF:
        raise ValueError(f"code point out of range: {x:#x}")
    if x < 0x80:
        return bytes([x])
    out = bytearray()
    mfb = 0x3F  # maximum that fits in the first byte
    while True:
        out.insert(0, 0x80 | (x & 0x3F))
        x >>= 6
        mfb >>= 1
        if x <= mfb:
            break
    out.insert(0, ((~mfb << 1) | x) & 0xFF)
    return bytes(out)


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _tointeger(v: Any) -> int | None:
    if _is_int(v):
        return _wrap(v)
    if isinstance(v, float):
        if v.is_integer() and _MININTEGER <= v <= _MAXINTEGER and v != 2.0**63:
            return int(v)
        return None
    if isinstance(v, (str, bytes, bytearray)):
        try:
            return _tointeger(str_to_number(v))
        except ValueError:
            return None
    return None


def _tonumber(v: Any) -> float | None:
    if _is_int(v):
        return float(_wrap(v))
    if isinstance(v, float):
        return v
    if isinstance(v, (str, bytes, bytearray)):
        try:
            return float(str_to_number(v))
        except ValueError:
            return None
    return None


def _shiftl(x: int, y: int) -> int:
    if y < 0:
        if y <= -64:
            return 0
        return _wrap((x & _MASK64) >> -y)
    if y >= 64:
        return 0
    return _wrap(x << y)


def _intarith(op: ArithOp, v1: int, v2: int) -> int:
    if op is ArithOp.ADD:
        return _wrap(v1 + v2)
    if op is ArithOp.SUB:
        return _wrap(v1 - v2)
    if op is ArithOp.MUL:
        return _wrap(v1 * v2)
    if op is ArithOp.MOD:
        if v2 == 0:
            raise ZeroDivisionError("attempt to perform 'n%%0'")
        return _wrap(v1 % v2)
    if op is ArithOp.IDIV:
        if v2 == 0:
            raise ZeroDivisionError("attempt to perform 'n//0'")
        return _wrap(v1 // v2)
    if op is ArithOp.BAND:
        return _wrap(v1 & v2)
    if op is ArithOp.BOR:
        return _wrap(v1 | v2)
    if op is ArithOp.BXOR:
        return _wrap(v1 ^ v2)
    if op is ArithOp.SHL:
        return _shiftl(v1, v2)
    if op is ArithOp.SHR:
        return _shiftl(v1, _wrap(-v2))
    if op is ArithOp.UNM:
        return _wrap(-v1)
    if op is ArithOp.BNOT:
        return _wrap(~v1)
    raise ValueError(f"not an integer operation: {op!r}")


def _fdiv(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _odd_integer(b: float) -> bool:
    return math.isfinite(b) and b.is_integer() and int(b) % 2 == 1


def _pow(a: float, b: float) -> float:
    try:
        return math.pow(a, b)
    except OverflowError:
        return -math.inf if a < 0 and _odd_integer(b) else math.inf
    except ValueError:
        if a == 0 and b < 0:
            if math.copysign(1.0, a) < 0 and _odd_integer(b):
                return -math.inf
            return math.inf
        return math.nan


def _fmod(a: float, b: float) -> float:
    if b == 0 or math.isinf(a) or math.isnan(a) or math.isnan(b):
        return math.nan
    m = math.fmod(a, b)
    if m * b < 0:
        m += b
    return m


def _numarith(op: ArithOp, v1: float, v2: float) -> float:
    if op is ArithOp.ADD:
        return v1 + v2
    if op is ArithOp.SUB:
        return v1 - v2
    if op is ArithOp.MUL:
        return v1 * v2
    if op is ArithOp.DIV:
        return _fdiv(v1, v2)
    if op is ArithOp.POW:
        return _pow(v1, v2)
    if op is ArithOp.IDIV:
        q = _fdiv(v1, v2)
        return float(math.floor(q)) if math.isfinite(q) else q
    if op is ArithOp.UNM:
        return -v1
    if op is ArithOp.MOD:
        return _fmod(v1, v2)
    raise ValueError(f"not a float operation: {op!r}")


def _describe(v: Any) -> str:
    if v is None:
        return "nil"
    if isinstance(v, bool):
        return "boolean"
    if isinstance(v, (str, bytes, bytearray)):
        return "string"
    if isinstance(v, dict):
        return "table"
    return type(v).__name__


def arith(op: ArithOp | int, a: Any, b: Any = None) -> int | float:
    """Apply ``op`` to ``a`` and ``b``; unary operators use ``a`` only.

    Raises TypeError when the operands cannot take part in the operation.
    """
    op = ArithOp(op)
    if b is None and op in (ArithOp.UNM, ArithOp.BNOT):
        b = a
    if op in _INTEGER_ONLY:
        i1, i2 = _tointeger(a), _tointeger(b)
        if i1 is not None and i2 is not None:
            return _intarith(op, i1, i2)
        if _tonumber(a) is not None and _tonumber(b) is not None:
            raise TypeError("number has no integer representation")
        bad = b if _tonumber(a) is not None else a
        raise TypeError(
            f"attempt to perform bitwise operation on a {_describe(bad)} value"
        )
    if op not in _FLOAT_ONLY and _is_int(a) and _is_int(b):
        return _intarith(op, _wrap(a), _wrap(b))
    n1, n2 = _tonumber(a), _tonumber(b)
    if n1 is not None and n2 is not None:
        return _numarith(op, n1, n2)
    bad = b if n1 is not None else a
    raise TypeError(f"attempt to perform arithmetic on a {_describe(bad)} value")