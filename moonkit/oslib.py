"""Operating-system facilities: clocks, dates, environment, files and locale."""

from __future__ import annotations

import locale as _locale
import os
import subprocess
import tempfile
import time as _time
from typing import Any, Optional

from .numbers import str_to_number

# Conversion specifiers accepted by 'date' (C99 and POSIX).
_ONE_CHAR_OPTIONS = frozenset("aAbBcCdDeFgGhHIjmMnprRStTuUVwWxXyYzZ%")
_TWO_CHAR_OPTIONS = frozenset(
    ["Ec", "EC", "Ex", "EX", "Ey", "EY"]
    + ["Od", "Oe", "OH", "OI", "Om", "OM", "OS", "Ou", "OU", "OV", "Ow", "OW", "Oy"]
)

# Maximum size of the output of a single conversion specifier.
_SIZETIMEFMT = 250

# Maximum absolute value accepted for a date field.
MAX_DATE_FIELD = (2**31 - 1) // 2

_NOT_REPRESENTABLE = "time result cannot be represented in this installation"

_CATEGORIES = {
    "all": _locale.LC_ALL,
    "collate": _locale.LC_COLLATE,
    "ctype": _locale.LC_CTYPE,
    "monetary": _locale.LC_MONETARY,
    "numeric": _locale.LC_NUMERIC,
    "time": _locale.LC_TIME,
}


def _to_integer(value: Any) -> Optional[int]:
    """Convert an integer, an integral float or a numeric string; else None."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, (str, bytes, bytearray)):
        try:
            return _to_integer(str_to_number(value))
        except ValueError:
            return None
    return None


def _check_time(value: Any, position: int) -> int:
    t = _to_integer(value)
    if t is None:
        raise TypeError(f"bad argument #{position}: number has no integer representation")
    return t


def clock() -> float:
    """Processor time used by the program, in seconds."""
    return _time.process_time()


def _broken_down(t: int, utc: bool) -> _time.struct_time:
    try:
        return _time.gmtime(t) if utc else _time.localtime(t)
    except (OverflowError, OSError, ValueError):
        raise ValueError(_NOT_REPRESENTABLE) from None


def _fields_of(stm: _time.struct_time) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "sec": stm.tm_sec,
        "min": stm.tm_min,
        "hour": stm.tm_hour,
        "day": stm.tm_mday,
        "month": stm.tm_mon,
        "year": stm.tm_year,
        # Sunday is day 1.
        "wday": (stm.tm_wday + 1) % 7 + 1,
        "yday": stm.tm_yday,
    }
    if stm.tm_isdst >= 0:
        fields["isdst"] = bool(stm.tm_isdst)
    return fields


def _split_option(rest: str) -> tuple[str, str]:
    """Return (specifier, remainder) for the text after a '%'."""
    if rest[:1] in _ONE_CHAR_OPTIONS:
        return rest[:1], rest[1:]
    if len(rest) >= 2 and rest[:2] in _TWO_CHAR_OPTIONS:
        return rest[:2], rest[2:]
    raise ValueError(f"bad argument #1 to 'date' (invalid conversion specifier '%{rest}')")


def date(fmt: str = "%c", t: Any = None) -> Any:
    """Format time ``t`` (default: now) with ``fmt``.

    A leading '!' selects UTC. The format "*t" returns a dict of the
    date's fields instead of a string.
    """
    stamp = int(_time.time()) if t is None else _check_time(t, 2)
    utc = fmt.startswith("!")
    if utc:
        fmt = fmt[1:]
    stm = _broken_down(stamp, utc)
    if fmt == "*t":
        return _fields_of(stm)
    pieces: list[str] = []
    rest = fmt
    while rest:
        percent = rest.find("%")
        if percent < 0:
            pieces.append(rest)
            break
        pieces.append(rest[:percent])
        spec, rest = _split_option(rest[percent + 1 :])
        text = _time.strftime("%" + spec, stm)
        pieces.append(text if len(text) < _SIZETIMEFMT else "")
    return "".join(pieces)


def _get_field(fields: dict, key: str, default: int, delta: int) -> int:
    raw = fields.get(key)
    value = _to_integer(raw)
    if value is None:
        if raw is not None:
            raise ValueError(f"field '{key}' is not an integer")
        if default < 0:
            raise ValueError(f"field '{key}' missing in date table")
        return default
    if not -MAX_DATE_FIELD <= value <= MAX_DATE_FIELD:
        raise ValueError(f"field '{key}' is out-of-bound")
    return value - delta


def time(fields: Optional[dict] = None) -> int:
    """Current time, or the time described by ``fields`` in local time.

    The dict is updated in place with the normalised field values.
    """
    if fields is None:
        return int(_time.time())
    if not isinstance(fields, dict):
        raise TypeError("bad argument #1 to 'time' (table expected)")
    sec = _get_field(fields, "sec", 0, 0)
    minute = _get_field(fields, "min", 0, 0)
    hour = _get_field(fields, "hour", 12, 0)
    day = _get_field(fields, "day", -1, 0)
    month = _get_field(fields, "month", -1, 1)
    year = _get_field(fields, "year", -1, 1900)
    isdst_raw = fields.get("isdst")
    isdst = -1 if isdst_raw is None else (0 if isdst_raw is False else 1)
    try:
        result = int(
            _time.mktime((year + 1900, month + 1, day, hour, minute, sec, 0, 1, isdst))
        )
    except (OverflowError, OSError, ValueError):
        raise ValueError(_NOT_REPRESENTABLE) from None
    fields.pop("isdst", None)
    fields.update(_fields_of(_broken_down(result, False)))
    return result


def difftime(t1: Any, t2: Any) -> float:
    """Seconds from ``t2`` to ``t1``."""
    return float(_check_time(t1, 1) - _check_time(t2, 2))


def _shell_available() -> bool:
    if os.name == "nt":
        return bool(os.environ.get("COMSPEC"))
    return os.path.exists("/bin/sh")


def execute(cmd: Optional[str] = None) -> Any:
    """Run ``cmd`` through the shell.

    Returns (succeeded, "exit" or "signal", code). With no command,
    returns whether a shell is available.
    """
    if cmd is None:
        return _shell_available()
    try:
        completed = subprocess.run(cmd, shell=True, check=False)
    except OSError as exc:
        raise OSError(exc.errno, exc.strerror, cmd) from exc
    code = completed.returncode
    if code < 0:
        return False, "signal", -code
    return code == 0, "exit", code


def getenv(name: str) -> Optional[str]:
    """The value of environment variable ``name``, or None."""
    return os.environ.get(name)


def remove(filename: str) -> bool:
    """Delete a file or an empty directory; raise OSError on failure."""
    if os.path.isdir(filename) and not os.path.islink(filename):
        os.rmdir(filename)
    else:
        os.remove(filename)
    return True


def rename(fromname: str, toname: str) -> bool:
    """Rename a file; raise OSError on failure."""
    os.rename(fromname, toname)
    return True


def tmpname() -> str:
    """Create a new empty temporary file and return its name."""
    try:
        fd, name = tempfile.mkstemp(prefix="lua_")
    except OSError:
        raise RuntimeError("unable to generate a unique filename") from None
    os.close(fd)
    return name


def setlocale(locale_name: Optional[str] = None, category: str = "all") -> Optional[str]:
    """Set or (with no name) query the locale of ``category``.

    Returns the locale name, or None when the request cannot be honoured.
    """
    try:
        cat = _CATEGORIES[category]
    except KeyError:
        raise ValueError(f"bad argument #2 to 'setlocale' (invalid option '{category}')") from None
    try:
        return _locale.setlocale(cat, locale_name)
    except _locale.Error:
        return None


def exit(status: Any = None, close: bool = False) -> None:
    """Terminate the program with ``status`` (True/False or an exit code).

    ``close`` is accepted for compatibility; there is no state to release
    beyond what interpreter shutdown already handles.
    """
    if isinstance(status, bool):
        code = 0 if status else 1
    elif status is None:
        code = 0
    else:
        checked = _to_integer(status)
        if checked is None:
            raise TypeError("bad argument #1 to 'exit' (number expected)")
        code = checked
    raise SystemExit(code)