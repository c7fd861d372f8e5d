"""Message formatting and chunk names for diagnostics."""

from __future__ import annotations

from typing import Any

from .numbers import number_to_string, utf8_escape

IDSIZE = 60

_RETS = "..."
_PRE = '[string "'
_POS = '"]'


def _as_text(value: Any) -> str:
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", "replace")
    data = getattr(value, "data", None)
    if isinstance(data, bytes):
        return data.decode("utf-8", "replace")
    return str(value)


def _as_char(value: Any) -> str:
    code = ord(value) if isinstance(value, str) else int(value)
    code &= 0xFF
    if 0x20 <= code < 0x7F:
        return chr(code)
    return f"<\\{code}>"


def _as_pointer(value: Any) -> str:
    if value is None:
        return "(nil)"
    if isinstance(value, int) and not isinstance(value, bool):
        return hex(value)
    return hex(id(value))


def format_message(fmt: str, *args: Any) -> str:
    """Format ``fmt`` with the directives %s %c %d %I %f %p %U and %%.

    Raises ValueError on an unknown directive and TypeError when the
    arguments run out.
    """
    pieces: list[str] = []
    remaining = iter(args)

    def next_arg(directive: str) -> Any:
        try:
            return next(remaining)
        except StopIteration:
            raise TypeError(f"missing argument for '%{directive}'") from None

    pos = 0
    while True:
        percent = fmt.find("%", pos)
        if percent < 0:
            break
        pieces.append(fmt[pos:percent])
        directive = fmt[percent + 1 : percent + 2]
        if directive == "s":
            pieces.append(_as_text(next_arg(directive)))
        elif directive == "c":
            pieces.append(_as_char(next_arg(directive)))
        elif directive in ("d", "I"):
            pieces.append(number_to_string(int(next_arg(directive))))
        elif directive == "f":
            pieces.append(number_to_string(float(next_arg(directive))))
        elif directive == "p":
            pieces.append(_as_pointer(next_arg(directive)))
        elif directive == "U":
            encoded = utf8_escape(int(next_arg(directive)))
            pieces.append(encoded.decode("utf-8", "surrogatepass"))
        elif directive == "%":
            pieces.append("%")
        else:
            raise ValueError(
                f"invalid option '%{directive}' to 'lua_pushfstring'"
            )
        pos = percent + 2
    pieces.append(fmt[pos:])
    return "".join(pieces)


def chunk_id(source: str, bufflen: int = IDSIZE) -> str:
    """A printable name for a chunk, at most ``bufflen - 1`` characters long.

    Sources starting with '=' are shown literally, those starting with '@'
    are file names (truncated at the front), and anything else is shown as
    the first line of the source text in a [string "..."] form.
    """
    if bufflen < 1:
        raise ValueError("buffer length must be positive")
    length = len(source)
    if source.startswith("="):
        if length <= bufflen:
            return source[1:]
        return source[1:bufflen]
    if source.startswith("@"):
        if length <= bufflen:
            return source[1:]
        if bufflen < len(_RETS) + 1:
            raise ValueError("buffer length too small for a file name")
        return _RETS + source[length - bufflen + len(_RETS) + 1 :]
    avail = bufflen - (len(_PRE) + len(_RETS) + len(_POS)) - 1
    if avail < 0:
        raise ValueError("buffer length too small for a source string")
    newline = source.find("\n")
    if length < avail and newline < 0:
        return _PRE + source + _POS
    if newline >= 0:
        length = newline
    length = min(length, avail)
    return _PRE + source[:length] + _RETS + _POS