"""String interning: the hash function, string objects and the string table."""

from __future__ import annotations

from dataclasses import dataclass

MAX_SHORT_LEN = 40
MIN_STRTAB_SIZE = 128
STRCACHE_N = 53
STRCACHE_M = 2
HASH_LIMIT = 5
MEMERRMSG = b"not enough memory"

_MAX_INT = 2**31 - 1
_UINT = 0xFFFFFFFF


def _as_bytes(data: bytes | bytearray | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def lua_hash(data: bytes | str, seed: int) -> int:
    """Hash a byte string, sampling at most about 2**HASH_LIMIT bytes."""
    data = _as_bytes(data)
    length = len(data)
    h = (seed ^ length) & _UINT
    step = (length >> HASH_LIMIT) + 1
    while length >= step:
        h ^= ((h << 5) + (h >> 2) + data[length - 1]) & _UINT
        length -= step
    return h


@dataclass(eq=False)
class LuaString:
    """A string object. Short strings are interned; compare them by identity."""

    data: bytes
    hash: int
    long: bool = False
    extra: int = 0

    def __len__(self) -> int:
        return len(self.data)

    def is_reserved(self) -> bool:
        """Whether this is a short string marked as a reserved word."""
        return not self.long and self.extra > 0


def long_strings_equal(a: LuaString, b: LuaString) -> bool:
    """Equality for long strings: same object or same contents."""
    if not (a.long and b.long):
        raise ValueError("long_strings_equal expects two long strings")
    return a is b or a.data == b.data


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


class StringTable:
    """Hash table that interns short strings, plus a small lookup cache."""

    def __init__(self, seed: int = 0, size: int = MIN_STRTAB_SIZE) -> None:
        self.seed = seed & _UINT
        self._buckets: list[list[LuaString]] = []
        self._nuse = 0
        self.resize(size)
        self.memerrmsg = self.new_lstr(MEMERRMSG)
        self._cache = [[self.memerrmsg] * STRCACHE_M for _ in range(STRCACHE_N)]

    @property
    def size(self) -> int:
        return len(self._buckets)

    def __len__(self) -> int:
        return self._nuse

    def __contains__(self, data: object) -> bool:
        if not isinstance(data, (bytes, bytearray, str)):
            return False
        raw = _as_bytes(data)
        bucket = self._buckets[lua_hash(raw, self.seed) & (self.size - 1)]
        return any(ts.data == raw for ts in bucket)

    def resize(self, newsize: int) -> None:
        """Rehash every interned string into ``newsize`` buckets."""
        if not _is_power_of_two(newsize):
            raise ValueError(f"table size must be a power of 2, got {newsize}")
        buckets: list[list[LuaString]] = [[] for _ in range(newsize)]
        for bucket in self._buckets:
            for ts in bucket:
                buckets[ts.hash & (newsize - 1)].insert(0, ts)
        self._buckets = buckets

    def _intern(self, data: bytes) -> LuaString:
        h = lua_hash(data, self.seed)
        bucket = self._buckets[h & (self.size - 1)]
        for ts in bucket:
            if ts.data == data:
                return ts
        if self._nuse >= self.size and self.size <= _MAX_INT // 2:
            self.resize(self.size * 2)
            bucket = self._buckets[h & (self.size - 1)]
        ts = LuaString(data, h)
        bucket.insert(0, ts)
        self._nuse += 1
        return ts

    def new_lstr(self, data: bytes | str) -> LuaString:
        """Return an interned short string, or a fresh long string."""
        raw = _as_bytes(data)
        if len(raw) <= MAX_SHORT_LEN:
            return self._intern(raw)
        return LuaString(raw, self.seed, long=True)

    def new(self, data: bytes | str) -> LuaString:
        """Like new_lstr, but first consult the cache of recent strings."""
        raw = _as_bytes(data)
        entries = self._cache[lua_hash(raw, self.seed) % STRCACHE_N]
        for ts in entries:
            if ts.data == raw:
                return ts
        entries.insert(0, self.new_lstr(raw))
        entries.pop()
        return entries[0]

    def hash_long(self, ts: LuaString) -> int:
        """Compute (once) and return the hash of a long string."""
        if not ts.long:
            raise ValueError("hash_long expects a long string")
        if ts.extra == 0:
            ts.hash = lua_hash(ts.data, ts.hash)
            ts.extra = 1
        return ts.hash

    def remove(self, ts: LuaString) -> None:
        """Drop an interned string from the table."""
        bucket = self._buckets[ts.hash & (self.size - 1)]
        for index, candidate in enumerate(bucket):
            if candidate is ts:
                del bucket[index]
                self._nuse -= 1
                return
        raise KeyError(ts.data)

    def clear_cache(self) -> None:
        """Reset every cache entry to the fixed memory-error message."""
        for entries in self._cache:
            entries[:] = [self.memerrmsg] * STRCACHE_M