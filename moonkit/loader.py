"""Module search and loading: search paths, searchers and ``require``."""

from __future__ import annotations

import os
from typing import Any, Callable, Mapping, Optional

VERSION_SUFFIX = "_5_3"
PATH_VAR = "LUA_PATH"
CPATH_VAR = "LUA_CPATH"

PATH_SEP = ";"
PATH_MARK = "?"
EXEC_DIR = "!"
IGNORE_MARK = "-"
OPEN_PREFIX = "luaopen_"
OPEN_SEP = "_"

_AUXMARK = "\1"

_INSTALL_TOP = "/usr/local/"
_LUA_DIR = _INSTALL_TOP + "share/lua/5.3/"
_C_DIR = _INSTALL_TOP + "lib/lua/5.3/"

PATH_DEFAULT = ";".join(
    [
        _LUA_DIR + "?.lua",
        _LUA_DIR + "?/init.lua",
        _C_DIR + "?.lua",
        _C_DIR + "?/init.lua",
        "./?.lua",
        "./?/init.lua",
    ]
)
CPATH_DEFAULT = ";".join([_C_DIR + "?.so", _C_DIR + "loadall.so", "./?.so"])

DLMSG = "dynamic libraries not enabled; check your Lua installation"
CHUNKMSG = "no chunk loader configured"


class ModuleNotFound(ImportError):
    """No searcher could find a loader for a module."""


class _LibraryError(Exception):
    """A library file could not be loaded."""


class _SymbolError(Exception):
    """A library was loaded but lacks the requested open function."""


def _readable(filename: str) -> bool:
    try:
        with open(filename, "r"):
            return True
    except OSError:
        return False


def search_path(
    name: str, path: str, sep: str = ".", dirsep: str = os.sep
) -> str:
    """Return the first readable file built from the templates in ``path``.

    Raises FileNotFoundError whose message lists every file tried.
    """
    if sep:
        name = name.replace(sep, dirsep)
    tried: list[str] = []
    for template in path.split(PATH_SEP):
        if not template:
            continue
        filename = template.replace(PATH_MARK, name)
        if _readable(filename):
            return filename
        tried.append(f"\n\tno file '{filename}'")
    raise FileNotFoundError("".join(tried))


def build_path(
    envname: str,
    default: str,
    environ: Optional[Mapping[str, str]] = None,
    noenv: bool = False,
) -> str:
    """Compute a search path from the environment, falling back to ``default``.

    The versioned variable name is tried first. In the value, ';;' stands
    for the default path.
    """
    env = os.environ if environ is None else environ
    value = env.get(envname + VERSION_SUFFIX)
    if value is None:
        value = env.get(envname)
    if value is None or noenv:
        return default
    value = value.replace(PATH_SEP + PATH_SEP, PATH_SEP + _AUXMARK + PATH_SEP)
    return value.replace(_AUXMARK, default)


def open_function_names(modname: str) -> list[str]:
    """Names of the open functions to look for, in the order they are tried."""
    modname = modname.replace(".", OPEN_SEP)
    head, mark, tail = modname.partition(IGNORE_MARK)
    if mark:
        return [OPEN_PREFIX + head, OPEN_PREFIX + tail]
    return [OPEN_PREFIX + modname]


def _absent_file_loader(filename: str) -> Callable[..., Any]:
    raise ImportError(CHUNKMSG)


def _absent_library_loader(path: str) -> Mapping[str, Callable[..., Any]]:
    raise OSError(DLMSG)


def _is_true(value: Any) -> bool:
    return value is not None and value is not False


class Package:
    """Search paths, preload and loaded tables, searchers and ``require``.

    ``file_loader(filename)`` returns a loader for a source file and raises
    on failure. ``library_loader(path)`` returns a mapping from symbol names
    to open functions and raises OSError when the library cannot be loaded.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        cpath: Optional[str] = None,
        file_loader: Optional[Callable[[str], Callable[..., Any]]] = None,
        library_loader: Optional[Callable[[str], Mapping[str, Any]]] = None,
    ) -> None:
        self.path = build_path(PATH_VAR, PATH_DEFAULT) if path is None else path
        self.cpath = build_path(CPATH_VAR, CPATH_DEFAULT) if cpath is None else cpath
        self.file_loader = file_loader or _absent_file_loader
        self.library_loader = library_loader or _absent_library_loader
        self.config = "\n".join([os.sep, PATH_SEP, PATH_MARK, EXEC_DIR, IGNORE_MARK]) + "\n"
        self.preload: dict[str, Callable[..., Any]] = {}
        self.loaded: dict[str, Any] = {}
        self.clibs: dict[str, Mapping[str, Any]] = {}
        self.searchers: list[Callable[[str], Any]] = [
            self.searcher_preload,
            self.searcher_lua,
            self.searcher_c,
            self.searcher_croot,
        ]

    def searchpath(
        self, name: str, path: str, sep: str = ".", dirsep: str = os.sep
    ) -> str:
        """Same as :func:`search_path`."""
        return search_path(name, path, sep, dirsep)

    def _findfile(self, name: str, field: str) -> str:
        path = getattr(self, field)
        if not isinstance(path, str):
            raise TypeError(f"'package.{field}' must be a string")
        return search_path(name, path, ".", os.sep)

    def _lookforfunc(self, path: str, sym: str) -> Callable[..., Any]:
        library = self.clibs.get(path)
        if library is None:
            try:
                library = self.library_loader(path)
            except OSError as exc:
                raise _LibraryError(str(exc.strerror or exc)) from exc
            self.clibs[path] = library
        try:
            return library[sym]
        except KeyError:
            raise _SymbolError(f"undefined symbol: {sym}") from None

    def _loadfunc(self, filename: str, modname: str) -> Callable[..., Any]:
        names = open_function_names(modname)
        for candidate in names[:-1]:
            try:
                return self._lookforfunc(filename, candidate)
            except _SymbolError:
                continue
        return self._lookforfunc(filename, names[-1])

    @staticmethod
    def _load_error(name: str, filename: str, message: str) -> ImportError:
        return ImportError(
            f"error loading module '{name}' from file '{filename}':\n\t{message}"
        )

    def searcher_preload(self, name: str) -> Any:
        """Find a loader in ``preload``; else return an explanation."""
        loader = self.preload.get(name)
        if loader is None:
            return f"\n\tno field package.preload['{name}']"
        return loader, None

    def searcher_lua(self, name: str) -> Any:
        """Find a source file on ``path`` and load it with ``file_loader``."""
        try:
            filename = self._findfile(name, "path")
        except FileNotFoundError as exc:
            return str(exc)
        try:
            loader = self.file_loader(filename)
        except Exception as exc:
            raise self._load_error(name, filename, str(exc)) from exc
        return loader, filename

    def searcher_c(self, name: str) -> Any:
        """Find a library on ``cpath`` and its open function."""
        try:
            filename = self._findfile(name, "cpath")
        except FileNotFoundError as exc:
            return str(exc)
        try:
            func = self._loadfunc(filename, name)
        except (_LibraryError, _SymbolError) as exc:
            raise self._load_error(name, filename, str(exc)) from exc
        return func, filename

    def searcher_croot(self, name: str) -> Any:
        """Look for a submodule's open function in its root's library."""
        root, dot, _ = name.partition(".")
        if not dot:
            return None
        try:
            filename = self._findfile(root, "cpath")
        except FileNotFoundError as exc:
            return str(exc)
        try:
            func = self._loadfunc(filename, name)
        except _SymbolError:
            return f"\n\tno module '{name}' in file '{filename}'"
        except _LibraryError as exc:
            raise self._load_error(name, filename, str(exc)) from exc
        return func, filename

    def _findloader(self, name: str) -> tuple[Callable[..., Any], Any]:
        if not isinstance(self.searchers, list):
            raise TypeError("'package.searchers' must be a table")
        messages: list[str] = []
        for searcher in self.searchers:
            result = searcher(name)
            if isinstance(result, tuple) and result and callable(result[0]):
                loader = result[0]
                data = result[1] if len(result) > 1 else None
                return loader, data
            if isinstance(result, str):
                messages.append(result)
        raise ModuleNotFound(f"module '{name}' not found:{''.join(messages)}")

    def require(self, name: str) -> Any:
        """Load module ``name`` once and return its value."""
        if _is_true(self.loaded.get(name)):
            return self.loaded[name]
        loader, data = self._findloader(name)
        value = loader(name, data)
        if value is not None:
            self.loaded[name] = value
        if self.loaded.get(name) is None:
            self.loaded[name] = True
        return self.loaded[name]