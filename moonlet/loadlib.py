"""Module loading: search paths, ``require``, ``module`` and ``loadlib``."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterator
from typing import Any

__all__ = [
    "LoadLibError",
    "RequireError",
    "Package",
    "make_path",
    "path_templates",
    "func_name",
    "LUA_PATHSEP",
    "LUA_PATH_MARK",
    "LUA_EXECDIR",
    "LUA_IGMARK",
    "LUA_DIRSEP",
    "LUA_POF",
    "LUA_OFSEP",
    "LUA_PATH_DEFAULT",
    "LUA_CPATH_DEFAULT",
    "DLMSG",
]

LUA_PATHSEP = ";"
LUA_PATH_MARK = "?"
LUA_EXECDIR = "!"
LUA_IGMARK = "-"
LUA_DIRSEP = os.sep
LUA_POF = "luaopen_"
LUA_OFSEP = "_"
LUA_PATH_ENV = "LUA_PATH"
LUA_CPATH_ENV = "LUA_CPATH"
LUA_PATH_DEFAULT = "./?.lua;./?/init.lua"
LUA_CPATH_DEFAULT = "./?.so"

DLMSG = "dynamic libraries not enabled; check your Lua installation"
_LIB_FAIL = "absent"
_AUXMARK = "\1"

_SENTINEL = object()


class LoadLibError(Exception):
    """A library or one of its functions could not be loaded.

    ``where`` is ``"absent"`` when the library itself failed and
    ``"init"`` when the initialisation function was not found.
    """

    def __init__(self, message: str, where: str) -> None:
        super().__init__(message)
        self.message = message
        self.where = where


class RequireError(Exception):
    """A module could not be found, loaded or declared."""


def make_path(env_value: str | None, default: str) -> str:
    """Build a search path from an environment value.

    Without a value the default is used; otherwise every ``;;`` in the
    value is replaced by ``;<default>;``.
    """
    if env_value is None:
        return default
    doubled = LUA_PATHSEP + LUA_PATHSEP
    marked = env_value.replace(doubled, LUA_PATHSEP + _AUXMARK + LUA_PATHSEP)
    return marked.replace(_AUXMARK, default)


def path_templates(path: str) -> Iterator[str]:
    """Yield the non-empty templates of a ``;``-separated path."""
    for template in path.split(LUA_PATHSEP):
        if template:
            yield template


def func_name(modname: str) -> str:
    """Name of the open function of a C module.

    Anything up to the first ``-`` is ignored and dots become ``_``.
    """
    mark = modname.find(LUA_IGMARK)
    if mark >= 0:
        modname = modname[mark + 1 :]
    return LUA_POF + modname.replace(".", LUA_OFSEP)


def _readable(filename: str) -> bool:
    try:
        with open(filename, "rb"):
            return True
    except OSError:
        return False


def _truthy(value: object) -> bool:
    return value is not None and value is not False


def _check_name(name: object, fname: str) -> str:
    if not isinstance(name, str):
        raise TypeError(f"bad argument #1 to '{fname}' (string expected)")
    return name


Loader = Callable[[str], Any]


class Package:
    """The ``package`` table together with ``require`` and ``module``.

    ``load_file`` turns a source file name into a callable chunk; it is
    used by the searcher of ``path`` and may raise to report an error.
    """

    def __init__(
        self,
        path: str | None = None,
        cpath: str | None = None,
        load_file: Callable[[str], Callable[..., Any]] | None = None,
    ) -> None:
        self.path: Any = (
            path if path is not None
            else make_path(os.environ.get(LUA_PATH_ENV), LUA_PATH_DEFAULT)
        )
        self.cpath: Any = (
            cpath if cpath is not None
            else make_path(os.environ.get(LUA_CPATH_ENV), LUA_CPATH_DEFAULT)
        )
        self.load_file = load_file
        self.loaded: dict[str, Any] = {}
        self.preload: Any = {}
        self.globals: dict[str, Any] = {}
        self.config = "\n".join(
            [LUA_DIRSEP, LUA_PATHSEP, LUA_PATH_MARK, LUA_EXECDIR, LUA_IGMARK]
        )
        self.loaders: Any = [
            self._loader_preload,
            self._loader_lua,
            self._loader_c,
            self._loader_croot,
        ]

    # -- searching ------------------------------------------------------------

    def _find_file(self, name: str, field: str) -> tuple[str | None, str]:
        name = name.replace(".", LUA_DIRSEP)
        path = getattr(self, field, None)
        if not isinstance(path, str):
            raise RequireError(f"'package.{field}' must be a string")
        tried: list[str] = []
        for template in path_templates(path):
            filename = template.replace(LUA_PATH_MARK, name)
            if _readable(filename):
                return filename, "".join(tried)
            tried.append(f"\n\tno file '{filename}'")
        return None, "".join(tried)

    def search_path(self, name: str, field: str = "path") -> str | None:
        """First readable file for ``name`` along ``path`` or ``cpath``."""
        return self._find_file(name, field)[0]

    # -- dynamic libraries ----------------------------------------------------

    def loadlib(self, path: str, init: str) -> Callable[..., Any]:
        """Load function ``init`` from the dynamic library ``path``.

        Dynamic libraries are not supported, so this always raises
        LoadLibError with ``where == "absent"``.
        """
        _check_name(path, "loadlib")
        if not isinstance(init, str):
            raise TypeError("bad argument #2 to 'loadlib' (string expected)")
        raise LoadLibError(DLMSG, _LIB_FAIL)

    # -- loaders --------------------------------------------------------------

    @staticmethod
    def _load_error(name: str, filename: str, message: str) -> RequireError:
        return RequireError(
            f"error loading module '{name}' from file '{filename}':\n\t{message}"
        )

    def _loader_preload(self, name: str) -> Any:
        if not isinstance(self.preload, dict):
            raise RequireError("'package.preload' must be a table")
        value = self.preload.get(name)
        if value is None:
            return f"\n\tno field package.preload['{name}']"
        return value

    def _loader_lua(self, name: str) -> Any:
        filename, tried = self._find_file(name, "path")
        if filename is None:
            return tried
        if self.load_file is None:
            raise self._load_error(name, filename, "no loader for source files")
        try:
            return self.load_file(filename)
        except Exception as exc:  # noqa: BLE001 - any load failure is reported
            raise self._load_error(name, filename, str(exc)) from exc

    def _loader_c(self, name: str) -> Any:
        filename, tried = self._find_file(name, "cpath")
        if filename is None:
            return tried
        try:
            return self.loadlib(filename, func_name(name))
        except LoadLibError as exc:
            raise self._load_error(name, filename, exc.message) from exc

    def _loader_croot(self, name: str) -> Any:
        dot = name.find(".")
        if dot < 0:
            return None
        filename, tried = self._find_file(name[:dot], "cpath")
        if filename is None:
            return tried
        try:
            return self.loadlib(filename, func_name(name))
        except LoadLibError as exc:
            if exc.where != "init":
                raise self._load_error(name, filename, exc.message) from exc
            return f"\n\tno module '{name}' in file '{filename}'"

    # -- require / module -----------------------------------------------------

    def require(self, name: str) -> Any:
        """Load a module once and return its value.

        A module already in ``loaded`` is returned directly. Otherwise each
        loader is tried in turn; the first that gives a callable is run with
        the module name, and its result (or True) is stored in ``loaded``.
        """
        name = _check_name(name, "require")
        current = self.loaded.get(name)
        if _truthy(current):
            if current is _SENTINEL:
                raise RequireError(f"loop or previous error loading module '{name}'")
            return current
        if not isinstance(self.loaders, list):
            raise RequireError("'package.loaders' must be a table")
        messages: list[str] = []
        for loader in self.loaders:
            if loader is None:
                break
            result = loader(name)
            if callable(result):
                break
            if isinstance(result, str):
                messages.append(result)
        else:
            raise RequireError(f"module '{name}' not found:{''.join(messages)}")
        if loader is None:
            raise RequireError(f"module '{name}' not found:{''.join(messages)}")
        self.loaded[name] = _SENTINEL
        value = result(name)
        if value is not None:
            self.loaded[name] = value
        if self.loaded.get(name) is _SENTINEL:
            self.loaded[name] = True
        return self.loaded[name]

    def _find_table(self, name: str) -> dict[str, Any]:
        table = self.globals
        for part in name.split("."):
            value = table.get(part)
            if value is None:
                value = {}
                table[part] = value
            elif not isinstance(value, dict):
                raise RequireError(f"name conflict for module '{name}'")
            table = value
        return table

    def module(self, name: str, *args: Callable[[dict[str, Any]], Any]) -> dict[str, Any]:
        """Declare a module table and return it.

        The table comes from ``loaded`` or is found (or created) under
        ``globals`` along the dotted name. A fresh table receives ``_M``,
        ``_NAME`` and ``_PACKAGE``; each option is then called with it.
        """
        name = _check_name(name, "module")
        table = self.loaded.get(name)
        if not isinstance(table, dict):
            table = self._find_table(name)
            self.loaded[name] = table
        if table.get("_NAME") is None:
            table["_M"] = table
            table["_NAME"] = name
            dot = name.rfind(".")
            table["_PACKAGE"] = name[: dot + 1] if dot >= 0 else ""
        for option in args:
            option(table)
        return table