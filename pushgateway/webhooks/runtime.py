# -*- coding: utf-8 -*-
"""Location: ./pushgateway/webhooks/runtime.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0
Authors: Push Gateway Contributors

Lua script runtime.
Wraps a single lupa ``LuaRuntime`` and exposes the two primitives the
webhook executor needs: compile a script and run its top level chunk.

Scripts never see the runtime's real globals. Every invocation runs inside
a fresh environment table whose fallback is a fixed set of pure Lua library
functions; anything the script needs from the host has to be injected
explicitly. Python objects reachable from Lua only expose the attributes
listed in their class-level ``__lua_exports__``.

The environment table reaches a chunk as its first vararg, so a script
that reads ``...`` at top level sees that table. A leading ``#`` line (a
shebang) is kept as a comment. Strings a script returns come back as
``str`` when they are valid UTF-8 and as ``bytes`` otherwise.
"""

# Standard
from dataclasses import dataclass
import logging
import re
from typing import Any, Mapping

# Third-Party
from lupa.lua54 import LuaError, LuaRuntime, LuaSyntaxError

# First-Party
from pushgateway.webhooks.errors import ScriptCompileError, ScriptRuntimeError

logger = logging.getLogger(__name__)

MAX_RETURN_VALUES = 3

# Binds the chunk's globals to its first call argument (Lua 5.2+ _ENV).
# Kept on the first line so that reported line numbers stay unchanged.
_ENV_PROLOGUE = "local _ENV = ...; "

_SANDBOX_FACTORY = """
local ipairs, setmetatable, error = ipairs, setmetatable, error

local functions = {
  "assert", "error", "ipairs", "next", "pairs", "pcall", "rawequal", "rawlen",
  "select", "setmetatable", "tonumber", "tostring", "type", "unpack", "xpcall",
}
local libraries = {"coroutine", "math", "string", "table", "utf8"}

local function readonly(lib)
  return setmetatable({}, {
    __index = lib,
    __newindex = function() error("attempt to modify a read-only library", 2) end,
    __metatable = false,
  })
end

local base = {}
for _, name in ipairs(functions) do
  base[name] = _G[name]
end
if base.unpack == nil and table ~= nil then
  base.unpack = table.unpack
end
for _, name in ipairs(libraries) do
  if _G[name] ~= nil then
    base[name] = readonly(_G[name])
  end
end

local meta = {__index = base, __metatable = false}

local function new_env()
  return setmetatable({}, meta)
end

local pack, type, format, byte, gsub = table.pack, type, string.format, string.byte, string.gsub

local function hex(c)
  return format("%02x", byte(c))
end

-- strings are exported hex-encoded, Python decodes them
local function export(value)
  if type(value) == "string" then
    return "s", (gsub(value, ".", hex))
  end
  return "v", value
end

local function run(chunk, env)
  local results = pack(chunk(env))
  local count = results.n
  if count > 3 then
    count = 3
  end
  local k1, v1 = export(results[1])
  local k2, v2 = export(results[2])
  local k3, v3 = export(results[3])
  return count, k1, v1, k2, v2, k3, v3
end

return new_env, run
"""

_HOST_GLOBALS = (
    "collectgarbage",
    "debug",
    "dofile",
    "io",
    "load",
    "loadfile",
    "loadstring",
    "os",
    "package",
    "print",
    "python",
    "require",
)

_CHUNK_LOCATION = re.compile(r'\[string ".*?"\]:(\d+):')
_ERROR_PREFIX = re.compile(r"^error loading code:\s*")


def _filter_attribute(obj: Any, attr_name: Any, is_setting: bool) -> str:
    """Restrict Lua attribute access on Python objects to exported names.

    Args:
        obj: the Python object being indexed from Lua.
        attr_name: the requested attribute.
        is_setting: True for assignments.

    Returns:
        The attribute name to look up.

    Raises:
        AttributeError: for assignments and non-exported attributes.

    Examples:
        >>> class Exposed:
        ...     __lua_exports__ = frozenset({"ping"})
        >>> _filter_attribute(Exposed(), "ping", False)
        'ping'
        >>> _filter_attribute(Exposed(), "__class__", False)
        Traceback (most recent call last):
        ...
        AttributeError: access to '__class__' is not permitted
    """
    if is_setting:
        raise AttributeError(f"cannot assign '{attr_name}' on a read-only object")
    if isinstance(attr_name, str) and attr_name in getattr(type(obj), "__lua_exports__", ()):
        return attr_name
    raise AttributeError(f"access to '{attr_name}' is not permitted")


def clean_error_message(message: str) -> str:
    """Strip host chunk names from a Lua error message.

    Args:
        message: the raw Lua error message.

    Returns:
        The message with ``[string "..."]:N:`` rewritten as ``line N:``.

    Examples:
        >>> clean_error_message('error loading code: [string "<python>"]:3: unexpected symbol near \\'(\\'')
        "line 3: unexpected symbol near '('"
    """
    message = _ERROR_PREFIX.sub("", message.strip())
    return _CHUNK_LOCATION.sub(r"line \1:", message)


def _import_value(kind: str, value: Any) -> Any:
    """Turn one exported return value back into a Python value.

    Args:
        kind: ``"s"`` for a hex-encoded Lua string, ``"v"`` for anything else.
        value: the exported value.

    Returns:
        ``str`` for UTF-8 strings, ``bytes`` for other strings, else the value.

    Examples:
        >>> _import_value("s", "6f6b"), _import_value("s", "fffe"), _import_value("v", 201)
        ('ok', b'\\xff\\xfe', 201)
    """
    if kind != "s":
        return value
    raw = bytes.fromhex(value)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return raw


@dataclass(frozen=True)
class CompiledScript:
    """A compiled webhook script bound to the runtime that compiled it."""

    name: str
    chunk: Any
    runtime: "LuaScriptRuntime"


class LuaScriptRuntime:
    """A sandboxed Lua interpreter.

    A runtime is not safe for concurrent use; callers serialize access.
    """

    def __init__(self) -> None:
        """Create the interpreter and its sandbox environment factory."""
        self._lua = LuaRuntime(
            register_eval=False,
            register_builtins=False,
            unpack_returned_tuples=False,
            attribute_filter=_filter_attribute,
        )
        self._new_env, self._run = self._lua.execute(_SANDBOX_FACTORY)
        lua_globals = self._lua.globals()
        for name in _HOST_GLOBALS:
            lua_globals[name] = None

    def compile(self, source: str, name: str = "script") -> CompiledScript:
        """Compile a script without running it.

        Args:
            source: the Lua source.
            name: script name used in log messages.

        Returns:
            The compiled script.

        Raises:
            ScriptCompileError: if the source does not parse.
        """
        if source.startswith("#"):
            source = "--" + source
        try:
            chunk = self._lua.compile(_ENV_PROLOGUE + source)
        except (LuaSyntaxError, LuaError) as e:
            raise ScriptCompileError(f"{name}: {clean_error_message(str(e))}") from e
        logger.debug(f"Compiled webhook script {name}")
        return CompiledScript(name=name, chunk=chunk, runtime=self)

    def invoke(self, script: CompiledScript, injected: Mapping[str, Any]) -> tuple[Any, ...]:
        """Run a compiled script's top level once.

        Args:
            script: a script compiled by this runtime.
            injected: globals visible to the script for this call only.

        Returns:
            Up to three values returned by the script.

        Raises:
            ScriptRuntimeError: if the script raises.
            ValueError: if the script was compiled by another runtime.
        """
        if script.runtime is not self:
            raise ValueError(f"Script {script.name} belongs to another runtime")

        env = self._new_env()
        for key, value in injected.items():
            env[key] = value

        try:
            count, *exported = self._run(script.chunk, env)
        except ScriptRuntimeError:
            raise
        except Exception as e:
            raise ScriptRuntimeError(f"{script.name}: {clean_error_message(str(e))}") from e

        values = tuple(_import_value(kind, value) for kind, value in zip(exported[0::2], exported[1::2]))[: min(int(count), MAX_RETURN_VALUES)]
        if values == (None,):
            return ()
        return values
