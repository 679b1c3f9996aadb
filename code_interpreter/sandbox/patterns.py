"""
Static tables consulted by the safety analyzer.

Module names are matched exactly against the literal passed to ``require``,
``import ... from`` or ``import()``. The ``node:`` scheme prefix is stripped
before lookup so ``node:child_process`` is classified like ``child_process``.
"""

from __future__ import annotations

# Process control, low-level I/O, code execution and inspection hooks
DANGEROUS_MODULES: frozenset[str] = frozenset({
    "child_process",
    "cluster",
    "worker_threads",
    "dgram",
    "dns",
    "tls",
    "readline",
    "repl",
    "vm",
    "inspector",
    "v8",
    "perf_hooks",
    "async_hooks",
    "domain",
    "module",
})

# Filesystem, network, OS, crypto and generic utility modules
RESTRICTED_MODULES: frozenset[str] = frozenset({
    "fs",
    "fs/promises",
    "net",
    "http",
    "https",
    "os",
    "crypto",
    "stream",
    "util",
    "zlib",
    "buffer",
    "path",
    "querystring",
    "string_decoder",
    "timers",
    "tty",
    "events",
    "punycode",
    "assert",
    "url",
})

# Identifiers whose members expose ambient runtime authority
DANGEROUS_GLOBALS: frozenset[str] = frozenset({
    "process",
    "global",
    "globalThis",
    "__dirname",
    "__filename",
    "Buffer",
    "require",
    "module",
    "exports",
})

# Member access on these roots is a hard block, not only a warning
CRITICAL_GLOBALS: frozenset[str] = frozenset({"process", "global"})

CODE_EVAL_FUNCTIONS: frozenset[str] = frozenset({"eval", "Function"})

TIMER_FUNCTIONS: frozenset[str] = frozenset({"setTimeout", "setInterval", "setImmediate"})

MODULE_LOADER = "require"


def normalize_module_name(name: str) -> str:
    """Strip the ``node:`` builtin scheme from a module specifier."""
    if name.startswith("node:"):
        return name[len("node:"):]
    return name


def is_dangerous_module(name: str) -> bool:
    return normalize_module_name(name) in DANGEROUS_MODULES


def is_restricted_module(name: str) -> bool:
    return normalize_module_name(name) in RESTRICTED_MODULES
