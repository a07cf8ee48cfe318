"""
Application layer (lazy exports).

Importing ``housing_console.app`` must stay cheap; the members are loaded on
first access.
"""

from __future__ import annotations

from typing import Any

_LAZY_EXPORTS = {
    "SessionStore": ("housing_console.app.session_store", "SessionStore"),
    "QueryClient": ("housing_console.app.query_client", "QueryClient"),
    "QueryResult": ("housing_console.app.query_client", "QueryResult"),
    "QueryState": ("housing_console.app.query_client", "QueryState"),
    "MutationResult": ("housing_console.app.query_client", "MutationResult"),
    "AsyncRunner": ("housing_console.app.async_runner", "AsyncRunner"),
    "ConsoleServices": ("housing_console.app.services", "ConsoleServices"),
    "build_services": ("housing_console.app.services", "build_services"),
}


def __getattr__(name: str) -> Any:  # PEP 562
    if name in _LAZY_EXPORTS:
        mod_name, attr = _LAZY_EXPORTS[name]
        import importlib

        m = importlib.import_module(mod_name)
        v = getattr(m, attr)
        globals()[name] = v  # cache
        return v
    raise AttributeError(name)


__all__ = list(_LAZY_EXPORTS.keys())
