"""
housing_console package entry (lightweight + lazy loading).

Rules:
- `import housing_console` must not pull in streamlit or aiohttp
- subpackages are imported on first attribute access (PEP 562)
"""

from __future__ import annotations

from typing import Any

__version__ = "1.0.0"

_LAZY_SUBPACKAGES = {"infra", "domain", "ports", "adapters", "app", "web"}


def __getattr__(name: str) -> Any:  # PEP 562
    if name in _LAZY_SUBPACKAGES:
        import importlib

        m = importlib.import_module(f"{__name__}.{name}")
        globals()[name] = m  # cache
        return m
    raise AttributeError(name)


__all__ = ["__version__", *_LAZY_SUBPACKAGES]
