"""
Infrastructure layer - serialization.

JSON helpers used for persisted session entries and for log-friendly payload
summaries.
"""

import json
from datetime import datetime, date
from typing import Any


def safe_json_dumps(obj: Any, **kwargs) -> str:
    """
    JSON-encode ``obj``, turning dates into ISO strings and sets into lists.

    Raises:
        TypeError: for anything else that json cannot encode
    """
    def _default(o):
        if isinstance(o, (datetime, date)):
            return o.isoformat()
        if isinstance(o, (set, frozenset)):
            return list(o)
        raise TypeError(f"Object of type {type(o).__name__} is not JSON serializable")

    json_kwargs = {
        'ensure_ascii': False,
        'default': _default,
    }
    json_kwargs.update(kwargs)
    return json.dumps(obj, **json_kwargs)


def safe_json_loads(text: Any, default=None) -> Any:
    """
    Parse JSON, returning ``default`` when the text is missing or malformed.
    """
    try:
        return json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return default


def summarize_for_logging(obj: Any) -> str:
    """Short description of a payload; never dumps values (they may hold PII)."""
    if isinstance(obj, dict):
        return f"dict with keys: {sorted(obj.keys())}"
    if isinstance(obj, (list, tuple)):
        return f"{type(obj).__name__} with {len(obj)} items"
    if obj is None:
        return "None"
    return f"<{type(obj).__name__}>"
