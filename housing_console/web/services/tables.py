from __future__ import annotations

from typing import Any, Iterable, Mapping

import pandas as pd


def records_frame(records: Iterable[Any], columns: Mapping[str, str]) -> pd.DataFrame:
    """Build a display table: ``columns`` maps record attribute -> column header."""
    rows = [{label: getattr(rec, attr, None) for attr, label in columns.items()} for rec in records]
    return pd.DataFrame(rows, columns=list(columns.values()))
