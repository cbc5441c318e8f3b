"""Analytics export: JSON bundle and CSV tables for external tools.

Usage::

    bundle = AnalyticsEngine().analyze(entries)
    json_str = to_json(bundle)
    csv_str = equity_curve_csv(bundle)
"""

from __future__ import annotations

import csv
import io
import json
from typing import Any, Iterable

from .engine import AggregatedAnalytics

_EQUITY_COLUMNS = ["date", "balance", "dailyPnL"]

_EXCURSION_COLUMNS = [
    "id",
    "instrument",
    "isLong",
    "mfeRelativeToTp",
    "maeRelativeToSl",
    "capturedMove",
    "rMultiple",
    "pnl",
]


def to_json(bundle: AggregatedAnalytics, *, indent: int | None = 2) -> str:
    """Serialize the bundle's camelCase view."""
    return json.dumps(bundle.to_dict(), indent=indent, default=str)


def _rows_to_csv(rows: Iterable[dict[str, Any]], columns: list[str]) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=columns, extrasaction="ignore", lineterminator="\n")
    writer.writeheader()
    for row in rows:
        writer.writerow({c: row.get(c, "") for c in columns})
    return buf.getvalue()


def equity_curve_csv(bundle: AggregatedAnalytics) -> str:
    """One row per equity point, with header."""
    return _rows_to_csv((p.to_dict() for p in bundle.equity_curve), _EQUITY_COLUMNS)


def excursions_csv(bundle: AggregatedAnalytics) -> str:
    """One row per analyzable trade, with header."""
    return _rows_to_csv((r.to_dict() for r in bundle.excursions), _EXCURSION_COLUMNS)
