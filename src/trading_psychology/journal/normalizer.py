"""Single normalization boundary for raw journal and trade records.

Raw records come from a client that stores prices and P&L as either
numbers or numeric-looking strings, under camelCase or snake_case names.
Everything downstream of this module works on strictly typed
:class:`~trading_psychology.journal.record.Trade` and
:class:`~trading_psychology.journal.record.JournalEntry` objects and never
branches on the runtime type of a field.

Malformed values never raise.  An unparsable number becomes ``0.0`` and an
unparsable date becomes ``None``; both are counted on an optional
:class:`NormalizationReport` so the caller can surface data-quality issues.

Usage::

    report = NormalizationReport()
    entries = normalize_entries(raw_entries, report)
    if report.total:
        print(report.to_dict()["by_field"])
"""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Mapping

from trading_psychology.core.enums import Direction

from .record import JournalEntry, Trade

logger = logging.getLogger(__name__)

# Accepted raw names per normalized field, in lookup order.
_TRADE_FIELDS: dict[str, tuple[str, ...]] = {
    "id": ("id", "trade_id", "tradeId"),
    "instrument": ("instrument", "symbol", "asset_pair", "assetPair"),
    "direction": ("direction", "side"),
    "entry_price": ("entryPrice", "entry_price"),
    "exit_price": ("exitPrice", "exit_price"),
    "stop_loss": ("stopLoss", "stop_loss"),
    "take_profit": ("takeProfit", "take_profit"),
    "highest_price": ("highestPrice", "highest_price"),
    "lowest_price": ("lowestPrice", "lowest_price"),
    "entry_date": ("entryDate", "entry_date"),
    "exit_date": ("exitDate", "exit_date"),
    "quantity": ("quantity", "qty", "size"),
    "fees": ("fees", "fee"),
    "setup": ("setup", "setup_name", "setupName"),
    "pnl": ("pnl", "profit_loss", "profitLoss"),
}

_NUMERIC_FIELDS = (
    "entry_price",
    "exit_price",
    "stop_loss",
    "take_profit",
    "highest_price",
    "lowest_price",
    "quantity",
    "fees",
    "pnl",
)

_NOTE_FIELDS = (
    ("notes",),
    ("reflection",),
    ("post_submission_notes", "postSubmissionNotes"),
)

_STRIP_CHARS = re.compile(r"[\s,$€£¥]")

_DIRECTION_ALIASES = {
    "long": Direction.LONG.value,
    "buy": Direction.LONG.value,
    "short": Direction.SHORT.value,
    "sell": Direction.SHORT.value,
}


@dataclass
class NormalizationReport:
    """Side-channel counter of values that had to be coerced.

    Parameters
    ----------
    max_samples : int
        Maximum number of ``(trade_id, field, raw_value)`` samples kept.
    """

    max_samples: int = 20
    total: int = 0
    by_field: Counter = field(default_factory=Counter)
    samples: list[tuple[str | None, str, Any]] = field(default_factory=list)

    def record(self, record_id: str | None, field_name: str, raw: Any) -> None:
        """Count one anomalous value."""
        self.total += 1
        self.by_field[field_name] += 1
        if len(self.samples) < self.max_samples:
            self.samples.append((record_id, field_name, raw))
        logger.debug(
            "Coerced malformed %s=%r on record %s", field_name, raw, record_id
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "by_field": dict(self.by_field),
            "samples": [
                {"id": rid, "field": name, "value": repr(raw)}
                for rid, name, raw in self.samples
            ],
        }


# ---------------------------------------------------------------------- #
# Scalar coercion                                                          #
# ---------------------------------------------------------------------- #


def _is_absent(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _pick(raw: Mapping[str, Any], keys: Iterable[str]) -> Any:
    """First non-absent value among *keys*, else ``None``."""
    for key in keys:
        value = raw.get(key)
        if not _is_absent(value):
            return value
    return None


def _parse_number(value: Any) -> float | None:
    """Finite float read from *value*, or ``None`` when unreadable."""
    parsed: float | None = None
    if isinstance(value, bool):
        parsed = None
    elif isinstance(value, (int, float)):
        try:
            parsed = float(value)
        except OverflowError:
            parsed = None
    elif isinstance(value, str):
        try:
            parsed = float(_STRIP_CHARS.sub("", value))
        except ValueError:
            parsed = None
    if parsed is None or not math.isfinite(parsed):
        return None
    return parsed


def coerce_number(
    value: Any,
    *,
    field_name: str = "value",
    record_id: str | None = None,
    report: NormalizationReport | None = None,
) -> float | None:
    """Coerce a number or numeric-like string to ``float``.

    ``None`` and blank strings are absent and return ``None``.  Strings may
    carry a currency symbol and thousands separators (``"$1,250.50"``).
    Anything else that cannot be read as a finite number returns ``0.0``
    and is recorded on *report*.
    """
    if _is_absent(value):
        return None

    parsed = _parse_number(value)
    if parsed is None:
        if report is not None:
            report.record(record_id, field_name, value)
        return 0.0
    return parsed


def coerce_datetime(
    value: Any,
    *,
    field_name: str = "date",
    record_id: str | None = None,
    report: NormalizationReport | None = None,
) -> datetime | None:
    """Coerce an ISO string, date, datetime or epoch-ms to aware UTC.

    Naive values are read as UTC.  Unparsable values return ``None`` and
    are recorded on *report*.
    """
    if _is_absent(value):
        return None

    parsed: datetime | None = None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            parsed = None
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            parsed = None

    if parsed is None:
        if report is not None:
            report.record(record_id, field_name, value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _text(value: Any) -> str | None:
    if _is_absent(value):
        return None
    return str(value).strip()


def _string_tuple(value: Any) -> tuple[str, ...]:
    if _is_absent(value):
        return ()
    if isinstance(value, str):
        return (value.strip(),)
    if isinstance(value, Iterable):
        return tuple(str(v).strip() for v in value if not _is_absent(v))
    return (str(value),)


# ---------------------------------------------------------------------- #
# Records                                                                  #
# ---------------------------------------------------------------------- #


def normalize_trade(
    raw: Mapping[str, Any] | Trade,
    report: NormalizationReport | None = None,
) -> Trade:
    """Produce a strictly typed :class:`Trade` from a raw trade mapping.

    An already-normalized :class:`Trade` is returned unchanged.
    """
    if isinstance(raw, Trade):
        return raw

    values = {name: _pick(raw, keys) for name, keys in _TRADE_FIELDS.items()}
    trade_id = _text(values["id"])

    numbers = {
        name: coerce_number(
            values[name], field_name=name, record_id=trade_id, report=report
        )
        for name in _NUMERIC_FIELDS
    }
    dates = {
        name: coerce_datetime(
            values[name], field_name=name, record_id=trade_id, report=report
        )
        for name in ("entry_date", "exit_date")
    }
    # Present but unreadable: numbers were coerced to 0.0, dates to None
    anomalies = frozenset(
        [n for n in _NUMERIC_FIELDS
         if numbers[n] is not None and _parse_number(values[n]) is None]
        + [n for n, d in dates.items() if d is None and not _is_absent(values[n])]
    )

    direction = _DIRECTION_ALIASES.get((_text(values["direction"]) or "").lower())
    if direction is None:
        stop, entry = numbers["stop_loss"], numbers["entry_price"]
        usable = stop is not None and entry is not None
        if usable and stop != entry and not anomalies & {"stop_loss", "entry_price"}:
            direction = Direction.LONG.value if stop < entry else Direction.SHORT.value

    return Trade(
        id=trade_id,
        instrument=_text(values["instrument"]),
        direction=direction,
        setup=_text(values["setup"]),
        **numbers,
        **dates,
        anomalies=anomalies,
    )


def normalize_entry(
    raw: Mapping[str, Any] | JournalEntry,
    report: NormalizationReport | None = None,
) -> JournalEntry:
    """Produce a :class:`JournalEntry` (and its trades) from a raw mapping.

    The reflection text is assembled from ``notes``, ``reflection`` and
    ``post_submission_notes``, joined by newlines.
    """
    if isinstance(raw, JournalEntry):
        return raw

    entry_id = _text(raw.get("id"))
    notes = [_text(_pick(raw, keys)) for keys in _NOTE_FIELDS]
    raw_trades = raw.get("trades") or ()
    if isinstance(raw_trades, (str, bytes, Mapping)) or not isinstance(raw_trades, Iterable):
        raw_trades = ()

    return JournalEntry(
        id=entry_id,
        created_at=coerce_datetime(
            _pick(raw, ("created_at", "createdAt", "date")),
            field_name="created_at",
            record_id=entry_id,
            report=report,
        ),
        session_type=(_text(_pick(raw, ("session_type", "sessionType"))) or "").lower(),
        emotion=(_text(raw.get("emotion")) or "").lower(),
        emotion_detail=_text(_pick(raw, ("emotion_detail", "emotionDetail"))) or "",
        outcome=(_text(raw.get("outcome")) or "").lower(),
        followed_rules=_string_tuple(_pick(raw, ("followed_rules", "followedRules"))),
        mistakes=_string_tuple(raw.get("mistakes")),
        pre_trading_activities=_string_tuple(
            _pick(raw, ("pre_trading_activities", "preTradingActivities"))
        ),
        notes="\n".join(n for n in notes if n),
        market_conditions=_text(_pick(raw, ("market_conditions", "marketConditions"))) or "",
        trades=tuple(
            normalize_trade(t, report)
            for t in raw_trades
            if isinstance(t, (Mapping, Trade))
        ),
    )


def normalize_entries(
    raws: Iterable[Mapping[str, Any] | JournalEntry],
    report: NormalizationReport | None = None,
) -> list[JournalEntry]:
    """Normalize a collection of entries, preserving order.

    Items that are neither a mapping nor a :class:`JournalEntry` are
    skipped and recorded on *report* under the ``entry`` field.
    """
    entries = []
    for raw in raws:
        if not isinstance(raw, (Mapping, JournalEntry)):
            if report is not None:
                report.record(None, "entry", raw)
            continue
        entries.append(normalize_entry(raw, report))
    if report is not None and report.total:
        logger.warning(
            "Normalized %d entries with %d malformed values", len(entries), report.total
        )
    return entries
