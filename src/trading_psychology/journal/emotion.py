"""Emotion analytics: daily mood vs P&L, correlation and recovery.

The mood of a trading day is taken from that day's pre-session entry.
When there is none, the first entry of the day that records an emotion is
used, and a day with no recorded emotion at all counts as neutral.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Sequence

import numpy as np

from trading_psychology.core.enums import Emotion, SessionOutcome

from .dedup import TradeSet, trade_date
from .metrics import chronological
from .record import JournalEntry

logger = logging.getLogger(__name__)

RECOVERY_BUCKETS = ("< 1 day", "1-2 days", "2-3 days", "> 3 days")

_EMOTION_CODES = {Emotion.POSITIVE.value: 1, Emotion.NEGATIVE.value: -1}


def emotion_code(emotion: str | None) -> int:
    """``positive`` = +1, ``negative`` = -1, anything else = 0."""
    return _EMOTION_CODES.get((emotion or "").strip().lower(), 0)


def day_emotions(entries: Iterable[JournalEntry]) -> dict[date, str]:
    """Mood per calendar day of the entries' ``created_at``."""
    pre: dict[date, str] = {}
    other: dict[date, str] = {}
    for entry in entries:
        if entry.created_at is None or not entry.emotion:
            continue
        day = entry.created_at.date()
        target = pre if entry.is_pre_session else other
        target.setdefault(day, entry.emotion)
    return {**other, **pre}


@dataclass(frozen=True)
class EmotionDay:
    date: date
    pnl: float
    emotion: str

    @property
    def code(self) -> int:
        return emotion_code(self.emotion)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "pnl": round(self.pnl, 2),
            "emotion": self.emotion,
            "emotionCode": self.code,
        }


def emotion_trend(entries: Sequence[JournalEntry], trade_set: TradeSet) -> list[EmotionDay]:
    """Total P&L and mood for every day with trades, ordered by day."""
    moods = day_emotions(entries)
    totals: dict[date, float] = {}
    for owned in chronological(trade_set):
        day = trade_date(owned).date()
        totals[day] = totals.get(day, 0.0) + owned.trade.net_pnl
    return [
        EmotionDay(date=day, pnl=pnl, emotion=moods.get(day, Emotion.NEUTRAL.value))
        for day, pnl in sorted(totals.items())
    ]


def pearson(xs: Sequence[float], ys: Sequence[float]) -> float:
    """Pearson product-moment correlation in ``[-1, 1]``.

    Returns 0 for fewer than two points, mismatched lengths, or a series
    with zero variance.
    """
    x = np.asarray(xs, dtype=float)
    y = np.asarray(ys, dtype=float)
    if x.size < 2 or x.size != y.size:
        return 0.0
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    with np.errstate(over="ignore", invalid="ignore"):
        denom = math.sqrt(float(np.dot(dx, dx)) * float(np.dot(dy, dy)))
        if denom == 0 or not math.isfinite(denom):
            return 0.0
        r = float(np.dot(dx, dy)) / denom
    if not math.isfinite(r):
        return 0.0
    return float(np.clip(r, -1.0, 1.0))


def emotion_pnl_correlation(trend: Sequence[EmotionDay]) -> float:
    """Correlation between coded daily mood and daily P&L."""
    return pearson([d.code for d in trend], [d.pnl for d in trend])


def _recovery_bucket(days: int) -> str:
    if days < 1:
        return RECOVERY_BUCKETS[0]
    if days <= 2:
        return RECOVERY_BUCKETS[1]
    if days <= 3:
        return RECOVERY_BUCKETS[2]
    return RECOVERY_BUCKETS[3]


def emotion_recovery(entries: Iterable[JournalEntry]) -> dict[str, int]:
    """How long it takes to bounce back after a losing session.

    For each ``loss`` entry, the next entry (by ``created_at``) with a
    positive emotion or a ``win`` outcome marks the recovery.  Elapsed
    days are rounded up and counted into four buckets; losses never
    followed by a recovery are not counted.
    """
    dated = sorted(
        (e for e in entries if e.created_at is not None),
        key=lambda e: e.created_at,
    )
    buckets = dict.fromkeys(RECOVERY_BUCKETS, 0)
    for i, entry in enumerate(dated):
        if entry.outcome != SessionOutcome.LOSS.value:
            continue
        for later in dated[i + 1:]:
            if later.emotion == Emotion.POSITIVE.value or later.outcome == SessionOutcome.WIN.value:
                elapsed = (later.created_at - entry.created_at).total_seconds() / 86400.0
                buckets[_recovery_bucket(math.ceil(elapsed))] += 1
                break
    return buckets


@dataclass
class EmotionPerformance:
    emotion: str
    trades: int = 0
    wins: int = 0
    total_pnl: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.trades * 100.0 if self.trades else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "trades": self.trades,
            "wins": self.wins,
            "winRate": round(self.win_rate, 2),
            "totalPnl": round(self.total_pnl, 2),
        }


def performance_by_emotion(
    entries: Sequence[JournalEntry], trade_set: TradeSet
) -> dict[str, EmotionPerformance]:
    """Trades, wins and P&L grouped by the mood of the trade's day.

    The three core moods are always present, in positive / neutral /
    negative order; finer-grained labels follow alphabetically.
    """
    moods = day_emotions(entries)
    stats = {e.value: EmotionPerformance(emotion=e.value) for e in Emotion}
    for owned in chronological(trade_set):
        mood = moods.get(trade_date(owned).date(), Emotion.NEUTRAL.value)
        s = stats.setdefault(mood, EmotionPerformance(emotion=mood))
        s.trades += 1
        s.total_pnl += owned.trade.net_pnl
        if owned.trade.net_pnl > 0:
            s.wins += 1

    core = [e.value for e in Emotion]
    extra = sorted(k for k in stats if k not in core)
    return {k: stats[k] for k in core + extra}
