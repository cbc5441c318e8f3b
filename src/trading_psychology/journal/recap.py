"""Monthly recap: a one-month "wrapped" summary of trading habits.

Usage::

    recap = monthly_recap(entries, trade_set, "2024-03")
    print(recap.most_active_time, recap.best_mood)
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Sequence

from trading_psychology.core.enums import Emotion

from .dedup import OwnedTrade, TradeSet, trade_date
from .metrics import UNDEFINED_SETUP, chronological, longest_streaks
from .record import JournalEntry
from .scoring import round_half_up

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")

# (label, first hour inclusive, last hour exclusive); anything else is night
_TIME_SLOTS: tuple[tuple[str, int, int], ...] = (
    ("Early Morning (4-8 AM)", 4, 8),
    ("Morning (8-12 PM)", 8, 12),
    ("Afternoon (12-4 PM)", 12, 16),
    ("Evening (4-8 PM)", 16, 20),
)
_NIGHT_SLOT = "Night (8 PM-4 AM)"


def parse_month(month: str) -> tuple[int, int]:
    """Parse ``YYYY-MM``.

    Raises:
        ValueError: If *month* is not a valid ``YYYY-MM`` string.
    """
    try:
        year_text, month_text = month.split("-")
        year, mon = int(year_text), int(month_text)
    except (AttributeError, ValueError):
        raise ValueError(f"Month must look like YYYY-MM, got {month!r}") from None
    if not 1 <= mon <= 12:
        raise ValueError(f"Month must look like YYYY-MM, got {month!r}")
    return year, mon


def time_slot(hour: int) -> str:
    for label, start, end in _TIME_SLOTS:
        if start <= hour < end:
            return label
    return _NIGHT_SLOT


def format_holding_time(minutes: float) -> str:
    if minutes < 60:
        return f"{round_half_up(minutes)} minutes"
    if minutes < 1440:
        return f"{round_half_up(minutes / 60)} hours"
    return f"{round_half_up(minutes / 1440)} days"


@dataclass
class MonthlyRecap:
    month: str
    total_trades: int = 0
    win_rate: float = 0.0
    winning_streak: int = 0
    losing_streak: int = 0
    most_active_time: str = NOT_AVAILABLE
    favorite_setup: str = NOT_AVAILABLE
    avg_holding_time: str = NOT_AVAILABLE
    mood_performance: dict[str, float] = field(
        default_factory=lambda: {e.value: 0.0 for e in Emotion}
    )
    best_mood: str = NOT_AVAILABLE
    overtrading_days: int = 0
    emotional_by_day: dict[str, dict[str, int]] = field(default_factory=dict)
    most_emotional_day: str = NOT_AVAILABLE

    @property
    def best_mood_win_rate(self) -> float:
        return self.mood_performance.get(self.best_mood, 0.0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "totalTrades": self.total_trades,
            "winRate": round(self.win_rate, 2),
            "winningStreak": self.winning_streak,
            "losingStreak": self.losing_streak,
            "mostActiveTime": self.most_active_time,
            "favoriteSetup": self.favorite_setup,
            "avgHoldingTime": self.avg_holding_time,
            "moodPerformance": {k: round(v, 2) for k, v in self.mood_performance.items()},
            "bestMood": self.best_mood,
            "bestMoodWinRate": round(self.best_mood_win_rate, 2),
            "overtradingDays": self.overtrading_days,
            "emotionalByDay": self.emotional_by_day,
            "mostEmotionalDay": self.most_emotional_day,
        }


def _in_month(d: date | None, year: int, month: int) -> bool:
    return d is not None and d.year == year and d.month == month


def monthly_recap(
    entries: Sequence[JournalEntry],
    trade_set: TradeSet,
    month: str,
    *,
    overtrading_multiplier: float = 1.5,
) -> MonthlyRecap:
    """Habits and results of one calendar month (UTC).

    Trades belong to the month of their resolved date; entries to the
    month of their ``created_at``.  An empty month yields the defaults.
    """
    year, mon = parse_month(month)
    recap = MonthlyRecap(month=f"{year:04d}-{mon:02d}")

    month_entries = [
        e for e in entries if e.created_at is not None and _in_month(e.created_at, year, mon)
    ]
    owned = [o for o in chronological(trade_set) if _in_month(trade_date(o), year, mon)]
    if not owned and not month_entries:
        return recap

    trades = [o.trade for o in owned]
    recap.total_trades = len(trades)
    if trades:
        recap.win_rate = sum(1 for t in trades if t.net_pnl > 0) / len(trades) * 100.0
        recap.winning_streak, recap.losing_streak = longest_streaks(
            [t.net_pnl for t in trades]
        )

        slots = Counter(time_slot(t.entry_date.hour) for t in trades if t.entry_date)
        if slots:
            recap.most_active_time = slots.most_common(1)[0][0]

        profit: dict[str, float] = {}
        for t in trades:
            name = t.setup or UNDEFINED_SETUP
            profit[name] = profit.get(name, 0.0) + t.net_pnl
        recap.favorite_setup = max(profit, key=profit.get)

        minutes = [
            t.hold_duration_hours * 60 for t in trades
            if t.hold_duration_hours is not None and t.hold_duration_hours > 0
        ]
        if minutes:
            recap.avg_holding_time = format_holding_time(sum(minutes) / len(minutes))

        per_day = Counter(trade_date(o).date() for o in owned)
        average = sum(per_day.values()) / len(per_day)
        recap.overtrading_days = sum(
            1 for count in per_day.values() if count > average * overtrading_multiplier
        )

    _mood_performance(recap, month_entries, owned)
    _emotional_heatmap(recap, month_entries)
    return recap


def _mood_performance(
    recap: MonthlyRecap,
    entries: Sequence[JournalEntry],
    owned: Sequence[OwnedTrade],
) -> None:
    """Win rate per pre-session mood; days without a pre-session entry are skipped."""
    moods: dict[date, str] = {}
    for entry in entries:
        if entry.is_pre_session:
            moods.setdefault(entry.created_at.date(), entry.emotion or Emotion.NEUTRAL.value)

    wins: Counter = Counter()
    totals: Counter = Counter()
    for o in owned:
        mood = moods.get(trade_date(o).date())
        if mood is None:
            continue
        totals[mood] += 1
        if o.trade.net_pnl > 0:
            wins[mood] += 1

    for mood, total in totals.items():
        recap.mood_performance[mood] = wins[mood] / total * 100.0

    best, best_rate = Emotion.NEUTRAL.value, 0.0
    for mood, rate in recap.mood_performance.items():
        if rate > best_rate:
            best, best_rate = mood, rate
    recap.best_mood = best


def _emotional_heatmap(recap: MonthlyRecap, entries: Sequence[JournalEntry]) -> None:
    """Weekday emotion counts; positive weighs 1.5 and negative 2."""
    heatmap = {day: {e.value: 0 for e in Emotion} for day in WEEKDAYS}
    for entry in entries:
        weekday = entry.created_at.weekday()
        if not entry.emotion or weekday >= 5:
            continue
        counts = heatmap[WEEKDAYS[weekday]]
        counts[entry.emotion] = counts.get(entry.emotion, 0) + 1
    recap.emotional_by_day = heatmap

    highest = 0.0
    for day, counts in heatmap.items():
        score = counts[Emotion.POSITIVE.value] * 1.5 + counts[Emotion.NEGATIVE.value] * 2
        if score > highest:
            recap.most_emotional_day, highest = day, score
