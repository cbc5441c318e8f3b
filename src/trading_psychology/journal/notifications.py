"""Insight event log and emotion-return notices.

:class:`InsightEventLog` replaces an ever-growing "already notified" list
with an explicit log keyed by ``(category, date)`` and a TTL.  It is not
used by the analytics engine; callers that surface notices own one and
consult it before emitting anything.

Usage::

    config = load_settings().notifications
    log = InsightEventLog.from_config(config)
    for notice in emotion_return_notices(
        entries, log, as_of=date.today(), thresholds=config.return_days
    ):
        send(notice.title, notice.message)
    log.expire(date.today())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Any, Iterable, Mapping

from trading_psychology.core.enums import Emotion

from .record import JournalEntry

if TYPE_CHECKING:
    from trading_psychology.core.config import NotificationConfig

logger = logging.getLogger(__name__)

RETURN_COOLDOWN_DAYS = 7

DEFAULT_RETURN_DAYS: dict[Emotion, int] = {
    Emotion.POSITIVE: 3,
    Emotion.NEUTRAL: 4,
    Emotion.NEGATIVE: 5,
}

_RETURN_TEMPLATES: dict[Emotion, tuple[str, str]] = {
    Emotion.POSITIVE: (
        "Welcome back to positive emotions! It's been {days} days since you "
        "last logged feeling good.",
        "This is a great opportunity to reflect on what's changed. Try to "
        "maintain this positive momentum with consistent journaling.",
    ),
    Emotion.NEUTRAL: (
        "Balanced emotions detected! It's been {days} days since you last "
        "logged a neutral state.",
        "Emotional balance is key to trading success. Use this equilibrium "
        "to make more objective decisions.",
    ),
    Emotion.NEGATIVE: (
        "Noticed negative emotions today after {days} days. This is actually "
        "valuable data.",
        "Remember that tracking negative emotions is crucial for growth. "
        "Focus on how these feelings affect your trading decisions.",
    ),
}


@dataclass(frozen=True)
class InsightEvent:
    category: str
    date: date
    title: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "date": self.date.isoformat(),
            "title": self.title,
            "message": self.message,
        }


def _as_date(value: date | datetime) -> date:
    return value.date() if isinstance(value, datetime) else value


class InsightEventLog:
    """Queryable record of emitted insights with TTL expiry.

    Parameters
    ----------
    ttl_days : int
        Events older than this many days are dropped by :meth:`expire`.
    """

    def __init__(self, *, ttl_days: int = 30) -> None:
        self._ttl = timedelta(days=ttl_days)
        self._events: dict[tuple[str, date], InsightEvent] = {}

    @classmethod
    def from_config(cls, config: NotificationConfig) -> InsightEventLog:
        return cls(ttl_days=config.ttl_days)

    def __len__(self) -> int:
        return len(self._events)

    def record(
        self,
        category: str,
        on: date | datetime,
        *,
        title: str = "",
        message: str = "",
    ) -> InsightEvent:
        """Record an event; a second event for the same key replaces the first."""
        event = InsightEvent(category=category, date=_as_date(on), title=title, message=message)
        self._events[(category, event.date)] = event
        return event

    def was_sent(self, category: str, on: date | datetime) -> bool:
        return (category, _as_date(on)) in self._events

    def sent_within(self, category: str, on: date | datetime, days: int) -> bool:
        """Whether *category* has an event in the *days* days ending on *on*."""
        end = _as_date(on)
        start = end - timedelta(days=days)
        return any(
            cat == category and start < d <= end for cat, d in self._events
        )

    def expire(self, as_of: date | datetime) -> int:
        """Drop events older than the TTL; returns how many were dropped."""
        cutoff = _as_date(as_of) - self._ttl
        stale = [key for key in self._events if key[1] < cutoff]
        for key in stale:
            del self._events[key]
        if stale:
            logger.debug("Expired %d insight events before %s", len(stale), cutoff)
        return len(stale)

    def events(self) -> list[InsightEvent]:
        return sorted(self._events.values(), key=lambda e: (e.date, e.category))


@dataclass(frozen=True)
class Notice:
    category: str
    title: str
    message: str


def emotion_return_notices(
    entries: Iterable[JournalEntry],
    log: InsightEventLog,
    as_of: date | datetime,
    thresholds: Mapping[Emotion, int] | None = None,
) -> list[Notice]:
    """Notices for emotions logged on *as_of* after a long absence.

    An emotion logged on *as_of* produces a notice when it was last logged
    at least its threshold of days earlier (positive 3, neutral 4,
    negative 5), or a "first time" notice when it was never logged
    before.  Each category fires at most once per day and return notices
    at most once per cooldown week.  Emitted notices are recorded on *log*.
    """
    thresholds = thresholds or DEFAULT_RETURN_DAYS
    today = _as_date(as_of)
    dated = [e for e in entries if e.created_at is not None and e.emotion]

    notices: list[Notice] = []
    for emotion, min_days in thresholds.items():
        logged = [e.created_at.date() for e in dated if e.emotion == emotion.value]
        if today not in logged:
            continue
        previous = [d for d in logged if d < today]

        if not previous:
            category = f"{emotion.value}_first"
            title = f"First time logging {emotion.value} emotion!"
            message = (
                f"Tracking your {emotion.value} emotions helps build a "
                "comprehensive view of your trading psychology."
            )
            if log.was_sent(category, today):
                continue
        else:
            days = (today - max(previous)).days
            if days < min_days:
                continue
            category = f"{emotion.value}_emotion_return"
            if log.was_sent(category, today) or log.sent_within(
                category, today, RETURN_COOLDOWN_DAYS
            ):
                continue
            title_template, message = _RETURN_TEMPLATES[emotion]
            title = title_template.format(days=days)

        log.record(category, today, title=title, message=message)
        notices.append(Notice(category=category, title=title, message=message))
    return notices
