"""Session habits vs results: rules, pre-trading routine, market volatility.

Three breakdowns of what the trader did around a session:

* **rule adherence**: post-session outcomes split by whether any rule
  was ticked as followed;
* **pre-trading events**: average P&L of the sessions that followed each
  routine activity (meditation, exercise, ...);
* **volatility**: each entry's stated market conditions as a volatility
  level next to its P&L and mood.

P&L always comes from trades *owned* by an entry after deduplication, so
a trade repeated on a weekly page is not counted twice.

Usage::

    groups = rule_adherence(entries)
    impact = pre_trading_impact(entries, trade_set)
    print(impact.most_positive, impact.most_negative)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Sequence

from trading_psychology.core.enums import SessionOutcome

from .dedup import TradeSet
from .record import JournalEntry
from .scoring import round_half_up

logger = logging.getLogger(__name__)

RULES_FOLLOWED = "Rules Followed"
RULES_NOT_FOLLOWED = "Rules Not Followed"

PREDEFINED_ACTIVITIES = (
    "Meditation",
    "Exercise",
    "Journaling",
    "Healthy Eating",
    "Good Sleep",
    "Affirmation",
)

# Retired activity names still found in older journals
_ACTIVITY_ALIASES = {
    "review daily goals": "Journaling",
    "cold shower": "Healthy Eating",
}
_ACTIVITY_LOOKUP = {a.lower(): a for a in PREDEFINED_ACTIVITIES} | _ACTIVITY_ALIASES

# First matching level wins
_VOLATILITY_LEVELS = (("high", 75), ("medium", 50))
_DEFAULT_VOLATILITY = 25


def _owned_pnl(trade_set: TradeSet, entry_index: int) -> float:
    return sum((o.trade.net_pnl for o in trade_set.owned_by(entry_index)), 0.0)


# ---------------------------------------------------------------------- #
# Rule adherence                                                           #
# ---------------------------------------------------------------------- #


@dataclass
class RuleAdherenceGroup:
    name: str
    wins: int = 0
    losses: int = 0

    @property
    def total(self) -> int:
        return self.wins + self.losses

    @property
    def win_pct(self) -> int:
        return round_half_up(self.wins / self.total * 100) if self.total else 0

    @property
    def loss_pct(self) -> int:
        return round_half_up(self.losses / self.total * 100) if self.total else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "wins": self.wins,
            "losses": self.losses,
            "total": self.total,
            "winPercentage": self.win_pct,
            "lossPercentage": self.loss_pct,
        }


def rule_adherence(entries: Sequence[JournalEntry]) -> list[RuleAdherenceGroup]:
    """Win/loss split of post-session entries by rule adherence.

    Only post-session entries with a ``win`` or ``loss`` outcome count.
    An entry with at least one followed rule goes to *Rules Followed*,
    any other to *Rules Not Followed*.  Empty groups are left out.
    """
    followed = RuleAdherenceGroup(RULES_FOLLOWED)
    not_followed = RuleAdherenceGroup(RULES_NOT_FOLLOWED)
    for entry in entries:
        if not entry.is_post_session:
            continue
        if entry.outcome not in (SessionOutcome.WIN.value, SessionOutcome.LOSS.value):
            continue
        group = followed if entry.followed_rules else not_followed
        if entry.outcome == SessionOutcome.WIN.value:
            group.wins += 1
        else:
            group.losses += 1
    return [g for g in (followed, not_followed) if g.total > 0]


# ---------------------------------------------------------------------- #
# Pre-trading events                                                       #
# ---------------------------------------------------------------------- #


def canonical_activity(label: str) -> str | None:
    """Predefined activity name for *label*, or ``None`` when unknown."""
    return _ACTIVITY_LOOKUP.get(label.strip().lower())


@dataclass
class ActivityImpact:
    activity: str
    total_pnl: float = 0.0
    sessions: int = 0

    @property
    def impact(self) -> float:
        """Average P&L of the sessions that followed the activity."""
        return round(self.total_pnl / self.sessions, 2) if self.sessions else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {"activity": self.activity, "impact": self.impact, "sessions": self.sessions}


@dataclass
class PreTradingImpact:
    activities: list[ActivityImpact] = field(default_factory=list)

    @property
    def most_positive(self) -> str | None:
        return self._extreme(max)

    @property
    def most_negative(self) -> str | None:
        return self._extreme(min)

    def _extreme(self, pick) -> str | None:
        seen = [a for a in self.activities if a.sessions]
        if not seen:
            return None
        return pick(seen, key=lambda a: a.impact).activity

    def to_dict(self) -> dict[str, Any]:
        return {
            "activities": [a.to_dict() for a in self.activities],
            "mostPositive": self.most_positive,
            "mostNegative": self.most_negative,
        }


def pre_trading_impact(
    entries: Sequence[JournalEntry], trade_set: TradeSet
) -> PreTradingImpact:
    """Average session P&L per predefined pre-trading activity.

    Each calendar day takes its activities from the last entry of that day
    listing any.  Every entry with owned trades on such a day adds its P&L
    once to each of the day's activities.  Unknown activity labels are
    ignored.  The result covers every predefined activity, ordered by
    absolute impact descending.

    *trade_set* must come from deduplicating the same *entries* sequence.
    """
    day_activities: dict[date, tuple[str, ...]] = {}
    for entry in entries:
        if entry.created_at is not None and entry.pre_trading_activities:
            day_activities[entry.created_at.date()] = entry.pre_trading_activities

    stats = {a: ActivityImpact(a) for a in PREDEFINED_ACTIVITIES}
    for index, entry in enumerate(entries):
        if entry.created_at is None:
            continue
        activities = day_activities.get(entry.created_at.date())
        owned = trade_set.owned_by(index)
        if not activities or not owned:
            continue
        pnl = sum(o.trade.net_pnl for o in owned)
        for label in activities:
            name = canonical_activity(label)
            if name is None:
                logger.debug("Ignoring unknown pre-trading activity %r", label)
                continue
            stats[name].total_pnl += pnl
            stats[name].sessions += 1

    ordered = sorted(stats.values(), key=lambda a: abs(a.impact), reverse=True)
    return PreTradingImpact(activities=ordered)


# ---------------------------------------------------------------------- #
# Volatility                                                               #
# ---------------------------------------------------------------------- #


def volatility_level(market_conditions: str) -> int:
    """75 for high, 50 for medium, otherwise 25."""
    text = market_conditions.lower()
    for keyword, level in _VOLATILITY_LEVELS:
        if keyword in text:
            return level
    return _DEFAULT_VOLATILITY


@dataclass(frozen=True)
class VolatilityPoint:
    entry_id: str | None
    volatility: int
    performance: float
    emotional: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "entryId": self.entry_id,
            "volatility": self.volatility,
            "performance": round(self.performance, 2),
            "emotional": self.emotional,
        }


def volatility_performance(
    entries: Sequence[JournalEntry], trade_set: TradeSet
) -> list[VolatilityPoint]:
    """One point per entry: volatility level, owned P&L and mood."""
    return [
        VolatilityPoint(
            entry_id=entry.id,
            volatility=volatility_level(entry.market_conditions),
            performance=_owned_pnl(trade_set, index),
            emotional=entry.emotion,
        )
        for index, entry in enumerate(entries)
    ]
