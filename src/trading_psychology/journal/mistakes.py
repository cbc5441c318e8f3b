"""Cost of self-reported mistakes.

Journal entries list the mistakes made in a session.  The loss of the
session's losing trades is split evenly across its mistakes, giving each
mistake label a frequency and a dollar cost.  Losses come from trades
*owned* by the entry after deduplication, so a trade surfaced under two
entries is charged once.

Mistake labels are free text; :func:`categorize_mistake` maps each to a
:class:`MistakeCategory` through a keyword table.

Usage::

    freq = mistake_frequencies(entries, trade_set)
    report = mistake_categories(freq)
    print(report["risk_management"]["loss"])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from trading_psychology.core.enums import MistakeCategory

from .dedup import TradeSet
from .patterns import find_terms
from .record import JournalEntry

logger = logging.getLogger(__name__)

# First matching category wins; exit terms precede entry terms so that
# "exited early" is an exit problem.
_CATEGORY_TERMS: tuple[tuple[MistakeCategory, tuple[str, ...]], ...] = (
    (MistakeCategory.RISK_MANAGEMENT, (
        "risk", "stop", "no sl", "position siz", "sizing", "size", "oversiz",
        "leverage", "lot size",
    )),
    (MistakeCategory.EXIT_MANAGEMENT, (
        "exit", "took profit", "take profit", "closed", "cut", "held",
        "target", "tp", "partial",
    )),
    (MistakeCategory.ENTRY_TIMING, (
        "entry", "entered", "early", "late", "chas", "premature", "jumped in",
        "confirmation",
    )),
    (MistakeCategory.DISCIPLINE, (
        "plan", "rule", "overtrad", "revenge", "impuls", "discipline",
        "checklist", "too many",
    )),
    (MistakeCategory.EMOTIONAL, (
        "emotion", "fear", "fomo", "greed", "anger", "angry", "frustrat",
        "tilt", "anxi", "panic", "bored",
    )),
)


def categorize_mistake(label: str) -> MistakeCategory:
    """Map a free-text mistake label to its category."""
    for category, terms in _CATEGORY_TERMS:
        if find_terms(label, terms):
            return category
    return MistakeCategory.OTHER


@dataclass
class MistakeStat:
    mistake: str
    category: MistakeCategory
    count: int = 0
    loss: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "loss": round(self.loss, 2),
            "category": self.category.value,
        }


def mistake_frequencies(
    entries: Sequence[JournalEntry], trade_set: TradeSet
) -> dict[str, MistakeStat]:
    """Count and attributed loss per mistake label.

    *trade_set* must come from deduplicating the same *entries* sequence.
    The result is ordered by count, then loss, descending.
    """
    stats: dict[str, MistakeStat] = {}
    for index, entry in enumerate(entries):
        if not entry.mistakes:
            continue
        loss = sum(
            abs(o.trade.net_pnl)
            for o in trade_set.owned_by(index)
            if o.trade.net_pnl < 0
        )
        share = loss / len(entry.mistakes)
        for label in entry.mistakes:
            stat = stats.get(label)
            if stat is None:
                stat = stats[label] = MistakeStat(
                    mistake=label, category=categorize_mistake(label)
                )
            stat.count += 1
            stat.loss += share

    ordered = sorted(stats.values(), key=lambda s: (s.count, s.loss), reverse=True)
    return {s.mistake: s for s in ordered}


def mistake_categories(frequencies: dict[str, MistakeStat]) -> dict[str, dict[str, Any]]:
    """Aggregate ``{count, loss}`` per category, in category order."""
    report = {c.value: {"count": 0, "loss": 0.0} for c in MistakeCategory}
    for stat in frequencies.values():
        bucket = report[stat.category.value]
        bucket["count"] += stat.count
        bucket["loss"] += stat.loss
    for bucket in report.values():
        bucket["loss"] = round(bucket["loss"], 2)
    return report


def top_mistake(frequencies: dict[str, MistakeStat]) -> MistakeStat | None:
    """Most frequent mistake (highest loss on a tie), or ``None``."""
    return next(iter(frequencies.values()), None)
