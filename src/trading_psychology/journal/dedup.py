"""Trade deduplication across journal entries.

The same trade can be embedded in several journal entries.  Every numeric
aggregate in the engine consumes :attr:`TradeSet.unique`, which holds
exactly one copy per trade id (first seen wins), so P&L and counts are
never double-counted.

Usage::

    trade_set = deduplicate_trades(entries)
    total = sum(o.trade.net_pnl for o in trade_set.unique)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from .record import JournalEntry, Trade

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OwnedTrade:
    """A trade paired with the journal entry it was first seen in."""

    trade: Trade
    entry_index: int = -1
    entry_id: str | None = None
    entry_created_at: datetime | None = None

    @property
    def date(self) -> datetime | None:
        return trade_date(self)


@dataclass
class TradeSet:
    """Result of deduplication.

    Parameters
    ----------
    unique : list[OwnedTrade]
        Identified trades, one per id, in first-seen order.  The only input
        to numeric aggregates.
    unidentified : list[OwnedTrade]
        Trades without an id, kept for display.
    raw_count : int
        Number of embedded trades seen, ids or not.
    """

    unique: list[OwnedTrade] = field(default_factory=list)
    unidentified: list[OwnedTrade] = field(default_factory=list)
    raw_count: int = 0

    @property
    def duplicate_count(self) -> int:
        return self.raw_count - len(self.unique) - len(self.unidentified)

    @property
    def trades(self) -> list[Trade]:
        return [o.trade for o in self.unique]

    def owned_by(self, entry_index: int) -> list[OwnedTrade]:
        """Unique trades first seen in the entry at *entry_index*."""
        return [o for o in self.unique if o.entry_index == entry_index]

    def __len__(self) -> int:
        return len(self.unique)


def trade_date(owned: OwnedTrade) -> datetime | None:
    """Resolve a trade's date: entry date, then exit date, then parent entry."""
    trade = owned.trade
    return trade.entry_date or trade.exit_date or owned.entry_created_at


def deduplicate_trades(entries: Iterable[JournalEntry]) -> TradeSet:
    """Collapse trades repeated across entries to one per id.

    Entries are walked in the given order and their trades in order; the
    first occurrence of an id is kept along with its owning entry.
    """
    result = TradeSet()
    seen: set[str] = set()

    for index, entry in enumerate(entries):
        for trade in entry.trades:
            result.raw_count += 1
            owned = OwnedTrade(
                trade=trade,
                entry_index=index,
                entry_id=entry.id,
                entry_created_at=entry.created_at,
            )
            if trade.id is None:
                result.unidentified.append(owned)
                continue
            if trade.id in seen:
                continue
            seen.add(trade.id)
            result.unique.append(owned)

    if result.duplicate_count or result.unidentified:
        logger.info(
            "Deduplicated %d trades: %d unique, %d duplicates, %d without id",
            result.raw_count,
            len(result.unique),
            result.duplicate_count,
            len(result.unidentified),
        )
    return result
