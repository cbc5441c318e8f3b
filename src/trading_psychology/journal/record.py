"""Normalized journal records: the core data model.

A :class:`Trade` is one executed trade as logged by the trader; a
:class:`JournalEntry` is one pre- or post-session journal page that may
embed any number of trades.  The same trade can be surfaced under several
entries (a daily and a weekly page, say), so entries are never summed
directly: aggregates go through :func:`~trading_psychology.journal.dedup.deduplicate_trades`.

Both records are immutable.  They are produced by the normalizer, which
is the only place that looks at the raw, loosely-typed input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from trading_psychology.core.enums import Direction, SessionType, TradeOutcome


@dataclass(frozen=True)
class Trade:
    """A single normalized trade.

    Every numeric field present in the raw record is a ``float``; fields
    absent from the raw record stay ``None`` so that "missing" and "zero"
    remain distinguishable.

    Parameters
    ----------
    id : str or None
        Stable identity, used as the deduplication key.  Trades without an
        id are kept for display but excluded from aggregates.
    direction : str or None
        ``"long"`` / ``"short"`` when given explicitly, otherwise inferred
        from the stop (long when the stop sits below the entry).
    anomalies : frozenset of str
        Names of fields whose raw value could not be read.  A malformed
        number is stored as ``0.0``; calculations that need the real value
        consult this set and skip the trade.
    """

    id: str | None = None
    instrument: str | None = None
    direction: str | None = None

    entry_price: float | None = None
    exit_price: float | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    highest_price: float | None = None
    lowest_price: float | None = None

    entry_date: datetime | None = None
    exit_date: datetime | None = None

    quantity: float | None = None
    fees: float | None = None
    setup: str | None = None
    pnl: float | None = None
    anomalies: frozenset[str] = frozenset()

    # ------------------------------------------------------------------ #
    # Computed properties                                                  #
    # ------------------------------------------------------------------ #

    @property
    def net_pnl(self) -> float:
        """Recorded P&L, with a missing value read as zero."""
        return self.pnl if self.pnl is not None else 0.0

    @property
    def outcome(self) -> TradeOutcome:
        """Win / loss / break-even classification."""
        if self.net_pnl > 0:
            return TradeOutcome.WIN
        if self.net_pnl < 0:
            return TradeOutcome.LOSS
        return TradeOutcome.BREAKEVEN

    @property
    def is_long(self) -> bool:
        """Long when stated, else when the stop sits below the entry."""
        if self.direction == Direction.LONG.value:
            return True
        if self.direction == Direction.SHORT.value:
            return False
        if self.stop_loss is None or self.entry_price is None:
            return True
        return self.stop_loss < self.entry_price

    @property
    def hold_duration_hours(self) -> float | None:
        """Hours between entry and exit, or ``None`` without both dates."""
        if self.entry_date is None or self.exit_date is None:
            return None
        return (self.exit_date - self.entry_date).total_seconds() / 3600.0

    def to_dict(self) -> dict:
        """Serialise to a JSON-compatible dict."""
        return {
            "id": self.id,
            "instrument": self.instrument,
            "direction": self.direction,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "highest_price": self.highest_price,
            "lowest_price": self.lowest_price,
            "entry_date": self.entry_date.isoformat() if self.entry_date else None,
            "exit_date": self.exit_date.isoformat() if self.exit_date else None,
            "quantity": self.quantity,
            "fees": self.fees,
            "setup": self.setup,
            "pnl": self.pnl,
            "anomalies": sorted(self.anomalies),
        }


@dataclass(frozen=True)
class JournalEntry:
    """One journal page, optionally carrying the trades taken that session.

    Parameters
    ----------
    session_type : str
        ``"pre"`` or ``"post"``; other values are kept verbatim.
    emotion : str
        Lower-cased mood label.  ``positive`` / ``neutral`` / ``negative``
        in the common case, but finer-grained labels are preserved.
    notes : str
        The free-text reflection analysed by the pattern classifier.
    """

    id: str | None = None
    created_at: datetime | None = None
    session_type: str = ""
    emotion: str = ""
    emotion_detail: str = ""
    outcome: str = ""
    followed_rules: tuple[str, ...] = ()
    mistakes: tuple[str, ...] = ()
    pre_trading_activities: tuple[str, ...] = ()
    notes: str = ""
    market_conditions: str = ""
    trades: tuple[Trade, ...] = field(default_factory=tuple)

    @property
    def is_pre_session(self) -> bool:
        return self.session_type == SessionType.PRE.value

    @property
    def is_post_session(self) -> bool:
        return self.session_type == SessionType.POST.value
