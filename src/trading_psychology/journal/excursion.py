"""Maximum favorable / adverse excursion relative to the trade plan.

MFE is expressed as a percentage of the distance to the take-profit and
MAE as a percentage of the distance to the stop-loss, so 100 means "the
target was reached" and -100 means "the stop was reached".

The stop and the target are read independently: a trade is long for MAE
purposes when its stop sits below the entry, and long for MFE purposes
when its target sits above the entry.  Traders sometimes record the two
inconsistently and each excursion follows its own leg.

Usage::

    records = analyze_excursions(trade_set)
    summary = excursion_summary(records)
    print(summary.hit_tp_pct, summary.avg_mae_losers)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from .dedup import TradeSet
from .record import Trade

logger = logging.getLogger(__name__)

_REQUIRED = (
    "entry_price",
    "exit_price",
    "highest_price",
    "lowest_price",
    "take_profit",
    "stop_loss",
)


@dataclass(frozen=True)
class ExcursionRecord:
    """Excursion analytics for one trade.

    Parameters
    ----------
    mfe_pct : float
        Favorable excursion as a % of the target distance.  Not clamped:
        values above 100 mean price ran past the target.
    mae_pct : float
        Adverse excursion as a % of the stop distance, in ``[-100, 0]``
        whenever the stop was respected.
    captured_pct : float
        Realized move as a % of the favorable excursion.
    """

    id: str
    instrument: str | None
    is_long: bool
    is_long_for_tp: bool
    mfe_pct: float
    mae_pct: float
    captured_pct: float
    r_multiple: float
    pnl: float

    @property
    def hit_tp(self) -> bool:
        return self.mfe_pct >= 100

    @property
    def hit_sl(self) -> bool:
        return abs(self.mae_pct) >= 100

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "instrument": self.instrument,
            "isLong": self.is_long,
            "mfeRelativeToTp": round(self.mfe_pct, 2),
            "maeRelativeToSl": round(self.mae_pct, 2),
            "capturedMove": round(self.captured_pct, 2),
            "rMultiple": round(self.r_multiple, 2),
            "pnl": round(self.pnl, 2),
        }


# ---------------------------------------------------------------------- #
# Formulas                                                                 #
# ---------------------------------------------------------------------- #


def mae_relative_to_stop(
    entry: float, stop: float, highest: float, lowest: float, is_long: bool
) -> float:
    """Adverse excursion as a negative % of the stop distance.

    Exactly -100 once the adverse extreme has reached or passed the stop.
    """
    adverse = lowest if is_long else highest
    hit_stop = adverse <= stop if is_long else adverse >= stop
    if hit_stop:
        return -100.0
    return -abs((adverse - entry) / (stop - entry)) * 100.0


def mfe_relative_to_target(
    entry: float, target: float, highest: float, lowest: float, is_long_for_tp: bool
) -> float:
    """Favorable excursion as a % of the target distance, unclamped."""
    if is_long_for_tp:
        return (highest - entry) / (target - entry) * 100.0
    return (entry - lowest) / (entry - target) * 100.0


def captured_move(
    entry: float, exit: float, highest: float, lowest: float, is_long: bool
) -> float:
    """Realized move as a % of the favorable excursion, in ``[-100, 100]``.

    When price never moved favorably the adverse excursion is used as the
    denominator and only the -100 floor applies.  This substitution is a
    heuristic; its sign behaviour has not been verified for every
    direction and price combination.
    """
    if is_long:
        favorable, realized, adverse = highest - entry, exit - entry, abs(entry - lowest)
    else:
        favorable, realized, adverse = entry - lowest, entry - exit, abs(entry - highest)

    if favorable <= 0:
        if adverse == 0:
            return 0.0
        return max(-100.0, realized / adverse * 100.0)
    return min(100.0, max(-100.0, realized / favorable * 100.0))


def r_multiple(entry: float, target: float, stop: float) -> float:
    """Planned reward-to-risk: ``|entry - target| / |entry - stop|``."""
    risk = abs(entry - stop)
    return abs(entry - target) / risk if risk else 0.0


# ---------------------------------------------------------------------- #
# Analysis                                                                 #
# ---------------------------------------------------------------------- #


def excursion_for(trade: Trade) -> ExcursionRecord | None:
    """Excursion record for one trade, or ``None`` when it is excluded.

    A trade is excluded when it lacks an id, when any price leg is missing
    or was unreadable in the raw record, when its high is below its low,
    or when its stop or target equals the entry.
    """
    if trade.id is None or any(getattr(trade, name) is None for name in _REQUIRED):
        return None
    if trade.anomalies.intersection(_REQUIRED):
        return None

    entry = trade.entry_price
    high, low = trade.highest_price, trade.lowest_price
    stop, target = trade.stop_loss, trade.take_profit
    if high < low or stop == entry or target == entry:
        return None

    is_long = stop < entry
    is_long_for_tp = target > entry
    return ExcursionRecord(
        id=trade.id,
        instrument=trade.instrument,
        is_long=is_long,
        is_long_for_tp=is_long_for_tp,
        mfe_pct=mfe_relative_to_target(entry, target, high, low, is_long_for_tp),
        mae_pct=mae_relative_to_stop(entry, stop, high, low, is_long),
        captured_pct=captured_move(entry, trade.exit_price, high, low, is_long),
        r_multiple=r_multiple(entry, target, stop),
        pnl=trade.net_pnl,
    )


def analyze_excursions(trade_set: TradeSet) -> list[ExcursionRecord]:
    """Excursion records for every eligible unique trade."""
    records = []
    for trade in trade_set.trades:
        record = excursion_for(trade)
        if record is not None:
            records.append(record)
    skipped = len(trade_set) - len(records)
    if skipped:
        logger.debug("Excluded %d trades from excursion analysis", skipped)
    return records


@dataclass(frozen=True)
class ExcursionSummary:
    """Aggregate view of excursion records.

    Winners are trades whose MFE reached the target and losers trades whose
    MAE reached the stop; a trade can be both.
    """

    total: int = 0
    hit_tp_pct: float = 0.0
    hit_sl_pct: float = 0.0
    avg_mfe_winners: float = 0.0
    avg_mfe_losers: float = 0.0
    avg_mae_winners: float = 0.0
    avg_mae_losers: float = 0.0
    avg_r_multiple: float = 0.0
    avg_captured: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTrades": self.total,
            "tradesHitTp": round(self.hit_tp_pct, 2),
            "tradesHitSl": round(self.hit_sl_pct, 2),
            "avgUpdrawWinner": round(self.avg_mfe_winners, 2),
            "avgUpdrawLoser": round(self.avg_mfe_losers, 2),
            "avgDrawdownWinner": round(self.avg_mae_winners, 2),
            "avgDrawdownLoser": round(self.avg_mae_losers, 2),
            "avgRMultiple": round(self.avg_r_multiple, 2),
            "avgCapturedMove": round(self.avg_captured, 2),
        }


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def excursion_summary(records: Sequence[ExcursionRecord]) -> ExcursionSummary:
    """Share of trades reaching target / stop and their average excursions.

    Drawdown averages are absolute MAE values.
    """
    if not records:
        return ExcursionSummary()

    winners = [r for r in records if r.hit_tp]
    losers = [r for r in records if r.hit_sl]
    total = len(records)
    return ExcursionSummary(
        total=total,
        hit_tp_pct=len(winners) / total * 100.0,
        hit_sl_pct=len(losers) / total * 100.0,
        avg_mfe_winners=_mean([r.mfe_pct for r in winners]),
        avg_mfe_losers=_mean([r.mfe_pct for r in losers]),
        avg_mae_winners=_mean([abs(r.mae_pct) for r in winners]),
        avg_mae_losers=_mean([abs(r.mae_pct) for r in losers]),
        avg_r_multiple=_mean([r.r_multiple for r in records]),
        avg_captured=_mean([r.captured_pct for r in records]),
    )
