"""Performance metrics over a deduplicated trade set.

Every function here is pure: it takes trades (or a
:class:`~trading_psychology.journal.dedup.TradeSet`) and returns plain
numbers or small dataclasses.  Divide-by-zero paths resolve to ``0.0``,
never ``NaN`` or ``inf``.

Chronological computations (drawdown, equity curve, streaks, daily P&L)
only see trades with a resolvable date; count-based metrics see every
identified trade.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Iterable, Sequence

import numpy as np

from trading_psychology.core.enums import TimeWindow

from .dedup import OwnedTrade, TradeSet, trade_date
from .record import Trade

logger = logging.getLogger(__name__)

UNDEFINED_SETUP = "Undefined"
UNKNOWN_INSTRUMENT = "Unknown"

# (label, lower minutes exclusive, upper minutes inclusive)
DURATION_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("< 30 min", 0, 30),
    ("30-60 min", 30, 60),
    ("1-3 hrs", 60, 180),
    ("3-6 hrs", 180, 360),
    ("6-9 hrs", 360, 540),
    ("9-12 hrs", 540, 720),
    ("12-24 hrs", 720, 1440),
    ("> 24 hrs", 1440, float("inf")),
)


def _pnls(trades: Iterable[Trade]) -> list[float]:
    return [t.net_pnl for t in trades]


def _safe_div(num: float, den: float) -> float:
    return num / den if den else 0.0


# ---------------------------------------------------------------------- #
# Ratios                                                                   #
# ---------------------------------------------------------------------- #


def win_rate(trades: Sequence[Trade]) -> float:
    """Percentage of trades with strictly positive P&L."""
    if not trades:
        return 0.0
    wins = sum(1 for t in trades if t.net_pnl > 0)
    return wins / len(trades) * 100.0


def profit_factor(trades: Iterable[Trade]) -> float:
    """Gross profit / gross loss; 0 when there is no loss."""
    pnls = _pnls(trades)
    gross_profit = sum(p for p in pnls if p > 0)
    gross_loss = abs(sum(p for p in pnls if p < 0))
    return _safe_div(gross_profit, gross_loss)


def average_win(trades: Iterable[Trade]) -> float:
    wins = [p for p in _pnls(trades) if p > 0]
    return _safe_div(sum(wins), len(wins))


def average_loss(trades: Iterable[Trade]) -> float:
    """Mean absolute losing P&L (a positive number)."""
    losses = [abs(p) for p in _pnls(trades) if p < 0]
    return _safe_div(sum(losses), len(losses))


def win_loss_ratio(trades: Sequence[Trade]) -> float:
    """Mean winner / mean absolute loser; 0 when there are no losers."""
    return _safe_div(average_win(trades), average_loss(trades))


def max_drawdown(pnls: Sequence[float]) -> float:
    """Largest peak-to-trough decline of cumulative P&L.

    The running peak starts at the first cumulative value, so any
    non-decreasing cumulative series, even one below zero, returns 0.
    """
    if len(pnls) == 0:
        return 0.0
    cumulative = np.cumsum(np.asarray(pnls, dtype=float))
    peaks = np.maximum.accumulate(cumulative)
    return float(max((peaks - cumulative).max(), 0.0))


def max_drawdown_pct(pnls: Sequence[float], initial_capital: float) -> float:
    """Largest decline as a percentage of the running peak balance."""
    if len(pnls) == 0:
        return 0.0
    balance = initial_capital + np.cumsum(np.asarray(pnls, dtype=float))
    peaks = np.maximum.accumulate(balance)
    with np.errstate(divide="ignore", invalid="ignore"):
        pct = np.where(peaks > 0, (peaks - balance) / peaks * 100.0, 0.0)
    return float(max(pct.max(), 0.0))


def _longest_run(pnls: Iterable[float], positive: bool) -> int:
    """Longest run of wins (or losses); flat trades break a run."""
    best = current = 0
    for p in pnls:
        if (p > 0) if positive else (p < 0):
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def longest_streaks(pnls: Sequence[float]) -> tuple[int, int]:
    """``(longest winning streak, longest losing streak)``."""
    return _longest_run(pnls, True), _longest_run(pnls, False)


# ---------------------------------------------------------------------- #
# Chronology                                                               #
# ---------------------------------------------------------------------- #


def chronological(trade_set: TradeSet) -> list[OwnedTrade]:
    """Dated unique trades, stably sorted by resolved date."""
    dated = [o for o in trade_set.unique if trade_date(o) is not None]
    undated = len(trade_set.unique) - len(dated)
    if undated:
        logger.debug("Excluded %d undated trades from chronological metrics", undated)
    return sorted(dated, key=trade_date)


def daily_pnl(trade_set: TradeSet) -> dict[date, float]:
    """Total P&L per calendar day (UTC), ordered by day."""
    days: dict[date, float] = {}
    for owned in chronological(trade_set):
        day = trade_date(owned).date()
        days[day] = days.get(day, 0.0) + owned.trade.net_pnl
    return days


def profitable_days_pct(trade_set: TradeSet) -> float:
    """Percentage of trading days with positive total P&L."""
    days = daily_pnl(trade_set)
    return _safe_div(sum(1 for p in days.values() if p > 0), len(days)) * 100.0


@dataclass(frozen=True)
class EquityPoint:
    date: datetime
    balance: float
    daily_pnl: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.date().isoformat(),
            "balance": round(self.balance, 2),
            "dailyPnL": round(self.daily_pnl, 2),
        }


def equity_curve(trade_set: TradeSet, initial_capital: float) -> list[EquityPoint]:
    """One point per trade: balance = capital + cumulative P&L."""
    points: list[EquityPoint] = []
    balance = initial_capital
    for owned in chronological(trade_set):
        pnl = owned.trade.net_pnl
        balance += pnl
        points.append(EquityPoint(date=trade_date(owned), balance=balance, daily_pnl=pnl))
    return points


# ---------------------------------------------------------------------- #
# Time windows                                                             #
# ---------------------------------------------------------------------- #


def window_start(window: TimeWindow, as_of: datetime) -> datetime:
    """First instant of the month, quarter or year containing *as_of*."""
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    start = as_of.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if window == TimeWindow.QUARTER:
        start = start.replace(month=3 * ((as_of.month - 1) // 3) + 1)
    elif window == TimeWindow.YEAR:
        start = start.replace(month=1)
    return start


@dataclass(frozen=True)
class WindowPerformance:
    window: TimeWindow
    start: datetime | None = None
    total_trades: int = 0
    winning_trades: int = 0
    total_pnl: float = 0.0
    strike_rate: float = 0.0
    percentage_performance: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "window": self.window.value,
            "start": self.start.isoformat() if self.start else None,
            "totalTrades": self.total_trades,
            "winningTrades": self.winning_trades,
            "totalPnl": round(self.total_pnl, 2),
            "strikeRate": round(self.strike_rate, 2),
            "percentagePerformance": round(self.percentage_performance, 2),
        }


def time_window_performance(
    trade_set: TradeSet,
    initial_capital: float,
    as_of: datetime | None,
    windows: Iterable[TimeWindow] = tuple(TimeWindow),
) -> dict[TimeWindow, WindowPerformance]:
    """Strike rate and return of trades dated on/after each window start.

    Without an *as_of* reference every window is reported empty.
    """
    result: dict[TimeWindow, WindowPerformance] = {}
    for window in windows:
        if as_of is None:
            result[window] = WindowPerformance(window=window)
            continue
        start = window_start(window, as_of)
        trades = [
            o.trade for o in trade_set.unique
            if trade_date(o) is not None and trade_date(o) >= start
        ]
        total = sum(t.net_pnl for t in trades)
        result[window] = WindowPerformance(
            window=window,
            start=start,
            total_trades=len(trades),
            winning_trades=sum(1 for t in trades if t.net_pnl > 0),
            total_pnl=total,
            strike_rate=win_rate(trades),
            percentage_performance=(
                _safe_div(total, initial_capital) * 100.0 if trades else 0.0
            ),
        )
    return result


# ---------------------------------------------------------------------- #
# Summary                                                                  #
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class PerformanceSummary:
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    win_loss_ratio: float = 0.0
    average_win: float = 0.0
    average_loss: float = 0.0
    total_pnl: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_pct: float = 0.0
    initial_capital: float = 0.0
    current_balance: float = 0.0
    total_return_pct: float = 0.0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    trading_days: int = 0
    profitable_days_pct: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTrades": self.total_trades,
            "winningTrades": self.winning_trades,
            "losingTrades": self.losing_trades,
            "breakevenTrades": self.breakeven_trades,
            "winRate": round(self.win_rate, 2),
            "profitFactor": round(self.profit_factor, 2),
            "winLossRatio": round(self.win_loss_ratio, 2),
            "averageWin": round(self.average_win, 2),
            "averageLoss": round(self.average_loss, 2),
            "totalPnl": round(self.total_pnl, 2),
            "maxDrawdown": round(self.max_drawdown, 2),
            "maxDrawdownPct": round(self.max_drawdown_pct, 2),
            "initialCapital": round(self.initial_capital, 2),
            "currentBalance": round(self.current_balance, 2),
            "totalReturnPct": round(self.total_return_pct, 2),
            "longestWinStreak": self.longest_win_streak,
            "longestLossStreak": self.longest_loss_streak,
            "tradingDays": self.trading_days,
            "profitableDaysPct": round(self.profitable_days_pct, 2),
        }


def performance_summary(trade_set: TradeSet, initial_capital: float) -> PerformanceSummary:
    """Headline statistics for the whole trade set."""
    trades = trade_set.trades
    ordered = [o.trade.net_pnl for o in chronological(trade_set)]
    total = sum(t.net_pnl for t in trades)
    win_streak, loss_streak = longest_streaks(ordered)

    return PerformanceSummary(
        total_trades=len(trades),
        winning_trades=sum(1 for t in trades if t.net_pnl > 0),
        losing_trades=sum(1 for t in trades if t.net_pnl < 0),
        breakeven_trades=sum(1 for t in trades if t.net_pnl == 0),
        win_rate=win_rate(trades),
        profit_factor=profit_factor(trades),
        win_loss_ratio=win_loss_ratio(trades),
        average_win=average_win(trades),
        average_loss=average_loss(trades),
        total_pnl=total,
        max_drawdown=max_drawdown(ordered),
        max_drawdown_pct=max_drawdown_pct(ordered, initial_capital),
        initial_capital=initial_capital,
        current_balance=initial_capital + total,
        total_return_pct=_safe_div(total, initial_capital) * 100.0,
        longest_win_streak=win_streak,
        longest_loss_streak=loss_streak,
        trading_days=len(daily_pnl(trade_set)),
        profitable_days_pct=profitable_days_pct(trade_set),
    )


# ---------------------------------------------------------------------- #
# Breakdowns                                                               #
# ---------------------------------------------------------------------- #


def risk_reward(trade: Trade) -> float | None:
    """Planned reward / risk, or ``None`` without a usable stop and target."""
    if trade.entry_price is None or trade.stop_loss is None or trade.take_profit is None:
        return None
    risk = abs(trade.entry_price - trade.stop_loss)
    if risk == 0:
        return None
    return abs(trade.take_profit - trade.entry_price) / risk


@dataclass
class SetupStats:
    setup: str
    trades: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0
    _risk_rewards: list[float] = field(default_factory=list, repr=False)

    @property
    def win_rate(self) -> float:
        return _safe_div(self.wins, self.trades) * 100.0

    @property
    def average_pnl(self) -> float:
        return _safe_div(self.total_pnl, self.trades)

    @property
    def average_risk_reward(self) -> float:
        return _safe_div(sum(self._risk_rewards), len(self._risk_rewards))

    def to_dict(self) -> dict[str, Any]:
        return {
            "setup": self.setup,
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "winRate": round(self.win_rate, 2),
            "totalPnl": round(self.total_pnl, 2),
            "averagePnl": round(self.average_pnl, 2),
            "averageRiskReward": round(self.average_risk_reward, 2),
        }


def setup_stats(trade_set: TradeSet) -> list[SetupStats]:
    """Per-setup statistics, most profitable first."""
    stats: dict[str, SetupStats] = {}
    for trade in trade_set.trades:
        name = trade.setup or UNDEFINED_SETUP
        s = stats.setdefault(name, SetupStats(setup=name))
        s.trades += 1
        s.total_pnl += trade.net_pnl
        if trade.net_pnl > 0:
            s.wins += 1
        elif trade.net_pnl < 0:
            s.losses += 1
        rr = risk_reward(trade)
        if rr is not None:
            s._risk_rewards.append(rr)
    return sorted(stats.values(), key=lambda s: s.total_pnl, reverse=True)


@dataclass
class AssetPairStats:
    instrument: str
    trades: int = 0
    wins: int = 0
    profit: float = 0.0
    loss: float = 0.0  # absolute

    @property
    def net(self) -> float:
        return self.profit - self.loss

    @property
    def win_rate(self) -> float:
        return _safe_div(self.wins, self.trades) * 100.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "instrument": self.instrument,
            "trades": self.trades,
            "wins": self.wins,
            "winRate": round(self.win_rate, 2),
            "profit": round(self.profit, 2),
            "loss": round(self.loss, 2),
            "net": round(self.net, 2),
        }


def asset_pair_stats(trade_set: TradeSet) -> list[AssetPairStats]:
    """Per-instrument profit, loss and net, best net first."""
    stats: dict[str, AssetPairStats] = {}
    for trade in trade_set.trades:
        name = trade.instrument or UNKNOWN_INSTRUMENT
        s = stats.setdefault(name, AssetPairStats(instrument=name))
        s.trades += 1
        if trade.net_pnl > 0:
            s.wins += 1
            s.profit += trade.net_pnl
        else:
            s.loss += abs(trade.net_pnl)
    return sorted(stats.values(), key=lambda s: s.net, reverse=True)


def trade_durations(trade_set: TradeSet) -> list[dict[str, Any]]:
    """Holding time per trade carrying both entry and exit dates."""
    durations = []
    for trade in trade_set.trades:
        hours = trade.hold_duration_hours
        if hours is None or hours < 0:
            continue
        durations.append({
            "id": trade.id,
            "instrument": trade.instrument or UNKNOWN_INSTRUMENT,
            "hours": hours,
            "pnl": trade.net_pnl,
        })
    return durations


def duration_buckets(durations: Sequence[dict[str, Any]]) -> list[dict[str, Any]]:
    """Win rate per holding-time bucket; empty buckets are omitted."""
    buckets = []
    for label, low, high in DURATION_BUCKETS:
        members = [d for d in durations if low < d["hours"] * 60 <= high]
        if not members:
            continue
        wins = sum(1 for d in members if d["pnl"] > 0)
        buckets.append({
            "duration": label,
            "trades": len(members),
            "winRate": round(wins / len(members) * 100.0, 2),
        })
    return buckets


def risk_reward_points(trade_set: TradeSet) -> list[dict[str, float]]:
    """``{risk, reward, size}`` per trade with a positive risk and reward."""
    points = []
    for trade in trade_set.trades:
        if trade.entry_price is None:
            continue
        risk = abs(trade.entry_price - trade.stop_loss) if trade.stop_loss else 0.0
        reward = abs(trade.take_profit - trade.entry_price) if trade.take_profit else 0.0
        if risk > 0 and reward > 0:
            points.append({"risk": risk, "reward": reward, "size": trade.quantity or 1.0})
    return points


def group_by_day(owned: Iterable[OwnedTrade]) -> dict[date, list[OwnedTrade]]:
    """Dated trades grouped by UTC calendar day."""
    groups: dict[date, list[OwnedTrade]] = defaultdict(list)
    for o in owned:
        d = trade_date(o)
        if d is not None:
            groups[d.date()].append(o)
    return dict(groups)
