"""Shared builders for journal analytics tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from trading_psychology.journal.dedup import TradeSet, deduplicate_trades
from trading_psychology.journal.record import JournalEntry, Trade

UTC = timezone.utc


def day(n: int, hour: int = 9) -> datetime:
    """``2024-03-{n}`` at *hour* UTC."""
    return datetime(2024, 3, n, hour, 0, tzinfo=UTC)


def make_trade(
    trade_id: str | None = "t1",
    pnl: float | None = 100.0,
    *,
    instrument: str | None = "EUR/USD",
    entry_date: datetime | None = None,
    exit_date: datetime | None = None,
    entry_price: float | None = None,
    exit_price: float | None = None,
    stop_loss: float | None = None,
    take_profit: float | None = None,
    highest_price: float | None = None,
    lowest_price: float | None = None,
    setup: str | None = None,
    direction: str | None = None,
    quantity: float | None = None,
) -> Trade:
    """Helper to create a Trade."""
    return Trade(
        id=trade_id,
        instrument=instrument,
        direction=direction,
        entry_price=entry_price,
        exit_price=exit_price,
        stop_loss=stop_loss,
        take_profit=take_profit,
        highest_price=highest_price,
        lowest_price=lowest_price,
        entry_date=entry_date,
        exit_date=exit_date,
        quantity=quantity,
        setup=setup,
        pnl=pnl,
    )


def make_excursion_trade(
    trade_id: str = "x1",
    *,
    long: bool = True,
    entry: float = 100.0,
    exit: float = 108.0,
    high: float = 110.0,
    low: float = 95.0,
    pnl: float = 8.0,
) -> Trade:
    """Trade with a full plan: stop 10 away, target 20 away."""
    return make_trade(
        trade_id,
        pnl,
        entry_date=day(4),
        entry_price=entry,
        exit_price=exit,
        stop_loss=entry - 10 if long else entry + 10,
        take_profit=entry + 20 if long else entry - 20,
        highest_price=high,
        lowest_price=low,
    )


def make_entry(
    entry_id: str | None = "e1",
    *,
    created_at: datetime | None = None,
    trades: tuple[Trade, ...] = (),
    emotion: str = "neutral",
    session_type: str = "post",
    outcome: str = "",
    mistakes: tuple[str, ...] = (),
    followed_rules: tuple[str, ...] = (),
    pre_trading_activities: tuple[str, ...] = (),
    market_conditions: str = "",
    emotion_detail: str = "",
    notes: str = "",
) -> JournalEntry:
    """Helper to create a JournalEntry."""
    return JournalEntry(
        id=entry_id,
        created_at=created_at or day(4, 18),
        session_type=session_type,
        emotion=emotion,
        emotion_detail=emotion_detail,
        outcome=outcome,
        followed_rules=followed_rules,
        pre_trading_activities=pre_trading_activities,
        market_conditions=market_conditions,
        mistakes=mistakes,
        notes=notes,
        trades=trades,
    )


def trade_set_of(*trades: Trade) -> TradeSet:
    """One entry per trade, each created on its trade's day."""
    entries = [
        make_entry(
            f"e{i}",
            created_at=t.entry_date or day(4, 18),
            trades=(t,),
        )
        for i, t in enumerate(trades)
    ]
    return deduplicate_trades(entries)


@pytest.fixture
def three_day_trades() -> list[Trade]:
    """+500, -800, +300 on three consecutive days."""
    return [
        make_trade("t1", 500.0, entry_date=day(4)),
        make_trade("t2", -800.0, entry_date=day(5)),
        make_trade("t3", 300.0, entry_date=day(6)),
    ]


def raw_snapshot() -> list[dict]:
    """Raw journal entries as a client would send them."""
    return [
        {
            "id": "e1",
            "createdAt": "2024-03-04T08:00:00Z",
            "sessionType": "pre",
            "emotion": "Positive",
            "trades": [],
        },
        {
            "id": "e2",
            "createdAt": "2024-03-04T18:00:00Z",
            "sessionType": "post",
            "emotion": "positive",
            "outcome": "win",
            "notes": "Followed my plan and stayed calm through the open.",
            "trades": [
                {"id": "t1", "instrument": "EUR/USD", "pnl": "500",
                 "entryDate": "2024-03-04T09:30:00Z", "setup": "Breakout"},
            ],
        },
        {
            "id": "e3",
            "createdAt": "2024-03-05T18:00:00Z",
            "sessionType": "post",
            "emotion": "negative",
            "outcome": "loss",
            "mistakes": ["Moved stop loss"],
            "notes": "I got greedy and wanted more. Held too long.",
            "trades": [
                {"id": "t2", "instrument": "EUR/USD", "profitLoss": "-800",
                 "entryDate": "2024-03-05T10:00:00Z", "setup": "Breakout"},
            ],
        },
        {
            "id": "e4",
            "createdAt": "2024-03-06T18:00:00Z",
            "sessionType": "post",
            "emotion": "neutral",
            "trades": [
                {"id": "t3", "instrument": "GBP/USD", "pnl": 300,
                 "entryDate": "2024-03-06T14:00:00Z", "setup": "Pullback"},
            ],
        },
        {
            "id": "weekly",
            "createdAt": "2024-03-08T18:00:00Z",
            "sessionType": "post",
            "emotion": "neutral",
            "trades": [
                {"id": "t1", "instrument": "EUR/USD", "pnl": "500",
                 "entryDate": "2024-03-04T09:30:00Z"},
                {"id": "t2", "instrument": "EUR/USD", "pnl": "-800",
                 "entryDate": "2024-03-05T10:00:00Z"},
            ],
        },
    ]
