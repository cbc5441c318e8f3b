"""Tests for MFE/MAE excursion analysis."""

import pytest

from trading_psychology.journal.excursion import (
    analyze_excursions,
    captured_move,
    excursion_for,
    excursion_summary,
    mae_relative_to_stop,
    mfe_relative_to_target,
    r_multiple,
)
from trading_psychology.journal.normalizer import normalize_trade

from .conftest import make_excursion_trade, make_trade, trade_set_of


class TestFormulas:

    def test_mae_partial_move_toward_stop_long(self):
        assert mae_relative_to_stop(100, 90, 110, 95, True) == pytest.approx(-50.0)

    def test_mae_partial_move_toward_stop_short(self):
        assert mae_relative_to_stop(100, 110, 105, 90, False) == pytest.approx(-50.0)

    @pytest.mark.parametrize(
        "entry, stop, high, low, is_long",
        [
            (100, 90, 110, 90, True),    # touched
            (100, 90, 110, 80, True),    # breached
            (100, 110, 110, 90, False),  # touched
            (100, 110, 125, 90, False),  # breached
        ],
    )
    def test_mae_is_exactly_minus_100_at_or_beyond_stop(self, entry, stop, high, low, is_long):
        assert mae_relative_to_stop(entry, stop, high, low, is_long) == -100.0

    def test_mfe_beyond_target_is_not_clamped(self):
        assert mfe_relative_to_target(100, 120, 130, 95, True) == pytest.approx(150.0)

    def test_mfe_short(self):
        assert mfe_relative_to_target(100, 80, 105, 90, False) == pytest.approx(50.0)

    def test_captured_move(self):
        assert captured_move(100, 105, 110, 95, True) == pytest.approx(50.0)
        assert captured_move(100, 95, 105, 90, False) == pytest.approx(50.0)

    def test_captured_move_is_clamped(self):
        assert captured_move(100, 60, 110, 60, True) == -100.0

    def test_captured_move_without_any_excursion_is_zero(self):
        assert captured_move(100, 100, 100, 100, True) == 0.0

    def test_r_multiple(self):
        assert r_multiple(100, 120, 90) == 2.0
        assert r_multiple(100, 120, 100) == 0.0


class TestExcursionFor:

    def test_long_trade(self):
        record = excursion_for(make_excursion_trade())
        assert record.is_long
        assert record.mfe_pct == pytest.approx(50.0)
        assert record.mae_pct == pytest.approx(-50.0)
        assert record.r_multiple == 2.0
        assert not record.hit_tp
        assert not record.hit_sl

    def test_short_trade_hitting_target(self):
        record = excursion_for(
            make_excursion_trade(long=False, exit=80.0, high=103.0, low=79.0, pnl=20.0)
        )
        assert not record.is_long
        assert record.mfe_pct == pytest.approx(105.0)
        assert record.hit_tp

    @pytest.mark.parametrize(
        "overrides",
        [
            {"trade_id": None},
            {"highest_price": None},
            {"highest_price": 90.0, "lowest_price": 95.0},
            {"stop_loss": 100.0},
            {"take_profit": 100.0},
        ],
    )
    def test_excluded_trades(self, overrides):
        fields = dict(
            trade_id="x", entry_price=100.0, exit_price=105.0, stop_loss=90.0,
            take_profit=120.0, highest_price=110.0, lowest_price=95.0,
        )
        fields.update(overrides)
        trade_id = fields.pop("trade_id")
        assert excursion_for(make_trade(trade_id, 5.0, **fields)) is None

    def test_unreadable_price_leg_is_excluded(self):
        trade = normalize_trade({
            "id": "x", "entryPrice": "abc", "exitPrice": 105, "stopLoss": 90,
            "takeProfit": 120, "highestPrice": 110, "lowestPrice": 95, "pnl": 5,
        })
        assert trade.entry_price == 0.0
        assert excursion_for(trade) is None
        assert analyze_excursions(trade_set_of(trade)) == []

    def test_to_dict_keys(self):
        keys = excursion_for(make_excursion_trade()).to_dict().keys()
        assert {"mfeRelativeToTp", "maeRelativeToSl", "capturedMove", "rMultiple"} <= set(keys)


class TestExcursionSummary:

    def test_hit_rates_and_averages(self):
        ts = trade_set_of(
            make_excursion_trade("w", exit=120.0, high=122.0, low=96.0, pnl=20.0),
            make_excursion_trade("l", exit=90.0, high=104.0, low=88.0, pnl=-10.0),
            make_trade("no-plan", 5.0),
        )
        records = analyze_excursions(ts)
        assert [r.id for r in records] == ["w", "l"]

        summary = excursion_summary(records)
        assert summary.total == 2
        assert summary.hit_tp_pct == 50.0
        assert summary.hit_sl_pct == 50.0
        assert summary.avg_mfe_winners == pytest.approx(110.0)
        assert summary.avg_mae_winners == pytest.approx(40.0)
        assert summary.avg_mfe_losers == pytest.approx(20.0)
        assert summary.avg_mae_losers == 100.0

    def test_empty(self):
        assert excursion_summary([]).total == 0
        assert excursion_summary([]).to_dict()["avgRMultiple"] == 0.0
