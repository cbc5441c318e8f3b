"""Tests for the monthly recap."""

from datetime import datetime, timezone

import pytest

from trading_psychology.journal.dedup import deduplicate_trades
from trading_psychology.journal.recap import (
    NOT_AVAILABLE,
    format_holding_time,
    monthly_recap,
    parse_month,
    time_slot,
)

from .conftest import day, make_entry, make_trade


def _march_journal():
    # Monday 4 March: pre-session positive, two wins in the morning
    # Tuesday 5 March: pre-session negative, one loss in the afternoon
    # Wednesday 6 March: no pre-session entry, one win
    return [
        make_entry("pre4", created_at=day(4, 7), emotion="positive", session_type="pre"),
        make_entry(
            "post4", created_at=day(4, 18), emotion="positive",
            trades=(
                make_trade("t1", 100.0, entry_date=day(4, 9), exit_date=day(4, 10), setup="Breakout"),
                make_trade("t2", 50.0, entry_date=day(4, 10), exit_date=day(4, 11), setup="Breakout"),
            ),
        ),
        make_entry("pre5", created_at=day(5, 7), emotion="negative", session_type="pre"),
        make_entry(
            "post5", created_at=day(5, 18), emotion="negative",
            trades=(make_trade("t3", -80.0, entry_date=day(5, 13), exit_date=day(5, 15),
                               setup="Reversal"),),
        ),
        make_entry(
            "post6", created_at=day(6, 18), emotion="neutral",
            trades=(make_trade("t4", 20.0, entry_date=day(6, 9), setup="Reversal"),),
        ),
    ]


class TestHelpers:

    def test_parse_month(self):
        assert parse_month("2024-03") == (2024, 3)

    @pytest.mark.parametrize("bad", ["2024-13", "March", "2024/03", "", None])
    def test_parse_month_rejects_garbage(self, bad):
        with pytest.raises(ValueError):
            parse_month(bad)

    @pytest.mark.parametrize(
        "hour, slot",
        [
            (5, "Early Morning (4-8 AM)"),
            (9, "Morning (8-12 PM)"),
            (13, "Afternoon (12-4 PM)"),
            (17, "Evening (4-8 PM)"),
            (22, "Night (8 PM-4 AM)"),
            (2, "Night (8 PM-4 AM)"),
        ],
    )
    def test_time_slot(self, hour, slot):
        assert time_slot(hour) == slot

    def test_format_holding_time(self):
        assert format_holding_time(45) == "45 minutes"
        assert format_holding_time(90) == "2 hours"
        assert format_holding_time(2 * 1440) == "2 days"


class TestMonthlyRecap:

    def test_march(self):
        entries = _march_journal()
        recap = monthly_recap(entries, deduplicate_trades(entries), "2024-03")
        assert recap.total_trades == 4
        assert recap.win_rate == 75.0
        assert recap.winning_streak == 2
        assert recap.losing_streak == 1
        assert recap.most_active_time == "Morning (8-12 PM)"
        assert recap.favorite_setup == "Breakout"
        assert recap.avg_holding_time == "80 minutes"
        assert recap.overtrading_days == 0

    def test_mood_performance_uses_pre_session_mood(self):
        entries = _march_journal()
        recap = monthly_recap(entries, deduplicate_trades(entries), "2024-03")
        assert recap.mood_performance == {"positive": 100.0, "neutral": 0.0, "negative": 0.0}
        assert recap.best_mood == "positive"
        assert recap.best_mood_win_rate == 100.0

    def test_emotional_heatmap(self):
        entries = _march_journal()
        recap = monthly_recap(entries, deduplicate_trades(entries), "2024-03")
        assert recap.emotional_by_day["Monday"]["positive"] == 2
        assert recap.emotional_by_day["Tuesday"]["negative"] == 2
        assert recap.most_emotional_day == "Tuesday"

    def test_overtrading_day(self):
        trades = [make_trade(f"a{i}", 10.0, entry_date=day(4, 9)) for i in range(6)]
        trades += [make_trade("b", 10.0, entry_date=day(5, 9)), make_trade("c", 10.0, entry_date=day(6, 9))]
        entries = [make_entry(trades=tuple(trades))]
        recap = monthly_recap(entries, deduplicate_trades(entries), "2024-03")
        assert recap.overtrading_days == 1

    def test_empty_month_has_defaults(self):
        entries = _march_journal()
        recap = monthly_recap(entries, deduplicate_trades(entries), "2024-04")
        assert recap.total_trades == 0
        assert recap.most_active_time == NOT_AVAILABLE
        assert recap.best_mood == NOT_AVAILABLE
        assert recap.to_dict()["month"] == "2024-04"

    def test_other_months_are_excluded(self):
        april = make_trade("apr", 999.0, entry_date=datetime(2024, 4, 2, tzinfo=timezone.utc))
        entries = _march_journal() + [
            make_entry("apr", created_at=datetime(2024, 4, 2, 18, tzinfo=timezone.utc),
                       trades=(april,)),
        ]
        recap = monthly_recap(entries, deduplicate_trades(entries), "2024-03")
        assert recap.total_trades == 4
