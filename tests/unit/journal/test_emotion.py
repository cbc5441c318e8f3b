"""Tests for emotion trend, correlation and recovery."""

import pytest

from trading_psychology.journal.dedup import deduplicate_trades
from trading_psychology.journal.emotion import (
    day_emotions,
    emotion_code,
    emotion_pnl_correlation,
    emotion_recovery,
    emotion_trend,
    pearson,
    performance_by_emotion,
)

from .conftest import day, make_entry, make_trade


class TestPearson:

    def test_perfect_positive(self):
        assert pearson([1, 2, 3], [10, 20, 30]) == pytest.approx(1.0)

    def test_perfect_negative(self):
        assert pearson([1, 0, -1], [-5, 0, 5]) == pytest.approx(-1.0)

    def test_constant_series_is_zero(self):
        assert pearson([1, 1, 1], [3, 5, 9]) == 0.0
        assert pearson([1, 0, -1], [4, 4, 4]) == 0.0

    def test_too_few_points(self):
        assert pearson([1], [1]) == 0.0
        assert pearson([], []) == 0.0

    def test_mismatched_lengths(self):
        assert pearson([1, 2, 3], [1, 2]) == 0.0


class TestEmotionCode:

    @pytest.mark.parametrize(
        "emotion, code",
        [("positive", 1), ("Negative", -1), ("neutral", 0), ("anxious", 0), (None, 0)],
    )
    def test_codes(self, emotion, code):
        assert emotion_code(emotion) == code


class TestDayEmotions:

    def test_pre_session_mood_wins(self):
        entries = [
            make_entry("post", created_at=day(4, 18), emotion="negative", session_type="post"),
            make_entry("pre", created_at=day(4, 8), emotion="positive", session_type="pre"),
        ]
        assert day_emotions(entries) == {day(4).date(): "positive"}

    def test_falls_back_to_first_entry_of_the_day(self):
        entries = [
            make_entry("a", created_at=day(5, 12), emotion="negative"),
            make_entry("b", created_at=day(5, 18), emotion="positive"),
        ]
        assert day_emotions(entries) == {day(5).date(): "negative"}


class TestTrendAndCorrelation:

    def _journal(self):
        return [
            make_entry("e1", created_at=day(4, 8), emotion="positive", session_type="pre",
                       trades=(make_trade("t1", 500.0, entry_date=day(4)),)),
            make_entry("e2", created_at=day(5, 8), emotion="negative", session_type="pre",
                       trades=(make_trade("t2", -800.0, entry_date=day(5)),)),
            make_entry("e3", created_at=day(6, 8), emotion="neutral", session_type="pre",
                       trades=(make_trade("t3", 300.0, entry_date=day(6)),)),
        ]

    def test_trend_is_one_point_per_trading_day(self):
        entries = self._journal()
        trend = emotion_trend(entries, deduplicate_trades(entries))
        assert [(d.pnl, d.code) for d in trend] == [(500.0, 1), (-800.0, -1), (300.0, 0)]

    def test_correlation_is_bounded_and_positive(self):
        entries = self._journal()
        r = emotion_pnl_correlation(emotion_trend(entries, deduplicate_trades(entries)))
        assert 0.9 < r <= 1.0

    def test_days_without_mood_are_neutral(self):
        entries = [make_entry(emotion="", trades=(make_trade("t1", 10.0, entry_date=day(7)),))]
        trend = emotion_trend(entries, deduplicate_trades(entries))
        assert trend[0].emotion == "neutral"


class TestEmotionRecovery:

    def test_buckets(self):
        entries = [
            make_entry("l1", created_at=day(1, 18), outcome="loss", emotion="negative"),
            make_entry("r1", created_at=day(2, 12), emotion="positive"),
            make_entry("l2", created_at=day(10, 18), outcome="loss", emotion="negative"),
            make_entry("n", created_at=day(11, 18), emotion="neutral"),
            make_entry("r2", created_at=day(15, 18), outcome="win"),
        ]
        buckets = emotion_recovery(entries)
        assert buckets == {"< 1 day": 0, "1-2 days": 1, "2-3 days": 0, "> 3 days": 1}

    def test_unrecovered_losses_are_not_counted(self):
        entries = [make_entry(outcome="loss", emotion="negative")]
        assert sum(emotion_recovery(entries).values()) == 0


class TestPerformanceByEmotion:

    def test_core_moods_always_present_in_order(self):
        entries = [
            make_entry("a", created_at=day(4, 8), emotion="anxious", session_type="pre",
                       trades=(make_trade("t1", -20.0, entry_date=day(4)),)),
            make_entry("b", created_at=day(5, 8), emotion="positive", session_type="pre",
                       trades=(make_trade("t2", 50.0, entry_date=day(5)),)),
        ]
        perf = performance_by_emotion(entries, deduplicate_trades(entries))
        assert list(perf) == ["positive", "neutral", "negative", "anxious"]
        assert perf["positive"].win_rate == 100.0
        assert perf["anxious"].total_pnl == -20.0
        assert perf["neutral"].trades == 0
