"""Tests for template-based insight generation."""

from trading_psychology.core.enums import MistakeCategory, PatternCategory, TimeWindow
from trading_psychology.journal.emotion import EmotionDay
from trading_psychology.journal.excursion import ExcursionSummary
from trading_psychology.journal.insights import (
    NO_DATA_PRIMARY,
    NO_DATA_SECONDARY,
    emotion_insights,
    excursion_insights,
    focus_area,
    generate_insights,
    pattern_insights,
    window_insight,
)
from trading_psychology.journal.metrics import (
    AssetPairStats,
    PerformanceSummary,
    WindowPerformance,
)
from trading_psychology.journal.mistakes import MistakeStat
from trading_psychology.journal.patterns import BehavioralPattern
from trading_psychology.journal.scoring import MentalScore, mental_score

from .conftest import day, trade_set_of


class TestGenerateInsights:

    def test_empty_snapshot_takes_the_fixed_branch(self):
        insights = generate_insights(
            summary=PerformanceSummary(), mental=MentalScore(), entry_count=0
        )
        assert insights.primary == NO_DATA_PRIMARY
        assert insights.secondary == NO_DATA_SECONDARY
        assert insights.details == []

    def test_entries_without_trades(self):
        insights = generate_insights(
            summary=PerformanceSummary(), mental=MentalScore(), entry_count=4
        )
        assert "4 journal entries but no recorded trades" in insights.primary
        assert insights.details[0].title == "Areas to Improve"

    def test_edge_and_mental_score(self, three_day_trades):
        mental = mental_score(trade_set_of(*three_day_trades), 10_000)
        insights = generate_insights(
            summary=PerformanceSummary(total_trades=3, win_rate=66.67),
            mental=mental,
            entry_count=3,
        )
        assert insights.primary.startswith("You win 66.7% of your 3 trades, a real edge")
        assert "Mental score 41 (Needs Improvement)" in insights.secondary
        assert "Win % (67/100)" in insights.secondary
        assert "Recovery (0/100)" in insights.secondary

    def test_low_win_rate(self):
        insights = generate_insights(
            summary=PerformanceSummary(total_trades=10, win_rate=30.0),
            mental=MentalScore(),
            entry_count=10,
        )
        assert "biggest opportunity" in insights.primary
        assert "Keep journaling" in insights.secondary

    def test_same_inputs_same_text(self, three_day_trades):
        kwargs = dict(
            summary=PerformanceSummary(total_trades=3, win_rate=66.67),
            mental=mental_score(trade_set_of(*three_day_trades), 10_000),
            entry_count=3,
        )
        assert generate_insights(**kwargs).to_dict() == generate_insights(**kwargs).to_dict()


class TestFocusArea:

    def test_repeated_mistake_first(self):
        mistakes = {"FOMO": MistakeStat("FOMO", MistakeCategory.EMOTIONAL, count=3)}
        assert focus_area(mistakes, [], []).title == "Common Mistake"

    def test_single_mistake_is_not_enough(self):
        mistakes = {"FOMO": MistakeStat("FOMO", MistakeCategory.EMOTIONAL, count=1)}
        assert focus_area(mistakes, [], []).title == "Areas to Improve"

    def test_challenging_asset(self):
        assets = [
            AssetPairStats("EUR/USD", trades=5, wins=4),
            AssetPairStats("BTC/USDT", trades=4, wins=1),
            AssetPairStats("GOLD", trades=2, wins=0),
        ]
        detail = focus_area({}, assets, [])
        assert (detail.title, detail.text) == ("Challenging Asset", "BTC/USDT")

    def test_recent_setback(self):
        detail = focus_area({}, [], [100, 50, -10, -20, 5, -30])
        assert detail.title == "Recent Setback"


class TestDetailInsights:

    def test_excursion_text(self):
        summary = ExcursionSummary(
            total=4, hit_tp_pct=50.0, hit_sl_pct=25.0,
            avg_mfe_winners=85.0, avg_mae_winners=30.0, avg_mfe_losers=40.0,
        )
        texts = [d.text for d in excursion_insights(summary)]
        assert "target may be too ambitious" in texts[0]
        assert "30.0% toward your stop" in texts[1]
        assert "around 32% of target" in texts[2]

    def test_no_excursions(self):
        assert excursion_insights(ExcursionSummary()) == []

    def test_emotion_direction_and_strength(self):
        trend = [
            EmotionDay(day(4).date(), -100.0, "negative"),
            EmotionDay(day(5).date(), 200.0, "positive"),
        ]
        trend_text, corr_text = [d.text for d in emotion_insights(trend, 0.55)]
        assert "improved over 2 trading days" in trend_text
        assert "moderate positive correlation (R=0.55)" in corr_text

    def test_window_insight(self):
        windows = {
            TimeWindow.MONTH: WindowPerformance(TimeWindow.MONTH, total_trades=4, strike_rate=75.0),
            TimeWindow.QUARTER: WindowPerformance(TimeWindow.QUARTER, total_trades=9, strike_rate=55.0),
            TimeWindow.YEAR: WindowPerformance(TimeWindow.YEAR, total_trades=20, strike_rate=50.0),
        }
        (detail,) = window_insight(windows)
        assert "shows improvement in strike rate" in detail.text

        windows[TimeWindow.YEAR] = WindowPerformance(TimeWindow.YEAR, total_trades=20, strike_rate=80.0)
        (detail,) = window_insight(windows)
        assert "room for improvement" in detail.text

    def test_pattern_insights(self):
        profile = [
            BehavioralPattern(PatternCategory.GREED, "Greed", "Stick to your plan", entry_count=3)
        ]
        (detail,) = pattern_insights(profile)
        assert detail.title == "Greed"
        assert detail.text == "Detected in 3 journal entries. Stick to your plan."
