"""Tests for mistake frequency and cost attribution."""

import pytest

from trading_psychology.core.enums import MistakeCategory
from trading_psychology.journal.dedup import deduplicate_trades
from trading_psychology.journal.mistakes import (
    categorize_mistake,
    mistake_categories,
    mistake_frequencies,
    top_mistake,
)

from .conftest import make_entry, make_trade


class TestCategorizeMistake:

    @pytest.mark.parametrize(
        "label, category",
        [
            ("Moved my stop loss", MistakeCategory.RISK_MANAGEMENT),
            ("Oversized position", MistakeCategory.RISK_MANAGEMENT),
            ("Exited too early", MistakeCategory.EXIT_MANAGEMENT),
            ("Entered late", MistakeCategory.ENTRY_TIMING),
            ("Chased the move", MistakeCategory.ENTRY_TIMING),
            ("Didn't follow my plan", MistakeCategory.DISCIPLINE),
            ("Overtrading", MistakeCategory.DISCIPLINE),
            ("FOMO", MistakeCategory.EMOTIONAL),
            ("Bad luck", MistakeCategory.OTHER),
        ],
    )
    def test_keyword_table(self, label, category):
        assert categorize_mistake(label) == category


class TestMistakeFrequencies:

    def test_loss_is_split_across_an_entrys_mistakes(self):
        entries = [
            make_entry("a", mistakes=("FOMO", "Moved my stop loss"),
                       trades=(make_trade("t1", -200.0), make_trade("t2", 50.0))),
            make_entry("b", mistakes=("FOMO",), trades=(make_trade("t3", -90.0),)),
        ]
        freq = mistake_frequencies(entries, deduplicate_trades(entries))
        assert list(freq) == ["FOMO", "Moved my stop loss"]
        assert freq["FOMO"].count == 2
        assert freq["FOMO"].loss == pytest.approx(190.0)
        assert freq["Moved my stop loss"].loss == pytest.approx(100.0)

    def test_duplicated_trade_is_charged_once(self):
        losing = make_trade("t1", -100.0)
        entries = [
            make_entry("daily", mistakes=("FOMO",), trades=(losing,)),
            make_entry("weekly", mistakes=("FOMO",), trades=(losing,)),
        ]
        freq = mistake_frequencies(entries, deduplicate_trades(entries))
        assert freq["FOMO"].count == 2
        assert freq["FOMO"].loss == pytest.approx(100.0)

    def test_category_rollup(self):
        entries = [
            make_entry("a", mistakes=("FOMO", "Felt fear"), trades=(make_trade("t1", -60.0),)),
            make_entry("b", mistakes=("Entered late",)),
        ]
        report = mistake_categories(mistake_frequencies(entries, deduplicate_trades(entries)))
        assert report["emotional"] == {"count": 2, "loss": 60.0}
        assert report["entry_timing"] == {"count": 1, "loss": 0.0}
        assert report["other"] == {"count": 0, "loss": 0.0}

    def test_top_mistake(self):
        entries = [
            make_entry("a", mistakes=("Entered late",)),
            make_entry("b", mistakes=("Entered late", "FOMO")),
        ]
        freq = mistake_frequencies(entries, deduplicate_trades(entries))
        assert top_mistake(freq).mistake == "Entered late"
        assert top_mistake({}) is None
