"""Tests for the insight event log and emotion-return notices."""

from datetime import date

from trading_psychology.core.config import NotificationConfig
from trading_psychology.journal.notifications import (
    InsightEventLog,
    emotion_return_notices,
)

from .conftest import day, make_entry


class TestInsightEventLog:

    def test_record_and_query(self):
        log = InsightEventLog()
        log.record("positive_first", day(4), title="First!")
        assert log.was_sent("positive_first", date(2024, 3, 4))
        assert not log.was_sent("positive_first", date(2024, 3, 5))
        assert len(log) == 1

    def test_sent_within_window(self):
        log = InsightEventLog()
        log.record("neutral_emotion_return", date(2024, 3, 1))
        assert log.sent_within("neutral_emotion_return", date(2024, 3, 7), 7)
        assert not log.sent_within("neutral_emotion_return", date(2024, 3, 8), 7)

    def test_same_key_replaces(self):
        log = InsightEventLog()
        log.record("x", date(2024, 3, 1), message="one")
        log.record("x", date(2024, 3, 1), message="two")
        assert [e.message for e in log.events()] == ["two"]

    def test_expire_drops_old_events(self):
        log = InsightEventLog(ttl_days=30)
        log.record("old", date(2024, 1, 1))
        log.record("recent", date(2024, 3, 1))
        assert log.expire(date(2024, 3, 10)) == 1
        assert [e.category for e in log.events()] == ["recent"]

    def test_ttl_from_config(self):
        log = InsightEventLog.from_config(NotificationConfig(ttl_days=5))
        log.record("positive_first", date(2024, 3, 1))
        log.record("neutral_first", date(2024, 3, 6))
        assert log.expire(date(2024, 3, 7)) == 1
        assert [e.category for e in log.events()] == ["neutral_first"]


class TestEmotionReturnNotices:

    def test_first_time_notice(self):
        log = InsightEventLog()
        entries = [make_entry(created_at=day(4, 18), emotion="negative")]
        (notice,) = emotion_return_notices(entries, log, date(2024, 3, 4))
        assert notice.category == "negative_first"
        assert log.was_sent("negative_first", date(2024, 3, 4))

    def test_return_after_threshold(self):
        log = InsightEventLog()
        entries = [
            make_entry("a", created_at=day(1, 18), emotion="positive"),
            make_entry("b", created_at=day(5, 18), emotion="positive"),
        ]
        (notice,) = emotion_return_notices(entries, log, day(5, 20))
        assert notice.category == "positive_emotion_return"
        assert "4 days" in notice.title

    def test_below_threshold_is_silent(self):
        entries = [
            make_entry("a", created_at=day(3, 18), emotion="negative"),
            make_entry("b", created_at=day(5, 18), emotion="negative"),
        ]
        assert emotion_return_notices(entries, InsightEventLog(), date(2024, 3, 5)) == []

    def test_fires_once_per_day(self):
        log = InsightEventLog()
        entries = [make_entry(created_at=day(4, 18), emotion="neutral")]
        assert len(emotion_return_notices(entries, log, date(2024, 3, 4))) == 1
        assert emotion_return_notices(entries, log, date(2024, 3, 4)) == []

    def test_return_cooldown(self):
        log = InsightEventLog()
        log.record("positive_emotion_return", date(2024, 3, 10))
        entries = [
            make_entry("a", created_at=day(1, 18), emotion="positive"),
            make_entry("b", created_at=day(12, 18), emotion="positive"),
        ]
        assert emotion_return_notices(entries, log, date(2024, 3, 12)) == []

    def test_nothing_logged_today(self):
        entries = [make_entry(created_at=day(1, 18), emotion="positive")]
        assert emotion_return_notices(entries, InsightEventLog(), date(2024, 3, 9)) == []

    def test_thresholds_from_config(self):
        config = NotificationConfig(negative_return_days=2)
        entries = [
            make_entry("a", created_at=day(3, 18), emotion="negative"),
            make_entry("b", created_at=day(5, 18), emotion="negative"),
        ]
        (notice,) = emotion_return_notices(
            entries, InsightEventLog(), date(2024, 3, 5), thresholds=config.return_days
        )
        assert notice.category == "negative_emotion_return"
        assert "after 2 days" in notice.title
