"""Tests for caller-owned analytics memoization."""

import pytest

from trading_psychology.core.config import MemoConfig
from trading_psychology.journal.memo import AnalyticsMemo, MemoKey


def key(account="acct-1", window="2024-03", version=1) -> MemoKey:
    return MemoKey(account_id=account, window=window, snapshot_version=version)


class TestAnalyticsMemo:

    def test_get_or_compute_runs_once_per_key(self):
        memo = AnalyticsMemo()
        calls = []

        def compute():
            calls.append(1)
            return {"score": 41}

        assert memo.get_or_compute(key(), compute) == {"score": 41}
        assert memo.get_or_compute(key(), compute) == {"score": 41}
        assert len(calls) == 1
        assert memo.report()["hits"] == 1
        assert memo.report()["misses"] == 1

    def test_new_snapshot_version_is_a_new_key(self):
        memo = AnalyticsMemo()
        memo.put(key(version=1), "old")
        assert memo.get(key(version=2)) is None
        assert memo.get_or_compute(key(version=2), lambda: "new") == "new"

    def test_oldest_insertion_is_evicted(self):
        memo = AnalyticsMemo(max_entries=2)
        memo.put(key(version=1), 1)
        memo.put(key(version=2), 2)
        memo.put(key(version=3), 3)
        assert key(version=1) not in memo
        assert len(memo) == 2

    def test_replacing_a_value_does_not_evict(self):
        memo = AnalyticsMemo(max_entries=2)
        memo.put(key(version=1), 1)
        memo.put(key(version=2), 2)
        memo.put(key(version=1), 10)
        assert memo.get(key(version=1)) == 10
        assert len(memo) == 2

    def test_invalidate_by_account(self):
        memo = AnalyticsMemo()
        memo.put(key("a"), 1)
        memo.put(key("a", window="2024-04"), 2)
        memo.put(key("b"), 3)
        assert memo.invalidate("a") == 2
        assert len(memo) == 1
        assert memo.invalidate() == 1
        assert len(memo) == 0

    def test_max_entries_must_be_positive(self):
        with pytest.raises(ValueError):
            AnalyticsMemo(max_entries=0)

    def test_size_from_config(self):
        memo = AnalyticsMemo.from_config(MemoConfig(max_entries=1))
        memo.put(key(version=1), "old")
        memo.put(key(version=2), "new")
        assert key(version=1) not in memo
        assert memo.report()["max_entries"] == 1
