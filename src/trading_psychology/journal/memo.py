"""Caller-owned memoization of analytics results.

The engine itself keeps no state.  A caller that wants to avoid
recomputing can hold an :class:`AnalyticsMemo` and key results
explicitly by account, window and snapshot version; bumping the snapshot
version is the only invalidation needed.

Usage::

    memo = AnalyticsMemo(max_entries=64)
    key = MemoKey(account_id="acct-1", window="2024-03", snapshot_version=7)
    bundle = memo.get_or_compute(key, lambda: engine.analyze(entries))
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from typing import TYPE_CHECKING, Any, Callable, Hashable, NamedTuple, TypeVar

if TYPE_CHECKING:
    from trading_psychology.core.config import MemoConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MemoKey(NamedTuple):
    account_id: str
    window: str
    snapshot_version: Hashable


class AnalyticsMemo:
    """Bounded FIFO cache keyed by :class:`MemoKey`.

    Not synchronized: one instance belongs to one caller.

    Parameters
    ----------
    max_entries : int
        Oldest insertions are evicted beyond this size.  Default 128.
    """

    def __init__(self, *, max_entries: int = 128) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._store: OrderedDict[MemoKey, Any] = OrderedDict()
        self._hits = 0
        self._misses = 0

    @classmethod
    def from_config(cls, config: MemoConfig) -> AnalyticsMemo:
        """Build a memo sized by the ``[memo]`` settings section."""
        return cls(max_entries=config.max_entries)

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def get(self, key: MemoKey, default: Any = None) -> Any:
        return self._store.get(key, default)

    def put(self, key: MemoKey, value: Any) -> None:
        if key in self._store:
            self._store[key] = value
            return
        self._store[key] = value
        while len(self._store) > self._max_entries:
            evicted, _ = self._store.popitem(last=False)
            logger.debug("Evicted memoized analytics for %s", evicted)

    def get_or_compute(self, key: MemoKey, compute: Callable[[], T]) -> T:
        """Return the stored value for *key*, computing it on a miss."""
        if key in self._store:
            self._hits += 1
            return self._store[key]
        self._misses += 1
        value = compute()
        self.put(key, value)
        return value

    def invalidate(self, account_id: str | None = None) -> int:
        """Drop every entry, or only those of *account_id*.  Returns the count."""
        if account_id is None:
            removed = len(self._store)
            self._store.clear()
            return removed
        stale = [k for k in self._store if k.account_id == account_id]
        for key in stale:
            del self._store[key]
        return len(stale)

    def report(self) -> dict[str, Any]:
        return {
            "entries": len(self._store),
            "max_entries": self._max_entries,
            "hits": self._hits,
            "misses": self._misses,
        }
