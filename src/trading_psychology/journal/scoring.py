"""Composite mental score.

Six sub-metrics are normalized to 0-100 and combined with fixed weights:

    Sub-metric           Weight   Normalization
    ─────────────────────────────────────────────────────────
    Win %                0.15     win rate as is
    Profit Factor        0.20     capped at 3.0 => 100
    Win/Loss Ratio       0.20     capped at 2.0 => 100
    Recovery Factor      0.15     net profit / max drawdown, capped at 3.0;
                                  the cap itself when profitable with no drawdown
    Max Drawdown         0.10     inverted; 20% of capital => 0
    Consistency          0.20     % of profitable trading days

The composite is the weighted sum rounded half-up and clamped to
``[0, 100]``.  Caps and weights come from :class:`ScoringConfig`.

Usage::

    result = mental_score(trade_set, initial_capital=10_000)
    print(result.score, result.label)    # 72 "Good Mental Game"
    print(result.strength.display_name)  # "Consistency"
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from trading_psychology.core.config import ScoringConfig

from .dedup import TradeSet
from .metrics import (
    chronological,
    max_drawdown,
    profit_factor,
    profitable_days_pct,
    win_loss_ratio,
    win_rate,
)

logger = logging.getLogger(__name__)

# Minimum score for each label
_LABEL_THRESHOLDS: list[tuple[int, str]] = [
    (90, "Elite Mental Game"),
    (80, "Strong Mental Game"),
    (70, "Good Mental Game"),
    (60, "Developing Mental Game"),
    (50, "Average Mental Game"),
    (40, "Needs Improvement"),
]
_LOWEST_LABEL = "Early Development Stage"

_NARRATIVES: list[tuple[int, str]] = [
    (
        75,
        "Your strong mental game is a significant trading edge. Continue "
        "leveraging your discipline and emotional control for consistent results.",
    ),
    (
        60,
        "You're developing a resilient trading mindset. Focus on improving "
        "consistency and drawdown management to strengthen your mental game.",
    ),
]
_LOWEST_NARRATIVE = (
    "Building your mental game is your biggest opportunity for improvement. "
    "Focus on maintaining discipline and developing a structured approach to "
    "handle emotions."
)

_DISPLAY_NAMES = {
    "win_rate": "Win %",
    "profit_factor": "Profit Factor",
    "win_loss_ratio": "Win/Loss",
    "recovery_factor": "Recovery",
    "max_drawdown": "Max DD",
    "consistency": "Consistency",
}


def score_to_label(score: float) -> str:
    """Convert a 0-100 score to its descriptive tier."""
    for threshold, label in _LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return _LOWEST_LABEL


def score_narrative(score: float) -> str:
    for threshold, text in _NARRATIVES:
        if score >= threshold:
            return text
    return _LOWEST_NARRATIVE


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def _capped(value: float, cap: float) -> float:
    """Scale *value* so that *cap* maps to 100."""
    if cap <= 0:
        return 0.0
    return _clamp(min(value, cap) / cap * 100.0)


@dataclass(frozen=True)
class SubMetric:
    """One normalized component of the mental score."""

    name: str
    display_name: str
    value: float  # raw metric
    score: float  # 0-100
    weight: float

    @property
    def contribution(self) -> float:
        return self.score * self.weight

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "displayName": self.display_name,
            "value": round(self.value, 4),
            "score": round(self.score, 1),
            "weight": self.weight,
        }


@dataclass
class MentalScore:
    """Composite score with its sub-metrics and narrative."""

    score: int = 0
    label: str = _LOWEST_LABEL
    narrative: str = ""
    sufficient_data: bool = False
    sub_metrics: list[SubMetric] = field(default_factory=list)

    @property
    def strength(self) -> SubMetric | None:
        """Highest-scoring sub-metric (first wins a tie)."""
        if not self.sub_metrics:
            return None
        return max(self.sub_metrics, key=lambda m: m.score)

    @property
    def weakness(self) -> SubMetric | None:
        """Lowest-scoring sub-metric (first wins a tie)."""
        if not self.sub_metrics:
            return None
        return min(self.sub_metrics, key=lambda m: m.score)

    def to_dict(self) -> dict[str, Any]:
        strength, weakness = self.strength, self.weakness
        return {
            "score": self.score,
            "label": self.label,
            "narrative": self.narrative,
            "sufficientData": self.sufficient_data,
            "subMetrics": [m.to_dict() for m in self.sub_metrics],
            "strength": strength.name if strength else None,
            "weakness": weakness.name if weakness else None,
        }


def mental_score(
    trade_set: TradeSet,
    initial_capital: float,
    config: ScoringConfig | None = None,
) -> MentalScore:
    """Compute the composite mental score for a deduplicated trade set.

    Without trades the score is 0 and ``sufficient_data`` is False.
    """
    config = config or ScoringConfig()
    trades = trade_set.trades
    if not trades:
        return MentalScore(narrative=_LOWEST_NARRATIVE)

    ordered = [o.trade.net_pnl for o in chronological(trade_set)]
    net_profit = sum(t.net_pnl for t in trades)
    drawdown = max_drawdown(ordered)
    if drawdown > 0:
        recovery = net_profit / drawdown
    else:
        # Profit without any drawdown reads as full recovery
        recovery = config.recovery_cap if net_profit > 0 else 0.0
    drawdown_pct = drawdown / initial_capital * 100.0 if initial_capital > 0 else 0.0

    wr = win_rate(trades)
    pf = profit_factor(trades)
    wl = win_loss_ratio(trades)
    consistency = profitable_days_pct(trade_set)

    raw = {
        "win_rate": (wr, _clamp(wr)),
        "profit_factor": (pf, _capped(pf, config.profit_factor_cap)),
        "win_loss_ratio": (wl, _capped(wl, config.win_loss_cap)),
        "recovery_factor": (recovery, _capped(recovery, config.recovery_cap)),
        "max_drawdown": (
            drawdown,
            _clamp(100.0 - drawdown_pct / config.drawdown_reference_pct * 100.0),
        ),
        "consistency": (consistency, _clamp(consistency)),
    }
    weights = config.weights
    subs = [
        SubMetric(
            name=name,
            display_name=_DISPLAY_NAMES[name],
            value=value,
            score=score,
            weight=weights[name],
        )
        for name, (value, score) in raw.items()
    ]

    composite = sum(m.contribution for m in subs)
    score = int(_clamp(round_half_up(composite)))
    logger.debug("Mental score %d from composite %.4f", score, composite)
    return MentalScore(
        score=score,
        label=score_to_label(score),
        narrative=score_narrative(score),
        sufficient_data=True,
        sub_metrics=subs,
    )
