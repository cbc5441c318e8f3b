"""Template-based natural-language insights.

Every statement is chosen by fixed thresholds over already computed
metrics, so the same analytics always yield the same text.  A snapshot
with neither trades nor journal entries takes a separate fixed branch
instead of evaluating any formula.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from trading_psychology.core.enums import TimeWindow

from .emotion import EmotionDay
from .excursion import ExcursionSummary
from .metrics import AssetPairStats, PerformanceSummary, WindowPerformance
from .mistakes import MistakeStat, top_mistake
from .patterns import BehavioralPattern
from .scoring import MentalScore

logger = logging.getLogger(__name__)

NO_DATA_PRIMARY = "Not enough data yet to generate insights."
NO_DATA_SECONDARY = (
    "Log your journal entries and trades to unlock performance and "
    "psychology analytics."
)

EDGE_THRESHOLD = 50.0
MIN_MISTAKE_COUNT = 2
MIN_ASSET_TRADES = 3
CHALLENGING_WIN_RATE = 40.0
RECENT_TRADES = 5
RECENT_LOSSES = 3


@dataclass(frozen=True)
class InsightDetail:
    kind: str
    title: str
    text: str

    def to_dict(self) -> dict[str, str]:
        return {"kind": self.kind, "title": self.title, "text": self.text}


@dataclass
class Insights:
    primary: str
    secondary: str
    details: list[InsightDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "details": [d.to_dict() for d in self.details],
        }


# ---------------------------------------------------------------------- #
# Headline statements                                                      #
# ---------------------------------------------------------------------- #


def _primary(summary: PerformanceSummary, entry_count: int) -> str:
    if summary.total_trades == 0:
        return (
            f"You have {entry_count} journal entries but no recorded trades yet. "
            "Log your trades to measure your edge."
        )
    if summary.win_rate >= EDGE_THRESHOLD:
        return (
            f"You win {summary.win_rate:.1f}% of your {summary.total_trades} trades, "
            "a real edge to build on. Protect it by sizing consistently."
        )
    return (
        f"You win {summary.win_rate:.1f}% of your {summary.total_trades} trades. "
        "Improving trade selection and risk:reward is your biggest opportunity."
    )


def _secondary(mental: MentalScore) -> str:
    if not mental.sufficient_data:
        return "Keep journaling each session to build your mental game profile."
    strength, weakness = mental.strength, mental.weakness
    return (
        f"Mental score {mental.score} ({mental.label}). Your strongest area is "
        f"{strength.display_name} ({strength.score:.0f}/100); focus on improving "
        f"{weakness.display_name} ({weakness.score:.0f}/100)."
    )


# ---------------------------------------------------------------------- #
# Details                                                                  #
# ---------------------------------------------------------------------- #


def focus_area(
    mistakes: Mapping[str, MistakeStat],
    assets: Sequence[AssetPairStats],
    recent_pnls: Sequence[float],
) -> InsightDetail:
    """The single most relevant area to work on."""
    top = top_mistake(dict(mistakes))
    if top is not None and top.count >= MIN_MISTAKE_COUNT:
        return InsightDetail("focus", "Common Mistake", top.mistake)

    eligible = [a for a in assets if a.trades >= MIN_ASSET_TRADES]
    if eligible:
        worst = min(eligible, key=lambda a: a.win_rate)
        if worst.win_rate < CHALLENGING_WIN_RATE:
            return InsightDetail("focus", "Challenging Asset", worst.instrument)

    recent = list(recent_pnls)[-RECENT_TRADES:]
    if len(recent) >= RECENT_LOSSES and sum(1 for p in recent if p < 0) >= RECENT_LOSSES:
        return InsightDetail("focus", "Recent Setback", "Multiple losses in recent trades")

    return InsightDetail("focus", "Areas to Improve", "Keep tracking trades to reveal patterns")


def excursion_insights(summary: ExcursionSummary) -> list[InsightDetail]:
    if summary.total == 0:
        return []
    details = []
    if summary.hit_tp_pct > 0:
        if summary.avg_mfe_winners < 100:
            text = (
                f"Your winning trades reach {summary.avg_mfe_winners:.1f}% of your "
                "take profit on average. Your target may be too ambitious."
            )
        else:
            text = (
                f"Your winning trades reach {summary.avg_mfe_winners:.1f}% of your "
                "take profit on average, so your target is well placed."
            )
        details.append(InsightDetail("excursion", "Take Profit Reach", text))
        details.append(InsightDetail(
            "excursion",
            "Stop Usage on Winners",
            f"Winners move {summary.avg_mae_winners:.1f}% toward your stop before "
            "turning. A tighter stop may improve your risk:reward.",
        ))
    if summary.hit_sl_pct > 0:
        details.append(InsightDetail(
            "excursion",
            "Updraw on Losers",
            f"Losing trades reach {summary.avg_mfe_losers:.1f}% of your target "
            f"before stopping out. Consider moving to breakeven around "
            f"{summary.avg_mfe_losers * 0.8:.0f}% of target.",
        ))
    return details


def _correlation_strength(r: float) -> str:
    strength = abs(r)
    if strength >= 0.7:
        return "strong"
    if strength >= 0.5:
        return "moderate"
    if strength >= 0.3:
        return "weak"
    return "very weak"


def emotion_insights(trend: Sequence[EmotionDay], correlation: float) -> list[InsightDetail]:
    if len(trend) < 2:
        return []
    first, last = trend[0].code, trend[-1].code
    if last > first:
        direction = "improved"
    elif last < first:
        direction = "declined"
    else:
        direction = "held steady"
    sign = "positive" if correlation >= 0 else "negative"
    return [
        InsightDetail(
            "emotion",
            "Emotional Trend",
            f"Your emotional state has {direction} over {len(trend)} trading days.",
        ),
        InsightDetail(
            "emotion",
            "Emotion and P&L",
            f"Your journal shows a {_correlation_strength(correlation)} {sign} "
            f"correlation (R={correlation:.2f}) between emotional state and daily P&L.",
        ),
    ]


def window_insight(windows: Mapping[TimeWindow, WindowPerformance]) -> list[InsightDetail]:
    month = windows.get(TimeWindow.MONTH)
    if month is None or month.total_trades == 0:
        return []
    longer = [w for k, w in windows.items() if k != TimeWindow.MONTH]
    if longer and all(month.strike_rate > w.strike_rate for w in longer):
        text = (
            "Your recent performance shows improvement in strike rate compared "
            "to longer timeframes."
        )
    else:
        text = (
            "Consider reviewing your trading strategy as recent performance "
            "indicates room for improvement."
        )
    return [InsightDetail("windows", "Recent Strike Rate", text)]


def pattern_insights(profile: Sequence[BehavioralPattern]) -> list[InsightDetail]:
    return [
        InsightDetail(
            "pattern",
            p.display_name,
            f"Detected in {p.entry_count} journal entries. {p.tip}.",
        )
        for p in profile
        if p.detected
    ]


def generate_insights(
    *,
    summary: PerformanceSummary,
    mental: MentalScore,
    entry_count: int,
    mistakes: Mapping[str, MistakeStat] | None = None,
    assets: Sequence[AssetPairStats] = (),
    recent_pnls: Sequence[float] = (),
    excursions: ExcursionSummary | None = None,
    trend: Sequence[EmotionDay] = (),
    correlation: float = 0.0,
    windows: Mapping[TimeWindow, WindowPerformance] | None = None,
    profile: Sequence[BehavioralPattern] = (),
) -> Insights:
    """Compose the primary, secondary and detail statements.

    *recent_pnls* is the chronological P&L series; its tail is read as the
    most recent trades.
    """
    if summary.total_trades == 0 and entry_count == 0:
        return Insights(primary=NO_DATA_PRIMARY, secondary=NO_DATA_SECONDARY)

    details = [focus_area(mistakes or {}, assets, recent_pnls)]
    if excursions is not None:
        details.extend(excursion_insights(excursions))
    details.extend(emotion_insights(trend, correlation))
    details.extend(window_insight(windows or {}))
    details.extend(pattern_insights(profile))

    return Insights(
        primary=_primary(summary, entry_count),
        secondary=_secondary(mental),
        details=details,
    )
