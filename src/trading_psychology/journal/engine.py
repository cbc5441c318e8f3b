"""Analytics engine: one pure call from raw journal records to a bundle.

Pipeline::

    raw entries -> normalize -> deduplicate -> metrics / excursions
                -> emotion & scoring / pattern classifier -> insights
                -> session habits / core traits

:meth:`AnalyticsEngine.analyze` never mutates its input and never reads
the clock, the filesystem or the network; the same snapshot and
arguments always produce an equal :class:`AggregatedAnalytics`.

Usage::

    engine = AnalyticsEngine(load_settings("configs/analytics.toml"))
    bundle = engine.analyze(raw_entries, initial_capital=25_000)
    payload = bundle.to_dict()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Mapping

from trading_psychology.core.config import Settings, validate_initial_capital
from trading_psychology.core.enums import CoreTrait, PatternCategory, TimeWindow
from trading_psychology.core.errors import InvalidCapitalError

from .dedup import TradeSet, deduplicate_trades, trade_date
from .emotion import (
    EmotionDay,
    EmotionPerformance,
    emotion_pnl_correlation,
    emotion_recovery,
    emotion_trend,
    performance_by_emotion,
)
from .excursion import ExcursionRecord, ExcursionSummary, analyze_excursions, excursion_summary
from .habits import (
    PreTradingImpact,
    RuleAdherenceGroup,
    VolatilityPoint,
    pre_trading_impact,
    rule_adherence,
    volatility_performance,
)
from .insights import Insights, generate_insights
from .metrics import (
    AssetPairStats,
    EquityPoint,
    PerformanceSummary,
    SetupStats,
    WindowPerformance,
    asset_pair_stats,
    chronological,
    duration_buckets,
    equity_curve,
    performance_summary,
    risk_reward_points,
    setup_stats,
    time_window_performance,
    trade_durations,
)
from .mistakes import MistakeStat, mistake_categories, mistake_frequencies
from .normalizer import NormalizationReport, coerce_datetime, normalize_entries
from .patterns import (
    BehavioralPattern,
    PatternMatch,
    behavioral_profile,
    classify_reflection,
    detected_matches,
)
from .recap import MonthlyRecap, monthly_recap
from .record import JournalEntry
from .scoring import MentalScore, mental_score
from .traits import core_trait_counts

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EntryPatterns:
    """Detected patterns of one journal entry."""

    entry_id: str | None
    created_at: datetime | None
    matches: tuple[PatternMatch, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "entryId": self.entry_id,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "matches": [m.to_dict() for m in self.matches],
        }


@dataclass
class AggregatedAnalytics:
    """Everything derived from one snapshot.  Recomputed, never persisted."""

    initial_capital: float
    as_of: datetime | None
    trade_set: TradeSet
    normalization: NormalizationReport
    summary: PerformanceSummary
    equity_curve: list[EquityPoint] = field(default_factory=list)
    time_windows: dict[TimeWindow, WindowPerformance] = field(default_factory=dict)
    setup_stats: list[SetupStats] = field(default_factory=list)
    asset_pair_stats: list[AssetPairStats] = field(default_factory=list)
    trade_durations: list[dict[str, Any]] = field(default_factory=list)
    risk_reward: list[dict[str, float]] = field(default_factory=list)
    excursions: list[ExcursionRecord] = field(default_factory=list)
    excursion_summary: ExcursionSummary = field(default_factory=ExcursionSummary)
    performance_by_emotion: dict[str, EmotionPerformance] = field(default_factory=dict)
    emotion_trend: list[EmotionDay] = field(default_factory=list)
    emotion_correlation: float = 0.0
    emotion_recovery: dict[str, int] = field(default_factory=dict)
    mistake_frequencies: dict[str, MistakeStat] = field(default_factory=dict)
    rule_adherence: list[RuleAdherenceGroup] = field(default_factory=list)
    pre_trading: PreTradingImpact = field(default_factory=PreTradingImpact)
    volatility: list[VolatilityPoint] = field(default_factory=list)
    core_traits: dict[CoreTrait, int] = field(default_factory=dict)
    mental_score: MentalScore = field(default_factory=MentalScore)
    pattern_matches: list[EntryPatterns] = field(default_factory=list)
    behavioral_profile: list[BehavioralPattern] = field(default_factory=list)
    monthly_recap: MonthlyRecap | None = None
    insights: Insights | None = None

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible camelCase view of the bundle."""
        return {
            "initialCapital": self.initial_capital,
            "asOf": self.as_of.isoformat() if self.as_of else None,
            "performanceSummary": self.summary.to_dict(),
            "equityCurve": [p.to_dict() for p in self.equity_curve],
            "timeWindows": {k.value: v.to_dict() for k, v in self.time_windows.items()},
            "setupStats": [s.to_dict() for s in self.setup_stats],
            "assetPairStats": {s.instrument: s.to_dict() for s in self.asset_pair_stats},
            "tradeDurations": self.trade_durations,
            "durationBuckets": duration_buckets(self.trade_durations),
            "riskReward": self.risk_reward,
            "excursions": [r.to_dict() for r in self.excursions],
            "excursionSummary": self.excursion_summary.to_dict(),
            "performanceByEmotion": {
                k: v.to_dict() for k, v in self.performance_by_emotion.items()
            },
            "emotionTrend": [d.to_dict() for d in self.emotion_trend],
            "emotionPnlCorrelation": round(self.emotion_correlation, 4),
            "emotionRecovery": self.emotion_recovery,
            "mistakeFrequencies": {
                k: v.to_dict() for k, v in self.mistake_frequencies.items()
            },
            "mistakeCategories": mistake_categories(self.mistake_frequencies),
            "ruleAdherence": [g.to_dict() for g in self.rule_adherence],
            "preTradingEvents": self.pre_trading.to_dict(),
            "volatilityData": [p.to_dict() for p in self.volatility],
            "coreTraits": [
                {"coreTrait": k.value, "count": v} for k, v in self.core_traits.items()
            ],
            "mentalScore": self.mental_score.to_dict(),
            "patternMatches": [p.to_dict() for p in self.pattern_matches],
            "behavioralProfile": [p.to_dict() for p in self.behavioral_profile],
            "monthlyRecap": self.monthly_recap.to_dict() if self.monthly_recap else None,
            "insights": self.insights.to_dict() if self.insights else None,
            "dataQuality": {
                "rawTrades": self.trade_set.raw_count,
                "uniqueTrades": len(self.trade_set.unique),
                "duplicateTrades": self.trade_set.duplicate_count,
                "unidentifiedTrades": len(self.trade_set.unidentified),
                "normalization": self.normalization.to_dict(),
            },
        }


def _latest_date(entries: Iterable[JournalEntry], trade_set: TradeSet) -> datetime | None:
    dates = [d for d in (trade_date(o) for o in trade_set.unique) if d is not None]
    dates.extend(e.created_at for e in entries if e.created_at is not None)
    return max(dates) if dates else None


class AnalyticsEngine:
    """Stateless orchestrator over the journal analytics modules.

    Parameters
    ----------
    settings : Settings
        Engine configuration; defaults apply when omitted.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()

    @property
    def settings(self) -> Settings:
        return self._settings

    def resolve_capital(self, initial_capital: Any = None) -> float:
        """Caller capital when usable, otherwise the configured default."""
        default = self._settings.capital.initial_capital
        if initial_capital is None:
            return default
        try:
            return validate_initial_capital(initial_capital)
        except InvalidCapitalError as exc:
            logger.warning("%s; falling back to default capital %.2f", exc, default)
            return default

    def analyze(
        self,
        entries: Iterable[Mapping[str, Any] | JournalEntry],
        *,
        initial_capital: Any = None,
        as_of: Any = None,
    ) -> AggregatedAnalytics:
        """Compute the full analytics bundle for one journal snapshot.

        Parameters
        ----------
        entries
            Raw entry mappings or already normalized :class:`JournalEntry`
            objects, in journal order.
        initial_capital
            Starting balance.  Non-positive or non-finite values fall back
            to the configured default with a warning.
        as_of
            Reference instant for the month/quarter/year windows and the
            monthly recap.  Defaults to the latest trade or entry date.
        """
        report = NormalizationReport()
        normalized = normalize_entries(entries, report)
        capital = self.resolve_capital(initial_capital)
        trade_set = deduplicate_trades(normalized)

        reference = coerce_datetime(as_of, field_name="as_of", report=report)
        if reference is None:
            reference = _latest_date(normalized, trade_set)

        settings = self._settings
        summary = performance_summary(trade_set, capital)
        excursions = analyze_excursions(trade_set)
        exc_summary = excursion_summary(excursions)
        trend = emotion_trend(normalized, trade_set)
        correlation = emotion_pnl_correlation(trend)
        windows = time_window_performance(
            trade_set, capital, reference, settings.windows.enabled
        )
        mistakes = mistake_frequencies(normalized, trade_set)
        assets = asset_pair_stats(trade_set)
        score = mental_score(trade_set, capital, settings.scoring)
        profile = behavioral_profile(normalized, trade_set, config=settings.classifier)
        recap = None
        if reference is not None:
            recap = monthly_recap(
                normalized,
                trade_set,
                reference.strftime("%Y-%m"),
                overtrading_multiplier=settings.recap.overtrading_multiplier,
            )

        insights = generate_insights(
            summary=summary,
            mental=score,
            entry_count=len(normalized),
            mistakes=mistakes,
            assets=assets,
            recent_pnls=[o.trade.net_pnl for o in chronological(trade_set)],
            excursions=exc_summary,
            trend=trend,
            correlation=correlation,
            windows=windows,
            profile=profile,
        )

        logger.info(
            "Analyzed %d entries, %d unique trades, mental score %d",
            len(normalized),
            len(trade_set),
            score.score,
        )
        return AggregatedAnalytics(
            initial_capital=capital,
            as_of=reference,
            trade_set=trade_set,
            normalization=report,
            summary=summary,
            equity_curve=equity_curve(trade_set, capital),
            time_windows=windows,
            setup_stats=setup_stats(trade_set),
            asset_pair_stats=assets,
            trade_durations=trade_durations(trade_set),
            risk_reward=risk_reward_points(trade_set),
            excursions=excursions,
            excursion_summary=exc_summary,
            performance_by_emotion=performance_by_emotion(normalized, trade_set),
            emotion_trend=trend,
            emotion_correlation=correlation,
            emotion_recovery=emotion_recovery(normalized),
            mistake_frequencies=mistakes,
            rule_adherence=rule_adherence(normalized),
            pre_trading=pre_trading_impact(normalized, trade_set),
            volatility=volatility_performance(normalized, trade_set),
            core_traits=core_trait_counts(normalized),
            mental_score=score,
            pattern_matches=self._entry_patterns(normalized),
            behavioral_profile=profile,
            monthly_recap=recap,
            insights=insights,
        )

    def classify(self, text: str | None) -> dict[PatternCategory, PatternMatch]:
        """Pattern matches of one reflection text, for every category."""
        return classify_reflection(text, config=self._settings.classifier)

    def recap(
        self, entries: Iterable[Mapping[str, Any] | JournalEntry], month: str
    ) -> MonthlyRecap:
        normalized = normalize_entries(entries)
        return monthly_recap(
            normalized,
            deduplicate_trades(normalized),
            month,
            overtrading_multiplier=self._settings.recap.overtrading_multiplier,
        )

    def _entry_patterns(self, entries: Iterable[JournalEntry]) -> list[EntryPatterns]:
        result = []
        for entry in entries:
            if not entry.notes:
                continue
            matches = detected_matches(self.classify(entry.notes))
            if matches:
                result.append(EntryPatterns(entry.id, entry.created_at, tuple(matches)))
        return result
