"""Trading journal analytics and psychology insights.

Turns raw journal entries (with their embedded trades) into deduplicated
performance statistics, excursion analysis, emotion correlation, a
composite mental score, behavioural-pattern classification of
reflections, and template-based insights.

Key components
--------------
**Records & cleanup**

Trade / JournalEntry   Normalized, immutable records
normalize_entries      Single coercion boundary for raw dicts
deduplicate_trades     First-seen trade set with entry ownership

**Analytics**

performance_summary    Win rate, profit factor, drawdown, streaks
analyze_excursions     MFE/MAE relative to target and stop
mental_score           Weighted composite 0-100 score
classify_reflection    Rule-based bias detection in free text
monthly_recap          One-month "wrapped" summary
rule_adherence         Outcomes with vs without followed rules
pre_trading_impact     Session P&L per pre-trading activity
entry_core_trait       Keyword tagging of entries by core trait
generate_insights      Threshold-driven natural-language statements

**Orchestration & helpers**

AnalyticsEngine        One call from snapshot to AggregatedAnalytics
AnalyticsMemo          Caller-owned memoization by explicit key
InsightEventLog        Emitted-insight log with TTL
"""

from .record import JournalEntry, Trade
from .normalizer import NormalizationReport, normalize_entries, normalize_entry, normalize_trade
from .dedup import OwnedTrade, TradeSet, deduplicate_trades
from .metrics import performance_summary, equity_curve, time_window_performance
from .excursion import ExcursionRecord, analyze_excursions, excursion_summary
from .emotion import emotion_pnl_correlation, emotion_trend, pearson
from .scoring import MentalScore, mental_score
from .patterns import PATTERN_RULES, PatternMatch, classify_reflection, behavioral_profile
from .mistakes import mistake_frequencies
from .recap import MonthlyRecap, monthly_recap
from .habits import pre_trading_impact, rule_adherence, volatility_performance
from .traits import core_trait_counts, entry_core_trait
from .insights import Insights, generate_insights
from .engine import AggregatedAnalytics, AnalyticsEngine
from .memo import AnalyticsMemo, MemoKey
from .notifications import InsightEventLog, emotion_return_notices
from .export import equity_curve_csv, excursions_csv, to_json

__all__ = [
    "JournalEntry",
    "Trade",
    "NormalizationReport",
    "normalize_entries",
    "normalize_entry",
    "normalize_trade",
    "OwnedTrade",
    "TradeSet",
    "deduplicate_trades",
    "performance_summary",
    "equity_curve",
    "time_window_performance",
    "ExcursionRecord",
    "analyze_excursions",
    "excursion_summary",
    "emotion_pnl_correlation",
    "emotion_trend",
    "pearson",
    "MentalScore",
    "mental_score",
    "PATTERN_RULES",
    "PatternMatch",
    "classify_reflection",
    "behavioral_profile",
    "mistake_frequencies",
    "MonthlyRecap",
    "monthly_recap",
    "pre_trading_impact",
    "rule_adherence",
    "volatility_performance",
    "core_trait_counts",
    "entry_core_trait",
    "Insights",
    "generate_insights",
    "AggregatedAnalytics",
    "AnalyticsEngine",
    "AnalyticsMemo",
    "MemoKey",
    "InsightEventLog",
    "emotion_return_notices",
    "equity_curve_csv",
    "excursions_csv",
    "to_json",
]
