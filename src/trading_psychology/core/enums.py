"""Enumerations used across the analytics engine."""

from enum import Enum


class Emotion(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


class SessionType(str, Enum):
    PRE = "pre"
    POST = "post"


class SessionOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"
    NO_TRADES = "no_trades"


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeOutcome(str, Enum):
    """Win / loss / break-even classification of a single trade."""

    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"


class Confidence(str, Enum):
    """Strength tier of a behavioural pattern match."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class PatternCategory(str, Enum):
    RUSHING_TO_FINISH = "rushing_to_finish"
    GIVING_BACK_PROFITS = "giving_back_profits"
    GREED = "greed"
    FRUSTRATION_REGRET = "frustration_regret"
    RECENCY_BIAS = "recency_bias"
    POSITIVE_MINDSET = "positive_mindset"


class TimeWindow(str, Enum):
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"


class MistakeCategory(str, Enum):
    RISK_MANAGEMENT = "risk_management"
    ENTRY_TIMING = "entry_timing"
    EXIT_MANAGEMENT = "exit_management"
    DISCIPLINE = "discipline"
    EMOTIONAL = "emotional"
    OTHER = "other"


class LogFormat(str, Enum):
    JSON = "json"
    CONSOLE = "console"


class CoreTrait(str, Enum):
    """Underlying need a journal entry speaks to."""

    CONTROL = "control"
    VALIDATION = "validation"
    SAFETY = "safety"
    CONNECTION = "connection"
    GROWTH = "growth"
    CONVICTION = "conviction"
    FOCUS = "focus"
    CONFIDENCE = "confidence"
    UNKNOWN = "unknown"
