"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

from .enums import Emotion, LogFormat, TimeWindow

DEFAULT_INITIAL_CAPITAL = 10_000.0


def validate_initial_capital(amount: Any) -> float:
    """Return *amount* as a float, or raise if it is not a usable capital.

    Raises:
        InvalidCapitalError: If the value is not a positive, finite number.
    """
    from .errors import InvalidCapitalError

    if isinstance(amount, bool):
        raise InvalidCapitalError(amount)
    try:
        value = float(amount)
    except (TypeError, ValueError, OverflowError):
        raise InvalidCapitalError(amount) from None
    if not math.isfinite(value) or value <= 0:
        raise InvalidCapitalError(amount)
    return value


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class CapitalConfig(BaseModel):
    initial_capital: float = DEFAULT_INITIAL_CAPITAL


class ScoringConfig(BaseModel):
    """Weights and normalization caps of the composite mental score."""

    win_rate_weight: float = 0.15
    profit_factor_weight: float = 0.20
    win_loss_weight: float = 0.20
    recovery_weight: float = 0.15
    drawdown_weight: float = 0.10
    consistency_weight: float = 0.20

    profit_factor_cap: float = 3.0  # PF of 3.0 scores 100
    win_loss_cap: float = 2.0
    recovery_cap: float = 3.0
    drawdown_reference_pct: float = 20.0  # Drawdown (% of capital) scoring 0

    @property
    def weights(self) -> dict[str, float]:
        return {
            "win_rate": self.win_rate_weight,
            "profit_factor": self.profit_factor_weight,
            "win_loss_ratio": self.win_loss_weight,
            "recovery_factor": self.recovery_weight,
            "max_drawdown": self.drawdown_weight,
            "consistency": self.consistency_weight,
        }


class ClassifierConfig(BaseModel):
    min_text_length: int = 10
    max_evidence: int = 3
    evidence_max_chars: int = 60


class WindowsConfig(BaseModel):
    """Calendar windows reported by ``time_window_performance``."""

    enabled: list[TimeWindow] = Field(
        default_factory=lambda: [TimeWindow.MONTH, TimeWindow.QUARTER, TimeWindow.YEAR]
    )


class RecapConfig(BaseModel):
    overtrading_multiplier: float = 1.5  # Day counts above 150% of average


class NotificationConfig(BaseModel):
    ttl_days: int = 30
    positive_return_days: int = 3
    neutral_return_days: int = 4
    negative_return_days: int = 5

    @property
    def return_days(self) -> dict[Emotion, int]:
        """Days of absence before an emotion earns a return notice."""
        return {
            Emotion.POSITIVE: self.positive_return_days,
            Emotion.NEUTRAL: self.neutral_return_days,
            Emotion.NEGATIVE: self.negative_return_days,
        }


class MemoConfig(BaseModel):
    max_entries: int = 128


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: LogFormat = LogFormat.JSON


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level engine settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    capital: CapitalConfig = Field(default_factory=CapitalConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    windows: WindowsConfig = Field(default_factory=WindowsConfig)
    recap: RecapConfig = Field(default_factory=RecapConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    memo: MemoConfig = Field(default_factory=MemoConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADING_PSYCH_", "env_nested_delimiter": "__"}

    def validate_capital(self) -> None:
        """Enforce a positive, finite default capital."""
        validate_initial_capital(self.capital.initial_capital)

    def validate_scoring(self) -> None:
        """Score caps and the drawdown reference must be positive."""
        from .errors import ConfigError

        scoring = self.scoring
        for name in (
            "profit_factor_cap",
            "win_loss_cap",
            "recovery_cap",
            "drawdown_reference_pct",
        ):
            value = getattr(scoring, name)
            if not math.isfinite(value) or value <= 0:
                raise ConfigError(f"scoring.{name} must be a positive number, got {value}")

    def validate_weights(self) -> None:
        """Mental score weights must sum to 1.0."""
        from .errors import ConfigError

        total = sum(self.scoring.weights.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ConfigError(
                f"Mental score weights must sum to 1.0, got {total:.4f}"
            )


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: If the resulting capital, score weights or score caps
            are invalid.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            import tomli

            with open(path, "rb") as f:
                data = tomli.load(f)

    if overrides:
        for key, value in overrides.items():
            if isinstance(value, dict) and isinstance(data.get(key), dict):
                data[key] = {**data[key], **value}
            else:
                data[key] = value

    settings = Settings(**data)
    settings.validate_capital()
    settings.validate_weights()
    settings.validate_scoring()
    return settings
