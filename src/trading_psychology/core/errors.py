"""Custom exception hierarchy for the analytics engine.

Record content never raises: malformed trades and entries degrade to
zero-valued or excluded results.  These exceptions cover configuration
and the CLI's file handling only.
"""


class AnalyticsError(Exception):
    """Base exception for all analytics engine errors."""


# --- Configuration ---
class ConfigError(AnalyticsError):
    """Invalid or missing configuration."""


class InvalidCapitalError(ConfigError):
    """Initial capital is not a positive, finite number."""

    def __init__(self, amount: object):
        self.amount = amount
        super().__init__(
            f"Initial capital must be a positive number, got {amount!r}"
        )


# --- Snapshot input ---
class SnapshotError(AnalyticsError):
    """A journal snapshot file could not be read or decoded."""
