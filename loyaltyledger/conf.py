"""
Loyalty ledger configuration.

Usage in settings.py:
    LOYALTY_LEDGER = {
        "DEFAULT_STAMPS_REQUIRED": 10,
        "REWARD_EXPIRY_YEARS": 1,
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


@dataclass
class LedgerSettings:
    """Loyalty ledger configuration settings."""

    # Card size when a merchant has none configured
    DEFAULT_STAMPS_REQUIRED: int = 10

    # Points per currency unit when a merchant has none configured
    DEFAULT_POINTS_MULTIPLIER: str = "1.0"

    # Reward instances expire on Dec 31 of (creation year + N)
    REWARD_EXPIRY_YEARS: int = 1

    # Card summary reports a tier upgrade as recent within this window
    RECENT_UPGRADE_HOURS: int = 24

    # Default page size for transaction history
    TRANSACTION_HISTORY_LIMIT: int = 50


def get_ledger_settings() -> LedgerSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "LOYALTY_LEDGER", {})
    return LedgerSettings(**user_settings)


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_ledger_settings(), name)


ledger_settings = _LazySettings()
