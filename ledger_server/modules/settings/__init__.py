"""Settings store exports"""

from .service import MIN_WITHDRAWAL_REFERENCE_VALUE, SettingsService, SettingsStore

__all__ = [
    "MIN_WITHDRAWAL_REFERENCE_VALUE",
    "SettingsService",
    "SettingsStore",
]
