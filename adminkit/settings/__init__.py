"""
adminkit settings - settings pages and their persistence.
"""

from .models import AdminSettings, EmailSettingsConfig, MasterSettingsBase, SystemSettingsBase
from .store import InMemorySettingsStore, SettingRecord, SettingsStore
from .provider import SettingsProvider

__all__ = [
    "AdminSettings",
    "EmailSettingsConfig",
    "MasterSettingsBase",
    "SystemSettingsBase",
    "InMemorySettingsStore",
    "SettingRecord",
    "SettingsStore",
    "SettingsProvider",
]
