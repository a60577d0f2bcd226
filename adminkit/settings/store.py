"""
Settings persistence - one JSON record per settings class.
"""

from __future__ import annotations

import copy
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable


@dataclass
class SettingRecord:
    """Stored values of one settings class."""

    class_name: str
    name: str
    data: str
    create_date: datetime
    update_date: datetime
    update_by: Any = None


@runtime_checkable
class SettingsStore(Protocol):
    def get(self, class_name: str) -> Optional[SettingRecord]: ...

    def put(self, record: SettingRecord) -> None: ...

    def all(self) -> List[SettingRecord]: ...


class InMemorySettingsStore:
    """Process-local store; records are copied in and out."""

    def __init__(self):
        self._records: Dict[str, SettingRecord] = {}
        self._lock = threading.Lock()

    def get(self, class_name: str) -> Optional[SettingRecord]:
        with self._lock:
            record = self._records.get(class_name)
            return copy.copy(record) if record is not None else None

    def put(self, record: SettingRecord) -> None:
        with self._lock:
            self._records[record.class_name] = copy.copy(record)

    def all(self) -> List[SettingRecord]:
        with self._lock:
            return [copy.copy(r) for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)
