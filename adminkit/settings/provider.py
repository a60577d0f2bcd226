"""
SettingsProvider - registry, loading and saving of settings pages.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

from ..faults import UnknownSettingsFault
from ..mapping import AdminModelMapper
from ..schema import FormStructure, build_structure
from .models import AdminSettings
from .store import SettingRecord, SettingsStore

logger = logging.getLogger("adminkit.settings")

S = TypeVar("S", bound=AdminSettings)


class SettingsProvider:
    """
    Registered settings types and their stored values.

    Each settings class is stored as one JSON record keyed by class name.
    A type without a record loads with its field defaults.
    """

    def __init__(self, store: SettingsStore, mapper: Optional[AdminModelMapper] = None):
        self.store = store
        self.mapper = mapper or AdminModelMapper()
        self._types: Dict[str, Type[AdminSettings]] = {}

    def register(self, *settings_types: Type[AdminSettings]) -> None:
        for settings_type in settings_types:
            if not (isinstance(settings_type, type) and issubclass(settings_type, AdminSettings)):
                raise TypeError(f"{settings_type!r} is not an AdminSettings subclass")
            # build the schema now so declaration errors surface at startup
            settings_type.schema()
            self._types[settings_type.__name__] = settings_type
            logger.debug("Registered settings type %s", settings_type.__name__)

    def types(self) -> List[Type[AdminSettings]]:
        return list(self._types.values())

    def names(self) -> List[str]:
        return list(self._types)

    def type_by_name(self, name: str) -> Type[AdminSettings]:
        try:
            return self._types[name]
        except KeyError:
            raise UnknownSettingsFault(name, self.names()) from None

    def _resolve(self, settings_type: Type[S] | str) -> Type[S]:
        if isinstance(settings_type, str):
            return self.type_by_name(settings_type)
        return settings_type

    def get(self, settings_type: Type[S] | str) -> S:
        """Current values of ``settings_type``; defaults when nothing is stored."""
        settings_type = self._resolve(settings_type)
        record = self.store.get(settings_type.__name__)
        if record is None:
            return settings_type()
        return self.mapper.to_admin_model(json.loads(record.data), settings_type)

    def save(self, settings: AdminSettings, current_user_id: Any = None) -> SettingRecord:
        """Validate and store ``settings``; raises ``FieldValueFault`` when invalid."""
        class_name = type(settings).__name__
        existing = self.store.get(class_name)

        data: Dict[str, Any] = json.loads(existing.data) if existing is not None else {}
        self.mapper.to_entity(
            settings,
            data,
            current_user_id=current_user_id,
            is_new=existing is None,
        )

        now = self.mapper.context().now
        record = SettingRecord(
            class_name=class_name,
            name=type(settings).title(),
            data=json.dumps(data),
            create_date=existing.create_date if existing is not None else now,
            update_date=now,
            update_by=current_user_id,
        )
        self.store.put(record)
        logger.info("Saved settings %s (by %s)", class_name, current_user_id)
        return record

    def save_payload(self, name: str, payload: Dict[str, Any], current_user_id: Any = None) -> AdminSettings:
        """Convert posted JSON into the named settings type and save it."""
        settings_type = self.type_by_name(name)
        settings = self.mapper.from_payload(payload, settings_type)
        self.save(settings, current_user_id=current_user_id)
        return settings

    def structure(self, name: str) -> FormStructure:
        settings_type = self.type_by_name(name)
        return build_structure(settings_type, self.get(settings_type))

    def summary(self) -> List[Dict[str, Any]]:
        """Registered settings pages with their last update."""
        result = []
        for name, settings_type in self._types.items():
            record = self.store.get(name)
            result.append({
                "name": name,
                "title": settings_type.title(),
                "updateDate": record.update_date.isoformat() if record else None,
                "updateBy": record.update_by if record else None,
            })
        return result
