"""
Admin-model mapping - entity ↔ admin model conversion and the save pipeline.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Type, TypeVar

from ..faults import FieldValueFault
from ..fields import FieldRole, WidgetKind
from ..schema import AdminModel, SaveContext

logger = logging.getLogger("adminkit.mapping")

M = TypeVar("M", bound=AdminModel)

# Roles the pipeline fills in; submitted values for them are ignored
_STAMPED_ROLES = frozenset({
    FieldRole.SAVE_DATE,
    FieldRole.LAST_UPDATE_DATE,
    FieldRole.UPDATED_BY,
})


def _has_member(entity: Any, name: str) -> bool:
    if isinstance(entity, dict):
        return name in entity
    return hasattr(entity, name)


def _read(entity: Any, name: str) -> Any:
    if isinstance(entity, dict):
        return entity.get(name)
    return getattr(entity, name, None)


def _write(entity: Any, name: str, value: Any) -> None:
    if isinstance(entity, dict):
        entity[name] = value
    else:
        setattr(entity, name, value)


class AdminModelMapper:
    """
    Moves values between persistence entities (objects or dicts) and admin
    models, converting each field through its widget.

    Args:
        now: Clock used for save/update stamps (UTC ``datetime.now`` by default)
    """

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self._now = now or (lambda: datetime.now(timezone.utc))

    def context(self, *, current_user_id: Any = None, is_new: bool = False) -> SaveContext:
        return SaveContext(now=self._now(), current_user_id=current_user_id, is_new=is_new)

    def to_admin_model(self, entity: Any, model_type: Type[M]) -> M:
        """Fill a new ``model_type`` from the same-named members of ``entity`` (passwords excepted)."""
        raw = {
            descriptor.name: _read(entity, descriptor.name)
            for descriptor in model_type.schema()
            if _has_member(entity, descriptor.name)
            and descriptor.widget_kind is not WidgetKind.PASSWORD
        }
        model = model_type.from_dict(raw)
        model.after_load(entity, self.context())
        return model

    def from_payload(self, payload: Dict[str, Any], model_type: Type[M]) -> M:
        """Build a model from posted JSON; unconvertible values become field errors."""
        if not isinstance(payload, dict):
            raise FieldValueFault(
                {"": [f"Expected a JSON object, got {type(payload).__name__}"]},
                metadata={"model": model_type.__name__},
            )
        try:
            return model_type.from_dict(payload)
        except FieldValueFault as fault:
            fault.log(logger)
            raise

    def to_entity(
        self,
        model: AdminModel,
        entity: Any,
        *,
        current_user_id: Any = None,
        is_new: bool = False,
    ) -> Any:
        """
        Validate ``model`` and write its values into ``entity``.

        Read-only and password fields are skipped (passwords are left to
        the model's ``before_save`` hook). Save date (on create), last update date
        and updated-by fields are stamped. Raises ``FieldValueFault`` with
        every field error when validation fails; nothing is written then.
        """
        errors = model.validate()
        if errors:
            fault = FieldValueFault(errors, metadata={"model": type(model).__name__})
            fault.log(logger)
            raise fault

        context = self.context(current_user_id=current_user_id, is_new=is_new)
        schema = type(model).schema()

        for descriptor in schema:
            if (
                descriptor.read_only
                or descriptor.role in _STAMPED_ROLES
                or descriptor.widget_kind is WidgetKind.PASSWORD
            ):
                continue
            _write(entity, descriptor.name, descriptor.widget.to_storage(getattr(model, descriptor.name)))

        self._stamp(model, entity, context)
        model.before_save(entity, context)
        return entity

    def _stamp(self, model: AdminModel, entity: Any, context: SaveContext) -> None:
        for descriptor in type(model).schema():
            role = descriptor.role
            if role is FieldRole.SAVE_DATE and context.is_new:
                value = context.now
            elif role is FieldRole.LAST_UPDATE_DATE:
                value = context.now
            elif role is FieldRole.UPDATED_BY and context.current_user_id is not None:
                value = context.current_user_id
            else:
                continue
            _write(entity, descriptor.name, descriptor.widget.to_storage(value))
