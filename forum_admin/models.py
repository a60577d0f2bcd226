"""
Forum entities and their admin models.

Entities are the stored records; admin models describe how each record
is listed and edited on the admin panel. Dates are stored as ISO 8601
strings.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from adminkit.fields import (
    CheckboxWidget,
    DateTimeWidget,
    FieldRole,
    NumberWidget,
    PasswordWidget,
    PictureWidget,
    TextWidget,
    Visibility,
)
from adminkit.models import AdminUserModelBase
from adminkit.schema import AdminModel, SaveContext, SchemaBuilder


# ============================================================================
# Entities
# ============================================================================

@dataclass
class Forum:
    id: Optional[int] = None
    name: str = ""
    managers_only_posting: bool = False
    active: bool = True
    sort_index: int = 0
    is_deleted: bool = False
    create_date: Optional[str] = None
    update_date: Optional[str] = None
    update_by: Optional[int] = None


@dataclass
class ForumUser:
    id: Optional[int] = None
    name: str = ""
    password_hash: str = ""
    profile_picture_path: Optional[str] = None
    is_manager: bool = False
    is_deleted: bool = False
    create_date: Optional[str] = None
    update_date: Optional[str] = None
    update_by: Optional[int] = None


@dataclass
class SiteSettings:
    id: Optional[int] = None
    is_locked: bool = False
    create_date: Optional[str] = None
    update_date: Optional[str] = None
    update_by: Optional[int] = None


@dataclass
class Post:
    id: Optional[int] = None
    forum_id: int = 0
    user_id: int = 0
    title: str = ""
    content: str = ""
    is_deleted: bool = False
    create_date: Optional[str] = None
    author: Optional[ForumUser] = None
    comments: List[str] = field(default_factory=list)


def hash_password(password: str) -> str:
    """Upper-case hex SHA-256 of the UTF-8 password."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest().upper()


# ============================================================================
# Admin models
# ============================================================================

_NOT_ON_CREATE = Visibility(show_on_create=False)
_HIDDEN = Visibility(show_on_create=False, show_on_edit=False, show_on_view=False)


def _audit_fields(fields: SchemaBuilder) -> None:
    fields.field("create_date", "Created Date", DateTimeWidget(), value_type=Optional[datetime],
                 read_only=True, visibility=_HIDDEN, role=FieldRole.SAVE_DATE)
    fields.field("update_date", "Last Updated", DateTimeWidget(), value_type=Optional[datetime],
                 read_only=True, visibility=_HIDDEN, role=FieldRole.LAST_UPDATE_DATE)
    fields.field("update_by", "Updated By", NumberWidget(), value_type=Optional[int],
                 read_only=True, visibility=_HIDDEN, role=FieldRole.UPDATED_BY)


class AdminForumModel(AdminModel):

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.field("id", "ID", NumberWidget(), value_type=Optional[int],
                     read_only=True, visibility=_NOT_ON_CREATE, list=True)
        fields.field("sort_index", "Order", NumberWidget(), read_only=True,
                     role=FieldRole.SORT_INDEX, list=True)
        fields.field("name", "Forum Name", TextWidget(max_length=100), required=True, list=True)
        fields.field("managers_only_posting", "Managers Only Posting", CheckboxWidget(), list=True)
        fields.field("active", "Active", CheckboxWidget(allow_list_toggle=True),
                     default=True, list=True)
        fields.field("is_deleted", "Deleted", CheckboxWidget(), read_only=True,
                     visibility=_HIDDEN, role=FieldRole.DELETION_INDICATOR)
        _audit_fields(fields)


class AdminForumUserModel(AdminModel):

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.field("id", "ID", NumberWidget(), value_type=Optional[int],
                     read_only=True, visibility=_NOT_ON_CREATE, list=True)
        fields.field("name", "User Name", TextWidget(max_length=100), required=True, list=True)
        fields.field("password_hash", "Password", PasswordWidget(),
                     tooltip="Set only on create or change.",
                     visibility=Visibility(show_on_view=False))
        fields.field("profile_picture_path", "Profile Picture",
                     PictureWidget(allowed_extensions=("jpg", "jpeg", "png", "webp"), max_size=4))
        fields.field("is_manager", "Manager", CheckboxWidget(), list=True)
        fields.field("is_deleted", "Deleted", CheckboxWidget(), read_only=True,
                     visibility=_HIDDEN, role=FieldRole.DELETION_INDICATOR)
        _audit_fields(fields)

    def validate(self) -> Dict[str, List[str]]:
        errors = super().validate()
        if self.id is None and not self.password_hash:
            errors.setdefault("password_hash", []).append("Password is required")
        return errors

    def before_save(self, entity: Any, context: SaveContext) -> None:
        if self.password_hash and self.password_hash.strip():
            entity.password_hash = hash_password(self.password_hash)

    def after_load(self, entity: Any, context: SaveContext) -> None:
        self.password_hash = ""


class AdminSiteSettingsModel(AdminModel):

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.field("id", "ID", NumberWidget(), value_type=Optional[int],
                     read_only=True, visibility=_NOT_ON_CREATE, list=True)
        fields.field("is_locked", "Site Locked", CheckboxWidget(),
                     tooltip="When true, login and posting APIs are blocked.", list=True)
        _audit_fields(fields)


class AdminUserModel(AdminUserModelBase):
    """Forum admin accounts; no fields beyond the base."""
