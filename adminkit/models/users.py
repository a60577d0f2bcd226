"""
Admin user and role base models.

Applications subclass these to manage their own admin accounts; a
subclass may add fields but keeps every inherited one.

Admin passwords are never stored in the clear: saving a user with a new
password writes ``password_hash`` and ``password_salt`` (hex strings) to
the entity instead.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from ..fields import (
    CheckboxWidget,
    DateTimeWidget,
    FieldRole,
    ForcePictureFormat,
    NumberWidget,
    PasswordWidget,
    PictureWidget,
    SelectWidget,
    TextAreaWidget,
    TextWidget,
    Visibility,
)
from ..schema import AdminModel, SaveContext, SchemaBuilder

_NOT_ON_CREATE = Visibility(show_on_create=False)

SALT_LENGTH = 32


def salted_hash(password: str, salt: bytes) -> bytes:
    """SHA-256 of the UTF-8 password followed by the salt."""
    return hashlib.sha256(password.encode("utf-8") + salt).digest()


def hash_password(password: str, salt: Optional[bytes] = None) -> Tuple[str, str]:
    """
    Hash ``password`` with ``salt`` (a fresh random one by default).

    Returns:
        ``(hash_hex, salt_hex)``
    """
    if salt is None:
        salt = secrets.token_bytes(SALT_LENGTH)
    return salted_hash(password, salt).hex(), salt.hex()


def verify_password(password: str, hash_hex: str, salt_hex: str) -> bool:
    try:
        expected = bytes.fromhex(hash_hex)
        salt = bytes.fromhex(salt_hex)
    except (TypeError, ValueError):
        return False
    return hmac.compare_digest(salted_hash(password, salt), expected)


def _write(entity: Any, name: str, value: Any) -> None:
    if isinstance(entity, dict):
        entity[name] = value
    else:
        setattr(entity, name, value)


class RoleType(IntEnum):
    SUPER_ADMIN = 0
    REGULAR_ADMIN = 1
    CUSTOM = 2


class AdminUserModelBase(AdminModel):
    """An admin panel account."""

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.tab("General")

        fields.container("Basic Information")
        fields.field("id", "ID", NumberWidget(), value_type=Optional[int],
                     read_only=True, visibility=_NOT_ON_CREATE, list=True)
        fields.field("email", "Email", TextWidget(max_length=256),
                     required=True, tooltip="User email", list=True)
        fields.field("full_name", "Full Name", TextWidget(max_length=100),
                     required=True, tooltip="User full name", list=True)
        fields.field("phone", "Phone", TextWidget(max_length=50), tooltip="User phone number")
        fields.field("role_id", "Role", SelectWidget(search_enabled=True), value_type=Optional[int],
                     required=True, tooltip="User role", list=True)
        fields.end_container()

        fields.container("Security")
        fields.field("password", "Password", PasswordWidget(confirm=True),
                     tooltip="User password", searchable=False)
        fields.field("confirm_password", "Confirm Password", PasswordWidget(),
                     tooltip="Confirm password", searchable=False)
        fields.end_container()

        fields.container("Profile")
        fields.field("picture_url", "Profile Picture",
                     PictureWidget(allowed_extensions=("jpg", "png", "webp"),
                                   force_format=ForcePictureFormat.WEBP, max_size=2),
                     tooltip="User profile picture")
        fields.end_container()

        fields.end_tab()
        fields.tab("System")

        fields.container("Status")
        fields.field("active", "Active", CheckboxWidget(allow_list_toggle=True),
                     default=True, list=True)
        fields.field("archived", "Archived", CheckboxWidget(), read_only=True,
                     visibility=_NOT_ON_CREATE, role=FieldRole.ARCHIVE_INDICATOR)
        fields.end_container()

        fields.container("Audit")
        fields.field("create_date", "Created Date", DateTimeWidget(), value_type=Optional[datetime],
                     read_only=True, visibility=_NOT_ON_CREATE, role=FieldRole.SAVE_DATE)
        fields.field("update_date", "Last Updated", DateTimeWidget(), value_type=Optional[datetime],
                     read_only=True, visibility=_NOT_ON_CREATE, role=FieldRole.LAST_UPDATE_DATE)
        fields.field("last_login_date", "Last Login", DateTimeWidget(), value_type=Optional[datetime],
                     read_only=True, visibility=_NOT_ON_CREATE)
        fields.field("last_ip_address", "Last IP", TextWidget(),
                     read_only=True, visibility=_NOT_ON_CREATE)
        fields.end_container()

        fields.end_tab()

    def validate(self) -> Dict[str, List[str]]:
        errors = super().validate()
        if (self.password or None) != (self.confirm_password or None):
            errors.setdefault("confirm_password", []).append("Passwords do not match")
        return errors

    def before_save(self, entity: Any, context: SaveContext) -> None:
        # An empty password keeps the stored hash
        if self.password:
            password_hash, salt = hash_password(self.password)
            _write(entity, "password_hash", password_hash)
            _write(entity, "password_salt", salt)


class AdminRoleModelBase(AdminModel):
    """A named set of admin permissions."""

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.tab("General")
        fields.container("Basic Information")
        fields.field("id", "ID", NumberWidget(), value_type=Optional[int],
                     read_only=True, visibility=_NOT_ON_CREATE, list=True)
        fields.field("name", "Name", TextWidget(max_length=100),
                     required=True, tooltip="Role name", list=True)
        fields.field("description", "Description", TextAreaWidget(), tooltip="Role description")
        fields.field("role_type", "Role Type", SelectWidget(RoleType), value_type=RoleType,
                     required=True, default=RoleType.REGULAR_ADMIN, list=True)
        fields.field("is_visible", "Visible", CheckboxWidget(allow_list_toggle=True),
                     default=True, list=True)
        fields.end_container()
        fields.end_tab()

        fields.field("is_system_defined", "System Defined", CheckboxWidget(),
                     read_only=True, visibility=_NOT_ON_CREATE)
