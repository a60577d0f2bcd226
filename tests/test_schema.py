"""
Schemas: field registration, validation, inheritance and caching.
"""

from typing import Optional

import pytest

from adminkit.faults import FieldValueFault, SchemaFault
from adminkit.fields import (
    CheckboxWidget,
    ComplexWidget,
    FieldRole,
    ListSettings,
    NumberWidget,
    TextWidget,
    WidgetKind,
)
from adminkit.models import AdminRoleModelBase, AdminUserModelBase, RoleType, hash_password, verify_password
from adminkit.models.users import SALT_LENGTH
from adminkit.schema import AdminModel, Schema, SchemaBuilder, SchemaCache
from adminkit.settings import EmailSettingsConfig, MasterSettingsBase, SystemSettingsBase
from forum_admin.settings import MasterSettings, SystemSettings


# ============================================================================
# Builder and schema validation
# ============================================================================

class TestSchemaBuilder:

    def test_fields_keep_declaration_order(self):
        builder = SchemaBuilder("Thing")
        builder.field("b", "B", TextWidget()).field("a", "A", TextWidget())
        assert builder.build().names() == ["b", "a"]

    def test_widget_kind_is_created_through_registry(self):
        schema = SchemaBuilder("Thing").field("count", "Count", "number").build()
        descriptor = schema.get("count")
        assert descriptor.widget_kind is WidgetKind.NUMBER
        assert descriptor.value_type is int

    def test_list_flag(self):
        schema = (
            SchemaBuilder("Thing")
            .field("a", "A", TextWidget(), list=True)
            .field("b", "B", TextWidget(), list=ListSettings(priority=-1))
            .field("c", "C", TextWidget())
            .build()
        )
        assert [d.name for d in schema.list_columns()] == ["b", "a"]
        assert schema.get("c").list_settings is None

    def test_hidden_list_column(self):
        schema = SchemaBuilder("Thing").field(
            "a", "A", TextWidget(), list=ListSettings(hide_in_table=True)
        ).build()
        assert schema.list_columns() == []

    def test_duplicate_label(self):
        builder = SchemaBuilder("Thing")
        builder.field("a", "Name", TextWidget()).field("b", "Name", TextWidget())
        with pytest.raises(SchemaFault) as exc_info:
            builder.build()
        assert exc_info.value.code == "SCHEMA_DUPLICATE_LABEL"
        assert exc_info.value.field == "b"

    def test_duplicate_name(self):
        builder = SchemaBuilder("Thing")
        builder.field("a", "A", TextWidget()).field("a", "Other", TextWidget())
        with pytest.raises(SchemaFault) as exc_info:
            builder.build()
        assert exc_info.value.code == "SCHEMA_DUPLICATE_FIELD"

    @pytest.mark.parametrize("name", ["_private", "not valid", "1st"])
    def test_invalid_name(self, name):
        with pytest.raises(SchemaFault) as exc_info:
            SchemaBuilder("Thing").field(name, "X", TextWidget()).build()
        assert exc_info.value.code == "SCHEMA_INVALID_NAME"

    def test_widget_type_mismatch(self):
        builder = SchemaBuilder("Thing").field("flag", "Flag", CheckboxWidget(), value_type=str)
        with pytest.raises(SchemaFault) as exc_info:
            builder.build()
        assert exc_info.value.code == "SCHEMA_TYPE_MISMATCH"
        assert "CheckboxWidget" in exc_info.value.message

    def test_optional_value_type_is_accepted(self):
        schema = SchemaBuilder("Thing").field(
            "flag", "Flag", CheckboxWidget(), value_type=Optional[bool]
        ).build()
        assert len(schema) == 1

    def test_section_without_fields(self):
        builder = SchemaBuilder("Thing").field("a", "A", TextWidget()).container("Empty")
        with pytest.raises(SchemaFault) as exc_info:
            builder.end_container()
        assert exc_info.value.code == "SCHEMA_DANGLING_SECTION"

    def test_section_after_last_field(self):
        builder = SchemaBuilder("Thing").field("a", "A", TextWidget()).tab("Late")
        with pytest.raises(SchemaFault, match="opened after the last field"):
            builder.build()

    def test_end_before_any_field(self):
        with pytest.raises(SchemaFault):
            SchemaBuilder("Thing").end_tab()

    def test_sections_attach_to_fields(self):
        schema = (
            SchemaBuilder("Thing")
            .tab("General").container("Identity")
            .field("a", "A", TextWidget())
            .end_container().end_tab()
            .build()
        )
        descriptor = schema.get("a")
        assert [s.title for s in descriptor.opens] == ["General", "Identity"]
        assert [e.kind.value for e in descriptor.closes] == ["container", "tab"]

    def test_schema_equality(self):
        a = SchemaBuilder("Thing").field("a", "A", TextWidget()).build()
        assert a == Schema("Thing", a.fields)
        assert "a" in a
        assert a[0].name == "a"


# ============================================================================
# AdminModel schemas
# ============================================================================

class Parent(AdminModel):

    @classmethod
    def declare_fields(cls, fields):
        fields.field("title", "Title", TextWidget(max_length=10), required=True)
        fields.field("count", "Count", NumberWidget(min=0), default=1)


class Child(Parent):

    @classmethod
    def declare_fields(cls, fields):
        fields.field("extra", "Extra", CheckboxWidget())


class GrandChild(Child):
    """Adds nothing."""


class TestAdminModelSchema:

    def test_inherited_fields_come_first(self):
        assert Child.schema().names() == ["title", "count", "extra"]
        assert GrandChild.schema().names() == ["title", "count", "extra"]

    def test_schema_is_cached(self):
        assert Parent.schema() is Parent.schema()

    def test_redeclaring_inherited_field(self):
        class Broken(Parent):
            @classmethod
            def declare_fields(cls, fields):
                fields.field("title", "Another Title", TextWidget())

        with pytest.raises(SchemaFault) as exc_info:
            Broken.schema()
        assert exc_info.value.code == "SCHEMA_REDECLARED_FIELD"

    def test_failed_build_is_not_cached(self):
        class Broken(AdminModel):
            @classmethod
            def declare_fields(cls, fields):
                fields.field("a", "Same", TextWidget()).field("b", "Same", TextWidget())

        for _ in range(2):
            with pytest.raises(SchemaFault):
                Broken.schema()

    def test_field_shadowing_method(self):
        class Broken(AdminModel):
            @classmethod
            def declare_fields(cls, fields):
                fields.field("validate", "Validate", TextWidget())

        with pytest.raises(SchemaFault, match="shadows"):
            Broken.schema()

    def test_private_cache(self):
        cache = SchemaCache()
        cache.warm(Parent, Child)
        assert Parent in cache and Child in cache
        assert len(cache) == 3  # AdminModel, Parent, Child
        cache.clear()
        assert len(cache) == 0


class TestAdminModelValues:

    def test_defaults(self):
        model = Child()
        assert model.title is None
        assert model.count == 1
        assert model.extra is False

    def test_unknown_field(self):
        with pytest.raises(TypeError, match="has no field"):
            Parent(nope=1)

    def test_attribute_access(self):
        model = Parent(title="x")
        model.count = 5
        assert model.values() == {"title": "x", "count": 5}
        with pytest.raises(AttributeError):
            model.missing

    def test_validate(self):
        model = Parent(title="", count=-1)
        assert model.validate() == {
            "title": ["Title is required"],
            "count": ["Count must be at least 0"],
        }

    def test_from_dict_converts_and_ignores_unknown(self):
        model = Child.from_dict({"title": "T", "count": "3", "extra": "on", "other": 1})
        assert model.values() == {"title": "T", "count": 3, "extra": True}

    def test_from_dict_collects_errors(self):
        with pytest.raises(FieldValueFault) as exc_info:
            Child.from_dict({"count": "abc", "extra": "maybe"})
        assert set(exc_info.value.field_errors) == {"count", "extra"}

    def test_to_dict_storage(self):
        class WithEnum(AdminModel):
            @classmethod
            def declare_fields(cls, fields):
                fields.field("role", "Role", "select", value_type=RoleType)

        model = WithEnum(role=RoleType.CUSTOM)
        assert model.to_dict() == {"role": RoleType.CUSTOM}
        assert model.to_dict(storage=True) == {"role": 2}

    def test_equality(self):
        assert Parent(title="a") == Parent(title="a")
        assert Parent(title="a") != Parent(title="b")


# ============================================================================
# Built-in models
# ============================================================================

class TestBuiltInModels:

    def test_system_settings_site_locked(self):
        schema = SystemSettings.schema()
        assert schema.names() == ["is_site_locked"]
        descriptor = schema.get("is_site_locked")
        assert descriptor.display_label == "Site Locked"
        assert descriptor.widget_kind is WidgetKind.CHECKBOX
        assert descriptor.value_type is bool
        assert descriptor.tooltip == "When locked, all public forum operations are blocked."
        assert schema.list_columns() == [descriptor]
        assert SystemSettings().is_site_locked is False

    def test_settings_titles(self):
        assert SystemSettings.title() == "System Settings"
        assert MasterSettings.title() == "Master Settings"

        class ReportingSettings(SystemSettingsBase):
            settings_title = None

        assert ReportingSettings.title() == "Reporting Settings"

    def test_master_settings_inherits_everything(self):
        assert MasterSettings.schema().names() == MasterSettingsBase.schema().names()
        assert "email_settings" in MasterSettings.schema()
        email = MasterSettings.schema().get("email_settings")
        assert isinstance(email.widget, ComplexWidget)
        assert email.widget.model_type is EmailSettingsConfig

    def test_email_settings_default_port(self):
        assert EmailSettingsConfig().smtp_port == 587

    def test_nested_errors_are_prefixed(self):
        with pytest.raises(FieldValueFault) as exc_info:
            MasterSettings.from_dict({"email_settings": {"smtp_port": "abc"}})
        assert "email_settings.smtp_port" in exc_info.value.field_errors

    def test_admin_user_passwords_must_match(self):
        user = AdminUserModelBase(email="a@b.c", full_name="A", role_id=1,
                                  password="x", confirm_password="y")
        assert user.validate() == {"confirm_password": ["Passwords do not match"]}

    def test_admin_user_before_save_hashes_password(self, fixed_mapper):
        user = AdminUserModelBase(email="a@b.c", full_name="A", role_id=1,
                                  password="s3cret", confirm_password="s3cret")
        entity = fixed_mapper.to_entity(user, {}, is_new=True)
        assert "password" not in entity
        assert len(bytes.fromhex(entity["password_salt"])) == SALT_LENGTH
        assert verify_password("s3cret", entity["password_hash"], entity["password_salt"])

        again = fixed_mapper.to_entity(user, {}, is_new=True)
        assert again["password_salt"] != entity["password_salt"]

    def test_admin_user_without_password_keeps_hash(self, fixed_mapper):
        entity = {"password_hash": "ab", "password_salt": "cd"}
        user = AdminUserModelBase(email="a@b.c", full_name="A", role_id=1)
        fixed_mapper.to_entity(user, entity)
        assert (entity["password_hash"], entity["password_salt"]) == ("ab", "cd")

    def test_password_hash_with_known_salt(self):
        import hashlib

        password_hash, salt = hash_password("pw", b"\x01\x02")
        assert salt == "0102"
        assert password_hash == hashlib.sha256(b"pw\x01\x02").hexdigest()
        assert not verify_password("pw", password_hash, "not-hex")

    def test_by_role(self):
        schema = AdminUserModelBase.schema()
        assert schema.by_role(FieldRole.ARCHIVE_INDICATOR).name == "archived"
        assert schema.by_role(FieldRole.SAVE_DATE).name == "create_date"
        assert schema.by_role(FieldRole.SORT_INDEX) is None

    def test_admin_user_subclass_adds_fields(self):
        class StaffUser(AdminUserModelBase):
            @classmethod
            def declare_fields(cls, fields):
                fields.field("badge", "Badge", TextWidget())

        names = StaffUser.schema().names()
        assert names[:-1] == AdminUserModelBase.schema().names()
        assert names[-1] == "badge"

    def test_role_model(self):
        role = AdminRoleModelBase()
        assert role.role_type is RoleType.REGULAR_ADMIN
        assert role.is_visible is True
        assert AdminRoleModelBase.schema().get("archived") is None

    def test_archive_role(self):
        assert AdminUserModelBase.schema().get("archived").role is FieldRole.ARCHIVE_INDICATOR
