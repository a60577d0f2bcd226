"""
Admin-model mapping: loading entities, posted payloads and the save pipeline.
"""

from datetime import datetime, timezone

import pytest

from adminkit.faults import FieldValueFault
from adminkit.mapping import AdminModelMapper
from forum_admin.models import (
    AdminForumModel,
    AdminForumUserModel,
    AdminSiteSettingsModel,
    Forum,
    ForumUser,
    SiteSettings,
    hash_password,
)

from tests.conftest import FIXED_NOW

STAMP = FIXED_NOW.isoformat()


class TestToAdminModel:

    def test_loads_same_named_members(self, fixed_mapper):
        forum = Forum(id=4, name="General", sort_index=2, create_date="2024-01-01T00:00:00+00:00")
        model = fixed_mapper.to_admin_model(forum, AdminForumModel)
        assert model.id == 4
        assert model.name == "General"
        assert model.sort_index == 2
        assert model.active is True
        assert model.create_date == datetime(2024, 1, 1, tzinfo=timezone.utc)

    def test_loads_from_dict(self, fixed_mapper):
        model = fixed_mapper.to_admin_model({"id": 1, "is_locked": True}, AdminSiteSettingsModel)
        assert model.is_locked is True
        assert model.update_by is None

    def test_password_is_never_loaded(self, fixed_mapper):
        user = ForumUser(id=1, name="ann", password_hash=hash_password("secret"))
        model = fixed_mapper.to_admin_model(user, AdminForumUserModel)
        assert model.password_hash == ""

    def test_stored_value_that_cannot_convert(self, fixed_mapper):
        with pytest.raises(FieldValueFault):
            fixed_mapper.to_admin_model({"id": "x"}, AdminSiteSettingsModel)


class TestFromPayload:

    def test_converts_values(self, fixed_mapper):
        model = fixed_mapper.from_payload(
            {"name": "News", "managers_only_posting": "true"}, AdminForumModel,
        )
        assert model.name == "News"
        assert model.managers_only_posting is True

    @pytest.mark.parametrize("payload", [None, [], "text"])
    def test_non_object_payload(self, fixed_mapper, payload):
        with pytest.raises(FieldValueFault) as exc_info:
            fixed_mapper.from_payload(payload, AdminForumModel)
        assert list(exc_info.value.field_errors) == [""]

    def test_conversion_errors(self, fixed_mapper):
        with pytest.raises(FieldValueFault) as exc_info:
            fixed_mapper.from_payload({"id": "abc"}, AdminForumModel)
        assert "id" in exc_info.value.field_errors


class TestToEntity:

    def test_create_stamps_dates_and_user(self, fixed_mapper):
        model = AdminForumModel(name="News")
        forum = fixed_mapper.to_entity(model, Forum(), current_user_id=5, is_new=True)
        assert forum.name == "News"
        assert forum.create_date == STAMP
        assert forum.update_date == STAMP
        assert forum.update_by == 5

    def test_update_keeps_create_date(self, fixed_mapper):
        forum = Forum(id=1, name="Old", create_date="2020-01-01T00:00:00+00:00")
        model = AdminForumModel(name="New")
        fixed_mapper.to_entity(model, forum, is_new=False)
        assert forum.create_date == "2020-01-01T00:00:00+00:00"
        assert forum.update_date == STAMP
        assert forum.update_by is None

    def test_read_only_fields_are_not_written(self, fixed_mapper):
        forum = Forum(id=1, sort_index=3, is_deleted=False)
        model = AdminForumModel(id=99, name="x", sort_index=0, is_deleted=True)
        fixed_mapper.to_entity(model, forum)
        assert forum.id == 1
        assert forum.sort_index == 3
        assert forum.is_deleted is False

    def test_submitted_stamps_are_ignored(self, fixed_mapper):
        model = AdminForumModel(name="x", update_by=42,
                                update_date=datetime(1999, 1, 1, tzinfo=timezone.utc))
        forum = fixed_mapper.to_entity(model, Forum(), current_user_id=7, is_new=True)
        assert forum.update_by == 7
        assert forum.update_date == STAMP

    def test_invalid_model_writes_nothing(self, fixed_mapper):
        forum = Forum(id=1, name="Keep")
        model = AdminForumModel(name="")
        with pytest.raises(FieldValueFault) as exc_info:
            fixed_mapper.to_entity(model, forum)
        assert exc_info.value.field_errors == {"name": ["Forum Name is required"]}
        assert forum.name == "Keep"
        assert forum.update_date is None

    def test_dict_entity(self, fixed_mapper):
        record = fixed_mapper.to_entity(AdminSiteSettingsModel(is_locked=True), {}, is_new=True)
        assert record == {
            "is_locked": True,
            "create_date": STAMP,
            "update_date": STAMP,
        }

    def test_default_clock_is_utc(self):
        context = AdminModelMapper().context()
        assert context.now.tzinfo is timezone.utc


class TestForumUserPasswords:

    def test_new_user_requires_password(self, fixed_mapper):
        with pytest.raises(FieldValueFault) as exc_info:
            fixed_mapper.to_entity(AdminForumUserModel(name="ann"), ForumUser(), is_new=True)
        assert exc_info.value.field_errors == {"password_hash": ["Password is required"]}

    def test_password_is_hashed_on_save(self, fixed_mapper):
        model = AdminForumUserModel(name="ann", password_hash="secret")
        user = fixed_mapper.to_entity(model, ForumUser(), is_new=True)
        assert user.password_hash == hash_password("secret")
        assert user.password_hash == user.password_hash.upper()
        assert len(user.password_hash) == 64

    def test_blank_password_keeps_existing_hash(self, fixed_mapper):
        user = ForumUser(id=1, name="ann", password_hash="OLD")
        fixed_mapper.to_entity(AdminForumUserModel(id=1, name="ann", password_hash="  "), user)
        assert user.password_hash == "OLD"
