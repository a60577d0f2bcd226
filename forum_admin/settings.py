"""Forum settings pages."""

from adminkit.fields import CheckboxWidget
from adminkit.schema import SchemaBuilder
from adminkit.settings import MasterSettingsBase, SystemSettingsBase


class SystemSettings(SystemSettingsBase):

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.field(
            "is_site_locked",
            "Site Locked",
            CheckboxWidget(),
            tooltip="When locked, all public forum operations are blocked.",
            list=True,
        )


class MasterSettings(MasterSettingsBase):
    pass
