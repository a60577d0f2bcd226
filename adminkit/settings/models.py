"""
Settings base models.

Applications subclass ``SystemSettingsBase`` (and optionally
``MasterSettingsBase``) and declare only the fields specific to their
deployment.
"""

from __future__ import annotations

import re
from typing import ClassVar, Optional

from ..fields import (
    CheckboxWidget,
    ComplexWidget,
    NumberWidget,
    PictureWidget,
    TextAreaWidget,
    TextWidget,
)
from ..schema import AdminModel, SchemaBuilder


class AdminSettings(AdminModel):
    """Base of every settings page; declares no fields."""

    settings_title: ClassVar[Optional[str]] = None

    @classmethod
    def title(cls) -> str:
        """Page title; derived from the class name unless ``settings_title`` is set."""
        if cls.settings_title:
            return cls.settings_title
        return re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", cls.__name__)


class SystemSettingsBase(AdminSettings):
    """Deployment-specific system settings; subclass to add fields."""

    settings_title = "System Settings"


class EmailSettingsConfig(AdminModel):
    """Outgoing mail settings, edited inline inside master settings."""

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.container("SMTP Server")
        fields.field("smtp_host", "SMTP Host", TextWidget(placeholder="Ex: smtp.domain.com"))
        fields.field("smtp_port", "SMTP Port", NumberWidget(min=1, max=65535),
                     tooltip="25 / 465 / 587", default=587)
        fields.field("enable_ssl", "Enable SSL", CheckboxWidget())
        fields.field("smtp_user", "SMTP Username", TextWidget(),
                     tooltip="If authentication required")
        fields.field("smtp_password", "SMTP Password", TextWidget(),
                     tooltip="If authentication required")
        fields.end_container()

        fields.container("Sender Details")
        fields.field("from_email", "Sender Email Address", TextWidget(max_length=256),
                     tooltip="The email address that will be shown as the origin")
        fields.field("from_name", "Sender Name", TextWidget(),
                     tooltip="The name that will be shown next to the email address")
        fields.end_container()


class MasterSettingsBase(AdminSettings):
    """Site-wide settings owned by the framework administrators."""

    settings_title = "Master Settings"

    @classmethod
    def declare_fields(cls, fields: SchemaBuilder) -> None:
        fields.tab("Site")
        fields.field("site_name", "Site Name", TextWidget(max_length=100), required=True)
        fields.field("site_logo", "Site Logo", PictureWidget())
        fields.field("site_description", "Site Description", TextAreaWidget())
        fields.field("customer_name", "Customer Name", TextWidget())
        fields.field("customer_logo", "Customer Logo", PictureWidget())
        fields.field("contact_email", "Contact Email", TextWidget(max_length=256))
        fields.end_tab()

        fields.tab("Access")
        fields.field("maintenance_mode", "Maintenance Mode", CheckboxWidget())
        fields.field("require_otp_on_login", "Require OTP On Login", CheckboxWidget(),
                     value_type=Optional[bool])
        fields.end_tab()

        fields.tab("Email")
        fields.field("email_settings", "Email Settings", ComplexWidget(EmailSettingsConfig))
        fields.end_tab()
