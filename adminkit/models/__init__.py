"""
adminkit models - base admin user and role models.
"""

from .users import (
    AdminRoleModelBase,
    AdminUserModelBase,
    RoleType,
    hash_password,
    verify_password,
)

__all__ = [
    "AdminRoleModelBase",
    "AdminUserModelBase",
    "RoleType",
    "hash_password",
    "verify_password",
]
