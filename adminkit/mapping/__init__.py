"""
adminkit mapping - projection rules and admin-model conversion.

Core exports:
- TypeMap, MapperProfile, MapperConfiguration, Mapper: declarative object mapping
- BaseMapperConfig: base of an application's mapping setup
- AdminModelMapper: entity ↔ admin model conversion and save stamping
"""

from .config import (
    BaseMapperConfig,
    Mapper,
    MapperConfiguration,
    MapperProfile,
    TypeMap,
    members_of,
    read_member,
)
from .admin import AdminModelMapper

__all__ = [
    "BaseMapperConfig",
    "Mapper",
    "MapperConfiguration",
    "MapperProfile",
    "TypeMap",
    "members_of",
    "read_member",
    "AdminModelMapper",
]
