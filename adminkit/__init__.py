"""
adminkit - Field metadata and settings framework for admin panels.

Complete integration of:
- Fields: widgets (field-type plugins) and field descriptors
- Schema: explicit field registration, inheritance and form structures
- Mapping: declarative object mapping and the admin-model save pipeline
- Settings: settings pages stored as JSON records
- Web: named routes, Jinja2 client shell and an ASGI admin application
- Faults: structured error handling with fault domains
"""

__version__ = "0.1.0"

# ============================================================================
# Core
# ============================================================================

from .config import ApiConfig, ConfigLoader
from .faults import (
    ConfigFault,
    Fault,
    FaultDomain,
    FieldValueFault,
    MappingConfigFault,
    MissingEndContainerFault,
    RouteNotFoundFault,
    SchemaFault,
    Severity,
    UnknownSettingsFault,
    UnmappedTypeFault,
)

# ============================================================================
# Field metadata
# ============================================================================

from .fields import (
    FieldDescriptor,
    FieldRole,
    FieldWidth,
    Widget,
    WidgetKind,
    widgets,
)
from .schema import (
    AdminModel,
    FormStructure,
    SaveContext,
    Schema,
    SchemaBuilder,
    build_structure,
    schema_cache,
)

# ============================================================================
# Mapping, settings and web
# ============================================================================

from .mapping import AdminModelMapper, BaseMapperConfig, MapperConfiguration, MapperProfile
from .settings import (
    InMemorySettingsStore,
    MasterSettingsBase,
    SettingsProvider,
    SystemSettingsBase,
)
from .models import AdminRoleModelBase, AdminUserModelBase
from .web import AdminApp, AdminShell, EntityAdmin, InMemoryRepository, RouteTable

__all__ = [
    "__version__",
    # Core
    "ApiConfig",
    "ConfigLoader",
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "SchemaFault",
    "MissingEndContainerFault",
    "MappingConfigFault",
    "UnmappedTypeFault",
    "FieldValueFault",
    "UnknownSettingsFault",
    "RouteNotFoundFault",
    # Field metadata
    "FieldDescriptor",
    "FieldRole",
    "FieldWidth",
    "Widget",
    "WidgetKind",
    "widgets",
    "AdminModel",
    "FormStructure",
    "SaveContext",
    "Schema",
    "SchemaBuilder",
    "build_structure",
    "schema_cache",
    # Mapping, settings and web
    "AdminModelMapper",
    "BaseMapperConfig",
    "MapperConfiguration",
    "MapperProfile",
    "InMemorySettingsStore",
    "MasterSettingsBase",
    "SettingsProvider",
    "SystemSettingsBase",
    "AdminRoleModelBase",
    "AdminUserModelBase",
    "AdminApp",
    "AdminShell",
    "EntityAdmin",
    "InMemoryRepository",
    "RouteTable",
]
