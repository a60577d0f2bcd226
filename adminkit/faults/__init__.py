"""
adminkit faults - typed fault signals.

Every error raised by the framework is a ``Fault``: a structured exception
with a stable code, a domain, a severity and a public flag that controls
whether its message may reach an admin client.

Core exports:
- Fault: Base fault class
- FaultDomain: Domain taxonomy
- Severity: Severity levels
- Domain faults (ConfigFault, SchemaFault, MissingEndContainerFault, ...)
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
    DOMAIN_DEFAULTS,
)

from .domains import (
    ConfigFault,
    SchemaFault,
    MissingEndContainerFault,
    MappingConfigFault,
    UnmappedTypeFault,
    FieldValueFault,
    UnknownSettingsFault,
    RouteNotFoundFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",
    "DOMAIN_DEFAULTS",

    # Domain faults
    "ConfigFault",
    "SchemaFault",
    "MissingEndContainerFault",
    "MappingConfigFault",
    "UnmappedTypeFault",
    "FieldValueFault",
    "UnknownSettingsFault",
    "RouteNotFoundFault",
]
