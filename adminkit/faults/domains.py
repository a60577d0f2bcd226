"""
adminkit faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults
- SCHEMA faults
- STRUCTURE faults
- MAPPING faults
- FIELD faults
- SETTINGS faults
- ROUTING faults
"""

from typing import Any, Dict, List, Optional

from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Configuration is missing or has the wrong shape."""

    def __init__(
        self,
        message: str,
        *,
        code: str = "CONFIG_INVALID",
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            metadata=metadata,
        )


# ============================================================================
# SCHEMA Faults
# ============================================================================

class SchemaFault(Fault):
    """
    A model's field declarations are inconsistent.

    Raised while a schema is being built: duplicate names or display
    labels, a widget that cannot render the declared value type, or a
    subclass redeclaring an inherited field.
    """

    def __init__(
        self,
        model: str,
        message: str,
        *,
        code: str = "SCHEMA_INVALID",
        field: str | None = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=f"{model}: {message}",
            domain=FaultDomain.SCHEMA,
            metadata={"model": model, "field": field, **(metadata or {})},
        )
        self.model = model
        self.field = field


# ============================================================================
# STRUCTURE Faults
# ============================================================================

class MissingEndContainerFault(Fault):
    """A container or tab lacks its closing marker (or is closed wrongly)."""

    def __init__(self, message: str, *, metadata: Optional[dict[str, Any]] = None):
        super().__init__(
            code="STRUCTURE_UNBALANCED",
            message=message,
            domain=FaultDomain.STRUCTURE,
            public=True,
            metadata=metadata,
        )


# ============================================================================
# MAPPING Faults
# ============================================================================

class MappingConfigFault(Fault):
    """A mapping rule is invalid; raised while the configuration is built."""

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[List[str]] = None,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.errors: List[str] = list(errors or [])
        if self.errors:
            message = f"{message}:\n  " + "\n  ".join(self.errors)
        super().__init__(
            code="MAPPING_CONFIG_INVALID",
            message=message,
            domain=FaultDomain.MAPPING,
            metadata={"errors": self.errors, **(metadata or {})},
        )


class UnmappedTypeFault(Fault):
    """No type map is registered for the requested source/destination pair."""

    def __init__(self, source: type, destination: type):
        super().__init__(
            code="MAPPING_MISSING_MAP",
            message=(
                f"No mapping registered from {source.__name__} "
                f"to {destination.__name__}"
            ),
            domain=FaultDomain.MAPPING,
            severity=Severity.ERROR,
            metadata={"source": source.__name__, "destination": destination.__name__},
        )


# ============================================================================
# FIELD Faults
# ============================================================================

class FieldValueFault(Fault):
    """One or more submitted values failed conversion or validation."""

    def __init__(
        self,
        errors: Dict[str, List[str]],
        *,
        message: str = "Validation failed",
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.field_errors: Dict[str, List[str]] = errors
        super().__init__(
            code="FIELD_INVALID",
            message=message,
            domain=FaultDomain.FIELD,
            public=True,
            metadata={"field_errors": errors, **(metadata or {})},
        )


# ============================================================================
# SETTINGS Faults
# ============================================================================

class UnknownSettingsFault(Fault):
    """Settings class name is not registered with the provider."""

    def __init__(self, name: str, available: List[str]):
        super().__init__(
            code="SETTINGS_UNKNOWN",
            message=f"Unknown settings type '{name}'. Available: {available}",
            domain=FaultDomain.SETTINGS,
            public=True,
            metadata={"requested": name, "available": available},
        )


# ============================================================================
# ROUTING Faults
# ============================================================================

class RouteNotFoundFault(Fault):
    """Route name is unknown or a path parameter is missing."""

    def __init__(self, name: str, reason: str = "no such route"):
        super().__init__(
            code="ROUTE_NOT_FOUND",
            message=f"Cannot build URL for route '{name}': {reason}",
            domain=FaultDomain.ROUTING,
            metadata={"route": name},
        )
