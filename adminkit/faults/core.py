"""
adminkit faults - Core types and fault taxonomy.

Defines:
- Fault base class (structured fault objects)
- FaultDomain (explicit fault domains)
- Severity levels
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines the logging level used when a fault is reported.
    """
    INFO = "info"       # Informational, no action needed
    WARN = "warn"       # Warning, should be reviewed
    ERROR = "error"     # Error, the operation failed
    FATAL = "fatal"     # Fatal, the owning object is unusable

    @property
    def log_level(self) -> int:
        return _LOG_LEVELS[self]


_LOG_LEVELS = {
    Severity.INFO: logging.INFO,
    Severity.WARN: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


# Standard Domains
FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.SCHEMA = FaultDomain("schema", "Field metadata and schema errors")
FaultDomain.STRUCTURE = FaultDomain("structure", "Form structure (containers/tabs) errors")
FaultDomain.MAPPING = FaultDomain("mapping", "Object mapping configuration errors")
FaultDomain.FIELD = FaultDomain("field", "Field value conversion and validation errors")
FaultDomain.SETTINGS = FaultDomain("settings", "Settings provider errors")
FaultDomain.ROUTING = FaultDomain("routing", "Route lookup errors")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: Severity.FATAL,
    FaultDomain.SCHEMA: Severity.FATAL,
    FaultDomain.STRUCTURE: Severity.FATAL,
    FaultDomain.MAPPING: Severity.FATAL,
    FaultDomain.FIELD: Severity.WARN,
    FaultDomain.SETTINGS: Severity.ERROR,
    FaultDomain.ROUTING: Severity.ERROR,
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Attributes:
        code: Stable machine-readable identifier (e.g., "SCHEMA_DUPLICATE_LABEL")
        message: Human-readable summary
        severity: Fault severity (INFO, WARN, ERROR, FATAL)
        domain: Fault domain (CONFIG, SCHEMA, MAPPING, ...)
        public: Whether the message is safe to show to an admin client
        metadata: Additional context data

    Example:
        ```python
        raise Fault(
            code="SETTINGS_UNKNOWN",
            message="Settings type 'Foo' is not registered",
            domain=FaultDomain.SETTINGS,
            public=True,
        )
        ```
    """

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        public: bool = False,
        metadata: Optional[dict[str, Any]] = None,
    ):
        self.code = code if code is not None else getattr(self, "code", None)
        self.message = message if message is not None else getattr(self, "message", None)
        self.domain = domain if domain is not None else getattr(self, "domain", None)

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        self.severity = severity or DOMAIN_DEFAULTS.get(self.domain, Severity.ERROR)
        self.public = public
        self.metadata = metadata or {}

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize fault to dictionary.

        Returns:
            Dictionary representation suitable for logging/serialization
        """
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "public": self.public,
            "metadata": self.metadata,
        }

    def log(self, logger: logging.Logger) -> None:
        """Report this fault on ``logger`` at its severity's level."""
        logger.log(
            self.severity.log_level,
            f"[{self.domain.value}] {self.code}: {self.message}",
            extra={"fault": self.to_dict()},
        )
