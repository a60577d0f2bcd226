"""
Fault taxonomy: codes, domains, severities and logging.
"""

import logging

import pytest

from adminkit.faults import (
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


class TestFaultBase:

    def test_requires_code_message_and_domain(self):
        with pytest.raises(TypeError, match="missing required"):
            Fault(code="X")

    def test_domain_sets_default_severity(self):
        fault = Fault(code="X", message="boom", domain=FaultDomain.SCHEMA)
        assert fault.severity is Severity.FATAL

    def test_str_includes_code(self):
        fault = Fault(code="X_CODE", message="boom", domain=FaultDomain.CONFIG)
        assert str(fault) == "[X_CODE] boom"

    def test_to_dict(self):
        fault = Fault(
            code="X", message="boom", domain=FaultDomain.ROUTING,
            public=True, metadata={"k": 1},
        )
        assert fault.to_dict() == {
            "code": "X",
            "message": "boom",
            "domain": "routing",
            "severity": "error",
            "public": True,
            "metadata": {"k": 1},
        }

    def test_log_uses_severity_level(self, caplog):
        logger = logging.getLogger("adminkit.test")
        fault = FieldValueFault({"name": ["Name is required"]})
        with caplog.at_level(logging.DEBUG, logger="adminkit.test"):
            fault.log(logger)
        assert caplog.records[-1].levelno == logging.WARNING
        assert "FIELD_INVALID" in caplog.records[-1].getMessage()

    def test_domain_equality(self):
        assert FaultDomain.CONFIG == FaultDomain("config")
        assert FaultDomain.CONFIG == "config"
        assert hash(FaultDomain.CONFIG) == hash(FaultDomain("config"))


class TestConcreteFaults:

    def test_schema_fault_prefixes_model(self):
        fault = SchemaFault("SystemSettings", "duplicate", field="x")
        assert fault.message == "SystemSettings: duplicate"
        assert fault.metadata["field"] == "x"
        assert fault.domain == FaultDomain.SCHEMA

    def test_missing_end_container_is_public(self):
        fault = MissingEndContainerFault("Too many EndTab attributes found.")
        assert fault.public
        assert fault.code == "STRUCTURE_UNBALANCED"

    def test_mapping_config_fault_lists_errors(self):
        fault = MappingConfigFault("invalid", errors=["a", "b"])
        assert fault.errors == ["a", "b"]
        assert "a" in fault.message and "b" in fault.message

    def test_unmapped_type_fault(self):
        fault = UnmappedTypeFault(int, str)
        assert fault.message == "No mapping registered from int to str"
        assert fault.severity is Severity.ERROR

    def test_field_value_fault_carries_errors(self):
        fault = FieldValueFault({"smtp_port": ["bad"]})
        assert fault.field_errors == {"smtp_port": ["bad"]}
        assert fault.public

    def test_unknown_settings_fault(self):
        fault = UnknownSettingsFault("Nope", ["SystemSettings"])
        assert "Nope" in fault.message
        assert fault.metadata["available"] == ["SystemSettings"]

    def test_route_not_found_fault(self):
        fault = RouteNotFoundFault("admin.list", "missing parameter(s): entity")
        assert "admin.list" in fault.message
        assert not fault.public

    def test_config_fault_code(self):
        assert ConfigFault("bad").code == "CONFIG_INVALID"
        assert ConfigFault("bad", code="CONFIG_MISSING").code == "CONFIG_MISSING"

    def test_faults_are_exceptions(self):
        with pytest.raises(Fault):
            raise ConfigFault("bad")
