from __future__ import annotations

import logging

import pytest

from adapter_registry.adapters.base import AdapterError, AdapterErrorCode
from adapter_registry.core.environment import (
    EnvironmentRequirements,
    RuntimeEnvironment,
    build_environment_requirements,
    detect_current_environments,
    parse_environments,
    supports_environments,
    validate_environment,
)


def test_detect_prefers_override_then_variable(monkeypatch):
    assert detect_current_environments(["browser"]) == {RuntimeEnvironment.BROWSER}
    monkeypatch.setenv("ADAPTER_REGISTRY_ENVIRONMENTS", "server, browser")
    assert detect_current_environments() == {RuntimeEnvironment.SERVER, RuntimeEnvironment.BROWSER}
    monkeypatch.delenv("ADAPTER_REGISTRY_ENVIRONMENTS")
    assert detect_current_environments() == {RuntimeEnvironment.SERVER}


def test_parse_environments_rejects_unknown_names():
    with pytest.raises(ValueError):
        parse_environments(["desktop"])


def test_build_requirements_orders_custom_entries_first():
    requirements = build_environment_requirements("signer", ["server"], limitations=["Needs an HSM"], security_notes=["Rotate keys"])

    assert requirements.supported_environments == (RuntimeEnvironment.SERVER,)
    assert requirements.limitations[0] == "Needs an HSM"
    assert "Cannot be used in browser runtimes" in requirements.limitations
    assert requirements.security_notes[0] == "Rotate keys"
    assert requirements.security_notes[-1] == "signer adapter follows standard security practices"


def test_build_requirements_drops_duplicates():
    requirements = build_environment_requirements("dup", ["server", "server"], limitations=["Requires a regular Python server runtime"])

    assert requirements.supported_environments == (RuntimeEnvironment.SERVER,)
    assert requirements.limitations.count("Requires a regular Python server runtime") == 1


def test_undeclared_environment_is_universal():
    assert validate_environment("any", None, ["browser"]) == []
    assert validate_environment("any", EnvironmentRequirements(), ["server"]) == []
    assert supports_environments(None, [RuntimeEnvironment.BROWSER])


def test_mismatch_lists_limitations():
    requirements = build_environment_requirements("bridge", ["server"])

    with pytest.raises(AdapterError) as excinfo:
        validate_environment("bridge", requirements, ["browser"])

    error = excinfo.value
    assert error.code == AdapterErrorCode.ENVIRONMENT_MISMATCH.value
    assert error.method_name == "validate_environment"
    lines = error.message.splitlines()
    assert lines[0] == "Adapter 'bridge' requires server environment but detected browser."
    assert "Cannot be used in browser runtimes" in lines
    assert error.details["detected_environments"] == ["browser"]


def test_accepted_adapter_logs_security_notes(caplog):
    requirements = build_environment_requirements("wallet", ["server", "browser"])

    with caplog.at_level(logging.WARNING):
        notes = validate_environment("wallet", requirements, ["server"])

    assert notes == list(requirements.security_notes)
    assert "Security note for wallet: wallet adapter follows standard security practices" in caplog.text
    assert not supports_environments(build_environment_requirements("x", ["browser"]), [RuntimeEnvironment.SERVER])
