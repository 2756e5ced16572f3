"""
Runtime environment detection and adapter environment checks.

A process reports the set of named environments it currently satisfies. Adapters
declare the subset they support; a factory refuses to construct an adapter when
the two sets do not intersect.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence

from ..adapters.base import AdapterError, AdapterErrorCode
from .logging import get_logger, log_progress

ENVIRONMENT_OVERRIDE_VAR = "ADAPTER_REGISTRY_ENVIRONMENTS"

LOGGER = get_logger(__name__)


class RuntimeEnvironment(str, Enum):
    """Named runtime contexts an adapter can support."""

    SERVER = "server"
    BROWSER = "browser"


@dataclass(frozen=True, slots=True)
class EnvironmentRequirements:
    """
    Environment declaration attached to adapter metadata.

    Attributes
    ----------
    supported_environments:
        Environments the adapter can run in.
    limitations:
        Human-readable constraints listed when the adapter is rejected.
    security_notes:
        Advisory notes surfaced as warnings when the adapter is accepted.
    """

    supported_environments: Sequence[RuntimeEnvironment] = field(default_factory=tuple)
    limitations: Sequence[str] = field(default_factory=tuple)
    security_notes: Sequence[str] = field(default_factory=tuple)


_DEFAULT_LIMITATIONS = {
    RuntimeEnvironment.BROWSER: (
        "Requires a browser runtime such as Pyodide with access to the host page",
        "Cannot be used in regular server interpreters",
        "May require user interaction for authentication flows",
    ),
    RuntimeEnvironment.SERVER: (
        "Requires a regular Python server runtime",
        "Cannot be used in browser runtimes",
    ),
}

_DEFAULT_SECURITY_NOTES = {
    RuntimeEnvironment.BROWSER: (
        "Ensure secure handling of private keys in browser environment",
        "Consider using hardware wallets for enhanced security",
    ),
    RuntimeEnvironment.SERVER: (
        "Server environments provide better security for sensitive operations",
        "Ensure proper private key management and storage",
    ),
}


def parse_environments(values: Iterable[RuntimeEnvironment | str]) -> FrozenSet[RuntimeEnvironment]:
    """Convert environment names into members, raising ``ValueError`` on unknown names."""

    parsed = set()
    for value in values:
        if isinstance(value, RuntimeEnvironment):
            parsed.add(value)
            continue
        text = str(value).strip().lower()
        if text:
            parsed.add(RuntimeEnvironment(text))
    return frozenset(parsed)


def detect_current_environments(override: Optional[Iterable[RuntimeEnvironment | str]] = None) -> FrozenSet[RuntimeEnvironment]:
    """
    Report the environments active in the current process.

    Parameters
    ----------
    override:
        Explicit environment set. When omitted the comma-separated
        ``ADAPTER_REGISTRY_ENVIRONMENTS`` variable is consulted before falling
        back to interpreter inspection.
    """

    if override is not None:
        explicit = parse_environments(override)
        if explicit:
            return explicit

    env_value = os.getenv(ENVIRONMENT_OVERRIDE_VAR)
    if env_value:
        explicit = parse_environments(env_value.split(","))
        if explicit:
            return explicit

    if sys.platform == "emscripten" or "pyodide" in sys.modules:
        return frozenset({RuntimeEnvironment.BROWSER})
    return frozenset({RuntimeEnvironment.SERVER})


def build_environment_requirements(
    adapter_name: str,
    supported: Iterable[RuntimeEnvironment | str],
    limitations: Optional[Iterable[str]] = None,
    security_notes: Optional[Iterable[str]] = None,
) -> EnvironmentRequirements:
    """
    Build an environment declaration enriched with per-environment defaults.

    Custom limitations and notes come first, followed by the defaults for each
    supported environment and a closing note naming the adapter. Duplicates are
    dropped while keeping the first occurrence.
    """

    environments = [RuntimeEnvironment(value) if not isinstance(value, RuntimeEnvironment) else value for value in supported]
    collected_limitations: List[str] = list(limitations or ())
    collected_notes: List[str] = list(security_notes or ())
    for environment in environments:
        collected_limitations.extend(_DEFAULT_LIMITATIONS.get(environment, ()))
        collected_notes.extend(_DEFAULT_SECURITY_NOTES.get(environment, ()))
    collected_notes.append(f"{adapter_name} adapter follows standard security practices")

    return EnvironmentRequirements(
        supported_environments=tuple(dict.fromkeys(environments)),
        limitations=tuple(dict.fromkeys(collected_limitations)),
        security_notes=tuple(dict.fromkeys(collected_notes)),
    )


def _describe(environments: Iterable[RuntimeEnvironment]) -> str:
    return ", ".join(sorted(environment.value for environment in environments)) or "none"


def validate_environment(
    adapter_name: str,
    requirements: Optional[EnvironmentRequirements],
    environments: Optional[Iterable[RuntimeEnvironment | str]] = None,
) -> List[str]:
    """
    Check that ``adapter_name`` can run in the active environment.

    Parameters
    ----------
    adapter_name:
        Adapter being checked. Used in messages only.
    requirements:
        The adapter's declaration. ``None`` or an empty supported set means the
        adapter runs anywhere.
    environments:
        Active environment set. Detected when omitted.

    Returns
    -------
    list[str]
        Security notes that apply to the accepted adapter. Each is also logged as
        a warning.

    Raises
    ------
    AdapterError
        ``ENVIRONMENT_MISMATCH`` when declared and active environments are disjoint.
    """

    if requirements is None or not requirements.supported_environments:
        return []

    active = detect_current_environments(environments)
    supported = frozenset(requirements.supported_environments)
    if not supported & active:
        lines = [f"Adapter '{adapter_name}' requires {_describe(supported)} environment but detected {_describe(active)}."]
        lines.extend(requirements.limitations)
        raise AdapterError(
            "\n".join(lines),
            code=AdapterErrorCode.ENVIRONMENT_MISMATCH,
            method_name="validate_environment",
            details={
                "adapter": adapter_name,
                "supported_environments": sorted(environment.value for environment in supported),
                "detected_environments": sorted(environment.value for environment in active),
                "limitations": list(requirements.limitations),
            },
        )

    notes = list(requirements.security_notes)
    for note in notes:
        log_progress(LOGGER, f"Security note for {adapter_name}: {note}", phase="environment", level=logging.WARNING, extra={"adapter": adapter_name})
    return notes


def supports_environments(requirements: Optional[EnvironmentRequirements], active: Iterable[RuntimeEnvironment]) -> bool:
    """Return ``True`` when ``requirements`` is undeclared or intersects ``active``."""

    if requirements is None or not requirements.supported_environments:
        return True
    return bool(frozenset(requirements.supported_environments) & frozenset(active))


__all__ = [
    "ENVIRONMENT_OVERRIDE_VAR",
    "EnvironmentRequirements",
    "RuntimeEnvironment",
    "build_environment_requirements",
    "detect_current_environments",
    "parse_environments",
    "supports_environments",
    "validate_environment",
]
