"""
Construction-parameter validation for adapters.

The validator runs once per factory call, before the adapter is constructed. It
proves two things from declared metadata alone: the adapter claims every
capability of a requested interface shape, and the caller's parameters satisfy
the adapter's requirement list.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from ..adapters.base import AdapterError, AdapterErrorCode
from .registry import AdapterMetadata, AdapterRegistry
from .schema import Requirement

_MISSING = object()


def get_property_by_path(params: Any, path: str) -> Any:
    """
    Resolve a dot-separated ``path`` against nested mappings.

    Returns ``None`` when any segment is missing or when resolution reaches a
    non-mapping value (arrays and primitives terminate the walk).
    """

    current = params
    for segment in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(segment, _MISSING)
        if current is _MISSING:
            return None
    return current


def runtime_type_name(value: Any) -> str:
    """Return the requirement type name describing ``value``."""

    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, (list, tuple)):
        return "array"
    if callable(value):
        return "function"
    return "object"


def _check_interface(name: str, version: str, expected_interface: str, metadata: AdapterMetadata, registry: AdapterRegistry, calling_operation: str) -> None:
    shape = registry.get_interface_shape(expected_interface)
    if shape is None:
        raise AdapterError(
            f"Interface shape '{expected_interface}' is not registered; cannot validate adapter '{name}@{version}'.",
            code=AdapterErrorCode.INTERNAL_ERROR,
            method_name=calling_operation,
            details={"expected_interface": expected_interface},
        )
    claimed = set(metadata.capabilities)
    for capability in shape:
        if capability not in claimed:
            raise AdapterError(
                f"Adapter '{name}@{version}' does not fully implement the '{expected_interface}' interface. Missing capability: '{capability.value}'.",
                code=AdapterErrorCode.INCOMPATIBLE_ADAPTER,
                method_name=calling_operation,
                details={"expected_interface": expected_interface, "missing_capability": capability.value},
            )


def _check_requirement(name: str, requirement: Requirement, params: Any, calling_operation: str) -> None:
    if requirement.condition_path and get_property_by_path(params, requirement.condition_path) is None:
        return

    value = get_property_by_path(params, requirement.path)
    if value is None:
        if requirement.allow_undefined:
            return
        message = requirement.message or f"Required option '{requirement.path}' is missing for adapter '{name}'."
        raise AdapterError(
            message,
            code=AdapterErrorCode.MISSING_ADAPTER_REQUIREMENT,
            method_name=calling_operation,
            details={"path": requirement.path, "message": requirement.message},
        )

    if not requirement.type or requirement.type == "any":
        return
    actual = runtime_type_name(value)
    if actual != requirement.type:
        message = requirement.message or f"Required option '{requirement.path}' for adapter '{name}' must be of type '{requirement.type}', but received '{actual}'."
        raise AdapterError(
            message,
            code=AdapterErrorCode.INVALID_ADAPTER_REQUIREMENT_TYPE,
            method_name=calling_operation,
            details={"path": requirement.path, "message": requirement.message, "expected_type": requirement.type, "actual_type": actual},
        )


def validate_adapter_parameters(
    *,
    name: str,
    version: str,
    params: Mapping[str, Any],
    adapter_metadata: AdapterMetadata,
    registry: AdapterRegistry,
    calling_operation: str,
) -> None:
    """
    Validate ``params`` against ``adapter_metadata``.

    Parameters
    ----------
    name, version:
        Identify the adapter in error messages.
    params:
        Caller parameters, typically ``{"name", "version", "options",
        "expected_interface"}``.
    adapter_metadata:
        Registered metadata for the adapter.
    registry:
        Registry holding the interface shapes.
    calling_operation:
        Factory operation recorded as ``method_name`` on raised errors.

    Raises
    ------
    AdapterError
        ``INTERNAL_ERROR`` for an unknown interface shape,
        ``INCOMPATIBLE_ADAPTER`` for a missing capability,
        ``MISSING_ADAPTER_REQUIREMENT`` or ``INVALID_ADAPTER_REQUIREMENT_TYPE``
        for parameter problems.
    """

    expected_interface: Optional[str] = params.get("expected_interface") if isinstance(params, Mapping) else None
    if expected_interface:
        _check_interface(name, version, expected_interface, adapter_metadata, registry, calling_operation)

    for requirement in adapter_metadata.requirements:
        _check_requirement(name, requirement, params, calling_operation)


__all__ = ["get_property_by_path", "runtime_type_name", "validate_adapter_parameters"]
