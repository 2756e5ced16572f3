"""
Factory orchestration shared by the wallet, smart-contract and crosschain modules.

A :class:`ModuleFactory` owns one module's bundled adapter manifest and YAML
declarations. ``create`` runs the full pipeline: idempotent registration,
metadata lookup, environment check, parameter validation, construction and
wrapping in the error-normalizing proxy. Nothing is retried; every failure is
raised to the caller as an :class:`AdapterError`.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from importlib import resources
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..adapters.base import AdapterError, AdapterErrorCode
from ..core.context import ExecutionContext
from ..core.environment import validate_environment
from ..core.logging import log_progress
from ..core.proxy import AdapterProxy, wrap_adapter
from ..core.registry import AdapterMetadata, AdapterRegistry, RegistryDeclarations, parse_declarations
from ..core.validator import validate_adapter_parameters

DECLARATIONS_PACKAGE = "adapter_registry.resources.registry"


@dataclass(slots=True)
class AdapterRequest:
    """
    Caller request for an adapter.

    Attributes
    ----------
    name:
        Adapter name within the module.
    version:
        Exact version, or ``None`` for the highest registered version.
    options:
        Construction options passed to the adapter's ``create``.
    expected_interface:
        Optional interface shape the adapter must satisfy.
    """

    name: str
    version: Optional[str] = None
    options: Mapping[str, Any] = field(default_factory=dict)
    expected_interface: Optional[str] = None

    def as_params(self, version: Optional[str] = None) -> Dict[str, Any]:
        """Return the parameters object the validator resolves requirement paths against."""

        return {
            "name": self.name,
            "version": version or self.version,
            "options": dict(self.options or {}),
            "expected_interface": self.expected_interface,
        }


@dataclass(slots=True)
class ModuleFactory:
    """
    Factory for one module.

    Parameters
    ----------
    module_name:
        Registry module name (``wallet``, ``smart-contract``, ``crosschain``).
    module_version:
        Version registered for the module.
    manifest:
        Callable returning the bundled adapter metadata.
    declarations:
        YAML file name under ``adapter_registry.resources.registry``.
    operation:
        Public factory function name, recorded as ``method_name`` on errors.
    context_label:
        Label used in normalized error messages raised by wrapped adapters.
    """

    module_name: str
    module_version: str
    manifest: Callable[[], List[AdapterMetadata]]
    declarations: str
    operation: str
    context_label: str
    default_registry: AdapterRegistry = field(default_factory=AdapterRegistry)
    _bundled: Optional[List[AdapterMetadata]] = field(default=None, init=False, repr=False)
    _declarations: Optional[RegistryDeclarations] = field(default=None, init=False, repr=False)

    def bundled_adapters(self) -> List[AdapterMetadata]:
        if self._bundled is None:
            self._bundled = list(self.manifest())
        return list(self._bundled)

    def parsed_declarations(self) -> RegistryDeclarations:
        """Parse the module's declarations file once and reuse the result."""

        if self._declarations is None:
            with resources.as_file(resources.files(DECLARATIONS_PACKAGE) / self.declarations) as resolved:
                self._declarations = parse_declarations(resolved)
        return self._declarations

    def initialize(self, registry: Optional[AdapterRegistry] = None) -> AdapterRegistry:
        """
        Register the module, its declarations and bundled adapters on ``registry``.

        Entries already present are left untouched so repeated calls are cheap
        and never override caller registrations.
        """

        target = registry if registry is not None else self.default_registry
        if target.get_module(self.module_name) is None:
            target.register_module(self.module_name, self.module_version)
        target.apply_declarations(self.parsed_declarations(), self.module_name, replace=False)
        for metadata in self.bundled_adapters():
            if target.get_adapter(self.module_name, metadata.name, metadata.version) is None:
                target.register_adapter(self.module_name, metadata)
        return target

    def _not_found(self, registry: AdapterRegistry, request: AdapterRequest) -> AdapterError:
        versions = registry.get_adapter_versions(self.module_name, request.name)
        requested = f"version '{request.version}'" if request.version else "(latest version)"
        return AdapterError(
            f"Adapter '{request.name}' {requested} not found for {self.module_name} module. Available versions: {', '.join(versions) or 'none'}.",
            code=AdapterErrorCode.ADAPTER_NOT_FOUND,
            method_name=self.operation,
            details={"module": self.module_name, "adapter": request.name, "requested_version": request.version, "available_versions": versions},
        )

    async def _construct(self, metadata: AdapterMetadata, options: Mapping[str, Any]) -> Any:
        constructor = getattr(metadata.adapter_class, "create", None)
        if not callable(constructor):
            raise AdapterError(
                f"Adapter '{metadata.key}' does not expose a create() constructor.",
                code=AdapterErrorCode.INITIALIZATION_FAILED,
                method_name=self.operation,
            )
        try:
            instance = constructor(name=metadata.name, version=metadata.version, options=dict(options))
            if inspect.isawaitable(instance):
                instance = await instance
        except AdapterError:
            raise
        except Exception as exc:
            raise AdapterError(
                f"Failed to initialize adapter '{metadata.key}': {exc}",
                code=AdapterErrorCode.INITIALIZATION_FAILED,
                method_name=self.operation,
                cause=exc,
            ) from exc
        if instance is None:
            raise AdapterError(
                f"Adapter '{metadata.key}' create() returned no instance.",
                code=AdapterErrorCode.INITIALIZATION_FAILED,
                method_name=self.operation,
            )
        return instance

    async def create(
        self,
        request: AdapterRequest,
        *,
        registry: Optional[AdapterRegistry] = None,
        context: Optional[ExecutionContext] = None,
    ) -> AdapterProxy:
        """
        Build a validated, capability-gated adapter instance.

        Raises
        ------
        AdapterError
            ``ADAPTER_NOT_FOUND``, ``ENVIRONMENT_MISMATCH``, validator codes or
            ``INITIALIZATION_FAILED``.
        """

        ctx = context or ExecutionContext.build_default()
        logger = ctx.get_logger(f"{__name__}.{self.module_name}", extra={"module_name": self.module_name, "adapter": request.name})
        target = self.initialize(registry)

        metadata = target.get_adapter(self.module_name, request.name, request.version) if request.version else target.get_latest_adapter(self.module_name, request.name)
        if metadata is None:
            log_progress(logger, "Adapter lookup failed", phase="resolve", status="failed", level=logging.WARNING)
            raise self._not_found(target, request)
        logger = logger.bind(version=metadata.version)
        log_progress(logger, "Adapter resolved", phase="resolve", status="ok")

        validate_environment(metadata.name, metadata.environment, ctx.active_environments())
        validate_adapter_parameters(
            name=metadata.name,
            version=metadata.version,
            params=request.as_params(metadata.version),
            adapter_metadata=metadata,
            registry=target,
            calling_operation=self.operation,
        )
        log_progress(logger, "Adapter parameters validated", phase="validate", status="ok")

        instance = await self._construct(metadata, request.options or {})
        log_progress(logger, "Adapter constructed", phase="construct", status="ok")
        return wrap_adapter(
            instance,
            metadata.capabilities,
            error_map=metadata.error_map,
            default_error_code=metadata.default_error_code,
            context_name=self.context_label,
        )


__all__ = ["AdapterRequest", "DECLARATIONS_PACKAGE", "ModuleFactory"]
