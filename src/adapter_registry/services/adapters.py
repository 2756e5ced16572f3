"""
Adapter service façade coordinating the registry, module factories and context.

CLI commands and embedding applications go through :class:`AdapterServices`
so module lookup, compatibility reporting and adapter creation share one
registry and one execution context.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..adapters.base import AdapterError, AdapterErrorCode
from ..config import RegistrySettings
from ..core.compatibility import CompatibilityReport, CompatibleAdapter, check_adapter_compatibility, check_cross_module_compatibility, find_compatible_adapters, get_compatibility_report
from ..core.context import ExecutionContext
from ..core.proxy import AdapterProxy
from ..core.registry import AdapterMetadata, AdapterRegistry
from .crosschain import CROSSCHAIN_FACTORY
from .factory import AdapterRequest, ModuleFactory
from .smart_contract import SMART_CONTRACT_FACTORY
from .wallet import WALLET_FACTORY

MODULE_FACTORIES: Dict[str, ModuleFactory] = {
    factory.module_name: factory for factory in (WALLET_FACTORY, SMART_CONTRACT_FACTORY, CROSSCHAIN_FACTORY)
}


def build_default_registry(settings: Optional[RegistrySettings] = None) -> AdapterRegistry:
    """
    Return a fresh registry holding every bundled module.

    Each module is initialised on its own registry first and the results are
    merged, mirroring how independently loaded modules combine at runtime.
    """

    strict = bool(settings.verify_capability_methods) if settings else False
    merged = AdapterRegistry(verify_capability_methods=strict)
    for factory in MODULE_FACTORIES.values():
        merged.merge_registry(factory.initialize(AdapterRegistry(verify_capability_methods=strict)))
    return merged


@dataclass(slots=True)
class AdapterServices:
    """High-level façade used by CLI commands and embedding applications."""

    registry: AdapterRegistry
    context: ExecutionContext
    logger: LoggerAdapter = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = self.context.get_logger(self.__class__.__name__)

    @classmethod
    def build_default(cls, context: Optional[ExecutionContext] = None) -> "AdapterServices":
        ctx = context or ExecutionContext.build_default()
        return cls(registry=build_default_registry(ctx.settings), context=ctx)

    def factory_for(self, module_name: str) -> ModuleFactory:
        factory = MODULE_FACTORIES.get(module_name)
        if factory is None:
            raise AdapterError(
                f"Module '{module_name}' has no factory. Known modules: {', '.join(sorted(MODULE_FACTORIES))}.",
                code=AdapterErrorCode.ADAPTER_NOT_FOUND,
            )
        return factory

    def list_adapters(self, module_name: Optional[str] = None) -> List[AdapterMetadata]:
        """Return registered adapters, optionally limited to one module, sorted by key."""

        if module_name:
            entries = self.registry.get_module_adapters(module_name)
        else:
            entries = list(self.registry.iter_adapters())
        return sorted(entries, key=lambda metadata: (metadata.module, metadata.name, metadata.version))

    def resolve_adapter(self, module_name: str, name: str, version: Optional[str] = None) -> AdapterMetadata:
        """Fetch metadata for an exact version, or the latest one, or raise ``ADAPTER_NOT_FOUND``."""

        metadata = self.registry.get_adapter(module_name, name, version) if version else self.registry.get_latest_adapter(module_name, name)
        if metadata is None:
            available = self.registry.get_adapter_versions(module_name, name)
            raise AdapterError(
                f"Adapter '{name}' version '{version or 'latest'}' not found for {module_name} module. Available versions: {', '.join(available) or 'none'}.",
                code=AdapterErrorCode.ADAPTER_NOT_FOUND,
            )
        return metadata

    async def create_adapter(
        self,
        module_name: str,
        name: str,
        version: Optional[str] = None,
        options: Optional[Mapping[str, Any]] = None,
        expected_interface: Optional[str] = None,
    ) -> AdapterProxy:
        request = AdapterRequest(name=name, version=version, options=dict(options or {}), expected_interface=expected_interface)
        return await self.factory_for(module_name).create(request, registry=self.registry, context=self.context)

    def is_compatible(self, source: Sequence[str], target: Sequence[str]) -> bool:
        """``source`` and ``target`` are ``(module, adapter, version)`` triples."""

        return check_cross_module_compatibility(self.registry, *source, *target, self.context.active_environments())

    def compatibility_report(self, source: Sequence[str], target: Sequence[str]) -> CompatibilityReport:
        report = get_compatibility_report(self.registry, *source, *target, self.context.active_environments())
        self.logger.debug("Compatibility report generated", extra={"compatible": report.compatible, "conflicts": len(report.conflicts)})
        return report

    def compatible_adapters(self, module_name: str, name: str, version: str) -> List[CompatibleAdapter]:
        return find_compatible_adapters(self.registry, module_name, name, version, self.context.active_environments())

    def version_report(self, module_name: str, name: str, versions: Sequence[str]) -> CompatibilityReport:
        return check_adapter_compatibility(self.registry, module_name, name, versions)


__all__ = ["AdapterServices", "MODULE_FACTORIES", "build_default_registry"]
