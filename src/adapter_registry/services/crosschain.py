"""Cross-chain module factory."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..adapters.crosschain import CROSSCHAIN_MODULE, CROSSCHAIN_MODULE_VERSION, bundled_crosschain_adapters
from ..core.context import ExecutionContext
from ..core.proxy import AdapterProxy
from ..core.registry import AdapterRegistry
from .factory import AdapterRequest, ModuleFactory

CROSSCHAIN_FACTORY = ModuleFactory(
    module_name=CROSSCHAIN_MODULE,
    module_version=CROSSCHAIN_MODULE_VERSION,
    manifest=bundled_crosschain_adapters,
    declarations="crosschain.yaml",
    operation="create_crosschain",
    context_label="Cross-chain adapter",
)
crosschain_registry = CROSSCHAIN_FACTORY.default_registry


def initialize_crosschain_module(registry: Optional[AdapterRegistry] = None) -> AdapterRegistry:
    return CROSSCHAIN_FACTORY.initialize(registry)


async def create_crosschain(
    name: str,
    version: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    expected_interface: Optional[str] = None,
    *,
    registry: Optional[AdapterRegistry] = None,
    context: Optional[ExecutionContext] = None,
) -> AdapterProxy:
    """
    Create a cross-chain adapter.

    The bundled ``memory`` adapter is server-only, so a browser-only context
    fails with ``ENVIRONMENT_MISMATCH`` before construction.
    """

    request = AdapterRequest(name=name, version=version, options=dict(options or {}), expected_interface=expected_interface)
    return await CROSSCHAIN_FACTORY.create(request, registry=registry, context=context)


__all__ = ["CROSSCHAIN_FACTORY", "create_crosschain", "crosschain_registry", "initialize_crosschain_module"]
