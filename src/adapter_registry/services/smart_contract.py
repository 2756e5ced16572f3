"""Smart-contract module factory."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..adapters.smart_contract import SMART_CONTRACT_MODULE, SMART_CONTRACT_MODULE_VERSION, bundled_smart_contract_adapters
from ..core.context import ExecutionContext
from ..core.proxy import AdapterProxy
from ..core.registry import AdapterRegistry
from .factory import AdapterRequest, ModuleFactory

SMART_CONTRACT_FACTORY = ModuleFactory(
    module_name=SMART_CONTRACT_MODULE,
    module_version=SMART_CONTRACT_MODULE_VERSION,
    manifest=bundled_smart_contract_adapters,
    declarations="smart_contract.yaml",
    operation="create_contract_handler",
    context_label="Contract handler",
)
smart_contract_registry = SMART_CONTRACT_FACTORY.default_registry


def initialize_smart_contract_module(registry: Optional[AdapterRegistry] = None) -> AdapterRegistry:
    return SMART_CONTRACT_FACTORY.initialize(registry)


async def create_contract_handler(
    name: str,
    version: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    expected_interface: Optional[str] = None,
    *,
    registry: Optional[AdapterRegistry] = None,
    context: Optional[ExecutionContext] = None,
) -> AdapterProxy:
    """Create a smart-contract adapter; see :func:`adapter_registry.services.wallet.create_wallet`."""

    request = AdapterRequest(name=name, version=version, options=dict(options or {}), expected_interface=expected_interface)
    return await SMART_CONTRACT_FACTORY.create(request, registry=registry, context=context)


__all__ = ["SMART_CONTRACT_FACTORY", "create_contract_handler", "initialize_smart_contract_module", "smart_contract_registry"]
