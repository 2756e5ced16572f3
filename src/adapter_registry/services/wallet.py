"""Wallet module factory."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from ..adapters.wallet import WALLET_MODULE, WALLET_MODULE_VERSION, bundled_wallet_adapters
from ..core.context import ExecutionContext
from ..core.proxy import AdapterProxy
from ..core.registry import AdapterRegistry
from .factory import AdapterRequest, ModuleFactory

WALLET_FACTORY = ModuleFactory(
    module_name=WALLET_MODULE,
    module_version=WALLET_MODULE_VERSION,
    manifest=bundled_wallet_adapters,
    declarations="wallet.yaml",
    operation="create_wallet",
    context_label="Wallet",
)
wallet_registry = WALLET_FACTORY.default_registry


def initialize_wallet_module(registry: Optional[AdapterRegistry] = None) -> AdapterRegistry:
    """Register the wallet module, its interface shapes and bundled adapters."""

    return WALLET_FACTORY.initialize(registry)


async def create_wallet(
    name: str,
    version: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    expected_interface: Optional[str] = None,
    *,
    registry: Optional[AdapterRegistry] = None,
    context: Optional[ExecutionContext] = None,
) -> AdapterProxy:
    """
    Create a wallet adapter.

    Parameters
    ----------
    name:
        Registered wallet adapter name, e.g. ``memory``.
    version:
        Exact version; the highest registered version is used when omitted.
    options:
        Adapter construction options, validated against the adapter's
        declared requirements before construction.
    expected_interface:
        Optional shape such as ``IEVMWallet`` the adapter must fully implement.
    """

    request = AdapterRequest(name=name, version=version, options=dict(options or {}), expected_interface=expected_interface)
    return await WALLET_FACTORY.create(request, registry=registry, context=context)


__all__ = ["WALLET_FACTORY", "create_wallet", "initialize_wallet_module", "wallet_registry"]
