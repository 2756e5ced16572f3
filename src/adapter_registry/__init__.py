"""
Runtime adapter registry for wallet, smart-contract and cross-chain modules.

Applications request adapters by name and version through the module
factories. The :mod:`adapter_registry.core` package holds the capability model,
versioned registry, validation, compatibility resolution and the
error-normalizing interception layer. Import ``create_wallet``,
``create_contract_handler`` or ``create_crosschain`` for the main
developer-facing surface.
"""

from .adapters import AdapterError, AdapterErrorCode, CrossChainErrorCode, SmartContractErrorCode, WalletErrorCode
from .core import AdapterMetadata, AdapterRegistry, Capability, ExecutionContext, RuntimeEnvironment
from .services import AdapterRequest, AdapterServices, build_default_registry, create_contract_handler, create_crosschain, create_wallet

__all__ = [
    "AdapterError",
    "AdapterErrorCode",
    "AdapterMetadata",
    "AdapterRegistry",
    "AdapterRequest",
    "AdapterServices",
    "Capability",
    "CrossChainErrorCode",
    "ExecutionContext",
    "RuntimeEnvironment",
    "SmartContractErrorCode",
    "WalletErrorCode",
    "build_default_registry",
    "create_contract_handler",
    "create_crosschain",
    "create_wallet",
]
