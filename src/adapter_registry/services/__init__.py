"""
Service-layer helpers orchestrating module factories, registries and execution context.
"""

from .adapters import MODULE_FACTORIES, AdapterServices, build_default_registry
from .crosschain import create_crosschain, initialize_crosschain_module
from .factory import AdapterRequest, ModuleFactory
from .smart_contract import create_contract_handler, initialize_smart_contract_module
from .wallet import create_wallet, initialize_wallet_module

__all__ = [
    "AdapterRequest",
    "AdapterServices",
    "MODULE_FACTORIES",
    "ModuleFactory",
    "build_default_registry",
    "create_contract_handler",
    "create_crosschain",
    "create_wallet",
    "initialize_crosschain_module",
    "initialize_smart_contract_module",
    "initialize_wallet_module",
]
