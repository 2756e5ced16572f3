"""
Adapter contracts and the bundled in-memory reference adapters.

Concrete adapters live in submodules keyed by module (``wallet``,
``smart_contract``, ``crosschain``). Each ships a registration unit describing
its metadata so the factory layer can register it on demand.
"""

from .base import AdapterConstructor, AdapterError, AdapterErrorCode, CrossChainErrorCode, SmartContractErrorCode, WalletErrorCode

__all__ = [
    "AdapterConstructor",
    "AdapterError",
    "AdapterErrorCode",
    "CrossChainErrorCode",
    "SmartContractErrorCode",
    "WalletErrorCode",
]
