"""Cross-chain adapters bundled with the registry."""

from .memory import MemoryCrossChainAdapter, MemoryCrossChainOptions, OperationStatus
from .registration import CROSSCHAIN_MODULE, CROSSCHAIN_MODULE_VERSION, bundled_crosschain_adapters, memory_crosschain_metadata

__all__ = [
    "CROSSCHAIN_MODULE",
    "CROSSCHAIN_MODULE_VERSION",
    "MemoryCrossChainAdapter",
    "MemoryCrossChainOptions",
    "OperationStatus",
    "bundled_crosschain_adapters",
    "memory_crosschain_metadata",
]
