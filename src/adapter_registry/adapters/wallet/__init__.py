"""Wallet adapters bundled with the registry."""

from .memory import MemoryWalletAdapter, MemoryWalletOptions, NetworkOptions
from .registration import WALLET_MODULE, WALLET_MODULE_VERSION, bundled_wallet_adapters, memory_wallet_metadata

__all__ = [
    "MemoryWalletAdapter",
    "MemoryWalletOptions",
    "NetworkOptions",
    "WALLET_MODULE",
    "WALLET_MODULE_VERSION",
    "bundled_wallet_adapters",
    "memory_wallet_metadata",
]
