"""Registration metadata for the bundled wallet adapters."""

from __future__ import annotations

from typing import List

from ...core.capabilities import Capability
from ...core.environment import RuntimeEnvironment, build_environment_requirements
from ...core.registry import AdapterMetadata
from ...core.schema import compile_requirements
from ..base import WalletErrorCode
from .memory import MemoryWalletAdapter, MemoryWalletOptions

WALLET_MODULE = "wallet"
WALLET_MODULE_VERSION = "1.0.0"

MEMORY_WALLET_ERROR_MAP = {
    "insufficient funds": WalletErrorCode.INSUFFICIENT_FUNDS.value,
    "user rejected": WalletErrorCode.USER_REJECTED.value,
    "invalid address": WalletErrorCode.INVALID_INPUT.value,
    "invalid value": WalletErrorCode.INVALID_INPUT.value,
    "not connected": WalletErrorCode.WALLET_NOT_CONNECTED.value,
    "transaction not found": WalletErrorCode.TRANSACTION_RECEIPT_FAILED.value,
}


def memory_wallet_metadata() -> AdapterMetadata:
    """Describe ``memory@1.0.0``: every wallet capability except typed data, gas estimation and tokens."""

    return AdapterMetadata(
        name="memory",
        version="1.0.0",
        module=WALLET_MODULE,
        adapter_type="evm",
        adapter_class=MemoryWalletAdapter,
        description="Deterministic in-memory wallet for development and tests.",
        capabilities=(
            Capability.ADAPTER_IDENTITY,
            Capability.ADAPTER_LIFECYCLE,
            Capability.CORE_WALLET,
            Capability.EVENT_EMITTER,
            Capability.MESSAGE_SIGNER,
            Capability.TRANSACTION_HANDLER,
            Capability.RPC_HANDLER,
            Capability.TRANSACTION_STATUS,
        ),
        requirements=tuple(compile_requirements(MemoryWalletOptions, "memory")),
        environment=build_environment_requirements(
            "memory",
            [RuntimeEnvironment.SERVER, RuntimeEnvironment.BROWSER],
            security_notes=["Signatures are SHA-256 digests and must never be used for real funds"],
        ),
        error_map=MEMORY_WALLET_ERROR_MAP,
        default_error_code=WalletErrorCode.UNKNOWN.value,
    )


def bundled_wallet_adapters() -> List[AdapterMetadata]:
    return [memory_wallet_metadata()]


__all__ = ["WALLET_MODULE", "WALLET_MODULE_VERSION", "bundled_wallet_adapters", "memory_wallet_metadata"]
