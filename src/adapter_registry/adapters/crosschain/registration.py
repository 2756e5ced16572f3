"""Registration metadata for the bundled cross-chain adapters."""

from __future__ import annotations

from typing import List

from ...core.capabilities import Capability
from ...core.environment import RuntimeEnvironment, build_environment_requirements
from ...core.registry import AdapterMetadata
from ...core.schema import compile_requirements
from ..base import CrossChainErrorCode
from .memory import MemoryCrossChainAdapter, MemoryCrossChainOptions

CROSSCHAIN_MODULE = "crosschain"
CROSSCHAIN_MODULE_VERSION = "1.0.0"

MEMORY_CROSSCHAIN_ERROR_MAP = {
    "unsupported chain": CrossChainErrorCode.UNSUPPORTED_CHAIN.value,
    "unsupported token": CrossChainErrorCode.UNSUPPORTED_TOKEN.value,
    "operation not found": CrossChainErrorCode.OPERATION_NOT_FOUND.value,
    "quote not found": CrossChainErrorCode.QUOTE_FAILED.value,
    "quote expired": CrossChainErrorCode.QUOTE_FAILED.value,
    "invalid input": CrossChainErrorCode.INVALID_INPUT.value,
}


def memory_crosschain_metadata() -> AdapterMetadata:
    """Describe ``memory@1.0.0``: the full cross-chain capability set, server only."""

    return AdapterMetadata(
        name="memory",
        version="1.0.0",
        module=CROSSCHAIN_MODULE,
        adapter_type="aggregator",
        adapter_class=MemoryCrossChainAdapter,
        description="Simulated bridge with basis-point fees and in-memory operations.",
        capabilities=(
            Capability.ADAPTER_IDENTITY,
            Capability.ADAPTER_LIFECYCLE,
            Capability.QUOTE_PROVIDER,
            Capability.OPERATION_HANDLER,
            Capability.CHAIN_DISCOVERY,
            Capability.GAS_ESTIMATOR,
            Capability.OPERATION_MAINTENANCE,
        ),
        requirements=tuple(compile_requirements(MemoryCrossChainOptions, "memory")),
        environment=build_environment_requirements("memory", [RuntimeEnvironment.SERVER]),
        error_map=MEMORY_CROSSCHAIN_ERROR_MAP,
        default_error_code=CrossChainErrorCode.EXECUTION_FAILED.value,
    )


def bundled_crosschain_adapters() -> List[AdapterMetadata]:
    return [memory_crosschain_metadata()]


__all__ = ["CROSSCHAIN_MODULE", "CROSSCHAIN_MODULE_VERSION", "bundled_crosschain_adapters", "memory_crosschain_metadata"]
