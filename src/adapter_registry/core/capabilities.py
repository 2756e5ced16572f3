"""
Capability identifiers and the method-to-capability table.

Adapters *claim* capabilities in their registration metadata. The interception
layer consults :data:`METHOD_CAPABILITIES` on every call to decide whether a
method may run for a given adapter; methods missing from the table are plain
plumbing and are never gated.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Tuple


class Capability(str, Enum):
    """Closed set of capability interfaces understood by adapters and the registry."""

    # wallet
    CORE_WALLET = "ICoreWallet"
    EVENT_EMITTER = "IEventEmitter"
    MESSAGE_SIGNER = "IMessageSigner"
    TRANSACTION_HANDLER = "ITransactionHandler"
    TYPED_DATA_SIGNER = "ITypedDataSigner"
    GAS_ESTIMATION = "IGasEstimation"
    TOKEN_OPERATIONS = "ITokenOperations"
    RPC_HANDLER = "IRPCHandler"
    TRANSACTION_STATUS = "ITransactionStatus"

    # smart contract
    CONTRACT_GENERATOR = "IContractGenerator"
    CONTRACT_COMPILER = "IContractCompiler"

    # cross-chain
    QUOTE_PROVIDER = "IQuoteProvider"
    OPERATION_HANDLER = "IOperationHandler"
    CHAIN_DISCOVERY = "IChainDiscovery"
    GAS_ESTIMATOR = "IGasEstimator"
    OPERATION_MAINTENANCE = "IOperationMaintenance"

    # common
    ADAPTER_IDENTITY = "IAdapterIdentity"
    ADAPTER_LIFECYCLE = "IAdapterLifecycle"


METHOD_CAPABILITIES: Mapping[str, Capability] = MappingProxyType(
    {
        "get_accounts": Capability.CORE_WALLET,
        "get_balance": Capability.CORE_WALLET,
        "get_network": Capability.CORE_WALLET,
        "set_provider": Capability.CORE_WALLET,
        "disconnect": Capability.CORE_WALLET,
        "is_connected": Capability.CORE_WALLET,
        "send_transaction": Capability.TRANSACTION_HANDLER,
        "sign_message": Capability.MESSAGE_SIGNER,
        "sign_typed_data": Capability.TYPED_DATA_SIGNER,
        "estimate_gas": Capability.GAS_ESTIMATION,
        "on": Capability.EVENT_EMITTER,
        "off": Capability.EVENT_EMITTER,
        "emit": Capability.EVENT_EMITTER,
        "call_contract": Capability.TOKEN_OPERATIONS,
        "get_chain_id": Capability.RPC_HANDLER,
        "get_gas_price": Capability.RPC_HANDLER,
        "get_block_number": Capability.RPC_HANDLER,
        "get_transaction": Capability.TRANSACTION_STATUS,
        "wait_for_transaction": Capability.TRANSACTION_STATUS,
        "generate": Capability.CONTRACT_GENERATOR,
        "compile": Capability.CONTRACT_COMPILER,
        "get_operation_quote": Capability.QUOTE_PROVIDER,
        "execute_operation": Capability.OPERATION_HANDLER,
        "get_operation_status": Capability.OPERATION_HANDLER,
        "cancel_operation": Capability.OPERATION_HANDLER,
        "resume_operation": Capability.OPERATION_HANDLER,
        "get_supported_chains": Capability.CHAIN_DISCOVERY,
        "get_supported_tokens": Capability.CHAIN_DISCOVERY,
        "get_gas_on_destination": Capability.GAS_ESTIMATOR,
        "check_for_timed_out_operations": Capability.OPERATION_MAINTENANCE,
        "initialize": Capability.ADAPTER_LIFECYCLE,
        "is_initialized": Capability.ADAPTER_LIFECYCLE,
    }
)


def required_capability(method_name: str) -> Optional[Capability]:
    """Return the capability gating ``method_name`` or ``None`` for ungated plumbing."""

    return METHOD_CAPABILITIES.get(method_name)


def methods_for(capability: Capability) -> List[str]:
    """List the method names granted by ``capability`` in table order."""

    return [method for method, owner in METHOD_CAPABILITIES.items() if owner is capability]


def parse_capability(value: Capability | str) -> Capability:
    """
    Convert a declaration value into a :class:`Capability`.

    Accepts members, interface identifiers (``"ICoreWallet"``) and member names
    (``"CORE_WALLET"``). Raises ``ValueError`` for anything else.
    """

    if isinstance(value, Capability):
        return value
    text = str(value).strip()
    try:
        return Capability(text)
    except ValueError:
        member = Capability.__members__.get(text.upper())
        if member is None:
            raise ValueError(f"Unknown capability '{value}'.") from None
        return member


def parse_capabilities(values: Iterable[Capability | str]) -> Tuple[Capability, ...]:
    """Parse a sequence of declarations, dropping duplicates while keeping order."""

    seen: dict[Capability, None] = {}
    for value in values:
        seen.setdefault(parse_capability(value), None)
    return tuple(seen)


__all__ = [
    "Capability",
    "METHOD_CAPABILITIES",
    "methods_for",
    "parse_capabilities",
    "parse_capability",
    "required_capability",
]
