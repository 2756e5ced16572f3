"""
In-memory cross-chain execution adapter.

Quotes are computed from a flat fee in basis points and operations move through
``PENDING`` to ``COMPLETED`` (or ``FAILED``/``CANCELLED``) in process memory.
When a wallet is passed to :meth:`MemoryCrossChainAdapter.execute_operation` the
source-chain leg is submitted through it, which makes the adapter a convenient
end-to-end exercise of wallet and cross-chain factories together.
"""

from __future__ import annotations

import hashlib
import time
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Dict, List, Mapping, MutableMapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...core.logging import get_logger

DEFAULT_CHAINS: Dict[int, str] = {1: "ethereum", 10: "optimism", 137: "polygon", 42161: "arbitrum"}
DEFAULT_TOKENS = ["ETH", "USDC", "USDT"]
QUOTE_TTL_SECONDS = 300
DESTINATION_GAS_UNITS = 21_000
DESTINATION_GAS_PRICE = 1_000_000_000


class OperationStatus:
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class MemoryCrossChainOptions(BaseModel):
    """Construction options accepted by :class:`MemoryCrossChainAdapter`."""

    model_config = ConfigDict(extra="forbid")

    integrator: str = Field(description="Integrator identifier recorded on every operation")
    fee_bps: int = 30
    chains: Optional[List[int]] = None
    tokens: Optional[List[str]] = None
    settlement_seconds: float = 0.0
    operation_timeout_seconds: float = 3600.0


@dataclass(slots=True)
class MemoryCrossChainAdapter:
    """Deterministic bridge simulator."""

    name: str
    version: str
    options: MemoryCrossChainOptions
    logger: LoggerAdapter = field(init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)
    _chains: Dict[int, str] = field(default_factory=dict, init=False, repr=False)
    _quotes: MutableMapping[str, Dict[str, Any]] = field(default_factory=dict, init=False, repr=False)
    _operations: MutableMapping[str, Dict[str, Any]] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__)

    @classmethod
    async def create(cls, *, name: str, version: str, options: Mapping[str, Any]) -> "MemoryCrossChainAdapter":
        adapter = cls(name=name, version=version, options=MemoryCrossChainOptions.model_validate(dict(options or {})))
        await adapter.initialize()
        return adapter

    async def initialize(self) -> None:
        if self._initialized:
            return
        chain_ids = self.options.chains or list(DEFAULT_CHAINS)
        self._chains = {chain_id: DEFAULT_CHAINS.get(chain_id, f"chain-{chain_id}") for chain_id in chain_ids}
        self._initialized = True

    def is_initialized(self) -> bool:
        return self._initialized

    # discovery

    async def get_supported_chains(self) -> List[Dict[str, Any]]:
        return [{"chain_id": chain_id, "name": name} for chain_id, name in self._chains.items()]

    async def get_supported_tokens(self, chain_id: int) -> List[str]:
        self._require_chain(chain_id)
        return list(self.options.tokens or DEFAULT_TOKENS)

    def _require_chain(self, chain_id: Any) -> int:
        if chain_id not in self._chains:
            raise ValueError(f"unsupported chain: {chain_id}")
        return int(chain_id)

    # quotes

    async def get_operation_quote(self, intent: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Quote a transfer.

        ``intent`` carries ``source_chain``, ``destination_chain``, ``token`` and
        an integer ``amount``.
        """

        source = self._require_chain(intent.get("source_chain"))
        destination = self._require_chain(intent.get("destination_chain"))
        token = str(intent.get("token", "")).upper()
        if token not in (self.options.tokens or DEFAULT_TOKENS):
            raise ValueError(f"unsupported token: {token}")
        amount = int(intent.get("amount", 0))
        if amount <= 0:
            raise ValueError(f"invalid input: amount must be positive, got {amount}")

        fee = amount * self.options.fee_bps // 10_000
        quote_id = "quote-" + hashlib.sha256(f"{source}:{destination}:{token}:{amount}:{len(self._quotes)}".encode("utf-8")).hexdigest()[:16]
        quote = {
            "id": quote_id,
            "source_chain": source,
            "destination_chain": destination,
            "token": token,
            "from_amount": amount,
            "to_amount": amount - fee,
            "fee": fee,
            "expires_at": time.time() + QUOTE_TTL_SECONDS,
            "integrator": self.options.integrator,
        }
        self._quotes[quote_id] = quote
        return dict(quote)

    # operations

    async def execute_operation(self, quote: Mapping[str, Any], wallet: Any = None) -> Dict[str, Any]:
        quote_id = quote.get("id")
        stored = self._quotes.get(quote_id) if isinstance(quote_id, str) else None
        if stored is None:
            raise LookupError(f"quote not found: {quote_id}")
        if stored["expires_at"] < time.time():
            raise ValueError(f"quote expired: {quote_id}")

        source_tx = None
        if wallet is not None:
            recipient = "0x" + hashlib.sha256(f"bridge:{stored['destination_chain']}".encode("utf-8")).hexdigest()[:40]
            source_tx = await wallet.send_transaction({"to": recipient, "value": stored["from_amount"]})

        operation_id = "op-" + hashlib.sha256(f"{quote_id}:{len(self._operations)}".encode("utf-8")).hexdigest()[:16]
        self._operations[operation_id] = {
            "operation_id": operation_id,
            "quote_id": quote_id,
            "status": OperationStatus.PENDING,
            "source_tx": source_tx,
            "started_at": time.monotonic(),
            "reason": None,
        }
        self.logger.info("Cross-chain operation started", extra={"operation_id": operation_id})
        return self._public(operation_id)

    def _require_operation(self, operation_id: str) -> Dict[str, Any]:
        record = self._operations.get(operation_id)
        if record is None:
            raise LookupError(f"operation not found: {operation_id}")
        return record

    def _public(self, operation_id: str) -> Dict[str, Any]:
        record = self._operations[operation_id]
        return {key: value for key, value in record.items() if key != "started_at"}

    async def get_operation_status(self, operation_id: str) -> Dict[str, Any]:
        record = self._require_operation(operation_id)
        if record["status"] == OperationStatus.PENDING and time.monotonic() - record["started_at"] >= self.options.settlement_seconds:
            record["status"] = OperationStatus.COMPLETED
        return self._public(operation_id)

    async def cancel_operation(self, operation_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        record = self._require_operation(operation_id)
        if record["status"] != OperationStatus.PENDING:
            raise RuntimeError(f"operation {operation_id} cannot be cancelled in status {record['status']}")
        record["status"] = OperationStatus.CANCELLED
        record["reason"] = reason or "cancelled by caller"
        return self._public(operation_id)

    async def resume_operation(self, operation_id: str) -> Dict[str, Any]:
        record = self._require_operation(operation_id)
        if record["status"] not in (OperationStatus.CANCELLED, OperationStatus.FAILED):
            raise RuntimeError(f"operation {operation_id} cannot be resumed in status {record['status']}")
        record["status"] = OperationStatus.PENDING
        record["reason"] = None
        record["started_at"] = time.monotonic()
        return self._public(operation_id)

    async def check_for_timed_out_operations(self) -> List[str]:
        now = time.monotonic()
        timed_out = []
        for operation_id, record in self._operations.items():
            if record["status"] == OperationStatus.PENDING and now - record["started_at"] >= self.options.operation_timeout_seconds:
                record["status"] = OperationStatus.FAILED
                record["reason"] = "timed out"
                timed_out.append(operation_id)
        return timed_out

    # gas

    async def get_gas_on_destination(self, chain_id: int) -> Dict[str, Any]:
        destination = self._require_chain(chain_id)
        return {
            "chain_id": destination,
            "gas_units": DESTINATION_GAS_UNITS,
            "gas_price": str(DESTINATION_GAS_PRICE),
            "total": str(DESTINATION_GAS_UNITS * DESTINATION_GAS_PRICE),
        }


__all__ = ["MemoryCrossChainAdapter", "MemoryCrossChainOptions", "OperationStatus"]
