"""
In-memory development wallet.

Accounts are derived deterministically from a seed, balances and transactions
live in process memory and message "signatures" are SHA-256 digests. None of
this is cryptographically meaningful: the adapter exists to exercise the
registry, validator and interception layer without a blockchain.
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from logging import LoggerAdapter
from typing import Any, Callable, Dict, List, Mapping, MutableMapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from ...core.logging import get_logger

DEFAULT_GAS_PRICE = 1_000_000_000


class NetworkOptions(BaseModel):
    """Network the wallet pretends to be connected to."""

    model_config = ConfigDict(extra="forbid")

    chain_id: int = Field(description="EIP-155 chain identifier")
    name: Optional[str] = None
    rpc_url: Optional[str] = None


class MemoryWalletOptions(BaseModel):
    """Construction options accepted by :class:`MemoryWalletAdapter`."""

    model_config = ConfigDict(extra="forbid")

    seed: str = Field(description="Seed used to derive deterministic in-memory accounts")
    account_count: int = 1
    initial_balance: int = 0
    network: Optional[NetworkOptions] = None


def _derive_address(seed: str, index: int) -> str:
    return "0x" + hashlib.sha256(f"{seed}:{index}".encode("utf-8")).hexdigest()[:40]


def _digest(*parts: str) -> str:
    return "0x" + hashlib.sha256("|".join(parts).encode("utf-8")).hexdigest()


@dataclass(slots=True)
class MemoryWalletAdapter:
    """Deterministic wallet backed by dictionaries."""

    name: str
    version: str
    options: MemoryWalletOptions
    chain_id: int = 1
    network_name: str = "memory"
    logger: LoggerAdapter = field(init=False, repr=False)
    _initialized: bool = field(default=False, init=False, repr=False)
    _connected: bool = field(default=False, init=False, repr=False)
    _accounts: List[str] = field(default_factory=list, init=False, repr=False)
    _balances: MutableMapping[str, int] = field(default_factory=dict, init=False, repr=False)
    _transactions: MutableMapping[str, Dict[str, Any]] = field(default_factory=dict, init=False, repr=False)
    _listeners: MutableMapping[str, List[Callable[..., Any]]] = field(default_factory=dict, init=False, repr=False)
    _block_number: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        self.logger = get_logger(self.__class__.__name__)
        if self.options.network is not None:
            self.chain_id = self.options.network.chain_id
            self.network_name = self.options.network.name or f"chain-{self.chain_id}"

    @classmethod
    async def create(cls, *, name: str, version: str, options: Mapping[str, Any]) -> "MemoryWalletAdapter":
        adapter = cls(name=name, version=version, options=MemoryWalletOptions.model_validate(dict(options or {})))
        await adapter.initialize()
        return adapter

    # lifecycle

    async def initialize(self) -> None:
        if self._initialized:
            return
        count = max(1, self.options.account_count)
        self._accounts = [_derive_address(self.options.seed, index) for index in range(count)]
        self._balances = {account: self.options.initial_balance for account in self._accounts}
        self._initialized = True
        self._connected = True
        self.logger.debug("Memory wallet initialised", extra={"accounts": len(self._accounts)})

    def is_initialized(self) -> bool:
        return self._initialized

    # core wallet

    def _require_connection(self) -> None:
        if not self._connected:
            raise RuntimeError("wallet not connected")

    async def get_accounts(self) -> List[str]:
        self._require_connection()
        return list(self._accounts)

    async def get_balance(self, address: Optional[str] = None) -> str:
        self._require_connection()
        target = (address or self._accounts[0]).lower()
        return str(self._balances.get(target, 0))

    async def get_network(self) -> Dict[str, Any]:
        return {"chain_id": self.chain_id, "name": self.network_name}

    async def set_provider(self, config: Mapping[str, Any]) -> None:
        network = NetworkOptions.model_validate(dict(config))
        self.chain_id = network.chain_id
        self.network_name = network.name or f"chain-{network.chain_id}"
        self._connected = True
        self.emit("chainChanged", self.chain_id)

    async def disconnect(self) -> None:
        self._connected = False
        self.emit("disconnect")

    def is_connected(self) -> bool:
        return self._connected

    # events

    def on(self, event: str, callback: Callable[..., Any]) -> None:
        self._listeners.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callable[..., Any]) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event: str, *args: Any) -> None:
        for callback in list(self._listeners.get(event, [])):
            callback(*args)

    # signing and transactions

    async def sign_message(self, message: str) -> str:
        self._require_connection()
        return _digest(self._accounts[0], message)

    async def send_transaction(self, transaction: Mapping[str, Any]) -> str:
        """
        Record a value transfer between in-memory accounts.

        ``transaction`` needs a ``to`` address and may carry ``from`` (defaults
        to the first account), ``value`` (an integer amount) and ``data``.
        """

        self._require_connection()
        sender = str(transaction.get("from") or self._accounts[0]).lower()
        recipient = transaction.get("to")
        if not isinstance(recipient, str) or not recipient.startswith("0x"):
            raise ValueError(f"invalid address: {recipient!r}")
        if sender not in self._balances:
            raise PermissionError(f"user rejected transaction: account {sender} is not managed by this wallet")

        value = int(transaction.get("value", 0))
        if value < 0:
            raise ValueError(f"invalid value: {value}")
        if self._balances[sender] < value:
            raise ValueError(f"insufficient funds for transfer of {value} from {sender}")

        self._balances[sender] -= value
        self._balances[recipient.lower()] = self._balances.get(recipient.lower(), 0) + value
        self._block_number += 1
        payload = {"from": sender, "to": recipient.lower(), "value": value, "data": transaction.get("data"), "nonce": len(self._transactions)}
        tx_hash = _digest(json.dumps(payload, sort_keys=True, default=str))
        self._transactions[tx_hash] = {**payload, "hash": tx_hash, "block_number": self._block_number, "chain_id": self.chain_id, "status": "confirmed"}
        self.logger.info("Memory wallet transaction recorded", extra={"value": value})
        self.emit("transaction", tx_hash)
        return tx_hash

    # rpc

    async def get_chain_id(self) -> int:
        return self.chain_id

    async def get_gas_price(self) -> str:
        return str(DEFAULT_GAS_PRICE)

    async def get_block_number(self) -> int:
        return self._block_number

    # transaction status

    async def get_transaction(self, tx_hash: str) -> Optional[Dict[str, Any]]:
        record = self._transactions.get(tx_hash)
        return dict(record) if record else None

    async def wait_for_transaction(self, tx_hash: str, confirmations: int = 1) -> Dict[str, Any]:
        record = self._transactions.get(tx_hash)
        if record is None:
            raise LookupError(f"transaction not found: {tx_hash}")
        return {
            "transaction_hash": tx_hash,
            "block_number": record["block_number"],
            "confirmations": max(confirmations, self._block_number - record["block_number"] + 1),
            "status": record["status"],
        }


__all__ = ["MemoryWalletAdapter", "MemoryWalletOptions", "NetworkOptions"]
