from __future__ import annotations

import pytest

from adapter_registry.adapters.base import AdapterError, AdapterErrorCode, CrossChainErrorCode, SmartContractErrorCode, WalletErrorCode
from adapter_registry.adapters.wallet import bundled_wallet_adapters
from adapter_registry.core.capabilities import Capability
from adapter_registry.core.environment import build_environment_requirements
from adapter_registry.core.proxy import AdapterProxy, unwrap_adapter
from adapter_registry.core import registry as registry_module
from adapter_registry.core.registry import AdapterMetadata, AdapterRegistry
from adapter_registry.core.schema import Requirement
from adapter_registry.services import (
    AdapterRequest,
    AdapterServices,
    ModuleFactory,
    create_contract_handler,
    create_crosschain,
    create_wallet,
    initialize_crosschain_module,
    initialize_wallet_module,
)

PRIVATE_KEY = "0x" + "1" * 64


class EthersLikeWallet:
    def __init__(self, private_key):
        self.private_key = private_key
        self.sent = []
        self.typed_data_calls = 0

    @classmethod
    async def create(cls, *, name, version, options):
        return cls(options["privateKey"])

    async def send_transaction(self, transaction):
        self.sent.append(transaction)
        return "0x" + "ab" * 32

    async def sign_typed_data(self, payload):
        self.typed_data_calls += 1
        return "0xsig"


class ExplodingWallet:
    @classmethod
    async def create(cls, *, name, version, options):
        raise RuntimeError("boom")


class EmptyWallet:
    @classmethod
    def create(cls, *, name, version, options):
        return None


def register_wallet(registry: AdapterRegistry, name: str, adapter_class, **overrides) -> None:
    payload = {
        "name": name,
        "version": "1.0.0",
        "module": "wallet",
        "adapter_type": "evm",
        "adapter_class": adapter_class,
        "capabilities": (Capability.CORE_WALLET, Capability.TRANSACTION_HANDLER),
    }
    payload.update(overrides)
    registry.register_adapter("wallet", AdapterMetadata(**payload))


@pytest.mark.anyio
async def test_registered_wallet_end_to_end(server_context):
    registry = AdapterRegistry()
    registry.register_module("wallet", "1.0.0")
    register_wallet(
        registry,
        "ethers",
        EthersLikeWallet,
        requirements=(Requirement(path="options.privateKey", type="string"),),
        environment=build_environment_requirements("ethers", ["server"]),
    )

    wallet = await create_wallet("ethers", "1.0.0", {"privateKey": PRIVATE_KEY}, registry=registry, context=server_context)

    assert isinstance(wallet, AdapterProxy)
    assert await wallet.send_transaction({"to": "0x2", "value": 1}) == "0x" + "ab" * 32
    with pytest.raises(AdapterError) as excinfo:
        wallet.sign_typed_data({"domain": {}})
    assert excinfo.value.code == AdapterErrorCode.METHOD_NOT_SUPPORTED.value
    assert unwrap_adapter(wallet).typed_data_calls == 0


@pytest.mark.anyio
async def test_memory_wallet_through_factory(registry, server_context):
    wallet = await create_wallet("memory", options={"seed": "alpha", "initial_balance": 100, "account_count": 2}, registry=registry, context=server_context)

    accounts = await wallet.get_accounts()
    assert len(accounts) == 2
    tx_hash = await wallet.send_transaction({"to": accounts[1], "value": 40})
    assert await wallet.get_balance(accounts[1]) == "140"
    receipt = await wallet.wait_for_transaction(tx_hash)
    assert receipt["status"] == "confirmed"
    assert await wallet.get_block_number() == 1
    assert wallet.is_initialized()

    with pytest.raises(AdapterError) as excinfo:
        await wallet.send_transaction({"to": accounts[1], "value": 1_000})
    assert excinfo.value.code == WalletErrorCode.INSUFFICIENT_FUNDS.value

    with pytest.raises(AdapterError) as excinfo:
        await wallet.wait_for_transaction("0xmissing")
    assert excinfo.value.code == WalletErrorCode.TRANSACTION_RECEIPT_FAILED.value

    with pytest.raises(AdapterError) as excinfo:
        wallet.estimate_gas({"to": accounts[1]})
    assert excinfo.value.code == AdapterErrorCode.METHOD_NOT_SUPPORTED.value


@pytest.mark.anyio
async def test_memory_wallet_events_and_disconnect(registry, server_context):
    wallet = await create_wallet("memory", options={"seed": "beta", "network": {"chain_id": 5, "name": "goerli"}}, registry=registry, context=server_context)
    seen = []
    wallet.on("disconnect", lambda: seen.append("disconnect"))

    assert await wallet.get_network() == {"chain_id": 5, "name": "goerli"}
    await wallet.disconnect()
    assert seen == ["disconnect"]
    with pytest.raises(AdapterError) as excinfo:
        await wallet.sign_message("hello")
    assert excinfo.value.code == WalletErrorCode.WALLET_NOT_CONNECTED.value


@pytest.mark.anyio
async def test_unknown_adapter_lists_available_versions(registry, server_context):
    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("memory", "9.9.9", {"seed": "x"}, registry=registry, context=server_context)
    assert excinfo.value.code == AdapterErrorCode.ADAPTER_NOT_FOUND.value
    assert excinfo.value.message == "Adapter 'memory' version '9.9.9' not found for wallet module. Available versions: 1.0.0."
    assert excinfo.value.method_name == "create_wallet"

    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("ghost", registry=registry, context=server_context)
    assert excinfo.value.message == "Adapter 'ghost' (latest version) not found for wallet module. Available versions: none."


@pytest.mark.anyio
async def test_validation_failures_surface_before_construction(registry, server_context):
    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("memory", options={}, registry=registry, context=server_context)
    assert excinfo.value.code == AdapterErrorCode.MISSING_ADAPTER_REQUIREMENT.value
    assert excinfo.value.message == "Seed used to derive deterministic in-memory accounts"

    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("memory", options={"seed": 42}, registry=registry, context=server_context)
    assert excinfo.value.code == AdapterErrorCode.INVALID_ADAPTER_REQUIREMENT_TYPE.value

    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("memory", options={"seed": "x"}, expected_interface="IEVMWallet", registry=registry, context=server_context)
    assert excinfo.value.code == AdapterErrorCode.INCOMPATIBLE_ADAPTER.value
    assert "Missing capability: 'ITypedDataSigner'" in excinfo.value.message

    wallet = await create_wallet("memory", options={"seed": "x"}, expected_interface="IBasicWallet", registry=registry, context=server_context)
    assert await wallet.get_chain_id() == 1


@pytest.mark.anyio
async def test_environment_mismatch(registry, browser_context):
    with pytest.raises(AdapterError) as excinfo:
        await create_crosschain("memory", options={"integrator": "acme"}, registry=registry, context=browser_context)
    assert excinfo.value.code == AdapterErrorCode.ENVIRONMENT_MISMATCH.value
    assert excinfo.value.message.startswith("Adapter 'memory' requires server environment but detected browser.")


@pytest.mark.anyio
async def test_construction_failures_are_normalized(server_context):
    registry = AdapterRegistry()
    register_wallet(registry, "exploding", ExplodingWallet)
    register_wallet(registry, "empty", EmptyWallet)
    register_wallet(registry, "handle-less", object)

    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("exploding", registry=registry, context=server_context)
    assert excinfo.value.code == AdapterErrorCode.INITIALIZATION_FAILED.value
    assert isinstance(excinfo.value.__cause__, RuntimeError)

    for name in ("empty", "handle-less"):
        with pytest.raises(AdapterError) as excinfo:
            await create_wallet(name, registry=registry, context=server_context)
        assert excinfo.value.code == AdapterErrorCode.INITIALIZATION_FAILED.value

    with pytest.raises(AdapterError) as excinfo:
        await create_wallet("memory", options={"seed": "x", "unexpected": True}, registry=registry, context=server_context)
    assert excinfo.value.code == AdapterErrorCode.INITIALIZATION_FAILED.value


@pytest.mark.anyio
async def test_contract_handler(registry, server_context):
    with pytest.raises(AdapterError) as excinfo:
        await create_contract_handler("template", expected_interface="IContractHandler", registry=registry, context=server_context)
    assert "Missing capability: 'IContractCompiler'" in excinfo.value.message

    with pytest.raises(AdapterError) as excinfo:
        await create_contract_handler("template", options={"metadata": {}}, registry=registry, context=server_context)
    assert excinfo.value.details["path"] == "options.metadata.author"

    handler = await create_contract_handler(
        "template",
        options={"license": "Apache-2.0", "metadata": {"author": "Ada"}},
        expected_interface="IContractGenerator",
        registry=registry,
        context=server_context,
    )
    source = await handler.generate({"kind": "erc20", "name": "Token", "symbol": "TKN", "initial_supply": 1000})
    assert source.startswith("// SPDX-License-Identifier: Apache-2.0")
    assert "/// @author Ada" in source
    assert 'ERC20("Token", "TKN")' in source

    with pytest.raises(AdapterError) as excinfo:
        await handler.generate({"kind": "erc1155", "name": "Token"})
    assert excinfo.value.code == SmartContractErrorCode.INVALID_INPUT.value

    with pytest.raises(AdapterError) as excinfo:
        handler.compile(source)
    assert excinfo.value.code == AdapterErrorCode.METHOD_NOT_SUPPORTED.value


@pytest.mark.anyio
async def test_crosschain_flow_with_wallet(registry, server_context):
    wallet = await create_wallet("memory", options={"seed": "bridge", "initial_balance": 5_000}, registry=registry, context=server_context)
    bridge = await create_crosschain("memory", options={"integrator": "acme", "fee_bps": 100}, expected_interface="ICrossChain", registry=registry, context=server_context)

    assert {"chain_id": 10, "name": "optimism"} in await bridge.get_supported_chains()
    quote = await bridge.get_operation_quote({"source_chain": 1, "destination_chain": 10, "token": "usdc", "amount": 1_000})
    assert quote["fee"] == 10
    assert quote["to_amount"] == 990

    operation = await bridge.execute_operation(quote, wallet)
    assert operation["status"] == "PENDING"
    assert operation["source_tx"].startswith("0x")
    assert await wallet.get_balance() == "4000"
    status = await bridge.get_operation_status(operation["operation_id"])
    assert status["status"] == "COMPLETED"

    with pytest.raises(AdapterError) as excinfo:
        await bridge.cancel_operation(operation["operation_id"])
    assert excinfo.value.code == CrossChainErrorCode.EXECUTION_FAILED.value

    with pytest.raises(AdapterError) as excinfo:
        await bridge.get_operation_quote({"source_chain": 1, "destination_chain": 999, "token": "ETH", "amount": 1})
    assert excinfo.value.code == CrossChainErrorCode.UNSUPPORTED_CHAIN.value

    with pytest.raises(AdapterError) as excinfo:
        await bridge.get_operation_status("op-missing")
    assert excinfo.value.code == CrossChainErrorCode.OPERATION_NOT_FOUND.value


@pytest.mark.anyio
async def test_crosschain_maintenance(registry, server_context):
    bridge = await create_crosschain(
        "memory",
        options={"integrator": "acme", "settlement_seconds": 60, "operation_timeout_seconds": 0},
        registry=registry,
        context=server_context,
    )
    quote = await bridge.get_operation_quote({"source_chain": 1, "destination_chain": 137, "token": "ETH", "amount": 10})
    operation = await bridge.execute_operation(quote)

    assert await bridge.check_for_timed_out_operations() == [operation["operation_id"]]
    assert (await bridge.get_operation_status(operation["operation_id"]))["status"] == "FAILED"
    assert (await bridge.resume_operation(operation["operation_id"]))["status"] == "PENDING"
    cancelled = await bridge.cancel_operation(operation["operation_id"], "user request")
    assert cancelled["status"] == "CANCELLED"
    assert cancelled["reason"] == "user request"
    gas = await bridge.get_gas_on_destination(137)
    assert gas["total"] == str(21_000 * 1_000_000_000)


def test_initialize_is_idempotent_and_keeps_caller_entries():
    registry = AdapterRegistry()
    register_wallet(registry, "memory", EthersLikeWallet, description="caller")

    initialize_wallet_module(registry)
    initialize_wallet_module(registry)
    initialize_crosschain_module(registry)

    assert registry.get_adapter("wallet", "memory", "1.0.0").description == "caller"
    assert len(registry.get_module_adapters("wallet")) == 1
    assert registry.get_interface_shape("IEVMWallet") is not None
    assert registry.get_adapter("crosschain", "memory", "1.0.0") is not None


def test_adapter_request_params():
    request = AdapterRequest(name="memory", options={"seed": "x"}, expected_interface="IBasicWallet")
    assert request.as_params("1.0.0") == {"name": "memory", "version": "1.0.0", "options": {"seed": "x"}, "expected_interface": "IBasicWallet"}
    assert request.as_params()["version"] is None


@pytest.mark.anyio
async def test_services_facade(server_context):
    services = AdapterServices.build_default(server_context)

    assert [metadata.key for metadata in services.list_adapters("wallet")] == ["memory@1.0.0"]
    assert services.resolve_adapter("crosschain", "memory").version == "1.0.0"
    assert services.is_compatible(("wallet", "memory", "1.0.0"), ("crosschain", "memory", "1.0.0"))
    handler = await services.create_adapter("smart-contract", "template")
    assert handler.is_initialized()

    with pytest.raises(AdapterError) as excinfo:
        services.factory_for("storage")
    assert excinfo.value.code == AdapterErrorCode.ADAPTER_NOT_FOUND.value
    with pytest.raises(AdapterError):
        services.resolve_adapter("wallet", "ghost")


def test_factory_parses_declarations_once(monkeypatch):
    factory = ModuleFactory(
        module_name="wallet",
        module_version="1.0.0",
        manifest=bundled_wallet_adapters,
        declarations="wallet.yaml",
        operation="create_wallet",
        context_label="Wallet",
    )
    calls = []
    original = registry_module.parse_declarations

    def counting(path):
        calls.append(path)
        return original(path)

    monkeypatch.setattr("adapter_registry.services.factory.parse_declarations", counting)

    first = factory.initialize(AdapterRegistry())
    second = factory.initialize(AdapterRegistry())
    factory.initialize(first)

    assert len(calls) == 1
    for registry in (first, second):
        assert registry.get_interface_shape("IEVMWallet") is not None
        assert registry.get_compatibility_matrix("wallet", "memory", "1.0.0") is not None
