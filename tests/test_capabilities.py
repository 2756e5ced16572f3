from __future__ import annotations

import pytest

from adapter_registry.core.capabilities import METHOD_CAPABILITIES, Capability, methods_for, parse_capabilities, parse_capability, required_capability


def test_required_capability_for_gated_and_plumbing_methods():
    assert required_capability("sign_typed_data") is Capability.TYPED_DATA_SIGNER
    assert required_capability("send_transaction") is Capability.TRANSACTION_HANDLER
    assert required_capability("name") is None


def test_methods_for_keeps_table_order():
    assert methods_for(Capability.RPC_HANDLER) == ["get_chain_id", "get_gas_price", "get_block_number"]
    assert methods_for(Capability.ADAPTER_IDENTITY) == []


def test_every_gated_method_maps_to_a_capability_member():
    assert all(isinstance(capability, Capability) for capability in METHOD_CAPABILITIES.values())
    with pytest.raises(TypeError):
        METHOD_CAPABILITIES["new_method"] = Capability.CORE_WALLET  # type: ignore[index]


def test_parse_capability_accepts_identifiers_and_member_names():
    assert parse_capability("ICoreWallet") is Capability.CORE_WALLET
    assert parse_capability("core_wallet") is Capability.CORE_WALLET
    assert parse_capability(Capability.RPC_HANDLER) is Capability.RPC_HANDLER
    with pytest.raises(ValueError, match="Unknown capability 'IFlyingCar'"):
        parse_capability("IFlyingCar")


def test_parse_capabilities_drops_duplicates_in_order():
    parsed = parse_capabilities(["IRPCHandler", "ICoreWallet", "RPC_HANDLER"])
    assert parsed == (Capability.RPC_HANDLER, Capability.CORE_WALLET)
