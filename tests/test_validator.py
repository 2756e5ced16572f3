from __future__ import annotations

import pytest

from adapter_registry.adapters.base import AdapterError, AdapterErrorCode
from adapter_registry.core.capabilities import Capability
from adapter_registry.core.registry import AdapterMetadata, AdapterRegistry
from adapter_registry.core.schema import Requirement
from adapter_registry.core.validator import get_property_by_path, runtime_type_name, validate_adapter_parameters

PRIVATE_KEY = Requirement(path="options.privateKey", type="string", allow_undefined=False)


def make_metadata(*requirements: Requirement, capabilities=(Capability.CORE_WALLET, Capability.TRANSACTION_HANDLER)) -> AdapterMetadata:
    return AdapterMetadata(
        name="ethers",
        version="1.0.0",
        module="wallet",
        adapter_type="evm",
        adapter_class=object,
        capabilities=tuple(capabilities),
        requirements=tuple(requirements),
    )


def validate(params, metadata, registry=None):
    validate_adapter_parameters(
        name="ethers",
        version="1.0.0",
        params=params,
        adapter_metadata=metadata,
        registry=registry or AdapterRegistry(),
        calling_operation="create_wallet",
    )


def test_get_property_by_path():
    params = {"options": {"network": {"chain_id": 5}, "tags": ["a"], "flag": False}}
    assert get_property_by_path(params, "options.network.chain_id") == 5
    assert get_property_by_path(params, "options.flag") is False
    assert get_property_by_path(params, "options.missing") is None
    assert get_property_by_path(params, "options.tags.0") is None


@pytest.mark.parametrize(
    ("value", "expected"),
    [(True, "boolean"), (3, "number"), (2.5, "number"), ("x", "string"), ({}, "object"), ([], "array"), (len, "function"), (object(), "object")],
)
def test_runtime_type_name(value, expected):
    assert runtime_type_name(value) == expected


def test_valid_private_key_passes():
    validate({"options": {"privateKey": "0xabc"}}, make_metadata(PRIVATE_KEY))


def test_missing_requirement():
    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {}}, make_metadata(PRIVATE_KEY))

    error = excinfo.value
    assert error.code == AdapterErrorCode.MISSING_ADAPTER_REQUIREMENT.value
    assert error.method_name == "create_wallet"
    assert error.message == "Required option 'options.privateKey' is missing for adapter 'ethers'."
    assert error.details["path"] == "options.privateKey"


def test_none_counts_as_missing():
    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {"privateKey": None}}, make_metadata(PRIVATE_KEY))
    assert excinfo.value.code == AdapterErrorCode.MISSING_ADAPTER_REQUIREMENT.value


def test_invalid_requirement_type():
    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {"privateKey": 123}}, make_metadata(PRIVATE_KEY))

    error = excinfo.value
    assert error.code == AdapterErrorCode.INVALID_ADAPTER_REQUIREMENT_TYPE.value
    assert error.details["expected_type"] == "string"
    assert error.details["actual_type"] == "number"
    assert "must be of type 'string', but received 'number'" in error.message


def test_declared_message_wins():
    requirement = Requirement(path="options.rpc", type="string", message="An RPC endpoint is required")
    with pytest.raises(AdapterError, match="An RPC endpoint is required"):
        validate({"options": {}}, make_metadata(requirement))


def test_optional_and_untyped_requirements():
    metadata = make_metadata(
        Requirement(path="options.provider", type="object", allow_undefined=True),
        Requirement(path="options.anything", type="any"),
        Requirement(path="options.hook", type=None),
    )
    validate({"options": {"anything": 1, "hook": "x"}}, metadata)

    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {"provider": "http://node", "anything": 1, "hook": "x"}}, metadata)
    assert excinfo.value.code == AdapterErrorCode.INVALID_ADAPTER_REQUIREMENT_TYPE.value


def test_conditional_requirement_only_applies_when_parent_present():
    metadata = make_metadata(
        Requirement(path="options.network", type="object", allow_undefined=True),
        Requirement(path="options.network.chain_id", type="number", condition_path="options.network"),
    )
    validate({"options": {}}, metadata)

    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {"network": {}}}, metadata)
    assert excinfo.value.details["path"] == "options.network.chain_id"


def test_interface_shape_names_first_missing_capability(wallet_declarations):
    registry = AdapterRegistry()
    registry.load_declarations(wallet_declarations, "wallet")
    metadata = make_metadata(capabilities=[capability for capability in registry.get_interface_shape("IEVMWallet") if capability is not Capability.TYPED_DATA_SIGNER])

    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {}, "expected_interface": "IEVMWallet"}, metadata, registry)

    error = excinfo.value
    assert error.code == AdapterErrorCode.INCOMPATIBLE_ADAPTER.value
    assert error.message == "Adapter 'ethers@1.0.0' does not fully implement the 'IEVMWallet' interface. Missing capability: 'ITypedDataSigner'."
    assert error.details["missing_capability"] == "ITypedDataSigner"


def test_interface_check_runs_before_requirements(wallet_declarations):
    registry = AdapterRegistry()
    registry.load_declarations(wallet_declarations, "wallet")

    validate({"options": {"privateKey": "0x1"}, "expected_interface": "IBasicWallet"}, make_metadata(PRIVATE_KEY, capabilities=registry.get_interface_shape("IBasicWallet")), registry)
    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {}, "expected_interface": "IBasicWallet"}, make_metadata(PRIVATE_KEY), registry)
    assert excinfo.value.code == AdapterErrorCode.INCOMPATIBLE_ADAPTER.value


def test_unknown_interface_shape_is_internal_error():
    with pytest.raises(AdapterError) as excinfo:
        validate({"options": {"privateKey": "0x1"}, "expected_interface": "INowhere"}, make_metadata(PRIVATE_KEY))
    assert excinfo.value.code == AdapterErrorCode.INTERNAL_ERROR.value
