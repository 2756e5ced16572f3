"""Registration metadata for the bundled smart-contract adapters."""

from __future__ import annotations

from typing import List

from ...core.capabilities import Capability
from ...core.environment import RuntimeEnvironment, build_environment_requirements
from ...core.registry import AdapterMetadata
from ...core.schema import compile_requirements
from ..base import SmartContractErrorCode
from .template import TEMPLATE_OPTIONS, TemplateContractAdapter

SMART_CONTRACT_MODULE = "smart-contract"
SMART_CONTRACT_MODULE_VERSION = "1.0.0"

TEMPLATE_ERROR_MAP = {
    "invalid input": SmartContractErrorCode.INVALID_INPUT.value,
    "not initialized": SmartContractErrorCode.ADAPTER_NOT_INITIALIZED.value,
}


def template_contract_metadata() -> AdapterMetadata:
    """Describe ``template@1.0.0``: source generation only, no compiler."""

    return AdapterMetadata(
        name="template",
        version="1.0.0",
        module=SMART_CONTRACT_MODULE,
        adapter_type="template",
        adapter_class=TemplateContractAdapter,
        description="Renders ERC-20 and ERC-721 sources from string templates.",
        capabilities=(Capability.ADAPTER_IDENTITY, Capability.ADAPTER_LIFECYCLE, Capability.CONTRACT_GENERATOR),
        requirements=tuple(compile_requirements(TEMPLATE_OPTIONS, "template")),
        environment=build_environment_requirements("template", [RuntimeEnvironment.SERVER, RuntimeEnvironment.BROWSER]),
        error_map=TEMPLATE_ERROR_MAP,
        default_error_code=SmartContractErrorCode.UNKNOWN.value,
    )


def bundled_smart_contract_adapters() -> List[AdapterMetadata]:
    return [template_contract_metadata()]


__all__ = ["SMART_CONTRACT_MODULE", "SMART_CONTRACT_MODULE_VERSION", "bundled_smart_contract_adapters", "template_contract_metadata"]
