"""Smart-contract adapters bundled with the registry."""

from .registration import SMART_CONTRACT_MODULE, SMART_CONTRACT_MODULE_VERSION, bundled_smart_contract_adapters, template_contract_metadata
from .template import TEMPLATE_OPTIONS, TemplateContractAdapter

__all__ = [
    "SMART_CONTRACT_MODULE",
    "SMART_CONTRACT_MODULE_VERSION",
    "TEMPLATE_OPTIONS",
    "TemplateContractAdapter",
    "bundled_smart_contract_adapters",
    "template_contract_metadata",
]
