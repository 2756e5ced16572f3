"""
Core infrastructure for the adapter registry.

This package stays lightweight: apart from PyYAML (declaration files) and
pydantic (option models walked by the schema compiler) it depends on the
standard library only. It exposes the capability model, the versioned registry,
validation, compatibility resolution, the interception layer and execution
context management used by the factory services.
"""

from .capabilities import METHOD_CAPABILITIES, Capability, methods_for, parse_capabilities, parse_capability, required_capability
from .compatibility import (
    CompatibilityConflict,
    CompatibilityReport,
    CompatibleAdapter,
    check_adapter_compatibility,
    check_cross_module_compatibility,
    find_compatible_adapters,
    get_compatibility_report,
)
from .context import ExecutionContext
from .environment import (
    EnvironmentRequirements,
    RuntimeEnvironment,
    build_environment_requirements,
    detect_current_environments,
    parse_environments,
    supports_environments,
    validate_environment,
)
from .logging import configure_logging, get_logger, log_progress
from .proxy import AdapterProxy, extract_error_details, match_error_code, unwrap_adapter, wrap_adapter
from .registry import (
    AdapterMetadata,
    AdapterRegistry,
    BreakingChange,
    CompatibilityMatrix,
    CrossModuleRule,
    ModuleMetadata,
    RegistryDeclarations,
    RegistryError,
    RegistryLoadError,
    adapter_key,
    parse_declarations,
)
from .schema import FALLBACK_REQUIREMENTS, OptionField, OptionsSchema, Requirement, compile_requirements, fallback_requirements
from .validator import get_property_by_path, runtime_type_name, validate_adapter_parameters
from .versioning import SemanticVersion, compare_versions, parse_version, sort_versions

__all__ = [
    "AdapterMetadata",
    "AdapterProxy",
    "AdapterRegistry",
    "BreakingChange",
    "Capability",
    "CompatibilityConflict",
    "CompatibilityMatrix",
    "CompatibilityReport",
    "CompatibleAdapter",
    "CrossModuleRule",
    "EnvironmentRequirements",
    "ExecutionContext",
    "FALLBACK_REQUIREMENTS",
    "METHOD_CAPABILITIES",
    "ModuleMetadata",
    "OptionField",
    "OptionsSchema",
    "RegistryDeclarations",
    "RegistryError",
    "RegistryLoadError",
    "Requirement",
    "RuntimeEnvironment",
    "SemanticVersion",
    "adapter_key",
    "build_environment_requirements",
    "check_adapter_compatibility",
    "check_cross_module_compatibility",
    "compare_versions",
    "compile_requirements",
    "configure_logging",
    "detect_current_environments",
    "extract_error_details",
    "fallback_requirements",
    "find_compatible_adapters",
    "get_compatibility_report",
    "get_logger",
    "get_property_by_path",
    "log_progress",
    "match_error_code",
    "methods_for",
    "parse_capabilities",
    "parse_capability",
    "parse_declarations",
    "parse_environments",
    "parse_version",
    "required_capability",
    "runtime_type_name",
    "sort_versions",
    "supports_environments",
    "unwrap_adapter",
    "validate_adapter_parameters",
    "validate_environment",
    "wrap_adapter",
]
