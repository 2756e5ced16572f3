"""
Cross-module compatibility resolution.

A compatibility matrix states, per target module, which capabilities a
counterpart adapter must claim. Resolution combines that static declaration with
two live checks against the registry: both adapters must run in the active
environment and the target must still claim the required capabilities.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Sequence

from .capabilities import Capability
from .environment import RuntimeEnvironment, detect_current_environments, supports_environments
from .registry import AdapterMetadata, AdapterRegistry


@dataclass(slots=True)
class CompatibilityConflict:
    """Single reason two adapters (or adapter versions) do not fit together."""

    type: str
    severity: str
    description: str
    affected_versions: Sequence[str] = field(default_factory=tuple)
    suggested_action: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity,
            "description": self.description,
            "affected_versions": list(self.affected_versions),
            "suggested_action": self.suggested_action,
        }


@dataclass(slots=True)
class CompatibilityReport:
    """Outcome of a detailed compatibility check."""

    compatible: bool = True
    conflicts: List[CompatibilityConflict] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    supported_versions: List[str] = field(default_factory=list)
    alternatives: List[str] = field(default_factory=list)

    def add_conflict(self, conflict: CompatibilityConflict) -> None:
        self.conflicts.append(conflict)
        if conflict.severity == "error":
            self.compatible = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "compatible": self.compatible,
            "conflicts": [conflict.to_dict() for conflict in self.conflicts],
            "recommendations": list(self.recommendations),
            "supported_versions": list(self.supported_versions),
            "alternatives": list(self.alternatives),
        }


@dataclass(frozen=True, slots=True)
class CompatibleAdapter:
    """Adapter found compatible with a source adapter, with a 0..1 fit score."""

    module: str
    adapter: str
    version: str
    score: float


def _active(environments: Optional[Iterable[RuntimeEnvironment | str]]) -> FrozenSet[RuntimeEnvironment]:
    return detect_current_environments(environments)


def check_cross_module_compatibility(
    registry: AdapterRegistry,
    source_module: str,
    source_adapter: str,
    source_version: str,
    target_module: str,
    target_adapter: str,
    target_version: str,
    environments: Optional[Iterable[RuntimeEnvironment | str]] = None,
) -> bool:
    """
    Decide whether the target adapter can be used together with the source adapter.

    The check fails when the source has no compatibility matrix, the matrix has
    no rule for ``target_module``, the target is not registered, either adapter
    cannot run in the active environment, or the target does not claim every
    capability the rule requires.
    """

    matrix = registry.get_compatibility_matrix(source_module, source_adapter, source_version)
    if matrix is None:
        return False
    rule = matrix.rule_for(target_module)
    if rule is None:
        return False
    target = registry.get_adapter(target_module, target_adapter, target_version)
    if target is None:
        return False

    active = _active(environments)
    source_environment = registry.get_environment_requirements(source_module, source_adapter, source_version)
    if not supports_environments(source_environment, active) or not supports_environments(target.environment, active):
        return False

    return set(rule.requires_capabilities).issubset(target.capabilities)


def _missing_capabilities(required: Iterable[Capability], target: AdapterMetadata) -> List[Capability]:
    claimed = set(target.capabilities)
    return [capability for capability in required if capability not in claimed]


def _environment_names(metadata: AdapterMetadata) -> str:
    if metadata.environment is None or not metadata.environment.supported_environments:
        return "any"
    return "/".join(environment.value for environment in metadata.environment.supported_environments)


def get_compatibility_report(
    registry: AdapterRegistry,
    source_module: str,
    source_adapter: str,
    source_version: str,
    target_module: str,
    target_adapter: str,
    target_version: str,
    environments: Optional[Iterable[RuntimeEnvironment | str]] = None,
) -> CompatibilityReport:
    """
    Explain the outcome of :func:`check_cross_module_compatibility`.

    For registered adapters the report is compatible exactly when the boolean
    check passes; an unregistered source or target is always a conflict. Conflicts
    name each failing condition and recommendations list registered target
    adapters that would pass instead.
    """

    report = CompatibilityReport()
    versions = (source_version, target_version)
    source = registry.get_adapter(source_module, source_adapter, source_version)
    target = registry.get_adapter(target_module, target_adapter, target_version)
    if source is None or target is None:
        report.add_conflict(CompatibilityConflict("version", "error", "One or both adapters not found", versions))
        report.recommendations.append("Verify adapter names and versions")
        return report

    source_label, target_label = source.key, target.key
    matrix = registry.get_compatibility_matrix(source_module, source_adapter, source_version)
    rule = matrix.rule_for(target_module) if matrix else None
    if matrix is None:
        report.add_conflict(
            CompatibilityConflict("declaration", "error", f"No compatibility matrix declared for {source_label}", versions, "Declare a compatibility matrix for the source adapter")
        )
    elif rule is None:
        report.add_conflict(
            CompatibilityConflict("declaration", "error", f"{source_label} declares no compatibility with module '{target_module}'", versions)
        )

    active = _active(environments)
    for metadata in (source, target):
        if not supports_environments(metadata.environment, active):
            detected = ", ".join(sorted(environment.value for environment in active))
            report.add_conflict(
                CompatibilityConflict(
                    "environment",
                    "error",
                    f"Environment incompatibility: {metadata.key} requires {_environment_names(metadata)} but detected {detected}",
                    versions,
                    f"Use {metadata.name} in {_environment_names(metadata)} environment",
                )
            )

    if rule is not None:
        missing = _missing_capabilities(rule.requires_capabilities, target)
        if missing:
            report.add_conflict(
                CompatibilityConflict(
                    "capability",
                    "error",
                    f"{target_label} is missing required capabilities: {', '.join(capability.value for capability in missing)}",
                    versions,
                    "Choose a target adapter that claims the required capabilities",
                )
            )

    if report.compatible:
        report.supported_versions.extend(versions)
        report.recommendations.append(f"{source_label} and {target_label} are compatible")
        if source.environment and target.environment:
            common = [environment.value for environment in source.environment.supported_environments if environment in target.environment.supported_environments]
            if common:
                report.recommendations.append(f"Use in {' or '.join(common)} environment{'s' if len(common) > 1 else ''}")
        return report

    report.recommendations.append(f"{source_label} and {target_label} are not compatible")
    for candidate in registry.get_module_adapters(target_module):
        if candidate.key == target_label:
            continue
        if check_cross_module_compatibility(registry, source_module, source_adapter, source_version, target_module, candidate.name, candidate.version, active):
            report.alternatives.append(candidate.key)
            report.recommendations.append(f"Try {candidate.key} instead of {target_label}")
    return report


def _environments_overlap(left: AdapterMetadata, right: AdapterMetadata) -> bool:
    if left.environment is None or right.environment is None:
        return True
    return bool(set(left.environment.supported_environments) & set(right.environment.supported_environments))


def _lifecycle_ready(left: AdapterMetadata, right: AdapterMetadata) -> bool:
    return all(callable(getattr(metadata.adapter_class, method, None)) for metadata in (left, right) for method in ("initialize", "is_initialized"))


def find_compatible_adapters(
    registry: AdapterRegistry,
    module_name: str,
    adapter_name: str,
    version: str,
    environments: Optional[Iterable[RuntimeEnvironment | str]] = None,
) -> List[CompatibleAdapter]:
    """
    List adapters in other modules compatible with ``adapter_name@version``.

    Each result carries a score averaging environment overlap with the source and
    whether both adapters expose the lifecycle methods; best fits come first.
    """

    source = registry.get_adapter(module_name, adapter_name, version)
    if source is None:
        return []

    active = _active(environments)
    results: List[CompatibleAdapter] = []
    for module in registry.list_modules():
        if module.name == module_name:
            continue
        for target in registry.get_module_adapters(module.name):
            if not check_cross_module_compatibility(registry, module_name, adapter_name, version, module.name, target.name, target.version, active):
                continue
            score = (int(_environments_overlap(source, target)) + int(_lifecycle_ready(source, target))) / 2
            results.append(CompatibleAdapter(module=module.name, adapter=target.name, version=target.version, score=score))
    return sorted(results, key=lambda item: item.score, reverse=True)


def check_adapter_compatibility(registry: AdapterRegistry, module_name: str, adapter_name: str, versions: Sequence[str]) -> CompatibilityReport:
    """
    Check whether several versions of one adapter can coexist.

    Missing versions are errors; breaking changes declared between any two of
    the requested versions are reported as warnings.
    """

    report = CompatibilityReport()
    if registry.get_module(module_name) is None:
        report.add_conflict(CompatibilityConflict("version", "error", f"Module '{module_name}' not found", tuple(versions)))
        return report

    for version in versions:
        if registry.get_adapter(module_name, adapter_name, version) is None:
            report.add_conflict(CompatibilityConflict("version", "error", f"Adapter '{adapter_name}' version '{version}' not found", (version,)))
            continue
        report.supported_versions.append(version)

        matrix = registry.get_compatibility_matrix(module_name, adapter_name, version)
        if matrix is None:
            continue
        for other in versions:
            if other == version:
                continue
            for change in matrix.breaking_changes:
                if other in (change.from_version, change.to_version):
                    report.add_conflict(
                        CompatibilityConflict(
                            "breaking-change",
                            "warning",
                            f"Breaking changes between {change.from_version} and {change.to_version}: {', '.join(change.changes)}",
                            (change.from_version, change.to_version),
                            change.migration_path,
                        )
                    )
                    break

    if not report.conflicts:
        report.recommendations.append("All specified versions are compatible")
    else:
        latest = registry.get_adapter_versions(module_name, adapter_name)
        if latest:
            report.recommendations.append(f"Consider using latest version: {latest[0]}")
    return report


__all__ = [
    "CompatibilityConflict",
    "CompatibilityReport",
    "CompatibleAdapter",
    "check_adapter_compatibility",
    "check_cross_module_compatibility",
    "find_compatible_adapters",
    "get_compatibility_report",
]
