"""
Versioned adapter registry declarations and helpers.

The registry is the authoritative catalogue of modules, the adapters registered
for them (one record per ``name@version``), named interface shapes and
statically authored cross-module compatibility matrices. Registration happens
during module initialisation, before any read path runs; afterwards the tables
are only read. Lookups never raise: they return ``None`` or an empty list and
leave error reporting to the validator and factory layers.

Interface shapes and compatibility matrices are authored in YAML documents so
they can be maintained without touching Python code.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, MutableMapping, Optional, Sequence, Tuple

import yaml

from .capabilities import Capability, methods_for, parse_capabilities
from .environment import EnvironmentRequirements, RuntimeEnvironment, supports_environments
from .schema import Requirement
from .versioning import sort_versions


class RegistryError(RuntimeError):
    """Raised when a registration request is rejected."""


class RegistryLoadError(RuntimeError):
    """Raised when a declarations YAML file cannot be parsed or validated."""


def adapter_key(name: str, version: str) -> str:
    """Return the ``name@version`` key used for adapters and compatibility matrices."""

    return f"{name}@{version}"


@dataclass(frozen=True, slots=True)
class ModuleMetadata:
    """A named subsystem (``wallet``, ``smart-contract``, ``crosschain``) and its version."""

    name: str
    version: str


@dataclass(frozen=True, slots=True)
class AdapterMetadata:
    """
    Registration record for a single adapter version.

    Parameters
    ----------
    name:
        Adapter identifier within its module (e.g. ``memory``).
    version:
        Semantic version of the adapter.
    module:
        Owning module name.
    adapter_type:
        Module-specific kind tag (``evm``, ``template``, ``aggregator``).
    adapter_class:
        Construction handle exposing an async ``create`` classmethod.
    capabilities:
        Capabilities the adapter claims. Trusted at validation time and
        enforced per call by the interception layer.
    requirements:
        Ordered constraints on construction parameters.
    environment:
        Optional environment declaration. ``None`` means the adapter runs
        anywhere.
    error_map:
        Ordered message-substring to error-code mapping used when normalizing
        failures raised inside the adapter.
    default_error_code:
        Code applied when no ``error_map`` entry matches.
    description:
        Short human-readable summary.
    """

    name: str
    version: str
    module: str
    adapter_type: str
    adapter_class: Any
    capabilities: Tuple[Capability, ...] = field(default_factory=tuple)
    requirements: Tuple[Requirement, ...] = field(default_factory=tuple)
    environment: Optional[EnvironmentRequirements] = None
    error_map: Mapping[str, str] = field(default_factory=dict)
    default_error_code: Optional[str] = None
    description: str = ""

    @property
    def key(self) -> str:
        return adapter_key(self.name, self.version)

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation useful for CLI output."""

        environment = None
        if self.environment is not None:
            environment = {
                "supported_environments": [env.value for env in self.environment.supported_environments],
                "limitations": list(self.environment.limitations),
                "security_notes": list(self.environment.security_notes),
            }
        adapter_class = self.adapter_class
        return {
            "name": self.name,
            "version": self.version,
            "module": self.module,
            "adapter_type": self.adapter_type,
            "adapter_class": f"{adapter_class.__module__}.{adapter_class.__qualname__}" if isinstance(adapter_class, type) else repr(adapter_class),
            "description": self.description,
            "capabilities": [capability.value for capability in self.capabilities],
            "requirements": [requirement.to_dict() for requirement in self.requirements],
            "environment": environment,
            "error_map": dict(self.error_map),
            "default_error_code": self.default_error_code,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2)


@dataclass(frozen=True, slots=True)
class BreakingChange:
    """Declared breaking change between two adapter versions."""

    from_version: str
    to_version: str
    changes: Tuple[str, ...] = field(default_factory=tuple)
    migration_path: Optional[str] = None


@dataclass(frozen=True, slots=True)
class CrossModuleRule:
    """Capabilities a counterpart adapter in ``module_name`` must claim."""

    module_name: str
    requires_capabilities: Tuple[Capability, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class CompatibilityMatrix:
    """
    Statically authored compatibility declaration for one adapter version.

    Rules are directional: a matrix on a wallet adapter describing the
    ``crosschain`` module says nothing about what crosschain adapters expect of
    wallets.
    """

    adapter_name: str
    version: str
    compatible_versions: Tuple[str, ...] = field(default_factory=tuple)
    breaking_changes: Tuple[BreakingChange, ...] = field(default_factory=tuple)
    cross_module_compatibility: Tuple[CrossModuleRule, ...] = field(default_factory=tuple)

    @property
    def key(self) -> str:
        return adapter_key(self.adapter_name, self.version)

    def rule_for(self, module_name: str) -> Optional[CrossModuleRule]:
        """Return the declared rule for ``module_name`` if present."""

        for rule in self.cross_module_compatibility:
            if rule.module_name == module_name:
                return rule
        return None


class AdapterRegistry:
    """
    In-memory catalogue of modules, adapters, interface shapes and compatibility matrices.

    Parameters
    ----------
    verify_capability_methods:
        When ``True`` adapters are rejected at registration if their class lacks
        a method implied by one of their claimed capabilities. The default trusts
        declarations and leaves enforcement to the interception layer.
    """

    def __init__(self, *, verify_capability_methods: bool = False) -> None:
        self.verify_capability_methods = verify_capability_methods
        self._modules: MutableMapping[str, ModuleMetadata] = {}
        self._adapters: MutableMapping[str, MutableMapping[str, AdapterMetadata]] = {}
        self._interface_shapes: MutableMapping[str, Tuple[Capability, ...]] = {}
        self._compatibility: MutableMapping[str, MutableMapping[str, CompatibilityMatrix]] = {}

    # modules -----------------------------------------------------------------

    def register_module(self, name: str, version: str) -> None:
        """Register or update a module and ensure it has an adapter table."""

        self._modules[name] = ModuleMetadata(name=name, version=version)
        self._adapters.setdefault(name, {})

    def get_module(self, name: str) -> Optional[ModuleMetadata]:
        return self._modules.get(name)

    def list_modules(self) -> List[ModuleMetadata]:
        return list(self._modules.values())

    # adapters ----------------------------------------------------------------

    def register_adapter(self, module_name: str, metadata: AdapterMetadata) -> None:
        """
        Register or overwrite ``metadata`` under ``module_name``.

        The module is registered on the fly, using the adapter version, when it
        is not yet known.
        """

        if self.verify_capability_methods:
            self._verify_methods(metadata)
        if module_name not in self._modules:
            self.register_module(module_name, metadata.version)
        self._adapters.setdefault(module_name, {})[metadata.key] = metadata

    def register_adapters(self, batch: Iterable[AdapterMetadata]) -> None:
        """
        Register several adapters under their own ``module`` atomically.

        When any registration fails the module and adapter tables are restored
        to their previous state and :class:`RegistryError` is raised.
        """

        modules_snapshot = dict(self._modules)
        adapters_snapshot = {name: dict(table) for name, table in self._adapters.items()}
        try:
            for metadata in batch:
                self.register_adapter(metadata.module, metadata)
        except Exception as exc:
            self._modules = modules_snapshot
            self._adapters = adapters_snapshot
            raise RegistryError(f"Batch registration failed: {exc}. State rolled back.") from exc

    def _verify_methods(self, metadata: AdapterMetadata) -> None:
        missing = [
            f"{capability.value}.{method}"
            for capability in metadata.capabilities
            for method in methods_for(capability)
            if not callable(getattr(metadata.adapter_class, method, None))
        ]
        if missing:
            raise RegistryError(f"Adapter '{metadata.key}' claims capabilities it does not implement: {', '.join(missing)}.")

    def get_adapter(self, module_name: str, name: str, version: str) -> Optional[AdapterMetadata]:
        table = self._adapters.get(module_name)
        if table is None:
            return None
        return table.get(adapter_key(name, version))

    def get_adapter_versions(self, module_name: str, name: str) -> List[str]:
        """Return every registered version of ``name``, highest semver first."""

        table = self._adapters.get(module_name) or {}
        return sort_versions(metadata.version for metadata in table.values() if metadata.name == name)

    def get_latest_adapter(self, module_name: str, name: str) -> Optional[AdapterMetadata]:
        """Return the registered version of ``name`` with the highest semver precedence."""

        versions = self.get_adapter_versions(module_name, name)
        if not versions:
            return None
        return self.get_adapter(module_name, name, versions[0])

    def get_module_adapters(self, module_name: str) -> List[AdapterMetadata]:
        return list((self._adapters.get(module_name) or {}).values())

    def iter_adapters(self) -> Iterator[AdapterMetadata]:
        for table in self._adapters.values():
            yield from table.values()

    def supports_feature(self, module_name: str, name: str, version: str, feature_name: str) -> bool:
        """Return ``True`` when the adapter class exposes a callable named ``feature_name``."""

        metadata = self.get_adapter(module_name, name, version)
        if metadata is None:
            return False
        return callable(getattr(metadata.adapter_class, feature_name, None))

    def find_adapters_with_feature(self, feature_name: str) -> List[AdapterMetadata]:
        return [metadata for metadata in self.iter_adapters() if self.supports_feature(metadata.module, metadata.name, metadata.version, feature_name)]

    # environments ------------------------------------------------------------

    def get_environment_requirements(self, module_name: str, name: str, version: str) -> Optional[EnvironmentRequirements]:
        metadata = self.get_adapter(module_name, name, version)
        return metadata.environment if metadata else None

    def supports_environment(self, module_name: str, name: str, version: str, environment: RuntimeEnvironment) -> bool:
        """Return ``True`` when the adapter is unknown, undeclared or declares ``environment``."""

        return supports_environments(self.get_environment_requirements(module_name, name, version), (environment,))

    def get_adapters_by_environment(self, module_name: str, environment: RuntimeEnvironment) -> List[AdapterMetadata]:
        return [metadata for metadata in self.get_module_adapters(module_name) if supports_environments(metadata.environment, (environment,))]

    # interface shapes --------------------------------------------------------

    def register_interface_shape(self, name: str, capabilities: Iterable[Capability | str]) -> None:
        self._interface_shapes[name] = parse_capabilities(capabilities)

    def get_interface_shape(self, name: str) -> Optional[Tuple[Capability, ...]]:
        return self._interface_shapes.get(name)

    def list_interface_shapes(self) -> Dict[str, Tuple[Capability, ...]]:
        return dict(self._interface_shapes)

    # compatibility -----------------------------------------------------------

    def register_compatibility_matrix(self, module_name: str, matrix: CompatibilityMatrix) -> None:
        self._compatibility.setdefault(module_name, {})[matrix.key] = matrix

    def get_compatibility_matrix(self, module_name: str, name: str, version: str) -> Optional[CompatibilityMatrix]:
        table = self._compatibility.get(module_name)
        if table is None:
            return None
        return table.get(adapter_key(name, version))

    # lifecycle ---------------------------------------------------------------

    def merge_registry(self, other: "AdapterRegistry") -> None:
        """
        Copy entries from ``other`` into this registry.

        Keys already present here win; merging the same registry twice leaves
        the state unchanged after the first call.
        """

        for name, module in other._modules.items():
            self._modules.setdefault(name, module)
        for module_name, table in other._adapters.items():
            destination = self._adapters.setdefault(module_name, {})
            for key, metadata in table.items():
                destination.setdefault(key, metadata)
        for module_name, matrices in other._compatibility.items():
            destination_matrices = self._compatibility.setdefault(module_name, {})
            for key, matrix in matrices.items():
                destination_matrices.setdefault(key, matrix)
        for name, capabilities in other._interface_shapes.items():
            self._interface_shapes.setdefault(name, capabilities)

    def reset(self) -> None:
        """Clear every table. Intended for isolated test runs only."""

        self._modules.clear()
        self._adapters.clear()
        self._interface_shapes.clear()
        self._compatibility.clear()

    # declarations ------------------------------------------------------------

    def load_declarations(self, path: Path | str, module_name: str, *, replace: bool = True) -> None:
        """
        Register interface shapes and compatibility matrices from a YAML document.

        The whole document is parsed before anything is registered, so a load
        that raises :class:`RegistryLoadError` leaves the registry untouched.

        Parameters
        ----------
        path:
            Location of the YAML file.
        module_name:
            Module the compatibility matrices belong to.
        replace:
            When ``False`` entries already present in the registry are kept.
        """

        self.apply_declarations(parse_declarations(path), module_name, replace=replace)

    def apply_declarations(self, declarations: "RegistryDeclarations", module_name: str, *, replace: bool = True) -> None:
        """Register already parsed declarations; see :meth:`load_declarations`."""

        for shape_name, capabilities in declarations.interface_shapes.items():
            if replace or shape_name not in self._interface_shapes:
                self._interface_shapes[shape_name] = capabilities
        for matrix in declarations.matrices:
            if replace or self.get_compatibility_matrix(module_name, matrix.adapter_name, matrix.version) is None:
                self.register_compatibility_matrix(module_name, matrix)


@dataclass(frozen=True, slots=True)
class RegistryDeclarations:
    """Parsed content of one declarations file."""

    interface_shapes: Mapping[str, Tuple[Capability, ...]] = field(default_factory=dict)
    matrices: Tuple[CompatibilityMatrix, ...] = field(default_factory=tuple)


def parse_declarations(path: Path | str) -> RegistryDeclarations:
    """
    Read a declarations YAML file without touching any registry.

    Raises
    ------
    RegistryLoadError
        When the file is missing, is not a mapping, or holds an invalid shape or
        compatibility entry.
    """

    location = Path(path)
    if not location.exists():
        raise RegistryLoadError(f"Declarations file '{location}' does not exist.")

    try:
        with location.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except yaml.YAMLError as exc:  # pragma: no cover - depends on PyYAML
        raise RegistryLoadError(f"Failed to parse '{location}': {exc}") from exc

    if payload is None:
        return RegistryDeclarations()
    if not isinstance(payload, dict):
        raise RegistryLoadError(f"Declarations file '{location}' must contain a mapping.")

    shapes = payload.get("interface_shapes") or {}
    if not isinstance(shapes, dict):
        raise RegistryLoadError(f"'interface_shapes' in '{location}' must be a mapping of shape name to capabilities.")
    parsed_shapes: Dict[str, Tuple[Capability, ...]] = {}
    for shape_name, capabilities in shapes.items():
        try:
            parsed_shapes[str(shape_name)] = parse_capabilities(_ensure_list(capabilities))
        except ValueError as exc:
            raise RegistryLoadError(f"Invalid interface shape '{shape_name}' in '{location}': {exc}") from exc

    entries = payload.get("compatibility") or []
    if not isinstance(entries, list):
        raise RegistryLoadError(f"'compatibility' in '{location}' must be a list of matrices.")
    matrices = tuple(_matrix_from_payload(entry, origin=location) for entry in entries)
    return RegistryDeclarations(interface_shapes=parsed_shapes, matrices=matrices)


def _matrix_from_payload(entry: Any, *, origin: Path) -> CompatibilityMatrix:
    if not isinstance(entry, dict):
        raise RegistryLoadError(f"Invalid compatibility entry in '{origin}': expected mapping, got {type(entry)!r}")

    try:
        breaking = tuple(
            BreakingChange(
                from_version=str(item["from"]),
                to_version=str(item["to"]),
                changes=tuple(_ensure_list(item.get("changes"))),
                migration_path=_optional_str(item.get("migration_path")),
            )
            for item in _ensure_mappings(entry.get("breaking_changes"), origin)
        )
        rules = tuple(
            CrossModuleRule(
                module_name=str(item["module"]),
                requires_capabilities=parse_capabilities(_ensure_list(item.get("requires_capabilities"))),
            )
            for item in _ensure_mappings(entry.get("cross_module"), origin)
        )
        version = str(entry["version"])
        return CompatibilityMatrix(
            adapter_name=str(entry["adapter"]),
            version=version,
            compatible_versions=tuple(_ensure_list(entry.get("compatible_versions")) or [version]),
            breaking_changes=breaking,
            cross_module_compatibility=rules,
        )
    except KeyError as exc:
        raise RegistryLoadError(f"Missing required key {exc!s} in '{origin}'.") from exc
    except ValueError as exc:
        raise RegistryLoadError(f"Invalid field in '{origin}': {exc}") from exc


def _ensure_list(value: object | None) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value]
    return [str(value)]


def _ensure_mappings(value: object | None, origin: Path) -> Sequence[Dict[str, Any]]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise RegistryLoadError(f"Expected a list of mappings in '{origin}', got {value!r}")
    return value


def _optional_str(value: object | None) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


__all__ = [
    "AdapterMetadata",
    "AdapterRegistry",
    "BreakingChange",
    "CompatibilityMatrix",
    "CrossModuleRule",
    "ModuleMetadata",
    "RegistryDeclarations",
    "RegistryError",
    "RegistryLoadError",
    "adapter_key",
    "parse_declarations",
]
