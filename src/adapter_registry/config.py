"""
Settings helpers for the adapter registry.

Settings are loaded from ``.adapter-registry/config.toml`` by default. The lookup
order is:

1. Explicit ``ADAPTER_REGISTRY_CONFIG`` environment variable.
2. ``.adapter-registry/config.toml`` relative to the current working directory.
3. ``.adapter-registry/config.toml`` relative to the project root.

Call :func:`load_settings` to retrieve a :class:`RegistrySettings` instance. All
keys are optional::

    [runtime]
    environments = ["server"]

    [registry]
    verify_capability_methods = true

    [logging]
    level = "INFO"
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional, Tuple

CONFIG_ENV_VAR = "ADAPTER_REGISTRY_CONFIG"
CONFIG_DIR = ".adapter-registry"
CONFIG_FILENAME = "config.toml"


class SettingsError(RuntimeError):
    """Raised when a settings file exists but cannot be parsed."""


@dataclass(slots=True)
class RegistrySettings:
    """Lightweight container for parsed settings values."""

    source_path: Optional[Path] = None
    data: Dict[str, Dict[str, object]] = field(default_factory=dict)
    environments: Tuple[str, ...] = field(default_factory=tuple)
    verify_capability_methods: bool = False
    log_level: Optional[str] = None


def _discover_project_root() -> Optional[Path]:
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").is_file():
            return parent
    return None


def _candidate_paths() -> Iterable[Path]:
    env_override = os.getenv(CONFIG_ENV_VAR)
    if env_override:
        yield Path(env_override).expanduser()

    seen: set[Path] = set()
    search_roots = [Path.cwd()]
    project_root = _discover_project_root()
    if project_root and project_root not in search_roots:
        search_roots.append(project_root)
    for base in search_roots:
        candidate = base / CONFIG_DIR / CONFIG_FILENAME
        if candidate not in seen:
            seen.add(candidate)
            yield candidate


def _load_toml(path: Path) -> Dict[str, Dict[str, object]]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise SettingsError(f"Failed to parse settings file '{path}': {exc}") from exc


def _section(raw: Dict[str, Dict[str, object]], name: str) -> Dict[str, object]:
    section = raw.get(name, {}) if isinstance(raw, dict) else {}
    return section if isinstance(section, dict) else {}


def _extract_environments(raw: Dict[str, Dict[str, object]]) -> Tuple[str, ...]:
    value = _section(raw, "runtime").get("environments")
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, list):
        return ()
    return tuple(str(item).strip().lower() for item in value if str(item).strip())


def _extract_log_level(raw: Dict[str, Dict[str, object]]) -> Optional[str]:
    value = _section(raw, "logging").get("level")
    return str(value).upper() if isinstance(value, str) and value else None


def load_settings(strict: bool = False) -> RegistrySettings:
    """
    Attempt to load settings from the configured locations.

    Parameters
    ----------
    strict:
        When ``True`` the function raises ``FileNotFoundError`` if no settings
        file is discovered. Defaults to ``False`` so the registry works without
        any configuration.
    """

    for path in _candidate_paths():
        if path.is_file():
            data = _load_toml(path)
            return RegistrySettings(
                source_path=path,
                data=data,
                environments=_extract_environments(data),
                verify_capability_methods=bool(_section(data, "registry").get("verify_capability_methods", False)),
                log_level=_extract_log_level(data),
            )

    if strict:
        raise FileNotFoundError(f"No settings file found. Configure {CONFIG_ENV_VAR} or {CONFIG_DIR}/{CONFIG_FILENAME}.")

    return RegistrySettings()


__all__ = ["CONFIG_ENV_VAR", "RegistrySettings", "SettingsError", "load_settings"]
