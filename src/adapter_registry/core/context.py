"""
Execution context primitives shared across factories and CLI commands.

The context bundles loaded settings, an optional environment override and
observability tags so factory code stays declarative: it asks the context which
environments are active and which logger to use instead of reading process
state directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Mapping, Optional, Sequence

from ..config import RegistrySettings, load_settings
from .environment import RuntimeEnvironment, detect_current_environments
from .logging import RegistryLoggerAdapter
from .logging import get_logger as _get_logger


@dataclass(slots=True)
class ExecutionContext:
    """
    Shared execution context for factory calls.

    Attributes
    ----------
    settings:
        Parsed settings. Supplies default environments and the strict
        registration flag.
    environments:
        Explicit environment override. Takes precedence over settings and
        detection.
    observability_tags:
        Tags attached to every log record emitted through :meth:`get_logger`.
    extra:
        Free-form slot for additional metadata. Use sparingly.
    """

    settings: RegistrySettings = field(default_factory=RegistrySettings)
    environments: Sequence[RuntimeEnvironment | str] = field(default_factory=tuple)
    observability_tags: Sequence[str] = field(default_factory=tuple)
    extra: Mapping[str, object] = field(default_factory=dict)

    @classmethod
    def build_default(
        cls,
        *,
        settings: Optional[RegistrySettings] = None,
        environments: Optional[Sequence[RuntimeEnvironment | str]] = None,
        observability_tags: Optional[Sequence[str]] = None,
    ) -> "ExecutionContext":
        """
        Construct a context using sensible defaults.

        Parameters
        ----------
        settings:
            Preloaded settings. When omitted the helper calls
            :func:`load_settings`.
        environments:
            Optional environment override.
        observability_tags:
            Optional log tags.
        """

        return cls(
            settings=settings or load_settings(strict=False),
            environments=tuple(environments or ()),
            observability_tags=tuple(observability_tags or ()),
        )

    def active_environments(self) -> FrozenSet[RuntimeEnvironment]:
        """Resolve the active environments: override, then settings, then detection."""

        override = tuple(self.environments) or tuple(self.settings.environments)
        return detect_current_environments(override or None)

    def get_logger(self, name: str, *, extra: Optional[Mapping[str, object]] = None) -> RegistryLoggerAdapter:
        """Return a logger adapter enriched with execution context observability tags."""

        tags = tuple(self.observability_tags)
        return _get_logger(name, level=self.settings.log_level, tags=tags if tags else None, extra=extra)


__all__ = ["ExecutionContext"]
