"""
Logging helpers shared by the registry, validator, factories and bundled adapters.

Records carry structured fields (``module_name``, ``adapter``, ``version``,
``method``, ``code`` ...) as ``extra`` attributes. :class:`RegistryLoggerAdapter`
merges the fields bound at :func:`get_logger` time with the ones passed on each
call, and :class:`StructuredLogFormatter` renders them after the message as
``key=value`` pairs, registry-specific fields first.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from copy import copy
from logging import Logger, LoggerAdapter
from typing import Any, Dict, List, Mapping, MutableMapping, Optional, Sequence, Tuple

DEFAULT_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LEVEL = "WARNING"
LEVEL_ENV_VAR = "ADAPTER_REGISTRY_LOG_LEVEL"
COLOR_ENV_VAR = "ADAPTER_REGISTRY_LOG_COLOR"

# rendered first, in this order; any other extra follows alphabetically
FIELD_ORDER: Sequence[str] = (
    "phase",
    "step",
    "status",
    "result",
    "module_name",
    "adapter",
    "version",
    "method",
    "capability",
    "code",
    "environments",
    "tags",
)

_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[95m",
}
_RESET = "\033[0m"

_STANDARD_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


def resolve_level(level: Optional[int | str] = None) -> int:
    """Translate ``level`` (or ``ADAPTER_REGISTRY_LOG_LEVEL``) into a numeric level."""

    if isinstance(level, int):
        return level
    name = (level or os.getenv(LEVEL_ENV_VAR) or DEFAULT_LEVEL).strip().upper()
    numeric = logging.getLevelName(name)
    return numeric if isinstance(numeric, int) else logging.WARNING


def _color_enabled(stream: Any) -> bool:
    setting = (os.getenv(COLOR_ENV_VAR) or "auto").strip().lower()
    if setting in {"1", "true", "yes", "on"}:
        return True
    if setting in {"0", "false", "no", "off"}:
        return False
    isatty = getattr(stream, "isatty", None)
    return bool(isatty()) if callable(isatty) else False


def _render(value: Any) -> str:
    if isinstance(value, Mapping):
        return json.dumps(dict(value), ensure_ascii=False, default=str)
    if isinstance(value, (list, tuple, set, frozenset)):
        return "[" + ", ".join(_render(item) for item in value) + "]"
    # enum members (capabilities, error codes, environments) print as their value
    return str(getattr(value, "value", value))


class StructuredLogFormatter(logging.Formatter):
    """Append a record's structured extras to the standard line; optionally colour the level."""

    def __init__(self, *, use_color: bool = False, field_order: Sequence[str] = FIELD_ORDER) -> None:
        super().__init__(DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)
        self.use_color = use_color
        self.field_order = tuple(field_order)

    def extract_fields(self, record: logging.LogRecord) -> List[Tuple[str, Any]]:
        remaining = {key: value for key, value in vars(record).items() if key not in _STANDARD_ATTRS and not key.startswith("_") and value is not None}
        ordered = [(key, remaining.pop(key)) for key in self.field_order if key in remaining]
        ordered.extend(sorted(remaining.items()))
        return ordered

    def format(self, record: logging.LogRecord) -> str:
        display = record
        color = _COLORS.get(record.levelno) if self.use_color else None
        if color:
            display = copy(record)
            display.levelname = f"{color}{record.levelname}{_RESET}"
        line = super().format(display)
        fields = " ".join(f"{key}={_render(value)}" for key, value in self.extract_fields(record))
        return f"{line} | {fields}" if fields else line


class RegistryLoggerAdapter(LoggerAdapter):
    """
    Logger adapter whose bound fields are merged with per-call ``extra``.

    The standard adapter replaces call-site extras with its own; here call-site
    values win on key collisions and the rest of the bound context is kept.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        merged: Dict[str, Any] = dict(self.extra or {})
        merged.update(kwargs.get("extra") or {})
        kwargs["extra"] = merged
        return msg, kwargs

    def bind(self, **fields: Any) -> "RegistryLoggerAdapter":
        """Return a sibling adapter with ``fields`` added to the bound context."""

        merged = dict(self.extra or {})
        merged.update({key: value for key, value in fields.items() if value is not None})
        return RegistryLoggerAdapter(self.logger, merged)


class _RegistryStreamHandler(logging.StreamHandler):
    """Marker type so :func:`configure_logging` can find the handler it installed."""


def _installed_handlers(root: Logger) -> List[logging.Handler]:
    return [handler for handler in root.handlers if isinstance(handler, _RegistryStreamHandler)]


def configure_logging(level: Optional[int | str] = None, *, force: bool = False) -> None:
    """
    Install the structured stderr handler on the root logger.

    Parameters
    ----------
    level:
        Root level. Falls back to ``ADAPTER_REGISTRY_LOG_LEVEL``, then ``WARNING``.
    force:
        Install even when the root logger already has handlers, replacing a
        previously installed structured handler and reapplying the level.
        Without it an application that configured logging first keeps its
        handlers and level untouched. Handlers installed by other code are
        never removed.
    """

    root = logging.getLogger()
    if root.handlers and not force:
        return
    for handler in _installed_handlers(root):
        root.removeHandler(handler)
        handler.close()

    handler = _RegistryStreamHandler(stream=sys.stderr)
    handler.setFormatter(StructuredLogFormatter(use_color=_color_enabled(handler.stream)))
    root.addHandler(handler)
    root.setLevel(resolve_level(level))


def get_logger(
    name: str,
    *,
    level: Optional[int | str] = None,
    tags: Optional[Sequence[str]] = None,
    extra: Optional[Mapping[str, object]] = None,
) -> RegistryLoggerAdapter:
    """
    Return a :class:`RegistryLoggerAdapter` for ``name``.

    Parameters
    ----------
    name:
        Logger namespace, typically ``__name__``.
    level:
        Optional level set on this logger only.
    tags:
        Observability tags recorded as the ``tags`` field.
    extra:
        Fields bound to every record; ``None`` values are dropped.
    """

    configure_logging()
    base = logging.getLogger(name)
    if level is not None:
        base.setLevel(resolve_level(level))
    bound: Dict[str, object] = {"tags": tuple(tags)} if tags else {}
    bound.update({key: value for key, value in (extra or {}).items() if value is not None})
    return RegistryLoggerAdapter(base, bound)


def log_progress(
    logger: LoggerAdapter | Logger,
    message: str,
    *,
    phase: Optional[str] = None,
    step: Optional[str] = None,
    status: Optional[str] = None,
    result: Optional[str] = None,
    level: int = logging.INFO,
    extra: Optional[Mapping[str, object]] = None,
) -> None:
    """Log a pipeline step (resolve, validate, construct, normalize ...) with its outcome fields."""

    fields: Dict[str, object] = dict(extra or {})
    fields.update({key: value for key, value in (("phase", phase), ("step", step), ("status", status), ("result", result)) if value})
    if isinstance(logger, LoggerAdapter) and not isinstance(logger, RegistryLoggerAdapter):
        logger = RegistryLoggerAdapter(logger.logger, dict(logger.extra or {}))
    logger.log(level, message, extra=fields or None)


__all__ = [
    "RegistryLoggerAdapter",
    "StructuredLogFormatter",
    "configure_logging",
    "get_logger",
    "log_progress",
    "resolve_level",
]
