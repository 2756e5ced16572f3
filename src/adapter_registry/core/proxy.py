"""
Error-normalizing interception layer.

:class:`AdapterProxy` wraps a constructed adapter instance. Every callable member
is looked up once, gated against the adapter's declared capabilities and wrapped
so that failures surface as a single :class:`AdapterError` shape. Non-callable
members pass through untouched.
"""

from __future__ import annotations

import functools
import inspect
import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from ..adapters.base import AdapterError, AdapterErrorCode
from .capabilities import Capability, parse_capabilities, required_capability
from .logging import get_logger, log_progress

LOGGER = get_logger(__name__)

_PROXY_SLOTS = (
    "_proxy_target",
    "_proxy_capabilities",
    "_proxy_error_map",
    "_proxy_default_code",
    "_proxy_context",
    "_proxy_cache",
)


def _lookup(source: Any, *path: str) -> Any:
    current = source
    for segment in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(segment)
        else:
            current = getattr(current, segment, None)
    return current


def _first_present(*candidates: Any) -> Any:
    for candidate in candidates:
        if candidate is not None:
            return candidate
    return None


def extract_error_details(error: BaseException) -> Dict[str, Any]:
    """
    Collect diagnostic hints carried by ``error``.

    Recognised attributes (or mapping keys) are revert data (``data``,
    ``error.data``, ``info.error.data``), the RPC request payload
    (``info.payload``, ``payload``), a transaction echo, response and error
    bodies, a ``reason`` string, and nested ``details`` or cause of a wrapped
    error. Only present values are returned.
    """

    cause = _first_present(getattr(error, "cause", None), error.__cause__)
    details = {
        "revert": _first_present(_lookup(error, "data"), _lookup(error, "error", "data"), _lookup(error, "info", "error", "data")),
        "rpc_payload": _first_present(_lookup(error, "info", "payload"), _lookup(error, "payload")),
        "transaction": _lookup(error, "transaction"),
        "response_body": _lookup(error, "response", "body"),
        "error_body": _lookup(error, "error", "body"),
        "reason": _lookup(error, "reason"),
        "inner_details": _lookup(error, "details"),
        "inner_cause": repr(cause) if cause is not None else None,
    }
    return {key: value for key, value in details.items() if value is not None}


def match_error_code(message: str, error_map: Mapping[str, str], default_code: Optional[str] = None) -> Optional[str]:
    """Return the code of the first ``error_map`` substring found in ``message``."""

    for fragment, code in error_map.items():
        if fragment and fragment in message:
            return code.value if isinstance(code, Enum) else str(code)
    return default_code


class AdapterProxy:
    """
    Capability-gating, error-normalizing wrapper around an adapter instance.

    Parameters
    ----------
    target:
        The constructed adapter.
    capabilities:
        Capabilities the adapter declared at registration.
    error_map:
        Ordered message-substring to code mapping applied to raw failures.
    default_error_code:
        Code used when no ``error_map`` entry matches.
    context_name:
        Label prefixed to normalized error messages (e.g. ``"Wallet"``).
    """

    __slots__ = _PROXY_SLOTS

    def __init__(
        self,
        target: Any,
        capabilities: Iterable[Capability | str],
        *,
        error_map: Optional[Mapping[str, str]] = None,
        default_error_code: Optional[str] = None,
        context_name: str = "Adapter",
    ) -> None:
        object.__setattr__(self, "_proxy_target", target)
        object.__setattr__(self, "_proxy_capabilities", parse_capabilities(capabilities))
        object.__setattr__(self, "_proxy_error_map", dict(error_map or {}))
        object.__setattr__(self, "_proxy_default_code", default_error_code)
        object.__setattr__(self, "_proxy_context", context_name)
        object.__setattr__(self, "_proxy_cache", {})

    @property
    def __wrapped__(self) -> Any:
        return self._proxy_target

    @property
    def declared_capabilities(self) -> Tuple[Capability, ...]:
        return self._proxy_capabilities

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_proxy_"):
            # reached only when the slot is unset (copy, unpickling)
            raise AttributeError(name)
        cache: Dict[str, Callable[..., Any]] = self._proxy_cache
        if name in cache:
            return cache[name]
        capability = required_capability(name)
        if capability is not None and capability not in self._proxy_capabilities:
            # the target may not define the method at all
            cache[name] = self._unsupported(name, capability)
            return cache[name]
        value = getattr(self._proxy_target, name)
        if not callable(value):
            return value
        wrapped = self._wrap(name, value)
        cache[name] = wrapped
        return wrapped

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self._proxy_target, name, value)
        self._proxy_cache.pop(name, None)

    def __dir__(self) -> Iterable[str]:
        return sorted(set(dir(self._proxy_target)) | {"__wrapped__", "declared_capabilities"})

    def __repr__(self) -> str:
        return f"AdapterProxy({self._proxy_context}, {self._proxy_target!r})"

    def _wrap(self, name: str, method: Callable[..., Any]) -> Callable[..., Any]:
        if inspect.iscoroutinefunction(method):

            @functools.wraps(method)
            async def async_call(*args: Any, **kwargs: Any) -> Any:
                try:
                    return await method(*args, **kwargs)
                except AdapterError:
                    raise
                except Exception as exc:
                    raise self._normalize(name, exc) from exc

            return async_call

        @functools.wraps(method)
        def call(*args: Any, **kwargs: Any) -> Any:
            try:
                result = method(*args, **kwargs)
            except AdapterError:
                raise
            except Exception as exc:
                raise self._normalize(name, exc) from exc
            if inspect.isawaitable(result):
                return self._guard_awaitable(name, result)
            return result

        return call

    async def _guard_awaitable(self, name: str, awaitable: Any) -> Any:
        try:
            return await awaitable
        except AdapterError:
            raise
        except Exception as exc:
            raise self._normalize(name, exc) from exc

    def _unsupported(self, name: str, capability: Capability) -> Callable[..., Any]:
        context = self._proxy_context

        def unsupported(*args: Any, **kwargs: Any) -> Any:
            raise AdapterError(
                f"Method '{name}' is not supported by {context}. It lacks the required capability: '{capability.value}'.",
                code=AdapterErrorCode.METHOD_NOT_SUPPORTED,
                method_name=name,
                details={"capability": capability.value},
            )

        unsupported.__name__ = name
        return unsupported

    def _normalize(self, name: str, error: Exception) -> AdapterError:
        message = str(error) or type(error).__name__
        code = match_error_code(message, self._proxy_error_map, self._proxy_default_code)
        details = extract_error_details(error)
        log_progress(
            LOGGER,
            f"{self._proxy_context} method '{name}' failed: {message}",
            phase="call",
            status="failed",
            level=logging.ERROR,
            extra={"method": name, "code": code},
        )
        suffix = f" (revert={details['revert']})" if "revert" in details else ""
        return AdapterError(
            f"{self._proxy_context} method '{name}' failed: {message}{suffix}",
            code=code,
            method_name=name,
            details=details,
            cause=error,
        )


def wrap_adapter(
    instance: Any,
    capabilities: Iterable[Capability | str],
    *,
    error_map: Optional[Mapping[str, str]] = None,
    default_error_code: Optional[str] = None,
    context_name: str = "Adapter",
) -> AdapterProxy:
    """Wrap ``instance`` in an :class:`AdapterProxy`."""

    return AdapterProxy(instance, capabilities, error_map=error_map, default_error_code=default_error_code, context_name=context_name)


def unwrap_adapter(candidate: Any) -> Any:
    """Return the wrapped adapter when ``candidate`` is a proxy, else ``candidate`` itself."""

    if isinstance(candidate, AdapterProxy):
        return candidate.__wrapped__
    return candidate


__all__ = ["AdapterProxy", "extract_error_details", "match_error_code", "unwrap_adapter", "wrap_adapter"]
