"""
Base protocols and the normalized error shape shared by every adapter.

Adapters are narrow in scope: a construction handle exposing an async ``create``
classmethod plus the methods implied by the capabilities they claim. Selection,
validation and error normalization are handled by the registry and factory
layers so adapters stay swappable.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol


class AdapterErrorCode(str, Enum):
    """Codes raised by the registry, validator and factory layers."""

    ADAPTER_NOT_FOUND = "ADAPTER_NOT_FOUND"
    ENVIRONMENT_MISMATCH = "ENVIRONMENT_MISMATCH"
    MISSING_ADAPTER_REQUIREMENT = "MISSING_ADAPTER_REQUIREMENT"
    INVALID_ADAPTER_REQUIREMENT_TYPE = "INVALID_ADAPTER_REQUIREMENT_TYPE"
    INCOMPATIBLE_ADAPTER = "INCOMPATIBLE_ADAPTER"
    METHOD_NOT_SUPPORTED = "METHOD_NOT_SUPPORTED"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INITIALIZATION_FAILED = "INITIALIZATION_FAILED"
    UNKNOWN = "UNKNOWN"


class WalletErrorCode(str, Enum):
    """Codes wallet adapters map their failures onto."""

    UNKNOWN = "UNKNOWN"
    ENVIRONMENT_MISMATCH = "ENVIRONMENT_MISMATCH"
    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    ADAPTER_NOT_INITIALIZED = "ADAPTER_NOT_INITIALIZED"
    WALLET_NOT_CONNECTED = "WALLET_NOT_CONNECTED"
    PROVIDER_NOT_FOUND = "PROVIDER_NOT_FOUND"
    NETWORK_ERROR = "NETWORK_ERROR"
    USER_REJECTED = "USER_REJECTED"
    INVALID_INPUT = "INVALID_INPUT"
    TRANSACTION_FAILED = "TRANSACTION_FAILED"
    SIGNATURE_FAILED = "SIGNATURE_FAILED"
    METHOD_NOT_SUPPORTED = "METHOD_NOT_SUPPORTED"
    FEATURE_NOT_SUPPORTED = "FEATURE_NOT_SUPPORTED"
    ADAPTER_NOT_FOUND = "ADAPTER_NOT_FOUND"
    MISSING_CONFIG = "MISSING_CONFIG"
    INITIALIZATION_FAILED = "INITIALIZATION_FAILED"
    CONNECTION_FAILED = "CONNECTION_FAILED"
    ACCOUNT_UNAVAILABLE = "ACCOUNT_UNAVAILABLE"
    GAS_ESTIMATION_FAILED = "GAS_ESTIMATION_FAILED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    TRANSACTION_RECEIPT_FAILED = "TRANSACTION_RECEIPT_FAILED"
    TOKEN_BALANCE_FAILED = "TOKEN_BALANCE_FAILED"
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    CONTRACT_CALL_FAILED = "CONTRACT_CALL_FAILED"


class SmartContractErrorCode(str, Enum):
    """Codes smart-contract adapters map their failures onto."""

    UNKNOWN = "SC_UNKNOWN"
    ADAPTER_NOT_INITIALIZED = "SC_ADAPTER_NOT_INITIALIZED"
    NETWORK_ERROR = "SC_NETWORK_ERROR"
    INVALID_INPUT = "SC_INVALID_INPUT"
    COMPILATION_FAILED = "SC_COMPILATION_FAILED"
    DEPLOYMENT_FAILED = "SC_DEPLOYMENT_FAILED"
    METHOD_CALL_FAILED = "SC_METHOD_CALL_FAILED"
    READ_CALL_FAILED = "SC_READ_CALL_FAILED"
    WRITE_CALL_FAILED = "SC_WRITE_CALL_FAILED"
    INVALID_ABI = "SC_INVALID_ABI"
    CONTRACT_NOT_FOUND = "SC_CONTRACT_NOT_FOUND"
    WALLET_REQUIRED = "SC_WALLET_REQUIRED"


class CrossChainErrorCode(str, Enum):
    """Codes cross-chain adapters map their failures onto."""

    UNKNOWN = "CC_UNKNOWN"
    ADAPTER_NOT_INITIALIZED = "CC_ADAPTER_NOT_INITIALIZED"
    NETWORK_ERROR = "CC_NETWORK_ERROR"
    INVALID_INPUT = "CC_INVALID_INPUT"
    QUOTE_FAILED = "CC_QUOTE_FAILED"
    EXECUTION_FAILED = "CC_EXECUTION_FAILED"
    PROVIDER_SETUP_FAILED = "CC_PROVIDER_SETUP_FAILED"
    STATUS_CHECK_FAILED = "CC_STATUS_CHECK_FAILED"
    UNSUPPORTED_CHAIN = "CC_UNSUPPORTED_CHAIN"
    UNSUPPORTED_TOKEN = "CC_UNSUPPORTED_TOKEN"
    OPERATION_NOT_FOUND = "CC_OPERATION_NOT_FOUND"


def _code_value(code: Enum | str | None) -> Optional[str]:
    if code is None:
        return None
    return str(code.value) if isinstance(code, Enum) else str(code)


class AdapterError(RuntimeError):
    """
    Normalized error raised at every adapter boundary.

    Parameters
    ----------
    message:
        Human-readable description.
    code:
        Optional machine-readable code. Enum members are stored as their string
        value so callers can compare against either form.
    method_name:
        Adapter method (or registry operation) where the failure happened.
    details:
        Structured diagnostics extracted from the original failure.
    cause:
        The original exception, if any.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Enum | str | None = None,
        method_name: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = _code_value(code)
        self.method_name = method_name
        self.details: Dict[str, Any] = dict(details or {})
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        prefix = f"[{self.code}] " if self.code else ""
        return f"{prefix}{self.message}"

    def __repr__(self) -> str:
        return f"AdapterError(message={self.message!r}, code={self.code!r}, method_name={self.method_name!r})"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation useful for CLI output."""

        return {
            "message": self.message,
            "code": self.code,
            "method_name": self.method_name,
            "details": dict(self.details),
            "cause": repr(self.cause) if self.cause is not None else None,
        }


class AdapterConstructor(Protocol):
    """Construction handle every registrable adapter class exposes."""

    @classmethod
    async def create(cls, *, name: str, version: str, options: Mapping[str, Any]) -> Any:
        """Build and return a ready-to-use adapter instance."""


__all__ = [
    "AdapterConstructor",
    "AdapterError",
    "AdapterErrorCode",
    "CrossChainErrorCode",
    "SmartContractErrorCode",
    "WalletErrorCode",
]
