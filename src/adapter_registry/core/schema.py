"""
Requirement schema compiler.

Adapter options are described either as an :class:`OptionsSchema` tree (typed
configuration authored next to the adapter) or as a pydantic model. Both are
walked once at registration time into a flat, ordered list of
:class:`Requirement` records that the validator later checks against the
construction parameters.
"""

from __future__ import annotations

import collections.abc
import logging
import types
import typing
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from .logging import get_logger, log_progress

REQUIREMENT_TYPES = frozenset({"string", "number", "boolean", "object", "array", "function", "any"})

LOGGER = get_logger(__name__)


class SchemaCompileError(ValueError):
    """Raised when an options schema cannot be walked."""


@dataclass(frozen=True, slots=True)
class Requirement:
    """
    Single constraint on adapter construction parameters.

    Attributes
    ----------
    path:
        Dot-separated path into the parameters object (``options.privateKey``).
    type:
        Expected primitive type name or ``None``/``"any"`` when unconstrained.
    message:
        Human-readable explanation surfaced in validation errors.
    allow_undefined:
        When ``True`` the path may be absent.
    condition_path:
        Path of the nearest optional ancestor object. The requirement only
        applies when that ancestor is present in the parameters.
    """

    path: str
    type: Optional[str] = None
    message: Optional[str] = None
    allow_undefined: bool = False
    condition_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "path": self.path,
            "type": self.type,
            "message": self.message,
            "allow_undefined": self.allow_undefined,
        }
        if self.condition_path:
            payload["condition_path"] = self.condition_path
        return payload


@dataclass(frozen=True, slots=True)
class OptionField:
    """Leaf of an options schema describing a primitive value."""

    type: str = "any"
    optional: bool = False
    default: Any = None
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class OptionsSchema:
    """Nested object in an options schema."""

    fields: Mapping[str, Union[OptionField, "OptionsSchema"]] = field(default_factory=dict)
    optional: bool = False
    default: Any = None
    description: Optional[str] = None


SchemaLike = Union[OptionsSchema, type[BaseModel]]


FALLBACK_REQUIREMENTS: Mapping[str, Sequence[Requirement]] = {
    "ethers": (
        Requirement(
            path="options.privateKey",
            type="string",
            message="Private key for wallet (generates random if not provided)",
            allow_undefined=True,
        ),
        Requirement(path="options.provider", type="object", message="Optional provider configuration", allow_undefined=True),
    ),
    "web3auth": (
        Requirement(path="options.web3authConfig", type="object", message="Web3Auth configuration object is required"),
        Requirement(path="options.web3authConfig.clientId", type="string", message="Your Web3Auth Client ID is required"),
    ),
}


def _default_message(key: str, required: bool, type_name: str) -> str:
    return f"{key} is {'required' if required else 'optional'} and must be of type: {type_name}"


def _walk_tree(schema: OptionsSchema, base_path: str, condition_path: Optional[str]) -> List[Requirement]:
    if not isinstance(schema, OptionsSchema) or not isinstance(schema.fields, Mapping):
        raise SchemaCompileError(f"Expected an OptionsSchema at '{base_path}', got {type(schema).__name__}.")

    requirements: List[Requirement] = []
    for key, node in schema.fields.items():
        path = f"{base_path}.{key}"
        if isinstance(node, OptionsSchema):
            type_name = "object"
        elif isinstance(node, OptionField):
            type_name = node.type or "any"
            if type_name not in REQUIREMENT_TYPES:
                raise SchemaCompileError(f"Unknown type '{type_name}' for '{path}'.")
        else:
            raise SchemaCompileError(f"Invalid schema node at '{path}': {type(node).__name__}.")

        required = not node.optional and node.default is None
        requirements.append(
            Requirement(
                path=path,
                type=type_name,
                message=node.description or _default_message(key, required, type_name),
                allow_undefined=not required,
                condition_path=condition_path,
            )
        )
        if isinstance(node, OptionsSchema):
            requirements.extend(_walk_tree(node, path, condition_path if required else path))
    return requirements


def _unwrap_optional(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin in (Union, types.UnionType):
        members = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(members) == 1:
            return _unwrap_optional(members[0])
        return Any
    if origin is typing.Annotated:
        return _unwrap_optional(typing.get_args(annotation)[0])
    return annotation


def _annotation_type(annotation: Any) -> str:
    target = _unwrap_optional(annotation)
    origin = typing.get_origin(target) or target
    if origin is typing.Literal:
        values = typing.get_args(target)
        return _annotation_type(type(values[0])) if values else "any"
    if origin is Any:
        return "any"
    if isinstance(origin, type):
        if issubclass(origin, bool):
            return "boolean"
        if issubclass(origin, (int, float)):
            return "number"
        if issubclass(origin, str):
            return "string"
        if issubclass(origin, (BaseModel, dict, collections.abc.Mapping)):
            return "object"
        if issubclass(origin, (list, tuple, set, frozenset)):
            return "array"
    if origin is collections.abc.Callable:
        return "function"
    return "any"


def _nested_model(annotation: Any) -> Optional[type[BaseModel]]:
    target = _unwrap_optional(annotation)
    if isinstance(target, type) and issubclass(target, BaseModel):
        return target
    return None


def _walk_model(model: type[BaseModel], base_path: str, condition_path: Optional[str]) -> List[Requirement]:
    requirements: List[Requirement] = []
    for key, info in model.model_fields.items():
        # aliases are the keys callers actually pass
        name = info.alias or key
        path = f"{base_path}.{name}"
        required = info.is_required()
        type_name = _annotation_type(info.annotation)
        requirements.append(
            Requirement(
                path=path,
                type=type_name,
                message=info.description or _default_message(name, required, type_name),
                allow_undefined=not required,
                condition_path=condition_path,
            )
        )
        nested = _nested_model(info.annotation)
        if nested is not None:
            requirements.extend(_walk_model(nested, path, condition_path if required else path))
    return requirements


def fallback_requirements(adapter_name: str) -> List[Requirement]:
    """Return the hand-maintained requirement list for ``adapter_name`` (possibly empty)."""

    return list(FALLBACK_REQUIREMENTS.get(adapter_name, ()))


def compile_requirements(schema: Optional[SchemaLike], adapter_name: str, base_path: str = "options") -> List[Requirement]:
    """
    Compile ``schema`` into an ordered list of requirements.

    Parameters
    ----------
    schema:
        An :class:`OptionsSchema` tree or a pydantic model class describing the
        adapter's options object.
    adapter_name:
        Used to select degraded fallback requirements when the schema cannot be
        walked.
    base_path:
        Prefix for every generated path. Defaults to ``options``.
    """

    try:
        if isinstance(schema, OptionsSchema):
            return _walk_tree(schema, base_path, None)
        if isinstance(schema, type) and issubclass(schema, BaseModel):
            return _walk_model(schema, base_path, None)
        raise SchemaCompileError(f"Unsupported options schema for adapter '{adapter_name}': {schema!r}")
    except (SchemaCompileError, TypeError, AttributeError) as exc:
        fallback = fallback_requirements(adapter_name)
        log_progress(
            LOGGER,
            f"Falling back to known requirements for adapter '{adapter_name}': {exc}",
            phase="schema",
            result=f"{len(fallback)} fallback requirement(s)",
            level=logging.WARNING,
            extra={"adapter": adapter_name},
        )
        return fallback


__all__ = [
    "FALLBACK_REQUIREMENTS",
    "OptionField",
    "OptionsSchema",
    "REQUIREMENT_TYPES",
    "Requirement",
    "SchemaCompileError",
    "compile_requirements",
    "fallback_requirements",
]
