"""
Semantic version ordering used when resolving "latest" adapters.

Precedence follows Semantic Versioning 2.0.0: numeric major/minor/patch, a
pre-release ranks below its release, pre-release identifiers compare field by
field and build metadata is ignored. Strings that are not valid versions sort
below every valid one so a malformed registration never shadows a real release.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Iterable, List, Optional, Tuple

_SEMVER_PATTERN = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+(?P<build>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?$"
)


@dataclass(frozen=True, slots=True)
class SemanticVersion:
    """Parsed semantic version."""

    major: int
    minor: int
    patch: int
    prerelease: Tuple[str, ...] = ()
    build: Optional[str] = None

    @property
    def is_prerelease(self) -> bool:
        return bool(self.prerelease)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += "-" + ".".join(self.prerelease)
        if self.build:
            text += "+" + self.build
        return text


def parse_version(value: str) -> Optional[SemanticVersion]:
    """Parse ``value`` or return ``None`` when it is not a semantic version."""

    match = _SEMVER_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        return None
    prerelease = match.group("prerelease")
    return SemanticVersion(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=tuple(prerelease.split(".")) if prerelease else (),
        build=match.group("build"),
    )


def _compare_identifiers(left: str, right: str) -> int:
    left_numeric, right_numeric = left.isdigit(), right.isdigit()
    if left_numeric and right_numeric:
        return (int(left) > int(right)) - (int(left) < int(right))
    if left_numeric != right_numeric:
        # numeric identifiers always have lower precedence
        return -1 if left_numeric else 1
    return (left > right) - (left < right)


def _compare_prerelease(left: Tuple[str, ...], right: Tuple[str, ...]) -> int:
    if not left or not right:
        # a release outranks any of its pre-releases
        return (not left) - (not right)
    for left_id, right_id in zip(left, right):
        outcome = _compare_identifiers(left_id, right_id)
        if outcome:
            return outcome
    return (len(left) > len(right)) - (len(left) < len(right))


def compare_versions(left: str, right: str) -> int:
    """
    Compare two version strings.

    Returns a negative number when ``left`` has lower precedence, zero when both
    are equal under semver rules and a positive number otherwise.
    """

    parsed_left, parsed_right = parse_version(left), parse_version(right)
    if parsed_left is None or parsed_right is None:
        if parsed_left is None and parsed_right is None:
            return (left > right) - (left < right)
        return -1 if parsed_left is None else 1

    core_left = (parsed_left.major, parsed_left.minor, parsed_left.patch)
    core_right = (parsed_right.major, parsed_right.minor, parsed_right.patch)
    if core_left != core_right:
        return -1 if core_left < core_right else 1
    return _compare_prerelease(parsed_left.prerelease, parsed_right.prerelease)


def sort_versions(values: Iterable[str], *, descending: bool = True) -> List[str]:
    """
    Return ``values`` ordered by semver precedence (highest first by default).

    Versions of equal precedence (``1.0.0`` and ``1.0.0+build``) are ordered by
    their raw string so the result does not depend on input order.
    """

    precedence = cmp_to_key(compare_versions)
    return sorted(values, key=lambda value: (precedence(value), value), reverse=descending)


__all__ = ["SemanticVersion", "compare_versions", "parse_version", "sort_versions"]
