"""
Semantic version checks used for release boundaries.

Only the strict semver.org 2.0.0 grammar is accepted, with an optional
leading ``v`` and surrounding whitespace ignored. Values that are not
strings are never valid versions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Optional

MAX_LENGTH = 256

_NUMERIC = r"0|[1-9]\d*"
_PRERELEASE_ID = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
_BUILD_ID = r"[0-9a-zA-Z-]+"

SEMVER_RE = re.compile(
    rf"v?({_NUMERIC})\.({_NUMERIC})\.({_NUMERIC})"
    rf"(?:-({_PRERELEASE_ID}(?:\.{_PRERELEASE_ID})*))?"
    rf"(?:\+({_BUILD_ID}(?:\.{_BUILD_ID})*))?"
)


@dataclass(frozen=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            text += f"-{self.prerelease}"
        if self.build:
            text += f"+{self.build}"
        return text


def parse_semver(value: Any) -> Optional[SemVer]:
    """Parse ``value`` as a semantic version, returning ``None`` if invalid."""
    if not isinstance(value, str) or len(value) > MAX_LENGTH:
        return None
    match = SEMVER_RE.fullmatch(value.strip())
    if not match:
        return None
    major, minor, patch, prerelease, build = match.groups()
    return SemVer(int(major), int(minor), int(patch), prerelease, build)


def is_valid_semver(value: Any) -> bool:
    return parse_semver(value) is not None
