from __future__ import annotations

import re
from dataclasses import dataclass, replace

from reltag.core.result import Err, Ok, Result
from reltag.release.errors import ValidationError

# Semantic Versioning 2.0.0: numeric identifiers have no leading zeros,
# prerelease and build are dot-separated [0-9A-Za-z-] identifiers.
_NUM = r"0|[1-9]\d*"
_PRE_ID = r"(?:0|[1-9]\d*|\d*[A-Za-z-][0-9A-Za-z-]*)"
_BUILD_ID = r"[0-9A-Za-z-]+"
_SEMVER_RE = re.compile(
    rf"(?P<major>{_NUM})\.(?P<minor>{_NUM})\.(?P<patch>{_NUM})"
    rf"(?:-(?P<prerelease>{_PRE_ID}(?:\.{_PRE_ID})*))?"
    rf"(?:\+(?P<build>{_BUILD_ID}(?:\.{_BUILD_ID})*))?"
)


@dataclass(frozen=True, slots=True)
class SemVer:
    major: int
    minor: int
    patch: int
    prerelease: str | None = None
    build: str | None = None

    def __str__(self) -> str:
        out = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease is not None:
            out += f"-{self.prerelease}"
        if self.build is not None:
            out += f"+{self.build}"
        return out


def parse_semver(value: str) -> Result[SemVer, ValidationError]:
    """Parse a strict semantic version (no ``v`` prefix, no whitespace)."""
    m = _SEMVER_RE.fullmatch(value)
    if m is None:
        shown = value if value else "<empty>"
        hint = None
        if value[:1] in ("v", "V") and _SEMVER_RE.fullmatch(value[1:]):
            hint = f"Drop the 'v' prefix: {value[1:]}"
        error = ValidationError(message=f"invalid semantic version: {shown}", value=value)
        if hint is not None:
            error = replace(error, hint=hint)
        return Err(error)

    return Ok(
        SemVer(
            major=int(m.group("major")),
            minor=int(m.group("minor")),
            patch=int(m.group("patch")),
            prerelease=m.group("prerelease"),
            build=m.group("build"),
        )
    )
