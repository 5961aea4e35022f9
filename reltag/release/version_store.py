"""Version Store: the durable "version to release next" record.

The record is a single line holding a semantic version, written by
``reltag set-version`` and read by ``reltag tag``. It is overwritten,
never appended to; history lives in git.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from reltag.core.result import Err, Ok, Result
from reltag.platform.files import atomic_write_text
from reltag.release.errors import NotFoundError, ValidationError, VersionWriteError
from reltag.release.semver import parse_semver

__all__ = ["FileVersionStore", "MemoryVersionStore", "VersionStore"]

logger = logging.getLogger(__name__)


class VersionStore(Protocol):
    def get_version(self) -> Result[str, NotFoundError]: ...

    def set_version(self, version: str) -> Result[None, ValidationError | VersionWriteError]: ...


class FileVersionStore:
    """Version record kept in a plain text file (``VERSION`` by default)."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def get_version(self) -> Result[str, NotFoundError]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return Err(
                NotFoundError(f"no version recorded: {self.path} does not exist", path=self.path)
            )
        except OSError as e:
            return Err(NotFoundError(f"cannot read {self.path}: {e}", path=self.path))

        lines = raw.splitlines()
        value = lines[0].strip() if lines else ""
        if not value:
            return Err(
                NotFoundError(f"no version recorded: {self.path} is empty", path=self.path)
            )
        return Ok(value)

    def set_version(self, version: str) -> Result[None, ValidationError | VersionWriteError]:
        """Validate ``version`` and overwrite the record.

        The previous value survives any failure: validation happens before
        the write, and the write replaces the file atomically.
        """
        parsed = parse_semver(version)
        if isinstance(parsed, Err):
            return parsed

        try:
            atomic_write_text(self.path, version)
        except OSError as e:
            return Err(VersionWriteError(f"cannot write {self.path}: {e}", path=self.path))

        logger.info("version record %s set to %s", self.path, version)
        return Ok(None)


@dataclass
class MemoryVersionStore:
    """In-process store, for dry runs and tests."""

    value: str | None = None
    writes: list[str] = field(default_factory=list)

    def get_version(self) -> Result[str, NotFoundError]:
        if not self.value:
            return Err(NotFoundError("no version recorded"))
        return Ok(self.value)

    def set_version(self, version: str) -> Result[None, ValidationError | VersionWriteError]:
        parsed = parse_semver(version)
        if isinstance(parsed, Err):
            return parsed
        self.value = version
        self.writes.append(version)
        return Ok(None)
