"""Run lock: one release run per repository at a time.

The lock file lives in the ``.git`` directory so holding it never makes
the working tree dirty. It is created with ``O_CREAT | O_EXCL`` and
holds the pid of its owner. A lock left behind by a crashed run must be
removed by hand; the error names the file.
"""

from __future__ import annotations

import contextlib
import logging
import os
from collections.abc import Iterator
from pathlib import Path

from reltag.core.result import Err, Ok, Result
from reltag.release.errors import LockError

__all__ = ["LOCK_FILENAME", "RunLock"]

LOCK_FILENAME = "reltag.lock"

logger = logging.getLogger(__name__)


class RunLock:
    def __init__(self, path: Path) -> None:
        self.path = path
        self._held = False

    def acquire(self) -> Result[None, LockError]:
        try:
            fd = os.open(self.path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            owner = _read_owner(self.path)
            return Err(
                LockError(
                    f"another release run holds {self.path}" + (f" (pid {owner})" if owner else ""),
                    path=self.path,
                    hint=f"If no release is running, delete {self.path} and re-run.",
                )
            )
        except OSError as e:
            return Err(LockError(f"cannot create lock {self.path}: {e}", path=self.path))

        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(f"{os.getpid()}\n")
        self._held = True
        logger.debug("acquired run lock %s", self.path)
        return Ok(None)

    def release(self) -> None:
        if not self._held:
            return
        self.path.unlink(missing_ok=True)
        self._held = False
        logger.debug("released run lock %s", self.path)

    @contextlib.contextmanager
    def hold(self) -> Iterator[Result[None, LockError]]:
        """Acquire for the duration of a ``with`` block.

        The block receives the acquisition result and must check it; the
        lock is released on exit only if it was acquired.
        """
        acquired = self.acquire()
        try:
            yield acquired
        finally:
            self.release()


def _read_owner(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8").strip() or None
    except OSError:
        return None
