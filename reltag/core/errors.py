"""Process exit codes for reltag commands.

A release either ends tagged (exit 0) or aborted with one of the codes
below. The numeric values are part of the CLI contract and must stay
stable for scripts that wrap ``reltag tag``.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for CLI commands.

    - 0: Release tagged / command succeeded
    - 1: User error (invalid or missing version, cancelled, duplicate tag)
    - 2: Environment error (run lock held, signing unavailable, bad config)
    - 3: Workspace error (uncommitted or untracked changes)
    - 4: Tool error (changelog tool or git commit failed)
    - 5: I/O error (version record could not be written)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    WORKSPACE_ERROR = 3
    TOOL_ERROR = 4
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
