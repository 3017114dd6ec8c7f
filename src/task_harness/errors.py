"""Failure types for the task harness.

Every failure is fatal. The CLI turns them into the process exit status.
"""

from typing import Optional


def exit_status(returncode: int) -> int:
    """
    Map a child returncode to the harness exit status, shell style.

    Negative returncodes (killed by signal N) become 128 + N.
    Values that would wrap to 0 as a process status become 1.
    """
    if returncode < 0:
        return 128 + (-returncode)
    if returncode % 256 == 0:
        return 1 if returncode else 0
    return returncode % 256


class HarnessError(Exception):
    """Base class for fatal harness failures."""

    def __init__(self, message: str, returncode: int):
        super().__init__(message)
        self.returncode = returncode

    @property
    def exit_code(self) -> int:
        return exit_status(self.returncode) or 1


class BuildFailure(HarnessError):
    """Build command exited non-zero or could not be started."""

    def __init__(self, returncode: int, detail: Optional[str] = None):
        message = f"Build failed with exit code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, returncode)
        self.detail = detail


class TaskExecutionFailure(HarnessError):
    """A task executable was missing, not invocable, or exited non-zero."""

    def __init__(self, index: int, returncode: int, detail: Optional[str] = None):
        message = f"Task {index} failed with exit code {returncode}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, returncode)
        self.index = index
        self.detail = detail
