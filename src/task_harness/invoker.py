"""Blocking child-process invocation.

An invoker is any callable ``(argv, stdout, stderr) -> returncode`` that
returns only after the process has exited. Streams are handed to the child
as-is; ``None`` means inherit the harness's own.
"""

import subprocess
from typing import IO, Callable, List, Optional

from task_harness.constants import EXIT_NOT_EXECUTABLE, EXIT_NOT_FOUND

Invoker = Callable[[List[str], Optional[IO], Optional[IO]], int]


def subprocess_invoke(
    argv: List[str],
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
) -> int:
    """
    Run argv to completion without capturing output.

    Raises:
        OSError: If the executable is missing or cannot be started.
    """
    result = subprocess.run(argv, stdout=stdout, stderr=stderr, check=False)
    return result.returncode


def start_failure_code(error: OSError) -> int:
    """Exit code a shell would report for a command that failed to start."""
    if isinstance(error, FileNotFoundError):
        return EXIT_NOT_FOUND
    return EXIT_NOT_EXECUTABLE
