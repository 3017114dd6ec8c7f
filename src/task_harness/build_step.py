"""Build step: one synchronous invocation of the external build command."""

import shlex
from typing import IO, Optional

import click

from task_harness.config import HarnessConfig
from task_harness.errors import BuildFailure
from task_harness.invoker import Invoker, start_failure_code, subprocess_invoke


def run_build(
    config: HarnessConfig,
    invoker: Invoker = subprocess_invoke,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
) -> None:
    """
    Run the configured build command and block until it exits.

    The build's own output is passed through untouched.

    Raises:
        BuildFailure: If the command exits non-zero or cannot be started.
    """
    cmd = shlex.split(config.build_command)

    try:
        returncode = invoker(cmd, stdout, stderr)
    except OSError as e:
        # No child ran, so nothing else would explain the failure
        click.echo(
            f"Error: cannot run build command {cmd[0]!r}: {e}",
            file=stderr,
            err=stderr is None,
        )
        raise BuildFailure(start_failure_code(e), detail=str(e))

    if returncode != 0:
        raise BuildFailure(returncode)
