"""Top-level harness run.

Build once, run every task, report total time.
"""

from typing import IO, Optional

import click

from task_harness.build_step import run_build
from task_harness.config import HarnessConfig
from task_harness.execution_loop import run_execution_loop
from task_harness.execution_state import ExecutionReport
from task_harness.invoker import Invoker, subprocess_invoke
from task_harness.timing import Stopwatch, format_summary


def run_harness(
    config: HarnessConfig,
    invoker: Invoker = subprocess_invoke,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
    stopwatch: Optional[Stopwatch] = None,
) -> ExecutionReport:
    """
    Main entry point: build, run the execution loop, print the timing line.

    The timing line is printed whether the run completes or aborts.

    Args:
        config: Resolved harness configuration.
        invoker: Blocking process invoker (default: subprocess).
        stdout: Handle for labels, summary and child stdout (default: inherit).
        stderr: Handle for child stderr (default: inherit).
        stopwatch: Timer to use (default: a fresh Stopwatch).

    Returns:
        ExecutionReport for a fully successful run.

    Raises:
        BuildFailure: If the build fails; no task runs.
        TaskExecutionFailure: For the first failing task; later tasks are skipped.
    """
    stopwatch = stopwatch or Stopwatch()
    report = ExecutionReport()

    stopwatch.start()
    try:
        run_build(config, invoker, stdout, stderr)
        report.results = run_execution_loop(config, invoker, stdout, stderr)
    finally:
        report.elapsed = stopwatch.stop()
        click.echo(format_summary(report.elapsed), file=stdout)

    return report
