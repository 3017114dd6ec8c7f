"""Execution loop: run each task once, in ascending order, stopping at the first failure."""

from pathlib import Path
from typing import IO, Iterator, List, Optional

import click

from task_harness.config import HarnessConfig
from task_harness.errors import TaskExecutionFailure
from task_harness.execution_state import RunResult, TaskSpec
from task_harness.invoker import Invoker, start_failure_code, subprocess_invoke


def task_name(prefix: str, index: int) -> str:
    """Name for task `index`: the prefix followed by the decimal index."""
    return f"{prefix}{index}"


def build_task_spec(config: HarnessConfig, index: int) -> TaskSpec:
    """Derive the executable and input paths for one task index."""
    return TaskSpec(
        index=index,
        executable_path=Path(config.bin_dir) / task_name(config.task_prefix, index),
        input_path=Path(config.input_dir)
        / (task_name(config.input_prefix, index) + config.input_suffix),
    )


def iter_task_indices(last_task: int) -> Iterator[int]:
    """Lazily yield task indices 1..last_task in ascending order."""
    yield from range(1, last_task + 1)


def execution_node(
    spec: TaskSpec,
    invoker: Invoker = subprocess_invoke,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
) -> RunResult:
    """
    Run one task executable against its input file and wait for it.

    Never raises for process-level failures: a missing or non-executable
    binary becomes a RunResult with exit code 127 or 126.
    """
    try:
        returncode = invoker(spec.argv(), stdout, stderr)
    except OSError as e:
        click.echo(
            f"Error: cannot run {spec.executable_path}: {e}",
            file=stderr,
            err=stderr is None,
        )
        return RunResult(index=spec.index, returncode=start_failure_code(e), error=str(e))

    return RunResult(index=spec.index, returncode=returncode)


def iter_task_runs(
    config: HarnessConfig,
    invoker: Invoker = subprocess_invoke,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
) -> Iterator[RunResult]:
    """
    Lazily run tasks 1..last_task, yielding each result.

    Each run is framed by a "<label> <i>" line and a trailing blank line.
    A failed run gets no trailing blank line: its result is yielded and the
    generator ends, so nothing further runs.
    A caller that stops consuming early also stops the loop.
    """
    for index in iter_task_indices(config.last_task):
        spec = build_task_spec(config, index)

        # click.echo flushes, so the label lands before any child output
        click.echo(f"{config.label} {index}", file=stdout)
        result = execution_node(spec, invoker, stdout, stderr)
        if not result.succeeded:
            yield result
            return

        click.echo(file=stdout)
        yield result


def run_execution_loop(
    config: HarnessConfig,
    invoker: Invoker = subprocess_invoke,
    stdout: Optional[IO] = None,
    stderr: Optional[IO] = None,
) -> List[RunResult]:
    """
    Run every task in order.

    Returns:
        Results of all tasks, in index order.

    Raises:
        TaskExecutionFailure: For the first task that does not exit 0.
    """
    results = []
    for result in iter_task_runs(config, invoker, stdout, stderr):
        results.append(result)

    last = results[-1] if results else None
    if last is not None and not last.succeeded:
        raise TaskExecutionFailure(last.index, last.returncode, detail=last.error)

    return results
