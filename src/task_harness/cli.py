"""CLI entrypoint for the task harness."""

from pathlib import Path
from typing import Optional

import click

from task_harness.config import ConfigError, HarnessConfig, load_config
from task_harness.errors import HarnessError


def config_options(func):
    """Options shared by every command that resolves a HarnessConfig."""
    options = [
        click.option(
            "--config",
            "config_file",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="YAML or JSON file with harness settings.",
        ),
        click.option(
            "--last-task",
            type=int,
            default=None,
            help="Highest task index to run (default: 25).",
        ),
        click.option(
            "--bin-dir",
            type=click.Path(),
            default=None,
            help="Directory holding the built task executables (default: target/release).",
        ),
        click.option(
            "--input-dir",
            type=click.Path(),
            default=None,
            help="Directory holding the task input files (default: input).",
        ),
        click.option(
            "--build-command",
            default=None,
            help="Build command to run first (default: 'cargo build --release').",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve(
    config_file: Optional[str],
    last_task: Optional[int] = None,
    bin_dir: Optional[str] = None,
    input_dir: Optional[str] = None,
    build_command: Optional[str] = None,
) -> HarnessConfig:
    try:
        return load_config(
            config_file=Path(config_file) if config_file else None,
            overrides={
                "last_task": last_task,
                "bin_dir": bin_dir,
                "input_dir": input_dir,
                "build_command": build_command,
            },
        )
    except ConfigError as e:
        click.echo(f"Configuration error:\n{e}", err=True)
        raise SystemExit(e.exit_code)


def _run(config: HarnessConfig):
    from task_harness.harness_runner import run_harness

    try:
        run_harness(config)
    except HarnessError as e:
        # The failing process has already reported on its own stderr
        raise SystemExit(e.exit_code)


@click.group(invoke_without_command=True)
@click.version_option(package_name="task-harness")
@click.pass_context
def cli(ctx):
    """Build the project, then run every task executable against its input."""
    if ctx.invoked_subcommand is None:
        _run(_resolve(None))


@cli.command("run")
@config_options
def run_command(config_file, last_task, bin_dir, input_dir, build_command):
    """Build and run all tasks, with optional overrides."""
    _run(_resolve(config_file, last_task, bin_dir, input_dir, build_command))


@cli.command("plan")
@config_options
def plan(config_file, last_task, bin_dir, input_dir, build_command):
    """Show the build command and task table without running anything."""
    from task_harness.execution_loop import build_task_spec, iter_task_indices

    config = _resolve(config_file, last_task, bin_dir, input_dir, build_command)

    click.echo(f"Build: {config.build_command}")
    click.echo(f"Tasks: {config.last_task}")
    click.echo()
    for index in iter_task_indices(config.last_task):
        spec = build_task_spec(config, index)
        click.echo(f"  {index:>3}  {spec.executable_path}  {spec.input_path}")


@cli.command("check-config")
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML or JSON file with harness settings.",
)
def check_config(config_file: Optional[str]):
    """Check that the harness configuration resolves and is valid."""
    config = _resolve(config_file)

    click.echo("Configuration loaded successfully!")
    click.echo(f"  last_task: {config.last_task}")
    click.echo(f"  build_command: {config.build_command}")
    click.echo(f"  bin_dir: {config.bin_dir}")
    click.echo(f"  input_dir: {config.input_dir}")
    click.echo(f"  task name: {config.task_prefix}<i>")
    click.echo(f"  input name: {config.input_prefix}<i>{config.input_suffix}")
    click.echo(f"  label: {config.label} <i>")


if __name__ == "__main__":
    cli()
