"""End-to-end tests with real child processes (POSIX shell scripts)."""

import json
import shlex
import stat
import sys

import pytest
from click.testing import CliRunner

from task_harness.cli import cli
from task_harness.config import HarnessConfig
from task_harness.constants import ENV_VARS
from task_harness.errors import BuildFailure, TaskExecutionFailure
from task_harness.harness_runner import run_harness

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell scripts")


# =============================================================================
# FIXTURES
# =============================================================================

TASK_SCRIPT = """#!/bin/sh
echo "$(basename "$0") $1" >> "{log}"
if [ ! -f "$1" ]; then
    echo "missing input: $1" >&2
    exit 2
fi
echo ok
exit {code}
"""


def python_command(code: int) -> str:
    return shlex.join([sys.executable, "-c", f"import sys; sys.exit({code})"])


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ENV_VARS.values():
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project(tmp_path):
    """A fake build output with day1..day3 and input1..input3.txt."""
    bin_dir = tmp_path / "bin"
    input_dir = tmp_path / "input"
    bin_dir.mkdir()
    input_dir.mkdir()
    log = tmp_path / "calls.log"

    def make(last_task=3, failing=None, missing_input=None):
        failing = failing or {}
        for i in range(1, last_task + 1):
            script = bin_dir / f"day{i}"
            script.write_text(TASK_SCRIPT.format(log=log, code=failing.get(i, 0)))
            script.chmod(script.stat().st_mode | stat.S_IXUSR)
            if i != missing_input:
                (input_dir / f"input{i}.txt").write_text(f"input {i}\n")
        return HarnessConfig(
            last_task=last_task,
            build_command=python_command(0),
            bin_dir=str(bin_dir),
            input_dir=str(input_dir),
        )

    make.log = log
    return make


def called_tasks(log):
    if not log.exists():
        return []
    return [line.split()[0] for line in log.read_text().splitlines()]


# =============================================================================
# PASSTHROUGH
# =============================================================================

class TestPassthrough:
    """Child output goes straight to the harness's own streams."""

    def test_three_tasks_in_order(self, project, capfd):
        """Labels and child output interleave in strict order."""
        config = project()

        report = run_harness(config)

        out, _ = capfd.readouterr()
        assert out.startswith("Day 1\nok\n\nDay 2\nok\n\nDay 3\nok\n\nreal ")
        assert report.exit_codes == [0, 0, 0]
        assert called_tasks(project.log) == ["day1", "day2", "day3"]

    def test_each_task_gets_its_own_input(self, project):
        config = project()
        run_harness(config)
        args = [line.split()[1] for line in project.log.read_text().splitlines()]
        assert [a.rsplit("/", 1)[-1] for a in args] == ["input1.txt", "input2.txt", "input3.txt"]

    def test_task_failure_halts(self, project, capfd):
        """Task 2 exits 1: no task 3 block."""
        config = project(failing={2: 1})

        with pytest.raises(TaskExecutionFailure) as exc_info:
            run_harness(config)

        out, _ = capfd.readouterr()
        assert "Day 2\nok\n" in out
        assert "Day 3" not in out
        assert exc_info.value.exit_code == 1
        assert called_tasks(project.log) == ["day1", "day2"]

    def test_missing_input_is_task_failure(self, project, capfd):
        """The task reports its missing input itself; the harness just stops."""
        config = project(missing_input=2)

        with pytest.raises(TaskExecutionFailure) as exc_info:
            run_harness(config)

        _, err = capfd.readouterr()
        assert "missing input" in err
        assert exc_info.value.index == 2
        assert exc_info.value.exit_code == 2

    def test_missing_executable(self, project, capfd):
        """A missing binary stops the run with 127."""
        config = project(last_task=2)
        config.last_task = 3

        with pytest.raises(TaskExecutionFailure) as exc_info:
            run_harness(config)

        assert exc_info.value.index == 3
        assert exc_info.value.exit_code == 127
        assert called_tasks(project.log) == ["day1", "day2"]

    def test_build_failure(self, project, capfd):
        """Failed build: no labels, no tasks."""
        config = project()
        config.build_command = python_command(3)

        with pytest.raises(BuildFailure) as exc_info:
            run_harness(config)

        out, _ = capfd.readouterr()
        assert "Day" not in out
        assert exc_info.value.exit_code == 3
        assert called_tasks(project.log) == []


# =============================================================================
# CLI
# =============================================================================

def _set_env(monkeypatch, config):
    monkeypatch.setenv("HARNESS_LAST_TASK", str(config.last_task))
    monkeypatch.setenv("HARNESS_BUILD_COMMAND", config.build_command)
    monkeypatch.setenv("HARNESS_BIN_DIR", config.bin_dir)
    monkeypatch.setenv("HARNESS_INPUT_DIR", config.input_dir)


class TestCli:
    """Exit status of the harness command."""

    def test_bare_invocation_succeeds(self, project, monkeypatch):
        """No arguments: config from the environment, exit 0."""
        _set_env(monkeypatch, project())

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 0
        assert "Day 1" in result.output
        assert "Day 3" in result.output
        assert "real " in result.output
        assert called_tasks(project.log) == ["day1", "day2", "day3"]

    def test_run_with_options(self, project):
        config = project()

        result = CliRunner().invoke(
            cli,
            [
                "run",
                "--last-task", "2",
                "--bin-dir", config.bin_dir,
                "--input-dir", config.input_dir,
                "--build-command", config.build_command,
            ],
        )

        assert result.exit_code == 0
        assert called_tasks(project.log) == ["day1", "day2"]

    def test_task_failure_exit_code(self, project, monkeypatch):
        """Exit status reflects the failing task."""
        _set_env(monkeypatch, project(failing={2: 5}))

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 5
        assert "Day 3" not in result.output
        assert called_tasks(project.log) == ["day1", "day2"]

    def test_build_failure_exit_code(self, project, monkeypatch):
        config = project()
        config.build_command = python_command(1)
        _set_env(monkeypatch, config)

        result = CliRunner().invoke(cli, [])

        assert result.exit_code == 1
        assert "Day" not in result.output
        assert called_tasks(project.log) == []

    def test_config_file(self, project, tmp_path):
        config = project()
        path = tmp_path / "harness.yaml"
        path.write_text(
            f"last_task: 1\n"
            f"bin_dir: {config.bin_dir}\n"
            f"input_dir: {config.input_dir}\n"
            f"build_command: {json.dumps(config.build_command)}\n"
        )

        result = CliRunner().invoke(cli, ["run", "--config", str(path)])

        assert result.exit_code == 0
        assert called_tasks(project.log) == ["day1"]

    def test_plan_runs_nothing(self, project):
        config = project()

        result = CliRunner().invoke(
            cli,
            ["plan", "--last-task", "3", "--bin-dir", config.bin_dir, "--build-command", "false"],
        )

        assert result.exit_code == 0
        assert "Build: false" in result.output
        assert "day3" in result.output
        assert "input3.txt" in result.output
        assert called_tasks(project.log) == []

    def test_invalid_config(self):
        result = CliRunner().invoke(cli, ["run", "--last-task", "0"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_check_config(self):
        result = CliRunner().invoke(cli, ["check-config"])
        assert result.exit_code == 0
        assert "last_task: 25" in result.output
        assert "build_command: cargo build --release" in result.output
