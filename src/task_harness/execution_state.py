"""Per-task values produced by the execution loop."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from task_harness.timing import Elapsed


@dataclass(frozen=True)
class TaskSpec:
    index: int
    executable_path: Path
    input_path: Path

    def argv(self) -> List[str]:
        return [str(self.executable_path), str(self.input_path)]


@dataclass(frozen=True)
class RunResult:
    index: int
    returncode: int
    error: Optional[str] = None  # set when the process never started

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


@dataclass
class ExecutionReport:
    results: List[RunResult] = field(default_factory=list)
    elapsed: Optional[Elapsed] = None

    @property
    def exit_codes(self) -> List[int]:
        return [r.returncode for r in self.results]
