"""Wall-clock timing for a harness run.

Observational only. Nothing here affects control flow or exit status.
"""

import os
import time
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Elapsed:
    real: float
    user: float
    sys: float


class Stopwatch:
    """
    Measures real time plus CPU time of waited-for child processes.

    Child user/sys figures come from os.times() and are zero on platforms
    that do not report them.
    """

    def __init__(self, clock=time.perf_counter, cpu_times=os.times):
        self._clock = clock
        self._cpu_times = cpu_times
        self._start_real: Optional[float] = None
        self._start_user = 0.0
        self._start_sys = 0.0

    def start(self) -> "Stopwatch":
        times = self._cpu_times()
        self._start_user = times.children_user
        self._start_sys = times.children_system
        self._start_real = self._clock()
        return self

    def stop(self) -> Elapsed:
        if self._start_real is None:
            raise RuntimeError("Stopwatch.stop() called before start()")
        real = self._clock() - self._start_real
        times = self._cpu_times()
        return Elapsed(
            real=max(real, 0.0),
            user=max(times.children_user - self._start_user, 0.0),
            sys=max(times.children_system - self._start_sys, 0.0),
        )


def format_clock(seconds: float) -> str:
    """Format seconds as the shell `time` keyword does, e.g. 1m2.345s."""
    millis = int(round(max(seconds, 0.0) * 1000))
    mins, millis = divmod(millis, 60_000)
    return f"{mins}m{millis // 1000}.{millis % 1000:03d}s"


def format_summary(elapsed: Elapsed) -> str:
    return (
        f"real {format_clock(elapsed.real)}  "
        f"user {format_clock(elapsed.user)}  "
        f"sys {format_clock(elapsed.sys)}"
    )
