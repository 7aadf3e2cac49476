"""
Module: timing

Purpose:
    Per-unit timing and wall-clock budgets for rendering and merging.
    Every page render and every cell paste is one bounded unit of work,
    so a timeout can be attributed to the unit that was running.

Key Classes:
    - TimingLog: Collects durations per stage and per unit
    - WorkBudget: Wall-clock budget checked before each unit

Key Functions:
    - timed_unit: Context manager for timing one unit of work

Dependencies:
    - time (std)
    - contextlib (std)
    - dataclasses (std)

Used By:
    - renderer.rasterizer: One unit per page
    - merger.compositor: One unit per cell
    - service.jobs: One budget per request
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generator, List, Optional, Tuple

from .core.errors import BudgetExceeded

logger = logging.getLogger(__name__)

# Surrounding service allows roughly one minute per request
DEFAULT_BUDGET_SECONDS = 60.0


@dataclass
class TimingLog:
    """
    Timing metrics for one job.

    Attributes:
        stage_timings: Dict of stage_name -> duration_seconds
        unit_timings: Dict of stage_name -> [(unit_label, duration_seconds)]

    Example:
        >>> log = TimingLog()
        >>> log.log_stage("rasterize", 1.234)
        >>> log.log_unit("rasterize", "page 1", 0.41)
        >>> print(log.summary())
    """
    stage_timings: Dict[str, float] = field(default_factory=dict)
    unit_timings: Dict[str, List[Tuple[str, float]]] = field(default_factory=dict)

    def log_stage(self, stage: str, duration: float) -> None:
        """Log a stage-level timing metric."""
        self.stage_timings[stage] = duration

    def log_unit(self, stage: str, unit: str, duration: float) -> None:
        """Log a unit-level timing metric."""
        self.unit_timings.setdefault(stage, []).append((unit, duration))

    def slowest_units(self, n: int = 3) -> List[Tuple[str, str, float]]:
        """Get the N slowest units as (stage, unit, duration)."""
        flat = [
            (stage, unit, duration)
            for stage, units in self.unit_timings.items()
            for unit, duration in units
        ]
        flat.sort(key=lambda x: x[2], reverse=True)
        return flat[:n]

    def summary(self) -> str:
        """Generate human-readable timing summary."""
        lines = ["", "=== Job Timing Summary ==="]

        if self.stage_timings:
            lines.append("Stages:")
            for stage, duration in sorted(self.stage_timings.items()):
                lines.append(f"  {stage:25s} {duration:.3f}s")

        slowest = self.slowest_units(3)
        if slowest:
            lines.append("")
            lines.append("Slowest units:")
            for stage, unit, duration in slowest:
                lines.append(f"  {stage}/{unit}: {duration:.3f}s")

        lines.append("")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        """Export timing data as dictionary."""
        return {
            "stage_timings": dict(self.stage_timings),
            "unit_timings": {
                stage: [{"unit": unit, "duration": duration} for unit, duration in units]
                for stage, units in self.unit_timings.items()
            },
        }


class WorkBudget:
    """
    Wall-clock budget for one request.

    The budget is checked before each unit starts; a unit that is already
    running is never interrupted.

    Example:
        >>> budget = WorkBudget(60.0)
        >>> budget.check("page 3")   # raises BudgetExceeded once exhausted
    """

    def __init__(
        self,
        seconds: float = DEFAULT_BUDGET_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if seconds <= 0:
            raise ValueError(f"budget must be positive: {seconds}")
        self.seconds = seconds
        self._clock = clock
        self._started = clock()

    @property
    def elapsed(self) -> float:
        return self._clock() - self._started

    @property
    def remaining(self) -> float:
        return max(0.0, self.seconds - self.elapsed)

    def check(self, unit: str) -> None:
        """
        Raise if the budget is spent before starting unit.

        Raises:
            BudgetExceeded: Naming the unit about to start
        """
        elapsed = self.elapsed
        if elapsed >= self.seconds:
            raise BudgetExceeded(unit, elapsed, self.seconds)


@contextmanager
def timed_unit(
    log: Optional[TimingLog],
    stage: str,
    unit: Optional[str] = None,
) -> Generator[None, None, None]:
    """
    Context manager for timing a stage or one unit within it.

    Args:
        log: TimingLog to record into (None records nothing)
        stage: Stage name, e.g. "rasterize"
        unit: Unit label, e.g. "page 4"; None records a stage timing

    Example:
        >>> log = TimingLog()
        >>> with timed_unit(log, "merge", "cell (0, 1)"):
        ...     canvas.paste(image, (x, y))
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if log is not None:
            if unit:
                log.log_unit(stage, unit, elapsed)
            else:
                log.log_stage(stage, elapsed)
        if unit:
            logger.debug(f"{stage}/{unit} took {elapsed:.3f}s")
