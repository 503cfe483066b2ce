"""Stage profiler — measures per-stage latency of pipeline runs.

Records the time spent in each pipeline stage of a build, update or
on-demand render and emits a ``PipelineRun`` event when the run finishes.

Thread Safety:
    A profiler instance belongs to one pipeline run (single-writer).
    Aggregate queries are protected by the underlying ``EventLog`` lock.

"""

from __future__ import annotations

import sys
import time
from typing import TYPE_CHECKING

from tabby.observability.events import PipelineRun

if TYPE_CHECKING:
    from tabby.observability.collector import StackCollector
    from tabby.observability.log import EventLog


class StageProfiler:
    """Records per-stage timing for a single pipeline run.

    Usage::

        profiler = StageProfiler(collector, "update", trigger="/index.md")
        profiler.start("render")
        # ... render ...
        profiler.stop()
        profiler.finish(pages_rendered=3, pages_written=1)

    Stages are timed in the order they are started; starting a stage stops
    the current one.

    """

    __slots__ = ("_collector", "_current", "_kind", "_stages", "_t0", "_trigger", "_verbose")

    def __init__(
        self,
        collector: StackCollector,
        kind: str,
        *,
        trigger: str = "",
        verbose: bool = False,
    ) -> None:
        self._collector = collector
        self._kind = kind
        self._trigger = trigger
        self._verbose = verbose
        self._t0 = time.perf_counter()
        self._stages: list[tuple[str, float]] = []
        self._current: tuple[str, float] | None = None

    def start(self, stage: str) -> None:
        """Start timing *stage*."""
        self.stop()
        self._current = (stage, time.perf_counter())

    def stop(self) -> None:
        """Stop timing the current stage, if any."""
        if self._current is not None:
            name, started = self._current
            self._stages.append((name, (time.perf_counter() - started) * 1000))
            self._current = None

    @property
    def stages(self) -> tuple[tuple[str, float], ...]:
        return tuple(self._stages)

    def finish(
        self,
        *,
        pages_rendered: int = 0,
        pages_written: int = 0,
        aborted: bool = False,
    ) -> PipelineRun:
        """Finish profiling and emit the ``PipelineRun`` event."""
        self.stop()
        event = self._collector.record_pipeline(
            self._kind,
            trigger=self._trigger,
            pages_rendered=pages_rendered,
            pages_written=pages_written,
            aborted=aborted,
            stages=self._stages,
            duration_ms=(time.perf_counter() - self._t0) * 1000,
        )
        if self._verbose:
            _print_summary(event)
        return event


def _print_summary(run: PipelineRun) -> None:
    """Print a one-line timing summary to stderr."""
    if run.aborted:
        print(f"  [{run.duration_ms:.0f}ms] {run.kind} cancelled", file=sys.stderr)
        return
    pages = "page" if run.pages_written == 1 else "pages"
    slowest = sorted(run.stages, key=lambda s: s[1], reverse=True)[:3]
    stages = ", ".join(f"{name}: {ms:.0f}ms" for name, ms in slowest)
    print(
        f"  [{run.duration_ms:.0f}ms] {run.kind} -> "
        f"{run.pages_written} {pages} written ({stages})",
        file=sys.stderr,
    )


def compute_aggregate_stats(
    log: EventLog,
    *,
    kind: str | None = None,
    limit: int = 100,
) -> dict:
    """Compute latency statistics from recent ``PipelineRun`` events.

    Returns a dict with p50, p95, p99, and per-stage averages.

    """
    runs = [
        run
        for run in log.query(event_type=PipelineRun, limit=limit)
        if isinstance(run, PipelineRun) and not run.aborted and (kind is None or run.kind == kind)
    ]
    if not runs:
        return {"count": 0}

    totals = sorted(run.duration_ms for run in runs)
    count = len(totals)

    def percentile(data: list[float], pct: float) -> float:
        idx = int(len(data) * pct / 100)
        return data[min(idx, len(data) - 1)]

    stage_totals: dict[str, float] = {}
    stage_counts: dict[str, int] = {}
    for run in runs:
        for name, ms in run.stages:
            stage_totals[name] = stage_totals.get(name, 0.0) + ms
            stage_counts[name] = stage_counts.get(name, 0) + 1

    return {
        "count": count,
        "total_ms": {
            "p50": round(percentile(totals, 50), 1),
            "p95": round(percentile(totals, 95), 1),
            "p99": round(percentile(totals, 99), 1),
            "min": round(totals[0], 1),
            "max": round(totals[-1], 1),
        },
        "avg_by_stage_ms": {
            name: round(stage_totals[name] / stage_counts[name], 1) for name in stage_totals
        },
    }
