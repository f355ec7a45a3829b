"""
metrics.py — Run Metrics
=========================
Accumulates the statistics the performance panel shows, once per step().

memory_usage_estimate is illustrative, not a measurement: it is the
sys.getsizeof of the latest snapshot plus each of its fields, in bytes.
"""

import sys
from dataclasses import asdict, dataclass, fields, replace
from typing import Optional

from algorithms.step import AlgorithmStepper, Snapshot, StepResult


@dataclass
class PerformanceMetrics:
    execution_time_ms:     float = 0.0     # summed wall-clock time spent inside step()
    nodes_explored:        int   = 0       # graph: visited nodes, sort: settled indices
    total_nodes:           int   = 0       # graph: node count,    sort: array length
    memory_usage_estimate: int   = 0       # bytes, see module docstring
    step_count:            int   = 0
    is_complete:           bool  = False

    def to_dict(self) -> dict:
        return asdict(self)


def estimate_memory(snapshot: Optional[Snapshot]) -> int:
    if snapshot is None:
        return 0
    size = sys.getsizeof(snapshot)
    for f in fields(snapshot):
        size += sys.getsizeof(getattr(snapshot, f.name))
    return size


class MetricsCollector:
    """Owned by one PlaybackController; zeroed only by reset()."""

    def __init__(self):
        self._metrics = PerformanceMetrics()

    def reset(self, total_nodes: int = 0) -> None:
        self._metrics = PerformanceMetrics(total_nodes=total_nodes)

    def record(self, elapsed_ms: float, stepper: AlgorithmStepper, result: StepResult) -> None:
        m = self._metrics
        m.execution_time_ms += elapsed_ms
        m.nodes_explored, m.total_nodes = stepper.progress()
        m.memory_usage_estimate = estimate_memory(stepper.snapshot)
        m.step_count += 1
        m.is_complete = result is StepResult.HALT

    @property
    def metrics(self) -> PerformanceMetrics:
        """A copy; callers never see later updates."""
        return replace(self._metrics)
