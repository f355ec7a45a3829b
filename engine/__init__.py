"""
engine/
-------
Playback, metrics & export layer.

    from engine import PlaybackController, RunConfig, PollingScheduler
"""

from engine.run       import RunConfig, build_stepper
from engine.scheduler import Scheduler, PollingScheduler, AsyncioScheduler
from engine.metrics   import PerformanceMetrics, MetricsCollector
from engine.playback  import PlaybackController, PlaybackState, SPEED_PRESETS, SPEED_RANGES
from engine.export    import session_record, to_json, to_csv

__all__ = [
    "RunConfig",
    "build_stepper",
    "Scheduler",
    "PollingScheduler",
    "AsyncioScheduler",
    "PerformanceMetrics",
    "MetricsCollector",
    "PlaybackController",
    "PlaybackState",
    "SPEED_PRESETS",
    "SPEED_RANGES",
    "session_record",
    "to_json",
    "to_csv",
]
