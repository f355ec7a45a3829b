"""
playback.py — Playback Controller
==================================
The PlaybackController is the ONLY object a UI drives during a run.  It owns
the current stepper and its metrics, and exposes start / pause / step /
reset / speed.

State machine:
    IDLE     →  start()  →  RUNNING
    PAUSED   →  start()  →  RUNNING
    RUNNING  →  pause()  →  PAUSED
    RUNNING  →  (stepper halts) → COMPLETE
    any      →  reset()  →  IDLE          (stepper rebuilt from the config)

    step() advances once from IDLE or PAUSED, is ignored while RUNNING and
    is a no-op once COMPLETE.

Design decisions:
  - Auto-play is one scheduler timer at a time.  Every armed callback
    captures the current generation; pause() / reset() bump the generation
    before cancelling, so a callback already in flight finds a stale
    generation and returns without touching the stepper.
  - The controller never sleeps.  With a PollingScheduler the host calls
    poll() (the HTTP layer does it from /api/tick); with an
    AsyncioScheduler the event loop drives it.

Thread safety:
  This class is NOT thread-safe.  All calls, including scheduler
  callbacks, must come from one thread.
"""

import logging
import time
from enum import Enum
from typing import Callable, Dict, List, Optional

from algorithms.errors import ConfigurationError
from algorithms.step import AlgorithmStepper, Snapshot, StepResult
from engine.metrics import MetricsCollector, PerformanceMetrics
from engine.run import RunConfig, build_stepper
from engine.scheduler import PollingScheduler, Scheduler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------
class PlaybackState(Enum):
    IDLE     = "idle"
    RUNNING  = "running"
    PAUSED   = "paused"
    COMPLETE = "complete"


# ---------------------------------------------------------------------------
# Speed presets (milliseconds per step)
# ---------------------------------------------------------------------------
SPEED_PRESETS: Dict[str, int] = {
    "slow":   1000,   # teaching mode
    "medium": 500,
    "fast":   150,    # demo mode
    "turbo":  50,
}

# slider ranges the original UI offered; not enforced
SPEED_RANGES = {
    "graph": (100, 2000),
    "sort":  (10, 500),
}

Listener = Callable[[Optional[Snapshot], PerformanceMetrics], None]


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------
class PlaybackController:
    """
    Attributes:
        config    : RunConfig the stepper is (re)built from.
        scheduler : Timer source for auto-play.
        state     : Current PlaybackState.
        stepper   : Live stepper, or None when the config could not build one.
        speed_ms  : Delay between auto-play ticks.
        error     : Message of the last failed reset(), else None.
    """

    def __init__(
        self,
        config: Optional[RunConfig] = None,
        scheduler: Optional[Scheduler] = None,
        on_step: Optional[Listener] = None,
    ):
        self.config:    Optional[RunConfig]        = config
        self.scheduler: Scheduler                  = scheduler or PollingScheduler()
        self.state:     PlaybackState              = PlaybackState.IDLE
        self.stepper:   Optional[AlgorithmStepper] = None
        self.speed_ms:  int                        = max(1, int(config.speed_ms)) if config else SPEED_PRESETS["medium"]
        self.error:     Optional[str]              = None

        self._metrics    = MetricsCollector()
        self._listeners: List[Listener] = [on_step] if on_step else []
        self._timer      = None
        self._generation = 0

        if config is not None:
            self.reset()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def configure(self, config: RunConfig) -> None:
        """Swap in a new run config and reset onto it."""
        self.config   = config
        self.speed_ms = max(1, int(config.speed_ms))
        self.reset()

    def reset(self) -> None:
        """
        Cancel any pending tick, rebuild the stepper and zero the metrics.

        Raises:
            ConfigurationError if the config cannot build a stepper.  The
            controller is then IDLE with no stepper until a corrected
            configure() / reset().
        """
        self._cancel_timer()
        self.state   = PlaybackState.IDLE
        self.stepper = None
        self.error   = None
        self._metrics.reset()

        if self.config is None:
            return
        try:
            self.stepper = build_stepper(self.config)
        except ConfigurationError as exc:
            self.error = str(exc)
            logger.warning(f"Cannot initialise {self.config.algorithm!r}: {exc}")
            raise

        self._metrics.reset(total_nodes=self.stepper.progress()[1])
        logger.debug(f"Reset onto {self.config.algorithm!r}")
        self._notify()

    # ------------------------------------------------------------------
    # Play / Pause / Step
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self.state in (PlaybackState.RUNNING, PlaybackState.COMPLETE):
            return
        self._require_stepper()
        self.state = PlaybackState.RUNNING
        self._arm()

    def pause(self) -> None:
        if self.state is not PlaybackState.RUNNING:
            return
        self._cancel_timer()
        self.state = PlaybackState.PAUSED

    def step(self) -> Optional[StepResult]:
        """Advance once by hand.  Returns None when the call was ignored."""
        if self.state is PlaybackState.RUNNING:
            logger.debug("step() ignored while running")
            return None
        if self.state is PlaybackState.COMPLETE:
            return None
        self._require_stepper()
        return self._advance()

    def toggle(self) -> None:
        if self.state is PlaybackState.RUNNING:
            self.pause()
        else:
            self.start()

    # ------------------------------------------------------------------
    # Speed
    # ------------------------------------------------------------------
    def set_speed(self, speed_ms: int) -> None:
        """Takes effect from the next tick."""
        self.speed_ms = max(1, int(speed_ms))
        if self.config is not None:
            self.config.speed_ms = self.speed_ms

    def set_speed_preset(self, preset: str) -> None:
        self.set_speed(SPEED_PRESETS.get(preset, SPEED_PRESETS["medium"]))

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> Optional[Snapshot]:
        return self.stepper.snapshot if self.stepper is not None else None

    @property
    def metrics(self) -> PerformanceMetrics:
        return self._metrics.metrics

    @property
    def is_running(self) -> bool:
        return self.state is PlaybackState.RUNNING

    def state_dict(self) -> dict:
        snapshot = self.snapshot
        return {
            "state":     self.state.value,
            "algorithm": self.config.algorithm if self.config else None,
            "mode":      self.config.mode if self.config and self.stepper else None,
            "speed_ms":  self.speed_ms,
            "outcome":   self.stepper.outcome.value if self.stepper else None,
            "snapshot":  snapshot.to_dict() if snapshot is not None else None,
            "metrics":   self.metrics.to_dict(),
            "error":     self.error,
        }

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _require_stepper(self) -> None:
        if self.stepper is None:
            raise ConfigurationError(self.error or "No run configured")

    def _arm(self) -> None:
        generation = self._generation
        self._timer = self.scheduler.call_later(self.speed_ms, lambda: self._on_tick(generation))

    def _cancel_timer(self) -> None:
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self.state is not PlaybackState.RUNNING:
            logger.debug("Stale tick suppressed")
            return
        self._timer = None
        self._advance()
        # a listener may have paused, reset or restarted us meanwhile
        if (
            self.state is PlaybackState.RUNNING
            and self._timer is None
            and generation == self._generation
        ):
            self._arm()

    def _advance(self) -> StepResult:
        stepper = self.stepper
        started = time.perf_counter()
        try:
            result = stepper.step()
        except Exception:
            logger.exception(f"{self.config.algorithm!r} stepper failed; stopping playback")
            self._cancel_timer()
            self.state = PlaybackState.COMPLETE
            raise
        elapsed_ms = (time.perf_counter() - started) * 1000.0

        self._metrics.record(elapsed_ms, stepper, result)
        if result is StepResult.HALT:
            self._cancel_timer()
            self.state = PlaybackState.COMPLETE
            logger.info(f"{self.config.algorithm!r} complete: {stepper.outcome.value}")
        self._notify()
        return result

    def _notify(self) -> None:
        snapshot, metrics = self.snapshot, self.metrics
        for listener in list(self._listeners):
            listener(snapshot, metrics)
