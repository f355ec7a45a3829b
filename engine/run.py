"""
run.py — Run configuration & stepper factory
=============================================
A RunConfig is everything the UI hands the engine to start a run.  The
playback controller calls build_stepper() on every reset(), so a change of
algorithm, input or start/target is just "configure + reset".
"""

from dataclasses import dataclass
from typing import List, Optional

from graph import Graph
from algorithms import require_algorithm
from algorithms.errors import ConfigurationError
from algorithms.game_tree import GameTreeStepper, random_evaluator
from algorithms.sorting import SortingStepper
from algorithms.step import AlgorithmStepper
from algorithms.traversal import TraversalStepper


@dataclass
class RunConfig:
    """
    Attributes:
        algorithm : Registry key ("bfs", "minimax", "quick", …).
        graph     : Input for graph / game-tree algorithms.
        array     : Input for sorting algorithms.
        start     : Start node (traversal) / root (game tree).
        target    : Goal node (traversal only; optional for game trees).
        speed_ms  : Delay between auto-play ticks.
        seed      : When set, game trees evaluate nodes with a seeded
                    random evaluator instead of Node.value.
    """

    algorithm: str                   = "bfs"
    graph:     Optional[Graph]       = None
    array:     Optional[List[float]] = None
    start:     Optional[str]         = None
    target:    Optional[str]         = None
    speed_ms:  int                   = 500
    seed:      Optional[int]         = None

    @property
    def mode(self) -> str:
        """"sort" for sorting runs, "graph" for everything drawn on a graph."""
        return "sort" if require_algorithm(self.algorithm).kind == "sort" else "graph"


def build_stepper(config: RunConfig) -> AlgorithmStepper:
    """
    Raises:
        ConfigurationError when the config cannot produce a runnable stepper.
    """
    info = require_algorithm(config.algorithm)
    if config.seed is not None and (isinstance(config.seed, bool) or not isinstance(config.seed, int)):
        raise ConfigurationError(f"Seed must be an integer, got {config.seed!r}")

    if info.kind == "sort":
        if config.array is None:
            raise ConfigurationError(f"{info.label} needs an input array")
        return SortingStepper(config.array, info.key)

    if config.graph is None:
        raise ConfigurationError(f"{info.label} needs an input graph")

    if info.kind == "graph":
        return TraversalStepper(config.graph, config.start, config.target, mode=info.key)

    if config.target is not None and not config.graph.has_node(config.target):
        raise ConfigurationError(f"Target node {config.target!r} is not in the graph")
    evaluator = random_evaluator(config.seed) if config.seed is not None else None
    return GameTreeStepper(
        config.graph,
        config.start,
        pruning=info.key == "alphabeta",
        evaluator=evaluator,
    )
