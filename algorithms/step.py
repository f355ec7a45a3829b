"""
step.py — Execution Snapshots & the Stepper contract
=====================================================
Every stepper advances one unit of algorithm work per step() call and
publishes a snapshot: a frozen-in-time picture of everything a renderer
needs to draw one frame.

    GraphSnapshot  – DFS / BFS / minimax / alpha-beta
    SortSnapshot   – every sorting algorithm

Design decisions:
  - Snapshots are frozen dataclasses whose containers are tuples /
    frozensets / read-only MappingProxyType copies.  The stepper is the
    only writer of its own live structures; a renderer holding a snapshot
    never sees the next step()'s mutation.
  - `GraphSnapshotBuilder` is the mutable scratch-pad the graph steppers
    accumulate display state in; `build()` copies everything out.
  - `to_dict()` gives a JSON-safe view (sets become sorted lists) for the
    HTTP layer and exports.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple, Union


# ---------------------------------------------------------------------------
# Step results
# ---------------------------------------------------------------------------
class StepResult(Enum):
    CONTINUE = "continue"
    HALT     = "halt"


class Outcome(Enum):
    PENDING  = "pending"    # still running
    SUCCESS  = "success"    # traversal reached the target
    FAILURE  = "failure"    # frontier exhausted, target unreachable
    FINISHED = "finished"   # game tree / sort ran to its natural end


# ---------------------------------------------------------------------------
# Graph snapshot
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class GraphSnapshot:
    """
    Attributes:
        step_number    : 1-based index of the step() call that produced it.
        current_node   : Node being expanded / evaluated right now.
        explored_nodes : Node ids visited so far.
        explored_edges : Keys ("from-to") of edges a node was discovered through.
        current_path   : Visiting order (traversal) or descent path (game tree).
        pruned_nodes   : Node ids cut off by alpha-beta.
        node_values    : {node_id: value} assigned by the game-tree search (read-only view).
        frontier       : Stack (DFS, top last) or queue (BFS, head first) contents.
        explanation    : Plain-English "why" text for this step.
        is_final       : True on the terminal snapshot.
    """

    step_number:    int                  = 0
    current_node:   Optional[str]        = None
    explored_nodes: FrozenSet[str]       = frozenset()
    explored_edges: FrozenSet[str]       = frozenset()
    current_path:   Tuple[str, ...]      = ()
    pruned_nodes:   FrozenSet[str]       = frozenset()
    node_values:    Mapping[str, float]  = field(default_factory=lambda: MappingProxyType({}))
    frontier:       Tuple[str, ...]      = ()
    explanation:    str                  = ""
    is_final:       bool                 = False

    def to_dict(self) -> dict:
        return {
            "step_number":    self.step_number,
            "current_node":   self.current_node,
            "explored_nodes": sorted(self.explored_nodes),
            "explored_edges": sorted(self.explored_edges),
            "current_path":   list(self.current_path),
            "pruned_nodes":   sorted(self.pruned_nodes),
            "node_values":    dict(self.node_values),
            "frontier":       list(self.frontier),
            "explanation":    self.explanation,
            "is_final":       self.is_final,
        }


class GraphSnapshotBuilder:
    """
    Mutable display state a graph stepper accumulates across steps.

    Usage inside a stepper:
        self._sb.visit("A")
        self._sb.set_frontier(["B", "C"])
        self._sb.explanation = "Pop 'A' and mark it visited."
        self.snapshot = self._sb.build(step_number=3)
    """

    def __init__(self):
        self.current_node:   Optional[str]    = None
        self.explored_nodes: List[str]        = []
        self.explored_edges: List[str]        = []
        self.current_path:   List[str]        = []
        self.pruned_nodes:   List[str]        = []
        self.node_values:    Dict[str, float] = {}
        self.frontier:       List[str]        = []
        self.explanation:    str              = ""

    # -- helpers --
    def visit(self, node_id: str, via_edge: Optional[str] = None):
        self.current_node = node_id
        if node_id not in self.explored_nodes:
            self.explored_nodes.append(node_id)
        if node_id not in self.current_path:
            self.current_path.append(node_id)
        if via_edge is not None and via_edge not in self.explored_edges:
            self.explored_edges.append(via_edge)

    def prune(self, node_id: str):
        if node_id not in self.pruned_nodes:
            self.pruned_nodes.append(node_id)

    def set_frontier(self, nodes: List[str]):
        self.frontier = list(nodes)

    def build(self, step_number: int, is_final: bool = False) -> GraphSnapshot:
        return GraphSnapshot(
            step_number=step_number,
            current_node=self.current_node,
            explored_nodes=frozenset(self.explored_nodes),
            explored_edges=frozenset(self.explored_edges),
            current_path=tuple(self.current_path),
            pruned_nodes=frozenset(self.pruned_nodes),
            node_values=MappingProxyType(dict(self.node_values)),
            frontier=tuple(self.frontier),
            explanation=self.explanation,
            is_final=is_final,
        )


# ---------------------------------------------------------------------------
# Sort snapshot
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class SortSnapshot:
    """
    Attributes:
        array      : Working array at this instant.
        comparing  : Indices being compared.
        swapping   : Indices just written / swapped.
        sorted     : Indices marked sorted so far (only grows).
        step_index : 0-based position in the generated sequence.
    """

    array:       Tuple[float, ...]  = ()
    comparing:   FrozenSet[int]     = frozenset()
    swapping:    FrozenSet[int]     = frozenset()
    sorted:      FrozenSet[int]     = frozenset()
    step_index:  int                = 0
    explanation: str                = ""
    is_final:    bool               = False

    def to_dict(self) -> dict:
        return {
            "array":       list(self.array),
            "comparing":   sorted(self.comparing),
            "swapping":    sorted(self.swapping),
            "sorted":      sorted(self.sorted),
            "step_index":  self.step_index,
            "explanation": self.explanation,
            "is_final":    self.is_final,
        }


Snapshot = Union[GraphSnapshot, SortSnapshot]


# ---------------------------------------------------------------------------
# Stepper contract
# ---------------------------------------------------------------------------
class AlgorithmStepper:
    """
    Base for everything the playback controller can drive.

    Attributes:
        snapshot : Latest snapshot (None until the first step()).
        outcome  : PENDING until the stepper halts.
    """

    def __init__(self):
        self.snapshot: Optional[Snapshot] = None
        self.outcome:  Outcome            = Outcome.PENDING
        self.steps_taken: int             = 0

    @property
    def is_complete(self) -> bool:
        return self.outcome is not Outcome.PENDING

    def step(self) -> StepResult:
        raise NotImplementedError

    def progress(self) -> Tuple[int, int]:
        """(explored, total) for the metrics panel."""
        raise NotImplementedError
