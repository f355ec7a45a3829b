"""
traversal.py — Depth-First & Breadth-First Search
==================================================
One frontier pop per step() call.

    DFS  – frontier is a list used as a LIFO stack
    BFS  – frontier is a collections.deque used as a FIFO queue

Both use the "mark on pop" strategy: duplicates are allowed onto the
frontier and filtered lazily when popped.  A pop of an already-visited node
is still a step (a no-op expansion) so the learner sees the duplicate leave
the frontier.

DFS pushes neighbours in reverse adjacency order so the first-listed
neighbour is the next one popped; BFS enqueues in listed order.

Terminal states:
    SUCCESS – the popped node is the target
    FAILURE – the frontier ran dry first
There is no retry; the controller must reset() for another run.
"""

import logging
from collections import deque
from typing import Deque, List, Optional, Tuple, Union

from graph import Graph
from algorithms.errors import ConfigurationError
from algorithms.step import AlgorithmStepper, GraphSnapshotBuilder, Outcome, StepResult

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Outlines: the plain-English walkthrough shown beside the canvas
# ---------------------------------------------------------------------------
DFS_OUTLINE: List[str] = [
    "Initialize stack with start node",
    "Pop node from stack",
    "Mark node as visited",
    "Add unvisited neighbors to stack",
    "Repeat until stack is empty or target found",
]

BFS_OUTLINE: List[str] = [
    "Initialize queue with start node",
    "Dequeue node from front",
    "Mark node as visited",
    "Add unvisited neighbors to queue",
    "Repeat until queue is empty or target found",
]

# frontier entry: (node_id, key of the edge it was discovered through)
_Entry    = Tuple[str, Optional[str]]
_Frontier = Union[List[_Entry], Deque[_Entry]]


class TraversalStepper(AlgorithmStepper):
    """
    Args:
        graph  : Input graph (read once; edges are treated as undirected).
        start  : Node id the frontier is seeded with.
        target : Node id that ends the search successfully.
        mode   : "dfs" or "bfs".

    Raises:
        ConfigurationError if mode is unknown or start / target are not
        nodes of the graph.
    """

    def __init__(self, graph: Graph, start: str, target: str, mode: str = "dfs"):
        super().__init__()
        if mode not in ("dfs", "bfs"):
            raise ConfigurationError(f"Unknown traversal mode: {mode!r}")
        if not graph.has_node(start):
            raise ConfigurationError(f"Start node {start!r} is not in the graph")
        if not graph.has_node(target):
            raise ConfigurationError(f"Target node {target!r} is not in the graph")

        self.mode        = mode
        self.start       = start
        self.target      = target
        self.total_nodes = graph.node_count()

        self._adj      = graph.adjacency()
        self._visited: set = set()
        self._frontier: _Frontier = [] if mode == "dfs" else deque()
        self._frontier.append((start, None))
        self._sb = GraphSnapshotBuilder()
        self._sb.set_frontier([start])

        logger.debug(f"{mode.upper()} initialised: {start} → {target}, {self.total_nodes} nodes")

    @property
    def _frontier_name(self) -> str:
        return "stack" if self.mode == "dfs" else "queue"

    # ------------------------------------------------------------------
    # Step
    # ------------------------------------------------------------------
    def step(self) -> StepResult:
        if self.is_complete:
            return StepResult.HALT
        self.steps_taken += 1

        # -- exhausted --
        if not self._frontier:
            self.outcome = Outcome.FAILURE
            self._sb.current_node = None
            self._sb.set_frontier([])
            self._sb.explanation = (
                f"The {self._frontier_name} is empty. "
                f"Target '{self.target}' is NOT reachable from '{self.start}'."
            )
            self.snapshot = self._sb.build(self.steps_taken, is_final=True)
            logger.info(f"{self.mode.upper()} failed: {self.target} unreachable from {self.start}")
            return StepResult.HALT

        node, via = self._pop()

        # -- duplicate entry, filtered lazily --
        if node in self._visited:
            self._sb.set_frontier(self._frontier_ids())
            self._sb.explanation = f"Pop '{node}' from the {self._frontier_name} — already visited, skip."
            self.snapshot = self._sb.build(self.steps_taken)
            return StepResult.CONTINUE

        # -- visit --
        self._visited.add(node)
        self._sb.visit(node, via)

        if node == self.target:
            self.outcome = Outcome.SUCCESS
            self._sb.set_frontier(self._frontier_ids())
            self._sb.explanation = (
                f"Target '{node}' reached after visiting {len(self._visited)} node(s): "
                f"{' → '.join(self._sb.current_path)}"
            )
            self.snapshot = self._sb.build(self.steps_taken, is_final=True)
            logger.info(f"{self.mode.upper()} found {node} in {self.steps_taken} step(s)")
            return StepResult.HALT

        fresh = [(nbr, edge.key) for nbr, edge in self._adj[node] if nbr not in self._visited]
        if self.mode == "dfs":
            self._frontier.extend(reversed(fresh))
        else:
            self._frontier.extend(fresh)

        self._sb.set_frontier(self._frontier_ids())
        if fresh:
            added = ", ".join(f"'{nbr}'" for nbr, _ in fresh)
            self._sb.explanation = (
                f"Visit '{node}' and add its unvisited neighbours {added} to the {self._frontier_name}."
            )
        else:
            self._sb.explanation = f"Visit '{node}' — no unvisited neighbours to add."
        self.snapshot = self._sb.build(self.steps_taken)
        return StepResult.CONTINUE

    def progress(self) -> Tuple[int, int]:
        return len(self._visited), self.total_nodes

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------
    def _pop(self) -> _Entry:
        if self.mode == "dfs":
            return self._frontier.pop()
        return self._frontier.popleft()

    def _frontier_ids(self) -> List[str]:
        return [nid for nid, _ in self._frontier]
