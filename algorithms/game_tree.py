"""
game_tree.py — Minimax & Alpha-Beta Pruning
============================================
A genuine depth-first minimax search over the directed view of the graph:
the children of a node are the `to` ends of the edges leaving it, the
start node is the root and the maximising player, and levels alternate.

The search is a generator that yields once per node-value assignment, so
each step() call does exactly one of:

    enter   – descend one level into a child and give it its static
              evaluation (for a leaf that is its final utility)
    back up – fold a finished child's value into its parent (max / min);
              in alpha-beta mode, if alpha ≥ beta afterwards the parent's
              remaining children are marked pruned in the same step

The run halts on the step that fixes the root's value.

Evaluators are injectable.  The default reads `Node.value`;
`random_evaluator(seed)` draws integers in [-10, 9] from a private,
seeded Random, so the same seed replays the same values.

A child already on the current descent path is skipped, which keeps a
cyclic graph from recursing forever.

A node reachable from several parents (a DAG) is searched once per parent.
node_values shows the value from its most recent visit, and a node counts
as pruned only while it has never been entered: entering it clears the
mark, and a cut never marks an already explored node.
"""

import logging
import random
from typing import Callable, Generator, List, Optional, Tuple

from graph import Graph, Node
from algorithms.errors import ConfigurationError
from algorithms.step import AlgorithmStepper, GraphSnapshotBuilder, Outcome, StepResult

logger = logging.getLogger(__name__)

Evaluator = Callable[[Node], float]


MINIMAX_OUTLINE: List[str] = [
    "Start at root node",
    "Evaluate leaf nodes",
    "Propagate values up the tree",
    "Choose optimal move",
    "Continue recursively",
]

ALPHABETA_OUTLINE: List[str] = [
    "Initialize alpha and beta values",
    "Traverse tree depth-first",
    "Update alpha/beta bounds",
    "Prune branches when alpha >= beta",
    "Return optimal value",
]


# ---------------------------------------------------------------------------
# Evaluators
# ---------------------------------------------------------------------------
def node_value_evaluator(node: Node) -> float:
    return node.value


def random_evaluator(seed: Optional[int] = None) -> Evaluator:
    rng = random.Random(seed)

    def evaluate(node: Node) -> float:
        return rng.randint(-10, 9)

    return evaluate


# ---------------------------------------------------------------------------
# Stepper
# ---------------------------------------------------------------------------
class GameTreeStepper(AlgorithmStepper):
    """
    Args:
        graph     : Input graph; only edge direction matters here.
        root      : Start node, the maximising player.
        pruning   : False → minimax, True → alpha-beta.
        evaluator : Static evaluation for every node entered.
    """

    def __init__(
        self,
        graph: Graph,
        root: str,
        pruning: bool = False,
        evaluator: Optional[Evaluator] = None,
    ):
        super().__init__()
        if not graph.has_node(root):
            raise ConfigurationError(f"Root node {root!r} is not in the graph")

        self.root        = root
        self.pruning     = pruning
        self.total_nodes = graph.node_count()

        self._nodes     = dict(graph.nodes)
        self._children  = graph.children()
        self._evaluate  = evaluator or node_value_evaluator
        self._sb        = GraphSnapshotBuilder()
        self._search_it = self._search(root, 0, float("-inf"), float("inf"), [root])

    @property
    def root_value(self) -> Optional[float]:
        return self._sb.node_values.get(self.root) if self.is_complete else None

    def step(self) -> StepResult:
        if self.is_complete:
            return StepResult.HALT
        self.steps_taken += 1

        final = next(self._search_it)
        self.snapshot = self._sb.build(self.steps_taken, is_final=final)
        if final:
            self.outcome = Outcome.FINISHED
            logger.info(
                f"{'Alpha-beta' if self.pruning else 'Minimax'} finished: "
                f"root {self.root} = {self.root_value} after {self.steps_taken} step(s), "
                f"{len(self._sb.pruned_nodes)} pruned"
            )
            return StepResult.HALT
        return StepResult.CONTINUE

    def progress(self) -> Tuple[int, int]:
        return len(self._sb.explored_nodes), self.total_nodes

    # ------------------------------------------------------------------
    # Search
    # ------------------------------------------------------------------
    def _search(
        self,
        node_id: str,
        depth: int,
        alpha: float,
        beta: float,
        path: List[str],
    ) -> Generator[bool, None, float]:
        """Yields True exactly once: on the step that fixes the root's value."""
        maximizing = depth % 2 == 0
        is_root    = depth == 0
        player     = "MAX" if maximizing else "MIN"
        children   = [c for c in self._children[node_id] if c not in path]

        value = self._evaluate(self._nodes[node_id])
        via   = f"{path[-2]}-{node_id}" if len(path) > 1 else None
        self._enter(node_id, value, path, via)
        if children:
            self._sb.explanation = (
                f"Descend to '{node_id}' ({player}, depth {depth}); "
                f"static estimate {value}, {len(children)} child(ren) to search."
            )
        else:
            self._sb.explanation = f"Leaf '{node_id}' ({player}, depth {depth}) evaluates to {value}."
        yield is_root and not children

        if not children:
            return value

        best: Optional[float] = None
        for i, child in enumerate(children):
            child_value = yield from self._search(child, depth + 1, alpha, beta, path + [child])

            if best is None or (child_value > best if maximizing else child_value < best):
                best = child_value
            if maximizing:
                alpha = max(alpha, best)
            else:
                beta = min(beta, best)

            cut = children[i + 1:] if self.pruning and alpha >= beta else []
            self._back_up(node_id, best, path)
            for skipped in cut:
                if skipped not in self._sb.explored_nodes:
                    self._sb.prune(skipped)

            text = f"Back up {child_value} from '{child}' into {player} node '{node_id}' → {best}."
            if self.pruning:
                text += f" α={_fmt(alpha)}, β={_fmt(beta)}."
            if cut:
                text += f" α ≥ β: prune {', '.join(repr(c) for c in cut)}."
            self._sb.explanation = text

            last = cut or i == len(children) - 1
            yield bool(is_root and last)
            if cut:
                break

        return best

    def _enter(self, node_id: str, value: float, path: List[str], via: Optional[str]):
        self._sb.current_node = node_id
        self._sb.current_path = list(path)
        self._sb.node_values[node_id] = value
        if node_id not in self._sb.explored_nodes:
            self._sb.explored_nodes.append(node_id)
        if node_id in self._sb.pruned_nodes:
            self._sb.pruned_nodes.remove(node_id)
        if via is not None and via not in self._sb.explored_edges:
            self._sb.explored_edges.append(via)

    def _back_up(self, node_id: str, value: float, path: List[str]):
        self._sb.current_node = node_id
        self._sb.current_path = list(path)
        self._sb.node_values[node_id] = value


def _fmt(bound: float) -> str:
    if bound == float("inf"):
        return "+∞"
    if bound == float("-inf"):
        return "-∞"
    return str(bound)
