"""
algorithms/__init__.py — Algorithm Registry
=============================================
Single source of truth for every algorithm the engine knows about.

    from algorithms import REGISTRY, get_algorithm

REGISTRY is a dict:
    {
        "bfs": AlgoInfo(key, label, kind, outline, formulas, …),
        …
    }

`kind` tells the engine which stepper to build:
    "graph" – TraversalStepper     (dfs, bfs)
    "game"  – GameTreeStepper      (minimax, alphabeta)
    "sort"  – SortingStepper       (bubble, insertion, …)
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from algorithms.errors    import ConfigurationError
from algorithms.game_tree import ALPHABETA_OUTLINE, MINIMAX_OUTLINE
from algorithms.traversal import BFS_OUTLINE, DFS_OUTLINE


# ---------------------------------------------------------------------------
# AlgoInfo: metadata card for each algorithm
# ---------------------------------------------------------------------------
@dataclass
class AlgoInfo:
    key:              str                                        # registry key, e.g. "bfs"
    label:            str                                        # e.g. "Breadth-First Search"
    kind:             str                                        # "graph" | "game" | "sort"
    category:         str       = ""
    outline:          List[str] = field(default_factory=list)    # walkthrough lines
    formulas:         List[str] = field(default_factory=list)    # math panel lines
    complexity_time:  str       = ""
    complexity_space: str       = ""
    description:      str       = ""

    def to_dict(self) -> dict:
        return {
            "key":              self.key,
            "label":            self.label,
            "kind":             self.kind,
            "category":         self.category,
            "outline":          list(self.outline),
            "formulas":         list(self.formulas),
            "complexity_time":  self.complexity_time,
            "complexity_space": self.complexity_space,
            "description":      self.description,
        }


def _sort(key: str, label: str, time: str, space: str, description: str) -> AlgoInfo:
    return AlgoInfo(
        key=key, label=label, kind="sort", category="Sorting",
        complexity_time=time, complexity_space=space, description=description,
    )


# ---------------------------------------------------------------------------
# THE REGISTRY
# ---------------------------------------------------------------------------
REGISTRY: Dict[str, AlgoInfo] = {

    "dfs": AlgoInfo(
        key="dfs", label="Depth-First Search", kind="graph", category="Graph Traversal",
        outline=DFS_OUTLINE,
        formulas=["Time Complexity: O(V + E)", "Space Complexity: O(V)",
                  "V = number of vertices, E = number of edges"],
        complexity_time="O(V + E)", complexity_space="O(V)",
        description="Explores graph by going as deep as possible before backtracking",
    ),

    "bfs": AlgoInfo(
        key="bfs", label="Breadth-First Search", kind="graph", category="Graph Traversal",
        outline=BFS_OUTLINE,
        formulas=["Time Complexity: O(V + E)", "Space Complexity: O(V)",
                  "V = number of vertices, E = number of edges"],
        complexity_time="O(V + E)", complexity_space="O(V)",
        description="Explores graph level by level using a queue",
    ),

    "minimax": AlgoInfo(
        key="minimax", label="Minimax Algorithm", kind="game", category="Game Theory",
        outline=MINIMAX_OUTLINE,
        formulas=["Minimax(node) = max(children) if maximizing player",
                  "Minimax(node) = min(children) if minimizing player",
                  "Leaf nodes return their utility values"],
        complexity_time="O(b^d)", complexity_space="O(d)",
        description="Game theory algorithm for decision making in two-player games",
    ),

    "alphabeta": AlgoInfo(
        key="alphabeta", label="Alpha-Beta Pruning", kind="game", category="Game Theory",
        outline=ALPHABETA_OUTLINE,
        formulas=["Alpha: best value for maximizing player",
                  "Beta: best value for minimizing player",
                  "Prune when Alpha ≥ Beta",
                  "Best case: O(b^(d/2)) vs O(b^d) for minimax"],
        complexity_time="O(b^(d/2))", complexity_space="O(d)",
        description="Optimized minimax that prunes unnecessary branches",
    ),

    "bubble":    _sort("bubble", "Bubble Sort", "O(n²)", "O(1)",
                       "Repeatedly swaps adjacent out-of-order pairs."),
    "insertion": _sort("insertion", "Insertion Sort", "O(n²)", "O(1)",
                       "Grows a sorted prefix by sliding each key into place."),
    "selection": _sort("selection", "Selection Sort", "O(n²)", "O(1)",
                       "Selects the minimum of the unsorted tail each pass."),
    "merge":     _sort("merge", "Merge Sort", "O(n log n)", "O(n)",
                       "Sorts halves recursively and merges them."),
    "quick":     _sort("quick", "Quick Sort", "O(n log n) average, O(n²) worst", "O(log n)",
                       "Lomuto partition around the last element."),
    "heap":      _sort("heap", "Heap Sort", "O(n log n)", "O(1)",
                       "Builds a max-heap and repeatedly extracts the maximum."),
    "shell":     _sort("shell", "Shell Sort", "O(n^1.5)", "O(1)",
                       "Insertion sort over shrinking gaps."),
    "radix":     _sort("radix", "Radix Sort", "O(d · (n + b))", "O(n + b)",
                       "Distributes integers by digit, least significant first."),
    "counting":  _sort("counting", "Counting Sort", "O(n + k)", "O(k)",
                       "Tallies each integer value, then writes them back in order."),
    "cocktail":  _sort("cocktail", "Cocktail Sort", "O(n²)", "O(1)",
                       "Bubble sort passes in both directions."),
}


# ---------------------------------------------------------------------------
# Lookup helpers
# ---------------------------------------------------------------------------
def get_algorithm(key: str) -> Optional[AlgoInfo]:
    """Return AlgoInfo by key, or None."""
    return REGISTRY.get(key)


def require_algorithm(key: str) -> AlgoInfo:
    info = REGISTRY.get(key) if isinstance(key, str) else None
    if info is None:
        raise ConfigurationError(f"Unknown algorithm: {key!r}")
    return info


def list_algorithms() -> List[AlgoInfo]:
    """Return all registered algorithms in insertion order."""
    return list(REGISTRY.values())


def algorithms_by_kind(kind: str) -> List[AlgoInfo]:
    return [a for a in REGISTRY.values() if a.kind == kind]


__all__ = [
    "AlgoInfo",
    "ConfigurationError",
    "REGISTRY",
    "get_algorithm",
    "require_algorithm",
    "list_algorithms",
    "algorithms_by_kind",
]
