"""
edge.py — Graph Edge
====================
Connects two nodes and carries a weight.

Design decisions:
  - `source` and `target` are node-id strings, NOT Node references.
    This keeps edges serialisable and lets the adjacency builder detect
    edges that point at nodes which do not exist.
  - On the wire an edge is `{"from", "to", "weight"}`; `source` / `target`
    are accepted too.
  - The edge's declared orientation matters only for two things:
      • its key ("A-B"), which snapshots use in `explored_edges`
      • the game-tree view, where children are the `to` ends of edges
        leaving a node.
    Traversal treats every edge as undirected.
"""


class Edge:
    """
    Attributes:
        source : ID of the `from` node.
        target : ID of the `to` node.
        weight : Numeric cost (default 1). Traversal ignores it.
    """

    __slots__ = ("source", "target", "weight")

    def __init__(self, source: str, target: str, weight: float = 1.0):
        self.source: str   = source
        self.target: str   = target
        self.weight: float = weight

    @property
    def key(self) -> str:
        """Stable identifier used by snapshots: "from-to"."""
        return f"{self.source}-{self.target}"

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {"from": self.source, "to": self.target, "weight": self.weight}

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        source = data["from"] if "from" in data else data["source"]
        target = data["to"] if "to" in data else data["target"]
        return cls(source=str(source), target=str(target), weight=data.get("weight", 1.0))

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return f"Edge({self.source} ↔ {self.target}, w={self.weight})"

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Edge)
            and (self.source, self.target, self.weight) == (other.source, other.target, other.weight)
        )

    def __hash__(self) -> int:
        return hash((self.source, self.target, self.weight))
