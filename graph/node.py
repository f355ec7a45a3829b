"""
node.py — Graph Node
====================
A vertex of the input graph.

Design decisions:
  - Nodes carry NO algorithm state.  Visited / current / pruned flags live
    in the snapshots the steppers emit, so the same Graph can be handed to
    any number of runs without a reset pass.
  - `x` / `y` are layout-only; no algorithm reads them.
  - `value` is the static score the game-tree stepper evaluates leaves with.
"""


class Node:
    """
    Attributes:
        id    : Unique identifier within a graph.
        x, y  : Canvas coordinates (layout only).
        value : Static evaluation used by minimax / alpha-beta.
    """

    __slots__ = ("id", "x", "y", "value")

    def __init__(
        self,
        node_id: str,
        x: float = 0.0,
        y: float = 0.0,
        value: float = 0.0,
    ):
        self.id:    str   = node_id
        self.x:     float = x
        self.y:     float = y
        self.value: float = value

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict:
        return {
            "id":    self.id,
            "x":     self.x,
            "y":     self.y,
            "value": self.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        return cls(
            node_id=str(data["id"]),
            x=data.get("x", 0.0),
            y=data.get("y", 0.0),
            value=data.get("value", 0.0),
        )

    # ------------------------------------------------------------------
    # Dunder
    # ------------------------------------------------------------------
    def __repr__(self) -> str:
        return f"Node(id={self.id}, value={self.value}, pos=({self.x:.1f},{self.y:.1f}))"

    def __eq__(self, other) -> bool:
        return isinstance(other, Node) and self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)
