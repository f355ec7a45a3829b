"""
graph.py — Graph Container & Input Producers
=============================================
Single source of truth for the graph a run operates on.  Steppers read it
once, at initialisation, and never hold on to it afterwards.

Responsibilities:
  1. Node / edge storage                      (add / get / has)
  2. Adjacency views                          (undirected for traversal,
                                               directed children for game trees)
  3. Input producers                          (sample, seeded random, text import)
  4. Serialisation round-trip                 (to_dict / from_dict)

Design decisions:
  - Nodes stored in an insertion-ordered dict keyed by id; edges in a list
    so their declared order is the adjacency order every stepper sees.
  - Edges may name nodes that do not exist (the editor can leave such
    edges behind).  Storage accepts them; the adjacency builders skip them
    with a warning instead of failing the run.
"""

import logging
import math
import random
from typing import Dict, List, Optional, Tuple

from graph.edge import Edge
from graph.node import Node

logger = logging.getLogger(__name__)

Adjacency = Dict[str, List[Tuple[str, Edge]]]


class Graph:
    """
    Attributes:
        nodes : {node_id: Node}, insertion ordered.
        edges : [Edge] in declaration order.
    """

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge]      = []

    # ==================================================================
    # NODES & EDGES
    # ==================================================================
    def add_node(self, node: Node) -> Node:
        self.nodes[node.id] = node
        return node

    def create_node(self, node_id: str, x: float = 0.0, y: float = 0.0, value: float = 0.0) -> Node:
        """Convenience: create + add in one call."""
        return self.add_node(Node(node_id, x=x, y=y, value=value))

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def has_node(self, node_id: Optional[str]) -> bool:
        return isinstance(node_id, str) and node_id in self.nodes

    def add_edge(self, edge: Edge) -> Edge:
        self.edges.append(edge)
        return edge

    def create_edge(self, source: str, target: str, weight: float = 1.0) -> Edge:
        return self.add_edge(Edge(source, target, weight))

    def node_ids(self) -> List[str]:
        return list(self.nodes.keys())

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    # ==================================================================
    # ADJACENCY VIEWS
    # ==================================================================
    def adjacency(self) -> Adjacency:
        """
        Undirected view: every edge is inserted under both endpoints.

        Returns {node_id: [(neighbour_id, edge), …]}; each list is in edge
        declaration order.  Edges touching unknown node ids are skipped.
        """
        adj: Adjacency = {nid: [] for nid in self.nodes}
        for edge in self._valid_edges():
            adj[edge.source].append((edge.target, edge))
            adj[edge.target].append((edge.source, edge))
        return adj

    def children(self) -> Dict[str, List[str]]:
        """Directed view for game trees: {node_id: [to-ends of edges leaving it]}."""
        kids: Dict[str, List[str]] = {nid: [] for nid in self.nodes}
        for edge in self._valid_edges():
            kids[edge.source].append(edge.target)
        return kids

    def _valid_edges(self) -> List[Edge]:
        valid = []
        for edge in self.edges:
            missing = [nid for nid in (edge.source, edge.target) if nid not in self.nodes]
            if missing:
                logger.warning(f"Skipping edge {edge.key}: unknown node(s) {', '.join(missing)}")
                continue
            valid.append(edge)
        return valid

    # ==================================================================
    # SERIALISATION
    # ==================================================================
    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Graph":
        if not isinstance(data, dict):
            raise ValueError(f"Graph payload must be an object, got {type(data).__name__}")
        g = cls()
        for nd in data.get("nodes", []):
            g.add_node(Node.from_dict(nd))
        for ed in data.get("edges", []):
            g.add_edge(Edge.from_dict(ed))
        return g

    # ==================================================================
    # INPUT PRODUCERS
    # ==================================================================

    # ---------- The four-node diamond every session opens with ----------
    @classmethod
    def sample(cls) -> "Graph":
        g = cls()
        g.create_node("A", 100, 100)
        g.create_node("B", 200, 50)
        g.create_node("C", 200, 150)
        g.create_node("D", 300, 100)
        for a, b in (("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")):
            g.create_edge(a, b)
        return g

    # ---------- Random Graph ----------
    @classmethod
    def generate_random(
        cls,
        num_nodes: int = 8,
        edge_probability: float = 0.3,
        value_range: Tuple[int, int] = (-10, 10),
        seed: Optional[int] = None,
        canvas_w: float = 800,
        canvas_h: float = 500,
    ) -> "Graph":
        """
        Erdős–Rényi style random graph laid out on a circle.

        Edges always point from the lower to the higher index, so the
        game-tree view of the result is acyclic.  A backbone chain keeps
        every node reachable from node "0".  Uses its own Random instance:
        the same seed gives the same graph regardless of global state.
        """
        rng = random.Random(seed)
        g   = cls()

        ids = []
        for i in range(num_nodes):
            angle  = 2 * math.pi * i / max(num_nodes, 1)
            radius = min(canvas_w, canvas_h) * 0.35
            x = canvas_w / 2 + radius * math.cos(angle)
            y = canvas_h / 2 + radius * math.sin(angle)
            nid = str(i)
            g.create_node(nid, round(x, 1), round(y, 1), value=rng.randint(*value_range))
            ids.append(nid)

        linked = set()
        for i in range(num_nodes):
            for j in range(i + 1, num_nodes):
                if rng.random() < edge_probability:
                    g.create_edge(ids[i], ids[j])
                    linked.add((i, j))

        for k in range(1, num_nodes):
            if (k - 1, k) not in linked:
                g.create_edge(ids[k - 1], ids[k])

        return g

    # ---------- Import from Adjacency List (text) ----------
    @classmethod
    def from_adjacency_list(
        cls,
        text: str,
        canvas_w: float = 800,
        canvas_h: float = 500,
    ) -> "Graph":
        """
        Parse a simple text adjacency list.

        Supported formats (one node per line):
            A: B C D            → edges A-B, A-C, A-D (weight 1)
            A: B(3) C(7)        → weights 3 and 7
            A -> B, C           → alternate arrow syntax
        Lines starting with '#' are comments.  A reverse duplicate
        ("B: A" after "A: B") is dropped since traversal is undirected.
        Nodes are laid out on a circle.
        """
        g = cls()
        adjacency: Dict[str, List[Tuple[str, float]]] = {}

        for line in text.strip().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if ":" in line:
                src, _, rest = line.partition(":")
            elif "->" in line:
                src, _, rest = line.partition("->")
            else:
                raise ValueError(f"Cannot parse adjacency line: {line!r}")

            src = src.strip()
            adjacency.setdefault(src, [])
            for token in rest.replace(",", " ").split():
                if "(" in token and token.endswith(")"):
                    tgt, w_str = token[:-1].split("(", 1)
                    weight = float(w_str)
                else:
                    tgt, weight = token, 1.0
                adjacency.setdefault(tgt, [])
                adjacency[src].append((tgt, weight))

        labels = list(adjacency.keys())
        n = len(labels)
        cx, cy = canvas_w / 2, canvas_h / 2
        radius = min(canvas_w, canvas_h) * 0.35
        for i, label in enumerate(labels):
            angle = 2 * math.pi * i / n
            g.create_node(label, round(cx + radius * math.cos(angle), 1), round(cy + radius * math.sin(angle), 1))

        seen = set()
        for src, targets in adjacency.items():
            for tgt, weight in targets:
                key = frozenset((src, tgt))
                if key in seen:
                    continue
                seen.add(key)
                g.create_edge(src, tgt, weight)

        return g

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count()}, edges={self.edge_count()})"
