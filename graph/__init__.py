"""
graph/
-----
Input data layer.  Public API:

    from graph import Graph, Node, Edge
"""

from graph.node  import Node
from graph.edge  import Edge
from graph.graph import Graph, Adjacency

__all__ = [
    "Node",
    "Edge",
    "Graph",
    "Adjacency",
]
