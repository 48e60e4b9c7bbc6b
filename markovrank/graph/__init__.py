"""Graph collaborator: addresses, edges and an in-memory graph."""

from .address import EMPTY, EdgeAddress, NodeAddress, has_prefix
from .model import Edge, Graph, GraphLike

__all__ = [
    "EMPTY",
    "Edge",
    "EdgeAddress",
    "Graph",
    "GraphLike",
    "NodeAddress",
    "has_prefix",
]
