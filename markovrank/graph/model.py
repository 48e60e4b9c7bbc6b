"""In-memory multi-edge directed graph with hierarchical addresses."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol

import networkx as nx

from .address import EdgeAddress, NodeAddress, from_string, to_string


@dataclass(frozen=True)
class Edge:
    """A directed edge. Several edges may join the same pair of nodes."""

    address: EdgeAddress
    src: NodeAddress
    dst: NodeAddress


class GraphLike(Protocol):
    """What the ranking pipeline needs from a graph."""

    def nodes(self) -> Iterable[NodeAddress]: ...

    def edges(self) -> Iterable[Edge]: ...


class Graph:
    """Graph backed by a NetworkX MultiDiGraph.

    Nodes are keyed by address and edges by their address, which is
    also the MultiDiGraph edge key. Iteration follows insertion order.
    """

    def __init__(self):
        self.graph = nx.MultiDiGraph()
        self._edges: dict[EdgeAddress, Edge] = {}

    def add_node(self, node: NodeAddress) -> "Graph":
        self.graph.add_node(tuple(node))
        return self

    def has_node(self, node: NodeAddress) -> bool:
        return self.graph.has_node(node)

    def add_edge(self, edge: Edge) -> "Graph":
        """Add an edge whose endpoints are already in the graph."""
        for endpoint in (edge.src, edge.dst):
            if not self.has_node(endpoint):
                raise ValueError(
                    f"Missing endpoint {to_string(endpoint)!r} "
                    f"for edge {to_string(edge.address)!r}"
                )

        existing = self._edges.get(edge.address)
        if existing is not None:
            if existing == edge:
                return self
            raise ValueError(f"Conflicting edge at {to_string(edge.address)!r}")

        self.graph.add_edge(edge.src, edge.dst, key=edge.address)
        self._edges[edge.address] = edge
        return self

    def nodes(self) -> Iterator[NodeAddress]:
        yield from self.graph.nodes

    def edges(self) -> Iterator[Edge]:
        yield from self._edges.values()

    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def to_json(self) -> dict[str, Any]:
        """Serialize to the plain document form read by `from_json`."""
        return {
            "nodes": [to_string(node) for node in self.nodes()],
            "edges": [
                {
                    "address": to_string(edge.address),
                    "src": to_string(edge.src),
                    "dst": to_string(edge.dst),
                }
                for edge in self.edges()
            ],
        }

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "Graph":
        graph = cls()
        for node in data.get("nodes", []):
            graph.add_node(from_string(node))
        for raw in data.get("edges", []):
            graph.add_edge(
                Edge(
                    address=from_string(raw["address"]),
                    src=from_string(raw["src"]),
                    dst=from_string(raw["dst"]),
                )
            )
        return graph

    def save(self, path: Path) -> None:
        path.write_text(json.dumps(self.to_json(), indent=2))

    @classmethod
    def load(cls, path: Path) -> "Graph":
        return cls.from_json(json.loads(path.read_text()))
