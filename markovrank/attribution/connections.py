"""Turn a weighted graph into per-node conditional-probability connections."""

from dataclasses import dataclass

from ..graph.address import NodeAddress
from ..graph.model import Edge
from .weighted_graph import WeightedGraph


@dataclass(frozen=True)
class SyntheticLoop:
    """The artificial self-transition every node carries."""


@dataclass(frozen=True)
class InEdge:
    """Mass arriving at an edge's dst from its src."""

    edge: Edge


@dataclass(frozen=True)
class OutEdge:
    """Mass arriving at an edge's src from its dst (the backward direction)."""

    edge: Edge


Adjacency = SyntheticLoop | InEdge | OutEdge


@dataclass(frozen=True)
class Connection:
    adjacency: Adjacency
    # Conditional probability: given the walk is at this connection's
    # source, the chance it moves along this connection to the target.
    weight: float


NodeToConnections = dict[NodeAddress, tuple[Connection, ...]]


def adjacency_source(target: NodeAddress, adjacency: Adjacency) -> NodeAddress:
    """Node the walk comes from when it arrives at `target` via `adjacency`."""
    if isinstance(adjacency, SyntheticLoop):
        return target
    if isinstance(adjacency, InEdge):
        return adjacency.edge.src
    if isinstance(adjacency, OutEdge):
        return adjacency.edge.dst
    raise TypeError(f"Unknown adjacency: {adjacency!r}")


def create_connections(weighted_graph: WeightedGraph) -> NodeToConnections:
    """Collect every node's arrivals and normalize them per source.

    Raw weights come from the weighted graph; each is divided by the
    total raw weight its source emits, so the connections leaving any
    node sum to 1.
    """
    raw: dict[NodeAddress, list[Connection]] = {}
    total_out_weight: dict[NodeAddress, float] = {}
    for node in weighted_graph.graph.nodes():
        raw[node] = []
        total_out_weight[node] = 0.0

    def process(target: NodeAddress, connection: Connection) -> None:
        raw[target].append(connection)
        source = adjacency_source(target, connection.adjacency)
        total_out_weight[source] += connection.weight

    loop_weight = weighted_graph.synthetic_loop_weight
    for node in raw:
        process(node, Connection(adjacency=SyntheticLoop(), weight=loop_weight))

    for edge in weighted_graph.graph.edges():
        weights = weighted_graph.edge_weights[edge.address]
        process(edge.dst, Connection(adjacency=InEdge(edge), weight=weights.to_weight))
        process(
            edge.src, Connection(adjacency=OutEdge(edge), weight=weights.fro_weight)
        )

    result: NodeToConnections = {}
    for target, connections in raw.items():
        normalized = []
        for connection in connections:
            source = adjacency_source(target, connection.adjacency)
            normalized.append(
                Connection(
                    adjacency=connection.adjacency,
                    weight=connection.weight / total_out_weight[source],
                )
            )
        result[target] = tuple(normalized)
    return result
