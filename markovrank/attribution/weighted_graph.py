"""Attach un-normalized weights to every edge of a graph.

A WeightedGraph holds what PageRank needs beyond the raw topology: an
EdgeWeight for every edge, where "un-normalized" means the weights out
of a node need not sum to 1, and the total out weight of every node so
that normalizing later is a single division.

Every node also gets a synthetic loop back to itself. Its weight is a
tuning parameter that keeps isolated nodes connected and keeps every
total out weight strictly positive.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Callable

from ..errors import InvalidConfiguration, InvalidEdgeWeight, UnknownNodeReference
from ..graph.address import EdgeAddress, NodeAddress
from ..graph.model import Edge, GraphLike


@dataclass(frozen=True)
class EdgeWeight:
    to_weight: float  # src -> dst
    fro_weight: float  # dst -> src

    def __post_init__(self):
        for name in ("to_weight", "fro_weight"):
            value = getattr(self, name)
            if not isinstance(value, numbers.Real) or isinstance(value, bool):
                raise InvalidEdgeWeight(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value) or value < 0:
                raise InvalidEdgeWeight(
                    f"{name} must be finite and >= 0, got {value!r}"
                )


EdgeEvaluator = Callable[[Edge], EdgeWeight]


@dataclass(frozen=True)
class WeightedGraph:
    graph: GraphLike
    edge_weights: dict[EdgeAddress, EdgeWeight]
    node_total_out_weights: dict[NodeAddress, float]
    synthetic_loop_weight: float


def validate_synthetic_loop_weight(value: float) -> None:
    if (
        not isinstance(value, numbers.Real)
        or not math.isfinite(value)
        or value <= 0
    ):
        raise InvalidConfiguration(
            f"synthetic loop weight must be finite and > 0, got {value!r}"
        )


def create_weighted_graph(
    graph: GraphLike,
    edge_evaluator: EdgeEvaluator,
    synthetic_loop_weight: float,
) -> WeightedGraph:
    """Evaluate every edge once and accumulate per-node out weights."""
    validate_synthetic_loop_weight(synthetic_loop_weight)

    node_total_out_weights: dict[NodeAddress, float] = {}
    for node in graph.nodes():
        node_total_out_weights[node] = synthetic_loop_weight

    edge_weights: dict[EdgeAddress, EdgeWeight] = {}
    for edge in graph.edges():
        for endpoint in (edge.src, edge.dst):
            if endpoint not in node_total_out_weights:
                raise UnknownNodeReference(edge.address, endpoint)
        if edge.address in edge_weights:
            raise ValueError(f"Duplicate edge address {edge.address!r}")

        weights = edge_evaluator(edge)
        if not isinstance(weights, EdgeWeight):
            raise TypeError(
                f"Edge evaluator must return EdgeWeight, got {type(weights).__name__}"
            )

        node_total_out_weights[edge.src] += weights.to_weight
        node_total_out_weights[edge.dst] += weights.fro_weight
        edge_weights[edge.address] = weights

    return WeightedGraph(
        graph=graph,
        edge_weights=edge_weights,
        node_total_out_weights=node_total_out_weights,
        synthetic_loop_weight=synthetic_loop_weight,
    )
