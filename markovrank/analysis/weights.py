"""Type-level weights and the edge evaluator built from them.

A node or edge belongs to a type when its address has the type's
prefix. Weights are linear: 1 is normal importance, 2 twice as
important.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..graph.address import EdgeAddress, NodeAddress, from_string, has_prefix
from ..graph.model import Edge
from ..attribution.weighted_graph import EdgeEvaluator, EdgeWeight


@dataclass(frozen=True)
class NodeType:
    name: str
    prefix: NodeAddress
    default_weight: float = 1.0


@dataclass(frozen=True)
class EdgeType:
    forward_name: str
    backward_name: str
    prefix: EdgeAddress
    default_forward_weight: float = 1.0
    default_backward_weight: float = 1.0


@dataclass(frozen=True)
class WeightedNodeType:
    type: NodeType
    weight: float


@dataclass(frozen=True)
class WeightedEdgeType:
    type: EdgeType
    forward_weight: float
    backward_weight: float


@dataclass(frozen=True)
class WeightedTypes:
    nodes: tuple[WeightedNodeType, ...] = field(default_factory=tuple)
    edges: tuple[WeightedEdgeType, ...] = field(default_factory=tuple)


def default_weighted_types(
    node_types: list[NodeType], edge_types: list[EdgeType]
) -> WeightedTypes:
    """Weight every type with its declared default."""
    return WeightedTypes(
        nodes=tuple(WeightedNodeType(t, t.default_weight) for t in node_types),
        edges=tuple(
            WeightedEdgeType(t, t.default_forward_weight, t.default_backward_weight)
            for t in edge_types
        ),
    )


def weights_to_edge_evaluator(weights: WeightedTypes) -> EdgeEvaluator:
    """Build an evaluator from type weights.

    A node's weight is the product of the weights of every node type
    matching it (1 when none match). An edge uses its most specific
    matching edge type (1 forward and backward when none match). Each
    direction is scaled by the weight of the node it points at.
    """
    node_weights = [(w.type.prefix, w.weight) for w in weights.nodes]
    edge_weights = sorted(
        ((w.type.prefix, w.forward_weight, w.backward_weight) for w in weights.edges),
        key=lambda entry: len(entry[0]),
        reverse=True,
    )

    def node_weight(node: NodeAddress) -> float:
        result = 1.0
        for prefix, weight in node_weights:
            if has_prefix(node, prefix):
                result *= weight
        return result

    def direction_weights(edge_address: EdgeAddress) -> tuple[float, float]:
        for prefix, forward, backward in edge_weights:
            if has_prefix(edge_address, prefix):
                return forward, backward
        return 1.0, 1.0

    def evaluator(edge: Edge) -> EdgeWeight:
        forward, backward = direction_weights(edge.address)
        return EdgeWeight(
            to_weight=node_weight(edge.dst) * forward,
            fro_weight=node_weight(edge.src) * backward,
        )

    return evaluator


def _entries(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    entries = data.get(key) or []
    if not isinstance(entries, list):
        raise ValueError(f"Weights {key!r} must be a list, got {entries!r}")
    for entry in entries:
        if not isinstance(entry, dict) or "prefix" not in entry:
            raise ValueError(f"Weights {key!r} entry needs a prefix: {entry!r}")
    return entries


def _number(entry: dict[str, Any], key: str) -> float:
    value = entry.get(key, 1.0)
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Weight {key!r} must be a number, got {value!r}") from exc


def weighted_types_from_dict(data: dict[str, Any]) -> WeightedTypes:
    """Parse the mapping form used by weights files.

    nodes:
      - prefix: git/commit
        weight: 2
    edges:
      - prefix: git/has_parent
        forward: 1
        backward: 0.5

    Entries of the wrong shape raise ValueError.
    """
    nodes = []
    for raw in _entries(data, "nodes"):
        prefix = from_string(str(raw["prefix"]))
        node_type = NodeType(name=str(raw.get("name", raw["prefix"])), prefix=prefix)
        nodes.append(WeightedNodeType(node_type, _number(raw, "weight")))

    edges = []
    for raw in _entries(data, "edges"):
        prefix = from_string(str(raw["prefix"]))
        name = str(raw.get("name", raw["prefix"]))
        edge_type = EdgeType(forward_name=name, backward_name=name, prefix=prefix)
        edges.append(
            WeightedEdgeType(
                edge_type,
                forward_weight=_number(raw, "forward"),
                backward_weight=_number(raw, "backward"),
            )
        )
    return WeightedTypes(nodes=tuple(nodes), edges=tuple(edges))


def load_weighted_types(path: Path) -> WeightedTypes:
    with open(path, encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in weights file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Weights file must contain a mapping: {path}")
    return weighted_types_from_dict(data)
