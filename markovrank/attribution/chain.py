"""Ordered sparse Markov chains keyed by destination state.

Every node gets a dense integer index. Row `i` of the chain lists the
states that send probability mass into state `i`, together with how
much, so one pass over the rows is one step of the walk.
"""

from dataclasses import dataclass

import numpy as np

from ..graph.address import NodeAddress
from .connections import NodeToConnections, adjacency_source


@dataclass(frozen=True, eq=False)
class SparseRow:
    """In-neighbors of one state and the probability each contributes."""

    neighbor: np.ndarray  # uint32 source indices
    weight: np.ndarray  # float64 probabilities

    def __len__(self) -> int:
        return len(self.neighbor)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SparseRow):
            return NotImplemented
        return np.array_equal(self.neighbor, other.neighbor) and np.array_equal(
            self.weight, other.weight
        )

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def from_pairs(cls, pairs: list[tuple[int, float]]) -> "SparseRow":
        count = len(pairs)
        return cls(
            neighbor=np.fromiter((n for n, _ in pairs), dtype=np.uint32, count=count),
            weight=np.fromiter((w for _, w in pairs), dtype=np.float64, count=count),
        )


SparseMarkovChain = tuple[SparseRow, ...]


@dataclass(frozen=True)
class OrderedSparseMarkovChain:
    node_order: tuple[NodeAddress, ...]
    chain: SparseMarkovChain

    def index_of(self) -> dict[NodeAddress, int]:
        return {node: index for index, node in enumerate(self.node_order)}


def _merge_in_neighbors(
    connections: NodeToConnections,
) -> dict[NodeAddress, dict[NodeAddress, float]]:
    merged: dict[NodeAddress, dict[NodeAddress, float]] = {}
    for target, target_connections in connections.items():
        in_neighbors: dict[NodeAddress, float] = {}
        for connection in target_connections:
            source = adjacency_source(target, connection.adjacency)
            in_neighbors[source] = in_neighbors.get(source, 0.0) + connection.weight
        merged[target] = in_neighbors
    return merged


def create_ordered_sparse_markov_chain(
    connections: NodeToConnections,
) -> OrderedSparseMarkovChain:
    """Index nodes by first encounter and build one row per destination.

    Duplicate sources at a destination are summed; sources that
    contribute no mass are left out of the row.
    """
    merged = _merge_in_neighbors(connections)
    node_order = tuple(merged)
    index = {node: i for i, node in enumerate(node_order)}

    rows = []
    for dst in node_order:
        pairs = [
            (index[src], weight) for src, weight in merged[dst].items() if weight > 0
        ]
        rows.append(SparseRow.from_pairs(pairs))
    return OrderedSparseMarkovChain(node_order=node_order, chain=tuple(rows))


def _check_permutation(
    old_order: tuple[NodeAddress, ...], new_order: tuple[NodeAddress, ...]
) -> None:
    if len(new_order) != len(old_order):
        raise ValueError(
            f"New order has {len(new_order)} nodes, chain has {len(old_order)}"
        )
    if len(set(new_order)) != len(new_order):
        raise ValueError("New order contains duplicate nodes")
    if set(new_order) != set(old_order):
        raise ValueError("New order is not a permutation of the chain's nodes")


def permute(
    old: OrderedSparseMarkovChain, new_order: list[NodeAddress] | tuple
) -> OrderedSparseMarkovChain:
    """Relabel the chain so that its node order is `new_order`.

    `new_order` must be a permutation of `old.node_order`.
    """
    new_order = tuple(new_order)
    _check_permutation(old.node_order, new_order)

    old_indices = old.index_of()
    new_indices = {node: i for i, node in enumerate(new_order)}
    # old index -> new index, applied to whole neighbor arrays at once
    relabel = np.array(
        [new_indices[node] for node in old.node_order], dtype=np.uint32
    )

    rows = []
    for node in new_order:
        row = old.chain[old_indices[node]]
        rows.append(
            SparseRow(
                neighbor=relabel[row.neighbor.astype(np.intp)],
                weight=row.weight.copy(),
            )
        )
    return OrderedSparseMarkovChain(node_order=new_order, chain=tuple(rows))


def normalize_neighbors(old: OrderedSparseMarkovChain) -> OrderedSparseMarkovChain:
    """Sort every row by neighbor index."""
    rows = []
    for row in old.chain:
        if len(row.neighbor) != len(row.weight):
            raise ValueError(
                f"Row length mismatch: {len(row.neighbor)} != {len(row.weight)}"
            )
        order = np.argsort(row.neighbor, kind="stable")
        rows.append(SparseRow(neighbor=row.neighbor[order], weight=row.weight[order]))
    return OrderedSparseMarkovChain(node_order=old.node_order, chain=tuple(rows))


def normalize(old: OrderedSparseMarkovChain) -> OrderedSparseMarkovChain:
    """Canonical form: nodes sorted by address, rows sorted by neighbor."""
    return normalize_neighbors(permute(old, sorted(old.node_order)))


def distribution_to_node_distribution(
    node_order: tuple[NodeAddress, ...], pi: np.ndarray
) -> dict[NodeAddress, float]:
    if len(node_order) != len(pi):
        raise ValueError(
            f"Distribution has {len(pi)} entries for {len(node_order)} nodes"
        )
    return {node: float(pi[i]) for i, node in enumerate(node_order)}
