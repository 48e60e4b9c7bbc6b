import numpy as np
import pytest

from markovrank.attribution.chain import (
    OrderedSparseMarkovChain,
    SparseRow,
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
    normalize,
    normalize_neighbors,
    permute,
)
from markovrank.attribution.connections import create_connections
from markovrank.attribution.weighted_graph import EdgeWeight, create_weighted_graph
from markovrank.graph.model import Edge, Graph

A, B, C, D = ("a",), ("b",), ("c",), ("d",)


def _chain(nodes, edges, weights=None, loop_weight=0.5) -> OrderedSparseMarkovChain:
    graph = Graph()
    for node in nodes:
        graph.add_node(node)
    for name, src, dst in edges:
        graph.add_edge(Edge(("e", name), src, dst))
    weights = weights or {}

    def evaluator(edge: Edge) -> EdgeWeight:
        return weights.get(edge.address[1], EdgeWeight(1.0, 1.0))

    weighted = create_weighted_graph(graph, evaluator, loop_weight)
    return create_ordered_sparse_markov_chain(create_connections(weighted))


def _row_map(osmc: OrderedSparseMarkovChain) -> dict:
    """Chain as {dst: {src: weight}} in address space."""
    return {
        dst: {
            osmc.node_order[int(n)]: float(w) for n, w in zip(row.neighbor, row.weight)
        }
        for dst, row in zip(osmc.node_order, osmc.chain)
    }


@pytest.fixture
def chain():
    return _chain(
        [C, A, D, B],
        [("1", A, B), ("2", B, C), ("3", C, A), ("4", D, A), ("5", A, C)],
        weights={"4": EdgeWeight(2.0, 0.0), "5": EdgeWeight(0.0, 3.0)},
    )


def test_node_order_is_first_encounter(chain):
    assert chain.node_order == (C, A, D, B)
    assert len(chain.chain) == 4


def test_two_node_rows():
    s = 0.5
    osmc = _chain([A, B], [("ab", A, B)], {"ab": EdgeWeight(1.0, 0.0)}, loop_weight=s)

    assert _row_map(osmc) == {
        A: {A: pytest.approx(s / (s + 1))},
        B: {B: pytest.approx(1.0), A: pytest.approx(1 / (s + 1))},
    }
    assert osmc.chain[0].neighbor.dtype == np.uint32
    assert osmc.chain[0].weight.dtype == np.float64


def test_duplicate_sources_are_summed():
    s = 0.5
    osmc = _chain(
        [A, B],
        [("1", A, B), ("2", A, B)],
        {"1": EdgeWeight(1.0, 0.0), "2": EdgeWeight(1.0, 0.0)},
        loop_weight=s,
    )

    row_b = osmc.chain[1]
    assert sorted(row_b.neighbor.tolist()) == [0, 1]
    assert _row_map(osmc)[B][A] == pytest.approx(2 / (s + 2))


def test_columns_are_stochastic(chain):
    # Mass leaving each source across all rows sums to one.
    out = np.zeros(len(chain.node_order))
    for row in chain.chain:
        np.add.at(out, row.neighbor.astype(np.intp), row.weight)
    assert out == pytest.approx(np.ones(len(chain.node_order)))


def test_permute_relabels_states(chain):
    new_order = [B, D, A, C]
    permuted = permute(chain, new_order)

    assert permuted.node_order == tuple(new_order)
    assert _row_map(permuted) == _row_map(chain)


def test_permute_round_trip(chain):
    order = sorted(chain.node_order, reverse=True)
    round_trip = permute(permute(chain, order), chain.node_order)

    assert round_trip == chain
    assert normalize(round_trip) == normalize(chain)


@pytest.mark.parametrize(
    "bad_order",
    [
        [A, B, C],
        [A, B, C, C],
        [A, B, C, ("z",)],
    ],
)
def test_permute_requires_a_permutation(chain, bad_order):
    with pytest.raises(ValueError):
        permute(chain, bad_order)


def test_normalize_neighbors_sorts_rows():
    osmc = OrderedSparseMarkovChain(
        node_order=(B, A),
        chain=(
            SparseRow.from_pairs([(1, 0.25), (0, 0.75)]),
            SparseRow.from_pairs([(0, 0.25), (1, 0.75)]),
        ),
    )

    normalized = normalize_neighbors(osmc)

    assert normalized.node_order == (B, A)
    assert normalized.chain[0] == SparseRow.from_pairs([(0, 0.75), (1, 0.25)])
    assert normalized.chain[1] == SparseRow.from_pairs([(0, 0.25), (1, 0.75)])


def test_normalize_neighbors_rejects_ragged_rows():
    osmc = OrderedSparseMarkovChain(
        node_order=(A,),
        chain=(
            SparseRow(
                neighbor=np.array([0], dtype=np.uint32),
                weight=np.array([0.5, 0.5]),
            ),
        ),
    )
    with pytest.raises(ValueError, match="mismatch"):
        normalize_neighbors(osmc)


def test_normalize_sorts_nodes_and_neighbors():
    osmc = OrderedSparseMarkovChain(
        node_order=(B, A),
        chain=(
            SparseRow.from_pairs([(1, 0.5), (0, 0.5)]),
            SparseRow.from_pairs([(0, 1.0)]),
        ),
    )

    normalized = normalize(osmc)

    assert normalized.node_order == (A, B)
    assert normalized.chain == (
        SparseRow.from_pairs([(1, 1.0)]),
        SparseRow.from_pairs([(0, 0.5), (1, 0.5)]),
    )


def test_normalize_is_idempotent(chain):
    once = normalize(chain)
    assert normalize(once) == once


def test_isomorphic_inputs_normalize_identically():
    edges = [("1", A, B), ("2", B, C), ("3", C, A)]
    first = _chain([A, B, C], edges)
    second = _chain([C, B, A], list(reversed(edges)))

    assert first != second
    assert normalize(first) == normalize(second)


def test_distribution_to_node_distribution():
    pi = np.array([0.25, 0.75])
    assert distribution_to_node_distribution((A, B), pi) == {A: 0.25, B: 0.75}
    with pytest.raises(ValueError):
        distribution_to_node_distribution((A,), pi)
