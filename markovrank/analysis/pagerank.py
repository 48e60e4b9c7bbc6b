"""PageRank over a weighted graph: the full weighting-to-scores pipeline."""

import logging
from dataclasses import dataclass
from typing import Callable

from ..attribution.chain import (
    create_ordered_sparse_markov_chain,
    distribution_to_node_distribution,
)
from ..attribution.connections import create_connections
from ..attribution.markov import find_stationary_distribution
from ..attribution.weighted_graph import (
    EdgeEvaluator,
    WeightedGraph,
    create_weighted_graph,
)
from ..graph.model import GraphLike
from .config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions
from .node_score import NodeScore, score_by_constant_total

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PagerankResult:
    weighted_graph: WeightedGraph
    scores: NodeScore
    converged: bool
    iterations: int


async def pagerank(
    graph: GraphLike,
    edge_evaluator: EdgeEvaluator,
    options: PagerankOptions | None = None,
    *,
    should_cancel: Callable[[], bool] | None = None,
) -> PagerankResult:
    """Score every node of `graph` by its stationary probability.

    Missing options fall back to the defaults. Options are validated
    before any work starts. Independent calls share no state and may
    run concurrently on one event loop.
    """
    if options is None:
        options = DEFAULT_PAGERANK_OPTIONS
    options.validate()

    weighted_graph = create_weighted_graph(
        graph, edge_evaluator, options.self_loop_weight
    )
    connections = create_connections(weighted_graph)
    osmc = create_ordered_sparse_markov_chain(connections)
    log.debug(
        "Built chain: %d states, %d edge weights",
        len(osmc.node_order),
        len(weighted_graph.edge_weights),
    )

    stationary = await find_stationary_distribution(
        osmc.chain,
        convergence_threshold=options.convergence_threshold,
        max_iterations=options.max_iterations,
        yield_after_ms=options.yield_after_ms,
        verbose=options.verbose,
        should_cancel=should_cancel,
    )
    if not stationary.converged:
        log.debug(
            "Using best-effort distribution after %d iterations (delta = %g)",
            stationary.iterations,
            stationary.delta,
        )

    pi = distribution_to_node_distribution(osmc.node_order, stationary.pi)
    scores = score_by_constant_total(
        pi,
        options.total_score,
        options.total_score_node_prefix,
        options.score_policy,
    )
    return PagerankResult(
        weighted_graph=weighted_graph,
        scores=scores,
        converged=stationary.converged,
        iterations=stationary.iterations,
    )
