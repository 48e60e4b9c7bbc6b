"""CLI for markovrank."""

import asyncio
import json
import logging
from pathlib import Path

import click

from .analysis.config import PagerankOptions, ScorePolicy
from .analysis.pagerank import pagerank
from .analysis.weights import (
    WeightedTypes,
    load_weighted_types,
    weights_to_edge_evaluator,
)
from .attribution.chain import create_ordered_sparse_markov_chain, normalize
from .attribution.connections import create_connections
from .attribution.weighted_graph import create_weighted_graph
from .errors import MarkovRankError
from .graph.address import from_string, to_string
from .graph.model import Graph


@click.group()
def cli():
    """markovrank - Stationary-distribution scores for weighted graphs."""
    pass


def _load_inputs(graph_file: Path, weights_file: Path | None):
    try:
        graph = Graph.load(graph_file)
        weights = WeightedTypes()
        if weights_file is not None:
            weights = load_weighted_types(weights_file)
    except (OSError, ValueError, KeyError) as exc:
        raise SystemExit(f"Failed to load inputs: {exc}") from exc
    return graph, weights_to_edge_evaluator(weights)


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--weights",
    "weights_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with node/edge type weights",
)
@click.option("--prefix", default="", help="Node prefix that receives the total score")
@click.option("--total-score", type=float, default=None, help="Score total for prefix")
@click.option("--self-loop-weight", type=float, default=None)
@click.option("--convergence-threshold", type=float, default=None)
@click.option("--max-iterations", type=int, default=None)
@click.option(
    "--policy",
    type=click.Choice([policy.value for policy in ScorePolicy]),
    default=None,
    help="How nodes outside the prefix are scored",
)
@click.option("--top", "-n", type=int, default=20, help="Number of nodes to show")
@click.option("--as-json", is_flag=True, help="Print all scores as JSON")
@click.option("--verbose", "-v", is_flag=True, help="Log solver progress")
def rank(
    graph_file: Path,
    weights_file: Path | None,
    prefix: str,
    total_score: float | None,
    self_loop_weight: float | None,
    convergence_threshold: float | None,
    max_iterations: int | None,
    policy: str | None,
    top: int,
    as_json: bool,
    verbose: bool,
):
    """Run PageRank on a graph document and print node scores."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    graph, evaluator = _load_inputs(graph_file, weights_file)

    try:
        options = PagerankOptions.from_mapping(
            {
                "self_loop_weight": self_loop_weight,
                "convergence_threshold": convergence_threshold,
                "max_iterations": max_iterations,
                "total_score": total_score,
                "total_score_node_prefix": from_string(prefix),
                "score_policy": policy,
                "verbose": verbose,
            }
        )
        result = asyncio.run(pagerank(graph, evaluator, options))
    except MarkovRankError as exc:
        raise SystemExit(str(exc)) from exc

    ranked = sorted(result.scores.items(), key=lambda item: (-item[1], item[0]))

    if as_json:
        payload = {
            "converged": result.converged,
            "iterations": result.iterations,
            "scores": {to_string(node): score for node, score in ranked},
        }
        click.echo(json.dumps(payload, indent=2))
        return

    status = "converged" if result.converged else "did not converge"
    click.echo(
        f"{graph.node_count()} nodes, {graph.edge_count()} edges; "
        f"{status} after {result.iterations} iterations"
    )
    for i, (node, score) in enumerate(ranked[:top], 1):
        click.echo(f"{i:>3}. {score:12.4f}  {to_string(node)}")


@cli.command()
@click.argument("graph_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--weights",
    "weights_file",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="YAML file with node/edge type weights",
)
@click.option("--self-loop-weight", type=float, default=1e-3)
def chain(graph_file: Path, weights_file: Path | None, self_loop_weight: float):
    """Print the canonical transition chain of a graph document."""
    graph, evaluator = _load_inputs(graph_file, weights_file)
    try:
        weighted_graph = create_weighted_graph(graph, evaluator, self_loop_weight)
    except MarkovRankError as exc:
        raise SystemExit(str(exc)) from exc

    connections = create_connections(weighted_graph)
    osmc = normalize(create_ordered_sparse_markov_chain(connections))
    for node, row in zip(osmc.node_order, osmc.chain):
        click.echo(to_string(node))
        for neighbor, weight in zip(row.neighbor, row.weight):
            click.echo(f"  <- {to_string(osmc.node_order[neighbor])}  {weight:.6f}")


if __name__ == "__main__":
    cli()
