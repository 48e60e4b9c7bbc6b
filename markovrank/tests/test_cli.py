import json

import pytest
from click.testing import CliRunner

from markovrank.cli import cli
from markovrank.graph.model import Edge, Graph


@pytest.fixture
def graph_file(tmp_path):
    graph = Graph()
    for node in (("git", "a"), ("git", "b"), ("user", "u")):
        graph.add_node(node)
    graph.add_edge(Edge(("authors", "1"), ("user", "u"), ("git", "a")))
    graph.add_edge(Edge(("authors", "2"), ("user", "u"), ("git", "b")))
    graph.add_edge(Edge(("parent", "1"), ("git", "b"), ("git", "a")))
    path = tmp_path / "graph.json"
    graph.save(path)
    return path


def test_rank_prints_scores(graph_file):
    result = CliRunner().invoke(cli, ["rank", str(graph_file), "--top", "2"])

    assert result.exit_code == 0, result.output
    lines = result.output.strip().splitlines()
    assert lines[0].startswith("3 nodes, 3 edges; converged")
    assert len(lines) == 3


def test_rank_json_output_respects_prefix(graph_file, tmp_path):
    weights = tmp_path / "weights.yaml"
    weights.write_text("nodes:\n  - prefix: git/a\n    weight: 2\n")

    result = CliRunner().invoke(
        cli,
        [
            "rank",
            str(graph_file),
            "--weights",
            str(weights),
            "--prefix",
            "git",
            "--total-score",
            "10",
            "--as-json",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["converged"] is True
    scores = payload["scores"]
    assert scores["git/a"] + scores["git/b"] == pytest.approx(10)
    assert set(scores) == {"git/a", "git/b", "user/u"}


def test_rank_reports_degenerate_prefix(graph_file):
    result = CliRunner().invoke(cli, ["rank", str(graph_file), "--prefix", "slack"])

    assert result.exit_code != 0
    assert "slack" in result.output


def test_rank_reports_invalid_options(graph_file):
    result = CliRunner().invoke(
        cli, ["rank", str(graph_file), "--self-loop-weight", "0"]
    )

    assert result.exit_code != 0
    assert "self_loop_weight" in result.output


def test_chain_prints_canonical_rows(graph_file):
    result = CliRunner().invoke(cli, ["chain", str(graph_file)])

    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0] == "git/a"
    assert any(line.startswith("  <- user/u") for line in lines)


@pytest.mark.parametrize("text", ["nodes: [\n", "nodes: [foo]\n"])
def test_rank_reports_bad_weights_file(graph_file, tmp_path, text):
    weights = tmp_path / "weights.yaml"
    weights.write_text(text)

    result = CliRunner().invoke(
        cli, ["rank", str(graph_file), "--weights", str(weights)]
    )

    assert result.exit_code != 0
    assert isinstance(result.exception, SystemExit)
    assert "Failed to load inputs" in result.output
