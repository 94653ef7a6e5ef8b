from pathlib import Path

import pytest

from credgraph.attribution.weight_config import (
    DEFAULT_WEIGHT_CONFIG,
    WeightConfigError,
    load_weight_config,
    parse_weight_config,
)
from credgraph.attribution.weights import EdgeWeight
from credgraph.graph.address import EdgeAddress, NodeAddress
from credgraph.graph.graph import Edge

ISSUE = NodeAddress.from_parts(["github", "issue", "1"])
USER = NodeAddress.from_parts(["github", "user", "bob"])
COMMIT = NodeAddress.from_parts(["git", "commit", "abc"])


def _edge(kind: str, src: NodeAddress, dst: NodeAddress) -> Edge:
    return Edge(EdgeAddress.from_parts(["github", kind, "1"]), src, dst)


def test_default_config_is_symmetric():
    evaluator = DEFAULT_WEIGHT_CONFIG.edge_evaluator()

    assert evaluator(_edge("authors", USER, ISSUE)) == EdgeWeight(0.5, 0.5)


def test_parse_full_document():
    config = parse_weight_config(
        {
            "nodes": [{"prefix": ["github", "issue"], "log_weight": 2}],
            "edges": [
                {"prefix": ["github", "authors"], "log_weight": 1, "directionality": 0.75}
            ],
        }
    )
    evaluator = config.edge_evaluator()

    # weight 2, directionality 0.75; forward lands on the issue (x4),
    # backward on the user (default x1)
    assert evaluator(_edge("authors", USER, ISSUE)) == EdgeWeight(6.0, 0.5)
    # unmatched edge falls back to the default rule
    assert evaluator(_edge("references", ISSUE, USER)) == EdgeWeight(0.5, 2.0)


def test_prefix_may_be_a_slash_string():
    config = parse_weight_config({"nodes": [{"prefix": "git/commit", "log_weight": 1}]})

    assert config.node_rules[0].prefix == NodeAddress.from_parts(["git", "commit"])
    assert config.node_rules[0].weight == 2.0


def test_null_defaults_make_rules_mandatory():
    config = parse_weight_config({"default_node": None, "default_edge": None})

    with pytest.raises(ValueError):
        config.edge_evaluator()(_edge("authors", USER, ISSUE))


def test_custom_defaults():
    config = parse_weight_config(
        {
            "default_node": {"log_weight": -1},
            "default_edge": {"log_weight": 2, "directionality": 1.0},
        }
    )

    assert config.edge_evaluator()(_edge("x", USER, COMMIT)) == EdgeWeight(2.0, 0.0)


def test_empty_document_is_default():
    assert parse_weight_config(None) is DEFAULT_WEIGHT_CONFIG


@pytest.mark.parametrize(
    "data",
    [
        ["not", "a", "mapping"],
        {"nodes": {"prefix": ["a"]}},
        {"nodes": [{"prefix": [1, 2]}]},
        {"nodes": [{"prefix": ["a"], "log_weight": "heavy"}]},
        {"edges": [{"prefix": ["a"], "directionality": 2}]},
        {"default_edge": 3},
        {"nodes": [{"prefix": ["a"], "log_weight": 5000}]},
        {"edges": [{"prefix": ["a"], "log_weight": 5000}]},
        {"default_node": {"log_weight": 1e6}},
    ],
)
def test_malformed_documents(data):
    with pytest.raises(WeightConfigError):
        parse_weight_config(data)


def test_load_from_yaml(tmp_path: Path):
    path = tmp_path / "weights.yaml"
    path.write_text(
        "nodes:\n"
        "  - prefix: [github, issue]\n"
        "    log_weight: 1\n"
        "edges:\n"
        "  - prefix: [github, authors]\n"
        "    log_weight: 0\n"
        "    directionality: 1.0\n",
        encoding="utf-8",
    )

    config = load_weight_config(path)

    assert config.edge_evaluator()(_edge("authors", USER, ISSUE)) == EdgeWeight(2.0, 0.0)


def test_load_invalid_yaml(tmp_path: Path):
    path = tmp_path / "weights.yaml"
    path.write_text("nodes: [unclosed\n", encoding="utf-8")

    with pytest.raises(WeightConfigError):
        load_weight_config(path)
