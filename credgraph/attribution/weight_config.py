"""YAML weight configuration.

Weights are given in log space (``weight = 2 ** log_weight``) per address
prefix, mirroring how they are tuned interactively::

    default_node: {log_weight: 0}
    default_edge: {log_weight: 0, directionality: 0.5}
    nodes:
      - prefix: [github, issue]
        log_weight: 1
    edges:
      - prefix: [github, authors]
        log_weight: 0
        directionality: 0.5
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from ..graph.address import EdgeAddress, NodeAddress
from .weights import (
    EdgeEvaluator,
    EdgeWeightRule,
    NodeWeightRule,
    edge_by_prefix,
    lift_node_evaluator,
    node_by_prefix,
)


class WeightConfigError(ValueError):
    """Malformed weight configuration."""


@dataclass(frozen=True)
class WeightConfig:
    node_rules: tuple[NodeWeightRule, ...] = ()
    edge_rules: tuple[EdgeWeightRule, ...] = ()
    default_node_weight: float | None = 1.0
    default_edge_rule: EdgeWeightRule | None = EdgeWeightRule(
        prefix=EdgeAddress(()), weight=1.0, directionality=0.5
    )

    def edge_evaluator(self) -> EdgeEvaluator:
        """Edge evaluator with node weights folded in."""
        return lift_node_evaluator(
            node_by_prefix(self.node_rules, default=self.default_node_weight),
            edge_by_prefix(self.edge_rules, default=self.default_edge_rule),
        )


DEFAULT_WEIGHT_CONFIG = WeightConfig()


def _number(raw: dict, key: str, default: float, where: str) -> float:
    value = raw.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise WeightConfigError(f"{where}: {key} must be a number, got {value!r}")
    return float(value)


def _weight(raw: dict, where: str) -> float:
    log_weight = _number(raw, "log_weight", 0.0, where)
    try:
        return 2**log_weight
    except OverflowError as exc:
        raise WeightConfigError(
            f"{where}: log_weight {log_weight} is out of range"
        ) from exc


def _prefix(raw: dict, where: str) -> list[str]:
    value = raw.get("prefix")
    if isinstance(value, str):
        return value.split("/") if value else []
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise WeightConfigError(f"{where}: prefix must be a list of strings")
    return value


def _entries(data: dict, key: str) -> list[dict]:
    entries = data.get(key) or []
    if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
        raise WeightConfigError(f"{key} must be a list of mappings")
    return entries


def _edge_rule(raw: dict, prefix: list[str], where: str) -> EdgeWeightRule:
    weight = _weight(raw, where)
    directionality = _number(raw, "directionality", 0.5, where)
    try:
        return EdgeWeightRule(
            prefix=EdgeAddress.from_parts(prefix),
            weight=weight,
            directionality=directionality,
        )
    except ValueError as exc:
        raise WeightConfigError(f"{where}: {exc}") from exc


def parse_weight_config(data: dict[str, Any] | None) -> WeightConfig:
    """Build a ``WeightConfig`` from an already parsed YAML document."""
    if data is None:
        return DEFAULT_WEIGHT_CONFIG
    if not isinstance(data, dict):
        raise WeightConfigError("Weight configuration must be a mapping")

    node_rules = tuple(
        NodeWeightRule(
            prefix=NodeAddress.from_parts(_prefix(raw, f"nodes[{i}]")),
            weight=_weight(raw, f"nodes[{i}]"),
        )
        for i, raw in enumerate(_entries(data, "nodes"))
    )
    edge_rules = tuple(
        _edge_rule(raw, _prefix(raw, f"edges[{i}]"), f"edges[{i}]")
        for i, raw in enumerate(_entries(data, "edges"))
    )

    default_node_weight = DEFAULT_WEIGHT_CONFIG.default_node_weight
    if "default_node" in data:
        raw = data["default_node"]
        if raw is None:
            default_node_weight = None
        elif isinstance(raw, dict):
            default_node_weight = _weight(raw, "default_node")
        else:
            raise WeightConfigError("default_node must be a mapping or null")

    default_edge_rule = DEFAULT_WEIGHT_CONFIG.default_edge_rule
    if "default_edge" in data:
        raw = data["default_edge"]
        if raw is None:
            default_edge_rule = None
        elif isinstance(raw, dict):
            default_edge_rule = _edge_rule(raw, [], "default_edge")
        else:
            raise WeightConfigError("default_edge must be a mapping or null")

    return WeightConfig(
        node_rules=node_rules,
        edge_rules=edge_rules,
        default_node_weight=default_node_weight,
        default_edge_rule=default_edge_rule,
    )


def load_weight_config(path: str | Path) -> WeightConfig:
    """Load a weight configuration from a YAML file."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise WeightConfigError(f"Invalid YAML in {path}: {exc}") from exc
    return parse_weight_config(data)
