"""JSON (de)serialization for addressable graphs."""

import json
import logging
from pathlib import Path
from typing import Any

from .address import EdgeAddress, NodeAddress
from .graph import AddressableGraph, Edge

log = logging.getLogger(__name__)


def _parts(value: Any, what: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(p, str) for p in value):
        raise ValueError(f"{what} must be a list of strings, got {value!r}")
    return value


def graph_to_json(graph: AddressableGraph) -> dict[str, Any]:
    """Canonical document: nodes and edges sorted by address."""
    nodes = sorted(graph.nodes())
    edges = sorted(graph.edges(), key=lambda e: e.address)
    return {
        "nodes": [node.to_parts() for node in nodes],
        "edges": [
            {
                "address": edge.address.to_parts(),
                "src": edge.src.to_parts(),
                "dst": edge.dst.to_parts(),
            }
            for edge in edges
        ],
    }


def graph_from_json(data: dict[str, Any]) -> AddressableGraph:
    """Rebuild a graph from ``graph_to_json`` output.

    Raises:
        ValueError: if the document does not have the expected shape.
        AddressConflict, MissingEndpoint: if the edges are inconsistent.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Graph document must be an object, got {type(data).__name__}")

    graph = AddressableGraph()
    for raw in data.get("nodes", []):
        graph.add_node(NodeAddress.from_parts(_parts(raw, "node address")))

    for raw in data.get("edges", []):
        if not isinstance(raw, dict):
            raise ValueError(f"Edge entry must be an object, got {raw!r}")
        try:
            address, src, dst = raw["address"], raw["src"], raw["dst"]
        except KeyError as exc:
            raise ValueError(f"Edge entry missing field {exc}: {raw!r}") from exc
        graph.add_edge(
            Edge(
                address=EdgeAddress.from_parts(_parts(address, "edge address")),
                src=NodeAddress.from_parts(_parts(src, "edge src")),
                dst=NodeAddress.from_parts(_parts(dst, "edge dst")),
            )
        )
    return graph


def save_graph(graph: AddressableGraph, path: Path) -> None:
    """Save graph to JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(graph_to_json(graph), f, indent=2, ensure_ascii=False)
    log.info(f"Saved graph with {graph.node_count()} nodes to {path}")


def load_graph(path: Path) -> AddressableGraph:
    """Load graph from JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    graph = graph_from_json(data)
    log.info(
        f"Loaded graph from {path}: {graph.node_count()} nodes, "
        f"{graph.edge_count()} edges"
    )
    return graph
