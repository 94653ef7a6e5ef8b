"""Addressable graph backed by a NetworkX multigraph."""

from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

import networkx as nx

from ..errors import AddressConflict, GraphError, MissingEndpoint
from .address import EdgeAddress, NodeAddress


@dataclass(frozen=True)
class Edge:
    address: EdgeAddress
    src: NodeAddress
    dst: NodeAddress

    def __str__(self) -> str:
        return f"{self.address} ({self.src} -> {self.dst})"


class Direction(Enum):
    """Which incident edges a neighbor query follows."""

    IN = "in"  # edges whose dst is the queried node
    OUT = "out"  # edges whose src is the queried node
    BOTH = "both"


@dataclass(frozen=True)
class Neighbor:
    node: NodeAddress
    edge: Edge


@dataclass(frozen=True)
class NamespaceStats:
    """Node and edge counts keyed by the first address component."""

    nodes: int
    edges: int
    node_namespaces: dict[str, int]
    edge_namespaces: dict[str, int]

    @staticmethod
    def _breakdown(counts: dict[str, int]) -> str:
        ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return " ".join(f"{namespace}={count}" for namespace, count in ranked)

    def __str__(self) -> str:
        return "\n".join(
            [
                f"{'nodes':<6}{self.nodes:>8}  {self._breakdown(self.node_namespaces)}",
                f"{'edges':<6}{self.edges:>8}  {self._breakdown(self.edge_namespaces)}",
            ]
        ).rstrip()


def _top_level(parts: tuple[str, ...]) -> str:
    return parts[0] if parts else "(root)"


class AddressableGraph:
    """Nodes and edges keyed by hierarchical addresses.

    Nodes carry no payload. Edges are stored in the multigraph under their
    address as key, so parallel edges between the same endpoints are kept
    apart. Iteration order is insertion order.

    Args:
        check_invariants: Run ``validate()`` after every mutation. Slow;
            meant for tests and debugging.
    """

    def __init__(self, check_invariants: bool = False):
        self.graph = nx.MultiDiGraph()
        self._edges: dict[EdgeAddress, Edge] = {}
        self.check_invariants = check_invariants

    # Mutation

    def add_node(self, address: NodeAddress) -> "AddressableGraph":
        if not isinstance(address, NodeAddress):
            raise TypeError(f"expected NodeAddress, got {type(address).__name__}")
        self.graph.add_node(address)
        self._maybe_validate()
        return self

    def remove_node(self, address: NodeAddress) -> "AddressableGraph":
        if not self.graph.has_node(address):
            return self
        if self.graph.degree(address) > 0:
            dangling = next(
                self.neighbors(address, Direction.BOTH)
            ).edge.address
            raise GraphError(
                f"Cannot remove {address}: still referenced by edge {dangling}"
            )
        self.graph.remove_node(address)
        self._maybe_validate()
        return self

    def add_edge(self, edge: Edge) -> "AddressableGraph":
        if not isinstance(edge.address, EdgeAddress):
            raise TypeError(
                f"expected EdgeAddress, got {type(edge.address).__name__}"
            )
        existing = self._edges.get(edge.address)
        if existing is not None:
            if existing == edge:
                return self
            raise AddressConflict(
                f"Edge {edge.address} already exists as {existing}; "
                f"refusing to rebind it to {edge.src} -> {edge.dst}"
            )
        for endpoint, role in ((edge.src, "src"), (edge.dst, "dst")):
            if not self.graph.has_node(endpoint):
                raise MissingEndpoint(
                    f"Edge {edge.address} has missing {role} {endpoint}"
                )
        self.graph.add_edge(edge.src, edge.dst, key=edge.address, edge=edge)
        self._edges[edge.address] = edge
        self._maybe_validate()
        return self

    def remove_edge(self, address: EdgeAddress) -> "AddressableGraph":
        edge = self._edges.pop(address, None)
        if edge is None:
            return self
        self.graph.remove_edge(edge.src, edge.dst, key=address)
        self._maybe_validate()
        return self

    # Queries

    def has_node(self, address: NodeAddress) -> bool:
        return self.graph.has_node(address)

    def has_edge(self, address: EdgeAddress) -> bool:
        return address in self._edges

    def edge(self, address: EdgeAddress) -> Edge | None:
        return self._edges.get(address)

    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    def edge_count(self) -> int:
        return len(self._edges)

    def nodes(self, prefix: NodeAddress | None = None) -> Iterator[NodeAddress]:
        """Yield node addresses, optionally restricted to a prefix."""
        for address in self.graph.nodes:
            if prefix is None or address.has_prefix(prefix):
                yield address

    def edges(
        self,
        address_prefix: EdgeAddress | None = None,
        src_prefix: NodeAddress | None = None,
        dst_prefix: NodeAddress | None = None,
    ) -> Iterator[Edge]:
        """Yield edges matching all given prefixes."""
        for edge in self._edges.values():
            if address_prefix is not None and not edge.address.has_prefix(
                address_prefix
            ):
                continue
            if src_prefix is not None and not edge.src.has_prefix(src_prefix):
                continue
            if dst_prefix is not None and not edge.dst.has_prefix(dst_prefix):
                continue
            yield edge

    def neighbors(
        self,
        node: NodeAddress,
        direction: Direction = Direction.BOTH,
        node_prefix: NodeAddress | None = None,
        edge_prefix: EdgeAddress | None = None,
    ) -> Iterator[Neighbor]:
        """Yield ``Neighbor(node, edge)`` pairs incident to ``node``.

        A loop edge is reported once, even for ``Direction.BOTH``.
        """
        if not self.graph.has_node(node):
            raise GraphError(f"Node does not exist: {node}")

        candidates: list[tuple[NodeAddress, Edge]] = []
        if direction in (Direction.IN, Direction.BOTH):
            for src, _, key in self.graph.in_edges(node, keys=True):
                candidates.append((src, self._edges[key]))
        if direction in (Direction.OUT, Direction.BOTH):
            for _, dst, key in self.graph.out_edges(node, keys=True):
                edge = self._edges[key]
                if direction == Direction.BOTH and edge.src == edge.dst:
                    continue  # already reported as an in-edge
                candidates.append((dst, edge))

        for neighbor, edge in candidates:
            if node_prefix is not None and not neighbor.has_prefix(node_prefix):
                continue
            if edge_prefix is not None and not edge.address.has_prefix(edge_prefix):
                continue
            yield Neighbor(node=neighbor, edge=edge)

    def get_stats(self) -> NamespaceStats:
        """Counts of nodes and edges grouped by top-level address component."""
        node_namespaces = Counter(_top_level(node.parts) for node in self.nodes())
        edge_namespaces = Counter(_top_level(edge.address.parts) for edge in self.edges())
        return NamespaceStats(
            nodes=self.node_count(),
            edges=self.edge_count(),
            node_namespaces=dict(node_namespaces),
            edge_namespaces=dict(edge_namespaces),
        )

    # Whole-graph operations

    def copy(self) -> "AddressableGraph":
        result = AddressableGraph(check_invariants=self.check_invariants)
        for node in self.nodes():
            result.add_node(node)
        for edge in self.edges():
            result.add_edge(edge)
        return result

    @classmethod
    def merge(cls, graphs: Iterable["AddressableGraph"]) -> "AddressableGraph":
        """Union of several graphs; conflicting edge addresses are an error."""
        result = cls()
        graphs = list(graphs)
        for graph in graphs:
            for node in graph.nodes():
                result.add_node(node)
        for graph in graphs:
            for edge in graph.edges():
                result.add_edge(edge)
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressableGraph):
            return NotImplemented
        return (
            set(self.graph.nodes) == set(other.graph.nodes)
            and self._edges == other._edges
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"AddressableGraph(nodes={self.node_count()}, edges={self.edge_count()})"
        )

    # Consistency

    def validate(self) -> None:
        """Check the address index against the multigraph.

        Raises:
            GraphError: on the first inconsistency found.
        """
        if self.graph.number_of_edges() != len(self._edges):
            raise GraphError(
                f"Edge index holds {len(self._edges)} edges but the multigraph "
                f"holds {self.graph.number_of_edges()}"
            )
        for address, edge in self._edges.items():
            if edge.address != address:
                raise GraphError(f"Edge {edge} indexed under {address}")
            for endpoint in (edge.src, edge.dst):
                if not self.graph.has_node(endpoint):
                    raise GraphError(f"Edge {address} has missing endpoint {endpoint}")
            if not self.graph.has_edge(edge.src, edge.dst, key=address):
                raise GraphError(f"Edge {address} missing from the multigraph")
            stored = self.graph.edges[edge.src, edge.dst, address].get("edge")
            if stored != edge:
                raise GraphError(f"Edge {address} stored as {stored}, indexed as {edge}")

    def _maybe_validate(self) -> None:
        if self.check_invariants:
            self.validate()
