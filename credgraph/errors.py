"""Exception hierarchy for graph construction and attribution."""


class CredGraphError(Exception):
    """Base class for all credgraph errors."""


class GraphError(CredGraphError):
    """Structural misuse of an addressable graph."""


class AddressConflict(GraphError):
    """An edge address is already bound to different endpoints."""


class MissingEndpoint(GraphError):
    """An edge references a node that is not in the graph."""


class EmptyGraph(CredGraphError):
    """A graph without nodes has no stationary distribution."""


class UnweightableEdge(CredGraphError):
    """An edge evaluator produced a negative or non-finite weight."""


class InvariantViolation(CredGraphError):
    """Internal consistency check failed; indicates a defect, not bad input."""
