"""Exceptions raised by the ranking pipeline."""


class MarkovRankError(ValueError):
    """Base class for pipeline errors."""


class InvalidConfiguration(MarkovRankError):
    """An option value is outside its valid range."""


class UnknownNodeReference(MarkovRankError):
    """An edge endpoint is missing from the node collection."""

    def __init__(self, edge_address: tuple, node: tuple):
        self.edge_address = edge_address
        self.node = node
        super().__init__(f"Edge {edge_address!r} references unknown node {node!r}")


class InvalidEdgeWeight(MarkovRankError):
    """An edge weight is negative or not finite."""


class DegenerateNormalization(MarkovRankError):
    """Scores cannot be normalized because the selected nodes have no mass."""


class ComputationCancelled(MarkovRankError):
    """The stationary distribution search was cancelled by its caller."""
