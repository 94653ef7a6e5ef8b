"""Cred attribution: PageRank with per-node explanations."""

from .config import DEFAULT_PAGERANK_OPTIONS, PagerankOptions
from .decomposition import NodeDecomposition, PagerankNodeDecomposition, ScoredContribution
from .pagerank import pagerank
from .weights import EdgeEvaluator, EdgeWeight, NodeEvaluator

__all__ = [
    "DEFAULT_PAGERANK_OPTIONS",
    "EdgeEvaluator",
    "EdgeWeight",
    "NodeDecomposition",
    "NodeEvaluator",
    "PagerankNodeDecomposition",
    "PagerankOptions",
    "ScoredContribution",
    "pagerank",
]
