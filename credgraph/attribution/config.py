"""Configuration for cred attribution."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PagerankOptions:
    """Constants controlling chain construction and power iteration."""

    self_loop_weight: float = 1e-3
    convergence_threshold: float = 1e-7
    max_iterations: int = 255
    verbose: bool = False


DEFAULT_PAGERANK_OPTIONS = PagerankOptions()
