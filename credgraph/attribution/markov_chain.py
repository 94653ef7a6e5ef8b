"""Sparse Markov chains and power iteration."""

import logging
from dataclasses import dataclass

import numpy as np

from ..errors import InvariantViolation

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SparseRow:
    """In-neighbors of one state and the probability of moving from each."""

    neighbor: np.ndarray
    weight: np.ndarray


# chain[t] lists every (s, p(s -> t)); columns sum to one.
SparseMarkovChain = tuple[SparseRow, ...]


@dataclass(frozen=True)
class StationaryDistribution:
    pi: np.ndarray
    iterations: int
    converged: bool
    delta: float


def uniform_distribution(n: int) -> np.ndarray:
    if n <= 0:
        raise ValueError(f"Distribution needs at least one state, got {n}")
    return np.full(n, 1.0 / n, dtype=np.float64)


def sparse_markov_chain_action(chain: SparseMarkovChain, pi: np.ndarray) -> np.ndarray:
    """One step of the chain: ``next[t] = sum_s p(s -> t) * pi[s]``."""
    result = np.empty(len(chain), dtype=np.float64)
    for target, row in enumerate(chain):
        result[target] = float(np.dot(row.weight, pi[row.neighbor]))
    return result


def validate_chain(chain: SparseMarkovChain, tolerance: float = 1e-9) -> None:
    """Check index bounds and that every source hands out exactly 1.

    Raises:
        InvariantViolation: naming the first offending state.
    """
    n = len(chain)
    outgoing = np.zeros(n, dtype=np.float64)
    for target, row in enumerate(chain):
        if len(row.neighbor) != len(row.weight):
            raise InvariantViolation(
                f"Row {target} has {len(row.neighbor)} neighbors "
                f"but {len(row.weight)} weights"
            )
        if len(row.neighbor) and (row.neighbor.min() < 0 or row.neighbor.max() >= n):
            raise InvariantViolation(f"Row {target} references a state outside 0..{n - 1}")
        if np.any(row.weight < 0):
            raise InvariantViolation(f"Row {target} has a negative probability")
        np.add.at(outgoing, row.neighbor, row.weight)
    for source, total in enumerate(outgoing):
        if abs(total - 1.0) > tolerance:
            raise InvariantViolation(
                f"State {source} hands out {total!r}, expected 1"
            )


def find_stationary_distribution(
    chain: SparseMarkovChain,
    *,
    convergence_threshold: float = 1e-7,
    max_iterations: int = 255,
    verbose: bool = False,
) -> StationaryDistribution:
    """Power-iterate from the uniform distribution.

    Stops once the L1 distance between successive distributions drops below
    ``convergence_threshold``, or after ``max_iterations`` steps. Running out
    of iterations is not an error; check ``converged`` on the result.
    """
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be >= 0, got {max_iterations}")
    if not convergence_threshold > 0:
        raise ValueError(
            f"convergence_threshold must be positive, got {convergence_threshold}"
        )

    pi = uniform_distribution(len(chain))
    delta = float("inf")
    iteration = 0
    while iteration < max_iterations:
        iteration += 1
        next_pi = sparse_markov_chain_action(chain, pi)
        delta = float(np.abs(next_pi - pi).sum())
        pi = next_pi
        if verbose:
            log.info(f"[{iteration}] delta = {delta:.3e}")
        if delta < convergence_threshold:
            log.debug(f"Converged after {iteration} iterations (delta={delta:.3e})")
            return StationaryDistribution(
                pi=pi, iterations=iteration, converged=True, delta=delta
            )

    if max_iterations > 0:
        level = logging.INFO if verbose else logging.DEBUG
        log.log(level, f"[{iteration}] did not converge (delta={delta:.3e})")
    return StationaryDistribution(
        pi=pi, iterations=iteration, converged=False, delta=delta
    )
