"""Explain each node's score as a sum of scored contributions."""

from dataclasses import dataclass

from ..errors import InvariantViolation
from ..graph.address import NodeAddress
from .graph_to_markov_chain import (
    Contribution,
    ContributionTable,
    contributor_key,
    contributor_kind,
    contributor_source,
    total_out_weights,
)


@dataclass(frozen=True)
class ScoredContribution:
    contribution: Contribution
    source: NodeAddress
    source_score: float
    contribution_score: float


@dataclass(frozen=True)
class NodeDecomposition:
    score: float
    scored_contributions: tuple[ScoredContribution, ...]


PagerankNodeDecomposition = dict[NodeAddress, NodeDecomposition]


def _contribution_sort_key(scored: ScoredContribution) -> tuple[float, str, str]:
    contributor = scored.contribution.contributor
    return (
        -scored.contribution_score,
        contributor_key(contributor),
        contributor_kind(contributor),
    )


def _score_of(pi: dict[NodeAddress, float], node: NodeAddress, target: NodeAddress) -> float:
    try:
        return pi[node]
    except KeyError:
        raise InvariantViolation(
            f"No score for {node} (source of a contribution to {target})"
        ) from None


def decompose(
    pi: dict[NodeAddress, float], contributions: ContributionTable
) -> PagerankNodeDecomposition:
    """Score every contribution against the final distribution.

    A contribution's score is its source's score times the share of the
    source's outgoing raw weight it represents, so the scores of a node's
    contributions add up to the node's own score.
    """
    totals = total_out_weights(contributions)
    result: PagerankNodeDecomposition = {}

    for target, items in contributions.items():
        score = _score_of(pi, target, target)
        scored: list[ScoredContribution] = []
        for contribution in items:
            source = contributor_source(target, contribution.contributor)
            source_score = _score_of(pi, source, target)
            scored.append(
                ScoredContribution(
                    contribution=contribution,
                    source=source,
                    source_score=source_score,
                    contribution_score=source_score
                    * contribution.weight
                    / totals[source],
                )
            )
        result[target] = NodeDecomposition(
            score=score,
            scored_contributions=tuple(sorted(scored, key=_contribution_sort_key)),
        )

    return result
