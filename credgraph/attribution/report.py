"""Plain-text and JSON views of a cred decomposition."""

import math
from typing import Any

from ..graph.address import NodeAddress
from .decomposition import NodeDecomposition, PagerankNodeDecomposition, ScoredContribution
from .graph_to_markov_chain import InEdge, OutEdge, SyntheticLoop, contributor_kind

# Shift applied to log scores so typical values print as small positives.
_LOG_SCORE_OFFSET = 10.0


def log_score(score: float) -> float:
    if score <= 0:
        return -math.inf
    return math.log(score) + _LOG_SCORE_OFFSET


def contribution_verb(scored: ScoredContribution) -> str:
    contributor = scored.contribution.contributor
    if isinstance(contributor, InEdge):
        return f"<- {contributor.edge.address}"
    if isinstance(contributor, OutEdge):
        return f"-> {contributor.edge.address}"
    if isinstance(contributor, SyntheticLoop):
        return "[synthetic loop]"
    raise TypeError(f"Unknown contributor: {contributor!r}")


def sorted_nodes(
    decomposition: PagerankNodeDecomposition, prefix: NodeAddress | None = None
) -> list[tuple[NodeAddress, NodeDecomposition]]:
    """Nodes by descending score, ties broken by address."""
    rows = [
        (node, entry)
        for node, entry in decomposition.items()
        if prefix is None or node.has_prefix(prefix)
    ]
    return sorted(rows, key=lambda row: (-row[1].score, row[0]))


def _format_contribution(scored: ScoredContribution, node_score: float) -> str:
    share = scored.contribution_score / node_score if node_score > 0 else 0.0
    return (
        f"    {log_score(scored.contribution_score):7.2f}  {share:6.1%}  "
        f"{contribution_verb(scored)}  from {scored.source}"
    )


def render_decomposition(
    decomposition: PagerankNodeDecomposition,
    *,
    prefix: NodeAddress | None = None,
    limit: int = 25,
    contributions: int = 3,
) -> str:
    """Render the top nodes and, under each, its largest contributions."""
    rows = sorted_nodes(decomposition, prefix)
    if not rows:
        return "(none)"

    lines = [f"{'log(score)':>10}  {'score':>10}  node"]
    for node, entry in rows[: max(0, limit)]:
        lines.append(f"{log_score(entry.score):10.2f}  {entry.score:10.6f}  {node}")
        for scored in entry.scored_contributions[: max(0, contributions)]:
            lines.append(_format_contribution(scored, entry.score))

    hidden = len(rows) - max(0, limit)
    if hidden > 0:
        lines.append(f"...(truncated {hidden})")
    return "\n".join(lines)


def _contribution_to_json(scored: ScoredContribution) -> dict[str, Any]:
    contributor = scored.contribution.contributor
    payload: dict[str, Any] = {"type": contributor_kind(contributor)}
    if isinstance(contributor, (InEdge, OutEdge)):
        payload["edge"] = contributor.edge.address.to_parts()
    return {
        "contributor": payload,
        "weight": scored.contribution.weight,
        "source": scored.source.to_parts(),
        "source_score": scored.source_score,
        "contribution_score": scored.contribution_score,
    }


def decomposition_to_json(
    decomposition: PagerankNodeDecomposition,
    *,
    prefix: NodeAddress | None = None,
) -> list[dict[str, Any]]:
    return [
        {
            "node": node.to_parts(),
            "score": entry.score,
            "scored_contributions": [
                _contribution_to_json(scored) for scored in entry.scored_contributions
            ],
        }
        for node, entry in sorted_nodes(decomposition, prefix)
    ]
