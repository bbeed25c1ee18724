"""Turning node-ID-based analysis results into public keys and grouping names."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from .fbas import Fbas, QuorumSet
from .groupings import Groupings


@dataclass
class PrettyQuorumSet:
    """A quorum set whose validators are public keys or grouping names."""

    threshold: int = 0
    validators: list[str] = field(default_factory=list)
    inner_quorum_sets: list[PrettyQuorumSet] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Serializable form; empty inner quorum sets are left out."""
        result: dict[str, Any] = {
            "threshold": self.threshold,
            "validators": list(self.validators),
        }
        if self.inner_quorum_sets:
            result["innerQuorumSets"] = [q.to_dict() for q in self.inner_quorum_sets]
        return result


def _node(fbas: Fbas, node_id: int):
    if not 0 <= node_id < len(fbas.nodes):
        raise IndexError(f"node ID {node_id} is not in the FBAS")
    return fbas.nodes[node_id]


def to_public_keys(nodes: Iterable[int], fbas: Fbas) -> list[str]:
    """Resolve the public keys for a collection of node IDs, keeping their order."""
    return [_node(fbas, node_id).public_key for node_id in nodes]


def to_grouping_names(nodes: Iterable[int], fbas: Fbas, groupings: Groupings) -> list[str]:
    """Resolve grouping names for node IDs, falling back to public keys."""
    names = []
    for node_id in nodes:
        grouping = groupings.get_by_member(node_id)
        names.append(grouping.name if grouping is not None else _node(fbas, node_id).public_key)
    return names


def _pretty_names(nodes: Iterable[int], fbas: Fbas, groupings: Groupings | None) -> list[str]:
    if groupings is None:
        return to_public_keys(nodes, fbas)
    return to_grouping_names(nodes, fbas, groupings)


def pretty_quorum_set(
    quorum_set: QuorumSet, fbas: Fbas, groupings: Groupings | None = None
) -> PrettyQuorumSet:
    """Convert a quorum set so that validators are named instead of numbered."""
    return PrettyQuorumSet(
        threshold=quorum_set.threshold,
        validators=_pretty_names(quorum_set.validators, fbas, groupings),
        inner_quorum_sets=[
            pretty_quorum_set(inner, fbas, groupings) for inner in quorum_set.inner_quorum_sets
        ],
    )


def pretty_node_sets(
    node_sets: Iterable[Iterable[int]], fbas: Fbas, groupings: Groupings | None = None
) -> list[list[str]]:
    """Name the members of each node set, in ascending node-ID order within a set."""
    return [_pretty_names(sorted(node_set), fbas, groupings) for node_set in node_sets]