"""Quorum set configurators that derive quorum sets from a graph of node links."""

from __future__ import annotations

import logging

from .fbas import Fbas, QuorumSet
from .graph import Graph
from .qsc import calculate_threshold
from .simulation import ChangeEffect, QuorumSetConfigurator

logger = logging.getLogger(__name__)

_GRAPH_TOO_SMALL = "Graph too small for this FBAS!"


def _outlinks_of(graph: Graph, node_id: int) -> list[int]:
    if not 0 <= node_id < len(graph.outlinks):
        raise ValueError(_GRAPH_TOO_SMALL)
    return list(graph.outlinks[node_id])


def _with_self(validators: list[int], node_id: int) -> list[int]:
    # Nodes are put into their own quorum sets: nodes in the Stellar network often
    # do it, and it suits the threshold calculation (for a global n = 3f+1).
    if node_id not in validators:
        validators.append(node_id)
    return sorted(validators)


class AllNeighborsQsc(QuorumSetConfigurator):
    """Non-nested quorum sets containing all immediate graph neighbors."""

    def __init__(self, graph: Graph, relative_threshold: float | None = None) -> None:
        self.graph = graph
        self.connected_nodes = graph.get_connected_nodes()
        self.relative_threshold = relative_threshold

    @classmethod
    def new_67p(cls, graph: Graph) -> AllNeighborsQsc:
        return cls(graph, None)

    @classmethod
    def new_relative(cls, graph: Graph, relative_threshold: float) -> AllNeighborsQsc:
        return cls(graph, relative_threshold)

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        node = fbas.nodes[node_id]
        if node_id not in self.connected_nodes or node.quorum_set != QuorumSet.new_empty():
            return ChangeEffect.NO_CHANGE
        validators = _with_self(_outlinks_of(self.graph, node_id), node_id)
        threshold = calculate_threshold(len(validators), self.relative_threshold)
        node.quorum_set = QuorumSet(validators=validators, threshold=threshold)
        return ChangeEffect.CHANGE


class GlobalRankQsc(QuorumSetConfigurator):
    """Quorum sets made of all nodes with above-average global rank."""

    def __init__(self, graph: Graph, relative_threshold: float | None = None) -> None:
        self.graph = graph
        self.top_tier_nodes = self._top_tier_nodes(graph)
        self.relative_threshold = relative_threshold

    @classmethod
    def new_67p(cls, graph: Graph) -> GlobalRankQsc:
        return cls(graph, None)

    @classmethod
    def new_relative(cls, graph: Graph, relative_threshold: float) -> GlobalRankQsc:
        return cls(graph, relative_threshold)

    @staticmethod
    def _top_tier_nodes(graph: Graph) -> list[int]:
        """All nodes with above-average rank score."""
        rank_scores = graph.get_rank_scores()
        if not rank_scores:
            return []
        average = sum(rank_scores) / len(rank_scores)
        logger.debug("rank scores: %r; average rank score: %r", rank_scores, average)
        return [i for i, score in enumerate(rank_scores) if score > average]

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        node = fbas.nodes[node_id]
        if node.quorum_set != QuorumSet.new_empty() or not _outlinks_of(self.graph, node_id):
            return ChangeEffect.NO_CHANGE
        validators = list(self.top_tier_nodes)
        threshold = calculate_threshold(len(validators), self.relative_threshold)
        node.quorum_set = QuorumSet(validators=validators, threshold=threshold)
        return ChangeEffect.CHANGE


class HigherTierNeighborsQsc(QuorumSetConfigurator):
    """Uses neighbors perceived as higher-tier, or same-tier ones if there are none."""

    def __init__(
        self,
        graph: Graph,
        relative_threshold: float | None = None,
        symmetry_enforcing: bool = False,
    ) -> None:
        self.graph = graph
        self.rank_scores = graph.get_rank_scores()
        logger.debug(
            "Non-zero rank scores: %r",
            [(i, s) for i, s in enumerate(self.rank_scores) if s > 0.0],
        )
        self.connected_nodes = graph.get_connected_nodes()
        self.relative_threshold = relative_threshold
        self.symmetry_enforcing = symmetry_enforcing

    @classmethod
    def new_67p(cls, graph: Graph, symmetry_enforcing: bool) -> HigherTierNeighborsQsc:
        return cls(graph, None, symmetry_enforcing)

    @classmethod
    def new_relative(
        cls, graph: Graph, relative_threshold: float, symmetry_enforcing: bool
    ) -> HigherTierNeighborsQsc:
        return cls(graph, relative_threshold, symmetry_enforcing)

    def neighbors_by_tierness(self, node_id: int) -> tuple[list[int], list[int], list[int]]:
        """Split the neighbors of ``node_id`` into higher, same and lower tier ones."""
        neighbors = _outlinks_of(self.graph, node_id)
        own_score = self.rank_scores[node_id]
        higher, same, lower = [], [], []
        for i in neighbors:
            score = self.rank_scores[i]
            if score >= 2.0 * own_score:
                higher.append(i)
            elif own_score >= 2.0 * score:
                lower.append(i)
            else:
                same.append(i)
        return higher, same, lower

    def _symmetric(self, validators: list[int], node_id: int, fbas: Fbas) -> list[int]:
        corrected: set[int] = set()
        for i in validators:
            corrected.add(i)
            if 0 <= i < len(fbas.nodes):
                other_validators = fbas.nodes[i].quorum_set.contained_nodes()
                if node_id in other_validators:
                    corrected |= other_validators
        return sorted(corrected)

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        if node_id not in self.connected_nodes:
            return ChangeEffect.NO_CHANGE
        higher, same, _ = self.neighbors_by_tierness(node_id)
        validators = higher if higher else same
        if self.symmetry_enforcing:
            validators = self._symmetric(validators, node_id, fbas)
        validators = _with_self(validators, node_id)
        threshold = calculate_threshold(len(validators), self.relative_threshold)
        candidate = QuorumSet(validators=validators, threshold=threshold)

        node = fbas.nodes[node_id]
        if node.quorum_set == candidate:
            return ChangeEffect.NO_CHANGE
        node.quorum_set = candidate
        return ChangeEffect.CHANGE