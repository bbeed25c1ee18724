"""Simple quorum set configurators and threshold helpers."""

from __future__ import annotations

import math
import random
from typing import Sequence

from .fbas import Fbas, QuorumSet
from .simulation import ChangeEffect, QuorumSetConfigurator


def calculate_67p_threshold(n: int) -> int:
    """t = ceil((2n+1)/3), i.e. tolerating f failures where n >= 3f+1."""
    if n <= 0:
        return 0
    return n - (n - 1) // 3


def calculate_x_threshold(n: int, x: float) -> int:
    """t = max(1, ceil(n*x))."""
    return max(1, math.ceil(x * n))


def calculate_threshold(n: int, relative_threshold: float | None = None) -> int:
    """Relative threshold if given, else a 67% threshold."""
    if relative_threshold is None:
        return calculate_67p_threshold(n)
    return calculate_x_threshold(n, relative_threshold)


def _replace_if_different(node_id: int, fbas: Fbas, candidate: QuorumSet) -> ChangeEffect:
    node = fbas.nodes[node_id]
    if node.quorum_set == candidate:
        return ChangeEffect.NO_CHANGE
    node.quorum_set = candidate
    return ChangeEffect.CHANGE


class DummyQsc(QuorumSetConfigurator):
    """Leaves quorum sets as they are (empty for new nodes)."""

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        return ChangeEffect.NO_CHANGE


class IdealQsc(QuorumSetConfigurator):
    """Quorum sets of all n nodes with a threshold tolerating f failures, n >= 3f+1."""

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        n = fbas.number_of_nodes()
        candidate = QuorumSet(validators=list(range(n)), threshold=calculate_67p_threshold(n))
        return _replace_if_different(node_id, fbas, candidate)


class SuperSafeQsc(QuorumSetConfigurator):
    """Quorum sets of all n nodes with threshold n."""

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        n = fbas.number_of_nodes()
        candidate = QuorumSet(validators=list(range(n)), threshold=n)
        return _replace_if_different(node_id, fbas, candidate)


class RandomQsc(QuorumSetConfigurator):
    """Fills quorum sets with randomly chosen nodes, optionally weighted per node."""

    def __init__(
        self,
        desired_quorum_set_size: int,
        desired_threshold: int | None = None,
        weights: Sequence[int] | None = None,
    ) -> None:
        self.desired_quorum_set_size = desired_quorum_set_size
        self.desired_threshold = desired_threshold
        self.weights = list(weights) if weights is not None else []

    @classmethod
    def new_simple(cls, desired_quorum_set_size: int) -> RandomQsc:
        return cls(desired_quorum_set_size)

    def _weight(self, node_id: int) -> int:
        return self.weights[node_id] if node_id < len(self.weights) else 1

    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        n = fbas.number_of_nodes()
        quorum_set = fbas.nodes[node_id].quorum_set

        # nodes are put into their own quorum sets, for comparability with other configurators
        if not quorum_set.validators:
            quorum_set.validators = [node_id]

        current_size = len(quorum_set.validators)
        if current_size >= self.desired_quorum_set_size:
            return ChangeEffect.NO_CHANGE

        target_size = min(self.desired_quorum_set_size, n)
        threshold = (
            self.desired_threshold
            if self.desired_threshold is not None
            else calculate_67p_threshold(target_size)
        )
        used = set(quorum_set.validators)
        available = [x for x in range(n) if x not in used]

        for _ in range(current_size, target_size):
            weights = [self._weight(x) for x in available]
            if not available or sum(weights) <= 0:
                raise ValueError("No candidate node with nonzero weight left to choose from.")
            chosen = random.choices(available, weights=weights)[0]
            available.remove(chosen)
            quorum_set.validators.append(chosen)
        quorum_set.threshold = threshold
        return ChangeEffect.CHANGE