"""Simulating how an FBAS grows and how nodes (re)configure their quorum sets."""

from __future__ import annotations

import enum
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence, Union

from .fbas import Fbas, QuorumSet

logger = logging.getLogger(__name__)


class ChangeEffect(enum.Enum):
    """Whether a reconfiguration changed a quorum set."""

    CHANGE = "change"
    NO_CHANGE = "no_change"

    def had_change(self) -> bool:
        return self is ChangeEffect.CHANGE


@dataclass(frozen=True)
class AddNode:
    node_id: int


@dataclass(frozen=True)
class StartGlobalReevaluation:
    pass


@dataclass(frozen=True)
class StartGlobalReevaluationRound:
    pass


@dataclass(frozen=True)
class FinishGlobalReevaluation:
    number_of_rounds: int


@dataclass(frozen=True)
class QuorumSetChange:
    node_id: int
    change: ChangeEffect


Event = Union[
    AddNode,
    StartGlobalReevaluation,
    StartGlobalReevaluationRound,
    FinishGlobalReevaluation,
    QuorumSetChange,
]


class QuorumSetConfigurator(ABC):
    """Strategy by which a node chooses its quorum set."""

    @abstractmethod
    def configure(self, node_id: int, fbas: Fbas) -> ChangeEffect:
        """(Re)configure the quorum set of ``node_id`` in place and report the effect."""


class SimulationMonitor(ABC):
    """Receives the events happening during a simulation."""

    @abstractmethod
    def register_event(self, event: Event) -> None:
        """Take note of ``event``."""


class DummyMonitor(SimulationMonitor):
    """Ignores all events."""

    def register_event(self, event: Event) -> None:
        pass


class DebugMonitor(SimulationMonitor):
    """Records all events for later inspection."""

    def __init__(self) -> None:
        self._events: list[Event] = []

    def register_event(self, event: Event) -> None:
        logger.debug("Event: %r", event)
        self._events.append(event)

    def events(self) -> list[Event]:
        """A copy of the events recorded so far, oldest first."""
        return list(self._events)


@dataclass
class Simulator:
    """Grows an FBAS, letting nodes configure their quorum sets using ``qsc``."""

    fbas: Fbas
    qsc: QuorumSetConfigurator
    monitor: SimulationMonitor = field(default_factory=DummyMonitor)

    def finalize(self) -> Fbas:
        """The simulated FBAS."""
        return self.fbas

    def simulate_growth(self, nodes_to_spawn: int) -> None:
        """Add nodes one by one, letting all nodes reevaluate after each addition."""
        for _ in range(nodes_to_spawn):
            node_id = self.fbas.add_generic_node(QuorumSet.new_empty())
            self.qsc.configure(node_id, self.fbas)
            self.monitor.register_event(AddNode(node_id))
            self.simulate_global_reevaluation(self.fbas.number_of_nodes())

    def simulate_global_reevaluation(self, maximum_number_of_rounds: int) -> int:
        """Let all nodes reevaluate until nothing changes or the round limit is hit.

        Nodes are visited in a fresh random order each round. Returns the
        number of rounds made.
        """
        order = list(range(self.fbas.number_of_nodes()))
        self.monitor.register_event(StartGlobalReevaluation())
        stable = False
        rounds = 0
        while not stable and rounds < maximum_number_of_rounds:
            random.shuffle(order)
            stable = not self.simulate_global_reevaluation_round(order).had_change()
            rounds += 1
        self.monitor.register_event(FinishGlobalReevaluation(rounds))
        return rounds

    def simulate_global_reevaluation_round(self, order: Sequence[int]) -> ChangeEffect:
        """Let each node in ``order`` reevaluate its quorum set once."""
        self.monitor.register_event(StartGlobalReevaluationRound())
        any_change = ChangeEffect.NO_CHANGE
        for node_id in order:
            change = self.qsc.configure(node_id, self.fbas)
            if any_change is ChangeEffect.NO_CHANGE:
                any_change = change
            self.monitor.register_event(QuorumSetChange(node_id, change))
        return any_change