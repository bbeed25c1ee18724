from fbas_toolkit.fbas import Fbas, QuorumSet
from fbas_toolkit.qsc import DummyQsc, SuperSafeQsc
from fbas_toolkit.simulation import (
    AddNode,
    ChangeEffect,
    DebugMonitor,
    DummyMonitor,
    FinishGlobalReevaluation,
    QuorumSetChange,
    Simulator,
    StartGlobalReevaluation,
    StartGlobalReevaluationRound,
)


def test_change_effect_had_change():
    assert ChangeEffect.CHANGE.had_change() is True
    assert ChangeEffect.NO_CHANGE.had_change() is False


def test_growth_with_interruptions():
    simulator = Simulator(Fbas(), DummyQsc(), DummyMonitor())
    simulator.simulate_growth(3)
    assert simulator.fbas == Fbas.new_generic_unconfigured(3)
    simulator.simulate_growth(5)
    assert simulator.finalize() == Fbas.new_generic_unconfigured(8)


def test_monitoring_works():
    monitor = DebugMonitor()
    simulator = Simulator(Fbas(), DummyQsc(), monitor)
    assert monitor.events() == []
    simulator.simulate_growth(1)
    assert monitor.events() == [
        AddNode(0),
        StartGlobalReevaluation(),
        StartGlobalReevaluationRound(),
        QuorumSetChange(0, ChangeEffect.NO_CHANGE),
        FinishGlobalReevaluation(1),
    ]


def test_global_reevaluation_round_can_make_all_nodes_super_safe():
    simulator = Simulator(Fbas.new_generic_unconfigured(8), SuperSafeQsc(), DummyMonitor())
    effect = simulator.simulate_global_reevaluation_round(list(range(8)))
    expected = QuorumSet(validators=list(range(8)), threshold=8)
    assert effect is ChangeEffect.CHANGE
    assert [node.quorum_set for node in simulator.fbas.nodes] == [expected] * 8


def test_global_reevaluation_stops_once_stable():
    simulator = Simulator(Fbas.new_generic_unconfigured(8), SuperSafeQsc(), DummyMonitor())
    assert simulator.simulate_global_reevaluation(1000000) == 2


def test_global_reevaluation_respects_round_limit():
    monitor = DebugMonitor()
    simulator = Simulator(Fbas.new_generic_unconfigured(4), SuperSafeQsc(), monitor)
    assert simulator.simulate_global_reevaluation(1) == 1
    assert monitor.events()[-1] == FinishGlobalReevaluation(1)


def test_global_reevaluation_visits_in_random_order():
    monitor = DebugMonitor()
    simulator = Simulator(Fbas.new_generic_unconfigured(128), SuperSafeQsc(), monitor)
    simulator.simulate_global_reevaluation(2)

    orderings: list[list[int]] = []
    for event in monitor.events():
        if isinstance(event, StartGlobalReevaluationRound):
            orderings.append([])
        elif isinstance(event, QuorumSetChange):
            orderings[-1].append(event.node_id)

    assert len(orderings) == 2
    assert sorted(orderings[0]) == list(range(128))
    assert sorted(orderings[1]) == list(range(128))
    assert orderings[0] != orderings[1]