import pytest

from fbas_toolkit.fbas import Fbas, QuorumSet
from fbas_toolkit.graph import Graph
from fbas_toolkit.graph_qsc import AllNeighborsQsc, GlobalRankQsc, HigherTierNeighborsQsc
from fbas_toolkit.qsc import IdealQsc, SuperSafeQsc
from fbas_toolkit.simulation import ChangeEffect, DummyMonitor, Simulator


def simulate(qsc, n):
    simulator = Simulator(Fbas(), qsc, DummyMonitor())
    simulator.simulate_growth(n)
    return simulator.finalize()


def undirected_tiers_graph():
    graph = Graph.new_full_mesh(4)
    graph.outlinks.append([3, 5])
    graph.outlinks.append([3, 4])
    graph.outlinks.append([3, 4, 6])
    graph.outlinks.append([5])
    graph.outlinks[3].append(4)
    graph.outlinks[3].append(5)
    return graph


def test_all_neighbors_qsc_can_be_like_super_safe():
    n = 10
    actual = simulate(AllNeighborsQsc.new_relative(Graph.new_full_mesh(n), 1.0), n)
    expected = simulate(SuperSafeQsc(), n)
    assert actual == expected


def test_all_neighbors_qsc_can_be_like_ideal_safe():
    n = 10
    actual = simulate(AllNeighborsQsc.new_67p(Graph.new_full_mesh(n)), n)
    expected = simulate(IdealQsc(), n)
    assert actual == expected


def test_all_neighbors_qsc_rejects_too_small_graph():
    graph = Graph([[5], []])
    qsc = AllNeighborsQsc.new_67p(graph)
    fbas = Fbas.new_generic_unconfigured(6)
    with pytest.raises(ValueError, match="Graph too small"):
        qsc.configure(5, fbas)


def test_all_neighbors_qsc_leaves_configured_nodes_alone():
    qsc = AllNeighborsQsc.new_67p(Graph.new_full_mesh(3))
    fbas = Fbas.new_generic_unconfigured(3)
    assert qsc.configure(0, fbas) is ChangeEffect.CHANGE
    assert qsc.configure(0, fbas) is ChangeEffect.NO_CHANGE
    assert fbas.nodes[0].quorum_set == QuorumSet(validators=[0, 1, 2], threshold=3)


def test_global_rank_qsc():
    graph = Graph.new_tiered_full_mesh([2, 3, 1])
    n = graph.number_of_nodes()
    qsc = GlobalRankQsc.new_67p(graph)

    expected = Fbas()
    for _ in range(n):
        expected.add_generic_node(QuorumSet(validators=[0, 1], threshold=2))
    actual = simulate(qsc, n)
    assert actual == expected


def test_neighbors_by_tierness_middle_tier_directed_links():
    qsc = HigherTierNeighborsQsc.new_67p(Graph.new_tiered_full_mesh([3, 3, 3]), False)
    assert qsc.neighbors_by_tierness(3) == ([0, 1, 2], [4, 5], [])


def test_neighbors_by_tierness_top_tier_directed_links():
    qsc = HigherTierNeighborsQsc.new_67p(Graph.new_tiered_full_mesh([3, 3, 3]), False)
    assert qsc.neighbors_by_tierness(1) == ([], [0, 2], [])


def test_neighbors_by_tierness_middle_tier_undirected_links():
    qsc = HigherTierNeighborsQsc.new_67p(undirected_tiers_graph(), False)
    assert qsc.neighbors_by_tierness(4) == ([3], [5], [])


def test_neighbors_by_tierness_top_tier_undirected_links():
    qsc = HigherTierNeighborsQsc.new_67p(undirected_tiers_graph(), False)
    assert qsc.neighbors_by_tierness(3) == ([], [0, 1, 2], [4, 5])


def test_higher_tier_qsc_can_be_like_ideal_safe():
    n = 10
    qsc = HigherTierNeighborsQsc.new_67p(Graph.new_tiered_full_mesh([n]), False)
    actual = simulate(qsc, n)
    expected = simulate(IdealQsc(), n)
    assert actual == expected


def test_higher_tier_qsc_top_tier_only_trusts_itself():
    tier_sizes = [3, 10, 20]
    qsc = HigherTierNeighborsQsc.new_67p(Graph.new_tiered_full_mesh(tier_sizes), False)
    fbas = simulate(qsc, sum(tier_sizes))
    top_tier_quorum_set = QuorumSet(validators=[0, 1, 2], threshold=3)
    assert [fbas.nodes[i].quorum_set for i in range(3)] == [top_tier_quorum_set] * 3


def test_higher_tier_qsc_can_make_symmetric_top_tier():
    tier_sizes = [4, 10, 20]
    graph = Graph.new_tiered_full_mesh(tier_sizes)
    graph.outlinks[0] = [1]
    qsc = HigherTierNeighborsQsc.new_67p(graph, True)
    fbas = simulate(qsc, sum(tier_sizes))
    expected = QuorumSet(validators=[0, 1, 2, 3], threshold=3)
    assert [fbas.nodes[i].quorum_set for i in range(4)] == [expected] * 4


def test_higher_tier_qsc_ignores_unconnected_nodes():
    graph = Graph([[1], [0], []])
    qsc = HigherTierNeighborsQsc.new_67p(graph, False)
    fbas = Fbas.new_generic_unconfigured(3)
    assert qsc.configure(2, fbas) is ChangeEffect.NO_CHANGE
    assert fbas.nodes[2].quorum_set == QuorumSet.new_empty()


def test_higher_tier_qsc_relative_threshold():
    qsc = HigherTierNeighborsQsc.new_relative(Graph.new_full_mesh(4), 0.5, False)
    fbas = Fbas.new_generic_unconfigured(4)
    assert qsc.configure(0, fbas) is ChangeEffect.CHANGE
    assert fbas.nodes[0].quorum_set == QuorumSet(validators=[0, 1, 2, 3], threshold=2)