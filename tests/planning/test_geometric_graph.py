import math
import numpy as np
import pytest

from kinolab.types import State
from kinolab.planning.config import AITStarKinConfig, ConnectionStrategy
from kinolab.planning.costs import DistanceCost
from kinolab.planning.graphs import Graph, GeometricGraphExpander, unit_ball_measure
from kinolab.planning.nearest_neighbors import NearestNeighborsIndex
from kinolab.planning.space import StateSpace, StateSpaceBounds


def _make_expander(strategy=ConnectionStrategy.K_NEAREST, **overrides):
    space = StateSpace(StateSpaceBounds(-20.0, 20.0, -20.0, 20.0))
    config = AITStarKinConfig(connection_strategy=strategy, **overrides)
    graph = Graph(directed=False)
    nn = NearestNeighborsIndex(space)
    for state in (State(0.0, 0.0, 0.0), State(10.0, 0.0, 0.0)):
        nn.insert(graph[graph.add_vertex(state)])
    return GeometricGraphExpander(graph, nn, space, DistanceCost(), config), graph, space


def _grid_samples(step=1.0):
    return [State(float(x), float(y), 0.0) for x in np.arange(0.5, 10.0, step) for y in (-1.0, 0.0, 1.0)]


def test_unit_ball_measure():
    assert unit_ball_measure(2) == pytest.approx(math.pi)
    assert unit_ball_measure(3) == pytest.approx(4.0 / 3.0 * math.pi)


def test_connection_radius_shrinks_with_samples():
    expander, _, space = _make_expander()
    r_small = expander.compute_connection_radius(100, space.measure())
    r_large = expander.compute_connection_radius(10000, space.measure())
    assert r_large < r_small


def test_connection_radius_is_capped():
    expander, _, space = _make_expander(radius=0.5)
    assert expander.compute_connection_radius(100, space.measure()) == 0.5


def test_number_of_neighbors_is_capped():
    expander, _, _ = _make_expander(max_neighbors=4)
    assert expander.compute_number_of_neighbors(10) <= 4
    assert expander.compute_number_of_neighbors(10 ** 6) == 4


@pytest.mark.parametrize("strategy", list(ConnectionStrategy))
def test_edges_respect_max_distance_and_use_objective(strategy):
    expander, graph, space = _make_expander(strategy, max_dist_between_vertices=1.5)
    samples = _grid_samples()
    new_ids = expander.expand(samples, len(samples) + 2, space.measure())
    assert len(new_ids) == len(samples)
    assert graph.num_edges > 0
    for u, v, w in graph.edges():
        assert space.distance(graph[u].state, graph[v].state) <= 1.5
        assert w == pytest.approx(DistanceCost().calculate(graph[u].state, graph[v].state))


def test_near_duplicates_are_skipped():
    expander, graph, space = _make_expander(min_dist_between_vertices=0.2)
    new_ids = expander.expand([State(0.05, 0.0, 0.0), State(5.0, 5.0, 0.0), State(5.1, 5.0, 0.0)],
                              10, space.measure())
    assert len(new_ids) == 1
    assert expander.num_skipped == 2
    assert graph.num_vertices == 3


def test_goal_connectivity_is_refreshed():
    expander, graph, space = _make_expander()
    expander.expand(_grid_samples(), 40, space.measure())
    before = len(dict(graph.neighbors(1)))
    # 目标附近新增的顶点在下一次补边时被连上
    expander.graph.add_vertex(State(9.8, 0.2, 0.0))
    expander.nn.insert(graph[graph.num_vertices - 1])
    expander.ensure_goal_vertex_connectivity(1, 41, space.measure())
    assert graph.has_edge(1, graph.num_vertices - 1)
    assert len(dict(graph.neighbors(1))) >= before


def test_new_vertex_degree_respects_neighbor_cap():
    expander, graph, space = _make_expander(max_neighbors=3, max_dist_between_vertices=100.0)
    rng = np.random.default_rng(7)
    samples = [space.sample_uniform(rng) for _ in range(30)]
    expander.expand(samples, 32, space.measure())

    k = expander.compute_number_of_neighbors(33)
    assert k == 3
    (vid,) = expander.expand([State(1.0, 1.0, 0.0)], 33, space.measure())
    assert len(dict(graph.neighbors(vid))) == k


def test_goal_reconnection_skips_itself_and_respects_cap():
    expander, graph, space = _make_expander(max_neighbors=2, max_dist_between_vertices=100.0)
    expander.expand(_grid_samples(), 40, space.measure())
    added = expander.ensure_goal_vertex_connectivity(1, 40, space.measure())
    assert added <= 2
    assert not graph.has_edge(1, 1)
