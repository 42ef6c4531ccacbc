import math
import numpy as np
import pytest

from kinolab.types import State
from kinolab.vehicles.point_mass import PointMassVehicle
from kinolab.vehicles.config import PointMassConfig
from kinolab.planning.config import AITStarKinConfig
from kinolab.planning.costs import DistanceCost
from kinolab.planning.graphs import ControlGraphExpander, DirectedControlSampler, Graph
from kinolab.planning.heuristics import ZeroHeuristic
from kinolab.planning.nearest_neighbors import NearestNeighborsIndex
from kinolab.planning.path import PathKind, SolutionPath
from kinolab.planning.search import SearchStatus, compute_shortest_path
from kinolab.planning.space import StateSpace, StateSpaceBounds


def _make_expander(start, goal, is_valid=lambda s: True, **overrides):
    space = StateSpace(StateSpaceBounds(-20.0, 20.0, -20.0, 20.0))
    vehicle = PointMassVehicle(PointMassConfig(max_velocity=2.0))
    params = dict(goal_bias=0.0, max_dist_between_vertices=3.0, min_dist_between_vertices=0.1,
                  goal_tolerance=0.05, propagation_step_size=0.1, max_control_duration=30)
    params.update(overrides)
    config = AITStarKinConfig(**params)

    graph = Graph(directed=True)
    nn = NearestNeighborsIndex(space)
    start_id = graph.add_vertex(start)
    goal_id = graph.add_vertex(goal)
    nn.insert(graph[start_id])

    sampler = DirectedControlSampler(vehicle, is_valid, config.propagation_step_size,
                                     config.min_control_duration, config.max_control_duration,
                                     config.k_number_of_controls)
    expander = ControlGraphExpander(graph, nn, space, DistanceCost(), sampler, config,
                                    goal_id=goal_id, goal_tolerance=config.goal_tolerance)
    return expander, graph, vehicle


def test_candidates_start_with_analytic_proposal():
    vehicle = PointMassVehicle(PointMassConfig(max_velocity=2.0))
    sampler = DirectedControlSampler(vehicle, lambda s: True, 0.1, 1, 30, k_number_of_controls=3)
    candidates = sampler.candidates(State(0.0, 0.0, 0.0), State(2.0, 0.0, 0.0), np.random.default_rng(0))
    assert len(candidates) == 4
    assert candidates[0] == vehicle.steer_towards(State(0.0, 0.0, 0.0), State(2.0, 0.0, 0.0), 0.1, 1, 30)


def test_extension_lands_on_sample_and_stores_control():
    expander, graph, vehicle = _make_expander(State(0.0, 0.0, 0.0), State(10.0, 0.0, 0.0))
    new_ids = expander.expand([State(2.0, 1.0, 0.0)], np.random.default_rng(1))
    assert new_ids == [2]
    vertex = graph[2]
    assert math.hypot(vertex.state.x - 2.0, vertex.state.y - 1.0) < 1e-9
    assert vertex.control is not None
    assert vertex.control_duration >= 1
    assert graph.edge_weight(0, 2) == pytest.approx(math.hypot(2.0, 1.0))

    # 重新施加记录的控制可以复现该状态
    replay = vehicle.kinematic_propagate(graph[0].state, vertex.control, vertex.control_duration * 0.1)
    assert math.hypot(replay.x - vertex.state.x, replay.y - vertex.state.y) < 1e-9


def test_far_samples_are_truncated():
    expander, graph, _ = _make_expander(State(0.0, 0.0, 0.0), State(10.0, 0.0, 0.0))
    new_ids = expander.expand([State(0.0, 15.0, 0.0)], np.random.default_rng(2))
    assert len(new_ids) == 1
    landed = graph[new_ids[0]].state
    assert landed.x == pytest.approx(0.0, abs=1e-9)
    assert landed.y == pytest.approx(3.0)


def test_invalid_trajectories_are_rejected():
    expander, graph, _ = _make_expander(State(0.0, 0.0, 0.0), State(10.0, 0.0, 0.0),
                                        is_valid=lambda s: s.x < 1.0)
    assert expander.expand([State(2.0, 0.0, 0.0)], np.random.default_rng(3)) == []
    assert expander.num_rejected == 1
    assert graph.num_vertices == 2


def test_goal_is_a_virtual_sink():
    expander, graph, vehicle = _make_expander(State(8.0, 0.0, 0.0), State(10.0, 0.0, 0.0))
    new_ids = expander.expand([State(9.0, 0.0, 0.0)], np.random.default_rng(4))
    # 样本顶点 + 为连接目标而生成的落点
    assert len(new_ids) == 2
    landing = new_ids[1]
    assert graph.has_edge(landing, 1)
    assert graph.edge_weight(landing, 1) == 0.0
    assert expander.goal_connections == 1

    result = compute_shortest_path(graph, ZeroHeuristic(), 0, 1)
    assert result.status is SearchStatus.FOUND
    assert result.path[-1] == 1

    path = SolutionPath.from_vertex_path(graph, result.path, PathKind.CONTROL, result.cost,
                                         step_size=0.1, zero_control=vehicle.zero_control(), sink_id=1)
    assert len(path) == len(result.path) - 1
    last = path.states[-1]
    assert math.hypot(last.x - 10.0, last.y) <= 0.05
    assert path.waypoints[0].control is None
    assert all(c is not None for c in path.controls)


def test_goal_bias_extends_towards_goal():
    expander, graph, _ = _make_expander(State(8.0, 0.0, 0.0), State(10.0, 0.0, 0.0), goal_bias=1.0)
    new_ids = expander.expand([State(-15.0, -15.0, 0.0)], np.random.default_rng(5))
    assert new_ids == [2]
    assert graph.has_edge(2, 1)
