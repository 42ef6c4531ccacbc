import math
import pytest

from kinolab.types import State
from kinolab.map.grid_map import GridMap
from kinolab.vehicles.ackermann import AckermannVehicle
from kinolab.vehicles.config import AckermannConfig
from kinolab.collision import StateValidityChecker
from kinolab.planning.config import AITStarKinConfig, ConnectionStrategy
from kinolab.planning.path import PathKind
from kinolab.planning.planners import (AITStarKinPlanner, PlannerConfigurationError,
                                       PlannerPhase, PlannerStatus)
from kinolab.planning.space import StateSpace, StateSpaceBounds
from kinolab.planning.termination import iteration_termination

START = State(0.0, 0.0, 0.0, 0.0)
GOAL = State(10.0, 0.0, 0.0, 0.0)
GOAL_TOLERANCE = 0.05


def _build(with_wall=False, **overrides):
    grid_map = GridMap.from_bounds(-20.0, 20.0, -20.0, 20.0, resolution=0.1)
    if with_wall:
        grid_map.add_rectangle_obstacle(4.0, -20.0, 6.0, 20.0)
    vehicle = AckermannVehicle(AckermannConfig(wheelbase=1.0, width=0.8, front_hang=0.3, rear_hang=0.2,
                                               max_steer_deg=35.0, max_acceleration=1.0,
                                               max_velocity=2.0, min_velocity=0.0))
    space = StateSpace(StateSpaceBounds(-20.0, 20.0, -20.0, 20.0, v_min=0.0, v_max=2.0))
    validity = StateValidityChecker(vehicle, grid_map, space=space)
    params = dict(num_threads=1, seed=42, batch_size=100, goal_bias=0.1,
                  connection_strategy=ConnectionStrategy.RADIUS,
                  max_dist_between_vertices=3.0, min_dist_between_vertices=0.1,
                  propagation_step_size=0.1, max_control_duration=30,
                  goal_tolerance=GOAL_TOLERANCE, max_search_retries=8)
    params.update(overrides)
    planner = AITStarKinPlanner(vehicle, validity, space, config=AITStarKinConfig(**params))
    return planner, vehicle, validity


def test_open_field_finds_control_path():
    planner, vehicle, validity = _build()
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    status = planner.solve(2.0)

    assert status is PlannerStatus.FOUND
    assert planner.phase is PlannerPhase.TERMINATED
    path = planner.get_solution_path()
    assert path.kind is PathKind.CONTROL

    first, last = path.states[0], path.states[-1]
    assert math.hypot(first.x - START.x, first.y - START.y) <= GOAL_TOLERANCE
    assert math.hypot(last.x - GOAL.x, last.y - GOAL.y) <= GOAL_TOLERANCE
    assert path.cost == pytest.approx(planner.best_control_cost)
    assert path.cost >= math.hypot(GOAL.x - START.x, GOAL.y - START.y) - GOAL_TOLERANCE


def test_control_path_is_valid_and_reproducible():
    planner, vehicle, validity = _build()
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    assert planner.solve(2.0) is PlannerStatus.FOUND
    path = planner.get_control_path()

    step = planner.config.propagation_step_size
    for prev, wp in zip(path.waypoints, path.waypoints[1:]):
        steps = int(round(wp.duration / step))
        assert 1 <= steps <= planner.config.max_control_duration
        replay = vehicle.kinematic_propagate(prev.state, wp.control, steps * step)
        assert math.hypot(replay.x - wp.state.x, replay.y - wp.state.y) <= planner.config.min_dist_between_vertices
    assert all(validity(s) for s in path.interpolate(vehicle, step_size=step))

    # 沿路径累积代价单调不减
    cumulative = [0.0]
    for a, b in zip(path.states, path.states[1:]):
        cumulative.append(cumulative[-1] + math.hypot(b.x - a.x, b.y - a.y))
    assert all(x <= y for x, y in zip(cumulative, cumulative[1:]))


def test_full_width_wall_is_not_found():
    planner, _, _ = _build(with_wall=True)
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    status = planner.solve(2.0)
    assert status is PlannerStatus.NOT_FOUND
    assert planner.get_solution_path() is None
    assert planner.num_rounds >= 1
    assert math.isinf(planner.best_control_cost)
    assert math.isinf(planner.best_geometric_cost)


def test_cost_never_increases_across_solve_calls():
    planner, _, _ = _build()
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    costs = []
    for _ in range(4):
        planner.solve(iteration_termination(2))
        costs.append(planner.best_control_cost)
    assert all(b <= a for a, b in zip(costs, costs[1:]))
    assert planner.num_rounds == 8


def test_graphs_only_grow_until_clear():
    planner, _, _ = _build()
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    sizes = []
    for _ in range(3):
        planner.solve(iteration_termination(1))
        data = planner.get_planner_data()
        sizes.append((data.num_geometric_vertices, data.num_control_vertices,
                      data.workers[0].geometric.number_of_edges()))
    for before, after in zip(sizes, sizes[1:]):
        assert all(b <= a for b, a in zip(before, after))

    data = planner.get_planner_data()
    snapshot = data.workers[0]
    assert snapshot.control.is_directed()
    assert not snapshot.geometric.is_directed()
    assert snapshot.geometric.nodes[snapshot.start_id]["state"] == START

    planner.clear()
    assert planner.phase is PlannerPhase.INITIALIZED
    assert planner.get_planner_data().workers == []
    assert planner.get_solution_path() is None
    assert planner.num_rounds == 0


def test_blacklisted_vertices_never_appear_in_paths():
    planner, _, _ = _build(with_wall=True, use_valid_sampler=False)
    planner.set_problem(START, State(2.0, 8.0, 0.0), GOAL_TOLERANCE)
    planner.solve(iteration_termination(3))
    data = planner.get_planner_data()
    geometric = data.workers[0].geometric
    path = planner.get_geometric_path()
    if path is not None:
        blacklisted_states = {n["state"] for _, n in geometric.nodes(data=True) if n["blacklisted"]}
        assert not blacklisted_states.intersection(path.states)
    for u, v, w in geometric.edges(data="weight"):
        if geometric.nodes[u]["blacklisted"] or geometric.nodes[v]["blacklisted"]:
            assert math.isinf(w)


def test_timeout_before_first_round():
    planner, _, _ = _build()
    planner.set_problem(START, GOAL)
    assert planner.solve(iteration_termination(0)) is PlannerStatus.TIMEOUT
    assert planner.num_rounds == 0


def test_multiple_workers_share_best_cost():
    planner, _, _ = _build(num_threads=2, batch_size=60)
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    planner.solve(iteration_termination(3))
    data = planner.get_planner_data()
    assert len(data.workers) == 2
    assert planner.num_rounds == 3
    assert planner.best_control_cost == data.best_control_cost


def test_plan_convenience_returns_states():
    planner, _, _ = _build()
    states = planner.plan(START, GOAL, time_budget=2.0)
    assert states
    assert states[0] == START


def test_configuration_errors():
    planner, _, _ = _build()
    with pytest.raises(PlannerConfigurationError):
        planner.solve(iteration_termination(1))

    planner.set_problem(State(30.0, 0.0, 0.0), GOAL)
    with pytest.raises(PlannerConfigurationError):
        planner.setup()

    planner.set_problem(START, State(0.0, 25.0, 0.0))
    with pytest.raises(PlannerConfigurationError):
        planner.setup()

    planner_wall, _, _ = _build(with_wall=True)
    planner_wall.set_problem(State(5.0, 0.0, 0.0), GOAL)
    with pytest.raises(PlannerConfigurationError):
        planner_wall.solve(1.0)

    with pytest.raises(ValueError):
        planner.set_problem(START, GOAL, goal_tolerance=-1.0)


def test_invalid_parameters_are_rejected():
    with pytest.raises(ValueError):
        AITStarKinConfig(batch_size=0)
    with pytest.raises(ValueError):
        AITStarKinConfig(goal_bias=1.5)
    with pytest.raises(ValueError):
        AITStarKinConfig(min_dist_between_vertices=3.0, max_dist_between_vertices=1.0)
    with pytest.raises(ValueError):
        AITStarKinConfig(min_control_duration=5, max_control_duration=2)


def test_free_memory_keeps_best_path_and_rebuilds():
    planner, _, _ = _build()
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    assert planner.solve(2.0) is PlannerStatus.FOUND
    best_path = planner.get_control_path()
    best_cost = planner.best_control_cost
    rounds = planner.num_rounds

    planner.free_memory()
    assert planner.get_planner_data().workers == []
    assert planner.get_control_path() is best_path
    assert planner.best_control_cost == best_cost
    assert planner.status is PlannerStatus.FOUND

    # 下一次 solve 重新 setup，在新图上继续，代价不会变差
    planner.solve(iteration_termination(2))
    data = planner.get_planner_data()
    assert len(data.workers) == 1
    assert data.num_geometric_vertices > 2
    assert planner.num_rounds == rounds + 2
    assert planner.best_control_cost <= best_cost


def test_set_space_clears_state_and_requires_setup():
    planner, _, _ = _build()
    planner.set_problem(START, GOAL, GOAL_TOLERANCE)
    planner.solve(iteration_termination(2))
    assert planner.num_rounds == 2

    narrow = StateSpace(StateSpaceBounds(-20.0, 5.0, -20.0, 20.0, v_min=0.0, v_max=2.0))
    planner.set_space(narrow)
    assert planner.space is narrow
    assert planner.num_rounds == 0
    assert planner.phase is PlannerPhase.INITIALIZED
    assert planner.get_solution_path() is None
    assert math.isinf(planner.best_control_cost)
    assert planner.get_planner_data().workers == []
    # 新的空间不再包含目标，重新 setup 时被拒绝
    with pytest.raises(PlannerConfigurationError):
        planner.solve(iteration_termination(1))

    planner.set_space(StateSpace(StateSpaceBounds(-20.0, 20.0, -20.0, 20.0, v_min=0.0, v_max=2.0)))
    planner.solve(iteration_termination(1))
    assert planner.num_rounds == 1
    assert len(planner.get_planner_data().workers) == 1


def test_start_inside_goal_tolerance_gives_zero_cost_solution():
    planner, _, _ = _build()
    near_goal = State(START.x + 0.01, START.y, 0.0, 0.0)
    planner.set_problem(START, near_goal, GOAL_TOLERANCE)
    assert planner.solve(iteration_termination(1)) is PlannerStatus.FOUND
    assert planner.best_control_cost == 0.0
    path = planner.get_control_path()
    assert path.states == [START]
