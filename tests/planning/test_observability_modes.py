import glob
import os
import pytest

from kinolab.types import State
from kinolab.map.grid_map import GridMap
from kinolab.vehicles.point_mass import PointMassVehicle
from kinolab.vehicles.config import PointMassConfig
from kinolab.collision import StateValidityChecker
from kinolab.planning.config import AITStarKinConfig
from kinolab.planning.planners import AITStarKinPlanner
from kinolab.planning.space import StateSpace, StateSpaceBounds
from kinolab.planning.termination import iteration_termination
from kinolab.visualization.observers import EfficientObserver, ExperimentObserver, DebugObserver


@pytest.fixture
def planner_setup():
    grid_map = GridMap.from_bounds(-10.0, 10.0, -10.0, 10.0, resolution=0.2)
    vehicle = PointMassVehicle(PointMassConfig(width=0.4, length=0.4, max_velocity=2.0))
    space = StateSpace(StateSpaceBounds(-10.0, 10.0, -10.0, 10.0))
    validity = StateValidityChecker(vehicle, grid_map, space=space)
    config = AITStarKinConfig(seed=3, batch_size=50, goal_bias=0.2, goal_tolerance=0.05)
    planner = AITStarKinPlanner(vehicle, validity, space, config=config)
    planner.set_problem(State(0.0, 0.0, 0.0), State(5.0, 5.0, 0.0))
    return planner


def test_efficient_mode(planner_setup):
    observer = EfficientObserver()
    planner_setup.solve(iteration_termination(2), observer=observer)

    # EfficientObserver 不保存任何记录
    assert not hasattr(observer, 'expanded_nodes')
    assert not hasattr(observer, 'open_set_history')


def test_experiment_mode(planner_setup):
    observer = ExperimentObserver()
    planner_setup.solve(iteration_termination(3), observer=observer)

    assert len(observer.expanded_nodes) > 0
    assert len(observer.edges) > 0
    # 每条记录的解都比前一条同类解更好
    control_costs = observer.best_costs('control')
    assert all(b < a for a, b in zip(control_costs, control_costs[1:]))
    if control_costs:
        assert control_costs[-1] == planner_setup.best_control_cost


def test_debug_mode(planner_setup, tmp_path):
    log_dir = str(tmp_path / "planning_debug")
    observer = DebugObserver(log_dir=log_dir)
    planner_setup.solve(iteration_termination(2), observer=observer)
    observer.close()

    # 1. 与 Experiment 模式兼容
    assert len(observer.expanded_nodes) > 0

    # 2. 日志文件
    log_files = glob.glob(os.path.join(log_dir, "*.log"))
    assert len(log_files) == 1
    with open(log_files[0], 'r', encoding='utf-8') as f:
        content = f.read()
    assert "AIT*-Kin solve started" in content
    assert "Round 2 finished" in content
