import math
import pytest

from kinolab.types import State
from kinolab.vehicles.ackermann import AckermannVehicle
from kinolab.vehicles.config import AckermannConfig
from kinolab.planning.graphs.graph import Graph
from kinolab.planning.path import PathKind, SolutionPath, Waypoint


@pytest.fixture
def vehicle():
    return AckermannVehicle(AckermannConfig(wheelbase=1.0, width=0.8, front_hang=0.3, rear_hang=0.2))


def _control_graph(vehicle):
    graph = Graph(directed=True)
    start = State(0.0, 0.0, 0.0, 0.0)
    graph.add_vertex(start)
    control, steps = vehicle.steer_towards(start, State(2.0, 1.0, 0.0), 0.1, 1, 30)
    middle = vehicle.kinematic_propagate(start, control, steps * 0.1)
    graph.add_vertex(middle, control, steps)
    # 控制缺失的顶点 (例如目标) 在组装时用零控制占位
    graph.add_vertex(middle)
    return graph


def test_control_path_assembly(vehicle):
    graph = _control_graph(vehicle)
    path = SolutionPath.from_vertex_path(graph, [0, 1, 2], PathKind.CONTROL, 2.5,
                                         step_size=0.1, zero_control=vehicle.zero_control())
    assert len(path) == 3
    assert path.kind is PathKind.CONTROL
    assert path.waypoints[0] == Waypoint(graph[0].state)
    assert path.durations[0] == pytest.approx(graph[1].control_duration * 0.1)
    assert path.controls[1] == (0.0, 0.0)
    assert path.durations[1] == 0.0


def test_sink_vertex_is_dropped(vehicle):
    graph = _control_graph(vehicle)
    path = SolutionPath.from_vertex_path(graph, [0, 1, 2], PathKind.CONTROL, 2.5,
                                         step_size=0.1, sink_id=2)
    assert len(path) == 2


def test_control_path_interpolation_is_reproducible(vehicle):
    graph = _control_graph(vehicle)
    path = SolutionPath.from_vertex_path(graph, [0, 1], PathKind.CONTROL, 2.5, step_size=0.1)
    dense = path.interpolate(vehicle, step_size=0.1)
    assert len(dense) == graph[1].control_duration + 1
    assert dense[-1] == graph[1].state

    with pytest.raises(ValueError):
        path.interpolate()


def test_geometric_path_interpolation():
    path = SolutionPath([Waypoint(State(0.0, 0.0, 0.0)), Waypoint(State(1.0, 0.0, 0.0)),
                         Waypoint(State(1.0, 2.0, math.pi / 2))], cost=3.0, kind=PathKind.GEOMETRIC)
    assert path.length == pytest.approx(3.0)
    dense = path.interpolate(resolution=0.5)
    assert dense[0] == path.states[0]
    assert dense[-1].x == pytest.approx(1.0)
    assert dense[-1].y == pytest.approx(2.0)
    assert len(dense) == 1 + 2 + 4
    for a, b in zip(dense, dense[1:]):
        assert math.hypot(b.x - a.x, b.y - a.y) <= 0.5 + 1e-9
