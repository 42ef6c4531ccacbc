import math
import pytest

from kinolab.types import State
from kinolab.map.grid_map import GridMap
from kinolab.planning.costs import DistanceCost, ClearanceCost


def test_distance_cost_is_planar_length():
    cost = DistanceCost()
    assert cost.calculate(State(0.0, 0.0, 0.0), State(3.0, 4.0, 1.0)) == pytest.approx(5.0)
    assert cost.has_closed_form_informed_set
    states = [State(0.0, 0.0, 0.0), State(1.0, 0.0, 0.0), State(1.0, 2.0, 0.0)]
    assert cost.path_cost(states) == pytest.approx(3.0)


def test_cost_algebra():
    cost = DistanceCost()
    assert cost.identity_cost() == 0.0
    assert math.isinf(cost.infinite_cost())
    assert cost.is_better(1.0, 2.0)
    assert not cost.is_better(2.0, 2.0)
    assert cost.combine(1.5, 2.0) == pytest.approx(3.5)


def test_clearance_cost_penalizes_proximity():
    grid_map = GridMap.from_bounds(0.0, 10.0, 0.0, 10.0, resolution=0.1)
    grid_map.add_rectangle_obstacle(0.0, 0.0, 10.0, 0.5)
    cost = ClearanceCost(grid_map, risk_dist=2.0, weight_factor=1.0)
    assert not cost.has_closed_form_informed_set

    near = cost.calculate(State(2.0, 1.0, 0.0), State(3.0, 1.0, 0.0))
    far = cost.calculate(State(2.0, 8.0, 0.0), State(3.0, 8.0, 0.0))
    assert far == pytest.approx(1.0)
    assert near > far
    # 直线距离仍然是下界
    assert cost.cost_heuristic(State(2.0, 1.0, 0.0), State(3.0, 1.0, 0.0)) <= near


def test_clearance_cost_rejects_bad_parameters():
    grid_map = GridMap(10, 10, resolution=1.0)
    with pytest.raises(ValueError):
        ClearanceCost(grid_map, risk_dist=0.0)
