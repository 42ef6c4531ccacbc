import math
import pytest

from kinolab.types import State
from kinolab.vehicles.point_mass import PointMassVehicle
from kinolab.vehicles.config import PointMassConfig


@pytest.fixture
def vehicle():
    return PointMassVehicle(PointMassConfig(width=0.5, length=0.5, max_velocity=2.0))


def test_propagate_clamps_each_component(vehicle):
    end = vehicle.kinematic_propagate(State(0.0, 0.0, 0.7), (5.0, -1.0), 1.0)
    assert end.x == pytest.approx(2.0)
    assert end.y == pytest.approx(-1.0)
    # 质点不旋转
    assert end.theta_rad == pytest.approx(0.7)


def test_steer_towards_uses_fewest_steps(vehicle):
    start = State(0.0, 0.0, 0.0)
    target = State(3.0, 4.0, 0.0)
    control, steps = vehicle.steer_towards(start, target, 0.1, 1, 30)
    assert steps == 20
    end = vehicle.kinematic_propagate(start, control, steps * 0.1)
    assert math.hypot(end.x - 3.0, end.y - 4.0) < 1e-9


def test_steer_towards_respects_duration_limit(vehicle):
    assert vehicle.steer_towards(State(0.0, 0.0, 0.0), State(3.0, 4.0, 0.0), 0.1, 1, 10) is None


def test_bounding_circle_includes_margin(vehicle):
    x, y, r = vehicle.get_bounding_circle(State(1.0, 2.0, 0.0))
    assert (x, y) == (1.0, 2.0)
    assert r == pytest.approx(math.hypot(0.25, 0.25) + vehicle.config.safe_margin)


def test_invalid_config():
    with pytest.raises(ValueError):
        PointMassConfig(max_velocity=0.0)
