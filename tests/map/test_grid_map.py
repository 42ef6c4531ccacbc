import pytest

from kinolab.map import GridMap, OccupancyMap


def test_from_bounds_with_negative_origin():
    grid_map = GridMap.from_bounds(-20.0, 20.0, -20.0, 20.0, resolution=0.1)
    assert grid_map.width == 400
    assert grid_map.height == 400
    assert grid_map.origin == (-20.0, -20.0)
    assert grid_map.extent == pytest.approx((-20.0, 20.0, -20.0, 20.0))


def test_world_to_grid_floors_negative_coordinates():
    grid_map = GridMap.from_bounds(-10.0, 10.0, -10.0, 10.0, resolution=1.0)
    assert grid_map.world_to_grid(-9.5, -9.5) == (0, 0)
    # -0.5 向下取整落在第 9 格，而不是被截断到第 10 格
    assert grid_map.world_to_grid(-0.5, 0.5) == (9, 10)


def test_rectangle_obstacle_and_queries():
    grid_map = GridMap.from_bounds(-5.0, 5.0, -5.0, 5.0, resolution=0.5)
    grid_map.add_rectangle_obstacle(1.0, -1.0, 2.0, 1.0)
    assert grid_map.is_obstacle_at_point(1.5, 0.0)
    assert not grid_map.is_obstacle_at_point(-1.5, 0.0)
    # 越界视为障碍
    assert grid_map.is_obstacle_at_point(6.0, 0.0)
    assert grid_map.is_obstacle_at_point(0.0, -5.5)


def test_distance_map_is_invalidated_by_new_obstacles():
    grid_map = GridMap.from_bounds(0.0, 10.0, 0.0, 10.0, resolution=0.5)
    grid_map.add_rectangle_obstacle(0.0, 0.0, 0.4, 10.0)
    far = grid_map.get_obstacle_distance(8.0, 5.0)
    assert grid_map.has_distance_map
    assert far > 5.0

    grid_map.add_rectangle_obstacle(9.0, 0.0, 10.0, 10.0)
    assert not grid_map.has_distance_map
    assert grid_map.get_obstacle_distance(8.0, 5.0) < far
    assert grid_map.get_obstacle_distance(0.2, 5.0) == 0.0
    assert grid_map.get_obstacle_distance(-1.0, 5.0) == 0.0


def test_invalid_map_arguments():
    with pytest.raises(ValueError):
        GridMap(0, 10)
    with pytest.raises(ValueError):
        GridMap(10, 10, resolution=0.0)


def test_grid_map_satisfies_occupancy_interface():
    grid_map = GridMap(30, 20, resolution=0.5, origin=(-5.0, 1.0))
    assert isinstance(grid_map, OccupancyMap)
    assert grid_map.shape == (20, 30)
    # extent 由接口根据 origin / resolution / data 推出
    assert grid_map.extent == pytest.approx((-5.0, 10.0, 1.0, 11.0))


def test_occupancy_interface_requires_queries():
    class Incomplete(OccupancyMap):
        @property
        def data(self):
            return None

    with pytest.raises(TypeError):
        Incomplete()
