# kinolab/collision/validity.py
from typing import Optional

from kinolab.types import State
from kinolab.vehicles.base import VehicleBase
from kinolab.map.base import OccupancyMap
from .checker import CollisionChecker


class StateValidityChecker:
    """
    有效性判定 (validity oracle)：状态空间边界 + 车辆足迹碰撞检测。

    规划器每次都会真正调用 is_valid，不存在"恒为 True"的旁路。
    所有成员在构造后只读，因此可以被多个规划线程并发调用。
    """
    def __init__(self,
                 vehicle: VehicleBase,
                 grid_map: OccupancyMap,
                 collision_checker: Optional[CollisionChecker] = None,
                 space=None):
        self.vehicle = vehicle
        self.grid_map = grid_map
        self.collision_checker = collision_checker or CollisionChecker()
        # space: kinolab.planning.space.StateSpace，可选；提供时额外检查状态边界 (含速度)
        self.space = space

    def is_valid(self, state: State) -> bool:
        if self.space is not None and not self.space.satisfies_bounds(state):
            return False
        return not self.collision_checker.check(self.vehicle, state, self.grid_map)

    def __call__(self, state: State) -> bool:
        return self.is_valid(state)
