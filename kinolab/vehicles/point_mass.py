# kinolab/vehicles/point_mass.py
import numpy as np
from typing import Tuple, Optional
from .base import VehicleBase, State, Control
from .config import PointMassConfig
import math

class PointMassVehicle(VehicleBase):
    """
    质点/全向移动车辆模型实现

    特点：
    1. 运动学：全向移动 (Holonomic)，直接接受 (vx, vy) 控制。
    2. 几何：通常视为圆形，但在网格地图中占据特定大小。
    3. 旋转：本身不旋转 (theta 保持不变)，始终保持轴对齐 (AABB)。
    """

    def __init__(self, config: PointMassConfig):
        super().__init__(config)
        self.config: PointMassConfig = config

    def control_bounds(self) -> np.ndarray:
        v = self.config.max_velocity
        return np.array([[-v, v], [-v, v]])

    def get_bounding_circle(self, state: State) -> Tuple[float, float, float]:
        """对于质点模型，圆心即自身坐标 (x, y)"""
        total_radius = self.config.bounding_radius + self.config.safe_margin
        return state.x, state.y, total_radius

    def get_collision_circles(self, state: State) -> Tuple[np.ndarray, np.ndarray, float]:
        """质点模型只需要一个圆即可覆盖"""
        cx_list = np.array([state.x])
        cy_list = np.array([state.y])
        total_radius = self.config.bounding_radius + self.config.safe_margin
        return cx_list, cy_list, total_radius

    def get_collision_polygon(self, state: State) -> np.ndarray:
        return self.transform_points(self.config.outline_coords, state)

    def kinematic_propagate(self, start_state: State, control: Control, dt: float) -> State:
        """
        物理推演
        :param control: (vx, vy) 速度矢量，分量限幅到 max_velocity
        """
        limit = self.config.max_velocity
        vx, vy = control
        vx = max(min(vx, limit), -limit)
        vy = max(min(vy, limit), -limit)

        new_x = start_state.x + vx * dt
        new_y = start_state.y + vy * dt

        # PointMass 不旋转，保持原状
        return State(new_x, new_y, start_state.theta_rad, start_state.v)

    def steer_towards(self,
                      start: State,
                      target: State,
                      step_size: float,
                      min_steps: int,
                      max_steps: int) -> Optional[Tuple[Control, int]]:
        """直线连过去：选取满足速度上限的最小步数"""
        dx = target.x - start.x
        dy = target.y - start.y
        if math.hypot(dx, dy) < 1e-9:
            return None

        # 分量限幅 -> 以最大分量决定最少时间
        limit = self.config.max_velocity
        t_min = max(abs(dx), abs(dy)) / limit
        n = max(min_steps, 1, int(math.ceil(t_min / step_size - 1e-9)))
        if n > max_steps:
            return None

        t = n * step_size
        return (dx / t, dy / t), n

    def get_visualization_polygon(self, state: State) -> np.ndarray:
        return self.get_collision_polygon(state)
