# kinolab/vehicles/ackermann.py
import math
from .base import VehicleBase, State, Control  # 导入接口
from .config import AckermannConfig  # 导入配置类
from typing import Tuple, List, Optional
import numpy as np

class AckermannVehicle(VehicleBase):
    """
    带速度状态的阿克曼 (自行车) 模型
    状态: (x, y, theta, v)，控制: (acceleration, steering)

    转向角恒定时曲率 kappa = tan(steering) / wheelbase 与速度无关，
    所以轨迹始终落在同一个圆弧上，只需要对弧长做闭式积分即可 (无欧拉积分误差)。
    """
    def __init__(self, config: AckermannConfig):
        super().__init__(config)
        self.config: AckermannConfig = config

    def control_bounds(self) -> np.ndarray:
        return np.array([
            [-self.config.max_acceleration, self.config.max_acceleration],
            [-self.config.max_steer, self.config.max_steer],
        ])

    def get_bounding_circle(self, state: State) -> Tuple[float, float, float]:
        """
        返回世界坐标系下的最小外接圆 (x, y, radius)，radius 含安全裕量
        """
        c = math.cos(state.theta_rad)
        s = math.sin(state.theta_rad)

        ox, oy = self.config.bounding_offset

        # 旋转 + 平移
        center_x = ox * c - oy * s + state.x
        center_y = ox * s + oy * c + state.y

        return center_x, center_y, self.config.bounding_radius + self.config.safe_margin

    def get_collision_circles(self, state: State):
        cos_theta = math.cos(state.theta_rad)
        sin_theta = math.sin(state.theta_rad)
        cx_list = state.x + self.config.collision_offsets * cos_theta
        cy_list = state.y + self.config.collision_offsets * sin_theta
        return cx_list, cy_list, self.config.collision_radius

    def get_collision_polygon(self, state: State) -> np.ndarray:
        return self.transform_points(self.config.outline_coords, state)

    def kinematic_propagate(self, start_state: State, control: Control, dt: float) -> State:
        # 读取配置
        wb = self.config.wheelbase
        limit = self.config.max_steer
        acc_limit = self.config.max_acceleration

        # 提取控制信号并限幅
        acc, steering = control
        steering = max(min(steering, limit), -limit)
        acc = max(min(acc, acc_limit), -acc_limit)

        # 1. 纵向：带速度饱和的匀加速运动，得到弧长 s
        arc_len, new_v = self._travel(start_state.v, acc, dt)

        # 2. 横向：沿曲率 kappa 的圆弧前进 s
        kappa = math.tan(steering) / wb
        return self._follow_arc(start_state, arc_len, kappa, new_v)

    def steer_towards(self,
                      start: State,
                      target: State,
                      step_size: float,
                      min_steps: int,
                      max_steps: int) -> Optional[Tuple[Control, int]]:
        """
        解析定向控制：
        1. 求与当前航向相切、且经过目标点的圆 -> 曲率 kappa 与弧长 s
        2. 在允许的步数内找到一个加速度，使得匀加速走过的距离恰好为 s
        """
        # 1. 目标点转到车体坐标系
        dx = target.x - start.x
        dy = target.y - start.y
        c = math.cos(start.theta_rad)
        s = math.sin(start.theta_rad)
        lx = dx * c + dy * s
        ly = -dx * s + dy * c
        d2 = lx * lx + ly * ly
        if d2 < 1e-12:
            return None

        # 2. 切圆曲率 (弦切角定理): kappa = 2 * ly / d^2
        kappa = 2.0 * ly / d2
        steering = math.atan(kappa * self.config.wheelbase)
        if abs(steering) > self.config.max_steer + 1e-12:
            return None

        if abs(kappa) < 1e-9:
            arc_len = lx
        else:
            # 圆心角 = 2 * 弦与航向的夹角
            arc_len = 2.0 * math.atan2(ly, lx) / kappa

        # 3. 弧长方向必须与允许的速度方向一致
        if arc_len > 0 and self.config.max_velocity <= 0:
            return None
        if arc_len < 0 and self.config.min_velocity >= 0:
            return None

        acc = self._solve_acceleration(start.v, arc_len, step_size, min_steps, max_steps)
        if acc is None:
            return None
        return (acc[0], steering), acc[1]

    def _solve_acceleration(self, v0: float, arc_len: float, step_size: float,
                            min_steps: int, max_steps: int) -> Optional[Tuple[float, int]]:
        """
        s = v0 * t + 0.5 * a * t^2  =>  a = 2 * (s - v0 * t) / t^2
        选取满足加速度与速度边界的最小步数 (最快到达)
        """
        v0 = min(max(v0, self.config.min_velocity), self.config.max_velocity)
        acc_limit = self.config.max_acceleration
        for n in range(max(min_steps, 1), max_steps + 1):
            t = n * step_size
            a = 2.0 * (arc_len - v0 * t) / (t * t)
            if abs(a) > acc_limit + 1e-12:
                continue
            v_end = v0 + a * t
            # 匀加速过程速度单调，只需检查终点
            if v_end > self.config.max_velocity + 1e-12 or v_end < self.config.min_velocity - 1e-12:
                continue
            return a, n
        return None

    def _travel(self, v0: float, acc: float, dt: float) -> Tuple[float, float]:
        """速度饱和下的位移与末速度"""
        v_lo, v_hi = self.config.min_velocity, self.config.max_velocity
        v0 = min(max(v0, v_lo), v_hi)

        if acc > 0:
            t_sat, v_bound = (v_hi - v0) / acc, v_hi
        elif acc < 0:
            t_sat, v_bound = (v_lo - v0) / acc, v_lo
        else:
            return v0 * dt, v0

        if dt <= t_sat:
            return v0 * dt + 0.5 * acc * dt * dt, v0 + acc * dt

        # 先加速到边界，再匀速
        dist = v0 * t_sat + 0.5 * acc * t_sat * t_sat + v_bound * (dt - t_sat)
        return dist, v_bound

    def _follow_arc(self, start: State, arc_len: float, kappa: float, new_v: float) -> State:
        theta0 = start.theta_rad
        if abs(kappa) < 1e-9:
            new_x = start.x + arc_len * math.cos(theta0)
            new_y = start.y + arc_len * math.sin(theta0)
            return State(new_x, new_y, self.normalize_angle(theta0), new_v)

        theta1 = theta0 + kappa * arc_len
        new_x = start.x + (math.sin(theta1) - math.sin(theta0)) / kappa
        new_y = start.y + (math.cos(theta0) - math.cos(theta1)) / kappa
        return State(new_x, new_y, self.normalize_angle(theta1), new_v)

    def get_visualization_polygon(self, state: State) -> np.ndarray:
        """直接复用碰撞形状"""
        return self.get_collision_polygon(state)
