# kinolab/vehicles/base.py
from abc import ABC, abstractmethod
from typing import Tuple, List, Optional
from .config import VehicleConfig
import math
import numpy as np
from kinolab.types import State

# 控制量：阿克曼为 (acceleration, steering)，质点为 (vx, vy)
Control = Tuple[float, ...]


class VehicleBase(ABC):
    """
    车辆接口基类
    规划器只通过这里的接口接触动力学：
    1. kinematic_propagate: 传播函数 propagate(state, control, duration) -> state
    2. steer_towards: 定向控制采样 (解析解)
    3. control_bounds / sample_control: 控制空间边界
    """
    def __init__(self, config: VehicleConfig):
        self.config = config

    @abstractmethod
    def kinematic_propagate(self, start: State, control: Control, dt: float) -> State:
        """
        核心物理推演，留给子类实现
        约定：控制量在 dt 内保持不变，且结果是确定性的 (可重入，多线程安全)。
        """
        pass

    @abstractmethod
    def control_bounds(self) -> np.ndarray:
        """控制空间边界，形状 (k, 2)，每行 [min, max]"""
        pass

    @abstractmethod
    def steer_towards(self,
                      start: State,
                      target: State,
                      step_size: float,
                      min_steps: int,
                      max_steps: int) -> Optional[Tuple[Control, int]]:
        """
        [定向控制接口] 计算一个 (control, steps) 使得从 start 出发恰好到达 target 的位置。

        Args:
            start: 起点状态
            target: 目标状态 (只要求位置对齐)
            step_size: 单步传播时长 [s]
            min_steps, max_steps: 允许的步数范围

        Returns:
            (control, steps)，若在控制边界内无解则返回 None
        """
        pass

    @abstractmethod
    def get_bounding_circle(self, state: State) -> Tuple[float, float, float]:
        """
        [粗检测接口] 获取能够完全包围车辆的最小外接圆 (center_x, center_y, radius)，
        radius 已包含安全余量。
        """
        pass

    def zero_control(self) -> Control:
        """起点/终点顶点没有控制量，组装路径时用零控制占位"""
        return tuple(0.0 for _ in range(len(self.control_bounds())))

    def sample_control(self, rng: np.random.Generator) -> Control:
        """在控制边界内均匀采样"""
        bounds = self.control_bounds()
        return tuple(float(u) for u in rng.uniform(bounds[:, 0], bounds[:, 1]))

    def propagate_trajectory(self, start: State, control: Control, steps: int, step_size: float) -> List[State]:
        """
        按传播步长离散化整段轨迹 (包含起点)，用于全轨迹有效性检查。
        kinematic_propagate 是从 start 出发的闭式解，因此每个点都直接从 start 推演，没有累积误差。
        """
        trajectory = [start]
        for k in range(1, steps + 1):
            trajectory.append(self.kinematic_propagate(start, control, k * step_size))
        return trajectory

    def get_collision_circles(self, state: State) -> Tuple[np.ndarray, np.ndarray, float]:
        """
        [精检测接口 - 多圆]
        可选实现。如果子类支持多圆检测，返回 (cx_list, cy_list, radius)。
        """
        raise NotImplementedError("此车辆模型未配置多圆碰撞几何体")

    def get_collision_polygon(self, state: State) -> np.ndarray:
        """
        [精检测接口 - 多边形]
        返回世界坐标系下的多边形顶点 (N, 2)，用于 SAT 碰撞检测。
        """
        raise NotImplementedError("此车辆模型未配置多边形碰撞几何体")

    @staticmethod
    def normalize_angle(angle: float) -> float:
        """工具函数：基类提供通用数学计算"""
        return (angle + math.pi) % (2 * math.pi) - math.pi

    @staticmethod
    def transform_points(local_points: np.ndarray, state: State) -> np.ndarray:
        """
        [通用工具] 将局部坐标点变换到世界坐标系
        :param local_points: (N, 2) 数组
        :param state: 车辆状态 (x, y, theta)
        """
        c = math.cos(state.theta_rad)
        s = math.sin(state.theta_rad)

        world_points = np.empty_like(local_points)

        # 向量化计算: x' = x*c - y*s + tx
        world_points[:, 0] = local_points[:, 0] * c - local_points[:, 1] * s + state.x
        world_points[:, 1] = local_points[:, 0] * s + local_points[:, 1] * c + state.y

        return world_points
