# kinolab/planning/space.py
import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from kinolab.types import State


@dataclass
class StateSpaceBounds:
    """
    状态空间各维度的 [min, max] 边界
    速度维度 v_min == v_max 时视为不存在 (例如质点模型)
    """
    x_min: float
    x_max: float
    y_min: float
    y_max: float
    theta_min: float = -math.pi
    theta_max: float = math.pi
    v_min: float = 0.0
    v_max: float = 0.0

    def __post_init__(self):
        if self.x_min >= self.x_max or self.y_min >= self.y_max:
            raise ValueError(f"Invalid position bounds: {self}")
        if self.theta_min > self.theta_max:
            raise ValueError("theta_min must not exceed theta_max")
        if self.v_min > self.v_max:
            raise ValueError("v_min must not exceed v_max")


class StateSpace:
    """
    规划所用的连续状态空间 (x, y, theta[, v])

    距离度量：在嵌入向量 [x, y, w_t*cos(theta), w_t*sin(theta), w_v*v] 上的欧氏距离。
    这样航向角的周期性被自然处理，距离是对称的度量，也可以直接交给 KD-Tree。
    """
    def __init__(self, bounds: StateSpaceBounds, heading_weight: float = 0.5, velocity_weight: float = 0.5):
        if heading_weight < 0 or velocity_weight < 0:
            raise ValueError("Distance weights must be non-negative")
        self.bounds = bounds
        self.heading_weight = heading_weight
        self.velocity_weight = velocity_weight
        self.has_velocity = bounds.v_max > bounds.v_min

        self._pos_low = np.array([bounds.x_min, bounds.y_min])
        self._pos_high = np.array([bounds.x_max, bounds.y_max])

    @property
    def dimension(self) -> int:
        """采样维度: x, y, theta (+ v)"""
        return 4 if self.has_velocity else 3

    @property
    def embedding_dimension(self) -> int:
        return 5 if self.has_velocity else 4

    def position_measure(self) -> float:
        b = self.bounds
        return (b.x_max - b.x_min) * (b.y_max - b.y_min)

    def rest_measure(self) -> float:
        """非位置维度 (航向、速度) 在度量意义下的体积"""
        b = self.bounds
        measure = max(self.heading_weight * (b.theta_max - b.theta_min), 1e-9)
        if self.has_velocity:
            measure *= max(self.velocity_weight * (b.v_max - b.v_min), 1e-9)
        return measure

    def measure(self) -> float:
        return self.position_measure() * self.rest_measure()

    def satisfies_bounds(self, state: State) -> bool:
        b = self.bounds
        if not (b.x_min <= state.x <= b.x_max and b.y_min <= state.y <= b.y_max):
            return False
        # 全圆周时不需要检查航向
        if b.theta_max - b.theta_min < 2 * math.pi - 1e-9:
            theta = (state.theta_rad + math.pi) % (2 * math.pi) - math.pi
            if not (b.theta_min <= theta <= b.theta_max):
                return False
        if self.has_velocity and not (b.v_min - 1e-9 <= state.v <= b.v_max + 1e-9):
            return False
        return True

    def embed(self, state: State) -> np.ndarray:
        w = self.heading_weight
        if self.has_velocity:
            return np.array([state.x, state.y,
                             w * math.cos(state.theta_rad), w * math.sin(state.theta_rad),
                             self.velocity_weight * state.v])
        return np.array([state.x, state.y, w * math.cos(state.theta_rad), w * math.sin(state.theta_rad)])

    def embed_many(self, states: Iterable[State]) -> np.ndarray:
        rows = [self.embed(s) for s in states]
        if not rows:
            return np.empty((0, self.embedding_dimension))
        return np.vstack(rows)

    def distance(self, a: State, b: State) -> float:
        return float(np.linalg.norm(self.embed(a) - self.embed(b)))

    @staticmethod
    def position_distance(a: State, b: State) -> float:
        return math.hypot(a.x - b.x, a.y - b.y)

    def interpolate(self, a: State, b: State, t: float) -> State:
        """位置与速度线性插值，航向沿最短方向插值"""
        d_theta = (b.theta_rad - a.theta_rad + math.pi) % (2 * math.pi) - math.pi
        theta = (a.theta_rad + t * d_theta + math.pi) % (2 * math.pi) - math.pi
        return State(a.x + t * (b.x - a.x),
                     a.y + t * (b.y - a.y),
                     theta,
                     a.v + t * (b.v - a.v))

    def sample_rest(self, rng: np.random.Generator) -> Tuple[float, float]:
        """航向与速度的均匀采样"""
        b = self.bounds
        theta = float(rng.uniform(b.theta_min, b.theta_max))
        v = float(rng.uniform(b.v_min, b.v_max)) if self.has_velocity else b.v_min
        return theta, v

    def sample_uniform(self, rng: np.random.Generator) -> State:
        x, y = rng.uniform(self._pos_low, self._pos_high)
        theta, v = self.sample_rest(rng)
        return State(float(x), float(y), theta, v)

    def position_inside(self, x: float, y: float) -> bool:
        b = self.bounds
        return b.x_min <= x <= b.x_max and b.y_min <= y <= b.y_max
