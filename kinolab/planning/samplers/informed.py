# kinolab/planning/samplers/informed.py
import math
from typing import Callable, Optional

import numpy as np

from kinolab.types import State
from kinolab.planning.space import StateSpace
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.interfaces import IPlannerObserver
from .base import StateSampler
from .uniform import UniformSampler


class PathLengthInformedSampler(StateSampler):
    """
    路径长度目标下的 informed set 直接采样

    平面上所有 |s - start| + |s - goal| < c_best 的点构成一个椭圆:
    焦点为起点与终点，长轴 = c_best，短轴 = sqrt(c_best^2 - c_min^2)。
    在单位圆盘内均匀采样，再缩放旋转平移到椭圆上；航向与速度在边界内均匀采样。
    """
    def __init__(self, space: StateSpace, rng: np.random.Generator, start: State, goal: State, **kwargs):
        super().__init__(space, rng, **kwargs)
        self.start = start
        self.goal = goal
        self.c_min = math.hypot(goal.x - start.x, goal.y - start.y)
        self.center = np.array([(start.x + goal.x) / 2.0, (start.y + goal.y) / 2.0])
        angle = math.atan2(goal.y - start.y, goal.x - start.x)
        self.rotation = np.array([[math.cos(angle), -math.sin(angle)],
                                  [math.sin(angle), math.cos(angle)]])
        self.best_cost = math.inf

    def axes(self):
        """椭圆半长轴与半短轴"""
        c = max(self.best_cost, self.c_min)
        return c / 2.0, math.sqrt(c * c - self.c_min * self.c_min) / 2.0

    def informed_measure(self) -> float:
        if not math.isfinite(self.best_cost):
            return self.space.measure()
        r1, r2 = self.axes()
        ellipse = math.pi * r1 * r2
        return min(ellipse, self.space.position_measure()) * self.space.rest_measure()

    def sample_one(self) -> Optional[State]:
        if not math.isfinite(self.best_cost):
            return self.space.sample_uniform(self.rng)

        r1, r2 = self.axes()
        radius = math.sqrt(self.rng.random())
        phi = 2.0 * math.pi * self.rng.random()
        local = np.array([r1 * radius * math.cos(phi), r2 * radius * math.sin(phi)])
        x, y = self.rotation @ local + self.center
        # 椭圆超出地图的部分直接拒绝
        if not self.space.position_inside(x, y):
            return None
        theta, v = self.space.sample_rest(self.rng)
        return State(float(x), float(y), theta, v)


class RejectionInformedSampler(StateSampler):
    """
    通用 informed 采样：均匀采样后保留 h(start, s) + h(s, goal) < c_best 的样本
    适用于没有闭式 informed set 的优化目标
    """
    def __init__(self, space: StateSpace, rng: np.random.Generator,
                 objective: CostFunction, start: State, goal: State, **kwargs):
        super().__init__(space, rng, **kwargs)
        self.objective = objective
        self.start = start
        self.goal = goal
        self.best_cost = math.inf

    def informed_measure(self) -> float:
        return self.space.measure()

    def sample_one(self) -> Optional[State]:
        state = self.space.sample_uniform(self.rng)
        if not math.isfinite(self.best_cost):
            return state
        lower_bound = (self.objective.cost_heuristic(self.start, state)
                       + self.objective.cost_heuristic(state, self.goal))
        if lower_bound < self.best_cost:
            return state
        return None


class InformedSampler(StateSampler):
    """
    采样策略门面
    - 还没有解 (best_cost = inf): 均匀采样
    - 目标有闭式 informed set: 椭圆直接采样
    - 否则: 拒绝采样
    """
    def __init__(self,
                 space: StateSpace,
                 rng: np.random.Generator,
                 objective: CostFunction,
                 start: State,
                 goal: State,
                 is_valid: Optional[Callable[[State], bool]] = None,
                 max_sampling_attempts: int = 100,
                 observer: Optional[IPlannerObserver] = None):
        super().__init__(space, rng, is_valid=is_valid,
                         max_sampling_attempts=max_sampling_attempts, observer=observer)
        self.objective = objective
        self.best_cost = math.inf
        self._uniform = UniformSampler(space, rng)
        if objective.has_closed_form_informed_set:
            self._informed = PathLengthInformedSampler(space, rng, start, goal)
        else:
            self._informed = RejectionInformedSampler(space, rng, objective, start, goal)

    @property
    def mode(self) -> str:
        if not math.isfinite(self.best_cost):
            return "uniform"
        return "direct" if self.objective.has_closed_form_informed_set else "rejection"

    def notify_best_cost(self, cost: float):
        """只会收紧，不会放宽"""
        if cost < self.best_cost:
            self.best_cost = cost
            self._informed.best_cost = cost

    def informed_measure(self) -> float:
        if not math.isfinite(self.best_cost):
            return self.space.measure()
        return self._informed.informed_measure()

    def sample_one(self) -> Optional[State]:
        if not math.isfinite(self.best_cost):
            return self._uniform.sample_one()
        return self._informed.sample_one()
