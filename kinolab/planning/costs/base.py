# kinolab/planning/costs/base.py
import math
from abc import ABC, abstractmethod
from typing import Sequence

from kinolab.types import State


class CostFunction(ABC):
    """
    优化目标基类 (Strategy Interface)
    calculate 定义从 current 移动到 next_node 的运动代价，
    其余方法给出代价的代数 (加法、比较、单位元、无穷大) 以及可采纳的代价下界。
    """
    # 只有代价等于平面路径长度时，informed set 才是可以直接采样的椭圆
    has_closed_form_informed_set: bool = False

    @abstractmethod
    def calculate(self, current: State, next_node: State) -> float:
        """
        计算单段运动的代价
        :return: 代价数值 (必须 >= 0)
        """
        pass

    def cost_heuristic(self, current: State, goal: State) -> float:
        """两状态间代价的可采纳下界 (默认用平面直线距离)"""
        return math.hypot(goal.x - current.x, goal.y - current.y)

    def infinite_cost(self) -> float:
        return math.inf

    def identity_cost(self) -> float:
        return 0.0

    def combine(self, a: float, b: float) -> float:
        return a + b

    def is_better(self, a: float, b: float) -> bool:
        return a < b

    def is_finite(self, cost: float) -> bool:
        return math.isfinite(cost)

    def path_cost(self, states: Sequence[State]) -> float:
        """沿状态序列累加 calculate"""
        total = self.identity_cost()
        for prev, curr in zip(states, states[1:]):
            total = self.combine(total, self.calculate(prev, curr))
        return total

    def trajectory_cost(self, trajectory: Sequence[State]) -> float:
        """控制边的代价：对传播得到的密集轨迹求和，而不是只看端点"""
        return self.path_cost(trajectory)
