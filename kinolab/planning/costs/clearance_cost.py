# kinolab/planning/costs/clearance_cost.py
import math
from kinolab.types import State
from kinolab.map.grid_map import GridMap
from .base import CostFunction

class ClearanceCost(CostFunction):
    """
    风险代价：利用预计算的 Distance Map 让车辆远离障碍物。
    Cost = length * (1 + weight * risk)，risk ∈ [0, 1] 取端点与中点的平均值
    代价永远不小于路径长度，所以直线距离仍是可采纳的下界。
    """
    def __init__(self, grid_map: GridMap, risk_dist: float = 2.0, weight_factor: float = 1.0):
        """
        :param risk_dist: 超过这个距离就认为安全了，risk 为 0 (米)
        :param weight_factor: 风险项的缩放系数
        """
        if risk_dist <= 0:
            raise ValueError("risk_dist must be positive")
        if weight_factor < 0:
            raise ValueError("weight_factor must be non-negative")
        self.grid_map = grid_map
        self.risk_dist = risk_dist
        self.weight_factor = weight_factor

        # 确保地图已经计算过距离场
        if not self.grid_map.has_distance_map:
            self.grid_map.precompute_distance_map()

    def risk(self, x: float, y: float) -> float:
        dist = self.grid_map.get_obstacle_distance(x, y)
        if dist >= self.risk_dist:
            return 0.0
        # 距离越近，代价越高
        return (self.risk_dist - dist) / self.risk_dist

    def calculate(self, current: State, next_node: State) -> float:
        length = math.hypot(next_node.x - current.x, next_node.y - current.y)
        if length == 0.0:
            return 0.0
        mid_x = 0.5 * (current.x + next_node.x)
        mid_y = 0.5 * (current.y + next_node.y)
        risk = (self.risk(current.x, current.y)
                + self.risk(mid_x, mid_y)
                + self.risk(next_node.x, next_node.y)) / 3.0
        return length * (1.0 + self.weight_factor * risk)
