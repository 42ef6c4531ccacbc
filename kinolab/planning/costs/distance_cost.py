# kinolab/planning/costs/distance_cost.py
import math
from kinolab.types import State
from .base import CostFunction

class DistanceCost(CostFunction):
    """
    累积路径长度代价。
    Cost = 平面欧氏距离
    """
    has_closed_form_informed_set = True

    def calculate(self, current: State, next_node: State) -> float:
        dx = next_node.x - current.x
        dy = next_node.y - current.y
        return math.hypot(dx, dy)
