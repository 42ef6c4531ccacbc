# kinolab/planning/heuristics/distance.py
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.graphs.graph import Vertex
from .base import Heuristic

class DistanceHeuristic(Heuristic):
    """
    几何距离启发式
    直接使用优化目标给出的代价下界，对任何目标都是可采纳且一致的
    """
    def __init__(self, objective: CostFunction):
        self.objective = objective

    def estimate(self, current: Vertex, goal: Vertex) -> float:
        return self.objective.cost_heuristic(current.state, goal.state)
