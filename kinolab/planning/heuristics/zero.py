# kinolab/planning/heuristics/zero.py
from kinolab.planning.graphs.graph import Vertex
from .base import Heuristic

class ZeroHeuristic(Heuristic):
    """
    零启发式 (h=0).
    这将使 A* 退化为 Dijkstra 算法。
    """
    def estimate(self, current: Vertex, goal: Vertex) -> float:
        return 0.0
