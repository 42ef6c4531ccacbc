# kinolab/planning/heuristics/base.py
from abc import ABC, abstractmethod
from kinolab.planning.graphs.graph import Vertex

class Heuristic(ABC):
    @abstractmethod
    def estimate(self, current: Vertex, goal: Vertex) -> float:
        """统一接口：只接受当前顶点和目标顶点，返回 inf 表示该顶点不可能到达目标"""
        pass
