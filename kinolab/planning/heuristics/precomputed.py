# kinolab/planning/heuristics/precomputed.py
import math
from typing import Callable, Optional

from kinolab.types import State
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.graphs.graph import Graph, Vertex
from kinolab.planning.nearest_neighbors import NearestNeighborsIndex
from .base import Heuristic


class PrecomputedCostHeuristic(Heuristic):
    """
    读取预计算写入几何图顶点的 g (到目标的 cost-to-go)

    两种用法:
    1. 同图模式 (lookup=None): current 就是 geometric_graph 的顶点，直接返回其 g。
       可选地在此处做延迟有效性检查，无效顶点被拉黑并返回 inf。
    2. 跨图模式 (lookup 给出几何图的最近邻索引): current 属于控制图，
       取 k 个最近几何顶点的 min(下界(current, u) + u.g)。
       这个估计不保证可采纳，但对动力学搜索的引导效果更好；
       找不到有限值时退化为距离启发式。
    """
    def __init__(self,
                 geometric_graph: Graph,
                 lookup: Optional[NearestNeighborsIndex] = None,
                 objective: Optional[CostFunction] = None,
                 num_lookup_neighbors: int = 3,
                 is_valid: Optional[Callable[[State], bool]] = None):
        if lookup is not None and objective is None:
            raise ValueError("Cross-graph lookup requires an objective")
        self.graph = geometric_graph
        self.lookup = lookup
        self.objective = objective
        self.num_lookup_neighbors = num_lookup_neighbors
        self.is_valid = is_valid

    def estimate(self, current: Vertex, goal: Vertex) -> float:
        if self.lookup is None:
            return self._own_cost(current)
        return self._lookup_cost(current, goal)

    def _own_cost(self, vertex: Vertex) -> float:
        if self.is_valid is not None and not vertex.validity_checked:
            vertex.validity_checked = True
            if not self.is_valid(vertex.state):
                self.graph.blacklist(vertex.id)
        if vertex.blacklisted:
            return math.inf
        return vertex.g

    def _lookup_cost(self, current: Vertex, goal: Vertex) -> float:
        best = math.inf
        for vid in self.lookup.k_nearest(current.state, self.num_lookup_neighbors):
            u = self.graph[vid]
            if u.blacklisted or not math.isfinite(u.g):
                continue
            best = min(best, self.objective.cost_heuristic(current.state, u.state) + u.g)
        if math.isfinite(best):
            return best
        return self.objective.cost_heuristic(current.state, goal.state)
