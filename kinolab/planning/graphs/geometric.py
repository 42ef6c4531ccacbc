# kinolab/planning/graphs/geometric.py
import math
from typing import Iterable, List, Optional

from scipy.special import gamma

from kinolab.types import State
from kinolab.planning.config import AITStarKinConfig, ConnectionStrategy
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.interfaces import IPlannerObserver
from kinolab.planning.nearest_neighbors import NearestNeighborsIndex
from kinolab.planning.space import StateSpace
from kinolab.visualization.observers import EfficientObserver
from .graph import Graph


def unit_ball_measure(dimension: int) -> float:
    """d 维单位球体积 pi^(d/2) / Gamma(d/2 + 1)"""
    return math.pi ** (dimension / 2.0) / gamma(dimension / 2.0 + 1.0)


class GeometricGraphExpander:
    """
    几何图 (RGG, 忽略动力学) 的扩展
    每个新样本连接到连接半径内 (或 k 个最近) 的已有顶点，
    边权重为优化目标给出的运动代价。几何图是无向的。
    """
    def __init__(self,
                 graph: Graph,
                 nn: NearestNeighborsIndex,
                 space: StateSpace,
                 objective: CostFunction,
                 config: AITStarKinConfig,
                 observer: Optional[IPlannerObserver] = None):
        self.graph = graph
        self.nn = nn
        self.space = space
        self.objective = objective
        self.config = config
        self.observer = observer if observer is not None else EfficientObserver()
        self.num_skipped = 0

    def compute_connection_radius(self, num_samples: int, measure: float) -> float:
        """
        r(n) = rewire_factor * 2 * ((1 + 1/d) * (measure / unit_ball(d)) * log(n) / n)^(1/d)
        """
        if num_samples < 2:
            return self.config.radius
        d = self.space.dimension
        gamma_term = (1.0 + 1.0 / d) * (measure / unit_ball_measure(d))
        radius = self.config.rewire_factor * 2.0 * (gamma_term * math.log(num_samples) / num_samples) ** (1.0 / d)
        return min(radius, self.config.radius)

    def compute_number_of_neighbors(self, num_samples: int) -> int:
        """k(n) = ceil(rewire_factor * (e + e/d) * log(n))，上限 max_neighbors"""
        if num_samples < 2:
            return self.config.max_neighbors
        d = self.space.dimension
        k_rgg = math.e + math.e / d
        k = int(math.ceil(self.config.rewire_factor * k_rgg * math.log(num_samples)))
        return max(1, min(k, self.config.max_neighbors))

    def _candidate_neighbors(self, vertex_id: int, state: State, num_samples: int, measure: float) -> List[int]:
        if self.config.connection_strategy is ConnectionStrategy.K_NEAREST:
            k = self.compute_number_of_neighbors(num_samples)
            # 顶点自己可能已经在索引里 (例如目标顶点)，多取一个再剔除
            found = self.nn.k_nearest(state, k + 1)
            return [u for u in found if u != vertex_id][:k]
        radius = self.compute_connection_radius(num_samples, measure)
        return sorted(u for u in self.nn.in_radius(state, radius) if u != vertex_id)

    def connect(self, vertex_id: int, num_samples: int, measure: float) -> int:
        """把顶点连到它的邻居，返回新增边数"""
        state = self.graph[vertex_id].state
        added = 0
        for u in self._candidate_neighbors(vertex_id, state, num_samples, measure):
            if self.graph[u].blacklisted:
                continue
            other = self.graph[u].state
            if self.space.distance(state, other) > self.config.max_dist_between_vertices:
                continue
            weight = self.objective.calculate(state, other)
            if self.graph.add_edge(vertex_id, u, weight):
                added += 1
                self.observer.record_edge(state, other)
        return added

    def expand(self, samples: Iterable[State], num_samples: int, measure: float) -> List[int]:
        """
        把一批样本加入几何图
        :param num_samples: 计算连接半径用的 n (informed set 中的样本数)
        :param measure: 计算连接半径用的 informed set 体积
        :return: 新增顶点 id
        """
        new_ids = []
        for sample in samples:
            nearest = self.nn.nearest(sample)
            if nearest is not None and \
                    self.space.distance(sample, self.graph[nearest].state) < self.config.min_dist_between_vertices:
                self.num_skipped += 1
                continue
            vid = self.graph.add_vertex(sample)
            if self.config.use_valid_sampler:
                self.graph[vid].validity_checked = True
            self.connect(vid, num_samples, measure)
            self.nn.insert(self.graph[vid])
            new_ids.append(vid)
        return new_ids

    def ensure_goal_vertex_connectivity(self, goal_id: int, num_samples: int, measure: float) -> int:
        """每轮都重新为目标顶点补边 (连接半径随样本数变化)"""
        return self.connect(goal_id, num_samples, measure)
