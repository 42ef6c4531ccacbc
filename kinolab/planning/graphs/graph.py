# kinolab/planning/graphs/graph.py
import math
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set, Tuple

from kinolab.types import State
from kinolab.vehicles.base import Control


@dataclass
class Vertex:
    """
    图顶点
    control / control_duration 只在控制图中有意义：记录从父顶点到达本顶点所用的控制与步数
    g: 启发式预计算写入的代价 (在几何图中是到目标的 cost-to-go)
    """
    state: State
    control: Optional[Control] = None
    control_duration: int = 0
    id: int = -1
    g: float = math.inf
    blacklisted: bool = False
    validity_checked: bool = False


class Graph:
    """
    以整数 id 寻址的顶点数组 + 每个顶点一张邻接字典
    - 邻接字典保证同一对顶点之间最多一条边
    - id 在一次会话内单调递增，从不复用
    """
    def __init__(self, directed: bool = False):
        self.directed = directed
        self.vertices: List[Vertex] = []
        self._out: List[Dict[int, float]] = []
        # 有向图需要反向邻接，用于拉黑顶点时改写入边
        self._in: List[Dict[int, float]] = []
        self._checked_edges: Set[Tuple[int, int]] = set()

    def __len__(self) -> int:
        return len(self.vertices)

    def __getitem__(self, vertex_id: int) -> Vertex:
        return self.vertices[vertex_id]

    @property
    def num_vertices(self) -> int:
        return len(self.vertices)

    @property
    def num_edges(self) -> int:
        count = sum(len(adj) for adj in self._out)
        return count if self.directed else count // 2

    def add_vertex(self, state: State, control: Optional[Control] = None, control_duration: int = 0) -> int:
        vertex_id = len(self.vertices)
        self.vertices.append(Vertex(state=state, control=control,
                                    control_duration=control_duration, id=vertex_id))
        self._out.append({})
        self._in.append({})
        return vertex_id

    def add_edge(self, u: int, v: int, weight: float) -> bool:
        """已存在的边保持原权重，返回 False"""
        if u == v or v in self._out[u]:
            return False
        self._out[u][v] = weight
        if self.directed:
            self._in[v][u] = weight
        else:
            self._out[v][u] = weight
        return True

    def has_edge(self, u: int, v: int) -> bool:
        return v in self._out[u]

    def edge_weight(self, u: int, v: int) -> float:
        return self._out[u].get(v, math.inf)

    def set_edge_weight(self, u: int, v: int, weight: float):
        if v not in self._out[u]:
            raise KeyError(f"No edge {u} -> {v}")
        self._out[u][v] = weight
        if self.directed:
            self._in[v][u] = weight
        else:
            self._out[v][u] = weight

    def neighbors(self, u: int) -> Iterator[Tuple[int, float]]:
        """出边 (v, weight)"""
        return iter(self._out[u].items())

    def predecessors(self, v: int) -> Iterator[Tuple[int, float]]:
        if self.directed:
            return iter(self._in[v].items())
        return iter(self._out[v].items())

    def edges(self) -> Iterator[Tuple[int, int, float]]:
        for u, adj in enumerate(self._out):
            for v, w in adj.items():
                if self.directed or u < v:
                    yield u, v, w

    def blacklist(self, vertex_id: int):
        """
        [关键] 拉黑顶点：所有关联边的权重改为无穷大
        之后任何搜索都不会再经过该顶点
        """
        self.vertices[vertex_id].blacklisted = True
        for v in self._out[vertex_id]:
            self.set_edge_weight(vertex_id, v, math.inf)
        if self.directed:
            for u in self._in[vertex_id]:
                self.set_edge_weight(u, vertex_id, math.inf)

    def _edge_key(self, u: int, v: int) -> Tuple[int, int]:
        if self.directed:
            return (u, v)
        return (u, v) if u < v else (v, u)

    def is_edge_checked(self, u: int, v: int) -> bool:
        return self._edge_key(u, v) in self._checked_edges

    def mark_edge_checked(self, u: int, v: int):
        self._checked_edges.add(self._edge_key(u, v))

    def reset_g(self, value: float = math.inf):
        for vertex in self.vertices:
            vertex.g = value

    def clear(self):
        self.vertices.clear()
        self._out.clear()
        self._in.clear()
        self._checked_edges.clear()
