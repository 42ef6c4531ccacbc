# kinolab/planning/search.py
import heapq
import itertools
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional

from kinolab.types import State
from kinolab.planning.graphs.graph import Graph
from kinolab.planning.heuristics.base import Heuristic
from kinolab.planning.interfaces import IPlannerObserver
from kinolab.visualization.observers import EfficientObserver


class SearchStatus(Enum):
    FOUND = "found"
    NO_PATH = "no_path"
    RETRY = "retry"              # 回溯路径上发现无效顶点/边，需要重新搜索
    PRECOMPUTED = "precomputed"  # 预计算模式完成


class ExpansionSignal(Enum):
    CONTINUE = "continue"
    GOAL_REACHED = "goal_reached"
    EXHAUSTED = "exhausted"


@dataclass
class SearchResult:
    status: SearchStatus
    path: List[int] = field(default_factory=list)
    num_visited: int = 0
    cost: float = math.inf
    invalid_vertices: List[int] = field(default_factory=list)
    invalid_edges: List[tuple] = field(default_factory=list)
    attempts: int = 1


class BestFirstSearch:
    """
    A* / Dijkstra 的单步展开器
    - OpenSet: (f, 插入序号, vertex_id)，插入序号保证 f 相同时先进先出
    - ClosedSet: 已展开的顶点，堆中的过期条目在弹出时跳过
    - 被拉黑的顶点和权重为 inf 的边不会被松弛
    """
    def __init__(self,
                 graph: Graph,
                 root: int,
                 goal: Optional[int] = None,
                 heuristic: Optional[Heuristic] = None,
                 observer: Optional[IPlannerObserver] = None,
                 stop_at_goal: bool = True):
        self.graph = graph
        self.root = root
        self.goal = goal
        self.stop_at_goal = stop_at_goal
        self.heuristic = heuristic
        self.observer = observer if observer is not None else EfficientObserver()

        self.dist: Dict[int, float] = {root: 0.0}
        self.pred: Dict[int, int] = {root: root}
        self.closed = set()
        self.num_visited = 0
        self._counter = itertools.count()
        self._open = []

        h = self._h(root)
        if math.isfinite(h):
            self._push(root, 0.0, h)

    def _h(self, vertex_id: int) -> float:
        if self.heuristic is None or self.goal is None:
            return 0.0
        return self.heuristic.estimate(self.graph[vertex_id], self.graph[self.goal])

    def _push(self, vertex_id: int, g: float, h: float):
        f = g + h
        heapq.heappush(self._open, (f, next(self._counter), vertex_id))
        self.observer.record_open_set_node(self.graph[vertex_id].state, f, h)

    def step(self) -> ExpansionSignal:
        while self._open:
            _, _, u = heapq.heappop(self._open)
            if u in self.closed:
                continue
            self.closed.add(u)
            self.num_visited += 1
            self.observer.record_current_expansion(self.graph[u].state)

            if self.stop_at_goal and u == self.goal:
                return ExpansionSignal.GOAL_REACHED

            d_u = self.dist[u]
            for v, weight in self.graph.neighbors(u):
                if v in self.closed or not math.isfinite(weight) or self.graph[v].blacklisted:
                    continue
                new_d = d_u + weight
                if new_d < self.dist.get(v, math.inf):
                    h = self._h(v)
                    if not math.isfinite(h):
                        continue
                    self.dist[v] = new_d
                    self.pred[v] = u
                    self._push(v, new_d, h)
            return ExpansionSignal.CONTINUE
        return ExpansionSignal.EXHAUSTED

    def run(self) -> ExpansionSignal:
        signal = self.step()
        while signal is ExpansionSignal.CONTINUE:
            signal = self.step()
        return signal

    def backtrack(self, target: int) -> List[int]:
        """从 target 沿前驱回溯到 root，返回 root -> target 的顶点序列"""
        path = [target]
        while path[-1] != self.root:
            path.append(self.pred[path[-1]])
        path.reverse()
        return path


def _validate_path(graph: Graph,
                   path: List[int],
                   is_valid: Optional[Callable[[State], bool]],
                   motion_validator: Optional[Callable[[State, State], bool]],
                   result: SearchResult):
    """
    [关键] 完整碰撞检查：验证回溯路径上的每个顶点和每条边
    - 无效顶点被拉黑 (所有关联边 -> inf)
    - 无效边权重 -> inf
    已检查过的顶点/边会被缓存，不会重复检查
    """
    for vid in path:
        vertex = graph[vid]
        if vertex.validity_checked or is_valid is None:
            continue
        vertex.validity_checked = True
        if not is_valid(vertex.state):
            graph.blacklist(vid)
            result.invalid_vertices.append(vid)

    if motion_validator is None:
        return
    for u, v in zip(path, path[1:]):
        if graph[u].blacklisted or graph[v].blacklisted or graph.is_edge_checked(u, v):
            continue
        graph.mark_edge_checked(u, v)
        if not motion_validator(graph[u].state, graph[v].state):
            graph.set_edge_weight(u, v, math.inf)
            result.invalid_edges.append((u, v))


def compute_shortest_path(graph: Graph,
                          heuristic: Optional[Heuristic],
                          start: int,
                          goal: Optional[int],
                          precompute_heuristic: bool = False,
                          use_full_collision_check: bool = False,
                          is_valid: Optional[Callable[[State], bool]] = None,
                          motion_validator: Optional[Callable[[State, State], bool]] = None,
                          observer: Optional[IPlannerObserver] = None) -> SearchResult:
    """
    两种模式:
    1. precompute_heuristic=True: 从 start 出发穷尽整张图，把最短距离写入每个顶点的 g
       (不可达顶点 g = inf)。heuristic 不为 None 时以 goal 为目标做 A* 排序。
    2. 普通模式: A* 从 start 搜索到 goal；启用完整碰撞检查时验证回溯路径，
       发现无效元素则返回 RETRY，由调用方重新搜索。
    """
    if precompute_heuristic:
        # 预计算不在目标处停止
        search = BestFirstSearch(graph, start, goal, heuristic, observer, stop_at_goal=False)
        search.run()
        graph.reset_g()
        for vid, d in search.dist.items():
            graph[vid].g = d
        return SearchResult(SearchStatus.PRECOMPUTED, num_visited=search.num_visited)

    if goal is None:
        raise ValueError("Goal vertex is required unless precomputing")

    search = BestFirstSearch(graph, start, goal, heuristic, observer)
    signal = search.run()
    if signal is not ExpansionSignal.GOAL_REACHED:
        return SearchResult(SearchStatus.NO_PATH, num_visited=search.num_visited)

    path = search.backtrack(goal)
    result = SearchResult(SearchStatus.FOUND, path=path, num_visited=search.num_visited,
                          cost=search.dist[goal])
    if use_full_collision_check:
        _validate_path(graph, path, is_valid, motion_validator, result)
        if result.invalid_vertices or result.invalid_edges:
            result.status = SearchStatus.RETRY
            result.path = []
            result.cost = math.inf
    return result


def run_collision_aware_search(graph: Graph,
                               heuristic: Optional[Heuristic],
                               start: int,
                               goal: int,
                               max_retries: int,
                               is_valid: Optional[Callable[[State], bool]] = None,
                               motion_validator: Optional[Callable[[State, State], bool]] = None,
                               observer: Optional[IPlannerObserver] = None) -> SearchResult:
    """
    反复搜索，直到找到完全有效的路径、无路可走或重试次数用尽
    重试用尽时返回 NO_PATH (下一轮会在更新后的图上继续)
    """
    observer = observer if observer is not None else EfficientObserver()
    total_visited = 0
    invalid_vertices: List[int] = []
    invalid_edges: List[tuple] = []
    for attempt in range(1, max_retries + 2):
        result = compute_shortest_path(graph, heuristic, start, goal,
                                       use_full_collision_check=True,
                                       is_valid=is_valid,
                                       motion_validator=motion_validator,
                                       observer=observer)
        total_visited += result.num_visited
        invalid_vertices.extend(result.invalid_vertices)
        invalid_edges.extend(result.invalid_edges)
        if result.status is not SearchStatus.RETRY:
            result.num_visited = total_visited
            result.invalid_vertices = invalid_vertices
            result.invalid_edges = invalid_edges
            result.attempts = attempt
            return result

    observer.log("Search retries exhausted", level='DEBUG',
                 payload={'retries': max_retries, 'blacklisted': len(invalid_vertices),
                          'invalid_edges': len(invalid_edges)})
    return SearchResult(SearchStatus.NO_PATH, num_visited=total_visited,
                        invalid_vertices=invalid_vertices, invalid_edges=invalid_edges,
                        attempts=max_retries + 1)
