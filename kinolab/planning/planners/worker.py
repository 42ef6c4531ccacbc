# kinolab/planning/planners/worker.py
import math
import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import numpy as np

from kinolab.types import State
from kinolab.vehicles.base import VehicleBase
from kinolab.planning.config import AITStarKinConfig
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.graphs.graph import Graph
from kinolab.planning.graphs.geometric import GeometricGraphExpander
from kinolab.planning.graphs.control import ControlGraphExpander, DirectedControlSampler
from kinolab.planning.heuristics import HeuristicKind, make_heuristic
from kinolab.planning.interfaces import IPlannerObserver
from kinolab.planning.nearest_neighbors import NearestNeighborsIndex
from kinolab.planning.path import PathKind, SolutionPath
from kinolab.planning.samplers.informed import InformedSampler
from kinolab.planning.search import SearchStatus, compute_shortest_path, run_collision_aware_search
from kinolab.planning.space import StateSpace
from kinolab.planning.planners.base import PlannerPhase
from kinolab.visualization.observers import EfficientObserver


class SharedBestCost:
    """worker 之间共享的最优代价，比较并更新在锁内原子完成"""
    def __init__(self):
        self._cost = math.inf
        self._lock = threading.Lock()

    @property
    def cost(self) -> float:
        with self._lock:
            return self._cost

    def offer(self, cost: float) -> bool:
        """cost 严格更优时更新并返回 True"""
        with self._lock:
            if cost < self._cost:
                self._cost = cost
                return True
            return False

    def reset(self):
        with self._lock:
            self._cost = math.inf


@dataclass
class RoundResult:
    worker_id: int
    geometric_path: Optional[SolutionPath] = None
    control_path: Optional[SolutionPath] = None
    stats: Dict[str, float] = field(default_factory=dict)


class PlannerWorker:
    """
    一个独立的规划 worker
    拥有自己的几何图、控制图、最近邻索引、采样器和随机数发生器，
    一轮 = 采样 -> 扩展两张图 -> 预计算启发式 -> 几何搜索 -> 控制搜索
    """
    def __init__(self,
                 worker_id: int,
                 vehicle: VehicleBase,
                 is_valid: Callable[[State], bool],
                 space: StateSpace,
                 objective: CostFunction,
                 config: AITStarKinConfig,
                 start: State,
                 goal: State,
                 goal_tolerance: float,
                 rng: np.random.Generator,
                 phase_callback: Optional[Callable[[PlannerPhase], None]] = None):
        self.worker_id = worker_id
        self.vehicle = vehicle
        self.is_valid = is_valid
        self.space = space
        self.objective = objective
        self.config = config
        self.start = start
        self.goal = goal
        self.rng = rng
        self.observer: IPlannerObserver = EfficientObserver()
        self._phase_callback = phase_callback

        # --- 几何图 ---
        self.geometric_graph = Graph(directed=False)
        self.geometric_nn = NearestNeighborsIndex(space)
        self.geo_start = self.geometric_graph.add_vertex(start)
        self.geo_goal = self.geometric_graph.add_vertex(goal)
        # 起点在 setup 阶段已经检查过
        self.geometric_graph[self.geo_start].validity_checked = True
        self.geometric_nn.insert(self.geometric_graph[self.geo_start])
        self.geometric_nn.insert(self.geometric_graph[self.geo_goal])

        # --- 控制图 ---
        self.control_graph = Graph(directed=True)
        self.control_nn = NearestNeighborsIndex(space)
        self.ctrl_start = self.control_graph.add_vertex(start)
        self.ctrl_goal = self.control_graph.add_vertex(goal)
        self.control_graph[self.ctrl_start].validity_checked = True
        # 目标是虚拟汇点，不作为扩展的源顶点，因此不进入最近邻索引
        self.control_nn.insert(self.control_graph[self.ctrl_start])

        self.sampler = InformedSampler(space, rng, objective, start, goal,
                                       is_valid=is_valid,
                                       max_sampling_attempts=config.max_sampling_attempts)
        self.geometric_expander = GeometricGraphExpander(self.geometric_graph, self.geometric_nn,
                                                         space, objective, config)
        control_sampler = DirectedControlSampler(vehicle, is_valid,
                                                 step_size=config.propagation_step_size,
                                                 min_steps=config.min_control_duration,
                                                 max_steps=config.max_control_duration,
                                                 k_number_of_controls=config.k_number_of_controls)
        self.control_expander = ControlGraphExpander(self.control_graph, self.control_nn, space, objective,
                                                     control_sampler, config,
                                                     goal_id=self.ctrl_goal,
                                                     goal_tolerance=goal_tolerance)
        self._start_goal_checked = False

    def set_observer(self, observer: IPlannerObserver):
        self.observer = observer
        self.sampler.observer = observer
        self.geometric_expander.observer = observer
        self.control_expander.observer = observer

    def _enter(self, phase: PlannerPhase):
        if self._phase_callback is not None:
            self._phase_callback(phase)

    # ------------------------------------------------------------------
    # 辅助
    # ------------------------------------------------------------------
    def compute_number_of_samples_in_informed_set(self, best_cost: float) -> int:
        """几何图中有可能改进当前最优解的顶点数"""
        if not math.isfinite(best_cost):
            return len(self.geometric_graph)
        count = 0
        for vertex in self.geometric_graph.vertices:
            if vertex.blacklisted:
                continue
            bound = (self.objective.cost_heuristic(self.start, vertex.state)
                     + self.objective.cost_heuristic(vertex.state, self.goal))
            if bound < best_cost:
                count += 1
        return count

    def motion_valid(self, a: State, b: State) -> bool:
        """几何边的离散化检查 (端点作为顶点单独检查)"""
        n = int(math.ceil(self.space.position_distance(a, b) / self.config.motion_check_resolution))
        for k in range(1, n):
            if not self.is_valid(self.space.interpolate(a, b, k / n)):
                return False
        return True

    # ------------------------------------------------------------------
    # 一轮
    # ------------------------------------------------------------------
    def run_round(self, best_cost: float) -> RoundResult:
        cfg = self.config

        # 1. 采样 (先拉取全局最优代价收紧 informed set)
        self._enter(PlannerPhase.SAMPLING)
        self.sampler.notify_best_cost(best_cost)
        samples = list(self.sampler.sample(cfg.batch_size, use_valid_only=cfg.use_valid_sampler))

        # 2. 扩展两张图
        self._enter(PlannerPhase.EXPANDING)
        measure = self.sampler.informed_measure()
        num_samples = self.compute_number_of_samples_in_informed_set(self.sampler.best_cost) + len(samples)
        new_geo = self.geometric_expander.expand(samples, num_samples, measure)
        self.geometric_expander.ensure_goal_vertex_connectivity(self.geo_goal, num_samples, measure)
        new_ctrl = []
        if not self._start_goal_checked:
            # 起点本身可能已在目标容差内，或可以一步定向连到目标
            self._start_goal_checked = True
            landing = self.control_expander.try_connect_goal(self.ctrl_start, self.rng)
            if landing is not None:
                new_ctrl.append(landing)
        new_ctrl.extend(self.control_expander.expand(samples, self.rng))

        # 3. 搜索
        self._enter(PlannerPhase.SEARCHING)
        geometric_path = self.search_geometric()
        control_path = self.search_control()

        stats = {
            'samples': len(samples),
            'sampler_mode': self.sampler.mode,
            'new_geometric_vertices': len(new_geo),
            'new_control_vertices': len(new_ctrl),
            'geometric_vertices': self.geometric_graph.num_vertices,
            'geometric_edges': self.geometric_graph.num_edges,
            'control_vertices': self.control_graph.num_vertices,
            'control_rejections': self.control_expander.num_rejected,
        }
        self.observer.log(f"Worker {self.worker_id} round finished", level='DEBUG', payload=stats)
        return RoundResult(self.worker_id, geometric_path, control_path, stats)

    def search_geometric(self) -> Optional[SolutionPath]:
        """
        [关键] 两步:
        1. 从目标出发穷尽几何图，把 cost-to-go 写入每个顶点的 g
        2. 以 g 为启发式从起点做带完整碰撞检查的 A*
        """
        cfg = self.config
        graph = self.geometric_graph

        precompute_h = make_heuristic(HeuristicKind.DISTANCE, objective=self.objective) \
            if cfg.use_astar_heuristic else None
        compute_shortest_path(graph, precompute_h, self.geo_goal, self.geo_start,
                              precompute_heuristic=True, observer=self.observer)
        if not math.isfinite(graph[self.geo_start].g):
            return None

        heuristic = make_heuristic(HeuristicKind.PRECOMPUTED, geometric_graph=graph)
        if cfg.use_full_collision_check:
            result = run_collision_aware_search(graph, heuristic, self.geo_start, self.geo_goal,
                                                max_retries=cfg.max_search_retries,
                                                is_valid=self.is_valid,
                                                motion_validator=self.motion_valid,
                                                observer=self.observer)
        else:
            result = compute_shortest_path(graph, heuristic, self.geo_start, self.geo_goal,
                                           observer=self.observer)
        if result.invalid_vertices:
            self.observer.log("Blacklisted geometric vertices", level='DEBUG',
                              payload={'worker': self.worker_id, 'count': len(result.invalid_vertices)})
        if result.status is not SearchStatus.FOUND:
            return None
        return SolutionPath.from_vertex_path(graph, result.path, PathKind.GEOMETRIC, result.cost)

    def search_control(self) -> Optional[SolutionPath]:
        """控制图上的 A*，启发式来自最近几何顶点的 cost-to-go"""
        cfg = self.config
        heuristic = make_heuristic(HeuristicKind.PRECOMPUTED,
                                   geometric_graph=self.geometric_graph,
                                   lookup=self.geometric_nn,
                                   objective=self.objective,
                                   num_lookup_neighbors=cfg.heuristic_lookup_neighbors)
        result = compute_shortest_path(self.control_graph, heuristic, self.ctrl_start, self.ctrl_goal,
                                       observer=self.observer)
        if result.status is not SearchStatus.FOUND:
            return None
        return SolutionPath.from_vertex_path(self.control_graph, result.path, PathKind.CONTROL, result.cost,
                                             step_size=cfg.propagation_step_size,
                                             zero_control=self.vehicle.zero_control(),
                                             sink_id=self.ctrl_goal)

    def free(self):
        self.geometric_graph.clear()
        self.control_graph.clear()
        self.geometric_nn.clear()
        self.control_nn.clear()
