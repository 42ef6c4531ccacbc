# kinolab/planning/graphs/control.py
import math
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

import numpy as np

from kinolab.types import State
from kinolab.vehicles.base import VehicleBase, Control
from kinolab.planning.config import AITStarKinConfig
from kinolab.planning.costs.base import CostFunction
from kinolab.planning.interfaces import IPlannerObserver
from kinolab.planning.nearest_neighbors import NearestNeighborsIndex
from kinolab.planning.space import StateSpace
from kinolab.visualization.observers import EfficientObserver
from .graph import Graph


@dataclass
class ControlProposal:
    control: Control
    steps: int
    state: State                 # 传播终点
    trajectory: List[State]      # 含起点的完整轨迹
    error: float                 # 终点与目标的平面距离


class DirectedControlSampler:
    """
    定向控制采样
    候选 0 为车辆的解析定向控制，其后是 k 个随机 (control, steps)；
    按落点误差从小到大尝试，返回第一条整条轨迹都有效的候选。
    """
    def __init__(self,
                 vehicle: VehicleBase,
                 is_valid: Callable[[State], bool],
                 step_size: float,
                 min_steps: int,
                 max_steps: int,
                 k_number_of_controls: int = 1):
        self.vehicle = vehicle
        self.is_valid = is_valid
        self.step_size = step_size
        self.min_steps = min_steps
        self.max_steps = max_steps
        self.k_number_of_controls = k_number_of_controls

    def candidates(self, source: State, target: State, rng: np.random.Generator) -> List[tuple]:
        result = []
        analytic = self.vehicle.steer_towards(source, target, self.step_size, self.min_steps, self.max_steps)
        if analytic is not None:
            result.append(analytic)
        for _ in range(self.k_number_of_controls):
            steps = int(rng.integers(self.min_steps, self.max_steps + 1))
            result.append((self.vehicle.sample_control(rng), steps))
        return result

    def sample_to(self,
                  source: State,
                  target: State,
                  rng: np.random.Generator,
                  tolerance: float = math.inf) -> Optional[ControlProposal]:
        """
        :param tolerance: 落点误差超过此值的候选直接丢弃，不做轨迹检查
        """
        scored = []
        for order, (control, steps) in enumerate(self.candidates(source, target, rng)):
            end = self.vehicle.kinematic_propagate(source, control, steps * self.step_size)
            error = math.hypot(end.x - target.x, end.y - target.y)
            if error <= tolerance:
                scored.append((error, order, control, steps))
        scored.sort(key=lambda item: (item[0], item[1]))

        for error, _, control, steps in scored:
            trajectory = self.vehicle.propagate_trajectory(source, control, steps, self.step_size)
            if all(self.is_valid(s) for s in trajectory[1:]):
                return ControlProposal(control=control, steps=steps, state=trajectory[-1],
                                       trajectory=trajectory, error=error)
        return None


class ControlGraphExpander:
    """
    控制图 (有向，满足动力学) 的扩展

    - 源顶点: 离样本最近的、未被拉黑的控制图顶点
    - 目标: 样本位置截断到 max_dist_between_vertices 以内
    - 只有落点在 min_dist_between_vertices 以内 (传播精度检查) 且轨迹有效时才加入
    - 目标顶点是一个虚拟汇点：进入 goal_tolerance 的顶点以零权重边连到它
    """
    def __init__(self,
                 graph: Graph,
                 nn: NearestNeighborsIndex,
                 space: StateSpace,
                 objective: CostFunction,
                 control_sampler: DirectedControlSampler,
                 config: AITStarKinConfig,
                 goal_id: int,
                 goal_tolerance: float,
                 observer: Optional[IPlannerObserver] = None):
        self.graph = graph
        self.nn = nn
        self.space = space
        self.objective = objective
        self.control_sampler = control_sampler
        self.config = config
        self.goal_id = goal_id
        self.goal_state = graph[goal_id].state
        self.goal_tolerance = goal_tolerance
        self.observer = observer if observer is not None else EfficientObserver()
        self.num_rejected = 0
        self.goal_connections = 0

    def expand(self, samples: Iterable[State], rng: np.random.Generator) -> List[int]:
        new_ids = []
        for sample in samples:
            if rng.random() < self.config.goal_bias:
                sample = self.goal_state
            vid = self.extend_towards(sample, rng)
            if vid is None:
                continue
            new_ids.append(vid)
            extra = self.try_connect_goal(vid, rng)
            if extra is not None:
                new_ids.append(extra)
        return new_ids

    def nearest_source(self, state: State) -> Optional[int]:
        for vid in self.nn.k_nearest(state, self.config.max_neighbors):
            if vid != self.goal_id and not self.graph[vid].blacklisted:
                return vid
        return None

    def truncate(self, source: State, target: State) -> State:
        dist = self.space.position_distance(source, target)
        if dist <= self.config.max_dist_between_vertices:
            return target
        return self.space.interpolate(source, target, self.config.max_dist_between_vertices / dist)

    def extend_towards(self, sample: State, rng: np.random.Generator) -> Optional[int]:
        source_id = self.nearest_source(sample)
        if source_id is None:
            return None
        source = self.graph[source_id].state
        target = self.truncate(source, sample)

        proposal = self.control_sampler.sample_to(source, target, rng,
                                                  tolerance=self.config.min_dist_between_vertices)
        if proposal is None:
            self.num_rejected += 1
            return None
        return self._add_proposal(source_id, proposal)

    def _add_proposal(self, source_id: int, proposal: ControlProposal) -> int:
        vid = self.graph.add_vertex(proposal.state, proposal.control, proposal.steps)
        # 轨迹在生成时已经整体检查过
        self.graph[vid].validity_checked = True
        weight = self.objective.trajectory_cost(proposal.trajectory)
        self.graph.add_edge(source_id, vid, weight)
        self.graph.mark_edge_checked(source_id, vid)
        self.nn.insert(self.graph[vid])
        self.observer.record_edge(self.graph[source_id].state, proposal.state)
        return vid

    def _link_goal(self, vid: int):
        if self.graph.add_edge(vid, self.goal_id, 0.0):
            self.graph.mark_edge_checked(vid, self.goal_id)
            self.goal_connections += 1

    def try_connect_goal(self, vid: int, rng: np.random.Generator) -> Optional[int]:
        """
        顶点已在目标容差内: 直接连到目标汇点
        顶点在 max_dist 以内: 尝试一次定向连接到目标位置
        :return: 为连接目标而新增的顶点 id (若有)
        """
        state = self.graph[vid].state
        dist = self.space.position_distance(state, self.goal_state)
        if dist <= self.goal_tolerance:
            self._link_goal(vid)
            return None
        if dist > self.config.max_dist_between_vertices:
            return None

        proposal = self.control_sampler.sample_to(state, self.goal_state, rng, tolerance=self.goal_tolerance)
        if proposal is None:
            return None
        landing = self._add_proposal(vid, proposal)
        self._link_goal(landing)
        return landing
