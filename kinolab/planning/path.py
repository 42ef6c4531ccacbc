# kinolab/planning/path.py
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from kinolab.types import State
from kinolab.vehicles.base import Control, VehicleBase
from kinolab.planning.graphs.graph import Graph


class PathKind(Enum):
    GEOMETRIC = "geometric"
    CONTROL = "control"


@dataclass(frozen=True)
class Waypoint:
    """
    路径点
    control / duration 描述从上一个路径点到达本点的控制与持续时间 [s]，第一个路径点为 None / 0
    """
    state: State
    control: Optional[Control] = None
    duration: float = 0.0


@dataclass
class SolutionPath:
    waypoints: List[Waypoint]
    cost: float
    kind: PathKind

    def __len__(self) -> int:
        return len(self.waypoints)

    @property
    def states(self) -> List[State]:
        return [wp.state for wp in self.waypoints]

    @property
    def controls(self) -> List[Optional[Control]]:
        return [wp.control for wp in self.waypoints[1:]]

    @property
    def durations(self) -> List[float]:
        return [wp.duration for wp in self.waypoints[1:]]

    @property
    def total_duration(self) -> float:
        return sum(self.durations)

    @property
    def length(self) -> float:
        """路径点之间的平面折线长度"""
        states = self.states
        return sum(math.hypot(b.x - a.x, b.y - a.y) for a, b in zip(states, states[1:]))

    @classmethod
    def from_vertex_path(cls,
                         graph: Graph,
                         vertex_ids: Sequence[int],
                         kind: PathKind,
                         cost: float,
                         step_size: float = 0.0,
                         zero_control: Optional[Control] = None,
                         sink_id: Optional[int] = None) -> "SolutionPath":
        """
        把搜索得到的顶点序列组装成路径
        - 控制路径: duration = 步数 * step_size；缺少控制的顶点用 zero_control 占位
        - sink_id: 控制图的虚拟目标汇点，不作为路径点输出
        """
        ids = list(vertex_ids)
        if sink_id is not None and len(ids) > 1 and ids[-1] == sink_id:
            ids.pop()

        waypoints = []
        for i, vid in enumerate(ids):
            vertex = graph[vid]
            if i == 0 or kind is PathKind.GEOMETRIC:
                waypoints.append(Waypoint(vertex.state))
                continue
            control = vertex.control if vertex.control is not None else zero_control
            waypoints.append(Waypoint(vertex.state, control, vertex.control_duration * step_size))
        return cls(waypoints=waypoints, cost=cost, kind=kind)

    def interpolate(self,
                    vehicle: Optional[VehicleBase] = None,
                    step_size: float = 0.1,
                    resolution: float = 0.25) -> List[State]:
        """
        生成密集状态序列
        - 控制路径 (需要 vehicle): 用存储的控制重新传播，step_size 应与规划时一致
        - 几何路径: 按 resolution [m] 线性插值，航向沿最短方向
        """
        if not self.waypoints:
            return []
        dense = [self.waypoints[0].state]

        if self.kind is PathKind.CONTROL:
            if vehicle is None:
                raise ValueError("Interpolating a control path requires a vehicle model")
            for prev, wp in zip(self.waypoints, self.waypoints[1:]):
                steps = int(round(wp.duration / step_size))
                if wp.control is None or steps == 0:
                    dense.append(wp.state)
                    continue
                dense.extend(vehicle.propagate_trajectory(prev.state, wp.control, steps, step_size)[1:])
            return dense

        for prev, wp in zip(self.waypoints, self.waypoints[1:]):
            a, b = prev.state, wp.state
            n = max(1, int(math.ceil(math.hypot(b.x - a.x, b.y - a.y) / resolution)))
            d_theta = VehicleBase.normalize_angle(b.theta_rad - a.theta_rad)
            for k in range(1, n + 1):
                t = k / n
                dense.append(State(a.x + t * (b.x - a.x),
                                   a.y + t * (b.y - a.y),
                                   VehicleBase.normalize_angle(a.theta_rad + t * d_theta),
                                   a.v + t * (b.v - a.v)))
        return dense
