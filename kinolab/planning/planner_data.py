# kinolab/planning/planner_data.py
import math
from dataclasses import dataclass, field
from typing import List

import networkx as nx

from kinolab.planning.graphs.graph import Graph


def graph_to_networkx(graph: Graph) -> nx.Graph:
    """
    内部图 -> networkx 快照 (几何图为 Graph，控制图为 DiGraph)
    顶点属性: state, control, control_duration, g, blacklisted；边属性: weight
    """
    snapshot = nx.DiGraph() if graph.directed else nx.Graph()
    for vertex in graph.vertices:
        snapshot.add_node(vertex.id,
                          state=vertex.state,
                          control=vertex.control,
                          control_duration=vertex.control_duration,
                          g=vertex.g,
                          blacklisted=vertex.blacklisted)
    for u, v, w in graph.edges():
        snapshot.add_edge(u, v, weight=w)
    return snapshot


@dataclass
class WorkerSnapshot:
    worker_id: int
    geometric: nx.Graph
    control: nx.DiGraph
    start_id: int
    goal_id: int


@dataclass
class PlannerData:
    """规划过程数据快照，每个 worker 一份"""
    workers: List[WorkerSnapshot] = field(default_factory=list)
    best_geometric_cost: float = math.inf
    best_control_cost: float = math.inf
    num_rounds: int = 0

    @property
    def num_geometric_vertices(self) -> int:
        return sum(w.geometric.number_of_nodes() for w in self.workers)

    @property
    def num_control_vertices(self) -> int:
        return sum(w.control.number_of_nodes() for w in self.workers)
