# kinolab/planning/config.py
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ConnectionStrategy(Enum):
    RADIUS = "radius"          # 连接半径内的所有顶点
    K_NEAREST = "k_nearest"    # 连接 k 个最近邻


@dataclass
class AITStarKinConfig:
    """
    AIT*-Kinodynamic 规划器参数
    """
    # --- 并发 ---
    num_threads: int = 1            # 独立 worker 个数，每个 worker 拥有自己的两张图
    seed: Optional[int] = None      # 随机种子 (None = 每次不同)

    # --- 采样 ---
    batch_size: int = 1000
    use_valid_sampler: bool = False     # 采样时就调用有效性检查
    max_sampling_attempts: int = 100    # 单个样本的最大重试次数
    goal_bias: float = 0.05             # 控制图扩展时用目标代替样本的概率

    # --- 几何图 (RGG) ---
    connection_strategy: ConnectionStrategy = ConnectionStrategy.K_NEAREST
    rewire_factor: float = 1.0
    max_neighbors: int = 10
    radius: float = math.inf            # 连接半径上限
    min_dist_between_vertices: float = 0.1
    max_dist_between_vertices: float = 3.0
    motion_check_resolution: float = 0.1    # 几何边的离散检查步长 [m]

    # --- 控制图 ---
    k_number_of_controls: int = 1       # 解析定向控制之外的随机候选个数
    propagation_step_size: float = 0.1  # [s]
    min_control_duration: int = 1       # 步数
    max_control_duration: int = 30      # 步数
    goal_tolerance: float = 0.05        # [m] 视为到达目标的平面距离

    # --- 搜索 ---
    use_astar_heuristic: bool = False   # 预计算阶段使用 A* 代替 Dijkstra
    use_full_collision_check: bool = True
    max_search_retries: int = 32
    heuristic_lookup_neighbors: int = 3  # 控制图搜索时查询的几何顶点个数

    def __post_init__(self):
        if self.num_threads < 1:
            raise ValueError("num_threads must be >= 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        if self.max_sampling_attempts < 1:
            raise ValueError("max_sampling_attempts must be >= 1")
        if not 0.0 <= self.goal_bias <= 1.0:
            raise ValueError("goal_bias must be within [0, 1]")
        if self.rewire_factor <= 0:
            raise ValueError("rewire_factor must be positive")
        if self.max_neighbors < 1:
            raise ValueError("max_neighbors must be >= 1")
        if self.radius <= 0:
            raise ValueError("radius must be positive")
        if self.min_dist_between_vertices < 0:
            raise ValueError("min_dist_between_vertices must be non-negative")
        if self.max_dist_between_vertices <= self.min_dist_between_vertices:
            raise ValueError("max_dist_between_vertices must exceed min_dist_between_vertices")
        if self.motion_check_resolution <= 0:
            raise ValueError("motion_check_resolution must be positive")
        if self.k_number_of_controls < 0:
            raise ValueError("k_number_of_controls must be non-negative")
        if self.propagation_step_size <= 0:
            raise ValueError("propagation_step_size must be positive")
        if not 1 <= self.min_control_duration <= self.max_control_duration:
            raise ValueError("Control durations must satisfy 1 <= min <= max")
        if self.goal_tolerance < 0:
            raise ValueError("goal_tolerance must be non-negative")
        if self.max_search_retries < 0:
            raise ValueError("max_search_retries must be non-negative")
        if self.heuristic_lookup_neighbors < 1:
            raise ValueError("heuristic_lookup_neighbors must be >= 1")
