# kinolab/map/grid_map.py
import numpy as np
import math
from .base import OccupancyMap
from typing import Tuple
from scipy.ndimage import distance_transform_edt

class GridMap(OccupancyMap):
    def __init__(self, width: int, height: int, resolution: float = 0.1,
                 origin: Tuple[float, float] = (0.0, 0.0)):
        if width <= 0 or height <= 0:
            raise ValueError(f"GridMap size must be positive, got {width}x{height}")
        if resolution <= 0:
            raise ValueError(f"GridMap resolution must be positive, got {resolution}")
        self._resolution = resolution
        self._origin = (float(origin[0]), float(origin[1]))
        self._grid = np.zeros((height, width), dtype=np.int8)  # 初始化全 0 (空闲)，int8 节省内存
        self._dist_map = None

    @classmethod
    def from_bounds(cls, x_min: float, x_max: float, y_min: float, y_max: float,
                    resolution: float = 0.1) -> "GridMap":
        """按物理范围创建地图，例如 [-20, 20] x [-20, 20]"""
        width = int(math.ceil((x_max - x_min) / resolution - 1e-9))
        height = int(math.ceil((y_max - y_min) / resolution - 1e-9))
        return cls(width, height, resolution, origin=(x_min, y_min))

    @property
    def data(self) -> np.ndarray:
        return self._grid

    @property
    def resolution(self) -> float:
        return self._resolution

    @property
    def origin(self) -> Tuple[float, float]:
        return self._origin

    @property
    def width(self) -> int:
        return self._grid.shape[1]

    @property
    def height(self) -> int:
        return self._grid.shape[0]

    def world_to_grid(self, x: float, y: float) -> Tuple[int, int]:
        """
        物理坐标 -> 栅格索引
        向下取整：floor((x - origin) / res)，原点可以为负，所以不能用 int() 截断
        """
        x_idx = int(math.floor((x - self._origin[0]) / self._resolution))
        y_idx = int(math.floor((y - self._origin[1]) / self._resolution))
        return x_idx, y_idx

    def _is_valid_index(self, x_idx: int, y_idx: int) -> bool:
        """内部辅助：检查索引边界"""
        return (0 <= x_idx < self.width) and (0 <= y_idx < self.height)

    def is_obstacle_at_point(self, x: float, y: float) -> bool:
        """直接查询物理点是否是障碍，越界通常视为障碍"""
        ix, iy = self.world_to_grid(x, y)
        if not self._is_valid_index(ix, iy):
            return True
        return bool(self._grid[iy, ix] == 1)

    def add_rectangle_obstacle(self, x_min: float, y_min: float, x_max: float, y_max: float):
        """
        将物理矩形区域内的格子标记为障碍物 (闭区间，覆盖到的格子都算)
        """
        ix0, iy0 = self.world_to_grid(x_min, y_min)
        ix1, iy1 = self.world_to_grid(x_max, y_max)
        ix0, ix1 = max(ix0, 0), min(ix1, self.width - 1)
        iy0, iy1 = max(iy0, 0), min(iy1, self.height - 1)
        if ix0 > ix1 or iy0 > iy1:
            return
        self._grid[iy0:iy1 + 1, ix0:ix1 + 1] = 1
        # 地图变化后距离场失效
        self._dist_map = None

    def precompute_distance_map(self):
        """
        计算欧氏距离变换 (Euclidean Distance Transform, EDT)。
        结果存储在 self._dist_map 中，单位为米。
        """
        # distance_transform_edt 计算的是“当前像素离最近的0值像素的距离”
        # 所以需要：障碍物=0, 空闲=1
        binary_grid = np.ones_like(self._grid, dtype=float)
        binary_grid[self._grid == 1] = 0

        dist_in_cells = distance_transform_edt(binary_grid)
        self._dist_map = dist_in_cells * self._resolution

    @property
    def has_distance_map(self) -> bool:
        return self._dist_map is not None

    def get_obstacle_distance(self, x: float, y: float) -> float:
        """
        获取指定坐标离最近障碍物的距离 (米)。
        越界返回 0.0 (视为贴着障碍物/最危险)。
        """
        if self._dist_map is None:
            # 懒加载
            self.precompute_distance_map()

        ix, iy = self.world_to_grid(x, y)

        if not self._is_valid_index(ix, iy):
            return 0.0

        return float(self._dist_map[iy, ix])
