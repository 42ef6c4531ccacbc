# kinolab/collision/checker.py
import math
import numpy as np

from kinolab.vehicles.base import VehicleBase, State
from kinolab.map.base import OccupancyMap
from .config import CollisionConfig, CollisionMethod
from .geometry import check_sat_polygon_collision, get_grid_aabb_polygon, circle_overlaps_cells

class CollisionChecker:
    def __init__(self, config: CollisionConfig = None):
        if config is None:
            self.config = CollisionConfig()
        else:
            self.config = config

    def check(self, vehicle: VehicleBase, state: State, grid_map: OccupancyMap) -> bool:
        """
        统一入口：检查特定状态下车辆是否碰撞
        只读访问地图与车辆，可在多个线程中并发调用。
        :return: True 表示碰撞 (不安全), False 表示安全
        """
        inflation = self.config.extra_inflation

        # --- Phase 1: Broad Phase (粗筛 - 外接圆) ---
        # 注意：这里的 radius 已经包含了 safe_margin
        bx, by, b_radius = vehicle.get_bounding_circle(state)
        b_radius += inflation

        # 1.1 地图边界检查，出界视为碰撞
        x_min, x_max, y_min, y_max = grid_map.extent
        if (bx - b_radius < x_min or bx + b_radius > x_max or
            by - b_radius < y_min or by + b_radius > y_max):
            return True

        # 1.2 外接圆内没有任何障碍物 -> 一定安全
        if not self._check_circle_in_grid(bx, by, b_radius, grid_map):
            return False

        # --- Phase 2: Narrow Phase (精细检测) ---
        if self.config.method == CollisionMethod.CIRCLE_ONLY:
            # 仅用圆检测，且通过了 1.2 的筛选(说明撞了)
            return True

        elif self.config.method == CollisionMethod.MULTI_CIRCLE:
            cx_list, cy_list, radius = vehicle.get_collision_circles(state)
            for cx, cy in zip(cx_list, cy_list):
                if self._check_circle_in_grid(cx, cy, radius + inflation, grid_map):
                    return True
            return False

        elif self.config.method == CollisionMethod.POLYGON:
            poly_coords = vehicle.get_collision_polygon(state)
            return self._check_polygon_in_grid(poly_coords, grid_map)

        return False

    def _cell_window(self, x_lo: float, y_lo: float, x_hi: float, y_hi: float, grid_map: OccupancyMap):
        """物理 AABB -> 裁剪后的栅格索引窗口"""
        ix0, iy0 = grid_map.world_to_grid(x_lo, y_lo)
        ix1, iy1 = grid_map.world_to_grid(x_hi, y_hi)
        ix0, iy0 = max(ix0, 0), max(iy0, 0)
        height, width = grid_map.shape
        ix1, iy1 = min(ix1, width - 1), min(iy1, height - 1)
        return ix0, iy0, ix1, iy1

    def _check_circle_in_grid(self, cx: float, cy: float, radius: float, grid_map: OccupancyMap) -> bool:
        """
        检查单个圆是否覆盖了任何障碍物网格
        [优化] 先切出外接矩形窗口，再对窗口内的障碍格子做向量化的最近点距离判断
        """
        ix0, iy0, ix1, iy1 = self._cell_window(cx - radius, cy - radius, cx + radius, cy + radius, grid_map)
        if ix0 > ix1 or iy0 > iy1:
            return False

        window = grid_map.data[iy0:iy1 + 1, ix0:ix1 + 1]
        if not window.any():
            return False

        ys, xs = np.nonzero(window == 1)
        res = grid_map.resolution
        ox, oy = grid_map.origin
        cell_cx = ox + (xs + ix0 + 0.5) * res
        cell_cy = oy + (ys + iy0 + 0.5) * res
        return circle_overlaps_cells(cx, cy, radius, cell_cx, cell_cy, res / 2.0)

    def _check_polygon_in_grid(self, poly_coords: np.ndarray, grid_map: OccupancyMap) -> bool:
        """
        检查多边形是否碰到障碍物
        """
        # 1. 多边形 AABB，减少遍历范围
        min_x, min_y = np.min(poly_coords, axis=0)
        max_x, max_y = np.max(poly_coords, axis=0)
        ix0, iy0, ix1, iy1 = self._cell_window(min_x, min_y, max_x, max_y, grid_map)
        if ix0 > ix1 or iy0 > iy1:
            return False

        window = grid_map.data[iy0:iy1 + 1, ix0:ix1 + 1]
        ys, xs = np.nonzero(window == 1)

        # 2. 对范围内每个障碍格子做 SAT
        for x, y in zip(xs + ix0, ys + iy0):
            grid_poly = get_grid_aabb_polygon(x, y, grid_map.resolution, grid_map.origin)
            if check_sat_polygon_collision(poly_coords, grid_poly):
                return True
        return False
