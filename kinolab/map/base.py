# kinolab/map/base.py
from abc import ABC, abstractmethod
from typing import Tuple

import numpy as np


class OccupancyMap(ABC):
    """
    有效性判定与代价函数读取的占据地图接口
    只包含碰撞检测 (栅格窗口 + 世界坐标转换) 与 clearance 代价 (障碍距离) 用到的查询。
    约定：data[y_idx, x_idx]，0 表示空闲，1 表示障碍物。
    """

    @property
    @abstractmethod
    def data(self) -> np.ndarray:
        pass

    @property
    @abstractmethod
    def resolution(self) -> float:
        pass

    @property
    @abstractmethod
    def origin(self) -> Tuple[float, float]:
        """栅格 (0, 0) 左下角对应的世界坐标 (m)"""
        pass

    @abstractmethod
    def world_to_grid(self, x: float, y: float) -> Tuple[int, int]:
        """[关键接口] 物理坐标(m) -> (x_index, y_index)，可能越界，由调用方裁剪"""
        pass

    @abstractmethod
    def is_obstacle_at_point(self, x: float, y: float) -> bool:
        """越界视为障碍"""
        pass

    @abstractmethod
    def get_obstacle_distance(self, x: float, y: float) -> float:
        """离最近障碍物的距离 (m)，越界为 0"""
        pass

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width) 栅格数量"""
        return self.data.shape

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        """(x_min, x_max, y_min, y_max) 物理范围"""
        ox, oy = self.origin
        height, width = self.shape
        return (ox, ox + width * self.resolution,
                oy, oy + height * self.resolution)
