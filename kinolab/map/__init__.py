# kinolab/map/__init__.py

from .base import OccupancyMap
from .grid_map import GridMap

__all__ = ["OccupancyMap", "GridMap"]
