# kinolab/planning/costs/__init__.py

from .base import CostFunction
from .distance_cost import DistanceCost
from .clearance_cost import ClearanceCost

__all__ = ['CostFunction', 'DistanceCost', 'ClearanceCost']
