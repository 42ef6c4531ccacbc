# [入口] 负责暴露类，让外部调用更简洁

# kinolab/vehicles/__init__.py

from .base import VehicleBase, State, Control
from .config import VehicleConfig, AckermannConfig, PointMassConfig
from .ackermann import AckermannVehicle
from .point_mass import PointMassVehicle

__all__ = [
    "VehicleBase",
    "State",
    "Control",
    "VehicleConfig",
    "AckermannConfig",
    "PointMassConfig",
    "AckermannVehicle",
    "PointMassVehicle",
]
