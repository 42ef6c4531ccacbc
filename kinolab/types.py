# kinolab/types.py
from dataclasses import dataclass


@dataclass(frozen=True)
class State:
    """
    统一的车辆状态定义
    创建后不可修改 (frozen)，由持有它的图顶点负责生命周期。
    """
    x: float             # [m]
    y: float             # [m]
    theta_rad: float     # [rad] 注意：为了明确单位，建议保留 _rad 后缀
    v: float = 0.0       # [m/s] 纵向速度 (质点模型中不使用)

    def as_tuple(self):
        return (self.x, self.y, self.theta_rad, self.v)
