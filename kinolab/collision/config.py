# kinolab/collision/config.py
from enum import Enum
from dataclasses import dataclass

class CollisionMethod(Enum):
    # 仅使用外接圆检测 (最快，但非常保守，无法穿过狭窄区域)
    CIRCLE_ONLY = 0

    # 多圆覆盖检测 (速度快，精度较高，适合 Ackermann)
    MULTI_CIRCLE = 1

    # 多边形 SAT 检测 (最精确，计算量大，适合事后验证或高精度场景)
    POLYGON = 2

@dataclass
class CollisionConfig:
    method: CollisionMethod = CollisionMethod.MULTI_CIRCLE
    # 检测层额外膨胀 (车辆模型内部已经处理了 safe_margin，通常为 0)
    extra_inflation: float = 0.0

    def __post_init__(self):
        if self.extra_inflation < 0:
            raise ValueError("extra_inflation must be non-negative")
