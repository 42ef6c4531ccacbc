# kinolab/__init__.py
# 运动学/动力学约束下的 anytime 采样规划实验库

from .types import State

__version__ = "0.3.0"

__all__ = ["State", "__version__"]
