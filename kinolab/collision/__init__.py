# kinolab/collision/__init__.py

from .config import CollisionConfig, CollisionMethod
from .checker import CollisionChecker
from .validity import StateValidityChecker
# geometry 作为底层库，不直接暴露到顶层

__all__ = [
    "CollisionConfig",
    "CollisionMethod",
    "CollisionChecker",
    "StateValidityChecker",
]
