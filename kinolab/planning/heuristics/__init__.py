# kinolab/planning/heuristics/__init__.py
from enum import Enum

from .base import Heuristic
from .distance import DistanceHeuristic
from .zero import ZeroHeuristic
from .precomputed import PrecomputedCostHeuristic


class HeuristicKind(Enum):
    DISTANCE = "distance"
    PRECOMPUTED = "precomputed"
    ZERO = "zero"


def make_heuristic(kind: HeuristicKind, **kwargs) -> Heuristic:
    """
    根据类型构造启发式
    DISTANCE 需要 objective；PRECOMPUTED 需要 geometric_graph (跨图模式另需 lookup/objective)
    """
    if kind is HeuristicKind.DISTANCE:
        return DistanceHeuristic(kwargs["objective"])
    if kind is HeuristicKind.PRECOMPUTED:
        return PrecomputedCostHeuristic(**kwargs)
    if kind is HeuristicKind.ZERO:
        return ZeroHeuristic()
    raise ValueError(f"Unknown heuristic kind: {kind}")


__all__ = [
    "Heuristic",
    "DistanceHeuristic",
    "ZeroHeuristic",
    "PrecomputedCostHeuristic",
    "HeuristicKind",
    "make_heuristic",
]
