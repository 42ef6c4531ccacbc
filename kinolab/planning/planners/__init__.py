# kinolab/planning/planners/__init__.py

from .base import PlannerBase, PlannerConfigurationError, PlannerPhase, PlannerStatus
from .worker import PlannerWorker, RoundResult, SharedBestCost
from .ait_star_kin import AITStarKinPlanner


__all__ = [
    "PlannerBase",
    "PlannerConfigurationError",
    "PlannerPhase",
    "PlannerStatus",
    "PlannerWorker",
    "RoundResult",
    "SharedBestCost",
    "AITStarKinPlanner",
]
