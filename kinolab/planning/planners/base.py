# kinolab/planning/planners/base.py
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from kinolab.types import State
from kinolab.planning.interfaces import IPlannerObserver


class PlannerConfigurationError(ValueError):
    """规划问题本身不合法 (起终点越界、起点无效、未设置问题等)，在采样之前抛出"""


class PlannerStatus(Enum):
    FOUND = "found"                # 找到满足动力学的控制路径
    APPROXIMATE = "approximate"    # 只有几何路径 (忽略动力学)
    NOT_FOUND = "not_found"        # 跑完了若干轮仍然没有任何路径
    TIMEOUT = "timeout"            # 一轮都没跑完就终止了


class PlannerPhase(Enum):
    INITIALIZED = "initialized"
    SAMPLING = "sampling"
    EXPANDING = "expanding"
    SEARCHING = "searching"
    IMPROVED = "improved"
    NO_IMPROVEMENT = "no_improvement"
    TERMINATED = "terminated"


class PlannerBase(ABC):
    """
    所有路径规划器的抽象基类
    """

    @abstractmethod
    def plan(self,
             start: State,
             goal: State,
             time_budget: float,
             debugger: Optional[IPlannerObserver] = None) -> List[State]:
        """
        执行路径规划
        :param start: 起点状态
        :param goal: 目标状态
        :param time_budget: 墙钟时间预算 [s]
        :param debugger: 观察者钩子 (用于记录搜索过程)
        :return: 路径点列表 (如果失败返回空列表)
        """
        pass
