# kinolab/planning/termination.py
import time
from typing import Callable, Union

TerminationCondition = Callable[[], bool]


def timed_termination(seconds: float) -> TerminationCondition:
    """墙钟时间预算，从创建时开始计时"""
    if seconds < 0:
        raise ValueError("Time budget must be non-negative")
    deadline = time.monotonic() + seconds

    def _done() -> bool:
        return time.monotonic() >= deadline
    return _done


def iteration_termination(max_rounds: int) -> TerminationCondition:
    """
    轮次预算：规划器每轮开始前轮询一次，
    前 max_rounds 次返回 False，之后返回 True
    """
    if max_rounds < 0:
        raise ValueError("max_rounds must be non-negative")
    polls = [0]

    def _done() -> bool:
        polls[0] += 1
        return polls[0] > max_rounds
    return _done


def any_of(*conditions: TerminationCondition) -> TerminationCondition:
    def _done() -> bool:
        return any(cond() for cond in conditions)
    return _done


def as_termination(condition: Union[TerminationCondition, float, int]) -> TerminationCondition:
    """数字视为秒数"""
    if isinstance(condition, (int, float)) and not isinstance(condition, bool):
        return timed_termination(float(condition))
    if callable(condition):
        return condition
    raise TypeError(f"Unsupported termination condition: {condition!r}")
