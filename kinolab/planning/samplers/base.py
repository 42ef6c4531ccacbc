# kinolab/planning/samplers/base.py
from abc import ABC, abstractmethod
from typing import Callable, Iterator, Optional

import numpy as np

from kinolab.types import State
from kinolab.planning.space import StateSpace
from kinolab.planning.interfaces import IPlannerObserver
from kinolab.visualization.observers import EfficientObserver


class StateSampler(ABC):
    """
    状态采样器基类
    sample() 是一个有限的惰性生成器，每个 batch 重新调用即可
    """
    def __init__(self,
                 space: StateSpace,
                 rng: np.random.Generator,
                 is_valid: Optional[Callable[[State], bool]] = None,
                 max_sampling_attempts: int = 100,
                 observer: Optional[IPlannerObserver] = None):
        self.space = space
        self.rng = rng
        self.is_valid = is_valid
        self.max_sampling_attempts = max_sampling_attempts
        self.observer = observer if observer is not None else EfficientObserver()
        self.num_exhausted = 0

    @abstractmethod
    def sample_one(self) -> Optional[State]:
        """单次尝试，返回 None 表示本次被拒绝"""
        pass

    def sample(self, n: int, use_valid_only: bool = False) -> Iterator[State]:
        """
        生成至多 n 个样本
        单个样本超过 max_sampling_attempts 次仍未成功时跳过，本批次相应变小
        """
        check_valid = use_valid_only and self.is_valid is not None
        exhausted = 0
        for _ in range(n):
            state = None
            for _ in range(self.max_sampling_attempts):
                candidate = self.sample_one()
                if candidate is None:
                    continue
                if check_valid and not self.is_valid(candidate):
                    continue
                state = candidate
                break
            if state is None:
                exhausted += 1
                continue
            yield state

        if exhausted:
            self.num_exhausted += exhausted
            self.observer.log(f"Sampling exhausted for {exhausted}/{n} samples", level='WARN',
                              payload={'attempts': self.max_sampling_attempts})
