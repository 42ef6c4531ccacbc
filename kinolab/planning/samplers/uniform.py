# kinolab/planning/samplers/uniform.py
from typing import Optional

from kinolab.types import State
from .base import StateSampler


class UniformSampler(StateSampler):
    """状态空间边界内的均匀采样"""
    def sample_one(self) -> Optional[State]:
        return self.space.sample_uniform(self.rng)
