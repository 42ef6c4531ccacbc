# kinolab/planning/samplers/__init__.py
from .base import StateSampler
from .uniform import UniformSampler
from .informed import PathLengthInformedSampler, RejectionInformedSampler, InformedSampler

__all__ = [
    "StateSampler",
    "UniformSampler",
    "PathLengthInformedSampler",
    "RejectionInformedSampler",
    "InformedSampler",
]
