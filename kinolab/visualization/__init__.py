# kinolab/visualization/__init__.py
from .observers import EfficientObserver, ExperimentObserver, DebugObserver

__all__ = ["EfficientObserver", "ExperimentObserver", "DebugObserver"]
