# kinolab/planning/graphs/__init__.py
from .graph import Vertex, Graph
from .geometric import GeometricGraphExpander, unit_ball_measure
from .control import ControlProposal, DirectedControlSampler, ControlGraphExpander

__all__ = [
    "Vertex",
    "Graph",
    "GeometricGraphExpander",
    "unit_ball_measure",
    "ControlProposal",
    "DirectedControlSampler",
    "ControlGraphExpander",
]
