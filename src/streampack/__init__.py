from . import curve, density, export, field, placement, seeds, tracer
from .curve import Curve
from .density import DensityGrid
from .field import FlowField
from .placement import PlacementStats, even_spaced_curves, non_overlapping_curves
from .types import Direction, Point

__all__ = [
    "curve",
    "density",
    "export",
    "field",
    "placement",
    "seeds",
    "tracer",
    "Curve",
    "DensityGrid",
    "Direction",
    "FlowField",
    "PlacementStats",
    "Point",
    "even_spaced_curves",
    "non_overlapping_curves",
]
