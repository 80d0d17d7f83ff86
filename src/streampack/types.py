from __future__ import annotations

from enum import IntEnum
from typing import NamedTuple, TypeAlias

import numpy as np
from jaxtyping import Float

NpAngleGrid: TypeAlias = Float[np.ndarray, "H W"]
NpVectorComponent: TypeAlias = Float[np.ndarray, "H W"]
NpPoints: TypeAlias = Float[np.ndarray, "N 2"]
NpCurveRows: TypeAlias = Float[np.ndarray, "N 5"]


class Direction(IntEnum):
    BACKWARD = 0
    FORWARD = 1


class Point(NamedTuple):
    x: float
    y: float
