"""Extended Unified Camera Model (EUCM) for fisheye and wide-angle cameras."""

__version__ = "0.1.0"

from . import calibration
from . import utils
from .calibration import (
    CameraPoints,
    EucmParams,
    IntrinsicModel,
    Pixels,
    RayBundle,
)

__all__ = [
    "calibration",
    "utils",
    "CameraPoints",
    "EucmParams",
    "IntrinsicModel",
    "Pixels",
    "RayBundle",
]
