"""
Camera model modules.

This package provides the Extended Unified Camera Model, the batched
coordinate containers it operates on, and the model-agnostic interface that
downstream geometry code programs against.

Classes:
    EucmParams: EUCM intrinsic parameters with project / unproject.
    Pixels: Pixel coordinate table (N, 2).
    CameraPoints: Camera-frame point table (N, 3).
    RayBundle: Unit rays from the optical center (N, 3).
    IntrinsicModel: Protocol implemented by camera models.
    RoundtripResult: Outcome of a round-trip check.

Standalone Functions:
    pixels_to_rays: Unproject pixels with any model.
    points_to_pixels: Project points with any model.
    reprojection_error: Per-pixel unproject/project error.
    generate_pixel_grid: Regular pixel grid over a sensor.
    roundtrip_intrinsics: Round-trip error statistics over a grid.
    assert_roundtrip: Round-trip check that raises on failure.

The JSON / YAML interchange format lives in the optional
calibration.serialization module, which is not imported here.

Example Usage:
    >>> from eucm_camera.calibration import EucmParams, Pixels
    >>>
    >>> params = EucmParams(fx=712.5, fy=711.9, cx=961.3, cy=539.8,
    ...                     alpha=0.62, beta=1.04)
    >>> rays = params.pixel_to_ray(Pixels(pixels))
    >>> recovered = params.point_to_pixel(rays.point_on_ray())
"""

from .bundles import CameraPoints, Pixels, RayBundle
from .intrinsics import EucmParams
from .projection import (
    IntrinsicModel,
    pixels_to_rays,
    points_to_pixels,
    reprojection_error,
)
from .roundtrip import (
    RoundtripResult,
    assert_roundtrip,
    generate_pixel_grid,
    roundtrip_intrinsics,
)

__all__ = [
    # Classes
    "EucmParams",
    "Pixels",
    "CameraPoints",
    "RayBundle",
    "IntrinsicModel",
    "RoundtripResult",
    # Standalone functions
    "pixels_to_rays",
    "points_to_pixels",
    "reprojection_error",
    "generate_pixel_grid",
    "roundtrip_intrinsics",
    "assert_roundtrip",
]
