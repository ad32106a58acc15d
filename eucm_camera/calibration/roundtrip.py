"""
Round-Trip Verification of Intrinsic Models.

A camera model's projection must invert its unprojection inside the valid
field of view:

    project(unproject(pixel)) ≈ pixel

This module samples a regular pixel grid over the sensor, unprojects it,
takes the point at unit distance along every ray and projects it back. The
per-coordinate absolute difference to the original grid is the round-trip
error. Typical tolerances are 1e-3 pixels in single precision and 1e-12
pixels in double precision.
"""

from dataclasses import dataclass

import numpy as np

from .bundles import Pixels
from .projection import IntrinsicModel
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Default verification grid: 1920x1080 sensor sampled every 65 pixels
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080
DEFAULT_BORDER = 5
DEFAULT_STEP = 65

DEFAULT_TOLERANCES = {
    "float32": 1e-3,
    "float64": 1e-12,
}


def generate_pixel_grid(
    width: int,
    height: int,
    border: int,
    step: int,
    dtype=np.float64,
) -> Pixels:
    """
    Generate a regular grid of pixel coordinates.

    Rows are ordered with v as the outer loop and u as the inner loop:

        u in range(border, width - border, step)
        v in range(border, height - border, step)

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        border: Pixels excluded along each image edge.
        step: Grid spacing in pixels.
        dtype: Floating type of the returned table.

    Returns:
        Pixels: Grid coordinates (N, 2). Empty when the border covers the
        whole image.

    Raises:
        ValueError: If step is not positive.
    """
    if step <= 0:
        raise ValueError(f"Grid step must be positive, got {step}")

    us = np.arange(border, width - border, step)
    vs = np.arange(border, height - border, step)
    uu, vv = np.meshgrid(us, vs)

    grid = np.stack([uu.ravel(), vv.ravel()], axis=1).astype(dtype)

    return Pixels(grid)


@dataclass(frozen=True)
class RoundtripResult:
    """Outcome of a round-trip check."""

    num_pixels: int
    max_abs_error: float
    mean_abs_error: float
    worst_pixel: tuple
    eps: float

    @property
    def passed(self) -> bool:
        # NaN errors never pass
        return bool(self.max_abs_error <= self.eps)


def roundtrip_intrinsics(
    model: IntrinsicModel,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    border: int = DEFAULT_BORDER,
    step: int = DEFAULT_STEP,
    eps: float = DEFAULT_TOLERANCES["float64"],
    dtype=np.float64,
) -> RoundtripResult:
    """
    Check that point_to_pixel inverts pixel_to_ray on a pixel grid.

    Args:
        model: Camera model implementing IntrinsicModel. Its parameters should
               already be in the precision given by dtype.
        width: Image width in pixels.
        height: Image height in pixels.
        border: Pixels excluded along each image edge.
        step: Grid spacing in pixels.
        eps: Maximum allowed absolute error per coordinate (pixels).
        dtype: Floating type of the pixel grid.

    Returns:
        RoundtripResult: Error statistics over the grid.
    """
    pixels = generate_pixel_grid(width, height, border, step, dtype=dtype)

    rays = model.pixel_to_ray(pixels)
    recovered = model.point_to_pixel(rays.point_on_ray())

    abs_error = np.abs(recovered.data - pixels.data).astype(np.float64)

    if len(pixels) == 0:
        result = RoundtripResult(0, 0.0, 0.0, (), float(eps))
    else:
        per_pixel = abs_error.max(axis=1)
        if np.isnan(per_pixel).any():
            worst = int(np.flatnonzero(np.isnan(per_pixel))[0])
            max_error = float("nan")
        else:
            worst = int(np.argmax(per_pixel))
            max_error = float(per_pixel[worst])

        result = RoundtripResult(
            num_pixels=len(pixels),
            max_abs_error=max_error,
            mean_abs_error=float(np.mean(abs_error)),
            worst_pixel=tuple(float(c) for c in pixels.data[worst]),
            eps=float(eps),
        )

    logger.debug(
        f"Round trip over {result.num_pixels} pixels ({np.dtype(dtype).name}): "
        f"max error {result.max_abs_error:.3e}, eps {result.eps:.1e}"
    )

    return result


def assert_roundtrip(
    model: IntrinsicModel,
    width: int = DEFAULT_WIDTH,
    height: int = DEFAULT_HEIGHT,
    border: int = DEFAULT_BORDER,
    step: int = DEFAULT_STEP,
    eps: float = DEFAULT_TOLERANCES["float64"],
    dtype=np.float64,
) -> RoundtripResult:
    """
    Like roundtrip_intrinsics(), but raise when the check fails.

    Raises:
        AssertionError: If any coordinate differs by more than eps.
    """
    result = roundtrip_intrinsics(model, width, height, border, step, eps, dtype)

    if not result.passed:
        raise AssertionError(
            f"Round trip failed: max error {result.max_abs_error:.3e} > {eps:.1e} "
            f"at pixel {result.worst_pixel}"
        )

    return result
