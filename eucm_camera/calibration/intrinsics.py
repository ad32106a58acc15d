"""
Extended Unified Camera Model (EUCM) Intrinsics Module.

This module implements the intrinsic model of wide-angle and fisheye cameras
described by B. Khomutenko, G. Garcia and P. Martinet, "An enhanced unified
camera model", IEEE Robotics and Automation Letters 1(1), 2016. The
formulation follows sections 2.2 and 2.3 of V. Usenko, N. Demmel and
D. Cremers, "The Double Sphere Camera Model", 3DV 2018
(doi:10.1109/3DV.2018.00069).

Mathematical Background:
========================

Parameters:
    - fx, fy: Focal lengths in pixel units
    - cx, cy: Principal point in pixel units
    - alpha:  Blend between the pinhole (alpha = 0) and the unit-sphere
              projection, in [0, 1]
    - beta:   Shape of the projection ellipsoid, beta > 0

Projection (camera point -> pixel), Usenko et al. eq. 16-17:

    d     = sqrt(beta * (x² + y²) + z²)
    denom = alpha * d + (1 - alpha) * z

    u = fx * x / denom + cx
    v = fy * y / denom + cy

Unprojection (pixel -> unit ray), Usenko et al. eq. 18-22:

    mx = (u - cx) / fx
    my = (v - cy) / fy
    r² = mx² + my²

                 1 - beta * alpha² * r²
    mz = ---------------------------------------------
         alpha * sqrt(1 - (2 alpha - 1) beta r²) + 1 - alpha

    ray = (mx, my, mz) / sqrt(mx² + my² + mz²)

With alpha = 0 both directions reduce to the pinhole model.

Numerical Domain:
=================

The square root argument 1 - (2 alpha - 1) beta r² is non-negative inside the
camera's valid field of view. Outside it, and for points where denom vanishes,
the transforms return NaN or ±inf exactly as IEEE arithmetic produces them.
There is no clamping and no exception; callers that need a validity test use
valid_unprojection_mask().
"""

from dataclasses import asdict, dataclass
from typing import Dict, Union

import numpy as np

from .bundles import CameraPoints, Pixels, RayBundle, as_table

Scalar = Union[float, np.floating]

FIELD_NAMES = ("fx", "fy", "cx", "cy", "alpha", "beta")


@dataclass(frozen=True)
class EucmParams:
    """
    Parameters of an Extended Unified Camera Model.

    Fields may be Python floats or NumPy floating scalars. The transforms run
    in the precision of their inputs, so casting the parameters with astype()
    and passing float32 tables evaluates the model in single precision.

    Construction never validates the parameter domain: values coming from an
    optimizer may transiently leave it.

    Attributes:
        fx: Focal length in x direction (pixels).
        fy: Focal length in y direction (pixels).
        cx: Principal point x coordinate (pixels).
        cy: Principal point y coordinate (pixels).
        alpha: Projection blend parameter, in [0, 1].
        beta: Ellipsoid shape parameter, > 0.

    Example:
        >>> params = EucmParams(fx=712.5, fy=711.9, cx=961.3, cy=539.8,
        ...                     alpha=0.62, beta=1.04)
        >>> rays = params.unproject(np.array([[961.3, 539.8], [100.0, 80.0]]))
        >>> rays.shape
        (2, 3)
        >>> pixels = params.project(rays)  # recovers the input pixels
    """

    fx: Scalar
    fy: Scalar
    cx: Scalar
    cy: Scalar
    alpha: Scalar
    beta: Scalar

    @property
    def dtype(self) -> np.dtype:
        """NumPy dtype the parameters evaluate in."""
        return np.result_type(*(getattr(self, name) for name in FIELD_NAMES))

    def astype(self, dtype) -> "EucmParams":
        """
        Cast all six parameters to a NumPy floating type.

        Args:
            dtype: Target type, e.g. np.float32 or np.float64.

        Returns:
            EucmParams: New instance with cast fields.

        Raises:
            TypeError: If dtype is not a floating type.
        """
        dtype = np.dtype(dtype)
        if not np.issubdtype(dtype, np.floating):
            raise TypeError(f"Expected a floating dtype, got {dtype}")
        return EucmParams(**{name: dtype.type(getattr(self, name)) for name in FIELD_NAMES})

    def to_dict(self) -> Dict[str, Scalar]:
        """Get the parameters as a {name: value} mapping."""
        return asdict(self)

    # -------------------------------------------------------------------------
    # Raw table transforms
    # -------------------------------------------------------------------------

    def unproject(self, pixels) -> np.ndarray:
        """
        Convert pixel coordinates to unit ray directions in the camera frame.

        Args:
            pixels: Pixel coordinates (N, 2) or a single pixel (2,).

        Returns:
            np.ndarray: Unit ray directions (N, 3). Rows outside the valid
            field of view contain NaN or inf.

        Raises:
            ValueError: If pixels cannot be shaped as (N, 2).
        """
        pixels = as_table(pixels, 2, "pixels")
        u = pixels[:, 0]
        v = pixels[:, 1]

        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            mx = (u - self.cx) / self.fx
            my = (v - self.cy) / self.fy
            r2 = mx * mx + my * my

            mz_num = 1.0 - self.beta * self.alpha**2 * r2
            mz_denom = (
                self.alpha * np.sqrt(1.0 - (2.0 * self.alpha - 1.0) * self.beta * r2)
                + (1.0 - self.alpha)
            )
            mz = mz_num / mz_denom

            norm = 1.0 / np.sqrt(mx**2 + my**2 + mz**2)
            rays = np.stack([mx * norm, my * norm, mz * norm], axis=1)

        return rays

    def project(self, points) -> np.ndarray:
        """
        Project camera-frame points to pixel coordinates.

        Args:
            points: Points (N, 3) or a single point (3,) in camera
                    coordinates. Points need not be unit length.

        Returns:
            np.ndarray: Pixel coordinates (N, 2). Rows where the projection
            denominator vanishes contain NaN or inf.

        Raises:
            ValueError: If points cannot be shaped as (N, 3).
        """
        points = as_table(points, 3, "points")
        x = points[:, 0]
        y = points[:, 1]
        z = points[:, 2]

        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            d = np.sqrt(self.beta * (x * x + y * y) + z * z)
            denom = self.alpha * d + (1.0 - self.alpha) * z

            u = self.fx * (x / denom) + self.cx
            v = self.fy * (y / denom) + self.cy
            pixels = np.stack([u, v], axis=1)

        return pixels

    def valid_unprojection_mask(self, pixels) -> np.ndarray:
        """
        Check which pixels lie inside the domain of unproject().

        A pixel is valid when the square root argument is non-negative and
        the mz denominator is finite and non-zero. unproject() never calls
        this; it is offered to callers that want to filter their input.

        Args:
            pixels: Pixel coordinates (N, 2).

        Returns:
            np.ndarray: Boolean mask (N,).
        """
        pixels = as_table(pixels, 2, "pixels")

        with np.errstate(invalid="ignore", divide="ignore", over="ignore"):
            mx = (pixels[:, 0] - self.cx) / self.fx
            my = (pixels[:, 1] - self.cy) / self.fy
            r2 = mx * mx + my * my
            radicand = 1.0 - (2.0 * self.alpha - 1.0) * self.beta * r2
            mz_denom = self.alpha * np.sqrt(radicand) + (1.0 - self.alpha)

            valid = (radicand >= 0) & np.isfinite(mz_denom) & (mz_denom != 0)

        return valid

    # -------------------------------------------------------------------------
    # IntrinsicModel capability
    # -------------------------------------------------------------------------

    def pixel_to_ray(self, pixels: Pixels) -> RayBundle:
        """
        Unproject a Pixels table into a RayBundle through the optical center.

        Args:
            pixels: Pixel coordinates.

        Returns:
            RayBundle: One unit direction per pixel.
        """
        return RayBundle(self.unproject(pixels.data))

    def point_to_pixel(self, points: CameraPoints) -> Pixels:
        """
        Project a CameraPoints table to Pixels.

        Args:
            points: Points in the camera frame.

        Returns:
            Pixels: One pixel per point.
        """
        return Pixels(self.project(points.data))

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"EucmParams(fx={self.fx!r}, fy={self.fy!r}, "
            f"cx={self.cx!r}, cy={self.cy!r}, "
            f"alpha={self.alpha!r}, beta={self.beta!r})"
        )
