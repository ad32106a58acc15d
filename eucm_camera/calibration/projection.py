"""
Camera Model Capability and Model-Agnostic Projection Helpers.

Downstream geometry (pose estimation, triangulation, verification) only needs
two operations from a camera's intrinsic model:

    pixel_to_ray(Pixels) -> RayBundle        pixel -> unit ray through the
                                              optical center
    point_to_pixel(CameraPoints) -> Pixels   camera-frame point -> pixel

IntrinsicModel captures that contract as a structural Protocol, so any object
providing both methods (EucmParams, or a model defined elsewhere) can be
passed to the helpers below without sharing a base class.
"""

from typing import Protocol, Union, runtime_checkable

import numpy as np

from .bundles import CameraPoints, Pixels, RayBundle


@runtime_checkable
class IntrinsicModel(Protocol):
    """
    Protocol for intrinsic camera models.

    Both methods are batched (N rows in, N rows out), accept zero-row tables,
    and return tables in the floating precision of their input.
    """

    def pixel_to_ray(self, pixels: Pixels) -> RayBundle:
        """
        Convert pixels to rays sharing the camera's optical center.

        Args:
            pixels: Pixel coordinates (N, 2).

        Returns:
            RayBundle: Unit ray directions (N, 3) in the camera frame.
        """
        ...

    def point_to_pixel(self, points: CameraPoints) -> Pixels:
        """
        Project camera-frame points to pixels.

        Args:
            points: Points (N, 3) in the camera frame.

        Returns:
            Pixels: Pixel coordinates (N, 2).
        """
        ...


def pixels_to_rays(
    model: IntrinsicModel,
    pixels: Union[Pixels, np.ndarray],
) -> RayBundle:
    """
    Unproject pixels with any intrinsic model.

    Args:
        model: Camera model implementing IntrinsicModel.
        pixels: Pixels container or array (N, 2).

    Returns:
        RayBundle: Rays through each pixel.

    Example:
        >>> rays = pixels_to_rays(params, np.array([[100.0, 200.0]]))
        >>> rays.directions.shape
        (1, 3)
    """
    if not isinstance(pixels, Pixels):
        pixels = Pixels(pixels)
    return model.pixel_to_ray(pixels)


def points_to_pixels(
    model: IntrinsicModel,
    points: Union[CameraPoints, np.ndarray],
) -> Pixels:
    """
    Project camera-frame points with any intrinsic model.

    Args:
        model: Camera model implementing IntrinsicModel.
        points: CameraPoints container or array (N, 3).

    Returns:
        Pixels: Projected pixel coordinates.
    """
    if not isinstance(points, CameraPoints):
        points = CameraPoints(points)
    return model.point_to_pixel(points)


def reprojection_error(
    model: IntrinsicModel,
    pixels: Union[Pixels, np.ndarray],
) -> np.ndarray:
    """
    Measure how well a model's projection inverts its unprojection.

    Each pixel is unprojected, the point at unit distance on its ray is
    projected back, and the distance to the original pixel is returned.

    Args:
        model: Camera model implementing IntrinsicModel.
        pixels: Pixels container or array (N, 2).

    Returns:
        np.ndarray: Per-pixel Euclidean error (N,) in pixels. NaN where the
        pixel lies outside the model's valid field of view.
    """
    if not isinstance(pixels, Pixels):
        pixels = Pixels(pixels)

    rays = model.pixel_to_ray(pixels)
    recovered = model.point_to_pixel(rays.point_on_ray())

    return np.linalg.norm(recovered.data - pixels.data, axis=1)
