"""
Batched Coordinate Containers.

Immutable tables exchanged between camera models and the code that consumes
them (pose solvers, triangulators, verification tools):

    Pixels        (N, 2)  pixel coordinates (u, v)
    CameraPoints  (N, 3)  points (x, y, z) in the camera frame
    RayBundle     (N, 3)  unit ray directions sharing the camera origin

Camera Coordinate Frame:
    - X: Right
    - Y: Down
    - Z: Forward (optical axis)
    - Origin: At camera optical center

Each container copies its input, so it never aliases caller memory, and marks
its array read-only. Zero-row tables are valid.
"""

from dataclasses import dataclass

import numpy as np


def as_table(data, columns: int, name: str = "table") -> np.ndarray:
    """
    Coerce array-like data to a 2-D floating table with a fixed column count.

    Floating input keeps its dtype (so single precision stays single
    precision); anything else is promoted to float64.

    Args:
        data: Array-like of shape (N, columns) or a single row (columns,).
        columns: Required number of columns.
        name: Name used in error messages.

    Returns:
        np.ndarray: Array of shape (N, columns).

    Raises:
        ValueError: If the data cannot be shaped as (N, columns).
    """
    array = np.asarray(data)
    if not np.issubdtype(array.dtype, np.floating):
        array = array.astype(np.float64)

    if array.ndim == 1 and array.size == 0:
        array = array.reshape(0, columns)
    elif array.ndim == 1 and array.shape[0] == columns:
        array = array.reshape(1, columns)

    if array.ndim != 2 or array.shape[1] != columns:
        raise ValueError(
            f"{name} must have shape (N, {columns}), got {array.shape}"
        )

    return array


def _frozen_copy(data, columns: int, name: str) -> np.ndarray:
    array = np.array(as_table(data, columns, name), copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True, eq=False)
class Pixels:
    """
    Pixel coordinates, one (u, v) row per sample.

    Attributes:
        data: Read-only array of shape (N, 2).
    """

    data: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "data", _frozen_copy(self.data, 2, "pixels"))

    def __len__(self) -> int:
        return self.data.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype


@dataclass(frozen=True, eq=False)
class CameraPoints:
    """
    Points in the camera frame, one (x, y, z) row per sample.

    Points are not required to be unit length.

    Attributes:
        data: Read-only array of shape (N, 3).
    """

    data: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "data", _frozen_copy(self.data, 3, "points"))

    def __len__(self) -> int:
        return self.data.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype


@dataclass(frozen=True, eq=False)
class RayBundle:
    """
    Rays leaving the camera's optical center.

    All rays share the origin (0, 0, 0) of the camera frame; only the
    direction varies per row.

    Attributes:
        directions: Read-only array of shape (N, 3). Directions produced by a
            camera model are unit length for pixels inside its valid field
            of view.

    Example:
        >>> rays = RayBundle(np.array([[0.0, 0.0, 1.0]]))
        >>> rays.point_on_ray(10.0).data
        array([[ 0.,  0., 10.]])
    """

    directions: np.ndarray

    def __post_init__(self):
        object.__setattr__(
            self, "directions", _frozen_copy(self.directions, 3, "ray directions")
        )

    def __len__(self) -> int:
        return self.directions.shape[0]

    @property
    def dtype(self) -> np.dtype:
        return self.directions.dtype

    @property
    def origin(self) -> np.ndarray:
        """Shared ray origin (the optical center)."""
        return np.zeros(3, dtype=self.dtype)

    def point_on_ray(self, distance: float = 1.0) -> CameraPoints:
        """
        Get the point at a given distance along every ray.

        Computes origin + distance * direction. Rays are unit length, so the
        default distance of 1.0 gives the direction itself.

        Args:
            distance: Distance along each ray.

        Returns:
            CameraPoints: Points (N, 3) in the camera frame.
        """
        return CameraPoints(self.origin + distance * self.directions)
