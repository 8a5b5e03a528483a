"""Axis-aligned box geometry and coordinate transformations."""

from __future__ import annotations

from typing import Any, Tuple

import numpy as np
import pydantic.v1 as pydantic

from ..constants import MICROMETER
from .base import Near2FarBaseModel, cached_property
from .types import Axis, Coordinate, Size


def cell_centers(center: float, size: float, resolution: float) -> Tuple[np.ndarray, float]:
    """Midpoints of the cells obtained by splitting an interval at a given resolution.

    Parameters
    ----------
    center : float
        Center of the interval.
    size : float
        Length of the interval. A zero length gives a single point of zero spacing.
    resolution : float
        Number of cells per unit length; at least one cell is always used.

    Returns
    -------
    Tuple[np.ndarray, float]
        The cell midpoints and the (uniform) cell spacing.
    """
    if size == 0:
        return np.array([center], dtype=float), 0.0
    num_cells = max(1, int(np.ceil(size * resolution - 1e-9)))
    spacing = size / num_cells
    start = center - size / 2.0
    return start + spacing * (np.arange(num_cells) + 0.5), spacing


class Box(Near2FarBaseModel):
    """An axis-aligned box defined by its center and size.

    Example
    -------
    >>> b = Box(center=(1,2,3), size=(2,2,0))
    """

    center: Coordinate = pydantic.Field(
        (0.0, 0.0, 0.0),
        title="Center",
        description="Center of object in x, y, and z.",
        units=MICROMETER,
    )

    size: Size = pydantic.Field(
        ...,
        title="Size",
        description="Size in x, y, and z directions.",
        units=MICROMETER,
    )

    @cached_property
    def bounds(self) -> Tuple[Coordinate, Coordinate]:
        """Returns bounding box min and max coordinates."""
        size = self.size
        center = self.center
        coord_min = tuple(c - s / 2 for (s, c) in zip(size, center))
        coord_max = tuple(c + s / 2 for (s, c) in zip(size, center))
        return (coord_min, coord_max)

    def sample_coords(self, resolution: float) -> Tuple[Tuple[np.ndarray, ...], Tuple[float, ...]]:
        """Cell-centered sample coordinates along x, y, z and the spacing along each axis.

        Parameters
        ----------
        resolution : float
            Number of samples per micrometer, in units of 1/um.

        Returns
        -------
        Tuple[Tuple[np.ndarray, ...], Tuple[float, ...]]
            Sample coordinates and spacing (zero along collapsed axes).
        """
        coords, spacings = zip(
            *(cell_centers(c, s, resolution) for c, s in zip(self.center, self.size))
        )
        return tuple(coords), tuple(spacings)

    @staticmethod
    def pop_axis(coord: Tuple[Any, Any, Any], axis: int) -> Tuple[Any, Tuple[Any, Any]]:
        """Separates coordinate at ``axis`` index from coordinates on the plane tangent to ``axis``.

        Parameters
        ----------
        coord : Tuple[Any, Any, Any]
            Tuple of three values in original coordinate system.
        axis : int
            Integer index into 'xyz' (0,1,2).

        Returns
        -------
        Any, Tuple[Any, Any]
            The input coordinates are separated into the one along the axis provided
            and the two on the planar coordinates,
            like ``axis_coord, (planar_coord1, planar_coord2)``.
        """
        plane_vals = list(coord)
        axis_val = plane_vals.pop(axis)
        return axis_val, tuple(plane_vals)

    """ Field and coordinate transformations """

    @staticmethod
    def sph_2_car(r: float, theta: float, phi: float) -> Tuple[float, float, float]:
        """Convert spherical to Cartesian coordinates.

        Parameters
        ----------
        r : float
            radius.
        theta : float
            polar angle (rad) downward from x=y=0 line.
        phi : float
            azimuthal (rad) angle from y=z=0 line.

        Returns
        -------
        Tuple[float, float, float]
            x, y, and z coordinates relative to ``local_origin``.
        """
        r_sin_theta = r * np.sin(theta)
        x = r_sin_theta * np.cos(phi)
        y = r_sin_theta * np.sin(phi)
        z = r * np.cos(theta)
        return x, y, z

    @staticmethod
    def car_2_sph_field(
        f_x: float, f_y: float, f_z: float, theta: float, phi: float
    ) -> Tuple[complex, complex, complex]:
        """Convert vector field components in cartesian coordinates to spherical.

        Parameters
        ----------
        f_x : float
            x component of the vector field.
        f_y : float
            y component of the vector field.
        f_z : float
            z component of the vector field.
        theta : float
            polar angle (rad) of location of the vector field.
        phi : float
            azimuthal angle (rad) of location of the vector field.

        Returns
        -------
        Tuple[float, float, float]
            radial (s), elevation (theta), and azimuthal (phi) components
            of the vector field in spherical coordinates.
        """
        sin_theta = np.sin(theta)
        cos_theta = np.cos(theta)
        sin_phi = np.sin(phi)
        cos_phi = np.cos(phi)
        f_r = f_x * sin_theta * cos_phi + f_y * sin_theta * sin_phi + f_z * cos_theta
        f_theta = f_x * cos_theta * cos_phi + f_y * cos_theta * sin_phi - f_z * sin_theta
        f_phi = -f_x * sin_phi + f_y * cos_phi
        return f_r, f_theta, f_phi


__all__ = ["Box", "Axis", "cell_centers"]
