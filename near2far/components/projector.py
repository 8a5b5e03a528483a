"""Projection of near-field spectra to arbitrary observation points."""

from __future__ import annotations

from functools import partial, reduce
from typing import Optional, Tuple, Union

import numpy as np
import pydantic.v1 as pydantic
from rich.progress import track

from ..config import config
from ..constants import HERTZ, MICROMETER, RADIAN, RADPERMICRON, fp_eps
from ..exceptions import InvalidConfiguration
from ..log import log
from .base import Near2FarBaseModel, cached_property
from .data.data_array import FarFieldAngleDataArray, FarFieldCartesianDataArray
from .data.far_field import FarFieldAngleData, FarFieldCartesianData
from .data.spectrum import FrozenSpectrum
from .geometry import Box, cell_centers
from .green import fields_from_currents
from .medium import Medium
from .types import Coordinate, FreqArray, ObsGridArray, Size

# points closer than this to the z=0 plane, relative to their distance from the origin,
# are accepted in 2D
PLANE_TOL = 1e-9


class AbstractFarFieldQuery(Near2FarBaseModel):
    """Observation points and frequencies at which to evaluate far fields."""

    freqs: Optional[FreqArray] = pydantic.Field(
        None,
        title="Frequencies",
        description="Frequencies to evaluate, each one of the recorded frequencies. "
        "All recorded frequencies if not given.",
        units=HERTZ,
    )

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Shape of the grid of observation points."""
        raise NotImplementedError

    def points(self) -> np.ndarray:
        """Observation points of shape ``(num_points, 3)``, in C order over the grid."""
        raise NotImplementedError


class FarFieldCartesianQuery(AbstractFarFieldQuery):
    """Cartesian grid of observation points: a point, line, plane or volume.

    Example
    -------
    >>> query = FarFieldCartesianQuery(x=[0], y=[0], z=np.linspace(90, 110, 5))
    """

    x: ObsGridArray = pydantic.Field(
        ..., title="x", description="x coordinates of the grid.", units=MICROMETER
    )
    y: ObsGridArray = pydantic.Field(
        ..., title="y", description="y coordinates of the grid.", units=MICROMETER
    )
    z: ObsGridArray = pydantic.Field(
        (0.0,), title="z", description="z coordinates of the grid.", units=MICROMETER
    )

    @classmethod
    def point(cls, point: Coordinate, freqs: FreqArray = None) -> FarFieldCartesianQuery:
        """Query of a single observation point."""
        return cls(x=[point[0]], y=[point[1]], z=[point[2]], freqs=freqs)

    @classmethod
    def from_bounds(
        cls, center: Coordinate, size: Size, resolution: float, freqs: FreqArray = None
    ) -> FarFieldCartesianQuery:
        """Grid of cell midpoints covering a box at ``resolution`` points per micrometer.

        Axes of zero size hold a single point at the center coordinate.
        """
        coords = [cell_centers(c, s, resolution)[0] for c, s in zip(center, size)]
        return cls(x=coords[0], y=coords[1], z=coords[2], freqs=freqs)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (len(self.x), len(self.y), len(self.z))

    def points(self) -> np.ndarray:
        xx, yy, zz = np.meshgrid(self.x, self.y, self.z, indexing="ij")
        return np.stack([xx.ravel(), yy.ravel(), zz.ravel()], axis=-1)


class FarFieldAngleQuery(AbstractFarFieldQuery):
    """Spherical grid of observation points around ``origin``.

    Example
    -------
    >>> query = FarFieldAngleQuery(r=[1e3], theta=np.linspace(0, np.pi, 19), phi=[0])
    """

    r: ObsGridArray = pydantic.Field(
        ..., title="Radii", description="Distances from the origin.", units=MICROMETER
    )
    theta: ObsGridArray = pydantic.Field(
        (np.pi / 2,), title="Polar angles", description="Polar angles from +z.", units=RADIAN
    )
    phi: ObsGridArray = pydantic.Field(
        ..., title="Azimuth angles", description="Azimuth angles from +x.", units=RADIAN
    )
    origin: Coordinate = pydantic.Field(
        (0.0, 0.0, 0.0),
        title="Origin",
        description="Center of the spherical coordinate system.",
        units=MICROMETER,
    )

    @classmethod
    def circle(
        cls,
        radius: float,
        num_phi: int,
        origin: Coordinate = (0.0, 0.0, 0.0),
        freqs: FreqArray = None,
    ) -> FarFieldAngleQuery:
        """Equally spaced points on a circle of the xy plane."""
        phi = 2 * np.pi * np.arange(num_phi) / num_phi
        return cls(r=[radius], theta=[np.pi / 2], phi=phi, origin=origin, freqs=freqs)

    @property
    def shape(self) -> Tuple[int, int, int]:
        return (len(self.r), len(self.theta), len(self.phi))

    def points(self) -> np.ndarray:
        rr, tt, pp = np.meshgrid(self.r, self.theta, self.phi, indexing="ij")
        x, y, z = Box.sph_2_car(rr.ravel(), tt.ravel(), pp.ravel())
        # points on the equatorial plane share the z of the origin exactly
        z = np.where(np.isclose(tt.ravel(), np.pi / 2, rtol=0, atol=fp_eps), 0.0, z)
        return np.stack([x, y, z], axis=-1) + np.array(self.origin)


FarFieldQuery = Union[FarFieldCartesianQuery, FarFieldAngleQuery]
FarFieldData = Union[FarFieldCartesianData, FarFieldAngleData]


class FarFieldProjector(Near2FarBaseModel):
    """Evaluates the fields radiated by the equivalent currents of a frozen near-field spectrum.

    Notes
    -----

        The tangential fields on the near-field surface are replaced by the currents
        ``J = n x H`` and ``M = -n x E``, which are integrated against the free-space Green's
        function of the homogeneous exterior medium. The result is exact at every distance,
        not only in the asymptotic far zone, as long as the surface is closed around all
        sources. Points inside the surface are not rejected, but the fields there are not
        meaningful.

        With ``nperiods > 0`` the surface is repeated ``2 * nperiods + 1`` times, translated by
        ``n * lattice_vector`` and multiplied by the Bloch phase ``exp(i n bloch_vector .
        lattice_vector)`` for ``n = -nperiods..nperiods``, to approximate a finite periodic
        structure from a single unit cell. The ends of the finite structure are left open.

    Example
    -------
    >>> projector = FarFieldProjector(spectrum=spectrum) # doctest: +SKIP
    >>> data = projector.evaluate(FarFieldCartesianQuery.point((0, 0, 1e3))) # doctest: +SKIP
    """

    spectrum: FrozenSpectrum = pydantic.Field(
        ...,
        title="Spectrum",
        description="Frozen near-field spectrum to project.",
    )

    medium: Medium = pydantic.Field(
        Medium(),
        title="Medium",
        description="Homogeneous, lossless exterior medium.",
    )

    nperiods: int = pydantic.Field(
        0,
        title="Number of periods",
        description="Number of copies of the surface on each side of the original one. "
        "Zero uses the surface once.",
    )

    lattice_vector: Optional[Coordinate] = pydantic.Field(
        None,
        title="Lattice vector",
        description="Translation between successive copies of the surface.",
        units=MICROMETER,
    )

    bloch_vector: Coordinate = pydantic.Field(
        (0.0, 0.0, 0.0),
        title="Bloch vector",
        description="Wave vector setting the phase between successive copies.",
        units=RADPERMICRON,
    )

    def _post_init_validators(self) -> None:
        """Check the periodic tiling is fully specified."""
        if self.nperiods < 0:
            raise InvalidConfiguration(f"'nperiods' must be non-negative, got {self.nperiods}.")
        if self.nperiods == 0:
            return
        if self.lattice_vector is None or not np.any(self.lattice_vector):
            raise InvalidConfiguration(
                "Periodic tiling with 'nperiods > 0' needs a non-zero 'lattice_vector'."
            )
        if self.spectrum.dimensions == 2 and self.lattice_vector[2] != 0:
            raise InvalidConfiguration(
                "The 'lattice_vector' of a 2D setup must lie in the xy plane."
            )

    @cached_property
    def tile_offsets(self) -> np.ndarray:
        """Integer indices ``n`` of the copies of the surface."""
        return np.arange(-self.nperiods, self.nperiods + 1)

    def _check_points(self, points: np.ndarray) -> np.ndarray:
        """Validate observation points against the dimensionality of the spectrum."""
        points = np.atleast_2d(np.asarray(points, dtype=float))
        if points.ndim != 2 or points.shape[1] != 3:
            raise InvalidConfiguration(
                f"Observation points must have shape (num_points, 3), got {points.shape}."
            )
        plane_tol = PLANE_TOL * np.maximum(1.0, np.linalg.norm(points, axis=1))
        if self.spectrum.dimensions == 2 and np.any(np.abs(points[:, 2]) > plane_tol):
            raise InvalidConfiguration(
                "The near-field region is 2D (xy plane); observation points must have z=0."
            )

        (xmin, ymin, zmin), (xmax, ymax, zmax) = self.spectrum.region.bounds
        inside = (
            (points[:, 0] > xmin + fp_eps)
            & (points[:, 0] < xmax - fp_eps)
            & (points[:, 1] > ymin + fp_eps)
            & (points[:, 1] < ymax - fp_eps)
        )
        if self.spectrum.dimensions == 3:
            inside &= (points[:, 2] > zmin + fp_eps) & (points[:, 2] < zmax - fp_eps)
        if np.any(inside) and self.nperiods == 0:
            log.warning(
                f"{np.count_nonzero(inside)} observation points lie within the bounds of the "
                "near-field region; fields there are not meaningful.",
                log_once=True,
            )
        return points

    def _chunks(self, num_points: int, num_sources: int):
        """Slices of observation points evaluated together, bounded by the config."""
        chunk_size = max(1, config.max_points_per_chunk // max(num_sources, 1))
        chunks = [
            slice(start, min(start + chunk_size, num_points))
            for start in range(0, num_points, chunk_size)
        ]
        if config.progress_bars and len(chunks) > 1:
            return track(chunks, description="Computing far fields")
        return chunks

    def fields_at(
        self, points: np.ndarray, freqs: FreqArray = None
    ) -> Tuple[np.ndarray, np.ndarray]:
        """E and H at arbitrary observation points.

        Parameters
        ----------
        points : np.ndarray
            Observation points of shape ``(num_points, 3)``.
        freqs : FreqArray = None
            Frequencies to evaluate, each one of the recorded frequencies. All by default.

        Returns
        -------
        Tuple[np.ndarray, np.ndarray]
            Complex E and H, each of shape ``(3, num_points, num_freqs)``.
        """
        freq_indices = self.spectrum.frequencies.indices(freqs)
        points = self._check_points(points)

        num_points = points.shape[0]
        E = np.zeros((3, num_points, len(freq_indices)), dtype=complex)
        H = np.zeros_like(E)

        if self.spectrum.is_empty:
            log.warning(
                "Far fields requested from a near-field spectrum with no absorbed time steps; "
                "returning zero fields."
            )
            return E, H

        src, J, M, dA = self.spectrum.sources
        J = J[:, :, freq_indices]
        M = M[:, :, freq_indices]
        freq_values = self.spectrum.frequencies.array[freq_indices]
        lattice = np.zeros(3) if self.lattice_vector is None else np.array(self.lattice_vector)
        bloch_phase = np.dot(self.bloch_vector, lattice)

        def tile_fields(n: int, obs: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
            """Fields at ``obs`` of the copy of the surface translated by ``n`` periods."""
            E_tile, H_tile = fields_from_currents(
                obs=obs,
                src=src + n * lattice,
                J=J,
                M=M,
                dA=dA,
                freqs=freq_values,
                medium=self.medium,
                dimensions=self.spectrum.dimensions,
            )
            phase = np.exp(1j * n * bloch_phase)
            return phase * E_tile, phase * H_tile

        num_sources = src.shape[0] * len(self.tile_offsets)
        for chunk in self._chunks(num_points, num_sources):
            tiles = map(partial(tile_fields, obs=points[chunk]), self.tile_offsets)
            E[:, chunk], H[:, chunk] = reduce(
                lambda total, tile: (total[0] + tile[0], total[1] + tile[1]), tiles
            )

        return E, H

    def evaluate(self, query: FarFieldQuery) -> FarFieldData:
        """Far fields on the grid of observation points of ``query``.

        Parameters
        ----------
        query : Union[:class:`FarFieldCartesianQuery`, :class:`FarFieldAngleQuery`]
            Observation points and frequencies.

        Returns
        -------
        Union[:class:`.FarFieldCartesianData`, :class:`.FarFieldAngleData`]
            The six complex field components on the query grid.
        """
        freq_indices = self.spectrum.frequencies.indices(query.freqs)
        freqs = self.spectrum.frequencies.array[freq_indices]
        E, H = self.fields_at(query.points(), freqs=freqs)
        shape = query.shape + (len(freqs),)

        if isinstance(query, FarFieldCartesianQuery):
            coords = dict(x=query.x, y=query.y, z=query.z, f=freqs)
            data_type, array_type, extra = FarFieldCartesianData, FarFieldCartesianDataArray, {}
        else:
            coords = dict(r=query.r, theta=query.theta, phi=query.phi, f=freqs)
            data_type, array_type = FarFieldAngleData, FarFieldAngleDataArray
            extra = dict(origin=query.origin)

        fields = {}
        for field, values in zip("EH", (E, H)):
            for idx, dim in enumerate("xyz"):
                fields[f"{field}{dim}"] = array_type(np.reshape(values[idx], shape), coords=coords)

        return data_type(
            medium=self.medium, dimensions=self.spectrum.dimensions, **fields, **extra
        )
