"""Poynting flux through far-field surfaces and through the near-field region itself."""

from __future__ import annotations

import numpy as np

from ..exceptions import InvalidConfiguration
from ..log import log
from .data.data_array import FluxDataArray
from .data.spectrum import FrozenSpectrum
from .geometry import Box, cell_centers
from .projector import FarFieldAngleQuery, FarFieldCartesianQuery, FarFieldProjector
from .surface import NearFieldRegion
from .types import Coordinate, Direction, FreqArray, Size


def _flux_data(values: np.ndarray, freqs: np.ndarray) -> FluxDataArray:
    """Wrap per-frequency fluxes."""
    return FluxDataArray(np.real(values), coords=dict(f=list(freqs)))


def far_field_flux_plane(
    projector: FarFieldProjector,
    center: Coordinate,
    size: Size,
    resolution: float,
    normal_dir: Direction = "+",
    freqs: FreqArray = None,
) -> FluxDataArray:
    """Flux of the projected fields through an axis-aligned plane (3D) or line (2D).

    Parameters
    ----------
    projector : :class:`.FarFieldProjector`
        Projector of the near-field spectrum.
    center : Tuple[float, float, float]
        Center of the plane.
    size : Tuple[float, float, float]
        Size of the plane, zero along its normal axis (and along z in 2D).
    resolution : float
        Number of sample points per micrometer.
    normal_dir : Literal["+", "-"] = "+"
        Direction of the normal along which the flux is counted positive.
    freqs : FreqArray = None
        Frequencies, all recorded ones by default.

    Returns
    -------
    :class:`.FluxDataArray`
        Flux at each frequency.
    """
    dimensions = projector.spectrum.dimensions
    candidate_axes = range(3) if dimensions == 3 else range(2)
    zero_axes = [axis for axis in candidate_axes if size[axis] == 0.0]
    if len(zero_axes) != 1 or (dimensions == 2 and size[2] != 0.0):
        raise InvalidConfiguration(
            f"A flux plane of a {dimensions}D setup needs exactly one zero size among its "
            f"in-plane axes, got size {size}."
        )
    normal_axis = zero_axes[0]

    query = FarFieldCartesianQuery.from_bounds(
        center=center, size=size, resolution=resolution, freqs=freqs
    )
    data = projector.evaluate(query)

    _, tangential_axes = Box.pop_axis((0, 1, 2), axis=normal_axis)
    measure_axes = [axis for axis in tangential_axes if dimensions == 3 or axis != 2]
    cell_measure = np.prod(
        [cell_centers(center[axis], size[axis], resolution)[1] for axis in measure_axes]
    )

    sign = 1.0 if normal_dir == "+" else -1.0
    poynting = data.poynting["S" + "xyz"[normal_axis]]
    flux = sign * cell_measure * poynting.sum(dim=("x", "y", "z")).values
    return _flux_data(flux, data.freqs)


def far_field_flux_box(
    projector: FarFieldProjector,
    center: Coordinate,
    size: Size,
    resolution: float,
    freqs: FreqArray = None,
) -> FluxDataArray:
    """Flux of the projected fields out of a closed box (3D) or rectangle (2D).

    The box must enclose the near-field region for the flux to match the radiated power.
    """
    dimensions = projector.spectrum.dimensions
    faces = NearFieldRegion.box(
        center=center, size=size, dimensions=dimensions, resolution=resolution
    ).patches

    total = None
    with log:
        for face in faces:
            face_flux = far_field_flux_plane(
                projector=projector,
                center=face.center,
                size=face.size,
                resolution=resolution,
                normal_dir="+" if face.weight > 0 else "-",
                freqs=freqs,
            )
            total = face_flux if total is None else total + face_flux
    return _flux_data(total.values, total.coords["f"].values)


def far_field_flux_circle(
    projector: FarFieldProjector,
    radius: float,
    num_points: int,
    center: Coordinate = (0.0, 0.0, 0.0),
    freqs: FreqArray = None,
) -> FluxDataArray:
    """Flux of the projected fields out of a circle of the xy plane, for 2D setups."""
    if projector.spectrum.dimensions != 2:
        raise InvalidConfiguration("Flux through a circle is only defined for 2D setups.")
    query = FarFieldAngleQuery.circle(radius=radius, num_phi=num_points, origin=center, freqs=freqs)
    data = projector.evaluate(query)
    d_phi = 2 * np.pi / num_points
    flux = data.radiated_power_density.sum(dim=("r", "theta", "phi")).values * d_phi
    return _flux_data(flux, data.freqs)


def far_field_flux_sphere(
    projector: FarFieldProjector,
    radius: float,
    num_theta: int,
    num_phi: int,
    center: Coordinate = (0.0, 0.0, 0.0),
    freqs: FreqArray = None,
) -> FluxDataArray:
    """Flux of the projected fields out of a sphere, for 3D setups.

    Polar angles are sampled at the midpoints of ``num_theta`` equal intervals, azimuth angles
    at ``num_phi`` equally spaced values.
    """
    if projector.spectrum.dimensions != 3:
        raise InvalidConfiguration("Flux through a sphere is only defined for 3D setups.")
    d_theta = np.pi / num_theta
    d_phi = 2 * np.pi / num_phi
    theta = d_theta * (np.arange(num_theta) + 0.5)
    phi = d_phi * np.arange(num_phi)
    query = FarFieldAngleQuery(r=[radius], theta=theta, phi=phi, origin=center, freqs=freqs)
    data = projector.evaluate(query)
    weights = data.radiated_power_density * np.sin(data.Ex.coords["theta"])
    flux = weights.sum(dim=("r", "theta", "phi")).values * d_theta * d_phi
    return _flux_data(flux, data.freqs)


def near_field_flux(spectrum: FrozenSpectrum) -> FluxDataArray:
    """Flux out of the near-field region, computed directly from its surface fields."""
    return spectrum.flux
