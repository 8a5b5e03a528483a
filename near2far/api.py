"""Functional interface: register near-field regions, then query far fields and fluxes."""

from __future__ import annotations

from typing import Dict, Sequence, Union

import numpy as np

from .components.data.data_array import FluxDataArray
from .components.data.far_field import FarFieldCartesianData
from .components.data.spectrum import FrozenSpectrum
from .components.dft import AccumulationState, register
from .components.flux import near_field_flux
from .components.frequencies import FrequencySet
from .components.medium import Medium
from .components.projector import FarFieldCartesianQuery, FarFieldProjector
from .components.surface import DEFAULT_RESOLUTION, NearFieldPatch, NearFieldRegion
from .components.types import Coordinate, FreqArray, Size
from .exceptions import SetupError
from .log import log

Handle = Union[AccumulationState, FrozenSpectrum]
PatchLike = Union[NearFieldPatch, Dict]


def _frequency_set(frequencies: Union[FrequencySet, float, Sequence[float]]) -> FrequencySet:
    """Accept a frequency set, a single frequency or a sequence of frequencies."""
    if isinstance(frequencies, FrequencySet):
        return frequencies
    return FrequencySet(freqs=tuple(np.atleast_1d(frequencies).tolist()))


def _spectrum(handle: Handle) -> FrozenSpectrum:
    """Frozen spectrum of a handle, finalizing running transforms on first use."""
    if isinstance(handle, FrozenSpectrum):
        return handle
    if isinstance(handle, AccumulationState):
        return handle.finalize()
    raise SetupError(
        f"Expected a near-field handle or a 'FrozenSpectrum', got {type(handle).__name__}."
    )


def _projector(
    handle: Handle,
    medium: Medium = None,
    nperiods: int = 0,
    lattice_vector: Coordinate = None,
    bloch_vector: Coordinate = (0.0, 0.0, 0.0),
) -> FarFieldProjector:
    """Projector of the spectrum of a handle."""
    return FarFieldProjector(
        spectrum=_spectrum(handle),
        medium=Medium() if medium is None else medium,
        nperiods=nperiods,
        lattice_vector=lattice_vector,
        bloch_vector=bloch_vector,
    )


def add_near_field_region(
    patches: Sequence[PatchLike],
    frequencies: Union[FrequencySet, float, Sequence[float]],
    dimensions: int = 3,
    resolution: float = DEFAULT_RESOLUTION,
    h_time_offset: float = 0.0,
) -> AccumulationState:
    """Register a near-field region made of rectangular patches.

    Parameters
    ----------
    patches : Sequence[Union[:class:`.NearFieldPatch`, dict]]
        Patches, or dictionaries with keys ``center``, ``size`` and optionally ``weight`` and
        ``direction``. Together they must enclose every source.
    frequencies : Union[:class:`.FrequencySet`, float, Sequence[float]]
        Frequencies of the running transforms, in Hz.
    dimensions : int = 3
        Spatial dimension of the setup.
    resolution : float
        Number of samples per micrometer on every patch.
    h_time_offset : float = 0.0
        Offset, in time steps, of the instants at which magnetic fields are sampled.

    Returns
    -------
    :class:`.AccumulationState`
        Handle to feed with time-domain fields and to query once the run is over.

    Example
    -------
    >>> handle = add_near_field_region(
    ...     [dict(center=(0, 0.5, 0), size=(1, 0, 0), weight=1)], frequencies=2e14, dimensions=2
    ... ) # doctest: +SKIP
    """
    patches = [
        patch if isinstance(patch, NearFieldPatch) else NearFieldPatch(**patch)
        for patch in patches
    ]
    region = NearFieldRegion(patches=patches, dimensions=dimensions, resolution=resolution)
    return register(region, _frequency_set(frequencies), h_time_offset=h_time_offset)


def get_far_field(
    handle: Handle,
    point: Sequence[float],
    freqs: FreqArray = None,
    medium: Medium = None,
    nperiods: int = 0,
    lattice_vector: Coordinate = None,
    bloch_vector: Coordinate = (0.0, 0.0, 0.0),
) -> np.ndarray:
    """Fields at a single point.

    Parameters
    ----------
    handle : Union[:class:`.AccumulationState`, :class:`.FrozenSpectrum`]
        Near-field handle, finalized on first query.
    point : Sequence[float]
        Observation point; a 2D point ``(x, y)`` is placed at ``z=0``.
    freqs : FreqArray = None
        Frequencies, all recorded ones by default.
    medium : :class:`.Medium` = None
        Exterior medium, vacuum by default.
    nperiods : int = 0
        Number of periodic copies on each side of the surface.
    lattice_vector : Tuple[float, float, float] = None
        Translation between periodic copies.
    bloch_vector : Tuple[float, float, float] = (0, 0, 0)
        Bloch wave vector of the periodic copies.

    Returns
    -------
    np.ndarray
        Complex ``Ex, Ey, Ez, Hx, Hy, Hz`` of shape ``(6, num_freqs)``.
    """
    point = np.asarray(point, dtype=float)
    if point.shape == (2,):
        point = np.append(point, 0.0)
    projector = _projector(handle, medium, nperiods, lattice_vector, bloch_vector)
    E, H = projector.fields_at(point[None, :], freqs=freqs)
    return np.concatenate([E[:, 0, :], H[:, 0, :]])


def get_far_field_grid(
    handle: Handle,
    center: Coordinate,
    size: Size,
    resolution: float,
    freqs: FreqArray = None,
    medium: Medium = None,
    nperiods: int = 0,
    lattice_vector: Coordinate = None,
    bloch_vector: Coordinate = (0.0, 0.0, 0.0),
) -> FarFieldCartesianData:
    """Fields on a grid of cell midpoints covering a box at ``resolution`` points per micrometer.

    The box may be a point, line, plane or volume. See :func:`get_far_field` for the other
    parameters.
    """
    projector = _projector(handle, medium, nperiods, lattice_vector, bloch_vector)
    query = FarFieldCartesianQuery.from_bounds(
        center=center, size=size, resolution=resolution, freqs=freqs
    )
    return projector.evaluate(query)


def get_flux(handle_or_region: Handle) -> FluxDataArray:
    """Flux out of the near-field region at each frequency, from the surface fields alone."""
    return near_field_flux(_spectrum(handle_or_region))


def output_far_fields(
    handle: Handle,
    fname: str,
    center: Coordinate,
    size: Size,
    resolution: float,
    **kwargs,
) -> FarFieldCartesianData:
    """Compute the fields on a grid and write them to an hdf5 file.

    The file holds datasets ``ex_0.r``, ``ex_0.i``, ... one real and one imaginary array per
    component and frequency index, indexed by grid position. Keyword arguments are passed to
    :func:`get_far_field_grid`.
    """
    data = get_far_field_grid(handle, center=center, size=size, resolution=resolution, **kwargs)
    data.to_hdf5(fname)
    log.info(f"Far fields on a {'x'.join(map(str, data.Ex.shape[:3]))} grid written to '{fname}'.")
    return data
