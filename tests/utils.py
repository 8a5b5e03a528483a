"""Helpers shared by the tests."""
from typing import List, Tuple

import numpy as np
import near2far as n2f
from near2far.log import _get_level_int

WAVELENGTH = 1.0
F0 = n2f.C_0 / WAVELENGTH
FREQS = n2f.FrequencySet(freqs=(F0,))


def spectrum_from_fields(region, frequencies, field_fn, num_steps=1):
    """Frozen spectrum whose surface fields are given by ``field_fn(points) -> (E, H)``."""
    freqs = list(frequencies.freqs)
    patches = []
    for grid in region.grids:
        E, H = field_fn(grid.sample_points())
        coords = dict(x=grid.x, y=grid.y, z=grid.z, f=freqs)
        fields = {}
        for comp in grid.components:
            vector = E if comp[0] == "E" else H
            values = np.reshape(vector["xyz".index(comp[1])], grid.shape + (len(freqs),))
            fields[comp] = n2f.SurfaceFieldDataArray(values, coords=coords)
        patches.append(n2f.PatchSpectrum(grid=grid, **fields))
    return n2f.FrozenSpectrum(
        region=region, frequencies=frequencies, patches=patches, num_steps=num_steps
    )


def dipole_spectrum(
    region,
    frequencies=FREQS,
    position=(0, 0, 0),
    polarization=(0, 0, 1),
    medium=None,
    magnetic=False,
):
    """Spectrum recorded on ``region`` around a single point (3D) or line (2D) current."""

    def field_fn(points):
        return n2f.dipole_fields(
            obs=points,
            position=position,
            polarization=polarization,
            freqs=frequencies.array,
            medium=medium,
            dimensions=region.dimensions,
            magnetic=magnetic,
        )

    return spectrum_from_fields(region, frequencies, field_fn)


def make_box_region(dimensions=3, size=1.0, resolution=15):
    """Closed box (3D) or square (2D) around the origin."""
    return n2f.NearFieldRegion.box(
        center=(0, 0, 0), size=(size, size, size), dimensions=dimensions, resolution=resolution
    )


def relative_error(values, reference):
    """Norm of the difference relative to the norm of the reference."""
    return np.linalg.norm(np.ravel(values - reference)) / np.linalg.norm(np.ravel(reference))


def dipole_power(medium=None, dimensions=3, frequency=F0):
    """Power radiated by a unit electric current, per unit length in 2D."""
    medium = n2f.Medium() if medium is None else medium
    k = medium.wavenumber(frequency)
    if dimensions == 3:
        return medium.impedance * k**2 / (12 * np.pi)
    return medium.impedance * k / 8


def assert_log_level(
    records: List[Tuple[int, str]], log_level_expected: str, contains_str: str = None
) -> None:
    """Testing tool: Raises error if a log was not recorded as expected.

    The expected level must be present in ``records`` and no higher level may be. If
    ``contains_str`` is given, one of the messages at the expected level must contain it.
    """
    if log_level_expected is None:
        levels = [level for level, _ in records if level >= _get_level_int("WARNING")]
        assert not levels, f"Unexpected log records: {records}"
        return

    level_expected = _get_level_int(log_level_expected)
    messages = [message for level, message in records if level == level_expected]
    assert messages, f"No log recorded at level '{log_level_expected}': {records}"
    assert all(level <= level_expected for level, _ in records), (
        f"Recorded log level exceeds expected level '{log_level_expected}': {records}"
    )
    if contains_str is not None:
        assert any(contains_str in message for message in messages), (
            f"'{contains_str}' not found in {messages}"
        )
