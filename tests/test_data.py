"""Tests the data containers and the quantities derived from them."""
import numpy as np
import pytest
import near2far as n2f
from near2far.exceptions import DataError

from .utils import F0, FREQS, dipole_spectrum, make_box_region

COORDS_CART = dict(x=[0.0], y=[0.0, 1.0], z=[10.0], f=[F0])
COORDS_ANGLE = dict(r=[10.0], theta=[np.pi / 2], phi=[0.0, np.pi / 2], f=[F0])


def make_cartesian(values):
    """Cartesian far field data from a dict of component values."""
    fields = {
        comp: n2f.FarFieldCartesianDataArray(
            np.full((1, 2, 1, 1), values.get(comp, 0), dtype=complex), coords=COORDS_CART
        )
        for comp in ("Ex", "Ey", "Ez", "Hx", "Hy", "Hz")
    }
    return n2f.FarFieldCartesianData(**fields)


def test_plane_wave_quantities():
    eta = n2f.ETA_0
    data = make_cartesian(dict(Ex=1.0, Hy=1 / eta))
    assert np.allclose(data.poynting["Sz"].values, 0.5 / eta)
    assert np.allclose(data.poynting["Sx"].values, 0)
    assert np.allclose(data.intensity.values, 0.5 / eta)
    assert np.allclose(data.energy_density.values, 0.5 * n2f.EPSILON_0)
    assert data.intensity.dims == ("x", "y", "z", "f")


def test_angle_quantities():
    fields = {
        comp: n2f.FarFieldAngleDataArray(np.zeros((1, 1, 2, 1), dtype=complex), coords=COORDS_ANGLE)
        for comp in ("Ey", "Ez", "Hx", "Hy")
    }
    # radially outgoing wave at phi=0 (along x), polarized along z
    fields["Ez"] = fields["Ez"].copy(data=np.array([[[[1.0], [0.0]]]], dtype=complex))
    fields["Hy"] = fields["Hy"].copy(data=np.array([[[[-1 / n2f.ETA_0], [0.0]]]], dtype=complex))
    fields["Ex"] = fields["Ez"].copy(data=np.array([[[[0.0], [2.0]]]], dtype=complex))
    fields["Hz"] = fields["Ez"].copy(data=np.zeros((1, 1, 2, 1), dtype=complex))
    data = n2f.FarFieldAngleData(**fields)

    spherical = data.fields_spherical
    assert np.isclose(spherical["Etheta"].values[0, 0, 0, 0], -1.0)
    assert np.isclose(spherical["Ephi"].values[0, 0, 1, 0], -2.0)
    power = data.radiated_power_density.values
    assert np.isclose(power[0, 0, 0, 0], 0.5 / n2f.ETA_0 * 100)
    assert np.isclose(power[0, 0, 1, 0], 0)


def test_patch_spectrum_validation():
    region = make_box_region(dimensions=3, resolution=2)
    grid = region.grids[1]
    coords = dict(x=grid.x, y=grid.y, z=grid.z, f=[F0])
    field = n2f.SurfaceFieldDataArray(np.ones(grid.shape + (1,), dtype=complex), coords=coords)
    fields = dict(Ey=field, Ez=field, Hy=field, Hz=field)
    patch = n2f.PatchSpectrum(grid=grid, **fields)
    assert set(patch.field_components) == {"Ey", "Ez", "Hy", "Hz"}

    with pytest.raises(DataError):
        n2f.PatchSpectrum(grid=grid, Ey=field, Ez=field, Hy=field)

    other_grid = region.grids[0].updated_copy(y=[0.0], z=[0.0])
    with pytest.raises(DataError):
        n2f.PatchSpectrum(grid=other_grid, **fields)


def test_patch_currents():
    """On an x+ face, J = x x H and M = -x x E."""
    region = make_box_region(dimensions=3, resolution=2)
    grid = region.grids[1]
    coords = dict(x=grid.x, y=grid.y, z=grid.z, f=[F0])
    shape = grid.shape + (1,)
    fields = {
        comp: n2f.SurfaceFieldDataArray(np.full(shape, value, dtype=complex), coords=coords)
        for comp, value in dict(Ey=1.0, Ez=2.0, Hy=3.0, Hz=4.0).items()
    }
    J, M = n2f.PatchSpectrum(grid=grid, **fields).currents
    assert np.allclose(J[:, 0, 0], [0, -4, 3])
    assert np.allclose(M[:, 0, 0], [0, 2, -1])


def test_frozen_spectrum_validation():
    spectrum = dipole_spectrum(make_box_region(dimensions=3, resolution=2))
    with pytest.raises(DataError):
        spectrum.updated_copy(patches=spectrum.patches[:-1])
    with pytest.raises(DataError):
        spectrum.updated_copy(frequencies=n2f.FrequencySet(freqs=(F0, 2 * F0)))


def test_frozen_spectrum_hdf5(tmp_path):
    spectrum = dipole_spectrum(make_box_region(dimensions=3, resolution=2))
    fname = str(tmp_path / "spectrum.hdf5")
    spectrum.to_hdf5(fname)
    loaded = n2f.FrozenSpectrum.from_hdf5(fname)
    assert loaded == spectrum
    assert np.allclose(loaded.flux.values, spectrum.flux.values)


def test_frozen_spectrum_json_has_no_data(tmp_path):
    spectrum = dipole_spectrum(make_box_region(dimensions=3, resolution=2))
    fname = str(tmp_path / "spectrum.json")
    spectrum.to_file(fname)
    with pytest.raises(ValueError):
        n2f.FrozenSpectrum.from_file(fname)


def test_data_array_hash_and_eq():
    coords = dict(f=list(FREQS.freqs))
    flux = n2f.FluxDataArray([1.0], coords=coords)
    same = n2f.FluxDataArray([1.0], coords=coords)
    other = n2f.FluxDataArray([2.0], coords=coords)
    assert flux == same
    assert hash(flux) == hash(same)
    assert not flux == other
    assert hash(flux) != hash(other)
