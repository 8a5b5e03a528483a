"""Tests the functional interface."""
import h5py
import numpy as np
import pytest
import near2far as n2f
from near2far.exceptions import InvalidConfiguration, SetupError, UnsupportedFrequency

from .utils import F0, FREQS, assert_log_level, dipole_power, dipole_spectrum, make_box_region

SQUARE = [
    dict(center=(-0.5, 0, 0), size=(0, 1, 0), weight=-1),
    dict(center=(0.5, 0, 0), size=(0, 1, 0), weight=1),
    dict(center=(0, -0.5, 0), size=(1, 0, 0), weight=-1),
    dict(center=(0, 0.5, 0), size=(1, 0, 0), weight=1),
]


@pytest.fixture(scope="module")
def spectrum_2d():
    return dipole_spectrum(make_box_region(dimensions=2, resolution=20))


def test_add_near_field_region(log_capture):
    handle = n2f.add_near_field_region(SQUARE, frequencies=F0, dimensions=2, resolution=20)
    assert isinstance(handle, n2f.AccumulationState)
    assert handle.region.dimensions == 2
    assert handle.region.num_samples == 80
    assert [grid.normal_axis for grid in handle.region.grids] == [0, 0, 1, 1]
    assert handle.frequencies == FREQS
    assert_log_level(log_capture, "INFO", contains_str="4 patches")


def test_add_near_field_region_patches():
    patches = [n2f.NearFieldPatch(center=(0, 0, 1), size=(2, 2, 0))]
    handle = n2f.add_near_field_region(patches, frequencies=[1e14, 2e14], resolution=2)
    assert len(handle.frequencies) == 2
    assert handle.region.num_samples == 16


def test_add_near_field_region_invalid():
    with pytest.raises(InvalidConfiguration):
        n2f.add_near_field_region([], frequencies=F0)
    with pytest.raises(InvalidConfiguration):
        n2f.add_near_field_region(SQUARE, frequencies=[], dimensions=2)
    with pytest.raises(InvalidConfiguration):
        n2f.add_near_field_region(SQUARE, frequencies=-F0, dimensions=2)


def test_get_far_field(spectrum_2d):
    fields = n2f.get_far_field(spectrum_2d, point=(0, 5))
    assert fields.shape == (6, 1)
    E_ref, H_ref = n2f.dipole_fields([[0, 5, 0]], (0, 0, 0), (0, 0, 1), [F0], dimensions=2)
    assert np.isclose(fields[2, 0], E_ref[2, 0, 0], rtol=5e-2)
    assert np.isclose(fields[3, 0], H_ref[0, 0, 0], rtol=5e-2)
    assert np.array_equal(fields, n2f.get_far_field(spectrum_2d, point=(0, 5, 0)))


def test_get_far_field_tiled(spectrum_2d):
    plain = n2f.get_far_field(spectrum_2d, point=(0, 20))
    tiled = n2f.get_far_field(spectrum_2d, point=(0, 20), nperiods=3, lattice_vector=(2, 0, 0))
    assert not np.allclose(plain, tiled)


def test_get_far_field_premature(log_capture):
    handle = n2f.add_near_field_region(SQUARE, frequencies=F0, dimensions=2)
    fields = n2f.get_far_field(handle, point=(0, 5))
    assert np.all(fields == 0)
    assert handle.is_frozen
    assert_log_level(log_capture, "WARNING", contains_str="returning zero fields")


def test_get_far_field_errors(spectrum_2d):
    with pytest.raises(UnsupportedFrequency):
        n2f.get_far_field(spectrum_2d, point=(0, 5), freqs=[2 * F0])
    with pytest.raises(SetupError):
        n2f.get_far_field("not a handle", point=(0, 5))
    with pytest.raises(InvalidConfiguration):
        n2f.get_far_field(spectrum_2d, point=(0, 5, 1))


def test_get_far_field_grid(spectrum_2d):
    data = n2f.get_far_field_grid(spectrum_2d, center=(0, 10, 0), size=(2, 0, 0), resolution=2)
    assert isinstance(data, n2f.FarFieldCartesianData)
    assert data.Ez.shape == (4, 1, 1, 1)
    assert np.allclose(data.Ez.coords["x"], [-0.75, -0.25, 0.25, 0.75])
    # symmetric about x=0
    assert np.isclose(data.Ez.values[0, 0, 0, 0], data.Ez.values[-1, 0, 0, 0], rtol=1e-6)


def test_get_flux(spectrum_2d):
    flux = n2f.get_flux(spectrum_2d)
    assert isinstance(flux, n2f.FluxDataArray)
    assert np.isclose(flux.values[0], dipole_power(dimensions=2), rtol=3e-2)


def test_output_far_fields(spectrum_2d, tmp_path):
    fname = str(tmp_path / "far_fields.hdf5")
    data = n2f.output_far_fields(
        spectrum_2d, fname, center=(0, 10, 0), size=(2, 2, 0), resolution=2
    )
    with h5py.File(fname, "r") as f_handle:
        for comp in ("ex", "ey", "ez", "hx", "hy", "hz"):
            assert f"{comp}_0.r" in f_handle
            assert f"{comp}_0.i" in f_handle
        assert f_handle["ez_0.r"].shape == (4, 4, 1)
        assert np.allclose(f_handle["ez_0.i"][()], np.imag(data.Ez.values[..., 0]))

    loaded = n2f.FarFieldCartesianData.from_hdf5(fname)
    assert np.allclose(loaded.Hx.values, data.Hx.values)
    assert loaded.dimensions == 2
