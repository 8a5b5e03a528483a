"""Tests the free-space Green's functions and dipole fields."""
import numpy as np
import pytest
import near2far as n2f

from .utils import F0


@pytest.mark.parametrize("dimensions", [2, 3])
def test_green_derivatives(dimensions):
    """Radial derivatives agree with finite differences."""
    k = 2 * np.pi
    dist = np.linspace(0.3, 5.0, 20)
    step = 1e-6
    g, dg, d2g = n2f.scalar_green(k, dist, dimensions)
    g_plus, dg_plus, _ = n2f.scalar_green(k, dist + step, dimensions)
    g_minus, dg_minus, _ = n2f.scalar_green(k, dist - step, dimensions)
    assert np.allclose(dg, (g_plus - g_minus) / (2 * step), rtol=1e-5)
    assert np.allclose(d2g, (dg_plus - dg_minus) / (2 * step), rtol=1e-5)


def test_green_3d_value():
    k = 2.0
    g, _, _ = n2f.scalar_green(k, 1.5, dimensions=3)
    assert np.isclose(g, np.exp(1j * k * 1.5) / (4 * np.pi * 1.5))


@pytest.mark.parametrize("dimensions", [2, 3])
def test_green_helmholtz(dimensions):
    """The Green's function solves the homogeneous Helmholtz equation away from the source."""
    k = 2 * np.pi
    dist = np.linspace(0.5, 3.0, 10)
    g, dg, d2g = n2f.scalar_green(k, dist, dimensions)
    laplacian = d2g + (dimensions - 1) * dg / dist
    assert np.allclose(laplacian + k**2 * g, 0, atol=1e-8 * np.max(np.abs(k**2 * g)))


def test_dipole_far_zone():
    """Far from a point current, fields are transverse with ratio given by the impedance."""
    medium = n2f.Medium(permittivity=2.0)
    obs = 200 * np.array([[0.0, 0.6, 0.8], [1.0, 0.0, 0.0], [0.36, 0.48, 0.8]])
    E, H = n2f.dipole_fields(obs, (0, 0, 0), (0.2, 0.5, 1.0), [F0], medium=medium)
    r_hat = obs / np.linalg.norm(obs, axis=1)[:, None]
    E_mag = np.linalg.norm(E[..., 0], axis=0)
    H_mag = np.linalg.norm(H[..., 0], axis=0)
    assert np.all(np.abs(np.einsum("co,oc->o", E[..., 0], r_hat)) < 1e-2 * E_mag)
    assert np.allclose(E_mag / H_mag, medium.impedance, rtol=1e-2)


def test_dipole_3d_broadside_amplitude():
    """Broadside field of a z-oriented point current."""
    distance = 300.0
    E, _ = n2f.dipole_fields([[distance, 0, 0]], (0, 0, 0), (0, 0, 1), [F0])
    k = n2f.Medium().wavenumber(F0)
    expected = k * n2f.ETA_0 / (4 * np.pi * distance)
    assert np.isclose(np.abs(E[2, 0, 0]), expected, rtol=1e-2)


def test_dipole_2d_line_current():
    """A z-oriented line current only radiates Ez, Hx and Hy, following the Hankel function."""
    obs = np.array([[3.0, 4.0, 0.0]])
    E, H = n2f.dipole_fields(obs, (0, 0, 0), (0, 0, 1), [F0], dimensions=2)
    omega = 2 * np.pi * F0
    k = n2f.Medium().wavenumber(F0)
    g, _, _ = n2f.scalar_green(k, 5.0, dimensions=2)
    assert np.isclose(E[2, 0, 0], 1j * omega * n2f.MU_0 * g)
    assert np.allclose(E[:2, 0, 0], 0)
    assert np.isclose(H[2, 0, 0], 0)


def test_magnetic_dipole_duality():
    """Fields of a magnetic current follow those of an electric one by duality."""
    obs = np.array([[1.0, 2.0, 3.0]])
    E_e, H_e = n2f.dipole_fields(obs, (0, 0, 0), (0, 0, 1), [F0])
    E_m, H_m = n2f.dipole_fields(obs, (0, 0, 0), (0, 0, 1), [F0], magnetic=True)
    assert np.allclose(E_m, -H_e)
    assert np.allclose(H_m * n2f.MU_0, E_e * n2f.EPSILON_0)


def test_zero_frequency():
    E, H = n2f.dipole_fields([[1.0, 0, 0]], (0, 0, 0), (0, 0, 1), [0.0, F0])
    assert np.all(E[..., 0] == 0) and np.all(H[..., 0] == 0)
    assert np.any(E[..., 1] != 0)


def test_fields_from_currents_superposition(rng):
    obs = rng.random((4, 3)) + 5
    src = rng.random((3, 3))
    J = rng.random((3, 3, 2)) + 1j * rng.random((3, 3, 2))
    M = rng.random((3, 3, 2)) + 1j * rng.random((3, 3, 2))
    freqs = [F0, 2 * F0]
    E, H = n2f.fields_from_currents(obs, src, J, M, dA=0.5, freqs=freqs)
    E_sum = np.zeros_like(E)
    H_sum = np.zeros_like(H)
    for idx in range(3):
        E_i, H_i = n2f.fields_from_currents(
            obs, src[idx : idx + 1], J[:, idx : idx + 1], M[:, idx : idx + 1], dA=0.5, freqs=freqs
        )
        E_sum += E_i
        H_sum += H_i
    assert np.allclose(E, E_sum)
    assert np.allclose(H, H_sum)
