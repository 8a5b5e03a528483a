"""Free-space Green's functions and the radiation of surface currents."""

from __future__ import annotations

from typing import Tuple

import numpy as np
from scipy.special import hankel1

from .medium import Medium
from .types import ArrayLike, Coordinate


def scalar_green(k: float, dist: ArrayLike, dimensions: int = 3) -> Tuple[np.ndarray, ...]:
    """Scalar free-space Green's function and its first two radial derivatives.

    Parameters
    ----------
    k : float
        Wave number in the medium.
    dist : ArrayLike
        Distances between observation and source points.
    dimensions : int = 3
        ``3`` for a point source, ``exp(ikR) / (4 pi R)``; ``2`` for a line source,
        ``(i/4) H0(kR)``.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray, np.ndarray]
        ``g``, ``dg/dR`` and ``d2g/dR2`` evaluated at ``dist``.
    """
    dist = np.asarray(dist, dtype=float)
    ikr = 1j * k * dist

    if dimensions == 3:
        g = np.exp(ikr) / (4 * np.pi * dist)
        dg = g * (ikr - 1) / dist
        d2g = dg * (ikr - 1) / dist + g / dist**2
        return g, dg, d2g

    kr = k * dist
    h0 = hankel1(0, kr)
    h1 = hankel1(1, kr)
    g = 0.25j * h0
    dg = -0.25j * k * h1
    d2g = -0.25j * k**2 * h0 + 0.25j * k * h1 / dist
    return g, dg, d2g


def _radiation_terms(
    currents: np.ndarray,
    r_hat: np.ndarray,
    dist: np.ndarray,
    green: Tuple[np.ndarray, np.ndarray, np.ndarray],
    k: float,
    dimensions: int,
) -> Tuple[np.ndarray, np.ndarray]:
    """Potential and curl contributions of one family of currents.

    Parameters
    ----------
    currents : np.ndarray
        Currents times cell measure at the source points, shape ``(num_src, 3)``.
    r_hat : np.ndarray
        Unit vectors from sources to observation points, shape ``(num_obs, num_src, 3)``.
    dist : np.ndarray
        Distances, shape ``(num_obs, num_src)``.
    green : Tuple[np.ndarray, np.ndarray, np.ndarray]
        Green's function and its radial derivatives at ``dist``.
    k : float
        Wave number.
    dimensions : int
        Spatial dimension.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        ``sum (g p + grad div (g p) / k^2)`` and ``sum curl (g p)``, each ``(num_obs, 3)``.
    """
    g, dg, d2g = green

    # the grad-div operator only acts on in-plane components of 2D currents
    currents_t = currents.copy()
    if dimensions == 2:
        currents_t[:, 2] = 0.0

    p_dot_r = np.einsum("osc,sc->os", r_hat, currents)
    grad_div = (d2g * p_dot_r)[..., None] * r_hat
    grad_div += (dg / dist)[..., None] * (currents_t[None] - p_dot_r[..., None] * r_hat)

    potential = np.sum(g[..., None] * currents[None] + grad_div / k**2, axis=1)
    curl = np.sum(dg[..., None] * np.cross(r_hat, currents[None]), axis=1)
    return potential, curl


def fields_from_currents(
    obs: ArrayLike,
    src: ArrayLike,
    J: ArrayLike,
    M: ArrayLike,
    dA: ArrayLike,
    freqs: ArrayLike,
    medium: Medium = None,
    dimensions: int = 3,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fields radiated by electric and magnetic surface currents, exact at every distance.

    Notes
    -----

        With ``A = mu sum J g dA`` and ``F = eps sum M g dA``,

        .. math::

            E = i \\omega (A + \\nabla \\nabla \\cdot A / k^2) - \\nabla \\times F / \\epsilon

            H = i \\omega (F + \\nabla \\nabla \\cdot F / k^2) + \\nabla \\times A / \\mu

        The sum is a midpoint quadrature over the source samples. Observation points that
        coincide with a source sample give non-finite values.

    Parameters
    ----------
    obs : ArrayLike
        Observation points, shape ``(num_obs, 3)``.
    src : ArrayLike
        Source sample points, shape ``(num_src, 3)``.
    J : ArrayLike
        Electric surface currents, shape ``(3, num_src, num_freqs)``.
    M : ArrayLike
        Magnetic surface currents, shape ``(3, num_src, num_freqs)``.
    dA : ArrayLike
        Cell area (3D) or length (2D) of each source sample, shape ``(num_src,)``.
    freqs : ArrayLike
        Frequencies in Hz, shape ``(num_freqs,)``.
    medium : :class:`.Medium` = None
        Homogeneous exterior medium, vacuum by default.
    dimensions : int = 3
        Spatial dimension. In 2D the setup is invariant along z.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Complex E and H fields, each of shape ``(3, num_obs, num_freqs)``.
    """
    medium = Medium() if medium is None else medium
    obs = np.atleast_2d(np.asarray(obs, dtype=float))
    src = np.atleast_2d(np.asarray(src, dtype=float))
    freqs = np.atleast_1d(np.asarray(freqs, dtype=float))
    dA = np.broadcast_to(np.asarray(dA, dtype=float), (src.shape[0],))
    J = np.asarray(J)
    M = np.asarray(M)

    r_vec = obs[:, None, :] - src[None, :, :]
    if dimensions == 2:
        r_vec[..., 2] = 0.0
    dist = np.linalg.norm(r_vec, axis=-1)
    r_hat = r_vec / dist[..., None]

    E = np.zeros((3, obs.shape[0], len(freqs)), dtype=complex)
    H = np.zeros_like(E)

    for idx_f, freq in enumerate(freqs):
        # the radiation integral has no static limit
        if freq == 0:
            continue
        omega = 2 * np.pi * freq
        k = medium.wavenumber(freq)
        green = scalar_green(k, dist, dimensions)

        J_f = J[:, :, idx_f].T * dA[:, None]
        M_f = M[:, :, idx_f].T * dA[:, None]

        pot_J, curl_J = _radiation_terms(J_f, r_hat, dist, green, k, dimensions)
        pot_M, curl_M = _radiation_terms(M_f, r_hat, dist, green, k, dimensions)

        E[:, :, idx_f] = (1j * omega * medium.mu * pot_J - curl_M).T
        H[:, :, idx_f] = (1j * omega * medium.epsilon * pot_M + curl_J).T

    return E, H


def dipole_fields(
    obs: ArrayLike,
    position: Coordinate,
    polarization: Coordinate,
    freqs: ArrayLike,
    medium: Medium = None,
    dimensions: int = 3,
    magnetic: bool = False,
) -> Tuple[np.ndarray, np.ndarray]:
    """Fields of a point (3D) or line (2D) current of unit strength times ``polarization``.

    Parameters
    ----------
    obs : ArrayLike
        Observation points, shape ``(num_obs, 3)``.
    position : Tuple[float, float, float]
        Location of the current.
    polarization : Tuple[float, float, float]
        Current moment vector, may be complex.
    freqs : ArrayLike
        Frequencies in Hz.
    medium : :class:`.Medium` = None
        Homogeneous medium, vacuum by default.
    dimensions : int = 3
        Spatial dimension.
    magnetic : bool = False
        Whether the current is magnetic rather than electric.

    Returns
    -------
    Tuple[np.ndarray, np.ndarray]
        Complex E and H fields, each of shape ``(3, num_obs, num_freqs)``.
    """
    freqs = np.atleast_1d(np.asarray(freqs, dtype=float))
    moment = np.asarray(polarization, dtype=complex).reshape(3, 1, 1)
    moment = np.broadcast_to(moment, (3, 1, len(freqs)))
    zeros = np.zeros_like(moment)
    J, M = (zeros, moment) if magnetic else (moment, zeros)
    return fields_from_currents(
        obs=obs,
        src=np.array([position], dtype=float),
        J=J,
        M=M,
        dA=1.0,
        freqs=freqs,
        medium=medium,
        dimensions=dimensions,
    )
