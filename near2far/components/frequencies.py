"""Ordered set of frequencies at which the running Fourier transforms are evaluated."""

from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np
import pydantic.v1 as pd

from ..constants import FREQ_RTOL, HERTZ
from ..exceptions import InvalidConfiguration, UnsupportedFrequency
from .base import Near2FarBaseModel, cached_property
from .medium import Medium


class FrequencySet(Near2FarBaseModel):
    """Ordered frequencies fixed for the lifetime of one accumulation pass.

    Example
    -------
    >>> freqs = FrequencySet.from_center(fcen=2e14, df=1e14, nfreq=11)
    >>> freqs.index(2e14)
    5
    """

    freqs: Tuple[float, ...] = pd.Field(
        ...,
        title="Frequencies",
        description="Frequencies at which the near fields are transformed.",
        units=HERTZ,
    )

    @classmethod
    def from_center(cls, fcen: float, df: float = 0.0, nfreq: int = 1) -> FrequencySet:
        """Frequency set of ``nfreq`` equally spaced points spanning ``[fcen - df/2, fcen + df/2]``.

        Parameters
        ----------
        fcen : float
            Center frequency in Hz.
        df : float = 0.0
            Bandwidth in Hz. Ignored when ``nfreq == 1``.
        nfreq : int = 1
            Number of frequencies.

        Returns
        -------
        :class:`FrequencySet`
            The frequency set.
        """
        if nfreq < 1:
            raise InvalidConfiguration(f"'nfreq' must be at least 1, got {nfreq}.")
        if nfreq == 1:
            return cls(freqs=(fcen,))
        freqs = np.linspace(fcen - df / 2, fcen + df / 2, nfreq)
        return cls(freqs=tuple(freqs.tolist()))

    def _post_init_validators(self) -> None:
        """Reject empty sets and frequencies that are negative or not finite."""
        if len(self.freqs) == 0:
            raise InvalidConfiguration("A frequency set needs at least one frequency.")
        freqs = np.array(self.freqs)
        if not np.all(np.isfinite(freqs)):
            raise InvalidConfiguration(f"Frequencies must be finite, got {self.freqs}.")
        if np.any(freqs < 0):
            raise InvalidConfiguration(f"Frequencies must be non-negative, got {self.freqs}.")

    @cached_property
    def array(self) -> np.ndarray:
        """Frequencies as a numpy array."""
        return np.array(self.freqs, dtype=float)

    @cached_property
    def omegas(self) -> np.ndarray:
        """Angular frequencies."""
        return 2 * np.pi * self.array

    def wavelengths(self, medium: Medium = None) -> np.ndarray:
        """Wavelengths in ``medium`` (vacuum by default)."""
        medium = Medium() if medium is None else medium
        return medium.wavelength(self.array)

    def index(self, frequency: float) -> int:
        """Position of ``frequency`` in the set, matched with a relative tolerance.

        Raises
        ------
        :class:`.UnsupportedFrequency`
            If the frequency was not registered.
        """
        tol = FREQ_RTOL * max(abs(frequency), 1.0)
        matches = np.nonzero(np.abs(self.array - frequency) <= tol)[0]
        if len(matches) == 0:
            raise UnsupportedFrequency(
                f"Frequency {frequency:.6e} Hz was not recorded; available frequencies are "
                f"{', '.join(f'{f:.6e}' for f in self.freqs)} Hz. No interpolation is performed."
            )
        return int(matches[0])

    def indices(self, freqs) -> np.ndarray:
        """Positions of several frequencies, ``None`` selecting every frequency."""
        if freqs is None:
            return np.arange(len(self))
        return np.array([self.index(f) for f in np.atleast_1d(freqs)], dtype=int)

    def __len__(self) -> int:
        return len(self.freqs)

    def __iter__(self) -> Iterator[float]:
        return iter(self.freqs)
