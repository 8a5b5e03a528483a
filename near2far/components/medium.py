"""Defines the homogeneous medium surrounding the near-field surface."""

from __future__ import annotations

import numpy as np
import pydantic.v1 as pd

from ..constants import C_0, EPSILON_0, ETA_0, MU_0, PERMEABILITY, PERMITTIVITY
from .base import Near2FarBaseModel, cached_property


class Medium(Near2FarBaseModel):
    """Homogeneous, lossless, isotropic medium in which the near fields are projected.

    Notes
    -----

        The exterior of the near-field surface must be uniform for the surface equivalence
        principle to hold, so a single dispersionless medium describes the whole propagation
        region.

    Example
    -------
    >>> glass = Medium(permittivity=2.25)
    >>> k = glass.wavenumber(2e14)
    """

    permittivity: float = pd.Field(
        1.0, gt=0.0, title="Permittivity", description="Relative permittivity.", units=PERMITTIVITY
    )

    permeability: float = pd.Field(
        1.0,
        gt=0.0,
        title="Permeability",
        description="Relative permeability.",
        units=PERMEABILITY,
    )

    @cached_property
    def index(self) -> float:
        """Refractive index of the medium."""
        return np.sqrt(self.permittivity * self.permeability)

    @cached_property
    def impedance(self) -> float:
        """Wave impedance of the medium in Ohms."""
        return ETA_0 * np.sqrt(self.permeability / self.permittivity)

    @cached_property
    def epsilon(self) -> float:
        """Absolute permittivity [F/um]."""
        return EPSILON_0 * self.permittivity

    @cached_property
    def mu(self) -> float:
        """Absolute permeability [H/um]."""
        return MU_0 * self.permeability

    def wavenumber(self, frequency: float) -> float:
        """Wave number in the medium at ``frequency`` (Hz), in rad/um. Accepts arrays."""
        return 2 * np.pi * np.asarray(frequency) * self.index / C_0

    def wavelength(self, frequency: float) -> float:
        """Wavelength in the medium at ``frequency`` (Hz), in um. Accepts arrays."""
        return C_0 / self.index / np.asarray(frequency)
