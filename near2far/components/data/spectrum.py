"""Frozen frequency-domain fields recorded on a near-field surface."""

from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np
import pydantic.v1 as pd

from ...exceptions import DataError, SetupError
from ..base import Near2FarBaseModel, cached_property
from ..frequencies import FrequencySet
from ..surface import NearFieldRegion, PatchGrid
from ..types import FIELD_COMPONENTS
from .data_array import FluxDataArray, SurfaceFieldDataArray


class PatchSpectrum(Near2FarBaseModel):
    """Tangential frequency-domain fields on the sample grid of one patch.

    Notes
    -----

        Only the tangential components of the patch are stored; the others are ``None``. The
        equivalent surface currents are ``J = n x H`` and ``M = -n x E`` with ``n`` the outward
        normal scaled by the patch weight.
    """

    grid: PatchGrid = pd.Field(
        ...,
        title="Grid",
        description="Sample grid of the patch.",
    )

    Ex: Optional[SurfaceFieldDataArray] = pd.Field(
        None,
        title="Ex",
        description="Spatial distribution of the x-component of the electric field.",
    )
    Ey: Optional[SurfaceFieldDataArray] = pd.Field(
        None,
        title="Ey",
        description="Spatial distribution of the y-component of the electric field.",
    )
    Ez: Optional[SurfaceFieldDataArray] = pd.Field(
        None,
        title="Ez",
        description="Spatial distribution of the z-component of the electric field.",
    )
    Hx: Optional[SurfaceFieldDataArray] = pd.Field(
        None,
        title="Hx",
        description="Spatial distribution of the x-component of the magnetic field.",
    )
    Hy: Optional[SurfaceFieldDataArray] = pd.Field(
        None,
        title="Hy",
        description="Spatial distribution of the y-component of the magnetic field.",
    )
    Hz: Optional[SurfaceFieldDataArray] = pd.Field(
        None,
        title="Hz",
        description="Spatial distribution of the z-component of the magnetic field.",
    )

    def _post_init_validators(self) -> None:
        """Every tangential component must be stored on the grid of the patch."""
        for component in self.grid.components:
            data = getattr(self, component)
            if data is None:
                raise DataError(f"Tangential component '{component}' missing from patch data.")
            if data.shape[:3] != self.grid.shape:
                raise DataError(
                    f"'{component}' has spatial shape {data.shape[:3]}, "
                    f"but the patch grid has shape {self.grid.shape}."
                )

    @property
    def field_components(self) -> Dict[str, SurfaceFieldDataArray]:
        """Maps the stored field components to their data."""
        fields = {comp: getattr(self, comp) for comp in FIELD_COMPONENTS}
        return {comp: data for comp, data in fields.items() if data is not None}

    @property
    def num_freqs(self) -> int:
        """Number of frequencies."""
        return self.field_components[self.grid.components[0]].sizes["f"]

    def _field_vector(self, field: str) -> np.ndarray:
        """Field ``"E"`` or ``"H"`` as an array of shape ``(3, num_samples, num_freqs)``.

        Components that were not recorded are set to zero.
        """
        vector = np.zeros((3, self.grid.num_samples, self.num_freqs), dtype=complex)
        for dim, name in enumerate("xyz"):
            data = getattr(self, field + name)
            if data is not None:
                vector[dim] = np.reshape(data.values, (self.grid.num_samples, self.num_freqs))
        return vector

    @cached_property
    def currents(self) -> Tuple[np.ndarray, np.ndarray]:
        """Equivalent electric and magnetic surface currents, ``(3, num_samples, num_freqs)``."""
        normal = self.grid.normal
        J = np.cross(normal, self._field_vector("H"), axisb=0, axisc=0)
        M = -np.cross(normal, self._field_vector("E"), axisb=0, axisc=0)
        return J, M

    @cached_property
    def poynting(self) -> np.ndarray:
        """Time-averaged Poynting vector along the weighted outward normal,
        shape ``(num_samples, num_freqs)``."""
        E = self._field_vector("E")
        H = self._field_vector("H")
        poynting = 0.5 * np.real(np.cross(E, np.conj(H), axisa=0, axisb=0, axisc=0))
        return np.einsum("c,csf->sf", self.grid.normal, poynting)

    @cached_property
    def flux(self) -> np.ndarray:
        """Power flowing out through the patch at each frequency."""
        return np.sum(self.poynting, axis=0) * self.grid.dA


class FrozenSpectrum(Near2FarBaseModel):
    """Read-only frequency-domain fields of a near-field region, produced by ``finalize``.

    Notes
    -----

        Spectra of identical regions and frequencies can be added, subtracted and scaled,
        for instance to remove the incident fields recorded in a reference run.

    Example
    -------
    >>> scattered = total - incident # doctest: +SKIP
    """

    region: NearFieldRegion = pd.Field(
        ...,
        title="Region",
        description="Near-field region the fields were recorded on.",
    )

    frequencies: FrequencySet = pd.Field(
        ...,
        title="Frequencies",
        description="Frequencies of the running Fourier transforms.",
    )

    patches: Tuple[PatchSpectrum, ...] = pd.Field(
        ...,
        title="Patches",
        description="Recorded fields of each patch, in the order of the region patches.",
    )

    num_steps: pd.NonNegativeInt = pd.Field(
        0,
        title="Number of time steps",
        description="Number of time steps absorbed into the transforms.",
    )

    def _post_init_validators(self) -> None:
        """Patch data must follow the region discretization."""
        if len(self.patches) != len(self.region.patches):
            raise DataError(
                f"Spectrum holds {len(self.patches)} patches, "
                f"region has {len(self.region.patches)}."
            )
        for patch, grid in zip(self.patches, self.region.grids):
            if patch.grid.shape != grid.shape or patch.grid.normal_axis != grid.normal_axis:
                raise DataError("Patch data does not match the region discretization.")
            if patch.num_freqs != len(self.frequencies):
                raise DataError(
                    f"Patch data holds {patch.num_freqs} frequencies, "
                    f"expected {len(self.frequencies)}."
                )

    @property
    def dimensions(self) -> int:
        """Spatial dimension of the recorded region."""
        return self.region.dimensions

    @property
    def is_empty(self) -> bool:
        """Whether no time step was absorbed, so that every field is zero."""
        return self.num_steps == 0

    @cached_property
    def flux(self) -> FluxDataArray:
        """Near-field flux out of the region, computed directly from the surface fields."""
        flux = np.sum([patch.flux for patch in self.patches], axis=0)
        return FluxDataArray(flux, coords=dict(f=list(self.frequencies.freqs)))

    @cached_property
    def sources(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Sample points, electric and magnetic currents, and cell measures of all patches.

        Returns
        -------
        Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]
            Points ``(num_samples, 3)``, ``J`` and ``M`` ``(3, num_samples, num_freqs)`` and
            ``dA`` ``(num_samples,)``.
        """
        points = np.concatenate([patch.grid.sample_points() for patch in self.patches])
        J = np.concatenate([patch.currents[0] for patch in self.patches], axis=1)
        M = np.concatenate([patch.currents[1] for patch in self.patches], axis=1)
        dA = np.concatenate(
            [np.full(patch.grid.num_samples, patch.grid.dA) for patch in self.patches]
        )
        return points, J, M, dA

    def _combine(self, other: FrozenSpectrum, scale: complex) -> FrozenSpectrum:
        """``self + scale * other`` for spectra of the same region and frequencies."""
        if not isinstance(other, FrozenSpectrum):
            return NotImplemented
        if self.region != other.region or self.frequencies != other.frequencies:
            raise SetupError(
                "Only spectra recorded on the same region at the same frequencies can be combined."
            )
        patches = []
        for patch_self, patch_other in zip(self.patches, other.patches):
            fields = {
                comp: data.copy(data=data.values + scale * getattr(patch_other, comp).values)
                for comp, data in patch_self.field_components.items()
            }
            patches.append(patch_self.updated_copy(**fields))
        num_steps = max(self.num_steps, other.num_steps)
        return self.updated_copy(patches=patches, num_steps=num_steps)

    def __add__(self, other: FrozenSpectrum) -> FrozenSpectrum:
        return self._combine(other, 1.0)

    def __sub__(self, other: FrozenSpectrum) -> FrozenSpectrum:
        return self._combine(other, -1.0)

    def __mul__(self, scale: complex) -> FrozenSpectrum:
        if not np.isscalar(scale):
            return NotImplemented
        patches = [
            patch.updated_copy(
                **{
                    comp: data.copy(data=scale * data.values)
                    for comp, data in patch.field_components.items()
                }
            )
            for patch in self.patches
        ]
        return self.updated_copy(patches=patches)

    __rmul__ = __mul__
