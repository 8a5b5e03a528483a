"""Far fields computed from a near-field spectrum, and the quantities derived from them."""

from __future__ import annotations

import json
from abc import ABC
from typing import Dict, Tuple

import h5py
import numpy as np
import pydantic.v1 as pd
import xarray as xr

from ...exceptions import FileError
from ..base import JSON_TAG, Near2FarBaseModel, cached_property
from ..geometry import Box
from ..medium import Medium
from ..types import Coordinate, Dimensions, E_COMPONENTS, FIELD_COMPONENTS, H_COMPONENTS
from .data_array import DataArray, FarFieldAngleDataArray, FarFieldCartesianDataArray


class AbstractFarFieldData(Near2FarBaseModel, ABC):
    """Six complex field components on a grid of observation points, for each frequency.

    Notes
    -----

        The spatial coordinates and frequencies are stored in the coordinates of the data
        arrays. The quantities derived here assume the time-averaged convention
        ``S = 0.5 Re(E x H*)``.
    """

    medium: Medium = pd.Field(
        Medium(),
        title="Medium",
        description="Homogeneous medium in which the fields were computed.",
    )

    dimensions: Dimensions = pd.Field(
        3,
        title="Dimensions",
        description="Spatial dimension of the setup the fields come from.",
    )

    _spatial_dims: Tuple[str, str, str] = ()

    @property
    def field_components(self) -> Dict[str, DataArray]:
        """Maps the field components to their data."""
        return {comp: getattr(self, comp) for comp in FIELD_COMPONENTS}

    @property
    def freqs(self) -> np.ndarray:
        """Frequencies of the data."""
        return self.Ex.coords["f"].values

    def _stack(self, components: Tuple[str, ...]) -> np.ndarray:
        """Stack components along a new leading axis."""
        return np.stack([getattr(self, comp).values for comp in components])

    def _new_data(self, values: np.ndarray, name: str) -> xr.DataArray:
        """Wrap values shaped like the field components into a data array."""
        return self.Ex.copy(data=values).rename(name)

    @cached_property
    def poynting(self) -> Dict[str, xr.DataArray]:
        """Time-averaged Poynting vector components ``Sx, Sy, Sz``."""
        E = self._stack(E_COMPONENTS)
        H = self._stack(H_COMPONENTS)
        poynting = 0.5 * np.real(np.cross(E, np.conj(H), axisa=0, axisb=0, axisc=0))
        return {
            f"S{dim}": self._new_data(poynting[idx], f"S{dim}") for idx, dim in enumerate("xyz")
        }

    @cached_property
    def intensity(self) -> xr.DataArray:
        """Magnitude of the time-averaged Poynting vector."""
        magnitude = np.sqrt(sum(comp.values**2 for comp in self.poynting.values()))
        return self._new_data(magnitude, "intensity")

    @cached_property
    def energy_density(self) -> xr.DataArray:
        """Time-averaged electromagnetic energy density ``0.25 (eps |E|^2 + mu |H|^2)``."""
        E_sq = np.sum(np.abs(self._stack(E_COMPONENTS)) ** 2, axis=0)
        H_sq = np.sum(np.abs(self._stack(H_COMPONENTS)) ** 2, axis=0)
        density = 0.25 * (self.medium.epsilon * E_sq + self.medium.mu * H_sq)
        return self._new_data(density, "energy_density")

    def to_hdf5(self, fname: str) -> None:
        """Export the fields with one real and one imaginary array per component and frequency.

        For a component ``Ex`` and frequency index ``i``, the datasets are named ``ex_i.r`` and
        ``ex_i.i``, and hold arrays indexed by the spatial grid. The grid coordinates are stored
        in datasets named after each dimension, the frequencies in ``f``.

        Parameters
        ----------
        fname : str
            Full path to the .hdf5 file.
        """
        with h5py.File(fname, "w") as f_handle:
            f_handle[JSON_TAG] = self._json()
            for dim in self._spatial_dims + ("f",):
                f_handle[dim] = self.Ex.coords[dim].values
            for comp, data in self.field_components.items():
                for idx_f in range(len(self.freqs)):
                    values = data.isel(f=idx_f).values
                    f_handle[f"{comp.lower()}_{idx_f}.r"] = np.real(values)
                    f_handle[f"{comp.lower()}_{idx_f}.i"] = np.imag(values)

    @classmethod
    def from_hdf5(cls, fname: str, **parse_obj_kwargs) -> AbstractFarFieldData:
        """Load the fields written by :meth:`to_hdf5`."""
        with h5py.File(fname, "r") as f_handle:
            if JSON_TAG not in f_handle:
                raise FileError(f"File '{fname}' does not hold far field data.")
            model_dict = json.loads(f_handle[JSON_TAG][()])
            coords = {dim: np.array(f_handle[dim]) for dim in cls._spatial_dims + ("f",)}
            data_array_type = cls.__fields__["Ex"].type_
            for comp in FIELD_COMPONENTS:
                values = np.stack(
                    [
                        np.array(f_handle[f"{comp.lower()}_{idx_f}.r"])
                        + 1j * np.array(f_handle[f"{comp.lower()}_{idx_f}.i"])
                        for idx_f in range(len(coords["f"]))
                    ],
                    axis=-1,
                )
                model_dict[comp] = data_array_type(values, coords=coords)
        return cls.parse_obj(model_dict, **parse_obj_kwargs)


class FarFieldCartesianData(AbstractFarFieldData):
    """Far fields on a Cartesian grid of observation points.

    Example
    -------
    >>> data = projector.evaluate(FarFieldCartesianQuery.point((0, 0, 100))) # doctest: +SKIP
    >>> ex = data.Ex.sel(x=0, y=0, z=100) # doctest: +SKIP
    """

    Ex: FarFieldCartesianDataArray = pd.Field(..., title="Ex", description="Electric field x.")
    Ey: FarFieldCartesianDataArray = pd.Field(..., title="Ey", description="Electric field y.")
    Ez: FarFieldCartesianDataArray = pd.Field(..., title="Ez", description="Electric field z.")
    Hx: FarFieldCartesianDataArray = pd.Field(..., title="Hx", description="Magnetic field x.")
    Hy: FarFieldCartesianDataArray = pd.Field(..., title="Hy", description="Magnetic field y.")
    Hz: FarFieldCartesianDataArray = pd.Field(..., title="Hz", description="Magnetic field z.")

    _spatial_dims = ("x", "y", "z")

    @property
    def coords(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Grid coordinates along x, y, z."""
        return tuple(self.Ex.coords[dim].values for dim in "xyz")

    def fields_array(self) -> np.ndarray:
        """All six components as one array of shape ``(6, nx, ny, nz, num_freqs)``."""
        return self._stack(E_COMPONENTS + H_COMPONENTS)


class FarFieldAngleData(AbstractFarFieldData):
    """Far fields on a spherical grid of observation points around ``origin``.

    Example
    -------
    >>> query = FarFieldAngleQuery.circle(radius=1e3, num_phi=360) # doctest: +SKIP
    >>> data = projector.evaluate(query) # doctest: +SKIP
    >>> fields = data.fields_spherical # doctest: +SKIP
    """

    Ex: FarFieldAngleDataArray = pd.Field(..., title="Ex", description="Electric field x.")
    Ey: FarFieldAngleDataArray = pd.Field(..., title="Ey", description="Electric field y.")
    Ez: FarFieldAngleDataArray = pd.Field(..., title="Ez", description="Electric field z.")
    Hx: FarFieldAngleDataArray = pd.Field(..., title="Hx", description="Magnetic field x.")
    Hy: FarFieldAngleDataArray = pd.Field(..., title="Hy", description="Magnetic field y.")
    Hz: FarFieldAngleDataArray = pd.Field(..., title="Hz", description="Magnetic field z.")

    origin: Coordinate = pd.Field(
        (0.0, 0.0, 0.0),
        title="Origin",
        description="Center of the spherical coordinate system.",
    )

    _spatial_dims = ("r", "theta", "phi")

    @cached_property
    def _angles(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Distance and angles broadcast to the spatial grid."""
        r, theta, phi = (self.Ex.coords[dim].values for dim in self._spatial_dims)
        return np.meshgrid(r, theta, phi, indexing="ij")

    @cached_property
    def fields_spherical(self) -> Dict[str, xr.DataArray]:
        """Field components along ``r``, ``theta`` and ``phi``."""
        _, theta, phi = (angle[..., None] for angle in self._angles)
        fields = {}
        for field in "EH":
            components = [getattr(self, f"{field}{dim}").values for dim in "xyz"]
            spherical = Box.car_2_sph_field(*components, theta=theta, phi=phi)
            for name, values in zip(("r", "theta", "phi"), spherical):
                fields[f"{field}{name}"] = self._new_data(values, f"{field}{name}")
        return fields

    @cached_property
    def radiated_power_density(self) -> xr.DataArray:
        """Outgoing power per unit solid angle (3D) or per unit angle and length (2D)."""
        r = self._angles[0][..., None]
        theta, phi = (angle[..., None] for angle in self._angles[1:])
        s_r, _, _ = Box.car_2_sph_field(
            *(self.poynting[f"S{dim}"].values for dim in "xyz"), theta=theta, phi=phi
        )
        power = s_r * r**2 if self.dimensions == 3 else s_r * r
        return self._new_data(power, "radiated_power_density")
