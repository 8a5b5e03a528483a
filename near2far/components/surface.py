"""Near-field surfaces: oriented rectangular patches and their sample grids."""

from __future__ import annotations

from typing import List, Optional, Tuple

import numpy as np
import pydantic.v1 as pydantic

from ..constants import PERMICRON
from ..exceptions import InvalidConfiguration
from ..log import log
from .base import Near2FarBaseModel, cached_property
from .geometry import Box
from .types import ArrayFloat1D, Axis, Coordinate, Dimensions, Size

# surfaces are discretized with this many samples per um unless told otherwise
DEFAULT_RESOLUTION = 20.0


class NearFieldPatch(Box):
    """Axis-aligned planar patch of a near-field surface.

    Notes
    -----

        The patch normal lies along ``direction`` when given, otherwise along the axis of zero
        size (in 2D, the zero-size axis among x and y). The outward normal is the unit vector
        along that axis scaled by ``weight``, so ``weight=-1`` flips the orientation and other
        real values scale the contribution of the patch.

    Example
    -------
    >>> top = NearFieldPatch(center=(0, 0, 1), size=(2, 2, 0), weight=1)
    >>> bottom = NearFieldPatch(center=(0, 0, -1), size=(2, 2, 0), weight=-1)
    """

    weight: float = pydantic.Field(
        1.0,
        title="Weight",
        description="Scale factor applied to the outward normal of the patch, encoding its "
        "orientation and contribution.",
    )

    direction: Optional[Axis] = pydantic.Field(
        None,
        title="Normal Axis",
        description="Axis along which the patch normal points. If not given, inferred from "
        "the axis of zero size.",
    )

    def normal_axis(self, dimensions: int = 3) -> Axis:
        """Axis of the patch normal in a ``dimensions``-dimensional setup."""
        if self.direction is not None:
            return self.direction
        candidate_axes = range(3) if dimensions == 3 else range(2)
        zero_axes = [dim for dim in candidate_axes if self.size[dim] == 0.0]
        if len(zero_axes) != 1:
            raise InvalidConfiguration(
                f"Can't infer the normal of patch with size {self.size} in {dimensions}D: "
                "exactly one of its sizes must be zero, or 'direction' must be given."
            )
        return zero_axes[0]


class PatchGrid(Near2FarBaseModel):
    """Midpoint sample grid of one near-field patch.

    Coordinates along the normal axis, and along z in 2D, hold a single value.
    """

    x: ArrayFloat1D = pydantic.Field(..., title="x", description="x sample coordinates.")
    y: ArrayFloat1D = pydantic.Field(..., title="y", description="y sample coordinates.")
    z: ArrayFloat1D = pydantic.Field(..., title="z", description="z sample coordinates.")

    dA: pydantic.PositiveFloat = pydantic.Field(
        ...,
        title="Cell measure",
        description="Area (3D) or length (2D) of the cell around each sample.",
    )

    normal_axis: Axis = pydantic.Field(..., title="Normal axis")

    weight: float = pydantic.Field(1.0, title="Weight")

    dimensions: Dimensions = pydantic.Field(3, title="Dimensions")

    @cached_property
    def coords(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Sample coordinates along x, y, z."""
        return (self.x, self.y, self.z)

    @cached_property
    def shape(self) -> Tuple[int, int, int]:
        """Shape of the sample grid."""
        return (len(self.x), len(self.y), len(self.z))

    @cached_property
    def num_samples(self) -> int:
        """Total number of samples."""
        return int(np.prod(self.shape))

    @cached_property
    def tangential_axes(self) -> Tuple[Axis, Axis]:
        """The two axes tangential to the patch, in ascending order."""
        _, axes = Box.pop_axis((0, 1, 2), axis=self.normal_axis)
        return axes

    @cached_property
    def components(self) -> Tuple[str, ...]:
        """Tangential field components recorded on this patch."""
        names = ["xyz"[axis] for axis in self.tangential_axes]
        return tuple(f"{field}{name}" for field in "EH" for name in names)

    @cached_property
    def normal(self) -> np.ndarray:
        """Outward normal vector scaled by the patch weight."""
        normal = np.zeros(3)
        normal[self.normal_axis] = self.weight
        return normal

    def sample_points(self) -> np.ndarray:
        """Positions of all samples, shape ``(num_samples, 3)``, in C order over the grid."""
        xx, yy, zz = np.meshgrid(self.x, self.y, self.z, indexing="ij")
        return np.stack([xx.ravel(), yy.ravel(), zz.ravel()], axis=-1)


class NearFieldRegion(Near2FarBaseModel):
    """Immutable union of near-field patches, discretized at a fixed resolution.

    Notes
    -----

        The patches together must form, or approximate in the directions of interest, a closed
        surface around every source and scatterer, with outward weights. The transformation is
        exact only for a closed surface; this is not checked.

    Example
    -------
    >>> region = NearFieldRegion.box(center=(0, 0, 0), size=(2, 2, 2), resolution=10)
    >>> len(region.patches)
    6
    """

    patches: Tuple[NearFieldPatch, ...] = pydantic.Field(
        ...,
        title="Patches",
        description="Rectangular patches making up the near-field surface.",
    )

    dimensions: Dimensions = pydantic.Field(
        3,
        title="Dimensions",
        description="Spatial dimension of the setup. 2D setups lie in the xy plane and are "
        "invariant along z.",
    )

    resolution: pydantic.PositiveFloat = pydantic.Field(
        DEFAULT_RESOLUTION,
        title="Resolution",
        description="Number of samples per micrometer used to discretize every patch.",
        units=PERMICRON,
    )

    def _post_init_validators(self) -> None:
        """Check the patches describe a non-degenerate surface of matching dimensionality."""
        if len(self.patches) == 0:
            raise InvalidConfiguration("A near-field region needs at least one patch.")
        for index, patch in enumerate(self.patches):
            if self.dimensions == 2:
                if patch.size[2] != 0.0 or patch.center[2] != 0.0:
                    raise InvalidConfiguration(
                        f"Patch {index} of a 2D region must lie in the plane z=0, "
                        f"got center {patch.center} and size {patch.size}."
                    )
                if patch.direction == 2:
                    raise InvalidConfiguration(
                        f"Patch {index} of a 2D region can't have its normal along z."
                    )
            normal_axis = patch.normal_axis(self.dimensions)
            if patch.size[normal_axis] != 0.0:
                raise InvalidConfiguration(
                    f"Patch {index} must be planar: its size along the normal axis "
                    f"{'xyz'[normal_axis]} is {patch.size[normal_axis]}."
                )
            _, tangential_axes = Box.pop_axis((0, 1, 2), axis=normal_axis)
            in_plane_axes = [axis for axis in tangential_axes if self.dimensions == 3 or axis != 2]
            if any(patch.size[axis] == 0.0 for axis in in_plane_axes):
                raise InvalidConfiguration(
                    f"Patch {index} with size {patch.size} has zero "
                    f"{'area' if self.dimensions == 3 else 'length'}."
                )
            if patch.weight == 0.0:
                log.warning(f"Patch {index} has zero weight and does not contribute.")

    @classmethod
    def box(
        cls,
        center: Coordinate,
        size: Size,
        dimensions: int = 3,
        resolution: float = DEFAULT_RESOLUTION,
        weight: float = 1.0,
    ) -> NearFieldRegion:
        """Closed box surface with outward weights, 6 faces in 3D and 4 edges in 2D.

        The faces are stored in the order [x-, x+, y-, y+, z-, z+].

        Parameters
        ----------
        center : Tuple[float, float, float]
            Center of the box.
        size : Tuple[float, float, float]
            Size of the box. In 2D the z size is ignored.
        dimensions : int = 3
            Spatial dimension of the setup.
        resolution : float
            Samples per micrometer.
        weight : float = 1.0
            Magnitude of the weight of every face; the sign is set by the face orientation.

        Returns
        -------
        :class:`NearFieldRegion`
            The closed surface.
        """
        if dimensions == 2:
            center = (center[0], center[1], 0.0)
            size = (size[0], size[1], 0.0)
        num_axes = 3 if dimensions == 3 else 2
        if any(s == 0.0 for s in size[:num_axes]):
            raise InvalidConfiguration(
                f"Can't generate the faces of a box with zero volume, got size {size}."
            )

        bounds = Box(center=center, size=size).bounds
        patches = []
        for dim_index in range(num_axes):
            for min_max_index, sign in zip(range(2), (-1.0, 1.0)):
                new_center = list(center)
                new_size = list(size)
                new_center[dim_index] = bounds[min_max_index][dim_index]
                new_size[dim_index] = 0.0
                patches.append(
                    NearFieldPatch(
                        center=new_center,
                        size=new_size,
                        weight=sign * weight,
                        direction=dim_index,
                    )
                )
        return cls(patches=patches, dimensions=dimensions, resolution=resolution)

    @cached_property
    def grids(self) -> List[PatchGrid]:
        """Sample grid of every patch, in patch order."""
        grids = []
        for patch in self.patches:
            normal_axis = patch.normal_axis(self.dimensions)
            coords, spacings = patch.sample_coords(self.resolution)
            _, tangential_axes = Box.pop_axis((0, 1, 2), axis=normal_axis)
            measure_axes = [axis for axis in tangential_axes if self.dimensions == 3 or axis != 2]
            cell_measure = float(np.prod([spacings[axis] for axis in measure_axes]))
            grids.append(
                PatchGrid(
                    x=coords[0],
                    y=coords[1],
                    z=coords[2],
                    dA=cell_measure,
                    normal_axis=normal_axis,
                    weight=patch.weight,
                    dimensions=self.dimensions,
                )
            )
        return grids

    @cached_property
    def num_samples(self) -> int:
        """Total number of samples over all patches."""
        return sum(grid.num_samples for grid in self.grids)

    @cached_property
    def bounds(self) -> Tuple[Coordinate, Coordinate]:
        """Bounding box of all patches."""
        rmin = np.min([patch.bounds[0] for patch in self.patches], axis=0)
        rmax = np.max([patch.bounds[1] for patch in self.patches], axis=0)
        return tuple(rmin.tolist()), tuple(rmax.tolist())


__all__ = ["NearFieldPatch", "NearFieldRegion", "PatchGrid", "DEFAULT_RESOLUTION"]
