"""Running discrete Fourier transforms of tangential fields on a near-field region."""

from __future__ import annotations

from typing import Dict, List, Mapping, Sequence

import numpy as np

from ..exceptions import AccumulationError
from ..log import log
from .data.data_array import SurfaceFieldDataArray
from .data.spectrum import FrozenSpectrum, PatchSpectrum
from .frequencies import FrequencySet
from .surface import NearFieldRegion

# relative tolerance when checking that the time step does not change during a run
DT_RTOL = 1e-9

FieldValues = Sequence[Mapping[str, np.ndarray]]


class AccumulationState:
    """Running Fourier sums of the tangential fields of a :class:`.NearFieldRegion`.

    Each time step adds ``field(t_n) * exp(i 2 pi f t_n) * dt`` to the sum of every sample,
    component and frequency, with ``t_n = (n + offset) * dt``. Magnetic components use the
    offset ``h_time_offset`` to account for fields sampled half a step apart on a staggered
    grid. Memory does not grow with the number of time steps.

    The state is mutated by :meth:`absorb` in strict time order, frozen by :meth:`finalize`
    and cleared by :meth:`reset` for a new run.

    Example
    -------
    >>> state = register(region, FrequencySet(freqs=[2e14])) # doctest: +SKIP
    >>> state.absorb(timestep_index=1, dt=1e-17, field_values=values) # doctest: +SKIP
    >>> spectrum = state.finalize() # doctest: +SKIP
    """

    def __init__(
        self, region: NearFieldRegion, frequencies: FrequencySet, h_time_offset: float = 0.0
    ):
        self.region = region
        self.frequencies = frequencies
        self.h_time_offset = h_time_offset
        self._accumulators: List[Dict[str, np.ndarray]] = []
        self.reset()

    def reset(self) -> None:
        """Zero all running sums, ready for a new run."""
        num_freqs = len(self.frequencies)
        self._accumulators = [
            {
                comp: np.zeros(grid.shape + (num_freqs,), dtype=complex)
                for comp in grid.components
            }
            for grid in self.region.grids
        ]
        self.num_steps = 0
        self.last_timestep = None
        self.dt = None
        self._spectrum = None

    @property
    def is_frozen(self) -> bool:
        """Whether :meth:`finalize` was called since the last reset."""
        return self._spectrum is not None

    def time_offset(self, component: str) -> float:
        """Offset, in units of ``dt``, of the sampling instants of a field component."""
        return self.h_time_offset if component.startswith("H") else 0.0

    def _check_step(self, timestep_index: int, dt: float) -> None:
        """Validate a new time step against the history of the state."""
        if self.is_frozen:
            raise AccumulationError(
                "Can't absorb fields into a finalized state; call 'reset()' to start a new run."
            )
        if dt <= 0:
            raise AccumulationError(f"Time step must be positive, got {dt}.")
        if self.last_timestep is not None and timestep_index <= self.last_timestep:
            raise AccumulationError(
                f"Time steps must be absorbed in increasing order, got step {timestep_index} "
                f"after step {self.last_timestep}."
            )
        if self.dt is not None and not np.isclose(dt, self.dt, rtol=DT_RTOL, atol=0):
            raise AccumulationError(
                f"Time step changed from {self.dt} to {dt} during a run; the running transform "
                "requires a fixed time step."
            )

    def absorb(
        self, timestep_index: int, dt: float, field_values: FieldValues, partial: bool = False
    ) -> None:
        """Add the fields of one time step to the running sums.

        Parameters
        ----------
        timestep_index : int
            Index ``n`` of the time step, strictly larger than the previous one.
        dt : float
            Time step in seconds, fixed for the run.
        field_values : Sequence[Mapping[str, np.ndarray]]
            For each patch of the region, the tangential components (e.g. ``"Ey"``) mapped to
            their values on the patch grid. Other components are ignored.
        partial : bool = False
            Whether missing components are allowed, for owners of part of the region only.
            Missing components then contribute nothing to this step.
        """
        self._check_step(timestep_index, dt)
        if len(field_values) != len(self._accumulators):
            raise AccumulationError(
                f"Got fields for {len(field_values)} patches, "
                f"region has {len(self._accumulators)}."
            )

        omegas = self.frequencies.omegas
        grids = self.region.grids

        # validate every patch before mutating any sum
        updates = []
        for index, (grid, values) in enumerate(zip(grids, field_values)):
            for comp in grid.components:
                if comp not in values:
                    if partial:
                        continue
                    raise AccumulationError(f"Component '{comp}' missing for patch {index}.")
                field = np.asarray(values[comp])
                if field.shape != grid.shape:
                    if field.size != grid.num_samples:
                        raise AccumulationError(
                            f"'{comp}' of patch {index} has shape {field.shape}, "
                            f"expected {grid.shape}."
                        )
                    field = np.reshape(field, grid.shape)
                updates.append((index, comp, field))

        for index, comp, field in updates:
            time = (timestep_index + self.time_offset(comp)) * dt
            kernel = np.exp(1j * omegas * time) * dt
            self._accumulators[index][comp] += field[..., None] * kernel

        self.num_steps += 1
        self.last_timestep = timestep_index
        self.dt = dt

    def finalize(self) -> FrozenSpectrum:
        """Freeze the state and return its frequency-domain fields.

        Calling it again returns the same spectrum. A state that absorbed no time steps gives an
        all-zero spectrum and logs a warning.
        """
        if self._spectrum is not None:
            return self._spectrum

        if self.num_steps == 0:
            log.warning(
                "Near-field region finalized before any time step was absorbed; "
                "its spectrum and every far field computed from it are zero."
            )

        freqs = list(self.frequencies.freqs)
        patches = []
        for grid, accumulators in zip(self.region.grids, self._accumulators):
            coords = dict(x=grid.x, y=grid.y, z=grid.z, f=freqs)
            fields = {
                comp: SurfaceFieldDataArray(values.copy(), coords=coords)
                for comp, values in accumulators.items()
            }
            patches.append(PatchSpectrum(grid=grid, **fields))

        self._spectrum = FrozenSpectrum(
            region=self.region,
            frequencies=self.frequencies,
            patches=patches,
            num_steps=self.num_steps,
        )
        log.debug(f"Finalized near-field spectrum after {self.num_steps} time steps.")
        return self._spectrum

    @property
    def spectrum(self) -> FrozenSpectrum:
        """Frozen spectrum, finalizing the state first if needed."""
        return self.finalize()

    def merge(self, other: AccumulationState, scale: float = 1.0) -> AccumulationState:
        """New state holding ``self + scale * other``.

        Used to combine partial sums of owners of different parts of a region, or with
        ``scale=-1`` to subtract a reference run. The result is frozen if either input is.
        """
        if not isinstance(other, AccumulationState):
            raise AccumulationError(f"Can't merge a state with {type(other).__name__}.")
        if self.region != other.region or self.frequencies != other.frequencies:
            raise AccumulationError(
                "Only states of identical regions and frequencies can be merged."
            )
        if self.h_time_offset != other.h_time_offset:
            raise AccumulationError("Can't merge states with different magnetic time offsets.")
        if self.dt is not None and other.dt is not None:
            if not np.isclose(self.dt, other.dt, rtol=DT_RTOL, atol=0):
                raise AccumulationError(
                    f"Can't merge states with different time steps {self.dt} and {other.dt}."
                )

        merged = AccumulationState(
            region=self.region, frequencies=self.frequencies, h_time_offset=self.h_time_offset
        )
        merged._accumulators = [
            {comp: acc_self[comp] + scale * acc_other[comp] for comp in acc_self}
            for acc_self, acc_other in zip(self._accumulators, other._accumulators)
        ]
        merged.num_steps = max(self.num_steps, other.num_steps)
        steps = [step for step in (self.last_timestep, other.last_timestep) if step is not None]
        merged.last_timestep = max(steps) if steps else None
        merged.dt = self.dt if self.dt is not None else other.dt
        if self.is_frozen or other.is_frozen:
            merged.finalize()
        return merged

    def __repr__(self) -> str:
        return (
            f"AccumulationState(patches={len(self.region.patches)}, "
            f"freqs={len(self.frequencies)}, num_steps={self.num_steps}, "
            f"frozen={self.is_frozen})"
        )


def register(
    region: NearFieldRegion, frequencies: FrequencySet, h_time_offset: float = 0.0
) -> AccumulationState:
    """Create the running transform state of a region at the given frequencies."""
    state = AccumulationState(region=region, frequencies=frequencies, h_time_offset=h_time_offset)
    log.info(
        f"Registered near-field region with {len(region.patches)} patches, "
        f"{region.num_samples} samples and {len(frequencies)} frequencies."
    )
    return state


def absorb(
    state: AccumulationState,
    timestep_index: int,
    dt: float,
    field_values: FieldValues,
    partial: bool = False,
) -> None:
    """Add the fields of one time step to ``state``, see :meth:`AccumulationState.absorb`."""
    state.absorb(timestep_index=timestep_index, dt=dt, field_values=field_values, partial=partial)


def finalize(state: AccumulationState) -> FrozenSpectrum:
    """Freeze ``state`` and return its spectrum."""
    return state.finalize()


def merge(a: AccumulationState, b: AccumulationState, scale: float = 1.0) -> AccumulationState:
    """Additive merge ``a + scale * b`` of two states of identical region and frequencies."""
    return a.merge(b, scale=scale)
