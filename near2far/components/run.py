"""Driving loop feeding a time-stepping engine into running transforms, and stopping criteria."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np
import pydantic.v1 as pd
from typing_extensions import Protocol, runtime_checkable

from ..constants import SECOND
from ..exceptions import SetupError
from ..log import log
from .base import Near2FarBaseModel
from .dft import AccumulationState
from .types import Coordinate, FieldName


@runtime_checkable
class TimeSteppingEngine(Protocol):
    """Interface of the time-domain solver driving the running transforms.

    ``tangential_field(points, component)`` returns the value of ``component`` (e.g. ``"Ey"``)
    at each of the ``(num_points, 3)`` positions. ``sources_off_time`` is the time after which
    every source is off, or ``None`` if unknown.
    """

    dt: float
    timestep: int
    sources_off_time: Optional[float]

    def current_time(self) -> float:
        ...

    def step(self) -> None:
        ...

    def tangential_field(self, points: np.ndarray, component: str) -> np.ndarray:
        ...


def sample_fields(
    engine: TimeSteppingEngine, state: AccumulationState
) -> List[Dict[str, np.ndarray]]:
    """Tangential fields of every patch of ``state`` at the current time step of ``engine``."""
    field_values = []
    for grid in state.region.grids:
        points = grid.sample_points()
        field_values.append(
            {
                comp: np.reshape(engine.tangential_field(points, comp), grid.shape)
                for comp in grid.components
            }
        )
    return field_values


class AbstractStoppingCriterion(Near2FarBaseModel, ABC):
    """Predicate deciding when to stop time stepping. Criteria may keep running state, cleared by
    :meth:`reset` at the start of every run."""

    def reset(self) -> None:
        """Clear any running state."""

    @abstractmethod
    def should_stop(self, engine: TimeSteppingEngine) -> bool:
        """Whether the run should stop after the current time step."""

    def __call__(self, engine: TimeSteppingEngine) -> bool:
        return self.should_stop(engine)


class StopAfterTime(AbstractStoppingCriterion):
    """Stop once the simulation time reaches ``time``.

    Example
    -------
    >>> until = StopAfterTime(time=1e-13)
    """

    time: pd.NonNegativeFloat = pd.Field(
        ..., title="Time", description="Simulation time at which to stop.", units=SECOND
    )

    def should_stop(self, engine: TimeSteppingEngine) -> bool:
        return engine.current_time() >= self.time


class StopAfterSources(AbstractStoppingCriterion):
    """Stop a fixed duration after the engine reports every source off.

    Example
    -------
    >>> until = StopAfterSources(duration=5e-14)
    """

    duration: pd.NonNegativeFloat = pd.Field(
        ...,
        title="Duration",
        description="Additional simulation time to run once the sources are off.",
        units=SECOND,
    )

    def should_stop(self, engine: TimeSteppingEngine) -> bool:
        off_time = getattr(engine, "sources_off_time", None)
        if off_time is None:
            raise SetupError("'StopAfterSources' requires an engine reporting 'sources_off_time'.")
        return engine.current_time() >= off_time + self.duration


class StopWhenFieldsDecayed(AbstractStoppingCriterion):
    """Stop when the squared field at a point has decayed below a fraction of its peak.

    Notes
    -----

        The field is checked over windows of duration ``interval``: the run stops at the end of
        the first window whose largest ``|field|^2`` is at most ``decay_by`` times the largest
        value seen since the start of the run.

    Example
    -------
    >>> until = StopWhenFieldsDecayed(component="Ez", point=(0, 0, 1), interval=5e-14)
    """

    component: FieldName = pd.Field(
        ..., title="Component", description="Field component that is monitored."
    )

    point: Coordinate = pd.Field(
        ..., title="Point", description="Location where the field is monitored."
    )

    decay_by: float = pd.Field(
        1e-3,
        gt=0.0,
        lt=1.0,
        title="Decay",
        description="Fraction of the peak squared field below which the run stops.",
    )

    interval: pd.PositiveFloat = pd.Field(
        ...,
        title="Interval",
        description="Duration of each window over which the decay is checked.",
        units=SECOND,
    )

    _peak: float = pd.PrivateAttr(0.0)
    _window_max: float = pd.PrivateAttr(0.0)
    _window_start: Optional[float] = pd.PrivateAttr(None)

    def reset(self) -> None:
        self._peak = 0.0
        self._window_max = 0.0
        self._window_start = None

    def should_stop(self, engine: TimeSteppingEngine) -> bool:
        time = engine.current_time()
        value = engine.tangential_field(np.array([self.point], dtype=float), self.component)
        field_sq = float(np.max(np.abs(value) ** 2))

        if self._window_start is None:
            self._window_start = time
        self._peak = max(self._peak, field_sq)
        self._window_max = max(self._window_max, field_sq)

        if time - self._window_start < self.interval:
            return False

        decayed = self._peak > 0 and self._window_max <= self.decay_by * self._peak
        log.debug(
            f"Field decay check at t={time:.4e}: window max {self._window_max:.4e}, "
            f"peak {self._peak:.4e}."
        )
        self._window_start = time
        self._window_max = 0.0
        return decayed


StoppingCondition = Union[AbstractStoppingCriterion, Callable[[TimeSteppingEngine], bool]]


def run(
    engine: TimeSteppingEngine,
    states: Union[AccumulationState, Sequence[AccumulationState]],
    until: Union[StoppingCondition, Sequence[StoppingCondition]],
    max_steps: int = None,
) -> int:
    """Step ``engine`` and absorb its fields into ``states`` until a criterion is met.

    Parameters
    ----------
    engine : :class:`TimeSteppingEngine`
        The time-domain solver.
    states : Union[:class:`.AccumulationState`, Sequence[:class:`.AccumulationState`]]
        Running transforms, updated after every step in time order.
    until : Union[StoppingCondition, Sequence[StoppingCondition]]
        Stopping criteria, or plain callables of the engine; the run stops as soon as any
        of them returns ``True``.
    max_steps : int = None
        Upper bound on the number of steps taken.

    Returns
    -------
    int
        The number of steps taken.
    """
    if isinstance(states, AccumulationState):
        states = [states]
    if isinstance(until, AbstractStoppingCriterion) or callable(until):
        until = [until]
    if len(until) == 0 and max_steps is None:
        raise SetupError("A run needs at least one stopping criterion or 'max_steps'.")

    for criterion in until:
        if isinstance(criterion, AbstractStoppingCriterion):
            criterion.reset()

    num_steps = 0
    while True:
        if max_steps is not None and num_steps >= max_steps:
            log.warning(f"Run stopped after reaching 'max_steps={max_steps}'.")
            break
        engine.step()
        num_steps += 1
        for state in states:
            state.absorb(
                timestep_index=engine.timestep,
                dt=engine.dt,
                field_values=sample_fields(engine, state),
            )
        if any(criterion(engine) for criterion in until):
            break

    log.info(f"Run finished after {num_steps} time steps at t={engine.current_time():.4e} s.")
    return num_steps
