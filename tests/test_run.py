"""Tests driving running transforms with a time-stepping engine."""
import numpy as np
import pytest
import near2far as n2f
from near2far.exceptions import SetupError

from .utils import F0, FREQS, assert_log_level, make_box_region, relative_error

DT = 1 / (20 * F0)


class DecayingEngine:
    """Uniform field oscillating at ``F0`` and decaying with time constant ``tau``."""

    def __init__(self, tau=np.inf, sources_off_time=None):
        self.dt = DT
        self.timestep = 0
        self.tau = tau
        self.sources_off_time = sources_off_time

    def current_time(self):
        return self.timestep * self.dt

    def step(self):
        self.timestep += 1

    def tangential_field(self, points, component):
        time = self.current_time()
        value = np.cos(2 * np.pi * F0 * time) * np.exp(-time / self.tau)
        return np.full(len(points), value)


class HarmonicEngine(DecayingEngine):
    """Time-harmonic fields of a line current at the origin."""

    def tangential_field(self, points, component):
        E, H = n2f.dipole_fields(points, (0, 0, 0), (0, 0, 1), [F0], dimensions=2)
        vector = E if component[0] == "E" else H
        phasor = vector["xyz".index(component[1]), :, 0]
        return np.real(phasor * np.exp(-2j * np.pi * F0 * self.current_time()))


def make_state(dimensions=3):
    return n2f.register(make_box_region(dimensions=dimensions, resolution=4), FREQS)


def test_engine_protocol():
    assert isinstance(DecayingEngine(), n2f.TimeSteppingEngine)


def test_sample_fields():
    engine = DecayingEngine()
    state = make_state()
    values = n2f.sample_fields(engine, state)
    assert len(values) == 6
    assert set(values[0]) == {"Ey", "Ez", "Hy", "Hz"}
    assert values[0]["Ey"].shape == state.region.grids[0].shape


def test_stop_after_time():
    engine = DecayingEngine()
    state = make_state()
    num_steps = n2f.run(engine, state, until=n2f.StopAfterTime(time=49.5 * DT))
    assert num_steps == 50
    assert state.num_steps == 50
    assert state.last_timestep == 50
    assert state.dt == DT


def test_stop_after_sources():
    engine = DecayingEngine(sources_off_time=10 * DT)
    num_steps = n2f.run(engine, make_state(), until=n2f.StopAfterSources(duration=10.5 * DT))
    assert num_steps == 21

    with pytest.raises(SetupError):
        n2f.run(DecayingEngine(), make_state(), until=n2f.StopAfterSources(duration=DT))


def test_stop_when_fields_decayed(log_capture):
    criterion = n2f.StopWhenFieldsDecayed(
        component="Ez", point=(0, 0, 0), decay_by=1e-3, interval=20 * DT
    )
    num_steps = n2f.run(DecayingEngine(tau=10 * DT), make_state(), until=criterion, max_steps=1000)
    assert 20 < num_steps < 1000
    assert_log_level(log_capture, "INFO")

    # criteria are reset at the start of every run
    assert n2f.run(DecayingEngine(tau=10 * DT), make_state(), until=criterion) == num_steps


def test_fields_not_decayed(log_capture):
    criterion = n2f.StopWhenFieldsDecayed(component="Ez", point=(0, 0, 0), interval=20 * DT)
    num_steps = n2f.run(DecayingEngine(), make_state(), until=[criterion], max_steps=200)
    assert num_steps == 200
    assert_log_level(log_capture, "WARNING", contains_str="max_steps")


def test_decay_parameters():
    with pytest.raises(ValueError):
        n2f.StopWhenFieldsDecayed(component="Ez", point=(0, 0, 0), decay_by=2, interval=DT)
    with pytest.raises(ValueError):
        n2f.StopWhenFieldsDecayed(component="Ez", point=(0, 0, 0), interval=0)


def test_callable_criterion():
    states = [make_state(), make_state()]
    num_steps = n2f.run(DecayingEngine(), states, until=lambda engine: engine.timestep >= 5)
    assert num_steps == 5
    assert all(state.num_steps == 5 for state in states)


def test_no_criterion():
    with pytest.raises(SetupError):
        n2f.run(DecayingEngine(), make_state(), until=[])
    assert n2f.run(DecayingEngine(), make_state(), until=[], max_steps=3) == 3


def test_harmonic_run_projects_to_dipole():
    """A run over whole periods recovers the frequency-domain fields, scaled by N dt / 2."""
    region = make_box_region(dimensions=2, resolution=20)
    state = n2f.register(region, FREQS)
    num_steps = n2f.run(HarmonicEngine(), state, until=n2f.StopAfterTime(time=39.5 * DT))
    assert num_steps == 40

    obs = np.array([[0.0, 5.0, 0.0], [3.0, -4.0, 0.0]])
    fields = np.stack([n2f.get_far_field(state, point=point[:2]) for point in obs], axis=1)
    E_ref, H_ref = n2f.dipole_fields(obs, (0, 0, 0), (0, 0, 1), [F0], dimensions=2)
    scale = num_steps * DT / 2
    assert relative_error(fields[:3, :, 0], scale * E_ref[..., 0]) < 5e-2
    assert relative_error(fields[3:, :, 0], scale * H_ref[..., 0]) < 5e-2
