"""
Unit tests for SimulationState and OrbitingBody.

Tests cover:
- Packing bodies into arrays and rebuilding them
- Clock factors and drift bookkeeping
- Positions, snapshots and copies
"""

import math
from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from orbitclock import constants as const
from orbitclock.physics import InvalidArgumentError
from orbitclock.state import (
    MOON,
    PLANET,
    SATELLITE,
    TRACK_EARTH,
    OrbitingBody,
    SimulationClock,
    SimulationState,
    clamp_time_scale,
)

EPOCH = datetime(2025, 12, 21, 0, 0, 0, tzinfo=timezone.utc)


def make_body(name="sat", kind=SATELLITE, **kwargs):
    """Small satellite-like body with simple numbers."""
    defaults = dict(
        radius=2.0e7,
        display_radius=200.0,
        velocity=4000.0,
        angular_velocity=2.0e-4,
        inclination=0.5,
        plane_rotation=1.0,
        angle=0.25,
        special_factor=0.9,
        general_factor=1.2,
    )
    defaults.update(kwargs)
    return OrbitingBody(name=name, kind=kind, **defaults)


@pytest.fixture
def state():
    bodies = [
        make_body("sat-a"),
        make_body("sat-b", angle=1.0),
        make_body("moon", kind=MOON, radius=3.8e8, display_radius=6000.0),
        make_body("earth", kind=PLANET, relativistic=False),
    ]
    return SimulationState(bodies, clock=SimulationClock(epoch_origin=EPOCH))


class TestOrbitingBody:
    """Tests for the per-body record."""

    def test_clock_rate(self):
        body = make_body()
        assert abs(body.clock_rate - 1.08) < 1e-12

    def test_drift(self):
        body = make_body(coordinate_time=10.0, proper_time=10.5)
        assert body.drift == 0.5

    def test_position_in_meters_and_display_units(self):
        body = make_body()
        pos = body.position()
        disp = body.display_position()
        assert abs(np.linalg.norm(pos) - body.radius) / body.radius < 1e-12
        assert abs(np.linalg.norm(disp) - body.display_radius) < 1e-9
        # Same direction, different units
        np.testing.assert_allclose(pos / body.radius, disp / body.display_radius, atol=1e-12)


class TestSimulationClock:
    """Tests for the simulated epoch."""

    def test_epoch_is_origin_plus_elapsed(self):
        clock = SimulationClock(epoch_origin=EPOCH, elapsed=90.0)
        assert clock.simulated_epoch == EPOCH + timedelta(seconds=90)

    def test_now(self):
        before = datetime.now(timezone.utc)
        clock = SimulationClock.now(time_scale=5.0)
        after = datetime.now(timezone.utc)
        assert before <= clock.epoch_origin <= after
        assert clock.time_scale == 5.0
        assert clock.elapsed == 0.0

    def test_clamp_time_scale(self):
        assert clamp_time_scale(250.0) == 250.0
        with pytest.warns(UserWarning, match="outside"):
            assert clamp_time_scale(-5.0) == const.TIME_SCALE_MIN
        with pytest.warns(UserWarning, match="outside"):
            assert clamp_time_scale(1.0e9) == const.TIME_SCALE_MAX

    def test_clamp_time_scale_not_finite(self):
        with pytest.raises(InvalidArgumentError):
            clamp_time_scale(math.inf)


class TestSimulationStateBasics:
    """Tests for basic SimulationState functionality."""

    def test_initialization(self, state):
        assert state.n_total == 4
        assert state.n_satellites == 2
        assert state.names == ["sat-a", "sat-b", "moon", "earth"]
        assert state.radii.shape == (4,)
        assert state.frame_count == 0
        assert state.tracking_mode == TRACK_EARTH
        assert state.active_satellite == 0

    def test_clock_rates_precomputed(self, state):
        assert abs(state.clock_rates[0] - 1.08) < 1e-12
        assert abs(state.rate_offsets[0] - 0.08) < 1e-12

    def test_non_relativistic_body_has_unit_factors(self, state):
        idx = state.index_of("earth")
        assert not state.relativistic[idx]
        assert state.special_factors[idx] == 1.0
        assert state.general_factors[idx] == 1.0
        assert state.rate_offsets[idx] == 0.0

    def test_satellite_indices(self, state):
        np.testing.assert_array_equal(state.satellite_indices(), [0, 1])
        assert np.sum(state.get_kind_mask(MOON)) == 1

    def test_index_of_unknown(self, state):
        with pytest.raises(KeyError):
            state.index_of("pluto")

    def test_body_round_trip(self, state):
        body = state.body(1)
        assert body.name == "sat-b"
        assert body.kind == SATELLITE
        assert body.angle == 1.0
        assert body.radius == 2.0e7
        assert body.display_radius == 200.0

    def test_initial_accumulators(self):
        body = make_body(coordinate_time=100.0, proper_time=100.25)
        state = SimulationState([body], clock=SimulationClock(epoch_origin=EPOCH))
        assert state.coordinate_times[0] == 100.0
        assert state.proper_times[0] == 100.25
        assert state.drifts[0] == 0.25

    def test_empty_state(self):
        state = SimulationState([], clock=SimulationClock(epoch_origin=EPOCH))
        assert state.n_total == 0
        assert state.positions().shape == (0, 3)


class TestReplaceOrbit:
    """Tests for recomputing orbit parameters in place."""

    def test_keeps_angle_and_clocks(self, state):
        state.angles[0] = 2.5
        state.coordinate_times[0] = 50.0
        state.proper_times[0] = 51.0
        state.drifts[0] = 1.0

        state.replace_orbit(0, make_body("sat-a", radius=3.0e7, special_factor=1.0,
                                         general_factor=1.0, angle=0.0))

        assert state.radii[0] == 3.0e7
        assert state.rate_offsets[0] == 0.0
        assert state.angles[0] == 2.5
        assert state.coordinate_times[0] == 50.0
        assert state.proper_times[0] == 51.0
        assert state.drifts[0] == 1.0


class TestPositionsAndSnapshots:
    """Tests for computed positions and frame snapshots."""

    def test_positions_on_orbit(self, state):
        positions = state.positions()
        assert positions.shape == (4, 3)
        norms = np.linalg.norm(positions, axis=1)
        np.testing.assert_allclose(norms, state.radii, rtol=1e-12)

    def test_display_positions_use_display_radii(self, state):
        norms = np.linalg.norm(state.display_positions(), axis=1)
        np.testing.assert_allclose(norms, state.display_radii, rtol=1e-12)

    def test_snapshot(self, state):
        snap = state.snapshot()
        assert snap.frame == 0
        assert snap.simulated_epoch == EPOCH
        assert snap.time_scale == const.TIME_SCALE_DEFAULT
        assert abs(snap.earth_tilt - math.radians(23.436)) < 1e-12
        assert len(snap.bodies) == 4

        moon = snap["moon"]
        assert moon.kind == MOON
        assert abs(np.linalg.norm(moon.position) - 3.8e8) / 3.8e8 < 1e-12
        assert moon.special_factor == 0.9
        assert moon.general_factor == 1.2

        with pytest.raises(KeyError):
            snap["pluto"]

    def test_snapshot_is_detached(self, state):
        snap = state.snapshot()
        state.angles[0] += math.pi
        state.coordinate_times[0] = 99.0
        assert snap.bodies[0].coordinate_time == 0.0
        np.testing.assert_allclose(snap.bodies[0].position, state.body(0).position() * -1.0,
                                   atol=1e-6)

    def test_copy_is_independent(self, state):
        clone = state.copy()
        clone.angles[0] = 3.0
        clone.clock.elapsed = 10.0
        assert state.angles[0] == 0.25
        assert state.clock.elapsed == 0.0

    def test_repr(self, state):
        text = repr(state)
        assert "SimulationState" in text
        assert "Total bodies: 4" in text
        assert "sat-a (satellite)" in text
        assert "earth (planet)" in text
