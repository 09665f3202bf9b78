"""
Simulation state management for the orbit and clock simulation.

Bodies are described by OrbitingBody records and packed into the
structure-of-arrays SimulationState, which the Numba kernels in
orbitclock.physics update in place. The state is an explicit value: it is
passed into and returned from every integration step, so tests can build
as many independent states as they need.

Real radii are in meters; display radii are in scene units and are only
used to produce display positions.
"""

import copy
import math
import warnings
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import List, Optional

import numpy as np

from orbitclock import constants as const
from orbitclock.physics import (
    InvalidArgumentError,
    clock_rate_offset,
    orbital_position,
    orbital_positions,
)

# Body kind constants
SATELLITE = 0
MOON = 1
PLANET = 2
TEST_PARTICLE = 3

KIND_NAMES = {
    SATELLITE: "satellite",
    MOON: "moon",
    PLANET: "planet",
    TEST_PARTICLE: "test_particle",
}

# Tracking modes
TRACK_SUN = "SUN"
TRACK_EARTH = "EARTH"
TRACK_MOON = "MOON"
TRACK_SATELLITE = "SATELLITE"
TRACKING_MODES = (TRACK_SUN, TRACK_EARTH, TRACK_MOON, TRACK_SATELLITE)


@dataclass
class OrbitingBody:
    """
    One body on a prescribed circular orbit around its parent.

    Fields:
    - radius: Orbit radius [m]
    - display_radius: Orbit radius in scene units (never used in physics)
    - velocity: Orbital speed used for the clock model [m/s]
    - angular_velocity: [rad/s], fixed at construction
    - angle: Current orbital angle [rad]
    - inclination, plane_rotation: Fixed 3-D embedding of the orbit [rad]
    - coordinate_time, proper_time: Accumulated clocks [s]
    - special_factor, general_factor: Clock-rate factors, fixed at construction
    - relativistic: False when the body's clock is not modeled
    """

    name: str
    kind: int
    radius: float
    display_radius: float
    velocity: float
    angular_velocity: float
    inclination: float = 0.0
    plane_rotation: float = 0.0
    angle: float = 0.0
    special_factor: float = 1.0
    general_factor: float = 1.0
    relativistic: bool = True
    coordinate_time: float = 0.0
    proper_time: float = 0.0

    @property
    def clock_rate(self) -> float:
        """Proper time gained per unit coordinate time."""
        return self.special_factor * self.general_factor

    @property
    def drift(self) -> float:
        """Proper minus coordinate time [s]."""
        return self.proper_time - self.coordinate_time

    def position(self) -> np.ndarray:
        """Parent-relative position [m]."""
        return orbital_position(self.radius, self.angle,
                                self.inclination, self.plane_rotation)

    def display_position(self) -> np.ndarray:
        """Parent-relative position [scene units]."""
        return orbital_position(self.display_radius, self.angle,
                                self.inclination, self.plane_rotation)


def clamp_time_scale(value) -> float:
    """
    Clamp a time scale to the slider range, warning when it had to move.

    Raises:
        InvalidArgumentError: If the value is not finite
    """
    value = float(value)
    if not math.isfinite(value):
        raise InvalidArgumentError(f"time scale must be finite, got {value}")

    clamped = min(max(value, const.TIME_SCALE_MIN), const.TIME_SCALE_MAX)
    if clamped != value:
        warnings.warn(
            f"Time scale {value:g} outside [{const.TIME_SCALE_MIN:g}, "
            f"{const.TIME_SCALE_MAX:g}], using {clamped:g}"
        )
    return clamped


@dataclass
class SimulationClock:
    """
    Simulated wall-clock epoch and user time scale.

    The epoch is kept as an origin plus a float offset so that many small
    frame deltas do not get rounded to datetime's microsecond resolution.
    """

    epoch_origin: datetime
    time_scale: float = const.TIME_SCALE_DEFAULT
    elapsed: float = 0.0  # Simulated seconds since epoch_origin

    @classmethod
    def now(cls, time_scale: float = const.TIME_SCALE_DEFAULT) -> 'SimulationClock':
        """Clock starting at the current UTC time."""
        return cls(epoch_origin=datetime.now(timezone.utc), time_scale=time_scale)

    @property
    def simulated_epoch(self) -> datetime:
        """Current simulated timestamp."""
        return self.epoch_origin + timedelta(seconds=self.elapsed)


@dataclass
class BodySnapshot:
    """Read-only per-body view for one frame."""

    name: str
    kind: int
    position: np.ndarray  # [m], parent-relative
    display_position: np.ndarray  # [scene units], parent-relative
    velocity: float  # [m/s]
    coordinate_time: float  # [s]
    proper_time: float  # [s]
    drift: float  # [s]
    special_factor: float
    general_factor: float


@dataclass
class FrameSnapshot:
    """Read-only view of the whole simulation for one frame."""

    frame: int
    simulated_epoch: datetime
    time_scale: float
    tracking_mode: str
    active_satellite: int
    earth_rotation: float
    cloud_rotation: float
    earth_tilt: float  # Obliquity of the Earth group [rad]
    bodies: List[BodySnapshot] = field(default_factory=list)

    def __getitem__(self, name: str) -> BodySnapshot:
        for body in self.bodies:
            if body.name == name:
                return body
        raise KeyError(name)


class SimulationState:
    """
    Structure-of-arrays container for every orbiting body.

    Static orbit parameters (radius, speeds, embedding, clock factors) are
    computed once when a body is added; only the angle and the clock
    accumulators change during integration.
    """

    def __init__(self, bodies: List[OrbitingBody], clock: Optional[SimulationClock] = None):
        """
        Pack bodies into arrays.

        Args:
            bodies: Bodies to simulate (order is preserved)
            clock: Simulation clock (default: starts now at the default scale)
        """
        n_total = len(bodies)

        self.names = [body.name for body in bodies]
        self.kinds = np.zeros(n_total, dtype=np.int32)

        # Static orbit parameters
        self.radii = np.zeros(n_total, dtype=np.float64)  # [m]
        self.display_radii = np.zeros(n_total, dtype=np.float64)  # [units]
        self.velocities = np.zeros(n_total, dtype=np.float64)  # [m/s]
        self.angular_velocities = np.zeros(n_total, dtype=np.float64)  # [rad/s]
        self.inclinations = np.zeros(n_total, dtype=np.float64)  # [rad]
        self.plane_rotations = np.zeros(n_total, dtype=np.float64)  # [rad]
        self.special_factors = np.ones(n_total, dtype=np.float64)
        self.general_factors = np.ones(n_total, dtype=np.float64)
        self.clock_rates = np.ones(n_total, dtype=np.float64)
        self.rate_offsets = np.zeros(n_total, dtype=np.float64)
        self.relativistic = np.zeros(n_total, dtype=bool)

        # Evolving quantities
        self.angles = np.zeros(n_total, dtype=np.float64)  # [rad]
        self.coordinate_times = np.zeros(n_total, dtype=np.float64)  # [s]
        self.proper_times = np.zeros(n_total, dtype=np.float64)  # [s]
        self.drifts = np.zeros(n_total, dtype=np.float64)  # [s]

        for idx, body in enumerate(bodies):
            self._set_parameters(idx, body)
            self.angles[idx] = body.angle
            self.coordinate_times[idx] = body.coordinate_time
            self.proper_times[idx] = body.proper_time
            self.drifts[idx] = body.drift

        self.clock = clock if clock is not None else SimulationClock.now()
        self.frame_count = 0

        # Earth spin (the Earth is the parent of satellites and Moon)
        self.earth_rotation = 0.0  # [rad]
        self.cloud_rotation = 0.0  # [rad]

        # Camera tracking selection, applied between frames
        self.tracking_mode = TRACK_EARTH
        self.active_satellite = 0

    def _set_parameters(self, idx: int, body: OrbitingBody):
        self.kinds[idx] = body.kind
        self.radii[idx] = body.radius
        self.display_radii[idx] = body.display_radius
        self.velocities[idx] = body.velocity
        self.angular_velocities[idx] = body.angular_velocity
        self.inclinations[idx] = body.inclination
        self.plane_rotations[idx] = body.plane_rotation
        self.relativistic[idx] = body.relativistic
        if body.relativistic:
            self.special_factors[idx] = body.special_factor
            self.general_factors[idx] = body.general_factor
        else:
            self.special_factors[idx] = 1.0
            self.general_factors[idx] = 1.0
        self.clock_rates[idx] = self.special_factors[idx] * self.general_factors[idx]
        self.rate_offsets[idx] = clock_rate_offset(self.special_factors[idx],
                                                   self.general_factors[idx])

    @property
    def n_total(self) -> int:
        """Total number of bodies."""
        return len(self.names)

    @property
    def n_satellites(self) -> int:
        """Number of satellite bodies."""
        return int(np.sum(self.kinds == SATELLITE))

    def get_kind_mask(self, kind: int) -> np.ndarray:
        """Boolean mask for bodies of one kind."""
        return self.kinds == kind

    def satellite_indices(self) -> np.ndarray:
        """State indices of the satellites, in constellation order."""
        return np.flatnonzero(self.kinds == SATELLITE)

    def index_of(self, name: str) -> int:
        """State index of a named body."""
        try:
            return self.names.index(name)
        except ValueError:
            raise KeyError(f"No body named '{name}'") from None

    def body(self, idx: int) -> OrbitingBody:
        """Rebuild the OrbitingBody record for one index."""
        return OrbitingBody(
            name=self.names[idx],
            kind=int(self.kinds[idx]),
            radius=float(self.radii[idx]),
            display_radius=float(self.display_radii[idx]),
            velocity=float(self.velocities[idx]),
            angular_velocity=float(self.angular_velocities[idx]),
            inclination=float(self.inclinations[idx]),
            plane_rotation=float(self.plane_rotations[idx]),
            angle=float(self.angles[idx]),
            special_factor=float(self.special_factors[idx]),
            general_factor=float(self.general_factors[idx]),
            relativistic=bool(self.relativistic[idx]),
            coordinate_time=float(self.coordinate_times[idx]),
            proper_time=float(self.proper_times[idx]),
        )

    def replace_orbit(self, idx: int, body: OrbitingBody):
        """
        Swap in new static orbit parameters, keeping angle and clocks.

        Used when a constructing parameter changes (e.g. the black hole mass
        slider), so derived values are recomputed only then.
        """
        self.names[idx] = body.name
        self._set_parameters(idx, body)

    def positions(self) -> np.ndarray:
        """Parent-relative positions of all bodies [m] (shape: (N, 3))."""
        return orbital_positions(self.radii, self.angles,
                                 self.inclinations, self.plane_rotations)

    def display_positions(self) -> np.ndarray:
        """Parent-relative positions of all bodies [scene units] (shape: (N, 3))."""
        return orbital_positions(self.display_radii, self.angles,
                                 self.inclinations, self.plane_rotations)

    def snapshot(self) -> FrameSnapshot:
        """Read-only copy of everything the viewer needs for this frame."""
        positions = self.positions()
        display_positions = self.display_positions()
        bodies = [
            BodySnapshot(
                name=self.names[i],
                kind=int(self.kinds[i]),
                position=positions[i].copy(),
                display_position=display_positions[i].copy(),
                velocity=float(self.velocities[i]),
                coordinate_time=float(self.coordinate_times[i]),
                proper_time=float(self.proper_times[i]),
                drift=float(self.drifts[i]),
                special_factor=float(self.special_factors[i]),
                general_factor=float(self.general_factors[i]),
            )
            for i in range(self.n_total)
        ]
        return FrameSnapshot(
            frame=self.frame_count,
            simulated_epoch=self.clock.simulated_epoch,
            time_scale=self.clock.time_scale,
            tracking_mode=self.tracking_mode,
            active_satellite=self.active_satellite,
            earth_rotation=self.earth_rotation,
            cloud_rotation=self.cloud_rotation,
            earth_tilt=const.AXIAL_TILT,
            bodies=bodies,
        )

    def copy(self) -> 'SimulationState':
        """Independent deep copy."""
        return copy.deepcopy(self)

    def __repr__(self) -> str:
        """String representation of simulation state."""
        lines = [
            f"SimulationState(epoch={self.clock.simulated_epoch.isoformat()}, "
            f"frame={self.frame_count}, scale={self.clock.time_scale:g}x)",
            f"  Total bodies: {self.n_total}",
        ]
        for i in range(self.n_total):
            lines.append(
                f"    {self.names[i]} ({KIND_NAMES[int(self.kinds[i])]}): "
                f"r={self.radii[i] / 1.0e3:.0f} km, "
                f"drift={self.drifts[i] * 1.0e6:+.4f} us"
            )
        return "\n".join(lines)
