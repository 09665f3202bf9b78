"""
Black hole viewer scaling.

Maps a user-chosen mass and distance multiplier to the horizon display
radius and to a stylized companion orbit. The companion orbit is NOT
physically faithful: its radius is derived from the clamped display radius
and only converted back to meters at one boundary
(display_units_to_meters), after which sqrt(GM/r) is applied as usual.
This keeps the particle visible at every mass on the slider.
"""

import warnings
from dataclasses import dataclass
from typing import Optional

from orbitclock import constants as const
from orbitclock.physics import (
    InvalidArgumentError,
    InvalidDomainError,
    circular_orbital_velocity,
    escape_velocity,
    schwarzschild_radius,
    special_relativity_factor,
    time_dilation_factor,
)
from orbitclock.state import TEST_PARTICLE, OrbitingBody, SimulationState


def display_units_to_meters(units):
    """Black hole scene units → meters."""
    return units * const.BH_METERS_PER_UNIT


def meters_to_display_units(meters):
    """Meters → black hole scene units."""
    return meters / const.BH_METERS_PER_UNIT


def horizon_display_radius(rs):
    """Display radius of the horizon, clamped so the scene never explodes."""
    return min(meters_to_display_units(rs), const.BH_MAX_DISPLAY_RADIUS)


@dataclass
class BlackHoleView:
    """Derived quantities for one (mass, distance) slider setting."""

    mass: float  # kg
    distance_multiplier: float
    schwarzschild_radius: float  # m
    display_radius: float  # scene units
    orbit_display_radius: float  # scene units
    orbit_radius: float  # m, converted from orbit_display_radius
    orbital_speed: float  # m/s, sqrt(GM / orbit_radius)
    angle_per_frame: float  # rad per frame at the reference frame rate
    escape_velocity: float  # m/s at orbit_radius
    static_dilation: Optional[float]  # None when the orbit is inside the horizon

    @property
    def mesh_scale(self) -> float:
        """Scale applied to the unit horizon mesh."""
        return self.display_radius / const.BH_BASE_SPHERE_RADIUS

    @property
    def halo_scale(self) -> float:
        """Scale applied to the halo mesh."""
        return self.mesh_scale * const.BH_HALO_FACTOR

    @property
    def angular_velocity(self) -> float:
        """Stylized angular velocity [rad/s]."""
        return self.angle_per_frame * const.REFERENCE_FRAME_RATE

    @property
    def outside_horizon(self) -> bool:
        return self.orbit_radius > self.schwarzschild_radius


def compute_black_hole_view(mass_solar_masses, distance_multiplier) -> BlackHoleView:
    """
    Derive display and orbit values for a black hole.

    Args:
        mass_solar_masses: Mass [M_sun], > 0
        distance_multiplier: Orbit distance slider value, > 0

    Returns:
        BlackHoleView

    Raises:
        InvalidArgumentError: If mass or distance multiplier is not positive
    """
    if not mass_solar_masses > 0:
        raise InvalidArgumentError(f"mass must be positive, got {mass_solar_masses}")
    if not distance_multiplier > 0:
        raise InvalidArgumentError(
            f"distance_multiplier must be positive, got {distance_multiplier}"
        )

    mass = mass_solar_masses * const.SOLAR_MASS
    rs = schwarzschild_radius(mass)
    display_radius = horizon_display_radius(rs)

    orbit_display_radius = display_radius * distance_multiplier * const.BH_ORBIT_SPREAD
    orbit_radius = display_units_to_meters(orbit_display_radius)

    orbital_speed = circular_orbital_velocity(mass, orbit_radius)

    static_dilation = None
    if orbit_radius > rs:
        static_dilation = time_dilation_factor(rs, orbit_radius)

    return BlackHoleView(
        mass=mass,
        distance_multiplier=distance_multiplier,
        schwarzschild_radius=rs,
        display_radius=display_radius,
        orbit_display_radius=orbit_display_radius,
        orbit_radius=orbit_radius,
        orbital_speed=orbital_speed,
        angle_per_frame=orbital_speed / const.BH_ANGULAR_DIVISOR,
        escape_velocity=escape_velocity(mass, orbit_radius),
        static_dilation=static_dilation,
    )


def create_test_particle(view: BlackHoleView, angle: float = 0.0,
                         name: str = "test_particle") -> OrbitingBody:
    """
    Build the companion test particle for a black hole view.

    The particle clock runs at static dilation × velocity dilation. When
    either factor is out of domain (orbit inside the horizon or v >= c) the
    clock is not modeled and a warning is issued.
    """
    relativistic = True
    try:
        general_factor = time_dilation_factor(view.schwarzschild_radius, view.orbit_radius)
        special_factor = special_relativity_factor(view.orbital_speed)
    except InvalidDomainError as e:
        warnings.warn(f"Test particle clock not modeled: {e}")
        relativistic = False
        special_factor = 1.0
        general_factor = 1.0

    return OrbitingBody(
        name=name,
        kind=TEST_PARTICLE,
        radius=view.orbit_radius,
        display_radius=view.orbit_display_radius,
        velocity=view.orbital_speed,
        angular_velocity=view.angular_velocity,
        angle=angle,
        special_factor=special_factor,
        general_factor=general_factor,
        relativistic=relativistic,
    )


def retune_black_hole(state: SimulationState, mass_solar_masses,
                      distance_multiplier, name: str = "test_particle") -> BlackHoleView:
    """
    Apply new slider values to the test particle in a state.

    The particle keeps its current angle and clock accumulators; only the
    orbit parameters are recomputed.
    """
    view = compute_black_hole_view(mass_solar_masses, distance_multiplier)
    idx = state.index_of(name)
    state.replace_orbit(idx, create_test_particle(view, angle=float(state.angles[idx]),
                                                  name=name))
    return view
