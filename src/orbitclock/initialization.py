"""
Initialization functions for the orbit and clock simulation.

This module builds the OrbitingBody records for each scenario and packs
them into a SimulationState:
- earth_moon_gps: GPS constellation and Moon around the Earth, and the
  Earth's heliocentric orbit
- black_hole: a single stylized test particle around a black hole
"""

from datetime import datetime, timezone
from typing import List, Optional

from orbitclock import constants as const
from orbitclock.blackhole import compute_black_hole_view, create_test_particle
from orbitclock.config import ConstellationConfig, SimulationParameters
from orbitclock.physics import (
    angular_velocity,
    angular_velocity_from_period,
    circular_orbital_velocity,
    general_relativity_factor,
    initial_earth_rotation,
    special_relativity_factor,
)
from orbitclock.state import (
    MOON,
    PLANET,
    SATELLITE,
    OrbitingBody,
    SimulationClock,
    SimulationState,
    clamp_time_scale,
)

MOON_NAME = "moon"
EARTH_NAME = "earth"


def create_gps_constellation(config: ConstellationConfig) -> List[OrbitingBody]:
    """
    Create the GPS satellites.

    Satellites are spread evenly in phase and in orbit-plane rotation, and
    each is tilted a little more than the previous one.

    Args:
        config: Constellation configuration

    Returns:
        List of satellite bodies, named GPS-1 … GPS-N

    Notes:
        - Clock speed always uses v = sqrt(G × M_earth / r)
        - Angular velocity comes from the period ('period' mode) or from
          v / r ('keplerian' mode); the two differ by ~0.06% at GPS radius
    """
    radius = config.radius
    velocity = circular_orbital_velocity(const.EARTH_MASS, radius)

    if config.velocity_mode == "keplerian":
        omega = angular_velocity(velocity, radius)
    else:
        omega = angular_velocity_from_period(config.period)

    special_factor = special_relativity_factor(velocity)
    general_factor = general_relativity_factor(radius)

    satellites = []
    for i in range(config.count):
        spread = (i / config.count) * const.TWO_PI
        satellites.append(OrbitingBody(
            name=f"GPS-{i + 1}",
            kind=SATELLITE,
            radius=radius,
            display_radius=radius * const.EARTH_DISPLAY_SCALE,
            velocity=velocity,
            angular_velocity=omega,
            inclination=config.base_inclination + i * config.inclination_step,
            plane_rotation=spread,
            angle=spread,
            special_factor=special_factor,
            general_factor=general_factor,
        ))

    return satellites


def create_moon() -> OrbitingBody:
    """Moon on its sidereal period, inclined to the ecliptic."""
    omega = angular_velocity_from_period(const.MOON_ORBIT_PERIOD)
    velocity = omega * const.MOON_DISTANCE

    return OrbitingBody(
        name=MOON_NAME,
        kind=MOON,
        radius=const.MOON_DISTANCE,
        display_radius=const.MOON_DISTANCE_UNITS,
        velocity=velocity,
        angular_velocity=omega,
        inclination=const.MOON_INCLINATION,
        special_factor=special_relativity_factor(velocity),
        general_factor=general_relativity_factor(const.MOON_DISTANCE),
    )


def create_earth_orbit() -> OrbitingBody:
    """
    Earth on its heliocentric orbit.

    Only the position is modeled; the Earth-surface clock is the reference
    clock, so its own rate is not tracked.
    """
    omega = angular_velocity_from_period(const.SIDEREAL_YEAR)

    return OrbitingBody(
        name=EARTH_NAME,
        kind=PLANET,
        radius=const.AU,
        display_radius=const.EARTH_ORBIT_UNITS,
        velocity=omega * const.AU,
        angular_velocity=omega,
        relativistic=False,
    )


def initialize_simulation(
    params: SimulationParameters,
    now: Optional[datetime] = None
) -> SimulationState:
    """
    Initialize complete simulation state from parameters.

    Args:
        params: SimulationParameters object
        now: Wall-clock time to start from when params.start_epoch is unset
            (default: current UTC time)

    The configured time scale is clamped to the slider range.

    Returns:
        SimulationState ready to be advanced
    """
    if params.start_epoch is not None:
        origin = params.start_epoch
    elif now is not None:
        origin = now
    else:
        origin = datetime.now(timezone.utc)

    clock = SimulationClock(epoch_origin=origin,
                            time_scale=clamp_time_scale(params.time_scale))

    if params.scenario == "black_hole":
        view = compute_black_hole_view(params.black_hole.mass_solar_masses,
                                       params.black_hole.distance_multiplier)
        return SimulationState([create_test_particle(view)], clock=clock)

    bodies = create_gps_constellation(params.constellation)
    if params.include_moon:
        bodies.append(create_moon())
    if params.include_earth_orbit:
        bodies.append(create_earth_orbit())

    state = SimulationState(bodies, clock=clock)
    state.earth_rotation = initial_earth_rotation(origin)
    state.cloud_rotation = state.earth_rotation
    return state
