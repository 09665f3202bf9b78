"""
Physics functions for the orbit and clock simulation.

Scalar functions are pure and validate their inputs, raising
InvalidArgumentError or InvalidDomainError instead of letting NaN or
complex values reach the viewer. The per-frame array kernels are
JIT-compiled with Numba and assume inputs were validated at construction.

All inputs and outputs are SI (m, s, kg, rad). Display units never enter
this module.
"""

import math
from datetime import datetime, timezone

import numpy as np
from numba import jit

from orbitclock import constants as const


class InvalidArgumentError(ValueError):
    """Input outside the realistic range of a total function (e.g. r <= 0)."""


class InvalidDomainError(ValueError):
    """Input at or beyond a physical boundary (horizon, light speed)."""


def _require_positive(name, value):
    if not value > 0:
        raise InvalidArgumentError(f"{name} must be positive, got {value}")


def _require_non_negative(name, value):
    if not value >= 0:
        raise InvalidArgumentError(f"{name} must be non-negative, got {value}")


def schwarzschild_radius(mass):
    """
    Calculate the Schwarzschild radius of a mass.

    r_s = 2GM / c²

    Args:
        mass: Mass [kg], >= 0

    Returns:
        float: Radius [m]; 0.0 for zero mass

    Raises:
        InvalidArgumentError: If mass is negative or NaN
    """
    _require_non_negative("mass", mass)
    return 2.0 * const.G * mass / const.c_squared


def escape_velocity(mass, radius):
    """
    Calculate escape velocity at distance r from a point mass.

    v_esc = sqrt(2GM / r)

    Args:
        mass: Mass [kg], >= 0
        radius: Distance from the center [m], > 0

    Returns:
        float: Escape velocity [m/s]
    """
    _require_non_negative("mass", mass)
    _require_positive("radius", radius)
    return math.sqrt(2.0 * const.G * mass / radius)


def circular_orbital_velocity(mass, radius):
    """Circular orbit speed sqrt(GM/r) [m/s]."""
    _require_non_negative("mass", mass)
    _require_positive("radius", radius)
    return math.sqrt(const.G * mass / radius)


def time_dilation_factor(rs, radius):
    """
    Calculate the clock rate of a static observer outside a black hole.

    dτ/dt = sqrt(1 - r_s / r)

    Args:
        rs: Schwarzschild radius [m], >= 0
        radius: Observer distance from the center [m], > rs

    Returns:
        float: Factor in (0, 1]

    Raises:
        InvalidDomainError: If the observer is at or inside the horizon
    """
    _require_non_negative("rs", rs)
    if not radius > rs:
        raise InvalidDomainError(
            f"Observer radius ({radius} m) must lie outside the "
            f"Schwarzschild radius ({rs} m)"
        )
    return math.sqrt(1.0 - rs / radius)


def special_relativity_factor(velocity):
    """
    Calculate the velocity time-dilation factor (inverse Lorentz factor).

    1/γ = sqrt(1 - v²/c²)

    Args:
        velocity: Speed [m/s], |v| < c

    Returns:
        float: Factor in (0, 1]; exactly 1.0 at rest

    Raises:
        InvalidDomainError: If |v| >= c
    """
    if not abs(velocity) < const.c:
        raise InvalidDomainError(
            f"Velocity ({velocity} m/s) must be below the speed of light"
        )
    return math.sqrt(1.0 - (velocity * velocity) / const.c_squared)


def general_relativity_factor(radius, mass=const.EARTH_MASS,
                              reference_radius=const.R_EARTH):
    """
    Calculate the gravitational clock-rate factor relative to a reference radius.

    1 + ΔΦ/c², with ΔΦ = GM/R_ref - GM/r

    The reference radius is the zero point, so the factor is exactly 1.0
    there and exceeds 1 above it (clocks at altitude run fast).

    Args:
        radius: Orbital radius [m], > 0
        mass: Central mass [kg], >= 0 (default: Earth)
        reference_radius: Radius of the reference clock [m] (default: Earth surface)

    Returns:
        float: Dimensionless factor
    """
    _require_positive("radius", radius)
    _require_positive("reference_radius", reference_radius)
    _require_non_negative("mass", mass)
    delta_phi = (const.G * mass / reference_radius) - (const.G * mass / radius)
    return 1.0 + delta_phi / const.c_squared


def clock_rate_offset(special_factor, general_factor):
    """Fractional clock rate offset sr·gr - 1 (positive = running fast)."""
    return special_factor * general_factor - 1.0


def angular_velocity_from_period(period):
    """ω = 2π / T [rad/s]."""
    _require_positive("period", period)
    return const.TWO_PI / period


def angular_velocity(velocity, radius):
    """ω = v / r [rad/s]."""
    _require_positive("radius", radius)
    return velocity / radius


def orbital_phase(time, period):
    """
    Angular displacement after time t on an orbit of period T.

    θ = (t / T) · 2π

    The result is not wrapped; callers storing it for display must wrap.
    """
    _require_positive("period", period)
    return (time / period) * const.TWO_PI


def gps_velocity():
    """Circular speed at GPS radius, ~3873 m/s."""
    return circular_orbital_velocity(const.EARTH_MASS, const.GPS_RADIUS)


def gps_angular_velocity():
    """Angular velocity of the nominal GPS period [rad/s]."""
    return angular_velocity_from_period(const.GPS_PERIOD)


def initial_earth_rotation(now=None):
    """
    Earth spin angle that puts the prime meridian under the Sun at UTC noon.

    Args:
        now: Timezone-aware datetime (default: current UTC time)

    Returns:
        float: Spin angle [rad]
    """
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    seconds_today = now.hour * 3600 + now.minute * 60 + now.second
    return (seconds_today / const.SIDEREAL_DAY) * const.TWO_PI + math.pi


@jit(nopython=True)
def orbital_position(radius, angle, inclination, plane_rotation):
    """
    Position of a body on an inclined circular orbit, relative to its parent.

    1. Planar circle: x = r cos θ, z0 = r sin θ
    2. Tilt about the line of nodes: y = z0 sin i, z = z0 cos i
    3. Spread about the vertical axis by the plane rotation p

    Args:
        radius: Orbit radius (meters or display units; output matches)
        angle: Current orbital angle [rad]
        inclination: Orbit tilt [rad]
        plane_rotation: Rotation about the vertical axis [rad]

    Returns:
        position: (3,) array [x, y, z]
    """
    x = radius * np.cos(angle)
    z0 = radius * np.sin(angle)

    y = z0 * np.sin(inclination)
    z = z0 * np.cos(inclination)

    cos_p = np.cos(plane_rotation)
    sin_p = np.sin(plane_rotation)

    position = np.zeros(3)
    position[0] = x * cos_p - z * sin_p
    position[1] = y
    position[2] = x * sin_p + z * cos_p
    return position


@jit(nopython=True)
def orbital_positions(radii, angles, inclinations, plane_rotations):
    """
    Vectorized orbital_position for N bodies.

    Args:
        radii, angles, inclinations, plane_rotations: Arrays (shape: (N,))

    Returns:
        positions: (N, 3) array
    """
    n = len(radii)
    positions = np.zeros((n, 3))
    for i in range(n):
        positions[i] = orbital_position(radii[i], angles[i],
                                        inclinations[i], plane_rotations[i])
    return positions


@jit(nopython=True)
def advance_bodies(angles, angular_velocities, coordinate_times,
                   proper_times, drifts, clock_rates, rate_offsets, dt):
    """
    Advance every body by a simulated time delta (in place).

    Per body:
        θ += ω·dt (wrapped to [0, 2π))
        t_coord += dt
        τ += dt · (sr·gr)
        drift += dt · (sr·gr - 1)

    The drift is accumulated from the rate offset directly so it does not
    lose precision to the subtraction τ - t_coord over long runs.

    Args:
        angles: Orbital angles [rad] (shape: (N,))
        angular_velocities: [rad/s] (shape: (N,))
        coordinate_times: [s] (shape: (N,))
        proper_times: [s] (shape: (N,))
        drifts: Proper minus coordinate time [s] (shape: (N,))
        clock_rates: sr·gr per body (shape: (N,))
        rate_offsets: sr·gr - 1 per body (shape: (N,))
        dt: Simulated time delta [s], >= 0
    """
    two_pi = 2.0 * np.pi
    for i in range(len(angles)):
        angles[i] = (angles[i] + angular_velocities[i] * dt) % two_pi
        coordinate_times[i] += dt
        proper_times[i] += dt * clock_rates[i]
        drifts[i] += dt * rate_offsets[i]
