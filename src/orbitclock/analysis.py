"""
Post-simulation analysis of relativistic clock drift.

This module provides functions to:
- Predict the drift rate of an orbiting clock and split it into its
  velocity and gravitational contributions
- Measure drift rates from a live SimulationState
- Summarize a recorded run from its HDF5 file
"""

from typing import Dict

import numpy as np

from orbitclock import constants as const
from orbitclock.output import load_timeseries
from orbitclock.physics import (
    circular_orbital_velocity,
    general_relativity_factor,
    special_relativity_factor,
)
from orbitclock.state import SimulationState

MICROSECONDS_PER_DAY = 86400.0 * 1.0e6  # [us/day per s/s]


def predicted_drift_rate(radius: float, velocity: float,
                         mass: float = const.EARTH_MASS,
                         reference_radius: float = const.R_EARTH) -> Dict[str, float]:
    """
    Predict how fast an orbiting clock gains on the reference clock.

    Args:
        radius: Orbit radius [m]
        velocity: Orbital speed [m/s]
        mass: Central mass [kg]
        reference_radius: Radius of the reference clock [m]

    Returns:
        dict with fractional rates (seconds gained per second):
            - velocity: special-relativistic part (negative)
            - gravity: gravitational part (positive above the reference)
            - total: combined rate sr·gr - 1

    Notes:
        - At GPS radius: velocity ≈ -7.2 us/day, gravity ≈ +45.7 us/day,
          total ≈ +38.5 us/day
    """
    sr = special_relativity_factor(velocity)
    gr = general_relativity_factor(radius, mass=mass, reference_radius=reference_radius)
    return {
        'velocity': sr - 1.0,
        'gravity': gr - 1.0,
        'total': sr * gr - 1.0,
    }


def gps_drift_summary() -> Dict[str, float]:
    """Predicted nominal GPS clock drift in microseconds per day."""
    velocity = circular_orbital_velocity(const.EARTH_MASS, const.GPS_RADIUS)
    rates = predicted_drift_rate(const.GPS_RADIUS, velocity)
    return {key: value * MICROSECONDS_PER_DAY for key, value in rates.items()}


def drift_rate_per_day(state: SimulationState) -> np.ndarray:
    """
    Average drift rate of every body so far [us/day].

    Bodies whose coordinate time is still zero report 0.
    """
    rates = np.zeros(state.n_total)
    elapsed = state.coordinate_times > 0
    rates[elapsed] = state.drifts[elapsed] / state.coordinate_times[elapsed]
    return rates * MICROSECONDS_PER_DAY


def analyze_simulation(hdf5_filepath: str) -> Dict:
    """
    Analyze a completed simulation from HDF5 file.

    Measures each body's drift rate with a linear fit of drift against
    coordinate time and compares it with the rate implied by the recorded
    clock factors.

    Args:
        hdf5_filepath: Path to HDF5 simulation output file

    Returns:
        Dictionary with:
            - scenario: scenario name from the recorded configuration
            - n_frames_recorded, simulated_days
            - bodies: list of per-body dicts (name, final_drift_us,
              measured_rate_us_per_day, expected_rate_us_per_day)
            - max_rate_error_us_per_day: worst measured/expected mismatch
    """
    data = load_timeseries(hdf5_filepath)

    n_recorded = len(data['frame'])
    coordinate_times = data['coordinate_times']
    drifts = data['drifts']

    bodies = []
    max_error = 0.0
    for i, name in enumerate(data['names']):
        expected = (data['special_factors'][i] * data['general_factors'][i] - 1.0)
        expected *= MICROSECONDS_PER_DAY

        if n_recorded >= 2 and np.ptp(coordinate_times[:, i]) > 0:
            slope = np.polyfit(coordinate_times[:, i], drifts[:, i], 1)[0]
            measured = slope * MICROSECONDS_PER_DAY
        else:
            measured = np.nan

        final_drift = drifts[-1, i] * 1.0e6 if n_recorded > 0 else 0.0

        if np.isfinite(measured):
            max_error = max(max_error, abs(measured - expected))

        bodies.append({
            'name': name,
            'kind': int(data['kinds'][i]),
            'final_drift_us': float(final_drift),
            'measured_rate_us_per_day': float(measured),
            'expected_rate_us_per_day': float(expected),
        })

    simulated_days = 0.0
    if n_recorded > 0:
        simulated_days = float(data['simulated_seconds'][-1] - data['simulated_seconds'][0]) / 86400.0

    return {
        'scenario': str(data['config'].get('scenario', 'earth_moon_gps')),
        'n_frames_recorded': n_recorded,
        'simulated_days': simulated_days,
        'bodies': bodies,
        'max_rate_error_us_per_day': max_error,
    }
