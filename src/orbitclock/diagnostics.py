"""
Runtime diagnostics for simulation health checks.

This module provides functions to detect:
- Numerical blow-up (NaN or Inf in any evolving array)
- Bodies moving at or above light speed
- Clock accumulators going backwards or disagreeing with the drift
- Display radii that look like meters (unit mix-ups)
"""

import numpy as np

from orbitclock import constants as const


def check_state_health(state, drift_tolerance=1.0e-6):
    """
    Check a SimulationState for problems that would corrupt the viewer.

    Args:
        state: SimulationState
        drift_tolerance: Allowed |drift - (proper - coordinate)| [s]

    Returns:
        dict with:
            - is_healthy: bool
            - warnings: list of warning messages
    """
    warnings = []

    for name in ('angles', 'coordinate_times', 'proper_times', 'drifts'):
        values = getattr(state, name)
        if not np.all(np.isfinite(values)):
            warnings.append(f"CRITICAL: {name} contains NaN or Inf - numerical instability!")

    if warnings:
        return {'is_healthy': False, 'warnings': warnings}

    if np.any(state.coordinate_times < 0) or np.any(state.proper_times < 0):
        warnings.append("CRITICAL: clock accumulator is negative; time ran backwards")

    fast = np.abs(state.velocities) >= const.c
    for idx in np.flatnonzero(fast & state.relativistic):
        warnings.append(
            f"CRITICAL: {state.names[idx]} velocity ({state.velocities[idx] / const.c:.3f}c) "
            f"is not below the speed of light"
        )

    mismatch = np.abs(state.drifts - (state.proper_times - state.coordinate_times))
    for idx in np.flatnonzero(mismatch > drift_tolerance):
        warnings.append(
            f"WARNING: {state.names[idx]} drift accumulator differs from proper - coordinate "
            f"time by {mismatch[idx]:.3e}s"
        )

    # Scene units are orders of magnitude smaller than the real radius
    suspicious = (state.radii > 0) & np.isclose(state.display_radii, state.radii)
    for idx in np.flatnonzero(suspicious):
        warnings.append(
            f"WARNING: {state.names[idx]} display radius equals its radius in meters; "
            f"display units may have been mixed with real units"
        )

    scale = state.clock.time_scale
    if not const.TIME_SCALE_MIN <= scale <= const.TIME_SCALE_MAX:
        warnings.append(f"WARNING: time scale {scale:g} outside slider range")

    is_healthy = not any(w.startswith("CRITICAL") for w in warnings)
    return {'is_healthy': is_healthy, 'warnings': warnings}
