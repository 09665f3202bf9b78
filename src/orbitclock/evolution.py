"""
Time evolution engine for the orbit and clock simulation.

One integration step per frame:
  1. simulated_delta = real_delta × time_scale
  2. θ += ω × simulated_delta for every body
  3. coordinate time += simulated_delta
  4. proper time += simulated_delta × special_factor × general_factor
  5. simulated epoch += simulated_delta

Orbits are prescribed, so the step is exact for any delta: one large step
and many small ones give the same angles and clocks up to rounding.

User actions (time scale, epoch reset, tracking) are plain functions on the
state and are meant to be applied between frames.
"""

import math
from datetime import datetime, timezone
from typing import Optional

from tqdm import tqdm

from orbitclock import constants as const
from orbitclock.config import SimulationParameters
from orbitclock.initialization import EARTH_NAME, MOON_NAME, initialize_simulation
from orbitclock.physics import InvalidArgumentError, advance_bodies
from orbitclock.state import (
    TRACK_MOON,
    TRACK_SATELLITE,
    TRACK_SUN,
    TRACKING_MODES,
    SimulationState,
    clamp_time_scale,
)


def step(state: SimulationState, simulated_delta: float) -> SimulationState:
    """
    Advance the state by a simulated time delta.

    Args:
        state: SimulationState (modified in place)
        simulated_delta: Simulated seconds, >= 0

    Returns:
        The same state, for chaining

    Raises:
        InvalidArgumentError: If the delta is negative or not finite
    """
    if not (math.isfinite(simulated_delta) and simulated_delta >= 0):
        raise InvalidArgumentError(
            f"simulated_delta must be finite and non-negative, got {simulated_delta}"
        )

    advance_bodies(
        state.angles,
        state.angular_velocities,
        state.coordinate_times,
        state.proper_times,
        state.drifts,
        state.clock_rates,
        state.rate_offsets,
        float(simulated_delta),
    )

    state.earth_rotation = (
        state.earth_rotation + const.EARTH_ROTATION_SPEED * simulated_delta
    ) % const.TWO_PI
    state.cloud_rotation = (
        state.cloud_rotation
        + const.EARTH_ROTATION_SPEED * const.CLOUD_ROTATION_RATIO * simulated_delta
    ) % const.TWO_PI

    state.clock.elapsed += simulated_delta
    state.frame_count += 1
    return state


def advance(state: SimulationState, real_delta_seconds: float) -> SimulationState:
    """
    Per-frame entry point: advance by a wall-clock delta times the time scale.

    Args:
        state: SimulationState (modified in place)
        real_delta_seconds: Wall-clock seconds since the previous frame, >= 0

    Returns:
        The same state, for chaining
    """
    if not (math.isfinite(real_delta_seconds) and real_delta_seconds >= 0):
        raise InvalidArgumentError(
            f"real_delta_seconds must be finite and non-negative, got {real_delta_seconds}"
        )
    return step(state, real_delta_seconds * state.clock.time_scale)


def clamp_real_delta(real_delta_seconds: float, max_delta: float) -> float:
    """Cap a frame delta so a stalled host does not produce a runaway step."""
    return min(max(real_delta_seconds, 0.0), max_delta)


def set_time_scale(state: SimulationState, value: float) -> float:
    """
    Set the time scale, clamped to the slider range.

    Returns:
        The time scale actually applied
    """
    clamped = clamp_time_scale(value)
    state.clock.time_scale = clamped
    return clamped


def reset_simulated_epoch(state: SimulationState, now: Optional[datetime] = None) -> datetime:
    """
    Reset the simulated epoch to wall-clock now.

    Body angles and clock accumulators are left untouched.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    state.clock.epoch_origin = now
    state.clock.elapsed = 0.0
    return now


def select_tracking(state: SimulationState, mode: str) -> str:
    """
    Change the tracked body.

    Selecting SATELLITE while already tracking a satellite moves on to the
    next satellite; any other selection starts again from the first one.
    """
    if mode not in TRACKING_MODES:
        raise ValueError(f"tracking mode must be one of {TRACKING_MODES}, got '{mode}'")

    n_sat = state.n_satellites
    if mode == TRACK_SATELLITE and state.tracking_mode == TRACK_SATELLITE and n_sat > 0:
        state.active_satellite = (state.active_satellite + 1) % n_sat
    else:
        state.active_satellite = 0

    state.tracking_mode = mode
    return mode


def tracked_body_index(state: SimulationState) -> Optional[int]:
    """
    State index of the tracked body.

    Returns None for the Sun (scene origin) or when the tracked body is
    not part of this state.
    """
    mode = state.tracking_mode
    if mode == TRACK_SUN:
        return None

    if mode == TRACK_SATELLITE:
        satellites = state.satellite_indices()
        if len(satellites) == 0:
            return None
        return int(satellites[state.active_satellite % len(satellites)])

    name = MOON_NAME if mode == TRACK_MOON else EARTH_NAME
    if name in state.names:
        return state.index_of(name)
    return None


def evolve_system(
    state: SimulationState,
    params: SimulationParameters,
    n_frames: int,
    show_progress: bool = True,
    recorder=None
) -> dict:
    """
    Play back frames at the configured frame rate without a host.

    Args:
        state: SimulationState (modified in place)
        params: SimulationParameters (frame rate, stall cap, output interval)
        n_frames: Number of frames to run
        show_progress: Whether to show a progress bar
        recorder: Optional SimulationRecorder

    Returns:
        Dictionary with run statistics
    """
    frame_delta = clamp_real_delta(1.0 / params.frame_rate, params.max_real_delta)

    if recorder is not None:
        recorder.record_frame(state)

    if show_progress:
        pbar = tqdm(total=n_frames, desc="Simulating", unit="frame")

    for frame in range(n_frames):
        advance(state, frame_delta)

        if recorder is not None and (frame + 1) % params.output_interval == 0:
            recorder.record_frame(state)

        if show_progress:
            pbar.update(1)

    if show_progress:
        pbar.close()

    return {
        'frames': n_frames,
        'simulated_seconds': n_frames * frame_delta * state.clock.time_scale,
        'final_epoch': state.clock.simulated_epoch,
        'max_drift': float(state.drifts.max()) if state.n_total > 0 else 0.0,
    }


def run_simulation(
    params: SimulationParameters,
    now: Optional[datetime] = None,
    show_progress: bool = True
) -> tuple:
    """
    Run a complete simulation from initialization to completion.

    Args:
        params: SimulationParameters object
        now: Start time when params.start_epoch is unset
        show_progress: Whether to show progress bar

    Returns:
        (state, stats) tuple
    """
    print("Initializing simulation...")
    state = initialize_simulation(params, now=now)

    n_frames = params.n_frames
    print(f"Running simulation: {n_frames} frames at {params.frame_rate:g} Hz, "
          f"scale {state.clock.time_scale:g}x")
    print(f"Total bodies: {state.n_total}")

    stats = evolve_system(state, params, n_frames, show_progress=show_progress)

    print(f"\nSimulation complete!")
    print(f"  Simulated epoch: {state.clock.simulated_epoch.isoformat()}")
    print(f"  Simulated time: {stats['simulated_seconds'] / 86400.0:.3f} days")
    print(f"  Max clock drift: {stats['max_drift'] * 1.0e6:+.4f} us")

    return state, stats
