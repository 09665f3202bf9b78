"""
Data recording for headless runs of the orbit and clock simulation.

This module handles:
- Time series recording of frame snapshots to HDF5 files
- Body metadata (orbit parameters and clock factors)
- Configuration storage for reproducibility

Recorded files are analysis output only; they are never loaded back into
a running simulation.
"""

import warnings
from pathlib import Path

import h5py
import numpy as np

from orbitclock.config import SimulationParameters
from orbitclock.state import SimulationState


class SimulationRecorder:
    """
    Records simulation frames to an HDF5 file.

    The HDF5 file structure:
    /config (group) - Simulation configuration as attributes
    /timeseries (group) - Time series data
        /frame (dataset) - Integration step count (n_steps,)
        /simulated_seconds (dataset) - Simulated time since the epoch origin [s]
        /time_scale (dataset) - Time scale in effect [dimensionless]
        /positions (dataset) - Parent-relative positions (n_steps, n_total, 3) [m]
        /display_positions (dataset) - Same in scene units (n_steps, n_total, 3)
        /angles (dataset) - Orbital angles (n_steps, n_total) [rad]
        /coordinate_times (dataset) - (n_steps, n_total) [s]
        /proper_times (dataset) - (n_steps, n_total) [s]
        /drifts (dataset) - Proper minus coordinate time (n_steps, n_total) [s]
        /earth_rotation (dataset) - Earth spin angle (n_steps,) [rad]
    /metadata (group) - Body metadata (constant throughout simulation)
        /names, /kinds, /radii [m], /display_radii, /velocities [m/s],
        /angular_velocities [rad/s], /inclinations [rad],
        /plane_rotations [rad], /special_factors, /general_factors,
        /relativistic
    """

    def __init__(self, filepath: str, params: SimulationParameters, state: SimulationState):
        """
        Initialize recorder and create HDF5 file.

        Args:
            filepath: Path to HDF5 output file
            params: Simulation parameters
            state: Initial simulation state
        """
        self.filepath = Path(filepath)
        self.params = params
        self.n_total = state.n_total

        self.filepath.parent.mkdir(parents=True, exist_ok=True)

        self.file = h5py.File(str(self.filepath), 'w')

        self._save_configuration(params, state)

        # Initial frame plus one every output_interval frames
        self.n_output_steps = params.n_frames // max(1, params.output_interval) + 1

        self._create_timeseries_datasets(state)
        self._save_metadata(state)

        self.current_output_idx = 0

    def _save_configuration(self, params: SimulationParameters, state: SimulationState):
        """Save simulation configuration to HDF5 file."""
        config_group = self.file.create_group('config')

        config_group.attrs['simulation_name'] = params.simulation_name
        config_group.attrs['output_directory'] = params.output_directory
        config_group.attrs['scenario'] = params.scenario
        config_group.attrs['time_scale'] = params.time_scale
        config_group.attrs['frame_rate'] = params.frame_rate
        config_group.attrs['duration'] = params.duration
        config_group.attrs['max_real_delta'] = params.max_real_delta
        config_group.attrs['output_interval'] = params.output_interval
        config_group.attrs['epoch_origin'] = state.clock.epoch_origin.isoformat()

        if params.scenario == "black_hole":
            config_group.attrs['black_hole_mass_solar'] = params.black_hole.mass_solar_masses
            config_group.attrs['distance_multiplier'] = params.black_hole.distance_multiplier
        else:
            config_group.attrs['gps_count'] = params.constellation.count
            config_group.attrs['gps_altitude'] = params.constellation.altitude
            config_group.attrs['gps_period'] = params.constellation.period
            config_group.attrs['velocity_mode'] = params.constellation.velocity_mode

    def _create_timeseries_datasets(self, state: SimulationState):
        """Create HDF5 datasets for time series data."""
        ts_group = self.file.create_group('timeseries')
        ts_group.attrs['n_recorded'] = 0

        n_steps = self.n_output_steps
        n_total = state.n_total

        ts_group.create_dataset('frame', shape=(n_steps,), dtype=np.int64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('simulated_seconds', shape=(n_steps,), dtype=np.float64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('time_scale', shape=(n_steps,), dtype=np.float64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('earth_rotation', shape=(n_steps,), dtype=np.float64,
                                compression='gzip', compression_opts=4)

        ts_group.create_dataset('positions', shape=(n_steps, n_total, 3), dtype=np.float64,
                                compression='gzip', compression_opts=4)
        ts_group.create_dataset('display_positions', shape=(n_steps, n_total, 3), dtype=np.float64,
                                compression='gzip', compression_opts=4)

        for name in ('angles', 'coordinate_times', 'proper_times', 'drifts'):
            ts_group.create_dataset(name, shape=(n_steps, n_total), dtype=np.float64,
                                    compression='gzip', compression_opts=4)

    def _save_metadata(self, state: SimulationState):
        """Save body metadata (constant throughout simulation)."""
        meta_group = self.file.create_group('metadata')

        meta_group.create_dataset('names', data=np.array(state.names, dtype=object),
                                  dtype=h5py.string_dtype())
        meta_group.create_dataset('kinds', data=state.kinds, compression='gzip')
        meta_group.create_dataset('radii', data=state.radii, compression='gzip')
        meta_group.create_dataset('display_radii', data=state.display_radii, compression='gzip')
        meta_group.create_dataset('velocities', data=state.velocities, compression='gzip')
        meta_group.create_dataset('angular_velocities', data=state.angular_velocities,
                                  compression='gzip')
        meta_group.create_dataset('inclinations', data=state.inclinations, compression='gzip')
        meta_group.create_dataset('plane_rotations', data=state.plane_rotations, compression='gzip')
        meta_group.create_dataset('special_factors', data=state.special_factors, compression='gzip')
        meta_group.create_dataset('general_factors', data=state.general_factors, compression='gzip')
        meta_group.create_dataset('relativistic', data=state.relativistic, compression='gzip')

        meta_group.attrs['n_total'] = state.n_total
        meta_group.attrs['n_satellites'] = state.n_satellites

    def record_frame(self, state: SimulationState):
        """
        Record the current simulation state to the timeseries.

        Args:
            state: Current simulation state
        """
        if self.current_output_idx >= self.n_output_steps:
            warnings.warn(f"Output buffer full (idx={self.current_output_idx}), skipping record")
            return

        idx = self.current_output_idx
        ts = self.file['timeseries']

        ts['frame'][idx] = state.frame_count
        ts['simulated_seconds'][idx] = state.clock.elapsed
        ts['time_scale'][idx] = state.clock.time_scale
        ts['earth_rotation'][idx] = state.earth_rotation

        ts['positions'][idx] = state.positions()
        ts['display_positions'][idx] = state.display_positions()
        ts['angles'][idx] = state.angles
        ts['coordinate_times'][idx] = state.coordinate_times
        ts['proper_times'][idx] = state.proper_times
        ts['drifts'][idx] = state.drifts

        self.current_output_idx += 1
        ts.attrs['n_recorded'] = self.current_output_idx

    def close(self):
        """Close HDF5 file."""
        if hasattr(self, 'file') and self.file is not None:
            self.file.close()
            self.file = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def load_timeseries(filepath: str) -> dict:
    """
    Load the recorded part of a run's time series.

    Args:
        filepath: Path to HDF5 output file

    Returns:
        Dictionary of arrays trimmed to the recorded frames, plus body
        metadata and the 'config' attributes
    """
    with h5py.File(filepath, 'r') as f:
        ts = f['timeseries']
        n = int(ts.attrs.get('n_recorded', len(ts['frame'])))

        data = {key: ts[key][:n] for key in ts.keys()}
        data['names'] = list(f['metadata']['names'].asstr()[:])
        data['kinds'] = f['metadata']['kinds'][:]
        data['radii'] = f['metadata']['radii'][:]
        data['velocities'] = f['metadata']['velocities'][:]
        data['special_factors'] = f['metadata']['special_factors'][:]
        data['general_factors'] = f['metadata']['general_factors'][:]
        data['config'] = dict(f['config'].attrs)

    return data
