"""
Visualization functions for recorded orbit and clock runs.

This module provides functions to create plots from simulation HDF5 files:
- Clock drift vs simulated time, one line per body
- 3D orbit tracks around the parent body
- Summary report generation

All plots are saved as PNG files.
"""

import matplotlib
matplotlib.use('Agg')  # Use non-interactive backend for saving files
import matplotlib.pyplot as plt
from pathlib import Path

from orbitclock import constants as const
from orbitclock.analysis import analyze_simulation, gps_drift_summary
from orbitclock.output import load_timeseries
from orbitclock.physics import schwarzschild_radius
from orbitclock.state import KIND_NAMES, PLANET


plt.rcParams['figure.dpi'] = 150
plt.rcParams['savefig.dpi'] = 150
plt.rcParams['font.size'] = 10
plt.rcParams['axes.labelsize'] = 12
plt.rcParams['axes.titlesize'] = 14
plt.rcParams['legend.fontsize'] = 9


def plot_drift_vs_time(hdf5_filepath: str, output_path: str):
    """
    Plot proper-minus-coordinate clock drift against simulated time.

    Args:
        hdf5_filepath: Path to HDF5 simulation output file
        output_path: Path to save PNG plot

    Bodies whose clocks are not modeled (the Earth) are skipped.
    """
    data = load_timeseries(hdf5_filepath)
    days = data['simulated_seconds'] / 86400.0

    fig, ax = plt.subplots(figsize=(10, 6))

    for i, name in enumerate(data['names']):
        if data['kinds'][i] == PLANET:
            continue
        ax.plot(days, data['drifts'][:, i] * 1.0e6, label=name)

    ax.axhline(0.0, color='gray', linewidth=0.8)
    ax.set_xlabel('Simulated time (days)')
    ax.set_ylabel('Clock drift (us)')
    ax.set_title('Relativistic Clock Drift')
    ax.legend()
    ax.grid(True, alpha=0.3)

    plt.tight_layout()
    plt.savefig(output_path, bbox_inches='tight')
    plt.close()


def orbit_length_scale(config: dict):
    """Length unit [m], axis label and parent name for a recorded scenario."""
    if config.get('scenario') == "black_hole":
        mass = float(config['black_hole_mass_solar']) * const.SOLAR_MASS
        return schwarzschild_radius(mass), 'r_s', 'Black hole'
    return const.R_EARTH, 'R_earth', 'Earth'


def plot_orbits_3d(hdf5_filepath: str, output_path: str):
    """
    Plot recorded parent-relative orbit tracks in 3D.

    Args:
        hdf5_filepath: Path to HDF5 simulation output file
        output_path: Path to save PNG plot

    Earth-scene positions are drawn in Earth radii and black hole runs in
    Schwarzschild radii. The heliocentric Earth track is left out since it
    does not share the geocentric frame.
    """
    data = load_timeseries(hdf5_filepath)
    length_scale, unit, parent = orbit_length_scale(data['config'])
    positions = data['positions'] / length_scale

    fig = plt.figure(figsize=(9, 8))
    ax = fig.add_subplot(111, projection='3d')

    for i, name in enumerate(data['names']):
        if data['kinds'][i] == PLANET:
            continue
        track = positions[:, i, :]
        ax.plot(track[:, 0], track[:, 2], track[:, 1], linewidth=1.0, label=name)
        ax.scatter(track[-1, 0], track[-1, 2], track[-1, 1], s=15)

    ax.scatter([0.0], [0.0], [0.0], c='blue', s=60, label=parent)

    ax.set_xlabel(f'x ({unit})')
    ax.set_ylabel(f'z ({unit})')
    ax.set_zlabel(f'y ({unit})')
    ax.set_title('Orbit Tracks')
    ax.legend(loc='upper left')

    plt.tight_layout()
    plt.savefig(output_path, bbox_inches='tight')
    plt.close()


def generate_summary_report(hdf5_filepath: str, output_path: str):
    """
    Write a plain-text summary of a recorded run.

    Args:
        hdf5_filepath: Path to HDF5 simulation output file
        output_path: Path to save the text report
    """
    results = analyze_simulation(hdf5_filepath)

    lines = [
        "=" * 70,
        "ORBIT CLOCK SIMULATION SUMMARY",
        "=" * 70,
        f"Recorded frames: {results['n_frames_recorded']}",
        f"Scenario: {results['scenario']}",
        f"Simulated time: {results['simulated_days']:.3f} days",
        "",
    ]

    # Nominal drift only applies to the Earth scene
    if results['scenario'] == "earth_moon_gps":
        nominal = gps_drift_summary()
        lines.extend([
            "Nominal GPS drift (us/day):",
            f"  Velocity:  {nominal['velocity']:+.2f}",
            f"  Gravity:   {nominal['gravity']:+.2f}",
            f"  Total:     {nominal['total']:+.2f}",
            "",
        ])

    lines.extend([
        f"{'Body':<16}{'Kind':<15}{'Drift (us)':>14}{'Rate (us/day)':>16}{'Expected':>12}",
        "-" * 73,
    ])
    for body in results['bodies']:
        lines.append(
            f"{body['name']:<16}{KIND_NAMES.get(body['kind'], '?'):<15}"
            f"{body['final_drift_us']:>+14.4f}"
            f"{body['measured_rate_us_per_day']:>+16.4f}"
            f"{body['expected_rate_us_per_day']:>+12.4f}"
        )
    lines.extend([
        "-" * 73,
        f"Max rate error: {results['max_rate_error_us_per_day']:.3e} us/day",
        "=" * 70,
    ])

    Path(output_path).parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        f.write("\n".join(lines) + "\n")

    return results
