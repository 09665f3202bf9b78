"""
Main simulation runner script.

Usage:
    python scripts/run_simulation.py configs/gps_baseline.yaml

This script:
1. Loads configuration from YAML file
2. Initializes simulation state
3. Plays back frames headlessly with a progress bar
4. Saves the recorded time series to an HDF5 file
5. Generates plots and summary report
"""

import sys
import argparse
import time
from pathlib import Path

# Add src to path so we can import the orbitclock package
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from orbitclock.config import SimulationParameters
from orbitclock.initialization import initialize_simulation
from orbitclock.evolution import evolve_system
from orbitclock.output import SimulationRecorder
from orbitclock.diagnostics import check_state_health
from orbitclock.visualization import (
    plot_drift_vs_time,
    plot_orbits_3d,
    generate_summary_report
)
from orbitclock.analysis import analyze_simulation


def main():
    parser = argparse.ArgumentParser(
        description='Run orbit clock simulation headlessly'
    )
    parser.add_argument(
        'config',
        type=str,
        help='Path to YAML configuration file'
    )
    parser.add_argument(
        '--output',
        type=str,
        default=None,
        help='Output HDF5 file path (default: auto from config)'
    )
    parser.add_argument(
        '--skip-plots',
        action='store_true',
        help='Skip plot generation'
    )

    args = parser.parse_args()

    # Load configuration
    print(f"Loading configuration from {args.config}...")
    params = SimulationParameters.from_yaml(args.config)

    errors = [w for w in params.validate() if w.startswith("ERROR")]
    if errors:
        for error in errors:
            print(f"  {error}")
        sys.exit(1)

    # Determine output path
    if args.output:
        output_path = args.output
    else:
        output_dir = Path(params.output_directory)
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = str(output_dir / f"{params.simulation_name}.h5")

    print(f"Output will be saved to: {output_path}")
    print()

    print("=" * 70)
    print(params)
    print("=" * 70)
    print()

    print("Initializing simulation state...")
    state = initialize_simulation(params)
    print(state)
    print()

    print("Starting simulation...")
    start_time = time.time()

    with SimulationRecorder(output_path, params, state) as recorder:
        evolve_system(state, params, params.n_frames, show_progress=True, recorder=recorder)

    elapsed_time = time.time() - start_time

    print()
    print("=" * 70)
    print(f"Simulation completed in {elapsed_time:.1f} seconds")
    print("=" * 70)
    print()

    health = check_state_health(state)
    for warning in health['warnings']:
        print(f"  {warning}")

    print("Analyzing results...")
    results = analyze_simulation(output_path)

    print()
    print("=" * 70)
    print("QUICK RESULTS SUMMARY")
    print("=" * 70)
    print(f"Simulated time: {results['simulated_days']:.3f} days")
    for body in results['bodies']:
        print(f"{body['name']:<16} drift {body['final_drift_us']:+.4f} us "
              f"({body['measured_rate_us_per_day']:+.3f} us/day)")
    print("=" * 70)
    print()

    if not args.skip_plots:
        print("Generating plots and report...")
        output_dir = Path(output_path).parent

        plot_files = {
            'drift': output_dir / 'drift_vs_time.png',
            'orbits': output_dir / 'orbits_3d.png',
        }

        try:
            plot_drift_vs_time(output_path, str(plot_files['drift']))
            print(f"  [OK] {plot_files['drift'].name}")
        except Exception as e:
            print(f"  [ERROR] drift_vs_time: {e}")

        try:
            plot_orbits_3d(output_path, str(plot_files['orbits']))
            print(f"  [OK] {plot_files['orbits'].name}")
        except Exception as e:
            print(f"  [ERROR] orbits_3d: {e}")

        report_path = output_dir / 'summary_report.txt'
        generate_summary_report(output_path, str(report_path))
        print(f"  [OK] {report_path.name}")


if __name__ == '__main__':
    main()
