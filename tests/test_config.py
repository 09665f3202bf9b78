"""
Unit tests for configuration loading and parsing.
"""

import math
from datetime import datetime, timezone
from pathlib import Path

import pytest

from orbitclock.config import BlackHoleConfig, ConstellationConfig, SimulationParameters
from orbitclock import constants as const

CONFIG_DIR = Path(__file__).parent.parent / 'configs'


def write_config(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_load_gps_baseline_config():
    """Test loading the GPS baseline configuration file."""
    params = SimulationParameters.from_yaml(str(CONFIG_DIR / 'gps_baseline.yaml'))

    assert params.simulation_name == "gps_baseline"
    assert params.output_directory == "./results/gps_baseline"
    assert params.scenario == "earth_moon_gps"

    # Clock
    assert params.time_scale == 1440.0
    assert params.start_epoch == datetime(2025, 12, 21, tzinfo=timezone.utc)

    # Constellation (km → m, deg → rad)
    gps = params.constellation
    assert gps.count == 5
    assert abs(gps.altitude - const.GPS_ALTITUDE) < 1e-6
    assert abs(gps.radius - const.GPS_RADIUS) < 1e-6
    assert gps.period == 43080.0
    assert gps.velocity_mode == "period"
    assert abs(gps.base_inclination - math.pi / 4) < 1e-12
    assert gps.inclination_step == 0.15

    assert params.include_moon
    assert params.include_earth_orbit


def test_playback_parameters():
    """Test playback parameters and derived frame counts."""
    params = SimulationParameters.from_yaml(str(CONFIG_DIR / 'gps_baseline.yaml'))

    assert params.frame_rate == 60.0
    assert params.duration == 60.0
    assert params.max_real_delta == 0.1
    assert params.output_interval == 60
    assert params.n_frames == 3600
    # One real minute at 1440x is one simulated day
    assert params.simulated_duration == 86400.0


def test_load_black_hole_config():
    """Test loading the black hole configuration file."""
    params = SimulationParameters.from_yaml(str(CONFIG_DIR / 'black_hole.yaml'))

    assert params.scenario == "black_hole"
    assert params.time_scale == 1.0
    assert params.start_epoch is None
    assert params.black_hole.mass_solar_masses == 10.0
    assert params.black_hole.distance_multiplier == 2.0
    assert params.black_hole.mass == 10.0 * const.SOLAR_MASS


def test_shipped_configs_validate():
    """Shipped configurations pass validation without messages."""
    for name in ('gps_baseline.yaml', 'black_hole.yaml'):
        params = SimulationParameters.from_yaml(str(CONFIG_DIR / name))
        assert params.validate() == []


def test_defaults_for_missing_sections(tmp_path):
    """Only the metadata keys are required."""
    path = write_config(tmp_path, "simulation_name: bare\noutput_directory: ./out\nmoon:\n")
    params = SimulationParameters.from_yaml(path)

    assert params.scenario == "earth_moon_gps"
    assert params.time_scale == const.TIME_SCALE_DEFAULT
    assert params.constellation.count == const.GPS_SATELLITE_COUNT
    assert params.constellation.period == const.GPS_PERIOD
    assert abs(params.constellation.base_inclination - const.GPS_BASE_INCLINATION) < 1e-12
    assert params.black_hole == BlackHoleConfig()
    assert params.include_moon


def test_naive_epoch_is_utc(tmp_path):
    path = write_config(tmp_path, (
        "simulation_name: t\noutput_directory: ./out\n"
        "clock:\n  start_epoch: 2024-03-01 06:30:00\n"
    ))
    params = SimulationParameters.from_yaml(path)
    assert params.start_epoch == datetime(2024, 3, 1, 6, 30, tzinfo=timezone.utc)


def test_boolean_strings(tmp_path):
    path = write_config(tmp_path, (
        "simulation_name: t\noutput_directory: ./out\n"
        "moon:\n  enabled: 'no'\nearth_orbit:\n  enabled: 'yes'\n"
    ))
    params = SimulationParameters.from_yaml(path)
    assert not params.include_moon
    assert params.include_earth_orbit


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        SimulationParameters.from_yaml("does/not/exist.yaml")


def test_invalid_velocity_mode(tmp_path):
    path = write_config(tmp_path, (
        "simulation_name: t\noutput_directory: ./out\n"
        "gps_constellation:\n  velocity_mode: guess\n"
    ))
    with pytest.raises(ValueError, match="velocity_mode"):
        SimulationParameters.from_yaml(path)


def test_invalid_scenario(tmp_path):
    path = write_config(tmp_path, "simulation_name: t\noutput_directory: ./out\nscenario: mars\n")
    with pytest.raises(ValueError, match="scenario"):
        SimulationParameters.from_yaml(path)


def test_empty_file(tmp_path):
    path = write_config(tmp_path, "")
    with pytest.raises(ValueError):
        SimulationParameters.from_yaml(path)


class TestValidation:
    """Tests for SimulationParameters.validate()."""

    def make_params(self, **kwargs):
        return SimulationParameters(simulation_name="t", output_directory="./out", **kwargs)

    def test_defaults_are_valid(self):
        assert self.make_params().validate() == []

    def test_non_positive_playback_values(self):
        messages = self.make_params(frame_rate=0.0, duration=-1.0, max_real_delta=0.0,
                                    output_interval=0).validate()
        errors = [m for m in messages if m.startswith("ERROR")]
        assert len(errors) == 4

    def test_time_scale_out_of_range(self):
        messages = self.make_params(time_scale=250000.0).validate()
        assert any(m.startswith("WARNING") and "time_scale" in m for m in messages)

    def test_stall_cap_shorter_than_frame(self):
        messages = self.make_params(max_real_delta=0.001).validate()
        assert any(m.startswith("WARNING") and "max_real_delta" in m for m in messages)

    def test_bad_constellation(self):
        params = self.make_params(constellation=ConstellationConfig(
            count=-1, altitude=0.0, period=0.0, velocity_mode="guess"))
        errors = [m for m in params.validate() if m.startswith("ERROR")]
        assert len(errors) == 4

    def test_period_far_from_keplerian(self):
        params = self.make_params(constellation=ConstellationConfig(period=30000.0))
        messages = params.validate()
        assert any(m.startswith("INFO") and "Keplerian" in m for m in messages)

    def test_black_hole_orbit_inside_horizon(self):
        params = self.make_params(scenario="black_hole",
                                  black_hole=BlackHoleConfig(mass_solar_masses=200.0,
                                                             distance_multiplier=1.0))
        messages = params.validate()
        assert any(m.startswith("WARNING") and "Schwarzschild" in m for m in messages)

    def test_black_hole_orbit_inside_photon_sphere(self):
        # 40 M_sun: clamped 150 km orbit sits between rs and 1.5 rs
        params = self.make_params(scenario="black_hole",
                                  black_hole=BlackHoleConfig(mass_solar_masses=40.0,
                                                             distance_multiplier=1.0))
        messages = params.validate()
        assert any(m.startswith("INFO") and "photon sphere" in m for m in messages)

    def test_black_hole_bad_mass(self):
        params = self.make_params(scenario="black_hole",
                                  black_hole=BlackHoleConfig(mass_solar_masses=0.0))
        assert any(m.startswith("ERROR") for m in params.validate())

    def test_unknown_scenario(self):
        messages = self.make_params(scenario="mars").validate()
        assert any(m.startswith("ERROR") and "scenario" in m for m in messages)

    def test_repr(self):
        text = repr(self.make_params())
        assert "Simulation: t" in text
        assert "GPS constellation" in text
