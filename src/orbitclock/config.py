"""
Configuration management for the orbit and clock simulation.

This module handles loading and parsing YAML configuration files,
converting all parameters to SI units (m, s, kg, rad).
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

import yaml

from orbitclock import constants as const

SCENARIOS = ("earth_moon_gps", "black_hole")
VELOCITY_MODES = ("period", "keplerian")


@dataclass
class ConstellationConfig:
    """Configuration for the GPS satellite constellation."""

    count: int = const.GPS_SATELLITE_COUNT
    altitude: float = const.GPS_ALTITUDE  # meters
    period: float = const.GPS_PERIOD  # seconds
    velocity_mode: str = "period"  # angular velocity from 'period' or 'keplerian' (v/r)
    base_inclination: float = const.GPS_BASE_INCLINATION  # radians
    inclination_step: float = const.GPS_INCLINATION_STEP  # radians per satellite

    @property
    def radius(self) -> float:
        """Orbit radius from the Earth's center [m]."""
        return const.R_EARTH + self.altitude

    def __repr__(self):
        """Human-readable representation."""
        return (f"GPS constellation: {self.count} satellites at "
                f"{self.altitude / 1.0e3:.0f} km, T={self.period:.0f} s "
                f"({self.velocity_mode})")


@dataclass
class BlackHoleConfig:
    """Configuration for the black hole viewer."""

    mass_solar_masses: float = 10.0
    distance_multiplier: float = 2.0

    @property
    def mass(self) -> float:
        """Mass [kg]."""
        return self.mass_solar_masses * const.SOLAR_MASS

    def __repr__(self):
        """Human-readable representation."""
        return (f"Black hole: {self.mass_solar_masses:g} M_sun, "
                f"distance x{self.distance_multiplier:g}")


@dataclass
class SimulationParameters:
    """
    Container for all simulation parameters.

    All internal values stored in SI units:
    - Distance: meters (m)
    - Time: seconds (s)
    - Angles: radians
    """

    # Metadata
    simulation_name: str
    output_directory: str
    scenario: str = "earth_moon_gps"

    # Bodies
    constellation: ConstellationConfig = field(default_factory=ConstellationConfig)
    include_moon: bool = True
    include_earth_orbit: bool = True
    black_hole: BlackHoleConfig = field(default_factory=BlackHoleConfig)

    # Clock
    time_scale: float = const.TIME_SCALE_DEFAULT
    start_epoch: Optional[datetime] = None  # None = wall-clock now

    # Headless playback
    frame_rate: float = const.REFERENCE_FRAME_RATE  # frames per real second
    duration: float = 60.0  # real seconds
    max_real_delta: float = 0.1  # real seconds per frame, stall cap
    output_interval: int = 60  # frames between recorded snapshots

    @property
    def n_frames(self) -> int:
        """Number of frames in a headless run."""
        return int(round(self.duration * self.frame_rate))

    @property
    def simulated_duration(self) -> float:
        """Simulated seconds covered by a headless run at a constant scale."""
        return self.duration * self.time_scale

    def validate(self) -> list:
        """
        Perform sanity checks on configuration parameters.

        Returns:
            List of warning/error messages. Empty list if all checks pass.
        """
        warnings = []

        if self.scenario not in SCENARIOS:
            warnings.append(f"ERROR: scenario must be one of {SCENARIOS}, got '{self.scenario}'")

        # Clock
        if self.time_scale <= 0:
            warnings.append(f"ERROR: time_scale must be positive, got {self.time_scale}")
        elif not const.TIME_SCALE_MIN <= self.time_scale <= const.TIME_SCALE_MAX:
            warnings.append(
                f"WARNING: time_scale ({self.time_scale:g}) outside slider range "
                f"[{const.TIME_SCALE_MIN:g}, {const.TIME_SCALE_MAX:g}]; it will be clamped"
            )

        # Playback
        if self.frame_rate <= 0:
            warnings.append(f"ERROR: frame_rate must be positive, got {self.frame_rate}")

        if self.duration <= 0:
            warnings.append(f"ERROR: duration must be positive, got {self.duration}")

        if self.max_real_delta <= 0:
            warnings.append(f"ERROR: max_real_delta must be positive, got {self.max_real_delta}")
        elif self.frame_rate > 0 and self.max_real_delta < 1.0 / self.frame_rate:
            warnings.append(
                f"WARNING: max_real_delta ({self.max_real_delta}s) is shorter than one "
                f"frame ({1.0 / self.frame_rate:.4f}s); playback will run slow"
            )

        if self.output_interval < 1:
            warnings.append(f"ERROR: output_interval must be at least 1 frame, got {self.output_interval}")

        if self.scenario == "earth_moon_gps":
            warnings.extend(self._validate_constellation())
        elif self.scenario == "black_hole":
            warnings.extend(self._validate_black_hole())

        return warnings

    def _validate_constellation(self) -> list:
        warnings = []
        gps = self.constellation

        if gps.count < 0:
            warnings.append(f"ERROR: GPS satellite count must be non-negative, got {gps.count}")

        if gps.altitude <= 0:
            warnings.append(f"ERROR: GPS altitude must be positive, got {gps.altitude}")

        if gps.period <= 0:
            warnings.append(f"ERROR: GPS period must be positive, got {gps.period}")

        if gps.velocity_mode not in VELOCITY_MODES:
            warnings.append(
                f"ERROR: velocity_mode must be one of {VELOCITY_MODES}, got '{gps.velocity_mode}'"
            )

        if gps.count == 0 and not self.include_moon:
            warnings.append("WARNING: no satellites and no Moon; nothing will be tracked")

        # Compare the configured period with the Keplerian one
        if gps.altitude > 0 and gps.period > 0:
            v_keplerian = math.sqrt(const.G * const.EARTH_MASS / gps.radius)
            t_keplerian = const.TWO_PI * gps.radius / v_keplerian
            ratio = gps.period / t_keplerian
            if abs(ratio - 1.0) > 0.01:
                warnings.append(
                    f"INFO: GPS period ({gps.period:.0f}s) differs from Keplerian "
                    f"({t_keplerian:.0f}s) by {abs(ratio - 1.0) * 100:.1f}%. "
                    f"Drawn orbit and clock speed will disagree."
                )

        return warnings

    def _validate_black_hole(self) -> list:
        warnings = []
        bh = self.black_hole

        if bh.mass_solar_masses <= 0:
            warnings.append(f"ERROR: black hole mass must be positive, got {bh.mass_solar_masses}")
            return warnings

        if bh.distance_multiplier <= 0:
            warnings.append(
                f"ERROR: distance_multiplier must be positive, got {bh.distance_multiplier}"
            )
            return warnings

        # Stylized orbit radius (see orbitclock.blackhole)
        rs = 2.0 * const.G * bh.mass / const.c_squared
        display_radius = min(rs / const.BH_METERS_PER_UNIT, const.BH_MAX_DISPLAY_RADIUS)
        orbit_radius = (display_radius * bh.distance_multiplier * const.BH_ORBIT_SPREAD
                        * const.BH_METERS_PER_UNIT)

        if orbit_radius <= rs:
            warnings.append(
                f"WARNING: stylized orbit ({orbit_radius / 1.0e3:.1f} km) lies inside the "
                f"Schwarzschild radius ({rs / 1.0e3:.1f} km). Test particle clock will not be modeled."
            )
        elif orbit_radius < 1.5 * rs:
            warnings.append(
                f"INFO: stylized orbit ({orbit_radius / 1.0e3:.1f} km) is inside the photon "
                f"sphere ({1.5 * rs / 1.0e3:.1f} km)."
            )

        return warnings

    @classmethod
    def from_yaml(cls, filepath: str) -> 'SimulationParameters':
        """
        Load configuration from YAML file and convert to SI units.

        Args:
            filepath: Path to YAML configuration file

        Returns:
            SimulationParameters object with all values in SI units

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        def to_float(value: Any) -> float:
            """Convert value to float, handling YAML quirks with scientific notation."""
            return float(value)

        def to_int(value: Any) -> int:
            """Convert value to int."""
            return int(value)

        def to_bool(value: Any) -> bool:
            """Convert value to bool."""
            if isinstance(value, str):
                return value.lower() in ('true', 'yes', '1')
            return bool(value)

        def to_datetime(value: Any) -> datetime:
            """Convert a YAML timestamp or ISO string to an aware UTC datetime."""
            if isinstance(value, str):
                value = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
            if not isinstance(value, datetime):
                raise ValueError(f"start_epoch must be an ISO timestamp, got {value!r}")
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)

        # Load YAML file
        config_path = Path(filepath)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {filepath}")

        with open(config_path, 'r') as f:
            config = yaml.safe_load(f)

        if not isinstance(config, dict):
            raise ValueError(f"Configuration file is empty or malformed: {filepath}")

        scenario = config.get('scenario', 'earth_moon_gps')
        if scenario not in SCENARIOS:
            raise ValueError(f"scenario must be one of {SCENARIOS}, got '{scenario}'")

        # Clock
        clock = config.get('clock') or {}
        time_scale = to_float(clock.get('time_scale', const.TIME_SCALE_DEFAULT))
        start_epoch = None
        if clock.get('start_epoch') is not None:
            start_epoch = to_datetime(clock['start_epoch'])

        # GPS constellation (km → m, deg → rad)
        gps_data = config.get('gps_constellation') or {}
        velocity_mode = gps_data.get('velocity_mode', 'period')
        if velocity_mode not in VELOCITY_MODES:
            raise ValueError(
                f"gps_constellation: velocity_mode must be 'period' or 'keplerian', got '{velocity_mode}'"
            )
        constellation = ConstellationConfig(
            count=to_int(gps_data.get('count', const.GPS_SATELLITE_COUNT)),
            altitude=to_float(gps_data.get('altitude_km', const.GPS_ALTITUDE / 1.0e3)) * 1.0e3,
            period=to_float(gps_data.get('period_s', const.GPS_PERIOD)),
            velocity_mode=velocity_mode,
            base_inclination=math.radians(to_float(
                gps_data.get('base_inclination_deg', math.degrees(const.GPS_BASE_INCLINATION))
            )),
            inclination_step=to_float(gps_data.get('inclination_step_rad', const.GPS_INCLINATION_STEP)),
        )

        include_moon = to_bool((config.get('moon') or {}).get('enabled', True))
        include_earth_orbit = to_bool((config.get('earth_orbit') or {}).get('enabled', True))

        # Black hole (already in M_sun)
        bh_data = config.get('black_hole') or {}
        black_hole = BlackHoleConfig(
            mass_solar_masses=to_float(bh_data.get('mass_solar_masses', 10.0)),
            distance_multiplier=to_float(bh_data.get('distance_multiplier', 2.0)),
        )

        # Headless playback
        playback = config.get('playback') or {}
        frame_rate = to_float(playback.get('frame_rate_hz', const.REFERENCE_FRAME_RATE))
        duration = to_float(playback.get('duration_s', 60.0))
        max_real_delta = to_float(playback.get('max_frame_delta_s', 0.1))
        output_interval = to_int(playback.get('output_interval_frames', 60))

        return cls(
            simulation_name=config['simulation_name'],
            output_directory=config['output_directory'],
            scenario=scenario,
            constellation=constellation,
            include_moon=include_moon,
            include_earth_orbit=include_earth_orbit,
            black_hole=black_hole,
            time_scale=time_scale,
            start_epoch=start_epoch,
            frame_rate=frame_rate,
            duration=duration,
            max_real_delta=max_real_delta,
            output_interval=output_interval,
        )

    def __repr__(self):
        """Human-readable representation."""
        lines = [
            f"Simulation: {self.simulation_name}",
            f"Scenario: {self.scenario}",
        ]
        if self.scenario == "black_hole":
            lines.append(f"  {self.black_hole}")
        else:
            lines.append(f"  {self.constellation}")
            lines.append(f"  Moon: {'on' if self.include_moon else 'off'}")
            lines.append(f"  Earth orbit: {'on' if self.include_earth_orbit else 'off'}")
        lines.extend([
            f"Time scale: {self.time_scale:g}x",
            f"Playback: {self.duration:g} s at {self.frame_rate:g} Hz "
            f"({self.simulated_duration / 86400.0:.2f} simulated days)",
        ])
        return "\n".join(lines)
