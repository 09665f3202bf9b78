"""
Physical and astronomical constants used throughout the simulation.

SI UNITS SYSTEM:
- Distance: meters (m)
- Velocity: meters per second (m/s)
- Mass: kilograms (kg)
- Time: seconds (s)
- Angles: radians

Display-scale values (suffix _UNITS) belong to the viewer's scene units.
They are kept apart from the SI values and are never fed into a physical
formula; conversion happens only through the explicit scale factors below.
"""

import math

TWO_PI = 2.0 * math.pi

# Fundamental constants
G = 6.67430e-11  # Gravitational constant [m³/(kg·s²)]
c = 299792458.0  # Speed of light in vacuum [m/s]
c_squared = c * c  # [m²/s²]

# Reference masses and radii
SOLAR_MASS = 1.989e30  # [kg]
EARTH_MASS = 5.972e24  # [kg]
R_EARTH = 6371000.0  # Mean Earth radius [m]
AU = 1.495978707e11  # Astronomical unit [m]

# Earth rotation and revolution
AXIAL_TILT = math.radians(23.436)  # Obliquity [rad]
SIDEREAL_DAY = 86400.0  # Rotation period used by the viewer [s]
EARTH_ROTATION_SPEED = TWO_PI / SIDEREAL_DAY  # [rad/s]
CLOUD_ROTATION_RATIO = 1.05  # Cloud layer spins slightly faster than the surface
SIDEREAL_YEAR = 31558149.8  # [s]

# Moon
MOON_DISTANCE = 384400000.0  # Mean Earth-Moon center distance [m]
MOON_ORBIT_PERIOD = 2360591.0  # Sidereal period, ~27.32 days [s]
MOON_INCLINATION = math.radians(5.14)  # To the ecliptic [rad]

# GPS constellation
GPS_ALTITUDE = 20200000.0  # [m]
GPS_RADIUS = R_EARTH + GPS_ALTITUDE  # [m]
GPS_PERIOD = 43080.0  # Half a sidereal day [s]
GPS_SATELLITE_COUNT = 5
GPS_BASE_INCLINATION = math.pi / 4  # [rad]
GPS_INCLINATION_STEP = 0.15  # Extra tilt per satellite [rad]

# Earth scene display scale: 100 units per Earth radius
EARTH_DISPLAY_SCALE = 100.0 / R_EARTH  # [units/m]
MOON_DISTANCE_UNITS = 6034.37
EARTH_ORBIT_UNITS = 15000.0  # Heliocentric orbit, not to scale

# Black hole scene display scale
BH_METERS_PER_UNIT = 1000.0  # [m/unit]
BH_MAX_DISPLAY_RADIUS = 50.0  # [units]
BH_BASE_SPHERE_RADIUS = 50.0  # Radius of the unscaled horizon mesh [units]
BH_HALO_FACTOR = 1.5
BH_ORBIT_SPREAD = 3.0  # Orbit radius per display radius per distance step
BH_ANGULAR_DIVISOR = 1000.0  # Orbital speed [m/s] to radians per frame
REFERENCE_FRAME_RATE = 60.0  # [frames/s]

# Viewer time-scale slider
TIME_SCALE_MIN = 1.0
TIME_SCALE_MAX = 100000.0
TIME_SCALE_DEFAULT = 1000.0
