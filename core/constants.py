"""
Shared constants for daylight factor calculations.
"""

import math

# Default surface reflectances
DEFAULT_REFLECTANCES = {
    'ceiling': 0.8,  # White ceiling
    'walls': 0.5,  # Light-coloured walls
    'floor': 0.2,  # Carpet/wood floor
}

MAINTENANCE_FACTOR = 0.9  # Dirt/degradation allowance

# Grid settings (meters)
DEFAULT_GRID_SPACING = 0.5
DEFAULT_WORK_PLANE_HEIGHT = 0.85  # Desk height
DEFAULT_WALL_OFFSET = 0.5

# Geometry tolerances (meters)
MIN_WINDOW_DISTANCE = 0.01  # Points closer than this to a window centre are skipped
MIN_APPROX_DISTANCE = 0.1  # Area/distance fallback is unreliable closer than this
WINDOW_EDGE_TOLERANCE = 0.01  # Slack on window bounds for Monte Carlo hits
MIN_RAY_DISTANCE = 0.01  # Window hits closer than this along a ray are ignored
OBSTRUCTION_TOLERANCE = 0.05  # Self-intersection offset for obstruction rays
SKY_RAY_DISTANCE = 100.0  # How far past the glass obstructions are searched

# Exterior-side rejection: dot(view direction, outward normal) below this
EXTERIOR_SIDE_THRESHOLD = -0.1

HEMISPHERE_SOLID_ANGLE = 2 * math.pi

# Monte Carlo sky sampling
DEFAULT_SAMPLE_COUNT = 144  # 12 altitude x 12 azimuth bands

# BRE split-flux
BRE_IRC_COEFFICIENT = 0.85
POSITIONAL_IRC_BOOST = 0.5  # Up to 1.5x next to windows
DEFAULT_ROOM_DIAGONAL = 10.0  # Used when the room has no horizontal extent

# Revealed windows lose up to 30% of sky light
REVEAL_LOSS_PER_METER = 0.1
MAX_REVEAL_LOSS = 0.3

# Progress cadence (points between yield points)
STANDARD_YIELD_INTERVAL = 10
ENHANCED_YIELD_INTERVAL = 5

# Daylight factor thresholds for compliance (%)
DF_THRESHOLDS = {
    'poor': 1.0,  # < 1% is very poor
    'minimum': 2.0,  # < 2% inadequate
    'good': 5.0,  # > 5% well lit
}

# BREEAM/LEED/BS 8206 compliance thresholds
COMPLIANCE_STANDARDS = {
    'BREEAM': {
        'name': 'BREEAM',
        'avg_df': 2.0,  # Average DF for habitable rooms
        'min_df': 0.6,  # Minimum point DF
        'area_above_2': 80.0,  # % of points achieving 2% DF
    },
    'LEED': {
        'name': 'LEED v4',
        'avg_df': 2.0,
        'min_df': 0.5,
        'area_above_2': 75.0,
    },
    'BS8206': {
        'name': 'BS 8206-2',
        'avg_df': 2.0,  # Kitchens
        'avg_df_living': 1.5,
        'avg_df_bedroom': 1.0,
        'min_df': 0.5,
        'area_above_2': 80.0,
    },
}
