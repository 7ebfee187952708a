"""
Brand Kit Editor - Constants and Configuration

This module contains all constant values used throughout the overlay engine:
- Reference canvas geometry
- Default overlay element settings per element type
- Min/max values and constraints
- Interaction (hit-test) tolerances
- Batch compositing limits
- Persistence settings
"""

# ======================================================================
# REFERENCE CANVAS
# ======================================================================
# Overlay positions are authored on a fixed logical canvas, independent of
# the resolution of any target image.
# X-axis: 0 = left edge, REFERENCE_CANVAS_WIDTH = right edge
# Y-axis: 0 = TOP edge, REFERENCE_CANVAS_HEIGHT = bottom edge

REFERENCE_CANVAS_WIDTH = 800
REFERENCE_CANVAS_HEIGHT = 600
REFERENCE_CANVAS_SIZE = (REFERENCE_CANVAS_WIDTH, REFERENCE_CANVAS_HEIGHT)

# ======================================================================
# ELEMENT TYPES
# ======================================================================

ELEMENT_TYPE_LOGO = 'logo'
ELEMENT_TYPE_WATERMARK = 'watermark'
ELEMENT_TYPE_CONTACT_INFO = 'contactInfo'

# Per-type defaults for newly added elements
# position is expressed as a fraction of the reference canvas
ELEMENT_TYPE_DEFAULTS = {
    ELEMENT_TYPE_LOGO:         {'position': (0.5, 0.5), 'opacity': 1.0},
    ELEMENT_TYPE_WATERMARK:    {'position': (0.5, 0.5), 'opacity': 0.5},
    ELEMENT_TYPE_CONTACT_INFO: {'position': (0.5, 0.9), 'opacity': 1.0},
}

# ======================================================================
# SCALE CONSTRAINTS
# ======================================================================

# Scale is applied to the overlay's own native pixel size
DEFAULT_SCALE = 1.0

# Clamp used by shift+drag rotate-scaling
SCALE_MIN = 0.1
SCALE_MAX = 3.0

# ======================================================================
# ROTATION
# ======================================================================

# Rotation in degrees, always normalized into [0, 360)
DEFAULT_ROTATION = 0.0
ROTATION_FULL_TURN = 360.0

# ======================================================================
# OPACITY
# ======================================================================

OPACITY_MIN = 0.0
OPACITY_MAX = 1.0
DEFAULT_OPACITY = 1.0

# ======================================================================
# INTERACTION
# ======================================================================

# Distance from the element's radius (canvas px) that still grabs the
# rotation ring instead of the body
HANDLE_TOLERANCE = 15.0

# Keyboard nudge amounts (canvas px)
ARROW_KEY_MOVE_NORMAL = 1.0
ARROW_KEY_MOVE_FAST = 10.0

# ======================================================================
# HISTORY MANAGEMENT
# ======================================================================

MAX_HISTORY_ENTRIES = 50

# ======================================================================
# BATCH COMPOSITING
# ======================================================================

# Maximum number of target images accepted by one batch
BATCH_MAX_IMAGES = 10

# Number of images composited concurrently in one group
BATCH_CONCURRENCY = 6

# ======================================================================
# IMAGE SOURCES
# ======================================================================

# Timeout for fetching http(s) sources (seconds)
REMOTE_FETCH_TIMEOUT = 30

# ======================================================================
# PERSISTENCE
# ======================================================================

# Timeout applied to repository load/save calls (seconds)
REPOSITORY_TIMEOUT = 10.0

# Per-user brand kit files live here (relative to the user's home)
BRAND_KIT_DIR_NAME = '.brandkit_editor'
BRAND_KIT_SUBDIR = 'brand_kits'
BRAND_KIT_FILE_EXTENSION = '.json'

# ======================================================================
# WIDGET APPEARANCE
# ======================================================================

# Rotation ring / body outline colors (RGBA)
SELECTION_RING_COLOR = (255, 200, 100, 220)
SELECTION_BODY_COLOR = (90, 141, 191, 200)
CANVAS_BACKGROUND_COLOR = (30, 30, 45, 255)
