# constants.py
"""
Application-level constants.

These values are static and do not change between simulation runs.
They cover rendering properties of the draw commands and the host window,
not the physics tuning, which lives in the experimental configuration.
"""

# Window settings
# Set to True to run in borderless fullscreen mode.
# Set to False to run in a resizable window of DEFAULT_WINDOW_SIZE.
FULLSCREEN = False
DEFAULT_WINDOW_SIZE = (1280, 720)
FPS = 60
BACKGROUND_COLOR = (18, 18, 20)
WINDOW_TITLE = "Portfolio Background"

# --- Draw command appearance ---
POINT_RADIUS = 3.0
# Neutral gray, fully opaque (RGBA).
POINT_COLOR = (200, 200, 200, 255)

LINE_WIDTH = 0.5
LINE_RGB = (164, 171, 176)
# Alpha of a connection at full opacity. Half of 255 keeps lines subtle.
LINE_MAX_ALPHA = 127.5
