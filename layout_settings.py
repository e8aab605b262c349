# Friendly labels and defaults for the attractiveness dashboard.
# Edit the right hand side as you like, then press "Reload settings" in the app.
# To keep a personal copy, point BUBBLE_SETTINGS_FILE at an edited copy of this file.

APP_TITLE = "Market Attractiveness"

X_AXIS_LABEL = "CAGR Index"
Y_AXIS_LABEL = "Market Share Index"
SIZE_FOOTNOTE = "*Size of bubble indicates incremental opportunity (2025-2032)"

# Segment shown on first load; None shows the "select a segment" placeholder
DEFAULT_SEGMENT = None

# CAGR window (inclusive years)
START_YEAR = 2025
END_YEAR = 2032

# Plotly qualitative palette name (see plotly.express.colors.qualitative)
PALETTE = "Plotly"

# ----- Bubble layout tunables -----
# Sizes are marker diameters in chart pixels.
MIN_SIZE = 11
MAX_SIZE = 35
NEUTRAL_SIZE = 20              # every bubble when all weights are equal

# The heaviest bubble is pulled ~100px right of the data and near the top
HIGHLIGHT_MIN_SIZE = 110
HIGHLIGHT_SCALE = 3.15
HIGHLIGHT_OFFSET_PX = 100
ASSUMED_PLOT_WIDTH_PX = 600    # typical plot width used to turn pixels into x units
DEFAULT_OFFSET = 2.0           # x offset when every x value is the same
HIGHLIGHT_Y_FRACTION = 0.85

# Overlap relaxation
SEPARATION_BUFFER = 1.30       # must stay > 1
DAMPING = 0.6                  # share of the missing gap closed per pass, in (0, 1)
MAX_ITERATIONS = 15
EPSILON = 0.001
CLAMP_EXTENSION = 0.5          # how far past the data range bubbles may drift

# Axis padding
PADDING_FRACTION = 0.65
RADIUS_TO_UNIT_FACTOR = 40
FLOOR_PADDING_X = 4.0
FLOOR_PADDING_Y = 2.0

# ================== END SETTINGS =====================
