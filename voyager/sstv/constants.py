"""Golden Record decoding constants.

Sync tone, FFT analysis window, line geometry and parameter ranges for the
fixed line-duration / threshold / pseudocolor model used by the Voyager
Golden Record image track.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Audio / DSP
# ---------------------------------------------------------------------------
DEFAULT_SAMPLE_RATE = 44100  # Hz - the Golden Record transfers are CD-rate

MIN_SAMPLE_RATE = 8000
MAX_SAMPLE_RATE = 192000

# One FFT analysis window for sync detection (46 ms at 44.1 kHz)
FFT_WINDOW = 2048

# ---------------------------------------------------------------------------
# Sync tone
# ---------------------------------------------------------------------------
FREQ_SYNC = 1200.0          # Calibration / sync tone (Hz)

# Peak bin must exceed the mean spectral magnitude by this factor
SYNC_THRESHOLD_MULTIPLIER = 10.0

# After a hit skip this many windows, after a miss advance 1/MISS_DIVISOR
SYNC_HIT_SKIP_WINDOWS = 2
SYNC_MISS_DIVISOR = 4

# ---------------------------------------------------------------------------
# Raster geometry
# ---------------------------------------------------------------------------
IMAGE_WIDTH = 512           # Output columns per line (fixed)
MAX_LINES = 16384           # Upper bound on decoded lines per request

PIXEL_ON = 255
PIXEL_OFF = 0

# Bytes per pixel for each decoder mode
BYTES_PER_PIXEL_GRAY = 1
BYTES_PER_PIXEL_RGB = 3

# Grayscale lines folded into one pseudocolor line (R, G, B)
PSEUDOCOLOR_GROUP = 3

# ---------------------------------------------------------------------------
# Parameter ranges
# ---------------------------------------------------------------------------
LINE_DURATION_MIN_MS = 1.0
LINE_DURATION_MAX_MS = 100.0
THRESHOLD_MIN = 0.0
THRESHOLD_MAX = 1.0
DECODE_WINDOW_MAX_SECS = 3600.0  # Longer than any side of the record

DEFAULT_LINE_DURATION_MS = 8.3
DEFAULT_THRESHOLD = 0.2
DEFAULT_DECODE_WINDOW_SECS = 2.0
