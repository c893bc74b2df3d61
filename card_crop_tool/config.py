"""
Application constants and configuration.

DEFAULT_PROFILES provides the built-in crop profiles, one per page of the
admin console that uploads cropped images.  Runtime profiles are loaded
from profiles.json via the profiles module.  All other constants control
crop-editor behaviour and export encoding.

The ``config_dir()`` helper returns the platform-appropriate config
directory and is shared by the persistence modules.
"""

import os
import sys
from pathlib import Path

# =============================================================================
# APP IDENTITY & CONFIG DIRECTORY
# =============================================================================
APP_NAME = "card-crop-tool"


def config_dir() -> Path:
    """Return the platform-appropriate config directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    directory = base / APP_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory


# =============================================================================
# CROP EDITOR
# =============================================================================
# Minimum crop size (pixels in image coordinates)
MIN_CROP_SIZE = 80

# Tolerance band around edges and corners (pixels in screen coordinates)
HANDLE_TOLERANCE = 10

# Multiplicative zoom per wheel tick; zooming in uses 2 - ZOOM_STEP
ZOOM_STEP = 1.06

# Fractional inset of the initial crop on each side
DEFAULT_MARGIN = 0.08

# News and notification cards are both rendered at 900x520
CARD_RATIO_W = 900
CARD_RATIO_H = 520

# =============================================================================
# EXPORT
# =============================================================================
OUTPUT_FORMATS = ["JPEG", "PNG"]
OUTPUT_FORMAT_DEFAULT = "JPEG"

JPEG_QUALITY_DEFAULT = 90
JPEG_QUALITY_MIN = 1
JPEG_QUALITY_MAX = 100

# PNG compression level (0-9, 9 = maximum compression)
PNG_COMPRESS_LEVEL = 6

MIME_TYPES = {"JPEG": "image/jpeg", "PNG": "image/png"}
OUTPUT_EXTENSIONS = {"JPEG": ".jpg", "PNG": ".png"}

# Seconds before a remote image download is abandoned
FETCH_TIMEOUT = 30

# Source images the file picker offers
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

# =============================================================================
# DEFAULT PROFILES: built-in fallback when profiles.json is missing or corrupt
# =============================================================================
DEFAULT_PROFILES = [
    {
        "name": "news",
        "ratio_w": CARD_RATIO_W,
        "ratio_h": CARD_RATIO_H,
        "min_size": MIN_CROP_SIZE,
        "margin": 0.08,
        "handle_tolerance": HANDLE_TOLERANCE,
        "zoom_step": ZOOM_STEP,
        "output_format": OUTPUT_FORMAT_DEFAULT,
        "jpeg_quality": JPEG_QUALITY_DEFAULT,
    },
    {
        "name": "notification",
        "ratio_w": CARD_RATIO_W,
        "ratio_h": CARD_RATIO_H,
        "min_size": MIN_CROP_SIZE,
        "margin": 0.10,
        "handle_tolerance": HANDLE_TOLERANCE,
        "zoom_step": ZOOM_STEP,
        "output_format": OUTPUT_FORMAT_DEFAULT,
        "jpeg_quality": JPEG_QUALITY_DEFAULT,
    },
]
