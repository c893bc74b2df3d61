"""
Crop profiles: load and validate per-page crop settings.

Each page of the console that uploads a cropped image (news cards,
notifications) has its own profile: target aspect ratio, minimum size,
initial margin, handle tolerance, zoom step and output encoding.  Runtime
profiles are stored in a JSON file in the user's config directory
(provided by ``config.config_dir()``).  On first launch (or if the file is
missing/corrupt), the file is created from DEFAULT_PROFILES.

The on-disk format uses a versioned envelope::

    {"version": 1, "profiles": [ ... ]}
"""

import json
import logging
from copy import deepcopy
from dataclasses import asdict, dataclass
from pathlib import Path

from card_crop_tool.config import (
    DEFAULT_MARGIN, DEFAULT_PROFILES, HANDLE_TOLERANCE, JPEG_QUALITY_DEFAULT,
    JPEG_QUALITY_MAX, JPEG_QUALITY_MIN, MIN_CROP_SIZE, OUTPUT_FORMAT_DEFAULT,
    OUTPUT_FORMATS, ZOOM_STEP, config_dir,
)

logger = logging.getLogger(__name__)

_PROFILES_FILENAME = "profiles.json"
_FORMAT_VERSION = 1

_REQUIRED_KEYS = {"name", "ratio_w", "ratio_h"}
_POSITIVE_INT_KEYS = ("ratio_w", "ratio_h", "min_size")


@dataclass(frozen=True)
class CropProfile:
    """Editor and export settings for one page."""
    name: str = "news"
    ratio_w: int = 900
    ratio_h: int = 520
    min_size: int = MIN_CROP_SIZE
    margin: float = DEFAULT_MARGIN
    handle_tolerance: float = HANDLE_TOLERANCE
    zoom_step: float = ZOOM_STEP
    output_format: str = OUTPUT_FORMAT_DEFAULT
    jpeg_quality: int = JPEG_QUALITY_DEFAULT

    @property
    def aspect(self) -> float:
        return self.ratio_w / self.ratio_h

    @classmethod
    def from_dict(cls, data: dict) -> "CropProfile":
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)


# =============================================================================
# Config directory helpers
# =============================================================================
def _profiles_path() -> Path:
    """Return the full path to profiles.json."""
    return config_dir() / _PROFILES_FILENAME


# =============================================================================
# Validation
# =============================================================================
def _is_number(val: object) -> bool:
    return isinstance(val, (int, float)) and not isinstance(val, bool)


def validate_profiles(data: object) -> list[str]:
    """
    Validate a profiles data structure.

    Returns a list of error strings (empty means valid).
    """
    errors: list[str] = []

    if not isinstance(data, list) or not data:
        errors.append("Profiles data must be a non-empty list")
        return errors

    names_seen: set[str] = set()

    for i, profile in enumerate(data):
        prefix = f"Profile #{i + 1}"

        if not isinstance(profile, dict):
            errors.append(f"{prefix}: must be a dict")
            continue

        missing = _REQUIRED_KEYS - profile.keys()
        if missing:
            errors.append(f"{prefix}: missing keys: {', '.join(sorted(missing))}")
            continue

        name = profile.get("name", "")
        if not isinstance(name, str) or not name.strip():
            errors.append(f"{prefix}: name must be a non-empty string")
        elif name in names_seen:
            errors.append(f"{prefix}: duplicate name '{name}'")
        else:
            names_seen.add(name)

        for key in _POSITIVE_INT_KEYS:
            val = profile.get(key, MIN_CROP_SIZE)
            if not isinstance(val, int) or isinstance(val, bool) or val <= 0:
                errors.append(f"{prefix}: {key} must be a positive integer, got {val!r}")

        margin = profile.get("margin", DEFAULT_MARGIN)
        if not _is_number(margin) or not 0 <= margin < 0.5:
            errors.append(f"{prefix}: margin must be a number in [0, 0.5), got {margin!r}")

        tolerance = profile.get("handle_tolerance", HANDLE_TOLERANCE)
        if not _is_number(tolerance) or tolerance <= 0:
            errors.append(f"{prefix}: handle_tolerance must be positive, got {tolerance!r}")

        zoom = profile.get("zoom_step", ZOOM_STEP)
        if not _is_number(zoom) or not 1 < zoom < 2:
            errors.append(f"{prefix}: zoom_step must be a number in (1, 2), got {zoom!r}")

        fmt = profile.get("output_format", OUTPUT_FORMAT_DEFAULT)
        if fmt not in OUTPUT_FORMATS:
            errors.append(f"{prefix}: output_format must be one of {', '.join(OUTPUT_FORMATS)}, got {fmt!r}")

        quality = profile.get("jpeg_quality", JPEG_QUALITY_DEFAULT)
        if not isinstance(quality, int) or not JPEG_QUALITY_MIN <= quality <= JPEG_QUALITY_MAX:
            errors.append(
                f"{prefix}: jpeg_quality must be an integer in "
                f"{JPEG_QUALITY_MIN}-{JPEG_QUALITY_MAX}, got {quality!r}"
            )

    return errors


# =============================================================================
# Load
# =============================================================================
def default_profiles() -> list[CropProfile]:
    return [CropProfile.from_dict(p) for p in deepcopy(DEFAULT_PROFILES)]


def load_profiles() -> list[CropProfile]:
    """
    Load profiles from profiles.json.

    If the file is missing, corrupt, or fails validation, writes the
    defaults and returns them.
    """
    path = _profiles_path()

    if not path.exists():
        logger.info("profiles.json not found, creating with defaults at %s", path)
        _write_defaults(path)
        return default_profiles()

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read profiles.json (%s), restoring defaults", exc)
        _write_defaults(path)
        return default_profiles()

    if not isinstance(raw, dict) or "version" not in raw or "profiles" not in raw:
        logger.warning("profiles.json missing version envelope, restoring defaults")
        _write_defaults(path)
        return default_profiles()

    data = raw["profiles"]
    errors = validate_profiles(data)
    if errors:
        logger.warning(
            "profiles.json validation failed:\n  %s\nRestoring defaults.",
            "\n  ".join(errors),
        )
        _write_defaults(path)
        return default_profiles()

    return [CropProfile.from_dict(p) for p in data]


def find_profile(profiles: list[CropProfile], name: str) -> CropProfile:
    """Return the profile called *name*, falling back to the first one."""
    for profile in profiles:
        if profile.name == name:
            return profile
    return profiles[0]


def _write_defaults(path: Path) -> None:
    """Write DEFAULT_PROFILES to the given path in versioned envelope."""
    try:
        envelope = {"version": _FORMAT_VERSION, "profiles": [p.to_dict() for p in default_profiles()]}
        path.write_text(
            json.dumps(envelope, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as exc:
        logger.error("Could not write default profiles to %s: %s", path, exc)
