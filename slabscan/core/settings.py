"""
Settings for calibration and toolpath preparation.

The core never reads or writes files. The dict helpers below let the
outer application persist these settings however it likes.
"""

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Tuple
import math


class OffsetSide(Enum):
    """Which side of the detected contour the tool center travels on."""
    OUTSIDE = "outside"   # Cut around the part
    INSIDE = "inside"     # Pocket / cut out a hole
    ON_LINE = "on-line"   # Tool center follows the contour


@dataclass
class CalibrationSettings:
    """Thresholds and fallback values for marker calibration."""

    # Marker validation
    min_marker_distance_px: float = 10.0   # Min distance between any two markers
    collinearity_factor: float = 0.01      # Area threshold = longest side * factor

    # Accepted pixel-to-mm ratio range: (min_ratio, max_ratio]
    min_ratio: float = 0.01
    max_ratio: float = 100.0

    # Used when calibration is rejected (1 mm per 10 pixels)
    fallback_ratio: float = 0.1
    fallback_orientation_rad: float = 0.0

    # Real-world marker spacing (mm) offered to the UI as defaults
    default_marker_x_distance_mm: float = 762.0
    default_marker_y_distance_mm: float = 762.0

    def validate(self) -> Tuple[bool, str]:
        """
        Validate settings.

        Returns:
            Tuple of (is_valid, error_message)
        """
        for f in fields(self):
            value = getattr(self, f.name)
            if not math.isfinite(value):
                return False, f"{f.name} must be finite, got {value}"

        if self.min_marker_distance_px <= 0:
            return False, "Minimum marker distance must be positive"
        if self.collinearity_factor < 0:
            return False, "Collinearity factor must not be negative"
        if self.min_ratio < 0 or self.max_ratio <= self.min_ratio:
            return False, (
                f"Ratio range ({self.min_ratio}, {self.max_ratio}] is empty"
            )
        if self.fallback_ratio <= 0:
            return False, "Fallback ratio must be positive"
        if self.default_marker_x_distance_mm <= 0 or self.default_marker_y_distance_mm <= 0:
            return False, "Default marker distances must be positive"

        return True, ""


@dataclass
class ToolpathSettings:
    """Settings for turning detected contours into machine paths."""

    tool_diameter_mm: float = 25.4
    simplify_epsilon_mm: float = 0.5
    offset_side: OffsetSide = OffsetSide.OUTSIDE

    # Corner handling for the offset. The per-edge offset leaves gaps and
    # overlaps at corners; the miter join resolves them.
    use_miter_join: bool = False
    miter_limit: float = 4.0

    # Surfacing pass spacing as a fraction of the tool diameter
    stepover: float = 0.2

    # Contours smaller than this are treated as noise
    min_area_mm2: float = 1.0

    # Speeds (mm/min), used for job time estimates
    feed_rate: float = 1000.0
    rapid_rate: float = 6000.0

    @property
    def tool_radius_mm(self) -> float:
        return self.tool_diameter_mm / 2

    @property
    def pass_spacing_mm(self) -> float:
        return self.stepover * self.tool_diameter_mm

    def validate(self) -> Tuple[bool, str]:
        """
        Validate settings.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not math.isfinite(self.tool_diameter_mm) or self.tool_diameter_mm < 0:
            return False, f"Tool diameter {self.tool_diameter_mm} must be >= 0"
        if not math.isfinite(self.simplify_epsilon_mm) or self.simplify_epsilon_mm < 0:
            return False, f"Simplify tolerance {self.simplify_epsilon_mm} must be >= 0"
        if self.miter_limit < 1.0:
            return False, "Miter limit must be at least 1.0"
        if not (0 < self.stepover <= 1.0):
            return False, f"Stepover {self.stepover} must be in (0, 1]"
        if self.min_area_mm2 < 0:
            return False, "Minimum area must not be negative"
        if self.feed_rate <= 0 or self.rapid_rate <= 0:
            return False, "Feed and rapid rates must be positive"
        return True, ""


def settings_to_dict(settings) -> Dict[str, Any]:
    """Convert a settings dataclass to a JSON-friendly dictionary."""
    result = {}
    for f in fields(settings):
        value = getattr(settings, f.name)
        if isinstance(value, Enum):
            value = value.value
        result[f.name] = value
    return result


def dict_to_calibration_settings(settings_dict: Dict[str, Any]) -> CalibrationSettings:
    """Create CalibrationSettings from a dictionary. Unknown keys are ignored."""
    defaults = CalibrationSettings()
    kwargs = {}
    for f in fields(CalibrationSettings):
        kwargs[f.name] = float(settings_dict.get(f.name, getattr(defaults, f.name)))
    return CalibrationSettings(**kwargs)


def dict_to_toolpath_settings(settings_dict: Dict[str, Any]) -> ToolpathSettings:
    """Create ToolpathSettings from a dictionary. Unknown keys are ignored."""
    defaults = ToolpathSettings()
    return ToolpathSettings(
        tool_diameter_mm=float(settings_dict.get('tool_diameter_mm', defaults.tool_diameter_mm)),
        simplify_epsilon_mm=float(settings_dict.get('simplify_epsilon_mm', defaults.simplify_epsilon_mm)),
        offset_side=OffsetSide(settings_dict.get('offset_side', defaults.offset_side.value)),
        use_miter_join=bool(settings_dict.get('use_miter_join', defaults.use_miter_join)),
        miter_limit=float(settings_dict.get('miter_limit', defaults.miter_limit)),
        stepover=float(settings_dict.get('stepover', defaults.stepover)),
        min_area_mm2=float(settings_dict.get('min_area_mm2', defaults.min_area_mm2)),
        feed_rate=float(settings_dict.get('feed_rate', defaults.feed_rate)),
        rapid_rate=float(settings_dict.get('rapid_rate', defaults.rapid_rate)),
    )
