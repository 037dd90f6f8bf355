"""
SlabScan Core Module

Contains the shared value types and settings:
- Points: one point type per coordinate space (pixel, machine, display)
- Size / BoundingBox
- Settings: calibration and toolpath settings
- Units: metric / imperial helpers
"""

from .points import (
    Point, PixelPoint, MachinePoint, DisplayPoint,
    Size, BoundingBox
)
from .settings import (
    CalibrationSettings, ToolpathSettings, OffsetSide,
    settings_to_dict, dict_to_calibration_settings, dict_to_toolpath_settings
)
from . import units

__all__ = [
    'Point', 'PixelPoint', 'MachinePoint', 'DisplayPoint',
    'Size', 'BoundingBox',
    'CalibrationSettings', 'ToolpathSettings', 'OffsetSide',
    'settings_to_dict', 'dict_to_calibration_settings', 'dict_to_toolpath_settings',
    'units',
]
