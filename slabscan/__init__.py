"""
SlabScan

Computational core of a vision-guided CNC slab scanner: calibrates a machine
coordinate frame from three image markers and prepares detected contours
as cutting paths and surfacing passes.
"""

__version__ = "0.1.0"

from .core import (
    Point, PixelPoint, MachinePoint, DisplayPoint, Size, BoundingBox,
    CalibrationSettings, ToolpathSettings, OffsetSide
)
from .calibration import (
    MachineCoordinateSystem, CalibrationStatus, CalibrationResult, MarkerTriple,
    create_coordinate_system, create_coordinate_system_from_markers,
    pixel_to_machine, machine_to_pixel,
    pixel_list_to_machine, machine_list_to_pixel,
    image_to_display, display_to_image, display_to_image_checked
)
from .geometry import (
    polygon_area, polygon_perimeter, polygon_centroid, point_in_polygon,
    simplify_polygon, offset_polygon, offset_polygon_miter
)
from .toolpath import ContourPath, prepare_contour, prepare_contours, SurfacingPath, generate_surfacing_path

__all__ = [
    # Types
    'Point', 'PixelPoint', 'MachinePoint', 'DisplayPoint', 'Size', 'BoundingBox',
    'CalibrationSettings', 'ToolpathSettings', 'OffsetSide',
    # Calibration
    'MachineCoordinateSystem', 'CalibrationStatus', 'CalibrationResult', 'MarkerTriple',
    'create_coordinate_system', 'create_coordinate_system_from_markers',
    'pixel_to_machine', 'machine_to_pixel',
    'pixel_list_to_machine', 'machine_list_to_pixel',
    'image_to_display', 'display_to_image', 'display_to_image_checked',
    # Geometry
    'polygon_area', 'polygon_perimeter', 'polygon_centroid', 'point_in_polygon',
    'simplify_polygon', 'offset_polygon', 'offset_polygon_miter',
    # Toolpath
    'ContourPath', 'prepare_contour', 'prepare_contours',
    'SurfacingPath', 'generate_surfacing_path',
]
