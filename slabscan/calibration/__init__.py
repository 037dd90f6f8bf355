"""
SlabScan Calibration Module

Marker-based machine coordinate calibration and coordinate conversions
between pixel, machine and display space.
"""

from .machine_coordinates import (
    MachineCoordinateSystem, CalibrationStatus, CalibrationResult, MarkerTriple,
    create_coordinate_system, create_coordinate_system_from_markers,
    pixel_to_machine, machine_to_pixel,
    pixel_list_to_machine, machine_list_to_pixel,
    pixel_array_to_machine, machine_array_to_pixel,
    verify_round_trip
)
from .display import (
    get_image_display_rect, image_to_display,
    display_to_image, display_to_image_checked
)

__all__ = [
    # Calibration
    'MachineCoordinateSystem', 'CalibrationStatus', 'CalibrationResult', 'MarkerTriple',
    'create_coordinate_system', 'create_coordinate_system_from_markers',
    # Pixel <-> machine
    'pixel_to_machine', 'machine_to_pixel',
    'pixel_list_to_machine', 'machine_list_to_pixel',
    'pixel_array_to_machine', 'machine_array_to_pixel',
    'verify_round_trip',
    # Image <-> display
    'get_image_display_rect', 'image_to_display',
    'display_to_image', 'display_to_image_checked',
]
