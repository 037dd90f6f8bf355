"""
SlabScan Toolpath Module

Contour preparation and zigzag surfacing.
"""

from .contour_path import (
    ContourPath, prepare_contour, prepare_contours, outward_offset_sign
)
from .surfacing import (
    SurfacingPath, generate_surfacing_path, scanline_crossings
)

__all__ = [
    # Contour preparation
    'ContourPath', 'prepare_contour', 'prepare_contours', 'outward_offset_sign',
    # Surfacing
    'SurfacingPath', 'generate_surfacing_path', 'scanline_crossings',
]
