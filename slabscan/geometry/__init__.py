"""
SlabScan Geometry Module

Polygon operations used to turn detected contours into cutting paths:
- Measurement: area, perimeter, centroid, bounds, convex hull
- Containment: point-in-polygon, point-on-segment
- Simplification: Douglas-Peucker
- Offsetting: per-edge offset and mitered offset
"""

from .polygon import (
    signed_polygon_area, polygon_area, polygon_perimeter, polygon_centroid,
    point_in_polygon, polygon_bounding_box, point_on_segment, convex_hull
)
from .simplify import simplify_polygon, perpendicular_distance, DEFAULT_MAX_DEPTH
from .offset import offset_polygon, offset_polygon_miter, MIN_SEGMENT_LENGTH

__all__ = [
    # Measurement
    'signed_polygon_area', 'polygon_area', 'polygon_perimeter', 'polygon_centroid',
    'polygon_bounding_box', 'convex_hull',
    # Containment
    'point_in_polygon', 'point_on_segment',
    # Simplification
    'simplify_polygon', 'perpendicular_distance', 'DEFAULT_MAX_DEPTH',
    # Offsetting
    'offset_polygon', 'offset_polygon_miter', 'MIN_SEGMENT_LENGTH',
]
