"""
Contour Path Preparation

Turns a contour detected in the image into a machine-space cutting path:

1. Convert pixel points to machine millimeters
2. Simplify (Douglas-Peucker)
3. Offset by the tool radius on the requested side
4. Measure area, perimeter and centroid of the part outline
5. Plan zigzag surfacing passes over the outline
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence

from ..calibration.machine_coordinates import MachineCoordinateSystem, pixel_list_to_machine
from ..core.points import MachinePoint, PixelPoint
from ..core.settings import OffsetSide, ToolpathSettings
from ..geometry.offset import offset_polygon, offset_polygon_miter
from ..geometry.polygon import (
    point_in_polygon, polygon_area, polygon_centroid, polygon_perimeter,
    signed_polygon_area
)
from ..geometry.simplify import simplify_polygon
from .surfacing import SurfacingPath, generate_surfacing_path

logger = logging.getLogger(__name__)


@dataclass
class ContourPath:
    """
    A detected contour ready for path generation.

    Attributes:
        source: Simplified part outline in machine coordinates
        path: Tool center path (source offset by the tool radius)
        area_mm2: Area of the outline before simplification
        perimeter_mm: Perimeter of the outline before simplification
        centroid: Centroid of the outline before simplification
        original_point_count: Number of points in the detected contour
        surfacing: Zigzag passes covering the simplified outline
    """
    source: List[MachinePoint]
    path: List[MachinePoint]
    area_mm2: float
    perimeter_mm: float
    centroid: MachinePoint
    original_point_count: int
    surfacing: SurfacingPath

    def contains(self, point: MachinePoint) -> bool:
        """Check if a machine point lies inside the part outline."""
        return point_in_polygon(point, self.source)

    def estimate_time(self, settings: ToolpathSettings) -> float:
        """Estimated surfacing time in seconds at the settings' feed and rapid rates."""
        return self.surfacing.estimate_time(settings.feed_rate, settings.rapid_rate)


def outward_offset_sign(points: Sequence[MachinePoint]) -> float:
    """
    Sign to apply to a distance so that offset_polygon moves edges outward.

    The offset normal points left of travel, which is inward for a
    counter-clockwise (positive area) polygon.
    """
    return -1.0 if signed_polygon_area(points) > 0 else 1.0


def _offset_distance(points: Sequence[MachinePoint], settings: ToolpathSettings) -> float:
    if settings.offset_side is OffsetSide.ON_LINE:
        return 0.0
    sign = outward_offset_sign(points)
    if settings.offset_side is OffsetSide.INSIDE:
        sign = -sign
    return sign * settings.tool_radius_mm


def prepare_contour(pixel_contour: Sequence[PixelPoint],
                    system: MachineCoordinateSystem,
                    settings: ToolpathSettings = None) -> ContourPath:
    """
    Convert, simplify, offset and measure one detected contour.

    Args:
        pixel_contour: Contour points in image pixels
        system: Calibrated coordinate system
        settings: Toolpath settings (defaults if None)

    Returns:
        ContourPath
    """
    settings = settings or ToolpathSettings()
    is_valid, error = settings.validate()
    if not is_valid:
        raise ValueError(error)

    machine = pixel_list_to_machine(pixel_contour, system)
    source = simplify_polygon(machine, settings.simplify_epsilon_mm)

    distance = _offset_distance(source, settings)
    if distance == 0.0:
        path = list(source)
        if len(path) >= 3 and path[0] != path[-1]:
            path.append(path[0])
    elif settings.use_miter_join:
        path = offset_polygon_miter(source, distance, miter_limit=settings.miter_limit)
    else:
        path = offset_polygon(source, distance)

    if settings.pass_spacing_mm > 0:
        surfacing = generate_surfacing_path(source, settings.pass_spacing_mm)
    else:
        logger.debug("Surfacing skipped: zero tool diameter")
        surfacing = SurfacingPath()

    logger.debug(
        f"Prepared contour: {len(machine)} -> {len(source)} points, "
        f"offset {distance:+.3f}mm, path {len(path)} points"
    )

    return ContourPath(
        source=source,
        path=path,
        area_mm2=polygon_area(machine),
        perimeter_mm=polygon_perimeter(machine),
        centroid=polygon_centroid(machine, cls=MachinePoint),
        original_point_count=len(pixel_contour),
        surfacing=surfacing,
    )


def prepare_contours(contours: Sequence[Sequence[PixelPoint]],
                     system: MachineCoordinateSystem,
                     settings: ToolpathSettings = None) -> List[ContourPath]:
    """
    Prepare several contours, dropping ones smaller than min_area_mm2.

    Returns:
        ContourPaths in input order
    """
    settings = settings or ToolpathSettings()
    prepared = []
    for index, contour in enumerate(contours):
        contour_path = prepare_contour(contour, system, settings)
        if contour_path.area_mm2 < settings.min_area_mm2:
            logger.debug(
                f"Dropping contour {index}: area {contour_path.area_mm2:.3f}mm² "
                f"below {settings.min_area_mm2}mm²"
            )
            continue
        prepared.append(contour_path)
    return prepared
