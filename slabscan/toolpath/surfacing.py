"""
Zigzag Surfacing Toolpath

Covers the inside of a machine-space contour with parallel passes. Passes
run along the longer side of the contour's bounding box and are spaced
stepover * tool diameter apart. Each pass intersects the contour and cuts
between pairs of crossings, so concave outlines get several segments on
one pass. Successive passes alternate direction.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from ..core.points import MachinePoint
from ..geometry.polygon import polygon_bounding_box

logger = logging.getLogger(__name__)

Segment = Tuple[MachinePoint, MachinePoint]

MIN_CUT_LENGTH = 1e-9


@dataclass
class SurfacingPath:
    """
    Surfacing passes in cutting order.

    Attributes:
        passes: One list of (start, end) cut segments per pass
        horizontal: True if passes run along machine X
        pass_spacing_mm: Distance between neighbouring passes
    """
    passes: List[List[Segment]] = field(default_factory=list)
    horizontal: bool = True
    pass_spacing_mm: float = 0.0

    @property
    def segments(self) -> List[Segment]:
        return [segment for segments in self.passes for segment in segments]

    def cut_length(self) -> float:
        """Total length of all cut segments (mm)."""
        return sum(start.distance_to(end) for start, end in self.segments)

    def travel_length(self) -> float:
        """Length of the moves between one segment's end and the next segment's start (mm)."""
        segments = self.segments
        return sum(segments[i][1].distance_to(segments[i + 1][0])
                   for i in range(len(segments) - 1))

    def estimate_time(self, feed_rate: float, rapid_rate: float) -> float:
        """
        Estimate machining time.

        Args:
            feed_rate: Cutting speed (mm/min)
            rapid_rate: Travel speed (mm/min)

        Returns:
            Estimated time in seconds
        """
        if feed_rate <= 0 or rapid_rate <= 0:
            raise ValueError("Feed and rapid rates must be positive")
        minutes = self.cut_length() / feed_rate + self.travel_length() / rapid_rate
        return minutes * 60


def scanline_crossings(polygon: Sequence[MachinePoint], value: float,
                       horizontal: bool) -> List[float]:
    """
    Find where a scanline crosses the edges of a polygon.

    The scanline is y = value when horizontal, else x = value. An edge
    counts when value lies in [low, high) of its extent across the
    scanline, so a vertex shared by two edges is counted once. Edges
    parallel to the scanline are skipped.

    Returns:
        Positions along the scanline (x for horizontal, y otherwise), unsorted
    """
    crossings = []
    n = len(polygon)
    for i in range(n):
        a = polygon[i]
        b = polygon[(i + 1) % n]
        if horizontal:
            a_across, a_along, b_across, b_along = a.y, a.x, b.y, b.x
        else:
            a_across, a_along, b_across, b_along = a.x, a.y, b.x, b.y

        if a_across == b_across:
            continue
        if min(a_across, b_across) <= value < max(a_across, b_across):
            t = (value - a_across) / (b_across - a_across)
            crossings.append(a_along + t * (b_along - a_along))
    return crossings


def generate_surfacing_path(contour: Sequence[MachinePoint],
                            pass_spacing_mm: float) -> SurfacingPath:
    """
    Generate a zigzag surfacing toolpath inside a contour.

    Args:
        contour: Part outline in machine coordinates (closed or not)
        pass_spacing_mm: Distance between passes, usually stepover * tool diameter

    Returns:
        SurfacingPath, with no passes for degenerate contours
    """
    if not math.isfinite(pass_spacing_mm) or pass_spacing_mm <= 0:
        raise ValueError(f"Pass spacing {pass_spacing_mm} must be positive")

    bbox = polygon_bounding_box(contour)
    horizontal = bbox.width >= bbox.height
    result = SurfacingPath(horizontal=horizontal, pass_spacing_mm=pass_spacing_mm)

    if len(contour) < 3:
        logger.debug(f"Surfacing skipped: contour has {len(contour)} point(s)")
        return result

    start, extent = (bbox.min_y, bbox.height) if horizontal else (bbox.min_x, bbox.width)
    num_passes = math.ceil(extent / pass_spacing_mm)

    for i in range(num_passes):
        value = start + i * pass_spacing_mm
        reverse = len(result.passes) % 2 == 1
        crossings = sorted(scanline_crossings(contour, value, horizontal), reverse=reverse)

        if len(crossings) % 2:
            logger.debug(f"Odd crossing count {len(crossings)} at {value:.3f}, last one ignored")

        segments = []
        for a, b in zip(crossings[0::2], crossings[1::2]):
            if abs(b - a) <= MIN_CUT_LENGTH:
                continue
            if horizontal:
                segments.append((MachinePoint(a, value), MachinePoint(b, value)))
            else:
                segments.append((MachinePoint(value, a), MachinePoint(value, b)))

        if segments:
            result.passes.append(segments)

    logger.debug(
        f"Surfacing: {len(result.passes)} of {num_passes} passes, "
        f"{'horizontal' if horizontal else 'vertical'}, spacing {pass_spacing_mm:.3f}mm"
    )
    return result
