"""
Machine Coordinate Calibration

Derives a machine coordinate frame from three markers detected in an image
and converts points between pixel space and machine (mm) space.

The markers are:
- origin: machine (0, 0)
- x_axis: lies on the machine X axis, sets the orientation
- scale: a second marker at a known real-world distance from the origin

Transform (pixel -> machine):
1. Translate so the origin marker is at (0, 0)
2. Negate Y (image Y points down, machine Y points up)
3. Rotate by -orientation
4. Scale by the pixel-to-mm ratio

machine -> pixel applies the exact inverse.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..core.points import PixelPoint, MachinePoint
from ..core.settings import CalibrationSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MachineCoordinateSystem:
    """
    A machine coordinate system calibrated from image pixels.

    Attributes:
        origin_px: Origin marker position in the image
        orientation_rad: Rotation of the machine X axis relative to image X
        pixel_to_mm_ratio: Millimeters per pixel (isotropic)
    """
    origin_px: PixelPoint
    orientation_rad: float
    pixel_to_mm_ratio: float

    def __post_init__(self):
        if not math.isfinite(self.pixel_to_mm_ratio) or self.pixel_to_mm_ratio <= 0:
            raise ValueError(
                f"pixel_to_mm_ratio must be finite and positive, got {self.pixel_to_mm_ratio}"
            )
        if not math.isfinite(self.orientation_rad):
            raise ValueError(f"orientation_rad must be finite, got {self.orientation_rad}")

    def describe(self) -> str:
        """One-line human readable summary, used in log messages."""
        return (
            f"origin=({self.origin_px.x:.2f}, {self.origin_px.y:.2f})px, "
            f"orientation={math.degrees(self.orientation_rad):.2f}deg, "
            f"ratio={self.pixel_to_mm_ratio:.5f}mm/px"
        )


class CalibrationStatus(Enum):
    """Outcome of a calibration attempt."""
    CALIBRATED = "calibrated"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CalibrationResult:
    """
    A coordinate system plus how it was obtained.

    A FALLBACK result still carries a usable system so the UI can keep
    going, but callers should warn the user; ``reason`` says why the
    markers were rejected.
    """
    system: MachineCoordinateSystem
    status: CalibrationStatus
    reason: str = ""

    @property
    def is_fallback(self) -> bool:
        return self.status is CalibrationStatus.FALLBACK


@dataclass(frozen=True)
class MarkerTriple:
    """
    Three detected markers plus the real-world distances between them.

    If ``marker_y_distance_mm`` is None, ``marker_x_distance_mm`` is the
    origin->scale distance. Otherwise it is the origin->x_axis distance and
    ``marker_y_distance_mm`` is the origin->scale distance.
    """
    origin: PixelPoint
    x_axis: PixelPoint
    scale: PixelPoint
    marker_x_distance_mm: float
    marker_y_distance_mm: Optional[float] = None

    def validate(self, settings: CalibrationSettings = None) -> Tuple[bool, str]:
        """
        Check the marker placement before calibrating.

        Returns:
            Tuple of (is_valid, error_message)
        """
        settings = settings or CalibrationSettings()

        for name, p in (("origin", self.origin), ("x-axis", self.x_axis),
                        ("scale", self.scale)):
            if not p.is_finite():
                return False, f"The {name} marker position is not finite"

        distances = [self.marker_x_distance_mm]
        if self.marker_y_distance_mm is not None:
            distances.append(self.marker_y_distance_mm)
        if not all(math.isfinite(d) for d in distances):
            return False, "Marker distances must be finite"

        if _are_collinear(self.origin, self.x_axis, self.scale,
                          settings.collinearity_factor):
            return False, "Reference markers are collinear. Please reposition markers."

        # Also keeps origin->scale away from zero for the ratio division
        min_dist = settings.min_marker_distance_px
        if (self.origin.distance_to(self.x_axis) < min_dist or
                self.origin.distance_to(self.scale) < min_dist or
                self.x_axis.distance_to(self.scale) < min_dist):
            return False, "Reference markers are too close together."

        return True, ""

    def pixel_to_mm_ratio(self) -> float:
        """
        Compute the isotropic pixel-to-mm ratio.

        With two distances the X and Y ratios are averaged into one scale;
        independent X/Y scaling is not supported.
        """
        scale_px = self.origin.distance_to(self.scale)
        if self.marker_y_distance_mm is None:
            return self.marker_x_distance_mm / scale_px

        x_ratio = self.marker_x_distance_mm / self.origin.distance_to(self.x_axis)
        y_ratio = self.marker_y_distance_mm / scale_px
        return (x_ratio + y_ratio) / 2

    def orientation_rad(self) -> float:
        """Angle of the origin -> x_axis vector in image space."""
        return math.atan2(self.x_axis.y - self.origin.y,
                          self.x_axis.x - self.origin.x)


def _are_collinear(a: PixelPoint, b: PixelPoint, c: PixelPoint,
                   factor: float) -> bool:
    """
    Check if three points are approximately collinear.

    The triangle area is compared with a threshold proportional to the
    longest side, so the test does not depend on image resolution.
    """
    area = abs(a.x * (b.y - c.y) + b.x * (c.y - a.y) + c.x * (a.y - b.y)) / 2
    max_dist = max(a.distance_to(b), b.distance_to(c), a.distance_to(c))
    return area < max_dist * factor


def create_coordinate_system(origin: PixelPoint,
                             x_axis_marker: PixelPoint,
                             scale_marker: PixelPoint,
                             marker_distance_mm: float,
                             marker_y_distance_mm: Optional[float] = None,
                             settings: CalibrationSettings = None) -> CalibrationResult:
    """
    Create a coordinate system from three marker points.

    Never raises for bad marker placement. If the markers are rejected the
    result carries a default system (orientation 0, 0.1 mm/px, origin at the
    origin marker) and ``status`` is FALLBACK.

    Args:
        origin: Origin marker (pixels)
        x_axis_marker: Marker on the machine X axis (pixels)
        scale_marker: Scale marker (pixels)
        marker_distance_mm: Real distance origin->scale, or origin->x_axis
            when ``marker_y_distance_mm`` is given
        marker_y_distance_mm: Real distance origin->scale (optional)
        settings: Thresholds and fallback values

    Returns:
        CalibrationResult
    """
    markers = MarkerTriple(
        origin=origin,
        x_axis=x_axis_marker,
        scale=scale_marker,
        marker_x_distance_mm=marker_distance_mm,
        marker_y_distance_mm=marker_y_distance_mm,
    )
    return create_coordinate_system_from_markers(markers, settings)


def create_coordinate_system_from_markers(markers: MarkerTriple,
                                          settings: CalibrationSettings = None) -> CalibrationResult:
    """Same as create_coordinate_system, taking a MarkerTriple."""
    settings = settings or CalibrationSettings()

    is_valid, error = markers.validate(settings)
    if not is_valid:
        return _fallback(markers.origin, error, settings)

    ratio = markers.pixel_to_mm_ratio()
    if (not math.isfinite(ratio) or
            ratio <= settings.min_ratio or ratio > settings.max_ratio):
        return _fallback(markers.origin, f"Invalid pixel-to-mm ratio: {ratio}", settings)

    system = MachineCoordinateSystem(
        origin_px=markers.origin,
        orientation_rad=markers.orientation_rad(),
        pixel_to_mm_ratio=ratio,
    )
    logger.info(f"Calibrated coordinate system: {system.describe()}")
    return CalibrationResult(system=system, status=CalibrationStatus.CALIBRATED)


def _fallback(origin: PixelPoint, reason: str,
              settings: CalibrationSettings) -> CalibrationResult:
    if not origin.is_finite():
        origin = PixelPoint(0.0, 0.0)
    system = MachineCoordinateSystem(
        origin_px=origin,
        orientation_rad=settings.fallback_orientation_rad,
        pixel_to_mm_ratio=settings.fallback_ratio,
    )
    logger.warning(f"Calibration rejected ({reason}); using fallback {system.describe()}")
    return CalibrationResult(
        system=system,
        status=CalibrationStatus.FALLBACK,
        reason=reason,
    )


def pixel_to_machine(point: PixelPoint, system: MachineCoordinateSystem) -> MachinePoint:
    """Convert a point from pixel coordinates to machine (mm) coordinates."""
    px = point.x - system.origin_px.x
    py = point.y - system.origin_px.y

    # Image Y increases downward, so negate it before rotating. The angle was
    # measured before the flip, so a rotated X-axis marker lands at -2*theta
    # rather than on +X; machine_to_pixel inverts this exactly.
    theta = -system.orientation_rad
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    x_rot = px * cos_t - (-py) * sin_t
    y_rot = px * sin_t + (-py) * cos_t

    return MachinePoint(x_rot * system.pixel_to_mm_ratio,
                        y_rot * system.pixel_to_mm_ratio)


def machine_to_pixel(point: MachinePoint, system: MachineCoordinateSystem) -> PixelPoint:
    """Convert a point from machine (mm) coordinates to pixel coordinates."""
    x_rot = point.x / system.pixel_to_mm_ratio
    y_rot = point.y / system.pixel_to_mm_ratio

    cos_t = math.cos(system.orientation_rad)
    sin_t = math.sin(system.orientation_rad)
    px = x_rot * cos_t - y_rot * sin_t
    # Back to image Y-down
    py = -(x_rot * sin_t + y_rot * cos_t)

    return PixelPoint(px + system.origin_px.x, py + system.origin_px.y)


def pixel_list_to_machine(points: Sequence[PixelPoint],
                          system: MachineCoordinateSystem) -> List[MachinePoint]:
    """Convert a polygon from pixel to machine coordinates, keeping order."""
    return [pixel_to_machine(p, system) for p in points]


def machine_list_to_pixel(points: Sequence[MachinePoint],
                          system: MachineCoordinateSystem) -> List[PixelPoint]:
    """Convert a polygon from machine to pixel coordinates, keeping order."""
    return [machine_to_pixel(p, system) for p in points]


def pixel_array_to_machine(points: np.ndarray,
                           system: MachineCoordinateSystem) -> np.ndarray:
    """
    Vectorized pixel -> machine conversion.

    Args:
        points: Array of shape (N, 2) in pixels

    Returns:
        Array of shape (N, 2) in millimeters
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    px = pts[:, 0] - system.origin_px.x
    neg_py = -(pts[:, 1] - system.origin_px.y)

    theta = -system.orientation_rad
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    out = np.empty_like(pts)
    out[:, 0] = (px * cos_t - neg_py * sin_t) * system.pixel_to_mm_ratio
    out[:, 1] = (px * sin_t + neg_py * cos_t) * system.pixel_to_mm_ratio
    return out


def machine_array_to_pixel(points: np.ndarray,
                           system: MachineCoordinateSystem) -> np.ndarray:
    """
    Vectorized machine -> pixel conversion.

    Args:
        points: Array of shape (N, 2) in millimeters

    Returns:
        Array of shape (N, 2) in pixels
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    x_rot = pts[:, 0] / system.pixel_to_mm_ratio
    y_rot = pts[:, 1] / system.pixel_to_mm_ratio

    cos_t = math.cos(system.orientation_rad)
    sin_t = math.sin(system.orientation_rad)
    out = np.empty_like(pts)
    out[:, 0] = x_rot * cos_t - y_rot * sin_t + system.origin_px.x
    out[:, 1] = -(x_rot * sin_t + y_rot * cos_t) + system.origin_px.y
    return out


def verify_round_trip(point: PixelPoint, system: MachineCoordinateSystem,
                      tolerance: float = 1e-3) -> bool:
    """
    Check that a pixel point survives pixel -> machine -> pixel.

    Args:
        point: Pixel point to test
        system: Coordinate system
        tolerance: Maximum allowed error per axis (pixels)
    """
    machine = pixel_to_machine(point, system)
    back = machine_to_pixel(machine, system)
    error_x = abs(point.x - back.x)
    error_y = abs(point.y - back.y)
    logger.debug(
        f"Round trip {point} -> {machine} -> {back}: error=({error_x:.3g}, {error_y:.3g})"
    )
    return error_x < tolerance and error_y < tolerance
