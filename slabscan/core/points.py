"""
SlabScan Core Points Module

Defines the point value types for each coordinate space, plus Size and
BoundingBox.

Coordinate spaces:
- Pixel space: source image, origin top-left, Y increasing downward
- Machine space: millimeters relative to the calibrated origin marker, Y up
- Display space: on-screen viewport after aspect-ratio fit of the image
"""

from dataclasses import dataclass
from typing import Tuple
import math


@dataclass(frozen=True)
class Point:
    """An immutable 2D point with no coordinate space attached."""
    x: float
    y: float

    def __add__(self, other: 'Point') -> 'Point':
        return type(self)(self.x + other.x, self.y + other.y)

    def __sub__(self, other: 'Point') -> 'Point':
        return type(self)(self.x - other.x, self.y - other.y)

    def distance_to(self, other: 'Point') -> float:
        """Calculate Euclidean distance to another point."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def to_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class PixelPoint(Point):
    """A point in source image pixels (Y down)."""


@dataclass(frozen=True)
class MachinePoint(Point):
    """A point in machine millimeters (Y up)."""


@dataclass(frozen=True)
class DisplayPoint(Point):
    """A point in display viewport coordinates."""


@dataclass(frozen=True)
class Size:
    """Width and height of an image or viewport."""
    width: float
    height: float

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def validate(self) -> Tuple[bool, str]:
        """
        Validate that the size can be used for coordinate mapping.

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not (math.isfinite(self.width) and math.isfinite(self.height)):
            return False, f"Size {self.width}x{self.height} is not finite"
        if self.width <= 0 or self.height <= 0:
            return False, f"Size {self.width}x{self.height} must be positive"
        return True, ""


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    def contains(self, point: Point) -> bool:
        """Check if point is inside bounding box (edges included)."""
        return (self.min_x <= point.x <= self.max_x and
                self.min_y <= point.y <= self.max_y)
