"""
Image <-> display coordinate mapping.

The image is shown scaled to fit the display viewport with its aspect
ratio preserved and centered: letterboxed (bands above and below) when the
image is relatively wider than the viewport, pillarboxed (bands left and
right) otherwise.
"""

import logging
from typing import Tuple

from ..core.points import BoundingBox, DisplayPoint, PixelPoint, Size

logger = logging.getLogger(__name__)


def _check_sizes(image_size: Size, display_size: Size):
    for label, size in (("image", image_size), ("display", display_size)):
        is_valid, error = size.validate()
        if not is_valid:
            raise ValueError(f"Invalid {label} size: {error}")


def get_image_display_rect(image_size: Size, display_size: Size) -> BoundingBox:
    """
    Get the area of the display occupied by the fitted image.

    Args:
        image_size: Image size in pixels
        display_size: Viewport size

    Returns:
        BoundingBox of the image inside the viewport
    """
    _check_sizes(image_size, display_size)

    offset_x = 0.0
    offset_y = 0.0
    if image_size.aspect_ratio > display_size.aspect_ratio:
        # Wider than the viewport: fill width, center vertically
        width = display_size.width
        height = width / image_size.aspect_ratio
        offset_y = (display_size.height - height) / 2
    else:
        # Taller than the viewport: fill height, center horizontally
        height = display_size.height
        width = height * image_size.aspect_ratio
        offset_x = (display_size.width - width) / 2

    return BoundingBox(offset_x, offset_y, offset_x + width, offset_y + height)


def image_to_display(point: PixelPoint, image_size: Size,
                     display_size: Size) -> DisplayPoint:
    """Convert an image pixel position to a display position."""
    rect = get_image_display_rect(image_size, display_size)

    normalized_x = point.x / image_size.width
    normalized_y = point.y / image_size.height

    return DisplayPoint(
        normalized_x * rect.width + rect.min_x,
        normalized_y * rect.height + rect.min_y
    )


def display_to_image_checked(point: DisplayPoint, image_size: Size,
                             display_size: Size) -> Tuple[PixelPoint, bool]:
    """
    Convert a display position to image pixel coordinates.

    The result is clamped to the valid pixel range
    [0, width - 1] x [0, height - 1].

    Returns:
        Tuple of (image_point, inside) where ``inside`` is False when the
        display point lies outside the fitted image area
    """
    rect = get_image_display_rect(image_size, display_size)
    inside = rect.contains(point)

    normalized_x = (point.x - rect.min_x) / rect.width
    normalized_y = (point.y - rect.min_y) / rect.height

    raw_x = normalized_x * image_size.width
    raw_y = normalized_y * image_size.height

    image_x = min(max(raw_x, 0.0), max(image_size.width - 1, 0.0))
    image_y = min(max(raw_y, 0.0), max(image_size.height - 1, 0.0))

    if not inside:
        logger.debug(
            f"Display point ({point.x:.1f}, {point.y:.1f}) outside image area; "
            f"clamped ({raw_x:.1f}, {raw_y:.1f}) -> ({image_x:.1f}, {image_y:.1f})"
        )

    return PixelPoint(image_x, image_y), inside


def display_to_image(point: DisplayPoint, image_size: Size,
                     display_size: Size) -> PixelPoint:
    """Convert a display position to image pixels, clamped to the image."""
    image_point, _ = display_to_image_checked(point, image_size, display_size)
    return image_point
