"""
Tests for marker calibration and pixel <-> machine conversion.
"""

import unittest
import math

import numpy as np

from slabscan.calibration.machine_coordinates import (
    MachineCoordinateSystem, CalibrationStatus, MarkerTriple,
    create_coordinate_system, create_coordinate_system_from_markers,
    pixel_to_machine, machine_to_pixel,
    pixel_list_to_machine, machine_list_to_pixel,
    pixel_array_to_machine, machine_array_to_pixel,
    verify_round_trip
)
from slabscan.core.points import PixelPoint, MachinePoint
from slabscan.core.settings import CalibrationSettings


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=1e-9, abs_tol=1e-9)


class TestCreateCoordinateSystem(unittest.TestCase):
    """Test calibration from three markers."""

    def test_scale_example(self):
        """Markers 100px apart at 50mm give 0.5 mm/px and no rotation."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), 50.0
        )
        self.assertEqual(result.status, CalibrationStatus.CALIBRATED)
        self.assertFalse(result.is_fallback)
        self.assertAlmostEqual(result.system.pixel_to_mm_ratio, 0.5)
        self.assertAlmostEqual(result.system.orientation_rad, 0.0)
        self.assertEqual(result.system.origin_px, PixelPoint(0, 0))
        self.assertEqual(result.reason, "")

    def test_collinear_markers_fall_back(self):
        """Collinear markers give the default system, tagged as fallback."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(10, 0), PixelPoint(20, 0), 50.0
        )
        self.assertTrue(result.is_fallback)
        self.assertEqual(result.status, CalibrationStatus.FALLBACK)
        self.assertEqual(result.system.pixel_to_mm_ratio, 0.1)
        self.assertEqual(result.system.orientation_rad, 0.0)
        self.assertEqual(result.system.origin_px, PixelPoint(0, 0))
        self.assertIn("collinear", result.reason.lower())

    def test_nearly_collinear_markers_fall_back(self):
        """A tiny bump off the line is still treated as collinear."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(500, 0.01), PixelPoint(1000, 0), 50.0
        )
        self.assertTrue(result.is_fallback)

    def test_markers_too_close(self):
        """Markers closer than 10px to each other are rejected."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(5, 0), PixelPoint(0, 100), 50.0
        )
        self.assertTrue(result.is_fallback)
        self.assertIn("too close", result.reason.lower())

    def test_fallback_keeps_origin_marker(self):
        """The fallback system is anchored at the origin marker."""
        result = create_coordinate_system(
            PixelPoint(40, 60), PixelPoint(50, 60), PixelPoint(60, 60), 50.0
        )
        self.assertTrue(result.is_fallback)
        self.assertEqual(result.system.origin_px, PixelPoint(40, 60))

    def test_ratio_too_small(self):
        """A ratio at or below 0.01 mm/px is rejected."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), 0.5
        )
        self.assertTrue(result.is_fallback)
        self.assertIn("ratio", result.reason.lower())

    def test_ratio_too_large(self):
        """A ratio above 100 mm/px is rejected."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), 20000.0
        )
        self.assertTrue(result.is_fallback)

    def test_ratio_upper_bound_inclusive(self):
        """Exactly 100 mm/px is accepted."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), 10000.0
        )
        self.assertFalse(result.is_fallback)
        self.assertAlmostEqual(result.system.pixel_to_mm_ratio, 100.0)

    def test_negative_distance_falls_back(self):
        """A negative real distance gives a negative ratio and is rejected."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), -50.0
        )
        self.assertTrue(result.is_fallback)

    def test_non_finite_input_falls_back(self):
        """NaN markers never raise."""
        result = create_coordinate_system(
            PixelPoint(float('nan'), 0), PixelPoint(100, 0), PixelPoint(0, 100), 50.0
        )
        self.assertTrue(result.is_fallback)
        self.assertEqual(result.system.origin_px, PixelPoint(0.0, 0.0))

        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), float('inf')
        )
        self.assertTrue(result.is_fallback)

    def test_two_distances_are_averaged(self):
        """Separate X and Y distances are averaged into one ratio."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(200, 0), PixelPoint(0, 100),
            100.0, 100.0
        )
        self.assertFalse(result.is_fallback)
        # X: 100mm / 200px = 0.5, Y: 100mm / 100px = 1.0
        self.assertAlmostEqual(result.system.pixel_to_mm_ratio, 0.75)

    def test_orientation(self):
        """Orientation is the image-space angle of origin -> x-axis marker."""
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 100), PixelPoint(-100, 100), 100.0
        )
        self.assertFalse(result.is_fallback)
        self.assertAlmostEqual(result.system.orientation_rad, math.pi / 4)
        self.assertAlmostEqual(result.system.pixel_to_mm_ratio, 100.0 / math.hypot(100, 100))

    def test_deterministic(self):
        """Identical markers give an identical system."""
        args = (PixelPoint(12.5, 300.25), PixelPoint(812.0, 310.0),
                PixelPoint(20.0, -400.0), 762.0)
        first = create_coordinate_system(*args)
        second = create_coordinate_system(*args)
        self.assertEqual(first, second)

    def test_from_marker_triple(self):
        """The MarkerTriple entry point matches the argument form."""
        markers = MarkerTriple(
            origin=PixelPoint(0, 0),
            x_axis=PixelPoint(100, 0),
            scale=PixelPoint(0, 100),
            marker_x_distance_mm=50.0,
        )
        result = create_coordinate_system_from_markers(markers)
        expected = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), 50.0
        )
        self.assertEqual(result, expected)

    def test_custom_settings(self):
        """Thresholds and fallback values come from the settings."""
        settings = CalibrationSettings(min_marker_distance_px=200.0, fallback_ratio=0.25)
        result = create_coordinate_system(
            PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100), 50.0,
            settings=settings
        )
        self.assertTrue(result.is_fallback)
        self.assertEqual(result.system.pixel_to_mm_ratio, 0.25)

    def test_fallback_is_logged(self):
        """A rejected calibration logs a warning."""
        with self.assertLogs('slabscan.calibration.machine_coordinates', level='WARNING') as cm:
            create_coordinate_system(
                PixelPoint(0, 0), PixelPoint(10, 0), PixelPoint(20, 0), 50.0
            )
        self.assertTrue(any("rejected" in line for line in cm.output))


class TestMarkerTriple(unittest.TestCase):
    """Test marker validation."""

    def test_validate_valid(self):
        markers = MarkerTriple(PixelPoint(0, 0), PixelPoint(100, 0),
                               PixelPoint(0, 100), 50.0)
        is_valid, error = markers.validate()
        self.assertTrue(is_valid)
        self.assertEqual(error, "")

    def test_validate_collinear(self):
        markers = MarkerTriple(PixelPoint(0, 0), PixelPoint(10, 0),
                               PixelPoint(20, 0), 50.0)
        is_valid, error = markers.validate()
        self.assertFalse(is_valid)
        self.assertIn("collinear", error)


class TestMachineCoordinateSystem(unittest.TestCase):
    """Test the coordinate system value type."""

    def test_invalid_ratio_raises(self):
        with self.assertRaises(ValueError):
            MachineCoordinateSystem(PixelPoint(0, 0), 0.0, 0.0)
        with self.assertRaises(ValueError):
            MachineCoordinateSystem(PixelPoint(0, 0), 0.0, -1.0)
        with self.assertRaises(ValueError):
            MachineCoordinateSystem(PixelPoint(0, 0), 0.0, float('nan'))

    def test_invalid_orientation_raises(self):
        with self.assertRaises(ValueError):
            MachineCoordinateSystem(PixelPoint(0, 0), float('inf'), 0.5)

    def test_describe(self):
        system = MachineCoordinateSystem(PixelPoint(10, 20), math.pi / 2, 0.5)
        text = system.describe()
        self.assertIn("90.00deg", text)
        self.assertIn("0.50000mm/px", text)


class TestPixelMachineConversion(unittest.TestCase):
    """Test point conversion in both directions."""

    def setUp(self):
        self.simple = MachineCoordinateSystem(PixelPoint(0, 0), 0.0, 0.5)
        self.rotated = MachineCoordinateSystem(PixelPoint(320.5, 240.25), 0.7, 0.37)

    def test_x_axis_marker_maps_to_positive_x(self):
        """With no rotation the x-axis marker lands on +X."""
        p = pixel_to_machine(PixelPoint(100, 0), self.simple)
        self.assertIsInstance(p, MachinePoint)
        self.assertAlmostEqual(p.x, 50.0)
        self.assertAlmostEqual(p.y, 0.0)

    def test_rotated_x_axis_marker_lands_at_minus_two_theta(self):
        """The rotation is applied after the Y flip, doubling the marker angle."""
        theta = 0.3
        system = MachineCoordinateSystem(PixelPoint(0, 0), theta, 0.5)
        marker = PixelPoint(100 * math.cos(theta), 100 * math.sin(theta))
        p = pixel_to_machine(marker, system)
        self.assertAlmostEqual(p.x, 50 * math.cos(-2 * theta))
        self.assertAlmostEqual(p.y, 50 * math.sin(-2 * theta))

    def test_y_is_flipped(self):
        """Image Y down becomes machine Y up."""
        below = pixel_to_machine(PixelPoint(0, 100), self.simple)
        above = pixel_to_machine(PixelPoint(0, -100), self.simple)
        self.assertAlmostEqual(below.y, -50.0)
        self.assertAlmostEqual(above.y, 50.0)

    def test_origin_maps_to_zero(self):
        p = pixel_to_machine(PixelPoint(320.5, 240.25), self.rotated)
        self.assertAlmostEqual(p.x, 0.0)
        self.assertAlmostEqual(p.y, 0.0)

    def test_machine_to_pixel(self):
        p = machine_to_pixel(MachinePoint(50, 50), self.simple)
        self.assertIsInstance(p, PixelPoint)
        self.assertAlmostEqual(p.x, 100.0)
        self.assertAlmostEqual(p.y, -100.0)

    def test_round_trip_pixel(self):
        """pixel -> machine -> pixel returns the original point."""
        for system in (self.simple, self.rotated):
            for x, y in [(0, 0), (1, 2), (-150.5, 999.9), (1920, 1080), (1e4, -3e3)]:
                p = PixelPoint(x, y)
                back = machine_to_pixel(pixel_to_machine(p, system), system)
                self.assertTrue(_close(back.x, p.x), (system, p, back))
                self.assertTrue(_close(back.y, p.y), (system, p, back))

    def test_round_trip_machine(self):
        """machine -> pixel -> machine returns the original point."""
        for system in (self.simple, self.rotated):
            for x, y in [(0, 0), (762, 762), (-12.25, 3.5), (400, -250)]:
                p = MachinePoint(x, y)
                back = pixel_to_machine(machine_to_pixel(p, system), system)
                self.assertTrue(_close(back.x, p.x), (system, p, back))
                self.assertTrue(_close(back.y, p.y), (system, p, back))

    def test_verify_round_trip(self):
        self.assertTrue(verify_round_trip(PixelPoint(123.4, 567.8), self.rotated))

    def test_list_conversion_keeps_order(self):
        pixels = [PixelPoint(0, 0), PixelPoint(100, 0), PixelPoint(0, 100)]
        machine = pixel_list_to_machine(pixels, self.simple)
        self.assertEqual(len(machine), 3)
        self.assertEqual(machine[1], pixel_to_machine(pixels[1], self.simple))
        self.assertEqual(machine_list_to_pixel(machine, self.simple)[2],
                         machine_to_pixel(machine[2], self.simple))
        self.assertEqual(pixel_list_to_machine([], self.simple), [])

    def test_array_conversion_matches_scalar(self):
        """The numpy variants give the same results as the scalar transform."""
        pixels = np.array([[0.0, 0.0], [10.0, 20.0], [-35.5, 400.0], [1920.0, 1080.0]])
        machine = pixel_array_to_machine(pixels, self.rotated)
        self.assertEqual(machine.shape, (4, 2))
        for row, (x, y) in zip(machine, pixels):
            expected = pixel_to_machine(PixelPoint(x, y), self.rotated)
            self.assertAlmostEqual(row[0], expected.x, places=9)
            self.assertAlmostEqual(row[1], expected.y, places=9)

        back = machine_array_to_pixel(machine, self.rotated)
        np.testing.assert_allclose(back, pixels, rtol=1e-9, atol=1e-9)

    def test_array_conversion_empty(self):
        out = pixel_array_to_machine(np.empty((0, 2)), self.simple)
        self.assertEqual(out.shape, (0, 2))


if __name__ == '__main__':
    unittest.main()
