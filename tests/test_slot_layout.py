import math
import sys
import unittest
from pathlib import Path

import numpy as np

# Allow `import slot_layout` etc. from the repo root.
_TOOL_DIR = Path(__file__).resolve().parents[1] / "ring-design-tool"
if str(_TOOL_DIR) not in sys.path:
    sys.path.insert(0, str(_TOOL_DIR))

from slot_layout import REFERENCE_ANGLE, angle_for_index, slot_direction, surface_normal  # noqa: E402


class TestAngleForIndex(unittest.TestCase):
    def test_slot_zero_is_reference_angle(self) -> None:
        self.assertAlmostEqual(angle_for_index(0, 12), math.pi / 2)
        self.assertAlmostEqual(REFERENCE_ANGLE, math.pi / 2)

    def test_each_step_is_thirty_degrees_clockwise(self) -> None:
        for i in range(12):
            expected = (math.pi / 2 - i * math.radians(30)) % (2 * math.pi)
            got = angle_for_index(i, 12) % (2 * math.pi)
            self.assertAlmostEqual(got, expected, places=9)

    def test_twelve_angles_are_distinct(self) -> None:
        angles = {round(math.degrees(angle_for_index(i)) % 360, 6) for i in range(12)}
        self.assertEqual(len(angles), 12)

    def test_other_totals(self) -> None:
        self.assertAlmostEqual(angle_for_index(1, 4), 0.0)


class TestSlotDirection(unittest.TestCase):
    def test_slot_zero_faces_front(self) -> None:
        np.testing.assert_allclose(slot_direction(0), [0.0, 0.0, 1.0], atol=1e-12)

    def test_slot_three_faces_positive_x(self) -> None:
        np.testing.assert_allclose(slot_direction(3), [1.0, 0.0, 0.0], atol=1e-12)

    def test_directions_are_unit_and_horizontal(self) -> None:
        for i in range(12):
            d = slot_direction(i)
            self.assertAlmostEqual(float(np.linalg.norm(d)), 1.0)
            self.assertEqual(d[1], 0.0)

    def test_inside_normal_points_to_axis(self) -> None:
        np.testing.assert_allclose(surface_normal(5, inside=True), -slot_direction(5))
        np.testing.assert_allclose(surface_normal(5, inside=False), slot_direction(5))


if __name__ == "__main__":
    unittest.main()
