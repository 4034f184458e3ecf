import math
import unittest

from Service.road_modules import geometry


class GeometryTests(unittest.TestCase):
    def test_zero_length_segment_uses_fixed_normal(self):
        self.assertEqual(geometry.segment_normal((1.0, 1.0), (1.0, 1.0)), (0.0, 1.0))

    def test_normal_points_to_the_right_of_travel(self):
        nx_, ny_ = geometry.segment_normal((0.0, 0.0), (10.0, 0.0))
        self.assertAlmostEqual(nx_, 0.0)
        self.assertAlmostEqual(ny_, -1.0)

    def test_offset_keeps_point_count_and_distance(self):
        line = [(0.0, 0.0), (0.001, 0.0), (0.002, 0.0005), (0.003, 0.0005)]
        shifted = geometry.offset_polyline(line, 5.0)

        self.assertEqual(len(shifted), len(line))
        self.assertAlmostEqual(geometry.distance_to_polyline_m(shifted[0], line), 5.0, places=3)
        # 오른쪽(남쪽)으로 이동
        self.assertLess(shifted[0][1], 0.0)

    def test_offset_survives_duplicate_points(self):
        line = [(0.0, 0.0), (0.0, 0.0), (0.001, 0.0)]
        shifted = geometry.offset_polyline(line, 2.0)
        self.assertEqual(len(shifted), 3)
        self.assertTrue(all(math.isfinite(v) for p in shifted for v in p))

    def test_distance_in_meters(self):
        self.assertAlmostEqual(geometry.distance_m((0.0, 0.0), (0.0, 0.001)), 111.32, places=2)

    def test_distance_clamps_to_segment_end(self):
        line = [(0.0, 0.0), (0.001, 0.0)]
        self.assertAlmostEqual(
            geometry.distance_to_polyline_m((0.002, 0.0), line),
            geometry.distance_m((0.002, 0.0), (0.001, 0.0)),
            places=6,
        )

    def test_heading_and_normalization(self):
        self.assertAlmostEqual(geometry.heading((0.0, 0.0), (0.0, 0.001)), math.pi / 2)
        self.assertAlmostEqual(geometry.normalize_angle(3 * math.pi / 2), -math.pi / 2)

    def test_stop_line_is_perpendicular_and_lane_wide(self):
        p1, p2 = geometry.perpendicular_segment([(0.0, 0.0), (0.001, 0.0)], 3.0)
        self.assertAlmostEqual(geometry.distance_m(p1, p2), 3.0, places=3)
        self.assertAlmostEqual(p1[0], 0.001, places=9)
        self.assertAlmostEqual(p2[0], 0.001, places=9)


if __name__ == "__main__":
    unittest.main()
