import unittest

from Service.road_modules.osm import OSMWay, extract_lane_info, is_car_way, parse_max_speed


def _way(**tags) -> OSMWay:
    tags.setdefault("highway", "residential")
    return OSMWay(id=1, nodes=[1, 2], tags=tags)


class MaxSpeedParsingTests(unittest.TestCase):
    def test_bare_number_is_kmh(self):
        self.assertAlmostEqual(parse_max_speed("50"), 13.89, delta=0.01)

    def test_kmh_unit(self):
        self.assertAlmostEqual(parse_max_speed("50 km/h"), 13.89, delta=0.01)

    def test_mph_unit(self):
        self.assertAlmostEqual(parse_max_speed("30 mph"), 13.41, delta=0.01)

    def test_unparsable_falls_back_to_default(self):
        self.assertAlmostEqual(parse_max_speed("walk"), 13.89, delta=0.01)
        self.assertAlmostEqual(parse_max_speed(""), 13.89, delta=0.01)


class LaneInfoTests(unittest.TestCase):
    def test_two_lanes_without_split_give_one_per_direction(self):
        info = extract_lane_info(_way(lanes="2"))
        self.assertEqual((info.lanes_forward, info.lanes_backward), (1, 1))
        self.assertFalse(info.is_oneway)

    def test_single_lane_two_way_still_has_both_directions(self):
        info = extract_lane_info(_way(lanes="1"))
        self.assertEqual((info.lanes_forward, info.lanes_backward), (1, 1))

    def test_oneway_puts_all_lanes_forward(self):
        info = extract_lane_info(_way(lanes="3", oneway="yes"))
        self.assertEqual((info.lanes_forward, info.lanes_backward), (3, 0))
        self.assertTrue(info.is_oneway)

    def test_explicit_forward_split(self):
        info = extract_lane_info(_way(lanes="3", **{"lanes:forward": "2"}))
        self.assertEqual((info.lanes_forward, info.lanes_backward), (2, 1))

    def test_missing_lanes_uses_default_count(self):
        info = extract_lane_info(_way(), default_lane_count=4)
        self.assertEqual(info.lanes, 4)
        self.assertEqual((info.lanes_forward, info.lanes_backward), (2, 2))

    def test_invalid_lanes_tag_uses_default(self):
        info = extract_lane_info(_way(lanes="many"))
        self.assertEqual(info.lanes, 2)

    def test_turn_lanes_and_optional_values(self):
        info = extract_lane_info(_way(
            oneway="yes",
            lanes="2",
            maxspeed="30",
            width="7",
            **{"turn:lanes": "left|through;right"},
        ))
        self.assertEqual(info.turn_lanes, ("left", "through;right"))
        self.assertAlmostEqual(info.max_speed, 8.33, delta=0.01)
        self.assertEqual(info.width, 7.0)

    def test_car_way_filter(self):
        self.assertTrue(is_car_way(_way(highway="primary")))
        self.assertFalse(is_car_way(_way(highway="footway")))


if __name__ == "__main__":
    unittest.main()
