import unittest

from osm_fixtures import RecordingLogger, make_config, node, way

from Service.road_modules import geometry
from Service.road_modules.builders import LaneBuilder
from Service.road_modules.osm import OSMNode, OSMWay, extract_lane_info


def _nodes(*raw):
    return {n["id"]: OSMNode.model_validate(n) for n in raw}


class LaneBuilderTests(unittest.TestCase):
    def setUp(self):
        self.logger = RecordingLogger()
        self.builder = LaneBuilder(self.logger, make_config())
        self.nodes = _nodes(
            node(1, 0.0, 0.0),
            node(2, 0.001, 0.0),
            node(3, 0.002, 0.0005),
        )

    def _build(self, osm_way: OSMWay):
        return self.builder.build(osm_way, self.nodes, extract_lane_info(osm_way))

    def test_two_way_road_gives_forward_and_backward_lane(self):
        lanes = self._build(OSMWay.model_validate(way(7, [1, 2, 3], lanes="2")))

        self.assertEqual([lane.id for lane in lanes], ["way_7_fwd_0", "way_7_bwd_0"])
        fwd, bwd = lanes
        self.assertEqual((fwd.dir, bwd.dir), (1, -1))
        self.assertEqual((fwd.from_node, fwd.to_node), ("node_1", "node_3"))
        self.assertEqual((bwd.from_node, bwd.to_node), ("node_3", "node_1"))

    def test_lane_keeps_resolvable_point_count(self):
        lanes = self._build(OSMWay.model_validate(way(7, [1, 2, 3])))
        for lane in lanes:
            self.assertEqual(len(lane.poly), 3)

    def test_unresolvable_nodes_are_skipped(self):
        lanes = self._build(OSMWay.model_validate(way(8, [1, 999, 2])))
        self.assertTrue(lanes)
        self.assertTrue(all(len(lane.poly) == 2 for lane in lanes))

    def test_way_with_single_resolvable_point_gives_no_lanes(self):
        self.assertEqual(self._build(OSMWay.model_validate(way(9, [1, 998, 999]))), [])

    def test_lanes_are_offset_to_the_right_of_travel(self):
        fwd, bwd = self._build(OSMWay.model_validate(way(7, [1, 2])))
        centerline = [(0.0, 0.0), (0.001, 0.0)]

        self.assertAlmostEqual(geometry.distance_to_polyline_m(fwd.poly[0], centerline), 1.625, places=3)
        self.assertLess(fwd.poly[0][1], 0.0)
        self.assertGreater(bwd.poly[0][1], 0.0)
        # 역방향 차로는 way의 마지막 노드에서 출발
        self.assertAlmostEqual(bwd.poly[0][0], 0.001, places=9)

    def test_width_tag_is_split_between_lanes(self):
        lanes = self._build(OSMWay.model_validate(way(7, [1, 2], lanes="2", oneway="yes", width="7")))
        self.assertEqual(len(lanes), 2)
        self.assertTrue(all(lane.width == 3.5 for lane in lanes))
        self.assertTrue(all(lane.dir == 1 for lane in lanes))

    def test_width_is_split_between_built_lanes_not_lanes_tag(self):
        # lanes=1 양방향 도로도 방향마다 차로 하나씩 생성
        lanes = self._build(OSMWay.model_validate(way(7, [1, 2], lanes="1", width="6")))
        self.assertEqual([lane.dir for lane in lanes], [1, -1])
        self.assertTrue(all(lane.width == 3.0 for lane in lanes))

    def test_turn_hints_follow_lane_order(self):
        lanes = self._build(OSMWay.model_validate(
            way(7, [1, 2], lanes="2", oneway="yes", **{"turn:lanes": "left|through;right"})
        ))
        self.assertEqual([lane.turn_hint for lane in lanes], ["left", "through"])

    def test_unknown_turn_value_gives_no_hint(self):
        lanes = self._build(OSMWay.model_validate(
            way(7, [1, 2], lanes="1", oneway="yes", **{"turn:lanes": "merge_to_left"})
        ))
        self.assertIsNone(lanes[0].turn_hint)

    def test_speed_and_lane_type(self):
        lanes = self._build(OSMWay.model_validate(way(7, [1, 2], highway="primary", maxspeed="30 mph")))
        self.assertAlmostEqual(lanes[0].max_speed, 13.41, delta=0.01)
        self.assertEqual(lanes[0].lane_type, "general")

        service = self._build(OSMWay.model_validate(way(8, [1, 2], highway="service")))
        self.assertAlmostEqual(service[0].max_speed, 5.56, delta=0.01)

    def test_stop_sign_on_approach_sets_stop_line(self):
        self.nodes[2] = OSMNode.model_validate(node(2, 0.001, 0.0, highway="stop"))
        fwd, bwd = self._build(OSMWay.model_validate(way(7, [1, 2])))

        self.assertIsNotNone(fwd.stop_line)
        self.assertIsNone(fwd.signal_group_id)
        self.assertIsNone(bwd.stop_line)

    def test_signal_on_approach_sets_signal_group(self):
        self.nodes[2] = OSMNode.model_validate(node(2, 0.001, 0.0, highway="traffic_signals"))
        fwd = self._build(OSMWay.model_validate(way(7, [1, 2])))[0]
        self.assertEqual(fwd.signal_group_id, "signal_2")

    def test_direction_tag_limits_control_to_one_approach(self):
        self.nodes[2] = OSMNode.model_validate(node(2, 0.001, 0.0, highway="stop", direction="backward"))
        fwd = self._build(OSMWay.model_validate(way(7, [1, 2])))[0]
        self.assertIsNone(fwd.stop_line)


if __name__ == "__main__":
    unittest.main()
