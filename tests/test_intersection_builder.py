import math
import unittest

from osm_fixtures import RecordingLogger, build_cross_network, cross_elements, make_config, response

from Service.road_modules.builders import IntersectionBuilder, Movement, PriorityResolver
from Service.road_modules.builders.intersection_builder import classify_control, turn_hint_matches
from Service.road_modules.model import Lane
from Service.road_modules.osm import OSMNode, extract_nodes_map, extract_ways


def _lane(lane_id, poly, turn_hint=None):
    return Lane(
        id=lane_id,
        poly=tuple(poly),
        width=3.0,
        max_speed=10.0,
        dir=1,
        lane_type="general",
        from_node="node_a",
        to_node="node_b",
        turn_hint=turn_hint,
    )


def _heading_lane(lane_id, degrees):
    rad = math.radians(degrees)
    start = (0.001, 0.0)
    return _lane(lane_id, [start, (start[0] + 0.001 * math.cos(rad), start[1] + 0.001 * math.sin(rad))])


class IntersectionDetectionTests(unittest.TestCase):
    def setUp(self):
        self.builder = IntersectionBuilder(RecordingLogger(), make_config())

    def _candidates(self, arms):
        elements = response(cross_elements(arms=arms)).elements
        return self.builder.find_intersection_nodes(extract_ways(elements), extract_nodes_map(elements))

    def test_node_shared_by_two_ways_is_not_an_intersection(self):
        self.assertEqual(self._candidates(arms=2), [])
        self.assertEqual(build_cross_network(arms=2).intersections, {})

    def test_node_shared_by_three_ways_is_an_intersection(self):
        self.assertEqual([n.id for n in self._candidates(arms=3)], [100])

        network = build_cross_network(arms=3)
        self.assertEqual(list(network.intersections), ["intersection_100"])
        intersection = network.intersections["intersection_100"]
        self.assertTrue(intersection.incoming)
        self.assertTrue(intersection.outgoing)

    def test_four_arm_cross_has_no_u_turn_connectors(self):
        network = build_cross_network()
        intersection = network.intersections["intersection_100"]

        self.assertEqual(len(intersection.incoming), 4)
        self.assertEqual(len(intersection.outgoing), 4)
        self.assertEqual(len(intersection.connectors), 12)
        self.assertNotIn("connector_way_10_fwd_0_to_way_10_bwd_0", intersection.connectors)
        self.assertIsNotNone(intersection.polygon)

    def test_signals_intersection_has_no_rules(self):
        network = build_cross_network(center_tags={"highway": "traffic_signals"})
        intersection = network.intersections["intersection_100"]

        self.assertEqual(intersection.control, "signals")
        self.assertEqual(intersection.rules, ())
        self.assertEqual(network.lanes["way_10_fwd_0"].signal_group_id, "signal_100")

    def test_uncontrolled_intersection_pairs_every_distinct_movement(self):
        intersection = build_cross_network().intersections["intersection_100"]
        self.assertEqual(intersection.control, "uncontrolled")
        self.assertEqual(len(intersection.rules), 12 * 11 // 2)


class ControlClassificationTests(unittest.TestCase):
    def _node(self, **tags):
        return OSMNode(id=1, lat=0.0, lon=0.0, tags=tags)

    def test_control_tags(self):
        self.assertEqual(classify_control(self._node(highway="traffic_signals")), "signals")
        self.assertEqual(classify_control(self._node(highway="stop")), "stop")
        self.assertEqual(classify_control(self._node(highway="give_way")), "give_way")
        self.assertEqual(classify_control(self._node(junction="roundabout")), "roundabout")
        self.assertEqual(classify_control(self._node(priority_road="designated")), "priority")
        self.assertEqual(classify_control(self._node()), "uncontrolled")


class TurnAngleTests(unittest.TestCase):
    def test_through_band_boundaries(self):
        self.assertTrue(turn_hint_matches("through", math.radians(10)))
        self.assertTrue(turn_hint_matches("through", math.radians(-10)))
        self.assertFalse(turn_hint_matches("through", math.radians(40)))
        self.assertTrue(turn_hint_matches("left", math.radians(40)))
        self.assertTrue(turn_hint_matches("slight_right", math.radians(-20)))
        self.assertTrue(turn_hint_matches(None, math.radians(90)))

    def test_connector_allowed_follows_turn_hint(self):
        builder = IntersectionBuilder(RecordingLogger(), make_config())
        in_lane = _lane("in", [(0.0, 0.0), (0.001, 0.0)], turn_hint="through")
        out_10 = _heading_lane("out_10", 10)
        out_40 = _heading_lane("out_40", 40)
        out_back = _heading_lane("out_back", 170)

        connectors = {c.to_lane: c for c in builder.generate_connectors([in_lane], [out_10, out_40, out_back], (0.001, 0.0))}

        self.assertTrue(connectors["out_10"].allowed)
        self.assertFalse(connectors["out_40"].allowed)
        self.assertNotIn("out_back", connectors)
        self.assertEqual(connectors["out_10"].id, "connector_in_to_out_10")
        self.assertEqual(len(connectors["out_10"].path), 3)


class PriorityResolverTests(unittest.TestCase):
    def setUp(self):
        self.resolver = PriorityResolver()
        # 서쪽에서 동쪽으로 직진
        self.from_west = Movement("a", turn_angle=0.0, arrival_heading=0.0, approach_bearing=math.pi)
        # 남쪽에서 북쪽으로 직진
        self.from_south = Movement("b", turn_angle=0.0, arrival_heading=math.pi / 2, approach_bearing=-math.pi / 2)

    def test_stop_and_give_way_yield(self):
        self.assertEqual(self.resolver.resolve(self.from_west, self.from_south, "stop"), "yield")
        self.assertEqual(self.resolver.resolve(self.from_west, self.from_south, "give_way"), "yield")

    def test_stop_arm_yields_at_uncontrolled_node(self):
        stopped = Movement("b", 0.0, math.pi / 2, -math.pi / 2, arm_control="give_way")
        self.assertEqual(self.resolver.resolve(self.from_west, stopped, "uncontrolled"), "yield")

    def test_vehicle_from_the_right_wins(self):
        self.assertEqual(self.resolver.resolve(self.from_west, self.from_south, "uncontrolled"), "B")
        self.assertEqual(self.resolver.resolve(self.from_south, self.from_west, "uncontrolled"), "A")

    def test_opposing_left_turn_yields_to_through(self):
        left = Movement("a", turn_angle=math.pi / 2, arrival_heading=0.0, approach_bearing=math.pi)
        through = Movement("b", turn_angle=0.0, arrival_heading=math.pi, approach_bearing=0.0)
        self.assertEqual(self.resolver.resolve(left, through, "uncontrolled"), "B")

    def test_identical_movements_tie_to_a(self):
        self.assertEqual(self.resolver.resolve(self.from_west, self.from_west, "uncontrolled"), "A")

    def test_roundabout_circulating_traffic_wins(self):
        circulating = Movement("a", 0.0, 0.0, math.pi, on_roundabout=True)
        self.assertEqual(self.resolver.resolve(circulating, self.from_south, "roundabout"), "A")

    def test_priority_road_wins(self):
        main = Movement("b", 0.0, math.pi / 2, -math.pi / 2, on_priority_road=True)
        side = Movement("a", 0.0, 0.0, math.pi)
        self.assertEqual(self.resolver.resolve(side, main, "priority"), "B")

    def test_priority_control_prefers_through_movement(self):
        turning = Movement("a", math.radians(90), 0.0, math.pi)
        self.assertEqual(self.resolver.resolve(turning, self.from_south, "priority"), "B")


if __name__ == "__main__":
    unittest.main()
