import unittest
from unittest import mock

import requests

from osm_fixtures import BBOX, RecordingLogger, cross_elements, make_config

from Service.road_modules.errors import SourceTimeout, SourceUnavailable
from Service.road_modules.osm import OSMNode, OSMWay, OverpassClient

POST = "Service.road_modules.osm.overpass.requests.post"


def _http_response(status_code=200, payload=None, json_error=None):
    resp = mock.Mock()
    resp.status_code = status_code
    resp.reason = "OK" if status_code == 200 else "Gateway Timeout"
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


class OverpassQueryTests(unittest.TestCase):
    def setUp(self):
        self.client = OverpassClient(RecordingLogger(), make_config(overpass_timeout_s=25))

    def test_query_header_bbox_and_recursion(self):
        query = self.client.build_query(BBOX)

        self.assertTrue(query.startswith("[out:json][timeout:25];"))
        self.assertIn("node[highway=traffic_signals](-0.01,-0.01,0.01,0.01);", query)
        self.assertIn("way[highway=footway][footway=crossing]", query)
        self.assertIn("way[priority_road]", query)
        self.assertIn("(._;>;);", query)
        self.assertTrue(query.endswith("out body;"))

    def test_default_bbox_comes_from_config(self):
        bbox = self.client.default_bbox()
        self.assertEqual((bbox.south, bbox.west, bbox.north, bbox.east), (50.0, 14.2, 50.15, 14.6))


class OverpassFetchTests(unittest.TestCase):
    def setUp(self):
        self.logger = RecordingLogger()
        self.client = OverpassClient(self.logger, make_config())

    def test_successful_fetch_parses_elements(self):
        payload = {"version": 0.6, "generator": "Overpass API", "osm3s": {}, "elements": cross_elements()}
        with mock.patch(POST, return_value=_http_response(payload=payload)) as post:
            result = self.client.fetch_road_network(BBOX)

        _, kwargs = post.call_args
        self.assertEqual(kwargs["timeout"], 30)
        self.assertIn("data", kwargs["data"])
        self.assertEqual(sum(isinstance(el, OSMNode) for el in result.elements), 5)
        self.assertEqual(sum(isinstance(el, OSMWay) for el in result.elements), 4)

    def test_timeout_maps_to_source_timeout(self):
        with mock.patch(POST, side_effect=requests.Timeout("slow")):
            with self.assertRaises(SourceTimeout) as ctx:
                self.client.fetch_road_network(BBOX)
        self.assertIsInstance(ctx.exception.__cause__, requests.Timeout)
        self.assertTrue(self.logger.messages("ERROR"))

    def test_connection_error_maps_to_unavailable(self):
        with mock.patch(POST, side_effect=requests.ConnectionError("refused")):
            with self.assertRaises(SourceUnavailable):
                self.client.fetch_road_network(BBOX)

    def test_non_2xx_maps_to_unavailable(self):
        with mock.patch(POST, return_value=_http_response(status_code=504)):
            with self.assertRaises(SourceUnavailable):
                self.client.fetch_road_network(BBOX)

    def test_non_json_body_maps_to_unavailable(self):
        with mock.patch(POST, return_value=_http_response(json_error=ValueError("no json"))):
            with self.assertRaises(SourceUnavailable):
                self.client.fetch_road_network(BBOX)

    def test_malformed_elements_map_to_unavailable(self):
        payload = {"elements": [{"type": "node", "id": "x"}]}
        with mock.patch(POST, return_value=_http_response(payload=payload)):
            with self.assertRaises(SourceUnavailable):
                self.client.fetch_road_network(BBOX)


if __name__ == "__main__":
    unittest.main()
