"""
Service/road_modules/builders/network_builder.py

원시 지도 데이터 조회부터 차로, 교차로, 보행 계층 생성까지 순차 실행하여 하나의 불변 도로망 스냅샷을 만드는 오케스트레이터 모듈입니다.
"""
from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Function.utils import utc_timestamp
from Service.config import RoadNetworkConfig
from Service.schemas import BoundingBox
from Service.road_modules.model import Bounds, Intersection, Lane, LaneConnector, RoadNetwork
from Service.road_modules.osm import (
    OSMNode,
    OSMWay,
    OverpassClient,
    OverpassResponse,
    extract_lane_info,
    extract_nodes_map,
    extract_ways,
    is_car_way,
)

from .intersection_builder import IntersectionBuilder, IntersectionContext
from .lane_builder import LaneBuilder, node_key
from .pedestrian_builder import PedestrianBuilder


class NetworkBuilder:
    """
    데이터 소스 -> 차로 -> 교차로 -> 보행 계층 -> 스냅샷 순서로 단방향 배치 변환을 수행합니다.
    각 단계는 앞 단계 결과를 모두 소비한 뒤 시작하며, 노드 조회 테이블은 어느 단계도 수정하지 않습니다.
    """

    def __init__(
            self,
            logger: Log,
            config: RoadNetworkConfig,
            source: OverpassClient,
            lane_builder: LaneBuilder,
            intersection_builder: IntersectionBuilder,
            pedestrian_builder: PedestrianBuilder,
    ):
        self._logger = logger
        self._config = config
        self._source = source
        self._lane_builder = lane_builder
        self._intersection_builder = intersection_builder
        self._pedestrian_builder = pedestrian_builder

    @safe_run
    @log_execution_time
    def build(self, bbox: Optional[BoundingBox] = None) -> RoadNetwork:
        """
        영역의 원시 데이터를 조회하여 새 스냅샷을 생성합니다. 데이터 소스 예외는 그대로 전파되며 부분 스냅샷은 만들지 않습니다.
        """
        bbox = bbox or self._source.default_bbox()
        response = self._source.fetch_road_network(bbox)
        return self.process(response, bbox)

    @log_execution_time
    def process(self, response: OverpassResponse, bbox: BoundingBox) -> RoadNetwork:
        """조회 응답을 도로망 스냅샷으로 변환합니다."""
        self._logger.log(f"=== [Network] 원시 요소 {len(response.elements)}개 처리 시작 ===", level="INFO")

        nodes = extract_nodes_map(response.elements)
        ways = extract_ways(response.elements)
        road_ways = [way for way in ways if is_car_way(way)]

        lanes, lane_ways = self._build_all_lanes(road_ways, nodes)

        intersection_nodes = self._intersection_builder.find_intersection_nodes(road_ways, nodes)
        intersections, connectors = self._build_intersections(
            intersection_nodes, lanes, IntersectionContext(nodes=nodes, lane_ways=lane_ways)
        )

        centers = {f"intersection_{node.id}": (node.lon, node.lat) for node in intersection_nodes}
        centers = {key: value for key, value in centers.items() if key in intersections}
        pedestrian = self._pedestrian_builder.execute(nodes, ways, centers)

        network = RoadNetwork(
            lanes={lane.id: lane for lane in lanes},
            lane_connectors={c.id: c for c in connectors},
            intersections=intersections,
            ped_nodes=pedestrian.ped_nodes,
            ped_edges=pedestrian.ped_edges,
            crosswalks=pedestrian.crosswalks,
            cross_links=pedestrian.cross_links,
            bounds=self.calculate_bounds(nodes, bbox),
            version=self._config.schema_version,
            generated_at=utc_timestamp(),
            source=self._config.source_tag,
        )

        stats = network.stats()
        self._logger.log(
            f"=== [Network] 빌드 완료: 차로={stats['lanes']} 커넥터={stats['connectors']} "
            f"교차로={stats['intersections']} 횡단보도={stats['crosswalks']} ===",
            level="INFO",
        )
        return network

    def _build_all_lanes(
        self, road_ways: List[OSMWay], nodes: Dict[int, OSMNode]
    ) -> Tuple[List[Lane], Dict[str, OSMWay]]:
        lanes: List[Lane] = []
        lane_ways: Dict[str, OSMWay] = {}
        skipped = 0

        for way in road_ways:
            lane_info = extract_lane_info(way, self._config.default_lane_count)
            built = self._lane_builder.build(way, nodes, lane_info)
            if not built:
                skipped += 1
                continue
            for lane in built:
                lanes.append(lane)
                lane_ways[lane.id] = way

        self._logger.log(
            f"[Network] 도로 way {len(road_ways)}개 -> 차로 {len(lanes)}개 (좌표 불완전으로 생략 {skipped}개)",
            level="INFO",
        )
        return lanes, lane_ways

    def _build_intersections(
        self,
        intersection_nodes: List[OSMNode],
        lanes: List[Lane],
        context: IntersectionContext,
    ) -> Tuple[Dict[str, Intersection], List[LaneConnector]]:
        incoming_by_node: Dict[str, List[Lane]] = defaultdict(list)
        outgoing_by_node: Dict[str, List[Lane]] = defaultdict(list)
        for lane in lanes:
            incoming_by_node[lane.to_node].append(lane)
            outgoing_by_node[lane.from_node].append(lane)

        intersections: Dict[str, Intersection] = {}
        connectors: List[LaneConnector] = []

        for node in intersection_nodes:
            key = node_key(node.id)
            incoming = incoming_by_node.get(key, [])
            outgoing = outgoing_by_node.get(key, [])
            if not incoming or not outgoing:
                continue

            intersection, node_connectors = self._intersection_builder.build_intersection(
                node, incoming, outgoing, context
            )
            intersections[intersection.id] = intersection
            connectors.extend(node_connectors)

        self._logger.log(
            f"[Network] 교차로 {len(intersections)}개, 커넥터 {len(connectors)}개 생성",
            level="INFO",
        )
        return intersections, connectors

    @staticmethod
    def calculate_bounds(nodes: Dict[int, OSMNode], bbox: BoundingBox) -> Bounds:
        """해석된 전체 노드 좌표의 외접 사각형. 노드가 없으면 요청 영역을 그대로 사용합니다."""
        if not nodes:
            return Bounds(min_lat=bbox.south, max_lat=bbox.north, min_lon=bbox.west, max_lon=bbox.east)
        lats = [node.lat for node in nodes.values()]
        lons = [node.lon for node in nodes.values()]
        return Bounds(min_lat=min(lats), max_lat=max(lats), min_lon=min(lons), max_lon=max(lons))
