"""
Service/road_modules/builders/lane_builder.py

도로 way 하나를 방향별 차로(Lane) 레코드로 변환하는 빌더 모듈입니다.

좌표를 해석할 수 없는 노드는 건너뛰고, 해석된 점이 2개 미만인 way는 예외 없이 빈 결과를 반환합니다.
지도 추출 데이터의 불완전성은 흔하며 배치 빌드 전체를 중단시키면 안 됩니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from Common.log import Log
from Service.config import RoadNetworkConfig
from Service.road_modules import geometry
from Service.road_modules.model import TURN_TYPES, Lane
from Service.road_modules.osm import LaneInfo, OSMNode, OSMWay, way_to_polyline
from Service.road_modules.osm.tags import TURN_VALUE_DELIMITER

SPEED_BY_HIGHWAY: Dict[str, float] = {
    "motorway": 36.11,       # 130 km/h
    "trunk": 25.0,           # 90 km/h
    "primary": 13.89,        # 50 km/h
    "secondary": 13.89,
    "tertiary": 13.89,
    "unclassified": 13.89,
    "residential": 8.33,     # 30 km/h
    "living_street": 2.78,   # 10 km/h
    "service": 5.56,         # 20 km/h
}
FALLBACK_SPEED_MS = 13.89

CONTROL_HIGHWAY_TAGS = ("traffic_signals", "stop", "give_way")


def node_key(osm_node_id: int) -> str:
    return f"node_{osm_node_id}"


@dataclass(frozen=True)
class ApproachControl:
    """진입로에서 발견된 교통 통제 노드."""
    kind: str       # traffic_signals | stop | give_way
    node_id: int
    distance_m: float


def find_approach_control(
    node_ids: Sequence[int],
    nodes: Dict[int, OSMNode],
    search_m: float,
    travel_dir: int,
) -> Optional[ApproachControl]:
    """
    진행 순서대로 나열된 노드 id를 끝에서부터 거슬러 올라가며 search_m 이내의 첫 통제 노드를 찾습니다.

    노드의 direction 태그(forward/backward)가 있으면 way 기준 진행 방향(travel_dir: 1 | -1)과
    일치할 때만 해당 진입로의 통제로 인정합니다.
    """
    resolved = [nid for nid in node_ids if nid in nodes]
    if not resolved:
        return None

    wanted_direction = "forward" if travel_dir == 1 else "backward"
    travelled = 0.0
    prev: Optional[OSMNode] = None

    # 차로 시작 노드는 탐색하지 않음
    for nid in reversed(resolved[1:]):
        node = nodes[nid]
        if prev is not None:
            travelled += geometry.distance_m((prev.lon, prev.lat), (node.lon, node.lat))
        if travelled > search_m:
            return None
        prev = node

        kind = node.tags.get("highway")
        if kind not in CONTROL_HIGHWAY_TAGS:
            continue
        direction = node.tags.get("direction") or node.tags.get(f"{kind}:direction")
        if direction in ("forward", "backward") and direction != wanted_direction:
            continue
        return ApproachControl(kind=kind, node_id=nid, distance_m=travelled)

    return None


class LaneBuilder:
    """
    way 중심선을 차로 폭만큼 좌우로 오프셋하여 정방향/역방향 차로를 생성합니다.
    """

    def __init__(self, logger: Log, config: RoadNetworkConfig):
        self._logger = logger
        self._config = config

    def build(self, way: OSMWay, nodes: Dict[int, OSMNode], lane_info: LaneInfo) -> List[Lane]:
        """
        way 하나에서 차로 목록을 생성합니다.

        Args:
            way (OSMWay): 차량 통행 가능한 도로 way
            nodes (Dict[int, OSMNode]): 노드 id -> 노드 조회 테이블 (읽기 전용)
            lane_info (LaneInfo): 태그에서 해석한 차로 구성

        Returns:
            List[Lane]: 정방향 차로 다음에 역방향 차로 순서의 목록 (생성 불가 시 빈 목록)
        """
        centerline = way_to_polyline(way, nodes)
        if len(centerline) < 2:
            self._logger.log(f"[LaneBuilder] way {way.id}: 해석 가능한 점 {len(centerline)}개, 차로 생략", level="DEBUG")
            return []

        # 실제 생성되는 차로 수로 나누어 차로 폭의 합이 도로 폭을 넘지 않게 함
        total_lanes = max(1, lane_info.lanes_forward + lane_info.lanes_backward)
        lane_width = lane_info.width / total_lanes if lane_info.width else self._config.default_lane_width_m
        max_speed = lane_info.max_speed or self.default_max_speed(way.tags.get("highway", "unclassified"))
        lane_type = self.lane_type(way.tags)

        first_node = node_key(way.nodes[0])
        last_node = node_key(way.nodes[-1])
        search_m = self._config.approach_control_search_m

        lanes: List[Lane] = []

        forward_control = find_approach_control(way.nodes, nodes, search_m, travel_dir=1)
        for i, offset in enumerate(self.lane_offsets(lane_info.lanes_forward, lane_width, 1)):
            poly = geometry.offset_polyline(centerline, offset)
            lanes.append(self._make_lane(
                lane_id=f"way_{way.id}_fwd_{i}",
                poly=poly,
                width=lane_width,
                max_speed=max_speed,
                direction=1,
                lane_type=lane_type,
                from_node=first_node,
                to_node=last_node,
                turn_hint=self.turn_hint(lane_info.turn_lanes, i),
                control=forward_control,
            ))

        if not lane_info.is_oneway:
            backward_control = find_approach_control(list(reversed(way.nodes)), nodes, search_m, travel_dir=-1)
            for i, offset in enumerate(self.lane_offsets(lane_info.lanes_backward, lane_width, -1)):
                poly = list(reversed(geometry.offset_polyline(centerline, offset)))
                lanes.append(self._make_lane(
                    lane_id=f"way_{way.id}_bwd_{i}",
                    poly=poly,
                    width=lane_width,
                    max_speed=max_speed,
                    direction=-1,
                    lane_type=lane_type,
                    from_node=last_node,
                    to_node=first_node,
                    turn_hint=self.turn_hint(lane_info.turn_lanes_backward, i),
                    control=backward_control,
                ))

        return lanes

    def _make_lane(
        self,
        lane_id: str,
        poly: List[geometry.Vec2],
        width: float,
        max_speed: float,
        direction: int,
        lane_type: str,
        from_node: str,
        to_node: str,
        turn_hint: Optional[str],
        control: Optional[ApproachControl],
    ) -> Lane:
        stop_line = geometry.perpendicular_segment(poly, width) if control else None
        signal_group = f"signal_{control.node_id}" if control and control.kind == "traffic_signals" else None
        return Lane(
            id=lane_id,
            poly=tuple(poly),
            width=width,
            max_speed=max_speed,
            dir=direction,
            lane_type=lane_type,
            from_node=from_node,
            to_node=to_node,
            turn_hint=turn_hint,
            stop_line=stop_line,
            signal_group_id=signal_group,
        )

    @staticmethod
    def lane_offsets(lane_count: int, lane_width: float, direction: int) -> List[float]:
        """중심선에서 각 차로 중심까지의 오프셋(m). 첫 차로는 반 폭, 이후 한 폭씩 바깥쪽으로."""
        start = direction * lane_width * 0.5
        return [start + direction * i * lane_width for i in range(max(0, lane_count))]

    @staticmethod
    def turn_hint(turn_lanes: Optional[Sequence[str]], lane_index: int) -> Optional[str]:
        """turn:lanes 값 중 해당 차로의 첫 번째 회전 값을 반환합니다. 미지원 값은 None."""
        if not turn_lanes or lane_index >= len(turn_lanes):
            return None
        primary = turn_lanes[lane_index].split(TURN_VALUE_DELIMITER)[0].strip()
        return primary if primary in TURN_TYPES else None

    @staticmethod
    def lane_type(tags: Dict[str, str]) -> str:
        if tags.get("busway") or "bus" in tags.get("vehicle:lanes", "") or tags.get("highway") == "busway":
            return "bus"
        if tags.get("cycleway") or tags.get("highway") == "cycleway":
            return "bike"
        if tags.get("railway") == "tram":
            return "tram"
        return "general"

    @staticmethod
    def default_max_speed(highway: str) -> float:
        return SPEED_BY_HIGHWAY.get(highway, FALLBACK_SPEED_MS)
