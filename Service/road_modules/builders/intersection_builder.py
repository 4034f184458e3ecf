"""
Service/road_modules/builders/intersection_builder.py

위상 기반으로 교차로 후보 노드를 찾고, 진입/진출 차로 사이의 커넥터, 통제 유형, 통행 우선 규칙을 생성하는 모듈입니다.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import networkx as nx
from shapely.geometry import LineString, MultiPoint, Polygon

from Common.log import Log
from Service.config import RoadNetworkConfig
from Service.road_modules import geometry
from Service.road_modules.model import Intersection, Lane, LaneConnector, RightOfWayRule
from Service.road_modules.osm import OSMNode, OSMWay

from .lane_builder import find_approach_control
from .priority import Movement, PriorityResolver

# 회전 힌트별 허용 각도 구간 (좌회전이 양수)
SLIGHT_RAD = math.pi / 12   # 15°
TURN_RAD = math.pi / 6      # 30°


def turn_angle(in_lane: Lane, out_lane: Lane) -> float:
    """진입 차로 마지막 선분과 진출 차로 첫 선분의 방위 차이, [-pi, pi]."""
    in_heading = geometry.heading(in_lane.poly[-2], in_lane.poly[-1])
    out_heading = geometry.heading(out_lane.poly[0], out_lane.poly[1])
    return geometry.normalize_angle(out_heading - in_heading)


def turn_hint_matches(turn_hint: Optional[str], angle: float) -> bool:
    """회전 힌트가 계산된 회전각과 일치하는지 판정합니다. 힌트가 없으면 모든 회전을 허용합니다."""
    if turn_hint is None:
        return True
    if turn_hint == "left":
        return angle > TURN_RAD
    if turn_hint == "slight_left":
        return SLIGHT_RAD < angle <= TURN_RAD
    if turn_hint == "through":
        return abs(angle) <= SLIGHT_RAD
    if turn_hint == "slight_right":
        return -TURN_RAD <= angle < -SLIGHT_RAD
    if turn_hint == "right":
        return angle < -TURN_RAD
    return True


def classify_control(node: OSMNode) -> str:
    tags = node.tags
    highway = tags.get("highway")
    if highway == "traffic_signals":
        return "signals"
    if highway == "stop":
        return "stop"
    if highway == "give_way":
        return "give_way"
    if tags.get("junction") == "roundabout":
        return "roundabout"
    if tags.get("priority_road") == "designated":
        return "priority"
    # 표지 없는 교차로는 우측 우선 규칙으로 처리
    return "uncontrolled"


def connectors_conflict(a: LaneConnector, b: LaneConnector) -> bool:
    """서로 다른 이동이면서 경로가 기하적으로 만나는 커넥터 쌍을 충돌로 판정합니다."""
    if a.from_lane == b.from_lane and a.to_lane == b.to_lane:
        return False
    return LineString(a.path).intersects(LineString(b.path))


@dataclass
class IntersectionContext:
    """교차로 생성에 필요한 원시 데이터 묶음 (읽기 전용)."""
    nodes: Dict[int, OSMNode]
    lane_ways: Dict[str, OSMWay]


class IntersectionBuilder:
    """
    노드 공유 way 수(차수)로 교차로 후보를 찾고 후보마다 Intersection과 LaneConnector를 생성합니다.
    호출 간 상태를 저장하지 않는 배치 변환기입니다.
    """

    def __init__(self, logger: Log, config: RoadNetworkConfig, resolver: Optional[PriorityResolver] = None):
        self._logger = logger
        self._config = config
        self._resolver = resolver or PriorityResolver()
        self._max_turn_rad = math.radians(config.max_turn_angle_deg)

    def find_intersection_nodes(self, ways: Sequence[OSMWay], nodes: Dict[int, OSMNode]) -> List[OSMNode]:
        """
        way-노드 이분 그래프에서 서로 다른 way가 3개 이상 공유하는 노드를 교차로 후보로 반환합니다.
        way가 분기 없이 공유 노드를 지나가기만 해도 후보가 될 수 있는 거친 근사입니다.
        """
        graph = nx.Graph()
        for way in ways:
            for nid in set(way.nodes):
                graph.add_edge(("way", way.id), ("node", nid))

        candidates = [
            nodes[key[1]]
            for key, degree in graph.degree()
            if key[0] == "node" and degree >= self._config.junction_min_degree and key[1] in nodes
        ]
        candidates.sort(key=lambda n: n.id)

        self._logger.log(f"[Intersection] 교차로 후보 노드: {len(candidates)}개", level="INFO")
        return candidates

    def build_intersection(
        self,
        node: OSMNode,
        incoming: Sequence[Lane],
        outgoing: Sequence[Lane],
        context: IntersectionContext,
    ) -> Tuple[Intersection, List[LaneConnector]]:
        """
        하나의 후보 노드에 대해 커넥터, 통제 유형, 통행 우선 규칙을 생성합니다.

        Args:
            node (OSMNode): 교차로 노드
            incoming (Sequence[Lane]): 이 노드에서 끝나는 차로
            outgoing (Sequence[Lane]): 이 노드에서 시작하는 차로
            context (IntersectionContext): 노드 조회 테이블과 차로 -> 원본 way 매핑

        Returns:
            Tuple[Intersection, List[LaneConnector]]: 교차로와 그 커넥터 목록
        """
        center = (node.lon, node.lat)
        connectors = self.generate_connectors(incoming, outgoing, center)
        control = classify_control(node)

        incoming_by_id = {lane.id: lane for lane in incoming}
        outgoing_by_id = {lane.id: lane for lane in outgoing}
        movements = {
            c.id: self._movement(c, incoming_by_id[c.from_lane], outgoing_by_id[c.to_lane], center, context)
            for c in connectors
        }
        rules = self.generate_rules(connectors, control, movements)

        intersection = Intersection(
            id=f"intersection_{node.id}",
            polygon=self._area_polygon(incoming, outgoing),
            incoming=tuple(lane.id for lane in incoming),
            outgoing=tuple(lane.id for lane in outgoing),
            connectors=tuple(c.id for c in connectors),
            control=control,
            rules=tuple(rules),
        )
        return intersection, connectors

    def generate_connectors(
        self, incoming: Sequence[Lane], outgoing: Sequence[Lane], center: geometry.Vec2
    ) -> List[LaneConnector]:
        connectors: List[LaneConnector] = []
        for in_lane in incoming:
            for out_lane in outgoing:
                angle = turn_angle(in_lane, out_lane)
                # U턴에 가까운 회전은 제외
                if abs(angle) > self._max_turn_rad:
                    continue
                connectors.append(LaneConnector(
                    id=f"connector_{in_lane.id}_to_{out_lane.id}",
                    from_lane=in_lane.id,
                    to_lane=out_lane.id,
                    path=(in_lane.poly[-1], center, out_lane.poly[0]),
                    allowed=turn_hint_matches(in_lane.turn_hint, angle),
                ))
        return connectors

    def generate_rules(
        self, connectors: Sequence[LaneConnector], control: str, movements: Dict[str, Movement]
    ) -> List[RightOfWayRule]:
        # 신호 교차로는 외부 신호 제어기가 통행을 중재
        if control == "signals":
            return []

        rules: List[RightOfWayRule] = []
        for i, conn_a in enumerate(connectors):
            for conn_b in connectors[i + 1:]:
                if not connectors_conflict(conn_a, conn_b):
                    continue
                rules.append(RightOfWayRule(
                    connector_a=conn_a.id,
                    connector_b=conn_b.id,
                    has_priority=self._resolver.resolve(movements[conn_a.id], movements[conn_b.id], control),
                ))
        return rules

    def _movement(
        self,
        connector: LaneConnector,
        in_lane: Lane,
        out_lane: Lane,
        center: geometry.Vec2,
        context: IntersectionContext,
    ) -> Movement:
        way = context.lane_ways.get(in_lane.id)
        arm_control = None
        on_roundabout = False
        on_priority_road = False
        if way is not None:
            node_ids = way.nodes if in_lane.dir == 1 else list(reversed(way.nodes))
            found = find_approach_control(node_ids, context.nodes, self._config.approach_control_search_m, in_lane.dir)
            arm_control = found.kind if found else None
            on_roundabout = way.tags.get("junction") == "roundabout"
            on_priority_road = "priority_road" in way.tags

        return Movement(
            connector_id=connector.id,
            turn_angle=turn_angle(in_lane, out_lane),
            arrival_heading=geometry.heading(in_lane.poly[-2], in_lane.poly[-1]),
            approach_bearing=geometry.heading(center, in_lane.poly[-2]),
            arm_control=arm_control,
            on_roundabout=on_roundabout,
            on_priority_road=on_priority_road,
        )

    @staticmethod
    def _area_polygon(incoming: Sequence[Lane], outgoing: Sequence[Lane]) -> Optional[Tuple[geometry.Vec2, ...]]:
        """진입 차로 끝점과 진출 차로 시작점의 볼록 껍질. 면적이 없으면 None."""
        points = [lane.poly[-1] for lane in incoming] + [lane.poly[0] for lane in outgoing]
        hull = MultiPoint(points).convex_hull
        if not isinstance(hull, Polygon) or hull.is_empty:
            return None
        return tuple((float(x), float(y)) for x, y in hull.exterior.coords)
