"""
Service/road_modules/builders/pedestrian_builder.py

횡단보도, 보도/보행로 간선과 노드, 그리고 보행 노드-횡단보도 연결 링크로 이루어진 단순화된 보행 계층을 생성합니다.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

from Common.log import Log
from Service.config import RoadNetworkConfig
from Service.road_modules import geometry
from Service.road_modules.model import CrossLink, CrossLinkSource, CrossLinkTarget, Crosswalk, PedEdge, PedNode
from Service.road_modules.osm import OSMNode, OSMWay, way_to_polyline
from Service.road_modules.osm.tags import parse_positive_float

PEDESTRIAN_HIGHWAYS = ("footway", "path", "pedestrian", "steps")


def is_crossing_way(way: OSMWay) -> bool:
    return way.tags.get("highway") == "footway" and way.tags.get("footway") == "crossing"


def is_pedestrian_way(way: OSMWay) -> bool:
    if is_crossing_way(way):
        return False
    return way.tags.get("highway") in PEDESTRIAN_HIGHWAYS or way.tags.get("footway") == "sidewalk"


def crossing_signals(tags: Dict[str, str]) -> bool:
    return tags.get("crossing") == "traffic_signals" or tags.get("crossing:signals") == "yes"


def crossing_priority(tags: Dict[str, str]) -> str:
    if crossing_signals(tags):
        return "signal"
    if tags.get("crossing") == "uncontrolled":
        return "cars_over_ped"
    return "ped_over_cars"


def ped_node_key(osm_node_id: int) -> str:
    return f"ped_{osm_node_id}"


@dataclass
class PedestrianLayer:
    ped_nodes: Dict[str, PedNode] = field(default_factory=dict)
    ped_edges: Dict[str, PedEdge] = field(default_factory=dict)
    crosswalks: Dict[str, Crosswalk] = field(default_factory=dict)
    cross_links: Dict[str, CrossLink] = field(default_factory=dict)


class PedestrianBuilder:
    """
    횡단보도 노드/way, 보도 way로부터 보행 계층을 만들고 각 횡단보도를 가까운 교차로에 연결합니다.
    """

    def __init__(self, logger: Log, config: RoadNetworkConfig):
        self._logger = logger
        self._config = config

    def execute(
        self,
        nodes: Dict[int, OSMNode],
        ways: Iterable[OSMWay],
        intersection_centers: Dict[str, geometry.Vec2],
    ) -> PedestrianLayer:
        """
        Args:
            nodes (Dict[int, OSMNode]): 노드 조회 테이블 (읽기 전용)
            ways (Iterable[OSMWay]): 응답의 전체 way
            intersection_centers (Dict[str, Vec2]): 교차로 id -> 중심 좌표

        Returns:
            PedestrianLayer: 보행 노드/간선/횡단보도/연결 링크
        """
        layer = PedestrianLayer()
        ways = list(ways)

        for way in ways:
            if is_pedestrian_way(way):
                self._add_ped_edge(layer, way, nodes)

        crossing_ways = [way for way in ways if is_crossing_way(way)]
        pedestrian_node_ids = {nid for way in ways if is_pedestrian_way(way) or is_crossing_way(way) for nid in way.nodes}

        for node in sorted(nodes.values(), key=lambda n: n.id):
            if node.tags.get("highway") != "crossing":
                continue
            crosswalk = Crosswalk(
                id=f"crosswalk_{node.id}",
                segment=((node.lon, node.lat), (node.lon, node.lat)),
                has_signals=crossing_signals(node.tags),
                priority=crossing_priority(node.tags),
                near_intersection=self._nearest_intersection((node.lon, node.lat), intersection_centers),
            )
            layer.crosswalks[crosswalk.id] = crosswalk
            if node.id in pedestrian_node_ids:
                self._link(layer, self._ensure_ped_node(layer, node), crosswalk.id)

        for way in crossing_ways:
            resolved = [nid for nid in way.nodes if nid in nodes]
            if len(resolved) < 2:
                continue
            start, end = nodes[resolved[0]], nodes[resolved[-1]]
            tags = dict(way.tags)
            # 횡단 way 자체에 신호 태그가 없으면 경로상의 횡단 노드 태그를 따른다
            for nid in resolved:
                if not tags.get("crossing") and nodes[nid].tags.get("crossing"):
                    tags["crossing"] = nodes[nid].tags["crossing"]

            segment = ((start.lon, start.lat), (end.lon, end.lat))
            midpoint = ((start.lon + end.lon) / 2, (start.lat + end.lat) / 2)
            crosswalk = Crosswalk(
                id=f"crosswalk_way_{way.id}",
                segment=segment,
                has_signals=crossing_signals(tags),
                priority=crossing_priority(tags),
                near_intersection=self._nearest_intersection(midpoint, intersection_centers),
            )
            layer.crosswalks[crosswalk.id] = crosswalk
            for endpoint in (start, end):
                self._link(layer, self._ensure_ped_node(layer, endpoint), crosswalk.id)

        self._logger.log(
            f"[Pedestrian] 횡단보도={len(layer.crosswalks)} 보행간선={len(layer.ped_edges)} "
            f"보행노드={len(layer.ped_nodes)} 연결링크={len(layer.cross_links)}",
            level="INFO",
        )
        return layer

    def _add_ped_edge(self, layer: PedestrianLayer, way: OSMWay, nodes: Dict[int, OSMNode]) -> None:
        poly = way_to_polyline(way, nodes)
        if len(poly) < 2:
            return
        resolved = [nid for nid in way.nodes if nid in nodes]
        first = self._ensure_ped_node(layer, nodes[resolved[0]])
        last = self._ensure_ped_node(layer, nodes[resolved[-1]])

        footway = way.tags.get("footway")
        if footway == "sidewalk":
            kind = "sidewalk"
        elif footway == "traffic_island":
            kind = "island"
        else:
            kind = "footpath"

        edge = PedEdge(
            id=f"ped_edge_{way.id}",
            poly=tuple(poly),
            kind=kind,
            width=parse_positive_float(way.tags.get("width")),
            from_node=first,
            to_node=last,
        )
        layer.ped_edges[edge.id] = edge

    @staticmethod
    def _ensure_ped_node(layer: PedestrianLayer, node: OSMNode) -> str:
        key = ped_node_key(node.id)
        if key not in layer.ped_nodes:
            layer.ped_nodes[key] = PedNode(id=key, p=(node.lon, node.lat))
        return key

    @staticmethod
    def _link(layer: PedestrianLayer, ped_node_id: str, crosswalk_id: str) -> None:
        link_id = f"crosslink_{ped_node_id}_{crosswalk_id}"
        layer.cross_links[link_id] = CrossLink(
            id=link_id,
            source=CrossLinkSource(kind="pedNode", ref=ped_node_id),
            target=CrossLinkTarget(kind="crosswalk", ref=crosswalk_id),
            crossing=crosswalk_id,
        )

    def _nearest_intersection(self, point: geometry.Vec2, centers: Dict[str, geometry.Vec2]) -> Optional[str]:
        best: Tuple[Optional[str], float] = (None, self._config.crosswalk_intersection_radius_m)
        for intersection_id, center in centers.items():
            dist = geometry.distance_m(point, center)
            if dist <= best[1]:
                best = (intersection_id, dist)
        return best[0]
