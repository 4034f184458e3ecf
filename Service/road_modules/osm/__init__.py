"""
Service/road_modules/osm/__init__.py

Overpass 데이터 소스 어댑터와 원시 요소 해석 함수들을 외부로 노출합니다.
"""
from .elements import OSMElement, OSMMember, OSMNode, OSMRelation, OSMWay, OverpassResponse
from .overpass import OverpassClient
from .tags import (
    CAR_HIGHWAYS,
    LaneInfo,
    extract_lane_info,
    extract_nodes_map,
    extract_ways,
    is_car_way,
    parse_max_speed,
    way_to_polyline,
)

__all__ = [
    "OSMElement",
    "OSMMember",
    "OSMNode",
    "OSMRelation",
    "OSMWay",
    "OverpassResponse",
    "OverpassClient",
    "CAR_HIGHWAYS",
    "LaneInfo",
    "extract_lane_info",
    "extract_nodes_map",
    "extract_ways",
    "is_car_way",
    "parse_max_speed",
    "way_to_polyline",
]
