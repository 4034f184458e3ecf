"""
Service/road_modules/osm/tags.py

Overpass 원시 요소에서 차로 빌드에 필요한 정보를 추출하는 순수 함수 모음입니다.

누락되거나 해석할 수 없는 태그는 예외 없이 문서화된 기본값으로 해석합니다.
"""
from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .elements import OSMElement, OSMNode, OSMWay

CAR_HIGHWAYS: Tuple[str, ...] = (
    "motorway",
    "trunk",
    "primary",
    "secondary",
    "tertiary",
    "unclassified",
    "residential",
    "service",
    "living_street",
)

KMH_TO_MS = 0.27778
MPH_TO_MS = 0.44704
DEFAULT_MAX_SPEED_MS = 13.89  # 50 km/h

TURN_LANE_DELIMITER = "|"
TURN_VALUE_DELIMITER = ";"

_MAXSPEED_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(km/h|kmh|kph|mph)?", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)")


@dataclass(frozen=True)
class LaneInfo:
    """way 태그에서 해석한 차로 구성."""
    lanes: int
    lanes_forward: int
    lanes_backward: int
    is_oneway: bool
    turn_lanes: Optional[Tuple[str, ...]] = None
    turn_lanes_backward: Optional[Tuple[str, ...]] = None
    max_speed: Optional[float] = None
    width: Optional[float] = None


def extract_nodes_map(elements: Iterable[OSMElement]) -> Dict[int, OSMNode]:
    return {el.id: el for el in elements if isinstance(el, OSMNode)}


def extract_ways(elements: Iterable[OSMElement]) -> List[OSMWay]:
    return [el for el in elements if isinstance(el, OSMWay)]


def way_to_polyline(way: OSMWay, nodes: Dict[int, OSMNode]) -> List[Tuple[float, float]]:
    """way의 노드 id를 (lon, lat) 좌표로 해석합니다. 조회되지 않는 노드는 건너뜁니다."""
    return [(nodes[nid].lon, nodes[nid].lat) for nid in way.nodes if nid in nodes]


def is_car_way(way: OSMWay) -> bool:
    return way.tags.get("highway") in CAR_HIGHWAYS


def parse_max_speed(value: str) -> float:
    """
    maxspeed 태그를 m/s로 변환합니다.

    숫자만 있거나 km/h 계열 단위면 x0.27778, mph면 x0.44704를 적용하고,
    숫자를 찾지 못하면 13.89 m/s(50 km/h)를 반환합니다.
    """
    match = _MAXSPEED_RE.search(value or "")
    if not match:
        return DEFAULT_MAX_SPEED_MS

    speed = float(match.group(1))
    unit = (match.group(2) or "").lower()
    if unit == "mph":
        return speed * MPH_TO_MS
    return speed * KMH_TO_MS


def _parse_positive_int(value: Optional[str]) -> Optional[int]:
    match = _NUMBER_RE.match(value or "")
    if not match:
        return None
    parsed = int(float(match.group(1)))
    return parsed if parsed > 0 else None


def parse_positive_float(value: Optional[str]) -> Optional[float]:
    match = _NUMBER_RE.match(value or "")
    if not match:
        return None
    parsed = float(match.group(1))
    return parsed if parsed > 0 else None


def extract_lane_info(way: OSMWay, default_lane_count: int = 2) -> LaneInfo:
    """
    lanes, lanes:forward/backward, oneway, turn:lanes, maxspeed, width 태그로 차로 구성을 결정합니다.

    Args:
        way (OSMWay): 대상 도로 way
        default_lane_count (int): lanes 태그가 없거나 해석 불가할 때 사용할 총 차로 수

    Returns:
        LaneInfo: 방향별 차로 수와 선택 속성
    """
    tags = way.tags
    lanes = _parse_positive_int(tags.get("lanes")) or max(1, default_lane_count)
    is_oneway = tags.get("oneway") in ("yes", "1", "true")

    if is_oneway:
        lanes_forward, lanes_backward = lanes, 0
    else:
        explicit_fwd = _parse_positive_int(tags.get("lanes:forward"))
        explicit_bwd = _parse_positive_int(tags.get("lanes:backward"))
        if explicit_fwd is not None and explicit_bwd is not None:
            lanes_forward, lanes_backward = explicit_fwd, explicit_bwd
        elif explicit_fwd is not None:
            lanes_forward, lanes_backward = explicit_fwd, max(lanes - explicit_fwd, 1)
        elif explicit_bwd is not None:
            lanes_forward, lanes_backward = max(lanes - explicit_bwd, 1), explicit_bwd
        else:
            # 양방향 도로는 차로 수가 1이어도 방향마다 최소 1개 차로를 둔다
            lanes_forward = max(1, math.ceil(lanes / 2))
            lanes_backward = max(1, lanes // 2)

    turn_tag = tags.get("turn:lanes:forward") or tags.get("turn:lanes")
    turn_lanes = tuple(turn_tag.split(TURN_LANE_DELIMITER)) if turn_tag else None
    backward_tag = tags.get("turn:lanes:backward")
    turn_lanes_backward = tuple(backward_tag.split(TURN_LANE_DELIMITER)) if backward_tag else None

    max_speed = parse_max_speed(tags["maxspeed"]) if tags.get("maxspeed") else None
    width = parse_positive_float(tags.get("width"))

    return LaneInfo(
        lanes=lanes,
        lanes_forward=lanes_forward,
        lanes_backward=lanes_backward,
        is_oneway=is_oneway,
        turn_lanes=turn_lanes,
        turn_lanes_backward=turn_lanes_backward,
        max_speed=max_speed,
        width=width,
    )
