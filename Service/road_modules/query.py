"""
Service/road_modules/query.py

빌드된 도로망 스냅샷 하나를 보유하고 공간/위상 조회와 JSON 직렬화를 제공하는 조회 관리자 모듈입니다.

관리자는 스냅샷을 읽기만 하므로 같은 스냅샷에 대한 동시 조회에 잠금이 필요하지 않습니다.
재빌드는 새 관리자를 만들며 기존 관리자가 보유한 스냅샷에는 영향을 주지 않습니다.
"""
from __future__ import annotations

import math
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pydantic import ValidationError

from Service.road_modules import geometry
from Service.road_modules.errors import SerializationError
from Service.road_modules.model import Bounds, Intersection, Lane, LaneConnector, RoadNetwork

DEFAULT_MAX_DISTANCE_M = 50.0


class RoadNetworkManager:
    """불변 스냅샷에 대한 조회 인터페이스."""

    def __init__(self, network: RoadNetwork, default_max_distance: float = DEFAULT_MAX_DISTANCE_M):
        self._network = network
        self._default_max_distance = default_max_distance
        self._connector_owner: Dict[str, str] = {
            connector_id: intersection.id
            for intersection in network.intersections.values()
            for connector_id in intersection.connectors
        }
        self._connector_by_lanes: Dict[Tuple[str, str], LaneConnector] = {
            (c.from_lane, c.to_lane): c for c in network.lane_connectors.values()
        }

    @property
    def network(self) -> RoadNetwork:
        return self._network

    def find_nearest_lane(
        self, point: geometry.Vec2, max_distance: Optional[float] = None
    ) -> Optional[Tuple[Lane, float]]:
        """
        모든 차로를 선형 탐색하여 max_distance(m) 이내의 가장 가까운 차로와 거리를 반환합니다.

        Args:
            point (Vec2): (lon, lat) 조회 지점
            max_distance (Optional[float]): 허용 최대 거리(m). None이면 관리자 생성 시 지정한 기본값

        Returns:
            Optional[Tuple[Lane, float]]: (차로, 거리 m). 범위 내 차로가 없으면 None
        """
        best: Optional[Lane] = None
        best_distance = math.inf

        for lane in self._network.lanes.values():
            dist = geometry.distance_to_polyline_m(point, lane.poly)
            # 동일 거리면 먼저 만난 차로 유지
            if dist < best_distance:
                best, best_distance = lane, dist

        limit = self._default_max_distance if max_distance is None else max_distance
        if best is None or best_distance > limit:
            return None
        return best, best_distance

    def is_movement_allowed(self, from_lane: str, to_lane: str) -> bool:
        """두 차로를 잇는 커넥터의 allowed 값. 커넥터가 없으면 False."""
        connector = self._connector_by_lanes.get((from_lane, to_lane))
        return connector.allowed if connector is not None else False

    def get_conflicting_movements(self, connector_id: str) -> List[str]:
        """커넥터가 속한 교차로의 통행 우선 규칙에서 짝지어진 상대 커넥터 id 목록."""
        intersection_id = self._connector_owner.get(connector_id)
        if intersection_id is None:
            return []

        conflicts: List[str] = []
        for rule in self._network.intersections[intersection_id].rules:
            if rule.connector_a == connector_id:
                conflicts.append(rule.connector_b)
            elif rule.connector_b == connector_id:
                conflicts.append(rule.connector_a)
        return conflicts

    def get_intersection_connectors(self, intersection_id: str) -> List[LaneConnector]:
        intersection: Optional[Intersection] = self._network.intersections.get(intersection_id)
        if intersection is None:
            return []
        return [self._network.lane_connectors[cid] for cid in intersection.connectors]

    def get_lane(self, lane_id: str) -> Optional[Lane]:
        return self._network.lanes.get(lane_id)

    def get_bounds(self) -> Bounds:
        return self._network.bounds

    def get_metadata(self) -> Dict[str, object]:
        return {
            "version": self._network.version,
            "generatedAt": self._network.generated_at,
            "source": self._network.source,
            "stats": self._network.stats(),
        }

    def to_json(self) -> str:
        """camelCase 키의 정규 JSON 문자열. 값이 없는 선택 필드는 생략합니다."""
        return self._network.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @classmethod
    def from_json(
        cls, text: Union[str, bytes], default_max_distance: float = DEFAULT_MAX_DISTANCE_M
    ) -> "RoadNetworkManager":
        """
        JSON 문자열에서 스냅샷을 복원합니다. 손상되었거나 참조 무결성을 위반한 데이터는 SerializationError로 변환합니다.
        """
        try:
            network = RoadNetwork.model_validate_json(text)
        except ValidationError as exc:
            raise SerializationError(f"스냅샷 검증 실패: {exc.error_count()}개 오류\n{exc}") from exc
        except ValueError as exc:
            raise SerializationError(f"스냅샷 해석 실패: {exc}") from exc
        return cls(network, default_max_distance)

    def save(self, path: Union[str, Path]) -> Path:
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.to_json(), encoding="utf-8")
        return target

    @classmethod
    def load(
        cls, path: Union[str, Path], default_max_distance: float = DEFAULT_MAX_DISTANCE_M
    ) -> "RoadNetworkManager":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise SerializationError(f"스냅샷 파일 인코딩 오류: {path}") from exc
        return cls.from_json(text, default_max_distance)
