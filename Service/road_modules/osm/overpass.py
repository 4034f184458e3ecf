"""
Service/road_modules/osm/overpass.py

지정한 위경도 영역의 도로/교통통제/보행 요소를 Overpass API로 한 번에 조회하는 데이터 소스 어댑터입니다.
"""
from __future__ import annotations

from typing import Optional

import requests
from pydantic import ValidationError

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.config import RoadNetworkConfig
from Service.schemas import BoundingBox
from Service.road_modules.errors import SourceTimeout, SourceUnavailable

from .elements import OverpassResponse
from .tags import CAR_HIGHWAYS


class OverpassClient:
    """
    Overpass QL 쿼리를 form-encoded POST로 전송하고 응답을 OverpassResponse로 검증합니다.
    재시도는 하지 않으며, 한 번의 실패는 한 번의 예외로 호출자에게 보고됩니다.
    """

    def __init__(self, logger: Log, config: RoadNetworkConfig):
        self._logger = logger
        self._config = config

    def default_bbox(self) -> BoundingBox:
        return BoundingBox(
            south=self._config.default_south,
            west=self._config.default_west,
            north=self._config.default_north,
            east=self._config.default_east,
        )

    def build_query(self, bbox: BoundingBox) -> str:
        """도로, 신호/정지/양보 노드, 횡단보도, 보도, 회전교차로, 우선도로를 요청하는 Overpass QL을 생성합니다."""
        box = bbox.as_overpass()
        highways = "|".join(CAR_HIGHWAYS)
        return "\n".join([
            f"[out:json][timeout:{self._config.overpass_timeout_s}];",
            "(",
            f'  way[highway~"^({highways})$"]({box});',
            f"  node[highway=traffic_signals]({box});",
            f'  node[highway~"^(stop|give_way)$"]({box});',
            f"  node[highway=crossing]({box});",
            f"  way[highway=footway][footway=crossing]({box});",
            f"  way[highway=footway]({box});",
            f"  way[footway=sidewalk]({box});",
            f"  way[junction=roundabout]({box});",
            f"  way[priority_road]({box});",
            ");",
            "(._;>;);",
            "out body;",
        ])

    @safe_run
    @log_execution_time
    def fetch_road_network(self, bbox: Optional[BoundingBox] = None) -> OverpassResponse:
        """
        영역 내 원시 요소를 조회합니다.

        Args:
            bbox (Optional[BoundingBox]): 조회 영역. None이면 설정의 기본 영역을 사용

        Returns:
            OverpassResponse: 검증된 원시 요소 집합

        Raises:
            SourceTimeout: 요청이 제한 시간을 초과한 경우
            SourceUnavailable: 네트워크 오류, 2xx 이외의 응답, 해석 불가한 응답 본문
        """
        bbox = bbox or self.default_bbox()
        query = self.build_query(bbox)
        timeout = self._config.overpass_timeout_s

        self._logger.log(f"[Overpass] 조회 요청: bbox=({bbox.as_overpass()}) timeout={timeout}s", level="INFO")

        try:
            response = requests.post(
                self._config.overpass_url,
                data={"data": query},
                timeout=timeout,
            )
        except requests.Timeout as exc:
            raise SourceTimeout(f"Overpass 조회 시간 초과 ({timeout}s)") from exc
        except requests.RequestException as exc:
            raise SourceUnavailable(f"Overpass 연결 실패: {exc}") from exc

        if not 200 <= response.status_code < 300:
            raise SourceUnavailable(f"Overpass API 오류: {response.status_code} {response.reason}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceUnavailable("Overpass 응답이 JSON 형식이 아닙니다.") from exc

        try:
            result = OverpassResponse.model_validate(payload)
        except ValidationError as exc:
            raise SourceUnavailable(f"Overpass 응답 구조가 올바르지 않습니다: {exc.error_count()}개 오류") from exc

        self._logger.log(f"[Overpass] 수신 요소 수: {len(result.elements)}", level="INFO")
        return result
