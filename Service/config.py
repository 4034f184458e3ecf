"""
Service/config.py

도로망 빌드 파이프라인의 동작을 제어하는 설정 모듈입니다.
"""
from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RoadNetworkConfig(BaseSettings):
    """
    Overpass 조회, 차로/교차로 생성, 조회 기본값 등 도로망 파이프라인의 핵심 파라미터를 정의하는 설정 클래스입니다.
    """

    overpass_url: str = Field(
        default="https://overpass-api.de/api/interpreter",
        description="Overpass API interpreter 엔드포인트"
    )

    overpass_timeout_s: int = Field(
        default=30,
        gt=0,
        description="Overpass 쿼리 및 HTTP 요청 제한 시간(초)"
    )

    default_south: float = Field(default=50.0, ge=-90.0, le=90.0, description="기본 영역 남쪽 위도")
    default_west: float = Field(default=14.2, ge=-180.0, le=180.0, description="기본 영역 서쪽 경도")
    default_north: float = Field(default=50.15, ge=-90.0, le=90.0, description="기본 영역 북쪽 위도")
    default_east: float = Field(default=14.6, ge=-180.0, le=180.0, description="기본 영역 동쪽 경도")

    default_lane_width_m: float = Field(
        default=3.25,
        gt=0.0,
        description="width 태그가 없을 때 사용할 차로 폭(m)"
    )

    default_lane_count: int = Field(
        default=2,
        ge=1,
        description="lanes 태그가 없을 때 가정할 총 차로 수"
    )

    junction_min_degree: int = Field(
        default=3,
        ge=3,
        description="교차로 노드로 간주할 최소 공유 way 수"
    )

    max_turn_angle_deg: float = Field(
        default=135.0,
        gt=0.0,
        le=180.0,
        description="회전 가능으로 간주할 최대 진행 방향 변화(도). 이를 넘으면 U턴으로 보고 제외"
    )

    approach_control_search_m: float = Field(
        default=30.0,
        ge=0.0,
        description="진입로를 따라 정지/양보/신호 노드를 탐색할 최대 거리(m)"
    )

    crosswalk_intersection_radius_m: float = Field(
        default=30.0,
        ge=0.0,
        description="횡단보도를 인접 교차로에 연결할 최대 거리(m)"
    )

    nearest_lane_max_distance_m: float = Field(
        default=50.0,
        gt=0.0,
        description="최근접 차로 조회의 기본 탐색 반경(m)"
    )

    schema_version: str = Field(default="1.0.0", description="스냅샷 스키마 버전")

    source_tag: Literal["osm", "custom"] = Field(default="osm", description="스냅샷 데이터 출처 태그")

    debug_export_intermediate: bool = Field(
        default=False,
        description="디버그 모드: 차로/커넥터/횡단보도 레이어를 GeoJSON으로 함께 저장 여부"
    )

    log_retention_days: int = Field(
        default=3,
        ge=0,
        description="로그 파일 보관 기간(일)"
    )

    model_config = SettingsConfigDict(
        env_prefix="ROADNET_",
        env_file=".env",
        env_file_encoding="utf-8",
    )
