"""
Service/container.py

애플리케이션의 모든 객체를 생성하고 의존성을 주입하여 실행 가능한 상태로 조립합니다.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from Common.log import Log
from Function.log_cleanup import clean_old_logs

from Service.config import RoadNetworkConfig
from Service.road_modules import (
    IntersectionBuilder,
    LaneBuilder,
    NetworkBuilder,
    NetworkGeoIO,
    NetworkValidator,
    OverpassClient,
    PedestrianBuilder,
    PriorityResolver,
)
from Service.network_service import RoadNetworkService


@dataclass(frozen=True)
class BuiltApp:
    """조립이 완료된 애플리케이션 서비스 객체 묶음입니다."""
    config: RoadNetworkConfig
    network_service: RoadNetworkService


def build_app(logger: Log, config: Optional[RoadNetworkConfig] = None) -> BuiltApp:
    """
    설정 로드, 오래된 로그 정리 및 모든 내부 모듈의 의존성을 주입하여 BuiltApp 객체를 생성합니다.
    """
    road_config = config or RoadNetworkConfig()

    log_dir = getattr(logger, "log_dir", None)
    if log_dir:
        clean_old_logs(log_dir, logger, retention_days=road_config.log_retention_days)

    source = OverpassClient(logger, road_config)

    lane_builder = LaneBuilder(logger, road_config)
    intersection_builder = IntersectionBuilder(logger, road_config, resolver=PriorityResolver())
    pedestrian_builder = PedestrianBuilder(logger, road_config)

    network_builder = NetworkBuilder(
        logger=logger,
        config=road_config,
        source=source,
        lane_builder=lane_builder,
        intersection_builder=intersection_builder,
        pedestrian_builder=pedestrian_builder,
    )

    validator = NetworkValidator(logger)
    geo_io = NetworkGeoIO(logger)

    network_service = RoadNetworkService(
        logger=logger,
        builder=network_builder,
        validator=validator,
        geo_io=geo_io,
        config=road_config,
    )

    return BuiltApp(config=road_config, network_service=network_service)
