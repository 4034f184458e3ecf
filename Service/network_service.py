"""
Service/network_service.py

도로망 빌드, 품질 검증, 스냅샷 저장/로드 공정을 제어하는 서비스 모듈입니다.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Function.utils import get_runtime_base_path
from Service.config import RoadNetworkConfig
from Service.schemas import BoundingBox, SnapshotLoadRequest, SnapshotSaveRequest
from Service.road_modules import NetworkBuilder, NetworkGeoIO, NetworkValidator, RoadNetworkManager


class RoadNetworkService:
    """
    도로망 파이프라인의 실행을 관리하는 메인 서비스 클래스입니다.

    빌드마다 새 RoadNetworkManager를 반환하며, 이전에 반환한 관리자와 그 스냅샷은 건드리지 않습니다.
    """

    def __init__(
        self,
        logger: Log,
        builder: NetworkBuilder,
        validator: NetworkValidator,
        geo_io: NetworkGeoIO,
        config: RoadNetworkConfig,
    ):
        self._logger = logger
        self._builder = builder
        self._validator = validator
        self._geo_io = geo_io
        self._config = config

    @safe_run
    @log_execution_time
    def build_network(self, bbox: Optional[BoundingBox] = None) -> RoadNetworkManager:
        """
        영역의 도로망을 빌드하고 QA 결과를 기록한 뒤 새 조회 관리자를 반환합니다.
        데이터 소스 예외(SourceUnavailable, SourceTimeout)는 그대로 전파됩니다.
        """
        network = self._builder.build(bbox)
        self._validator.execute(network)

        if self._config.debug_export_intermediate:
            output_dir = get_runtime_base_path() / "Result"
            self._geo_io.export_layers(network, output_dir, f"roadnet_{network.generated_at[:10]}")

        return RoadNetworkManager(network, self._config.nearest_lane_max_distance_m)

    @safe_run
    @log_execution_time
    def save_network(self, manager: RoadNetworkManager, output_path: Union[str, Path]) -> Path:
        request = SnapshotSaveRequest(output_path=Path(output_path))
        saved = manager.save(request.output_path)

        if self._config.debug_export_intermediate:
            self._geo_io.export_layers(manager.network, saved.parent, saved.stem)

        self._logger.log(f"[Network] 스냅샷 저장 완료: {saved}", level="INFO")
        return saved

    @safe_run
    @log_execution_time
    def load_network(self, file_path: Union[str, Path]) -> RoadNetworkManager:
        """
        저장된 스냅샷을 읽어 조회 관리자를 생성합니다.

        Raises:
            pydantic.ValidationError: 경로가 .json이 아니거나 파일이 없는 경우
            SerializationError: 파일 내용이 손상되었거나 스키마와 맞지 않는 경우
        """
        request = SnapshotLoadRequest(file_path=Path(file_path))
        manager = RoadNetworkManager.load(request.file_path, self._config.nearest_lane_max_distance_m)

        stats = manager.get_metadata()["stats"]
        self._logger.log(f"[Network] 스냅샷 로드 완료: {request.file_path.name} {stats}", level="INFO")
        return manager
