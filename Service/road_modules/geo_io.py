"""
Service/road_modules/geo_io.py

디버그 확인용으로 도로망 스냅샷의 차로/커넥터/횡단보도 레이어를 GeoJSON으로 내보내는 모듈입니다.
"""
from __future__ import annotations

from pathlib import Path
from typing import Dict, List

import geopandas as gpd
from shapely.geometry import LineString

from Common.log import Log
from Function.decorators import log_execution_time, safe_run
from Service.road_modules.model import RoadNetwork

WGS84 = "EPSG:4326"


def lanes_frame(network: RoadNetwork) -> gpd.GeoDataFrame:
    rows = [
        {
            "id": lane.id,
            "type": lane.lane_type,
            "dir": lane.dir,
            "width": lane.width,
            "max_speed": lane.max_speed,
            "turn_hint": lane.turn_hint,
            "signal": lane.signal_group_id,
            "geometry": LineString(lane.poly),
        }
        for lane in network.lanes.values()
    ]
    return _frame(rows)


def connectors_frame(network: RoadNetwork) -> gpd.GeoDataFrame:
    rows = [
        {
            "id": c.id,
            "from_lane": c.from_lane,
            "to_lane": c.to_lane,
            "allowed": c.allowed,
            "geometry": LineString(c.path),
        }
        for c in network.lane_connectors.values()
    ]
    return _frame(rows)


def crosswalks_frame(network: RoadNetwork) -> gpd.GeoDataFrame:
    # 점 횡단보도는 길이 0 선분으로 저장
    rows = [
        {
            "id": cw.id,
            "signals": cw.has_signals,
            "priority": cw.priority,
            "near": cw.near_intersection,
            "geometry": LineString(cw.segment),
        }
        for cw in network.crosswalks.values()
    ]
    return _frame(rows)


def _frame(rows: List[dict]) -> gpd.GeoDataFrame:
    if not rows:
        return gpd.GeoDataFrame(geometry=[], crs=WGS84)
    return gpd.GeoDataFrame(rows, geometry="geometry", crs=WGS84)


class NetworkGeoIO:
    """
    스냅샷 레이어를 GeoDataFrame으로 변환하여 파일로 저장합니다.
    """

    def __init__(self, logger: Log):
        self._logger = logger

    @safe_run
    @log_execution_time
    def export_layers(self, network: RoadNetwork, output_dir: Path, stem: str) -> Dict[str, Path]:
        """
        Args:
            network (RoadNetwork): 내보낼 스냅샷
            output_dir (Path): 저장 폴더
            stem (str): 파일 이름 접두어

        Returns:
            Dict[str, Path]: 레이어 이름 -> 저장된 파일 경로 (비어 있는 레이어는 제외)
        """
        output_dir = Path(output_dir).expanduser().resolve()
        output_dir.mkdir(parents=True, exist_ok=True)

        layers = {
            "lanes": lanes_frame(network),
            "connectors": connectors_frame(network),
            "crosswalks": crosswalks_frame(network),
        }

        written: Dict[str, Path] = {}
        for name, gdf in layers.items():
            if gdf.empty:
                self._logger.log(f"[Debug] {name} 레이어가 비어 있어 저장을 건너뜁니다.", level="DEBUG")
                continue
            layer_path = output_dir / f"{stem}_{name}.geojson"
            try:
                gdf.to_file(layer_path, driver="GeoJSON")
            except Exception as e:
                self._logger.log(f"[Debug] 저장 실패: {layer_path.name} - {e}", level="WARNING")
                continue
            self._logger.log(f"[Debug] 저장 완료: {layer_path.name} ({len(gdf)}개)", level="INFO")
            written[name] = layer_path

        return written
