"""
Service/road_modules/__init__.py

도로망 빌드/조회 파이프라인 구성에 필요한 주요 모듈들을 외부로 노출합니다.
"""
from .builders import IntersectionBuilder, LaneBuilder, NetworkBuilder, PedestrianBuilder, PriorityResolver
from .geo_io import NetworkGeoIO
from .model import RoadNetwork
from .osm import OverpassClient
from .query import RoadNetworkManager
from .validator import NetworkValidator

__all__ = [
    "IntersectionBuilder",
    "LaneBuilder",
    "NetworkBuilder",
    "PedestrianBuilder",
    "PriorityResolver",
    "NetworkGeoIO",
    "RoadNetwork",
    "OverpassClient",
    "RoadNetworkManager",
    "NetworkValidator",
]
