"""
Service/road_modules/builders/__init__.py

차로/교차로/보행 계층 생성기와 이를 조립하는 NetworkBuilder를 외부로 노출합니다.
"""
from .lane_builder import LaneBuilder
from .intersection_builder import IntersectionBuilder, IntersectionContext
from .priority import Movement, PriorityResolver
from .pedestrian_builder import PedestrianBuilder, PedestrianLayer
from .network_builder import NetworkBuilder

__all__ = [
    "LaneBuilder",
    "IntersectionBuilder",
    "IntersectionContext",
    "Movement",
    "PriorityResolver",
    "PedestrianBuilder",
    "PedestrianLayer",
    "NetworkBuilder",
]
