"""
Service/road_modules/model.py

시뮬레이션용 의미론적 도로망(차로 그래프 + 보행 네트워크 + 연결 링크) 엔티티를 정의합니다.

모든 엔티티는 생성 후 변경할 수 없는(frozen) pydantic 모델이며, 엔티티 간 참조는
소유 포인터가 아니라 스냅샷의 키 매핑에 대한 id 조회로만 이루어집니다.
JSON 키 이름은 렌더링/시뮬레이션 계층과 공유하는 교환 포맷(camelCase)을 따릅니다.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Annotated, Dict, Literal, Optional, Tuple, TypeVar

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, WrapSerializer, model_validator
from pydantic.alias_generators import to_camel

Vec2 = Tuple[float, float]  # (lon, lat)

LaneType = Literal["general", "bus", "bike", "tram"]
TurnType = Literal["left", "slight_left", "through", "slight_right", "right"]
ControlType = Literal["signals", "priority", "stop", "give_way", "roundabout", "uncontrolled"]
PriorityOutcome = Literal["A", "B", "yield", "signal"]
CrosswalkPriority = Literal["ped_over_cars", "cars_over_ped", "signal"]
PedEdgeKind = Literal["sidewalk", "footpath", "island"]

TURN_TYPES: Tuple[str, ...] = ("left", "slight_left", "through", "slight_right", "right")

_E = TypeVar("_E")


def _dump_mapping(value, handler):
    return handler(dict(value))


# 검증된 딕셔너리를 읽기 전용 뷰로 감싸며, 직렬화는 일반 딕셔너리와 동일
ReadOnlyMap = Annotated[
    Dict[str, _E],
    AfterValidator(MappingProxyType),
    WrapSerializer(_dump_mapping),
]


class _Entity(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class Lane(_Entity):
    """도로 한 방향의 주행 차로. poly는 도로 중심선에서 이미 오프셋된 차로 중심선입니다."""
    id: str
    poly: Tuple[Vec2, ...] = Field(min_length=2)
    width: float = Field(gt=0, description="차로 폭(m)")
    max_speed: float = Field(gt=0, description="제한 속도(m/s)")
    dir: Literal[1, -1]
    lane_type: LaneType = Field(alias="type")
    from_node: str
    to_node: str
    turn_hint: Optional[TurnType] = None
    stop_line: Optional[Tuple[Vec2, Vec2]] = None
    signal_group_id: Optional[str] = None


class LaneConnector(_Entity):
    """교차로를 통과하여 진입 차로와 진출 차로를 잇는 이동 경로."""
    id: str
    from_lane: str
    to_lane: str
    path: Tuple[Vec2, ...] = Field(min_length=2)
    allowed: bool


class RightOfWayRule(_Entity):
    connector_a: str
    connector_b: str
    has_priority: PriorityOutcome


class Intersection(_Entity):
    id: str
    polygon: Optional[Tuple[Vec2, ...]] = None
    incoming: Tuple[str, ...]
    outgoing: Tuple[str, ...]
    connectors: Tuple[str, ...]
    control: ControlType
    rules: Tuple[RightOfWayRule, ...] = ()


class Crosswalk(_Entity):
    id: str
    segment: Tuple[Vec2, Vec2]
    has_signals: bool
    priority: CrosswalkPriority
    near_intersection: Optional[str] = None


class PedNode(_Entity):
    id: str
    p: Vec2


class PedEdge(_Entity):
    id: str
    poly: Tuple[Vec2, ...] = Field(min_length=2)
    kind: PedEdgeKind
    width: Optional[float] = None
    from_node: str
    to_node: str


class CrossLinkSource(_Entity):
    kind: Literal["pedNode", "pedEdge"]
    ref: str


class CrossLinkTarget(_Entity):
    kind: Literal["crosswalk", "island", "stopRefuge"]
    ref: str


class CrossLink(_Entity):
    """보행 네트워크 노드/간선과 횡단보도를 잇는 링크."""
    id: str
    source: CrossLinkSource = Field(alias="from")
    target: CrossLinkTarget = Field(alias="to")
    crossing: Optional[str] = None


class Bounds(_Entity):
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float


class RoadNetwork(_Entity):
    """
    한 번의 빌드 결과인 불변 도로망 스냅샷입니다.

    생성(빌드 또는 JSON 로드) 시점에 키-id 일치 및 엔티티 간 id 참조 무결성을 검증하며,
    위반 시 pydantic ValidationError가 발생합니다.
    엔티티 컬렉션은 읽기 전용 매핑(MappingProxyType)이므로 항목 추가/삭제/교체가 불가능합니다.
    """
    lanes: ReadOnlyMap[Lane]
    lane_connectors: ReadOnlyMap[LaneConnector]
    intersections: ReadOnlyMap[Intersection]
    ped_nodes: ReadOnlyMap[PedNode] = Field(default_factory=dict, validate_default=True)
    ped_edges: ReadOnlyMap[PedEdge] = Field(default_factory=dict, validate_default=True)
    crosswalks: ReadOnlyMap[Crosswalk] = Field(default_factory=dict, validate_default=True)
    cross_links: ReadOnlyMap[CrossLink] = Field(default_factory=dict, validate_default=True)
    bounds: Bounds
    version: str
    generated_at: str
    source: Literal["osm", "custom"]

    @model_validator(mode="after")
    def _check_references(self) -> "RoadNetwork":
        for name in ("lanes", "lane_connectors", "intersections", "ped_nodes",
                     "ped_edges", "crosswalks", "cross_links"):
            for key, entity in getattr(self, name).items():
                if key != entity.id:
                    raise ValueError(f"{name}: 키 '{key}'와 엔티티 id '{entity.id}'가 일치하지 않습니다.")

        for connector in self.lane_connectors.values():
            for lane_id in (connector.from_lane, connector.to_lane):
                if lane_id not in self.lanes:
                    raise ValueError(f"커넥터 {connector.id}가 존재하지 않는 차로 {lane_id}를 참조합니다.")

        for intersection in self.intersections.values():
            for connector_id in intersection.connectors:
                if connector_id not in self.lane_connectors:
                    raise ValueError(
                        f"교차로 {intersection.id}가 존재하지 않는 커넥터 {connector_id}를 참조합니다."
                    )
            for lane_id in intersection.incoming + intersection.outgoing:
                if lane_id not in self.lanes:
                    raise ValueError(f"교차로 {intersection.id}가 존재하지 않는 차로 {lane_id}를 참조합니다.")
            for rule in intersection.rules:
                if rule.connector_a not in intersection.connectors or rule.connector_b not in intersection.connectors:
                    raise ValueError(f"교차로 {intersection.id}의 통행 우선 규칙이 외부 커넥터를 참조합니다.")

        for crosswalk in self.crosswalks.values():
            if crosswalk.near_intersection and crosswalk.near_intersection not in self.intersections:
                raise ValueError(f"횡단보도 {crosswalk.id}가 존재하지 않는 교차로를 참조합니다.")

        return self

    def stats(self) -> Dict[str, int]:
        return {
            "lanes": len(self.lanes),
            "connectors": len(self.lane_connectors),
            "intersections": len(self.intersections),
            "crosswalks": len(self.crosswalks),
        }
