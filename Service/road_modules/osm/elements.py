"""
Service/road_modules/osm/elements.py

Overpass API JSON 응답({version, generator, elements:[...]})의 요소 스키마입니다.
"""
from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _OSMBase(BaseModel):
    # Overpass가 붙이는 bounds/geometry/timestamp 등 부가 키는 무시
    model_config = ConfigDict(frozen=True, extra="ignore")


class OSMNode(_OSMBase):
    type: Literal["node"] = "node"
    id: int
    lat: float
    lon: float
    tags: Dict[str, str] = Field(default_factory=dict)


class OSMWay(_OSMBase):
    type: Literal["way"] = "way"
    id: int
    nodes: List[int] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)


class OSMMember(_OSMBase):
    type: Literal["node", "way", "relation"]
    ref: int
    role: str = ""


class OSMRelation(_OSMBase):
    type: Literal["relation"] = "relation"
    id: int
    members: List[OSMMember] = Field(default_factory=list)
    tags: Dict[str, str] = Field(default_factory=dict)


OSMElement = Annotated[Union[OSMNode, OSMWay, OSMRelation], Field(discriminator="type")]


class OverpassResponse(_OSMBase):
    version: float = 0.6
    generator: str = ""
    elements: List[OSMElement] = Field(default_factory=list)
