"""
Service/schemas.py

서비스 진입점으로 들어오는 요청(조회 영역, 스냅샷 파일 경로)의 구조와 유효성을 검증하는 스키마 모듈입니다.
"""
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator


class BoundingBox(BaseModel):
    """
    지도 데이터를 조회할 위경도 사각 영역입니다.
    """
    south: float = Field(..., ge=-90.0, le=90.0, description="남쪽 위도")
    west: float = Field(..., ge=-180.0, le=180.0, description="서쪽 경도")
    north: float = Field(..., ge=-90.0, le=90.0, description="북쪽 위도")
    east: float = Field(..., ge=-180.0, le=180.0, description="동쪽 경도")

    @model_validator(mode="after")
    def validate_extent(self) -> "BoundingBox":
        if self.south >= self.north:
            raise ValueError(f"south({self.south})는 north({self.north})보다 작아야 합니다.")
        if self.west >= self.east:
            raise ValueError(f"west({self.west})는 east({self.east})보다 작아야 합니다.")
        return self

    def as_overpass(self) -> str:
        """Overpass QL 좌표 순서(south,west,north,east) 문자열."""
        return f"{self.south},{self.west},{self.north},{self.east}"


class SnapshotLoadRequest(BaseModel):
    """
    저장된 도로망 스냅샷 로드 요청을 위한 데이터 모델입니다.
    """
    file_path: Path = Field(..., description="읽어올 스냅샷 JSON 파일의 경로")

    @field_validator("file_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        if v.suffix.lower() != ".json":
            raise ValueError(f"지원하지 않는 파일 형식입니다. (.json 필요): {v.suffix}")
        return v

    @field_validator("file_path")
    @classmethod
    def validate_existence(cls, v: Path) -> Path:
        resolved_path = v.resolve()
        if not resolved_path.is_file():
            raise ValueError(f"파일을 찾을 수 없습니다: {resolved_path}")
        return resolved_path


class SnapshotSaveRequest(BaseModel):
    """
    도로망 스냅샷 저장 요청을 위한 데이터 모델입니다.
    """
    output_path: Path = Field(..., description="스냅샷을 저장할 파일 경로")

    @field_validator("output_path")
    @classmethod
    def validate_extension(cls, v: Path) -> Path:
        if v.suffix.lower() != ".json":
            raise ValueError(f"저장 파일 형식은 .json이어야 합니다: {v.suffix}")
        return v.resolve()
