"""
Service/road_modules/errors.py

도로망 빌드/조회 과정에서 호출자에게 전파되는 예외 계층을 정의합니다.
"""


class RoadNetworkError(Exception):
    """도로망 서브시스템 예외의 최상위 클래스입니다."""


class SourceError(RoadNetworkError):
    """지도 데이터 소스(Overpass) 조회 실패의 공통 부모 클래스입니다."""


class SourceUnavailable(SourceError):
    """네트워크 오류, 2xx 이외의 응답, 해석 불가한 응답 본문."""


class SourceTimeout(SourceError):
    """조회가 제한 시간을 초과했습니다."""


class SerializationError(RoadNetworkError):
    """저장된 스냅샷이 손상되었거나 스키마와 호환되지 않습니다."""
