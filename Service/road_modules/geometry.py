"""
Service/road_modules/geometry.py

경위도(lon, lat) 좌표와 미터 단위 연산을 잇는 평면 기하 유틸리티 모듈입니다.

차로 폭/오프셋/거리는 미터 단위이므로, 기준 위도에서의 등장방형(equirectangular) 근사로
국소 평면 좌표계(x: 동쪽, y: 북쪽, 단위 m)로 변환한 뒤 계산하고 다시 경위도로 되돌립니다.
수 km 범위의 추출 영역에서는 이 근사 오차가 차로 폭에 비해 무시할 수준입니다.
"""
from __future__ import annotations

import math
from typing import List, Sequence, Tuple

from shapely.geometry import LineString, Point

Vec2 = Tuple[float, float]

METERS_PER_DEGREE = 111_320.0
FALLBACK_NORMAL: Vec2 = (0.0, 1.0)


def _scale_x(ref_lat: float) -> float:
    return METERS_PER_DEGREE * math.cos(math.radians(ref_lat))


def to_local(points: Sequence[Vec2], ref_lat: float) -> List[Vec2]:
    sx = _scale_x(ref_lat)
    return [(lon * sx, lat * METERS_PER_DEGREE) for lon, lat in points]


def to_geo(points: Sequence[Vec2], ref_lat: float) -> List[Vec2]:
    sx = _scale_x(ref_lat)
    return [(x / sx, y / METERS_PER_DEGREE) for x, y in points]


def segment_normal(start: Vec2, end: Vec2) -> Vec2:
    """
    선분 진행 방향을 시계 방향으로 90도 회전한 단위 법선(진행 방향 기준 오른쪽)을 반환합니다.
    길이가 0인 선분은 예외 대신 고정 법선 (0, 1)을 반환합니다.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length = math.hypot(dx, dy)
    if length == 0:
        return FALLBACK_NORMAL
    return dy / length, -dx / length


def vertex_normals(points: Sequence[Vec2]) -> List[Vec2]:
    """각 정점의 법선: 끝점은 인접 선분 법선, 내부 점은 양쪽 선분 법선의 평균을 재정규화합니다."""
    count = len(points)
    normals: List[Vec2] = []
    for i in range(count):
        if i == 0:
            normals.append(segment_normal(points[0], points[1]))
            continue
        if i == count - 1:
            normals.append(segment_normal(points[i - 1], points[i]))
            continue

        n1 = segment_normal(points[i - 1], points[i])
        n2 = segment_normal(points[i], points[i + 1])
        ax, ay = (n1[0] + n2[0]) / 2, (n1[1] + n2[1]) / 2
        length = math.hypot(ax, ay)
        # 180도 꺾인 정점은 평균이 0이 되므로 진입 선분 법선을 사용
        normals.append((ax / length, ay / length) if length > 0 else n1)
    return normals


def offset_polyline(polyline: Sequence[Vec2], offset_m: float) -> List[Vec2]:
    """
    경위도 폴리라인을 진행 방향 오른쪽으로 offset_m 만큼 평행 이동합니다(음수면 왼쪽).
    입력 점 개수를 그대로 유지합니다.
    """
    if len(polyline) < 2:
        return list(polyline)

    ref_lat = polyline[0][1]
    local = to_local(polyline, ref_lat)
    normals = vertex_normals(local)
    shifted = [(x + nx_ * offset_m, y + ny_ * offset_m) for (x, y), (nx_, ny_) in zip(local, normals)]
    return to_geo(shifted, ref_lat)


def heading(start: Vec2, end: Vec2) -> float:
    """두 경위도 점 사이의 진행 방위각(rad, 동쪽 0, 반시계 양수)."""
    sx = _scale_x((start[1] + end[1]) / 2)
    return math.atan2((end[1] - start[1]) * METERS_PER_DEGREE, (end[0] - start[0]) * sx)


def normalize_angle(angle: float) -> float:
    """각도를 [-pi, pi] 범위로 정규화합니다."""
    while angle > math.pi:
        angle -= 2 * math.pi
    while angle < -math.pi:
        angle += 2 * math.pi
    return angle


def distance_to_polyline_m(point: Vec2, polyline: Sequence[Vec2]) -> float:
    """점과 폴리라인 사이 최소 거리(m). 각 선분에 대해 투영을 선분 범위로 제한한 거리 중 최솟값입니다."""
    if not polyline:
        return math.inf

    ref_lat = point[1]
    px, py = to_local([point], ref_lat)[0]
    local = to_local(polyline, ref_lat)
    if len(local) == 1:
        return math.hypot(px - local[0][0], py - local[0][1])
    return float(LineString(local).distance(Point(px, py)))


def distance_m(a: Vec2, b: Vec2) -> float:
    return distance_to_polyline_m(a, [b])


def perpendicular_segment(polyline: Sequence[Vec2], length_m: float) -> Tuple[Vec2, Vec2]:
    """폴리라인 마지막 점을 중심으로 마지막 선분에 수직인 길이 length_m의 선분(정지선)."""
    ref_lat = polyline[-1][1]
    a, b = to_local(polyline[-2:], ref_lat)
    nx_, ny_ = segment_normal(a, b)
    half = length_m / 2
    left = (b[0] - nx_ * half, b[1] - ny_ * half)
    right = (b[0] + nx_ * half, b[1] + ny_ * half)
    p1, p2 = to_geo([left, right], ref_lat)
    return p1, p2
