"""
Service/road_modules/builders/priority.py

교차로에서 서로 충돌하는 두 이동(커넥터) 사이의 통행 우선권을 결정하는 모듈입니다.

판정 순서:
    1. 정지/양보 통제(교차로 또는 진입로) -> "yield"
    2. 회전교차로: 회전 차로 위의 이동 우선
    3. 우선도로: 우선도로 위의 이동, 그 다음 직진 이동 우선
    4. 우측 우선: 상대가 내 진행 방향 오른쪽에서 접근하면 상대 우선.
       같은 쪽/마주 보는 접근이면 덜 좌회전하는 이동이 우선, 완전히 같으면 "A"
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from Service.road_modules.geometry import normalize_angle

YIELD_CONTROLS = ("stop", "give_way")

THROUGH_BAND_RAD = math.pi / 12            # ±15°
RIGHT_SIDE_MIN_RAD = math.radians(10.0)
RIGHT_SIDE_MAX_RAD = math.radians(170.0)
ANGLE_EPS = 1e-9


@dataclass(frozen=True)
class Movement:
    """우선권 판정에 필요한 커넥터 한 개의 기하/통제 요약."""
    connector_id: str
    turn_angle: float          # 진출 방위 - 진입 방위, [-pi, pi], 좌회전이 양수
    arrival_heading: float     # 교차로에 도착할 때의 진행 방위(rad)
    approach_bearing: float    # 교차로 중심에서 진입 차로 쪽을 바라보는 방위(rad)
    arm_control: Optional[str] = None
    on_roundabout: bool = False
    on_priority_road: bool = False


class PriorityResolver:
    """
    커넥터 쌍(A, B)과 교차로 통제 유형으로부터 "A" | "B" | "yield" 중 하나를 결정합니다.
    같은 입력에는 항상 같은 결과를 돌려줍니다.
    """

    def resolve(self, a: Movement, b: Movement, control: str) -> str:
        if control in YIELD_CONTROLS:
            return "yield"
        if a.arm_control in YIELD_CONTROLS or b.arm_control in YIELD_CONTROLS:
            return "yield"

        if control == "roundabout" and a.on_roundabout != b.on_roundabout:
            return "A" if a.on_roundabout else "B"

        if control == "priority":
            if a.on_priority_road != b.on_priority_road:
                return "A" if a.on_priority_road else "B"
            a_through = abs(a.turn_angle) <= THROUGH_BAND_RAD
            b_through = abs(b.turn_angle) <= THROUGH_BAND_RAD
            if a_through != b_through:
                return "A" if a_through else "B"

        return self.right_before_left(a, b)

    def right_before_left(self, a: Movement, b: Movement) -> str:
        if self.approaches_from_right(of=a, other=b):
            return "B"
        if self.approaches_from_right(of=b, other=a):
            return "A"

        # 같은 쪽 또는 마주 보는 접근: 좌회전이 직진/우회전에 양보
        if a.turn_angle < b.turn_angle - ANGLE_EPS:
            return "A"
        if b.turn_angle < a.turn_angle - ANGLE_EPS:
            return "B"
        return "A"

    @staticmethod
    def approaches_from_right(of: Movement, other: Movement) -> bool:
        """other가 of의 진행 방향 기준 오른쪽(시계 방향 10°~170°)에서 접근하는지 여부."""
        relative = normalize_angle(other.approach_bearing - of.arrival_heading)
        return -RIGHT_SIDE_MAX_RAD < relative < -RIGHT_SIDE_MIN_RAD
