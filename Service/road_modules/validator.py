"""
Service/road_modules/validator.py

빌드된 도로망 스냅샷의 품질을 점검하고 위험 요소를 로깅하는 품질 보증(QA) 모듈입니다.
"""
from __future__ import annotations

from typing import Dict, List

import networkx as nx

from Common.log import Log
from Service.road_modules.model import RoadNetwork


def lane_graph(network: RoadNetwork) -> nx.DiGraph:
    """차로를 노드로, 커넥터를 간선으로 하는 방향 그래프."""
    graph = nx.DiGraph()
    graph.add_nodes_from(network.lanes.keys())
    for connector in network.lane_connectors.values():
        graph.add_edge(connector.from_lane, connector.to_lane, connector=connector.id)
    return graph


def dead_end_lanes(network: RoadNetwork, graph: nx.DiGraph) -> List[str]:
    """교차로에서 끝나지만 이어지는 커넥터가 하나도 없는 차로."""
    incoming_at_junction = {lane_id for i in network.intersections.values() for lane_id in i.incoming}
    return sorted(lane_id for lane_id in incoming_at_junction if graph.out_degree(lane_id) == 0)


def blocked_intersections(network: RoadNetwork) -> List[str]:
    blocked = []
    for intersection in network.intersections.values():
        connectors = [network.lane_connectors[cid] for cid in intersection.connectors]
        if connectors and not any(c.allowed for c in connectors):
            blocked.append(intersection.id)
    return sorted(blocked)


class NetworkValidator:
    """
    차로 그래프의 연결성, 막다른 진입 차로, 모든 이동이 금지된 교차로를 검사합니다.
    """
    def __init__(self, logger: Log):
        self._logger = logger

    def execute(self, network: RoadNetwork) -> Dict[str, int]:
        """
        검증 로직을 실행하며, 스냅샷을 변경하지 않고 분석 결과만 로그로 출력합니다.

        Returns:
            Dict[str, int]: 분리 그룹 수, 막다른 차로 수, 통행 불가 교차로 수
        """
        if not network.lanes:
            self._logger.log("[Validator] 검증 실패: 스냅샷에 차로가 없습니다.", level="WARNING")
            return {"components": 0, "dead_ends": 0, "blocked_intersections": 0}

        self._logger.log("=== 도로망 품질 검증(QA) 시작 ===", level="INFO")

        graph = lane_graph(network)
        errors: List[str] = []

        components = self._check_connectivity(graph, errors)
        dead_ends = self._check_dead_ends(network, graph, errors)
        blocked = self._check_blocked(network, errors)

        if errors:
            self._logger.log(f"[Validator] 검증 완료: {len(errors)}개의 잠재적 위험 요소가 발견되었습니다.", level="WARNING")
            for err in errors[:5]:
                self._logger.log(f"  - {err}", level="WARNING")
        else:
            self._logger.log("[Validator] 검증 완료: 모든 품질 기준을 통과했습니다.", level="INFO")

        return {"components": components, "dead_ends": dead_ends, "blocked_intersections": blocked}

    def _check_connectivity(self, graph: nx.DiGraph, errors: list) -> int:
        components = list(nx.weakly_connected_components(graph))
        num_components = len(components)

        self._logger.log(f"[Validator] 차로 그래프 분리 그룹 수: {num_components}개", level="INFO")

        if num_components > 1:
            sizes = sorted([len(c) for c in components], reverse=True)
            self._logger.log(f"[Validator] 각 그룹별 차로 수: {sizes[:10]}", level="DEBUG")
            errors.append(f"차로 그래프가 {num_components}개의 파편으로 끊어져 있습니다.")
        return num_components

    def _check_dead_ends(self, network: RoadNetwork, graph: nx.DiGraph, errors: list) -> int:
        dead_ends = dead_end_lanes(network, graph)
        if dead_ends:
            errors.append(f"교차로에서 진출 커넥터가 없는 차로 {len(dead_ends)}개 (예: {dead_ends[:3]})")
        return len(dead_ends)

    def _check_blocked(self, network: RoadNetwork, errors: list) -> int:
        blocked = blocked_intersections(network)
        if blocked:
            errors.append(f"모든 이동이 금지된 교차로 {len(blocked)}개 (예: {blocked[:3]})")
        return len(blocked)
