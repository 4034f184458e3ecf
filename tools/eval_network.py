from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Dict

import geopandas as gpd
import networkx as nx

from Service.road_modules.geo_io import lanes_frame
from Service.road_modules.model import RoadNetwork
from Service.road_modules.query import RoadNetworkManager
from Service.road_modules.validator import blocked_intersections, dead_end_lanes, lane_graph


def total_lane_length_m(lanes: gpd.GeoDataFrame) -> float:
    if lanes.empty:
        return 0.0
    metric = lanes.to_crs(lanes.estimate_utm_crs())
    return float(metric.geometry.length.sum())


def evaluate(network: RoadNetwork, thresholds: Dict[str, Any]) -> Dict[str, Any]:
    graph = lane_graph(network)
    stats = network.stats()

    junction_lanes = sum(len(i.incoming) for i in network.intersections.values())
    dead_ends = dead_end_lanes(network, graph)
    connectors = list(network.lane_connectors.values())
    disallowed = sum(1 for c in connectors if not c.allowed)

    metrics = {
        **stats,
        "component_count": nx.number_weakly_connected_components(graph) if graph.number_of_nodes() else 0,
        "dead_end_ratio": 0.0 if junction_lanes == 0 else len(dead_ends) / junction_lanes,
        "disallowed_connector_ratio": 0.0 if not connectors else disallowed / len(connectors),
        "blocked_intersection_count": len(blocked_intersections(network)),
        "total_lane_length_m": total_lane_length_m(lanes_frame(network)),
    }

    checks = {
        "min_lanes": metrics["lanes"] >= int(thresholds.get("min_lanes", 1)),
        "min_intersections": metrics["intersections"] >= int(thresholds.get("min_intersections", 0)),
        "max_components": metrics["component_count"] <= int(thresholds.get("max_components", 999999)),
        "max_dead_end_ratio": metrics["dead_end_ratio"] <= float(thresholds.get("max_dead_end_ratio", 1.0)),
        "max_disallowed_connector_ratio": (
            metrics["disallowed_connector_ratio"] <= float(thresholds.get("max_disallowed_connector_ratio", 1.0))
        ),
        "max_blocked_intersections": (
            metrics["blocked_intersection_count"] <= int(thresholds.get("max_blocked_intersections", 999999))
        ),
    }

    return {"metrics": metrics, "checks": checks, "passed": all(checks.values())}


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Evaluate road network snapshot metrics and pass/fail gates.")
    parser.add_argument("--snapshot", required=True, help="Road network snapshot JSON path")
    parser.add_argument("--thresholds", required=False, help="JSON file for threshold configuration")
    parser.add_argument("--output", required=False, help="Optional output JSON path")
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    manager = RoadNetworkManager.load(args.snapshot)
    thresholds = json.loads(Path(args.thresholds).read_text(encoding="utf-8")) if args.thresholds else {}

    result = evaluate(manager.network, thresholds)
    print(json.dumps(result, ensure_ascii=False, indent=2))

    if args.output:
        Path(args.output).write_text(json.dumps(result, ensure_ascii=False, indent=2), encoding="utf-8")

    return 0 if result["passed"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
