"""
main.py

애플리케이션의 진입점이며 로거 생성과 서비스 조립 후 도로망 빌드/저장을 실행합니다.
"""
from __future__ import annotations

import argparse
import sys
import traceback
from typing import List, Optional

from Common.log import Log
from Service.container import build_app
from Service.schemas import BoundingBox


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build a lane-level road network snapshot from OpenStreetMap.")
    parser.add_argument(
        "--bbox",
        nargs=4,
        type=float,
        metavar=("SOUTH", "WEST", "NORTH", "EAST"),
        help="Query area; defaults to the configured regional box",
    )
    parser.add_argument("--output", default="roadnet.json", help="Snapshot JSON output path")
    parser.add_argument("--quiet", action="store_true", help="Do not echo log messages to the console")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logger = Log(echo=not args.quiet)

    try:
        logger.log("=== 애플리케이션 초기화 시작 ===", level="INFO")

        built = build_app(logger)
        service = built.network_service

        bbox = BoundingBox(south=args.bbox[0], west=args.bbox[1], north=args.bbox[2], east=args.bbox[3]) if args.bbox else None
        manager = service.build_network(bbox)
        saved = service.save_network(manager, args.output)

        logger.log(f"=== 도로망 빌드 완료: {saved} {manager.get_metadata()['stats']} ===", level="INFO")
        return 0

    except Exception:
        error_msg = traceback.format_exc()
        logger.log(f"실행 중 치명적 오류 발생:\n{error_msg}", level="ERROR")
        return 1


if __name__ == "__main__":
    sys.exit(main())
