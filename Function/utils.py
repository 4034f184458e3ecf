"""
Function/utils.py

실행 환경에 따른 기준 경로 계산과 식별자 생성 등 공통 유틸리티 모듈입니다.
"""
from datetime import datetime, timezone
from pathlib import Path
import sys


def get_runtime_base_path() -> Path:
    """
    실행 파일 또는 메인 스크립트가 위치한 물리적 경로를 반환합니다.

    Returns:
        Path: 프로그램 실행 파일이 위치한 디렉토리 경로 (대화형 실행 시 현재 작업 경로)
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable).resolve().parent
    if not sys.argv or not sys.argv[0]:
        return Path.cwd()
    return Path(sys.argv[0]).resolve().parent


def utc_timestamp() -> str:
    """ISO 8601 형식의 현재 UTC 시각 (예: 2026-01-01T00:00:00.000Z)."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"
