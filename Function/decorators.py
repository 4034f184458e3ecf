"""
Function/decorators.py

파이프라인 단계 메서드의 실행 시간 기록과 예외 로깅을 위한 데코레이터 모듈입니다.
"""
from __future__ import annotations

import functools
import logging
import time
import traceback
from typing import Any, Callable, Optional, ParamSpec, TypeVar

P = ParamSpec("P")
R = TypeVar("R")


def _resolve_custom_logger(instance: Any) -> Optional[Any]:
    """
    데코레이트된 메서드의 self에서 log(msg, level=...) 메서드를 가진 로거를 찾습니다.

    Args:
        instance (Any): 클래스 인스턴스(self) 또는 일반 함수의 첫 인자

    Returns:
        Optional[Any]: 로거 인스턴스 또는 None (표준 logging 사용)
    """
    for attr in ("_logger", "logger"):
        candidate = getattr(instance, attr, None)
        if candidate is not None and callable(getattr(candidate, "log", None)):
            return candidate
    return None


def _emit(custom_logger: Optional[Any], msg: str, level: str) -> None:
    if custom_logger is not None:
        custom_logger.log(msg, level=level)
    else:
        logging.getLogger("roadnet").log(getattr(logging, level), msg)


def log_execution_time(func: Callable[P, R]) -> Callable[P, R]:
    """
    단계의 시작/완료 시점과 소요 시간을 기록하는 데코레이터입니다.

    Returns:
        Callable: 데코레이트된 함수
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        custom_logger = _resolve_custom_logger(args[0] if args else None)
        func_name = func.__qualname__

        _emit(custom_logger, f"▶ [시작] {func_name}", "DEBUG")
        started = time.perf_counter()

        result = func(*args, **kwargs)

        elapsed = time.perf_counter() - started
        _emit(custom_logger, f"◀ [완료] {func_name} (소요 시간: {elapsed:.4f}초)", "INFO")
        return result

    return wrapper


def safe_run(func: Callable[P, R]) -> Callable[P, R]:
    """
    실행 중 발생한 예외의 Traceback을 ERROR 레벨로 기록한 뒤 원래 예외를 그대로 재전파합니다.

    Raises:
        Exception: 원본 함수에서 발생한 예외
    """

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return func(*args, **kwargs)
        except Exception as exc:
            custom_logger = _resolve_custom_logger(args[0] if args else None)
            _emit(
                custom_logger,
                f"'{func.__qualname__}' 실행 실패 ({type(exc).__name__})\n[Traceback]\n{traceback.format_exc()}",
                "ERROR",
            )
            raise

    return wrapper
