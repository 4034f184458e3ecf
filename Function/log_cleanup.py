"""
Function/log_cleanup.py

보관 기간이 지난 일자별 로그 파일(Log_YYYYMMDD.log)을 정리하는 모듈입니다.
"""
import datetime
from pathlib import Path

RETENTION_DAYS = 3


def clean_old_logs(log_dir, logger, retention_days=RETENTION_DAYS, today=None):
    """
    로그 디렉토리에서 보관 기간이 지난 로그 파일을 삭제합니다. 실패는 기록만 하고 전파하지 않습니다.

    Args:
        log_dir (str | Path): 로그 파일이 저장된 디렉토리 경로
        logger (Log): 로그 기록을 위한 로거 인스턴스
        retention_days (int): 보관 기간(일)
        today (datetime.date | None): 기준 일자 (기본값: 오늘)

    Returns:
        int: 삭제한 파일 수
    """
    log_path = Path(log_dir)
    if not log_path.is_dir():
        logger.log(f"로그 디렉토리 없음: {log_path} (정리 생략)", level="WARNING")
        return 0

    today = today or datetime.date.today()
    removed = 0

    for file_path in sorted(log_path.glob("Log_*.log")):
        date_part = file_path.stem[4:12]
        try:
            file_date = datetime.datetime.strptime(date_part, "%Y%m%d").date()
        except ValueError:
            logger.log(f"잘못된 로그 파일 이름 (정리 스킵): {file_path.name}", level="WARNING")
            continue

        if (today - file_date).days <= retention_days:
            continue

        try:
            file_path.unlink()
            removed += 1
            logger.log(f"오래된 로그 파일 삭제: {file_path.name}", level="INFO")
        except OSError as e:
            logger.log(f"로그 파일 삭제 실패: {file_path.name} - {e}", level="ERROR")

    return removed
