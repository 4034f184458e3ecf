import logging
import datetime
import os
import shutil

from Function.utils import get_runtime_base_path

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class Log:
    def __init__(self, log_dir="Log", echo=True):
        # 실행 기준 폴더 아래에 일자별 로그 파일을 둔다
        base_dir = get_runtime_base_path()
        self.log_dir = log_dir if os.path.isabs(log_dir) else os.path.join(base_dir, log_dir)
        os.makedirs(self.log_dir, exist_ok=True)

        self.echo = echo
        # 로그 파일 경로 (파일명은 'Log_YYYYMMDD.log' 형식)
        self.log_file = os.path.join(self.log_dir, f'Log_{self._current_date_str()}.log')
        # 작업 로그 사본 경로 (파일명은 'YYYYMMDD_roadnet.log' 형식)
        self.target_path = os.path.join(base_dir, f'{self._current_date_str()}_roadnet.log')

        logging.basicConfig(
            filename=self.log_file,
            level=logging.DEBUG,
            format='%(asctime)s - %(levelname)s - %(message)s',
            datefmt='%Y/%m/%d %H:%M:%S',
            encoding='utf-8'
        )
        self._logger = logging.getLogger("roadnet")

    def _current_date_str(self):
        return datetime.datetime.now().strftime("%Y%m%d")

    def log(self, msg, level='DEBUG', create_log=False):
        """지정된 로그 레벨로 메시지를 기록하고, 요청 시 로그 파일 사본을 남깁니다."""
        level = level.upper()
        levelno = _LEVELS.get(level)
        if levelno is None:
            self._logger.warning("알 수 없는 로그 레벨(%s): %s", level, msg)
            return

        self._logger.log(levelno, msg)

        if self.echo:
            print(f"{level}: {msg}")

        if create_log:
            self._copy_log()

    def _copy_log(self):
        """로그 파일을 작업 로그 경로로 복사합니다."""
        try:
            shutil.copy(self.log_file, self.target_path)
        except OSError as e:
            self._logger.warning("로그 파일 복사 실패: %s", e)

    def get_log_paths(self):
        return self.log_file
