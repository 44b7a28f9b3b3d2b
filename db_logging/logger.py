"""
数据库日志器
"""

import logging
import os
from enum import Enum
from typing import Optional


class LogLevel(Enum):
    """日志级别"""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


_LINE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(component)s] %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class DatabaseLogger:
    """数据库日志器

    日志统一交给标准库logging，配置了log_dir时额外写入 <log_dir>/<db_name>.log。
    """

    def __init__(self, db_name: str, log_dir: Optional[str] = None):
        self.db_name = db_name
        self.log_dir = log_dir
        self.log_file = None
        self._logger = logging.getLogger(f"minisql_judge.{db_name}")
        self._handler = None

        if log_dir:
            # 确保日志目录存在
            os.makedirs(log_dir, exist_ok=True)
            self.log_file = os.path.join(log_dir, f"{db_name}.log")
            self._handler = logging.FileHandler(self.log_file, encoding="utf-8")
            self._handler.setFormatter(logging.Formatter(_LINE_FORMAT, _DATE_FORMAT))
            self._logger.addHandler(self._handler)

        self.set_log_level(LogLevel.INFO)
        self.info(f"数据库 {self.db_name} 启动")

    def _write_log(self, level: LogLevel, message: str, component: str = "SYSTEM"):
        """写入日志"""
        self._logger.log(level.value, message, extra={"component": component})

    def debug(self, message: str, component: str = "SYSTEM"):
        self._write_log(LogLevel.DEBUG, message, component)

    def info(self, message: str, component: str = "SYSTEM"):
        self._write_log(LogLevel.INFO, message, component)

    def warning(self, message: str, component: str = "SYSTEM"):
        self._write_log(LogLevel.WARNING, message, component)

    def error(self, message: str, component: str = "SYSTEM"):
        self._write_log(LogLevel.ERROR, message, component)

    def critical(self, message: str, component: str = "SYSTEM"):
        self._write_log(LogLevel.CRITICAL, message, component)

    def set_log_level(self, level: LogLevel):
        self._logger.setLevel(level.value)

    def close(self):
        self.info(f"数据库 {self.db_name} 关闭")
        if self._handler is not None:
            self._logger.removeHandler(self._handler)
            self._handler.close()
            self._handler = None
