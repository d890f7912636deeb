import logging
import os
from logging.handlers import TimedRotatingFileHandler

# 日志目录可由环境变量覆盖（容器里一般挂到 /var/log）
LOG_DIR_ENV = "LOGREADER_LOG_DIR"

_FORMAT = ("%(asctime)s | %(name)s | %(levelname)s | "
           "[%(filename)s:%(lineno)d %(funcName)s] | %(threadName)s | %(message)s")


def _log_dir() -> str:
    """默认 <项目根>/logs，不存在则创建"""
    log_dir = os.getenv(LOG_DIR_ENV)
    if not log_dir:
        project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
        log_dir = os.path.join(project_root, "logs")
    os.makedirs(log_dir, exist_ok=True)
    return log_dir


class BaseLogger:
    """
    LogReader 各组件共用的日志封装：
    - 控制台输出 level 及以上；to_file=True 时另写 logs/<name>.log（按天轮转，只记 ERROR）
    - 读日志线程与落库线程的线程名会出现在每一行里
    - 同名 logger 只配置一次，重复构造拿到的是同一组 handler
    """

    def __init__(self, name: str, level: int = logging.INFO, to_file: bool = False):
        self.logger = logging.getLogger(name)
        self.logger.propagate = False

        if self.logger.handlers:
            return
        self.logger.setLevel(level)
        formatter = logging.Formatter(_FORMAT)

        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(formatter)
        self.logger.addHandler(console)

        if to_file:
            fh = TimedRotatingFileHandler(
                filename=os.path.join(_log_dir(), f"{name}.log"),
                when="midnight",
                backupCount=7,
                encoding="utf-8",
            )
            fh.setLevel(logging.ERROR)
            fh.setFormatter(formatter)
            self.logger.addHandler(fh)

    def log_info(self, message: str):
        self.logger.info(message)

    def log_warning(self, message: str):
        self.logger.warning(message)

    def log_error(self, message: str, exc_info: bool = True):
        """默认带上异常堆栈"""
        self.logger.error(message, exc_info=exc_info)

    def log_debug(self, message: str):
        self.logger.debug(message)

    def set_level(self, level: int) -> None:
        """--verbose：调整 logger 与控制台 handler 的级别，文件 handler 保持 ERROR"""
        self.logger.setLevel(level)
        for handler in self.logger.handlers:
            if not isinstance(handler, TimedRotatingFileHandler):
                handler.setLevel(level)
