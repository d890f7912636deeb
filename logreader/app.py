# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：LogReader 装配与生命周期
#   启动：建表 -> 清空三张表 -> 启动定时落库线程 -> 主线程读日志
#   退出：输入流结束 / Ctrl+C -> 停止定时线程（退出前再落库一次）
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import threading
from typing import Optional, TextIO

from commons.base_logger import BaseLogger
from mydataclass.db_config import DbConfig
from mydataclass.logreader_config import LogReaderConfig
from .flush_scheduler import FlushScheduler
from .ingestion import IngestionLoop
from .live_state import LiveState
from .protocols import TrafficStoreProto
from .reconciler import Reconciler
from .setting import build_markers


class LogReaderApp:

    def __init__(
        self,
        db_config: Optional[DbConfig],
        reader_config: LogReaderConfig,
        *,
        store: Optional[TrafficStoreProto] = None,
        stream: Optional[TextIO] = None,
        logger: Optional[BaseLogger] = None,
    ):
        """
        参数：
          db_config     : MySQL 配置；传入 store 时可为 None
          reader_config : 周期 / 行数上限 / 标记词
          store         : 存储实现（默认按 db_config 创建 TrafficStore）
          stream        : 日志输入流（默认 stdin）
        """
        self.log = logger or BaseLogger(name="LogReader", to_file=reader_config.log_to_file)
        if store is None:
            if db_config is None:
                raise ValueError("db_config 与 store 至少提供一个")
            from dao.traffic_store import TrafficStore
            store = TrafficStore(db_config)
        self.store = store
        self.config = reader_config

        self.state = LiveState()
        self.stop_evt = threading.Event()
        self.reconciler = Reconciler(self.state, self.store, markers=build_markers(reader_config))
        self.scheduler = FlushScheduler(
            self.state,
            self.store,
            interval_sec=reader_config.interval_sec,
            number_of_records=reader_config.number_of_records,
        )
        self.ingestion = IngestionLoop(self.reconciler, stream, stop_evt=self.stop_evt)

    def prepare_storage(self) -> None:
        """建表 + 清空；失败只记录日志（数据库恢复后定时线程会继续写入）"""
        try:
            self.store.ensure_tables()
        except Exception as e:
            self.log.log_error(f"建表失败: {e}")
        try:
            self.store.clear_all_tables()
        except Exception as e:
            self.log.log_error(f"all table delete query error: {e}")

    def run(self) -> int:
        """阻塞运行到输入流结束，返回读取的行数"""
        self.log.log_info(
            f"LogReader starts, interval={self.config.interval_sec}s, "
            f"number_of_records={self.config.number_of_records}"
        )
        self.prepare_storage()
        self.scheduler.start()
        try:
            return self.ingestion.run()
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self.stop_evt.set()
        if self.scheduler.running:
            self.scheduler.stop(final_flush=True)
            self.log.log_info("LogReader stopped")
