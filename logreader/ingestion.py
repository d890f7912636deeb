# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：读日志主循环（阻塞读取输入流，逐行交给 Reconciler）
#   - EOF 是正常退出（broker 进程结束 / 管道关闭）；
#   - 读流本身的 OSError 是致命错误，向上抛出；
#   - 单行处理出错只记录日志，继续下一行；
#   - 非法编码的字节替换为 U+FFFD，这一行按无法识别处理，不会结束进程。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import io
import sys
import threading
from typing import Optional, TextIO

from commons.base_logger import BaseLogger
from .reconciler import Reconciler


class IngestionLoop:

    def __init__(
        self,
        reconciler: Reconciler,
        stream: Optional[TextIO] = None,
        *,
        logger: Optional[BaseLogger] = None,
        stop_evt: Optional[threading.Event] = None,
    ):
        self.reconciler = reconciler
        self.stream = stream if stream is not None else sys.stdin
        if isinstance(self.stream, io.TextIOWrapper):
            # 必须在第一次读取之前设置
            self.stream.reconfigure(errors="replace")
        self.log = logger or BaseLogger(name="IngestionLoop", to_file=True)
        self.stop_evt = stop_evt or threading.Event()
        self.lines_read = 0
        self.lines_failed = 0

    def run(self) -> int:
        """读到 EOF（或 stop_evt 被置位）为止，返回读取的行数"""
        self.log.log_info("开始读取 broker 日志")
        while not self.stop_evt.is_set():
            try:
                line = self.stream.readline()
            except OSError as e:
                self.log.log_error(f"读取输入流失败: {e}")
                raise
            if line == "":
                self.log.log_info(f"输入流结束，共读取 {self.lines_read} 行")
                break
            self.lines_read += 1
            self._handle(line)
        return self.lines_read

    def _handle(self, line: str) -> None:
        try:
            self.reconciler.feed_line(line)
        except Exception as e:
            self.lines_failed += 1
            self.log.log_error(f"处理日志行失败: {e}; 行内容={line.rstrip()[:200]!r}")
