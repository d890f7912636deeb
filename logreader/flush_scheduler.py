# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：定时把在线状态落库（client / topic / realtime），并限制 realtime 表行数
# 设计要点：
#   - 独立守护线程，启动即执行第一次，之后按固定周期执行；
#   - 周期之间不重叠：某次执行超时，下一次顺延而不是并发；
#   - 每一步独立捕获异常：失败只记录日志并跳过该步，不影响后续步骤，也不会让线程退出；
#   - 快照在周期开始时一次性取出，落库期间不持锁。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from commons.base_logger import BaseLogger
from mydataclass.realtime import RealtimeRow
from mydataclass.topic import DATE_FORMAT
from .live_state import LiveState, StateSnapshot
from .protocols import TrafficStoreProto


@dataclass
class FlushReport:
    """一次落库周期的结果"""
    clients_written: int = 0
    clients_failed: int = 0
    topics_written: int = 0
    topics_failed: int = 0
    evicted: bool = False
    realtime_row: Optional[RealtimeRow] = None
    failed_steps: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed_steps


class FlushScheduler:

    def __init__(
        self,
        state: LiveState,
        store: TrafficStoreProto,
        *,
        interval_sec: float,
        number_of_records: int,
        logger: Optional[BaseLogger] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
    ):
        """
        参数：
          interval_sec      : 落库周期（秒）
          number_of_records : realtime 表最多保留的行数
          clock             : 单调时钟（测试可替换）
          now               : realtime 行时间戳来源（测试可替换）
        """
        if interval_sec <= 0:
            raise ValueError(f"interval_sec 必须 > 0，实际为 {interval_sec}")
        if number_of_records < 1:
            raise ValueError(f"number_of_records 必须 >= 1，实际为 {number_of_records}")
        self.state = state
        self.store = store
        self.interval_sec = interval_sec
        self.number_of_records = number_of_records
        self.log = logger or BaseLogger(name="FlushScheduler", to_file=True)
        self._clock = clock
        self._now = now

        self._stop_evt = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._tick_lock = threading.Lock()  # 保证同一时刻只有一个周期在执行
        self._last_row_date: Optional[str] = None  # 最近一次写入成功的 realtime 主键
        self.ticks = 0

    # === 线程管理 ===

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_evt.clear()
        self._thread = threading.Thread(target=self._run, name="flush-scheduler", daemon=True)
        self._thread.start()
        self.log.log_info(f"FlushScheduler 启动，周期 {self.interval_sec}s，realtime 上限 {self.number_of_records} 行")

    def stop(self, final_flush: bool = True, timeout: Optional[float] = None) -> None:
        """
        停止定时线程；final_flush=True 时在退出前再执行一次落库，
        避免最后一个不完整周期的数据丢失。
        """
        self._stop_evt.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        if final_flush:
            self.tick()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        next_at = self._clock()
        while not self._stop_evt.is_set():
            try:
                self.tick()
            except Exception as e:
                # tick 内部已经按步骤兜底，这里只防御意料之外的错误
                self.log.log_error(f"落库周期异常: {e}")
            next_at += self.interval_sec
            delay = next_at - self._clock()
            if delay < 0:
                # 超时：从现在起重新计时，不追赶错过的周期
                self.log.log_warning(f"落库耗时超过周期 {self.interval_sec}s，下一次顺延")
                next_at = self._clock()
                delay = 0
            if self._stop_evt.wait(delay):
                break

    # === 单个周期 ===

    def tick(self) -> FlushReport:
        with self._tick_lock:
            self.ticks += 1
            report = FlushReport()
            n_clients, n_topics = self.state.counts()
            self.log.log_info(
                f"-----------LogReader----------- number of clients : {n_clients}, "
                f"number of topics : {n_topics}"
            )

            snap = self.state.snapshot()
            self._flush_clients(snap, report)
            self._retry_topic_deletes(report)
            self._flush_topics(snap, report)
            row = self._build_realtime_row(snap)
            self._enforce_retention(row, report)
            self._write_realtime(row, snap, report)

            if report.failed_steps:
                self.log.log_warning(f"本周期部分步骤失败: {report.failed_steps}")
            return report

    def _flush_clients(self, snap: StateSnapshot, report: FlushReport) -> None:
        for c in snap.clients:
            try:
                self.store.upsert_client(c.name, c.msg_publish_count, c.accumulated_msg_size,
                                         c.platform, c.topic)
            except Exception as e:
                report.clients_failed += 1
                self.log.log_error(f"sql update client query error client={c.client_id}: {e}")
                continue
            self.state.settle_client(c)
            report.clients_written += 1
        if report.clients_failed:
            report.failed_steps.append("client")

    def _flush_topics(self, snap: StateSnapshot, report: FlushReport) -> None:
        for t in snap.topics:
            try:
                self.store.upsert_topic(t.name, t.msg_publish_count, t.accumulated_msg_size,
                                        t.start_date, t.participants)
            except Exception as e:
                report.topics_failed += 1
                self.log.log_error(f"sql update topic query error topic={t.name}: {e}")
                continue
            report.topics_written += 1
            if not self.state.settle_topic(t):
                # 写入期间该话题已结束：补删，避免刚写入的行残留
                self._delete_topic_row(t.name)
        if report.topics_failed:
            report.failed_steps.append("topic")

    def _retry_topic_deletes(self, report: FlushReport) -> None:
        """之前删除失败的 topic 行，本周期再删一次"""
        failed = 0
        for name in self.state.pending_topic_deletes():
            try:
                self.store.delete_topic(name)
            except Exception as e:
                failed += 1
                self.log.log_error(f"重试删除 topic 失败 topic={name}: {e}")
                continue
            self.state.settle_topic_delete(name)
        if failed:
            report.failed_steps.append("topic_delete")

    def _delete_topic_row(self, name: str) -> None:
        try:
            self.store.delete_topic(name)
        except Exception as e:
            self.log.log_error(f"补删 topic 失败，下个周期重试 topic={name}: {e}")
            self.state.mark_delete_pending(name)

    def _build_realtime_row(self, snap: StateSnapshot) -> RealtimeRow:
        return RealtimeRow(
            date=self._now().strftime(DATE_FORMAT),
            number_of_connections=snap.number_of_connections,
            accumulated_msg_size=snap.accumulated_msg_size,
            msg_publish_count=snap.msg_publish_count,
            number_of_senders=len(snap.senders),
        )

    def _enforce_retention(self, row: RealtimeRow, report: FlushReport) -> None:
        if row.date == self._last_row_date:
            # 同一秒内的第二次写入会覆盖上一行，行数不变，不需要腾位置
            return
        try:
            if self.store.count_realtime_rows() >= self.number_of_records:
                self.store.delete_oldest_realtime_row()
                report.evicted = True
        except Exception as e:
            report.failed_steps.append("retention")
            self.log.log_error(f"realtime table count sql query error: {e}")

    def _write_realtime(self, row: RealtimeRow, snap: StateSnapshot, report: FlushReport) -> None:
        try:
            self.store.upsert_realtime_row(row)
        except Exception as e:
            report.failed_steps.append("realtime")
            self.log.log_error(f"realtime table sql query error: {e}")
            return
        report.realtime_row = row
        self._last_row_date = row.date
        self.state.settle_senders(snap.senders)
