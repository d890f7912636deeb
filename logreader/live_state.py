# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：内存中的在线状态（clients / topics / senders），由一把锁保护。
# 设计要点：
#   - 读日志线程在每个事件上改写状态；定时线程在每个周期做快照与清零；
#   - 所有读写都在同一把 RLock 内完成，单个实体的“计数自增”与“快照 + 扣减”互斥；
#   - 快照是值拷贝，落库过程中不持锁，慢 SQL 不会阻塞读日志线程；
#   - 落库成功后按快照值扣减（而不是直接清零），落库期间新到的消息留到下个周期。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import dataclasses
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Set, Tuple

from mydataclass.client import Client
from mydataclass.topic import Topic


@dataclass(frozen=True)
class StateSnapshot:
    """某一时刻的一致性快照（值拷贝，与在线状态不共享对象）"""
    clients: Tuple[Client, ...]
    topics: Tuple[Topic, ...]
    senders: frozenset
    number_of_connections: int

    @property
    def msg_publish_count(self) -> int:
        return sum(t.msg_publish_count for t in self.topics)

    @property
    def accumulated_msg_size(self) -> int:
        return sum(t.accumulated_msg_size for t in self.topics)


class LiveState:

    def __init__(self):
        self._lock = threading.RLock()
        self.clients: Dict[str, Client] = {}
        self.topics: Dict[str, Topic] = {}
        self.senders: Set[str] = set()
        self.pending_deletes: Set[str] = set()   # 删除失败、待下个周期重试的话题名

    @contextmanager
    def locked(self) -> Iterator["LiveState"]:
        """Reconciler 在一次事件处理中持锁改写多张表"""
        with self._lock:
            yield self

    # ------------------ 读 ------------------

    def snapshot(self) -> StateSnapshot:
        with self._lock:
            return StateSnapshot(
                clients=tuple(dataclasses.replace(c) for c in self.clients.values()),
                topics=tuple(dataclasses.replace(t) for t in self.topics.values()),
                senders=frozenset(self.senders),
                number_of_connections=len(self.clients),
            )

    def counts(self) -> Tuple[int, int]:
        """(客户端数, 话题数)"""
        with self._lock:
            return len(self.clients), len(self.topics)

    # ------------------ 落库后的扣减 ------------------

    def settle_client(self, flushed: Client) -> None:
        """client 行写入成功：扣掉已写入的计数（客户端已断开则忽略）"""
        with self._lock:
            live = self.clients.get(flushed.client_id)
            if live is not None:
                live.subtract_flushed(flushed.msg_publish_count, flushed.accumulated_msg_size)

    def settle_topic(self, flushed: Topic) -> bool:
        """
        topic 行写入成功：扣掉已写入的计数。
        返回 False 表示该话题在写入期间已被删除（调用方需要补删数据库行）。
        """
        with self._lock:
            live = self.topics.get(flushed.name)
            if live is None or live.start_date != flushed.start_date:
                return False
            live.subtract_flushed(flushed.msg_publish_count, flushed.accumulated_msg_size)
            return True

    def settle_senders(self, flushed: frozenset) -> None:
        """realtime 行写入成功：移除已统计过的发送者"""
        with self._lock:
            self.senders.difference_update(flushed)

    # ------------------ 待重试的话题删除 ------------------

    def mark_delete_pending(self, name: str) -> None:
        """topic 行删除失败：记下来由定时线程重试（话题已重新 join 则不记）"""
        with self._lock:
            if name not in self.topics:
                self.pending_deletes.add(name)

    def pending_topic_deletes(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(sorted(self.pending_deletes))

    def settle_topic_delete(self, name: str) -> None:
        with self._lock:
            self.pending_deletes.discard(name)
