# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：声明“存储接口（协议）”，Reconciler / FlushScheduler 只依赖它。
# 说明：
#   - 生产实现是 dao.traffic_store.TrafficStore（MySQL）；
#   - 测试里用内存实现替换；
#   - 所有方法失败时抛异常，由调用方记录日志并跳过。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations
from typing import Protocol

from mydataclass.realtime import RealtimeRow


class TrafficStoreProto(Protocol):
    def upsert_client(self, name: str, msg_publish_count: int, accumulated_msg_size: int,
                      platform: str, topic: str) -> None: ...

    def upsert_topic(self, name: str, msg_publish_count: int, accumulated_msg_size: int,
                     start_date: str, participants: int) -> None: ...

    def delete_topic(self, name: str) -> None: ...

    def count_realtime_rows(self) -> int: ...

    def delete_oldest_realtime_row(self) -> None: ...

    def upsert_realtime_row(self, row: RealtimeRow) -> None: ...

    def clear_all_tables(self) -> None: ...

    def ensure_tables(self) -> None: ...
