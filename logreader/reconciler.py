# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：把分类后的 LogEvent 应用到在线状态（LiveState）
# 规则：
#   - CONNECT：id 含 "*" 且不在表里时新建 Client；
#   - DISCONNECT / SOCKET_ERROR：从表里移除（不存在不报错）；
#   - SUBSCRIBE：头行进入 AWAITING_TOPIC，下一行无论内容都按话题行处理；
#       只有 "_join" 结尾的话题会新建 Topic 或 participants + 1；
#   - PUBLISH "_data"：已存在的 Topic / Client 计数累加，发送者无条件加入 senders；
#   - PUBLISH "_delete"：已存在的 Topic 从表里移除并删除数据库行（失败则交给定时线程重试）；
#   - 未知的 Topic / Client 不会因为 PUBLISH 被创建。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from typing import Optional

from commons.base_logger import BaseLogger
from commons.normalizers import strip_suffix
from mydataclass.client import Client
from mydataclass.topic import Topic
from .line_classifier import classify, classify_topic_line
from .live_state import LiveState
from .markers import DEFAULT_MARKERS, MarkerVocabulary
from .models import EventKind, LogEvent
from .protocols import TrafficStoreProto
from .subscribe_state import SubscribeStateMachine


class Reconciler:

    def __init__(
        self,
        state: LiveState,
        store: Optional[TrafficStoreProto] = None,
        *,
        markers: MarkerVocabulary = DEFAULT_MARKERS,
        logger: Optional[BaseLogger] = None,
    ):
        self.state = state
        self.store = store
        self.markers = markers
        self.subscribe = SubscribeStateMachine()
        self.log = logger or BaseLogger(name="Reconciler")

    # === 对外接口 ===

    def feed_line(self, line: str) -> LogEvent:
        """处理一行原始日志，返回该行的分类结果（测试与统计用）"""
        if self.subscribe.awaiting_topic:
            subscriber = self.subscribe.consume_topic_line()
            event = classify_topic_line(line)
            if event.kind is EventKind.SUBSCRIBE_TOPIC:
                self._on_subscribe_topic(event.topic, subscriber)
            else:
                self.log.log_debug(f"SUBSCRIBE 之后的行无法解析出话题: {line.rstrip()!r}")
            return event

        event = classify(line, self.markers)
        if event.kind is EventKind.UNRECOGNIZED:
            return event
        self.apply(event)
        return event

    def apply(self, event: LogEvent) -> None:
        kind = event.kind
        if kind is EventKind.CONNECT:
            self._on_connect(event.client_id)
        elif kind in (EventKind.DISCONNECT, EventKind.SOCKET_ERROR):
            self._on_disconnect(event.client_id)
        elif kind is EventKind.SUBSCRIBE_HEADER:
            self.subscribe.on_header(event.client_id)
        elif kind is EventKind.SUBSCRIBE_TOPIC:
            self._on_subscribe_topic(event.topic, self.subscribe.subscriber_id)
        elif kind is EventKind.PUBLISH:
            self._on_publish(event.client_id, event.topic, event.message_size or 0)
        # UNSUBSCRIBE / UNRECOGNIZED：不处理

    # === 内部 ===

    def _on_connect(self, client_id: str) -> None:
        if Client.SENTINEL not in client_id:
            return
        with self.state.locked() as st:
            if client_id in st.clients:
                return
            try:
                client = Client.from_client_id(client_id)
            except ValueError as e:
                self.log.log_debug(f"忽略无法解析的客户端 id: {e}")
                return
            st.clients[client_id] = client
        self.log.log_debug(f"add client {client_id}")

    def _on_disconnect(self, client_id: str) -> None:
        with self.state.locked() as st:
            st.clients.pop(client_id, None)

    def _on_subscribe_topic(self, token: str, subscriber: Optional[str]) -> None:
        name = strip_suffix(token, self.markers.join_suffix)
        if not name:
            return
        with self.state.locked() as st:
            topic = st.topics.get(name)
            if topic is None:
                # 重新开始的话题：之前没删掉的旧行交给本次 upsert 覆盖
                st.pending_deletes.discard(name)
                st.topics[name] = Topic(name=name)
                created = True
            else:
                # 同一订阅者重复 join 也会累加（参与人数只增不减）
                topic.increase_participants()
                created = False
        if created:
            self.log.log_info(f"新话题 {name}（订阅者 {subscriber}）")

    def _on_publish(self, client_id: str, token: str, size: int) -> None:
        name = strip_suffix(token, self.markers.data_suffix)
        if name:
            with self.state.locked() as st:
                topic = st.topics.get(name)
                if topic is not None:
                    topic.add_message(size)
                client = st.clients.get(client_id)
                if client is not None:
                    client.add_message(size)
                st.senders.add(client_id)
            return

        name = strip_suffix(token, self.markers.delete_suffix)
        if name:
            self._on_topic_delete(name)

    def _on_topic_delete(self, name: str) -> None:
        with self.state.locked() as st:
            removed = st.topics.pop(name, None)
        if removed is None:
            return
        self.log.log_info(f"话题结束 {name}")
        if self.store is None:
            return
        try:
            self.store.delete_topic(name)
        except Exception as e:
            self.log.log_error(f"删除 topic 表记录失败，下个周期重试 topic={name}: {e}")
            self.state.mark_delete_pending(name)
