# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：SUBSCRIBE 两行日志的状态机
#   mosquitto 把一次订阅写成两行：
#       "1700000000: Received SUBSCRIBE from *alice_room1_web"
#       "\troom1_join (QoS 0)"
#   IDLE --头行--> AWAITING_TOPIC --下一行(无论内容)--> IDLE
# 只由读日志线程使用，不需要加锁。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from enum import Enum
from typing import Optional


class SubscribeState(str, Enum):
    IDLE = "idle"
    AWAITING_TOPIC = "awaiting_topic"


class SubscribeStateMachine:

    def __init__(self):
        self._state = SubscribeState.IDLE
        self._subscriber_id: Optional[str] = None

    @property
    def state(self) -> SubscribeState:
        return self._state

    @property
    def awaiting_topic(self) -> bool:
        return self._state is SubscribeState.AWAITING_TOPIC

    @property
    def subscriber_id(self) -> Optional[str]:
        """最近一次头行里的订阅者 id（话题行消费后仍保留，便于日志）"""
        return self._subscriber_id

    def on_header(self, client_id: str) -> None:
        """收到头行：记录订阅者并等待话题行。连续两个头行时以后一个为准。"""
        self._subscriber_id = client_id
        self._state = SubscribeState.AWAITING_TOPIC

    def consume_topic_line(self) -> Optional[str]:
        """
        话题行被消费：回到 IDLE，返回对应的订阅者 id。
        :raises RuntimeError: 当前不在 AWAITING_TOPIC
        """
        if not self.awaiting_topic:
            raise RuntimeError("consume_topic_line 只能在 AWAITING_TOPIC 状态调用")
        self._state = SubscribeState.IDLE
        return self._subscriber_id

    def reset(self) -> None:
        self._state = SubscribeState.IDLE
        self._subscriber_id = None
