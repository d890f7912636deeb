# 数据模型：日志行分类结果
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventKind(str, Enum):
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    SOCKET_ERROR = "socket_error"
    UNSUBSCRIBE = "unsubscribe"
    SUBSCRIBE_HEADER = "subscribe_header"
    SUBSCRIBE_TOPIC = "subscribe_topic"
    PUBLISH = "publish"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True, slots=True)
class LogEvent:
    """
    一行日志的分类结果（下游 Reconciler 只依赖此模型，不关心日志格式细节）
    """
    kind: EventKind
    client_id: Optional[str] = None     # CONNECT / DISCONNECT / SOCKET_ERROR / SUBSCRIBE_HEADER / PUBLISH
    topic: Optional[str] = None         # SUBSCRIBE_TOPIC / PUBLISH：原始话题 token（带后缀）
    message_size: Optional[int] = None  # PUBLISH：消息字节数


UNRECOGNIZED = LogEvent(EventKind.UNRECOGNIZED)
UNSUBSCRIBE = LogEvent(EventKind.UNSUBSCRIBE)
