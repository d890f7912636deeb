# -*- coding: utf-8 -*-
# mydataclass/client.py
from __future__ import annotations

"""
客户端实体：一个连接到 broker 的 MQTT 客户端。
客户端 id 约定为 "*name_topic_platform"，以 "*" 开头的才是业务客户端。
"""

from dataclasses import dataclass
from typing import ClassVar

from commons.base_dataclasses import BaseDataClass


@dataclass(slots=True)
class Client(BaseDataClass):
    """
    字段说明：
      - client_id: 完整客户端 id（live map 的 key）
      - name: 用户名
      - topic: 连接时携带的话题标签
      - platform: 客户端平台（web / android / ios ...）
      - msg_publish_count: 本周期发布消息数
      - accumulated_msg_size: 本周期累计消息字节数
    """

    client_id: str
    name: str
    topic: str
    platform: str
    msg_publish_count: int = 0
    accumulated_msg_size: int = 0

    SENTINEL: ClassVar[str] = "*"

    @classmethod
    def from_client_id(cls, client_id: str) -> "Client":
        """
        "*alice_room1_web" -> Client(name="alice", topic="room1", platform="web")
        :raises ValueError: 不以 "*" 开头，或少于三段
        """
        if not client_id.startswith(cls.SENTINEL):
            raise ValueError(f"客户端 id 缺少前缀 {cls.SENTINEL!r}: {client_id!r}")
        parts = client_id[len(cls.SENTINEL):].split("_")
        if len(parts) < 3 or not all(parts[:3]):
            raise ValueError(f"客户端 id 不是 name_topic_platform 格式: {client_id!r}")
        return cls(client_id=client_id, name=parts[0], topic=parts[1], platform=parts[2])

    def add_message(self, size: int) -> None:
        self.msg_publish_count += 1
        self.accumulated_msg_size += size

    def subtract_flushed(self, count: int, size: int) -> None:
        """落库成功后扣掉已写入的计数；落库期间新到的消息留到下个周期。"""
        self.msg_publish_count = max(0, self.msg_publish_count - count)
        self.accumulated_msg_size = max(0, self.accumulated_msg_size - size)
