# -*- coding: utf-8 -*-
# mydataclass/topic.py
from __future__ import annotations

"""
话题实体。名称为规范名（去掉 _join / _data / _delete 后缀）。
参与人数只增不减：断开连接或退订不会减少 participants。
"""

from dataclasses import dataclass, field
from datetime import datetime

from commons.base_dataclasses import BaseDataClass

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def now_str() -> str:
    """当前本地时间，秒级字符串（与 MySQL DATETIME 字面量一致）"""
    return datetime.now().strftime(DATE_FORMAT)


@dataclass(slots=True)
class Topic(BaseDataClass):
    """
    字段说明：
      - name: 规范话题名
      - start_date: 首次出现时间（创建时确定，之后不变）
      - participants: 参与人数，创建即为 1
      - msg_publish_count / accumulated_msg_size: 本周期计数
    """

    name: str
    start_date: str = field(default_factory=now_str)
    participants: int = 1
    msg_publish_count: int = 0
    accumulated_msg_size: int = 0

    def increase_participants(self) -> None:
        self.participants += 1

    def add_message(self, size: int) -> None:
        self.msg_publish_count += 1
        self.accumulated_msg_size += size

    def subtract_flushed(self, count: int, size: int) -> None:
        self.msg_publish_count = max(0, self.msg_publish_count - count)
        self.accumulated_msg_size = max(0, self.accumulated_msg_size - size)
