# -*- coding: utf-8 -*-
# mydataclass/realtime.py
from __future__ import annotations

"""
realtime 表的一行：一次落库周期的全局汇总。
"""

from dataclasses import dataclass

from commons.base_dataclasses import BaseDataClass


@dataclass(frozen=True, slots=True)
class RealtimeRow(BaseDataClass):
    date: str                   # 主键，秒级时间字符串
    number_of_connections: int  # 当前在线客户端数
    accumulated_msg_size: int   # 本周期所有话题累计字节数
    msg_publish_count: int      # 本周期所有话题发布消息数
    number_of_senders: int      # 本周期发过消息的不同客户端数

    def as_params(self) -> tuple:
        """按 INSERT 语句的列顺序输出参数"""
        return (
            self.date,
            self.number_of_connections,
            self.accumulated_msg_size,
            self.msg_publish_count,
            self.number_of_senders,
        )
