# -*- coding: utf-8 -*-
# mydataclass/logreader_config.py
from __future__ import annotations

"""
LogReader 运行配置（来自 db_config.yaml 的 logreader 块）。
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List

from commons.base_dataclasses import BaseDataClass
from commons.normalizers import to_int_or_none, to_bool_or_none, ensure_at_least


@dataclass(frozen=True, slots=True)
class LogReaderConfig(BaseDataClass):
    """
    字段说明：
      - interval_sec: 落库间隔（秒），进程启动时立即执行第一次
      - number_of_records: realtime 表最多保留的记录数
      - markers: 日志标记词覆盖（见 logreader.markers.MarkerVocabulary）
      - log_to_file: 错误日志是否同时写入 logs/ 目录
    """

    interval_sec: int = 5
    number_of_records: int = 720
    markers: Dict[str, str] = field(default_factory=dict)
    log_to_file: bool = True

    DEFAULTS: ClassVar[Dict[str, Any]] = {
        "interval_sec": 5,
        "number_of_records": 720,
        "markers": lambda: {},
        "log_to_file": True,
    }

    FIELD_MAPPING: ClassVar[Dict[str, str]] = {
        "interval": "interval_sec",
        "max_records": "number_of_records",
    }

    CONVERTERS: ClassVar[Dict[str, Any]] = {
        "interval_sec": to_int_or_none,
        "number_of_records": to_int_or_none,
        "markers": lambda v: dict(v or {}),
        "log_to_file": lambda v: bool(to_bool_or_none(v)),
    }

    VALIDATORS: ClassVar[List] = [
        ensure_at_least("interval_sec", 1),
        ensure_at_least("number_of_records", 1),
    ]
