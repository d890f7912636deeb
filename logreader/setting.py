#  配置 / Settings
#  启动时读取一次 YAML，环境变量可覆盖个别项；结果以 dataclass 形式显式传给各组件。
from __future__ import annotations

import os
from typing import Optional, Tuple

from mydataclass.db_config import DbConfig
from mydataclass.logreader_config import LogReaderConfig
from tools.config_loader import DEFAULT_CONFIG_FILE, load_config
from .markers import MarkerVocabulary

CONFIG_FILE = os.getenv("LOGREADER_CONFIG", DEFAULT_CONFIG_FILE)   # 配置文件路径
DB_SECTION = "mysqlconfig"
READER_SECTION = "logreader"

_ENV_OVERRIDES = {
    "interval_sec": "LOGREADER_INTERVAL_SEC",          # 落库周期（秒）
    "number_of_records": "LOGREADER_NUMBER_OF_RECORDS",  # realtime 表行数上限
}


def load_settings(file_path: Optional[str] = None) -> Tuple[DbConfig, LogReaderConfig]:
    """
    读取配置文件，返回 (DbConfig, LogReaderConfig)。
    配置缺失或非法时直接抛出（启动阶段失败）。
    """
    file_path = file_path or CONFIG_FILE
    cfg = load_config(file_path=file_path)
    db_cfg = DbConfig.from_dict(cfg.get(DB_SECTION))

    reader_raw = dict(cfg.get(READER_SECTION) or {})
    for key, env_key in _ENV_OVERRIDES.items():
        val = os.getenv(env_key)
        if val:
            reader_raw[key] = val
    reader_cfg = LogReaderConfig.from_dict(reader_raw)
    return db_cfg, reader_cfg


def build_markers(reader_cfg: LogReaderConfig) -> MarkerVocabulary:
    """logreader.markers 中的覆盖项 + mosquitto 默认值"""
    return MarkerVocabulary.from_dict(reader_cfg.markers)
