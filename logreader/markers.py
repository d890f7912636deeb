# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：日志标记词表（每种事件一个可区分的子串）
# 说明：
#   - 默认值对应 mosquitto -v 的输出格式；
#   - 可在 db_config.yaml 的 logreader.markers 中逐项覆盖；
#   - 检测顺序固定：DISCONNECT 行里也含 "CONNECT"，UNSUBSCRIBE 行里也含 "SUBSCRIBE"。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List

from commons.base_dataclasses import BaseDataClass
from commons.normalizers import strip_or_none, ensure_not_empty

_MOSQUITTO_MARKERS: Dict[str, str] = {
    "connect": "Sending CONNACK",
    "disconnect": "Received DISCONNECT",
    "socket_error": "Socket error on client",
    "unsubscribe": "UNSUBSCRIBE",
    "subscribe": "Received SUBSCRIBE",
    "publish": "Received PUBLISH",
    "join_suffix": "_join",
    "data_suffix": "_data",
    "delete_suffix": "_delete",
}


@dataclass(frozen=True, slots=True)
class MarkerVocabulary(BaseDataClass):
    """日志标记词 + 话题后缀"""
    connect: str = _MOSQUITTO_MARKERS["connect"]
    disconnect: str = _MOSQUITTO_MARKERS["disconnect"]
    socket_error: str = _MOSQUITTO_MARKERS["socket_error"]
    unsubscribe: str = _MOSQUITTO_MARKERS["unsubscribe"]
    subscribe: str = _MOSQUITTO_MARKERS["subscribe"]
    publish: str = _MOSQUITTO_MARKERS["publish"]

    join_suffix: str = _MOSQUITTO_MARKERS["join_suffix"]
    data_suffix: str = _MOSQUITTO_MARKERS["data_suffix"]
    delete_suffix: str = _MOSQUITTO_MARKERS["delete_suffix"]

    DEFAULTS: ClassVar[Dict[str, Any]] = dict(_MOSQUITTO_MARKERS)

    # 后缀不做 strip（"_join" 本身不含空白）
    CONVERTERS: ClassVar[Dict[str, Any]] = {
        key: strip_or_none
        for key in ("connect", "disconnect", "socket_error", "unsubscribe", "subscribe", "publish")
    }

    VALIDATORS: ClassVar[List] = [ensure_not_empty(key) for key in _MOSQUITTO_MARKERS]


DEFAULT_MARKERS = MarkerVocabulary()
