# ──────────────────────────────────────────────────────────────────────────────
# 模块用途：把一行 broker 日志分类为 LogEvent（纯函数，无状态）
# 字段位置约定（按单个空格切分，下标从 0 开始）：
#   - CONNECT / DISCONNECT / SUBSCRIBE 头行：client id = words[4]
#       "1700000000: Sending CONNACK to *alice_room1_web (0, 0)"
#   - SOCKET_ERROR：client id = words[5]，去掉逗号
#       "1700000000: Socket error on client *alice_room1_web, disconnecting."
#   - PUBLISH：client id = words[4]，topic = words[9] 去掉引号/逗号，size = words[11] 去掉 "("
#       "1700000000: Received PUBLISH from *alice_room1_web (d0, q0, r0, m0, 'room1_data', ... (128 bytes))"
#   - SUBSCRIBE 话题行：按任意空白切分，topic = words[1]（行首是 tab，words[0] 为空串）
#       "\troom1_join (QoS 0)"
# 格式不对（字段不够 / size 非数字）一律返回 UNRECOGNIZED，不抛异常。
# ──────────────────────────────────────────────────────────────────────────────
from __future__ import annotations

import re
from typing import Optional

from commons.normalizers import strip_chars, to_int_or_none
from .markers import DEFAULT_MARKERS, MarkerVocabulary
from .models import EventKind, LogEvent, UNRECOGNIZED, UNSUBSCRIBE

CLIENT_ID_INDEX = 4
SOCKET_ERROR_CLIENT_ID_INDEX = 5
PUBLISH_TOPIC_INDEX = 9
PUBLISH_SIZE_INDEX = 11
TOPIC_LINE_INDEX = 1

_WHITESPACE = re.compile(r"\s+")


def _word(words: list[str], index: int) -> Optional[str]:
    """取第 index 个字段；越界或为空串时返回 None"""
    if index < len(words) and words[index]:
        return words[index]
    return None


def _split(line: str) -> list[str]:
    return line.rstrip("\r\n").split(" ")


def classify(line: str, markers: MarkerVocabulary = DEFAULT_MARKERS) -> LogEvent:
    """
    按固定优先级匹配标记词：CONNECT > DISCONNECT > SOCKET_ERROR > UNSUBSCRIBE > SUBSCRIBE > PUBLISH。
    第一个命中的决定事件类型；都不命中返回 UNRECOGNIZED。
    """
    if markers.connect in line:
        return _client_event(EventKind.CONNECT, line, CLIENT_ID_INDEX)
    if markers.disconnect in line:
        return _client_event(EventKind.DISCONNECT, line, CLIENT_ID_INDEX)
    if markers.socket_error in line:
        return _client_event(EventKind.SOCKET_ERROR, line, SOCKET_ERROR_CLIENT_ID_INDEX, strip=",")
    if markers.unsubscribe in line:
        return UNSUBSCRIBE
    if markers.subscribe in line:
        return _client_event(EventKind.SUBSCRIBE_HEADER, line, CLIENT_ID_INDEX)
    if markers.publish in line:
        return _publish_event(line)
    return UNRECOGNIZED


def classify_topic_line(line: str) -> LogEvent:
    """SUBSCRIBE 头行之后紧跟的话题行"""
    words = _WHITESPACE.split(line.rstrip("\r\n"))
    topic = _word(words, TOPIC_LINE_INDEX)
    if topic is None:
        return UNRECOGNIZED
    return LogEvent(EventKind.SUBSCRIBE_TOPIC, topic=topic)


def _client_event(kind: EventKind, line: str, index: int, strip: str = "") -> LogEvent:
    client_id = _word(_split(line), index)
    if client_id is None:
        return UNRECOGNIZED
    if strip:
        client_id = strip_chars(client_id, strip)
    if not client_id:
        return UNRECOGNIZED
    return LogEvent(kind, client_id=client_id)


def _publish_event(line: str) -> LogEvent:
    words = _split(line)
    client_id = _word(words, CLIENT_ID_INDEX)
    raw_topic = _word(words, PUBLISH_TOPIC_INDEX)
    raw_size = _word(words, PUBLISH_SIZE_INDEX)
    if client_id is None or raw_topic is None or raw_size is None:
        return UNRECOGNIZED

    topic = strip_chars(raw_topic, "',")
    size = to_int_or_none(strip_chars(raw_size, "("))
    if not topic or size is None or size < 0:
        return UNRECOGNIZED
    return LogEvent(EventKind.PUBLISH, client_id=client_id, topic=topic, message_size=size)
