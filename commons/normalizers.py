# -*- coding: utf-8 -*-
# commons/normalizers.py
from __future__ import annotations

"""
normalizers
-----------
通用“字段级转换 / 行级校验”函数库。
转换函数：func(value) -> new_value；校验函数：func(row_dict) -> None（异常表示失败）。
日志行解析和配置构造共用这里的函数。
"""

from typing import Any, Callable, Optional


def empty_to_none(x: Any) -> Any:
    """将空串（含全空白）转换为 None，其它值保持不变。"""
    return None if isinstance(x, str) and x.strip() == "" else x


def to_int_or_none(x: Any) -> Optional[int]:
    """
    把值尽量强转为 int；空串/None/非法值返回 None：
    - "123" -> 123
    - 123.0 -> 123
    - "" / "  " / None -> None
    - "abc" / "12.5kb" -> None
    """
    if x is None or isinstance(x, bool):
        return None
    if isinstance(x, float):
        return int(x) if x.is_integer() else None
    try:
        return int(str(x).strip()) if str(x).strip() != "" else None
    except ValueError:
        return None


def to_bool_or_none(x: Any) -> Optional[bool]:
    """
    将值转换为 bool；常见真值：True/1/"1"/"true"/"yes"/"y"
    常见假值：False/0/"0"/"false"/"no"/"n"
    其它或空返回 None。
    """
    if x is None:
        return None
    if isinstance(x, bool):
        return x
    s = str(x).strip().lower()
    if s in {"1", "true", "yes", "y"}:
        return True
    if s in {"0", "false", "no", "n"}:
        return False
    return None


def strip_or_none(x: Any) -> Optional[str]:
    """去掉首尾空白，空字符串返回 None。"""
    if x is None:
        return None
    if not isinstance(x, str):
        return str(x)
    s = x.strip()
    return s if s != "" else None


def strip_chars(token: str, chars: str) -> str:
    """删除 token 中出现的所有 chars 字符（不只是首尾），如 "'room1_data'," -> "room1_data"。"""
    return token.translate({ord(c): None for c in chars})


def strip_suffix(name: str, suffix: str) -> Optional[str]:
    """name 以 suffix 结尾时返回去掉后缀的部分，否则返回 None。"""
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return None


def ensure_at_least(key: str, minimum: int) -> Callable[[dict], None]:
    """
    生成行级校验器：row[key] 必须是 int 且 >= minimum。
    用于配置校验（interval_sec / number_of_records / pool_size）。
    """
    def _validate(row: dict) -> None:
        val = row.get(key)
        if not isinstance(val, int) or isinstance(val, bool):
            raise ValueError(f"{key} 必须是整数，实际为 {val!r}")
        if val < minimum:
            raise ValueError(f"{key}({val}) < {minimum}")
    _validate.__name__ = f"ensure_{key}_ge_{minimum}"
    return _validate


def ensure_not_empty(key: str) -> Callable[[dict], None]:
    """生成行级校验器：row[key] 不能为空（None / 空串）。"""
    def _validate(row: dict) -> None:
        if empty_to_none(row.get(key)) is None:
            raise ValueError(f"{key} 不能为空")
    _validate.__name__ = f"ensure_{key}_not_empty"
    return _validate
