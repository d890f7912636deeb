# -*- coding: utf-8 -*-
"""
BaseDataClass
-------------
为 dataclass 子类提供统一的构造/清洗/校验与序列化能力。
流程：字段映射 -> 默认值合并 -> 字段转换 -> 行级校验 -> 构造实例 -> 序列化。

在本项目里主要用于两类数据：
- 配置（YAML 块 -> DbConfig / LogReaderConfig），配置错误必须在启动时直接失败；
- 落库行（RealtimeRow 等），to_dict 便于日志输出与测试断言。

使用建议：
- 子类必须使用 @dataclass 装饰。
- DEFAULTS 中的可变对象请使用 lambda 返回，或依赖本类的 deepcopy 保护。
- CONVERTERS 建议为纯函数。
- VALIDATORS 只抛错不改值。
"""
from __future__ import annotations

import copy
import json
import logging
import dataclasses
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    List,
    Mapping,
    Type,
    TypeVar,
)

from commons.base_logger import BaseLogger

_DEFAULT_LOGGER = BaseLogger(name="BaseDataClass").logger

T = TypeVar("T", bound="BaseDataClass")
Converter = Callable[[Any], Any]
RowValidator = Callable[[Dict[str, Any]], None]


class BaseDataClass:
    """dataclass 子类的通用基类：构造、清洗、校验、序列化。

    子类可配置以下类变量以定制行为：
    - DEFAULTS: 字段默认值；值为 callable 时在每次构造时调用；非 callable 将进行 deepcopy。
    - FIELD_MAPPING: 外部字段名 -> 内部字段名 的映射。
    - CONVERTERS: 字段级转换器；在默认值合并后、校验前执行。
    - VALIDATORS: 行级校验器；接收合并/转换后的 dict，抛出异常即视为校验失败。
    - LOGGER: 日志器。
    """

    DEFAULTS: ClassVar[Dict[str, Any]] = {}
    FIELD_MAPPING: ClassVar[Dict[str, str]] = {}
    CONVERTERS: ClassVar[Dict[str, Converter]] = {}
    VALIDATORS: ClassVar[List[RowValidator]] = []

    LOGGER: ClassVar[logging.Logger] = _DEFAULT_LOGGER

    @classmethod
    def _logger(cls) -> logging.Logger:
        return getattr(cls, "LOGGER", _DEFAULT_LOGGER) or _DEFAULT_LOGGER

    # ---------------- 构造（单行） ----------------
    @classmethod
    def from_dict(
        cls: Type[T],
        data: Mapping[str, Any] | None,
        *,
        strict: bool = True,
        log_errors: bool = True,
    ) -> T:
        """从单个字典构造实例：映射 -> 默认 -> 转换 -> 校验 -> 构造。

        参数：
            data: 外部输入（YAML 块）。None 视为空 dict。
            strict: True 则转换失败直接抛出；False 则记录日志保留原值。
            log_errors: 是否记录警告日志。
        """
        logger = cls._logger()

        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise TypeError(f"from_dict 需要 Mapping，实际得到: {type(data).__name__}")

        try:
            dc_names = {f.name for f in dataclasses.fields(cls)}
        except TypeError:
            raise TypeError(f"{cls.__name__} 必须使用 @dataclass 装饰")

        # 1) 字段映射（未知键直接丢弃，配置里多写的键不影响启动）
        mapped: Dict[str, Any] = {}
        for ext_key, val in data.items():
            internal = cls.FIELD_MAPPING.get(ext_key, ext_key)
            if internal in dc_names:
                mapped[internal] = val
            elif log_errors:
                logger.debug("%s 忽略未知字段 %r", cls.__name__, ext_key)

        # 2) 默认值展开
        defaults_expanded: Dict[str, Any] = {}
        for k, v in cls.DEFAULTS.items():
            defaults_expanded[k] = v() if callable(v) else copy.deepcopy(v)

        combined: Dict[str, Any] = {**defaults_expanded, **mapped}

        # 3) 字段级转换
        for key, fn in cls.CONVERTERS.items():
            if key in combined:
                try:
                    combined[key] = fn(combined[key])
                except Exception as e:
                    if strict:
                        raise
                    if log_errors:
                        snippet = repr(str(combined.get(key))[:120])
                        logger.warning(
                            "字段转换失败 %s (%s): %s; 值片段=%s",
                            key, type(e).__name__, e, snippet,
                        )

        # 4) 行级校验（校验失败总是抛出）
        for validate in cls.VALIDATORS:
            try:
                validate(combined)
            except Exception as e:
                if log_errors:
                    vname = getattr(validate, "__name__", repr(validate))
                    logger.warning("%s 校验失败 (%s): %s", cls.__name__, vname, e)
                raise

        # 5) 构造 dataclass 实例
        slim = {k: v for k, v in combined.items() if k in dc_names}
        try:
            return cls(**slim)  # type: ignore[arg-type]
        except TypeError as e:
            if log_errors:
                missing = [f.name for f in dataclasses.fields(cls) if f.name not in slim]
                logger.warning("构造 %s 失败: %s; 缺失=%r", cls.__name__, e, missing)
            raise

    # ---------------- 序列化 ----------------
    def to_dict(self, *, drop_none: bool = False) -> Dict[str, Any]:
        """导出为 dict；drop_none=True 时剔除值为 None 的字段"""
        if not dataclasses.is_dataclass(self):
            raise TypeError(f"{type(self).__name__} 不是 dataclass，无法 asdict")
        d = dataclasses.asdict(self)
        if not drop_none:
            return d
        return {k: v for k, v in d.items() if v is not None}

    def to_json(self, *, ensure_ascii: bool = False, drop_none: bool = False) -> str:
        """导出 JSON 文本（日志输出用）"""
        return json.dumps(self.to_dict(drop_none=drop_none), ensure_ascii=ensure_ascii, default=str)
