# -*- coding: utf-8 -*-
# mydataclass/db_config.py
from __future__ import annotations

"""
MySQL 连接配置（来自 db_config.yaml 的 mysqlconfig 块）。
启动时构造一次，显式传给所有 DAO。
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List

from commons.base_dataclasses import BaseDataClass
from commons.normalizers import (
    empty_to_none,
    to_int_or_none,
    ensure_at_least,
    ensure_not_empty,
)


@dataclass(frozen=True, slots=True)
class DbConfig(BaseDataClass):
    """
    字段说明：
      - host / port / user / password / database: 连接参数
      - pool_size: 连接池大小（定时线程与读日志线程各自会占用连接）
      - pool_name: 连接池名称，同名配置共享一个池
    """

    host: str
    database: str
    user: str
    password: str = ""
    port: int = 3306
    pool_size: int = 4
    pool_name: str = "logreader_pool"

    DEFAULTS: ClassVar[Dict[str, Any]] = {
        "port": 3306,
        "pool_size": 4,
        "password": "",
    }

    FIELD_MAPPING: ClassVar[Dict[str, str]] = {
        "username": "user",  # 兼容 jdbc 风格的键名
        "db": "database",
    }

    CONVERTERS: ClassVar[Dict[str, Any]] = {
        "host": empty_to_none,
        "database": empty_to_none,
        "user": empty_to_none,
        "port": to_int_or_none,
        "pool_size": to_int_or_none,
        "password": lambda v: "" if v is None else str(v),
    }

    VALIDATORS: ClassVar[List] = [
        ensure_not_empty("host"),
        ensure_not_empty("database"),
        ensure_not_empty("user"),
        ensure_at_least("port", 1),
        ensure_at_least("pool_size", 1),
    ]

    def connect_kwargs(self) -> Dict[str, Any]:
        """mysql.connector.connect / MySQLConnectionPool 需要的连接参数"""
        return {
            "host": self.host,
            "port": self.port,
            "user": self.user,
            "password": self.password,
            "database": self.database,
        }

    def __repr__(self) -> str:
        # 密码不进日志
        return (f"DbConfig(host={self.host!r}, port={self.port}, user={self.user!r}, "
                f"database={self.database!r}, pool_size={self.pool_size})")
