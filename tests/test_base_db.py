from unittest import mock

import mysql.connector
import pytest

from commons import base_db
from commons.base_db import BaseDB, StorageUnavailableError
from mydataclass.db_config import DbConfig


@pytest.fixture
def db_config():
    return DbConfig(host="localhost", database="mqtt_traffic_test", user="root",
                    password="root", pool_name="test_pool")


@pytest.fixture(autouse=True)
def reset_pools():
    BaseDB._pools.clear()
    yield
    BaseDB._pools.clear()


@pytest.fixture
def no_retry_sleep(monkeypatch):
    monkeypatch.setattr("tools.retry_on_exception.time.sleep", lambda _: None)


def test_connection_pool_created_and_shared(db_config):
    """同一个 pool_name 只创建一次连接池"""
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool") as pool_cls:
        first = BaseDB(db_config)
        second = BaseDB(db_config)
    assert pool_cls.call_count == 1
    assert first.connection_pool is second.connection_pool
    assert first.use_pool is True
    kwargs = pool_cls.call_args.kwargs
    assert kwargs["pool_name"] == "test_pool"
    assert kwargs["database"] == "mqtt_traffic_test"


def test_pool_failure_falls_back_to_direct(db_config):
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool",
                           side_effect=mysql.connector.Error("boom")), \
            mock.patch.object(base_db.mysql.connector, "connect") as connect:
        db = BaseDB(db_config)
        conn = db.get_connection()
    assert db.use_pool is False
    assert conn is connect.return_value
    assert connect.call_args.kwargs["autocommit"] is True


def test_get_connection_raises_when_unavailable(db_config, no_retry_sleep):
    pool = mock.Mock()
    pool.get_connection.side_effect = mysql.connector.Error("pool exhausted")
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool", return_value=pool):
        db = BaseDB(db_config)
        with pytest.raises(StorageUnavailableError):
            db.get_connection()
    # retry_on_exception 默认重试 3 次
    assert pool.get_connection.call_count == 3


def test_connection_ctx_closes_connection(db_config):
    pool = mock.Mock()
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool", return_value=pool):
        db = BaseDB(db_config)
        with db.connection_ctx() as conn:
            assert conn is pool.get_connection.return_value
    conn.close.assert_called_once()


def test_execute_commits_and_returns_rowcount(db_config):
    pool = mock.Mock()
    conn = pool.get_connection.return_value
    conn.cursor.return_value.rowcount = 2
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool", return_value=pool):
        db = BaseDB(db_config)
        assert db.execute("DELETE FROM topic") == 2
    conn.commit.assert_called_once()
    conn.cursor.return_value.close.assert_called_once()


def test_execute_reraises_sql_error(db_config):
    pool = mock.Mock()
    cursor = pool.get_connection.return_value.cursor.return_value
    cursor.execute.side_effect = mysql.connector.Error("syntax")
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool", return_value=pool):
        db = BaseDB(db_config)
        with pytest.raises(mysql.connector.Error):
            db.execute("DELETE FROM nowhere")
    cursor.close.assert_called_once()


def test_close_connection_safe(db_config):
    """关闭空连接或关闭失败都不应抛出"""
    with mock.patch.object(base_db.pooling, "MySQLConnectionPool"):
        db = BaseDB(db_config)
    db.close_connection(None)

    class DummyConn:
        def close(self):
            raise mysql.connector.Error("关闭失败")

    db.close_connection(DummyConn())
