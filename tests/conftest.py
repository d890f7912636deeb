import threading

import pytest

from logreader.live_state import LiveState
from logreader.reconciler import Reconciler


class FakeTrafficStore:
    """内存版存储：行为与 MySQL 的 upsert / delete 语义一致"""

    def __init__(self):
        self.clients = {}
        self.topics = {}
        self.realtime = {}
        self.calls = []
        self.fail_on = set()      # 方法名集合：调用时抛异常
        self.cleared = 0
        self.ensured = 0
        self._lock = threading.Lock()

    def _maybe_fail(self, method):
        self.calls.append(method)
        if method in self.fail_on:
            raise RuntimeError(f"{method} unavailable")

    def ensure_tables(self):
        self._maybe_fail("ensure_tables")
        self.ensured += 1

    def clear_all_tables(self):
        self._maybe_fail("clear_all_tables")
        self.clients.clear()
        self.topics.clear()
        self.realtime.clear()
        self.cleared += 1

    def upsert_client(self, name, msg_publish_count, accumulated_msg_size, platform, topic):
        self._maybe_fail("upsert_client")
        with self._lock:
            self.clients[name] = {
                "name": name,
                "msg_publish_count": msg_publish_count,
                "accumulated_msg_size": accumulated_msg_size,
                "platform": platform,
                "topic": topic,
            }

    def upsert_topic(self, name, msg_publish_count, accumulated_msg_size, start_date, participants):
        self._maybe_fail("upsert_topic")
        with self._lock:
            old = self.topics.get(name)
            self.topics[name] = {
                "topic": name,
                "msg_publish_count": msg_publish_count,
                "accumulated_msg_size": accumulated_msg_size,
                # ON DUPLICATE KEY UPDATE 不覆盖 start_date
                "start_date": old["start_date"] if old else start_date,
                "participants": participants,
            }

    def delete_topic(self, name):
        self._maybe_fail("delete_topic")
        with self._lock:
            self.topics.pop(name, None)

    def count_realtime_rows(self):
        self._maybe_fail("count_realtime_rows")
        return len(self.realtime)

    def delete_oldest_realtime_row(self):
        self._maybe_fail("delete_oldest_realtime_row")
        with self._lock:
            if self.realtime:
                del self.realtime[min(self.realtime)]

    def upsert_realtime_row(self, row):
        self._maybe_fail("upsert_realtime_row")
        with self._lock:
            self.realtime[row.date] = row


class SecondClock:
    """每次调用前进 1 秒的时间源，保证 realtime 主键不重复"""

    def __init__(self, start):
        self.current = start

    def __call__(self):
        from datetime import timedelta
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


@pytest.fixture
def store():
    return FakeTrafficStore()


@pytest.fixture
def state():
    return LiveState()


@pytest.fixture
def reconciler(state, store):
    return Reconciler(state, store)


@pytest.fixture
def second_clock():
    from datetime import datetime
    return SecondClock(datetime(2024, 5, 1, 12, 0, 0))
