import pytest

from logreader.models import EventKind
from log_lines import (
    connect_line,
    disconnect_line,
    publish_line,
    socket_error_line,
    subscribe_header,
    topic_line,
)


def feed(reconciler, *lines):
    return [reconciler.feed_line(line) for line in lines]


def join(reconciler, client_id, topic):
    feed(reconciler, subscribe_header(client_id), topic_line(f"{topic}_join"))


# ---------------- 连接 / 断开 ----------------

def test_connect_creates_client(reconciler, state):
    feed(reconciler, connect_line("*alice_room1_web"))
    client = state.clients["*alice_room1_web"]
    assert (client.name, client.topic, client.platform) == ("alice", "room1", "web")


def test_connect_without_sentinel_is_ignored(reconciler, state):
    feed(reconciler, connect_line("mosq-monitor"), connect_line("alice_room1_web"))
    assert state.clients == {}


def test_connect_with_malformed_id_is_ignored(reconciler, state):
    feed(reconciler, connect_line("*alice"))
    assert state.clients == {}


def test_repeated_connect_keeps_existing_counters(reconciler, state):
    feed(reconciler,
         connect_line("*alice_room1_web"),
         publish_line("*alice_room1_web", "room1_data", 10),
         connect_line("*alice_room1_web"))
    assert state.clients["*alice_room1_web"].msg_publish_count == 1


@pytest.mark.parametrize("events,present", [
    (["connect"], True),
    (["connect", "disconnect"], False),
    (["connect", "socket_error"], False),
    (["connect", "disconnect", "connect"], True),
    (["disconnect", "socket_error"], False),
    (["connect", "socket_error", "connect", "disconnect"], False),
    (["connect", "connect", "disconnect"], False),
])
def test_client_map_reflects_net_effect(reconciler, state, events, present):
    builders = {"connect": connect_line, "disconnect": disconnect_line, "socket_error": socket_error_line}
    feed(reconciler, *(builders[e]("*alice_room1_web") for e in events))
    assert ("*alice_room1_web" in state.clients) is present


# ---------------- 订阅 ----------------

def test_join_creates_topic_then_increments(reconciler, state):
    join(reconciler, "*c1_topicA_web", "topicA")
    assert state.topics["topicA"].participants == 1

    join(reconciler, "*c2_topicA_web", "topicA")
    assert list(state.topics) == ["topicA"]
    assert state.topics["topicA"].participants == 2


def test_line_after_header_is_always_topic_line(reconciler, state):
    """头行之后的那一行即使看起来像 CONNECT，也按话题行处理"""
    events = feed(reconciler, subscribe_header("*c1_t_web"), connect_line("*bob_room1_web"))
    assert events[1].kind is EventKind.SUBSCRIBE_TOPIC
    assert state.clients == {}
    assert not reconciler.subscribe.awaiting_topic


def test_non_join_topic_is_ignored(reconciler, state):
    feed(reconciler, subscribe_header("*c1_t_web"), topic_line("room1_data"))
    assert state.topics == {}
    assert not reconciler.subscribe.awaiting_topic


def test_unsubscribe_is_noop(reconciler, state):
    join(reconciler, "*c1_room1_web", "room1")
    feed(reconciler, "1714550400: Received UNSUBSCRIBE from *c1_room1_web\n", topic_line("room1_join"))
    # UNSUBSCRIBE 不进入 AWAITING_TOPIC，下一行不是 SUBSCRIBE 头行之后的话题行
    assert state.topics["room1"].participants == 1


# ---------------- 发布 ----------------

def test_publish_updates_existing_entities(reconciler, state):
    feed(reconciler, connect_line("*alice_room1_web"))
    join(reconciler, "*alice_room1_web", "room1")
    feed(reconciler,
         publish_line("*alice_room1_web", "room1_data", 128),
         publish_line("*alice_room1_web", "room1_data", 72))

    topic = state.topics["room1"]
    client = state.clients["*alice_room1_web"]
    assert (topic.msg_publish_count, topic.accumulated_msg_size) == (2, 200)
    assert (client.msg_publish_count, client.accumulated_msg_size) == (2, 200)
    assert state.senders == {"*alice_room1_web"}


def test_publish_to_unknown_entities_creates_nothing(reconciler, state):
    feed(reconciler, publish_line("*ghost_room9_web", "room9_data", 50))
    assert state.clients == {}
    assert state.topics == {}
    # 发送者仍然计入
    assert state.senders == {"*ghost_room9_web"}


def test_publish_updates_only_existing_side(reconciler, state):
    join(reconciler, "*x_room1_web", "room1")
    feed(reconciler, publish_line("*ghost_room1_web", "room1_data", 50))
    assert state.topics["room1"].msg_publish_count == 1
    assert state.clients == {}


def test_publish_other_suffix_is_ignored(reconciler, state):
    join(reconciler, "*x_room1_web", "room1")
    feed(reconciler, publish_line("*x_room1_web", "monitoring", 50))
    assert state.topics["room1"].msg_publish_count == 0
    assert state.senders == set()


# ---------------- 删除话题 ----------------

def test_delete_removes_topic_and_row(reconciler, state, store):
    join(reconciler, "*x_room1_web", "room1")
    feed(reconciler, publish_line("*x_room1_web", "room1_data", 50))
    store.upsert_topic("room1", 1, 50, state.topics["room1"].start_date, 1)

    feed(reconciler, publish_line("*x_room1_web", "room1_delete", 0))
    assert "room1" not in state.topics
    assert "room1" not in store.topics


def test_delete_unknown_topic_is_noop(reconciler, store):
    feed(reconciler, publish_line("*x_room1_web", "room7_delete", 0))
    assert "delete_topic" not in store.calls


def test_delete_storage_failure_is_kept_for_retry(reconciler, state, store):
    join(reconciler, "*x_room1_web", "room1")
    store.fail_on.add("delete_topic")
    feed(reconciler, publish_line("*x_room1_web", "room1_delete", 0))
    assert "room1" not in state.topics
    assert state.pending_deletes == {"room1"}


def test_rejoin_drops_pending_delete(reconciler, state, store):
    join(reconciler, "*x_room1_web", "room1")
    store.fail_on.add("delete_topic")
    feed(reconciler, publish_line("*x_room1_web", "room1_delete", 0))
    join(reconciler, "*y_room1_web", "room1")
    assert state.pending_deletes == set()
    assert state.topics["room1"].participants == 1


def test_unrecognized_line_changes_nothing(reconciler, state):
    events = feed(reconciler, "1714550400: New connection from 10.0.0.1 on port 1883.\n")
    assert events[0].kind is EventKind.UNRECOGNIZED
    assert state.clients == {} and state.topics == {}
