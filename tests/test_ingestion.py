import io
from unittest import mock

import pytest

from logreader.ingestion import IngestionLoop
from log_lines import connect_line, disconnect_line


def test_reads_until_eof(reconciler, state):
    stream = io.StringIO(connect_line("*alice_room1_web") + connect_line("*bob_room1_ios"))
    loop = IngestionLoop(reconciler, stream)
    assert loop.run() == 2
    assert set(state.clients) == {"*alice_room1_web", "*bob_room1_ios"}


def test_empty_stream(reconciler):
    assert IngestionLoop(reconciler, io.StringIO("")).run() == 0


def test_blank_line_is_not_eof(reconciler, state):
    stream = io.StringIO("\n" + connect_line("*alice_room1_web"))
    assert IngestionLoop(reconciler, stream).run() == 2
    assert "*alice_room1_web" in state.clients


def test_line_error_is_logged_and_skipped(reconciler, state):
    stream = io.StringIO("bad line\n" + connect_line("*alice_room1_web"))
    original = reconciler.feed_line

    def flaky(line):
        if line.startswith("bad"):
            raise RuntimeError("boom")
        return original(line)

    reconciler.feed_line = flaky
    loop = IngestionLoop(reconciler, stream)
    assert loop.run() == 2
    assert loop.lines_failed == 1
    assert "*alice_room1_web" in state.clients


def test_stream_error_propagates(reconciler):
    stream = mock.Mock()
    stream.readline.side_effect = OSError("broken pipe")
    with pytest.raises(OSError):
        IngestionLoop(reconciler, stream).run()


def test_stop_event_ends_loop(reconciler):
    stream = io.StringIO(connect_line("*a_r_web") + disconnect_line("*a_r_web"))
    loop = IngestionLoop(reconciler, stream)
    loop.stop_evt.set()
    assert loop.run() == 0


def test_invalid_utf8_line_is_skipped(reconciler, state):
    raw = b"1714550400: Received PUBLISH from \xff\xfe bad\n" + connect_line("*alice_room1_web").encode()
    stream = io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8")
    loop = IngestionLoop(reconciler, stream)
    assert loop.run() == 2
    assert loop.lines_failed == 0
    assert "*alice_room1_web" in state.clients
