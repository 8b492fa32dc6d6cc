"""Trace 存储测试"""

import pytest

from cli_network_viewer.core.models import TraceState
from cli_network_viewer.core.trace_store import TIMEOUT_BODY, TraceStore

from factories import make_trace


class TestUpsert:
    """插入与替换"""

    def setup_method(self):
        self.store = TraceStore()

    def test_same_id_twice_keeps_later_payload(self):
        self.store.upsert(make_trace("a", 100, state=TraceState.SENT))
        self.store.upsert(make_trace("a", 100, state=TraceState.RECEIVED, status=201))

        assert len(self.store) == 1
        trace = self.store.get("a")
        assert trace.state is TraceState.RECEIVED
        assert trace.status == 201

    def test_upsert_with_changed_timestamp_reindexes(self):
        self.store.upsert(make_trace("a", 100))
        self.store.upsert(make_trace("b", 200))
        self.store.upsert(make_trace("a", 300))

        assert [t.id for t in self.store.iterate_newest_first()] == ["a", "b"]
        assert len(self.store) == 2

    def test_contains(self):
        self.store.upsert(make_trace("a"))
        assert "a" in self.store
        assert "b" not in self.store


class TestOrdering:
    """迭代顺序"""

    def setup_method(self):
        self.store = TraceStore()

    def test_newest_first(self):
        for trace_id, ts in [("a", 100), ("b", 300), ("c", 200)]:
            self.store.upsert(make_trace(trace_id, ts))

        timestamps = [t.timestamp for t in self.store.iterate_newest_first()]

        assert timestamps == [300, 200, 100]

    def test_ties_do_not_collapse(self):
        """相同时间戳的不同 Trace 都保留，按 id 升序"""
        self.store.upsert(make_trace("b", 100))
        self.store.upsert(make_trace("a", 100))
        self.store.upsert(make_trace("c", 100))

        assert [t.id for t in self.store.iterate_newest_first()] == ["a", "b", "c"]

    def test_iteration_is_restartable(self):
        self.store.upsert(make_trace("a", 1))
        self.store.upsert(make_trace("b", 2))

        first = list(self.store.iterate_newest_first())
        second = list(self.store.iterate_newest_first())

        assert [t.id for t in first] == [t.id for t in second] == ["b", "a"]

    def test_iteration_uses_snapshot(self):
        """迭代过程中修改存储不影响已开始的迭代"""
        self.store.upsert(make_trace("a", 1))
        iterator = self.store.iterate_newest_first()
        self.store.upsert(make_trace("b", 2))

        assert [t.id for t in iterator] == ["a"]


class TestMarkTimedOut:
    """超时标记"""

    def setup_method(self):
        self.store = TraceStore()

    def test_sent_becomes_timeout(self):
        self.store.upsert(make_trace("a", state=TraceState.SENT, status=None, request_body="{}"))

        assert self.store.mark_timed_out("a") is True

        trace = self.store.get("a")
        assert trace.state is TraceState.TIMEOUT
        assert trace.status is None
        assert trace.response_body == TIMEOUT_BODY
        assert trace.pretty_response_body == TIMEOUT_BODY
        assert trace.request_body == "{}"

    def test_received_unchanged(self):
        original = make_trace("a", state=TraceState.RECEIVED, status=200, response_body="ok")
        self.store.upsert(original)

        assert self.store.mark_timed_out("a") is False
        assert self.store.get("a") == original

    def test_unknown_id_is_noop(self):
        assert self.store.mark_timed_out("missing") is False
        assert len(self.store) == 0

    @pytest.mark.parametrize("state", [s for s in TraceState if s is not TraceState.SENT])
    def test_terminal_states_unchanged(self, state):
        assert state.is_terminal
        self.store.upsert(make_trace("a", state=state))

        assert self.store.mark_timed_out("a") is False
        assert self.store.get("a").state is state

    def test_sent_is_not_terminal(self):
        assert not TraceState.SENT.is_terminal


class TestRemove:
    """删除"""

    def setup_method(self):
        self.store = TraceStore()

    def test_remove_returns_trace(self):
        self.store.upsert(make_trace("a", 1))
        self.store.upsert(make_trace("b", 2))

        removed = self.store.remove("a")

        assert removed.id == "a"
        assert [t.id for t in self.store.iterate_newest_first()] == ["b"]

    def test_remove_missing(self):
        assert self.store.remove("missing") is None

    def test_clear(self):
        self.store.upsert(make_trace("a"))
        self.store.clear()

        assert len(self.store) == 0
        assert list(self.store.iterate_newest_first()) == []
