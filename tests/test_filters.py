"""筛选、搜索与排序测试"""

import time

import pytest

from cli_network_viewer.core.filters import (
    ALL_SOURCES,
    SortOrder,
    SortSource,
    TraceFilter,
    TraceSort,
    apply_filters,
    fuzzy_match,
    parse_status_pattern,
    rendered_items,
    services_from_traces,
    sort_traces,
    status_matches,
    trace_source,
)

from factories import make_trace


class TestStatusPattern:
    """状态码模式"""

    @pytest.mark.parametrize("pattern,expected", [
        ("404", (404, 404)),
        ("2xx", (200, 299)),
        ("4XX", (400, 499)),
        ("500-599", (500, 599)),
        ("abc", None),
        ("a-b", None),
    ])
    def test_parse(self, pattern, expected):
        assert parse_status_pattern(pattern) == expected

    def test_matches(self):
        assert status_matches("2xx", 204)
        assert not status_matches("2xx", 301)
        assert not status_matches("nonsense", 200)


class TestSearch:
    """模糊搜索"""

    def test_subsequence_match(self):
        assert fuzzy_match("apu", "/api/users")
        assert not fuzzy_match("pua", "/api/users")

    def test_case_insensitive(self):
        assert fuzzy_match("USERS", "/api/users")

    def test_special_characters_literal(self):
        assert fuzzy_match("?q=", "/s?q=1")
        assert not fuzzy_match("(", "/s")

    def test_repeated_characters_need_repeats(self):
        assert fuzzy_match("aa", "/a/a")
        assert not fuzzy_match("aa", "/a")

    def test_long_run_without_match_is_fast(self):
        """长串重复字符且不匹配时，耗时与 URI 长度成线性关系"""
        traces = [make_trace("1", uri="http://h/?token=" + "a" * 60)]

        started = time.perf_counter()
        result = apply_filters(traces, TraceFilter(), "aaaaaaaaaaz")
        elapsed = time.perf_counter() - started

        assert result == []
        assert elapsed < 0.5

    def test_apply_search(self):
        traces = [make_trace("1", uri="http://h/api/users"), make_trace("2", uri="http://h/health")]
        result = apply_filters(traces, TraceFilter(), "users")
        assert [t.id for t in result] == ["1"]


class TestFilters:
    """方法、状态码与来源筛选"""

    def setup_method(self):
        self.traces = [
            make_trace("1", method="GET", status=200, service_name="api"),
            make_trace("2", method="POST", status=404, service_name="auth"),
            make_trace("3", method="GET", status=None, service_name="api"),
            make_trace("4", method="DELETE", status=500, uri="http://cdn.example.com/x"),
        ]

    def test_empty_filter_passes_everything(self):
        assert len(apply_filters(self.traces, TraceFilter())) == 4

    def test_method_filter(self):
        result = apply_filters(self.traces, TraceFilter(methods={"GET"}))
        assert [t.id for t in result] == ["1", "3"]

    def test_status_filter_keeps_pending(self):
        """没有状态码的请求不受状态码筛选影响"""
        result = apply_filters(self.traces, TraceFilter(status_classes={"4xx"}))
        assert [t.id for t in result] == ["2", "3"]

    def test_source_filter(self):
        result = apply_filters(self.traces, TraceFilter(sources={"cdn.example.com"}))
        assert [t.id for t in result] == ["4"]

    def test_source_falls_back_to_domain(self):
        assert trace_source(self.traces[3]) == "cdn.example.com"

    def test_services_sorted_unique(self):
        assert services_from_traces(self.traces) == ["api", "auth", "cdn.example.com"]

    def test_toggle_method(self):
        trace_filter = TraceFilter()
        trace_filter.toggle_method("GET")
        assert trace_filter.methods == {"GET"}
        trace_filter.toggle_method("GET")
        assert trace_filter.is_empty

    def test_toggle_source_all_resets(self):
        trace_filter = TraceFilter()
        trace_filter.toggle_source("api", ["api", "auth"])
        assert trace_filter.sources == {"api"}

        trace_filter.toggle_source(ALL_SOURCES, ["api", "auth"])
        assert trace_filter.sources is None

    def test_toggle_every_source_resets_to_all(self):
        trace_filter = TraceFilter()
        trace_filter.toggle_source("api", ["api", "auth"])
        trace_filter.toggle_source("auth", ["api", "auth"])
        assert trace_filter.sources is None


class TestSort:
    """排序"""

    def setup_method(self):
        # 已按存储顺序排列：时间戳降序
        self.traces = [
            make_trace("c", 300, duration=None, status=500),
            make_trace("b", 200, duration=50, status=200),
            make_trace("a", 100, duration=80, status=None),
        ]

    def test_default_keeps_store_order(self):
        assert [t.id for t in sort_traces(self.traces, TraceSort())] == ["c", "b", "a"]

    def test_timestamp_ascending(self):
        result = sort_traces(self.traces, TraceSort(SortSource.TIMESTAMP, SortOrder.ASCENDING))
        assert [t.id for t in result] == ["a", "b", "c"]

    def test_duration_descending_missing_last(self):
        result = sort_traces(self.traces, TraceSort(SortSource.DURATION, SortOrder.DESCENDING))
        assert [t.id for t in result] == ["a", "b", "c"]

    def test_duration_ascending_missing_last(self):
        result = sort_traces(self.traces, TraceSort(SortSource.DURATION, SortOrder.ASCENDING))
        assert [t.id for t in result] == ["b", "a", "c"]

    def test_status_ascending(self):
        result = sort_traces(self.traces, TraceSort(SortSource.STATUS, SortOrder.ASCENDING))
        assert [t.id for t in result] == ["b", "c", "a"]

    def test_order_flipped(self):
        assert SortOrder.ASCENDING.flipped() is SortOrder.DESCENDING
        assert SortOrder.DESCENDING.flipped() is SortOrder.ASCENDING

    def test_rendered_items_filters_then_sorts(self):
        result = rendered_items(
            self.traces,
            TraceFilter(status_classes={"2xx"}),
            "",
            TraceSort(SortSource.TIMESTAMP, SortOrder.ASCENDING),
        )
        assert [t.id for t in result] == ["a", "b"]
