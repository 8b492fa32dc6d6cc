"""
筛选、搜索与排序

叠加在 TraceStore 的时间倒序迭代之上，得到 Trace 列表面板实际展示的条目。
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

from ..utils.urls import extract_domain
from .models import Trace

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS", "CONNECT", "TRACE")
STATUS_CLASSES = ("1xx", "2xx", "3xx", "4xx", "5xx")
ALL_SOURCES = "All"


class SortSource(str, Enum):
    TIMESTAMP = "timestamp"
    DURATION = "duration"
    STATUS = "status"
    METHOD = "method"
    URL = "url"
    SOURCE = "source"


class SortOrder(str, Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"

    def flipped(self) -> "SortOrder":
        if self is SortOrder.ASCENDING:
            return SortOrder.DESCENDING
        return SortOrder.ASCENDING


@dataclass
class TraceSort:
    source: SortSource = SortSource.TIMESTAMP
    order: SortOrder = SortOrder.DESCENDING


@dataclass
class TraceFilter:
    """
    当前生效的筛选条件

    methods / status_classes 为空表示不过滤；sources 为 None 表示 All。
    """

    methods: set[str] = field(default_factory=set)
    status_classes: set[str] = field(default_factory=set)
    sources: set[str] | None = None

    @property
    def is_empty(self) -> bool:
        return not self.methods and not self.status_classes and self.sources is None

    def toggle_method(self, method: str) -> None:
        self.methods ^= {method}

    def toggle_status(self, status_class: str) -> None:
        self.status_classes ^= {status_class}

    def toggle_source(self, source: str, known_sources: list[str]) -> None:
        """
        切换来源筛选

        选择 All 会清除来源筛选；全部来源都被选中时同样回到 All。
        """
        if source == ALL_SOURCES:
            self.sources = None
            return

        selected = set() if self.sources is None else set(self.sources)
        selected ^= {source}

        if known_sources and selected >= set(known_sources):
            self.sources = None
        else:
            self.sources = selected


def parse_status_pattern(pattern: str) -> tuple[int, int] | None:
    """
    解析状态码模式

    支持：
    - 精确匹配：404
    - 范围匹配：200-299
    - xx 模式：2xx, 4xx, 5xx

    Returns:
        闭区间 (起始, 结束)；无法识别时返回 None
    """
    pattern = pattern.strip().lower()

    if pattern.isdigit():
        return (int(pattern), int(pattern))

    if "-" in pattern:
        try:
            start, end = pattern.split("-")
            return (int(start), int(end))
        except ValueError:
            return None

    if pattern.endswith("xx") and len(pattern) == 3:
        try:
            prefix = int(pattern[0])
        except ValueError:
            return None
        return (prefix * 100, prefix * 100 + 99)

    return None


def status_matches(pattern: str, status: int) -> bool:
    bounds = parse_status_pattern(pattern)
    if bounds is None:
        return False
    return bounds[0] <= status <= bounds[1]


def trace_source(trace: Trace) -> str:
    """Trace 的来源：优先 serviceName，其次请求域名"""
    return trace.service_name or trace.host or extract_domain(trace.uri)


def services_from_traces(traces: Iterable[Trace]) -> list[str]:
    """收集所有出现过的来源，按字母排序"""
    return sorted({source for source in (trace_source(t) for t in traces) if source})


def fuzzy_match(query: str, text: str) -> bool:
    """
    模糊匹配，不区分大小写

    查询中的每个字符按顺序出现即视为匹配，如 "apu" 可以匹配 "/api/users"。
    逐字符线性扫描，耗时与 text 长度成正比。
    """
    remaining = iter(text.casefold())
    return all(char in remaining for char in query.casefold())


def apply_filters(traces: Iterable[Trace], trace_filter: TraceFilter, search_query: str = "") -> list[Trace]:
    """按搜索词、来源、状态码分类、方法依次过滤"""
    result = []

    for trace in traces:
        if search_query and not fuzzy_match(search_query, trace.uri):
            continue

        if trace_filter.sources is not None and trace_source(trace) not in trace_filter.sources:
            continue

        # 尚未收到响应的请求不受状态码筛选影响
        if trace_filter.status_classes and trace.status is not None:
            if not any(status_matches(p, trace.status) for p in trace_filter.status_classes):
                continue

        if trace_filter.methods and trace.method not in trace_filter.methods:
            continue

        result.append(trace)

    return result


def _sort_value(trace: Trace, source: SortSource):
    if source is SortSource.TIMESTAMP:
        return trace.timestamp
    if source is SortSource.DURATION:
        return trace.duration
    if source is SortSource.STATUS:
        return trace.status
    if source is SortSource.METHOD:
        return trace.method
    if source is SortSource.URL:
        return trace.uri
    return trace_source(trace) or None


def sort_traces(traces: list[Trace], trace_sort: TraceSort) -> list[Trace]:
    """
    排序

    输入已经按 (时间戳降序, id 升序) 排列；稳定排序保证相同值保持这一顺序。
    缺少排序字段的 Trace 无论升降序都排在最后。
    """
    if trace_sort.source is SortSource.TIMESTAMP and trace_sort.order is SortOrder.DESCENDING:
        return list(traces)

    with_value = [t for t in traces if _sort_value(t, trace_sort.source) is not None]
    without_value = [t for t in traces if _sort_value(t, trace_sort.source) is None]

    reverse = trace_sort.order is SortOrder.DESCENDING
    if trace_sort.source is SortSource.TIMESTAMP:
        # 升序时同一时间戳仍按 id 升序
        with_value.sort(key=lambda t: (t.timestamp, t.id))
        return with_value + without_value

    # reverse=True 同样是稳定排序
    ordered = sorted(with_value, key=lambda t: _sort_value(t, trace_sort.source), reverse=reverse)
    return ordered + without_value


def rendered_items(
    traces: Iterable[Trace],
    trace_filter: TraceFilter,
    search_query: str,
    trace_sort: TraceSort,
) -> list[Trace]:
    """Trace 列表面板实际展示的条目"""
    return sort_traces(apply_filters(traces, trace_filter, search_query), trace_sort)
