"""
界面渲染

把 AppContext 转换为 rich 的可渲染对象。只读上下文，不修改任何状态。
列表类面板 = 边框 2 行 + 表头 1 行；Body 面板 = 边框 2 行、左右边框 2 列。
"""

import json
from typing import Iterable

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.filters import ALL_SOURCES, SortOrder, trace_source
from ..core.models import Trace, TraceState
from ..dispatcher.context import AppContext
from ..navigation import engine
from ..navigation.blocks import FILTER_CATEGORIES, FILTER_VALUE_SCREENS, ActiveBlock, RequestDetailsPane
from ..navigation.viewport import Viewport
from ..utils.encoding import is_binary_text
from ..utils.urls import parse_query_params
from .keymap import HELP_ROWS

ACTIVE_BORDER = "cyan"
INACTIVE_BORDER = "grey42"
SELECTED_ROW = "reverse"

STATE_STYLES = {
    TraceState.SENT: "yellow",
    TraceState.RECEIVED: "green",
    TraceState.ABORTED: "magenta",
    TraceState.BLOCKED: "magenta",
    TraceState.TIMEOUT: "red",
    TraceState.ERROR: "red",
}

STATUS_STYLES = {
    "1xx": "blue",
    "2xx": "green",
    "3xx": "cyan",
    "4xx": "yellow",
    "5xx": "red",
}

_METHOD_WIDTH = 8
_STATUS_WIDTH = 8
_DURATION_WIDTH = 9
_SOURCE_WIDTH = 18


def _border(active: bool) -> str:
    return ACTIVE_BORDER if active else INACTIVE_BORDER


def _panel(body: RenderableType, title: str, active: bool) -> Panel:
    return Panel(body, title=title, title_align="left", border_style=_border(active), padding=(0, 0))


def _visible(items: list, viewport: Viewport, usable: int) -> Iterable[tuple[int, object]]:
    """视口内可见的 (下标, 条目)"""
    end = viewport.offset + usable if usable > 0 else len(items)
    for index in range(viewport.offset, min(end, len(items))):
        yield index, items[index]


def _cell(value: object, width: int) -> str:
    text = "-" if value is None else str(value)
    if len(text) > width - 1:
        text = text[: width - 2] + "…"
    return text.ljust(width)


def format_status(trace: Trace) -> Text:
    if trace.status is not None:
        return Text(str(trace.status), style=STATUS_STYLES.get(trace.status_class or "", ""))
    return Text(trace.state.value.upper(), style=STATE_STYLES.get(trace.state, ""))


def format_duration(trace: Trace) -> str:
    if trace.duration is None:
        return "-"
    return f"{trace.duration}ms"


# ============== 主区域 ==============

def render_traces(ctx: AppContext) -> Panel:
    nav = ctx.nav
    active = nav.active_block is ActiveBlock.TRACES_LIST
    usable = nav.main_usable_height

    header = Text(
        _cell("Method", _METHOD_WIDTH)
        + _cell("Status", _STATUS_WIDTH)
        + _cell("Duration", _DURATION_WIDTH)
        + _cell("Source", _SOURCE_WIDTH)
        + "URL",
        style="bold",
    )

    rows: list[RenderableType] = [header]
    for index, trace in _visible(ctx.rendered, nav.main, usable):
        row = Text(no_wrap=True, overflow="ellipsis")
        row.append(_cell(trace.method, _METHOD_WIDTH))
        status = format_status(trace)
        status.pad_right(_STATUS_WIDTH - len(status.plain))
        row.append_text(status)
        row.append(_cell(format_duration(trace), _DURATION_WIDTH))
        row.append(_cell(trace_source(trace), _SOURCE_WIDTH))
        row.append(trace.uri)
        if index == nav.main.selected_index:
            row.stylize(SELECTED_ROW if active else "bold")
        rows.append(row)

    title = f"Requests ({len(ctx.rendered)}/{len(ctx.store)})"
    if ctx.search_query or nav.active_block is ActiveBlock.SEARCH_QUERY:
        title += f"  /{ctx.search_query}"
    if nav.main.content_length > usable > 0:
        title += f"  [{nav.main.scrollbar_position}/{nav.main.content_length}]"

    return _panel(Group(*rows), title, active)


def render_summary(ctx: AppContext) -> Panel:
    trace = ctx.selected_trace
    active = ctx.nav.active_block is ActiveBlock.REQUEST_SUMMARY

    if trace is None:
        return _panel(Text("No request selected", style="dim"), "Summary", active)

    line = Text(no_wrap=True, overflow="ellipsis")
    line.append(f"{trace.method} ", style="bold")
    line.append_text(format_status(trace))
    if trace.status_message:
        line.append(f" {trace.status_message}")
    line.append(f"  {trace.http_version or '-'}  {format_duration(trace)}  ")
    line.append(trace.uri)

    if trace.timings is not None:
        timings = "  ".join(f"{name} {value:.1f}ms" for name, value in trace.timings.as_rows())
        return _panel(Group(line, Text(timings, style="dim")), "Summary", active)

    return _panel(line, "Summary", active)


def _render_pairs(
    title: str,
    pairs: list[tuple[str, str]],
    viewport: Viewport,
    usable: int,
    active: bool,
) -> Panel:
    rows: list[RenderableType] = [Text(_cell("Name", 28) + "Value", style="bold")]
    for index, (name, value) in _visible(pairs, viewport, usable):
        row = Text(_cell(name, 28) + value, no_wrap=True, overflow="ellipsis")
        if active and index == viewport.selected_index:
            row.stylize(SELECTED_ROW)
        rows.append(row)
    return _panel(Group(*rows), title, active)


def render_request_details(ctx: AppContext) -> Panel:
    nav = ctx.nav
    trace = ctx.selected_trace
    active = nav.active_block is ActiveBlock.REQUEST_DETAILS

    if nav.request_details_pane is RequestDetailsPane.QUERY:
        pairs = parse_query_params(trace.uri) if trace else []
        return _render_pairs("Query Params  [ ]", pairs, nav.query_params, nav.query_params_usable_height, active)

    pairs = trace.request_headers.items() if trace else []
    return _render_pairs("Request Headers  [ ]", pairs, nav.request_details, nav.request_details_usable_height, active)


def render_response_details(ctx: AppContext) -> Panel:
    nav = ctx.nav
    trace = ctx.selected_trace
    active = nav.active_block is ActiveBlock.RESPONSE_DETAILS
    pairs = trace.response_headers.items() if trace else []
    return _render_pairs("Response Headers", pairs, nav.response_details, nav.response_details_usable_height, active)


def _render_body(
    title: str,
    text: str | None,
    viewport: Viewport,
    usable_height: int,
    usable_width: int,
    active: bool,
) -> Panel:
    if not text:
        return _panel(Text("No body", style="dim"), title, active)
    if is_binary_text(text):
        return _panel(Text("Binary content", style="dim"), title, active)

    lines = text.splitlines()
    start = viewport.horizontal_offset
    end = start + usable_width if usable_width > 0 else None

    visible = [line[start:end] for _, line in _visible(lines, viewport, usable_height)]
    body = Text("\n".join(visible), no_wrap=True)
    return _panel(body, title, active)


def render_request_body(ctx: AppContext) -> Panel:
    nav = ctx.nav
    trace = ctx.selected_trace
    return _render_body(
        "Request Body",
        trace.request_body_text if trace else None,
        nav.request_body,
        nav.request_body_usable_height,
        nav.request_body_usable_width,
        nav.active_block is ActiveBlock.REQUEST_BODY,
    )


def render_response_body(ctx: AppContext) -> Panel:
    nav = ctx.nav
    trace = ctx.selected_trace
    return _render_body(
        "Response Body",
        trace.response_body_text if trace else None,
        nav.response_body,
        nav.response_body_usable_height,
        nav.response_body_usable_width,
        nav.active_block is ActiveBlock.RESPONSE_BODY,
    )


def render_status_bar(ctx: AppContext) -> Text:
    bar = Text(no_wrap=True, overflow="ellipsis")

    if ctx.server_running:
        bar.append(" ● ", style="green")
        bar.append(f"ws://{ctx.server_address}  ")
    else:
        bar.append(" ○ stopped  ", style="red")

    bar.append(f"clients: {ctx.clients}  ")

    sort = ctx.trace_sort
    arrow = "↑" if sort.order is SortOrder.ASCENDING else "↓"
    bar.append(f"sort: {sort.source.value} {arrow}  ", style="dim")

    if not ctx.trace_filter.is_empty:
        bar.append("filtered  ", style="yellow")

    if ctx.status_message:
        bar.append(ctx.status_message, style="bold")
    else:
        bar.append("? help", style="dim")

    return bar


# ============== 覆盖层 ==============

def _render_help() -> Panel:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for key, description in HELP_ROWS:
        table.add_row(key, description)
    return _panel(table, "Help", True)


def _render_debug(ctx: AppContext) -> Panel:
    rows: list[RenderableType] = []

    trace = ctx.selected_trace
    if trace is not None:
        rows.append(Text(json.dumps(trace.to_summary(), ensure_ascii=False, indent=2)))

    rows.append(Text(f"Diagnostics ({len(ctx.diagnostics)})", style="bold"))
    for message in list(ctx.diagnostics)[-20:]:
        rows.append(Text(message, style="red", no_wrap=True, overflow="ellipsis"))

    return _panel(Group(*rows), "Debug", True)


def _checkbox(checked: bool) -> str:
    return "[x] " if checked else "[ ] "


def _render_filter(ctx: AppContext) -> Panel:
    nav = ctx.nav
    trace_filter = ctx.trace_filter
    rows: list[RenderableType] = []

    if nav.active_block is ActiveBlock.FILTER_MAIN:
        for index, category in enumerate(FILTER_CATEGORIES):
            row = Text(category.capitalize())
            if index == nav.filter_main_index:
                row.stylize(SELECTED_ROW)
            rows.append(row)
        return _panel(Group(*rows), "Filter", True)

    options = ctx.filter_options()
    for index, option in enumerate(options):
        if nav.active_block is ActiveBlock.FILTER_METHOD:
            checked = option in trace_filter.methods
        elif nav.active_block is ActiveBlock.FILTER_STATUS:
            checked = option in trace_filter.status_classes
        elif option == ALL_SOURCES:
            checked = trace_filter.sources is None
        else:
            checked = trace_filter.sources is not None and option in trace_filter.sources

        row = Text(_checkbox(checked) + option)
        if index == nav.filter_value_index:
            row.stylize(SELECTED_ROW)
        rows.append(row)

    title = f"Filter / {nav.active_block.value.removeprefix('filter_').capitalize()}"
    return _panel(Group(*rows), title, True)


def _render_sort(ctx: AppContext) -> Panel:
    nav = ctx.nav
    sort = ctx.trace_sort
    rows: list[RenderableType] = []

    for index, source in enumerate(engine.SORT_OPTIONS):
        marker = ""
        if source is sort.source:
            marker = " ↑" if sort.order is SortOrder.ASCENDING else " ↓"
        row = Text(source.value.capitalize() + marker)
        if index == nav.sort_index:
            row.stylize(SELECTED_ROW)
        rows.append(row)

    return _panel(Group(*rows), "Sort", True)


def render_overlay(ctx: AppContext) -> RenderableType | None:
    """当前覆盖层；没有覆盖层时返回 None"""
    block = ctx.nav.active_block

    if block is ActiveBlock.HELP:
        return _render_help()
    if block is ActiveBlock.DEBUG:
        return _render_debug(ctx)
    if block is ActiveBlock.FILTER_MAIN or block in FILTER_VALUE_SCREENS:
        return _render_filter(ctx)
    if block is ActiveBlock.SORT:
        return _render_sort(ctx)
    return None
