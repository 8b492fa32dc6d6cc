"""
Action 处理函数

每种 Action 对应一个处理函数 handler(ctx, action) -> list[Action]，
原地修改上下文并返回需要紧接着执行的后续 Action。
处理函数对缺失数据（没有选中 Trace、未知 id、空列表）做检查，不做假设。
"""

from typing import Callable

from loguru import logger

from ..core.curl import generate_curl_command
from ..core.filters import SortOrder, SortSource
from ..core.models import TraceState
from ..navigation import engine
from ..navigation.blocks import DETAIL_BLOCKS, ActiveBlock
from .actions import (
    Action,
    AddTrace,
    ClearStatusMessage,
    CopyToClipboard,
    DeleteItem,
    DeleteSearchQuery,
    ExitSearch,
    FocusOnTraces,
    GoToEnd,
    GoToLeft,
    GoToRight,
    GoToStart,
    Help,
    MarkTraceAsTimedOut,
    NavigateDown,
    NavigateLeft,
    NavigateRight,
    NavigateUp,
    NewSearch,
    NextPane,
    NextSection,
    PreviousPane,
    PreviousSection,
    Quit,
    QuitApplication,
    RecordDiagnostic,
    SelectTrace,
    SetConnectionStatus,
    SetServerState,
    SetStatusMessage,
    ShowFilter,
    ShowSort,
    ShowTraceDetails,
    ToggleDebug,
    UpdateMeta,
    UpdateSearchQuery,
)
from .context import AppContext

Handler = Callable[[AppContext, Action], list[Action]]

HANDLERS: dict[type[Action], Handler] = {}

CURL_COPIED = "Request copied as cURL command!"
RESPONSE_BODY_COPIED = "Response body copied to clipboard."
REQUEST_BODY_COPIED = "Request body copied to clipboard."
CLIPBOARD_FAILED = "Something went wrong while copying to the clipboard!"


def handles(*action_types: type[Action]):
    """注册处理函数"""

    def decorator(func: Handler) -> Handler:
        for action_type in action_types:
            HANDLERS[action_type] = func
        return func

    return decorator


def _select_if(changed: bool) -> list[Action]:
    return [SelectTrace()] if changed else []


# ============== 导航 ==============

@handles(NavigateDown)
def handle_down(ctx: AppContext, action: NavigateDown) -> list[Action]:
    if action.ctrl:
        engine.jump_to_response_details(ctx.nav)
        return []
    return _select_if(engine.navigate_down(ctx.nav, len(ctx.filter_options())))


@handles(NavigateUp)
def handle_up(ctx: AppContext, action: NavigateUp) -> list[Action]:
    if action.ctrl:
        engine.jump_to_request_details(ctx.nav)
        return []
    return _select_if(engine.navigate_up(ctx.nav, len(ctx.filter_options())))


@handles(GoToStart)
def handle_go_to_start(ctx: AppContext, action: GoToStart) -> list[Action]:
    return _select_if(engine.go_to_start(ctx.nav))


@handles(GoToEnd)
def handle_go_to_end(ctx: AppContext, action: GoToEnd) -> list[Action]:
    return _select_if(engine.go_to_end(ctx.nav, len(ctx.filter_options())))


@handles(NavigateLeft)
def handle_left(ctx: AppContext, action: NavigateLeft) -> list[Action]:
    engine.navigate_left(ctx.nav)
    return []


@handles(NavigateRight)
def handle_right(ctx: AppContext, action: NavigateRight) -> list[Action]:
    engine.navigate_right(ctx.nav)
    return []


@handles(GoToLeft)
def handle_go_to_left(ctx: AppContext, action: GoToLeft) -> list[Action]:
    engine.go_to_left(ctx.nav)
    return []


@handles(GoToRight)
def handle_go_to_right(ctx: AppContext, action: GoToRight) -> list[Action]:
    engine.go_to_right(ctx.nav)
    return []


@handles(NextSection)
def handle_tab(ctx: AppContext, action: NextSection) -> list[Action]:
    engine.next_section(ctx.nav)
    return []


@handles(PreviousSection)
def handle_back_tab(ctx: AppContext, action: PreviousSection) -> list[Action]:
    engine.previous_section(ctx.nav)
    return []


@handles(NextPane, PreviousPane)
def handle_pane(ctx: AppContext, action: Action) -> list[Action]:
    # 只有两个子面板，前进与后退等价
    engine.toggle_request_details_pane(ctx.nav)
    return []


@handles(SelectTrace)
def handle_select_trace(ctx: AppContext, action: SelectTrace) -> list[Action]:
    ctx.sync_selection()
    return []


@handles(FocusOnTraces)
def handle_esc(ctx: AppContext, action: FocusOnTraces) -> list[Action]:
    engine.focus_on_traces(ctx.nav)
    return []


# ============== Enter ==============

def _toggle_filter_value(ctx: AppContext) -> list[Action]:
    block = ctx.nav.active_block
    options = ctx.filter_options(block)
    index = ctx.nav.filter_value_index

    if not 0 <= index < len(options):
        return []

    value = options[index]
    if block is ActiveBlock.FILTER_METHOD:
        ctx.trace_filter.toggle_method(value)
    elif block is ActiveBlock.FILTER_STATUS:
        ctx.trace_filter.toggle_status(value)
    else:
        ctx.trace_filter.toggle_source(value, options[1:])

    logger.debug(f"筛选条件: {ctx.trace_filter}")

    # 筛选条件变化后光标回到列表开头
    ctx.refresh_traces(keep_selection=False)
    return []


def _select_sort(ctx: AppContext) -> list[Action]:
    options = engine.SORT_OPTIONS
    index = ctx.nav.sort_index
    if not 0 <= index < len(options):
        return []

    source: SortSource = options[index]
    sort = ctx.trace_sort

    # 再次选择同一字段时翻转顺序，选择新字段时从降序开始
    if sort.source is source:
        sort.order = sort.order.flipped()
    else:
        sort.source = source
        sort.order = SortOrder.DESCENDING

    ctx.refresh_traces(keep_selection=False)
    return []


@handles(ShowTraceDetails)
def handle_enter(ctx: AppContext, action: ShowTraceDetails) -> list[Action]:
    block = ctx.nav.active_block

    if block is ActiveBlock.TRACES_LIST:
        if ctx.selected_trace is not None:
            engine.show_trace_details(ctx.nav)
        return []

    if block is ActiveBlock.SEARCH_QUERY:
        return [ExitSearch()]

    if block is ActiveBlock.FILTER_MAIN:
        engine.open_filter_values(ctx.nav)
        return []

    if block in (ActiveBlock.FILTER_METHOD, ActiveBlock.FILTER_STATUS, ActiveBlock.FILTER_SOURCE):
        return _toggle_filter_value(ctx)

    if block is ActiveBlock.SORT:
        return _select_sort(ctx)

    return []


# ============== 覆盖层与退出 ==============

@handles(Quit)
def handle_quit(ctx: AppContext, action: Quit) -> list[Action]:
    """在覆盖层中关闭覆盖层，否则退出程序"""
    if engine.close_overlay(ctx.nav):
        return []
    if ctx.nav.active_block is ActiveBlock.SEARCH_QUERY:
        return [ExitSearch()]
    return [QuitApplication()]


@handles(QuitApplication)
def handle_quit_application(ctx: AppContext, action: QuitApplication) -> list[Action]:
    logger.info("退出")
    ctx.should_quit = True
    ctx.shutdown()
    return []


@handles(Help)
def handle_help(ctx: AppContext, action: Help) -> list[Action]:
    engine.open_overlay(ctx.nav, ActiveBlock.HELP)
    return []


@handles(ToggleDebug)
def handle_debug(ctx: AppContext, action: ToggleDebug) -> list[Action]:
    if ctx.nav.active_block is ActiveBlock.DEBUG:
        engine.close_overlay(ctx.nav)
    else:
        engine.open_overlay(ctx.nav, ActiveBlock.DEBUG)
    return []


@handles(ShowFilter)
def handle_filter(ctx: AppContext, action: ShowFilter) -> list[Action]:
    engine.open_overlay(ctx.nav, ActiveBlock.FILTER_MAIN)
    return []


@handles(ShowSort)
def handle_sort(ctx: AppContext, action: ShowSort) -> list[Action]:
    engine.open_overlay(ctx.nav, ActiveBlock.SORT)
    return []


# ============== 搜索 ==============

@handles(NewSearch)
def handle_new_search(ctx: AppContext, action: NewSearch) -> list[Action]:
    if not engine.enter_search(ctx.nav):
        return []
    ctx.search_query = ""
    return _select_if(ctx.refresh_traces())


@handles(UpdateSearchQuery)
def handle_search_push(ctx: AppContext, action: UpdateSearchQuery) -> list[Action]:
    if ctx.nav.active_block is not ActiveBlock.SEARCH_QUERY:
        return []
    ctx.search_query += action.char
    ctx.refresh_traces()
    return []


@handles(DeleteSearchQuery)
def handle_search_pop(ctx: AppContext, action: DeleteSearchQuery) -> list[Action]:
    if ctx.nav.active_block is not ActiveBlock.SEARCH_QUERY:
        return []
    ctx.search_query = ctx.search_query[:-1]
    ctx.refresh_traces()
    if not ctx.search_query:
        return [ExitSearch()]
    return []


@handles(ExitSearch)
def handle_search_exit(ctx: AppContext, action: ExitSearch) -> list[Action]:
    if ctx.nav.active_block is ActiveBlock.SEARCH_QUERY:
        ctx.nav.active_block = ActiveBlock.TRACES_LIST
    return []


# ============== Trace ==============

def _schedule_timeout(ctx: AppContext, trace_id: str) -> None:
    try:
        ctx.timeout_timers.schedule(ctx.settings.trace_timeout, MarkTraceAsTimedOut(trace_id))
    except RuntimeError:
        logger.debug(f"无事件循环，跳过超时定时器: {trace_id}")


@handles(AddTrace)
def handle_add_trace(ctx: AppContext, action: AddTrace) -> list[Action]:
    trace = action.trace
    ctx.store.upsert(trace)

    if trace.state is TraceState.SENT:
        _schedule_timeout(ctx, trace.id)

    changed = ctx.refresh_traces()
    if not changed and trace.id == ctx.selected_trace_id:
        ctx.refresh_selected_lengths()
    return []


@handles(MarkTraceAsTimedOut)
def handle_timeout(ctx: AppContext, action: MarkTraceAsTimedOut) -> list[Action]:
    if not ctx.store.mark_timed_out(action.id):
        return []

    ctx.refresh_traces()
    if action.id == ctx.selected_trace_id:
        ctx.refresh_selected_lengths()
    return []


@handles(DeleteItem)
def handle_delete_item(ctx: AppContext, action: DeleteItem) -> list[Action]:
    if ctx.nav.active_block not in (ActiveBlock.TRACES_LIST, *DETAIL_BLOCKS):
        return []

    trace = ctx.selected_trace
    if trace is None:
        return []

    ctx.store.remove(trace.id)
    logger.info(f"删除 Trace: {trace.id}")

    # 被删除的 Trace 已不在列表中，光标停在原位置，选中其上的下一项
    ctx.refresh_traces()
    return []


@handles(CopyToClipboard)
def handle_yank(ctx: AppContext, action: CopyToClipboard) -> list[Action]:
    trace = ctx.selected_trace
    if trace is None:
        return []

    block = ctx.nav.active_block
    if block is ActiveBlock.TRACES_LIST:
        text, success = generate_curl_command(trace), CURL_COPIED
    elif block is ActiveBlock.RESPONSE_BODY:
        text, success = trace.response_body_text, RESPONSE_BODY_COPIED
    elif block is ActiveBlock.REQUEST_BODY:
        text, success = trace.request_body_text, REQUEST_BODY_COPIED
    else:
        return []

    if text is None:
        return []

    if ctx.clipboard is None:
        return [SetStatusMessage(CLIPBOARD_FAILED)]

    try:
        ctx.clipboard(text)
    except Exception as e:
        logger.warning(f"写入剪贴板失败: {e}")
        return [SetStatusMessage(CLIPBOARD_FAILED)]

    return [SetStatusMessage(success)]


# ============== 状态 ==============

@handles(SetConnectionStatus)
def handle_connection_status(ctx: AppContext, action: SetConnectionStatus) -> list[Action]:
    ctx.clients = max(0, action.clients)
    return []


@handles(SetServerState)
def handle_server_state(ctx: AppContext, action: SetServerState) -> list[Action]:
    ctx.server_running = action.running
    ctx.server_address = action.address
    if not action.running:
        ctx.clients = 0
    return []


@handles(RecordDiagnostic)
def handle_diagnostic(ctx: AppContext, action: RecordDiagnostic) -> list[Action]:
    ctx.record_diagnostic(action.message)
    return []


@handles(SetStatusMessage)
def handle_status_message(ctx: AppContext, action: SetStatusMessage) -> list[Action]:
    ctx.set_status_message(action.message)
    return []


@handles(ClearStatusMessage)
def handle_clear_status(ctx: AppContext, action: ClearStatusMessage) -> list[Action]:
    ctx.status_message = None
    return []


@handles(UpdateMeta)
def handle_update_meta(ctx: AppContext, action: UpdateMeta) -> list[Action]:
    if action.metadata == ctx.nav.metadata:
        return []
    ctx.nav.metadata = action.metadata
    engine.clamp_all(ctx.nav)
    return []
