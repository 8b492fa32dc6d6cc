"""
导航引擎

对 NavigationState 的确定性变换：焦点切换、覆盖层栈、光标与滚动。
移动类函数返回 Trace 列表的选中项是否发生变化，调用方据此刷新详情面板。
"""

from ..core.filters import SortSource
from .blocks import (
    DETAIL_BLOCKS,
    FILTER_CATEGORIES,
    FILTER_SCREENS,
    FILTER_VALUE_SCREENS,
    OVERLAYS,
    SECTION_RING,
    ActiveBlock,
    RequestDetailsPane,
)
from .state import ContentLengths, NavigationState
from .viewport import (
    Viewport,
    clamp_cursor,
    clamp_scroll,
    cursor_to_end,
    cursor_to_start,
    move_cursor_down,
    move_cursor_up,
    scroll_down,
    scroll_left,
    scroll_right,
    scroll_to_end,
    scroll_to_left,
    scroll_to_right,
    scroll_to_start,
    scroll_up,
)

SORT_OPTIONS = tuple(SortSource)


def is_overlay(block: ActiveBlock) -> bool:
    return block in OVERLAYS


# ============== 焦点切换 ==============

def _step_ring(state: NavigationState, step: int) -> bool:
    if state.active_block not in SECTION_RING:
        return False
    index = SECTION_RING.index(state.active_block)
    state.active_block = SECTION_RING[(index + step) % len(SECTION_RING)]
    return True


def next_section(state: NavigationState) -> bool:
    """Tab：沿固定环前进一格，不在环上时不做任何事"""
    return _step_ring(state, 1)


def previous_section(state: NavigationState) -> bool:
    """Shift+Tab：沿固定环后退一格"""
    return _step_ring(state, -1)


def show_trace_details(state: NavigationState) -> bool:
    """Enter：从 Trace 列表进入请求详情"""
    if state.active_block is not ActiveBlock.TRACES_LIST:
        return False
    state.active_block = ActiveBlock.REQUEST_DETAILS
    return True


def focus_on_traces(state: NavigationState) -> bool:
    """
    Esc

    - 详情区域、搜索框 -> Trace 列表
    - 筛选值页面 -> 筛选主页面
    - 其他覆盖层 -> 关闭并恢复之前的焦点
    """
    block = state.active_block

    if block in DETAIL_BLOCKS or block is ActiveBlock.SEARCH_QUERY:
        state.active_block = ActiveBlock.TRACES_LIST
        return True

    if is_overlay(block):
        return close_overlay(state)

    return False


def jump_to_request_details(state: NavigationState) -> bool:
    """Ctrl+Up：响应详情直接跳到请求详情"""
    if state.active_block is not ActiveBlock.RESPONSE_DETAILS:
        return False
    state.active_block = ActiveBlock.REQUEST_DETAILS
    return True


def jump_to_response_details(state: NavigationState) -> bool:
    """Ctrl+Down：请求详情直接跳到响应详情"""
    if state.active_block is not ActiveBlock.REQUEST_DETAILS:
        return False
    state.active_block = ActiveBlock.RESPONSE_DETAILS
    return True


def toggle_request_details_pane(state: NavigationState) -> bool:
    """在 REQUEST_DETAILS 内切换查询参数 / Header 子面板"""
    if state.active_block is not ActiveBlock.REQUEST_DETAILS:
        return False
    state.request_details_pane = state.request_details_pane.toggled()
    return True


def enter_search(state: NavigationState) -> bool:
    if state.active_block is not ActiveBlock.TRACES_LIST:
        return False
    state.active_block = ActiveBlock.SEARCH_QUERY
    return True


# ============== 覆盖层栈 ==============

def open_overlay(state: NavigationState, block: ActiveBlock) -> bool:
    """
    打开覆盖层：当前焦点压栈后激活覆盖层

    重复打开同一个覆盖层不做任何事；筛选的任意页面都视为同一个覆盖层。

    Returns:
        是否打开
    """
    current = state.active_block

    if current is block:
        return False
    if block is ActiveBlock.FILTER_MAIN and current in FILTER_SCREENS:
        return False

    state.previous_blocks.append(current)
    state.active_block = block

    if block is ActiveBlock.FILTER_MAIN:
        state.filter_main_index = 0
    elif block is ActiveBlock.SORT:
        state.sort_index = 0
    return True


def close_overlay(state: NavigationState) -> bool:
    """
    关闭当前覆盖层，恢复栈顶焦点

    Returns:
        是否关闭了覆盖层；返回 False 表示当前不在覆盖层中
    """
    if not is_overlay(state.active_block):
        return False

    if state.previous_blocks:
        state.active_block = state.previous_blocks.pop()
    else:
        state.active_block = ActiveBlock.TRACES_LIST
    return True


def open_filter_values(state: NavigationState) -> ActiveBlock | None:
    """在筛选主页面按 Enter，进入光标所在类别的取值页面"""
    if state.active_block is not ActiveBlock.FILTER_MAIN:
        return None

    target = FILTER_VALUE_SCREENS[state.filter_main_index]
    state.previous_blocks.append(ActiveBlock.FILTER_MAIN)
    state.active_block = target
    state.filter_value_index = 0
    return target


# ============== 光标与滚动 ==============

def _list_target(state: NavigationState) -> tuple[Viewport, int] | None:
    """当前焦点对应的列表类视口及其可用高度"""
    block = state.active_block

    if block is ActiveBlock.TRACES_LIST:
        return state.main, state.main_usable_height
    if block is ActiveBlock.REQUEST_DETAILS:
        if state.request_details_pane is RequestDetailsPane.QUERY:
            return state.query_params, state.query_params_usable_height
        return state.request_details, state.request_details_usable_height
    if block is ActiveBlock.RESPONSE_DETAILS:
        return state.response_details, state.response_details_usable_height
    return None


def _body_target(state: NavigationState) -> tuple[Viewport, int, int] | None:
    """当前焦点对应的 Body 视口及其可用高度、宽度"""
    block = state.active_block

    if block is ActiveBlock.REQUEST_BODY:
        return state.request_body, state.request_body_usable_height, state.request_body_usable_width
    if block is ActiveBlock.RESPONSE_BODY:
        return state.response_body, state.response_body_usable_height, state.response_body_usable_width
    return None


def _move_option(index: int, step: int, option_count: int) -> int:
    if option_count <= 0:
        return 0
    return min(max(0, index + step), option_count - 1)


def _move_overlay_cursor(state: NavigationState, step: int, option_count: int) -> None:
    block = state.active_block

    if block is ActiveBlock.FILTER_MAIN:
        state.filter_main_index = _move_option(state.filter_main_index, step, len(FILTER_CATEGORIES))
    elif block in FILTER_VALUE_SCREENS:
        state.filter_value_index = _move_option(state.filter_value_index, step, option_count)
    elif block is ActiveBlock.SORT:
        state.sort_index = _move_option(state.sort_index, step, len(SORT_OPTIONS))


def navigate_down(state: NavigationState, option_count: int = 0) -> bool:
    """
    光标下移

    Args:
        state: 导航状态
        option_count: 筛选取值页面当前的选项数

    Returns:
        Trace 列表的选中项是否变化
    """
    target = _list_target(state)
    if target is not None:
        moved = move_cursor_down(*target)
        return moved and state.active_block is ActiveBlock.TRACES_LIST

    body = _body_target(state)
    if body is not None:
        scroll_down(body[0], body[1])
        return False

    _move_overlay_cursor(state, 1, option_count)
    return False


def navigate_up(state: NavigationState, option_count: int = 0) -> bool:
    target = _list_target(state)
    if target is not None:
        moved = move_cursor_up(target[0], target[1])
        return moved and state.active_block is ActiveBlock.TRACES_LIST

    body = _body_target(state)
    if body is not None:
        scroll_up(body[0], body[1])
        return False

    _move_overlay_cursor(state, -1, option_count)
    return False


def go_to_start(state: NavigationState) -> bool:
    target = _list_target(state)
    if target is not None:
        moved = cursor_to_start(target[0])
        return moved and state.active_block is ActiveBlock.TRACES_LIST

    body = _body_target(state)
    if body is not None:
        scroll_to_start(body[0])
        return False

    block = state.active_block
    if block is ActiveBlock.FILTER_MAIN:
        state.filter_main_index = 0
    elif block in FILTER_VALUE_SCREENS:
        state.filter_value_index = 0
    elif block is ActiveBlock.SORT:
        state.sort_index = 0
    return False


def go_to_end(state: NavigationState, option_count: int = 0) -> bool:
    target = _list_target(state)
    if target is not None:
        moved = cursor_to_end(*target)
        return moved and state.active_block is ActiveBlock.TRACES_LIST

    body = _body_target(state)
    if body is not None:
        scroll_to_end(body[0], body[1])
        return False

    block = state.active_block
    if block is ActiveBlock.FILTER_MAIN:
        state.filter_main_index = len(FILTER_CATEGORIES) - 1
    elif block in FILTER_VALUE_SCREENS:
        state.filter_value_index = max(0, option_count - 1)
    elif block is ActiveBlock.SORT:
        state.sort_index = len(SORT_OPTIONS) - 1
    return False


def navigate_right(state: NavigationState) -> None:
    body = _body_target(state)
    if body is not None:
        scroll_right(body[0], body[2])


def navigate_left(state: NavigationState) -> None:
    body = _body_target(state)
    if body is not None:
        scroll_left(body[0], body[2])


def go_to_right(state: NavigationState) -> None:
    body = _body_target(state)
    if body is not None:
        scroll_to_right(body[0], body[2])


def go_to_left(state: NavigationState) -> None:
    body = _body_target(state)
    if body is not None:
        scroll_to_left(body[0])


# ============== 内容长度 ==============

def set_trace_count(state: NavigationState, count: int) -> None:
    """Trace 列表条目数变化后更新主视口"""
    state.main.content_length = count
    clamp_cursor(state.main, state.main_usable_height)


def apply_content_lengths(state: NavigationState, lengths: ContentLengths) -> None:
    """写入详情面板的内容长度，并把各视口限制在合法范围内"""
    state.request_details.content_length = lengths.request_headers
    state.query_params.content_length = lengths.query_params
    state.response_details.content_length = lengths.response_headers
    state.request_body.content_length = lengths.request_body
    state.request_body.horizontal_content_length = lengths.request_body_width
    state.response_body.content_length = lengths.response_body
    state.response_body.horizontal_content_length = lengths.response_body_width
    clamp_all(state)


def reset_detail_viewports(state: NavigationState, lengths: ContentLengths) -> None:
    """选中了另一个 Trace：详情视口全部归零，内容长度按新 Trace 重新计算"""
    for viewport in state.detail_viewports():
        viewport.reset()
    apply_content_lengths(state, lengths)


def clamp_all(state: NavigationState) -> None:
    """尺寸或内容变化后恢复所有视口的约束"""
    clamp_cursor(state.main, state.main_usable_height)
    clamp_cursor(state.request_details, state.request_details_usable_height)
    clamp_cursor(state.query_params, state.query_params_usable_height)
    clamp_cursor(state.response_details, state.response_details_usable_height)
    clamp_scroll(state.request_body, state.request_body_usable_height, state.request_body_usable_width)
    clamp_scroll(state.response_body, state.response_body_usable_height, state.response_body_usable_width)
