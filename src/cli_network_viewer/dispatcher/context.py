"""
应用上下文

调度器唯一操作的状态对象：Trace 存储、导航状态、筛选排序、状态栏以及对外的服务句柄。
只在调度器所在的协程中被修改。
"""

from collections import deque
from typing import Callable

from loguru import logger

from .. import config
from ..config import Settings
from ..core.filters import (
    ALL_SOURCES,
    METHODS,
    STATUS_CLASSES,
    TraceFilter,
    TraceSort,
    rendered_items,
    services_from_traces,
)
from ..core.models import Trace
from ..core.trace_store import TraceStore
from ..navigation import engine
from ..navigation.blocks import ActiveBlock
from ..navigation.state import ContentLengths, NavigationState
from ..navigation.viewport import clamp_cursor
from .actions import Action, ClearStatusMessage
from .timers import TimerGroup

Clipboard = Callable[[str], None]


class AppContext:
    """
    调度器上下文

    Args:
        submit: 向调度队列提交 Action（定时器到期时使用）
        settings: 运行时配置
        clipboard: 写入系统剪贴板的函数，失败时抛出异常
    """

    def __init__(
        self,
        submit: Callable[[Action], None],
        settings: Settings | None = None,
        clipboard: Clipboard | None = None,
    ):
        self.settings = settings or Settings()
        self.submit = submit
        self.clipboard = clipboard

        self.store = TraceStore()
        self.nav = NavigationState()
        self.trace_filter = TraceFilter()
        self.trace_sort = TraceSort()
        self.search_query = ""

        # 当前展示的 Trace 列表（筛选、搜索、排序之后）
        self.rendered: list[Trace] = []
        self.selected_trace_id: str | None = None

        self.status_message: str | None = None
        self.server_running = False
        self.server_address: str | None = None
        self.clients = 0
        self.diagnostics: deque[str] = deque(maxlen=config.MAX_DIAGNOSTICS)

        self.should_quit = False

        self.timeout_timers = TimerGroup("timeout", submit)
        self.status_timers = TimerGroup("status", submit)

    # ============== 选中项 ==============

    @property
    def selected_trace(self) -> Trace | None:
        if self.selected_trace_id is None:
            return None
        return self.store.get(self.selected_trace_id)

    def trace_at_cursor(self) -> Trace | None:
        index = self.nav.main.selected_index
        if 0 <= index < len(self.rendered):
            return self.rendered[index]
        return None

    def sync_selection(self) -> bool:
        """
        让选中 Trace 与列表光标一致

        选中项变化时重置详情视口，并按新 Trace 重新计算内容长度。

        Returns:
            选中项是否变化
        """
        trace = self.trace_at_cursor()
        new_id = trace.id if trace is not None else None

        if new_id == self.selected_trace_id:
            return False

        self.selected_trace_id = new_id
        engine.reset_detail_viewports(self.nav, ContentLengths.from_trace(trace))
        return True

    def refresh_traces(self, keep_selection: bool = True) -> bool:
        """
        重新计算展示列表

        Args:
            keep_selection: 为 True 时光标跟随之前选中的 Trace（按 id 定位）；
                否则光标回到列表开头

        Returns:
            选中项是否变化
        """
        self.rendered = rendered_items(
            self.store.iterate_newest_first(),
            self.trace_filter,
            self.search_query,
            self.trace_sort,
        )

        main = self.nav.main
        if not keep_selection:
            main.selected_index = 0
            main.offset = 0

        engine.set_trace_count(self.nav, len(self.rendered))

        if keep_selection and self.selected_trace_id is not None:
            for index, trace in enumerate(self.rendered):
                if trace.id == self.selected_trace_id:
                    main.selected_index = index
                    clamp_cursor(main, self.nav.main_usable_height)
                    return False

        return self.sync_selection()

    def refresh_selected_lengths(self) -> None:
        """选中 Trace 的内容被更新（如收到响应）后，重新计算详情面板长度"""
        engine.apply_content_lengths(self.nav, ContentLengths.from_trace(self.selected_trace))

    # ============== 覆盖层选项 ==============

    def known_sources(self) -> list[str]:
        return services_from_traces(self.store.iterate_newest_first())

    def filter_options(self, block: ActiveBlock | None = None) -> list[str]:
        """筛选取值页面的选项列表"""
        block = block or self.nav.active_block

        if block is ActiveBlock.FILTER_METHOD:
            return list(METHODS)
        if block is ActiveBlock.FILTER_STATUS:
            return list(STATUS_CLASSES)
        if block is ActiveBlock.FILTER_SOURCE:
            return [ALL_SOURCES, *self.known_sources()]
        return []

    # ============== 状态栏与诊断 ==============

    def set_status_message(self, message: str) -> None:
        """设置状态栏提示，之前的清除定时器全部取消，只保留最新一条的到期时间"""
        self.status_message = message
        self.status_timers.cancel_all()

        try:
            self.status_timers.schedule(self.settings.status_ttl, ClearStatusMessage())
        except RuntimeError:
            # 没有运行中的事件循环（同步测试），提示不会自动清除
            logger.debug("无事件循环，状态栏提示不会自动清除")

    def record_diagnostic(self, message: str) -> None:
        self.diagnostics.append(message)

    def shutdown(self) -> None:
        """取消所有定时器"""
        self.timeout_timers.cancel_all()
        self.status_timers.cancel_all()
