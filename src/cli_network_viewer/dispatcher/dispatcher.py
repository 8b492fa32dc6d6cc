"""
调度器

所有状态变更的唯一入口：从一个无界队列中逐个取出 Action 并执行，
处理函数返回的后续 Action 在下一个排队 Action 之前立即执行。
"""

import asyncio
from collections import deque
from typing import Callable

from loguru import logger

from ..config import Settings
from .actions import Action
from .context import AppContext, Clipboard
from .handlers import HANDLERS


class Dispatcher:
    """
    Action 调度器

    Args:
        settings: 运行时配置
        clipboard: 写入剪贴板的函数
        on_change: 每批 Action 处理完成后调用，通常用于触发重绘
    """

    def __init__(
        self,
        settings: Settings | None = None,
        clipboard: Clipboard | None = None,
        on_change: Callable[[AppContext], None] | None = None,
    ):
        self.queue: asyncio.Queue[Action] = asyncio.Queue()
        self.context = AppContext(self.submit, settings=settings, clipboard=clipboard)
        self.on_change = on_change

    def submit(self, action: Action) -> None:
        """提交 Action，不阻塞，可以在任意协程中调用"""
        self.queue.put_nowait(action)

    def dispatch(self, action: Action) -> None:
        """
        同步执行一个 Action 及其全部后续 Action

        后续 Action 按产生顺序执行，先于队列中尚未取出的 Action。
        """
        pending = deque([action])

        while pending:
            current = pending.popleft()
            handler = HANDLERS.get(type(current))

            if handler is None:
                logger.warning(f"没有处理函数: {type(current).__name__}")
                continue

            follow_ups = handler(self.context, current)
            # 后续 Action 插到待处理队列最前面，保持产生顺序
            pending.extendleft(reversed(follow_ups))

    async def run(self) -> None:
        """
        消费队列直到收到退出请求

        每次取出一个 Action 后，把队列中已积压的 Action 一并处理，再通知一次 on_change。
        """
        ctx = self.context

        try:
            while not ctx.should_quit:
                action = await self.queue.get()
                self.dispatch(action)

                while not ctx.should_quit and not self.queue.empty():
                    self.dispatch(self.queue.get_nowait())

                if self.on_change is not None:
                    self.on_change(ctx)
        finally:
            ctx.shutdown()
